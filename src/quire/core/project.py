# ABOUTME: Loads a JSON project file describing a book into a Document.
# ABOUTME: Resolves cover, stylesheet, section and image paths relative to the project file.

import json
import logging
from pathlib import Path
from typing import Any

from quire.core.document import Document
from quire.metadata.types import Metadata

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = Path("dist")


class ProjectError(Exception):
    """Raised when a project file is missing, malformed, or references missing files."""


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ProjectError(f"Failed to read {path}: {exc}") from exc


def _section_content(entry: dict[str, Any], base_dir: Path, index: int) -> str:
    if "content" in entry:
        return str(entry["content"])
    if "file" in entry:
        return _read_text(base_dir / entry["file"])
    raise ProjectError(f"Section {index} needs either 'content' or 'file'")


def load_project(path: Path) -> Document:
    """Build a Document from a JSON project file.

    The file holds a "metadata" object, a "cover" image path, an optional
    "css" stylesheet path and a list of "sections". Each section has a
    "title" and either inline "content" or a "file" to read, plus optional
    "exclude_from_contents" and "front_matter" flags. Relative paths are
    resolved against the project file's directory.

    Raises:
        ProjectError: If the file cannot be read or is structurally invalid.
        ValidationError: If required metadata is missing.
    """
    try:
        data = json.loads(_read_text(path))
    except json.JSONDecodeError as exc:
        raise ProjectError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ProjectError(f"Project file must contain a JSON object: {path}")

    base_dir = path.parent
    raw_meta = data.get("metadata")
    if raw_meta is not None and not isinstance(raw_meta, dict):
        raise ProjectError(f"'metadata' must be an object: {path}")
    if raw_meta is not None:
        raw_meta = dict(raw_meta)
        raw_meta["images"] = [base_dir / image for image in raw_meta.get("images") or []]

    cover = data.get("cover")
    document = Document(
        Metadata.from_mapping(raw_meta),
        base_dir / cover if cover is not None else None,
    )

    if data.get("css"):
        document.add_css(_read_text(base_dir / data["css"]))

    sections = data.get("sections") or []
    if not isinstance(sections, list):
        raise ProjectError(f"'sections' must be a list: {path}")
    for index, entry in enumerate(sections, start=1):
        if not isinstance(entry, dict):
            raise ProjectError(f"Section {index} must be an object")
        document.add_section(
            str(entry.get("title", "")),
            _section_content(entry, base_dir, index),
            exclude_from_contents=bool(entry.get("exclude_from_contents", False)),
            is_front_matter=bool(entry.get("front_matter", False)),
        )

    logger.debug("Loaded project %s with %d sections", path, document.section_count())
    return document
