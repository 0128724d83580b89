# ABOUTME: Non-destructive EPUB publish pipeline.
# ABOUTME: Picks a non-colliding output name, writes the archive, then verifies it by reading it back.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from quire.formats.epub import EpubReadError, read_epub_metadata

if TYPE_CHECKING:
    import datetime

    from quire.core.document import Document
    from quire.metadata.types import Metadata

logger = logging.getLogger(__name__)


@dataclass
class FieldVerification:
    """Result of verifying a single metadata field after writing."""

    field: str
    expected: str | None
    actual: str | None
    passed: bool


@dataclass
class WriteResult:
    """Result of an EPUB write with optional verification status."""

    path: Path | None
    success: bool
    verified_fields: list[FieldVerification] = field(default_factory=list)
    error: str | None = None


_MAX_COLLISION_ATTEMPTS = 10_000


def _resolve_collision(output_path: Path) -> Path:
    """Find a non-colliding filename by appending _1, _2, etc."""
    stem = output_path.stem
    suffix = output_path.suffix
    parent = output_path.parent
    for counter in range(1, _MAX_COLLISION_ATTEMPTS + 1):
        candidate = parent / f"{stem}_{counter}{suffix}"
        if not candidate.exists():
            return candidate
    raise OSError(
        f"Could not find a non-colliding filename after "
        f"{_MAX_COLLISION_ATTEMPTS} attempts: {output_path}"
    )


def verify_package(dest: Path, metadata: Metadata) -> list[FieldVerification]:
    """Read back the EPUB at dest and compare its fields against metadata.

    Identifier, title, author and genre are always checked. Language,
    publisher and description are checked only when set in metadata;
    language comparison is case-insensitive.
    """
    read_back = read_epub_metadata(dest)
    checks: list[tuple[str, str | None, str | None]] = [
        ("id", metadata.id, read_back.identifier),
        ("title", metadata.title, read_back.title),
        ("author", metadata.author, read_back.author),
        ("genre", metadata.genre, read_back.genre),
    ]
    if metadata.publisher:
        checks.append(("publisher", metadata.publisher, read_back.publisher))
    if metadata.description:
        checks.append(("description", metadata.description, read_back.description))

    verifications = [
        FieldVerification(field=name, expected=expected, actual=actual, passed=expected == actual)
        for name, expected, actual in checks
    ]

    if metadata.language is not None:
        actual_lang = read_back.language
        verifications.append(FieldVerification(
            field="language",
            expected=metadata.language,
            actual=actual_lang,
            passed=actual_lang is not None and metadata.language.lower() == actual_lang.lower(),
        ))

    return verifications


async def publish_epub(
    document: Document,
    output_dir: Path,
    filename: str,
    *,
    verify: bool = True,
    modified: datetime.date | None = None,
) -> WriteResult:
    """Write document to output_dir without overwriting existing files.

    If output_dir/filename.epub already exists, a numeric suffix (_1, _2, ...)
    is appended. When verify is set, the written archive is read back and
    checked field-by-field; a failed check deletes the archive.

    Args:
        document: The document to publish.
        output_dir: Directory to place the archive in.
        filename: Archive name without extension.
        verify: Whether to read the archive back and compare metadata.
        modified: Date substituted for [[MODIFIED]]. Defaults to today.

    Returns:
        WriteResult with path, success flag, and verification details.
    """
    dest = output_dir / f"{filename}.epub"
    if dest.exists():
        dest = _resolve_collision(dest)

    result = await document.write_epub(dest.parent, dest.stem, modified=modified)
    if not result.success or not verify:
        return result

    try:
        verifications = verify_package(dest, document.metadata)
    except EpubReadError as exc:
        dest.unlink(missing_ok=True)
        return WriteResult(path=None, success=False, error=str(exc))

    if not all(v.passed for v in verifications):
        dest.unlink(missing_ok=True)
        failed = [v.field for v in verifications if not v.passed]
        logger.warning("Verification failed for %s: %s", dest, ", ".join(failed))
        return WriteResult(
            path=None,
            success=False,
            verified_fields=verifications,
            error=f"Verification failed for: {', '.join(failed)}",
        )

    return WriteResult(path=dest, success=True, verified_fields=verifications)
