# ABOUTME: Converts a Document into the ordered list of files that make up an EPUB.
# ABOUTME: Renders and substitutes text artifacts, then loads images concurrently.

from __future__ import annotations

import asyncio
import datetime
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from quire.core.tags import apply_tags, tag_values
from quire.formats.templates import (
    CONTENTS_PAGE,
    COVER_IMAGE,
    COVER_PAGE,
    NAVIGATION_FILE,
    PACKAGE_FILE,
    PACKAGE_FOLDER,
    STYLESHEET,
    section_filename,
)

if TYPE_CHECKING:
    from quire.core.document import Document

logger = logging.getLogger(__name__)

MIMETYPE = "application/epub+zip"


class GenerationError(Exception):
    """Raised when the package files cannot be produced or written."""


class ImageReadError(GenerationError):
    """Raised when an image referenced by the document cannot be read."""


class ContentsGenerationError(GenerationError):
    """Raised when the caller-supplied contents generator fails."""


class RenderError(GenerationError):
    """Raised when the template renderer cannot produce a package file."""


@dataclass
class FileDescriptor:
    """One output file: a directory entry or an archive member.

    An empty folder means the package root. compress=False must be honored
    by archive writers; the mimetype entry depends on it.
    """

    name: str
    folder: str
    compress: bool
    content: str | bytes

    @property
    def path(self) -> str:
        """Slash-separated path of the file inside the package."""
        return f"{self.folder}/{self.name}" if self.folder else self.name

    @property
    def data(self) -> bytes:
        """Content as bytes, encoding text as UTF-8."""
        if isinstance(self.content, bytes):
            return self.content
        return self.content.encode("utf-8")


@dataclass
class TocEntry:
    """A navigable entry for the contents page and navigation map."""

    title: str
    link: str
    item_type: str


def contents_entries(document: Document) -> list[TocEntry]:
    """List contents entries in reading order.

    Front matter sections come first, then the contents page itself, then the
    remaining sections. Sections excluded from contents are skipped. Links
    are relative to the folder holding the section pages.
    """
    front: list[TocEntry] = []
    main: list[TocEntry] = []
    for number, section in enumerate(document.sections, start=1):
        if section.exclude_from_contents:
            continue
        if section.is_front_matter:
            front.append(TocEntry(section.title, section_filename(number), "front"))
        else:
            main.append(TocEntry(section.title, section_filename(number), "main"))

    heading = document.metadata.contents or "Contents"
    return [*front, TocEntry(heading, CONTENTS_PAGE, "contents"), *main]


async def _read_image(path: str | Path) -> bytes:
    try:
        return await asyncio.to_thread(Path(path).read_bytes)
    except OSError as exc:
        raise ImageReadError(f"Failed to read image: {path}: {exc}") from exc


async def load_images(sources: list[tuple[str, str | Path]]) -> list[FileDescriptor]:
    """Read (name, path) image sources concurrently.

    The returned descriptors follow the order of sources regardless of which
    read finishes first. If any read fails, the first failure in source order
    is raised once every read has settled.

    Raises:
        ImageReadError: If any image cannot be read.
    """
    images_folder = f"{PACKAGE_FOLDER}/images"
    results = await asyncio.gather(
        *(_read_image(path) for _, path in sources),
        return_exceptions=True,
    )

    files: list[FileDescriptor] = []
    for (name, _), result in zip(sources, results):
        if isinstance(result, BaseException):
            logger.warning("Could not load image %s: %s", name, result)
            raise result
        files.append(FileDescriptor(name, images_folder, True, result))
    return files


def _render_text_files(
    document: Document, values: dict[str, str], generated: str | None
) -> list[FileDescriptor]:
    renderer = document.renderer

    def render(text: str) -> str:
        return apply_tags(text, values)

    files = [
        FileDescriptor("mimetype", "", False, MIMETYPE),
        FileDescriptor("container.xml", "META-INF", True, render(renderer.container(document))),
        FileDescriptor(PACKAGE_FILE, PACKAGE_FOLDER, True, render(renderer.package(document))),
        FileDescriptor(
            NAVIGATION_FILE, PACKAGE_FOLDER, True, render(renderer.navigation(document))
        ),
        FileDescriptor(COVER_PAGE, PACKAGE_FOLDER, True, render(renderer.cover(document))),
        FileDescriptor(STYLESHEET, f"{PACKAGE_FOLDER}/css", True, render(document.css)),
    ]
    content_folder = f"{PACKAGE_FOLDER}/content"
    for number in range(1, document.section_count() + 1):
        files.append(FileDescriptor(
            section_filename(number),
            content_folder,
            True,
            render(renderer.section(document, number)),
        ))
    files.append(FileDescriptor(
        CONTENTS_PAGE, content_folder, True, render(renderer.contents(document, generated))
    ))
    return files


async def build_file_list(
    document: Document, *, modified: datetime.date | None = None
) -> list[FileDescriptor]:
    """Produce every file of the package for a Document.

    Text artifacts come first in their fixed order (mimetype, container,
    package manifest, navigation map, cover page, stylesheet, section pages,
    contents page), followed by the cover image and the metadata images in
    declared order.

    Args:
        document: The document to generate. It must not be mutated while the
            build is running.
        modified: Date substituted for [[MODIFIED]]. Defaults to today.

    Returns:
        The complete, ordered file list.

    Raises:
        ContentsGenerationError: If the document's toc_generator fails.
        RenderError: If the template renderer fails.
        ImageReadError: If the cover or any metadata image cannot be read.
    """
    values = tag_values(document.metadata, modified or datetime.date.today())

    document.toc_entries = contents_entries(document)
    generated = None
    if document.toc_generator is not None:
        try:
            generated = document.toc_generator(list(document.toc_entries))
        except Exception as exc:
            raise ContentsGenerationError(f"Contents generator failed: {exc}") from exc

    try:
        files = _render_text_files(document, values, generated)
    except Exception as exc:
        raise RenderError(f"Failed to render package files: {exc}") from exc
    logger.debug("Rendered %d text files for %s", len(files), document.metadata.id)

    sources: list[tuple[str, str | Path]] = [(COVER_IMAGE, document.cover_image)]
    sources.extend((Path(image).name, image) for image in document.metadata.images)
    files.extend(await load_images(sources))
    return files
