# ABOUTME: In-memory model of one e-book and its generation entry points.
# ABOUTME: Collects metadata, sections and CSS, then builds or writes the EPUB package.

import datetime
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from quire.core.builder import FileDescriptor, GenerationError, TocEntry, build_file_list
from quire.core.pipeline import WriteResult
from quire.formats.archive import EPUB_EXTENSION, write_archive, write_directory
from quire.formats.templates import EpubTemplates, TemplateRenderer
from quire.metadata.types import Metadata, ValidationError

logger = logging.getLogger(__name__)

TocGenerator = Callable[[list[TocEntry]], str]

_MISSING: Any = object()


class CallbackContractError(Exception):
    """Raised when a completion hook passed to a generation call is not callable."""


@dataclass
class Section:
    """One content unit (usually a chapter) of a Document."""

    title: str
    content: str
    exclude_from_contents: bool = False
    is_front_matter: bool = False


class Document:
    """A single e-book, generated into exactly one EPUB package.

    The document is built up with add_section() and add_css(), then passed to
    one of the generation calls. Sections keep their insertion order, which
    also fixes their filenames (s1.xhtml, s2.xhtml, ...). Front matter is
    placed before the contents page in reading order, but the section list
    itself is never reordered.

    Generation reads the document from several concurrent tasks; do not add
    sections or CSS while a build is in flight.
    """

    def __init__(
        self,
        metadata: Metadata | Mapping[str, Any] | None,
        cover_image: str | Path = _MISSING,
        toc_generator: TocGenerator | None = None,
        *,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        if metadata is None:
            raise ValidationError("Missing metadata")
        if not isinstance(metadata, Metadata):
            metadata = Metadata.from_mapping(metadata)
        metadata.validate()
        if cover_image is _MISSING or cover_image is None:
            raise ValidationError("Missing cover image")

        self.metadata = metadata
        self.cover_image = cover_image
        self.toc_generator = toc_generator
        self.renderer: TemplateRenderer = renderer or EpubTemplates()
        self.css = ""
        self.sections: list[Section] = []
        self.toc_entries: list[TocEntry] = []

    def add_section(
        self,
        title: str,
        content: str,
        exclude_from_contents: bool = False,
        is_front_matter: bool = False,
    ) -> None:
        """Append a section with an HTML body."""
        self.sections.append(Section(
            title=title,
            content=content,
            exclude_from_contents=bool(exclude_from_contents),
            is_front_matter=bool(is_front_matter),
        ))

    def add_css(self, content: str) -> None:
        """Set the stylesheet shared by all pages, replacing any earlier one."""
        self.css = content

    def section_count(self) -> int:
        return len(self.sections)

    async def get_files(
        self, *, modified: datetime.date | None = None
    ) -> list[FileDescriptor]:
        """Build the full, ordered file list in memory.

        Raises:
            ImageReadError: If an image cannot be read.
        """
        return await build_file_list(self, modified=modified)

    async def write_files(
        self, folder: str | Path, *, modified: datetime.date | None = None
    ) -> Path:
        """Write the unpacked package tree under folder.

        Writing into an existing tree overwrites the files in place.

        Raises:
            GenerationError: If an image cannot be read or a file cannot be written.
        """
        root = Path(folder)
        files = await self.get_files(modified=modified)
        await write_directory(files, root)
        return root

    def write_epub(
        self,
        folder: str | Path,
        filename: str,
        *,
        on_success: Callable[[], Any] | None = None,
        on_error: Callable[[Exception], Any] | None = None,
        modified: datetime.date | None = None,
    ) -> Awaitable[WriteResult]:
        """Write folder/filename.epub.

        Hooks are checked immediately; the returned awaitable performs the
        write. On success on_success() is called with no arguments; on failure
        on_error(exc) is called and on_success is not. Either way the outcome
        is also reported in the returned WriteResult.

        Args:
            folder: Output directory, created if missing.
            filename: Archive name without extension.
            on_success: Optional hook called once the archive is complete.
            on_error: Optional hook called with the failure.
            modified: Date substituted for [[MODIFIED]]. Defaults to today.

        Raises:
            CallbackContractError: If a hook is given but is not callable.
        """
        for name, hook in (("on_success", on_success), ("on_error", on_error)):
            if hook is not None and not callable(hook):
                raise CallbackContractError(f"write_epub requires {name} to be callable")
        return self._write_epub(Path(folder), filename, on_success, on_error, modified)

    async def _write_epub(
        self,
        folder: Path,
        filename: str,
        on_success: Callable[[], Any] | None,
        on_error: Callable[[Exception], Any] | None,
        modified: datetime.date | None,
    ) -> WriteResult:
        dest = folder / f"{filename}{EPUB_EXTENSION}"
        try:
            files = await self.get_files(modified=modified)
            folder.mkdir(parents=True, exist_ok=True)
            await write_archive(files, dest)
        except (OSError, GenerationError) as exc:
            logger.warning("EPUB generation failed for %s: %s", dest, exc)
            if on_error is not None:
                on_error(exc)
            return WriteResult(path=None, success=False, error=str(exc))

        if on_success is not None:
            on_success()
        return WriteResult(path=dest, success=True)
