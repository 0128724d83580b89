# ABOUTME: Reads metadata back out of an EPUB file using ebooklib.
# ABOUTME: Used to verify generated packages and to inspect existing ones.

import logging
from dataclasses import dataclass, field
from pathlib import Path

import ebooklib
from ebooklib import epub

logger = logging.getLogger(__name__)


class EpubReadError(Exception):
    """Raised when an EPUB file cannot be read or parsed."""


@dataclass
class PackageInfo:
    """Metadata and structure read from an EPUB package."""

    title: str
    authors: list[str] = field(default_factory=list)
    identifier: str | None = None
    language: str | None = None
    publisher: str | None = None
    description: str | None = None
    subjects: list[str] = field(default_factory=list)
    document_count: int = 0
    has_cover: bool = False
    source_path: Path | None = None

    @property
    def author(self) -> str:
        """Convenience property: joined author string for display."""
        return ", ".join(self.authors) if self.authors else ""

    @property
    def genre(self) -> str | None:
        """The first subject, which generated packages use for the genre."""
        return self.subjects[0] if self.subjects else None


def _get_metadata_value(book: epub.EpubBook, namespace: str, name: str) -> str | None:
    """Extract a single metadata value from an EpubBook, or None if missing."""
    values = book.get_metadata(namespace, name)
    if not values:
        return None
    # Metadata entries are tuples of (value, attributes)
    value = values[0][0]
    return str(value).strip() if value else None


def _get_metadata_values(book: epub.EpubBook, namespace: str, name: str) -> list[str]:
    """Extract every non-empty value for a metadata field."""
    entries = book.get_metadata(namespace, name)
    return [str(entry[0]).strip() for entry in entries if entry[0]]


def _has_cover(book: epub.EpubBook) -> bool:
    meta_entries = book.get_metadata("OPF", "cover")
    if meta_entries:
        cover_id = meta_entries[0][1].get("content")
        if cover_id and book.get_item_with_id(cover_id) is not None:
            return True
    return any(
        item.get_type() == ebooklib.ITEM_IMAGE and "cover" in (item.get_name() or "").lower()
        for item in book.get_items()
    )


def read_epub_metadata(path: Path) -> PackageInfo:
    """Extract metadata from an EPUB file.

    Args:
        path: Path to the EPUB file.

    Returns:
        PackageInfo populated with extracted fields.

    Raises:
        EpubReadError: If the file cannot be read or parsed.
    """
    if not path.exists():
        raise EpubReadError(f"File not found: {path}")

    try:
        book = epub.read_epub(str(path), options={"ignore_ncx": True})
    except Exception as exc:
        raise EpubReadError(f"Failed to read EPUB: {path}: {exc}") from exc

    title = _get_metadata_value(book, "DC", "title") or path.stem
    documents = list(book.get_items_of_type(ebooklib.ITEM_DOCUMENT))
    logger.debug("Read %s: %d documents", path, len(documents))

    return PackageInfo(
        title=title,
        authors=_get_metadata_values(book, "DC", "creator"),
        identifier=_get_metadata_value(book, "DC", "identifier"),
        language=_get_metadata_value(book, "DC", "language"),
        publisher=_get_metadata_value(book, "DC", "publisher"),
        description=_get_metadata_value(book, "DC", "description"),
        subjects=_get_metadata_values(book, "DC", "subject"),
        document_count=len(documents),
        has_cover=_has_cover(book),
        source_path=path,
    )
