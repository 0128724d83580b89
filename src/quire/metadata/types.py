# ABOUTME: Book metadata record used to generate an EPUB package.
# ABOUTME: Validates the required Dublin Core fields before a Document is built.

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

REQUIRED_FIELDS: tuple[str, ...] = ("id", "title", "author", "genre")


class ValidationError(Exception):
    """Raised when metadata or a document argument is missing or blank."""


def _is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


@dataclass(frozen=True)
class Metadata:
    """Descriptive fields for one generated e-book.

    id, title, author and genre are required and must be non-blank. Every
    other field is optional and is written into the package manifest when set.
    The images list holds paths of extra image files to embed; each lands in
    the package under its basename.
    """

    id: str
    title: str
    author: str
    genre: str
    series: str | None = None
    sequence: int | str | None = None
    copyright: str | None = None
    language: str | None = None
    file_as: str | None = None
    publisher: str | None = None
    description: str | None = None
    published: str | None = None
    tags: str | None = None
    contents: str | None = None
    source: str | None = None
    images: list[str | Path] = field(default_factory=list)

    def validate(self) -> None:
        """Raise ValidationError naming the first blank required field."""
        for name in REQUIRED_FIELDS:
            if _is_blank(getattr(self, name)):
                raise ValidationError(f"Missing metadata: {name}")

    @property
    def tag_list(self) -> list[str]:
        """Comma-separated tags split into trimmed, non-empty subjects."""
        if not self.tags:
            return []
        return [tag.strip() for tag in str(self.tags).split(",") if tag.strip()]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "Metadata":
        """Build validated Metadata from a plain mapping.

        Unknown keys are ignored. Missing required keys are reported the same
        way as blank ones. ``fileAs`` is accepted as an alias for ``file_as``;
        when both are present, ``file_as`` wins.

        Raises:
            ValidationError: If data is None or a required field is missing.
        """
        if data is None:
            raise ValidationError("Missing metadata")

        for name in REQUIRED_FIELDS:
            if _is_blank(data.get(name)):
                raise ValidationError(f"Missing metadata: {name}")

        known = {f.name for f in fields(cls)}
        kwargs = {key: value for key, value in data.items() if key in known}
        if "fileAs" in data and "file_as" not in kwargs:
            kwargs["file_as"] = data["fileAs"]
        if kwargs.get("images") is None:
            kwargs["images"] = []
        else:
            kwargs["images"] = list(kwargs["images"])
        return cls(**kwargs)
