# ABOUTME: [[TAG]] placeholder substitution for rendered package files.
# ABOUTME: Replaces known tokens with metadata values in a fixed, non-recursive order.

from __future__ import annotations

import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from quire.metadata.types import Metadata

# Substitution order. EOL goes first so a metadata value containing [[EOL]]
# is only expanded on the second pass.
TAG_ORDER: tuple[str, ...] = (
    "EOL",
    "ID",
    "TITLE",
    "SERIES",
    "SEQUENCE",
    "COPYRIGHT",
    "LANGUAGE",
    "FILEAS",
    "AUTHOR",
    "PUBLISHER",
    "DESCRIPTION",
    "PUBLISHED",
    "GENRE",
    "TAGS",
    "CONTENTS",
    "SOURCE",
    "MODIFIED",
)

MAX_PASSES = 2

_FIELD_FOR_TAG = {
    "ID": "id",
    "TITLE": "title",
    "SERIES": "series",
    "SEQUENCE": "sequence",
    "COPYRIGHT": "copyright",
    "LANGUAGE": "language",
    "FILEAS": "file_as",
    "AUTHOR": "author",
    "PUBLISHER": "publisher",
    "DESCRIPTION": "description",
    "PUBLISHED": "published",
    "GENRE": "genre",
    "TAGS": "tags",
    "CONTENTS": "contents",
    "SOURCE": "source",
}


def tag_values(metadata: Metadata, modified: datetime.date) -> dict[str, str]:
    """Map every known tag to the string it is replaced with.

    Falsy metadata values become empty strings. MODIFIED is the given
    generation date in YYYY-MM-DD form.
    """
    values: dict[str, str] = {}
    for tag in TAG_ORDER:
        if tag == "EOL":
            values[tag] = "\n"
        elif tag == "MODIFIED":
            values[tag] = modified.strftime("%Y-%m-%d")
        else:
            value = getattr(metadata, _FIELD_FOR_TAG[tag])
            values[tag] = str(value) if value else ""
    return values


def replace_tag(original: str, tag: str, value: str | None) -> str:
    """Replace every [[tag]] token in original with value (or nothing)."""
    return (value or "").join(original.split(f"[[{tag}]]"))


def substitute(text: str, values: dict[str, str]) -> str:
    """Run one substitution pass over text.

    Each known tag is replaced independently in TAG_ORDER. Tokens introduced
    by a replacement are not expanded within the same pass, and tokens that
    are not known tags are left untouched.
    """
    result = text
    for tag in TAG_ORDER:
        result = replace_tag(result, tag, values.get(tag))
    return result


def apply_tags(text: str, values: dict[str, str], max_passes: int = MAX_PASSES) -> str:
    """Substitute tags until the text stops changing or max_passes is reached."""
    result = text
    for _ in range(max_passes):
        updated = substitute(result, values)
        if updated == result:
            break
        result = updated
    return result
