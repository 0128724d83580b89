# ABOUTME: Metadata package for describing the book being generated.
# ABOUTME: Exports the Metadata record and its ValidationError.

from quire.metadata.types import REQUIRED_FIELDS, Metadata, ValidationError

__all__ = [
    "REQUIRED_FIELDS",
    "Metadata",
    "ValidationError",
]
