"""Bundled content dictionaries and their loader."""

from .dictionary import (
    ContentDictionary,
    ContentEntity,
    ContentError,
    load_content,
    normalize_id,
    parse_content,
)

__all__ = [
    "ContentDictionary",
    "ContentEntity",
    "ContentError",
    "load_content",
    "normalize_id",
    "parse_content",
]
