"""Parsing helpers for the free-text tags players keep in their ``color`` field.

Tag text looks like ``V: Hans／L: Camp Happy Trails`` or ``Tovak | Wolfhawk``:
segments separated by slashes (ASCII or fullwidth) or pipes, each segment
either a ``key: value`` pair or a bare token.
"""

from __future__ import annotations

import re
from typing import Iterable, Mapping, Sequence

_SEGMENT_SPLIT = re.compile(r"[／/|]+")
_KEY_VALUE_SPLIT = re.compile(r"[:：]")
_WHITESPACE = re.compile(r"\s+")


def normalize_token(value: str) -> str:
    """Trim and collapse internal whitespace."""

    return _WHITESPACE.sub(" ", value.strip())


def split_segments(text: str | None) -> list[str]:
    """Split tag text into trimmed, non-empty segments."""

    stripped = (text or "").strip()
    if not stripped:
        return []
    return [segment.strip() for segment in _SEGMENT_SPLIT.split(stripped) if segment.strip()]


def parse_key_value_segments(text: str | None) -> dict[str, str]:
    """Return ``key -> value`` for every segment holding a colon.

    Segments without a colon, with a leading colon, or with an empty key or
    value are skipped. A later duplicate key overwrites an earlier one.
    """

    parsed: dict[str, str] = {}
    for segment in split_segments(text):
        match = _KEY_VALUE_SPLIT.search(segment)
        if match is None or match.start() == 0:
            continue
        key = segment[: match.start()].strip()
        value = segment[match.end() :].strip()
        if not key or not value:
            continue
        parsed[key] = value
    return parsed


def get_value(parsed: Mapping[str, str], keys: Iterable[str]) -> str | None:
    """Return the first non-empty value among ``keys``."""

    for key in keys:
        value = parsed.get(key)
        if value:
            return value
    return None


def bare_segments(text: str | None) -> list[str]:
    """Segments that are plain tokens (no ASCII or fullwidth colon)."""

    return [segment for segment in split_segments(text) if not _KEY_VALUE_SPLIT.search(segment)]


def choose_most_common_or_first(candidates: Sequence[str | None]) -> str | None:
    """Pick the most frequent candidate; ties go to the one seen first."""

    cleaned = [value.strip() for value in candidates if value and value.strip()]
    if not cleaned:
        return None
    counts: dict[str, int] = {}
    for value in cleaned:
        counts[value] = counts.get(value, 0) + 1
    best_value = cleaned[0]
    best_count = 0
    # dicts keep insertion order, so strict ">" keeps the first-seen winner on ties
    for value, count in counts.items():
        if count > best_count:
            best_value, best_count = value, count
    return best_value


__all__ = [
    "bare_segments",
    "choose_most_common_or_first",
    "get_value",
    "normalize_token",
    "parse_key_value_segments",
    "split_segments",
]
