"""Merge observed labels onto the content dictionary's canonical items."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from .progress import is_meaningful_item, normalize_label
from .types import AchievementItem

_NON_SLUG = re.compile(r"[^a-z0-9]+")
_TRAILING_LEVEL = re.compile(r"\s+L\d+\s*$", re.IGNORECASE)


@dataclass
class CanonicalCounts:
    items: list[AchievementItem]
    counts_by_item_id: dict[str, int] = field(default_factory=dict)


@dataclass
class CanonicalMaxValues:
    items: list[str]
    counts_by_item: dict[str, int] = field(default_factory=dict)


def slugify(value: str) -> str:
    """Lowercase slug used for item and track ids; ``unknown`` when nothing is left.

    Labels that differ only in punctuation share a slug. Ids are persisted in
    pin sets, so the scheme must stay stable.
    """

    slug = _NON_SLUG.sub("-", normalize_label(value).lower()).strip("-")
    return slug or "unknown"


def sum_quantities(entries: Iterable[object]) -> int:
    return sum(getattr(entry, "quantity", 0) or 0 for entry in entries)


def strip_trailing_level_label(value: str) -> str:
    """``England L3`` -> ``England``."""

    return _TRAILING_LEVEL.sub("", value).strip()


def build_item_id_lookup(labels_by_id: Mapping[str, str]) -> dict[str, str]:
    """Normalized label -> id; the first id seen for a label wins."""

    lookup: dict[str, str] = {}
    for item_id, label in labels_by_id.items():
        normalized = normalize_label(label).lower()
        if normalized and normalized not in lookup:
            lookup[normalized] = item_id
    return lookup


def build_achievement_item(label: str, label_to_id: Mapping[str, str] | None = None) -> AchievementItem:
    normalized_label = normalize_label(label)
    key = normalized_label.lower()
    item_id = (label_to_id or {}).get(key) or slugify(normalized_label)
    return AchievementItem(id=item_id, label=normalized_label or label)


def items_from_map(labels_by_id: Mapping[str, str]) -> list[AchievementItem]:
    return [AchievementItem(id=item_id, label=normalize_label(label)) for item_id, label in labels_by_id.items()]


def build_canonical_counts(
    preferred_items: Sequence[AchievementItem],
    observed: Iterable[tuple[AchievementItem, int]],
) -> CanonicalCounts:
    """Sum observed amounts per canonical item.

    Canonical items are seeded from ``preferred_items`` (order kept, first
    occurrence per normalized label wins); observed labels that match none of
    them are appended as new items.
    """

    canonical: dict[str, AchievementItem] = {}
    counts: dict[str, int] = {}

    for raw in preferred_items:
        label = normalize_label(raw.label)
        if not is_meaningful_item(label):
            continue
        canonical.setdefault(label.lower(), AchievementItem(id=raw.id, label=label))

    for raw, amount in observed:
        label = normalize_label(raw.label)
        if not is_meaningful_item(label):
            continue
        item = canonical.setdefault(label.lower(), AchievementItem(id=raw.id, label=label))
        counts[item.id] = counts.get(item.id, 0) + (amount or 0)

    items = list(canonical.values())
    for item in items:
        counts.setdefault(item.id, 0)
    return CanonicalCounts(items=items, counts_by_item_id=counts)


def build_canonical_max_values(
    preferred_items: Sequence[str],
    observed: Iterable[tuple[str, int]],
) -> CanonicalMaxValues:
    """Same merge as :func:`build_canonical_counts`, keeping the max amount per item."""

    canonical: dict[str, str] = {}
    values: dict[str, int] = {}

    for raw in preferred_items:
        label = normalize_label(raw)
        if not is_meaningful_item(label):
            continue
        canonical.setdefault(label.lower(), label)

    for raw, amount in observed:
        label = normalize_label(raw)
        if not is_meaningful_item(label):
            continue
        item = canonical.setdefault(label.lower(), label)
        values[item] = max(values.get(item, 0), max(0, amount or 0))

    items = list(canonical.values())
    for item in items:
        values.setdefault(item, 0)
    return CanonicalMaxValues(items=items, counts_by_item=values)


__all__ = [
    "CanonicalCounts",
    "CanonicalMaxValues",
    "build_achievement_item",
    "build_canonical_counts",
    "build_canonical_max_values",
    "build_item_id_lookup",
    "items_from_map",
    "slugify",
    "strip_trailing_level_label",
    "sum_quantities",
]
