"""Progress math for counter and per-item achievement levels."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping, Sequence

_WHITESPACE = re.compile(r"\s+")

# Labels that stand for unparsed or missing data rather than a real entity.
_PLACEHOLDER_LABELS = {"unknown", "no adversary"}


@dataclass(frozen=True)
class Progress:
    is_complete: bool
    remaining_plays: int
    plays_so_far: int
    progress_value: int
    progress_target: int
    progress_label: str


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    if count == 1:
        return singular
    return plural if plural is not None else f"{singular}s"


def normalize_label(value: str) -> str:
    return _WHITESPACE.sub(" ", value.strip())


def is_meaningful_item(value: str) -> bool:
    """False for empty labels and the ``unknown``/``no adversary`` placeholders."""

    trimmed = normalize_label(value)
    if not trimmed:
        return False
    lowered = trimmed.lower()
    if lowered in _PLACEHOLDER_LABELS:
        return False
    return not lowered.startswith("unknown ")


def compute_counter_progress(current: int, target: int, unit_singular: str) -> Progress:
    """Progress of a single running count towards ``target``."""

    target = target if target > 0 else 1
    current = max(0, current)
    progress_value = min(current, target)
    unit = pluralize(target, unit_singular)
    return Progress(
        is_complete=current >= target,
        remaining_plays=max(0, target - current),
        plays_so_far=current,
        progress_value=progress_value,
        progress_target=target,
        progress_label=f"{progress_value}/{target} {unit}",
    )


def compute_per_item_progress(
    items: Sequence[str],
    counts_by_item: Mapping[str, int],
    target_per_item: int,
    unit_singular: str,
) -> Progress:
    """Progress of a checklist where every item must reach ``target_per_item``.

    An empty checklist is never complete. ``remaining_plays`` is the total work
    left across all items, not the number of unfinished items.
    """

    if not items:
        return Progress(
            is_complete=False,
            remaining_plays=0,
            plays_so_far=0,
            progress_value=0,
            progress_target=0,
            progress_label="0/0",
        )

    target = target_per_item if target_per_item > 0 else 1
    met = 0
    remaining = 0
    so_far = 0
    for item in items:
        count = counts_by_item.get(item, 0)
        if count >= target:
            met += 1
        remaining += max(0, target - count)
        so_far += min(count, target)

    total = len(items)
    unit = pluralize(target, unit_singular)
    return Progress(
        is_complete=met == total,
        remaining_plays=remaining,
        plays_so_far=so_far,
        progress_value=met,
        progress_target=total,
        progress_label=f"{met}/{total} at {target} {unit} each",
    )


__all__ = [
    "Progress",
    "compute_counter_progress",
    "compute_per_item_progress",
    "is_meaningful_item",
    "normalize_label",
    "pluralize",
]
