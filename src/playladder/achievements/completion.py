"""Locate the play that first satisfied a counter level."""

from __future__ import annotations

import functools
from typing import Callable, Optional, Protocol, Sequence, TypeVar

from playladder.plays import Play

from .types import AchievementCompletion


class EntryWithPlay(Protocol):
    play: Play
    quantity: int


E = TypeVar("E", bound=EntryWithPlay)


def compare_plays_chronological(a: Play, b: Play) -> int:
    """Date ascending, undated plays last, then play id ascending."""

    a_date = a.date or ""
    b_date = b.date or ""
    if a_date != b_date:
        if a_date and b_date:
            return -1 if a_date < b_date else 1
        return -1 if a_date else 1
    return (a.id > b.id) - (a.id < b.id)


def sort_entries_chronological(entries: Sequence[E]) -> list[E]:
    return sorted(
        entries,
        key=functools.cmp_to_key(lambda x, y: compare_plays_chronological(x.play, y.play)),
    )


def find_completion_entry_for_counter(
    entries: Sequence[E],
    target: int,
    predicate: Optional[Callable[[E], bool]] = None,
) -> Optional[E]:
    """Replay cumulative quantity and return the entry that reaches ``target``.

    Returns ``None`` when the target is never reached.
    """

    target = target if target > 0 else 1
    progress = 0
    for entry in sort_entries_chronological(entries):
        if predicate is not None and not predicate(entry):
            continue
        progress += max(0, entry.quantity or 0)
        if progress >= target:
            return entry
    return None


def build_completion_from_play(play: Play, detail: str) -> AchievementCompletion:
    return AchievementCompletion(detail=detail, play_id=play.id, play_date=play.date or None)


def completion_lookup(
    entries: Sequence[E],
    detail: Callable[[E], str],
    predicate: Optional[Callable[[E], bool]] = None,
) -> Callable[[int], Optional[AchievementCompletion]]:
    """Bind entries into a ``completion_for_level`` callable for a counter track."""

    def lookup(level: int) -> Optional[AchievementCompletion]:
        entry = find_completion_entry_for_counter(entries, level, predicate)
        if entry is None:
            return None
        return build_completion_from_play(entry.play, detail(entry))

    return lookup


__all__ = [
    "EntryWithPlay",
    "build_completion_from_play",
    "compare_plays_chronological",
    "completion_lookup",
    "find_completion_entry_for_counter",
    "sort_entries_chronological",
]
