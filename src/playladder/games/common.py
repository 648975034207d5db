"""Pieces shared by the per-game entry builders and achievement sets."""

from __future__ import annotations

import dataclasses
from typing import Callable, Iterable, Optional, Protocol, Sequence, TypeVar

from playladder.achievements.canonical import build_achievement_item, build_canonical_counts, slugify
from playladder.achievements.completion import completion_lookup
from playladder.achievements.progress import normalize_label, pluralize
from playladder.achievements.tracks import build_per_item_track, track_item_id, with_completion
from playladder.achievements.types import AchievementItem, AchievementTrack
from playladder.content.dictionary import ContentDictionary
from playladder.plays import Play


class GameEntry(Protocol):
    play: Play
    quantity: int
    is_win: bool


E = TypeVar("E", bound=GameEntry)


def label_key(value: str) -> str:
    return normalize_label(value).lower()


def attach_item_completions(
    tracks: Iterable[AchievementTrack],
    items: Sequence[AchievementItem],
    entries: Sequence[E],
    labels_of: Callable[[E], Iterable[Optional[str]]],
    detail: Callable[[E], str],
    wins_only: bool = False,
) -> list[AchievementTrack]:
    """Give each individual-item track a lookup for the play that unlocked it.

    An entry counts towards an item when one of ``labels_of(entry)`` matches the
    item's label (whitespace and case insensitive).
    """

    label_by_id = {item.id: item.label for item in items}
    result: list[AchievementTrack] = []
    for track in tracks:
        item_id = track_item_id(track)
        label = label_by_id.get(item_id) if item_id else None
        if label is None:
            result.append(track)
            continue
        key = label_key(label)

        def predicate(entry: E, key: str = key) -> bool:
            if wins_only and not entry.is_win:
                return False
            return any(value and label_key(value) == key for value in labels_of(entry))

        result.append(with_completion(track, completion_lookup(entries, detail, predicate)))
    return result


def group_lookup(content: ContentDictionary, section: str, attribute: str = "group") -> Callable[[str], Optional[str]]:
    """``label -> group`` (or box) read from the content dictionary entity."""

    def lookup(label: str) -> Optional[str]:
        entity = content.entity(section, label)
        return getattr(entity, attribute, None) if entity is not None else None

    return lookup


def build_matchup_tracks(
    group: str,
    plays_track_prefix: str,
    wins_track_prefix: str,
    left_noun: str,
    right_noun: str,
    lefts: Sequence[str],
    rights: Sequence[str],
    observed: Iterable[tuple[str, str, int, bool]],
) -> list[AchievementTrack]:
    """Play and win checklists over every ``left vs right`` pairing inside one group.

    ``observed`` holds ``(left, right, quantity, is_win)`` tuples; pairs whose
    sides are not both in the group are ignored.
    """

    left_keys = {label_key(value) for value in lefts}
    right_keys = {label_key(value) for value in rights}
    preferred = [build_achievement_item(f"{left} vs {right}") for left in lefts for right in rights]
    pairs = [
        (build_achievement_item(f"{left} vs {right}"), quantity, is_win)
        for left, right, quantity, is_win in observed
        if label_key(left) in left_keys and label_key(right) in right_keys
    ]
    plays = build_canonical_counts(preferred, [(item, quantity) for item, quantity, _ in pairs])
    wins = build_canonical_counts(preferred, [(item, quantity if win else 0) for item, quantity, win in pairs])

    group_key = slugify(group)
    pairing = f"{slugify(left_noun)}-against-each-{slugify(right_noun)}-in-{group_key}"
    noun = f"{left_noun} against each {right_noun} in {group}"
    plays_track = build_per_item_track(
        track_id=f"{plays_track_prefix}:{group_key}",
        achievement_base_id=f"play-each-{pairing}",
        verb="Play",
        item_noun=noun,
        unit_singular="time",
        items=plays.items,
        counts_by_item_id=plays.counts_by_item_id,
    )
    wins_track = dataclasses.replace(
        build_per_item_track(
            track_id=f"{wins_track_prefix}:{group_key}",
            achievement_base_id=f"win-each-{pairing}",
            verb="Defeat",
            item_noun=noun,
            unit_singular="win",
            items=wins.items,
            counts_by_item_id=wins.counts_by_item_id,
        ),
        title_for_level=lambda level: f"Win each {noun} {level} {pluralize(level, 'time')}",
    )
    return [plays_track, wins_track]


__all__ = [
    "GameEntry",
    "attach_item_completions",
    "build_matchup_tracks",
    "group_lookup",
    "label_key",
]
