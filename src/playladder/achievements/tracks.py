"""Builders for the track shapes shared by every game."""

from __future__ import annotations

import dataclasses
from typing import Callable, Literal, Mapping, Optional, Sequence

from .canonical import slugify
from .levels import default_achievement_levels
from .progress import compute_counter_progress, compute_per_item_progress, pluralize
from .types import AchievementCompletion, AchievementItem, AchievementTrack

Verb = Literal["Play", "Defeat"]


def _verb_key(verb: Verb) -> str:
    return "play" if verb == "Play" else "defeat"


def build_per_item_achievement_base_id(verb: Verb, item_noun: str) -> str:
    return f"{_verb_key(verb)}-each-{slugify(item_noun)}"


def build_named_count_track(
    track_id: str,
    achievement_base_id: str,
    current: int,
    unit_singular: str,
    title_for_level: Callable[[int], str],
    levels: Optional[Sequence[int]] = None,
    type_label: Optional[str] = None,
) -> AchievementTrack:
    return AchievementTrack(
        track_id=track_id,
        achievement_base_id=achievement_base_id,
        kind="counter",
        levels=list(levels) if levels is not None else default_achievement_levels(),
        title_for_level=title_for_level,
        progress_for_level=lambda level: compute_counter_progress(current, level, unit_singular),
        type_label=type_label,
    )


def build_play_count_track(
    current_plays: int,
    track_id: str = "plays",
    achievement_base_id: str = "plays",
    levels: Optional[Sequence[int]] = None,
) -> AchievementTrack:
    return build_named_count_track(
        track_id=track_id,
        achievement_base_id=achievement_base_id,
        current=current_plays,
        unit_singular="play",
        title_for_level=lambda level: f"Play {level} {pluralize(level, 'time')}",
        levels=levels,
    )


def build_per_item_track(
    track_id: str,
    achievement_base_id: str,
    verb: Verb,
    item_noun: str,
    unit_singular: str,
    items: Sequence[AchievementItem],
    counts_by_item_id: Mapping[str, int],
    levels: Optional[Sequence[int]] = None,
) -> AchievementTrack:
    """Checklist track: every item must reach the level."""

    noun = item_noun.strip()
    item_ids = [item.id for item in items]
    return AchievementTrack(
        track_id=track_id,
        achievement_base_id=achievement_base_id,
        kind="perItem",
        levels=list(levels) if levels is not None else default_achievement_levels(),
        title_for_level=lambda level: f"{verb} each {noun} {level} {pluralize(level, unit_singular)}",
        progress_for_level=lambda level: compute_per_item_progress(
            item_ids, counts_by_item_id, level, unit_singular
        ),
    )


def build_individual_item_tracks(
    track_id_prefix: str,
    verb: Verb,
    item_noun: str,
    items: Sequence[AchievementItem],
    counts_by_item_id: Mapping[str, int],
    unit_singular: str,
    format_item: Optional[Callable[[str], str]] = None,
    levels: Optional[Sequence[int]] = None,
) -> list[AchievementTrack]:
    """One counter track per item, ids ``<prefix>:<item id>``."""

    fmt = format_item or (lambda value: value)
    noun_key = slugify(item_noun)
    tracks: list[AchievementTrack] = []
    for item in items:
        label = fmt(item.label)
        tracks.append(
            build_named_count_track(
                track_id=f"{track_id_prefix}:{item.id}",
                achievement_base_id=f"{_verb_key(verb)}-{noun_key}-{item.id}",
                current=counts_by_item_id.get(item.id, 0),
                unit_singular=unit_singular,
                title_for_level=lambda level, label=label: (
                    f"{verb} {label} {level} {pluralize(level, unit_singular)}"
                ),
                levels=levels,
            )
        )
    return tracks


def group_items_by_label(
    items: Sequence[AchievementItem],
    group_of: Callable[[str], Optional[str]],
) -> list[tuple[str, list[AchievementItem]]]:
    """Bucket items by ``group_of(label)`` in first-seen group order; ungrouped items are dropped."""

    groups: dict[str, tuple[str, list[AchievementItem]]] = {}
    for item in items:
        group = (group_of(item.label) or "").strip()
        if not group:
            continue
        groups.setdefault(group.lower(), (group, []))[1].append(item)
    return list(groups.values())


def build_grouped_per_item_tracks(
    track_id_prefix: str,
    verb: Verb,
    item_noun: str,
    unit_singular: str,
    items: Sequence[AchievementItem],
    counts_by_item_id: Mapping[str, int],
    group_of: Callable[[str], Optional[str]],
) -> list[AchievementTrack]:
    """One single-level checklist per group, e.g. "Play each boss in <set>"."""

    noun_key = slugify(item_noun)
    tracks: list[AchievementTrack] = []
    for group, grouped in group_items_by_label(items, group_of):
        group_key = slugify(group)
        tracks.append(
            build_per_item_track(
                track_id=f"{track_id_prefix}:{group_key}",
                achievement_base_id=f"{_verb_key(verb)}-each-{noun_key}-in-{group_key}",
                verb=verb,
                item_noun=f"{item_noun} in {group}",
                unit_singular=unit_singular,
                items=grouped,
                counts_by_item_id=counts_by_item_id,
                levels=[1],
            )
        )
    return tracks


def track_item_id(track: AchievementTrack) -> str | None:
    """Item id of an individual-item track (the part after the last colon)."""

    if ":" not in track.track_id:
        return None
    return track.track_id.rsplit(":", 1)[1] or None


def with_completion(
    track: AchievementTrack,
    completion_for_level: Callable[[int], Optional[AchievementCompletion]],
) -> AchievementTrack:
    return dataclasses.replace(track, completion_for_level=completion_for_level)


__all__ = [
    "build_grouped_per_item_tracks",
    "build_individual_item_tracks",
    "build_named_count_track",
    "build_per_item_achievement_base_id",
    "build_per_item_track",
    "build_play_count_track",
    "group_items_by_label",
    "track_item_id",
    "with_completion",
]
