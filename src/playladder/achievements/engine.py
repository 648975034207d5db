"""Turn tracks into leveled achievements and order them for display."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import AbstractSet, Iterable, Sequence

from .types import Achievement, AchievementTrack

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_SEPARATORS = re.compile(r"[\s_\-]+")


@dataclass
class SortedAchievements:
    available: list[Achievement]
    completed: list[Achievement]


def humanize_track_prefix(track_id: str) -> str:
    """``villainWins:hans`` -> ``Villain Wins``."""

    prefix = track_id.split(":", 1)[0]
    spaced = _CAMEL_BOUNDARY.sub(" ", prefix)
    words = [word for word in _SEPARATORS.split(spaced) if word]
    return " ".join(word[:1].upper() + word[1:] for word in words)


def resolve_type_label(track: AchievementTrack) -> str:
    if track.type_label:
        return track.type_label
    return humanize_track_prefix(track.track_id)


def build_unlocked_achievements_for_track(
    game_id: str,
    game_name: str,
    track: AchievementTrack,
) -> list[Achievement]:
    """Walk levels in order; emit completed levels and stop after the first locked one."""

    type_label = resolve_type_label(track)
    achievements: list[Achievement] = []
    for level in track.levels:
        progress = track.progress_for_level(level)
        completion = None
        if progress.is_complete and track.completion_for_level is not None:
            completion = track.completion_for_level(level)
        achievements.append(
            Achievement(
                id=f"{game_id}-{track.achievement_base_id}-{level}",
                game_id=game_id,
                game_name=game_name,
                track_id=track.track_id,
                type_label=type_label,
                kind=track.kind,
                status="completed" if progress.is_complete else "available",
                title=track.title_for_level(level),
                level=level,
                remaining_plays=progress.remaining_plays,
                plays_so_far=progress.plays_so_far,
                progress_value=progress.progress_value,
                progress_target=progress.progress_target,
                progress_label=progress.progress_label,
                completion=completion,
            )
        )
        if not progress.is_complete:
            break
    return achievements


def build_unlocked_achievements_for_game(
    game_id: str,
    game_name: str,
    tracks: Iterable[AchievementTrack],
) -> list[Achievement]:
    achievements: list[Achievement] = []
    for track in tracks:
        achievements.extend(build_unlocked_achievements_for_track(game_id, game_name, track))
    return achievements


def _available_key(achievement: Achievement, pinned: AbstractSet[str]) -> tuple:
    return (
        achievement.id not in pinned,
        achievement.remaining_plays,
        -achievement.plays_so_far,
        achievement.title,
    )


def sort_unlocked_achievements(
    achievements: Sequence[Achievement],
    pinned_ids: AbstractSet[str] | None = None,
) -> SortedAchievements:
    """Split into the "next" list and the completed list.

    Pinned achievements always land in ``available`` (pinned first), even when
    already completed; ``completed`` holds only unpinned completed ones.
    """

    pinned = pinned_ids or frozenset()
    available = sorted(
        (a for a in achievements if a.status == "available" or a.id in pinned),
        key=lambda a: _available_key(a, pinned),
    )
    completed = sorted(
        (a for a in achievements if a.status == "completed" and a.id not in pinned),
        key=lambda a: (-a.level, a.title),
    )
    return SortedAchievements(available=available, completed=completed)


def is_unlocked_pin(achievement: Achievement, pinned_ids: AbstractSet[str]) -> bool:
    """A pinned entry that is already completed; shown tagged "Unlocked"."""

    return achievement.status == "completed" and achievement.id in pinned_ids


def next_achievements(
    achievements: Sequence[Achievement],
    limit: int,
    pinned_ids: AbstractSet[str] | None = None,
) -> list[Achievement]:
    """All pinned entries, then unpinned available ones until ``limit`` is reached."""

    pinned = pinned_ids or frozenset()
    ordered = sort_unlocked_achievements(achievements, pinned_ids=pinned).available
    pinned_rows = [a for a in ordered if a.id in pinned]
    room = max(0, limit - len(pinned_rows))
    unpinned_rows = [a for a in ordered if a.id not in pinned][:room]
    return pinned_rows + unpinned_rows


def suppress_available_tracks(
    achievements: Sequence[Achievement],
    track_ids: AbstractSet[str],
) -> list[Achievement]:
    if not track_ids:
        return list(achievements)
    return [a for a in achievements if not (a.status == "available" and a.track_id in track_ids)]


def pick_best_available_achievement(achievements: Sequence[Achievement]) -> Achievement | None:
    available = [a for a in achievements if a.status == "available"]
    if not available:
        return None
    return min(available, key=lambda a: (a.remaining_plays, -a.plays_so_far, a.title))


def pick_best_available_for_track_ids(
    achievements: Sequence[Achievement],
    track_ids: Sequence[str],
) -> Achievement | None:
    if not track_ids:
        return None
    wanted = set(track_ids)
    return pick_best_available_achievement([a for a in achievements if a.track_id in wanted])


def track_ids_for_achievements(achievements: Iterable[Achievement]) -> list[str]:
    seen: dict[str, None] = {}
    for achievement in achievements:
        seen.setdefault(achievement.track_id, None)
    return list(seen)


__all__ = [
    "SortedAchievements",
    "build_unlocked_achievements_for_game",
    "build_unlocked_achievements_for_track",
    "humanize_track_prefix",
    "is_unlocked_pin",
    "next_achievements",
    "pick_best_available_achievement",
    "pick_best_available_for_track_ids",
    "resolve_type_label",
    "sort_unlocked_achievements",
    "suppress_available_tracks",
    "track_ids_for_achievements",
]
