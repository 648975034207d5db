"""Unsettled: planets visited and task decks played."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence

from playladder.achievements.canonical import build_achievement_item, build_canonical_counts, sum_quantities
from playladder.achievements.completion import completion_lookup
from playladder.achievements.engine import build_unlocked_achievements_for_game
from playladder.achievements.tracks import (
    build_individual_item_tracks,
    build_per_item_achievement_base_id,
    build_per_item_track,
    build_play_count_track,
    with_completion,
)
from playladder.achievements.types import Achievement, AchievementTrack
from playladder.content.dictionary import ContentDictionary, load_content
from playladder.games.common import attach_item_completions
from playladder.plays import Play, find_player, matches_game, play_quantity, player_is_win
from playladder.tags import bare_segments, get_value, normalize_token, parse_key_value_segments

GAME_ID = "unsettled"
GAME_NAME = "Unsettled"
CONTENT_ID = "unsettled"
OBJECT_IDS = ("290484",)
UNKNOWN_PLANET = "Unknown planet"
UNKNOWN_TASK = "Unknown task"

PLANET_KEYS = ("P", "Pl", "Planet")
TASK_KEYS = ("T", "Task")

_TASK_TOKEN = re.compile(r"^(?:task\s*)?([a-z0-9]+)$", re.IGNORECASE)


@dataclass
class PlayerTags:
    planet: Optional[str] = None
    task: Optional[str] = None


@dataclass
class UnsettledEntry:
    play: Play
    planet: str
    task: str
    quantity: int
    is_win: bool


def default_content() -> ContentDictionary:
    return load_content(CONTENT_ID, ("planets", "tasks"))


def normalize_task(value: str, content: ContentDictionary) -> str | None:
    """``Task b``, ``B`` -> ``B`` when B is one of the known task decks."""

    match = _TASK_TOKEN.match(normalize_token(value))
    if match is None:
        return None
    return content.resolve("tasks", match.group(1))


def _planet(value: str, content: ContentDictionary) -> str | None:
    token = normalize_token(value)
    if not token:
        return None
    return content.resolve("planets", token) or token


def parse_player_color(color: str, content: ContentDictionary) -> PlayerTags:
    parsed = parse_key_value_segments(color)
    tags = bare_segments(color)

    kv_planet = get_value(parsed, PLANET_KEYS)
    kv_task = get_value(parsed, TASK_KEYS)
    planet = _planet(kv_planet, content) if kv_planet else None
    task = normalize_task(kv_task, content) if kv_task else None

    if planet is None:
        planet = next((p for p in (content.resolve("planets", tag) for tag in tags) if p), None)
    if task is None:
        task = next((t for t in (normalize_task(tag, content) for tag in tags) if t), None)

    if planet is None:
        # an unknown planet name is the first tag that is not a task
        planet = next((_planet(tag, content) for tag in tags if normalize_task(tag, content) is None), None)
    return PlayerTags(planet=planet, task=task)


def get_unsettled_entries(
    plays: Sequence[Play],
    username: str,
    content: ContentDictionary | None = None,
) -> list[UnsettledEntry]:
    content = content or default_content()
    entries: list[UnsettledEntry] = []
    for play in plays:
        if not matches_game(play, OBJECT_IDS, names=(GAME_NAME,)):
            continue
        player = find_player(play, username)
        tags = parse_player_color(player.color if player else "", content)
        entries.append(
            UnsettledEntry(
                play=play,
                planet=tags.planet or UNKNOWN_PLANET,
                task=tags.task or UNKNOWN_TASK,
                quantity=play_quantity(play),
                is_win=player_is_win(player),
            )
        )
    return entries


def _detail(entry: UnsettledEntry) -> str:
    return f"{entry.planet} • Task {entry.task}"


def compute_unsettled_achievements(
    plays: Sequence[Play],
    username: str,
    content: ContentDictionary | None = None,
) -> list[Achievement]:
    content = content or default_content()
    entries = get_unsettled_entries(plays, username, content)

    planets = build_canonical_counts(
        [build_achievement_item(label) for label in content.displays("planets")],
        [(build_achievement_item(e.planet), e.quantity) for e in entries],
    )
    tasks = build_canonical_counts(
        [build_achievement_item(label) for label in content.displays("tasks")],
        [(build_achievement_item(e.task), e.quantity) for e in entries],
    )

    tracks: list[AchievementTrack] = [
        with_completion(build_play_count_track(sum_quantities(entries)), completion_lookup(entries, _detail))
    ]

    if planets.items:
        tracks.append(
            build_per_item_track(
                track_id="planetPlays",
                achievement_base_id=build_per_item_achievement_base_id("Play", "planet"),
                verb="Play",
                item_noun="planet",
                unit_singular="time",
                items=planets.items,
                counts_by_item_id=planets.counts_by_item_id,
            )
        )
        tracks.extend(
            attach_item_completions(
                build_individual_item_tracks(
                    track_id_prefix="planetPlays",
                    verb="Play",
                    item_noun="planet",
                    items=planets.items,
                    counts_by_item_id=planets.counts_by_item_id,
                    unit_singular="time",
                ),
                planets.items,
                entries,
                labels_of=lambda e: [e.planet],
                detail=_detail,
            )
        )

    if tasks.items:
        tracks.append(
            build_per_item_track(
                track_id="taskPlays",
                achievement_base_id=build_per_item_achievement_base_id("Play", "task"),
                verb="Play",
                item_noun="task",
                unit_singular="time",
                items=tasks.items,
                counts_by_item_id=tasks.counts_by_item_id,
            )
        )
        tracks.extend(
            attach_item_completions(
                build_individual_item_tracks(
                    track_id_prefix="taskPlays",
                    verb="Play",
                    item_noun="task",
                    items=tasks.items,
                    counts_by_item_id=tasks.counts_by_item_id,
                    unit_singular="time",
                    format_item=lambda label: f"Task {label}",
                ),
                tasks.items,
                entries,
                labels_of=lambda e: [e.task],
                detail=_detail,
            )
        )

    return build_unlocked_achievements_for_game(GAME_ID, GAME_NAME, tracks)


__all__ = [
    "UnsettledEntry",
    "compute_unsettled_achievements",
    "get_unsettled_entries",
    "normalize_task",
    "parse_player_color",
]
