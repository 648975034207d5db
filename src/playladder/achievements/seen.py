"""Seen-completed ids and snapshots used for "unlocked since last visit"."""

from __future__ import annotations

import json
import time
from typing import AbstractSet, Any, Iterable, Sequence

from playladder.storage.local import LocalStore

from .types import Achievement

SEEN_COMPLETED_KEY = "achievementsSeenCompletedIds:v1"
SNAPSHOT_KEY = "achievementsSnapshot:v1"
SNAPSHOT_MIN_INTERVAL_MS = 10 * 60 * 1000


def _now_ms() -> int:
    return int(time.time() * 1000)


def _read_json(store: LocalStore, key: str) -> Any:
    raw = store.get_item(key)
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return None


def read_seen_completed_ids(store: LocalStore) -> set[str]:
    parsed = _read_json(store, SEEN_COMPLETED_KEY)
    if not isinstance(parsed, dict) or parsed.get("version") != 1:
        return set()
    ids = parsed.get("completedAchievementIds")
    if not isinstance(ids, list):
        return set()
    return {value for value in ids if isinstance(value, str) and value}


def write_seen_completed_ids(store: LocalStore, ids: Iterable[str], *, now_ms: int | None = None) -> None:
    payload = {
        "version": 1,
        "updatedAtMs": now_ms if now_ms is not None else _now_ms(),
        "completedAchievementIds": sorted(set(ids)),
    }
    try:
        store.set_item(SEEN_COMPLETED_KEY, json.dumps(payload))
    except OSError:
        return


def read_snapshot_saved_at_ms(store: LocalStore) -> int | None:
    parsed = _read_json(store, SNAPSHOT_KEY)
    if not isinstance(parsed, dict) or parsed.get("version") != 1:
        return None
    saved_at = parsed.get("savedAtMs")
    if isinstance(saved_at, bool) or not isinstance(saved_at, (int, float)):
        return None
    return int(saved_at)


def maybe_write_achievements_snapshot(
    store: LocalStore,
    achievements: Sequence[Achievement],
    *,
    min_interval_ms: int = SNAPSHOT_MIN_INTERVAL_MS,
    now_ms: int | None = None,
) -> bool:
    """Store a compact snapshot unless one was saved within ``min_interval_ms``.

    Returns True when a snapshot was written.
    """

    now = now_ms if now_ms is not None else _now_ms()
    saved_at = read_snapshot_saved_at_ms(store)
    if saved_at is not None and now - saved_at < min_interval_ms:
        return False
    payload = {
        "version": 1,
        "savedAtMs": now,
        "achievements": [
            {
                "id": a.id,
                "status": a.status,
                "gameId": a.game_id,
                "trackId": a.track_id,
                "level": a.level,
                "remainingPlays": a.remaining_plays,
                "playsSoFar": a.plays_so_far,
            }
            for a in achievements
        ],
    }
    try:
        store.set_item(SNAPSHOT_KEY, json.dumps(payload))
    except OSError:
        return False
    return True


def pick_completed_ids(achievements: Iterable[Achievement]) -> set[str]:
    return {a.id for a in achievements if a.status == "completed"}


def compute_newly_unlocked(
    achievements: Sequence[Achievement],
    seen_completed_ids: AbstractSet[str],
) -> list[Achievement]:
    """Completed achievements missing from the seen set, highest level first."""

    fresh = [a for a in achievements if a.status == "completed" and a.id not in seen_completed_ids]
    return sorted(fresh, key=lambda a: (-a.level, a.game_name, a.title))


__all__ = [
    "SEEN_COMPLETED_KEY",
    "SNAPSHOT_KEY",
    "SNAPSHOT_MIN_INTERVAL_MS",
    "compute_newly_unlocked",
    "maybe_write_achievements_snapshot",
    "pick_completed_ids",
    "read_seen_completed_ids",
    "read_snapshot_saved_at_ms",
    "write_seen_completed_ids",
]
