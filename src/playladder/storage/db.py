"""SQLite persistence for per-user preferences (pinned achievements)."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine as SAEngine

INIT_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS user_preferences (
        uid TEXT PRIMARY KEY,
        pinned_achievement_ids TEXT,
        pinned_achievement_ids_updated_at TEXT
    )
    """,
)


def get_engine(db_url: str) -> SAEngine:
    """Create an engine for the configured SQLite database and ensure schema."""

    engine = create_engine(db_url, echo=False, future=True)
    init_db(engine)
    return engine


def init_db(engine: SAEngine) -> None:
    """Create required tables if they do not exist."""

    with engine.begin() as conn:
        for statement in INIT_STATEMENTS:
            conn.execute(text(statement))


def fetch_pinned_ids(engine: SAEngine, uid: str) -> list[str] | None:
    """Stored pin ids for ``uid``; ``None`` when the user has no preferences row."""

    with engine.connect() as conn:
        row = conn.execute(
            text("SELECT pinned_achievement_ids FROM user_preferences WHERE uid = :uid"),
            {"uid": uid},
        ).first()
    if row is None:
        return None
    raw: Any = row[0]
    try:
        ids = json.loads(raw) if raw else []
    except json.JSONDecodeError:
        return []
    if not isinstance(ids, list):
        return []
    return [str(value) for value in ids]


def store_pinned_ids(engine: SAEngine, uid: str, ids: list[str]) -> None:
    """Insert or replace the pin list for ``uid`` and stamp the update time."""

    row = {
        "uid": uid,
        "ids": json.dumps(ids),
        "ts": datetime.now(timezone.utc).isoformat(),
    }
    with engine.begin() as conn:
        conn.execute(
            text(
                """
                INSERT INTO user_preferences (
                    uid, pinned_achievement_ids, pinned_achievement_ids_updated_at
                ) VALUES (:uid, :ids, :ts)
                ON CONFLICT(uid) DO UPDATE SET
                    pinned_achievement_ids = excluded.pinned_achievement_ids,
                    pinned_achievement_ids_updated_at = excluded.pinned_achievement_ids_updated_at
                """
            ),
            row,
        )


__all__ = ["fetch_pinned_ids", "get_engine", "init_db", "store_pinned_ids"]
