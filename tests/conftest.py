from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from playladder.plays import Play


def make_play(
    play_id: int,
    *,
    objectid: str = "",
    name: str = "",
    date: str = "2024-01-01",
    quantity: int | str = 1,
    players: list[dict[str, Any]] | None = None,
) -> Play:
    """Build a play in the nested shape emitted by the play-log parser."""

    return Play.model_validate(
        {
            "id": play_id,
            "attributes": {"date": date, "quantity": str(quantity)},
            "item": {"attributes": {"objectid": objectid, "name": name, "objecttype": "thing"}},
            "players": [
                {"attributes": {"username": "", "color": "", "win": "0", **player}}
                for player in (players or [])
            ],
        }
    )


def me(color: str, win: bool = False, username: str = "alice") -> dict[str, Any]:
    return {"username": username, "color": color, "win": "1" if win else "0"}


def write_plays(path: Path, plays: list[Play]) -> Path:
    rows = [play.model_dump() for play in plays]
    path.write_text(json.dumps({"username": "alice", "plays": rows}), encoding="utf-8")
    return path


@pytest.fixture
def isolated_env(monkeypatch, tmp_path):
    for name in (
        "PLAYLADDER_USERNAME",
        "PLAYLADDER_PLAYS",
        "PLAYLADDER_STATE_DIR",
        "PLAYLADDER_DB_URL",
        "PLAYLADDER_PIN_BACKEND",
        "PLAYLADDER_CONTENT_DIR",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("PLAYLADDER_STATE_DIR", str(tmp_path / "state"))
    return tmp_path
