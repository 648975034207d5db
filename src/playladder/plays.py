"""Play records as produced by the play-log parser, plus small accessors."""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator


class PlaysFileError(ValueError):
    """Raised when a plays file cannot be read or has an unexpected shape."""


def _stringify(attributes: Any) -> Any:
    """Attribute values as strings; ``None`` becomes ``""``."""

    if not isinstance(attributes, dict):
        return attributes
    return {str(k): "" if v is None else str(v) for k, v in attributes.items()}


def _nest_attributes(values: Any) -> Any:
    # Accept flat {"username": ..., "color": ...} rows next to the parser's
    # {"attributes": {...}} rows.
    if not isinstance(values, dict):
        return values
    if "attributes" not in values:
        return {"attributes": _stringify(values)}
    return {**values, "attributes": _stringify(values["attributes"] or {})}


class PlayPlayer(BaseModel):
    model_config = ConfigDict(frozen=True)

    attributes: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _flat_attributes(cls, values: Any) -> Any:
        return _nest_attributes(values)

    @property
    def username(self) -> str:
        return self.attributes.get("username", "")

    @property
    def color(self) -> str:
        return self.attributes.get("color", "")


class PlayItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    attributes: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _flat_attributes(cls, values: Any) -> Any:
        return _nest_attributes(values)

    @property
    def objectid(self) -> str:
        return self.attributes.get("objectid", "")

    @property
    def name(self) -> str:
        return self.attributes.get("name", "")


class Play(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    attributes: dict[str, str] = Field(default_factory=dict)
    item: Optional[PlayItem] = None
    players: list[PlayPlayer] = Field(default_factory=list)
    comments: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        values = dict(values)
        attributes = _stringify(values.get("attributes") or {})
        if not isinstance(attributes, dict):
            return values
        if "id" not in values and attributes.get("id"):
            values["id"] = attributes["id"]
        values["attributes"] = attributes
        return values

    @property
    def date(self) -> str:
        return self.attributes.get("date", "")


def play_quantity(play: Play) -> int:
    """Quantity of a play; missing, non-finite or non-positive values count as 1."""

    try:
        parsed = float(play.attributes.get("quantity") or "1")
    except ValueError:
        return 1
    if not math.isfinite(parsed) or parsed <= 0:
        return 1
    return max(1, int(parsed))


def play_length_minutes(play: Play) -> int | None:
    try:
        parsed = float(play.attributes.get("length") or "0")
    except ValueError:
        return None
    if not math.isfinite(parsed) or parsed <= 0:
        return None
    return int(parsed)


def find_player(play: Play, username: str) -> PlayPlayer | None:
    user = username.lower()
    for player in play.players:
        if player.username.lower() == user:
            return player
    return None


def player_is_win(player: PlayPlayer | None) -> bool:
    return player is not None and player.attributes.get("win") == "1"


def matches_game(
    play: Play,
    object_ids: Iterable[str],
    names: Iterable[str] = (),
    name_prefixes: Iterable[str] = (),
) -> bool:
    """True when the play's item matches one of the ids, names or name prefixes."""

    objectid = play.item.objectid if play.item else ""
    name = play.item.name if play.item else ""
    if objectid and objectid in set(object_ids):
        return True
    if name and name in set(names):
        return True
    return bool(name) and any(name.startswith(prefix) for prefix in name_prefixes)


def parse_plays(raw: Any) -> list[Play]:
    rows = raw.get("plays") if isinstance(raw, dict) else raw
    if not isinstance(rows, list):
        raise PlaysFileError("expected a list of plays or an object with a 'plays' list")
    try:
        return [Play.model_validate(row) for row in rows]
    except ValidationError as exc:
        raise PlaysFileError(f"invalid play record: {exc}") from exc


def load_plays(path: str | Path) -> list[Play]:
    """Load plays from a JSON file written by the play-log parser."""

    plays_path = Path(path)
    try:
        raw = json.loads(plays_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise PlaysFileError(f"cannot read {plays_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise PlaysFileError(f"{plays_path} is not valid JSON: {exc}") from exc
    return parse_plays(raw)


__all__ = [
    "Play",
    "PlayItem",
    "PlayPlayer",
    "PlaysFileError",
    "find_player",
    "load_plays",
    "matches_game",
    "parse_plays",
    "play_length_minutes",
    "play_quantity",
    "player_is_win",
]
