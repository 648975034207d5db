from __future__ import annotations

import os
import re
from pathlib import Path
from typing import List, Literal, Match, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

_VAR = re.compile(r"\$\{([^}]+)\}")

ENV_OVERRIDES = {
    "PLAYLADDER_USERNAME": "username",
    "PLAYLADDER_PLAYS": "plays_path",
    "PLAYLADDER_STATE_DIR": "state_dir",
    "PLAYLADDER_DB_URL": "db_url",
    "PLAYLADDER_PIN_BACKEND": "pin_backend",
}


class LadderConfig(BaseModel):
    username: Optional[str] = None
    plays_path: Optional[str] = None
    state_dir: str = "./artifacts/playladder"
    db_url: str = "sqlite:///./playladder.db"
    pin_backend: Literal["local", "remote"] = "local"
    next_limit: int = Field(5, ge=1)
    snapshot_min_interval_minutes: float = Field(10, ge=0)
    games: Optional[List[str]] = None

    @field_validator("pin_backend", mode="before")
    @classmethod
    def _lower_backend(cls, value):
        return value.strip().lower() if isinstance(value, str) else value

    @property
    def snapshot_min_interval_ms(self) -> int:
        return int(self.snapshot_min_interval_minutes * 60 * 1000)

    @property
    def local_storage_path(self) -> Path:
        return Path(self.state_dir) / "local_storage.json"


def _expand_env(text: str) -> str:
    def repl(match: Match[str]) -> str:
        return os.environ.get(match.group(1), "")

    return _VAR.sub(repl, text)


def load_config(path: str | Path | None = None) -> LadderConfig:
    """Read the YAML config (if any), then apply ``PLAYLADDER_*`` env overrides."""

    raw: dict = {}
    if path is not None:
        txt = Path(path).read_text()
        try:
            loaded = yaml.safe_load(_expand_env(txt)) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"{path}: invalid YAML: {exc}") from exc
        if not isinstance(loaded, dict):
            raise ValueError(f"{path}: expected a YAML mapping")
        # an empty `playladder:` section means defaults
        section = (loaded["playladder"] or {}) if "playladder" in loaded else loaded
        if not isinstance(section, dict):
            raise ValueError(f"{path}: the playladder section must be a mapping")
        raw = dict(section)
    for env_name, field_name in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            raw[field_name] = value
    return LadderConfig.model_validate(raw)


__all__ = ["ENV_OVERRIDES", "LadderConfig", "load_config"]
