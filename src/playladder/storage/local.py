"""File-backed key/value store standing in for browser local storage."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any


def default_state_dir() -> Path:
    return Path(os.getenv("PLAYLADDER_STATE_DIR", "./artifacts/playladder"))


class LocalStore:
    """String values keyed by name, persisted as one JSON object.

    Reads of a missing or corrupt file behave like an empty store; write
    failures raise ``OSError`` for callers to handle.
    """

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path is not None else default_state_dir() / "local_storage.json"

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data: Any = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def get_item(self, key: str) -> str | None:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        state = self._load()
        state[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(state, indent=2, sort_keys=True), encoding="utf-8")

    def remove_item(self, key: str) -> None:
        state = self._load()
        if state.pop(key, None) is None:
            return
        self.path.write_text(json.dumps(state, indent=2, sort_keys=True), encoding="utf-8")


__all__ = ["LocalStore", "default_state_dir"]
