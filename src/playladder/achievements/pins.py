"""Pinned achievement ids, kept locally per username or remotely per user id."""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping

from sqlalchemy.engine import Engine as SAEngine
from sqlalchemy.exc import SQLAlchemyError

from playladder.storage.db import fetch_pinned_ids, store_pinned_ids
from playladder.storage.local import LocalStore

PIN_STORAGE_VERSION = "v1"
MAX_REMOTE_PINS = 5000


class UnauthenticatedError(RuntimeError):
    """Raised when a remote pin call is made without a signed-in user."""


class PinPayloadTooLarge(ValueError):
    """Raised when more than ``MAX_REMOTE_PINS`` ids are sent in one call."""


def _storage_key(username: str) -> str:
    return f"achievementPins:{PIN_STORAGE_VERSION}:{username}"


def read_pinned_ids(store: LocalStore, username: str) -> set[str]:
    """Pinned ids stored locally for ``username``; empty on any read problem."""

    raw = store.get_item(_storage_key(username))
    if not raw:
        return set()
    try:
        parsed: Any = json.loads(raw)
    except json.JSONDecodeError:
        return set()
    if not isinstance(parsed, list):
        return set()
    return {value for value in parsed if isinstance(value, str)}


def write_pinned_ids(store: LocalStore, username: str, ids: Iterable[str]) -> None:
    try:
        store.set_item(_storage_key(username), json.dumps(sorted(set(ids))))
    except OSError:
        # Best-effort: a lost pin is not worth failing the caller.
        return


def toggle_pin(ids: Iterable[str], achievement_id: str) -> set[str]:
    updated = set(ids)
    if achievement_id in updated:
        updated.discard(achievement_id)
    else:
        updated.add(achievement_id)
    return updated


def _normalize_ids(ids: Any) -> list[str]:
    if not isinstance(ids, list):
        return []
    seen: dict[str, None] = {}
    for value in ids:
        if isinstance(value, str) and value.strip():
            seen.setdefault(value.strip(), None)
    return list(seen)


class RemotePinService:
    """The ``get``/``set`` pair exposed to signed-in clients."""

    def __init__(self, engine: SAEngine):
        self.engine = engine

    @staticmethod
    def _require_user(uid: str | None) -> str:
        if not uid or not uid.strip():
            raise UnauthenticatedError("Sign in to sync pinned achievements.")
        return uid.strip()

    def get(self, uid: str | None) -> dict[str, list[str]]:
        user = self._require_user(uid)
        return {"ids": _normalize_ids(fetch_pinned_ids(self.engine, user) or [])}

    def set(self, uid: str | None, payload: Mapping[str, Any]) -> dict[str, bool]:
        user = self._require_user(uid)
        raw_ids = payload.get("ids") if isinstance(payload, Mapping) else None
        if not isinstance(raw_ids, list):
            raise ValueError("Expected payload of the form {'ids': [...]}.")
        if len(raw_ids) > MAX_REMOTE_PINS:
            raise PinPayloadTooLarge(f"At most {MAX_REMOTE_PINS} pinned ids are accepted, got {len(raw_ids)}.")
        store_pinned_ids(self.engine, user, _normalize_ids(raw_ids))
        return {"ok": True}


def fetch_remote_pinned_ids(service: RemotePinService, uid: str | None) -> set[str]:
    """Read remote pins; storage errors degrade to an empty set."""

    try:
        return set(service.get(uid)["ids"])
    except SQLAlchemyError:
        return set()


def save_remote_pinned_ids(service: RemotePinService, uid: str | None, ids: Iterable[str]) -> None:
    """Write remote pins; storage errors are dropped, auth and size errors are not."""

    try:
        service.set(uid, {"ids": sorted(set(ids))})
    except SQLAlchemyError:
        return


__all__ = [
    "MAX_REMOTE_PINS",
    "PinPayloadTooLarge",
    "RemotePinService",
    "UnauthenticatedError",
    "fetch_remote_pinned_ids",
    "read_pinned_ids",
    "save_remote_pinned_ids",
    "toggle_pin",
    "write_pinned_ids",
]
