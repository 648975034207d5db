"""Per-game content dictionaries: canonical entity names plus their aliases.

Each game ships a YAML file with one list per entity kind. An entry is either
a bare display name or a mapping::

    heroes:
      - Arythea
      - display: Wolfhawk
        id: wolf
        aliases: [Wolf Hawk]

Load failures raise :class:`ContentError`; an empty dictionary would silently
disable canonicalization, so there is no fallback.
"""

from __future__ import annotations

import functools
import os
import re
from importlib import resources
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_WHITESPACE = re.compile(r"\s+")


class ContentError(ValueError):
    """Raised when a content dictionary is missing or malformed."""


def normalize_id(value: str) -> str:
    """Alias lookup key: lowercase with every non-alphanumeric character removed."""

    return _NON_ALNUM.sub("", value.strip().lower())


class ContentEntity(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    display: str
    id: Optional[str] = None
    aliases: list[str] = []
    group: Optional[str] = None
    complexity: Optional[str] = None
    location: Optional[str] = None
    box: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _from_bare_name(cls, values: Any) -> Any:
        if isinstance(values, str):
            return {"display": values}
        if isinstance(values, dict):
            values = dict(values)
            if isinstance(values.get("display"), str):
                values["display"] = _WHITESPACE.sub(" ", values["display"].strip())
            if isinstance(values.get("aliases"), str):
                values["aliases"] = [values["aliases"]]
        return values

    @model_validator(mode="after")
    def _require_display(self) -> "ContentEntity":
        if not self.display:
            raise ValueError("display must not be empty")
        return self

    @property
    def key(self) -> str:
        """Stable item id: the explicit ``id`` or the normalized display name."""

        return normalize_id(self.id or self.display) or self.display.lower()

    def tokens(self) -> list[str]:
        return [self.display, *([self.id] if self.id else []), *self.aliases]


class ContentDictionary:
    """Immutable lookup of entity sections for one game."""

    def __init__(self, game_id: str, sections: dict[str, list[ContentEntity]]):
        self.game_id = game_id
        self._sections = sections
        self._aliases: dict[str, dict[str, str]] = {}
        for name, entities in sections.items():
            lookup: dict[str, str] = {}
            for entity in entities:
                for token in entity.tokens():
                    normalized = normalize_id(token)
                    if normalized:
                        lookup[normalized] = entity.display
            self._aliases[name] = lookup

    def section_names(self) -> list[str]:
        return list(self._sections)

    def entities(self, section: str) -> list[ContentEntity]:
        return list(self._sections.get(section, []))

    def displays(self, section: str) -> list[str]:
        return [entity.display for entity in self._sections.get(section, [])]

    def labels_by_id(self, section: str) -> dict[str, str]:
        """Item id -> display name, in dictionary order."""

        labels: dict[str, str] = {}
        for entity in self._sections.get(section, []):
            labels.setdefault(entity.key, entity.display)
        return labels

    def resolve(self, section: str, token: str) -> str | None:
        """Canonical display name for ``token`` (display, id or alias), if known."""

        normalized = normalize_id(token)
        if not normalized:
            return None
        return self._aliases.get(section, {}).get(normalized)

    def entity(self, section: str, display: str) -> ContentEntity | None:
        wanted = normalize_id(display)
        for entity in self._sections.get(section, []):
            if normalize_id(entity.display) == wanted:
                return entity
        return None


def parse_content(text: str, game_id: str, required_sections: Sequence[str] = ()) -> ContentDictionary:
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ContentError(f"Failed to parse {game_id} content: {exc}") from exc
    if not isinstance(raw, dict):
        raise ContentError(f"Failed to parse {game_id} content (expected a YAML mapping of lists).")

    for name in required_sections:
        if not isinstance(raw.get(name), list):
            raise ContentError(f"Failed to parse {game_id} content (expected YAML with a `{name}` array).")

    sections: dict[str, list[ContentEntity]] = {}
    for name, items in raw.items():
        if not isinstance(items, list):
            continue
        try:
            sections[str(name)] = [ContentEntity.model_validate(item) for item in items]
        except ValidationError as exc:
            raise ContentError(f"Invalid {game_id} `{name}` entry: {exc}") from exc
    return ContentDictionary(game_id, sections)


def _content_text(game_id: str) -> str:
    override = os.getenv("PLAYLADDER_CONTENT_DIR")
    if override:
        path = Path(override) / f"{game_id}.yaml"
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ContentError(f"Cannot read {game_id} content from {path}: {exc}") from exc
    resource = resources.files("playladder.content").joinpath("data", f"{game_id}.yaml")
    try:
        return resource.read_text(encoding="utf-8")
    except (OSError, FileNotFoundError) as exc:
        raise ContentError(f"No bundled content dictionary for {game_id}: {exc}") from exc


@functools.lru_cache(maxsize=None)
def load_content(game_id: str, required_sections: tuple[str, ...] = ()) -> ContentDictionary:
    """Load and memoize the dictionary for ``game_id``."""

    return parse_content(_content_text(game_id), game_id, required_sections)


def first_resolved(content: ContentDictionary, section: str, tokens: Iterable[str]) -> str | None:
    for token in tokens:
        resolved = content.resolve(section, token)
        if resolved:
            return resolved
    return None


__all__ = [
    "ContentDictionary",
    "ContentEntity",
    "ContentError",
    "first_resolved",
    "load_content",
    "normalize_id",
    "parse_content",
]
