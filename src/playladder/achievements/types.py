from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Literal, Optional

from .progress import Progress

AchievementStatus = Literal["available", "completed"]
AchievementKind = Literal["counter", "perItem"]


@dataclass(frozen=True)
class AchievementItem:
    id: str
    label: str


@dataclass(frozen=True)
class AchievementCompletion:
    detail: str
    play_id: int
    play_date: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.detail, "playId": self.play_id, "playDate": self.play_date}


@dataclass
class AchievementTrack:
    track_id: str
    achievement_base_id: str
    kind: AchievementKind
    levels: list[int]
    title_for_level: Callable[[int], str]
    progress_for_level: Callable[[int], Progress]
    completion_for_level: Optional[Callable[[int], Optional[AchievementCompletion]]] = None
    type_label: Optional[str] = None

    def __post_init__(self) -> None:
        previous = 0
        for level in self.levels:
            if level <= previous:
                raise ValueError(
                    f"Track {self.track_id!r} levels must be strictly increasing and >= 1: {self.levels}"
                )
            previous = level


@dataclass(frozen=True)
class Achievement:
    id: str
    game_id: str
    game_name: str
    track_id: str
    type_label: str
    kind: AchievementKind
    status: AchievementStatus
    title: str
    level: int
    remaining_plays: int
    plays_so_far: int
    progress_value: int
    progress_target: int
    progress_label: str
    completion: Optional[AchievementCompletion] = None

    def to_dict(self) -> dict[str, Any]:
        """Render with the camelCase keys consumed by the UI layer."""

        data: dict[str, Any] = {
            "id": self.id,
            "gameId": self.game_id,
            "gameName": self.game_name,
            "trackId": self.track_id,
            "typeLabel": self.type_label,
            "kind": self.kind,
            "status": self.status,
            "title": self.title,
            "level": self.level,
            "remainingPlays": self.remaining_plays,
            "playsSoFar": self.plays_so_far,
            "progressValue": self.progress_value,
            "progressTarget": self.progress_target,
            "progressLabel": self.progress_label,
        }
        if self.completion is not None:
            data["completion"] = self.completion.to_dict()
        return data
