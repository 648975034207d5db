"""Tabular views over game entries and achievements."""

from __future__ import annotations

import json
import numbers
from typing import Any, Mapping, Sequence, cast

import pandas as pd

from playladder.achievements.engine import is_unlocked_pin
from playladder.achievements.types import Achievement

ENTRY_BASE_COLUMNS = ["date", "play_id", "quantity", "win"]
ACHIEVEMENT_COLUMNS = [
    "game",
    "type",
    "title",
    "status",
    "progress",
    "remaining",
    "id",
]


def _cell(value: Any) -> Any:
    if isinstance(value, (list, tuple, set)):
        return ", ".join(str(item) for item in value)
    return value


def entries_frame(entries: Sequence[Any], columns: Sequence[str]) -> pd.DataFrame:
    """One row per entry: play date, id, quantity, win flag and the named label columns."""

    all_columns = [*ENTRY_BASE_COLUMNS, *columns]
    if not entries:
        return pd.DataFrame(columns=all_columns)
    rows = []
    for entry in entries:
        row = {
            "date": entry.play.date or "",
            "play_id": entry.play.id,
            "quantity": entry.quantity,
            "win": bool(entry.is_win),
        }
        for column in columns:
            row[column] = _cell(getattr(entry, column, None))
        rows.append(row)
    return pd.DataFrame(rows, columns=all_columns)


def count_table(entries: Sequence[Any], column: str, wins_only: bool = False) -> pd.DataFrame:
    """Sum quantities per label of ``column``; list-valued columns count each member."""

    counts: dict[str, int] = {}
    for entry in entries:
        if wins_only and not entry.is_win:
            continue
        value = getattr(entry, column, None)
        labels = value if isinstance(value, (list, tuple, set)) else [value]
        for label in labels:
            if not label:
                continue
            counts[str(label)] = counts.get(str(label), 0) + int(entry.quantity)

    if not counts:
        return pd.DataFrame(columns=[column, "plays"])
    frame = pd.DataFrame({column: list(counts), "plays": list(counts.values())})
    frame = frame.sort_values(by=["plays", column], ascending=[False, True], kind="mergesort")
    return frame.reset_index(drop=True)


def achievements_frame(achievements: Sequence[Achievement], pinned_ids: Sequence[str] = ()) -> pd.DataFrame:
    pinned = set(pinned_ids)
    if not achievements:
        return pd.DataFrame(columns=ACHIEVEMENT_COLUMNS)
    rows = []
    for a in achievements:
        status = a.status
        if is_unlocked_pin(a, pinned):
            status = "unlocked (pinned)"
        elif a.id in pinned:
            status = "pinned"
        rows.append(
            {
                "game": a.game_name,
                "type": a.type_label,
                "title": a.title,
                "status": status,
                "progress": a.progress_label,
                "remaining": a.remaining_plays,
                "id": a.id,
            }
        )
    return pd.DataFrame(rows, columns=ACHIEVEMENT_COLUMNS)


def _fmt(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, numbers.Integral):
        return str(int(value))
    if isinstance(value, numbers.Real):
        return "-" if pd.isna(value) else f"{value:.2f}"
    if isinstance(value, str):
        return value
    return "-" if pd.isna(value) else str(value)


def _records(data: Sequence[Mapping[str, Any]] | pd.DataFrame) -> list[dict[str, Any]]:
    if isinstance(data, pd.DataFrame):
        return cast(list[dict[str, Any]], data.to_dict(orient="records"))
    return [dict(row) for row in data]


def format_table(data: Sequence[Mapping[str, Any]] | pd.DataFrame, empty_message: str = "No rows.") -> str:
    """Format rows as a plain text table."""

    if isinstance(data, pd.DataFrame):
        if data.empty:
            return empty_message
        columns = [str(col) for col in data.columns]
    records = _records(data)
    if not records:
        return empty_message
    if not isinstance(data, pd.DataFrame):
        columns = list(records[0].keys())

    table_rows = [[_fmt(row.get(col)) for col in columns] for row in records]
    widths = [max(len(col), *(len(r[idx]) for r in table_rows)) for idx, col in enumerate(columns)]
    header = " | ".join(col.ljust(widths[idx]) for idx, col in enumerate(columns))
    separator = "-+-".join("-" * widths[idx] for idx in range(len(columns)))
    body = [" | ".join(r[idx].ljust(widths[idx]) for idx in range(len(columns))) for r in table_rows]
    return "\n".join([header, separator, *body])


def format_json(data: Sequence[Mapping[str, Any]] | pd.DataFrame) -> str:
    return json.dumps(_records(data), indent=2, default=str)


__all__ = [
    "achievements_frame",
    "count_table",
    "entries_frame",
    "format_json",
    "format_table",
]
