from __future__ import annotations

import json
from typing import Optional

from dotenv import find_dotenv, load_dotenv

# Autoload .env if present (do not override variables already exported)
load_dotenv(find_dotenv(usecwd=True), override=False)

import typer
from sqlalchemy.exc import SQLAlchemyError
from typer import Option, Typer

from playladder.achievements.engine import next_achievements, sort_unlocked_achievements
from playladder.achievements.pins import (
    PinPayloadTooLarge,
    RemotePinService,
    UnauthenticatedError,
    fetch_remote_pinned_ids,
    read_pinned_ids,
    save_remote_pinned_ids,
    write_pinned_ids,
)
from playladder.achievements.seen import (
    compute_newly_unlocked,
    maybe_write_achievements_snapshot,
    pick_completed_ids,
    read_seen_completed_ids,
    write_seen_completed_ids,
)
from playladder.achievements.types import Achievement
from playladder.config import LadderConfig, load_config
from playladder.content.dictionary import ContentError
from playladder.games.registry import (
    GAMES,
    compute_all_game_achievement_summaries,
    flatten_summaries,
    get_game,
)
from playladder.plays import Play, PlaysFileError, load_plays
from playladder.report import achievements_frame, count_table, entries_frame, format_json, format_table
from playladder.storage.db import get_engine
from playladder.storage.local import LocalStore

app = Typer(help="Play Ladder: board-game achievements from your logged plays")
achievements_app = Typer(help="Compute and browse achievements")
pins_app = Typer(help="Pin achievements to keep them at the top of the list")
app.add_typer(achievements_app, name="achievements")
app.add_typer(pins_app, name="pins")

_CONFIG_HELP = "Path to a play-ladder config YAML."


def _settings(config: Optional[str], plays: Optional[str] = None, user: Optional[str] = None) -> LadderConfig:
    try:
        cfg = load_config(config)
    except (OSError, ValueError) as exc:
        # pydantic's ValidationError is a ValueError
        typer.echo(f"[config] {exc}", err=True)
        raise typer.Exit(code=1) from exc
    updates = {}
    if plays:
        updates["plays_path"] = plays
    if user:
        updates["username"] = user
    return cfg.model_copy(update=updates) if updates else cfg


def _username(cfg: LadderConfig) -> str:
    if not cfg.username:
        typer.echo("[plays] no username; pass --user or set PLAYLADDER_USERNAME", err=True)
        raise typer.Exit(code=1)
    return cfg.username


def _plays(cfg: LadderConfig) -> list[Play]:
    if not cfg.plays_path:
        typer.echo("[plays] no plays file; pass --plays or set PLAYLADDER_PLAYS", err=True)
        raise typer.Exit(code=1)
    try:
        return load_plays(cfg.plays_path)
    except PlaysFileError as exc:
        typer.echo(f"[plays] {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _game_ids(cfg: LadderConfig, game: Optional[str]) -> Optional[list[str]]:
    selected = [game] if game else cfg.games
    for game_id in selected or []:
        if game_id not in GAMES:
            typer.echo(f"[achievements] unknown game '{game_id}' (choose from {', '.join(GAMES)})", err=True)
            raise typer.Exit(code=1)
    return selected


def _compute(cfg: LadderConfig, game: Optional[str]) -> list[Achievement]:
    username = _username(cfg)
    plays = _plays(cfg)
    game_ids = _game_ids(cfg, game)
    try:
        summaries = compute_all_game_achievement_summaries(plays, username, game_ids)
    except ContentError as exc:
        typer.echo(f"[content] {exc}", err=True)
        raise typer.Exit(code=1) from exc
    return flatten_summaries(summaries)


def _remote_service(cfg: LadderConfig) -> RemotePinService:
    return RemotePinService(get_engine(cfg.db_url))


def _load_pins(cfg: LadderConfig, uid: Optional[str]) -> set[str]:
    if cfg.pin_backend == "remote":
        try:
            return fetch_remote_pinned_ids(_remote_service(cfg), uid or cfg.username)
        except UnauthenticatedError as exc:
            typer.echo(f"[pins] {exc}", err=True)
            raise typer.Exit(code=1) from exc
        except SQLAlchemyError as exc:
            typer.echo(f"[pins] remote pin store unavailable: {exc}", err=True)
            return set()
    if not cfg.username:
        return set()
    return read_pinned_ids(LocalStore(cfg.local_storage_path), cfg.username)


def _save_pins(cfg: LadderConfig, uid: Optional[str], ids: set[str]) -> None:
    if cfg.pin_backend == "remote":
        try:
            save_remote_pinned_ids(_remote_service(cfg), uid or cfg.username, ids)
        except (UnauthenticatedError, PinPayloadTooLarge) as exc:
            typer.echo(f"[pins] {exc}", err=True)
            raise typer.Exit(code=1) from exc
        except SQLAlchemyError as exc:
            typer.echo(f"[pins] remote pin store unavailable, pins not saved: {exc}", err=True)
        return
    write_pinned_ids(LocalStore(cfg.local_storage_path), _username(cfg), ids)


def _emit(achievements: list[Achievement], output_format: str, pinned: set[str], empty_message: str) -> None:
    if output_format.lower() == "json":
        typer.echo(json.dumps([a.to_dict() for a in achievements], indent=2))
        return
    typer.echo(format_table(achievements_frame(achievements, sorted(pinned)), empty_message=empty_message))


def _check_format(output_format: str) -> None:
    if output_format.lower() not in {"table", "json"}:
        raise typer.BadParameter("Format must be 'table' or 'json'.")


@app.command("games")
def games() -> None:
    """List supported games."""

    rows = [
        {"id": game.game_id, "name": game.name, "object_ids": ", ".join(game.object_ids)}
        for game in GAMES.values()
    ]
    typer.echo(format_table(rows))


@achievements_app.command("ls")
def achievements_ls(
    plays: Optional[str] = Option(None, "--plays", help="Plays JSON file."),
    user: Optional[str] = Option(None, "--user", help="Username whose tags are read."),
    game: Optional[str] = Option(None, "--game", help="Restrict to one game id."),
    status: Optional[str] = Option(None, "--status", help="available or completed."),
    output_format: str = Option("table", "--format", case_sensitive=False, help="table or json."),
    uid: Optional[str] = Option(None, "--uid", help="User id for the remote pin backend."),
    config: Optional[str] = Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """List achievements: pinned and cheapest unlocks first, then completed ones."""

    _check_format(output_format)
    if status is not None and status not in {"available", "completed"}:
        raise typer.BadParameter("Status must be 'available' or 'completed'.")
    cfg = _settings(config, plays, user)
    achievements = _compute(cfg, game)
    pinned = _load_pins(cfg, uid)
    ordered = sort_unlocked_achievements(achievements, pinned_ids=pinned)
    if status == "available":
        rows = ordered.available
    elif status == "completed":
        rows = ordered.completed
    else:
        rows = ordered.available + ordered.completed
    _emit(rows, output_format, pinned, "No achievements yet.")


@achievements_app.command("next")
def achievements_next(
    plays: Optional[str] = Option(None, "--plays", help="Plays JSON file."),
    user: Optional[str] = Option(None, "--user", help="Username whose tags are read."),
    game: Optional[str] = Option(None, "--game", help="Restrict to one game id."),
    limit: Optional[int] = Option(None, "--limit", min=1, help="Number of rows to show."),
    output_format: str = Option("table", "--format", case_sensitive=False, help="table or json."),
    uid: Optional[str] = Option(None, "--uid", help="User id for the remote pin backend."),
    config: Optional[str] = Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Show every pinned achievement plus the closest unlocks."""

    _check_format(output_format)
    cfg = _settings(config, plays, user)
    achievements = _compute(cfg, game)
    pinned = _load_pins(cfg, uid)
    rows = next_achievements(achievements, limit or cfg.next_limit, pinned_ids=pinned)
    _emit(rows, output_format, pinned, "Nothing left to unlock.")


@achievements_app.command("new")
def achievements_new(
    plays: Optional[str] = Option(None, "--plays", help="Plays JSON file."),
    user: Optional[str] = Option(None, "--user", help="Username whose tags are read."),
    game: Optional[str] = Option(None, "--game", help="Restrict to one game id."),
    mark_seen: bool = Option(False, "--mark-seen", help="Remember the current completed set."),
    output_format: str = Option("table", "--format", case_sensitive=False, help="table or json."),
    config: Optional[str] = Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Show achievements completed since they were last marked as seen."""

    _check_format(output_format)
    cfg = _settings(config, plays, user)
    achievements = _compute(cfg, game)
    store = LocalStore(cfg.local_storage_path)

    seen = read_seen_completed_ids(store)
    fresh = compute_newly_unlocked(achievements, seen)
    _emit(fresh, output_format, set(), "No newly unlocked achievements.")

    if mark_seen:
        write_seen_completed_ids(store, seen | pick_completed_ids(achievements))
        typer.echo(f"[achievements] marked {len(fresh)} as seen", err=True)
    maybe_write_achievements_snapshot(store, achievements, min_interval_ms=cfg.snapshot_min_interval_ms)


@pins_app.command("ls")
def pins_ls(
    user: Optional[str] = Option(None, "--user", help="Username for the local backend."),
    uid: Optional[str] = Option(None, "--uid", help="User id for the remote backend."),
    config: Optional[str] = Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """List pinned achievement ids."""

    cfg = _settings(config, user=user)
    if cfg.pin_backend == "local":
        _username(cfg)
    for achievement_id in sorted(_load_pins(cfg, uid)):
        typer.echo(achievement_id)


@pins_app.command("add")
def pins_add(
    achievement_id: str = typer.Argument(..., help="Achievement id, e.g. finalGirl-plays-5."),
    user: Optional[str] = Option(None, "--user", help="Username for the local backend."),
    uid: Optional[str] = Option(None, "--uid", help="User id for the remote backend."),
    config: Optional[str] = Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Pin an achievement."""

    cfg = _settings(config, user=user)
    if cfg.pin_backend == "local":
        _username(cfg)
    ids = _load_pins(cfg, uid)
    if achievement_id in ids:
        typer.echo(f"[pins] already pinned: {achievement_id}")
        return
    ids.add(achievement_id)
    _save_pins(cfg, uid, ids)
    typer.echo(f"[pins] pinned: {achievement_id}")


@pins_app.command("rm")
def pins_rm(
    achievement_id: str = typer.Argument(..., help="Achievement id to unpin."),
    user: Optional[str] = Option(None, "--user", help="Username for the local backend."),
    uid: Optional[str] = Option(None, "--uid", help="User id for the remote backend."),
    config: Optional[str] = Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Unpin an achievement."""

    cfg = _settings(config, user=user)
    if cfg.pin_backend == "local":
        _username(cfg)
    ids = _load_pins(cfg, uid)
    if achievement_id not in ids:
        typer.echo(f"[pins] not pinned: {achievement_id}")
        return
    ids.discard(achievement_id)
    _save_pins(cfg, uid, ids)
    typer.echo(f"[pins] unpinned: {achievement_id}")


@app.command("entries")
def entries(
    game: str = Option(..., "--game", help="Game id (see `playladder games`)."),
    plays: Optional[str] = Option(None, "--plays", help="Plays JSON file."),
    user: Optional[str] = Option(None, "--user", help="Username whose tags are read."),
    counts: Optional[str] = Option(None, "--counts", help="Count plays per value of this column."),
    wins_only: bool = Option(False, "--wins-only", help="With --counts, only count wins."),
    output_format: str = Option("table", "--format", case_sensitive=False, help="table or json."),
    config: Optional[str] = Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Show the per-play facts read from tags, or play counts per value."""

    _check_format(output_format)
    cfg = _settings(config, plays, user)
    _game_ids(cfg, game)
    definition = get_game(game)
    if counts is not None and counts not in definition.entry_columns:
        raise typer.BadParameter(f"Column must be one of: {', '.join(definition.entry_columns)}.")

    username = _username(cfg)
    rows_in = _plays(cfg)
    try:
        game_entries = definition.entries(rows_in, username)
    except ContentError as exc:
        typer.echo(f"[content] {exc}", err=True)
        raise typer.Exit(code=1) from exc

    if counts is not None:
        frame = count_table(game_entries, counts, wins_only=wins_only)
    else:
        frame = entries_frame(game_entries, definition.entry_columns)
    if output_format.lower() == "json":
        typer.echo(format_json(frame))
    else:
        typer.echo(format_table(frame, empty_message=f"No {definition.name} plays found."))


__all__ = ["app"]


if __name__ == "__main__":  # pragma: no cover
    app()
