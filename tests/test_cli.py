from __future__ import annotations

import json

import pytest
from conftest import make_play, me, write_plays
from typer.testing import CliRunner

from playladder.cli import app
from playladder.games.registry import GAMES

runner = CliRunner()


@pytest.fixture
def plays_file(isolated_env):
    plays = [
        make_play(1, objectid="248562", date="2024-05-01", players=[me("Tovak", win=True)]),
        make_play(2, objectid="248562", date="2024-05-02", players=[me("H: Tovak")]),
    ]
    return str(write_plays(isolated_env / "plays.json", plays))


def _ls(plays_file, *extra):
    return runner.invoke(
        app,
        ["achievements", "ls", "--plays", plays_file, "--user", "alice", "--game", "mageKnight", *extra],
    )


def test_games_lists_supported_games(isolated_env) -> None:
    result = runner.invoke(app, ["games"])
    assert result.exit_code == 0
    for game_id in GAMES:
        assert game_id in result.stdout


def test_ls_lists_available_before_completed(plays_file) -> None:
    result = _ls(plays_file, "--format", "json")
    assert result.exit_code == 0, result.output
    rows = json.loads(result.stdout)
    statuses = [row["status"] for row in rows]
    assert statuses == sorted(statuses)
    completed = {row["id"] for row in rows if row["status"] == "completed"}
    assert completed == {"mageKnight-plays-1", "mageKnight-play-hero-tovak-1", "mageKnight-defeat-hero-tovak-1"}
    assert all(row["gameId"] == "mageKnight" for row in rows)


def test_ls_status_filter_and_table(plays_file) -> None:
    result = _ls(plays_file, "--status", "completed")
    assert result.exit_code == 0, result.output
    assert "Defeat as Tovak 1 win" in result.stdout
    assert "available" not in result.stdout

    bad = _ls(plays_file, "--status", "locked")
    assert bad.exit_code == 2


def test_missing_inputs_exit_with_prefixed_message(plays_file, isolated_env) -> None:
    result = runner.invoke(app, ["achievements", "ls", "--plays", plays_file])
    assert result.exit_code == 1
    assert "[plays] no username" in result.output

    result = runner.invoke(app, ["achievements", "ls", "--user", "alice", "--plays", str(isolated_env / "nope.json")])
    assert result.exit_code == 1
    assert "[plays] cannot read" in result.output

    result = runner.invoke(app, ["achievements", "ls", "--user", "alice", "--plays", plays_file, "--game", "catan"])
    assert result.exit_code == 1
    assert "unknown game 'catan'" in result.output


def test_next_respects_limit_and_pins(plays_file) -> None:
    base = ["achievements", "next", "--plays", plays_file, "--user", "alice", "--game", "mageKnight"]
    result = runner.invoke(app, [*base, "--limit", "2", "--format", "json"])
    assert result.exit_code == 0, result.output
    assert [row["id"] for row in json.loads(result.stdout)] == [
        "mageKnight-plays-3",
        "mageKnight-play-hero-tovak-3",
    ]

    pinned = runner.invoke(app, ["pins", "add", "mageKnight-play-each-hero-1", "--user", "alice"])
    assert pinned.exit_code == 0
    result = runner.invoke(app, [*base, "--limit", "2", "--format", "json"])
    assert [row["id"] for row in json.loads(result.stdout)] == [
        "mageKnight-play-each-hero-1",
        "mageKnight-plays-3",
    ]


def test_local_pins_commands(isolated_env) -> None:
    result = runner.invoke(app, ["pins", "add", "finalGirl-plays-5", "--user", "alice"])
    assert result.exit_code == 0
    assert "[pins] pinned: finalGirl-plays-5" in result.stdout

    again = runner.invoke(app, ["pins", "add", "finalGirl-plays-5", "--user", "alice"])
    assert "already pinned" in again.stdout

    listed = runner.invoke(app, ["pins", "ls", "--user", "alice"])
    assert listed.stdout.split() == ["finalGirl-plays-5"]
    assert runner.invoke(app, ["pins", "ls", "--user", "bob"]).stdout == ""

    removed = runner.invoke(app, ["pins", "rm", "finalGirl-plays-5", "--user", "alice"])
    assert "[pins] unpinned: finalGirl-plays-5" in removed.stdout
    assert "not pinned" in runner.invoke(app, ["pins", "rm", "finalGirl-plays-5", "--user", "alice"]).stdout

    missing_user = runner.invoke(app, ["pins", "ls"])
    assert missing_user.exit_code == 1


def test_remote_pins_commands(isolated_env, monkeypatch) -> None:
    monkeypatch.setenv("PLAYLADDER_PIN_BACKEND", "remote")
    monkeypatch.setenv("PLAYLADDER_DB_URL", f"sqlite:///{isolated_env / 'pins.db'}")

    result = runner.invoke(app, ["pins", "add", "spiritIsland-plays-1", "--uid", "uid-1"])
    assert result.exit_code == 0, result.output
    listed = runner.invoke(app, ["pins", "ls", "--uid", "uid-1"])
    assert listed.stdout.split() == ["spiritIsland-plays-1"]
    assert runner.invoke(app, ["pins", "ls", "--uid", "uid-2"]).stdout == ""

    anonymous = runner.invoke(app, ["pins", "ls"])
    assert anonymous.exit_code == 1
    assert "[pins] Sign in" in anonymous.output


def test_unreachable_remote_pin_store_degrades(plays_file, isolated_env, monkeypatch) -> None:
    monkeypatch.setenv("PLAYLADDER_PIN_BACKEND", "remote")
    monkeypatch.setenv("PLAYLADDER_DB_URL", f"sqlite:///{isolated_env / 'missing' / 'dir' / 'pins.db'}")

    listed = _ls(plays_file)
    assert listed.exit_code == 0, listed.output
    assert "[pins] remote pin store unavailable" in listed.output
    assert "Play 1 time" in listed.output

    added = runner.invoke(app, ["pins", "add", "mageKnight-plays-3", "--uid", "uid-1"])
    assert added.exit_code == 0, added.output
    assert "pins not saved" in added.output


def test_malformed_config_exits_with_prefixed_message(isolated_env) -> None:
    bad = isolated_env / "bad.yaml"
    bad.write_text("playladder: [unclosed\n")
    result = runner.invoke(app, ["pins", "ls", "--config", str(bad)])
    assert result.exit_code == 1
    assert "[config]" in result.output
    assert "invalid YAML" in result.output

    bad.write_text("playladder: nope\n")
    result = runner.invoke(app, ["pins", "ls", "--config", str(bad)])
    assert result.exit_code == 1
    assert "[config]" in result.output


def test_new_reports_unseen_completions_until_marked(plays_file, isolated_env) -> None:
    base = ["achievements", "new", "--plays", plays_file, "--user", "alice", "--game", "mageKnight"]

    first = runner.invoke(app, [*base, "--format", "json"])
    assert first.exit_code == 0, first.output
    assert [row["title"] for row in json.loads(first.stdout)] == [
        "Defeat as Tovak 1 win",
        "Play 1 time",
        "Play Tovak 1 time",
    ]

    marked = runner.invoke(app, [*base, "--mark-seen"])
    assert marked.exit_code == 0
    assert "[achievements] marked 3 as seen" in marked.output

    after = runner.invoke(app, base)
    assert "No newly unlocked achievements." in after.stdout

    state = json.loads((isolated_env / "state" / "local_storage.json").read_text())
    assert "achievementsSnapshot:v1" in state
    assert "achievementsSeenCompletedIds:v1" in state


def test_entries_table_and_counts(plays_file) -> None:
    base = ["entries", "--game", "mageKnight", "--plays", plays_file, "--user", "alice"]

    rows = runner.invoke(app, [*base, "--format", "json"])
    assert rows.exit_code == 0, rows.output
    assert [row["my_hero"] for row in json.loads(rows.stdout)] == ["Tovak", "Tovak"]

    counts = runner.invoke(app, [*base, "--counts", "my_hero", "--wins-only", "--format", "json"])
    assert json.loads(counts.stdout) == [{"my_hero": "Tovak", "plays": 1}]

    table = runner.invoke(app, [*base, "--counts", "my_hero"])
    assert table.stdout.splitlines()[0].split(" | ") == ["my_hero", "plays"]

    bad = runner.invoke(app, [*base, "--counts", "villain"])
    assert bad.exit_code == 2
