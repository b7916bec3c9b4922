"""
Tests for SnapshotStore: board snapshot and theme persistence.
"""
import json
import sqlite3
import tempfile
from pathlib import Path

import pytest

from conftest import make_board
from taskboard.board import BoardStore
from taskboard.errors import PersistenceError
from taskboard.schema import Theme, default_board
from taskboard.store import SnapshotStore, BOARD_KEY, THEME_KEY


def test_first_run_returns_seed(snapshots):
    board = snapshots.load()
    assert board == default_board()
    assert [c.id for c in board.columns] == ["todo", "inProgress", "done"]
    assert board.title == "My Task Board"


def test_creates_missing_parent_directory(tmp_path):
    db = tmp_path / "nested" / "dir" / "board.db"
    store = SnapshotStore(str(db))
    assert db.parent.exists()
    assert store.load() == default_board()


def test_save_and_load(snapshots):
    snapshots.save(make_board())
    assert snapshots.load() == make_board()


def test_snapshot_document_shape(snapshots):
    snapshots.save(make_board())
    raw = json.loads(snapshots.get_value(BOARD_KEY))
    assert raw["boardTitle"] == "Sprint"
    assert [c["id"] for c in raw["columns"]] == ["A", "B", "C"]


def test_save_overwrites_previous_snapshot(snapshots):
    snapshots.save(make_board())
    board = make_board()
    board.columns.pop()
    snapshots.save(board)
    assert [c.id for c in snapshots.load().columns] == ["A", "B"]


def test_corrupt_snapshot_falls_back_to_seed(snapshots):
    snapshots.set_value(BOARD_KEY, "{broken")
    assert snapshots.load() == default_board()

    snapshots.set_value(BOARD_KEY, json.dumps({"boardTitle": "x"}))
    assert snapshots.load() == default_board()


def test_unparseable_snapshot_falls_back_to_seed(snapshots):
    snapshots.set_value(BOARD_KEY, "[" * 200000)
    assert snapshots.load() == default_board()

    snapshots.set_value(BOARD_KEY, '{"columns": ' + "1" * 5000 + "}")
    assert snapshots.load() == default_board()


def test_clear(snapshots):
    snapshots.save(make_board())
    snapshots.clear()
    assert snapshots.load() == default_board()


def test_board_store_persists_across_restarts(db_path):
    store = BoardStore(SnapshotStore(db_path))
    col = store.add_column("Review")
    task = store.add_task(col.id, "Ship it", due_date="2024-07-01")
    store.move_task(col.id, 0, "todo", 0)

    reloaded = BoardStore(SnapshotStore(db_path)).board
    assert reloaded == store.board
    assert reloaded.column("todo").tasks[0].id == task.id
    assert reloaded.column("todo").tasks[0].column_id == "todo"


def test_write_failure_raises_persistence_error(snapshots, monkeypatch):
    def broken_connect(db_path):
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr("taskboard.store._connect", broken_connect)
    with pytest.raises(PersistenceError):
        snapshots.save(make_board())


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Theme
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_theme_defaults_to_dark(snapshots):
    assert snapshots.load_theme() == Theme.DARK


def test_theme_round_trip_and_toggle(snapshots):
    snapshots.save_theme(Theme.LIGHT)
    assert snapshots.load_theme() == Theme.LIGHT
    assert snapshots.toggle_theme() == Theme.DARK
    assert snapshots.get_value(THEME_KEY) == "dark"


def test_theme_is_independent_of_board():
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as tmp:
        db_path = tmp.name

    try:
        store = SnapshotStore(db_path)
        store.save_theme(Theme.LIGHT)
        store.save(make_board())
        store.clear()
        assert store.load_theme() == Theme.LIGHT
        assert "theme" not in json.dumps(default_board().to_dict())

    finally:
        Path(db_path).unlink(missing_ok=True)


def test_unknown_theme_value_reads_as_dark(snapshots):
    snapshots.set_value(THEME_KEY, "sepia")
    assert snapshots.load_theme() == Theme.DARK
