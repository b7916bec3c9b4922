"""Shared fixtures for task board tests."""

import sys
from pathlib import Path

import pytest

# Ensure the package is importable without installation
sys.path.insert(0, str(Path(__file__).parent.parent))

from taskboard.board import BoardStore
from taskboard.schema import Board, Column, Task
from taskboard.store import SnapshotStore


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "taskboard.db")


@pytest.fixture
def snapshots(db_path):
    return SnapshotStore(db_path)


@pytest.fixture
def board_store(snapshots):
    """BoardStore backed by a fresh database (starts from the seed)."""
    return BoardStore(snapshots)


def make_board() -> Board:
    """Column A = [t1, t2, t3], column B = [], column C = [t4]."""
    return Board(
        title="Sprint",
        columns=[
            Column(id="A", name="Alpha", color="#111111", tasks=[
                Task(id="t1", title="one", column_id="A"),
                Task(id="t2", title="two", column_id="A", description="second"),
                Task(id="t3", title="three", column_id="A", due_date="2024-05-01T09:30"),
            ]),
            Column(id="B", name="Beta", color="#222222"),
            Column(id="C", name="Gamma", color="#333333", tasks=[
                Task(id="t4", title="four", column_id="C"),
            ]),
        ],
    )


@pytest.fixture
def sample_board():
    return make_board()


@pytest.fixture
def populated_store(snapshots):
    """BoardStore holding make_board(), persisted."""
    store = BoardStore(snapshots, board=make_board())
    snapshots.save(store.board)
    return store


def ids(column) -> list:
    return [t.id for t in column.tasks]
