"""
Tests for the drag reorder engine.
"""
import pytest

from conftest import make_board, ids
from taskboard.errors import ValidationError
from taskboard.reorder import ReorderRequest, reorder, apply_request, move_column


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Same-column moves
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_move_first_to_last_within_column():
    board = reorder(make_board(), "A", 0, "A", 2)
    assert ids(board.column("A")) == ["t2", "t3", "t1"]


def test_move_last_to_first_shifts_others_down():
    board = reorder(make_board(), "A", 2, "A", 0)
    assert ids(board.column("A")) == ["t3", "t1", "t2"]


def test_same_column_dest_index_is_clamped():
    board = reorder(make_board(), "A", 0, "A", 99)
    assert ids(board.column("A")) == ["t2", "t3", "t1"]

    board = reorder(make_board(), "A", 2, "A", -5)
    assert ids(board.column("A")) == ["t3", "t1", "t2"]


def test_move_to_same_position_keeps_order():
    board = reorder(make_board(), "A", 1, "A", 1)
    assert ids(board.column("A")) == ["t1", "t2", "t3"]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Cross-column moves
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_cross_column_move_into_empty_column():
    board = make_board()
    board.column("A").tasks = board.column("A").tasks[:2]  # A = [t1, t2]

    result = reorder(board, "A", 1, "B", 0)

    assert ids(result.column("A")) == ["t1"]
    assert ids(result.column("B")) == ["t2"]
    assert result.column("B").tasks[0].column_id == "B"


def test_cross_column_insert_position_and_clamp():
    result = reorder(make_board(), "A", 0, "C", 0)
    assert ids(result.column("C")) == ["t1", "t4"]

    result = reorder(make_board(), "A", 0, "C", 50)
    assert ids(result.column("C")) == ["t4", "t1"]


def test_cross_column_move_keeps_other_fields():
    before = make_board().column("A").tasks[2]
    result = reorder(make_board(), "A", 2, "B", 0)
    moved = result.column("B").tasks[0]

    assert moved.id == before.id
    assert moved.title == before.title
    assert moved.description == before.description
    assert moved.due_date == before.due_date
    assert moved.column_id == "B"


def test_move_only_touches_source_and_destination():
    original = make_board()
    result = reorder(original, "A", 0, "B", 0)
    assert result.column("C") == original.column("C")


@pytest.mark.parametrize("src,si,dst,di", [
    ("A", 0, "B", 0),
    ("A", 2, "A", 0),
    ("C", 0, "A", 1),
    ("A", 1, "C", 7),
])
def test_move_preserves_total_task_count(src, si, dst, di):
    board = make_board()
    assert reorder(board, src, si, dst, di).task_count() == board.task_count()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Cancelled / invalid drops and purity
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


@pytest.mark.parametrize("src,si,dst,di", [
    ("missing", 0, "A", 0),
    ("A", 0, "missing", 0),
    ("A", 3, "B", 0),
    ("A", -1, "B", 0),
    ("B", 0, "A", 0),  # empty source column
])
def test_invalid_request_returns_input_unchanged(src, si, dst, di):
    board = make_board()
    result = reorder(board, src, si, dst, di)
    assert result is board
    assert result == make_board()


def test_reorder_does_not_mutate_input():
    board = make_board()
    reorder(board, "A", 0, "B", 0)
    assert board == make_board()


def test_apply_request_none_is_noop():
    board = make_board()
    assert apply_request(board, None) is board


def test_apply_request_moves_task():
    board = apply_request(make_board(), ReorderRequest("A", 0, "A", 2))
    assert ids(board.column("A")) == ["t2", "t3", "t1"]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ReorderRequest payloads
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestReorderRequest:

    def test_from_camel_case_payload(self):
        req = ReorderRequest.from_dict({
            "sourceColumnId": "A", "sourceIndex": 1,
            "destColumnId": "B", "destIndex": 0,
        })
        assert req == ReorderRequest("A", 1, "B", 0)

    def test_missing_destination_means_cancelled(self):
        assert ReorderRequest.from_dict({
            "sourceColumnId": "A", "sourceIndex": 1, "destColumnId": None,
        }) is None

    @pytest.mark.parametrize("payload", [
        {"sourceColumnId": "A", "sourceIndex": "1", "destColumnId": "B", "destIndex": 0},
        {"sourceColumnId": "A", "sourceIndex": True, "destColumnId": "B", "destIndex": 0},
        {"sourceColumnId": 3, "sourceIndex": 0, "destColumnId": "B", "destIndex": 0},
        {"sourceColumnId": "A", "sourceIndex": 0, "destColumnId": "B"},
    ])
    def test_malformed_payload_rejected(self, payload):
        with pytest.raises(ValidationError):
            ReorderRequest.from_dict(payload)

    def test_non_object_rejected(self):
        with pytest.raises(ValidationError):
            ReorderRequest.from_dict(["A", 0, "B", 0])


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Column moves
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_move_column_reorders_lanes():
    board = move_column(make_board(), 0, 2)
    assert [c.id for c in board.columns] == ["B", "C", "A"]
    assert ids(board.column("A")) == ["t1", "t2", "t3"]


def test_move_column_invalid_source_is_noop():
    board = make_board()
    assert move_column(board, 5, 0) is board
