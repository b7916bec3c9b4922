"""
Drag reorder engine.

Turns a drop ("item moved from position A to position B") into a new board.
All functions here are pure: the input board is never mutated, and a request
that cannot be applied returns the input board unchanged (a drag dropped
outside any valid target).
"""
import logging
from dataclasses import dataclass
from typing import Optional, Dict, Any

from .errors import ValidationError
from .schema import Board

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReorderRequest:
    """Outcome of a drag gesture, as handed over by the drag-capture layer."""

    source_column_id: str
    source_index: int
    dest_column_id: str
    dest_index: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["ReorderRequest"]:
        """
        Build a request from the drag layer's camelCase payload.

        Returns None when the drop had no destination (destColumnId missing
        or null). Raises ValidationError on any other malformed field.
        """
        if not isinstance(data, dict):
            raise ValidationError("Reorder request must be an object")
        if data.get("destColumnId") is None:
            return None

        source_column_id = data.get("sourceColumnId")
        dest_column_id = data.get("destColumnId")
        if not isinstance(source_column_id, str) or not isinstance(dest_column_id, str):
            raise ValidationError("sourceColumnId and destColumnId must be strings")

        indexes = {}
        for key in ("sourceIndex", "destIndex"):
            value = data.get(key)
            # bool is an int subclass; reject it explicitly
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValidationError(f"{key} must be an integer")
            indexes[key] = value

        return cls(
            source_column_id=source_column_id,
            source_index=indexes["sourceIndex"],
            dest_column_id=dest_column_id,
            dest_index=indexes["destIndex"],
        )


def _clamp(index: int, length: int) -> int:
    return max(0, min(index, length))


def reorder(
    board: Board,
    source_column_id: str,
    source_index: int,
    dest_column_id: str,
    dest_index: int,
) -> Board:
    """
    Move one task and return the resulting board.

    Same column: the task is removed, then inserted at dest_index in the
    shortened list. Cross column: the task is removed from the source,
    re-homed (column_id) and inserted at dest_index in the destination.
    dest_index is clamped to the valid insertion range either way.
    """
    source = board.column(source_column_id)
    dest = board.column(dest_column_id)
    if source is None or dest is None:
        logger.debug(
            f"Reorder ignored: unknown column ({source_column_id} -> {dest_column_id})"
        )
        return board
    if not 0 <= source_index < len(source.tasks):
        logger.debug(f"Reorder ignored: no task #{source_index} in {source_column_id}")
        return board

    result = board.copy()
    src_col = result.column(source_column_id)
    dst_col = result.column(dest_column_id)

    task = src_col.tasks.pop(source_index)
    task.column_id = dst_col.id
    dst_col.tasks.insert(_clamp(dest_index, len(dst_col.tasks)), task)
    return result


def apply_request(board: Board, request: Optional[ReorderRequest]) -> Board:
    """Apply a ReorderRequest; a missing request is a cancelled drag."""
    if request is None:
        return board
    return reorder(
        board,
        request.source_column_id,
        request.source_index,
        request.dest_column_id,
        request.dest_index,
    )


def move_column(board: Board, source_index: int, dest_index: int) -> Board:
    """Move a whole lane; same array-move semantics as a same-column task move."""
    if not 0 <= source_index < len(board.columns):
        logger.debug(f"Column move ignored: no column #{source_index}")
        return board
    result = board.copy()
    column = result.columns.pop(source_index)
    result.columns.insert(_clamp(dest_index, len(result.columns)), column)
    return result
