"""
BoardStore: the single owner of the board and its mutation API.

Every mutation works on a private draft copy, validates, then commits:
the snapshot is persisted first and only then swapped in as the current
board, so a rejected or failed operation leaves the board exactly as it was.
Collaborators only ever receive copies.
"""
import copy
import logging
import re
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from .codec import export_board, import_board
from .errors import BoardError, NotFound, ColumnNotEmpty, ValidationError
from .ids import new_id
from .reorder import ReorderRequest, apply_request, move_column as _move_column
from .schema import (
    Board,
    Column,
    Task,
    DEFAULT_COLUMN_COLOR,
    DEFAULT_COLUMN_NAME,
    default_board,
    is_iso_timestamp,
)

logger = logging.getLogger(__name__)

COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

Subscriber = Callable[[Board], None]


# ── Validation helpers ───────────────────────────────────────────────────────


def clean_title(title: Any) -> str:
    """Task titles are required and stored trimmed."""
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Task title is required")
    return title.strip()


def clean_due_date(value: Any) -> Optional[str]:
    """Accept an ISO-8601 date/datetime string; empty means no due date."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("Due date must be an ISO-8601 string")
    value = value.strip()
    if not value:
        return None
    if not is_iso_timestamp(value):
        raise ValidationError(f"Invalid due date: {value!r}")
    return value


def clean_color(value: Any) -> str:
    if not isinstance(value, str) or not COLOR_RE.match(value.strip()):
        raise ValidationError(f"Invalid color: {value!r} (expected #rgb or #rrggbb)")
    return value.strip().lower()


# ── Store ────────────────────────────────────────────────────────────────────


class BoardStore:
    """Owns the committed board; all changes go through its methods."""

    def __init__(self, persistence=None, board: Optional[Board] = None):
        """
        Args:
            persistence: object with save(board) (e.g. SnapshotStore), or None
                for an in-memory board. When board is not given it is loaded
                from persistence, falling back to the default seed.
            board: initial board, used as-is.
        """
        self.persistence = persistence
        if board is None:
            board = persistence.load() if persistence is not None else default_board()
        self._board: Board = board
        self._lock = threading.RLock()
        self.subscribers: List[Subscriber] = []

    # ── Read access ──────────────────────────────────────────────────────

    @property
    def board(self) -> Board:
        """A copy of the committed board."""
        return self._board.copy()

    def find_task(self, task_id: str) -> Task:
        found = self._board.locate_task(task_id)
        if found is None:
            raise NotFound("task", task_id)
        col, idx = found
        return copy.deepcopy(col.tasks[idx])

    def get_column(self, column_id: str) -> Column:
        col = self._board.column(column_id)
        if col is None:
            raise NotFound("column", column_id)
        return copy.deepcopy(col)

    def export_document(self) -> Dict[str, Any]:
        return export_board(self._board)

    # ── Subscriptions ────────────────────────────────────────────────────

    def subscribe(self, callback: Subscriber) -> None:
        """Register a callback receiving a copy of each committed board."""
        self.subscribers.append(callback)

    def _emit(self, board: Board) -> None:
        for callback in self.subscribers:
            try:
                callback(board.copy())
            except Exception:
                logger.exception(f"Board subscriber {callback!r} failed")

    # ── Commit machinery ─────────────────────────────────────────────────

    def _commit(self, board: Board, action: str) -> None:
        """Persist then swap in. Caller holds the lock."""
        if self.persistence is not None:
            self.persistence.save(board)
        self._board = board
        logger.debug(f"Committed: {action}")

    def _mutate(self, action: str, change: Callable[[Board], Any]) -> Any:
        """Run change() on a draft copy and commit it if it returns normally."""
        with self._lock:
            draft = self._board.copy()
            try:
                result = change(draft)
            except BoardError as e:
                logger.info(f"Rejected {action}: {e}")
                raise
            self._commit(draft, action)
        self._emit(draft)
        return copy.deepcopy(result)

    def _replace(self, action: str, compute: Callable[[Board], Board]) -> Board:
        """Commit the board returned by compute(), unless it is unchanged."""
        with self._lock:
            current = self._board
            new = compute(current)
            if new is current:
                return current.copy()
            self._commit(new, action)
        self._emit(new)
        return new.copy()

    @staticmethod
    def _column(board: Board, column_id: str) -> Column:
        col = board.column(column_id)
        if col is None:
            raise NotFound("column", column_id)
        return col

    # ── Board ────────────────────────────────────────────────────────────

    def rename_board(self, title: str) -> Board:
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("Board title is required")

        def change(board: Board) -> Board:
            board.title = title.strip()
            return board

        return self._mutate("rename board", change)

    # ── Columns ──────────────────────────────────────────────────────────

    def add_column(self, name: str = "") -> Column:
        """Append a new empty column with the default color."""
        name = (name or "").strip() or DEFAULT_COLUMN_NAME

        def change(board: Board) -> Column:
            col = Column(id=new_id(board.column_ids()), name=name, color=DEFAULT_COLUMN_COLOR)
            board.columns.append(col)
            return col

        return self._mutate(f"add column {name!r}", change)

    def rename_column(self, column_id: str, name: str) -> Column:
        if not isinstance(name, str):
            raise ValidationError("Column name must be a string")

        def change(board: Board) -> Column:
            col = self._column(board, column_id)
            col.name = name.strip()
            return col

        return self._mutate(f"rename column {column_id}", change)

    def set_column_color(self, column_id: str, color: str) -> Column:
        color = clean_color(color)

        def change(board: Board) -> Column:
            col = self._column(board, column_id)
            col.color = color
            return col

        return self._mutate(f"recolor column {column_id}", change)

    def update_column(
        self,
        column_id: str,
        name: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Column:
        """Rename and/or recolor a column in a single commit."""
        if name is None and color is None:
            raise ValidationError("Provide a name and/or a color")
        if name is not None and not isinstance(name, str):
            raise ValidationError("Column name must be a string")
        if color is not None:
            color = clean_color(color)

        def change(board: Board) -> Column:
            col = self._column(board, column_id)
            if name is not None:
                col.name = name.strip()
            if color is not None:
                col.color = color
            return col

        return self._mutate(f"update column {column_id}", change)

    def delete_column(self, column_id: str) -> None:
        """Remove an empty column; a column with tasks is never removed."""

        def change(board: Board) -> None:
            col = self._column(board, column_id)
            if col.tasks:
                raise ColumnNotEmpty(column_id, len(col.tasks))
            board.columns.remove(col)

        self._mutate(f"delete column {column_id}", change)

    def move_column(self, source_index: int, dest_index: int) -> Board:
        return self._replace(
            f"move column {source_index} -> {dest_index}",
            lambda board: _move_column(board, source_index, dest_index),
        )

    # ── Tasks ────────────────────────────────────────────────────────────

    def add_task(
        self,
        column_id: str,
        title: str,
        description: Optional[str] = None,
        due_date: Optional[str] = None,
    ) -> Task:
        """Append a new task to a column."""
        title = clean_title(title)
        due_date = clean_due_date(due_date)

        def change(board: Board) -> Task:
            col = self._column(board, column_id)
            task = Task(
                id=new_id(board.task_ids()),
                title=title,
                column_id=col.id,
                description=description or "",
                due_date=due_date,
            )
            col.tasks.append(task)
            return task

        return self._mutate(f"add task to {column_id}", change)

    def update_task(self, task: Task) -> Task:
        """
        Replace a task's fields by id.

        Unchanged column: the task keeps its position. Changed column: the task
        is removed from every column holding it and appended to the new one.
        """
        title = clean_title(task.title)
        due_date = clean_due_date(task.due_date)

        def change(board: Board) -> Task:
            found = board.locate_task(task.id)
            if found is None:
                raise NotFound("task", task.id)
            current_col, idx = found
            target = self._column(board, task.column_id)

            updated = Task(
                id=task.id,
                title=title,
                column_id=target.id,
                description=task.description or "",
                due_date=due_date,
            )
            if target.id == current_col.id:
                current_col.tasks[idx] = updated
            else:
                for col in board.columns:
                    col.tasks = [t for t in col.tasks if t.id != task.id]
                target.tasks.append(updated)
            return updated

        return self._mutate(f"update task {task.id}", change)

    def delete_task(self, task_id: str, column_id: str) -> bool:
        """Remove a task from the named column. Returns False if it was not there."""
        def change(board: Board) -> bool:
            target = self._column(board, column_id)
            target.tasks = [t for t in target.tasks if t.id != task_id]
            return True

        with self._lock:
            col = self._board.column(column_id)
            if col is None or col.task_index(task_id) is None:
                logger.info(f"Delete ignored: task {task_id} not in column {column_id}")
                return False
            return self._mutate(f"delete task {task_id}", change)

    def move_task(
        self,
        source_column_id: str,
        source_index: int,
        dest_column_id: str,
        dest_index: int,
    ) -> Board:
        """Apply a drag drop; an inapplicable drop leaves the board unchanged."""
        return self.apply(
            ReorderRequest(source_column_id, source_index, dest_column_id, dest_index)
        )

    def apply(self, request: Optional[ReorderRequest]) -> Board:
        if request is None:
            return self.board
        return self._replace(
            f"move task {request.source_column_id}[{request.source_index}] -> "
            f"{request.dest_column_id}[{request.dest_index}]",
            lambda board: apply_request(board, request),
        )

    # ── Import ───────────────────────────────────────────────────────────

    def import_document(self, raw: Union[str, bytes, Dict[str, Any]]) -> Board:
        """
        Replace the whole board with an imported document.

        MalformedInput / InvalidShape propagate before anything is touched.
        """
        imported = import_board(raw)
        logger.info(
            f"Importing board {imported.title!r}: {len(imported.columns)} columns, "
            f"{imported.task_count()} tasks"
        )
        return self._replace("import", lambda _current: imported)

    def summary(self) -> Tuple[int, int]:
        """(column count, task count) of the committed board."""
        return len(self._board.columns), self._board.task_count()
