"""
Board data model.

A board owns an ordered list of columns; each column owns an ordered list of
tasks. List order is display order and is never sorted implicitly.

Wire names follow the stored document (camelCase: boardTitle, dueDate,
columnId); attribute names are snake_case.
"""
import copy
from datetime import datetime
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Set, Tuple

DEFAULT_TITLE = "My Task Board"
DEFAULT_COLUMN_COLOR = "#6b7280"
DEFAULT_COLUMN_NAME = "New Column"


def is_iso_timestamp(value: str) -> bool:
    """True for an ISO-8601 date or datetime; a trailing Z counts as UTC."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        datetime.fromisoformat(value)
    except ValueError:
        return False
    return True


class Theme(Enum):
    """Display theme preference, stored apart from the board."""
    DARK = "dark"
    LIGHT = "light"

    @classmethod
    def from_str(cls, value: Optional[str]) -> "Theme":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.DARK

    def toggled(self) -> "Theme":
        return Theme.LIGHT if self is Theme.DARK else Theme.DARK


@dataclass
class Task:
    """A titled work item belonging to exactly one column."""

    id: str
    title: str
    column_id: str
    description: str = ""
    due_date: Optional[str] = None  # ISO-8601 text as submitted

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description or "",
            "dueDate": self.due_date or "",
            "columnId": self.column_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """Deserialize from a stored task entry (shape already checked)."""
        return cls(
            id=data.get("id", ""),
            title=data.get("title", ""),
            column_id=data.get("columnId", ""),
            description=data.get("description") or "",
            due_date=data.get("dueDate") or None,
        )


@dataclass
class Column:
    """A named, colored lane holding an ordered task list."""

    id: str
    name: str
    color: str = DEFAULT_COLUMN_COLOR
    tasks: List[Task] = field(default_factory=list)

    def task_index(self, task_id: str) -> Optional[int]:
        for i, task in enumerate(self.tasks):
            if task.id == task_id:
                return i
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "tasks": [t.to_dict() for t in self.tasks],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Column":
        return cls(
            id=data.get("id", ""),
            name=data.get("name") or "",
            color=data.get("color") or DEFAULT_COLUMN_COLOR,
            tasks=[Task.from_dict(t) for t in data.get("tasks", [])],
        )


@dataclass
class Board:
    """The complete document: title plus ordered columns."""

    title: str = DEFAULT_TITLE
    columns: List[Column] = field(default_factory=list)

    # ── Lookups ──────────────────────────────────────────────────────────

    def column(self, column_id: str) -> Optional[Column]:
        for col in self.columns:
            if col.id == column_id:
                return col
        return None

    def locate_task(self, task_id: str) -> Optional[Tuple[Column, int]]:
        """Return (column, index) of the first column holding task_id."""
        for col in self.columns:
            idx = col.task_index(task_id)
            if idx is not None:
                return col, idx
        return None

    def column_ids(self) -> Set[str]:
        return {c.id for c in self.columns}

    def task_ids(self) -> Set[str]:
        return {t.id for c in self.columns for t in c.tasks}

    def task_count(self) -> int:
        return sum(len(c.tasks) for c in self.columns)

    def copy(self) -> "Board":
        return copy.deepcopy(self)

    # ── Serialization ────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "boardTitle": self.title,
            "columns": [c.to_dict() for c in self.columns],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Board":
        title = data.get("boardTitle")
        return cls(
            title=title if isinstance(title, str) else DEFAULT_TITLE,
            columns=[Column.from_dict(c) for c in data.get("columns", [])],
        )


def default_board() -> Board:
    """Seed board used on first run."""
    return Board(
        title=DEFAULT_TITLE,
        columns=[
            Column(id="todo", name="Todo", color="#3b82f6"),
            Column(id="inProgress", name="In Progress", color="#f59e0b"),
            Column(id="done", name="Done", color="#10b981"),
        ],
    )
