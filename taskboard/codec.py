"""
Board document codec: export and validated import.

The exported document has the same shape as the persisted snapshot:

    {"boardTitle": str,
     "columns": [{"id", "name", "color",
                  "tasks": [{"id", "title", "description", "dueDate", "columnId"}]}]}

Import input is untrusted. It is parsed and checked in full before a Board is
built, so a failed import never yields a partial board.
"""
import json
import logging
from typing import Any, Dict, Optional, Union

from .errors import MalformedInput, InvalidShape
from .schema import (
    Board,
    Column,
    Task,
    DEFAULT_TITLE,
    DEFAULT_COLUMN_COLOR,
    is_iso_timestamp,
)

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "task-board.json"


def export_board(board: Board) -> Dict[str, Any]:
    """Return the transportable document for a board."""
    return board.to_dict()


def dumps(board: Board, indent: int = None) -> str:
    return json.dumps(export_board(board), indent=indent, ensure_ascii=False)


def import_board(raw: Union[str, bytes, Dict[str, Any]]) -> Board:
    """
    Parse and validate a board document.

    Raises:
        MalformedInput: raw text is not valid JSON
        InvalidShape: parsed value lacks the columns/tasks structure
    """
    if isinstance(raw, dict):
        data = raw
    else:
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise MalformedInput("not UTF-8 text") from e
        try:
            data = json.loads(raw)
        except (ValueError, TypeError) as e:
            raise MalformedInput(str(e)) from e
        except RecursionError as e:
            raise MalformedInput("document is nested too deeply") from e
    return build_board(data)


def build_board(data: Any) -> Board:
    """Validate a parsed document and build a Board from it."""
    if not isinstance(data, dict):
        raise InvalidShape("top level must be an object")
    columns = data.get("columns")
    if not isinstance(columns, list):
        raise InvalidShape("missing 'columns' list")

    title = data.get("boardTitle")
    if title is None:
        title = DEFAULT_TITLE
    elif not isinstance(title, str):
        raise InvalidShape("'boardTitle' must be a string")

    seen_columns = set()
    seen_tasks = set()
    built = []
    for ci, raw_col in enumerate(columns):
        col = _build_column(ci, raw_col)
        if col.id in seen_columns:
            raise InvalidShape(f"duplicate column id '{col.id}'")
        seen_columns.add(col.id)

        for ti, raw_task in enumerate(raw_col["tasks"]):
            task = _build_task(ci, ti, raw_task)
            if task.id in seen_tasks:
                raise InvalidShape(f"duplicate task id '{task.id}'")
            seen_tasks.add(task.id)
            if task.column_id != col.id:
                logger.warning(
                    f"Task {task.id} claimed column '{task.column_id}' but sits in "
                    f"'{col.id}'; re-homing"
                )
                task.column_id = col.id
            col.tasks.append(task)
        built.append(col)

    return Board(title=title, columns=built)


def _require_str(value: Any, where: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidShape(f"{where} must be a non-empty string")
    return value


def _optional_str(value: Any, where: str, default: str = "") -> str:
    if value is None:
        return default
    if not isinstance(value, str):
        raise InvalidShape(f"{where} must be a string")
    return value


def _due_date(value: Any, where: str) -> Optional[str]:
    value = _optional_str(value, where).strip()
    if not value:
        return None
    if not is_iso_timestamp(value):
        raise InvalidShape(f"{where} is not an ISO-8601 date: {value!r}")
    return value


def _build_column(ci: int, raw: Any) -> Column:
    where = f"columns[{ci}]"
    if not isinstance(raw, dict):
        raise InvalidShape(f"{where} must be an object")
    if not isinstance(raw.get("tasks"), list):
        raise InvalidShape(f"{where} is missing its 'tasks' list")
    return Column(
        id=_require_str(raw.get("id"), f"{where}.id"),
        name=_optional_str(raw.get("name"), f"{where}.name"),
        color=_optional_str(raw.get("color"), f"{where}.color") or DEFAULT_COLUMN_COLOR,
    )


def _build_task(ci: int, ti: int, raw: Any) -> Task:
    where = f"columns[{ci}].tasks[{ti}]"
    if not isinstance(raw, dict):
        raise InvalidShape(f"{where} must be an object")
    return Task(
        id=_require_str(raw.get("id"), f"{where}.id"),
        title=_require_str(raw.get("title"), f"{where}.title").strip(),
        column_id=_optional_str(raw.get("columnId"), f"{where}.columnId"),
        description=_optional_str(raw.get("description"), f"{where}.description"),
        due_date=_due_date(raw.get("dueDate"), f"{where}.dueDate"),
    )
