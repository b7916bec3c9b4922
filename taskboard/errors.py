"""
Errors raised by the board engine.

Every error carries a message that can be shown to the user as-is.
A rejected operation always leaves the committed board unchanged.
"""


class BoardError(Exception):
    """Base for all board-specific errors."""
    pass


class NotFound(BoardError):
    """Raised when a referenced column or task id does not exist."""

    def __init__(self, kind: str, item_id: str):
        super().__init__(f"{kind.capitalize()} '{item_id}' not found.")
        self.kind = kind
        self.item_id = item_id


class ColumnNotEmpty(BoardError):
    """Raised when deleting a column that still holds tasks."""

    def __init__(self, column_id: str, task_count: int):
        super().__init__(
            f"Column '{column_id}' still has {task_count} task(s). "
            "Move or delete them before removing the column."
        )
        self.column_id = column_id
        self.task_count = task_count


class ValidationError(BoardError):
    """Raised when a submitted value fails validation."""
    pass


class ImportFailed(BoardError):
    """Base for import failures; the current board is left untouched."""
    pass


class MalformedInput(ImportFailed):
    """Raised when import text is not valid JSON."""

    def __init__(self, detail: str = ""):
        message = "Invalid file format: not a JSON document."
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class InvalidShape(ImportFailed):
    """Raised when parsed import data lacks required board fields."""

    def __init__(self, detail: str):
        super().__init__(f"Invalid board document: {detail}")
        self.detail = detail


class PersistenceError(BoardError):
    """Raised when a committed snapshot could not be written."""
    pass
