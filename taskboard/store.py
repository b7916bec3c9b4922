"""
Board snapshot storage backend (SQLite).

The database is used as a durable key-value store: one `system_state` row
holds the full board document (key "task-manager"), another the display
theme (key "theme"). Every save writes a whole snapshot, never a diff.
"""
import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .codec import build_board
from .errors import BoardError, PersistenceError
from .schema import Board, Theme, default_board

logger = logging.getLogger(__name__)

BOARD_KEY = "task-manager"
THEME_KEY = "theme"
DEFAULT_DB = Path.home() / ".local" / "share" / "taskboard" / "taskboard.db"


def _connect(db_path: str) -> sqlite3.Connection:
    """Open a connection with WAL mode."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode = WAL")
    return conn


class SnapshotStore:
    """SQLite-backed store for the board snapshot and theme preference."""

    def __init__(self, db_path: Optional[str] = None):
        """Initialize store and create the table if needed."""
        if db_path is None:
            db_path = str(DEFAULT_DB)
        self.db_path = str(Path(db_path).expanduser())
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _init_schema(self):
        with _connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS system_state (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()

    # ── Raw key-value access ─────────────────────────────────────────────

    def get_value(self, key: str) -> Optional[str]:
        with _connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT value FROM system_state WHERE key = ? LIMIT 1", (key,)
            ).fetchone()
        return row["value"] if row else None

    def set_value(self, key: str, value: str) -> None:
        now = datetime.now(timezone.utc).isoformat()
        try:
            with _connect(self.db_path) as conn:
                conn.execute("""
                    INSERT INTO system_state (key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at
                """, (key, value, now))
                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not write '{key}' to {self.db_path}: {e}") from e

    def delete_value(self, key: str) -> None:
        with _connect(self.db_path) as conn:
            conn.execute("DELETE FROM system_state WHERE key = ?", (key,))
            conn.commit()

    # ── Board snapshot ───────────────────────────────────────────────────

    def load(self) -> Board:
        """
        Return the last saved board, or the default seed.

        A missing snapshot is the normal first-run case. An unreadable one is
        logged and also replaced by the seed.
        """
        try:
            raw = self.get_value(BOARD_KEY)
        except sqlite3.Error as e:
            logger.warning(f"Could not read board snapshot from {self.db_path}: {e}")
            return default_board()
        if raw is None:
            logger.info("No saved board; starting from the default seed")
            return default_board()
        try:
            return build_board(json.loads(raw))
        except (ValueError, RecursionError, BoardError) as e:
            logger.warning(f"Saved board is unreadable, using default seed: {e}")
            return default_board()

    def save(self, board: Board) -> None:
        """Write the full board snapshot."""
        payload = json.dumps(board.to_dict(), ensure_ascii=False)
        self.set_value(BOARD_KEY, payload)
        logger.debug(
            f"Saved board snapshot: {len(board.columns)} columns, {board.task_count()} tasks"
        )

    def clear(self) -> None:
        """Drop the saved board; the next load returns the seed."""
        self.delete_value(BOARD_KEY)

    # ── Theme preference ─────────────────────────────────────────────────

    def load_theme(self) -> Theme:
        try:
            return Theme.from_str(self.get_value(THEME_KEY))
        except sqlite3.Error as e:
            logger.warning(f"Could not read theme from {self.db_path}: {e}")
            return Theme.DARK

    def save_theme(self, theme: Theme) -> Theme:
        self.set_value(THEME_KEY, theme.value)
        return theme

    def toggle_theme(self) -> Theme:
        return self.save_theme(self.load_theme().toggled())
