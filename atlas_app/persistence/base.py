"""Shared SQLite plumbing for the persistence layer."""

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Union

from ..errors import PersistenceError
from ..logging import get_logger


class SQLiteStore:
    """Base class for SQLite-backed stores.

    Subclasses declare their schema in `_init_database`. Every sqlite3 error
    is rolled back and surfaced as PersistenceError; callers own retries.
    """

    def __init__(self, db_path: Union[str, Path] = "atlas.db"):
        self.db_path = Path(db_path)
        self.logger = get_logger(f"persistence.{type(self).__name__}")
        self._lock = threading.Lock()

        self._init_database()

    def _init_database(self) -> None:
        raise NotImplementedError

    @contextmanager
    def _get_connection(self):
        """Get database connection with proper error handling."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=30.0)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            self.logger.error("Database error", db_path=str(self.db_path), error=str(e))
            raise PersistenceError(
                f"Database error: {e}",
                operation=type(self).__name__,
                target=str(self.db_path),
            ) from e
        finally:
            if conn:
                conn.close()
