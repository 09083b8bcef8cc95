"""
SQLite database connection and initialization.
"""
import sqlite3
import logging
import threading
import time
from pathlib import Path
from typing import Optional, List
from contextlib import contextmanager
from functools import lru_cache

from .config import DB_PATH, SCHEMA_FILE, FTS_TOKENIZER, DB_BUSY_TIMEOUT_SEC
from .errors import StoreFailure, OperationCancelled

logger = logging.getLogger(__name__)

# Number of SQLite VM instructions between cancellation checks
PROGRESS_CHECK_INTERVAL = 1000


class CancelToken:
    """
    Caller-supplied cancellation for store operations.

    A token is cancelled once its timeout elapses or cancel() is called,
    possibly from another thread. Store operations holding the token are
    interrupted at the next progress check.
    """

    def __init__(self, timeout: Optional[float] = None, event: Optional[threading.Event] = None):
        self.deadline = time.monotonic() + timeout if timeout is not None else None
        self.event = event or threading.Event()

    def cancel(self) -> None:
        self.event.set()

    @property
    def cancelled(self) -> bool:
        if self.event.is_set():
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise OperationCancelled("operation cancelled before it started")


class Database:
    """Database manager for SQLite operations."""

    def __init__(self, db_path: Path = DB_PATH, busy_timeout: float = DB_BUSY_TIMEOUT_SEC):
        self.db_path = db_path
        self.busy_timeout = busy_timeout
        self.ensure_tables()

    def _connect(self, cancel: Optional[CancelToken] = None) -> sqlite3.Connection:
        if cancel is not None:
            cancel.raise_if_cancelled()
        try:
            conn = sqlite3.connect(str(self.db_path), timeout=self.busy_timeout, isolation_level=None)
        except sqlite3.Error as e:
            raise StoreFailure(f"failed to open database {self.db_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        if cancel is not None:
            conn.set_progress_handler(lambda: 1 if cancel.cancelled else 0, PROGRESS_CHECK_INTERVAL)
        return conn

    @staticmethod
    def translate_error(e: sqlite3.Error, cancel: Optional[CancelToken] = None) -> StoreFailure:
        """Map a sqlite3 error onto the domain error hierarchy."""
        if cancel is not None and cancel.cancelled:
            logger.warning("Store operation cancelled: %s", e)
            return OperationCancelled(f"operation cancelled: {e}")
        return StoreFailure(str(e))

    @contextmanager
    def get_connection(self, cancel: Optional[CancelToken] = None):
        """Context manager for database connections."""
        conn = self._connect(cancel)
        try:
            yield conn
            if conn.in_transaction:
                conn.commit()
        except sqlite3.Error as e:
            if conn.in_transaction:
                conn.rollback()
            raise self.translate_error(e, cancel) from e
        except Exception:
            if conn.in_transaction:
                conn.rollback()
            raise
        finally:
            conn.close()

    def get_connection_raw(self, cancel: Optional[CancelToken] = None) -> sqlite3.Connection:
        """Get a raw connection (for operations that need manual commit)."""
        return self._connect(cancel)

    def ensure_tables(self):
        """Create all tables if they don't exist."""
        with open(SCHEMA_FILE, "r") as f:
            schema = f.read().replace("{fts_tokenizer}", FTS_TOKENIZER)

        with self.get_connection() as conn:
            conn.execute("PRAGMA journal_mode = WAL")
            conn.executescript(schema)

    def execute(
        self,
        query: str,
        params: Optional[tuple] = None,
        cancel: Optional[CancelToken] = None,
    ) -> List[sqlite3.Row]:
        """Execute a SELECT query and return results."""
        with self.get_connection(cancel) as conn:
            cursor = conn.execute(query, params or ())
            return cursor.fetchall()

    def execute_one(
        self,
        query: str,
        params: Optional[tuple] = None,
        cancel: Optional[CancelToken] = None,
    ) -> Optional[sqlite3.Row]:
        """Execute a SELECT query and return first result."""
        results = self.execute(query, params, cancel)
        return results[0] if results else None

    def ping(self, cancel: Optional[CancelToken] = None) -> bool:
        """Health check: the database file can be opened and queried."""
        row = self.execute_one("SELECT 1", cancel=cancel)
        return row is not None

    def count_transcripts(self, cancel: Optional[CancelToken] = None) -> int:
        """Status check: number of stored transcripts."""
        row = self.execute_one("SELECT COUNT(id) AS n FROM transcripts", cancel=cancel)
        return row["n"]


@lru_cache(maxsize=1)
def get_database() -> Database:
    """Return the process-wide database at the configured DB_PATH."""
    logger.info("Opening transcript database at %s", DB_PATH)
    return Database()
