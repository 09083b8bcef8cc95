"""
Database transaction management with rollback support.
"""
import sqlite3
import logging
from typing import Optional
from contextlib import contextmanager

from core.database import Database, CancelToken

logger = logging.getLogger(__name__)

ISOLATION_LEVELS = ("DEFERRED", "IMMEDIATE", "EXCLUSIVE")


class TransactionManager:
    """Runs units of work as single all-or-nothing SQLite transactions."""

    def __init__(self, database: Database):
        self.db = database

    @contextmanager
    def transaction(
        self,
        isolation_level: Optional[str] = None,
        cancel: Optional[CancelToken] = None,
    ):
        """
        Context manager for database transactions.

        Usage:
            with transaction_manager.transaction("IMMEDIATE") as conn:
                conn.execute(...)
                conn.execute(...)
                # If exception raised, all writes rolled back

        Args:
            isolation_level: Optional SQLite isolation level
                - None: Default (DEFERRED)
                - "IMMEDIATE": Take the write lock immediately
                - "EXCLUSIVE": Exclusive lock
            cancel: Optional token that interrupts the transaction

        Yields:
            Connection object with an open transaction
        """
        level = (isolation_level or "DEFERRED").upper()
        if level not in ISOLATION_LEVELS:
            raise ValueError(f"Unknown isolation level: {isolation_level}")

        conn = self.db.get_connection_raw(cancel)

        try:
            # Start transaction
            conn.execute(f"BEGIN {level}")

            yield conn

            # Commit transaction
            conn.commit()

        except sqlite3.Error as e:
            if conn.in_transaction:
                conn.rollback()
            logger.error("Transaction rolled back: %s", e)
            raise Database.translate_error(e, cancel) from e

        except Exception:
            # Rollback transaction
            if conn.in_transaction:
                conn.rollback()

            # Re-raise exception
            raise

        finally:
            conn.close()
