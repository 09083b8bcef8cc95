"""
Configuration validation for the transcript search backend.
Validates database capabilities, schema and settings on startup.
"""
import sqlite3
from typing import List, Dict, Any, Optional

from core.database import Database

REQUIRED_TABLES = [
    "transcripts",
    "transcript_lines",
    "transcript_search",
]


class ConfigurationError(Exception):
    """Raised when configuration is invalid."""
    pass


class ConfigValidator:
    """Validates system configuration before serving queries."""

    def __init__(self, database: Optional[Database] = None):
        self.database = database
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def validate_all(self) -> Dict[str, Any]:
        """
        Run all validation checks.

        Returns:
            {
                "valid": bool,
                "errors": List[str],
                "warnings": List[str]
            }
        """
        self.errors = []
        self.warnings = []

        # Run all checks
        self._validate_fts5_support()
        self._validate_database()
        self._validate_config_values()

        return {
            "valid": len(self.errors) == 0,
            "errors": self.errors,
            "warnings": self.warnings
        }

    def _validate_fts5_support(self):
        """Check that the linked SQLite library was built with FTS5."""
        conn = sqlite3.connect(":memory:")
        try:
            conn.execute("CREATE VIRTUAL TABLE fts5_probe USING fts5(content)")
        except sqlite3.OperationalError as e:
            self.errors.append(
                f"SQLite {sqlite3.sqlite_version} lacks FTS5 support: {e}"
            )
        finally:
            conn.close()

    def _validate_database(self):
        """Check that database is accessible and schema is initialized."""
        if self.database is None:
            self.warnings.append("No database configured; schema check skipped.")
            return

        try:
            for table in REQUIRED_TABLES:
                result = self.database.execute_one(
                    "SELECT name FROM sqlite_master WHERE name = ?",
                    (table,)
                )
                if not result:
                    self.errors.append(
                        f"Required database table missing: {table}. "
                        "Run schema initialization."
                    )

        except Exception as e:
            self.errors.append(f"Database connection error: {e}")

    def _validate_config_values(self):
        """Validate configuration value ranges and types."""
        from core.config import (
            MAX_CONTEXT_LINES,
            SNIPPET_WORD_BUFFER,
            DB_BUSY_TIMEOUT_SEC,
            RESTRICTED_STREAM_TYPE,
        )

        if MAX_CONTEXT_LINES < 1:
            self.errors.append(
                f"MAX_CONTEXT_LINES ({MAX_CONTEXT_LINES}) must be >= 1"
            )

        if SNIPPET_WORD_BUFFER < 0:
            self.errors.append(
                f"SNIPPET_WORD_BUFFER ({SNIPPET_WORD_BUFFER}) must be >= 0"
            )

        if DB_BUSY_TIMEOUT_SEC <= 0:
            self.errors.append(
                f"DB_BUSY_TIMEOUT_SEC ({DB_BUSY_TIMEOUT_SEC}) must be > 0"
            )

        if not RESTRICTED_STREAM_TYPE:
            self.warnings.append(
                "RESTRICTED_STREAM_TYPE is empty; no stream type is access-restricted"
            )

    def raise_if_invalid(self) -> None:
        """Run validate_all and raise ConfigurationError listing any errors."""
        result = self.validate_all()
        if not result["valid"]:
            raise ConfigurationError("; ".join(result["errors"]))
