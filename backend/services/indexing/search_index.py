"""
Maintenance of the FTS5 index over transcript line clean text.

transcript_search is an external-content table: it stores only the index,
so every insert, update and delete of a transcript_lines row must be
mirrored here on the same connection, inside the same transaction.
"""
import sqlite3

from services.processing.normalizer import normalize_text


def build_fts_query(search_text: str) -> str:
    """Format a search string as an FTS5 phrase query over clean text."""
    return f'"{normalize_text(search_text)}"'


class SearchIndex:
    """Explicit index maintenance calls for transcript_search."""

    table = "transcript_search"

    def add(self, conn: sqlite3.Connection, rowid: int, clean_text: str) -> None:
        conn.execute(
            f"INSERT INTO {self.table}(rowid, clean_text) VALUES (?, ?)",
            (rowid, clean_text),
        )

    def remove(self, conn: sqlite3.Connection, rowid: int, clean_text: str) -> None:
        # External-content delete must be given the exact indexed value
        conn.execute(
            f"INSERT INTO {self.table}({self.table}, rowid, clean_text) VALUES ('delete', ?, ?)",
            (rowid, clean_text),
        )

    def replace(self, conn: sqlite3.Connection, rowid: int, old_clean_text: str, new_clean_text: str) -> None:
        self.remove(conn, rowid, old_clean_text)
        self.add(conn, rowid, new_clean_text)

    def remove_transcript(self, conn: sqlite3.Connection, transcript_id: str) -> int:
        """Remove the entries of every line of a transcript. Returns the line count."""
        rows = conn.execute(
            "SELECT rowid, clean_text FROM transcript_lines WHERE transcript_id = ?",
            (transcript_id,),
        ).fetchall()
        for row in rows:
            self.remove(conn, row["rowid"], row["clean_text"])
        return len(rows)

    def rebuild(self, conn: sqlite3.Connection) -> None:
        """Re-derive the whole index from transcript_lines."""
        conn.execute(f"INSERT INTO {self.table}({self.table}) VALUES ('rebuild')")

    def entry_count(self, conn: sqlite3.Connection, search_text: str) -> int:
        """Number of indexed lines matching search_text (consistency checks)."""
        row = conn.execute(
            f"SELECT COUNT(*) AS n FROM {self.table} WHERE {self.table} MATCH ?",
            (build_fts_query(search_text),),
        ).fetchone()
        return row["n"]
