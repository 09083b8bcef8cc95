"""
Durable store for transcript metadata and lines, kept in step with the
full-text search index.
"""
import logging
from typing import List, Optional

from core.config import RESTRICTED_STREAM_TYPE
from core.database import Database, CancelToken
from core.errors import NotFoundError
from core.transaction import TransactionManager
from models.transcript_models import (
    AccessScope,
    Transcript,
    TranscriptLine,
    TranscriptMetadata,
)
from services.indexing.search_index import SearchIndex
from services.processing.normalizer import normalize_text
from services.search.filters import FilterClause, add_visibility

logger = logging.getLogger(__name__)

METADATA_COLUMNS = "t.id, t.streamer, t.date, t.title, t.stream_type"


def _row_to_metadata(row) -> TranscriptMetadata:
    return TranscriptMetadata(
        id=row["id"],
        streamer=row["streamer"],
        date=row["date"],
        stream_type=row["stream_type"] or "",
        stream_title=row["title"] or "",
    )


class LineStore:
    """
    Transcript and line persistence.

    Every line mutation updates the matching search index entry on the same
    connection, inside the same transaction, so a committed line is
    searchable immediately and a deleted line is gone immediately.
    """

    def __init__(
        self,
        database: Database,
        search_index: Optional[SearchIndex] = None,
        restricted_type: str = RESTRICTED_STREAM_TYPE,
    ):
        self.db = database
        self.transactions = TransactionManager(database)
        self.search_index = search_index or SearchIndex()
        self.restricted_type = restricted_type

    def upsert_transcript(
        self,
        metadata: TranscriptMetadata,
        lines: List[TranscriptLine],
        cancel: Optional[CancelToken] = None,
    ) -> int:
        """
        Replace a transcript and all of its lines atomically.

        An existing transcript with the same id is deleted together with its
        lines and index entries, then the new rows are inserted. The whole
        replacement commits or rolls back as one unit; IMMEDIATE locking
        keeps concurrent upserts from interleaving.

        Returns:
            Number of lines stored
        """
        with self.transactions.transaction("IMMEDIATE", cancel=cancel) as conn:
            removed = self.search_index.remove_transcript(conn, metadata.id)
            conn.execute("DELETE FROM transcript_lines WHERE transcript_id = ?", (metadata.id,))
            conn.execute("DELETE FROM transcripts WHERE id = ?", (metadata.id,))

            conn.execute(
                "INSERT INTO transcripts (id, streamer, date, title, stream_type) VALUES (?, ?, ?, ?, ?)",
                (metadata.id, metadata.streamer, metadata.date, metadata.stream_title, metadata.stream_type),
            )

            for line in lines:
                clean_text = normalize_text(line.text)
                cursor = conn.execute(
                    "INSERT INTO transcript_lines (transcript_id, start_time, text, clean_text) VALUES (?, ?, ?, ?)",
                    (metadata.id, line.start, line.text, clean_text),
                )
                self.search_index.add(conn, cursor.lastrowid, clean_text)

        if removed:
            logger.info("Replaced transcript %s: %d lines -> %d lines", metadata.id, removed, len(lines))
        else:
            logger.info("Stored transcript %s with %d lines", metadata.id, len(lines))
        return len(lines)

    def update_line_text(self, line_id: int, text: str, cancel: Optional[CancelToken] = None) -> None:
        """Rewrite one line's text, re-deriving its clean text and index entry."""
        with self.transactions.transaction("IMMEDIATE", cancel=cancel) as conn:
            row = conn.execute(
                "SELECT rowid, clean_text FROM transcript_lines WHERE rowid = ?",
                (line_id,),
            ).fetchone()
            if row is None:
                raise NotFoundError(str(line_id), kind="line")

            clean_text = normalize_text(text)
            conn.execute(
                "UPDATE transcript_lines SET text = ?, clean_text = ? WHERE rowid = ?",
                (text, clean_text, line_id),
            )
            self.search_index.replace(conn, line_id, row["clean_text"], clean_text)

    def _visible_metadata(self, conn, transcript_id: str, access: Optional[AccessScope]):
        clause = FilterClause().add("t.id = ?", transcript_id)
        add_visibility(clause, access, self.restricted_type)
        row = conn.execute(
            f"SELECT {METADATA_COLUMNS} FROM transcripts t{clause.sql}",
            tuple(clause.args),
        ).fetchone()
        if row is None:
            raise NotFoundError(transcript_id)
        return _row_to_metadata(row)

    def retrieve_transcript(
        self,
        transcript_id: str,
        access: Optional[AccessScope] = None,
        cancel: Optional[CancelToken] = None,
    ) -> Transcript:
        """
        Retrieve a transcript with its lines ordered by start time.

        Raises:
            NotFoundError: If the id is absent or hidden from the access scope
        """
        with self.db.get_connection(cancel) as conn:
            # One read transaction so metadata and lines come from one snapshot
            conn.execute("BEGIN")
            metadata = self._visible_metadata(conn, transcript_id, access)
            rows = conn.execute(
                "SELECT start_time, text FROM transcript_lines WHERE transcript_id = ? ORDER BY start_time, rowid",
                (transcript_id,),
            ).fetchall()

        lines = [
            TranscriptLine(start=row["start_time"], text=row["text"], id=str(i))
            for i, row in enumerate(rows)
        ]
        return Transcript(metadata=metadata, lines=lines)

    def retrieve_stream_metadata(
        self,
        transcript_id: str,
        access: Optional[AccessScope] = None,
        cancel: Optional[CancelToken] = None,
    ) -> TranscriptMetadata:
        """Retrieve transcript metadata only. Raises NotFoundError like retrieve_transcript."""
        with self.db.get_connection(cancel) as conn:
            return self._visible_metadata(conn, transcript_id, access)

    def retrieve_all_metadata(self, cancel: Optional[CancelToken] = None) -> List[TranscriptMetadata]:
        """All transcript metadata, newest date first. Lines are not loaded."""
        rows = self.db.execute(
            f"SELECT {METADATA_COLUMNS} FROM transcripts t ORDER BY t.date DESC, t.id",
            cancel=cancel,
        )
        return [_row_to_metadata(row) for row in rows]

    def line_count(self, transcript_id: str, cancel: Optional[CancelToken] = None) -> int:
        row = self.db.execute_one(
            "SELECT COUNT(*) AS n FROM transcript_lines WHERE transcript_id = ?",
            (transcript_id,),
            cancel=cancel,
        )
        return row["n"]

    def line_ids(self, transcript_id: str, cancel: Optional[CancelToken] = None) -> List[int]:
        """Row ids of a transcript's lines in start-time order."""
        rows = self.db.execute(
            "SELECT rowid FROM transcript_lines WHERE transcript_id = ? ORDER BY start_time, rowid",
            (transcript_id,),
            cancel=cancel,
        )
        return [row["rowid"] for row in rows]
