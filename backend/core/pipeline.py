"""
Main pipeline orchestration for transcript ingestion and querying.
"""
import logging
from functools import lru_cache
from typing import List, Optional

from core.config import SNIPPET_WORD_BUFFER, configure_logging
from core.config_validator import ConfigValidator, ConfigurationError
from core.database import Database, CancelToken, get_database
from core.errors import StoreFailure
from models.request_models import QueryData, TranscriptInput
from models.transcript_models import (
    AccessScope,
    GraphDataPoint,
    Transcript,
    TranscriptMetadata,
    TranscriptSearchResult,
)
from services.ingestion.srt_parser import parse_srt
from services.indexing.line_store import LineStore
from services.processing.normalizer import normalize_text
from services.processing.snippets import create_snippet
from services.search.matcher_cache import MatcherCache
from services.search.query_planner import QueryPlanner

logger = logging.getLogger(__name__)


class TranscriptPipeline:
    """
    Entry point for the transcript core.

    Ingestion path: SRT parser -> normalizer -> line store and search index.
    Query path: query planner -> store and index -> matcher cache -> excerpts.
    The matcher cache belongs to this pipeline's planner and is shared by
    every query it runs.
    """

    def __init__(
        self,
        database: Optional[Database] = None,
        matcher_cache: Optional[MatcherCache] = None,
        validate: bool = True,
    ):
        self.db = database if database is not None else get_database()
        if validate:
            self.validate_configuration()
        self.store = LineStore(self.db)
        self.planner = QueryPlanner(self.db, matcher_cache if matcher_cache is not None else MatcherCache())

    def validate_configuration(self) -> None:
        """
        Check the store and settings before serving queries.

        Warnings are logged; errors raise ConfigurationError.
        """
        result = ConfigValidator(self.db).validate_all()
        for warning in result["warnings"]:
            logger.warning("Configuration warning: %s", warning)
        if not result["valid"]:
            for error in result["errors"]:
                logger.error("Configuration error: %s", error)
            raise ConfigurationError("; ".join(result["errors"]))

    def ingest_transcript(self, data: TranscriptInput, cancel: Optional[CancelToken] = None) -> int:
        """
        Parse and store a transcript, replacing any transcript with the same id.

        Returns:
            Number of lines stored (0 is valid)
        """
        lines = parse_srt(data.srt)
        metadata = TranscriptMetadata(
            id=data.id,
            streamer=data.streamer,
            date=data.date,
            stream_type=data.stream_type,
            stream_title=data.stream_title,
        )
        try:
            return self.store.upsert_transcript(metadata, lines, cancel=cancel)
        except StoreFailure as e:
            logger.error("Failed to insert transcript %s: %s", data.id, e)
            raise

    def retrieve_transcript(
        self,
        transcript_id: str,
        access: Optional[AccessScope] = None,
        cancel: Optional[CancelToken] = None,
    ) -> Transcript:
        return self.store.retrieve_transcript(transcript_id, access=access, cancel=cancel)

    def retrieve_stream_metadata(
        self,
        transcript_id: str,
        access: Optional[AccessScope] = None,
        cancel: Optional[CancelToken] = None,
    ) -> TranscriptMetadata:
        return self.store.retrieve_stream_metadata(transcript_id, access=access, cancel=cancel)

    def retrieve_all_metadata(self, cancel: Optional[CancelToken] = None) -> List[TranscriptMetadata]:
        return self.store.retrieve_all_metadata(cancel=cancel)

    def search_transcripts(
        self,
        query: QueryData,
        access: Optional[AccessScope] = None,
        cancel: Optional[CancelToken] = None,
    ) -> List[TranscriptSearchResult]:
        return self.planner.query_transcripts(query, access=access, cancel=cancel)

    def single_transcript_graph(
        self,
        transcript_id: str,
        query: QueryData,
        access: Optional[AccessScope] = None,
        cancel: Optional[CancelToken] = None,
    ) -> List[GraphDataPoint]:
        return self.planner.query_single_graph(transcript_id, query, access=access, cancel=cancel)

    def all_transcripts_graph(
        self,
        query: QueryData,
        access: Optional[AccessScope] = None,
        cancel: Optional[CancelToken] = None,
    ) -> List[GraphDataPoint]:
        return self.planner.query_all_graphs(query, access=access, cancel=cancel)

    @staticmethod
    def excerpt(original_text: str, search_text: str, word_buffer: int = SNIPPET_WORD_BUFFER) -> str:
        """Readable window of original_text around search_text."""
        return create_snippet(original_text, normalize_text(original_text), search_text, word_buffer)

    def count_transcripts(self, cancel: Optional[CancelToken] = None) -> int:
        return self.db.count_transcripts(cancel=cancel)

    def ping(self, cancel: Optional[CancelToken] = None) -> bool:
        return self.db.ping(cancel=cancel)


@lru_cache(maxsize=1)
def get_pipeline() -> TranscriptPipeline:
    """Process-wide pipeline: applies LOG_LEVEL, opens DB_PATH and validates on first use."""
    configure_logging()
    return TranscriptPipeline(get_database())
