"""
Query planning for transcript search and match-frequency graphs.

Full-text matching narrows candidates through the FTS5 index; a regex pass
then enforces whole-word boundaries the index cannot express and counts
occurrences within each matching line.
"""
import logging
from collections import defaultdict
from typing import Dict, List, Optional

from core.config import MAX_CONTEXT_LINES, RESTRICTED_STREAM_TYPE
from core.database import Database, CancelToken
from models.request_models import QueryData
from models.transcript_models import (
    AccessScope,
    GraphDataPoint,
    SearchContext,
    TranscriptSearchResult,
)
from services.indexing.search_index import build_fts_query
from services.processing.normalizer import normalize_text
from services.processing.snippets import create_snippet
from services.search.filters import FilterClause, add_visibility, build_filter_clause
from services.search.matcher_cache import MatcherCache

logger = logging.getLogger(__name__)

LINE_MATCH_JOIN = """
    JOIN transcript_lines tl ON t.id = tl.transcript_id
    JOIN transcript_search ts ON tl.rowid = ts.rowid
"""

WHOLE_WORD_FUNCTION = "whole_word_match"


class QueryPlanner:
    """Builds and runs document search and graph queries."""

    def __init__(
        self,
        database: Database,
        matcher_cache: Optional[MatcherCache] = None,
        max_context_lines: int = MAX_CONTEXT_LINES,
        restricted_type: str = RESTRICTED_STREAM_TYPE,
    ):
        self.db = database
        self.matchers = matcher_cache if matcher_cache is not None else MatcherCache()
        self.max_context_lines = max_context_lines
        self.restricted_type = restricted_type

    def query_transcripts(
        self,
        query: QueryData,
        access: Optional[AccessScope] = None,
        cancel: Optional[CancelToken] = None,
    ) -> List[TranscriptSearchResult]:
        """
        Search transcripts by metadata filters and an optional phrase.

        Results are ordered by date, newest first. When a phrase is given,
        each result carries up to max_context_lines matching lines ordered
        by start time, fetched for all results in one query. With
        match_whole_word, lines must also contain the phrase as a whole
        word, and transcripts left without any such line are dropped.
        """
        phrase = query.search_text
        if phrase and not normalize_text(phrase):
            # Nothing searchable survives normalization
            return []

        whole_word = bool(phrase) and query.match_whole_word
        if whole_word:
            # Compile before touching the store so failures surface as-is
            word_matcher = self.matchers.get_matcher(phrase, whole_word=True, ignore_case=True, original_text=True)

        clause = build_filter_clause(query, access, self.restricted_type)
        sql = "SELECT t.id, t.streamer, t.date, t.title, t.stream_type FROM transcripts t"
        if phrase:
            sql += LINE_MATCH_JOIN
            clause.add("ts.clean_text MATCH ?", build_fts_query(phrase))
        sql += clause.sql
        if phrase:
            sql += " GROUP BY t.id"
        sql += " ORDER BY t.date DESC, t.id"

        with self.db.get_connection(cancel) as conn:
            conn.execute("BEGIN")
            rows = conn.execute(sql, tuple(clause.args)).fetchall()

            results = [
                TranscriptSearchResult(
                    id=row["id"],
                    streamer=row["streamer"],
                    date=row["date"],
                    stream_type=row["stream_type"] or "",
                    title=row["title"] or "",
                )
                for row in rows
            ]
            if not results or not phrase:
                return results

            if whole_word:
                conn.create_function(
                    WHOLE_WORD_FUNCTION,
                    1,
                    lambda text: 1 if word_matcher.search(text or "") else 0,
                    deterministic=True,
                )
            by_id = {result.id: result for result in results}
            for row in self._fetch_contexts(conn, query, access, whole_word):
                excerpt = None
                if query.snippet_words is not None:
                    excerpt = create_snippet(row["text"], row["clean_text"], phrase, query.snippet_words)
                by_id[row["transcript_id"]].contexts.append(
                    SearchContext(start_time=row["start_time"], line=row["text"], excerpt=excerpt)
                )

        if whole_word:
            results = [result for result in results if result.contexts]

        logger.debug("Search %r matched %d transcripts", phrase, len(results))
        return results

    def _fetch_contexts(self, conn, query: QueryData, access: Optional[AccessScope], whole_word: bool):
        """Matching lines for every transcript the search selected, ranked per transcript."""
        clause = build_filter_clause(query, access, self.restricted_type)
        clause.add("ts.clean_text MATCH ?", build_fts_query(query.search_text))
        if whole_word:
            clause.add(f"{WHOLE_WORD_FUNCTION}(tl.text) = 1")

        sql = f"""
            WITH ranked_contexts AS (
                SELECT
                    tl.transcript_id,
                    tl.start_time,
                    tl.text,
                    tl.clean_text,
                    ROW_NUMBER() OVER (
                        PARTITION BY tl.transcript_id
                        ORDER BY tl.start_time ASC, tl.rowid ASC
                    ) AS rn
                FROM transcripts t
                {LINE_MATCH_JOIN}
                {clause.sql}
            )
            SELECT transcript_id, start_time, text, clean_text
            FROM ranked_contexts
            WHERE rn <= ?
            ORDER BY transcript_id, rn
        """
        return conn.execute(sql, (*clause.args, self.max_context_lines)).fetchall()

    def query_single_graph(
        self,
        transcript_id: str,
        query: QueryData,
        access: Optional[AccessScope] = None,
        cancel: Optional[CancelToken] = None,
    ) -> List[GraphDataPoint]:
        """
        Occurrences of the phrase per line start time within one transcript.

        Lines sharing a start time are summed. Points are ordered by time and
        only times with at least one occurrence appear.
        """
        phrase = query.search_text
        if not normalize_text(phrase):
            return []
        matcher = self.matchers.get_matcher(phrase, query.match_whole_word)

        clause = FilterClause().add("t.id = ?", transcript_id)
        add_visibility(clause, access, self.restricted_type)
        clause.add("ts.clean_text MATCH ?", build_fts_query(phrase))
        sql = (
            "SELECT tl.start_time AS x, tl.clean_text FROM transcripts t"
            + LINE_MATCH_JOIN
            + clause.sql
            + " ORDER BY tl.start_time"
        )
        rows = self.db.execute(sql, tuple(clause.args), cancel=cancel)
        return self._aggregate(rows, matcher)

    def query_all_graphs(
        self,
        query: QueryData,
        access: Optional[AccessScope] = None,
        cancel: Optional[CancelToken] = None,
    ) -> List[GraphDataPoint]:
        """
        Occurrences of the phrase per transcript date across filtered transcripts.

        Uses the same metadata filters as query_transcripts. Points are
        ordered by date, oldest first.
        """
        phrase = query.search_text
        if not normalize_text(phrase):
            return []
        matcher = self.matchers.get_matcher(phrase, query.match_whole_word)

        clause = build_filter_clause(query, access, self.restricted_type)
        clause.add("ts.clean_text MATCH ?", build_fts_query(phrase))
        sql = "SELECT t.date AS x, tl.clean_text FROM transcripts t" + LINE_MATCH_JOIN + clause.sql
        rows = self.db.execute(sql, tuple(clause.args), cancel=cancel)
        return self._aggregate(rows, matcher)

    @staticmethod
    def _aggregate(rows, matcher) -> List[GraphDataPoint]:
        counts: Dict[str, int] = defaultdict(int)
        for row in rows:
            matches = sum(1 for _ in matcher.finditer(row["clean_text"]))
            if matches:
                counts[row["x"]] += matches
        return [GraphDataPoint(x=x, y=counts[x]) for x in sorted(counts)]
