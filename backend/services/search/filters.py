"""
Structured filter clauses for transcript queries.

Clauses are composed from fixed predicate fragments with a parallel list of
bound arguments; caller values never become part of the SQL text.
"""
from typing import Any, List, Optional

from core.config import RESTRICTED_STREAM_TYPE
from models.request_models import QueryData
from models.transcript_models import AccessScope


def escape_like(value: str, escape: str = "\\") -> str:
    """Escape LIKE wildcards so value matches literally."""
    return (
        value.replace(escape, escape + escape)
        .replace("%", escape + "%")
        .replace("_", escape + "_")
    )


class FilterClause:
    """A WHERE clause built from predicate fragments and ordered arguments."""

    def __init__(self):
        self.predicates: List[str] = []
        self.args: List[Any] = []

    def add(self, predicate: str, *args: Any) -> "FilterClause":
        self.predicates.append(predicate)
        self.args.extend(args)
        return self

    def add_in(self, column: str, values: List[Any]) -> "FilterClause":
        placeholders = ", ".join("?" for _ in values)
        return self.add(f"{column} IN ({placeholders})", *values)

    @property
    def sql(self) -> str:
        if not self.predicates:
            return " WHERE 1=1"
        return " WHERE " + " AND ".join(self.predicates)

    def __bool__(self) -> bool:
        return bool(self.predicates)


def add_visibility(clause: FilterClause, access: Optional[AccessScope], restricted_type: str) -> FilterClause:
    """
    Hide restricted transcripts the caller may not see.

    No scope means a trusted caller and adds nothing. With a scope,
    restricted transcripts are kept only for the authorized streamer.
    An empty restricted_type restricts nothing.
    """
    if access is None or not restricted_type:
        return clause
    if access.authorized_streamer is None:
        return clause.add("IFNULL(t.stream_type, '') != ?", restricted_type)
    return clause.add(
        "(IFNULL(t.stream_type, '') != ? OR t.streamer = ?)",
        restricted_type,
        access.authorized_streamer,
    )


def build_filter_clause(
    query: QueryData,
    access: Optional[AccessScope] = None,
    restricted_type: str = RESTRICTED_STREAM_TYPE,
) -> FilterClause:
    """
    Build the metadata filter for a query over transcripts aliased as t.

    streamer and stream type compare case-sensitively; title is a
    case-insensitive substring; date bounds are inclusive.
    """
    clause = FilterClause()

    if query.streamer:
        clause.add("t.streamer = ?", query.streamer)
    if query.stream_title:
        clause.add("t.title LIKE ? ESCAPE '\\'", f"%{escape_like(query.stream_title)}%")
    if query.from_date:
        clause.add("t.date >= ?", query.from_date)
    if query.to_date:
        clause.add("t.date <= ?", query.to_date)
    if query.stream_types:
        clause.add_in("t.stream_type", query.stream_types)

    return add_visibility(clause, access, restricted_type)
