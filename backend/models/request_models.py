"""
Pydantic models for decoded ingestion and query payloads.
"""
from datetime import date
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional


class TranscriptInput(BaseModel):
    """Ingestion payload for one transcript."""
    id: str = Field(..., min_length=1, description="Caller-supplied unique transcript id")
    streamer: str = Field(..., min_length=1, description="Owner name (case-sensitive)")
    date: str = Field(..., description="Stream date in YYYY-MM-DD form")
    stream_type: str = Field(default="", description="Category tag, e.g. Stream, VOD, Members")
    stream_title: str = Field(default="", description="Free-text title")
    srt: str = Field(default="", description="Raw SRT document text")

    @field_validator("date")
    @classmethod
    def validate_date(cls, value: str) -> str:
        try:
            date.fromisoformat(value)
        except ValueError:
            raise ValueError("Invalid date format. Expected YYYY-MM-DD")
        if len(value) != 10:
            raise ValueError("Invalid date format. Expected YYYY-MM-DD")
        return value


class QueryData(BaseModel):
    """Search and graph filters."""
    search_text: str = Field(default="", description="Phrase to search for")
    match_whole_word: bool = Field(default=False, description="Require word boundaries around the phrase")
    streamer: str = Field(default="", description="Exact, case-sensitive owner filter")
    stream_title: str = Field(default="", description="Case-insensitive title substring")
    from_date: str = Field(default="", description="Inclusive lower date bound (YYYY-MM-DD)")
    to_date: str = Field(default="", description="Inclusive upper date bound (YYYY-MM-DD)")
    stream_types: List[str] = Field(default_factory=list, description="Category tags, OR-combined")
    snippet_words: Optional[int] = Field(default=None, description="Word buffer for context excerpts")
