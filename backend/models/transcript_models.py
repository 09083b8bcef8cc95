"""
Data models for transcripts, lines and query results.
"""
from dataclasses import dataclass, field, asdict
from typing import Optional, List, Dict, Any


@dataclass
class TranscriptLine:
    """One timestamped utterance; start is hh:mm:ss"""
    start: str
    text: str
    id: str = ""  # Sequential position within the transcript, set on retrieval

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TranscriptMetadata:
    """Transcript row without its lines"""
    id: str
    streamer: str
    date: str  # YYYY-MM-DD
    stream_type: str = ""
    stream_title: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Transcript:
    """Complete stored transcript"""
    metadata: TranscriptMetadata
    lines: List[TranscriptLine] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.metadata.id

    @property
    def full_text(self) -> str:
        """Concatenated text from all lines"""
        return " ".join(line.text for line in self.lines)

    def to_dict(self) -> Dict[str, Any]:
        data = self.metadata.to_dict()
        data["transcript_lines"] = [line.to_dict() for line in self.lines]
        return data


@dataclass
class SearchContext:
    """A matching line attached to a search result"""
    start_time: str
    line: str
    excerpt: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"start_time": self.start_time, "line": self.line}
        if self.excerpt is not None:
            data["excerpt"] = self.excerpt
        return data


@dataclass
class TranscriptSearchResult:
    """A transcript that matched a search, with its matching lines"""
    id: str
    streamer: str
    date: str
    stream_type: str
    title: str
    contexts: List[SearchContext] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "streamer": self.streamer,
            "date": self.date,
            "stream_type": self.stream_type,
            "title": self.title,
            "contexts": [c.to_dict() for c in self.contexts],
        }


@dataclass(frozen=True)
class GraphDataPoint:
    """x is hh:mm:ss for single-transcript series, YYYY-MM-DD for corpus series"""
    x: str
    y: int

    def to_dict(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class AccessScope:
    """
    Decoded result of the membership gate.

    authorized_streamer is the streamer whose restricted transcripts the
    caller may see, or None for an anonymous caller.
    """
    authorized_streamer: Optional[str] = None
