"""
Shared fixtures: every test gets its own database file.
"""
import pytest

from core.database import Database
from core.pipeline import TranscriptPipeline
from models.request_models import TranscriptInput


def srt_block(index: int, start: str, text: str, end: str = "00:59:59,000") -> str:
    return f"{index}\n{start},000 --> {end}\n{text}\n\n"


QUERY_SEED = [
    TranscriptInput(
        id="v1",
        streamer="StreamerA",
        date="2023-01-01",
        stream_type="Stream",
        stream_title="StreamerA First Stream",
        srt=srt_block(1, "00:00:01", "Hello from StreamerA"),
    ),
    TranscriptInput(
        id="v2",
        streamer="StreamerA",
        date="2023-02-01",
        stream_type="VOD",
        stream_title="StreamerA Some VOD",
        srt=srt_block(1, "00:00:01", "This is a vod content"),
    ),
    TranscriptInput(
        id="v3",
        streamer="StreamerB",
        date="2023-01-15",
        stream_type="Stream",
        stream_title="StreamerB Stream",
        srt=srt_block(1, "00:00:01", "Hello from StreamerB"),
    ),
    TranscriptInput(
        id="v4",
        streamer="StreamerA",
        date="2023-03-01",
        stream_type="Other",
        stream_title="StreamerA Other Stream",
        srt=srt_block(1, "00:00:01", "Other stream contents"),
    ),
    TranscriptInput(
        id="v5",
        streamer="StreamerC",
        date="2023-01-01",
        stream_type="Stream",
        stream_title="StreamerC Unique Title",
        srt=srt_block(1, "00:00:01", "Specific unique word here hel"),
    ),
]

MEMBERSHIP_SEED = [
    TranscriptInput(
        id="m1",
        streamer="TestStreamer",
        date="2023-01-01",
        stream_type="Members",
        stream_title="TestStreamer Members Stream",
        srt=srt_block(1, "00:00:01", "the secret content"),
    ),
    TranscriptInput(
        id="p1",
        streamer="TestStreamer",
        date="2023-01-02",
        stream_type="Stream",
        stream_title="TestStreamer Public Stream",
        srt=srt_block(1, "00:00:01", "the public content"),
    ),
    TranscriptInput(
        id="m2",
        streamer="OtherStreamer",
        date="2023-01-03",
        stream_type="Members",
        stream_title="OtherStreamer Members Stream",
        srt=srt_block(1, "00:00:01", "the other secret"),
    ),
    TranscriptInput(
        id="p2",
        streamer="OtherStreamer",
        date="2023-01-04",
        stream_type="Stream",
        stream_title="OtherStreamer Public Stream",
        srt=srt_block(1, "00:00:01", "the other public"),
    ),
]


@pytest.fixture
def database(tmp_path):
    return Database(tmp_path / "transcripts.db")


@pytest.fixture
def pipeline(database):
    return TranscriptPipeline(database)


@pytest.fixture
def seeded_pipeline(pipeline):
    for transcript in QUERY_SEED:
        pipeline.ingest_transcript(transcript)
    return pipeline


@pytest.fixture
def membership_pipeline(pipeline):
    for transcript in MEMBERSHIP_SEED:
        pipeline.ingest_transcript(transcript)
    return pipeline
