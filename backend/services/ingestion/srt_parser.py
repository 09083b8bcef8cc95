"""
SRT parser producing ordered (start_time, text) transcript lines.
"""
import logging
from typing import List

from models.transcript_models import TranscriptLine

logger = logging.getLogger(__name__)

TIMESTAMP_SEPARATOR = "-->"
START_TIME_LENGTH = 8  # hh:mm:ss


def parse_srt(srt_content: str) -> List[TranscriptLine]:
    """
    Parse raw SRT content into transcript lines.

    Each block is an index line, a "start --> end" timestamp line and one
    or more text lines, separated from the next block by a blank line.
    Malformed blocks are skipped; a bad block never fails the document.

    Args:
        srt_content: Raw SRT text

    Returns:
        Lines in document order (not sorted by time). start is truncated
        to its first eight characters, hh:mm:ss for well-formed input, and
        multi-line text is joined with single spaces.
    """
    # Normalize line endings and trim whitespace
    srt_content = srt_content.replace("\r\n", "\n").replace("\r", "\n").strip()
    if not srt_content:
        return []

    lines: List[TranscriptLine] = []
    skipped = 0

    for block in srt_content.split("\n\n"):
        # parts[0] is the index, parts[1] the timestamp, parts[2] the text
        parts = block.split("\n", 2)
        if len(parts) < 3:
            skipped += 1
            continue

        start = parts[1].split(TIMESTAMP_SEPARATOR, 1)[0].strip()
        if len(start) < START_TIME_LENGTH:
            skipped += 1
            continue

        text = parts[2].replace("\n", " ").strip()
        if not text:
            skipped += 1
            continue

        lines.append(TranscriptLine(start=start[:START_TIME_LENGTH], text=text))

    if skipped:
        logger.debug("Skipped %d malformed SRT blocks", skipped)
    return lines
