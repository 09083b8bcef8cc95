"""
Excerpt extraction around a phrase match.
"""
from typing import List

from services.processing.normalizer import normalize_text

ELLIPSIS = "___"


def find_phrase_index(words: List[str], phrase_words: List[str]) -> int:
    """Index of the first contiguous occurrence of phrase_words in words, or -1."""
    span = len(phrase_words)
    for i in range(len(words) - span + 1):
        if words[i:i + span] == phrase_words:
            return i
    return -1


def create_snippet(original_text: str, clean_text: str, search_text: str, word_buffer: int) -> str:
    """
    Extract a window of the original text around the search phrase.

    The phrase is located by word position in clean_text and that position
    is reused in original_text, which assumes normalization keeps the word
    count. Text like "hello,world" breaks the assumption (one original word,
    two clean words) and the window is then misaligned.

    Args:
        original_text: Line text as ingested
        clean_text: normalize_text(original_text)
        search_text: Phrase to locate (normalized here)
        word_buffer: Words to keep on each side of the match

    Returns:
        The window joined with single spaces, with ELLIPSIS markers where
        words were cut before or after it. Falls back to the original text.
    """
    original_words = original_text.split()
    clean_words = clean_text.split()
    search_words = normalize_text(search_text).split()

    if not search_words or not original_words:
        return original_text

    match_index = find_phrase_index(clean_words, search_words)
    if match_index == -1:
        limit = max(0, word_buffer * 4)
        if len(original_words) > limit:
            return " ".join(original_words[:limit]) + ELLIPSIS
        return original_text

    match_length = len(search_words)

    # end is exclusive
    start = max(0, match_index - word_buffer)
    end = min(len(original_words), match_index + match_length + word_buffer)

    if start >= end:
        # Negative buffers land here; fall back to the match span itself
        start = max(0, match_index)
        end = min(len(original_words), match_index + match_length)
        if start >= end:
            return original_text

    snippet = " ".join(original_words[start:end])
    if start > 0:
        snippet = f"{ELLIPSIS} {snippet}"
    if end < len(original_words):
        snippet = f"{snippet} {ELLIPSIS}"
    return snippet
