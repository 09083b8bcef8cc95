"""
Text normalization shared by indexing and querying.
"""
import unicodedata


def is_punctuation(char: str) -> bool:
    """True for any character in a Unicode punctuation category (P*)."""
    return unicodedata.category(char).startswith("P")


def normalize_text(text: str) -> str:
    """
    Normalize text for indexing and matching.

    Operations:
        - Replace every punctuation character with a space
        - Lower-case everything else
        - Collapse whitespace runs (including newlines) into single spaces
        - Trim leading/trailing whitespace

    The same function runs at index time and at query time so stored
    clean text and search phrases compare on equal footing.
    """
    cleaned = "".join(" " if is_punctuation(ch) else ch.lower() for ch in text)
    return " ".join(cleaned.split())
