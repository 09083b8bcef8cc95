"""
Memoized phrase matchers for counting and locating matches in clean text.
"""
import re
import threading
from typing import Dict, Tuple, Pattern

from core.errors import PatternCompileFailure
from services.processing.normalizer import normalize_text

# Anything normalize_text turns into a space between two words
ORIGINAL_TEXT_WORD_GAP = r"[\W_]+"


class MatcherCache:
    """
    Compiled-regex cache keyed by (whole_word, phrase, ignore_case, original_text).

    The phrase is normalized and escaped before compiling, so a matcher
    always matches the literal phrase, optionally bounded by \\b anchors.
    Matchers built for original_text accept any run of punctuation and
    whitespace between the phrase words, so "don't" finds "don't" in
    unnormalized text. Entries never expire. One lock guards every read and
    write of the map.
    """

    def __init__(self):
        self._matchers: Dict[Tuple[bool, str, bool, bool], Pattern] = {}
        self._lock = threading.Lock()

    @staticmethod
    def build_pattern(phrase: str, whole_word: bool, original_text: bool = False) -> str:
        if original_text:
            words = normalize_text(phrase).split()
            pattern = ORIGINAL_TEXT_WORD_GAP.join(re.escape(word) for word in words)
        else:
            pattern = re.escape(normalize_text(phrase))
        if whole_word:
            pattern = rf"\b{pattern}\b"
        return pattern

    def get_matcher(
        self,
        phrase: str,
        whole_word: bool,
        ignore_case: bool = False,
        original_text: bool = False,
    ) -> Pattern:
        """Return the compiled matcher for phrase, compiling it on first use."""
        key = (whole_word, phrase, ignore_case, original_text)

        with self._lock:
            matcher = self._matchers.get(key)
        if matcher is not None:
            return matcher

        flags = re.IGNORECASE if ignore_case else 0
        try:
            compiled = re.compile(self.build_pattern(phrase, whole_word, original_text), flags)
        except re.error as e:
            raise PatternCompileFailure(phrase, str(e)) from e

        with self._lock:
            # Another thread may have compiled the same key meanwhile
            return self._matchers.setdefault(key, compiled)

    def count(self, phrase: str, whole_word: bool, clean_text: str) -> int:
        """Number of non-overlapping occurrences of phrase in clean_text."""
        matcher = self.get_matcher(phrase, whole_word)
        return sum(1 for _ in matcher.finditer(clean_text))

    def __len__(self) -> int:
        with self._lock:
            return len(self._matchers)
