"""
Unit tests for the phrase matcher cache.
"""
import threading
from unittest.mock import patch

import pytest

from core.errors import PatternCompileFailure
from services.search.matcher_cache import MatcherCache


class TestMatcherCache:
    """Test literal-phrase matching, caching and error propagation."""

    def test_whole_word(self):
        """Test that whole-word matchers respect word boundaries."""
        cache = MatcherCache()
        matcher = cache.get_matcher("foo", True)
        assert matcher.search("foo")
        assert not matcher.search("food")

    def test_substring(self):
        """Test that plain matchers match inside words."""
        cache = MatcherCache()
        assert cache.get_matcher("foo", False).search("food")

    def test_phrase_is_normalized(self):
        """Test that the phrase goes through the normalizer first."""
        cache = MatcherCache()
        matcher = cache.get_matcher("Hello, World!", False)
        assert matcher.search("say hello world now")

    def test_metacharacters_escaped(self):
        """Test that regex metacharacters in the phrase match literally."""
        cache = MatcherCache()
        matcher = cache.get_matcher("c++", False)
        assert matcher.search("i like c++ a lot")
        assert not matcher.search("i like ccc")

    def test_ignore_case_variant(self):
        """Test the case-insensitive matcher used against original text."""
        cache = MatcherCache()
        assert cache.get_matcher("vod", True, ignore_case=True).search("This is a VOD content")
        assert not cache.get_matcher("vod", True).search("This is a VOD content")

    def test_original_text_variant(self):
        """Test that original-text matchers allow punctuation between phrase words."""
        cache = MatcherCache()
        matcher = cache.get_matcher("don't", True, ignore_case=True, original_text=True)
        assert matcher.search("I DON'T know")
        assert not cache.get_matcher("don't", True, ignore_case=True).search("I don't know")
        assert cache.get_matcher("hello world", True, original_text=True).search("hello_world")
        assert not matcher.search("I dont know")
        assert len(cache) == 3

    def test_count(self):
        """Test that count returns occurrences, not a boolean."""
        cache = MatcherCache()
        assert cache.count("hello", False, "hello there hello") == 2
        assert cache.count("hell", True, "hello there hello") == 0

    def test_cached_instance_reused(self):
        """Test that the same key returns the same compiled matcher."""
        cache = MatcherCache()
        first = cache.get_matcher("foo", True)
        assert cache.get_matcher("foo", True) is first
        assert cache.get_matcher("foo", False) is not first
        assert len(cache) == 2

    def test_concurrent_access(self):
        """Test that concurrent lookups agree on one entry per key."""
        cache = MatcherCache()
        results = []

        def worker():
            for _ in range(200):
                results.append(cache.get_matcher("shared phrase", True))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(cache) == 1
        assert all(m is results[0] for m in results)

    def test_compile_failure_propagates(self):
        """Test that a compile error surfaces as PatternCompileFailure."""
        cache = MatcherCache()
        with patch.object(MatcherCache, "build_pattern", return_value="("):
            with pytest.raises(PatternCompileFailure):
                cache.get_matcher("anything", False)
        assert len(cache) == 0
