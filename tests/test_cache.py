"""Tests for the session match cache."""

from medscan.batchmatch.cache import MatchCache


def test_similarity_roundtrip():
    cache = MatchCache()
    assert cache.get_similarity("AB1234", "LOT AB1234") is None
    cache.put_similarity("AB1234", "LOT AB1234", 1.0)
    assert cache.get_similarity("AB1234", "LOT AB1234") == 1.0
    assert cache.get_similarity("AB1234", "LOT AB1235") is None
    assert cache.similarity_size == 1


def test_formats_are_copied():
    cache = MatchCache()
    formats = ["03/26", "2026-03-31"]
    cache.put_formats("2026-03-31", formats)
    formats.append("mutated")

    cached = cache.get_formats("2026-03-31")
    assert cached == ["03/26", "2026-03-31"]
    cached.append("also mutated")
    assert cache.get_formats("2026-03-31") == ["03/26", "2026-03-31"]


def test_clear():
    cache = MatchCache()
    cache.put_similarity("A", "B", 0.5)
    cache.put_formats("2026-03-31", ["x"])
    cache.clear()
    assert cache.similarity_size == 0
    assert cache.date_format_size == 0
    assert cache.get_similarity("A", "B") is None


def test_similarity_scoped():
    cache = MatchCache()
    cache.put_similarity("AB12", "XAB13YYY", 0.5, scope=(2,))
    assert cache.get_similarity("AB12", "XAB13YYY", scope=(2,)) == 0.5
    assert cache.get_similarity("AB12", "XAB13YYY", scope=(1,)) is None
    assert cache.get_similarity("AB12", "XAB13YYY") is None
