"""Tests for edit distance and normalized similarity."""

import pytest

from medscan.batchmatch.similarity import levenshtein, similarity


class TestLevenshtein:
    def test_classic_pairs(self):
        assert levenshtein("kitten", "sitting") == 3
        assert levenshtein("flaw", "lawn") == 2

    def test_empty_side(self):
        assert levenshtein("", "abc") == 3
        assert levenshtein("abc", "") == 3
        assert levenshtein("", "") == 0

    def test_identical(self):
        assert levenshtein("AB1234", "AB1234") == 0

    def test_single_substitution(self):
        assert levenshtein("AB1234", "AB1235") == 1


class TestSimilarity:
    def test_identity(self):
        assert similarity("AB1234", "AB1234") == 1.0

    def test_empty(self):
        assert similarity("AB1234", "") == 0.0
        assert similarity("", "AB1234") == 0.0

    def test_one_typo_in_six(self):
        assert similarity("AB1234", "AB1235") == pytest.approx(5 / 6)

    def test_quick_reject(self):
        """Large length mismatch scores 0 despite full overlap."""
        assert similarity("AB", "ABCDEFGHIJ") == 0.0
        assert similarity("ABCDEFGHIJ", "AB") == 0.0

    def test_quick_reject_boundary_is_exclusive(self):
        # (4 - 2) / 4 == 0.5 is not rejected
        assert similarity("ABCD", "AB") == pytest.approx(0.5)

    def test_custom_quick_reject_ratio(self):
        assert similarity("ABCD", "AB", quick_reject_ratio=0.4) == 0.0

    def test_symmetry(self):
        pairs = [
            ("KITTEN", "SITTING"),
            ("AB1234", "BA1234"),
            ("03/31/2026", "03/31/2O26"),
            ("LOT", "AB1234"),
        ]
        for a, b in pairs:
            assert similarity(a, b) == similarity(b, a)

    def test_distance_based_score(self):
        assert similarity("KITTEN", "SITTING") == pytest.approx(1 - 3 / 7)
