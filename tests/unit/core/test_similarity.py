# tests/unit/core/test_similarity.py — v1
"""Tests for core/similarity.py."""

from __future__ import annotations

import pytest

from signalgate.core.similarity import dice_similarity, set_overlap


class TestDiceSimilarity:
    def test_identical(self):
        assert dice_similarity("Magadheera", "Magadheera") == 1.0

    def test_short_strings(self):
        assert dice_similarity("a", "ab") == 0.0

    def test_case_insensitive_bigrams(self):
        assert dice_similarity("Night", "NIGHT") == 1.0

    def test_partial(self):
        # night: ni ig gh ht / nacht: na ac ch ht -> 1 shared
        assert dice_similarity("night", "nacht") == pytest.approx(0.25)

    def test_disjoint(self):
        assert dice_similarity("abc", "xyz") == 0.0


class TestSetOverlap:
    def test_both_empty(self):
        assert set_overlap([], []) == 1.0

    def test_one_empty(self):
        assert set_overlap(["Drama"], []) == 0.0

    def test_larger_set_is_denominator(self):
        assert set_overlap(["a", "b"], ["a", "b", "c", "d"]) == 0.5

    def test_string_compared(self):
        assert set_overlap([1, 2], ["1", "2"]) == 1.0
