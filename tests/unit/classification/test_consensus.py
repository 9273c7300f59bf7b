# tests/unit/classification/test_consensus.py — v1
"""Tests for classification/consensus.py — weighted voting and tie-breaks."""

from __future__ import annotations

from itertools import permutations

import pytest

from signalgate.classification.consensus import weighted_consensus
from signalgate.classification.models import Vote
from signalgate.classification.patterns import PRIMARY_GENRE_PRIORITY


def _v(candidate: str, weight: float, source: str | None = None) -> Vote:
    return Vote(candidate=candidate, source=source or f"{candidate.lower()}_{weight}", weight=weight)


class TestWeightedConsensus:
    def test_no_votes(self):
        result = weighted_consensus([])
        assert result.winner is None
        assert result.confidence == "low"
        assert result.reason == "No signals available"

    def test_min_signals_filters_candidates(self):
        result = weighted_consensus([_v("Action", 0.5), _v("Drama", 0.3)], min_signals=2)
        assert result.winner is None
        assert result.reason == "No candidates found"
        assert len(result.votes) == 2

    def test_clear_winner_high_confidence(self):
        votes = [_v("Drama", 0.35, "genres"), _v("Drama", 0.3, "mood"), _v("Action", 0.1, "hero")]
        result = weighted_consensus(votes, PRIMARY_GENRE_PRIORITY)
        assert result.winner == "Drama"
        assert result.confidence == "high"
        assert result.weight == 0.65
        assert result.sources == ["genres", "mood"]
        assert not result.ambiguous
        assert result.reason is None

    def test_below_accept_threshold(self):
        result = weighted_consensus([_v("Horror", 0.2)])
        assert result.winner == "Horror"
        assert result.confidence == "low"
        assert result.reason == "Confidence 0.20 below threshold 0.35 - needs review"

    def test_between_thresholds(self):
        result = weighted_consensus([_v("Horror", 0.45)])
        assert result.confidence == "low"
        assert result.reason == "Confidence 0.45 - consider review"

    def test_tie_uses_priority(self):
        result = weighted_consensus(
            [_v("Drama", 0.35), _v("Action", 0.35)], PRIMARY_GENRE_PRIORITY
        )
        assert result.winner == "Action"
        assert result.ambiguous
        assert result.confidence == "low"
        assert result.reason == "Tie between Action and Drama (both ~0.35) - needs review"

    def test_tie_without_priority_uses_name(self):
        result = weighted_consensus([_v("Zombie", 0.4), _v("Alien", 0.4)])
        assert result.winner == "Alien"

    def test_near_tie_within_margin(self):
        result = weighted_consensus([_v("Action", 0.70), _v("Drama", 0.67)])
        assert result.winner == "Action"
        assert result.ambiguous

    def test_margin_configurable(self):
        result = weighted_consensus(
            [_v("Action", 0.70), _v("Drama", 0.67)], tie_margin=0.01
        )
        assert not result.ambiguous
        assert result.confidence == "high"

    def test_float_sum_equal_weights_then_count(self):
        # 0.1 + 0.2 is not exactly 0.3; rounding makes them equal, more votes wins.
        votes = [_v("Comedy", 0.1), _v("Comedy", 0.2), _v("Drama", 0.3)]
        assert weighted_consensus(votes).winner == "Comedy"

    def test_custom_thresholds(self):
        result = weighted_consensus(
            [_v("Action", 0.5)], accept_threshold=0.2, review_threshold=0.4
        )
        assert result.confidence == "high"

    @pytest.mark.parametrize(
        "votes",
        [
            [_v("Action", 0.35), _v("Drama", 0.2), _v("Drama", 0.15), _v("Romance", 0.1)],
            [_v("Thriller", 0.3), _v("Crime", 0.3), _v("Horror", 0.1)],
            [_v("Family", 0.15), _v("Comedy", 0.1), _v("Comedy", 0.05), _v("Drama", 0.15)],
        ],
    )
    def test_vote_order_never_changes_result(self, votes):
        outcomes = {
            (r.winner, r.ambiguous, r.reason, tuple(r.sources))
            for r in (
                weighted_consensus(list(p), PRIMARY_GENRE_PRIORITY)
                for p in permutations(votes)
            )
        }
        assert len(outcomes) == 1

    @pytest.mark.parametrize(
        ("votes", "extra"),
        [
            ([_v("Action", 0.35), _v("Drama", 0.2)], 0.05),
            ([_v("Drama", 0.35), _v("Drama", 0.2), _v("Action", 0.1)], 0.15),
            ([_v("Horror", 0.2)], 0.1),
            ([_v("Action", 0.35), _v("Drama", 0.33)], 0.2),
        ],
    )
    def test_agreeing_vote_never_lowers_confidence(self, votes, extra):
        tiers = {"low": 0, "high": 1}
        before = weighted_consensus(votes, PRIMARY_GENRE_PRIORITY)
        after = weighted_consensus(
            [*votes, _v(before.winner, extra, "agreeing")], PRIMARY_GENRE_PRIORITY
        )
        assert after.winner == before.winner
        assert after.weight >= before.weight
        assert tiers[after.confidence] >= tiers[before.confidence]
