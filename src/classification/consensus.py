# src/classification/consensus.py — v1
"""Weighted multi-signal consensus.

Votes are grouped by candidate and ranked by total weight, then vote count,
then a caller-supplied priority list, then name. The ranking is a total
order, so vote order never changes the outcome.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from signalgate.classification.models import ConsensusResult, Vote

ACCEPT_THRESHOLD = 0.35
REVIEW_THRESHOLD = 0.60
TIE_MARGIN = 0.05
MIN_SIGNALS = 1

_UNRANKED = 999


@dataclass
class _Tally:
    weight: float = 0.0
    count: int = 0
    sources: list[str] = field(default_factory=list)


def _rank_key(
    candidate: str, tally: _Tally, priority: Sequence[str]
) -> tuple[float, int, int, str]:
    rank = priority.index(candidate) if candidate in priority else _UNRANKED
    # Rounding keeps float summation order from splitting equal weights.
    return (-round(tally.weight, 9), -tally.count, rank, candidate)


def weighted_consensus(
    votes: Iterable[Vote],
    priority: Sequence[str] = (),
    *,
    min_signals: int = MIN_SIGNALS,
    tie_margin: float = TIE_MARGIN,
    accept_threshold: float = ACCEPT_THRESHOLD,
    review_threshold: float = REVIEW_THRESHOLD,
) -> ConsensusResult:
    """Pick the best-supported candidate from weighted votes.

    A winner is always returned when any candidate qualifies. Weak or tied
    outcomes come back with ``confidence="low"`` and a reason so the caller
    can route them to review.

    Args:
        votes: Weighted votes, in any order.
        priority: Tie-break order; earlier candidates win, unknown ones last.
        min_signals: Votes a candidate needs to qualify.
        tie_margin: Top-two weight gap below which the result is ambiguous.
        accept_threshold: Winner weight below this needs review.
        review_threshold: Winner weight below this should be considered for review.

    Returns:
        ConsensusResult with winner, confidence, sources and reason.
    """
    all_votes = list(votes)
    if not all_votes:
        return ConsensusResult(reason="No signals available")

    tallies: dict[str, _Tally] = {}
    for vote in all_votes:
        tally = tallies.setdefault(vote.candidate, _Tally())
        tally.weight += vote.weight
        tally.count += 1
        tally.sources.append(vote.source)

    ranked = sorted(
        ((c, t) for c, t in tallies.items() if t.count >= min_signals),
        key=lambda item: _rank_key(item[0], item[1], priority),
    )
    if not ranked:
        return ConsensusResult(votes=all_votes, reason="No candidates found")

    winner, tally = ranked[0]
    result = ConsensusResult(
        winner=winner,
        weight=round(tally.weight, 4),
        sources=sorted(tally.sources),
        votes=all_votes,
    )

    if len(ranked) > 1:
        runner_up, second = ranked[1]
        if abs(tally.weight - second.weight) < tie_margin:
            return result.model_copy(update={
                "ambiguous": True,
                "reason": (
                    f"Tie between {winner} and {runner_up} "
                    f"(both ~{tally.weight:.2f}) - needs review"
                ),
            })

    if tally.weight < accept_threshold:
        return result.model_copy(update={
            "reason": (
                f"Confidence {tally.weight:.2f} below threshold "
                f"{accept_threshold} - needs review"
            ),
        })
    if tally.weight < review_threshold:
        return result.model_copy(
            update={"reason": f"Confidence {tally.weight:.2f} - consider review"}
        )
    return result.model_copy(update={"confidence": "high"})
