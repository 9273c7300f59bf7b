# src/classification/genre.py — v1
"""Primary genre derivation from the independent signals on a record."""

from __future__ import annotations

import logging
from typing import Any

from signalgate.classification.consensus import weighted_consensus
from signalgate.classification.models import GenreResult, MovieRecord, Vote
from signalgate.classification.patterns import (
    AUDIENCE_FIT_GENRE_MAP,
    MOOD_GENRE_MAP,
    PRIMARY_GENRE_PRIORITY,
    era_genres,
    find_actor_genres,
    find_director_genres,
    keyword_genre,
    normalize_genre,
)

logger = logging.getLogger(__name__)

SIGNAL_WEIGHTS: dict[str, float] = {
    "genres_array": 0.35,
    "mood_tags": 0.20,
    "audience_fit": 0.15,
    "director_pattern": 0.15,
    "hero_pattern": 0.10,
    "synopsis_keywords": 0.05,
    "era_default": 0.10,
}

_MIN_TEXT_LENGTH = 50


def collect_genre_votes(movie: MovieRecord) -> list[Vote]:
    """One vote per independent feature that points at a genre."""
    votes: list[Vote] = []

    if movie.genres:
        primary = normalize_genre(movie.genres[0])
        votes.append(Vote(
            candidate=primary, source="genres_array_primary",
            weight=SIGNAL_WEIGHTS["genres_array"],
        ))
        if len(movie.genres) > 1:
            secondary = normalize_genre(movie.genres[1])
            if secondary != primary:
                votes.append(Vote(
                    candidate=secondary, source="genres_array_secondary",
                    weight=SIGNAL_WEIGHTS["genres_array"] * 0.5,
                ))

    if movie.mood_tags:
        for mood in movie.mood_tags:
            mapped = MOOD_GENRE_MAP.get(mood.lower())
            if mapped:
                votes.append(Vote(
                    candidate=mapped[0], source="mood_tags",
                    weight=SIGNAL_WEIGHTS["mood_tags"],
                ))
                break

    if movie.audience_fit:
        for fit, value in movie.audience_fit.items():
            if value and fit in AUDIENCE_FIT_GENRE_MAP:
                votes.append(Vote(
                    candidate=AUDIENCE_FIT_GENRE_MAP[fit][0],
                    source=f"audience_fit_{fit}",
                    weight=SIGNAL_WEIGHTS["audience_fit"],
                ))
                break

    if movie.director:
        director_genres = find_director_genres(movie.director)
        if director_genres:
            votes.append(Vote(
                candidate=director_genres[0], source="director_pattern",
                weight=SIGNAL_WEIGHTS["director_pattern"],
            ))

    if movie.hero:
        hero_genres = find_actor_genres(movie.hero)
        if hero_genres:
            votes.append(Vote(
                candidate=hero_genres[0], source="hero_pattern",
                weight=SIGNAL_WEIGHTS["hero_pattern"],
            ))

    text = " ".join(t for t in (movie.overview, movie.synopsis) if t)
    if len(text) > _MIN_TEXT_LENGTH:
        hinted = keyword_genre(text)
        if hinted:
            votes.append(Vote(
                candidate=hinted, source="synopsis_keywords",
                weight=SIGNAL_WEIGHTS["synopsis_keywords"],
            ))

    # Era fallback only when the record itself says little.
    if len(votes) < 2 and movie.release_year:
        votes.append(Vote(
            candidate=era_genres(movie.release_year)[0], source="era_default",
            weight=SIGNAL_WEIGHTS["era_default"],
        ))

    return votes


def derive_primary_genre(movie: MovieRecord, **thresholds: Any) -> GenreResult:
    """Derive a primary genre by weighted consensus over the record's signals.

    Args:
        movie: Record to classify.
        **thresholds: Overrides passed to ``weighted_consensus``
            (min_signals, tie_margin, accept_threshold, review_threshold).

    Returns:
        GenreResult. Low-confidence winners are returned, flagged with a reason.
    """
    votes = collect_genre_votes(movie)
    consensus = weighted_consensus(votes, PRIMARY_GENRE_PRIORITY, **thresholds)
    logger.debug(
        "Genre for %s: %s (%s, %d vote(s))",
        movie.id, consensus.winner, consensus.confidence, len(votes),
    )
    return GenreResult(
        primary_genre=consensus.winner,
        confidence=consensus.confidence,
        sources=consensus.sources,
        signals=votes,
        ambiguous=consensus.ambiguous,
        ambiguity_reason=consensus.reason,
    )
