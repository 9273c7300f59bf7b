# src/classification/classifier.py — v1
"""Combined genre + age rating classification with review reasons."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from signalgate.classification.age_rating import derive_age_rating
from signalgate.classification.genre import derive_primary_genre
from signalgate.classification.models import ClassificationResult, MovieRecord

if TYPE_CHECKING:
    from signalgate.config.settings import Settings

logger = logging.getLogger(__name__)


def consensus_thresholds(settings: Settings) -> dict[str, Any]:
    """Consensus keyword arguments taken from settings."""
    return {
        "min_signals": settings.genre_min_signals,
        "tie_margin": settings.genre_tie_margin,
        "accept_threshold": settings.genre_accept_threshold,
        "review_threshold": settings.genre_review_threshold,
    }


def classify_movie(
    movie: MovieRecord, settings: Settings | None = None
) -> ClassificationResult:
    """Classify genre and age rating and collect reasons for human review."""
    thresholds = consensus_thresholds(settings) if settings is not None else {}
    genre = derive_primary_genre(movie, **thresholds)
    age_rating = derive_age_rating(movie)

    reasons: list[str] = []
    if genre.ambiguous:
        reasons.append(f"Genre ambiguous: {genre.ambiguity_reason}")
    if genre.confidence == "low" and genre.signals:
        reasons.append(f"Genre low confidence: {genre.ambiguity_reason}")
    if age_rating.skipped:
        reasons.append(f"Age rating skipped: {age_rating.skip_reason}")
    if age_rating.confidence == "low":
        reasons.append("Age rating low confidence")

    if reasons:
        logger.info("%s flagged for review: %s", movie.id, "; ".join(reasons))

    return ClassificationResult(
        movie_id=movie.id,
        title=movie.title_en,
        genre=genre,
        age_rating=age_rating,
        needs_manual_review=bool(reasons),
        review_reasons=reasons,
    )
