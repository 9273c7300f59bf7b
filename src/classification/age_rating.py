# src/classification/age_rating.py — v1
"""Content-aware age rating derivation.

Ratings are ordinal (U < U/A < A < S). Inside one derivation a rating only
moves up, except for the explicit family-safe and pre-1980 rules which apply
only when nothing restrictive has been seen.
"""

from __future__ import annotations

from signalgate.classification.models import (
    AgeRating,
    AgeRatingResult,
    MovieRecord,
    RatingConfidence,
)

AGE_RATING_ORDER: list[AgeRating] = ["U", "U/A", "A", "S"]

# Spellings found in stored records, keyed without spaces and uppercased.
AGE_RATING_ALIASES: dict[str, AgeRating] = {
    "U": "U",
    "UA": "U/A",
    "U/A": "U/A",
    "U-A": "U/A",
    "UA7+": "U/A",
    "UA13+": "U/A",
    "UA16+": "U/A",
    "U/A7+": "U/A",
    "U/A13+": "U/A",
    "U/A16+": "U/A",
    "A": "A",
    "18+": "A",
    "ADULT": "A",
    "S": "S",
}


def normalize_age_rating(rating: str | None) -> AgeRating | None:
    """Canonical rating for a stored value; None when missing or unknown."""
    if not rating:
        return None
    return AGE_RATING_ALIASES.get("".join(rating.split()).upper())


def rating_rank(rating: str | None) -> int:
    """Ordinal position of a rating; -1 when missing or unknown."""
    if rating in AGE_RATING_ORDER:
        return AGE_RATING_ORDER.index(rating)  # type: ignore[arg-type]
    return -1


def safe_upgrade(current: AgeRating, proposed: AgeRating) -> AgeRating:
    """The more restrictive of two ratings."""
    return proposed if rating_rank(proposed) > rating_rank(current) else current


def _era_default(year: int) -> AgeRatingResult | None:
    if year < 1970:
        return AgeRatingResult(
            age_rating="U", confidence="high",
            reasons=["Pre-1970 film defaults to U (Golden era family classics)"],
        )
    if year < 1980:
        return AgeRatingResult(
            age_rating="U", confidence="medium",
            reasons=["1970s film defaults to U (Classic era)"],
        )
    if year < 1995:
        return AgeRatingResult(
            age_rating="U/A", confidence="medium",
            reasons=["1980-1995 film defaults to U/A (Action era)"],
        )
    return None


def derive_age_rating(movie: MovieRecord) -> AgeRatingResult:
    """Derive an age rating from content flags, warnings, genres and moods.

    Returns a skipped result when the record carries no usable signal.
    """
    has_flags = bool(movie.content_flags)
    has_warnings = bool(movie.trigger_warnings)
    signal_count = sum([
        has_flags,
        has_warnings,
        bool(movie.audience_fit),
        bool(movie.mood_tags),
        bool(movie.genres),
        movie.release_year is not None,
    ])
    if signal_count == 0:
        return AgeRatingResult(skipped=True, skip_reason="No data available")

    if movie.release_year and not has_flags and not has_warnings:
        era_result = _era_default(movie.release_year)
        if era_result is not None:
            return era_result

    rating: AgeRating = "U"
    indicators: list[str] = []
    reasons: list[str] = []

    # Content flags
    flags = movie.content_flags or {}
    if flags.get("sexual_content") or flags.get("nudity") or flags.get("explicit"):
        rating = safe_upgrade(rating, "A")
        indicators.append("sexual_content")
        reasons.append("Contains sexual content/nudity → A")
    if flags.get("violence") or flags.get("gore") or flags.get("brutal"):
        if flags.get("gore") or flags.get("brutal"):
            rating = safe_upgrade(rating, "A")
            reasons.append("Contains graphic violence → A")
        else:
            rating = safe_upgrade(rating, "U/A")
            reasons.append("Contains violence → U/A")
        indicators.append("violence")
    if flags.get("substance_abuse") or flags.get("drugs") or flags.get("alcohol"):
        rating = safe_upgrade(rating, "U/A")
        indicators.append("substance")
        reasons.append("Contains substance use → U/A")
    if flags.get("abuse") or flags.get("trauma"):
        rating = safe_upgrade(rating, "U/A")
        indicators.append("dark_themes")
        reasons.append("Contains abuse/trauma themes → U/A")

    # Trigger warnings
    warnings = {w.lower() for w in movie.trigger_warnings or []}
    if warnings & {"violence", "gore", "blood"}:
        rating = safe_upgrade(rating, "U/A")
        indicators.append("trigger_violence")
        reasons.append("Trigger warning: violence → U/A")
    if warnings & {"sexual-content", "nudity"}:
        rating = safe_upgrade(rating, "A")
        indicators.append("trigger_sexual")
        reasons.append("Trigger warning: sexual content → A")
    if warnings & {"substance-abuse", "drug-use"}:
        rating = safe_upgrade(rating, "U/A")
        indicators.append("trigger_substance")
        reasons.append("Trigger warning: substance use → U/A")

    # Genres
    genres = {g.lower() for g in movie.genres or []}
    if "horror" in genres:
        rating = safe_upgrade(rating, "U/A")
        indicators.append("genre_horror")
        reasons.append("Horror genre → U/A minimum")
    if genres & {"adult", "erotic"}:
        rating = safe_upgrade(rating, "A")
        indicators.append("genre_adult")
        reasons.append("Adult/Erotic genre → A")
    if genres & {"war", "crime"}:
        rating = safe_upgrade(rating, "U/A")
        indicators.append("genre_mature")
        reasons.append("War/Crime genre → U/A")

    # Moods
    moods = {m.lower() for m in movie.mood_tags or []}
    if moods & {"dark-intense", "gripping"}:
        rating = safe_upgrade(rating, "U/A")
        indicators.append("mood_intense")
        reasons.append("Intense mood → U/A")

    if not indicators:
        fit = movie.audience_fit or {}
        if fit.get("kids_friendly"):
            rating = "U"
            reasons.append("Kids friendly with no restrictions → U")
        elif fit.get("family_watch"):
            rating = "U"
            reasons.append("Family watch with no restrictions → U")
        if movie.release_year and movie.release_year < 1980:
            rating = "U"
            reasons.append("Pre-1980 film with no flagged content → U")
        if not reasons:
            rating = "U/A"
            reasons.append("Default safe middle ground → U/A")

    confidence: RatingConfidence = "medium"
    if signal_count >= 4 and indicators:
        confidence = "high"
    elif signal_count < 3:
        confidence = "low"

    return AgeRatingResult(
        age_rating=rating,
        confidence=confidence,
        reasons=reasons,
        content_indicators=indicators,
    )
