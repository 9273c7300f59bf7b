# src/sources/adapters/idlebrain_sentiment.py — v1
"""Idlebrain review sentiment adapter.

Reads the review page, counts positive and negative phrases, looks for a
box-office verdict and a "Rating: x/5" line. Only derived labels and
numbers are kept, never review text.
"""

from __future__ import annotations

import re

from signalgate.core.models import (
    BooleanSignal,
    CategoricalSignal,
    ComparisonQuery,
    ComparisonResult,
    NumericSignal,
    Signal,
    SourceConfig,
    SourceTier,
)
from signalgate.sources.base_adapter import (
    BaseSourceAdapter,
    normalize_rating,
    signal_strength,
)

_REVIEW_URL = "https://www.idlebrain.com/movie/review/{slug}.html"
_RATING_RE = re.compile(r"Rating:\s*([\d.]+)\s*/\s*5", re.IGNORECASE)
_SLUG_RE = re.compile(r"[^a-z0-9]+")
_TAG_RE = re.compile(r"<[^>]*>")
_VERDICT_LABEL_RE = re.compile(r"\bverdict\b\s*[:\-]?([^\n]{0,80})")
_EXPECTED_SIGNALS = 6

SENTIMENTS = ["very_positive", "positive", "mixed", "negative", "very_negative"]
_POSITIVE = (
    "excellent", "fantastic", "superb", "masterpiece", "brilliant",
    "must watch", "highly recommended",
)
_NEGATIVE = ("terrible", "worst", "boring", "disappointing", "avoid", "waste", "disaster")

# Checked in order; longer phrases first so "super hit" wins over "hit".
_VERDICT_PHRASES: list[tuple[str, str]] = [
    ("blockbuster", "blockbuster"),
    ("super hit", "super_hit"),
    ("superhit", "super_hit"),
    ("below average", "below_average"),
    ("above average", "above_average"),
    ("hit", "hit"),
    ("average", "average"),
    ("flop", "flop"),
    ("disaster", "disaster"),
]

VERDICT_SCORES: dict[str, float] = {
    "blockbuster": 95,
    "super_hit": 85,
    "hit": 75,
    "above_average": 65,
    "average": 50,
    "below_average": 35,
    "flop": 20,
    "disaster": 5,
}


def make_slug(title: str) -> str:
    return _SLUG_RE.sub("-", title.lower()).strip("-")


def _visible_text(html: str) -> str:
    """Lowercased page text with markup removed; each tag becomes a line break."""
    return _TAG_RE.sub("\n", html).lower()


def _has_phrase(phrase: str, text: str) -> bool:
    return re.search(rf"\b{re.escape(phrase)}\b", text) is not None


def extract_sentiment(html: str) -> str:
    text = _visible_text(html)
    diff = (
        sum(_has_phrase(w, text) for w in _POSITIVE)
        - sum(_has_phrase(w, text) for w in _NEGATIVE)
    )
    if diff >= 3:
        return "very_positive"
    if diff >= 1:
        return "positive"
    if diff <= -3:
        return "very_negative"
    if diff <= -1:
        return "negative"
    return "mixed"


def _find_verdict(text: str) -> str | None:
    for phrase, verdict in _VERDICT_PHRASES:
        if _has_phrase(phrase, text):
            return verdict
    return None


def extract_verdict(html: str) -> str | None:
    """Verdict phrase as a whole word, preferring the text after a "verdict" label."""
    text = _visible_text(html)
    for label in _VERDICT_LABEL_RE.finditer(text):
        verdict = _find_verdict(label.group(1))
        if verdict is not None:
            return verdict
    return _find_verdict(text)


class IdlebrainSentimentAdapter(BaseSourceAdapter):
    config = SourceConfig(
        id="idlebrain_sentiment",
        name="Idlebrain Sentiment",
        tier=SourceTier.COMMUNITY,
        rate_limit_per_minute=6,
        cache_days=90,
        feature_flag_key="comparison_idlebrain",
        base_url="https://www.idlebrain.com",
    )

    async def _fetch_internal(self, query: ComparisonQuery) -> ComparisonResult:
        html = await self._get_text(_REVIEW_URL.format(slug=make_slug(query.title_en)))
        if not html:
            return self._not_found("No sentiment data found")

        signals: dict[str, Signal] = {
            "sentiment": CategoricalSignal(
                value=extract_sentiment(html), allowed_values=SENTIMENTS
            ),
        }

        verdict = extract_verdict(html)
        if verdict is not None:
            signals["verdict"] = CategoricalSignal(
                value=verdict, allowed_values=list(VERDICT_SCORES)
            )
            score = VERDICT_SCORES[verdict]
            signals["verdict_score"] = NumericSignal(
                value=score, raw_value=score, scale="percentage"
            )

        rating_match = _RATING_RE.search(html)
        if rating_match:
            try:
                rating = float(rating_match.group(1))
            except ValueError:
                rating = None
            if rating is not None:
                signals["rating"] = NumericSignal(
                    value=normalize_rating(rating, "0-5"), raw_value=rating, scale="0-5"
                )

        signals["has_coverage"] = BooleanSignal(value=True)
        return self._success(signals, signal_strength(len(signals), _EXPECTED_SIGNALS))
