# src/config/sources.py — v1
"""Declarative list of comparison source adapters.

Each entry maps a source id to the dotted class path of its adapter.
The registry imports these lazily so an adapter with a broken optional
dependency does not prevent the rest from loading.
"""

from __future__ import annotations

SOURCE_ADAPTERS: dict[str, str] = {
    "rotten_tomatoes": "signalgate.sources.adapters.rotten_tomatoes.RottenTomatoesAdapter",
    "google_kg": "signalgate.sources.adapters.google_kg.GoogleKnowledgeGraphAdapter",
    "idlebrain_sentiment": "signalgate.sources.adapters.idlebrain_sentiment.IdlebrainSentimentAdapter",
    "trailer_visibility": "signalgate.sources.adapters.trailer_visibility.TrailerVisibilityAdapter",
    "music_popularity": "signalgate.sources.adapters.music_popularity.MusicPopularityAdapter",
}
