# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for execution limits, comparison source flags,
consensus thresholds, checkpoint persistence and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Execution controller ===
    execution_concurrency: int = 10
    execution_rate_limit_ms: int = 200
    execution_batch_size: int = 50
    execution_retry_attempts: int = 3
    execution_retry_delay_ms: int = 1000
    execution_continue_on_error: bool = True

    # === Comparison sources (feature flags, all off by default) ===
    comparison_sources_enabled: bool = False
    comparison_rotten_tomatoes: bool = False
    comparison_google_kg: bool = False
    comparison_idlebrain: bool = False
    comparison_youtube: bool = False
    comparison_jiosaavn: bool = False
    comparison_sources: str = (
        "rotten_tomatoes,google_kg,idlebrain_sentiment,trailer_visibility,"
        "music_popularity"
    )

    # Source credentials
    google_kg_api_key: str = ""
    youtube_api_key: str = ""
    spotify_access_token: str = ""

    # HTTP
    http_timeout_s: float = 10.0
    http_user_agent: str = "signalgate/0.1 (+metadata validation)"

    # === Comparison aggregation ===
    comparison_conflict_spread: float = 30.0
    comparison_high_conflict_spread: float = 50.0

    # === Consensus ===
    genre_accept_threshold: float = 0.35
    genre_review_threshold: float = 0.60
    genre_tie_margin: float = 0.05
    genre_min_signals: int = 1

    # === Anomaly detection ===
    anomaly_min_acting_age: int = 16
    anomaly_low_confidence_threshold: float = 0.5

    # === Checkpoints ===
    checkpoint_backend: Literal["memory", "json", "sqlite", "redis"] = "json"
    checkpoint_root: Path = Path("~/.signalgate/checkpoints")
    checkpoint_redis_url: str = ""

    # === Reports ===
    report_dir: Path = Path("./reports")

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator(
        "execution_concurrency", "execution_batch_size", "execution_retry_attempts"
    )
    @classmethod
    def validate_positive(cls, v: int, info) -> int:  # noqa: N805
        if v < 1:
            raise ValueError(f"{info.field_name} must be >= 1")
        return v

    @field_validator("execution_rate_limit_ms", "execution_retry_delay_ms")
    @classmethod
    def validate_non_negative(cls, v: int, info) -> int:  # noqa: N805
        if v < 0:
            raise ValueError(f"{info.field_name} must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.checkpoint_backend == "redis" and not self.checkpoint_redis_url:
            errors.append(
                "CHECKPOINT_BACKEND=redis requires CHECKPOINT_REDIS_URL"
            )

        if self.genre_review_threshold < self.genre_accept_threshold:
            errors.append(
                "GENRE_REVIEW_THRESHOLD must be >= GENRE_ACCEPT_THRESHOLD"
            )

        if self.comparison_high_conflict_spread < self.comparison_conflict_spread:
            errors.append(
                "COMPARISON_HIGH_CONFLICT_SPREAD must be >= COMPARISON_CONFLICT_SPREAD"
            )

        if not 0.0 <= self.anomaly_low_confidence_threshold <= 1.0:
            errors.append("ANOMALY_LOW_CONFIDENCE_THRESHOLD must be within [0, 1]")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def comparison_sources_list(self) -> list[str]:
        """Parse comma-separated comparison source ids."""
        return [s.strip() for s in self.comparison_sources.split(",") if s.strip()]

    @property
    def feature_flags(self) -> dict[str, bool]:
        """Feature flag values keyed by flag name."""
        return {
            "comparison_sources_enabled": self.comparison_sources_enabled,
            "comparison_rotten_tomatoes": self.comparison_rotten_tomatoes,
            "comparison_google_kg": self.comparison_google_kg,
            "comparison_idlebrain": self.comparison_idlebrain,
            "comparison_youtube": self.comparison_youtube,
            "comparison_jiosaavn": self.comparison_jiosaavn,
        }

    @property
    def api_keys(self) -> dict[str, str]:
        """Configured API keys keyed by source id."""
        return {
            "google_kg": self.google_kg_api_key,
            "trailer_visibility": self.youtube_api_key,
            "music_popularity": self.spotify_access_token,
        }


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or one-off runs).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
