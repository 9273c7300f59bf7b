# src/anomaly/models.py — v1
"""Anomaly flag models."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

AnomalyType = Literal[
    "ACTOR_TOO_YOUNG",
    "YEAR_MISMATCH",
    "SOURCE_CONFLICT",
    "LOW_CONFIDENCE",
    "DATA_IMPLAUSIBLE",
    "DUPLICATE_SUSPECT",
    "MISSING_REQUIRED",
]
AnomalySeverity = Literal["CRITICAL", "HIGH", "MEDIUM", "LOW"]

SEVERITY_ORDER: list[AnomalySeverity] = ["CRITICAL", "HIGH", "MEDIUM", "LOW"]


class AnomalyFlag(BaseModel):
    """A suspicious value, with what a reviewer should do about it."""

    type: AnomalyType
    severity: AnomalySeverity
    message: str
    suggested_action: str | None = None
    auto_fixable: bool = False
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def blocking(self) -> bool:
        return self.severity in ("CRITICAL", "HIGH")


class AnomalyCheckResult(BaseModel):
    movie_id: str | None = None
    anomalies: list[AnomalyFlag] = Field(default_factory=list)
    needs_review: bool = False
    review_reasons: list[str] = Field(default_factory=list)
