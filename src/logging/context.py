# src/logging/context.py — v1
"""Contextual logging support: attach movie_id, run_id, source and stage to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Set per movie / per source fetch; asyncio tasks inherit a copy.
_movie_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "movie_id", default=None
)
_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_source: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "source", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)


@dataclass
class LogContext:
    """Snapshot of current logging context."""

    movie_id: str | None = None
    run_id: str | None = None
    source: str | None = None
    stage: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        movie_id=_movie_id.get(),
        run_id=_run_id.get(),
        source=_source.get(),
        stage=_stage.get(),
    )


def set_run_context(run_id: str, stage: str | None = None) -> None:
    """Set run-level context (called once per pipeline run)."""
    _run_id.set(run_id)
    _stage.set(stage)


def set_movie_context(movie_id: str) -> None:
    """Set entity-level context."""
    _movie_id.set(movie_id)


def set_source_context(source: str | None) -> None:
    """Set the comparison source currently being fetched."""
    _source.set(source)


def clear_context() -> None:
    """Reset all context variables."""
    _movie_id.set(None)
    _run_id.set(None)
    _source.set(None)
    _stage.set(None)
