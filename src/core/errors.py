# src/core/errors.py — v1
"""Exception hierarchy.

Source errors never escape an adapter's public fetch(); they are converted
into failed ComparisonResults. Conflicts and refused writes are data, not
exceptions.
"""

from __future__ import annotations


class SignalgateError(Exception):
    """Base class for all package errors."""


class SourceConfigError(SignalgateError):
    """A source cannot run: missing credentials or disabled configuration."""

    def __init__(self, source_id: str, message: str) -> None:
        self.source_id = source_id
        super().__init__(f"[{source_id}] {message}")


class SourceFetchError(SignalgateError):
    """Network failure, timeout or non-2xx response from a source."""

    def __init__(
        self, source_id: str, message: str, status_code: int | None = None
    ) -> None:
        self.source_id = source_id
        self.status_code = status_code
        super().__init__(f"[{source_id}] {message}")


class RetryExhausted(SignalgateError):
    """All retry attempts for one work item failed."""

    def __init__(self, key: str, attempts: int, last_error: BaseException) -> None:
        self.key = key
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"{key}: failed after {attempts} attempt(s): {last_error}"
        )


class CheckpointStoreError(SignalgateError):
    """A checkpoint backend could not read or write a record."""
