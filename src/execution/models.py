# src/execution/models.py — v1
"""Configuration and result types for the execution controller."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from signalgate.config.settings import Settings

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class ExecutionConfig:
    """Limits for one controller instance."""

    concurrency: int = 10
    rate_limit_ms: int = 200
    batch_size: int = 50
    retry_attempts: int = 3
    retry_delay_ms: int = 1000
    continue_on_error: bool = True

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        if self.batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if self.retry_attempts < 1:
            raise ValueError("retry_attempts must be >= 1")
        if self.rate_limit_ms < 0 or self.retry_delay_ms < 0:
            raise ValueError("delays must be >= 0")

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: Any) -> ExecutionConfig:
        values: dict[str, Any] = {
            "concurrency": settings.execution_concurrency,
            "rate_limit_ms": settings.execution_rate_limit_ms,
            "batch_size": settings.execution_batch_size,
            "retry_attempts": settings.execution_retry_attempts,
            "retry_delay_ms": settings.execution_retry_delay_ms,
            "continue_on_error": settings.execution_continue_on_error,
        }
        values.update(overrides)
        return cls(**values)


@dataclass(frozen=True)
class ProgressInfo:
    """Snapshot passed to the progress callback after every item."""

    total: int
    processed: int
    succeeded: int
    failed: int
    current_batch: int
    total_batches: int
    elapsed_ms: int
    eta_ms: int

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 100.0
        return round(self.processed / self.total * 100, 1)


@dataclass
class FailedItem(Generic[T]):
    item: T
    error: BaseException
    attempts: int


@dataclass
class ExecutionResult(Generic[T, R]):
    """Outcome of ExecutionController.process_all()."""

    succeeded: list[tuple[T, R]] = field(default_factory=list)
    failed: list[FailedItem[T]] = field(default_factory=list)
    skipped: list[T] = field(default_factory=list)
    duration_ms: int = 0
    cancelled: bool = False
    halted: bool = False

    @property
    def values(self) -> list[R]:
        return [value for _, value in self.succeeded]
