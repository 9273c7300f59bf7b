# src/sources/orchestrator.py — v1
"""Comparison orchestrator: fan a query out to every applicable source,
then fold the answers into one AggregatedComparison.

Fetches run through the ExecutionController. Adapters apply their own
per-source rate limits, so the fan-out controller itself does not space
requests. Transient fetch failures are retried by the controller; disabled,
misconfigured and not-found results are final.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from signalgate.core.errors import SourceFetchError
from signalgate.core.models import (
    AggregatedComparison,
    ComparisonQuery,
    ComparisonResult,
    Conflict,
    NumericSignal,
    signal_display_value,
)
from signalgate.execution.controller import ExecutionController, ProgressCallback
from signalgate.execution.models import ExecutionConfig, ExecutionResult
from signalgate.logging.context import set_movie_context
from signalgate.sources.base_adapter import BaseSourceAdapter
from signalgate.sources.registry import AdapterRegistry

if TYPE_CHECKING:
    from signalgate.config.settings import Settings

logger = logging.getLogger(__name__)

CONFLICT_SPREAD = 30.0
HIGH_CONFLICT_SPREAD = 50.0
MAX_ADJUSTMENT = 0.2
AGREEMENT_BONUS = 0.10
BROAD_AGREEMENT_BONUS = 0.15
CONFLICT_PENALTIES: dict[str, float] = {"high": 0.15, "medium": 0.08, "low": 0.03}

_RATING_MARKERS = ("rating", "score")


def _is_rating_signal(name: str) -> bool:
    lowered = name.lower()
    return any(marker in lowered for marker in _RATING_MARKERS)


def detect_rating_conflict(
    results: Iterable[ComparisonResult],
    conflict_spread: float = CONFLICT_SPREAD,
    high_conflict_spread: float = HIGH_CONFLICT_SPREAD,
) -> Conflict | None:
    """Conflict when rating-like numeric signals from two sources spread too far.

    Only values from different sources are compared; a spread inside one
    source is ignored. The conflict names the pair with the widest spread.
    """
    values: dict[str, float] = {}
    ranges: dict[str, tuple[float, float]] = {}
    for result in results:
        if not result.success:
            continue
        for name, signal in result.signals.items():
            if isinstance(signal, NumericSignal) and _is_rating_signal(name):
                values[f"{result.source_id}.{name}"] = signal.value
                low, high = ranges.get(result.source_id, (signal.value, signal.value))
                ranges[result.source_id] = (min(low, signal.value), max(high, signal.value))

    widest: tuple[float, str, str] | None = None
    source_ids = sorted(ranges)
    for i, first in enumerate(source_ids):
        for second in source_ids[i + 1 :]:
            spread = max(
                ranges[first][1] - ranges[second][0],
                ranges[second][1] - ranges[first][0],
            )
            if widest is None or spread > widest[0]:
                widest = (spread, first, second)

    if widest is None or widest[0] <= conflict_spread:
        return None

    spread, first, second = widest
    return Conflict(
        field="rating",
        sources=[first, second],
        values=values,
        severity="high" if spread > high_conflict_spread else "medium",
    )


def aggregate_results(
    movie_id: str,
    results: list[ComparisonResult],
    conflict_spread: float = CONFLICT_SPREAD,
    high_conflict_spread: float = HIGH_CONFLICT_SPREAD,
) -> AggregatedComparison:
    """Combine per-source results into conflicts, alignment and an adjustment.

    Pure function of its inputs.
    """
    attempted = [r for r in results if r.error_kind != "disabled"]
    succeeded = [r for r in results if r.success]

    conflicts: list[Conflict] = []
    rating_conflict = detect_rating_conflict(succeeded, conflict_spread, high_conflict_spread)
    if rating_conflict is not None:
        conflicts.append(rating_conflict)

    adjustment = 0.0
    if not conflicts:
        if len(succeeded) >= 3:
            adjustment += BROAD_AGREEMENT_BONUS
        elif len(succeeded) >= 2:
            adjustment += AGREEMENT_BONUS
    for conflict in conflicts:
        adjustment -= CONFLICT_PENALTIES[conflict.severity]
    adjustment = round(max(-MAX_ADJUSTMENT, min(MAX_ADJUSTMENT, adjustment)), 4)

    if succeeded:
        conflicting = {source for c in conflicts for source in c.sources}
        alignment = max(0.0, (len(succeeded) - len(conflicting)) / len(succeeded))
    else:
        alignment = 0.0

    needs_review = (
        any(c.severity == "high" for c in conflicts)
        or len(conflicts) >= 2
        or adjustment < -0.1
    )
    review_reason = None
    if needs_review:
        review_reason = ", ".join(f"{c.field}: {c.severity} conflict" for c in conflicts)

    return AggregatedComparison(
        movie_id=movie_id,
        results=results,
        sources_attempted=len(attempted),
        sources_succeeded=len(succeeded),
        conflicts=conflicts,
        alignment_score=round(alignment, 4),
        confidence_adjustment=adjustment,
        needs_manual_review=needs_review,
        review_reason=review_reason,
    )


def to_signals_record(aggregated: AggregatedComparison) -> dict[str, Any]:
    """Flatten successful signals to {"<source>_<signal>": value} for audit storage."""
    record: dict[str, Any] = {}
    for result in aggregated.results:
        if not result.success:
            continue
        for name, signal in result.signals.items():
            record[f"{result.source_id}_{name}"] = signal_display_value(signal)
    return record


class ComparisonOrchestrator:
    """Fans a ComparisonQuery out to the registry's adapters.

    Args:
        registry: Loaded adapters sharing a SourceContext.
        controller: Execution controller for the fan-out. The default uses
            no extra spacing and one retry round per transient failure.
        conflict_spread: Rating spread (0-100) that counts as a conflict.
        high_conflict_spread: Spread above which a conflict is high severity.
    """

    def __init__(
        self,
        registry: AdapterRegistry,
        controller: ExecutionController | None = None,
        conflict_spread: float = CONFLICT_SPREAD,
        high_conflict_spread: float = HIGH_CONFLICT_SPREAD,
    ) -> None:
        self._registry = registry
        self._controller = controller or ExecutionController(
            ExecutionConfig(rate_limit_ms=0, retry_attempts=2, retry_delay_ms=1000)
        )
        self._conflict_spread = conflict_spread
        self._high_conflict_spread = high_conflict_spread

    @classmethod
    def from_settings(
        cls, settings: Settings, registry: AdapterRegistry
    ) -> ComparisonOrchestrator:
        controller = ExecutionController(
            ExecutionConfig.from_settings(
                settings, rate_limit_ms=0, continue_on_error=True
            )
        )
        return cls(
            registry,
            controller,
            conflict_spread=settings.comparison_conflict_spread,
            high_conflict_spread=settings.comparison_high_conflict_spread,
        )

    @property
    def registry(self) -> AdapterRegistry:
        return self._registry

    async def fetch_all(self, query: ComparisonQuery) -> list[ComparisonResult]:
        """Fetch from every adapter that can handle the query.

        Results come back in registry order regardless of completion order.
        """
        applicable = [a for a in self._registry.adapters if a.can_handle(query)]
        if not applicable:
            logger.info("No source can handle %s", query.movie_id)
            return []

        last_failure: dict[str, ComparisonResult] = {}

        async def _fetch(adapter: BaseSourceAdapter) -> ComparisonResult:
            result = await adapter.fetch(query)
            if not result.success and result.error_kind == "fetch":
                last_failure[adapter.id] = result
                raise SourceFetchError(adapter.id, result.error_details or "fetch failed")
            return result

        run = await self._controller.process_all(
            applicable,
            _fetch,
            source_key=f"compare:{query.movie_id}",
            item_key=lambda a: f"{a.id}:{query.movie_id}",
        )

        by_source: dict[str, ComparisonResult] = {a.id: r for a, r in run.succeeded}
        for failed in run.failed:
            fallback = last_failure.get(failed.item.id)
            by_source[failed.item.id] = fallback or ComparisonResult(
                source_id=failed.item.id,
                source_tier=failed.item.config.tier,
                success=False,
                error="Fetch error",
                error_details=str(failed.error),
                error_kind="fetch",
            )
        return [by_source[a.id] for a in applicable if a.id in by_source]

    async def compare(self, query: ComparisonQuery) -> AggregatedComparison:
        """Fetch and aggregate for one entity."""
        set_movie_context(query.movie_id)
        results = await self.fetch_all(query)
        aggregated = aggregate_results(
            query.movie_id, results, self._conflict_spread, self._high_conflict_spread
        )
        if aggregated.needs_manual_review:
            logger.warning(
                "%s needs review: %s", query.movie_id, aggregated.review_reason
            )
        else:
            logger.info(
                "%s: %d/%d source(s) ok, adjustment %+.2f",
                query.movie_id, aggregated.sources_succeeded,
                aggregated.sources_attempted, aggregated.confidence_adjustment,
            )
        return aggregated

    async def compare_many(
        self,
        queries: list[ComparisonQuery],
        controller: ExecutionController,
        on_progress: ProgressCallback | None = None,
    ) -> ExecutionResult[ComparisonQuery, AggregatedComparison]:
        """Compare many entities under an outer controller's limits."""
        return await controller.process_all(
            queries,
            self.compare,
            on_progress=on_progress,
            source_key="compare",
            item_key=lambda q: q.movie_id,
        )

    def adapter_status(self) -> list[dict[str, Any]]:
        return [
            {
                "id": a.config.id,
                "name": a.config.name,
                "tier": int(a.config.tier),
                "enabled": a.enabled,
                "rate_limit": a.config.rate_limit_per_minute,
                "cache_days": a.config.cache_days,
            }
            for a in self._registry.adapters
        ]

    def enable_all(self) -> None:
        """Turn on the master switch and every registered source's flag."""
        self._registry.context.enable_all(
            [a.config.feature_flag_key for a in self._registry.adapters]
        )

