# src/reporting/review_report.py — v1
"""Markdown report of everything a human needs to look at."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel

from signalgate.anomaly.models import SEVERITY_ORDER, AnomalyCheckResult
from signalgate.classification.models import ClassificationResult
from signalgate.core.models import AggregatedComparison, utc_now
from signalgate.gate.safe_write import GateDecision

logger = logging.getLogger(__name__)


class ReviewEntry(BaseModel):
    """Everything known about one movie after a run."""

    movie_id: str
    title: str = ""
    anomalies: AnomalyCheckResult | None = None
    classification: ClassificationResult | None = None
    comparison: AggregatedComparison | None = None
    decision: GateDecision | None = None

    @property
    def needs_review(self) -> bool:
        return bool(
            (self.anomalies and self.anomalies.needs_review)
            or (self.classification and self.classification.needs_manual_review)
            or (self.comparison and self.comparison.needs_manual_review)
            or (self.decision and not self.decision.valid)
        )


def _entry_lines(entry: ReviewEntry) -> list[str]:
    lines = [f"### {entry.title or entry.movie_id}", f"- **ID**: {entry.movie_id}"]

    if entry.anomalies and entry.anomalies.anomalies:
        lines.append("- **Anomalies**:")
        for severity in SEVERITY_ORDER:
            for flag in entry.anomalies.anomalies:
                if flag.severity == severity:
                    action = f" ({flag.suggested_action})" if flag.suggested_action else ""
                    lines.append(f"  - [{severity}] {flag.message}{action}")

    if entry.classification and entry.classification.review_reasons:
        lines.append("- **Classification**:")
        lines.extend(f"  - {reason}" for reason in entry.classification.review_reasons)

    if entry.decision and entry.decision.issues:
        lines.append("- **Refused writes**:")
        lines.extend(f"  - {issue}" for issue in entry.decision.issues)

    if entry.comparison and entry.comparison.conflicts:
        lines.append(
            f"- **Source conflicts** (alignment {entry.comparison.alignment_score:.0%}):"
        )
        for conflict in entry.comparison.conflicts:
            values = ", ".join(f"{k}={v:g}" for k, v in sorted(conflict.values.items()))
            lines.append(
                f"  - [{conflict.severity.upper()}] {conflict.field}: "
                f"{', '.join(conflict.sources)} ({values})"
            )

    lines.append("")
    return lines


def render_review_report(
    entries: Iterable[ReviewEntry], generated_at: datetime | None = None
) -> str:
    """Render a markdown review report.

    Only entries that need review get a section; the summary counts all.
    """
    all_entries = list(entries)
    flagged = [e for e in all_entries if e.needs_review]

    lines = [
        "# Review Report",
        "",
        f"Generated: {(generated_at or utc_now()).isoformat(timespec='seconds')}",
        "",
        "## Summary",
        "",
        f"- **Total Movies**: {len(all_entries)}",
        f"- **Needs Review**: {len(flagged)}",
    ]
    if flagged:
        lines += ["", "## Items Needing Review", ""]
        for entry in flagged:
            lines.extend(_entry_lines(entry))
    return "\n".join(lines).rstrip() + "\n"


def write_review_report(
    entries: Iterable[ReviewEntry], report_dir: Path | str, name: str = "review-report.md"
) -> Path:
    """Render and write the report; returns its path."""
    path = Path(report_dir).expanduser() / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_review_report(entries), encoding="utf-8")
    logger.info("Review report written to %s", path)
    return path
