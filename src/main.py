# src/main.py — v1
"""CLI entry point: classify, anomalies, compare and checkpoint commands.

Usage:
    signalgate classify <movies.json> [--stage tagging]
    signalgate anomalies <movies.json> [-o reports/]
    signalgate compare <title> <year> [--tmdb-id N] [--enable-all]
    signalgate checkpoint summary
    signalgate checkpoint resume <stage>

Command results go to stdout as JSON; logs go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import uuid
from pathlib import Path
from typing import Any

from signalgate.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    from signalgate.config.settings import ConfigurationError, load_settings
    from signalgate.logging.context import set_run_context
    from signalgate.logging.logger import setup_logging

    try:
        settings = load_settings()
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    setup_logging(
        level="DEBUG" if args.verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    set_run_context(uuid.uuid4().hex[:12], stage=args.command)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="signalgate",
        description=f"signalgate v{__version__}: multi-source movie fact validation",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- classify ---
    p_classify = subparsers.add_parser(
        "classify", help="Classify genre and age rating, gating every write",
    )
    p_classify.add_argument("movies", type=Path, help="JSON file with a list of movies")
    p_classify.add_argument(
        "--stage", default="tagging",
        help="Checkpoint stage to mark for classified movies (default: tagging)",
    )
    p_classify.set_defaults(func=_cmd_classify)

    # --- anomalies ---
    p_anomalies = subparsers.add_parser(
        "anomalies", help="Run anomaly checks and write a review report",
    )
    p_anomalies.add_argument("movies", type=Path, help="JSON file with a list of movies")
    p_anomalies.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Report directory (default: REPORT_DIR)",
    )
    p_anomalies.set_defaults(func=_cmd_anomalies)

    # --- compare ---
    p_compare = subparsers.add_parser(
        "compare", help="Fan a lookup out to the comparison sources",
    )
    p_compare.add_argument("title", help="English title")
    p_compare.add_argument("year", type=int, help="Release year")
    p_compare.add_argument("--tmdb-id", type=int, default=None, help="TMDB id")
    p_compare.add_argument(
        "--enable-all", action="store_true",
        help="Turn on every configured source regardless of feature flags",
    )
    p_compare.set_defaults(func=_cmd_compare)

    # --- checkpoint ---
    p_checkpoint = subparsers.add_parser(
        "checkpoint", help="Inspect the checkpoint store",
    )
    checkpoint_sub = p_checkpoint.add_subparsers(dest="checkpoint_command")
    p_summary = checkpoint_sub.add_parser("summary", help="Counts by status and stage")
    p_summary.set_defaults(func=_cmd_checkpoint_summary)
    p_resume = checkpoint_sub.add_parser(
        "resume", help="List movies ready to resume from a stage",
    )
    p_resume.add_argument("stage", help="Stage to resume from")
    p_resume.set_defaults(func=_cmd_checkpoint_resume)

    return parser


async def _cmd_classify(args: argparse.Namespace, settings: Any) -> int:
    """Classify every movie and send permitted fields through the write gate."""
    from signalgate.checkpoint.manager import CheckpointManager
    from signalgate.checkpoint.models import STAGE_ORDER
    from signalgate.checkpoint.store_factory import create_checkpoint_store
    from signalgate.classification.classifier import classify_movie
    from signalgate.classification.models import MovieRecord
    from signalgate.execution.controller import ExecutionController, ProgressReporter
    from signalgate.execution.models import ExecutionConfig
    from signalgate.gate.safe_write import GateDecision, InMemoryEntityWriter, SafeWriteGate

    if args.stage not in STAGE_ORDER:
        logger.error("Unknown stage: %s", args.stage)
        return 1
    movies = _load_movies(args.movies)
    if movies is None:
        return 1

    gate = SafeWriteGate(InMemoryEntityWriter())
    store = create_checkpoint_store(settings)
    checkpoints = CheckpointManager(store)

    async def _process(movie: MovieRecord) -> GateDecision:
        decision = await gate.commit(movie, classify_movie(movie, settings))
        await checkpoints.mark_stage_complete(
            movie.id, args.stage,
            error=None if decision.valid else "; ".join(decision.issues),
        )
        return decision

    controller = ExecutionController(
        ExecutionConfig.from_settings(settings, rate_limit_ms=0)
    )
    try:
        run = await controller.process_all(
            movies, _process,
            on_progress=ProgressReporter("classify"),
            item_key=lambda m: m.id,
        )
    finally:
        store.close()

    _print_json([d.model_dump(mode="json") for d in run.values])
    for failed in run.failed:
        logger.error("Classification failed for %s: %s", failed.item.id, failed.error)
    return 0 if not run.failed else 1


async def _cmd_anomalies(args: argparse.Namespace, settings: Any) -> int:
    """Run anomaly checks and write a markdown review report."""
    from signalgate.anomaly.detector import run_all_anomaly_checks
    from signalgate.reporting.review_report import ReviewEntry, write_review_report

    movies = _load_movies(args.movies)
    if movies is None:
        return 1

    entries = []
    for movie in movies:
        result = run_all_anomaly_checks(
            movie, min_acting_age=settings.anomaly_min_acting_age
        )
        entries.append(
            ReviewEntry(movie_id=movie.id, title=movie.title_en, anomalies=result)
        )

    path = write_review_report(entries, args.output or settings.report_dir)
    flagged = sum(1 for e in entries if e.needs_review)
    _print_json({"total": len(entries), "needs_review": flagged, "report": str(path)})
    return 0


async def _cmd_compare(args: argparse.Namespace, settings: Any) -> int:
    """Compare one title across the configured sources."""
    from signalgate.core.models import ComparisonQuery
    from signalgate.sources.orchestrator import ComparisonOrchestrator, to_signals_record
    from signalgate.sources.registry import create_registry

    registry = create_registry(settings)
    orchestrator = ComparisonOrchestrator.from_settings(settings, registry)
    if args.enable_all:
        orchestrator.enable_all()

    query = ComparisonQuery(
        title_en=args.title, release_year=args.year, tmdb_id=args.tmdb_id
    )
    async with registry.context:
        aggregated = await orchestrator.compare(query)

    _print_json({
        "aggregated": aggregated.model_dump(mode="json", by_alias=True),
        "signals": to_signals_record(aggregated),
    })
    return 0


async def _cmd_checkpoint_summary(args: argparse.Namespace, settings: Any) -> int:
    """Print checkpoint counts from the configured store."""
    manager, store = await _load_checkpoints(settings)
    try:
        _print_json(manager.get_summary().model_dump(mode="json"))
    finally:
        store.close()
    return 0


async def _cmd_checkpoint_resume(args: argparse.Namespace, settings: Any) -> int:
    """Print movie ids that completed the stage before ``stage`` but not ``stage``."""
    from signalgate.checkpoint.models import STAGE_ORDER

    if args.stage not in STAGE_ORDER:
        logger.error("Unknown stage: %s (expected one of %s)", args.stage, ", ".join(STAGE_ORDER))
        return 1
    manager, store = await _load_checkpoints(settings)
    try:
        _print_json(manager.get_movies_to_resume_from(args.stage))
    finally:
        store.close()
    return 0


async def _load_checkpoints(settings: Any) -> tuple[Any, Any]:
    from signalgate.checkpoint.manager import CheckpointManager
    from signalgate.checkpoint.store_factory import create_checkpoint_store

    store = create_checkpoint_store(settings)
    manager = CheckpointManager(store)
    await manager.load()
    return manager, store


def _load_movies(path: Path) -> list[Any] | None:
    """Read a JSON list of movies (or {"movies": [...]})."""
    from pydantic import ValidationError

    from signalgate.classification.models import MovieRecord

    if not path.exists():
        logger.error("File not found: %s", path)
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in %s: %s", path, e)
        return None
    if isinstance(data, dict):
        data = data.get("movies", [])
    if not isinstance(data, list):
        logger.error("Expected a list of movies in %s", path)
        return None
    try:
        return [MovieRecord.model_validate(item) for item in data]
    except ValidationError as e:
        logger.error("Invalid movie record in %s: %s", path, e)
        return None


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


if __name__ == "__main__":
    sys.exit(main())
