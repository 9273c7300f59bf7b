# tests/unit/test_main.py — v1
"""Tests for main.py — CLI entry point."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from signalgate.config.settings import ConfigurationError, Settings
from signalgate.main import _build_parser, _load_movies, main

_MOVIES = [
    {
        "id": "m-001", "title_en": "Jersey", "release_year": 2019, "slug": "jersey-2019",
        "genres": ["Drama", "Sports"], "mood_tags": ["emotional"], "hero": "Nani",
        "audience_fit": {"family_watch": True}, "runtime_minutes": 160,
    },
    {
        "id": "m-002", "title_en": "Old Print", "release_year": 2010, "slug": "old-print-2018",
        "genres": ["Drama"], "age_rating": "A",
    },
]


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        checkpoint_backend="memory",
        report_dir=tmp_path / "reports",
        log_level="WARNING",
        execution_retry_delay_ms=0,
    )


@pytest.fixture
def movies_file(tmp_path: Path) -> Path:
    path = tmp_path / "movies.json"
    path.write_text(json.dumps(_MOVIES), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Parser tests
# ---------------------------------------------------------------------------

class TestBuildParser:
    def test_version_flag(self, capsys):
        parser = _build_parser()
        with pytest.raises(SystemExit) as exc_info:
            parser.parse_args(["--version"])
        assert exc_info.value.code == 0
        assert "signalgate" in capsys.readouterr().out

    def test_classify_defaults(self):
        args = _build_parser().parse_args(["classify", "movies.json"])
        assert args.command == "classify"
        assert args.movies == Path("movies.json")
        assert args.stage == "tagging"
        assert args.verbose is False

    def test_anomalies_output(self):
        args = _build_parser().parse_args(["anomalies", "movies.json", "-o", "/tmp/out"])
        assert args.output == Path("/tmp/out")

    def test_compare_subcommand(self):
        args = _build_parser().parse_args(
            ["compare", "Eega", "2012", "--tmdb-id", "101", "--enable-all"]
        )
        assert args.title == "Eega"
        assert args.year == 2012
        assert args.tmdb_id == 101
        assert args.enable_all is True

    def test_checkpoint_subcommands(self):
        parser = _build_parser()
        assert parser.parse_args(["checkpoint", "summary"]).checkpoint_command == "summary"
        args = parser.parse_args(["checkpoint", "resume", "media"])
        assert args.stage == "media"


# ---------------------------------------------------------------------------
# Movie file loading
# ---------------------------------------------------------------------------

class TestLoadMovies:
    def test_list(self, movies_file: Path):
        movies = _load_movies(movies_file)
        assert [m.id for m in movies] == ["m-001", "m-002"]

    def test_wrapped_object(self, tmp_path: Path):
        path = tmp_path / "wrapped.json"
        path.write_text(json.dumps({"movies": _MOVIES[:1]}), encoding="utf-8")
        assert len(_load_movies(path)) == 1

    def test_missing_file(self, tmp_path: Path):
        assert _load_movies(tmp_path / "nope.json") is None

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "bad.json"
        path.write_text("[{", encoding="utf-8")
        assert _load_movies(path) is None

    def test_not_a_list(self, tmp_path: Path):
        path = tmp_path / "scalar.json"
        path.write_text("42", encoding="utf-8")
        assert _load_movies(path) is None

    def test_invalid_record(self, tmp_path: Path):
        path = tmp_path / "noid.json"
        path.write_text(json.dumps([{"title_en": "No id"}]), encoding="utf-8")
        assert _load_movies(path) is None


# ---------------------------------------------------------------------------
# main() integration
# ---------------------------------------------------------------------------

class TestMain:
    def test_no_command_returns_1(self):
        assert main([]) == 1

    def test_configuration_error(self, capsys):
        with patch(
            "signalgate.config.settings.load_settings",
            side_effect=ConfigurationError("CHECKPOINT_BACKEND=redis requires CHECKPOINT_REDIS_URL"),
        ):
            assert main(["checkpoint", "summary"]) == 1
        assert "Configuration error" in capsys.readouterr().err

    def test_classify_gates_writes(self, settings, movies_file, capsys):
        with patch("signalgate.config.settings.load_settings", return_value=settings):
            assert main(["classify", str(movies_file)]) == 0
        decisions = sorted(json.loads(capsys.readouterr().out), key=lambda d: d["movie_id"])
        assert [d["movie_id"] for d in decisions] == ["m-001", "m-002"]
        assert decisions[0]["valid"] is True
        assert decisions[0]["written"]["primary_genre"] == "Drama"
        assert decisions[1]["valid"] is False
        assert decisions[1]["issues"] == ['Would downgrade age rating from "A" to "U/A"']

    def test_classify_unknown_stage(self, settings, movies_file):
        with patch("signalgate.config.settings.load_settings", return_value=settings):
            assert main(["classify", str(movies_file), "--stage", "bogus"]) == 1

    def test_classify_missing_file(self, settings, tmp_path):
        with patch("signalgate.config.settings.load_settings", return_value=settings):
            assert main(["classify", str(tmp_path / "nope.json")]) == 1

    def test_anomalies_writes_report(self, settings, movies_file, tmp_path, capsys):
        out_dir = tmp_path / "out"
        with patch("signalgate.config.settings.load_settings", return_value=settings):
            assert main(["anomalies", str(movies_file), "-o", str(out_dir)]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["total"] == 2
        assert payload["needs_review"] == 1
        report = Path(payload["report"])
        assert report == out_dir / "review-report.md"
        assert "### Old Print" in report.read_text(encoding="utf-8")

    def test_anomalies_default_report_dir(self, settings, movies_file, capsys):
        with patch("signalgate.config.settings.load_settings", return_value=settings):
            assert main(["anomalies", str(movies_file)]) == 0
        assert (settings.report_dir / "review-report.md").exists()

    def test_checkpoint_summary_empty(self, settings, capsys):
        with patch("signalgate.config.settings.load_settings", return_value=settings):
            assert main(["checkpoint", "summary"]) == 0
        summary = json.loads(capsys.readouterr().out)
        assert summary["total"] == 0
        assert summary["by_status"]["raw"] == 0

    def test_checkpoint_resume_unknown_stage(self, settings):
        with patch("signalgate.config.settings.load_settings", return_value=settings):
            assert main(["checkpoint", "resume", "bogus"]) == 1

    def test_checkpoint_resume_from_json_store(self, tmp_path, movies_file, capsys):
        s = Settings(
            _env_file=None, checkpoint_backend="json", checkpoint_root=tmp_path / "cp",
            log_level="WARNING", execution_retry_delay_ms=0,
        )
        with patch("signalgate.config.settings.load_settings", return_value=s):
            assert main(["classify", str(movies_file), "--stage", "discovery"]) == 0
            capsys.readouterr()
            assert main(["checkpoint", "resume", "validation"]) == 0
        assert json.loads(capsys.readouterr().out) == ["m-001", "m-002"]

    def test_keyboard_interrupt_returns_130(self, settings):
        with patch("signalgate.config.settings.load_settings", return_value=settings), \
                patch("signalgate.main._cmd_checkpoint_summary",
                      AsyncMock(side_effect=KeyboardInterrupt)):
            assert main(["checkpoint", "summary"]) == 130

    def test_unexpected_error_returns_1(self, settings):
        with patch("signalgate.config.settings.load_settings", return_value=settings), \
                patch("signalgate.main._cmd_checkpoint_summary",
                      AsyncMock(side_effect=RuntimeError("boom"))):
            assert main(["checkpoint", "summary"]) == 1
