"""Tests for keyforge.cli."""

from __future__ import annotations

import json
import re

import pytest
from click.testing import CliRunner

from keyforge import __version__
from keyforge.cli import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _invoke(runner: CliRunner, *args: str, **kwargs):
    return runner.invoke(cli, list(args), obj={}, catch_exceptions=False, **kwargs)


class TestGenerationCommands:

    def test_generate_json(self, runner):
        result = _invoke(runner, "--output", "json", "generate", "--length", "20", "--count", "3")
        assert result.exit_code == 0
        report = json.loads(result.stdout)
        assert report["summary"]["count"] == 3
        assert all(len(r["value"]) == 20 for r in report["results"])

    def test_generate_console(self, runner):
        result = _invoke(runner, "generate", "--length", "12")
        assert result.exit_code == 0
        assert "Generated Password" in result.stdout

    def test_generate_class_flags(self, runner):
        result = _invoke(
            runner, "--quiet", "generate", "--length", "30",
            "--no-uppercase", "--no-lowercase", "--no-symbols",
        )
        assert result.exit_code == 0
        assert re.fullmatch(r"[0-9]{30}", result.stdout.strip())

    def test_invalid_length_exits_with_error(self, runner):
        result = _invoke(runner, "--quiet", "generate", "--length", "2")
        assert result.exit_code == 1
        assert "between 4 and 128" in result.output

    def test_bulk_limit(self, runner):
        result = _invoke(runner, "--quiet", "generate", "--count", "101")
        assert result.exit_code == 1

    def test_pin(self, runner):
        result = _invoke(runner, "--quiet", "pin", "--length", "8")
        assert re.fullmatch(r"[0-9]{8}", result.stdout.strip())

    def test_pattern(self, runner):
        result = _invoke(runner, "--quiet", "pattern", "99-XX")
        assert re.fullmatch(r"[0-9]{2}-[A-Z]{2}", result.stdout.strip())

    def test_passphrase(self, runner):
        result = _invoke(runner, "--quiet", "passphrase", "--words", "3", "--no-number")
        assert result.exit_code == 0
        assert result.stdout.strip().count("-") == 2

    def test_passphrase_invalid_word_count(self, runner):
        result = _invoke(runner, "--quiet", "passphrase", "--words", "2")
        assert result.exit_code == 1

    def test_json_report_file(self, runner, tmp_path):
        path = tmp_path / "report.json"
        result = _invoke(runner, "--output", "json", "--output-file", str(path), "pin")
        assert result.exit_code == 0
        assert json.loads(path.read_text(encoding="utf-8"))["results"][0]["kind"] == "pin"


class TestAnalysisCommands:

    def test_analyze_json(self, runner):
        result = _invoke(runner, "--output", "json", "analyze", "password")
        data = json.loads(result.stdout)
        assert data["length"] == 8
        assert data["entropy"] == 37.6
        assert data["score"] == 48
        assert data["level"] == 2

    def test_analyze_prompts_when_missing(self, runner):
        result = _invoke(runner, "--quiet", "analyze", input="password\n")
        assert result.exit_code == 0
        assert "Moderate (37.60 bits" in result.stdout

    def test_crack_time(self, runner):
        assert _invoke(runner, "--quiet", "crack-time", "0").stdout.strip() == "instant"
        data = json.loads(_invoke(runner, "--output", "json", "crack-time", "60").stdout)
        assert data["time_to_crack"] == "3 months"

    def test_selftest_json(self, runner):
        result = _invoke(runner, "--output", "json", "selftest", "--samples", "1000")
        assert result.exit_code in (0, 2)
        data = json.loads(result.stdout)
        assert [c["name"] for c in data["checks"]] == ["random_int", "random_bytes"]
        assert data["passed"] is (result.exit_code == 0)

    def test_version(self, runner):
        result = _invoke(runner, "--version")
        assert __version__ in result.stdout


class TestHistoryCommands:

    def test_save_then_query(self, runner, tmp_path):
        history = tmp_path / "history.json"
        saved = _invoke(
            runner, "--quiet", "generate", "--count", "2",
            "--save", str(history), "--label", "work", "--tag", "mail",
        )
        assert saved.exit_code == 0
        _invoke(runner, "--quiet", "pin", "--save", str(history))

        stats = json.loads(
            _invoke(runner, "--output", "json", "history", "stats", str(history)).stdout
        )
        assert stats["total_count"] == 3
        assert stats["kind_distribution"] == {"standard": 2, "pin": 1}

        found = _invoke(runner, "--quiet", "history", "search", str(history), "MAIL")
        assert len(found.stdout.split()) == 2

        csv_path = tmp_path / "history.csv"
        exported = _invoke(runner, "--quiet", "history", "export", str(history), str(csv_path))
        assert exported.exit_code == 0
        assert csv_path.read_bytes().startswith(b"\xef\xbb\xbf")

    def test_stats_on_invalid_file(self, runner, tmp_path):
        history = tmp_path / "history.json"
        history.write_text("{}", encoding="utf-8")
        result = _invoke(runner, "history", "stats", str(history))
        assert result.exit_code == 1
