"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import json
import sys

import pytest
from loguru import logger
from typer.testing import CliRunner

from config import get_settings
from ventylab.cli.main import app

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

runner = CliRunner()

QUIET = ["--log-level", "ERROR"]


@pytest.fixture(autouse=True)
def content_root(tmp_path, monkeypatch):
    """Point the CLI at an empty content root for every test."""
    monkeypatch.setenv("VENTYLAB_CONTENT_ROOT", str(tmp_path))
    monkeypatch.setenv("VENTYLAB_CONTENT_SOURCE", "bundled")
    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()
    # the CLI callback rebinds loguru to the runner's captured stderr
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def lessons_dir(content_root):
    path = content_root / "lessons"
    path.mkdir()
    return path


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self):
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0, result.output
        assert "lessons" in result.output

    def test_lessons_help(self):
        result = runner.invoke(app, ["lessons", "--help"])

        assert result.exit_code == 0, result.output
        assert "validate" in result.output

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "ventylab" in result.output

    def test_config(self):
        result = runner.invoke(app, [*QUIET, "config"])

        assert result.exit_code == 0, result.output
        assert "VentyLab Configuration" in result.output


class TestValidateCommand:
    """Test lessons validate."""

    def test_valid_tree(self, lessons_dir, json_writer, lesson_factory):
        json_writer(lessons_dir / "module-01-fundamentals" / "lesson-a.json", lesson_factory("lesson-a"))

        result = runner.invoke(app, [*QUIET, "lessons", "validate"])

        assert result.exit_code == 0, result.output
        assert "Total files validated: 1" in result.output
        assert "All lessons are valid!" in result.output

    def test_blocking_issue_exits_1(self, lessons_dir, json_writer, lesson_factory):
        json_writer(lessons_dir / "module-01-fundamentals" / "lesson-a.json", lesson_factory("lesson-a"))
        json_writer(lessons_dir / "module-01-fundamentals" / "lesson-b.json", lesson_factory("lesson-b", orders=()))

        result = runner.invoke(app, [*QUIET, "lessons", "validate", str(lessons_dir)])

        assert result.exit_code == 1
        assert "Zero Pages Errors" in result.output
        assert "Validation failed with 1 issue(s)" in result.output

    def test_no_files(self, lessons_dir):
        result = runner.invoke(app, [*QUIET, "lessons", "validate"])

        assert result.exit_code == 0
        assert "No lesson files found" in result.output

    def test_missing_directory(self, content_root):
        result = runner.invoke(app, [*QUIET, "lessons", "validate", str(content_root / "nope")])

        assert result.exit_code == 1

    def test_missing_schema(self, lessons_dir, content_root):
        result = runner.invoke(
            app, [*QUIET, "lessons", "validate", "--schema", str(content_root / "missing.schema.json")]
        )

        assert result.exit_code == 1


class TestManifestCommand:
    """Test lessons manifest."""

    def test_prints_json(self, lessons_dir, json_writer, lesson_factory):
        json_writer(lessons_dir / "module-01-fundamentals" / "lesson-a.json", lesson_factory("lesson-a"))

        result = runner.invoke(app, [*QUIET, "lessons", "manifest"])

        assert result.exit_code == 0, result.output
        manifest = json.loads(result.stdout)
        assert manifest["lessons"] == [
            {"moduleId": "module-01-fundamentals", "lessonId": "lesson-a", "sectionsCount": 3}
        ]

    def test_writes_file(self, lessons_dir, json_writer, lesson_factory, tmp_path):
        json_writer(lessons_dir / "module-01-fundamentals" / "lesson-a.json", lesson_factory("lesson-a"))
        output = tmp_path / "out" / "lessons.manifest.json"

        result = runner.invoke(app, [*QUIET, "lessons", "manifest", "--output", str(output)])

        assert result.exit_code == 0, result.output
        assert json.loads(output.read_text(encoding="utf-8"))["version"] == "1.0.0"


class TestLessonCommands:
    """Test lessons resolve and lessons show."""

    def test_resolve(self):
        result = runner.invoke(app, [*QUIET, "lessons", "resolve", "lesson-02-gas-exchange", "module-01-fundamentals"])

        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "lessons/module-01-fundamentals/lesson-02-gas-exchange.json"

    def test_show(self, lessons_dir, json_writer, flat_lesson):
        json_writer(lessons_dir / "module-01-fundamentals" / "lesson-02-gas-exchange.json", flat_lesson)

        result = runner.invoke(app, [*QUIET, "lessons", "show", "gas-exchange", "module-01-fundamentals"])

        assert result.exit_code == 0, result.output
        document = json.loads(result.stdout)
        assert document["lessonId"] == "gas-exchange"
        assert document["title"] == "Intercambio gaseoso"

    def test_show_missing_lesson(self, monkeypatch):
        monkeypatch.setenv("VENTYLAB_RETRY_MAX_ATTEMPTS", "1")
        get_settings.cache_clear()

        result = runner.invoke(
            app, [*QUIET, "lessons", "show", "respiratory-anatomy", "module-01-fundamentals", "--source", "bundled"]
        )

        assert result.exit_code == 1

    def test_show_unknown_source(self):
        result = runner.invoke(app, [*QUIET, "lessons", "show", "a", "module-01-fundamentals", "--source", "ftp"])

        assert result.exit_code == 1
