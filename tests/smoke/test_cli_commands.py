"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import sys

import pytest
from loguru import logger
from typer.testing import CliRunner

from commerce_tutor.cli import main as cli
from commerce_tutor.models import ChapterKey, QuizResult
from commerce_tutor.storage import ContentCache, ProgressStore, SQLiteKeyValueStore
from config import get_settings

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point settings at a temporary data directory with no API key."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    for name in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY", "AI_MODEL", "SEARCH_GROUNDING"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield tmp_path / "data" / "state.db"
    get_settings.cache_clear()
    # The CLI points loguru at the runner's captured stderr
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def with_api_key(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    get_settings.cache_clear()


class TestCLIHelp:
    def test_main_help(self):
        result = runner.invoke(cli.app, ["--help"])
        assert result.exit_code == 0
        for command in ("learn", "quiz", "glossary", "stats", "cache"):
            assert command in result.stdout

    def test_cache_help(self):
        result = runner.invoke(cli.app, ["cache", "--help"])
        assert result.exit_code == 0
        assert "info" in result.stdout
        assert "clear" in result.stdout


class TestStats:
    def test_empty_progress(self):
        result = runner.invoke(cli.app, ["stats", "12"])
        assert result.exit_code == 0
        assert "Chapters completed: 0" in result.stdout

    def test_reports_saved_progress(self, isolated_settings):
        store = SQLiteKeyValueStore(isolated_settings)
        progress = ProgressStore(store)
        key = ChapterKey(12, "accounts", "ch1")
        progress.mark_chapter_complete(key)
        progress.save_quiz_score(key, QuizResult(score=4, total=5))
        store.close()

        result = runner.invoke(cli.app, ["stats", "12", "--chapters", "10"])

        assert result.exit_code == 0
        assert "Chapters completed: 1 / 10" in result.stdout
        assert "Accountancy" in result.stdout
        assert "4/5" in result.stdout

    def test_subject_percentages(self, isolated_settings):
        store = SQLiteKeyValueStore(isolated_settings)
        progress = ProgressStore(store)
        progress.mark_chapter_complete(ChapterKey(12, "accounts", "ch1"))
        progress.mark_chapter_complete(ChapterKey(12, "accounts", "ch2"))
        progress.mark_chapter_complete(ChapterKey(12, "eco", "ch1"))
        store.close()

        result = runner.invoke(cli.app, ["stats", "12", "--subject-chapters", "8"])

        assert result.exit_code == 0
        assert "Progress" in result.stdout
        assert "25%" in result.stdout
        assert "12%" in result.stdout

    def test_subject_percentages_hidden_without_totals(self, isolated_settings):
        store = SQLiteKeyValueStore(isolated_settings)
        ProgressStore(store).mark_chapter_complete(ChapterKey(12, "accounts", "ch1"))
        store.close()

        result = runner.invoke(cli.app, ["stats", "12"])

        assert result.exit_code == 0
        assert "Progress" not in result.stdout.replace("Overall progress", "")


class TestCache:
    def test_info_and_clear(self, isolated_settings):
        store = SQLiteKeyValueStore(isolated_settings)
        ContentCache(store).set("syllabus_12_accounts_ch1", {"kind": "syllabus", "topics": ["Introduction"]})
        store.close()

        info = runner.invoke(cli.app, ["cache", "info"])
        assert info.exit_code == 0
        assert "Entries: 1" in info.stdout

        cleared = runner.invoke(cli.app, ["cache", "clear", "--yes"])
        assert cleared.exit_code == 0

        info = runner.invoke(cli.app, ["cache", "info"])
        assert "Entries: 0" in info.stdout

    def test_clear_declined(self):
        result = runner.invoke(cli.app, ["cache", "clear"], input="n\n")
        assert result.exit_code == 0
        assert "cleared" not in result.stdout


class TestChapterCommands:
    def test_glossary_without_api_key(self):
        result = runner.invoke(cli.app, ["glossary", "12", "accounts", "ch1"])
        assert result.exit_code == 1
        assert "GEMINI_API_KEY" in result.stdout

    def test_unknown_subject(self):
        result = runner.invoke(cli.app, ["learn", "12", "physics", "ch1"])
        assert result.exit_code == 2
        assert "Unknown subject" in result.stdout

    def test_unknown_class(self):
        result = runner.invoke(cli.app, ["quiz", "10", "accounts", "ch1"])
        assert result.exit_code == 2

    def test_glossary_with_scripted_provider(self, with_api_key, monkeypatch, provider_factory):
        provider = provider_factory()
        monkeypatch.setattr(cli, "GeminiContentProvider", lambda **kwargs: provider)

        result = runner.invoke(cli.app, ["glossary", "12", "accounts", "ch1", "--title", "Partnership"])

        assert result.exit_code == 0
        assert "Goodwill" in result.stdout
        assert "Capital" in result.stdout

    def test_glossary_filter(self, with_api_key, monkeypatch, provider_factory):
        provider = provider_factory()
        monkeypatch.setattr(cli, "GeminiContentProvider", lambda **kwargs: provider)

        result = runner.invoke(cli.app, ["glossary", "12", "accounts", "ch1", "-f", "reputation"])

        assert result.exit_code == 0
        assert "Goodwill" in result.stdout
        assert "Capital" not in result.stdout

    def test_default_settings_build_ungrounded_provider(self, with_api_key, monkeypatch, provider_factory):
        captured = {}
        provider = provider_factory()

        def build(**kwargs):
            captured.update(kwargs)
            return provider

        monkeypatch.setattr(cli, "GeminiContentProvider", build)

        result = runner.invoke(cli.app, ["glossary", "12", "accounts", "ch1"])

        assert result.exit_code == 0
        assert captured["model_name"] == "gemini-2.0-flash"
        assert captured["search_grounding"] is False

    def test_grounding_enabled_from_environment(self, with_api_key, monkeypatch, provider_factory):
        captured = {}
        provider = provider_factory()

        def build(**kwargs):
            captured.update(kwargs)
            return provider

        monkeypatch.setattr(cli, "GeminiContentProvider", build)
        monkeypatch.setenv("SEARCH_GROUNDING", "true")
        monkeypatch.setenv("AI_MODEL", "gemini-1.5-flash")
        get_settings.cache_clear()

        result = runner.invoke(cli.app, ["glossary", "12", "accounts", "ch1"])

        assert result.exit_code == 0
        assert captured["search_grounding"] is True
        assert captured["model_name"] == "gemini-1.5-flash"


def test_filter_terms(provider_factory):
    from commerce_tutor.models import GlossaryTerm

    terms = [GlossaryTerm(**t) for t in provider_factory().glossary]

    assert [t.term for t in cli.filter_terms(terms, "GOOD")] == ["Goodwill"]
    assert [t.term for t in cli.filter_terms(terms, "investment")] == ["Capital"]
    assert len(cli.filter_terms(terms, "  ")) == 2
