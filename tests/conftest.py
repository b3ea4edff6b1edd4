"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import asyncio
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from commerce_tutor.curriculum import make_chapter  # noqa: E402
from commerce_tutor.generation.orchestrator import FetchOrchestrator  # noqa: E402
from commerce_tutor.storage import (  # noqa: E402
    ContentCache,
    MemoryKeyValueStore,
    ProgressStore,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (SQLite substrate)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


# =============================================================================
# Fake Content Provider
# =============================================================================


def make_question(n: int, correct: int = 0) -> dict:
    """Raw quiz question as a provider would return it."""
    return {
        "question": f"Question {n}?",
        "options": ["A", "B", "C", "D"],
        "correctAnswer": correct,
        "explanation": f"Because of rule {n}.",
    }


class FakeProvider:
    """
    Scripted content provider.

    Any configured value that is an Exception instance is raised instead of
    returned. ``gates`` maps a topic title to an asyncio.Event the
    explanation request waits on before answering.
    """

    def __init__(
        self,
        syllabus=None,
        explanations=None,
        quiz=None,
        glossary=None,
    ):
        self.syllabus = syllabus if syllabus is not None else ["Basics", "Advanced"]
        self.explanations = explanations or {}
        self.quiz = quiz if quiz is not None else [make_question(i) for i in range(5)]
        self.glossary = glossary if glossary is not None else [
            {"term": "Goodwill", "definition": "Value of reputation"},
            {"term": "Capital", "definition": "Owners' investment"},
        ]
        self.gates: dict[str, asyncio.Event] = {}
        self.started: dict[str, asyncio.Event] = {}
        self.calls: list[tuple] = []

    @staticmethod
    def _resolve(value):
        if isinstance(value, Exception):
            raise value
        return value

    def _started(self, name: str) -> None:
        self.started.setdefault(name, asyncio.Event()).set()

    async def get_syllabus(self, class_level, subject_name, chapter_title):
        self.calls.append(("syllabus", chapter_title))
        self._started("syllabus")
        gate = self.gates.get("syllabus")
        if gate is not None:
            await gate.wait()
        return self._resolve(self.syllabus)

    async def get_explanation(self, class_level, subject_name, chapter_title, topic):
        self.calls.append(("content", topic))
        self._started(topic)
        gate = self.gates.get(topic)
        if gate is not None:
            await gate.wait()
        value = self.explanations.get(topic, {"content": f"# {topic}\nNotes on {topic}.", "sources": []})
        return self._resolve(value)

    async def get_quiz(self, class_level, subject_name, chapter_title):
        self.calls.append(("quiz", chapter_title))
        return self._resolve(self.quiz)

    async def get_glossary(self, class_level, subject_name, chapter_title):
        self.calls.append(("glossary", chapter_title))
        return self._resolve(self.glossary)

    def count(self, kind: str) -> int:
        return sum(1 for call in self.calls if call[0] == kind)


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def substrate():
    """In-memory key/value substrate."""
    return MemoryKeyValueStore()


@pytest.fixture
def progress_store(substrate):
    return ProgressStore(substrate)


@pytest.fixture
def cache(substrate):
    return ContentCache(substrate)


@pytest.fixture
def sample_chapter():
    """Class 12 Accountancy, chapter 1."""
    return make_chapter(12, "accounts", "ch1", "Partnership")


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def orchestrator(fake_provider, cache):
    return FetchOrchestrator(fake_provider, cache)


@pytest.fixture
def provider_factory():
    """Build a FakeProvider with custom scripted responses."""
    return FakeProvider


@pytest.fixture
def question_factory():
    return make_question
