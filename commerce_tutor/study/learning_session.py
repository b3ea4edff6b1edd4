"""
Learning session controller for one chapter.

States: INITIALIZING_SYLLABUS -> READY, with an independent
``loading_content`` flag while READY. Navigation (next/previous/jump_to)
is synchronous; the caller awaits ``load_content()`` afterwards to fetch
the explanation for the new index.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

from loguru import logger

from commerce_tutor.curriculum import Chapter
from commerce_tutor.generation.orchestrator import FetchOrchestrator
from commerce_tutor.models import Source
from commerce_tutor.storage.progress_store import ProgressStore

TOPIC_LOAD_ERROR = "## Error\nUnable to load this topic."


class LearningState(str, Enum):
    """Lifecycle of a learning session."""

    INITIALIZING_SYLLABUS = "initializing_syllabus"
    READY = "ready"


def scroll_progress(position: float, scroll_height: float, viewport_height: float) -> float:
    """
    Percentage of a document read, clamped to [0, 100].

    A document with nothing to scroll counts as fully read.
    """
    scrollable = scroll_height - viewport_height
    if scrollable <= 0:
        return 100.0
    return max(0.0, min(100.0, position / scrollable * 100))


class LearningSession:
    """
    Walks a learner through a chapter's topics.

    Working state is transient; the only persisted effect is marking the
    chapter complete once the last topic's content has loaded.
    """

    def __init__(
        self,
        chapter: Chapter,
        orchestrator: FetchOrchestrator,
        progress_store: ProgressStore,
        on_progress_update: Callable[[], None] | None = None,
    ):
        self.chapter = chapter
        self.orchestrator = orchestrator
        self.progress_store = progress_store
        self.on_progress_update = on_progress_update

        self.state = LearningState.INITIALIZING_SYLLABUS
        self.topics: list[str] = []
        self.current_index = 0
        self.content = ""
        self.sources: list[Source] = []
        self.read_progress = 0.0
        self.loading_content = False
        self.chapter_completed = False
        self._load_generation = 0

    # =========================================================================
    # Derived State
    # =========================================================================

    @property
    def loading_syllabus(self) -> bool:
        return self.state is LearningState.INITIALIZING_SYLLABUS

    @property
    def last_index(self) -> int:
        return len(self.topics) - 1

    @property
    def current_topic(self) -> str | None:
        if not self.topics:
            return None
        return self.topics[self.current_index]

    @property
    def is_last_topic(self) -> bool:
        return bool(self.topics) and self.current_index == self.last_index

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def open(self) -> None:
        """Reset the view, resolve the topic list, then load the first topic."""
        # Results of loads started before this point are stale
        self._load_generation += 1
        self.state = LearningState.INITIALIZING_SYLLABUS
        self.current_index = 0
        self.content = ""
        self.sources = []
        self.read_progress = 0.0
        self.loading_content = False

        result = await self.orchestrator.cold_start(self.chapter)
        self.topics = result.topics
        self.state = LearningState.READY
        logger.debug(
            f"Opened {self.chapter.key.progress_key} with {len(self.topics)} topics "
            f"(cached={result.from_cache}, seeded={result.seeded})"
        )
        await self.load_content()

    async def load_content(self) -> None:
        """
        Load the explanation for the current index.

        If navigation happens while a fetch is in flight, the late result is
        still cached by the orchestrator but not displayed.
        """
        if self.state is not LearningState.READY or not self.topics:
            return

        self._load_generation += 1
        generation = self._load_generation
        index = self.current_index
        topic = self.topics[index]
        self.loading_content = True

        try:
            explanation = await self.orchestrator.get_explanation(self.chapter, index, topic)
        except Exception as e:
            logger.error(f"Failed to load topic {index} of {self.chapter.key.progress_key}: {e}")
            content, sources = TOPIC_LOAD_ERROR, []
        else:
            content, sources = explanation.content, explanation.sources

        if generation != self._load_generation:
            logger.debug(f"Discarding stale content for topic {index}")
            return

        self.content = content
        self.sources = list(sources)
        self.loading_content = False
        self._check_completion()

    def _check_completion(self) -> None:
        if not self.is_last_topic or self.loading_content or self.loading_syllabus:
            return
        newly_completed = self.progress_store.mark_chapter_complete(self.chapter.key)
        self.chapter_completed = True
        if newly_completed and self.on_progress_update is not None:
            self.on_progress_update()

    # =========================================================================
    # Navigation
    # =========================================================================

    def _move_to(self, index: int) -> None:
        self.current_index = index
        self.read_progress = 0.0
        self.loading_content = True

    def next(self) -> bool:
        """Step to the next topic. Returns False at the last topic."""
        if self.loading_syllabus or self.current_index >= self.last_index:
            return False
        self._move_to(self.current_index + 1)
        return True

    def previous(self) -> bool:
        """Step to the previous topic. Returns False at the first topic."""
        if self.loading_syllabus or self.current_index <= 0:
            return False
        self._move_to(self.current_index - 1)
        return True

    def jump_to(self, index: int) -> bool:
        """Select a topic directly from the syllabus."""
        if self.loading_syllabus or not 0 <= index <= self.last_index or index == self.current_index:
            return False
        self._move_to(index)
        return True

    def update_read_progress(self, position: float, scroll_height: float, viewport_height: float) -> float:
        self.read_progress = scroll_progress(position, scroll_height, viewport_height)
        return self.read_progress
