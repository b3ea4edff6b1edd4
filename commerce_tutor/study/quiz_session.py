"""
Quiz session controller for one chapter.

States: LOADING -> IN_PROGRESS -> COMPLETED, or LOADING -> NO_QUESTIONS
when nothing could be generated. ``retry()`` returns to LOADING from
either terminal state.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

from loguru import logger

from commerce_tutor.curriculum import Chapter
from commerce_tutor.generation.orchestrator import FetchOrchestrator
from commerce_tutor.models import QuizQuestion, QuizResult
from commerce_tutor.storage.progress_store import ProgressStore


class QuizState(str, Enum):
    """Lifecycle of a quiz attempt."""

    LOADING = "loading"
    IN_PROGRESS = "in_progress"
    NO_QUESTIONS = "no_questions"
    COMPLETED = "completed"


class QuizSession:
    """One attempt at a chapter quiz; only the final result is persisted."""

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
        self._reset()

    def _reset(self) -> None:
        self.state = QuizState.LOADING
        self.questions: list[QuizQuestion] = []
        self.current_index = 0
        self.selected_option: int | None = None
        self.answered = False
        self.score = 0
        self.result: QuizResult | None = None

    @property
    def current_question(self) -> QuizQuestion | None:
        if self.state is not QuizState.IN_PROGRESS:
            return None
        return self.questions[self.current_index]

    @property
    def is_last_question(self) -> bool:
        return bool(self.questions) and self.current_index == len(self.questions) - 1

    @property
    def answer_correct(self) -> bool | None:
        """Whether the submitted answer was right; None before submission."""
        question = self.current_question
        if question is None or not self.answered:
            return None
        return self.selected_option == question.correct_answer

    async def load(self) -> None:
        """Discard any working state and fetch questions for the chapter."""
        self._reset()
        questions = await self.orchestrator.get_quiz(self.chapter)
        self.questions = list(questions)
        if self.questions:
            self.state = QuizState.IN_PROGRESS
            logger.debug(f"Quiz for {self.chapter.key.progress_key}: {len(self.questions)} questions")
        else:
            self.state = QuizState.NO_QUESTIONS
            logger.warning(f"No quiz questions available for {self.chapter.key.progress_key}")

    async def retry(self) -> None:
        await self.load()

    def select_option(self, index: int) -> bool:
        """Tentatively choose an option; ignored once the answer is submitted."""
        question = self.current_question
        if question is None or self.answered:
            return False
        if not 0 <= index < len(question.options):
            return False
        self.selected_option = index
        return True

    def submit_answer(self) -> bool:
        """Lock in the selected option, scoring it. No-op without a selection."""
        question = self.current_question
        if question is None or self.answered or self.selected_option is None:
            return False
        self.answered = True
        if self.selected_option == question.correct_answer:
            self.score += 1
        return True

    def advance(self) -> bool:
        """
        Move past an answered question.

        After the last question the attempt completes and its result
        (the running score, counted once per question) is saved.
        """
        if self.state is not QuizState.IN_PROGRESS or not self.answered:
            return False

        if not self.is_last_question:
            self.current_index += 1
            self.selected_option = None
            self.answered = False
            return True

        self.state = QuizState.COMPLETED
        self.result = QuizResult(score=self.score, total=len(self.questions))
        self.progress_store.save_quiz_score(self.chapter.key, self.result)
        if self.on_progress_update is not None:
            self.on_progress_update()
        return True
