"""Study sessions: learning and quiz controllers, progress summaries."""

from commerce_tutor.study.learning_session import (
    TOPIC_LOAD_ERROR,
    LearningSession,
    LearningState,
    scroll_progress,
)
from commerce_tutor.study.progress_summary import ClassSummary, summarize_class
from commerce_tutor.study.quiz_session import QuizSession, QuizState

__all__ = [
    "TOPIC_LOAD_ERROR",
    "ClassSummary",
    "LearningSession",
    "LearningState",
    "QuizSession",
    "QuizState",
    "scroll_progress",
    "summarize_class",
]
