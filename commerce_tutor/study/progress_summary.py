"""Dashboard statistics derived from the progress record."""

from __future__ import annotations

from dataclasses import dataclass, field

from commerce_tutor.curriculum import SUBJECTS
from commerce_tutor.models import Progress, QuizResult


@dataclass
class ClassSummary:
    """Progress for one class level."""

    class_level: int
    completed_chapters: int
    total_chapters: int
    quizzes_taken: int
    average_quiz_percent: float | None
    subject_completed: dict[str, int] = field(default_factory=dict)
    recent_quizzes: list[tuple[str, QuizResult]] = field(default_factory=list)

    @property
    def progress_percent(self) -> int:
        if self.total_chapters <= 0:
            return 0
        return round(self.completed_chapters / self.total_chapters * 100)

    def subject_percent(self, subject_id: str, subject_total: int) -> float:
        if subject_total <= 0:
            return 0.0
        return min(100.0, self.subject_completed.get(subject_id, 0) / subject_total * 100)


def summarize_class(
    progress: Progress,
    class_level: int,
    total_chapters: int = 0,
    recent_limit: int = 5,
) -> ClassSummary:
    """
    Summarize progress for a class level.

    Args:
        progress: The stored progress record
        class_level: 11 or 12
        total_chapters: Number of chapters offered for the class (0 if unknown)
        recent_limit: How many latest quiz results to include

    Returns:
        ClassSummary with completion and quiz statistics
    """
    prefix = f"{class_level}-"
    completed = [c for c in progress.completed_chapters if c.startswith(prefix)]

    per_subject: dict[str, int] = {}
    for chapter in completed:
        subject_id = chapter[len(prefix):].split("-", 1)[0]
        if subject_id in SUBJECTS:
            per_subject[subject_id] = per_subject.get(subject_id, 0) + 1

    quizzes = [(key, r) for key, r in progress.quiz_scores.items() if key.startswith(prefix)]
    average = None
    if quizzes:
        average = round(sum(r.percentage for _, r in quizzes) / len(quizzes), 1)
    quizzes.sort(key=lambda item: item[1].date, reverse=True)

    return ClassSummary(
        class_level=class_level,
        completed_chapters=len(completed),
        total_chapters=max(total_chapters, len(completed)),
        quizzes_taken=len(quizzes),
        average_quiz_percent=average,
        subject_completed=per_subject,
        recent_quizzes=quizzes[:recent_limit],
    )
