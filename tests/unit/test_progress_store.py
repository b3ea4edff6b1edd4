"""
Unit tests for ProgressStore.

Run: pytest tests/unit/test_progress_store.py -v
"""

import json

from commerce_tutor.models import ChapterKey, Progress, QuizResult
from commerce_tutor.storage.progress_store import BACKUP_SUFFIX, PROGRESS_RECORD, ProgressStore

KEY = ChapterKey(12, "accounts", "ch1")


class CountingStore:
    """Substrate wrapper that counts writes."""

    def __init__(self, inner):
        self.inner = inner
        self.writes = 0

    def get(self, name):
        return self.inner.get(name)

    def set(self, name, value):
        self.writes += 1
        self.inner.set(name, value)

    def delete(self, name):
        self.inner.delete(name)


def test_absent_record_loads_none(progress_store):
    assert progress_store.load_progress() is None
    assert progress_store.current() == Progress()


def test_save_uses_persisted_field_names(progress_store, substrate):
    progress_store.save_progress(Progress(completed_chapters=["11-eco-ch2"]))

    raw = json.loads(substrate.get(PROGRESS_RECORD))
    assert raw == {"completedChapters": ["11-eco-ch2"], "quizScores": {}}


def test_mark_chapter_complete_is_idempotent(substrate):
    counting = CountingStore(substrate)
    store = ProgressStore(counting)

    assert store.mark_chapter_complete(KEY) is True
    assert store.mark_chapter_complete(KEY) is False

    assert store.current().completed_chapters == ["12-accounts-ch1"]
    assert counting.writes == 1


def test_quiz_score_overwrites_previous_attempt(progress_store):
    progress_store.save_quiz_score(KEY, QuizResult(score=2, total=5))
    progress_store.save_quiz_score(KEY, QuizResult(score=5, total=5))

    result = progress_store.current().quiz_result(KEY)
    assert (result.score, result.total) == (5, 5)
    assert len(progress_store.current().quiz_scores) == 1


def test_mutations_preserve_other_fields(progress_store):
    progress_store.save_quiz_score(KEY, QuizResult(score=3, total=5))
    progress_store.mark_chapter_complete(ChapterKey(11, "stats", "ch4"))

    progress = progress_store.current()
    assert progress.completed_chapters == ["11-stats-ch4"]
    assert progress.quiz_result(KEY).score == 3


def test_corrupt_record_is_treated_as_absent(substrate):
    substrate.set(PROGRESS_RECORD, b"{not json")
    store = ProgressStore(substrate)

    assert store.load_progress() is None
    assert store.mark_chapter_complete(KEY) is True
    assert store.load_progress().completed_chapters == ["12-accounts-ch1"]


def test_wrong_shape_is_treated_as_absent(substrate):
    substrate.set(PROGRESS_RECORD, b'{"completedChapters": 5}')
    assert ProgressStore(substrate).load_progress() is None


def test_reads_record_written_with_iso_dates(substrate):
    substrate.set(
        PROGRESS_RECORD,
        json.dumps(
            {
                "completedChapters": ["12-accounts-ch1"],
                "quizScores": {"12-accounts-ch1": {"score": 4, "total": 5, "date": "2024-03-01T09:30:00.000Z"}},
            }
        ).encode("utf-8"),
    )

    result = ProgressStore(substrate).current().quiz_result(KEY)
    assert result.date.year == 2024
    assert result.percentage == 80.0


def test_invalid_quiz_result_is_backed_up_before_overwrite(substrate):
    raw = json.dumps(
        {
            "completedChapters": ["11-eco-ch1", "11-eco-ch2"],
            "quizScores": {"12-accounts-ch1": {"score": 9, "total": 5, "date": "2024-03-01T09:30:00.000Z"}},
        }
    ).encode("utf-8")
    substrate.set(PROGRESS_RECORD, raw)
    store = ProgressStore(substrate)

    assert store.load_progress() is None
    assert substrate.get(PROGRESS_RECORD + BACKUP_SUFFIX) == raw

    store.mark_chapter_complete(KEY)

    assert store.load_progress().completed_chapters == ["12-accounts-ch1"]
    assert substrate.get(PROGRESS_RECORD + BACKUP_SUFFIX) == raw


def test_valid_record_leaves_no_backup(progress_store, substrate):
    progress_store.mark_chapter_complete(KEY)
    progress_store.load_progress()

    assert substrate.get(PROGRESS_RECORD + BACKUP_SUFFIX) is None
