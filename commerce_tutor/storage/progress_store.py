"""
Progress record persistence.

The whole record is read, modified and written back on every mutation.
There is no locking: one active writer at a time is assumed.
"""

from __future__ import annotations

from loguru import logger
from pydantic import ValidationError

from commerce_tutor.errors import StorageCorruption
from commerce_tutor.models import ChapterKey, Progress, QuizResult
from commerce_tutor.storage.substrate import KeyValueStore

PROGRESS_RECORD = "gseb_commerce_app_progress"
BACKUP_SUFFIX = ".corrupt"


class ProgressStore:
    """Reads and writes the installation's progress record."""

    def __init__(self, substrate: KeyValueStore, record_name: str = PROGRESS_RECORD):
        self.substrate = substrate
        self.record_name = record_name
        self.backup_name = record_name + BACKUP_SUFFIX

    def _decode(self, raw: bytes) -> Progress:
        try:
            return Progress.model_validate_json(raw)
        except ValidationError as e:
            raise StorageCorruption(self.record_name, str(e)) from e

    def load_progress(self) -> Progress | None:
        """
        Load the progress record.

        An unreadable record is copied to ``backup_name`` before it is
        ignored, so the next mutation does not destroy the only copy.

        Returns:
            The stored Progress, or None when absent or unreadable
        """
        raw = self.substrate.get(self.record_name)
        if raw is None:
            return None
        try:
            return self._decode(raw)
        except StorageCorruption as e:
            logger.error(f"Ignoring corrupt progress record, raw bytes kept in {self.backup_name!r}: {e}")
            if self.substrate.get(self.backup_name) != raw:
                self.substrate.set(self.backup_name, raw)
            return None

    def save_progress(self, progress: Progress) -> None:
        """Overwrite the stored record."""
        payload = progress.model_dump_json(by_alias=True)
        self.substrate.set(self.record_name, payload.encode("utf-8"))

    def current(self) -> Progress:
        """Stored progress, or an empty default."""
        return self.load_progress() or Progress()

    def mark_chapter_complete(self, key: ChapterKey) -> bool:
        """
        Record a chapter as completed.

        Idempotent: an already completed chapter is left untouched and
        nothing is written.

        Returns:
            True if the chapter was newly recorded
        """
        progress = self.current()
        chapter = key.progress_key
        if chapter in progress.completed_chapters:
            return False

        progress.completed_chapters.append(chapter)
        self.save_progress(progress)
        logger.info(f"Chapter {chapter} marked complete")
        return True

    def save_quiz_score(self, key: ChapterKey, result: QuizResult) -> None:
        """Store a quiz result, replacing any earlier attempt for the chapter."""
        progress = self.current()
        progress.quiz_scores[key.progress_key] = result
        self.save_progress(progress)
        logger.info(f"Quiz score {result.score}/{result.total} saved for {key.progress_key}")
