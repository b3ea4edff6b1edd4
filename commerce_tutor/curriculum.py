"""Subject catalog and chapter references for GSEB Commerce classes 11 and 12."""

from __future__ import annotations

from dataclasses import dataclass

from commerce_tutor.models import ChapterKey

CLASS_LEVELS = (11, 12)


@dataclass(frozen=True)
class Subject:
    """A commerce subject."""

    id: str
    name: str


SUBJECTS: dict[str, Subject] = {
    s.id: s
    for s in (
        Subject("accounts", "Accountancy"),
        Subject("stats", "Statistics"),
        Subject("ba", "Business Administration"),
        Subject("eco", "Economics"),
        Subject("english", "English"),
    )
}


@dataclass(frozen=True)
class Chapter:
    """
    A chapter as the content provider sees it.

    The key addresses caches and progress; the names go into prompts.
    """

    key: ChapterKey
    subject_name: str
    title: str

    @property
    def class_level(self) -> int:
        return self.key.class_level


def get_subject(subject_id: str) -> Subject:
    """Look up a subject by id."""
    try:
        return SUBJECTS[subject_id]
    except KeyError:
        known = ", ".join(SUBJECTS)
        raise ValueError(f"Unknown subject '{subject_id}' (expected one of: {known})") from None


def make_chapter(class_level: int, subject_id: str, chapter_id: str, title: str) -> Chapter:
    """Build a validated chapter reference."""
    if class_level not in CLASS_LEVELS:
        raise ValueError(f"Class level must be one of {CLASS_LEVELS}, got {class_level}")
    if not chapter_id.strip():
        raise ValueError("Chapter id must not be empty")
    subject = get_subject(subject_id)
    return Chapter(
        key=ChapterKey(class_level, subject.id, chapter_id.strip()),
        subject_name=subject.name,
        title=title.strip() or chapter_id.strip(),
    )
