"""
Domain models for curriculum identity, generated artifacts and progress.

Generated artifacts are a tagged union validated with Pydantic at the
orchestrator boundary; anything that fails validation is a parse failure.
Progress records use the camelCase field names of the persisted layout.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)

# =============================================================================
# Curriculum Identity
# =============================================================================


class ArtifactKind(str, Enum):
    """Kinds of externally generated content."""

    SYLLABUS = "syllabus"
    CONTENT = "content"
    QUIZ = "quiz"
    GLOSSARY = "glossary"


@dataclass(frozen=True)
class ChapterKey:
    """Composite identity of a curriculum unit."""

    class_level: int
    subject_id: str
    chapter_id: str

    @property
    def progress_key(self) -> str:
        """Key used in the progress record, e.g. ``12-accounts-ch1``."""
        return f"{self.class_level}-{self.subject_id}-{self.chapter_id}"

    def cache_key(self, kind: ArtifactKind, topic_index: int | None = None) -> str:
        """
        Build the content-cache key for an artifact of this chapter.

        Explanations are addressed per topic index; every other kind is
        addressed per chapter.
        """
        base = f"{kind.value}_{self.class_level}_{self.subject_id}_{self.chapter_id}"
        if kind is ArtifactKind.CONTENT:
            if topic_index is None or topic_index < 0:
                raise ValueError("content keys need a non-negative topic index")
            return f"{base}_{topic_index}"
        return base


# =============================================================================
# Generated Artifacts
# =============================================================================


class Source(BaseModel):
    """A web source cited by an explanation."""

    title: str = ""
    uri: str


class QuizQuestion(BaseModel):
    """One multiple-choice question."""

    model_config = ConfigDict(populate_by_name=True)

    question: str = Field(min_length=1)
    options: list[str] = Field(min_length=4, max_length=4)
    correct_answer: int = Field(alias="correctAnswer", ge=0, le=3)
    explanation: str = ""


class GlossaryTerm(BaseModel):
    """A term with its definition."""

    term: str = Field(min_length=1)
    definition: str = Field(min_length=1)


class Syllabus(BaseModel):
    """Ordered topic titles for a chapter."""

    kind: Literal["syllabus"] = "syllabus"
    topics: list[str] = Field(min_length=1)

    @field_validator("topics")
    @classmethod
    def _strip_blank_topics(cls, topics: list[str]) -> list[str]:
        cleaned = [t.strip() for t in topics if t and t.strip()]
        if not cleaned:
            raise ValueError("syllabus has no usable topic titles")
        return cleaned


class Explanation(BaseModel):
    """Markdown explanation of one topic with its cited sources."""

    kind: Literal["content"] = "content"
    content: str = Field(min_length=1)
    sources: list[Source] = Field(default_factory=list)

    @field_validator("sources")
    @classmethod
    def _dedupe_sources(cls, sources: list[Source]) -> list[Source]:
        seen: set[str] = set()
        unique = []
        for source in sources:
            if source.uri in seen:
                continue
            seen.add(source.uri)
            unique.append(source)
        return unique


class Quiz(BaseModel):
    """Question list for a chapter quiz."""

    kind: Literal["quiz"] = "quiz"
    questions: list[QuizQuestion]


class Glossary(BaseModel):
    """Key terms for a chapter."""

    kind: Literal["glossary"] = "glossary"
    terms: list[GlossaryTerm]


Artifact = Annotated[Union[Syllabus, Explanation, Quiz, Glossary], Field(discriminator="kind")]

ARTIFACT_ADAPTER: TypeAdapter[Artifact] = TypeAdapter(Artifact)


# =============================================================================
# Progress Record
# =============================================================================


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuizResult(BaseModel):
    """Final result of one quiz attempt."""

    score: int = Field(ge=0)
    total: int = Field(gt=0)
    date: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _score_within_total(self) -> QuizResult:
        if self.score > self.total:
            raise ValueError(f"score {self.score} exceeds total {self.total}")
        return self

    @property
    def percentage(self) -> float:
        return round(self.score / self.total * 100, 1)


class Progress(BaseModel):
    """The single progress record of an installation."""

    model_config = ConfigDict(populate_by_name=True)

    completed_chapters: list[str] = Field(default_factory=list, alias="completedChapters")
    quiz_scores: dict[str, QuizResult] = Field(default_factory=dict, alias="quizScores")

    @field_validator("completed_chapters")
    @classmethod
    def _unique_chapters(cls, chapters: list[str]) -> list[str]:
        return list(dict.fromkeys(chapters))

    def is_completed(self, key: ChapterKey) -> bool:
        return key.progress_key in self.completed_chapters

    def quiz_result(self, key: ChapterKey) -> QuizResult | None:
        return self.quiz_scores.get(key.progress_key)
