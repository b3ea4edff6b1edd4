"""
Fetch orchestration: cache lookup, provider call, validation, write-through.

Every artifact kind follows the same path: build the cache key, return a
cached value if one validates, otherwise call the provider, validate the
result and cache it. Provider and parse failures produce a fixed fallback
that is never cached.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from commerce_tutor.curriculum import Chapter
from commerce_tutor.errors import ParseError, ProviderError
from commerce_tutor.generation.provider import ContentProvider
from commerce_tutor.models import (
    ARTIFACT_ADAPTER,
    ArtifactKind,
    Explanation,
    Glossary,
    GlossaryTerm,
    Quiz,
    QuizQuestion,
    Syllabus,
)
from commerce_tutor.storage.content_cache import ContentCache

ModelT = TypeVar("ModelT", bound=BaseModel)

INTRODUCTION = "Introduction"
DEFAULT_TOPICS = ["Overview", "Main Concepts", "Conclusion"]
COLD_START_FALLBACK_TOPICS = ["Detailed Explanation"]
CONTENT_ERROR_MARKDOWN = (
    "## Error\nCould not generate content at this time. "
    "Please check your connection and try again."
)

# Keys a provider may wrap list payloads in
_LIST_WRAPPERS = {
    ArtifactKind.SYLLABUS: "topics",
    ArtifactKind.QUIZ: "questions",
    ArtifactKind.GLOSSARY: "terms",
}


@dataclass
class ColdStartResult:
    """Outcome of opening a chapter."""

    topics: list[str]
    from_cache: bool = False
    seeded: bool = False
    failed: bool = False


def canonical_topics(fetched: list[str]) -> list[str]:
    """Put "Introduction" first, dropping any provider-supplied copy."""
    rest = [t for t in fetched if t.strip().lower() != INTRODUCTION.lower()]
    return [INTRODUCTION, *rest]


class FetchOrchestrator:
    """Resolves generated content through the cache and the provider."""

    def __init__(self, provider: ContentProvider, cache: ContentCache):
        self.provider = provider
        self.cache = cache

    # =========================================================================
    # Validation
    # =========================================================================

    @staticmethod
    def _validate(kind: ArtifactKind, model: type[ModelT], raw: Any) -> ModelT:
        """Validate raw provider output into its artifact model."""
        wrapper = _LIST_WRAPPERS.get(kind)
        if wrapper is not None:
            if isinstance(raw, dict) and wrapper in raw:
                raw = raw[wrapper]
            raw = {wrapper: raw}
        try:
            return model.model_validate(raw)
        except ValidationError as e:
            raise ParseError(kind.value, f"{e.error_count()} validation error(s)") from e

    def _cached(self, key: str, model: type[ModelT]) -> ModelT | None:
        """Return a cached artifact, treating wrong or malformed payloads as misses."""
        value = self.cache.get(key)
        if value is None:
            return None
        try:
            artifact = ARTIFACT_ADAPTER.validate_python(value)
        except ValidationError:
            logger.warning(f"Discarding malformed cache entry {key}")
            return None
        if not isinstance(artifact, model):
            logger.warning(f"Cache entry {key} holds {artifact.kind}, expected {model.__name__}")
            return None
        return artifact

    def _store(self, key: str, artifact: BaseModel) -> None:
        self.cache.set(key, artifact.model_dump(mode="json", by_alias=True))

    # =========================================================================
    # Raw Fetches (raise on failure)
    # =========================================================================

    async def _fetch_syllabus(self, chapter: Chapter) -> Syllabus:
        raw = await self.provider.get_syllabus(chapter.class_level, chapter.subject_name, chapter.title)
        return self._validate(ArtifactKind.SYLLABUS, Syllabus, raw)

    async def _fetch_explanation(self, chapter: Chapter, topic: str) -> Explanation:
        raw = await self.provider.get_explanation(
            chapter.class_level, chapter.subject_name, chapter.title, topic
        )
        return self._validate(ArtifactKind.CONTENT, Explanation, raw)

    async def _fetch_quiz(self, chapter: Chapter) -> Quiz:
        raw = await self.provider.get_quiz(chapter.class_level, chapter.subject_name, chapter.title)
        return self._validate(ArtifactKind.QUIZ, Quiz, raw)

    async def _fetch_glossary(self, chapter: Chapter) -> Glossary:
        raw = await self.provider.get_glossary(chapter.class_level, chapter.subject_name, chapter.title)
        return self._validate(ArtifactKind.GLOSSARY, Glossary, raw)

    @staticmethod
    def _log_failure(kind: ArtifactKind, chapter: Chapter, error: Exception) -> None:
        if isinstance(error, ProviderError):
            logger.warning(f"{kind.value} unavailable for {chapter.key.progress_key}: {error}")
        else:
            logger.error(f"Unexpected {kind.value} failure for {chapter.key.progress_key}: {error!r}")

    # =========================================================================
    # Cache Lookups
    # =========================================================================

    def cached_syllabus(self, chapter: Chapter) -> list[str] | None:
        syllabus = self._cached(chapter.key.cache_key(ArtifactKind.SYLLABUS), Syllabus)
        return syllabus.topics if syllabus else None

    def cached_explanation(self, chapter: Chapter, topic_index: int) -> Explanation | None:
        return self._cached(chapter.key.cache_key(ArtifactKind.CONTENT, topic_index), Explanation)

    def cached_quiz(self, chapter: Chapter) -> list[QuizQuestion] | None:
        quiz = self._cached(chapter.key.cache_key(ArtifactKind.QUIZ), Quiz)
        return quiz.questions if quiz else None

    # =========================================================================
    # Fetch-and-Cache Operations
    # =========================================================================

    async def get_syllabus(self, chapter: Chapter) -> list[str]:
        """Topic titles for a chapter, or DEFAULT_TOPICS if unavailable."""
        cached = self.cached_syllabus(chapter)
        if cached:
            return cached
        try:
            syllabus = await self._fetch_syllabus(chapter)
        except Exception as e:
            self._log_failure(ArtifactKind.SYLLABUS, chapter, e)
            return list(DEFAULT_TOPICS)
        self._store(chapter.key.cache_key(ArtifactKind.SYLLABUS), syllabus)
        return syllabus.topics

    async def get_explanation(self, chapter: Chapter, topic_index: int, topic: str) -> Explanation:
        """
        Explanation for one topic.

        The result is cached under ``topic_index`` whenever it arrives, even
        if the caller has moved on to another topic by then.
        """
        key = chapter.key.cache_key(ArtifactKind.CONTENT, topic_index)
        cached = self._cached(key, Explanation)
        if cached is not None:
            return cached
        try:
            explanation = await self._fetch_explanation(chapter, topic)
        except Exception as e:
            self._log_failure(ArtifactKind.CONTENT, chapter, e)
            return Explanation(content=CONTENT_ERROR_MARKDOWN, sources=[])
        self._store(key, explanation)
        return explanation

    async def get_quiz(self, chapter: Chapter) -> list[QuizQuestion]:
        """Quiz questions; empty when the provider fails. Empty lists are not cached."""
        cached = self.cached_quiz(chapter)
        if cached:
            return cached
        try:
            quiz = await self._fetch_quiz(chapter)
        except Exception as e:
            self._log_failure(ArtifactKind.QUIZ, chapter, e)
            return []
        if quiz.questions:
            self._store(chapter.key.cache_key(ArtifactKind.QUIZ), quiz)
        return quiz.questions

    async def get_glossary(self, chapter: Chapter) -> list[GlossaryTerm]:
        """Glossary terms; empty when the provider fails. Empty lists are not cached."""
        key = chapter.key.cache_key(ArtifactKind.GLOSSARY)
        cached = self._cached(key, Glossary)
        if cached and cached.terms:
            return cached.terms
        try:
            glossary = await self._fetch_glossary(chapter)
        except Exception as e:
            self._log_failure(ArtifactKind.GLOSSARY, chapter, e)
            return []
        if glossary.terms:
            self._store(key, glossary)
        return glossary.terms

    async def cold_start(self, chapter: Chapter) -> ColdStartResult:
        """
        Resolve the topic sequence for a freshly opened chapter.

        With a cached syllabus nothing is fetched. Otherwise the syllabus and
        the Introduction explanation are requested concurrently and joined;
        on success the canonical topic list is cached and the explanation is
        seeded under topic index 0. If either request fails, nothing is
        cached and a single fallback topic is returned.
        """
        cached = self.cached_syllabus(chapter)
        if cached:
            logger.debug(f"Syllabus cache hit for {chapter.key.progress_key}")
            return ColdStartResult(topics=cached, from_cache=True)

        syllabus_result, explanation_result = await asyncio.gather(
            self._fetch_syllabus(chapter),
            self._fetch_explanation(chapter, INTRODUCTION),
            return_exceptions=True,
        )
        for kind, outcome in (
            (ArtifactKind.SYLLABUS, syllabus_result),
            (ArtifactKind.CONTENT, explanation_result),
        ):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                self._log_failure(kind, chapter, outcome)
                return ColdStartResult(topics=list(COLD_START_FALLBACK_TOPICS), failed=True)

        topics = canonical_topics(syllabus_result.topics)
        self._store(chapter.key.cache_key(ArtifactKind.SYLLABUS), Syllabus(topics=topics))
        self._store(chapter.key.cache_key(ArtifactKind.CONTENT, 0), explanation_result)
        logger.info(f"Cold start for {chapter.key.progress_key}: {len(topics)} topics, introduction seeded")
        return ColdStartResult(topics=topics, seeded=True)
