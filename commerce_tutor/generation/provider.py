"""
Content provider for generated study material.

The provider returns raw, unvalidated data (decoded JSON, markdown plus
source dicts) and raises ProviderError/ParseError on any failure. Shape
validation happens in the orchestrator.
"""

from __future__ import annotations

import asyncio
import json
import random
import re
from typing import Any, Protocol

import google.api_core.exceptions
from loguru import logger

from commerce_tutor.errors import ParseError, ProviderError
from commerce_tutor.generation.prompts import (
    explanation_prompt,
    glossary_prompt,
    quiz_prompt,
    syllabus_prompt,
)

SYSTEM_PROMPT = (
    "You are an expert, encouraging teacher for GSEB (Gujarat Board) Commerce students "
    "in classes 11 and 12. Stay faithful to the official textbooks."
)


class ContentProvider(Protocol):
    """Source of generated study material."""

    async def get_syllabus(self, class_level: int, subject_name: str, chapter_title: str) -> Any: ...

    async def get_explanation(
        self, class_level: int, subject_name: str, chapter_title: str, topic: str
    ) -> dict[str, Any]: ...

    async def get_quiz(self, class_level: int, subject_name: str, chapter_title: str) -> Any: ...

    async def get_glossary(self, class_level: int, subject_name: str, chapter_title: str) -> Any: ...


def extract_json(kind: str, text: str) -> Any:
    """
    Pull a JSON value out of an LLM response.

    Tries the whole text, then a fenced ```json block, then the outermost
    [...] span.
    """
    candidates = [text.strip()]
    fenced = re.search(r"```(?:json)?\s*([\s\S]*?)```", text)
    if fenced:
        candidates.append(fenced.group(1).strip())
    bracketed = re.search(r"\[[\s\S]*\]", text)
    if bracketed:
        candidates.append(bracketed.group(0))

    for candidate in candidates:
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue
    raise ParseError(kind, "no JSON value found in response")


def grounding_sources(response: Any) -> list[dict[str, str]]:
    """Collect web sources from a response's grounding metadata."""
    sources = []
    for candidate in getattr(response, "candidates", None) or []:
        metadata = getattr(candidate, "grounding_metadata", None)
        for chunk in getattr(metadata, "grounding_chunks", None) or []:
            web = getattr(chunk, "web", None)
            uri = getattr(web, "uri", None)
            if uri:
                sources.append({"title": getattr(web, "title", "") or uri, "uri": uri})
        break
    return sources


class GeminiContentProvider:
    """
    Gemini-backed content provider.

    Syllabus and explanation requests use search grounding when enabled;
    quiz and glossary requests ask for JSON output.
    """

    MAX_RETRIES = 2

    def __init__(
        self,
        api_key: str | None,
        model_name: str = "gemini-2.0-flash",
        timeout_seconds: float = 60.0,
        quiz_question_count: int = 5,
        glossary_term_count: int = 10,
        search_grounding: bool = False,
        retry_base_delay: float = 2.0,
    ):
        if not api_key:
            raise ValueError("Gemini API key required (set GEMINI_API_KEY)")

        self.api_key = api_key
        self.model_name = model_name
        self.timeout_seconds = timeout_seconds
        self.quiz_question_count = quiz_question_count
        self.glossary_term_count = glossary_term_count
        self.search_grounding = search_grounding
        self.retry_base_delay = retry_base_delay
        self._client = None

        logger.info(f"GeminiContentProvider initialized (model={self.model_name})")

    @property
    def client(self):
        """Lazy-load Gemini client."""
        if self._client is None:
            import google.generativeai as genai

            genai.configure(api_key=self.api_key)
            self._client = genai.GenerativeModel(
                model_name=self.model_name,
                system_instruction=SYSTEM_PROMPT,
            )
        return self._client

    async def _generate(self, kind: str, prompt: str, *, grounded: bool = False, as_json: bool = False):
        """Call Gemini, retrying on rate limits."""
        kwargs: dict[str, Any] = {"request_options": {"timeout": self.timeout_seconds}}
        if as_json:
            kwargs["generation_config"] = {"response_mime_type": "application/json"}
        if grounded and self.search_grounding:
            kwargs["tools"] = "google_search_retrieval"

        for attempt in range(self.MAX_RETRIES + 1):
            try:
                return await asyncio.to_thread(self.client.generate_content, prompt, **kwargs)
            except google.api_core.exceptions.ResourceExhausted as e:
                if attempt >= self.MAX_RETRIES:
                    raise ProviderError(kind, f"rate limited: {e}") from e
                sleep_time = self.retry_base_delay * (2**attempt) + random.uniform(0, 1)
                logger.warning(f"Rate limited on {kind}; retrying in {sleep_time:.1f}s")
                await asyncio.sleep(sleep_time)
            except google.api_core.exceptions.GoogleAPIError as e:
                raise ProviderError(kind, str(e)) from e

        raise ProviderError(kind, "retries exhausted")

    @staticmethod
    def _text(kind: str, response: Any) -> str:
        # .text raises ValueError when the candidate has no parts (e.g. blocked)
        try:
            text = response.text
        except ValueError as e:
            raise ProviderError(kind, f"response has no text: {e}") from e
        if not text or not text.strip():
            raise ParseError(kind, "empty response")
        return text

    async def get_syllabus(self, class_level: int, subject_name: str, chapter_title: str) -> Any:
        prompt = syllabus_prompt(class_level, subject_name, chapter_title)
        response = await self._generate("syllabus", prompt, grounded=True)
        return extract_json("syllabus", self._text("syllabus", response))

    async def get_explanation(
        self, class_level: int, subject_name: str, chapter_title: str, topic: str
    ) -> dict[str, Any]:
        prompt = explanation_prompt(class_level, subject_name, chapter_title, topic)
        response = await self._generate("content", prompt, grounded=True)
        return {
            "content": self._text("content", response),
            "sources": grounding_sources(response),
        }

    async def get_quiz(self, class_level: int, subject_name: str, chapter_title: str) -> Any:
        prompt = quiz_prompt(class_level, subject_name, chapter_title, self.quiz_question_count)
        response = await self._generate("quiz", prompt, as_json=True)
        return extract_json("quiz", self._text("quiz", response))

    async def get_glossary(self, class_level: int, subject_name: str, chapter_title: str) -> Any:
        prompt = glossary_prompt(class_level, subject_name, chapter_title, self.glossary_term_count)
        response = await self._generate("glossary", prompt, as_json=True)
        return extract_json("glossary", self._text("glossary", response))
