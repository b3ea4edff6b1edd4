"""Content generation: prompts, the Gemini provider and fetch orchestration."""

from commerce_tutor.generation.orchestrator import (
    COLD_START_FALLBACK_TOPICS,
    CONTENT_ERROR_MARKDOWN,
    DEFAULT_TOPICS,
    INTRODUCTION,
    ColdStartResult,
    FetchOrchestrator,
    canonical_topics,
)
from commerce_tutor.generation.provider import ContentProvider, GeminiContentProvider

__all__ = [
    "COLD_START_FALLBACK_TOPICS",
    "CONTENT_ERROR_MARKDOWN",
    "DEFAULT_TOPICS",
    "INTRODUCTION",
    "ColdStartResult",
    "ContentProvider",
    "FetchOrchestrator",
    "GeminiContentProvider",
    "canonical_topics",
]
