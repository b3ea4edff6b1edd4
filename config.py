"""
Configuration settings for the commerce tutor.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # AI Integration (content generation)
    # ========================================
    gemini_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("gemini_api_key", "google_api_key", "api_key"),
        description="Google Generative AI (Gemini) API key",
    )
    ai_model: str = Field(
        default="gemini-2.0-flash",
        description="Gemini model used for syllabus, explanation, quiz and glossary generation",
    )
    provider_timeout_seconds: float = Field(
        default=60.0,
        description="Per-request timeout for the content provider",
    )
    search_grounding: bool = Field(
        default=False,
        description=(
            "Ground syllabus and explanation requests with Google Search. "
            "Uses the google_search_retrieval tool, which Gemini 1.5 models accept "
            "and Gemini 2.x models reject"
        ),
    )
    quiz_question_count: int = Field(
        default=5,
        description="Questions requested per chapter quiz",
    )
    glossary_term_count: int = Field(
        default=10,
        description="Terms requested per chapter glossary",
    )

    # ========================================
    # Local State
    # ========================================
    data_dir: Path = Field(
        default=Path.home() / ".commerce_tutor",
        description="Directory holding the local state database",
    )
    state_db_name: str = Field(
        default="state.db",
        description="File name of the key/value state database",
    )
    cache_max_chars: int = Field(
        default=4_500_000,
        description="Serialized size ceiling of the content cache before it is flushed",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # Helper Methods
    # ========================================
    @property
    def state_db_path(self) -> Path:
        """Full path of the state database."""
        return self.data_dir / self.state_db_name

    def has_ai_configured(self) -> bool:
        """Check if the content provider can be used."""
        return bool(self.gemini_api_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
