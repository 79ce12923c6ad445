"""
Configuration settings for the learnloop companion.

Uses Pydantic Settings for environment variable management with .env file support.
Every variable is read with the ``LEARNLOOP_`` prefix, e.g. ``LEARNLOOP_USE_AI=true``.
"""
from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LEARNLOOP_",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    data_dir: Path = Field(
        default=Path.home() / ".learnloop",
        description="Directory holding the durable state store",
    )
    store_filename: str = Field(
        default="state.db",
        description="SQLite file name for the key/value state store",
    )

    # ========================================
    # AI Providers
    # ========================================
    ai_provider: Literal["openai", "gemini"] = Field(
        default="openai",
        description="Active question generation provider",
    )
    openai_api_key: str = Field(
        default="",
        description="OpenAI API key",
    )
    gemini_api_key: str = Field(
        default="",
        description="Google Generative AI (Gemini) API key",
    )
    openai_model: str = Field(
        default="gpt-3.5-turbo",
        description="Chat completion model used for question generation",
    )
    gemini_model: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model used for question generation",
    )
    custom_prompt: str = Field(
        default="",
        description="Prompt template override ({topic} and {level} placeholders)",
    )
    provider_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout applied to a single generation request",
    )
    use_ai: bool = Field(
        default=False,
        description="Request generated questions when a provider is configured",
    )

    # ========================================
    # Question Preferences
    # ========================================
    preferred_topics: Annotated[list[str], NoDecode] = Field(
        default=["oops", "java", "python", "ai", "databases"],
        description="Topics drawn from when no weakness is targeted",
    )
    preferred_levels: Annotated[list[str], NoDecode] = Field(
        default=["beginner", "intermediate", "advanced"],
        description="Difficulty levels drawn from when no weakness is targeted",
    )

    # ========================================
    # Selection Policy
    # ========================================
    targeted_topic_probability: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Chance of pinning the next question to the top weakness",
    )
    targeted_topic_limit: int = Field(
        default=3,
        ge=1,
        description="Number of targeted topics requested from the analyzer",
    )

    # ========================================
    # Timing
    # ========================================
    min_interval_ms: int = Field(
        default=2 * 60 * 1000,
        ge=0,
        description="Shortest delay between two questions",
    )
    max_interval_ms: int = Field(
        default=10 * 60 * 1000,
        ge=0,
        description="Longest delay between two questions",
    )

    # ========================================
    # Retention
    # ========================================
    ledger_retention: int = Field(
        default=1000,
        ge=1,
        description="Answer attempts kept in the ledger log",
    )
    assessment_history_limit: int = Field(
        default=10,
        ge=1,
        description="Skill assessments kept in history",
    )
    weakness_profile_days: int = Field(
        default=30,
        ge=1,
        description="Days of daily weakness profiles kept",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    @field_validator("preferred_topics", "preferred_levels", mode="before")
    @classmethod
    def _parse_list(cls, v: Any) -> Any:
        """Accept a JSON list or a comma/space separated string from the environment."""
        if isinstance(v, str) and v.strip().startswith("["):
            return json.loads(v)
        if isinstance(v, str):
            return [item.strip() for item in v.replace(",", " ").split() if item.strip()]
        return v

    # ========================================
    # Helper Methods
    # ========================================
    @property
    def store_path(self) -> Path:
        """Full path of the durable state store."""
        return Path(self.data_dir).expanduser() / self.store_filename

    def active_api_key(self) -> str:
        """Return the API key for the selected provider."""
        if self.ai_provider == "gemini":
            return self.gemini_api_key
        return self.openai_api_key

    def has_ai_configured(self) -> bool:
        """Check if the selected AI provider has credentials."""
        return bool(self.active_api_key())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
