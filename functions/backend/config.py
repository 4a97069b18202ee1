"""
Configuration and settings for the feedback triage backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from models import api_config


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Database (Postgres expected)
    database_url: Optional[str] = Field(default=None)

    # LLM / Gemini
    gemini_api_key: Optional[str] = Field(default=None)
    completion_model: str = Field(default=api_config.DEFAULT_COMPLETION_MODEL)
    embedding_model: str = Field(default=api_config.DEFAULT_EMBEDDING_MODEL)
    classification_temperature: float = Field(default=0.1)
    digest_temperature: float = Field(default=0.7)

    # Clustering / digest
    similarity_threshold: float = Field(default=0.75, ge=-1.0, le=1.0)
    digest_window_days: int = Field(default=7, ge=1)
    digest_feedback_limit: int = Field(default=20, ge=1)
    digest_cluster_limit: int = Field(default=5, ge=1)
    feedback_table_limit: int = Field(default=50, ge=1)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # Queue (Redis)
    redis_url: Optional[str] = Field(default=None)
    redis_queue_key: str = Field(default="triage:analysis")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
