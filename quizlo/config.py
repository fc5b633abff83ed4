"""
Configuration settings for quizlo.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables (QUIZLO_*)."""

    model_config = SettingsConfigDict(
        env_prefix="QUIZLO_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    data_dir: Path = Field(
        default=Path.home() / ".quizlo",
        description="Directory holding persisted quiz state",
    )
    state_backend: Literal["json", "sql"] = Field(
        default="json",
        description="Key-value backend for persisted state",
    )
    state_file: str = Field(
        default="state.json",
        description="File name of the JSON state store (inside data_dir)",
    )
    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy URL for the sql backend (defaults to SQLite in data_dir)",
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

    # ========================================
    # Question Bank
    # ========================================
    default_subject: str = Field(
        default="General Subject",
        description="Subject label used when none is known",
    )
    search_limit: int = Field(
        default=5,
        description="Maximum results returned by a search",
    )

    # ========================================
    # Distractor Generation
    # ========================================
    neighborhood_radius: int = Field(
        default=20,
        description="Repository positions on each side searched for distractors",
    )
    distractor_count: int = Field(
        default=3,
        description="Wrong options offered next to the correct answer",
    )
    stop_tokens: list[str] = Field(
        default_factory=lambda: [
            "PAGE", "CHAPTER", "LESSON", "QUESTION",
            "PAGINA", "CAPITOLO", "LEZIONE", "DOMANDA",
        ],
        description="Document-structure markers that disqualify a distractor",
    )

    # ========================================
    # Practice & Exam
    # ========================================
    hint_hide_count: int = Field(
        default=2,
        description="Wrong options hidden by a hint",
    )
    exam_default_minutes: int = Field(
        default=60,
        description="Suggested exam duration",
    )
    exam_default_max_questions: int = Field(
        default=60,
        description="Suggested exam size cap",
    )
    tick_seconds: float = Field(
        default=1.0,
        description="Exam countdown tick interval",
    )

    @property
    def state_path(self) -> Path:
        return self.data_dir / self.state_file

    def get_database_url(self) -> str:
        """Database URL for the sql backend."""
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.data_dir / 'quizlo.db'}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
