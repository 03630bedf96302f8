"""
Configuration settings for the VentyLab lesson toolkit.

Uses Pydantic Settings for environment variable management with .env file support.
Every setting can be overridden with a ``VENTYLAB_`` prefixed variable, e.g.
``VENTYLAB_CONTENT_SOURCE=network``.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="VENTYLAB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Lesson content
    # ========================================
    content_root: Path = Field(
        default=Path("data"),
        description="Directory that lesson paths (lessons/<module>/...) are relative to",
    )
    lessons_dir: Path | None = Field(
        default=None,
        description="Lessons tree scanned by validate/manifest (default: <content_root>/<lesson_path_prefix>)",
    )
    lesson_schema_path: Path | None = Field(
        default=None,
        description="Lesson JSON Schema (None for the bundled schema)",
    )
    lesson_glob: str = Field(
        default="**/*.json",
        description="Glob of lesson files, relative to lessons_dir",
    )
    lesson_exclude: list[str] = Field(
        default_factory=lambda: ["**/schemas/**", "**/metadata.json", "**/index.js"],
        description="Globs of files under lessons_dir that are not lessons",
    )
    lesson_path_prefix: str = Field(
        default="lessons",
        description="First segment of every resolved lesson path",
    )
    path_tables_file: Path | None = Field(
        default=None,
        description="JSON file replacing the built-in path resolution tables",
    )
    module_levels: dict[str, str] = Field(
        default_factory=lambda: {
            "module-01-fundamentals": "beginner",
            "module-02-parameters": "intermediate",
            "module-02-modalidades-parametros": "intermediate",
            "module-03-configuration": "advanced",
        },
        description="Module id -> curriculum level used by the manifest",
    )

    # ========================================
    # Content sources
    # ========================================
    content_source: Literal["bundled", "network", "auto"] = Field(
        default="auto",
        description="Where lesson JSON is fetched from (auto: bundled, then network)",
    )
    content_base_url: str = Field(
        default="http://localhost:3000",
        description="Base URL serving the lesson tree over HTTP",
    )
    pages_api_url: str | None = Field(
        default=None,
        description="Backend API base URL for migrated pages (None to disable)",
    )
    http_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for content and Pages API requests",
    )

    # ========================================
    # Cache & retry
    # ========================================
    cache_max_size: int = Field(
        default=50,
        ge=1,
        description="Maximum number of lessons kept in the LRU cache",
    )
    retry_max_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts per lesson load before giving up",
    )
    retry_base_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Linear backoff step between load attempts",
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

    def get_lessons_dir(self) -> Path:
        """Lessons tree used by batch validation and the manifest."""
        if self.lessons_dir is not None:
            return self.lessons_dir
        return self.content_root / self.lesson_path_prefix


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
