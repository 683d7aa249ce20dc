"""Runtime settings for RecordKit.

Values come from ``RECORDKIT_*`` environment variables or a ``.env`` file
in the working directory.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    db_file: str = Field("recordkit.db", description="SQLite file, or ':memory:'")
    schema_file: Path | None = Field(
        None, description="DDL script applied on every cold start"
    )

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    model_config = SettingsConfigDict(
        env_prefix="RECORDKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached process-wide settings."""
    return Settings()


__all__ = ["Settings", "get_settings"]
