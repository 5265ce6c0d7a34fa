"""Application configuration using Pydantic Settings.

Loads configuration from environment variables and .env files.
Each concern gets its own settings block with a dedicated env prefix.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatasetSettings(BaseSettings):
    """Reference dataset configuration."""

    model_config = SettingsConfigDict(env_prefix="DATASET_")

    # JSON file holding every table, or a directory of <table>.json files
    path: Path | None = None

    # Stripped from table names found in the artifact
    table_prefix: str = "udger_"

    # Per-search budget for the backtracking regex engine, in seconds
    regex_timeout: float = Field(default=1.0, gt=0.0, le=60.0)


class CacheSettings(BaseSettings):
    """Result cache configuration."""

    model_config = SettingsConfigDict(env_prefix="CACHE_")

    enabled: bool = False
    max_records: int = Field(default=4000, ge=1)


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"
    include_timestamp: bool = True
    include_caller: bool = True


class Settings(BaseSettings):
    """Main application settings aggregating all configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Application info
    app_name: str = "UAIntel"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"

    # Prefix for the human-readable detail links in results
    info_url_base: str = "https://udger.com/resources/ua-list"

    # Sub-configurations
    dataset: DatasetSettings = Field(default_factory=DatasetSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("info_url_base")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Detail paths are appended with a leading slash."""
        return v.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings singleton."""
    return Settings()
