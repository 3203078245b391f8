"""
Centralized configuration management for dub-info.

This module provides type-safe, validated configuration using Pydantic.
Values come from environment variables and the .env file.
"""

from pathlib import Path
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..constants import (
    BACKOFF_CAP_SECONDS,
    CONNECTION_BACKOFF_STEP_SECONDS,
    DEFAULT_DATABASE_PATH,
    DEFAULT_LANGUAGE,
    DEFAULT_OUTPUT_PATH,
    LANGUAGE_CODES,
    RATE_LIMIT_BACKOFF_STEP_SECONDS,
    SCRAPER_CONNECT_TIMEOUT_SECONDS,
    SCRAPER_PAGE_DELAY_SECONDS,
    SCRAPER_STATUS_DELAY_SECONDS,
    SCRAPER_TIMEOUT_SECONDS,
    SCRAPER_USER_AGENT,
)


class AniSearchConfig(BaseSettings):
    """Configuration for the aniSearch scraper"""

    model_config = SettingsConfigDict(
        env_prefix="ANISEARCH_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"  # Ignore fields that don't belong to this config
    )

    language: str = Field(default=LANGUAGE_CODES[DEFAULT_LANGUAGE], description="Dub language code (de, en, fr, it, es)")
    user_agent: str = Field(default=SCRAPER_USER_AGENT, description="User-Agent header sent to aniSearch")
    timeout: float = Field(default=SCRAPER_TIMEOUT_SECONDS, gt=0, description="Read timeout in seconds")
    connect_timeout: float = Field(default=SCRAPER_CONNECT_TIMEOUT_SECONDS, gt=0, description="Connect timeout in seconds")
    page_delay: float = Field(default=SCRAPER_PAGE_DELAY_SECONDS, ge=0, description="Pause between listing pages")
    status_delay: float = Field(default=SCRAPER_STATUS_DELAY_SECONDS, ge=0, description="Pause between dub status checks")
    max_retries: Optional[int] = Field(default=None, ge=0, description="Retry ceiling for transient failures (None = forever)")
    connection_backoff_step: int = Field(default=CONNECTION_BACKOFF_STEP_SECONDS, ge=0, description="Backoff per failed connection")
    rate_limit_backoff_step: int = Field(default=RATE_LIMIT_BACKOFF_STEP_SECONDS, ge=0, description="Backoff per 429 response")
    backoff_cap: int = Field(default=BACKOFF_CAP_SECONDS, ge=0, description="Upper bound for a single backoff wait")

    @field_validator('language')
    @classmethod
    def validate_language(cls, v: str) -> str:
        """Accept either a language name (german) or its aniSearch code (de)"""
        value = v.strip().lower()
        if value in LANGUAGE_CODES:
            return LANGUAGE_CODES[value]
        if value in LANGUAGE_CODES.values():
            return value
        raise ValueError(f"Language must be one of {sorted(LANGUAGE_CODES)} or {sorted(LANGUAGE_CODES.values())}")


class LoggingConfig(BaseSettings):
    """Configuration for logging behavior"""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    file_level: str = Field(default="INFO", description="File logging level")
    console_level: str = Field(default="WARNING", description="Console logging level")
    log_file: str = Field(default="dub_info.log", description="Log file path")

    @field_validator('file_level', 'console_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that log level is one of the allowed values"""
        valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()


class DubInfoConfig(BaseSettings):
    """
    Main configuration class for dub-info.

    This class serves as the single source of truth for all configuration.
    It automatically loads from environment variables and .env files.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore"
    )

    database_path: Path = Field(default=Path(DEFAULT_DATABASE_PATH), description="anime-offline-database JSON file")
    output_path: Path = Field(default=Path(DEFAULT_OUTPUT_PATH), description="Where dubInfo.json is written")

    anisearch: AniSearchConfig = Field(default_factory=AniSearchConfig, description="aniSearch scraper configuration")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging configuration")


# Global configuration instance
_config_instance: Optional[DubInfoConfig] = None


def setup_config(**kwargs) -> DubInfoConfig:
    """
    Set up the global configuration.

    Args:
        **kwargs: Configuration overrides (e.g. database_path, output_path)

    Returns:
        DubInfoConfig instance
    """
    global _config_instance
    _config_instance = DubInfoConfig(**{k: v for k, v in kwargs.items() if v is not None})
    return _config_instance


def get_config() -> DubInfoConfig:
    """Get the global configuration instance, loading it on first use."""
    global _config_instance
    if _config_instance is None:
        setup_config()
    return _config_instance


def get_anisearch_config() -> AniSearchConfig:
    """Get aniSearch scraper configuration."""
    return get_config().anisearch


__all__ = [
    "AniSearchConfig",
    "LoggingConfig",
    "DubInfoConfig",
    "setup_config",
    "get_config",
    "get_anisearch_config",
]
