"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ up front.
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class LLMSettings(BaseSettings):
    """Text-generation provider used by the room summarizer."""

    provider: str = Field(
        "openai",
        description="LLM provider name (only 'openai' is wired today)",
    )
    model: str = Field(
        "gpt-4o-mini",
        description="Model used to cluster votes into topics",
    )
    api_key: str | None = Field(
        None,
        description="API key for the provider; summarization fails without it",
    )
    base_url: str | None = Field(
        None,
        description="Custom API endpoint (OpenAI-compatible gateways)",
    )
    timeout_seconds: float = Field(
        45.0,
        description="Request timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="'json' or 'plain'")
    output: str = Field("stdout", description="'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (0 disables rotation)",
    )
    backup_count: int = Field(5, description="Number of rotated files to keep")
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to read/propagate the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    user_id_header: str = Field(
        "X-User-Id",
        description="Header carrying the user id asserted by the upstream identity provider",
    )
    allow_anonymous_votes: bool = Field(
        False,
        description="Accept stance votes without an authenticated user (rate limited per IP)",
    )
    cron_secret: str | None = Field(
        None,
        description="Shared secret required by /v1/jobs/* when set",
    )
    max_comment_chars: int = Field(300, description="Maximum vote comment length")
    max_topic_chars: int = Field(100, description="Maximum hot topic text length")
    max_reason_chars: int = Field(100, description="Maximum hot topic vote reason length")

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-identity rate limiting on write routes",
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )
    rate_limit_vote_requests: int = Field(10, ge=1)
    rate_limit_vote_window_seconds: int = Field(60, ge=1)
    rate_limit_hot_topic_create_requests: int = Field(3, ge=1)
    rate_limit_hot_topic_create_window_seconds: int = Field(60 * 60, ge=1)
    rate_limit_hot_topic_vote_requests: int = Field(20, ge=1)
    rate_limit_hot_topic_vote_window_seconds: int = Field(60, ge=1)

    cache_cleanup_interval_seconds: float = Field(
        10 * 60,
        description="Period of the expired cache entry sweep",
        gt=0,
    )
    rate_limit_cleanup_interval_seconds: float = Field(
        5 * 60,
        description="Period of the expired rate limit record sweep",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if a setting is malformed.
    """

    app_env: str = APP_ENV
    llm: LLMSettings = Field(default_factory=LLMSettings)
    app: AppSettings = Field(default_factory=AppSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Nested settings are created via default_factory so env loading works.
settings = Settings()
