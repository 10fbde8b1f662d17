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

# Only load from file if it exists (production injects via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ first
if _env_file and os.getenv("TESTING") != "true":
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_llm_settings() -> "LLMSettings":
    """Build LLM settings from environment.

    Static type checkers treat required BaseSettings fields as required
    constructor arguments, which is not how BaseSettings is populated.
    """

    return LLMSettings()  # type: ignore[call-arg]


def _build_search_settings() -> "SearchSettings":
    return SearchSettings()  # type: ignore[call-arg]


def _build_rate_limit_settings() -> "RateLimitSettings":
    return RateLimitSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    return LogSettings()  # type: ignore[call-arg]


def _build_app_settings() -> "AppSettings":
    return AppSettings()  # type: ignore[call-arg]


class LLMSettings(BaseSettings):
    """LLM provider configuration used for categorization, summaries and chat.

    Provider-specific requirements are validated in the factory, so a missing
    key only disables classification instead of failing startup.
    """

    provider: str = Field(
        "openai",
        description="LLM provider name (e.g., openai)",
    )
    model: str = Field(
        "gpt-4o-mini",
        description="Model name used for classification and translation",
    )
    api_key: str | None = Field(
        None,
        description="API key for the provider",
    )
    base_url: str | None = Field(
        None,
        description="Custom API endpoint (OpenAI-compatible gateways)",
    )
    timeout_seconds: float = Field(
        45.0,
        description="Request timeout in seconds",
    )
    batch_size: int = Field(
        10,
        description="Maximum number of news items sent in one classification call",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        case_sensitive=False,
        env_ignore_empty=True,
    )


class SearchSettings(BaseSettings):
    """Tavily news search configuration."""

    api_key: str | None = Field(
        None,
        description="Tavily API key",
    )
    base_url: str = Field(
        "https://api.tavily.com",
        description="Tavily REST endpoint",
    )
    timeout_seconds: float = Field(
        30.0,
        description="Search request timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="TAVILY_",
        case_sensitive=False,
        env_ignore_empty=True,
    )


class RateLimitSettings(BaseSettings):
    """Redis-backed daily quota configuration.

    Variable names are unprefixed (REDIS_URL, REDIS_TOKEN, ...) to match what
    hosting platforms inject for managed Redis.
    """

    redis_url: str | None = Field(
        None,
        description=(
            "Redis connection URL (redis:// or rediss://). A password embedded in "
            "the URL takes precedence over REDIS_TOKEN"
        ),
    )
    redis_token: str | None = Field(
        None,
        description="Redis password / access token; ignored when REDIS_URL embeds one",
    )
    redis_timeout_seconds: float = Field(
        5.0,
        description="Socket and connect timeout for quota store calls",
        gt=0,
    )
    rate_limit_max_requests: int = Field(
        3,
        description="Maximum /api/news requests per client per 24h window",
        ge=1,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_ignore_empty=True,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="json or plain")
    output: str = Field("stdout", description="stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(10_485_760, description="Rotate log file at this size (0 disables)")
    backup_count: int = Field(5, description="Rotated files to keep")
    request_id_header: str = Field("X-Request-ID", description="Correlation id header")

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
        env_ignore_empty=True,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    default_news_limit: int = Field(
        10,
        description="Number of news items returned when no valid limit is given",
        ge=1,
    )
    cache_ttl_seconds: int = Field(
        3600,
        description="TTL for cached classification results",
        ge=1,
    )
    cache_max_entries: int = Field(
        1024,
        description="Maximum number of cached classification results",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
        env_ignore_empty=True,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.

    Environments:
    - development: Local development (DEBUG=true)
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (uses .env.production)
    """

    app_env: str = APP_ENV
    llm: LLMSettings = Field(default_factory=_build_llm_settings)
    search: SearchSettings = Field(default_factory=_build_search_settings)
    rate_limit: RateLimitSettings = Field(default_factory=_build_rate_limit_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)
    app: AppSettings = Field(default_factory=_build_app_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_ignore_empty=True,
    )


# Nested settings are created via default_factory so env loading works.
settings = Settings()
