"""
Application Configuration

Pydantic-based settings management using environment variables.
Supports nested configuration, validation, and caching.

Usage:
    from queryiq.config import get_settings

    settings = get_settings()
    print(settings.pagination.max_rows_per_page)
    print(settings.query.statement_timeout_seconds)
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, PostgresDsn, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from queryiq.models.results import PaginationConfig


class PaginationSettings(BaseSettings):
    """Result-size thresholds handed to the model and the result governor."""

    max_rows_per_page: int = Field(
        default=50,
        gt=0,
        description="Maximum rows returned by a single paginated query",
    )
    max_rows_before_export: int = Field(
        default=100,
        gt=0,
        description="Row count above which an Excel export is recommended",
    )
    max_tokens_for_results: int = Field(
        default=4000,
        gt=0,
        description="Estimated token budget for a single tool result",
    )
    truncated_rows: int = Field(
        default=20,
        gt=0,
        description="Rows kept when a result exceeds the token budget",
    )

    model_config = SettingsConfigDict(
        env_prefix="PAGINATION_",
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_thresholds(self) -> "PaginationSettings":
        """Ensure the export threshold is not below the page size."""
        if self.max_rows_before_export < self.max_rows_per_page:
            raise ValueError(
                f"max_rows_before_export ({self.max_rows_before_export}) must be >= "
                f"max_rows_per_page ({self.max_rows_per_page})"
            )
        return self

    def to_config(self) -> PaginationConfig:
        """Freeze the current thresholds into an immutable PaginationConfig."""
        return PaginationConfig(
            max_rows_per_page=self.max_rows_per_page,
            max_rows_before_export=self.max_rows_before_export,
            max_tokens_for_results=self.max_tokens_for_results,
            truncated_rows=self.truncated_rows,
        )


class QuerySettings(BaseSettings):
    """Timeouts and hard caps applied to queries against user databases."""

    statement_timeout_seconds: int = Field(
        default=30,
        gt=0,
        description="Statement timeout for interactive tool queries",
    )
    export_timeout_seconds: int = Field(
        default=60,
        gt=0,
        description="Statement timeout for the export path",
    )
    connect_timeout_seconds: int = Field(
        default=10,
        gt=0,
        description="Timeout for establishing a connection",
    )
    max_export_rows: int = Field(
        default=50000,
        gt=0,
        description="Hard ceiling on rows returned by the export path",
    )
    schema_table_limit: int = Field(
        default=100,
        gt=0,
        description="Maximum column rows returned when listing a whole schema",
    )
    mongo_sample_size: int = Field(
        default=5,
        gt=0,
        le=100,
        description="Documents sampled when inferring a collection's fields",
    )

    model_config = SettingsConfigDict(
        env_prefix="QUERY_",
        env_file=".env",
        extra="ignore",
    )


class LLMSettings(BaseSettings):
    """Hosted model configuration."""

    openai_api_key: str | None = Field(
        None,
        description="OpenAI API key",
        min_length=20,
    )
    openai_base_url: str | None = Field(
        None,
        description="Optional base URL for an OpenAI-compatible gateway",
    )
    model: str = Field(default="gpt-4o-mini", description="Chat model used for tool calling")
    temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=2.0,
        description="Temperature for LLM responses (0.0 = deterministic)",
    )
    max_tokens: int = Field(
        default=2000,
        gt=0,
        le=16000,
        description="Maximum tokens per LLM response",
    )
    timeout: int = Field(
        default=30,
        gt=0,
        description="Request timeout in seconds",
    )
    max_tool_rounds: int = Field(
        default=8,
        gt=0,
        le=32,
        description="Maximum model/tool round trips within one chat turn",
    )

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("openai_api_key", "openai_base_url", mode="before")
    @classmethod
    def normalize_empty(cls, v: str | None) -> str | None:
        """Treat empty strings as missing."""
        if v == "":
            return None
        return v

    @field_validator("openai_api_key")
    @classmethod
    def validate_openai_key(cls, v: str | None) -> str | None:
        """Validate OpenAI API key format."""
        if v and not v.startswith("sk-"):
            raise ValueError("OpenAI API key must start with 'sk-'")
        return v


class SystemDatabaseSettings(BaseSettings):
    """Application database that stores projects and their summaries."""

    url: PostgresDsn | None = Field(
        None,
        description="System PostgreSQL connection URL (project store)",
    )

    model_config = SettingsConfigDict(
        env_prefix="SYSTEM_DATABASE_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("url", mode="before")
    @classmethod
    def normalize_url(cls, v: str | PostgresDsn | None) -> str | PostgresDsn | None:
        """Treat empty strings as missing."""
        if v == "":
            return None
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Application log level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    date_format: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Log timestamp format",
    )
    file: Path | None = Field(
        default=None,
        description="Optional log file path (None = stdout only)",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        extra="ignore",
    )

    def configure(self) -> None:
        """Configure Python logging with these settings."""
        handlers: list[logging.Handler] = [logging.StreamHandler()]

        if self.file:
            self.file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(self.file))

        logging.basicConfig(
            level=getattr(logging, self.level),
            format=self.format,
            datefmt=self.date_format,
            handlers=handlers,
            force=True,
        )


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    Settings are nested by domain (pagination, query, llm, logging).

    Environment Variables:
        ENVIRONMENT: Deployment environment (development, staging, production)
        APP_NAME: Application name for logging
        API_HOST / API_PORT: API server bind address
        QUERYIQ_ENCRYPTION_KEY: Fernet key for stored connection strings
        PAGINATION_*: Result thresholds (see PaginationSettings)
        QUERY_*: Timeouts and caps (see QuerySettings)
        LLM_*: Hosted model configuration (see LLMSettings)
        SYSTEM_DATABASE_*: Project store database (see SystemDatabaseSettings)
        LOG_*: Logging configuration (see LoggingSettings)

    Example:
        >>> settings = get_settings()
        >>> settings.pagination.max_rows_per_page
        50
        >>> settings.is_production
        False
    """

    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    app_name: str = Field(
        default="QueryIQ",
        description="Application name",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host",
    )
    api_port: int = Field(
        default=8000,
        gt=0,
        le=65535,
        description="API server port",
    )

    pagination: PaginationSettings = Field(default_factory=PaginationSettings)
    query: QuerySettings = Field(default_factory=QuerySettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    system_database: SystemDatabaseSettings = Field(default_factory=SystemDatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    encryption_key: str | None = Field(
        default=None,
        description="Fernet key for encrypting stored connection strings.",
        validation_alias="QUERYIQ_ENCRYPTION_KEY",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @model_validator(mode="after")
    def configure_logging(self) -> "Settings":
        """Configure logging when settings are loaded."""
        self.logging.configure()
        return self

    def model_post_init(self, __context) -> None:
        """Log configuration on initialization."""
        logger = logging.getLogger(__name__)
        logger.info(
            f"Settings loaded for {self.app_name} ({self.environment})",
            extra={
                "environment": self.environment,
                "debug": self.debug,
                "llm_model": self.llm.model,
                "max_rows_per_page": self.pagination.max_rows_per_page,
            },
        )


_DOTENV_PATH = Path(__file__).resolve().parents[1] / ".env"


def _apply_dotenv_precedence() -> None:
    env_source = os.getenv("QUERYIQ_ENV_SOURCE", "dotenv").lower()
    if env_source not in {"dotenv", "envfile", "file"}:
        return
    if _DOTENV_PATH.exists():
        load_dotenv(_DOTENV_PATH, override=True)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses functools.lru_cache to ensure settings are loaded only once.

    Returns:
        Settings: Singleton settings instance
    """
    _apply_dotenv_precedence()
    return Settings()


def clear_settings_cache() -> None:
    """
    Clear the settings cache.

    Useful for testing when you need to reload settings with different
    environment variables.
    """
    get_settings.cache_clear()
