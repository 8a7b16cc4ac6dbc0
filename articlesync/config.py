"""Configuration loading for the articlesync import/export adapter.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Article store configuration
    store_sqlite_path: str = Field(
        default="./data/articles.db",
        description="SQLite database file path",
    )
    store_pool_size: int = Field(
        default=5,
        description="Number of pooled SQLite connections",
    )

    # Import behaviour
    default_customer_group: str = Field(
        default="EK",
        description="Customer group for prices without an explicit priceGroup",
    )
    skip_invalid_articles: bool = Field(
        default=False,
        description="Log and skip articles failing business rules instead of aborting the batch",
    )
    image_bucket: str = Field(
        default="articlesImages",
        description="Deferred work bucket for image downloads",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    # Development
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging",
    )

    @field_validator("store_sqlite_path", "default_customer_group", "image_bucket")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Ensure required strings are not blank."""
        if not v or not v.strip():
            raise ValueError("value must be a non-empty string")
        return v.strip()

    @field_validator("store_pool_size")
    @classmethod
    def validate_pool_size(cls, v: int) -> int:
        """Ensure pool size is positive."""
        if v <= 0:
            raise ValueError("store_pool_size must be positive")
        return v


def load_settings(env_file: str | None = None) -> Settings:
    """Load application settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]
