"""Configuration management for filterexpr.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded once and is
immutable during runtime.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated on load.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FILTEREXPR_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = "filterexpr"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "console"

    # Local String Comparison Settings
    string_case_sensitive: bool = Field(
        default=False,
        description="Compare strings case sensitively when the schema does not say otherwise",
    )
    string_trim_before_compare: bool = Field(
        default=True,
        description="Trim strings before equality tests (SQL-92 style)",
    )

    # Serialization Settings
    explicit_data_type: bool = Field(
        default=False,
        description="Always serialize literals as {value, dataType}",
    )
    naming_convention: Literal["none", "camel_case"] = "none"

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept log levels in any case."""
        if isinstance(v, str):
            return v.upper()
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded once; call ``get_settings.cache_clear()`` to reload.

    Returns:
        Settings: Cached settings instance.
    """
    return Settings()
