"""
Centralized configuration for doublekit.

This module uses Pydantic Settings to load and validate environment variables.
Every variable is prefixed with DOUBLEKIT_ and may also come from a .env file.

Usage:
    from doublekit.config import settings
    print(settings.repr_max_length)

Environment Variables:
    DOUBLEKIT_LOG_LEVEL            Level for the "doublekit" logger (unset: untouched)
    DOUBLEKIT_REPR_MAX_LENGTH      Truncation length for values in errors
    DOUBLEKIT_MAX_CALLS_IN_ERRORS  Recorded calls listed in error messages
"""

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Library settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DOUBLEKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # Logging
    # =========================================================================
    # Unset leaves the "doublekit" logger to the host application
    log_level: Optional[str] = None

    # =========================================================================
    # Error messages
    # =========================================================================
    repr_max_length: int = 80
    max_calls_in_errors: int = 10

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Must be one of: {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("repr_max_length")
    @classmethod
    def _check_repr_max_length(cls, value: int) -> int:
        # Room for at least one character plus the "..." marker
        if value < 4:
            raise ValueError("Minimum value is 4")
        return value

    @field_validator("max_calls_in_errors")
    @classmethod
    def _check_max_calls(cls, value: int) -> int:
        if value < 0:
            raise ValueError("Minimum value is 0")
        return value


# Singleton instance for global settings
settings = Settings()
