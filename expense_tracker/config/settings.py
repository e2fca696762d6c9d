"""
Configuration Management for Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

All configuration is centralized here. Every value can be overridden with an
``EXPENSE_TRACKER_`` prefixed environment variable or a local ``.env`` file.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Storage
    data_file: Path = Field(
        default=Path("expenses.txt"),
        description="Flat file holding one expense per line"
    )
    save_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a failed file write is attempted"
    )

    # Undo/redo
    history_limit: int = Field(
        default=20,
        ge=1,
        le=1000,
        description="Maximum number of undo (and redo) snapshots kept"
    )

    # Logging
    log_level: str = Field(
        default="WARNING",
        description="Log level for structured logs"
    )
    log_file: Optional[Path] = Field(
        default=None,
        description="Write logs to this file instead of stderr"
    )

    # Validation thresholds (warnings only, never block)
    future_date_tolerance_days: int = Field(
        default=7,
        ge=0,
        description="How many days in the future an expense date can be without a warning"
    )
    large_amount_warning: float = Field(
        default=10000.0,
        gt=0,
        description="Amounts above this are flagged for the user to double-check"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept the standard logging level names."""
        level = v.strip().upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if level not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {sorted(allowed)}")
        return level


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return AppSettings()
