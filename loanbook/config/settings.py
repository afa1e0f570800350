"""
Configuration Management for the Loan Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here, one settings
class per concern, each with its own environment prefix.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Persistence configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOANBOOK_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_path: Path = Field(
        default=Path("loanbook.json"),
        description="File holding the full ledger snapshot"
    )
    max_bytes: Optional[int] = Field(
        default=5 * 1024 * 1024,
        ge=1,
        description="Reject saves larger than this (None disables the quota)"
    )


class LedgerSettings(BaseSettings):
    """Business thresholds and display preferences."""

    model_config = SettingsConfigDict(
        env_prefix="LOANBOOK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    currency_symbol: str = Field(
        default="₱",
        description="Prefix used in collection lists"
    )
    due_soon_days: int = Field(
        default=5,
        ge=0,
        le=60,
        description="A loan due within this many days counts as due soon"
    )
    worklist_limit: int = Field(
        default=4,
        ge=1,
        description="How many borrowers the worklist shows before 'see more'"
    )
    future_date_tolerance_days: int = Field(
        default=1,
        ge=0,
        description="How many days in the future a loan or payment date can be"
    )
    max_principal: float = Field(
        default=1000000.0,
        gt=0,
        description="Principal above this is flagged for review"
    )


class LoggingSettings(BaseSettings):
    """Structured logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOANBOOK_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)"
    )
    json_output: bool = Field(
        default=True,
        description="Render JSON lines instead of console output"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()
