"""
Configuration Management for LendShark

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All tunable ledger rules live here (grace period,
default loan term for items, field limits). The defaults are the
house rules every component agrees on; override them with
LENDSHARK_* environment variables or a .env file.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """
    Ledger rules and field limits.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="LENDSHARK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum level for local structured logs"
    )

    # Ledger rules
    grace_period_days: int = Field(
        default=7,
        ge=0,
        description="Days an open-ended loan may run before it counts as overdue"
    )
    default_item_loan_days: int = Field(
        default=7,
        ge=1,
        description="Loan term for physical items lent without a due date"
    )

    # Field limits
    max_amount: int = Field(
        default=999_999_999,
        ge=1,
        description="Largest amount a single transaction may carry"
    )
    max_party_length: int = Field(
        default=100,
        ge=1,
        description="Maximum party name length after sanitizing"
    )
    max_item_length: int = Field(
        default=200,
        ge=1,
        description="Maximum item description length"
    )
    max_notes_length: int = Field(
        default=500,
        ge=1,
        description="Maximum notes length"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept standard logging level names."""
        allowed = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if v.upper() not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {allowed}")
        return v.upper()


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
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()
