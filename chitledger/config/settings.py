"""
Configuration Management for Chit Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Operator preferences that change at runtime (collection VPA, messaging
channel) live in the ledger store; the values here are only their
first-run defaults.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Persistence backend configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CHITLEDGER_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: str = Field(
        default="json",
        pattern="^(json|memory)$",
        description="Key-value backend: 'json' (file on disk) or 'memory'"
    )
    data_file: Path = Field(
        default=Path("data/chitledger.json"),
        description="Path of the JSON key-value file"
    )
    backup_dir: Path = Field(
        default=Path("backups"),
        description="Directory where full database exports are written"
    )
    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for transient file I/O failures"
    )

    @field_validator('data_file')
    @classmethod
    def validate_data_file(cls, v: Path) -> Path:
        """Reject a directory where a file is expected."""
        if v.exists() and v.is_dir():
            raise ValueError(f"Data file path points to a directory: {v}")
        return v


class LedgerSettings(BaseSettings):
    """
    Business defaults for the ledger.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="CHITLEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    brand_name: str = Field(
        default="GTS CHITS",
        min_length=1,
        description="Name printed on receipts and reminders"
    )
    receipt_prefix: str = Field(
        default="GTS",
        min_length=1,
        max_length=10,
        description="Prefix of generated receipt numbers"
    )
    backup_file_prefix: str = Field(
        default="GTS_DATABASE",
        description="Prefix of exported backup file names"
    )
    forecast_months: int = Field(
        default=3,
        ge=1,
        le=12,
        description="How many upcoming installments a forecast covers"
    )

    # Bulk import
    default_group_name: Optional[str] = Field(
        default=None,
        description="Group used for imported rows that name no group"
    )
    verbose_import: bool = Field(
        default=False,
        description="Report an itemized list of rejected import rows"
    )

    # Preference defaults
    collection_vpa: str = Field(
        default="",
        description="Default UPI VPA for collections"
    )
    whatsapp_use_web: bool = Field(
        default=False,
        description="Prefer WhatsApp Web over the app"
    )


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


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid} plus "<name>_error"
    entries for the ones that failed. Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "ledger"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
