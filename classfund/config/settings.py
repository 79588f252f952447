"""
Configuration Management for the Class Fund Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The storage handle itself is NOT configuration: the application root
builds it from these settings and injects it into the ledger.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Durable key-value storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CLASSFUND_STORAGE_",
        extra="ignore"
    )

    backend: str = Field(
        default="file",
        pattern="^(file|memory)$",
        description="Storage backend: 'file' for local disk, 'memory' for demos/tests"
    )
    data_dir: Path = Field(
        default=Path.home() / ".classfund",
        description="Directory holding one file per stored key"
    )
    boxes_key: str = Field(
        default="boxes",
        min_length=1,
        description="Key under which the box collection is stored"
    )
    connect_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts to prepare the storage directory before giving up"
    )

    @field_validator('boxes_key')
    @classmethod
    def validate_key_is_plain_name(cls, v: str) -> str:
        """Keys become file names, so no path separators."""
        if "/" in v or "\\" in v or v in {".", ".."}:
            raise ValueError(f"Storage key must be a plain name: {v!r}")
        return v


class AuditSettings(BaseSettings):
    """Audit trail configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CLASSFUND_AUDIT_",
        extra="ignore"
    )

    enabled: bool = Field(
        default=True,
        description="Append audit events to a file in the data directory"
    )
    log_file_name: str = Field(
        default="audit.jsonl",
        description="Audit file name, relative to the storage data directory"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Display
    currency_symbol: str = Field(
        default="R$",
        max_length=5,
        description="Symbol shown before formatted balances"
    )

    # Registration
    min_password_length: int = Field(
        default=6,
        ge=1,
        le=128,
        description="Minimum password length accepted by the registration form"
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

    # Note: These are loaded lazily to allow partial configuration

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def audit(self) -> AuditSettings:
        return AuditSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "audit", "app"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
