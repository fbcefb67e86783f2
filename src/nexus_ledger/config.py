"""Centralized configuration management using pydantic-settings.

Configuration is loaded from environment variables with sensible defaults.
All settings can be overridden via environment variables or a .env file.
"""

from decimal import Decimal
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class StoreType(str, Enum):
    """Ledger store backend."""

    MEMORY = "memory"
    SQLITE = "sqlite"


class LogLevel(str, Enum):
    """Log level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults for development. Override via
    environment variables (prefixed with NXL_) or .env file.

    Examples:
        NXL_BASE_CURRENCY=RWF
        NXL_ACCOUNT_CHART_FILE=/etc/nexus/chart.json
        NXL_LOG_LEVEL=DEBUG
        NXL_ENVIRONMENT=production
    """

    model_config = SettingsConfigDict(
        env_prefix="NXL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Nexus Ledger"
    environment: Environment = Environment.DEVELOPMENT

    # Storage
    store_type: StoreType = StoreType.SQLITE
    sqlite_path: Path = Field(
        default=Path("nexus_ledger.db"),
        description="SQLite database file used by the CLI ledger store",
    )

    # Logging
    log_level: LogLevel = LogLevel.INFO
    log_format: Literal["json", "console"] = Field(
        default=None,
        validate_default=True,
        description="Log output format: 'json' for production, 'console' for development",
    )
    log_file: Path | None = Field(default=None, description="Optional log file path")

    # Posting engine
    base_currency: str = Field(
        default="RWF",
        min_length=3,
        max_length=3,
        description="Currency every journal entry is posted in",
    )
    amount_decimal_places: int = Field(
        default=2,
        ge=0,
        le=6,
        description="Minor-unit precision journal amounts are quantized to",
    )
    default_par_value: Decimal = Field(
        default=Decimal("1000"),
        gt=0,
        description="Nominal share price used when a share issuance omits par_value",
    )
    account_chart_file: Path | None = Field(
        default=None,
        description="Optional JSON chart of accounts. Built-in chart is used when unset.",
    )

    # Feature Flags
    enable_tax_classification: bool = True

    @field_validator("base_currency", mode="after")
    @classmethod
    def normalize_base_currency(cls, v: str) -> str:
        return v.upper()

    @field_validator("log_format", mode="before")
    @classmethod
    def set_log_format_from_environment(cls, v: str, info) -> str:
        """Default to JSON logging in production."""
        if v is None:
            env = info.data.get("environment")
            if env == Environment.PRODUCTION:
                return "json"
        return v or "console"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload settings.

    Returns:
        Configured Settings instance.
    """
    return Settings()
