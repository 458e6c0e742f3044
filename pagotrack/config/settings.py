"""
Configuration Management for PagoTrack

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local key-value storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path(".pagotrack"),
        description="Directory holding one JSON file per stored key"
    )
    settings_key: str = Field(
        default="pagotrack_settings",
        min_length=1,
        description="Key under which the employee settings are stored"
    )
    payments_key: str = Field(
        default="pagotrack_payments",
        min_length=1,
        description="Key under which the payment list is stored"
    )
    write_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a read/write is attempted before giving up"
    )


class GeminiSettings(BaseSettings):
    """Gemini configuration for receipt extraction."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        min_length=1,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=256,
        ge=32,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    The default_* fields seed the employee settings on first start
    and after a reset.
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
    log_level: str = Field(
        default="INFO",
        description="Minimum level for local event logging"
    )

    # Defaults for a fresh installation
    default_employee_name: str = Field(
        default="Juan Pérez",
        min_length=1,
        description="Employee name used until the user configures one"
    )
    default_weekly_payment_day: int = Field(
        default=5,
        ge=0,
        le=6,
        description="Default payment weekday (0=Sunday ... 6=Saturday)"
    )
    default_expected_amount: Decimal = Field(
        default=Decimal("2500"),
        gt=0,
        description="Default amount due per week"
    )

    # Receipt handling
    max_receipt_size_mb: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum receipt photo size in MB"
    )
    receipt_max_dimension: int = Field(
        default=1024,
        ge=128,
        le=4096,
        description="Longest side (px) a stored receipt image is scaled down to"
    )
    supported_image_formats: str = Field(
        default="jpg,jpeg,png,webp",
        description="Comma-separated list of supported image formats"
    )

    # Review thresholds
    future_date_tolerance_days: int = Field(
        default=0,
        ge=0,
        description="How many days in the future a payment date can be without a warning"
    )
    currency_symbol: str = Field(
        default="$",
        description="Symbol prefixed to amounts in reports"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept any casing, store upper-case."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def supported_formats_list(self) -> list[str]:
        """Get supported formats as a list."""
        return [fmt.strip().lower() for fmt in self.supported_image_formats.split(",")]

    @property
    def max_receipt_size_bytes(self) -> int:
        """Get max receipt size in bytes."""
        return self.max_receipt_size_mb * 1024 * 1024


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

    # Sub-settings are loaded lazily so the app runs without a Gemini key

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

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

    Returns a dict of {setting_name: is_valid}, with a
    "<name>_error" entry for every failure.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "gemini", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
