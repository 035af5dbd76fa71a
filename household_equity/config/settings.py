"""
Configuration Management for the Household Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The engine itself never reads settings; the orchestrator reads them and
passes plain values (tolerance, strategy, currency) into the pure functions.
"""

import warnings
from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Knobs of the equity engine."""

    model_config = SettingsConfigDict(
        env_prefix="EQUITY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    settlement_tolerance: Decimal = Field(
        default=Decimal("0.01"),
        ge=0,
        description="Imbalances at or below this amount count as settled"
    )
    allocation_strategy: str = Field(
        default="equal",
        description="How monthly savings funds are divided between goals"
    )
    currency_symbol: str = Field(
        default="$",
        max_length=5,
        description="Symbol used in the settlement summary"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Sheet names within the spreadsheet
    members_sheet_name: str = "Members"
    finances_sheet_name: str = "MonthlyFinances"
    expenses_sheet_name: str = "Expenses"
    goals_sheet_name: str = "SavingsGoals"
    audit_sheet_name: str = "AuditLog"

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


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

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = False

    storage_backend: str = Field(
        default="memory",
        pattern="^(memory|google_sheets)$",
        description="Where household records are kept"
    )

    # Validation thresholds
    max_expense_amount: Decimal = Field(
        default=Decimal("1000000"),
        gt=0,
        description="Expenses above this are flagged for review"
    )
    future_date_tolerance_days: int = Field(
        default=7,
        ge=0,
        description="How many days in the future an expense date can be"
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

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def engine(self) -> EngineSettings:
        return EngineSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


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

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the failures. Useful for startup checks.
    """
    results = {}
    settings = get_settings()

    for name in ("engine", "app", "google_sheets"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
