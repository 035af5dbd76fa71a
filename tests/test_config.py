"""Tests for configuration loading."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from household_equity.config import AppSettings, EngineSettings, get_settings, validate_all_settings


class TestEngineSettings:
    """Tests for EngineSettings."""

    def test_defaults(self, monkeypatch):
        for name in ("EQUITY_SETTLEMENT_TOLERANCE", "EQUITY_ALLOCATION_STRATEGY", "EQUITY_CURRENCY_SYMBOL"):
            monkeypatch.delenv(name, raising=False)
        settings = EngineSettings(_env_file=None)

        assert settings.settlement_tolerance == Decimal("0.01")
        assert settings.allocation_strategy == "equal"
        assert settings.currency_symbol == "$"

    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("EQUITY_CURRENCY_SYMBOL", "£")
        monkeypatch.setenv("EQUITY_SETTLEMENT_TOLERANCE", "0.50")

        settings = EngineSettings(_env_file=None)

        assert settings.currency_symbol == "£"
        assert settings.settlement_tolerance == Decimal("0.50")


class TestAppSettings:
    """Tests for AppSettings."""

    def test_rejects_unknown_backend(self):
        with pytest.raises(ValidationError):
            AppSettings(_env_file=None, storage_backend="postgres")


class TestValidateAllSettings:
    """Tests for the startup check."""

    def test_missing_sheets_config_reported(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
        monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)
        get_settings.cache_clear()

        results = validate_all_settings()

        assert results["engine"] is True
        assert results["app"] is True
        assert results["google_sheets"] is False
        assert "google_sheets_error" in results
