"""Unit tests for configuration loading."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from src.config.settings import Settings


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        """Defaults apply when nothing is configured."""
        for name in ("SPLIT_TOLERANCE", "RECENT_EXPENSES_LIMIT", "LOG_LEVEL", "DEMO_SEED_ON_STARTUP"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.split_tolerance == Decimal("0.01")
        assert settings.recent_expenses_limit == 5
        assert settings.log_level == "INFO"
        assert settings.demo_seed_on_startup is False

    def test_environment_overrides(self, monkeypatch):
        """Environment variables override defaults."""
        monkeypatch.setenv("SPLIT_TOLERANCE", "0.05")
        monkeypatch.setenv("RECENT_EXPENSES_LIMIT", "10")
        monkeypatch.setenv("DATABASE_URL", "sqlite:///./other.db")
        monkeypatch.setenv("DEMO_SEED_ON_STARTUP", "true")

        settings = Settings(_env_file=None)

        assert settings.split_tolerance == Decimal("0.05")
        assert settings.recent_expenses_limit == 10
        assert settings.database_url == "sqlite:///./other.db"
        assert settings.demo_seed_on_startup is True

    def test_env_file(self, monkeypatch, tmp_path):
        """Values are read from a .env file."""
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("LOG_LEVEL=DEBUG\nUNRELATED_SETTING=ignored\n")

        settings = Settings(_env_file=str(env_file))

        assert settings.log_level == "DEBUG"

    def test_negative_tolerance_rejected(self, monkeypatch):
        """Tolerance must not be negative."""
        monkeypatch.setenv("SPLIT_TOLERANCE", "-0.01")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_recent_limit_must_be_positive(self, monkeypatch):
        """At least one recent expense is shown."""
        monkeypatch.setenv("RECENT_EXPENSES_LIMIT", "0")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)
