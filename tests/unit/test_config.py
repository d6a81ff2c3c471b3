"""Tests for environment-driven settings."""

import pytest
from cosreg import config


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Re-read the environment in every test."""
    config.get_settings.cache_clear()
    yield
    config.get_settings.cache_clear()


class TestSettings:
    """Test cases for settings parsing."""

    def test_defaults(self, monkeypatch):
        """Test defaults when nothing is set."""
        for name in ("COSREG_DATABASE_URL", "COSREG_INGEST_BATCH_SIZE", "COSREG_SQL_ECHO", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        settings = config.get_settings()

        assert settings.database_url == config.DEFAULT_DATABASE_URL
        assert settings.ingest_batch_size == 100
        assert settings.sql_echo is False
        assert settings.log_level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        """Test reading values from the environment."""
        monkeypatch.setenv("COSREG_INGEST_BATCH_SIZE", "250")
        monkeypatch.setenv("COSREG_SQL_ECHO", "yes")
        monkeypatch.setenv("COSREG_DEFAULT_SOURCE", "CosIng 2024-06")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = config.get_settings()

        assert settings.ingest_batch_size == 250
        assert settings.sql_echo is True
        assert settings.default_source == "CosIng 2024-06"
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("raw", ["abc", "0", "-5"])
    def test_bad_batch_size_falls_back(self, monkeypatch, raw):
        """Test that invalid batch sizes use the default."""
        monkeypatch.setenv("COSREG_INGEST_BATCH_SIZE", raw)

        assert config.get_settings().ingest_batch_size == 100
