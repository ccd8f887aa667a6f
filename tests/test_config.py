"""
Tests for environment-driven settings.
"""

import pytest
from pydantic import ValidationError

from portfolio_engine.config import AppEnvironment, Settings


@pytest.fixture(autouse=True)
def clear_optional_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("PORT", "PCC_LOG_LEVEL", "PCC_HOST", "INSTRUMENTS_CACHE_TTL_S"):
        monkeypatch.delenv(var, raising=False)


class TestSettingsLoading:
    """Tests for Settings loading."""

    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)

        assert settings.env == AppEnvironment.DEVELOPMENT
        assert settings.port == 3000
        assert settings.t212_base_url == "https://live.trading212.com/api/v0"
        assert settings.instruments_cache_ttl_s == 21600
        assert settings.upstream_timeout_s is None
        assert settings.fallback_gbp_usd == 1.27
        assert settings.has_t212_credentials is False
        assert settings.has_coingecko_key is False
        assert settings.has_anthropic_key is False

    def test_credentials_from_plain_env_names(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Upstream credentials use their conventional unprefixed names."""
        monkeypatch.setenv("T212_API_KEY", "t212-key")
        monkeypatch.setenv("T212_API_SECRET", "t212-secret")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")

        settings = Settings(_env_file=None)

        assert settings.has_t212_credentials is True
        assert settings.has_anthropic_key is True
        assert settings.t212_api_key is not None
        assert settings.t212_api_key.get_secret_value() == "t212-key"
        assert "t212-secret" not in repr(settings)

    def test_key_without_secret(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("T212_API_KEY", "t212-key")

        assert Settings(_env_file=None).has_t212_credentials is False

    def test_blank_credentials_are_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Empty variables, as left by deploy dashboards, do not count as configured."""
        monkeypatch.setenv("T212_API_KEY", "")
        monkeypatch.setenv("T212_API_SECRET", "")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "")

        settings = Settings(_env_file=None)

        assert settings.t212_api_key is None
        assert settings.t212_api_secret is None
        assert settings.has_t212_credentials is False
        assert settings.has_anthropic_key is False

    def test_whitespace_secret_is_missing(self) -> None:
        settings = Settings(_env_file=None, T212_API_KEY="  ", T212_API_SECRET="s")

        assert settings.t212_api_key is None
        assert settings.has_t212_credentials is False

    def test_port_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PORT", "8080")

        assert Settings(_env_file=None).port == 8080

    def test_log_level_normalized(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PCC_LOG_LEVEL", "debug")

        assert Settings(_env_file=None).log_level == "DEBUG"

    def test_invalid_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PCC_LOG_LEVEL", "chatty")

        with pytest.raises(ValidationError, match="Invalid log level"):
            Settings(_env_file=None)

    def test_cache_ttl_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INSTRUMENTS_CACHE_TTL_S", "60")

        assert Settings(_env_file=None).instruments_cache_ttl_s == 60

    def test_redacted_config_has_no_secrets(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("T212_API_KEY", "t212-key")
        monkeypatch.setenv("T212_API_SECRET", "t212-secret")

        config = Settings(_env_file=None).get_redacted_config()

        assert config["t212_configured"] is True
        assert "t212-key" not in str(config)
        assert "t212-secret" not in str(config)
