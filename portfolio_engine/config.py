"""
Configuration management for the Portfolio Command Center engine.

Uses pydantic-settings for type-safe environment variable handling.
Secrets are loaded from environment variables only - never from files in repo.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppEnvironment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


def secret_is_set(value: SecretStr | None) -> bool:
    """A credential counts as configured only when it is non-blank."""
    return value is not None and bool(value.get_secret_value().strip())


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All sensitive values use SecretStr to prevent accidental logging.
    """

    model_config = SettingsConfigDict(
        env_prefix="PCC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore",
        populate_by_name=True,
    )

    env: AppEnvironment = Field(
        default=AppEnvironment.DEVELOPMENT,
        description="Application environment",
    )

    # Server configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(
        default=3000,
        alias="PORT",
        ge=1024,
        le=65535,
        description="Server port",
    )
    static_dir: Path = Field(
        default=Path("./public"),
        description="Directory holding the dashboard front-end",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by the CORS middleware",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_json: bool = Field(default=False, description="Emit JSON log lines")

    # Trading 212 credentials (loaded from env, never from files)
    t212_api_key: SecretStr | None = Field(
        default=None,
        alias="T212_API_KEY",
        description="Trading 212 API key",
    )
    t212_api_secret: SecretStr | None = Field(
        default=None,
        alias="T212_API_SECRET",
        description="Trading 212 API secret",
    )
    t212_base_url: str = Field(
        default="https://live.trading212.com/api/v0",
        alias="T212_BASE_URL",
        description="Trading 212 REST base URL",
    )

    # CoinGecko
    coingecko_api_key: SecretStr | None = Field(
        default=None,
        alias="COINGECKO_API_KEY",
        description="CoinGecko demo API key (free tier used when absent)",
    )
    coingecko_base_url: str = Field(
        default="https://api.coingecko.com/api/v3",
        alias="COINGECKO_BASE_URL",
        description="CoinGecko REST base URL",
    )

    # Anthropic
    anthropic_api_key: SecretStr | None = Field(
        default=None,
        alias="ANTHROPIC_API_KEY",
        description="Anthropic API key for the AI advisor",
    )
    anthropic_base_url: str = Field(
        default="https://api.anthropic.com/v1",
        alias="ANTHROPIC_BASE_URL",
        description="Anthropic REST base URL",
    )
    anthropic_model: str = Field(
        default="claude-sonnet-4-20250514",
        alias="ANTHROPIC_MODEL",
        description="Model used for advisor chat",
    )
    anthropic_max_tokens: int = Field(
        default=1024,
        alias="ANTHROPIC_MAX_TOKENS",
        ge=1,
        le=8192,
        description="max_tokens forwarded with each chat request",
    )
    anthropic_version: str = Field(
        default="2023-06-01",
        alias="ANTHROPIC_VERSION",
        description="anthropic-version header value",
    )

    # Outbound HTTP
    upstream_timeout_s: float | None = Field(
        default=None,
        alias="UPSTREAM_TIMEOUT_S",
        gt=0,
        description="Timeout for upstream calls in seconds (None = wait indefinitely)",
    )

    # Instrument metadata cache
    instruments_cache_ttl_s: int = Field(
        default=6 * 60 * 60,
        alias="INSTRUMENTS_CACHE_TTL_S",
        ge=1,
        description="Freshness window for the Trading 212 instrument snapshot",
    )

    # Exchange rate fallback when CoinGecko is unreachable
    fallback_gbp_usd: float = Field(
        default=1.27,
        alias="FALLBACK_GBP_USD",
        gt=0,
        description="GBP -> USD rate served when the live rate cannot be fetched",
    )

    @field_validator(
        "t212_api_key",
        "t212_api_secret",
        "coingecko_api_key",
        "anthropic_api_key",
        mode="before",
    )
    @classmethod
    def blank_secret_is_missing(cls, v: object) -> object:
        """Treat blank credentials as not configured."""
        if isinstance(v, SecretStr):
            v = v.get_secret_value()
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper_v

    @property
    def has_t212_credentials(self) -> bool:
        """Check if Trading 212 key and secret are both configured."""
        return secret_is_set(self.t212_api_key) and secret_is_set(self.t212_api_secret)

    @property
    def has_coingecko_key(self) -> bool:
        """Check if a CoinGecko key is configured."""
        return secret_is_set(self.coingecko_api_key)

    @property
    def has_anthropic_key(self) -> bool:
        """Check if the Anthropic key is configured."""
        return secret_is_set(self.anthropic_api_key)

    def get_redacted_config(self) -> dict[str, str | int | bool]:
        """
        Get configuration dict with sensitive values redacted.
        Safe for logging and API responses.
        """
        return {
            "env": self.env.value,
            "host": self.host,
            "port": self.port,
            "static_dir": str(self.static_dir),
            "log_level": self.log_level,
            "t212_configured": self.has_t212_credentials,
            "coingecko_configured": self.has_coingecko_key,
            "anthropic_configured": self.has_anthropic_key,
        }


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure single instance throughout application.
    """
    return Settings()


def get_settings_dep() -> Settings:
    """
    Dependency for FastAPI routes to get settings.
    Allows for easy dependency override in tests.
    """
    return get_settings()
