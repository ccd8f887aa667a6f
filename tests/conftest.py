"""
Pytest configuration and shared fixtures.
"""

import os
from collections.abc import Generator

import pytest

# Set test environment variables before importing app modules
os.environ.setdefault("PCC_ENV", "development")
os.environ.setdefault("PCC_STATIC_DIR", "./tests/.no-static")

# Import shared fixtures from api_fixtures
from tests.api_fixtures import *  # noqa: E402,F403


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure no real credentials leak into tests from local .env."""
    secret_vars = [
        "T212_API_KEY",
        "T212_API_SECRET",
        "COINGECKO_API_KEY",
        "ANTHROPIC_API_KEY",
    ]
    for var in secret_vars:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None, None, None]:
    """Reset module-level singletons between tests."""
    yield

    from portfolio_engine.api import ai_routes, crypto_routes, t212_routes

    t212_routes._t212_client = None
    t212_routes._instrument_cache = None
    crypto_routes._coingecko_client = None
    ai_routes._chat_client = None
