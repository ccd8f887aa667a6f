"""
Async Trading 212 REST API client.

Authenticates with HTTP Basic auth built from the API key and secret.
"""

import base64
from typing import Any, cast

from portfolio_engine.config import Settings, secret_is_set
from portfolio_engine.domain.instrument import Instrument
from portfolio_engine.domain.position import Position
from portfolio_engine.upstream.base import AsyncUpstreamClient
from portfolio_engine.upstream.errors import ConfigurationMissing

T212_PORTFOLIO_PATH = "/equity/portfolio"
T212_CASH_PATH = "/equity/account/cash"
T212_INSTRUMENTS_PATH = "/equity/metadata/instruments"


class Trading212Client(AsyncUpstreamClient):
    """
    Async client for the Trading 212 public API.

    Handles:
    - Basic auth header construction (credentials never logged)
    - Portfolio, cash and instrument metadata endpoints
    """

    service_name = "Trading 212"

    def _base_url_from(self, settings: Settings) -> str:
        return settings.t212_base_url.rstrip("/")

    @property
    def is_configured(self) -> bool:
        """Check if both key and secret are set."""
        return self._settings.has_t212_credentials

    def auth_header(self) -> str:
        """
        Build the Basic auth header value.

        Raises:
            ConfigurationMissing: If the key or secret is not configured
        """
        missing = []
        if not secret_is_set(self._settings.t212_api_key):
            missing.append("T212_API_KEY")
        if not secret_is_set(self._settings.t212_api_secret):
            missing.append("T212_API_SECRET")
        if missing:
            raise ConfigurationMissing(missing, service=self.service_name)

        key = self._settings.t212_api_key.get_secret_value()
        secret = self._settings.t212_api_secret.get_secret_value()
        credentials = base64.b64encode(f"{key}:{secret}".encode()).decode()
        return f"Basic {credentials}"

    def _get_base_headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": self.auth_header(),
        }

    async def get_portfolio(self) -> list[Position]:
        """
        Get all open positions.

        Returns:
            Raw positions, untouched by currency normalization
        """
        response = await self._request("GET", T212_PORTFOLIO_PATH)
        return [Position.model_validate(p) for p in response.json()]

    async def get_cash(self) -> dict[str, Any]:
        """
        Get the account cash breakdown.

        Returns:
            Cash dict exactly as the broker sent it
        """
        response = await self._request("GET", T212_CASH_PATH)
        return cast(dict[str, Any], response.json())

    async def list_instruments_raw(self) -> list[dict[str, Any]]:
        """
        Get the full instrument metadata list as plain dicts.

        Returns:
            Instrument records exactly as the broker sent them
        """
        response = await self._request("GET", T212_INSTRUMENTS_PATH)
        return cast(list[dict[str, Any]], response.json())

    async def get_instruments(self) -> list[Instrument]:
        """
        Get the full instrument metadata list.

        Returns:
            Parsed instruments (thousands of rows; callers should cache)
        """
        raw = await self.list_instruments_raw()
        return [Instrument.model_validate(i) for i in raw if isinstance(i, dict)]
