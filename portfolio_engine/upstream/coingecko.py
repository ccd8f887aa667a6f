"""
Async CoinGecko client for crypto prices and the GBP/USD rate.

Works on the free tier; a demo API key is sent when configured.
"""

from typing import Any, cast

from portfolio_engine.config import Settings
from portfolio_engine.upstream.base import AsyncUpstreamClient

SIMPLE_PRICE_PATH = "/simple/price"
DEFAULT_VS_CURRENCIES = ("gbp", "usd")
GBP_COIN_ID = "british-pound-sterling"


class CoinGeckoClient(AsyncUpstreamClient):
    """Async client for the CoinGecko simple price API."""

    service_name = "CoinGecko"

    def _base_url_from(self, settings: Settings) -> str:
        return settings.coingecko_base_url.rstrip("/")

    def _get_base_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._settings.has_coingecko_key:
            headers["x-cg-demo-api-key"] = self._settings.coingecko_api_key.get_secret_value()
        return headers

    async def get_prices(
        self,
        ids: str,
        vs_currencies: tuple[str, ...] = DEFAULT_VS_CURRENCIES,
        include_24hr_change: bool = True,
    ) -> dict[str, Any]:
        """
        Get spot prices for a comma-separated list of coin IDs.

        Args:
            ids: CoinGecko coin IDs, e.g. "bitcoin,ethereum"
            vs_currencies: Quote currencies
            include_24hr_change: Include the 24h percentage change

        Returns:
            Mapping of coin ID to quote fields, as CoinGecko sent it
        """
        params = {
            "ids": ids,
            "vs_currencies": ",".join(vs_currencies),
            "include_24hr_change": "true" if include_24hr_change else "false",
        }
        response = await self._request("GET", SIMPLE_PRICE_PATH, params=params)
        return cast(dict[str, Any], response.json())

    async def get_gbp_usd_rate(self) -> float | None:
        """
        Get how many USD one GBP buys.

        Returns:
            The rate, or None if CoinGecko's answer did not contain it
        """
        response = await self._request(
            "GET",
            SIMPLE_PRICE_PATH,
            params={"ids": GBP_COIN_ID, "vs_currencies": "usd"},
        )
        data = response.json()
        entry = data.get(GBP_COIN_ID) if isinstance(data, dict) else None
        rate = entry.get("usd") if isinstance(entry, dict) else None
        if isinstance(rate, (int, float)) and not isinstance(rate, bool) and rate > 0:
            return float(rate)
        return None
