"""
CoinGecko proxy routes: crypto spot prices and the GBP/USD rate.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query

from portfolio_engine.api.errors import APIError, translate_upstream_error
from portfolio_engine.config import Settings, get_settings_dep
from portfolio_engine.logging import get_logger
from portfolio_engine.upstream.coingecko import CoinGeckoClient
from portfolio_engine.upstream.errors import UpstreamClientError

router = APIRouter(prefix="/api", tags=["Crypto"])
logger = get_logger(__name__)

_coingecko_client: CoinGeckoClient | None = None


def get_coingecko_client(settings: Settings = Depends(get_settings_dep)) -> CoinGeckoClient:
    """Get or create CoinGecko client singleton."""
    global _coingecko_client
    if _coingecko_client is None:
        _coingecko_client = CoinGeckoClient(settings, logger)
    else:
        _coingecko_client.update_settings(settings)
    return _coingecko_client


@router.get("/crypto/prices", response_model=None)
async def get_crypto_prices(
    ids: str | None = Query(default=None, description="Comma-separated CoinGecko coin IDs"),
    client: CoinGeckoClient = Depends(get_coingecko_client),
) -> dict[str, Any]:
    """Get GBP and USD prices plus 24h change for the requested coins."""
    if not ids:
        raise APIError(400, "Missing coin IDs")

    try:
        return await client.get_prices(ids)
    except Exception as e:
        raise translate_upstream_error(
            e, api_error="CoinGecko API error", failure="Failed to fetch crypto prices"
        ) from e


@router.get("/exchange-rate")
async def get_exchange_rate(
    settings: Settings = Depends(get_settings_dep),
    client: CoinGeckoClient = Depends(get_coingecko_client),
) -> dict[str, Any]:
    """
    Get the GBP/USD rate.

    Never fails: when CoinGecko is unavailable the configured fallback rate
    is returned and `source` says so.
    """
    rate: float | None = None
    try:
        rate = await client.get_gbp_usd_rate()
    except (UpstreamClientError, ValueError) as e:
        logger.warning("Exchange rate unavailable, using fallback: %s", str(e))

    source = "live"
    if rate is None:
        rate = settings.fallback_gbp_usd
        source = "fallback"

    return {"gbpToUsd": rate, "usdToGbp": 1 / rate, "source": source}
