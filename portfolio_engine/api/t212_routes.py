"""
Trading 212 proxy routes.

The portfolio route returns positions with GBX prices normalized to GBP;
cash and instruments are passed through untouched. Credentials stay
server-side and never appear in responses.
"""

from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Depends

from portfolio_engine.api.errors import translate_upstream_error
from portfolio_engine.config import Settings, get_settings_dep
from portfolio_engine.logging import get_logger
from portfolio_engine.portfolio.instrument_cache import InstrumentCache
from portfolio_engine.portfolio.service import PortfolioService
from portfolio_engine.upstream.trading212 import Trading212Client

router = APIRouter(prefix="/api/t212", tags=["Trading 212"])
logger = get_logger(__name__)

API_ERROR = "Trading 212 API error"

# Lazy-initialized singletons
_t212_client: Trading212Client | None = None
_instrument_cache: InstrumentCache | None = None


def get_t212_client(settings: Settings = Depends(get_settings_dep)) -> Trading212Client:
    """Get or create Trading 212 client singleton."""
    global _t212_client
    if _t212_client is None:
        _t212_client = Trading212Client(settings, logger)
    else:
        _t212_client.update_settings(settings)
    return _t212_client


def get_instrument_cache(settings: Settings = Depends(get_settings_dep)) -> InstrumentCache:
    """Get or create the process-wide instrument cache."""
    global _instrument_cache
    if _instrument_cache is None:
        _instrument_cache = InstrumentCache(
            freshness_window=timedelta(seconds=settings.instruments_cache_ttl_s),
        )
    return _instrument_cache


def get_portfolio_service(
    client: Trading212Client = Depends(get_t212_client),
    cache: InstrumentCache = Depends(get_instrument_cache),
) -> PortfolioService:
    """Build the portfolio service around the shared client and cache."""
    return PortfolioService(client, cache)


@router.get("/portfolio", response_model=None)
async def get_portfolio(
    service: PortfolioService = Depends(get_portfolio_service),
) -> list[dict[str, Any]]:
    """
    Get open positions, GBX prices converted to GBP.

    Fails as a whole if either the positions or the instrument metadata
    cannot be fetched.
    """
    try:
        positions = await service.list_normalized_portfolio()
    except Exception as e:
        raise translate_upstream_error(
            e, api_error=API_ERROR, failure="Failed to fetch from Trading 212"
        ) from e

    return [p.to_payload() for p in positions]


@router.get("/cash", response_model=None)
async def get_cash(
    client: Trading212Client = Depends(get_t212_client),
) -> dict[str, Any]:
    """Get account cash as reported by Trading 212."""
    try:
        return await client.get_cash()
    except Exception as e:
        raise translate_upstream_error(
            e, api_error=API_ERROR, failure="Failed to fetch cash balance"
        ) from e


@router.get("/instruments", response_model=None)
async def get_instruments(
    client: Trading212Client = Depends(get_t212_client),
) -> list[dict[str, Any]]:
    """
    Get the raw instrument metadata list.

    Always hits Trading 212; the normalization cache is not consulted.
    """
    try:
        return await client.list_instruments_raw()
    except Exception as e:
        raise translate_upstream_error(
            e, api_error=API_ERROR, failure="Failed to fetch instruments"
        ) from e


@router.get("/status")
async def t212_status(
    settings: Settings = Depends(get_settings_dep),
    client: Trading212Client = Depends(get_t212_client),
    cache: InstrumentCache = Depends(get_instrument_cache),
) -> dict[str, Any]:
    """
    Get Trading 212 client and instrument cache status.

    Returns connection metrics only; no credentials.
    """
    return {
        "configured": client.is_configured,
        "base_url": settings.t212_base_url,
        "metrics": client.metrics,
        "instrument_cache": cache.get_status(),
    }
