"""
Portfolio listing: positions from the broker, normalized against instrument metadata.
"""

from collections.abc import Callable
from typing import Protocol

from portfolio_engine.domain.instrument import Instrument
from portfolio_engine.domain.position import NormalizedPosition, Position
from portfolio_engine.logging import get_logger
from portfolio_engine.portfolio.instrument_cache import (
    InstrumentCache,
    InstrumentSource,
    lookup_instrument,
)
from portfolio_engine.portfolio.normalizer import normalize_position

logger = get_logger(__name__)

Normalizer = Callable[[Position, Instrument | None], NormalizedPosition]


class PositionSource(InstrumentSource, Protocol):
    """A broker client exposing both positions and instrument metadata."""

    async def get_portfolio(self) -> list[Position]: ...


class PortfolioService:
    """
    Builds the normalized portfolio for the dashboard.

    The call fails as a unit: if either the position fetch or the instrument
    fetch fails, nothing is returned.
    """

    def __init__(
        self,
        client: PositionSource,
        cache: InstrumentCache,
        normalizer: Normalizer = normalize_position,
    ) -> None:
        self._client = client
        self._cache = cache
        self._normalizer = normalizer

    @property
    def cache(self) -> InstrumentCache:
        return self._cache

    async def list_normalized_portfolio(self) -> list[NormalizedPosition]:
        """
        Fetch positions and return them with GBX prices converted to GBP.

        Each raw position is normalized exactly once per call.
        """
        positions = await self._client.get_portfolio()
        instruments = await self._cache.get_instruments(self._client)

        normalized = [
            self._normalizer(position, lookup_instrument(instruments, position.ticker))
            for position in positions
        ]

        converted = sum(1 for p in normalized if p.price_was_gbx)
        logger.info(
            "Fetched %d positions from Trading 212 (%d normalized GBX -> GBP)",
            len(normalized),
            converted,
        )
        return normalized
