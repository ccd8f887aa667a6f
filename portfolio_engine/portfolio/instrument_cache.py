"""
Time-bounded in-memory cache of Trading 212 instrument metadata.

The broker's instrument list runs to thousands of rows, so it is downloaded
at most once per freshness window and shared by every portfolio request.
The cache holds either nothing or one complete snapshot; a refresh builds
the new mapping off to the side and swaps it in with a single assignment.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from types import MappingProxyType
from typing import Protocol

from portfolio_engine.domain.instrument import Instrument, strip_equity_suffix
from portfolio_engine.logging import get_logger

logger = get_logger(__name__)

DEFAULT_FRESHNESS_WINDOW = timedelta(hours=6)


class InstrumentSource(Protocol):
    """Anything able to fetch the full instrument list (the Trading 212 client)."""

    async def get_instruments(self) -> list[Instrument]: ...


@dataclass(frozen=True)
class InstrumentSnapshot:
    """One complete instrument mapping and the instant it was fetched."""

    instruments: Mapping[str, Instrument]
    fetched_at: datetime


@dataclass
class InstrumentCacheStats:
    """Cache statistics."""

    hits: int = 0
    refreshes: int = 0
    failures: int = 0
    current_size: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate as percentage."""
        total = self.hits + self.refreshes
        if total == 0:
            return 0.0
        return (self.hits / total) * 100


def build_instrument_map(instruments: Iterable[Instrument]) -> dict[str, Instrument]:
    """
    Index instruments by raw ticker and by suffix-stripped ticker.

    Instruments without a ticker are skipped. A ticker seen twice keeps the
    last instrument.
    """
    mapping: dict[str, Instrument] = {}
    for instrument in instruments:
        if not instrument.ticker:
            continue
        mapping[instrument.ticker] = instrument
        mapping[instrument.base_ticker] = instrument
    return mapping


def lookup_instrument(
    instruments: Mapping[str, Instrument], ticker: str | None
) -> Instrument | None:
    """Resolve a position ticker, trying the raw form before the stripped form."""
    ticker = ticker or ""
    return instruments.get(ticker) or instruments.get(strip_equity_suffix(ticker))


class InstrumentCache:
    """
    Lazily refreshed instrument snapshot.

    There is no lock around refreshes: two requests that find the snapshot
    stale at the same time will both fetch, and whichever finishes last is
    kept. Both build equivalent mappings.
    """

    def __init__(
        self,
        freshness_window: timedelta = DEFAULT_FRESHNESS_WINDOW,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Initialize an empty cache.

        Args:
            freshness_window: Maximum snapshot age before a refetch
            clock: Returns the current time (defaults to UTC wall clock)
        """
        self._freshness_window = freshness_window
        self._clock = clock or (lambda: datetime.now(UTC))
        self._snapshot: InstrumentSnapshot | None = None
        self._stats = InstrumentCacheStats()

    @property
    def freshness_window(self) -> timedelta:
        return self._freshness_window

    @property
    def snapshot(self) -> InstrumentSnapshot | None:
        return self._snapshot

    @property
    def stats(self) -> InstrumentCacheStats:
        """Get cache statistics."""
        return self._stats

    def age(self) -> timedelta | None:
        """Age of the current snapshot, or None when empty."""
        if self._snapshot is None:
            return None
        return self._clock() - self._snapshot.fetched_at

    def is_fresh(self) -> bool:
        age = self.age()
        return age is not None and age < self._freshness_window

    async def get_instruments(self, source: InstrumentSource) -> Mapping[str, Instrument]:
        """
        Return the instrument mapping, fetching it first when stale or absent.

        Raises whatever the source raises (UpstreamError, NetworkError,
        ConfigurationMissing); a stale snapshot is never served instead.
        """
        snapshot = self._snapshot
        if snapshot is not None and self.is_fresh():
            self._stats.hits += 1
            return snapshot.instruments

        snapshot = await self.refresh(source)
        return snapshot.instruments

    async def refresh_if_stale(self, source: InstrumentSource) -> bool:
        """
        Refresh the snapshot only when it is stale or absent.

        Returns:
            True if a fetch was issued
        """
        if self.is_fresh():
            return False
        await self.refresh(source)
        return True

    async def refresh(self, source: InstrumentSource) -> InstrumentSnapshot:
        """Fetch the instrument list and swap in a new snapshot."""
        try:
            instruments = await source.get_instruments()
        except Exception:
            self._stats.failures += 1
            logger.warning("Instrument refresh failed; keeping previous snapshot state")
            raise

        mapping = build_instrument_map(instruments)
        snapshot = InstrumentSnapshot(
            instruments=MappingProxyType(mapping),
            fetched_at=self._clock(),
        )
        self._snapshot = snapshot
        self._stats.refreshes += 1
        self._stats.current_size = len(mapping)

        logger.info(
            "Instrument cache refreshed: %d instruments, %d keys",
            len(instruments),
            len(mapping),
        )
        return snapshot

    def invalidate(self) -> None:
        """Drop the current snapshot so the next read refetches."""
        self._snapshot = None
        self._stats.current_size = 0

    def get_status(self) -> dict[str, object]:
        """Diagnostics safe for API responses."""
        age = self.age()
        return {
            "populated": self._snapshot is not None,
            "fresh": self.is_fresh(),
            "age_seconds": round(age.total_seconds(), 1) if age is not None else None,
            "freshness_window_seconds": int(self._freshness_window.total_seconds()),
            "keys": self._stats.current_size,
            "hits": self._stats.hits,
            "refreshes": self._stats.refreshes,
            "failures": self._stats.failures,
            "hit_rate": round(self._stats.hit_rate, 1),
        }
