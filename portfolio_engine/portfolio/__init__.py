"""
Portfolio core: instrument cache, GBX normalization and the listing service.
"""

from portfolio_engine.portfolio.instrument_cache import (
    InstrumentCache,
    InstrumentSnapshot,
    build_instrument_map,
    lookup_instrument,
)
from portfolio_engine.portfolio.normalizer import normalize_position, resolve_currency
from portfolio_engine.portfolio.service import PortfolioService

__all__ = [
    "InstrumentCache",
    "InstrumentSnapshot",
    "PortfolioService",
    "build_instrument_map",
    "lookup_instrument",
    "normalize_position",
    "resolve_currency",
]
