"""
Domain models for the Portfolio Command Center engine.

- Instrument: broker metadata for a ticker, including its priced currency
- Position: raw brokerage holding
- NormalizedPosition: holding after GBX -> GBP normalization
"""

from portfolio_engine.domain.instrument import (
    EQUITY_TICKER_SUFFIX,
    Instrument,
    strip_equity_suffix,
)
from portfolio_engine.domain.position import NormalizedPosition, Position

__all__ = [
    "EQUITY_TICKER_SUFFIX",
    "Instrument",
    "NormalizedPosition",
    "Position",
    "strip_equity_suffix",
]
