"""
GBX -> GBP price normalization for brokerage positions.

UK equities are often priced in pence (GBX). The dashboard works in pounds,
so positions whose priced currency resolves to GBX have their current and
average prices divided by 100. The currency is taken from the instrument
metadata first and from the position itself as a last resort; nothing is
ever guessed from the price level.
"""

from collections.abc import Callable
from typing import Any

from portfolio_engine.domain.instrument import Instrument
from portfolio_engine.domain.position import NormalizedPosition, Position

MINOR_UNIT_CURRENCY = "GBX"
MAJOR_UNIT_CURRENCY = "GBP"
MINOR_UNITS_PER_MAJOR = 100

CurrencyAccessor = Callable[[Position, Instrument | None], str | None]

# Tried in order; the first non-empty value is the priced currency.
CURRENCY_ACCESSORS: tuple[CurrencyAccessor, ...] = (
    lambda pos, inst: inst.currency_code if inst is not None else None,
    lambda pos, inst: inst.currency if inst is not None else None,
    lambda pos, inst: inst.currency_id if inst is not None else None,
    lambda pos, inst: pos.currency_code,
    lambda pos, inst: pos.currency,
)


def resolve_currency(position: Position, instrument: Instrument | None) -> str | None:
    """Return the position's priced currency, or None if nothing says."""
    for accessor in CURRENCY_ACCESSORS:
        currency = accessor(position, instrument)
        if currency:
            return currency
    return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def normalize_position(
    position: Position, instrument: Instrument | None
) -> NormalizedPosition:
    """
    Derive a NormalizedPosition from a raw position.

    Args:
        position: Raw position from the broker (left untouched)
        instrument: Matching instrument metadata, if any

    Returns:
        New position with prices in the major unit when the source was GBX
    """
    payload = position.model_dump(by_alias=True, exclude_unset=True)

    if resolve_currency(position, instrument) == MINOR_UNIT_CURRENCY:
        if _is_number(position.current_price):
            payload["currentPrice"] = position.current_price / MINOR_UNITS_PER_MAJOR
        if _is_number(position.average_price):
            payload["averagePrice"] = position.average_price / MINOR_UNITS_PER_MAJOR
        payload["_priceWasGbx"] = True
        payload["_currencyNormalizedTo"] = MAJOR_UNIT_CURRENCY
    else:
        payload["_priceWasGbx"] = False

    return NormalizedPosition.model_validate(payload)
