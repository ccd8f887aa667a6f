"""
Instrument domain model.

Trading 212 instrument metadata as returned by /equity/metadata/instruments.
Only the ticker and the currency fields drive behavior; every other field the
broker sends is kept as-is.
"""

from pydantic import BaseModel, ConfigDict, Field

# Fixed marker Trading 212 appends to equity tickers (e.g. "BARC_EQ")
EQUITY_TICKER_SUFFIX = "_EQ"


def strip_equity_suffix(ticker: str) -> str:
    """Return the ticker without its trailing equity marker."""
    return ticker.removesuffix(EQUITY_TICKER_SUFFIX)


class Instrument(BaseModel):
    """
    A tradeable instrument as described by the broker.

    The priced currency may arrive under `currencyCode`, `currency` or
    `currencyId` depending on account and API version.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    ticker: str | None = None
    name: str | None = None
    short_name: str | None = Field(default=None, alias="shortName")
    isin: str | None = None
    type: str | None = None
    currency_code: str | None = Field(default=None, alias="currencyCode")
    currency: str | None = None
    currency_id: str | None = Field(default=None, alias="currencyId")

    @property
    def base_ticker(self) -> str:
        """Ticker with the equity suffix removed."""
        return strip_equity_suffix(self.ticker or "")
