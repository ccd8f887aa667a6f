"""
Position domain models.

`Position` is a raw holding as returned by /equity/portfolio. The normalizer
never mutates it; it derives a `NormalizedPosition` instead.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt, StrictStr

# Kept exactly as sent; only real numbers are ever rescaled
PriceValue = StrictInt | StrictFloat | StrictBool | StrictStr | None


class Position(BaseModel):
    """
    A brokerage position (holding) in one instrument.

    Unknown broker fields are preserved so the dashboard receives the full
    record back.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    ticker: str | None = None
    quantity: float | None = None
    current_price: PriceValue = Field(default=None, alias="currentPrice")
    average_price: PriceValue = Field(default=None, alias="averagePrice")
    ppl: float | None = None
    fx_ppl: float | None = Field(default=None, alias="fxPpl")
    initial_fill_date: str | None = Field(default=None, alias="initialFillDate")
    currency_code: str | None = Field(default=None, alias="currencyCode")
    currency: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Serialize with broker field names, omitting fields the broker never sent."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class NormalizedPosition(Position):
    """
    A position after currency normalization.

    `price_was_gbx` is always present; `currency_normalized_to` is only set
    when prices were rescaled from a minor unit.
    """

    price_was_gbx: bool = Field(default=False, alias="_priceWasGbx")
    currency_normalized_to: str | None = Field(default=None, alias="_currencyNormalizedTo")
