"""Manually supplied exchange rate between exactly two currencies."""

import math

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_BASE_CURRENCY = "divine"
DEFAULT_QUOTE_CURRENCY = "chaos"


def to_positive_number_or_none(value: object) -> float | None:
    """Coerce user input into a positive finite number, or None.

    Accepts ints, floats and numeric strings (surrounding whitespace ignored).
    Booleans, zero, negatives, NaN and infinities are rejected.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


class ExchangeRate(BaseModel):
    """1 ``base`` equals ``rate`` units of ``quote``.

    Example: ``ExchangeRate(rate=150)`` reads "1 divine = 150 chaos".
    """

    base: str = Field(default=DEFAULT_BASE_CURRENCY, min_length=1)
    quote: str = Field(default=DEFAULT_QUOTE_CURRENCY, min_length=1)
    rate: float = Field(..., gt=0, allow_inf_nan=False)

    model_config = ConfigDict(frozen=True)

    @field_validator("base", "quote")
    @classmethod
    def _normalize_currency(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("currency must not be blank")
        return v

    @model_validator(mode="after")
    def _distinct_pair(self) -> "ExchangeRate":
        if self.base == self.quote:
            raise ValueError("exchange rate needs two different currencies")
        return self

    @property
    def pair(self) -> frozenset[str]:
        return frozenset((self.base, self.quote))

    @classmethod
    def coerce(cls, value: "ExchangeRate | float | int | str | None") -> "ExchangeRate | None":
        """Build a rate from a model, a bare number or a numeric string.

        Bare numbers use the default divine/chaos pair. Invalid values give None.
        """
        if value is None or isinstance(value, ExchangeRate):
            return value
        rate = to_positive_number_or_none(value)
        if rate is None:
            return None
        return cls(rate=rate)
