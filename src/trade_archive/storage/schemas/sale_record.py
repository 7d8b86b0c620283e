"""Canonical sale record.

One completed sale from the trade history feed, normalized and validated.
Stored per partition in the archive and consumed by the analytics layer.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from trade_archive.common.utils.number_format import format_amount, is_finite_number

UNKNOWN_NAME = "(unknown)"


class SaleRecord(BaseModel):
    """Immutable canonical sale record.

    ``price_amount`` and ``price_currency`` are either both set or both None.
    ``trade_key`` is filled in by the dedup step before archival.
    """

    item_id: str = Field(..., min_length=1, description="Trade API item identifier")
    time_iso: str = Field(..., min_length=1, description="Sale time as sent by the API")
    time_ms: int = Field(..., description="Sale time (epoch milliseconds)")

    name: str = Field(default=UNKNOWN_NAME, description="Display name")
    base_type: str = Field(default="")
    rarity: str = Field(default="", description="Frame type label")
    category: str = Field(default="", description="Item class label")
    ilvl: int | None = Field(default=None, description="Item level")

    price_amount: float | None = Field(default=None, allow_inf_nan=False)
    price_currency: str | None = Field(default=None)

    note: str = Field(default="")
    mods: tuple[str, ...] = Field(default_factory=tuple)
    fractured_mods: tuple[str, ...] = Field(default_factory=tuple)
    item_text: str | None = Field(default=None, description="Decoded in-game copy text")
    icon: str | None = Field(default=None)

    trade_key: str | None = Field(default=None)

    model_config = ConfigDict(frozen=True)

    @field_validator("price_currency")
    @classmethod
    def _normalize_currency(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip().lower()
        return v or None

    @model_validator(mode="after")
    def _price_fields_paired(self) -> "SaleRecord":
        if (self.price_amount is None) != (self.price_currency is None):
            raise ValueError("price_amount and price_currency must be set together")
        return self

    @property
    def is_sellable(self) -> bool:
        return is_finite_number(self.price_amount) and bool(self.price_currency)

    @property
    def price_text(self) -> str:
        if not self.is_sellable:
            return ""
        return f"{format_amount(self.price_amount)} {self.price_currency}"
