"""Viewer settings and the seen-item set."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, Field, field_validator

from trade_archive.shared.models.exchange_rate import (
    DEFAULT_QUOTE_CURRENCY,
    ExchangeRate,
    to_positive_number_or_none,
)

SEEN_ITEMS_LIMIT = 2000


class ViewerSettings(BaseModel):
    """User-facing display settings."""

    only_new: bool = Field(default=False, description="Show unseen sales only")
    hide_original: bool = Field(default=False, description="Hide the host page's own table")
    preferred_currency: str = Field(default=DEFAULT_QUOTE_CURRENCY)
    divine_chaos_price: float | None = Field(
        default=None, description="Manual rate: 1 divine = N chaos"
    )

    @field_validator("preferred_currency", mode="before")
    @classmethod
    def _normalize_preferred(cls, v: Any) -> str:
        if not isinstance(v, str):
            return DEFAULT_QUOTE_CURRENCY
        return v.strip().lower() or DEFAULT_QUOTE_CURRENCY

    @field_validator("divine_chaos_price", mode="before")
    @classmethod
    def _positive_price(cls, v: Any) -> float | None:
        return to_positive_number_or_none(v)

    @classmethod
    def from_dict(cls, raw: Any) -> ViewerSettings:
        """Build settings from stored JSON, falling back to defaults field by field."""
        if not isinstance(raw, dict):
            return cls()
        return cls(
            only_new=bool(raw.get("only_new")),
            hide_original=bool(raw.get("hide_original")),
            preferred_currency=raw.get("preferred_currency"),
            divine_chaos_price=raw.get("divine_chaos_price"),
        )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    def exchange_rate(self) -> ExchangeRate | None:
        return ExchangeRate.coerce(self.divine_chaos_price)


class SeenItems:
    """Insertion-ordered set of item ids the user has already seen.

    Re-marking an id keeps its original position. Persisted form keeps only
    the most recently added ``limit`` ids.
    """

    def __init__(self, item_ids: Iterable[str] = (), limit: int = SEEN_ITEMS_LIMIT):
        self.limit = limit
        self._ids: dict[str, None] = {}
        self.mark_all(item_ids)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def mark(self, item_id: object) -> bool:
        """Mark one id as seen. Returns True if it was new."""
        if not isinstance(item_id, str) or not item_id or item_id in self._ids:
            return False
        self._ids[item_id] = None
        return True

    def mark_all(self, item_ids: Iterable[object]) -> int:
        return sum(1 for item_id in item_ids if self.mark(item_id))

    def is_new(self, item_id: str) -> bool:
        return item_id not in self._ids

    def to_list(self) -> list[str]:
        ids = list(self._ids)
        return ids[max(0, len(ids) - self.limit) :]
