"""Shared domain models."""

from trade_archive.shared.models.enums import Rarity
from trade_archive.shared.models.exchange_rate import (
    DEFAULT_BASE_CURRENCY,
    DEFAULT_QUOTE_CURRENCY,
    ExchangeRate,
    to_positive_number_or_none,
)

__all__ = [
    # Enums
    "Rarity",
    # Models
    "ExchangeRate",
    "DEFAULT_BASE_CURRENCY",
    "DEFAULT_QUOTE_CURRENCY",
    "to_positive_number_or_none",
]
