"""Group sellable records by day, week, category, base type and rarity.

All state is built fresh per call: each grouping is an insertion-ordered
mapping from label to a GroupEntry that owns its per-currency sums.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import tzinfo

from trade_archive.common.utils.date_utils import local_day_key, local_week_start_key
from trade_archive.common.utils.number_format import is_finite_number
from trade_archive.storage.schemas import UNKNOWN_NAME, SaleRecord

OTHER_LABEL = "Other"


@dataclass
class GroupEntry:
    """Trade count and summed amounts per currency for one label."""

    count: int = 0
    by_currency: dict[str, float] = field(default_factory=dict)

    def add(self, currency: str, amount: float) -> None:
        self.count += 1
        self.by_currency[currency] = self.by_currency.get(currency, 0.0) + amount


@dataclass
class SalesGroups:
    """The five groupings plus overall totals for one set of records."""

    trades: int = 0
    totals_by_currency: dict[str, float] = field(default_factory=dict)
    by_day: dict[str, GroupEntry] = field(default_factory=dict)
    by_week: dict[str, GroupEntry] = field(default_factory=dict)
    by_category: dict[str, GroupEntry] = field(default_factory=dict)
    by_base_type: dict[str, GroupEntry] = field(default_factory=dict)
    by_rarity: dict[str, GroupEntry] = field(default_factory=dict)

    def groupings(self) -> dict[str, dict[str, GroupEntry]]:
        return {
            "by_day": self.by_day,
            "by_week": self.by_week,
            "by_category": self.by_category,
            "by_base_type": self.by_base_type,
            "by_rarity": self.by_rarity,
        }


def is_countable(record: SaleRecord) -> bool:
    return is_finite_number(record.time_ms) and record.is_sellable


def category_label(record: SaleRecord) -> str:
    return record.category.strip() or OTHER_LABEL


def base_type_label(record: SaleRecord) -> str:
    label = record.base_type.strip() or record.name.strip() or OTHER_LABEL
    return OTHER_LABEL if label == UNKNOWN_NAME else label


def rarity_group_label(record: SaleRecord) -> str:
    return record.rarity.strip() or OTHER_LABEL


def _bump(groups: dict[str, GroupEntry], label: str, currency: str, amount: float) -> None:
    entry = groups.get(label)
    if entry is None:
        entry = groups[label] = GroupEntry()
    entry.add(currency, amount)


def group_sales(records: Iterable[SaleRecord], tz: tzinfo | None = None) -> SalesGroups:
    """Accumulate counts and per-currency sums for every grouping."""
    groups = SalesGroups()
    for record in records:
        if not is_countable(record):
            continue
        currency = record.price_currency
        amount = record.price_amount

        groups.trades += 1
        groups.totals_by_currency[currency] = (
            groups.totals_by_currency.get(currency, 0.0) + amount
        )
        _bump(groups.by_day, local_day_key(record.time_ms, tz), currency, amount)
        _bump(
            groups.by_week,
            f"Week of {local_week_start_key(record.time_ms, tz)}",
            currency,
            amount,
        )
        _bump(groups.by_category, category_label(record), currency, amount)
        _bump(groups.by_base_type, base_type_label(record), currency, amount)
        _bump(groups.by_rarity, rarity_group_label(record), currency, amount)
    return groups
