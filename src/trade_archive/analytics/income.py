"""Income statistics over archived sales.

Turns SalesGroups into display-ready tables: one row per label with trade
count, an amount in the preferred currency (for ranking) and an income text,
plus overall totals and the best/worst day.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import tzinfo

from trade_archive.analytics.conversion import (
    format_for_preferred,
    preferred_amount_for_group,
    try_convert_pair,
)
from trade_archive.analytics.formatting import format_currency_map
from trade_archive.analytics.grouping import GroupEntry, group_sales
from trade_archive.common.utils.number_format import format_amount
from trade_archive.infrastructure.observability import get_analytics_logger
from trade_archive.shared.models.exchange_rate import (
    DEFAULT_QUOTE_CURRENCY,
    ExchangeRate,
)
from trade_archive.storage.schemas import SaleRecord
from trade_archive.transformation.normalizers import normalize_currency

log = get_analytics_logger("income-stats")

PLACEHOLDER = "—"


@dataclass(frozen=True)
class RowLimits:
    """Maximum rows kept per table after sorting."""

    days: int = 14
    weeks: int = 12
    categories: int = 12
    base_types: int = 12
    rarities: int = 12


@dataclass(frozen=True)
class StatRow:
    label: str
    count: int
    preferred_amount: float
    income_text: str

    @property
    def count_text(self) -> str:
        return str(self.count)


@dataclass(frozen=True)
class DayExtreme:
    day_key: str
    count: int
    preferred_amount: float
    income_text: str

    def describe(self, preferred: str) -> str:
        return (
            f"{self.day_key}: {format_amount(self.preferred_amount)} {preferred}"
            f" • {self.count} sold • {self.income_text or PLACEHOLDER}"
        )


@dataclass
class IncomeStats:
    preferred_currency: str
    exchange_rate: ExchangeRate | None
    trades: int
    total_text: str
    total_preferred_amount: float | None
    total_preferred_text: str | None
    by_day: list[StatRow] = field(default_factory=list)
    by_week: list[StatRow] = field(default_factory=list)
    by_category: list[StatRow] = field(default_factory=list)
    by_base_type: list[StatRow] = field(default_factory=list)
    by_rarity: list[StatRow] = field(default_factory=list)
    best_day: DayExtreme | None = None
    worst_day: DayExtreme | None = None

    @property
    def best_text(self) -> str:
        return self.best_day.describe(self.preferred_currency) if self.best_day else PLACEHOLDER

    @property
    def worst_text(self) -> str:
        return self.worst_day.describe(self.preferred_currency) if self.worst_day else PLACEHOLDER


def to_stat_rows(
    groups: dict[str, GroupEntry],
    preferred: str,
    rate: ExchangeRate | None,
    limit: int,
    by_label_desc: bool = False,
) -> list[StatRow]:
    """
    Build sorted, capped table rows.

    ``by_label_desc`` sorts calendar labels newest-first; otherwise rows rank
    by preferred amount desc, then count desc, then label asc.
    """
    rows = [
        StatRow(
            label=label,
            count=entry.count,
            preferred_amount=preferred_amount_for_group(entry.by_currency, preferred, rate),
            income_text=format_for_preferred(entry.by_currency, preferred, rate),
        )
        for label, entry in groups.items()
    ]
    if by_label_desc:
        rows.sort(key=lambda r: r.label, reverse=True)
    else:
        rows.sort(key=lambda r: (-r.preferred_amount, -r.count, r.label))
    return rows[:limit]


def best_and_worst_day(
    by_day: dict[str, GroupEntry],
    preferred: str,
    rate: ExchangeRate | None,
) -> tuple[DayExtreme | None, DayExtreme | None]:
    """First day with the highest / lowest preferred amount, in encounter order."""
    best: DayExtreme | None = None
    worst: DayExtreme | None = None
    for day_key, entry in by_day.items():
        row = DayExtreme(
            day_key=day_key,
            count=entry.count,
            preferred_amount=preferred_amount_for_group(entry.by_currency, preferred, rate),
            income_text=format_for_preferred(entry.by_currency, preferred, rate),
        )
        if best is None or row.preferred_amount > best.preferred_amount:
            best = row
        if worst is None or row.preferred_amount < worst.preferred_amount:
            worst = row
    return best, worst


def compute_income_stats(
    records: Iterable[SaleRecord],
    preferred_currency: str | None = DEFAULT_QUOTE_CURRENCY,
    exchange_rate: ExchangeRate | float | int | str | None = None,
    tz: tzinfo | None = None,
    limits: RowLimits | None = None,
) -> IncomeStats:
    """
    Aggregate sales into income tables.

    Args:
        records: Canonical sale records; unsellable ones are ignored
        preferred_currency: Currency totals are expressed in when convertible
        exchange_rate: Manual rate for the divine/chaos pair (model, number or
            numeric string); anything else disables conversion
        tz: Timezone for day/week labels (None = local time)
        limits: Row caps per table

    Returns:
        IncomeStats with totals, five tables and best/worst day
    """
    preferred = normalize_currency(preferred_currency) or DEFAULT_QUOTE_CURRENCY
    rate = ExchangeRate.coerce(exchange_rate)
    limits = limits or RowLimits()

    groups = group_sales(records, tz=tz)
    total_preferred = try_convert_pair(groups.totals_by_currency, preferred, rate)
    best, worst = best_and_worst_day(groups.by_day, preferred, rate)

    stats = IncomeStats(
        preferred_currency=preferred,
        exchange_rate=rate,
        trades=groups.trades,
        total_text=format_currency_map(groups.totals_by_currency),
        total_preferred_amount=total_preferred,
        total_preferred_text=(
            None if total_preferred is None else f"{format_amount(total_preferred)} {preferred}"
        ),
        by_day=to_stat_rows(groups.by_day, preferred, rate, limits.days, by_label_desc=True),
        by_week=to_stat_rows(groups.by_week, preferred, rate, limits.weeks, by_label_desc=True),
        by_category=to_stat_rows(groups.by_category, preferred, rate, limits.categories),
        by_base_type=to_stat_rows(groups.by_base_type, preferred, rate, limits.base_types),
        by_rarity=to_stat_rows(groups.by_rarity, preferred, rate, limits.rarities),
        best_day=best,
        worst_day=worst,
    )
    log.debug(
        "income_stats_computed",
        trades=stats.trades,
        preferred=preferred,
        converted=total_preferred is not None,
        days=len(groups.by_day),
    )
    return stats
