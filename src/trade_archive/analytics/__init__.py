"""Analytics layer: income aggregation over archived sales."""

from .conversion import format_for_preferred, preferred_amount_for_group, try_convert_pair
from .formatting import format_currency_map
from .grouping import GroupEntry, SalesGroups, group_sales
from .income import (
    DayExtreme,
    IncomeStats,
    RowLimits,
    StatRow,
    compute_income_stats,
)

__all__ = [
    "compute_income_stats",
    "IncomeStats",
    "StatRow",
    "DayExtreme",
    "RowLimits",
    "GroupEntry",
    "SalesGroups",
    "group_sales",
    "try_convert_pair",
    "preferred_amount_for_group",
    "format_for_preferred",
    "format_currency_map",
]
