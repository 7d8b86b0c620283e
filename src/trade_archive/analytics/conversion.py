"""Restricted two-currency conversion.

Conversion works for exactly one configured pair (divine/chaos by default)
and fails closed: if the rate is missing, the preferred currency is outside
the pair, or any other currency is present, no converted amount exists and
callers fall back to the raw multi-currency text.
"""

from __future__ import annotations

from collections.abc import Mapping

from trade_archive.analytics.formatting import format_currency_map
from trade_archive.common.utils.number_format import format_amount, is_finite_number
from trade_archive.shared.models.exchange_rate import ExchangeRate


def try_convert_pair(
    totals: Mapping[str, float],
    preferred: str,
    rate: ExchangeRate | None,
) -> float | None:
    """Total of ``totals`` in ``preferred``, or None if it cannot be converted."""
    if rate is None or preferred not in rate.pair:
        return None

    entries = {c: v for c, v in totals.items() if is_finite_number(v) and v != 0}
    if not entries:
        return 0.0
    if any(c not in rate.pair for c in entries):
        return None

    base_amount = entries.get(rate.base, 0.0)
    quote_amount = entries.get(rate.quote, 0.0)
    if preferred == rate.quote:
        return quote_amount + base_amount * rate.rate
    return base_amount + quote_amount / rate.rate


def preferred_amount_for_group(
    totals: Mapping[str, float],
    preferred: str,
    rate: ExchangeRate | None,
) -> float:
    """Converted total when possible, else the native amount in ``preferred``."""
    converted = try_convert_pair(totals, preferred, rate)
    if converted is not None:
        return converted
    return totals.get(preferred, 0.0)


def format_for_preferred(
    totals: Mapping[str, float],
    preferred: str,
    rate: ExchangeRate | None,
) -> str:
    converted = try_convert_pair(totals, preferred, rate)
    if converted is None:
        return format_currency_map(totals)
    return f"{format_amount(converted)} {preferred}"
