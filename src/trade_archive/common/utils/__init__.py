"""
Utilities Module - Shared Helper Functions
===========================================

Provides shared utilities used across multiple layers:
- Date/time utilities (epoch milliseconds, local day/week keys, display text)
- Amount formatting
"""

from trade_archive.common.utils.date_utils import (
    format_local_time,
    format_time_ago,
    from_unix_ms,
    is_valid_unix_ms,
    local_day_key,
    local_week_start_key,
    parse_iso_to_ms,
    to_unix_ms,
)
from trade_archive.common.utils.number_format import format_amount, is_finite_number

__all__ = [
    # Date utilities
    "to_unix_ms",
    "from_unix_ms",
    "parse_iso_to_ms",
    "is_valid_unix_ms",
    "local_day_key",
    "local_week_start_key",
    "format_local_time",
    "format_time_ago",
    # Amounts
    "format_amount",
    "is_finite_number",
]
