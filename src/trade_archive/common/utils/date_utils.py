"""
Date Utilities
==============

Timestamp parsing, epoch-millisecond conversions and the calendar keys used
for grouping sales by local day and ISO week.

Functions taking ``tz`` interpret ``None`` as the machine's local timezone.
"""

import math
from datetime import UTC, datetime, timedelta, tzinfo

from trade_archive.common.utils.number_format import is_finite_number

LOCAL_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Parsed instants stay one day inside datetime range so any UTC offset converts
_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
MIN_UNIX_MS = (datetime(1, 1, 2, tzinfo=UTC) - _EPOCH) // timedelta(milliseconds=1)
MAX_UNIX_MS = (datetime(9999, 12, 30, tzinfo=UTC) - _EPOCH) // timedelta(milliseconds=1)


def to_unix_ms(dt: datetime) -> int:
    """
    Convert datetime to Unix timestamp in milliseconds.

    Args:
        dt: Datetime object (timezone-aware or naive assumed UTC)

    Returns:
        Unix timestamp in milliseconds
    """
    if dt.tzinfo is None:
        # Assume UTC for naive datetimes
        dt = dt.replace(tzinfo=UTC)

    return int(dt.timestamp() * 1000)


def from_unix_ms(timestamp_ms: int, tz: tzinfo | None = UTC) -> datetime:
    """
    Convert Unix timestamp in milliseconds to an aware datetime.

    Args:
        timestamp_ms: Unix timestamp in milliseconds
        tz: Target timezone (UTC by default, None for local time)

    Returns:
        Timezone-aware datetime
    """
    dt = datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC)
    return dt.astimezone(tz) if tz is not None else dt.astimezone()


def parse_iso_to_ms(value: object) -> int | None:
    """
    Parse an ISO-8601 timestamp into epoch milliseconds.

    Accepts a trailing ``Z`` and explicit offsets. Naive timestamps are read
    as UTC.

    Returns:
        Epoch milliseconds, or None when the value is not a parseable string
        or names an instant outside the representable range
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        timestamp_ms = to_unix_ms(datetime.fromisoformat(value.strip()))
    except (ValueError, OverflowError):
        return None
    return timestamp_ms if is_valid_unix_ms(timestamp_ms) else None


def is_valid_unix_ms(value: object) -> bool:
    """True for finite epoch milliseconds that convert to a datetime in any timezone."""
    return is_finite_number(value) and MIN_UNIX_MS <= value <= MAX_UNIX_MS


def local_day_key(timestamp_ms: int, tz: tzinfo | None = None) -> str:
    """Calendar day of ``timestamp_ms`` as ``YYYY-MM-DD``."""
    return from_unix_ms(timestamp_ms, tz).date().isoformat()


def local_week_start_key(timestamp_ms: int, tz: tzinfo | None = None) -> str:
    """Monday of the week containing ``timestamp_ms`` as ``YYYY-MM-DD``."""
    day = from_unix_ms(timestamp_ms, tz).date()
    return (day - timedelta(days=day.weekday())).isoformat()


def format_local_time(iso: str, tz: tzinfo | None = None) -> str:
    """Render an ISO timestamp for display; unparseable input is returned as-is."""
    timestamp_ms = parse_iso_to_ms(iso)
    if timestamp_ms is None:
        return iso
    return format_local_ms(timestamp_ms, tz)


def format_local_ms(timestamp_ms: int, tz: tzinfo | None = None) -> str:
    return from_unix_ms(timestamp_ms, tz).strftime(LOCAL_TIME_FORMAT)


def format_time_ago(iso: str, now_ms: int) -> str:
    """
    Coarse relative age of an ISO timestamp.

    Seconds below a minute, minutes below an hour, hours below two days,
    then whole days. Timestamps after ``now_ms`` read "in the future".
    """
    timestamp_ms = parse_iso_to_ms(iso)
    if timestamp_ms is None:
        return ""
    delta_sec = math.floor((now_ms - timestamp_ms) / 1000)
    if delta_sec < 0:
        return "in the future"
    if delta_sec < 60:
        return f"{delta_sec}s ago"
    delta_min = delta_sec // 60
    if delta_min < 60:
        return f"{delta_min}m ago"
    delta_hr = delta_min // 60
    if delta_hr < 48:
        return f"{delta_hr}h ago"
    return f"{delta_hr // 24}d ago"
