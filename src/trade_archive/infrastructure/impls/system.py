"""Default implementations of infrastructure abstractions."""

from datetime import UTC, datetime

from trade_archive.common.utils.date_utils import from_unix_ms
from trade_archive.infrastructure.ports.system import IClock


class SystemClock(IClock):
    """Default implementation using system time."""

    def utcnow(self) -> datetime:
        """Get current UTC time."""
        return datetime.now(UTC)


class FixedClock(IClock):
    """Clock frozen at a given epoch-millisecond instant; ``advance`` moves it."""

    def __init__(self, now_ms: int):
        self._now_ms = now_ms

    def utcnow(self) -> datetime:
        return from_unix_ms(self._now_ms)

    def now_ms(self) -> int:
        return self._now_ms

    def advance(self, ms: int) -> None:
        self._now_ms += ms
