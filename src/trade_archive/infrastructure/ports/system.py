"""System infrastructure port definitions."""

from abc import ABC, abstractmethod
from datetime import datetime


class IClock(ABC):
    """Abstract interface for clock operations."""

    @abstractmethod
    def utcnow(self) -> datetime:
        """Get current UTC time."""
        ...

    def now_ms(self) -> int:
        """Current time as epoch milliseconds."""
        return int(self.utcnow().timestamp() * 1000)
