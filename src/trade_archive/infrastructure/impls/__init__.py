from .system import FixedClock, SystemClock

__all__ = ["SystemClock", "FixedClock"]
