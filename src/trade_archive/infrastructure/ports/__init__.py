from .system import IClock

__all__ = ["IClock"]
