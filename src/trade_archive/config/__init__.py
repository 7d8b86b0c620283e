"""Configuration package for trade_archive."""

from .state import (
    AnalyticsConfig,
    ArchiveConfig,
    ConfigLoader,
    ConfigState,
    HistoryApiConfig,
    LoggingConfig,
    get_config,
)

__all__ = [
    "AnalyticsConfig",
    "ArchiveConfig",
    "ConfigLoader",
    "ConfigState",
    "HistoryApiConfig",
    "LoggingConfig",
    "get_config",
]
