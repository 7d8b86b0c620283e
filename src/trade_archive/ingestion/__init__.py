"""Ingestion layer: fetches raw trade history batches for a partition."""

from .exceptions import (
    BadRequestError,
    HistoryApiError,
    NotFoundError,
    RateLimitError,
    ServerError,
    UnexpectedPayloadError,
)
from .history_client import (
    TradeHistoryClient,
    extract_partition_from_url,
    history_path,
    is_history_api_url,
)

__all__ = [
    "TradeHistoryClient",
    "history_path",
    "is_history_api_url",
    "extract_partition_from_url",
    "HistoryApiError",
    "BadRequestError",
    "NotFoundError",
    "RateLimitError",
    "ServerError",
    "UnexpectedPayloadError",
]
