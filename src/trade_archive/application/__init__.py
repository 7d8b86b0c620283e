"""Application layer: viewer state, display model and refresh orchestration."""

from .service import HistoryPayload, TradeHistoryService
from .settings import SEEN_ITEMS_LIMIT, SeenItems, ViewerSettings
from .state_store import ViewerStateStore
from .view import HistoryRow, HistoryView, build_history_view, status_text

__all__ = [
    "TradeHistoryService",
    "HistoryPayload",
    "ViewerSettings",
    "SeenItems",
    "SEEN_ITEMS_LIMIT",
    "ViewerStateStore",
    "HistoryRow",
    "HistoryView",
    "build_history_view",
    "status_text",
]
