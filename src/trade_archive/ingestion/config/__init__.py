from .value_objects import HistoryApiClientConfig, HttpClientConfig

__all__ = ["HttpClientConfig", "HistoryApiClientConfig"]
