"""Configuration value objects for dependency injection.

Instead of injecting the global settings object, inject specific configuration
dataclasses into each component.
"""

from dataclasses import dataclass, field

DEFAULT_HISTORY_PATH = "/api/trade/history/"


@dataclass(frozen=True)
class HttpClientConfig:
    """Configuration for HTTP client."""

    timeout: float = 30.0
    verify_ssl: bool = True


@dataclass(frozen=True)
class HistoryApiClientConfig:
    """Configuration for the trade history API client."""

    base_url: str = "https://www.pathofexile.com"
    history_path: str = DEFAULT_HISTORY_PATH
    headers: dict[str, str] = field(default_factory=lambda: {"Accept": "application/json"})
    http_config: HttpClientConfig = field(default_factory=HttpClientConfig)
