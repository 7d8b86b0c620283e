"""Trade history API client.

Fetches one raw batch (``result[]``) per league. Errors map onto the
HistoryApiError hierarchy and propagate; nothing is retried here.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote, unquote

from trade_archive.ingestion.config.value_objects import (
    DEFAULT_HISTORY_PATH,
    HistoryApiClientConfig,
)
from trade_archive.ingestion.connectors.aiohttp_client import AiohttpClient
from trade_archive.ingestion.exceptions import (
    BadRequestError,
    HistoryApiError,
    NotFoundError,
    RateLimitError,
    ServerError,
    UnexpectedPayloadError,
)
from trade_archive.ingestion.ports.http import HttpResponse, IHttpClient
from trade_archive.infrastructure.observability import get_ingestion_logger

log = get_ingestion_logger("history-client")


def history_path(partition: str, path: str = DEFAULT_HISTORY_PATH) -> str:
    return f"{path}{quote(partition, safe='')}"


def is_history_api_url(url: object, path: str = DEFAULT_HISTORY_PATH) -> bool:
    return isinstance(url, str) and path in url


def extract_partition_from_url(url: object, path: str = DEFAULT_HISTORY_PATH) -> str | None:
    """Recover the league name from a history API URL, URL-decoded."""
    if not isinstance(url, str):
        return None
    idx = url.find(path)
    if idx < 0:
        return None
    league = url[idx + len(path) :].split("?", 1)[0].split("#", 1)[0]
    if not league:
        return None
    return unquote(league)


def extract_result(payload: Any, url: str | None = None) -> list[Any]:
    """Return ``payload["result"]`` or raise UnexpectedPayloadError."""
    if not isinstance(payload, dict) or not isinstance(payload.get("result"), list):
        raise UnexpectedPayloadError("Unexpected API response (missing result[])", url=url)
    return payload["result"]


class TradeHistoryClient:
    """Fetches raw trade history batches."""

    def __init__(
        self,
        http_client: IHttpClient | None = None,
        config: HistoryApiClientConfig | None = None,
    ):
        self.config = config or HistoryApiClientConfig()
        self.http = http_client or AiohttpClient(self.config.http_config)

    def url_for(self, partition: str) -> str:
        base = self.config.base_url.rstrip("/")
        return base + history_path(partition, self.config.history_path)

    def partition_from_url(self, url: object) -> str | None:
        """League name of a URL on this client's history endpoint, else None."""
        if not is_history_api_url(url, self.config.history_path):
            return None
        return extract_partition_from_url(url, self.config.history_path)

    async def fetch_batch(self, partition: str) -> list[Any]:
        """Fetch the current history page for ``partition``.

        Raises:
            HistoryApiError: On any non-200 response
            UnexpectedPayloadError: If the body has no ``result`` list
        """
        url = self.url_for(partition)
        resp = await self.http.get(url, headers=dict(self.config.headers))
        self._raise_for_status(resp)
        result = extract_result(resp.body, url=url)
        log.info("history_fetched", partition=partition, entries=len(result))
        return result

    @staticmethod
    def _raise_for_status(resp: HttpResponse) -> None:
        status = resp.status_code
        if status == 200:
            return
        message = f"HTTP {status} for {resp.url}"
        log.warning("history_fetch_failed", status=status, url=resp.url)
        if status == 400:
            raise BadRequestError(message, status_code=status, url=resp.url)
        if status == 404:
            raise NotFoundError(message, status_code=status, url=resp.url)
        if status == 429:
            retry_after = resp.headers.get("Retry-After")
            raise RateLimitError(
                message,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
                status_code=status,
                url=resp.url,
            )
        if status >= 500:
            raise ServerError(message, status_code=status, url=resp.url)
        raise HistoryApiError(message, status_code=status, url=resp.url)

    async def close(self) -> None:
        await self.http.close()
