"""Fetch → archive → view orchestration for one league at a time."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from trade_archive.analytics.income import RowLimits
from trade_archive.application.settings import SeenItems, ViewerSettings
from trade_archive.application.state_store import ViewerStateStore
from trade_archive.application.view import HistoryView, build_history_view
from trade_archive.infrastructure.checkpoint import GapInfo
from trade_archive.infrastructure.observability import get_ingestion_logger
from trade_archive.ingestion.history_client import TradeHistoryClient, extract_result
from trade_archive.storage.archive import TradeArchive
from trade_archive.storage.schemas import SaleRecord

log = get_ingestion_logger("history-service")


@dataclass
class HistoryPayload:
    """Last archived state of a partition, as handed to the view."""

    partition: str
    records: list[SaleRecord] = field(default_factory=list)
    gap_info: GapInfo = field(default_factory=GapInfo.none)


class TradeHistoryService:
    """
    Coordinates the history client, the archive and viewer state.

    Holds the last payload so settings or seen-state changes can re-render
    without refetching.
    """

    def __init__(
        self,
        client: TradeHistoryClient,
        archive: TradeArchive,
        state_store: ViewerStateStore | None = None,
        limits: RowLimits | None = None,
    ):
        self.client = client
        self.archive = archive
        self.state_store = state_store
        self.limits = limits or RowLimits()
        self.settings = state_store.load_settings() if state_store else ViewerSettings()
        self.seen = state_store.load_seen() if state_store else SeenItems()
        self.last_payload: HistoryPayload | None = None

    async def refresh(self, partition: str) -> HistoryPayload:
        """Fetch the current batch for ``partition`` and archive it.

        Raises:
            HistoryApiError: If the fetch fails; the archive is left untouched
        """
        log.info("history_refresh_started", partition=partition)
        raw_records = await self.client.fetch_batch(partition)
        return self._persist(partition, raw_records)

    def handle_payload(self, partition: str, payload: Any) -> HistoryPayload:
        """Archive an already-fetched API body (``{"result": [...]}``).

        Raises:
            UnexpectedPayloadError: If the body has no ``result`` list
        """
        return self._persist(partition, extract_result(payload))

    def handle_response(self, url: str, payload: Any) -> HistoryPayload | None:
        """Archive an observed API response if ``url`` is a history endpoint.

        Returns None for any other URL.

        Raises:
            UnexpectedPayloadError: If a history body has no ``result`` list
        """
        partition = self.client.partition_from_url(url)
        if partition is None:
            return None
        return self.handle_payload(partition, payload)

    def _persist(self, partition: str, raw_records: list[Any]) -> HistoryPayload:
        result = self.archive.persist_batch(partition, raw_records)
        self.last_payload = HistoryPayload(
            partition=partition,
            records=result.records,
            gap_info=result.gap_info,
        )
        return self.last_payload

    # ------------------------------------------------------------------
    # Viewer state
    # ------------------------------------------------------------------
    def update_settings(self, **changes: Any) -> ViewerSettings:
        merged = {**self.settings.to_dict(), **changes}
        self.settings = ViewerSettings.from_dict(merged)
        if self.state_store:
            self.state_store.save_settings(self.settings)
        return self.settings

    def mark_seen(self, item_id: str) -> None:
        if self.seen.mark(item_id) and self.state_store:
            self.state_store.save_seen(self.seen)

    def mark_all_seen(self) -> int:
        """Mark every record of the last payload as seen."""
        if self.last_payload is None:
            return 0
        added = self.seen.mark_all(r.item_id for r in self.last_payload.records)
        if added and self.state_store:
            self.state_store.save_seen(self.seen)
        return added

    def render(self, now_ms: int | None = None) -> HistoryView | None:
        if self.last_payload is None:
            return None
        payload = self.last_payload
        return build_history_view(
            payload.partition,
            payload.records,
            payload.gap_info,
            self.settings,
            self.seen,
            now_ms if now_ms is not None else self.archive.clock.now_ms(),
            tz=self.archive.tz,
            limits=self.limits,
        )
