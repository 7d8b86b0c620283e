"""Display model for one league's trade history.

Pure function of archived records, gap info, settings and the seen set; the
caller decides how to render it.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import tzinfo

from trade_archive.analytics.income import IncomeStats, RowLimits, compute_income_stats
from trade_archive.application.settings import SeenItems, ViewerSettings
from trade_archive.common.utils.date_utils import format_local_time, format_time_ago
from trade_archive.infrastructure.checkpoint import GapInfo
from trade_archive.storage.schemas import SaleRecord


@dataclass(frozen=True)
class HistoryRow:
    record: SaleRecord
    is_new: bool
    time_local: str
    time_ago: str
    price_text: str = ""


@dataclass
class HistoryView:
    partition: str
    rows: list[HistoryRow] = field(default_factory=list)
    new_count: int = 0
    archived_count: int = 0
    stats: IncomeStats | None = None
    status_text: str = ""
    updated_at_ms: int | None = None

    @property
    def count(self) -> int:
        return len(self.rows)


def status_text(archived_count: int, gap_info: GapInfo | None) -> str:
    """``"Ready • archived N"`` plus the last gap, if one was detected."""
    text = f"Ready • archived {archived_count}"
    if gap_info is not None and gap_info.detected:
        text += f" • gap detected ({gap_info.from_time_local} -> {gap_info.to_time_local})"
    return text


def build_history_view(
    partition: str,
    records: Sequence[SaleRecord],
    gap_info: GapInfo | None,
    settings: ViewerSettings,
    seen: SeenItems,
    now_ms: int,
    tz: tzinfo | None = None,
    limits: RowLimits | None = None,
) -> HistoryView:
    """
    Filter archived records for display and compute stats on what is shown.

    ``new_count`` counts every sellable unseen record, even when ``only_new``
    hides nothing else. ``archived_count`` is the size of the full archive.
    """
    rows: list[HistoryRow] = []
    shown: list[SaleRecord] = []
    new_count = 0

    for record in records:
        if not record.is_sellable:
            continue
        is_new = seen.is_new(record.item_id)
        if is_new:
            new_count += 1
        if settings.only_new and not is_new:
            continue
        shown.append(record)
        rows.append(
            HistoryRow(
                record=record,
                is_new=is_new,
                time_local=format_local_time(record.time_iso, tz),
                time_ago=format_time_ago(record.time_iso, now_ms),
                price_text=record.price_text,
            )
        )

    stats = compute_income_stats(
        shown,
        preferred_currency=settings.preferred_currency,
        exchange_rate=settings.exchange_rate(),
        tz=tz,
        limits=limits,
    )
    return HistoryView(
        partition=partition,
        rows=rows,
        new_count=new_count,
        archived_count=len(records),
        stats=stats,
        status_text=status_text(len(records), gap_info),
        updated_at_ms=now_ms,
    )
