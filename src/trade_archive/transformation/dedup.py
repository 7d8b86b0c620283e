"""Trade keys and per-batch deduplication.

A trade key identifies one sale within a partition. Two records with the same
key are the same trade, so the archive keeps exactly one of them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

from trade_archive.infrastructure.observability import get_processing_logger
from trade_archive.storage.schemas import SaleRecord
from trade_archive.transformation.normalizers import SaleRecordNormalizer

log = get_processing_logger("dedup")


def normalize_partition_name(partition: object) -> str:
    """Partition names are case- and surrounding-whitespace-insensitive."""
    return str(partition or "").strip().lower()


def _amount_token(amount: float) -> str:
    # 5 and 5.0 must produce the same key after a JSON round trip
    return str(int(amount)) if float(amount).is_integer() else repr(float(amount))


def make_trade_key(partition: str, record: SaleRecord) -> str | None:
    """Build the dedup key, or None when the record is not sellable."""
    if not record.is_sellable:
        return None
    return "|".join(
        (
            quote(normalize_partition_name(partition), safe=""),
            record.item_id,
            record.time_iso,
            _amount_token(record.price_amount),
            record.price_currency,
        )
    )


@dataclass
class KeyedBatch:
    """One fetched batch after normalization and dedup."""

    records: list[SaleRecord] = field(default_factory=list)
    keys: list[str] = field(default_factory=list)

    @property
    def newest_ms(self) -> int | None:
        return self.records[0].time_ms if self.records else None

    @property
    def oldest_ms(self) -> int | None:
        return self.records[-1].time_ms if self.records else None


def normalize_and_key_batch(
    partition: str,
    raw_records: list[Any],
    normalizer: SaleRecordNormalizer | None = None,
) -> KeyedBatch:
    """
    Normalize a raw batch and collapse duplicate trades.

    Invalid and unsellable entries are dropped. On key collision the first
    occurrence wins. Records come back sorted newest-first and carry their
    ``trade_key``.
    """
    normalizer = normalizer or SaleRecordNormalizer()
    batch = KeyedBatch()
    seen: set[str] = set()
    unsellable = 0
    duplicates = 0

    for record in normalizer.normalize_batch(list(raw_records or [])):
        key = make_trade_key(partition, record)
        if key is None:
            unsellable += 1
            continue
        if key in seen:
            duplicates += 1
            continue
        seen.add(key)
        batch.keys.append(key)
        batch.records.append(record.model_copy(update={"trade_key": key}))

    batch.records.sort(key=lambda r: r.time_ms, reverse=True)

    if unsellable or duplicates:
        log.debug(
            "batch_deduplicated",
            partition=normalize_partition_name(partition),
            kept=len(batch.records),
            unsellable=unsellable,
            duplicates=duplicates,
        )
    return batch
