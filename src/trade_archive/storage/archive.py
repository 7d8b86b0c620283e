"""Merge-on-write trade archive.

Each partition (league) lives in one storage slot holding every archived sale
plus the metadata of the last fetch. ``persist_batch`` is the only mutation:

1. normalize + dedup the fetched batch
2. load the partition (corrupt or missing → empty)
3. sanitize loaded rows
4. detect a gap against the previous fetch
5. merge by trade key (current batch wins), newest-first
6. update last-fetch metadata and gap bookkeeping
7. write everything as one payload, dropping the oldest rows until it fits

Not safe for concurrent writers on the same partition; callers serialize.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Any

from pydantic import ValidationError

from trade_archive.common.utils.date_utils import is_valid_unix_ms
from trade_archive.common.utils.number_format import is_finite_number
from trade_archive.infrastructure.checkpoint import (
    GapInfo,
    PartitionPathBuilder,
    PartitionReadError,
    PartitionStore,
    StorageCapacityError,
    detect_gap,
)
from trade_archive.infrastructure.impls.system import SystemClock
from trade_archive.infrastructure.observability import get_storage_logger
from trade_archive.infrastructure.ports.system import IClock
from trade_archive.storage.schemas import PartitionMetadata, SaleRecord
from trade_archive.transformation.dedup import (
    KeyedBatch,
    normalize_and_key_batch,
    normalize_partition_name,
)

log = get_storage_logger("archive")

DEFAULT_SHRINK_RATIO = 0.9


@dataclass
class PartitionSnapshot:
    """Records and metadata as loaded from storage."""

    records: list[SaleRecord] = field(default_factory=list)
    metadata: PartitionMetadata = field(default_factory=PartitionMetadata)


@dataclass
class ArchiveResult:
    """Outcome of one ``persist_batch`` call.

    ``records`` is the full merged set. ``written_records`` is how many of them
    reached storage (fewer after truncation, None if the write was abandoned).
    """

    records: list[SaleRecord]
    gap_info: GapInfo
    metadata: PartitionMetadata
    written_records: int | None


def sanitize_records(rows: Any) -> list[SaleRecord]:
    """
    Rebuild SaleRecords from stored rows, tolerating partial corruption.

    Rows missing key fields, with non-finite times or prices, or failing model
    validation are dropped. Duplicate trade keys keep the first row.
    """
    if not isinstance(rows, list):
        return []

    out: list[SaleRecord] = []
    keys: set[str] = set()
    for row in rows:
        if not isinstance(row, dict):
            continue
        key = row.get("trade_key")
        if not isinstance(key, str) or not key or key in keys:
            continue
        if not isinstance(row.get("item_id"), str) or not row["item_id"]:
            continue
        if not isinstance(row.get("time_iso"), str) or not row["time_iso"]:
            continue
        if not is_valid_unix_ms(row.get("time_ms")):
            continue
        if not isinstance(row.get("price_currency"), str) or not row["price_currency"]:
            continue
        if not is_finite_number(row.get("price_amount")):
            continue
        try:
            record = SaleRecord.model_validate(row)
        except ValidationError:
            continue
        if not record.is_sellable:
            continue
        keys.add(key)
        out.append(record)

    out.sort(key=lambda r: r.time_ms, reverse=True)
    return out


class TradeArchive:
    """Append-only, merge-on-write archive keyed by partition."""

    def __init__(
        self,
        store: PartitionStore,
        clock: IClock | None = None,
        shrink_ratio: float = DEFAULT_SHRINK_RATIO,
        root: str | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        if not 0 < shrink_ratio < 1:
            raise ValueError("shrink_ratio must be between 0 and 1")
        self.store = store
        self.clock = clock or SystemClock()
        self.shrink_ratio = shrink_ratio
        self.root = root
        self.tz = tz

    def _key(self, partition: str) -> str:
        return PartitionPathBuilder.archive_partition(partition, root=self.root)

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------
    def load(self, partition: str) -> PartitionSnapshot:
        """Load a partition; unreadable or malformed data loads as empty."""
        key = self._key(partition)
        try:
            raw = self.store.read(key)
        except PartitionReadError as e:
            log.warning("partition_unreadable", key=key, error=str(e))
            return PartitionSnapshot()
        if raw is None:
            return PartitionSnapshot()

        try:
            doc = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            log.warning("partition_corrupt", key=key, error=str(e))
            return PartitionSnapshot()
        if not isinstance(doc, dict):
            log.warning("partition_corrupt", key=key, error="payload is not an object")
            return PartitionSnapshot()

        stored_rows = doc.get("records")
        records = sanitize_records(stored_rows)
        if isinstance(stored_rows, list) and len(records) != len(stored_rows):
            log.warning(
                "partition_rows_sanitized",
                key=key,
                stored=len(stored_rows),
                kept=len(records),
            )
        return PartitionSnapshot(
            records=records,
            metadata=PartitionMetadata.from_dict(doc.get("metadata")),
        )

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------
    def persist_batch(self, partition: str, raw_records: list[Any]) -> ArchiveResult:
        """Normalize, dedup, gap-check and merge one fetched batch into the archive."""
        name = normalize_partition_name(partition)
        current = normalize_and_key_batch(name, raw_records)
        existing = self.load(name)
        gap_info = detect_gap(existing.metadata, current.records, current.keys, tz=self.tz)

        merged: dict[str, SaleRecord] = {}
        for record in existing.records:
            merged[record.trade_key] = record
        for record in current.records:
            merged[record.trade_key] = record
        merged_records = sorted(merged.values(), key=lambda r: r.time_ms, reverse=True)

        metadata = self._next_metadata(existing.metadata, current, gap_info)
        written = self.write_partition(name, merged_records, metadata)

        if gap_info.detected:
            log.warning(
                "gap_detected",
                partition=name,
                from_ms=gap_info.from_ms,
                to_ms=gap_info.to_ms,
                gap_count=metadata.gap_count,
            )
        log.info(
            "batch_persisted",
            partition=name,
            fetched=len(current.records),
            previously_archived=len(existing.records),
            merged=len(merged_records),
            written=written,
        )
        return ArchiveResult(
            records=merged_records,
            gap_info=gap_info,
            metadata=metadata,
            written_records=written,
        )

    def _next_metadata(
        self,
        previous: PartitionMetadata,
        current: KeyedBatch,
        gap_info: GapInfo,
    ) -> PartitionMetadata:
        now_ms = self.clock.now_ms()
        if gap_info.detected:
            gap_at, gap_from, gap_to = now_ms, gap_info.from_ms, gap_info.to_ms
        else:
            gap_at = previous.last_gap_at_ms
            gap_from = previous.last_gap_from_ms
            gap_to = previous.last_gap_to_ms

        return PartitionMetadata(
            last_fetch_at_ms=now_ms,
            last_fetch_newest_ms=current.newest_ms,
            last_fetch_oldest_ms=current.oldest_ms,
            last_fetch_keys=list(current.keys),
            gap_count=previous.gap_count + (1 if gap_info.detected else 0),
            last_gap_at_ms=gap_at,
            last_gap_from_ms=gap_from,
            last_gap_to_ms=gap_to,
        )

    def write_partition(
        self,
        partition: str,
        records: list[SaleRecord],
        metadata: PartitionMetadata,
    ) -> int | None:
        """
        Write records + metadata as one payload.

        Records must be sorted newest-first; on a capacity rejection the
        oldest share is dropped and the write retried. Gives up quietly when
        even an empty record list does not fit.

        Returns:
            Number of records written, or None if nothing could be written
        """
        key = self._key(partition)
        rows = list(records)
        meta = metadata.to_dict()

        while True:
            payload = json.dumps(
                {"records": [r.model_dump(mode="json") for r in rows], "metadata": meta},
                ensure_ascii=False,
            ).encode("utf-8")
            try:
                self.store.write(key, payload)
            except StorageCapacityError as e:
                if not rows:
                    log.warning("archive_write_abandoned", key=key, error=str(e))
                    return None
                keep = math.floor(len(rows) * self.shrink_ratio)
                log.warning(
                    "archive_truncated",
                    key=key,
                    size_bytes=e.size_bytes,
                    records_before=len(rows),
                    records_after=keep,
                )
                rows = rows[:keep]
                continue
            return len(rows)
