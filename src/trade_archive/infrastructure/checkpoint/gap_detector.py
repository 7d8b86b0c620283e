"""Gap detection between consecutive fetches of the same partition.

A contiguous fetch either reaches back to (or before) the previous fetch's
newest sale, or shares at least one trade key with it. A strictly newer batch
with no shared key means a window was missed between polls. Detection only;
nothing is back-filled.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import tzinfo

from trade_archive.common.utils.date_utils import format_local_ms
from trade_archive.storage.schemas import PartitionMetadata, SaleRecord


@dataclass(frozen=True)
class GapInfo:
    """Result of comparing a batch against the previous fetch."""

    detected: bool
    from_ms: int | None = None
    to_ms: int | None = None
    from_time_local: str = ""
    to_time_local: str = ""

    @classmethod
    def none(cls) -> GapInfo:
        return cls(detected=False)


def detect_gap(
    metadata: PartitionMetadata,
    current_records: Sequence[SaleRecord],
    current_keys: Iterable[str],
    tz: tzinfo | None = None,
) -> GapInfo:
    """
    Compare the current batch (sorted newest-first) against the last fetch.

    Returns:
        GapInfo spanning previous newest → current oldest when a gap is found
    """
    prev_newest_ms = metadata.last_fetch_newest_ms
    if prev_newest_ms is None or not current_records:
        return GapInfo.none()

    current_oldest_ms = current_records[-1].time_ms
    if current_oldest_ms <= prev_newest_ms:
        return GapInfo.none()

    prev_keys = set(metadata.last_fetch_keys)
    if prev_keys and any(k in prev_keys for k in current_keys):
        return GapInfo.none()

    return GapInfo(
        detected=True,
        from_ms=prev_newest_ms,
        to_ms=current_oldest_ms,
        from_time_local=format_local_ms(prev_newest_ms, tz),
        to_time_local=format_local_ms(current_oldest_ms, tz),
    )
