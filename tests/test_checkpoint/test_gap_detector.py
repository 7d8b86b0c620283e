"""
Tests for gap detection between consecutive fetches.
"""

from datetime import UTC

from trade_archive.infrastructure.checkpoint import detect_gap
from trade_archive.storage.schemas import PartitionMetadata
from trade_archive.transformation.dedup import normalize_and_key_batch


def _batch(raw_sale, *specs):
    return normalize_and_key_batch("std", [raw_sale(item_id=i, time=t) for i, t in specs])


class TestDetectGap:
    def test_first_fetch_never_gaps(self, raw_sale):
        """
        Test 1/6: Without a previous watermark there is nothing to compare.
        """
        batch = _batch(raw_sale, ("a", "2024-03-01T12:00:00Z"))
        gap = detect_gap(PartitionMetadata(), batch.records, batch.keys)
        assert not gap.detected

    def test_empty_batch_never_gaps(self):
        """
        Test 2/6: An empty fetch cannot reveal a gap.
        """
        meta = PartitionMetadata(last_fetch_newest_ms=1_709_294_400_000)
        assert not detect_gap(meta, [], []).detected

    def test_reaching_back_is_contiguous(self, raw_sale):
        """
        Test 3/6: Oldest current sale at or before the previous newest.
        """
        previous = _batch(raw_sale, ("a", "2024-03-01T12:00:00Z"))
        meta = PartitionMetadata(
            last_fetch_newest_ms=previous.newest_ms, last_fetch_keys=previous.keys
        )
        current = _batch(
            raw_sale, ("b", "2024-03-01T13:00:00Z"), ("c", "2024-03-01T12:00:00Z")
        )
        assert not detect_gap(meta, current.records, current.keys).detected

    def test_shared_key_is_contiguous(self, raw_sale):
        """
        Test 4/6: Overlap by trade key means no gap even if times moved.
        """
        previous = _batch(raw_sale, ("a", "2024-03-01T12:00:00Z"))
        meta = PartitionMetadata(
            last_fetch_newest_ms=previous.newest_ms - 1, last_fetch_keys=previous.keys
        )
        current = _batch(raw_sale, ("b", "2024-03-01T13:00:00Z"), ("a", "2024-03-01T12:00:00Z"))
        assert not detect_gap(meta, current.records, current.keys).detected

    def test_strictly_newer_disjoint_batch_gaps(self, raw_sale):
        """
        Test 5/6: Strictly newer batch with no shared key is a gap.
        """
        previous = _batch(raw_sale, ("a", "2024-03-01T12:00:00Z"))
        meta = PartitionMetadata(
            last_fetch_newest_ms=previous.newest_ms, last_fetch_keys=previous.keys
        )
        current = _batch(
            raw_sale, ("c", "2024-03-01T15:00:00Z"), ("b", "2024-03-01T14:00:00Z")
        )
        gap = detect_gap(meta, current.records, current.keys, tz=UTC)

        assert gap.detected
        assert gap.from_ms == previous.newest_ms
        assert gap.to_ms == current.oldest_ms
        assert gap.from_time_local == "2024-03-01 12:00:00"
        assert gap.to_time_local == "2024-03-01 14:00:00"

    def test_gap_without_previous_keys(self, raw_sale):
        """
        Test 6/6: Missing previous keys only leave the time rule.
        """
        meta = PartitionMetadata(last_fetch_newest_ms=1_709_294_400_000)
        current = _batch(raw_sale, ("b", "2024-03-01T14:00:00Z"))
        assert detect_gap(meta, current.records, current.keys).detected
