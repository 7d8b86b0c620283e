"""
Tests for the merge-on-write trade archive.
Cover merge semantics, idempotence, gap bookkeeping, corruption tolerance and
the truncate-on-oversize write loop.
"""

import json

import pytest

from trade_archive.infrastructure.checkpoint import (
    InMemoryPartitionStore,
    PartitionPathBuilder,
    PartitionReadError,
    StorageCapacityError,
)
from trade_archive.storage.archive import TradeArchive, sanitize_records
from trade_archive.transformation.dedup import normalize_and_key_batch

KEY = PartitionPathBuilder.archive_partition("std")

# ============================================================================
# FIXTURES
# ============================================================================


class RecordLimitStore(InMemoryPartitionStore):
    """Rejects payloads holding more than ``limit`` records."""

    def __init__(self, limit: int):
        super().__init__()
        self.limit = limit
        self.attempts: list[int] = []

    def write(self, key, payload):
        count = len(json.loads(payload)["records"])
        self.attempts.append(count)
        if count > self.limit:
            raise StorageCapacityError("too many records", key=key, size_bytes=len(payload))
        super().write(key, payload)


class AlwaysFullStore(InMemoryPartitionStore):
    def write(self, key, payload):
        raise StorageCapacityError("full", key=key, size_bytes=len(payload))


class UnreadableStore(InMemoryPartitionStore):
    def read(self, key):
        raise PartitionReadError("disk on fire", key=key)


@pytest.fixture
def store():
    return InMemoryPartitionStore()


@pytest.fixture
def archive(store, clock):
    return TradeArchive(store, clock=clock)


def _hourly(raw_sale, ids, start_hour=0):
    return [
        raw_sale(item_id=item_id, time=f"2024-03-01T{start_hour + i:02d}:00:00Z")
        for i, item_id in enumerate(ids)
    ]


def _stored(store):
    return json.loads(store.read(KEY))


# ============================================================================
# MERGE
# ============================================================================


class TestPersistBatch:
    def test_first_batch_is_archived(self, archive, store, raw_sale, clock):
        """
        Test 1/7: First fetch stores every sellable record with metadata.
        """
        result = archive.persist_batch("Std", _hourly(raw_sale, ["a", "b", "c"]))

        assert [r.item_id for r in result.records] == ["c", "b", "a"]
        assert result.written_records == 3
        assert not result.gap_info.detected

        doc = _stored(store)
        assert [row["item_id"] for row in doc["records"]] == ["c", "b", "a"]
        meta = doc["metadata"]
        assert meta["last_fetch_at_ms"] == clock.now_ms()
        assert meta["last_fetch_newest_ms"] == result.records[0].time_ms
        assert meta["last_fetch_oldest_ms"] == result.records[-1].time_ms
        assert set(meta["last_fetch_keys"]) == {r.trade_key for r in result.records}
        assert meta["gap_count"] == 0

    def test_same_batch_twice_is_idempotent(self, archive, store, raw_sale):
        """
        Test 2/7: Replaying a batch changes nothing but the fetch time.
        """
        batch = _hourly(raw_sale, ["a", "b", "c"])
        archive.persist_batch("std", batch)
        first = _stored(store)
        archive.persist_batch("std", batch)
        second = _stored(store)

        assert second["records"] == first["records"]
        assert second["metadata"]["gap_count"] == 0

    def test_disjoint_batches_merge_in_any_order(self, clock, raw_sale):
        """
        Test 3/7: Disjoint batches give the same archive regardless of order.
        """
        older = _hourly(raw_sale, ["a", "b"], start_hour=1)
        newer = _hourly(raw_sale, ["c", "d"], start_hour=3)

        forward = TradeArchive(InMemoryPartitionStore(), clock=clock)
        forward.persist_batch("std", older)
        r1 = forward.persist_batch("std", newer)

        backward = TradeArchive(InMemoryPartitionStore(), clock=clock)
        backward.persist_batch("std", newer)
        r2 = backward.persist_batch("std", older)

        assert [r.trade_key for r in r1.records] == [r.trade_key for r in r2.records]
        assert [r.item_id for r in r1.records] == ["d", "c", "b", "a"]

    def test_history_outlives_the_api_window(self, archive, raw_sale):
        """
        Test 4/7: Records that fell off the feed stay archived.
        """
        archive.persist_batch("std", _hourly(raw_sale, ["a", "b", "c"]))
        result = archive.persist_batch("std", _hourly(raw_sale, ["c", "d"], start_hour=2))

        assert {r.item_id for r in result.records} == {"a", "b", "c", "d"}
        assert not result.gap_info.detected

    def test_current_batch_wins_on_key_collision(self, archive, raw_sale):
        """
        Test 5/7: Same trade key from a newer fetch replaces the stored copy.
        """
        archive.persist_batch("std", [raw_sale(item_id="a", note="old note")])
        result = archive.persist_batch("std", [raw_sale(item_id="a", note="new note")])

        assert len(result.records) == 1
        assert result.records[0].note == "new note"

    def test_gap_is_counted_and_recorded(self, archive, store, raw_sale, clock):
        """
        Test 6/7: Strictly newer disjoint batch bumps gap bookkeeping.
        """
        first = archive.persist_batch("std", _hourly(raw_sale, ["a", "b"]))
        clock.advance(60_000)
        second = archive.persist_batch("std", _hourly(raw_sale, ["x", "y"], start_hour=5))

        assert second.gap_info.detected
        meta = _stored(store)["metadata"]
        assert meta["gap_count"] == 1
        assert meta["last_gap_at_ms"] == clock.now_ms()
        assert meta["last_gap_from_ms"] == first.records[0].time_ms
        oldest_in_batch = next(r for r in second.records if r.item_id == "x")
        assert meta["last_gap_to_ms"] == oldest_in_batch.time_ms == second.gap_info.to_ms

        clock.advance(60_000)
        archive.persist_batch("std", _hourly(raw_sale, ["y", "z"], start_hour=6))
        carried = _stored(store)["metadata"]
        assert carried["gap_count"] == 1
        assert carried["last_gap_from_ms"] == meta["last_gap_from_ms"]

    def test_empty_batch_keeps_records(self, archive, store, raw_sale):
        """
        Test 7/7: An empty fetch keeps the archive and clears fetch bounds.
        """
        archive.persist_batch("std", _hourly(raw_sale, ["a"]))
        result = archive.persist_batch("std", [])

        assert [r.item_id for r in result.records] == ["a"]
        meta = _stored(store)["metadata"]
        assert meta["last_fetch_newest_ms"] is None
        assert meta["last_fetch_keys"] == []


# ============================================================================
# CORRUPTION
# ============================================================================


class TestCorruptionTolerance:
    @pytest.mark.parametrize(
        "payload",
        [b"{not json", b"[]", b'"text"', b"\xff\xfe", b'{"records": "nope", "metadata": 3}'],
    )
    def test_corrupt_partition_loads_empty(self, store, clock, raw_sale, payload):
        """
        Test 1/5: Unparseable or mis-shaped slots are treated as empty.
        """
        store.write(KEY, payload)
        archive = TradeArchive(store, clock=clock)

        snapshot = archive.load("std")
        assert snapshot.records == []
        assert snapshot.metadata.last_fetch_newest_ms is None

        result = archive.persist_batch("std", _hourly(raw_sale, ["a"]))
        assert [r.item_id for r in result.records] == ["a"]
        assert [row["item_id"] for row in _stored(store)["records"]] == ["a"]

    def test_unreadable_partition_loads_empty(self, clock, raw_sale):
        """
        Test 2/5: Read errors degrade to an empty partition.
        """
        archive = TradeArchive(UnreadableStore(), clock=clock)
        assert archive.load("std").records == []
        assert archive.persist_batch("std", _hourly(raw_sale, ["a"])).written_records == 1

    def test_bad_rows_are_sanitized(self, archive, store, raw_sale):
        """
        Test 3/5: Individually broken rows are dropped, the rest survive.
        """
        archive.persist_batch("std", _hourly(raw_sale, ["a", "b"]))
        doc = _stored(store)
        good = doc["records"][0]
        doc["records"].extend(
            [
                {**good, "trade_key": None},
                {**good, "item_id": ""},
                {**good, "trade_key": "other", "time_ms": "soon"},
                {**good, "trade_key": "other2", "price_amount": None},
                {**good, "trade_key": "other3", "price_currency": ""},
                {**good, "trade_key": "other4", "time_ms": 10**400},
                {**good, "trade_key": "other5", "time_ms": 10**17},
                {**good, "trade_key": "other6", "price_amount": 10**400},
                "garbage",
                dict(good),
            ]
        )
        store.write(KEY, json.dumps(doc).encode())

        snapshot = archive.load("std")
        assert [r.item_id for r in snapshot.records] == ["b", "a"]

    def test_oversized_metadata_numbers_load_as_defaults(self, archive, store, raw_sale):
        """
        Test 4/5: Metadata numbers beyond float range fall back to defaults.
        """
        archive.persist_batch("std", _hourly(raw_sale, ["a"]))
        doc = _stored(store)
        doc["metadata"]["last_fetch_newest_ms"] = 10**400
        doc["metadata"]["gap_count"] = 10**400
        store.write(KEY, json.dumps(doc).encode())

        snapshot = archive.load("std")
        assert [r.item_id for r in snapshot.records] == ["a"]
        assert snapshot.metadata.last_fetch_newest_ms is None
        assert snapshot.metadata.gap_count == 0

    def test_oversized_amount_does_not_abort_batch(self, archive, store, raw_sale):
        """
        Test 5/5: One entry with an absurd amount is skipped, the batch lands.
        """
        result = archive.persist_batch(
            "std", [raw_sale(item_id="ok"), raw_sale(item_id="bad", amount=10**400)]
        )

        assert [r.item_id for r in result.records] == ["ok"]
        assert [row["item_id"] for row in _stored(store)["records"]] == ["ok"]


def test_sanitize_records_sorts_newest_first(raw_sale):
    batch = normalize_and_key_batch("std", _hourly(raw_sale, ["a", "b", "c"]))
    rows = [r.model_dump(mode="json") for r in reversed(batch.records)]
    assert [r.item_id for r in sanitize_records(rows)] == ["c", "b", "a"]
    assert sanitize_records(None) == []


# ============================================================================
# TRUNCATION
# ============================================================================


class TestTruncation:
    def test_oldest_records_dropped_until_fit(self, clock, raw_sale):
        """
        Test 1/3: Each retry keeps floor(90%) of the newest records.
        """
        store = RecordLimitStore(limit=5)
        archive = TradeArchive(store, clock=clock)
        ids = [f"i{n}" for n in range(10)]

        result = archive.persist_batch("std", _hourly(raw_sale, ids))

        assert store.attempts == [10, 9, 8, 7, 6, 5]
        assert result.written_records == 5
        assert len(result.records) == 10
        stored_ids = [row["item_id"] for row in _stored(store)["records"]]
        assert stored_ids == ["i9", "i8", "i7", "i6", "i5"]

    def test_metadata_survives_truncation(self, clock, raw_sale):
        """
        Test 2/3: Truncation only trims records, metadata is written whole.
        """
        store = RecordLimitStore(limit=1)
        archive = TradeArchive(store, clock=clock)
        result = archive.persist_batch("std", _hourly(raw_sale, ["a", "b", "c"]))

        meta = _stored(store)["metadata"]
        assert set(meta["last_fetch_keys"]) == {r.trade_key for r in result.records}

    def test_gives_up_silently_when_nothing_fits(self, clock, raw_sale):
        """
        Test 3/3: Even an empty payload rejected ends without raising.
        """
        store = AlwaysFullStore()
        archive = TradeArchive(store, clock=clock)

        result = archive.persist_batch("std", _hourly(raw_sale, ["a", "b"]))

        assert result.written_records is None
        assert [r.item_id for r in result.records] == ["b", "a"]
        assert store.read(KEY) is None


def test_invalid_shrink_ratio_rejected(store):
    with pytest.raises(ValueError):
        TradeArchive(store, shrink_ratio=1.0)
