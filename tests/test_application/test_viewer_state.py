"""
Tests for viewer settings, the seen-item set and their persistence.
"""

import json

import pytest

from trade_archive.application import (
    SEEN_ITEMS_LIMIT,
    SeenItems,
    ViewerSettings,
    ViewerStateStore,
)
from trade_archive.infrastructure.checkpoint import InMemoryPartitionStore, PartitionPathBuilder


class TestViewerSettings:
    def test_defaults(self):
        settings = ViewerSettings()
        assert settings.only_new is False
        assert settings.hide_original is False
        assert settings.preferred_currency == "chaos"
        assert settings.divine_chaos_price is None
        assert settings.exchange_rate() is None

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("150", 150.0),
            (" 2.5 ", 2.5),
            (0, None),
            (-1, None),
            ("abc", None),
            (None, None),
            (10**400, None),
        ],
    )
    def test_divine_chaos_price_parsing(self, raw, expected):
        assert ViewerSettings(divine_chaos_price=raw).divine_chaos_price == expected

    def test_from_dict_is_tolerant(self):
        settings = ViewerSettings.from_dict(
            {"only_new": 1, "preferred_currency": 42, "divine_chaos_price": "150"}
        )
        assert settings.only_new is True
        assert settings.preferred_currency == "chaos"
        assert settings.exchange_rate().rate == 150
        assert ViewerSettings.from_dict("garbage") == ViewerSettings()

    def test_preferred_currency_normalized(self):
        assert ViewerSettings(preferred_currency=" Divine ").preferred_currency == "divine"
        assert ViewerSettings(preferred_currency="").preferred_currency == "chaos"


class TestSeenItems:
    def test_mark_and_is_new(self):
        seen = SeenItems()
        assert seen.is_new("a")
        assert seen.mark("a") is True
        assert seen.mark("a") is False
        assert not seen.is_new("a")
        assert seen.mark("") is False
        assert seen.mark(None) is False

    def test_mark_all_counts_additions(self):
        seen = SeenItems(["a"])
        assert seen.mark_all(["a", "b", "c", 3]) == 2
        assert len(seen) == 3

    def test_persisted_list_keeps_newest(self):
        seen = SeenItems(f"id{i}" for i in range(SEEN_ITEMS_LIMIT + 5))
        ids = seen.to_list()
        assert len(ids) == SEEN_ITEMS_LIMIT
        assert ids[0] == "id5"
        assert ids[-1] == f"id{SEEN_ITEMS_LIMIT + 4}"


class TestViewerStateStore:
    def test_roundtrip(self):
        store = ViewerStateStore(InMemoryPartitionStore())
        store.save_settings(ViewerSettings(only_new=True, divine_chaos_price=120))
        seen = SeenItems(["a", "b"])
        store.save_seen(seen)

        assert store.load_settings() == ViewerSettings(only_new=True, divine_chaos_price=120)
        assert store.load_seen().to_list() == ["a", "b"]

    def test_corrupt_state_loads_defaults(self):
        backend = InMemoryPartitionStore()
        backend.write(PartitionPathBuilder.viewer_settings(), b"{oops")
        backend.write(PartitionPathBuilder.seen_items(), json.dumps({"a": 1}).encode())
        store = ViewerStateStore(backend)

        assert store.load_settings() == ViewerSettings()
        assert len(store.load_seen()) == 0

    def test_missing_state_loads_defaults(self):
        store = ViewerStateStore(InMemoryPartitionStore())
        assert store.load_settings() == ViewerSettings()
        assert len(store.load_seen()) == 0
