"""Persistence of viewer settings and seen ids through a PartitionStore."""

from __future__ import annotations

import json
from typing import Any

from trade_archive.application.settings import SeenItems, ViewerSettings
from trade_archive.infrastructure.checkpoint import (
    PartitionPathBuilder,
    PartitionReadError,
    PartitionStore,
)
from trade_archive.infrastructure.observability import get_storage_logger

log = get_storage_logger("viewer-state")


class ViewerStateStore:
    """Loads and saves viewer state; unreadable state loads as defaults."""

    def __init__(self, store: PartitionStore):
        self.store = store

    def _read_json(self, key: str) -> Any:
        try:
            raw = self.store.read(key)
        except PartitionReadError as e:
            log.warning("viewer_state_unreadable", key=key, error=str(e))
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            log.warning("viewer_state_corrupt", key=key, error=str(e))
            return None

    def _write_json(self, key: str, value: Any) -> None:
        self.store.write(key, json.dumps(value).encode("utf-8"))

    def load_settings(self) -> ViewerSettings:
        return ViewerSettings.from_dict(self._read_json(PartitionPathBuilder.viewer_settings()))

    def save_settings(self, settings: ViewerSettings) -> None:
        self._write_json(PartitionPathBuilder.viewer_settings(), settings.to_dict())

    def load_seen(self) -> SeenItems:
        raw = self._read_json(PartitionPathBuilder.seen_items())
        if not isinstance(raw, list):
            return SeenItems()
        return SeenItems(x for x in raw if isinstance(x, str))

    def save_seen(self, seen: SeenItems) -> None:
        self._write_json(PartitionPathBuilder.seen_items(), seen.to_list())
