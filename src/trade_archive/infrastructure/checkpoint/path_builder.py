"""Builds consistent storage slot keys for archive partitions and viewer state.

Centralizes key conventions so the archive, the viewer state store and any
maintenance scripts do not drift.
"""

from __future__ import annotations

from urllib.parse import quote


class PartitionPathBuilder:
    """Builds storage keys; partition names are trimmed and lower-cased."""

    ARCHIVE_ROOT = "trade_archive/v1"
    STATE_ROOT = "viewer_state/v1"

    @staticmethod
    def encode_partition(partition: object) -> str:
        return quote(str(partition or "").strip().lower(), safe="")

    @classmethod
    def archive_partition(cls, partition: object, root: str | None = None) -> str:
        """Slot holding one partition's records and metadata."""
        return f"{root or cls.ARCHIVE_ROOT}/{cls.encode_partition(partition)}.json"

    @classmethod
    def viewer_settings(cls) -> str:
        return f"{cls.STATE_ROOT}/settings.json"

    @classmethod
    def seen_items(cls) -> str:
        return f"{cls.STATE_ROOT}/seen_item_ids.json"
