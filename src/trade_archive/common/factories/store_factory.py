"""
Store Factory
=============

Creates partition stores from the archive configuration and wires the
archive service on top of them.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import tzinfo
from trade_archive.config.state import ArchiveConfig
from trade_archive.infrastructure.checkpoint import (
    InMemoryPartitionStore,
    LocalPartitionStore,
    PartitionStore,
    S3PartitionStore,
)
from trade_archive.infrastructure.ports.system import IClock
from trade_archive.storage.archive import TradeArchive

StoreBuilder = Callable[[ArchiveConfig], PartitionStore]


class StoreFactory:
    """Registry-driven factory for partition stores, keyed by backend name."""

    def __init__(self) -> None:
        self._registry: dict[str, StoreBuilder] = {}

    def register(self, backend: str, builder: StoreBuilder) -> None:
        self._registry[backend] = builder

    def create(self, config: ArchiveConfig) -> PartitionStore:
        if config.backend not in self._registry:
            available = ", ".join(self.available_backends())
            raise ValueError(
                f"No partition store registered for backend {config.backend} (available: {available})"
            )
        return self._registry[config.backend](config)

    def available_backends(self) -> list[str]:
        return list(self._registry.keys())


def _local(config: ArchiveConfig) -> PartitionStore:
    return LocalPartitionStore(config.local_root, max_bytes=config.max_bytes)


def _s3(config: ArchiveConfig) -> PartitionStore:
    return S3PartitionStore(
        bucket=config.bucket,
        endpoint=config.endpoint,
        region=config.region,
        max_bytes=config.max_bytes,
    )


def _memory(config: ArchiveConfig) -> PartitionStore:
    return InMemoryPartitionStore(max_bytes=config.max_bytes)


default_store_factory = StoreFactory()
default_store_factory.register("local", _local)
default_store_factory.register("s3", _s3)
default_store_factory.register("memory", _memory)


def build_partition_store(config: ArchiveConfig) -> PartitionStore:
    return default_store_factory.create(config)


def build_archive(
    config: ArchiveConfig,
    store: PartitionStore | None = None,
    clock: IClock | None = None,
    tz: tzinfo | None = None,
) -> TradeArchive:
    """Build a TradeArchive using the configured backend unless ``store`` is given."""
    return TradeArchive(
        store or build_partition_store(config),
        clock=clock,
        shrink_ratio=config.shrink_ratio,
        root=config.root,
        tz=tz,
    )
