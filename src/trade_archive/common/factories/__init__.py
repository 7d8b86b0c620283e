"""
Factories Module - Store and Archive Creation
=============================================

Provides a registry-driven factory for partition stores based on the
configured archive backend.
"""

from trade_archive.common.factories.store_factory import (
    StoreFactory,
    build_archive,
    build_partition_store,
    default_store_factory,
)

__all__ = [
    "StoreFactory",
    "build_archive",
    "build_partition_store",
    "default_store_factory",
]
