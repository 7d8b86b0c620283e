from .gap_detector import GapInfo, detect_gap
from .path_builder import PartitionPathBuilder
from .store import (
    InMemoryPartitionStore,
    LocalPartitionStore,
    PartitionReadError,
    PartitionStore,
    S3PartitionStore,
    StorageCapacityError,
    StorageError,
)

__all__ = [
    "GapInfo",
    "detect_gap",
    "PartitionPathBuilder",
    "PartitionStore",
    "InMemoryPartitionStore",
    "LocalPartitionStore",
    "S3PartitionStore",
    "StorageError",
    "PartitionReadError",
    "StorageCapacityError",
]
