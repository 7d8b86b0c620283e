"""Storage schemas for archived trade data.

This module exports data models for:
- Canonical sale records (one completed sale each)
- Partition metadata (last-fetch watermarks and gap bookkeeping)

All models use Pydantic for validation.
"""

from .partition import PartitionMetadata
from .sale_record import UNKNOWN_NAME, SaleRecord

__all__ = [
    "SaleRecord",
    "UNKNOWN_NAME",
    "PartitionMetadata",
]
