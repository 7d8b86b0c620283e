"""
Observability for the trade archive: structured logging shared by every layer,
so dropped entries, corrupted partitions, truncated writes and detected gaps
can be traced per partition.
"""

from .logging import (
    get_analytics_logger,
    # Layer-specific logger factories
    get_infrastructure_logger,
    get_ingestion_logger,
    # Base logger factory
    get_logger,
    get_processing_logger,
    get_storage_logger,
    # Setup
    setup_logging,
)

__all__ = [
    # Setup
    "setup_logging",
    # Base
    "get_logger",
    # Layer-specific
    "get_infrastructure_logger",
    "get_ingestion_logger",
    "get_processing_logger",
    "get_storage_logger",
    "get_analytics_logger",
]
