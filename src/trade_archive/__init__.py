"""
Trade history archive and income analytics.
Modular architecture with clean separation of concerns.

Modules:
- transformation: Raw feed normalization and trade-key dedup
- infrastructure: Checkpoints (gap detection), partition storage, logging, clock
- storage: Canonical schemas and the merge-on-write archive
- analytics: Income aggregation and currency conversion
- ingestion: Trade history API client
- application: Viewer state and refresh orchestration
"""
