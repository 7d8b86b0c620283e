"""Per-partition archive metadata.

Watermarks describe the *last fetch* only, not the whole archive; the gap
detector compares the next fetch against them.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from trade_archive.common.utils.date_utils import is_valid_unix_ms
from trade_archive.common.utils.number_format import is_finite_number


def _optional_ms(value: Any) -> int | None:
    return int(value) if is_valid_unix_ms(value) else None


class PartitionMetadata(BaseModel):
    """Normalized partition metadata representation."""

    last_fetch_at_ms: int | None = Field(default=None)
    last_fetch_newest_ms: int | None = Field(default=None)
    last_fetch_oldest_ms: int | None = Field(default=None)
    last_fetch_keys: list[str] = Field(default_factory=list)

    gap_count: int = Field(default=0, ge=0)
    last_gap_at_ms: int | None = Field(default=None)
    last_gap_from_ms: int | None = Field(default=None)
    last_gap_to_ms: int | None = Field(default=None)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()

    @classmethod
    def from_dict(cls, raw: Any) -> PartitionMetadata:
        """Build metadata from stored JSON, replacing malformed values with defaults."""
        if not isinstance(raw, dict):
            return cls()
        keys = raw.get("last_fetch_keys")
        gap_count = raw.get("gap_count")
        return cls(
            last_fetch_at_ms=_optional_ms(raw.get("last_fetch_at_ms")),
            last_fetch_newest_ms=_optional_ms(raw.get("last_fetch_newest_ms")),
            last_fetch_oldest_ms=_optional_ms(raw.get("last_fetch_oldest_ms")),
            last_fetch_keys=(
                [k for k in keys if isinstance(k, str)] if isinstance(keys, list) else []
            ),
            gap_count=(
                int(gap_count) if is_finite_number(gap_count) and gap_count > 0 else 0
            ),
            last_gap_at_ms=_optional_ms(raw.get("last_gap_at_ms")),
            last_gap_from_ms=_optional_ms(raw.get("last_gap_from_ms")),
            last_gap_to_ms=_optional_ms(raw.get("last_gap_to_ms")),
        )
