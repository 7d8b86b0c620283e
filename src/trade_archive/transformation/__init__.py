"""Transformation layer: raw feed entries → keyed canonical sale records."""

from .dedup import (
    KeyedBatch,
    make_trade_key,
    normalize_and_key_batch,
    normalize_partition_name,
)
from .normalizers import (
    NormalizationError,
    SaleRecordNormalizer,
    decode_item_text,
    humanize_category_token,
    item_category_label,
    normalize,
    normalize_currency,
    rarity_label,
)

__all__ = [
    "NormalizationError",
    "SaleRecordNormalizer",
    "normalize",
    "rarity_label",
    "item_category_label",
    "humanize_category_token",
    "normalize_currency",
    "decode_item_text",
    "KeyedBatch",
    "make_trade_key",
    "normalize_and_key_batch",
    "normalize_partition_name",
]
