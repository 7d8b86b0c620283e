"""Normalizer for raw trade history entries.

Provides:
- SaleRecordNormalizer: Converts one API history entry → SaleRecord
- normalize(): Convenience wrapper returning None for rejected entries
- Field helpers (rarity, category, currency, item text) shared with the view layer

Raw entry shape (trade API ``result[]`` element):

    {
        "item_id": "...",
        "time": "2024-03-01T12:00:00Z",
        "item": {
            "typeLine": "...", "baseType": "...", "frameType": 2, "ilvl": 84,
            "note": "...", "icon": "...",
            "implicitMods": [...], "explicitMods": [...], "utilityMods": [...],
            "fracturedMods": [...], "craftedMods": [...], "enchantMods": [...],
            "category": {"armour": ["helmet"]},
            "extended": {"category": "armour", "text": "<base64 item text>"}
        },
        "price": {"amount": 5, "currency": "chaos"}
    }
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import Any

from trade_archive.common.utils.date_utils import parse_iso_to_ms
from trade_archive.common.utils.number_format import is_finite_number
from trade_archive.infrastructure.observability import get_processing_logger
from trade_archive.shared.models.enums import Rarity
from trade_archive.storage.schemas import UNKNOWN_NAME, SaleRecord

log = get_processing_logger("normalizer")

MOD_FIELDS = (
    "implicitMods",
    "explicitMods",
    "utilityMods",
    "fracturedMods",
    "craftedMods",
    "enchantMods",
)

_ITEM_CLASS_RE = re.compile(r"^Item Class:\s*(.+?)\s*$", re.MULTILINE)
_TOKEN_SEPARATORS_RE = re.compile(r"[_-]+")


class NormalizationError(Exception):
    """Raised when a raw history entry cannot become a SaleRecord."""

    pass


# ============================================================================
# Field helpers
# ============================================================================


def rarity_label(frame_type: object) -> str:
    rarity = Rarity.from_frame_type(frame_type)
    return rarity.value if rarity is not None else ""


def normalize_currency(currency: object) -> str:
    if currency is None:
        return ""
    return str(currency).strip().lower()


def humanize_category_token(token: object) -> str:
    """``"one_hand-sword"`` → ``"One Hand Sword"``."""
    words = _TOKEN_SEPARATORS_RE.sub(" ", str(token or "")).split()
    return " ".join(w[:1].upper() + w[1:] for w in words)


def decode_item_text(b64: object) -> str | None:
    """Decode the base64 in-game copy text; None when it does not decode."""
    if not isinstance(b64, str):
        return None
    try:
        decoded = base64.b64decode(b64, validate=False).decode("utf-8")
    except (binascii.Error, ValueError):
        return None
    return decoded.replace("\r\n", "\n")


def item_category_label(item: Any, item_text: str | None) -> str:
    """
    Resolve the item class label.

    Order: ``extended.category`` string, then the first key of the
    ``category`` mapping (with its first subcategory), then the
    ``Item Class:`` line of the decoded item text.
    """
    if isinstance(item, dict):
        extended = item.get("extended")
        direct = extended.get("category") if isinstance(extended, dict) else None
        if isinstance(direct, str) and direct.strip():
            return humanize_category_token(direct)

        category = item.get("category")
        if isinstance(category, dict):
            for key, value in category.items():
                if not key:
                    continue
                label = humanize_category_token(key)
                if isinstance(value, list) and value:
                    sub = value[0] if isinstance(value[0], str) else ""
                    if sub:
                        return f"{label}: {humanize_category_token(sub)}"
                return label

    if item_text:
        match = _ITEM_CLASS_RE.search(item_text)
        if match:
            return match.group(1).strip()

    return ""


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [m for m in value if isinstance(m, str) and m.strip()]


def _trimmed(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


# ============================================================================
# Normalizer
# ============================================================================


class SaleRecordNormalizer:
    """Normalizer for trade history entries.

    Entries without an item id or a parseable timestamp are rejected. Price
    fields that fail validation are dropped together, which leaves the record
    unsellable rather than rejected.
    """

    def normalize_single(self, raw: Any) -> SaleRecord:
        """Normalize single history entry from API.

        Args:
            raw: Raw ``result[]`` element

        Returns:
            SaleRecord with validated fields

        Raises:
            NormalizationError: If the entry has no id or no usable timestamp
        """
        if not isinstance(raw, dict):
            raise NormalizationError(f"expected a mapping, got {type(raw).__name__}")

        item_id = raw.get("item_id")
        time_iso = raw.get("time")
        if not isinstance(item_id, str) or not item_id:
            raise NormalizationError("missing item_id")
        if not isinstance(time_iso, str) or not time_iso:
            raise NormalizationError(f"missing time for item {item_id}")
        time_ms = parse_iso_to_ms(time_iso)
        if time_ms is None:
            raise NormalizationError(f"unparseable time {time_iso!r} for item {item_id}")

        item = raw.get("item")
        if not isinstance(item, dict):
            item = {}

        type_line = _trimmed(item.get("typeLine"))
        base_type = _trimmed(item.get("baseType"))
        extended = item.get("extended")
        text_b64 = extended.get("text") if isinstance(extended, dict) else None
        item_text = decode_item_text(text_b64)

        amount, currency = self._extract_price(raw.get("price"))

        ilvl = item.get("ilvl")
        note = item.get("note")
        icon = item.get("icon")
        fractured = _string_list(item.get("fracturedMods"))
        mods: list[str] = []
        for field in MOD_FIELDS:
            mods.extend(fractured if field == "fracturedMods" else _string_list(item.get(field)))

        return SaleRecord(
            item_id=item_id,
            time_iso=time_iso,
            time_ms=time_ms,
            name=type_line or base_type or UNKNOWN_NAME,
            base_type=base_type,
            rarity=rarity_label(item.get("frameType")),
            category=item_category_label(item, item_text),
            ilvl=ilvl if isinstance(ilvl, int) and not isinstance(ilvl, bool) else None,
            price_amount=amount,
            price_currency=currency,
            note=note if isinstance(note, str) else "",
            mods=tuple(mods),
            fractured_mods=tuple(fractured),
            item_text=item_text,
            icon=icon if isinstance(icon, str) else None,
        )

    def normalize_batch(self, raw_entries: list[Any]) -> list[SaleRecord]:
        """Normalize a batch, dropping entries that fail.

        Args:
            raw_entries: Raw ``result[]`` list

        Returns:
            Normalized records in input order
        """
        records = []
        dropped = 0

        for i, raw in enumerate(raw_entries):
            try:
                records.append(self.normalize_single(raw))
            except NormalizationError as e:
                dropped += 1
                log.debug("entry_dropped", index=i, reason=str(e))

        if dropped:
            log.info("batch_normalized", accepted=len(records), dropped=dropped)
        return records

    @staticmethod
    def _extract_price(price: Any) -> tuple[float | None, str | None]:
        """Extract (amount, currency); both None unless both are valid."""
        if not isinstance(price, dict):
            return None, None
        amount = price.get("amount")
        currency = price.get("currency")
        if not is_finite_number(amount) or not isinstance(currency, str):
            return None, None
        currency = normalize_currency(currency)
        if not currency:
            return None, None
        return float(amount), currency


_default_normalizer = SaleRecordNormalizer()


def normalize(raw: Any) -> SaleRecord | None:
    """Normalize one history entry, or return None when it is invalid."""
    try:
        return _default_normalizer.normalize_single(raw)
    except NormalizationError:
        return None
