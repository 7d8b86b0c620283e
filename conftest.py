"""
Root conftest: puts src/ on the path and provides raw history entry builders
shared by every test layer.
"""

import base64
import logging
import sys
from pathlib import Path

import pytest

# Ensure src on path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from trade_archive.infrastructure.impls.system import FixedClock  # noqa: E402

logger = logging.getLogger(__name__)

# 2024-03-01T12:00:00Z
BASE_MS = 1_709_294_400_000


def encode_item_text(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def build_raw_sale(
    item_id: str = "item-1",
    time: str = "2024-03-01T12:00:00Z",
    amount=5,
    currency="chaos",
    type_line: str = "Hubris Circlet",
    base_type: str = "Hubris Circlet",
    frame_type=2,
    **item_fields,
) -> dict:
    """One ``result[]`` element as the trade history API returns it."""
    item = {
        "typeLine": type_line,
        "baseType": base_type,
        "frameType": frame_type,
        "ilvl": 84,
        "explicitMods": ["+1 to Level of Socketed Gems"],
    }
    item.update(item_fields)
    raw = {"item_id": item_id, "time": time, "item": item}
    if amount is not None or currency is not None:
        raw["price"] = {"amount": amount, "currency": currency}
    return raw


@pytest.fixture
def raw_sale():
    """Factory fixture for raw history entries."""
    return build_raw_sale


@pytest.fixture
def clock():
    return FixedClock(BASE_MS + 3_600_000)
