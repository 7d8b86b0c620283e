"""
Shared enumerations for the trade archive.

Frame types come straight from the trade API item payload (``frameType``).
"""

import enum


# ============================================================================
# ITEM CLASSIFICATION
# ============================================================================
class Rarity(str, enum.Enum):
    """Display label for an item's frame type."""

    NORMAL = "Normal"
    MAGIC = "Magic"
    RARE = "Rare"
    UNIQUE = "Unique"
    GEM = "Gem"
    CURRENCY = "Currency"
    DIVINATION = "Divination"
    QUEST = "Quest"

    @classmethod
    def from_frame_type(cls, frame_type: object) -> "Rarity | None":
        """Resolve a numeric frame type; anything outside 0..7 gives None.

        Integral floats (``2.0``) resolve like their int value.
        """
        # bool is an int subclass; True must not resolve to Magic
        if isinstance(frame_type, bool):
            return None
        if isinstance(frame_type, float) and frame_type.is_integer():
            frame_type = int(frame_type)
        if not isinstance(frame_type, int):
            return None
        return _FRAME_TYPES.get(frame_type)


_FRAME_TYPES: dict[int, Rarity] = {
    0: Rarity.NORMAL,
    1: Rarity.MAGIC,
    2: Rarity.RARE,
    3: Rarity.UNIQUE,
    4: Rarity.GEM,
    5: Rarity.CURRENCY,
    6: Rarity.DIVINATION,
    7: Rarity.QUEST,
}
