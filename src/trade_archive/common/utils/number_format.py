"""Display formatting for currency amounts."""

import math


def is_finite_number(value: object) -> bool:
    """True for real ints/floats that are finite. Booleans do not count.

    Ints too large for a float are not finite numbers here.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def format_amount(amount: object) -> str:
    """
    Render an amount for display.

    Integral values print without decimals (``100``), everything else is
    rounded to two decimals with trailing zeros removed (``1.5``, ``0.67``).
    Non-finite input renders as an empty string.
    """
    if not is_finite_number(amount):
        return ""
    value = float(amount)
    if value.is_integer():
        return str(int(value))
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text
