"""Text rendering for per-currency totals."""

from collections.abc import Mapping

from trade_archive.common.utils.number_format import format_amount, is_finite_number


def format_currency_map(totals: Mapping[str, float]) -> str:
    """``{"chaos": 100, "divine": 1}`` → ``"100 chaos + 1 divine"``.

    Zero and non-finite entries are skipped; larger amounts come first.
    """
    entries = [(c, v) for c, v in totals.items() if is_finite_number(v) and v != 0]
    entries.sort(key=lambda e: e[1], reverse=True)
    return " + ".join(f"{format_amount(v)} {c}" for c, v in entries)
