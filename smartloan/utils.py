"""Utility functions for the loan simulator.

This module provides helpers for parsing user input (amounts typed with
currency symbols, thousands separators or shorthand suffixes, and
percentages) into ``Decimal`` values the engine can use.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, getcontext

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

_SUFFIXES = {
    "k": Decimal("1000"),
    "m": Decimal("1000000"),
    "jt": Decimal("1000000"),
    "b": Decimal("1000000000"),
}


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and handles both integer and float-like
    strings. It raises ``ValueError`` if conversion fails.
    """
    try:
        cleaned = str(value).replace(",", "").strip()
        return Decimal(cleaned)
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc


def parse_amount(value: str) -> Decimal:
    """Parse a money amount typed by a user.

    Accepts plain numbers ("500000000"), values with a currency prefix and
    separators ("Rp 500.000.000", "Rp 750.000", "500,000,000") and shorthand
    suffixes (``k`` thousand, ``m``/``jt`` million, ``b`` billion, e.g.
    "500m"). A lone dot stays a decimal point in shorthand such as "1.5k"
    and in plain values like "2.5".
    """
    text = str(value).strip().lower().replace(" ", "").replace("_", "")
    rupiah = text.startswith("rp")
    if rupiah:
        text = text[2:]
    factor = None
    for suffix, multiplier in _SUFFIXES.items():
        if text.endswith(suffix):
            factor = multiplier
            text = text[: -len(suffix)]
            break
    # id-ID thousands separators: several dots, or one dot on a rupiah
    # value or ahead of exactly three digits
    if text.count(".") > 1:
        text = text.replace(".", "")
    elif factor is None and "." in text and (rupiah or len(text.rsplit(".", 1)[1]) == 3):
        text = text.replace(".", "")
    try:
        amount = decimal_from_str(text) * (factor or Decimal(1))
    except ValueError:
        raise ValueError(f"Invalid amount: {value}") from None
    return amount


def parse_percent(value: str) -> Decimal:
    """Parse a percentage string such as "20" or "6.5%" into percent units."""
    text = str(value).strip()
    if text.endswith("%"):
        text = text[:-1]
    try:
        return decimal_from_str(text)
    except ValueError:
        raise ValueError(f"Invalid percentage: {value}") from None
