"""Number formatting for reports (en-IN conventions).

Indian digit grouping keeps the last three digits together and groups the
rest in pairs: 1234567 -> "12,34,567". Compact forms use K (thousand),
L (lakh, 1e5) and Cr (crore, 1e7).

Examples:
    >>> standard_format(1234567.4)
    '12,34,567'
    >>> indian_compact_format(25_000_000)
    '2.5 Cr'
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal

CRORE = 10_000_000
LAKH = 100_000
THOUSAND = 1_000


def _group_indian(digits: str) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def _round_half_up(value: float, decimals: int) -> Decimal:
    quantum = Decimal(1).scaleb(-decimals)
    return Decimal(str(float(value))).quantize(quantum, rounding=ROUND_HALF_UP)


def _format_grouped(value: float, min_decimals: int, max_decimals: int) -> str:
    rounded = _round_half_up(value, max_decimals)
    text = f"{abs(rounded):.{max_decimals}f}"
    int_part, _, frac = text.partition(".")
    while len(frac) > min_decimals and frac.endswith("0"):
        frac = frac[:-1]

    body = _group_indian(int_part) + (f".{frac}" if frac else "")
    if rounded < 0 and body.strip("0.,"):
        return "-" + body
    return body


def _is_missing(value: float | None) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def standard_format(value: float) -> str:
    """Round to an integer and apply Indian grouping."""
    return _format_grouped(value, 0, 0)


def indian_standard_format(value: float | None) -> str:
    """Two decimals with Indian grouping. None/NaN gives an empty string."""
    if _is_missing(value):
        return ""
    return _format_grouped(value, 2, 2)


def indian_compact_format(value: float | None) -> str:
    """Crore/lakh suffixed form with up to two decimals.

    Values below one lakh are only grouped. None/NaN gives an empty string.

    Examples:
        >>> indian_compact_format(150_000)
        '1.5 L'
        >>> indian_compact_format(98765.432)
        '98,765.43'

    """
    if _is_missing(value):
        return ""

    magnitude = abs(value)
    if magnitude >= CRORE:
        return _format_grouped(value / CRORE, 0, 2) + " Cr"
    if magnitude >= LAKH:
        return _format_grouped(value / LAKH, 0, 2) + " L"
    return _format_grouped(value, 0, 2)


def compact_format(value: float) -> str:
    """Short form for chart labels: 1.2K, 12L, 3.4Cr.

    Scaled values below 10 keep one decimal, larger ones are rounded.
    """
    magnitude = abs(value)
    for unit, suffix in ((CRORE, "Cr"), (LAKH, "L"), (THOUSAND, "K")):
        if magnitude >= unit:
            scaled = value / unit
            break
    else:
        scaled, suffix = value, ""

    decimals = 1 if abs(scaled) < 10 else 0
    return _format_grouped(scaled, 0, decimals) + suffix
