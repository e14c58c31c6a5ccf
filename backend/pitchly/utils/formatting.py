"""
formatting.py — Display formatting for currency, magnitudes, percentages and ratios.

Used by the commentary templates, the CSV export and the AI prompts. Every
helper returns "N/A" for anything that is not a finite number.
"""

import math
from typing import Any

NOT_AVAILABLE = "N/A"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def currency(value: Any, precision: int = 2) -> str:
    """-1234.5 → "-$1,234.50"."""
    if not _is_number(value):
        return NOT_AVAILABLE
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.{precision}f}"


def large_number(value: Any, is_currency: bool = True) -> str:
    """1.5e9 → "$1.50B"; values under a million are printed in full."""
    if not _is_number(value):
        return NOT_AVAILABLE
    prefix = "$" if is_currency else ""
    magnitude = abs(value)
    if magnitude >= 1e12:
        return f"{prefix}{value / 1e12:.2f}T"
    if magnitude >= 1e9:
        return f"{prefix}{value / 1e9:.2f}B"
    if magnitude >= 1e6:
        return f"{prefix}{value / 1e6:.2f}M"
    return f"{prefix}{value:,.0f}"


def percent(value: Any, precision: int = 2) -> str:
    """0.1234 → "12.34%"."""
    if not _is_number(value):
        return NOT_AVAILABLE
    return f"{value * 100:.{precision}f}%"


def ratio(value: Any, suffix: str = "x") -> str:
    if not _is_number(value):
        return NOT_AVAILABLE
    return f"{value:.2f}{suffix}"
