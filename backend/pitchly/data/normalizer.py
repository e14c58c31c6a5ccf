"""
normalizer.py — Parse heterogeneous API values into floats.

The ticker summary service mixes encodings for the same field: plain
numbers, suffixed magnitude strings ("1.2B"), percentage strings ("12.5%")
and provider objects of the form {"raw": 1.2e9, "fmt": "1.2B"}. Everything
numeric passes through `parse_value` before it reaches a Quote, so the
engines only ever see finite floats or None.
"""

from __future__ import annotations

import math
import re
from typing import Any, Mapping, Optional

# Leading signed float, optionally in exponent form: "-1.5e3abc" → "-1.5e3"
_LEADING_FLOAT = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

MAGNITUDE_SUFFIXES = {
    "T": 1e12,
    "B": 1e9,
    "M": 1e6,
}


def _finite_or_none(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None


def parse_value(value: Any) -> Optional[float]:
    """
    Convert a raw API value to a float, or None when it cannot be read.

    Rules:
    - None → None
    - mapping with a numeric "raw" entry → that number
    - int/float → itself if finite
    - string → thousands separators removed, leading float parsed, a trailing
      T/B/M multiplies by 1e12/1e9/1e6
    - anything else (including bool) → None

    Never raises.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, Mapping):
        raw = value.get("raw")
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return _finite_or_none(float(raw))
        return None

    if isinstance(value, (int, float)):
        return _finite_or_none(float(value))

    if not isinstance(value, str):
        return None

    cleaned = value.replace(",", "").strip()
    if not cleaned:
        return None

    match = _LEADING_FLOAT.match(cleaned)
    if match is None:
        return None

    try:
        number = float(match.group(0))
    except ValueError:
        return None

    multiplier = MAGNITUDE_SUFFIXES.get(cleaned[-1].upper(), 1.0)
    return _finite_or_none(number * multiplier)


def parse_percent(value: Any) -> Optional[float]:
    """Parse a percentage (12.5 or "12.5%") into a decimal (0.125)."""
    parsed = parse_value(value)
    if parsed is None:
        return None
    return parsed / 100
