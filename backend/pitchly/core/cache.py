"""
cache.py — Generated Analysis Cache

Purpose:
- Keep generated AI content (SWOT, memo, news, pitch deck) per ticker so a
  repeated request for the same ticker and analysis type does not call the
  LLM again.
- Process-local only; entries are lost on restart.

This module does NOT:
- Cache quotes or valuation results (those are recomputed on every call).
- Decide what is cacheable (the analysis router skips placeholders).
"""

import time
from typing import Any, Dict, Optional, Tuple

from pitchly.core.logging import get_logger

logger = get_logger(__name__)

ANALYSIS_NAMESPACE = "analysis"

# key -> (monotonic time stored, value)
_entries: Dict[str, Tuple[float, Any]] = {}


def make_key(namespace: str, identifier: Any) -> str:
    """Build a "<namespace>:<identifier>" key."""
    return f"{namespace}:{identifier}"


def analysis_key(ticker: str, analysis_type: str) -> str:
    """
    Key for one ticker's generated analysis.

    Example:
        analysis_key("tsla", "swot") → "analysis:TSLA:swot"
    """
    return make_key(ANALYSIS_NAMESPACE, f"{ticker.upper()}:{analysis_type}")


def cache_get(key: str, max_age_seconds: Optional[float] = None) -> Any:
    """
    Return the cached value, or None when absent.

    Entries older than `max_age_seconds` are evicted and reported as absent;
    None or 0 means entries never expire.
    """
    entry = _entries.get(key)
    if entry is None:
        return None

    stored_at, value = entry
    if max_age_seconds and time.monotonic() - stored_at > max_age_seconds:
        logger.debug("Cache entry %s expired", key)
        del _entries[key]
        return None
    return value


def cache_set(key: str, value: Any) -> None:
    _entries[key] = (time.monotonic(), value)


def cache_clear(namespace: Optional[str] = None) -> int:
    """
    Drop every entry, or only those under `namespace`.

    Returns the number of entries removed.
    """
    if namespace is None:
        removed = len(_entries)
        _entries.clear()
        return removed

    prefix = f"{namespace}:"
    stale = [key for key in _entries if key.startswith(prefix)]
    for key in stale:
        del _entries[key]
    return len(stale)
