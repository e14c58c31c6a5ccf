"""
deps.py — FastAPI dependencies and error translation for the v1 routers.

Tests replace these through `app.dependency_overrides`.
"""

from typing import NoReturn, Optional

from fastapi import HTTPException

from pitchly.core.logging import get_logger
from pitchly.data.quote_client import QuoteFetchError, QuoteNotFoundError, QuoteSource
from pitchly.data.quote_client import get_quote_source as _build_quote_source
from pitchly.services.ai import llm_client
from pitchly.services.workflow import AssumptionSource

logger = get_logger(__name__)


def get_quote_source() -> QuoteSource:
    return _build_quote_source()


def get_assumption_source() -> Optional[AssumptionSource]:
    """AI starting points for LBO scenarios, or None when the LLM is not configured."""
    if not llm_client.is_configured():
        return None
    return llm_client.generate_lbo_assumptions


def raise_quote_error(ticker: str, e: QuoteFetchError) -> NoReturn:
    """QuoteNotFoundError → 404, any other fetch failure → 502."""
    if isinstance(e, QuoteNotFoundError):
        logger.warning(f"Ticker {ticker} not found: {e}")
        raise HTTPException(status_code=404, detail=f"Ticker not found: {ticker}. {e}") from e
    logger.error(f"Quote fetch failed for {ticker}: {e}")
    raise HTTPException(status_code=502, detail=f"Failed to fetch data for {ticker}: {e}") from e
