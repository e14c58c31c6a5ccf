"""
quotes.py — Quote & Ticker Search API Endpoints

Endpoints:
- GET /quotes/search?q={QUERY} → ticker suggestions for autocomplete
- GET /quotes/{ticker}         → normalized Quote plus the daily-move badge

The dashboard polls GET /quotes/{ticker} every `refresh_seconds` for price
updates.
"""

from fastapi import APIRouter, Depends, Query

from pitchly.api.deps import get_quote_source, raise_quote_error
from pitchly.core.config import settings
from pitchly.core.logging import get_logger
from pitchly.data.quote_client import QuoteFetchError, QuoteSource
from pitchly.data.reference import search_tickers
from pitchly.services.modeling.sentiment import classify_daily_move

logger = get_logger(__name__)

router = APIRouter(
    prefix="/quotes",
    tags=["quotes"]
)


@router.get("/search")
def search(
    q: str = Query("", description="Ticker prefix or part of the company name"),
    limit: int = Query(10, ge=1, le=50),
):
    """GET /quotes/search?q=app → [{ticker, name}, ...]"""
    return {"query": q, "results": search_tickers(q, limit=limit)}


@router.get("/{ticker}")
def get_quote(ticker: str, source: QuoteSource = Depends(get_quote_source)):
    """
    GET /quotes/{ticker}

    Raises:
        404: unknown ticker
        502: upstream fetch failed after retries
    """
    ticker = ticker.strip().upper()
    try:
        quote = source.get_quote(ticker)
    except QuoteFetchError as e:
        raise_quote_error(ticker, e)

    badge, commentary = classify_daily_move(quote.change_percent)
    return {
        "quote": quote,
        "sentiment": {"badge": badge, "commentary": commentary},
        "refresh_seconds": settings.REALTIME_REFRESH_SECONDS,
    }
