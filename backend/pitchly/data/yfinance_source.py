"""
yfinance_source.py — Quote provider backed by the yfinance library.

Alternative to the ticker summary service (QUOTE_PROVIDER=yfinance). Emits
the same raw payload keys the service returns, so the quote builder treats
both providers identically:
- percentages (roe, revenueGrowth, taxRate) as percent values, not decimals
- exchange codes mapped onto the names used by the statutory tax table
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import yfinance as yf

from pitchly.core.config import settings
from pitchly.core.logging import get_logger
from pitchly.data.quote_client import QuoteFetchError, QuoteNotFoundError, QuoteSource, normalize_ticker
from pitchly.services.modeling.quote_builder import balance_sheet_net_debt

logger = get_logger(__name__)


# yfinance exchange code → exchange name used by the tax table
YF_EXCHANGE_CODES: Dict[str, str] = {
    "NMS": "NASDAQ",
    "NGM": "NASDAQ",
    "NCM": "NASDAQ",
    "NAS": "NASDAQ",
    "NYQ": "NYSE",
    "ASE": "NYSE",
    "PCX": "NYSE",
    "BTS": "BATS",
    "PNK": "OTCMKTS",
    "TOR": "TSX",
    "VAN": "TSXV",
    "LSE": "LSE",
    "PAR": "EURONEXT",
    "AMS": "EURONEXT",
    "GER": "XETRA",
    "JPX": "JPX",
    "ASX": "ASX",
}


def _as_percent(value: Any) -> Optional[float]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value * 100
    return None


def _first_present(info: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = info.get(key)
        if value is not None:
            return value
    return None


def info_to_payload(ticker: str, info: Dict[str, Any]) -> Dict[str, Any]:
    """Map a yfinance `info` dict onto ticker summary keys."""
    exchange_code = info.get("exchange")
    return {
        "ticker": ticker,
        "companyName": _first_present(info, "longName", "shortName") or ticker,
        "exchange": YF_EXCHANGE_CODES.get(str(exchange_code).upper(), exchange_code) if exchange_code else None,
        "currentPrice": _first_present(info, "currentPrice", "regularMarketPrice"),
        "previousClose": _first_present(info, "previousClose", "regularMarketPreviousClose"),
        "open": _first_present(info, "open", "regularMarketOpen"),
        "priceChange": info.get("regularMarketChange"),
        "priceChangePct": info.get("regularMarketChangePercent"),
        "marketCap": info.get("marketCap"),
        "revenue": info.get("totalRevenue"),
        "ebitda": info.get("ebitda"),
        "peRatio": _first_present(info, "trailingPE", "forwardPE"),
        "psRatio": info.get("priceToSalesTrailing12Months"),
        "pbRatio": info.get("priceToBook"),
        "roe": _as_percent(info.get("returnOnEquity")),
        "revenueGrowth": _as_percent(info.get("revenueGrowth")),
        "totalDebt": info.get("totalDebt"),
        "totalCash": info.get("totalCash"),
        "lastUpdated": datetime.now(timezone.utc).isoformat(),
    }


class YFinanceQuoteSource(QuoteSource):
    """Reads `yf.Ticker(symbol).info`; no retries beyond what yfinance does itself."""

    # yfinance exposes totalDebt / totalCash
    net_debt_estimator = staticmethod(balance_sheet_net_debt)

    def __init__(self, peer_sleep_seconds: Optional[float] = None):
        self.peer_sleep_seconds = (
            settings.PEER_REQUEST_SLEEP_SECONDS if peer_sleep_seconds is None else peer_sleep_seconds
        )

    def get_ticker_summary(self, ticker: str) -> Dict[str, Any]:
        """
        Raises:
            QuoteNotFoundError: yfinance returned no price for the symbol
            QuoteFetchError: yfinance raised
        """
        ticker = normalize_ticker(ticker)
        try:
            info = yf.Ticker(ticker).info or {}
        except Exception as e:
            logger.error("yfinance lookup failed for %s: %s", ticker, e)
            raise QuoteFetchError(f"yfinance lookup failed for {ticker}: {e}") from e

        payload = info_to_payload(ticker, info)
        if payload["currentPrice"] is None:
            raise QuoteNotFoundError(f"No market data found for {ticker}")
        return payload
