"""
quote_client.py — HTTP client for the ticker summary service.

Responsibilities:
- Fetch the raw ticker summary JSON (`GET {base}/ticker_summary?ticker=X`)
- Retry transient failures with exponential backoff (2s, 4s, 8s by default)
- Turn error bodies (JSON `error` field or an HTML page) into readable messages
- Resolve peer quotes sequentially with a polite delay, skipping failures

The valuation engines never see this module; they receive Quote objects built
by `pitchly.services.modeling.quote_builder`.
"""

from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

import requests
from tenacity import before_sleep_log, retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from pitchly.core.config import settings
from pitchly.core.logging import get_logger
from pitchly.data.reference import get_logo_url, get_peer_tickers
from pitchly.services.modeling.quote_builder import build_quote, heuristic_net_debt
from pitchly.services.modeling.types import Quote


logger = get_logger(__name__)


BASE_HEADERS = {
    "Accept": "application/json",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
}

TICKER_SUMMARY_PATH = "/ticker_summary"

# Statuses worth another attempt
RETRYABLE_STATUSES = {408, 429, 500, 502, 503, 504}

_TAG_RE = re.compile(r"<[^>]*>?")
_WHITESPACE_RE = re.compile(r"\s+")


class QuoteFetchError(RuntimeError):
    """Raised when a ticker summary cannot be retrieved or parsed."""


class QuoteNotFoundError(QuoteFetchError):
    """Raised when the service reports an unknown ticker (HTTP 404)."""


@dataclass(frozen=True)
class QuoteClientSettings:
    base_url: str
    timeout_seconds: int
    peer_sleep_seconds: float

    @classmethod
    def from_app_settings(cls) -> "QuoteClientSettings":
        return cls(
            base_url=settings.QUOTE_API_BASE_URL.rstrip("/"),
            timeout_seconds=settings.QUOTE_REQUEST_TIMEOUT_SECONDS,
            peer_sleep_seconds=settings.PEER_REQUEST_SLEEP_SECONDS,
        )


def normalize_ticker(ticker: str) -> str:
    cleaned = (ticker or "").strip().upper()
    if not cleaned:
        raise QuoteNotFoundError("Ticker symbol is required")
    return cleaned


def extract_error_message(response: requests.Response) -> str:
    """
    Readable message from an error response.

    JSON bodies → their "error" field (or the whole object); anything else is
    treated as HTML and tag-stripped.
    """
    body = response.text or ""
    try:
        payload = json.loads(body)
    except ValueError:
        message = _WHITESPACE_RE.sub(" ", _TAG_RE.sub(" ", body)).strip()
    else:
        if isinstance(payload, dict) and payload.get("error"):
            message = str(payload["error"])
        else:
            message = json.dumps(payload)
    return message or f"HTTP error! status: {response.status_code}"


class QuoteSource:
    """
    Common surface of every quote provider.

    Subclasses implement `get_ticker_summary`; Quote building and peer
    resolution are shared.
    """

    peer_sleep_seconds: float = 0.0
    net_debt_estimator = staticmethod(heuristic_net_debt)

    def get_ticker_summary(self, ticker: str) -> Dict[str, Any]:
        raise NotImplementedError

    def get_quote(self, ticker: str) -> Quote:
        """Fetch and normalize one ticker."""
        payload = self.get_ticker_summary(ticker)
        quote = build_quote(payload, self.net_debt_estimator)
        if quote.logo_url is None:
            # Provider did not supply a logo
            quote = replace(quote, logo_url=get_logo_url(quote.ticker))
        return quote

    def get_peer_quotes(self, ticker: str) -> List[Quote]:
        """
        Quotes for the ticker's static peer set.

        Requests are sequential with `peer_sleep_seconds` between them; peers
        that fail are logged and left out.
        """
        peers: List[Quote] = []
        peer_tickers = get_peer_tickers(ticker)
        for index, peer in enumerate(peer_tickers):
            try:
                peers.append(self.get_quote(peer))
            except QuoteFetchError as e:
                logger.warning("Could not fetch data for peer %s: %s", peer, e)
            if index < len(peer_tickers) - 1 and self.peer_sleep_seconds > 0:
                time.sleep(self.peer_sleep_seconds)
        logger.info("Resolved %d of %d peers for %s", len(peers), len(peer_tickers), ticker)
        return peers


class QuoteClient(QuoteSource):
    """
    Thin wrapper over `requests.Session` for the ticker summary service.

    Sync/blocking; FastAPI runs the route handlers that use it in its
    threadpool.
    """

    def __init__(self, session: Optional[requests.Session] = None, config: Optional[QuoteClientSettings] = None):
        self._session = session or requests.Session()
        self._config = config or QuoteClientSettings.from_app_settings()
        self._session.headers.update(BASE_HEADERS)
        self.peer_sleep_seconds = self._config.peer_sleep_seconds

    # --------------------------------------------------------------------- #
    # Public API
    # --------------------------------------------------------------------- #
    def get_ticker_summary(self, ticker: str) -> Dict[str, Any]:
        """
        Raw ticker summary payload.

        Raises:
            QuoteNotFoundError: unknown ticker
            QuoteFetchError: network failure after retries, error status or
                a body that is not a JSON object
        """
        ticker = normalize_ticker(ticker)
        url = f"{self._config.base_url}{TICKER_SUMMARY_PATH}"

        try:
            response = self._perform_request(url, {"ticker": ticker})
        except requests.RequestException as e:
            response = getattr(e, "response", None)
            message = extract_error_message(response) if response is not None else str(e)
            logger.error("Ticker summary for %s failed after retries: %s", ticker, message)
            raise QuoteFetchError(message) from e

        if response.status_code == 404:
            raise QuoteNotFoundError(extract_error_message(response))
        if not response.ok:
            raise QuoteFetchError(extract_error_message(response))

        try:
            payload = response.json()
        except ValueError as e:
            logger.error("Failed to parse JSON for %s: %.200s", ticker, response.text)
            raise QuoteFetchError("Invalid JSON response from server.") from e

        if not isinstance(payload, dict):
            raise QuoteFetchError("Invalid JSON response from server.")
        if payload.get("error"):
            raise QuoteFetchError(str(payload["error"]))

        payload.setdefault("ticker", ticker)
        return payload

    # ------------------------------------------------------------------ #
    # Request helpers
    # ------------------------------------------------------------------ #
    @retry(
        stop=stop_after_attempt(settings.QUOTE_MAX_RETRIES + 1),
        wait=wait_exponential(multiplier=settings.QUOTE_BACKOFF_BASE, max=30),
        retry=retry_if_exception_type((requests.RequestException,)),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    def _perform_request(self, url: str, params: Dict[str, str]) -> requests.Response:
        logger.debug("Requesting %s %s", url, params)
        response = self._session.get(url, params=params, timeout=self._config.timeout_seconds)
        if response.status_code in RETRYABLE_STATUSES:
            # Trigger retry
            msg = f"Ticker summary request throttled or server error (status {response.status_code})"
            logger.warning("%s, retrying", msg)
            raise requests.HTTPError(msg, response=response)
        return response


def get_quote_source() -> QuoteSource:
    """Provider selected by QUOTE_PROVIDER."""
    if settings.QUOTE_PROVIDER == "yfinance":
        from pitchly.data.yfinance_source import YFinanceQuoteSource

        return YFinanceQuoteSource()
    return QuoteClient()
