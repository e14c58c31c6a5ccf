"""
alerts.py — Price Alert Endpoint

Endpoints:
- POST /alerts/{ticker} → arm or re-check a price alert against the live quote

The client keeps the alert between polls: the first call (no direction)
arms it and reports the derived direction; later calls send that direction
back and receive `triggered` plus a message once the price crosses.
"""

from dataclasses import replace

from fastapi import APIRouter, Depends, HTTPException

from pitchly.api.deps import get_quote_source, raise_quote_error
from pitchly.api.v1.schemas import PriceAlertRequest
from pitchly.core.logging import get_logger
from pitchly.core.state import DashboardState, alert_message, check_price_alert, set_price_alert
from pitchly.data.quote_client import QuoteFetchError, QuoteSource
from pitchly.services.modeling.types import InvalidAssumptionError

logger = get_logger(__name__)

router = APIRouter(
    prefix="/alerts",
    tags=["alerts"]
)


@router.post("/{ticker}")
def check_alert(ticker: str, request: PriceAlertRequest, source: QuoteSource = Depends(get_quote_source)):
    """
    Raises:
        404/502: quote fetch failed
        422: target is not a positive price
    """
    ticker = ticker.strip().upper()
    try:
        quote = source.get_quote(ticker)
    except QuoteFetchError as e:
        raise_quote_error(ticker, e)

    state = DashboardState(ticker=quote.ticker, quote=quote)
    try:
        state = set_price_alert(state, request.target)
    except InvalidAssumptionError as e:
        raise HTTPException(status_code=422, detail=str(e))

    if request.direction is not None:
        state = replace(state, alert=replace(state.alert, direction=request.direction))

    state = check_price_alert(state)
    message = alert_message(state)
    if message:
        logger.info(f"Alert fired: {message}")

    return {
        "ticker": state.ticker,
        "price": quote.price,
        "alert": state.alert,
        "message": message,
    }
