"""
quote_builder.py — Assemble a Quote from a raw ticker summary payload.

Purpose:
- Convert untyped JSON (mixed number / string / {raw, fmt} encodings) into
  the strict Quote record before any engine sees it
- Derive shares outstanding, net debt and EV/EBITDA
- Resolve tax rate (API value or exchange statutory fallback) and sector

This module does NOT:
- Perform network or file I/O.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional

from pitchly.core.logging import get_logger
from pitchly.data.normalizer import parse_percent, parse_value
from pitchly.data.reference import get_ticker_domain, lookup_tax_info
from pitchly.services.modeling.types import Quote

logger = get_logger(__name__)


DEFAULT_INTEREST_RATE = 0.085
DEFAULT_NET_DEBT = 5_000 * 1e6

# net_debt is never read from a balance sheet by the default estimator.
NET_DEBT_IS_ESTIMATED = True

NetDebtEstimator = Callable[[Mapping[str, Any], Optional[float], Optional[float]], float]


def heuristic_net_debt(
    payload: Mapping[str, Any],
    market_cap: Optional[float],
    ebitda: Optional[float],
) -> float:
    """
    Coarse placeholder: market_cap / (ebitda * 0.1) when EBITDA is positive,
    otherwise a flat 5B. Not a balance-sheet figure.
    """
    if ebitda is not None and ebitda > 0 and market_cap is not None:
        return market_cap / (ebitda * 0.1)
    return DEFAULT_NET_DEBT


def balance_sheet_net_debt(
    payload: Mapping[str, Any],
    market_cap: Optional[float],
    ebitda: Optional[float],
) -> float:
    """totalDebt - totalCash from the payload, falling back to the heuristic."""
    total_debt = parse_value(payload.get("totalDebt"))
    total_cash = parse_value(payload.get("totalCash"))
    if total_debt is not None and total_cash is not None:
        return total_debt - total_cash
    return heuristic_net_debt(payload, market_cap, ebitda)


def _dedupe_scenarios(raw: Any) -> List[Dict[str, Any]]:
    if not isinstance(raw, list):
        return []
    seen = set()
    unique: List[Dict[str, Any]] = []
    for item in raw:
        if not isinstance(item, Mapping):
            continue
        scenario_id = item.get("id")
        if scenario_id in seen:
            continue
        seen.add(scenario_id)
        unique.append(dict(item))
    return unique


def _text(value: Any) -> Optional[str]:
    """Stripped string, or None for blanks and non-string JSON (objects, numbers)."""
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Unparseable lastUpdated value: %s", value)
        return None


def build_quote(
    payload: Mapping[str, Any],
    net_debt_estimator: NetDebtEstimator = heuristic_net_debt,
) -> Quote:
    """
    Build a Quote from a ticker summary payload.

    Args:
        payload: Raw JSON dict from the ticker summary service (or the
            yfinance source, which emits the same keys)
        net_debt_estimator: Strategy used to derive net debt

    Returns:
        Quote with derived fields populated
    """
    ticker = (_text(payload.get("ticker")) or "").upper()
    exchange = _text(payload.get("exchange"))

    price = parse_value(payload.get("currentPrice"))
    if price is None:
        price = parse_value(payload.get("latestPrice"))
    market_cap = parse_value(payload.get("marketCap"))
    revenue = parse_value(payload.get("revenue"))
    ebitda = parse_value(payload.get("ebitda"))

    shares = market_cap / price if market_cap is not None and price is not None and price > 0 else None
    net_debt = net_debt_estimator(payload, market_cap, ebitda)
    ev_ebitda = market_cap / ebitda if ebitda is not None and ebitda > 0 and market_cap is not None else None

    api_tax_rate = parse_percent(payload.get("taxRate"))
    if api_tax_rate is not None:
        tax_rate = api_tax_rate
        tax_rate_is_assumed = False
        tax_rate_source = ""
    else:
        tax_info = lookup_tax_info(exchange)
        tax_rate = tax_info.rate
        tax_rate_is_assumed = True
        tax_rate_source = f" (Assumed for {tax_info.country})"
        logger.debug("No tax rate for %s; assuming %.3f for %s", ticker, tax_rate, tax_info.country)

    return Quote(
        ticker=ticker,
        company_name=_text(payload.get("companyName")) or ticker,
        exchange=exchange,
        domain=get_ticker_domain(ticker),
        price=price,
        previous_close=parse_value(payload.get("previousClose")),
        open=parse_value(payload.get("open")),
        change=parse_value(payload.get("priceChange")),
        change_percent=parse_value(payload.get("priceChangePct")),
        market_cap=market_cap,
        revenue=revenue,
        ebitda=ebitda,
        pe_ratio=parse_value(payload.get("peRatio")),
        ps_ratio=parse_value(payload.get("psRatio")),
        pb_ratio=parse_value(payload.get("pbRatio")),
        roe=parse_percent(payload.get("roe")),
        revenue_growth=parse_percent(payload.get("revenueGrowth")),
        tax_rate=tax_rate,
        tax_rate_is_assumed=tax_rate_is_assumed,
        tax_rate_source=tax_rate_source,
        shares=shares,
        net_debt=net_debt,
        ev_ebitda=ev_ebitda,
        interest_rate=DEFAULT_INTEREST_RATE,
        logo_url=_text(payload.get("logoUrl")),
        scenarios=_dedupe_scenarios(payload.get("scenarios")),
        last_updated=_parse_timestamp(payload.get("lastUpdated")),
    )


def refresh_quote_price(quote: Quote, payload: Mapping[str, Any]) -> Quote:
    """
    Apply a polling refresh: only price, change and change_percent move.

    Fields missing from the refresh payload keep their previous values.
    """
    refreshed = build_quote(payload)
    return replace(
        quote,
        price=refreshed.price if refreshed.price is not None else quote.price,
        change=refreshed.change if refreshed.change is not None else quote.change,
        change_percent=(
            refreshed.change_percent if refreshed.change_percent is not None else quote.change_percent
        ),
    )
