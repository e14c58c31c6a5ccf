"""
dcf.py — Discounted Cash Flow / Dividend Discount valuation.

Purpose:
- Project 10 years of free cash flow from a Quote and an assumption set
- FCFF on revenue/margin drivers for standard companies
- FCFE on book value/ROE drivers for the Financials domain (DDM)
- Discount to present value, add a Gordon-growth terminal value, derive
  per-share intrinsic value and upside to the current price

Outputs (JSON-serializable via dataclasses.asdict):
    DcfResult(model_type, projections, present_value_of_cash_flows,
              present_value_of_terminal_value, enterprise_value, equity_value,
              per_share_value, potential_upside, revenue,
              derived_revenue_note, error)

Missing data and degenerate parameters never raise: the result carries an
`error` message and zero / "N/A" monetary outputs instead.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from pitchly.core.logging import get_logger
from pitchly.data.reference import Domain
from pitchly.services.modeling.types import (
    NOT_AVAILABLE,
    DcfAssumptions,
    DcfProjectionRow,
    DcfResult,
    MaybeNumber,
    Quote,
    RoeDcfAssumptions,
    StandardDcfAssumptions,
)

logger = get_logger(__name__)


FORECAST_YEARS = 10

MODEL_TYPE_FINANCIALS = "Financials"
MODEL_TYPE_STANDARD = "Standard"

DDM_BASIS_NOTE = "Valuation based on a Dividend Discount Model using Book Value, ROE, and Cost of Equity."
REVENUE_FROM_EBITDA_NOTE = "Revenue was derived from EBITDA and Operating Margin."
REVENUE_FROM_PS_NOTE = "Revenue was derived from Market Cap and P/S Ratio."


def _error_result(
    model_type: str,
    error: str,
    derived_revenue_note: Optional[str] = None,
) -> DcfResult:
    return DcfResult(
        model_type=model_type,
        projections=[],
        present_value_of_cash_flows=0.0,
        present_value_of_terminal_value=0.0,
        enterprise_value=0.0,
        equity_value=0.0,
        per_share_value=NOT_AVAILABLE,
        potential_upside=NOT_AVAILABLE,
        revenue=NOT_AVAILABLE,
        derived_revenue_note=derived_revenue_note,
        error=error,
    )


def _degenerate_rate_error(discount_label: str, discount_rate: float, terminal_growth: float) -> Optional[str]:
    if discount_rate <= terminal_growth:
        return (
            f"{discount_label} ({discount_rate:.2%}) must exceed terminal growth "
            f"({terminal_growth:.2%}); terminal value is undefined."
        )
    return None


def discount_cash_flows(
    cash_flows: List[float],
    discount_rate: float,
    terminal_growth: float,
) -> Tuple[float, float]:
    """
    Present value of a cash-flow strip plus its Gordon-growth terminal value.

    Year i (1-based) is discounted by (1 + r)^i; the terminal value is
    CF_n * (1 + g) / (r - g) discounted back n periods. Callers must ensure
    r > g.

    Returns:
        (pv_of_cash_flows, pv_of_terminal_value)
    """
    pv_cash_flows = sum(
        cf / (1 + discount_rate) ** year
        for year, cf in enumerate(cash_flows, start=1)
    )
    horizon = len(cash_flows)
    terminal_value = cash_flows[-1] * (1 + terminal_growth) / (discount_rate - terminal_growth)
    pv_terminal_value = terminal_value / (1 + discount_rate) ** horizon
    return pv_cash_flows, pv_terminal_value


def _per_share_and_upside(quote: Quote, equity_value: float) -> Tuple[MaybeNumber, MaybeNumber]:
    shares = quote.shares
    if shares is None or shares <= 0:
        return NOT_AVAILABLE, NOT_AVAILABLE

    per_share_value = equity_value / shares
    price = quote.price
    if price is None or price == 0:
        return per_share_value, NOT_AVAILABLE
    return per_share_value, (per_share_value - price) / price


def _calculate_ddm(quote: Quote, assumptions: RoeDcfAssumptions) -> DcfResult:
    if not quote.market_cap or quote.pb_ratio is None or quote.pb_ratio <= 0:
        return _error_result(
            MODEL_TYPE_FINANCIALS,
            "Missing Market Cap or P/B Ratio. Cannot perform DDM valuation.",
        )

    book_value = quote.market_cap / quote.pb_ratio
    if book_value <= 0:
        return _error_result(
            MODEL_TYPE_FINANCIALS,
            "Invalid Book Value derived. Cannot perform DDM valuation.",
        )

    rate_error = _degenerate_rate_error("Cost of equity", assumptions.cost_of_equity, assumptions.terminal_growth)
    if rate_error:
        return _error_result(MODEL_TYPE_FINANCIALS, rate_error, DDM_BASIS_NOTE)

    projections: List[DcfProjectionRow] = []
    current_book_value = book_value
    for year in range(1, FORECAST_YEARS + 1):
        net_income = current_book_value * assumptions.roe
        reinvestment = net_income * assumptions.reinvestment_rate
        fcfe = net_income - reinvestment
        current_book_value += reinvestment
        projections.append(DcfProjectionRow(year=year, revenue=None, free_cash_flow=fcfe))

    pv_fcfe, pv_terminal = discount_cash_flows(
        [row.free_cash_flow for row in projections],
        assumptions.cost_of_equity,
        assumptions.terminal_growth,
    )

    # Banks: no separate enterprise value, equity is valued directly.
    equity_value = pv_fcfe + pv_terminal
    per_share_value, potential_upside = _per_share_and_upside(quote, equity_value)

    return DcfResult(
        model_type=MODEL_TYPE_FINANCIALS,
        projections=projections,
        present_value_of_cash_flows=pv_fcfe,
        present_value_of_terminal_value=pv_terminal,
        enterprise_value=equity_value,
        equity_value=equity_value,
        per_share_value=per_share_value,
        potential_upside=potential_upside,
        revenue="N/A (DDM Model)",
        derived_revenue_note=DDM_BASIS_NOTE,
        error=None if per_share_value != NOT_AVAILABLE else "Missing or invalid Shares Outstanding data.",
    )


def resolve_revenue(quote: Quote, operating_margin: float) -> Tuple[Optional[float], Optional[str]]:
    """
    Base-year revenue, imputing it when the quote has none.

    Order: reported revenue, EBITDA / operating margin, market cap / P/S.

    Returns:
        (revenue or None, note describing the imputation or None)
    """
    if quote.revenue is not None and quote.revenue > 0:
        return quote.revenue, None

    if quote.ebitda is not None and quote.ebitda > 0 and operating_margin > 0:
        return quote.ebitda / operating_margin, REVENUE_FROM_EBITDA_NOTE

    if quote.market_cap and quote.ps_ratio is not None and quote.ps_ratio > 0:
        return quote.market_cap / quote.ps_ratio, REVENUE_FROM_PS_NOTE

    return None, None


def _calculate_fcff(quote: Quote, assumptions: StandardDcfAssumptions) -> DcfResult:
    revenue, derived_note = resolve_revenue(quote, assumptions.operating_margin)
    if revenue is None or revenue <= 0:
        return _error_result(
            MODEL_TYPE_STANDARD,
            "Revenue could not be derived. Cannot perform DCF.",
            derived_note,
        )

    rate_error = _degenerate_rate_error("WACC", assumptions.wacc, assumptions.terminal_growth)
    if rate_error:
        return _error_result(MODEL_TYPE_STANDARD, rate_error, derived_note)

    projections: List[DcfProjectionRow] = []
    current_revenue = revenue
    for year in range(1, FORECAST_YEARS + 1):
        current_revenue *= 1 + assumptions.revenue_growth
        ebit = current_revenue * assumptions.operating_margin
        nopat = ebit * (1 - assumptions.tax_rate)
        reinvestment = nopat * assumptions.reinvestment_rate
        fcff = nopat - reinvestment
        projections.append(DcfProjectionRow(year=year, revenue=current_revenue, free_cash_flow=fcff))

    pv_fcff, pv_terminal = discount_cash_flows(
        [row.free_cash_flow for row in projections],
        assumptions.wacc,
        assumptions.terminal_growth,
    )

    enterprise_value = pv_fcff + pv_terminal
    equity_value = enterprise_value - (quote.net_debt or 0.0)
    per_share_value, potential_upside = _per_share_and_upside(quote, equity_value)

    return DcfResult(
        model_type=MODEL_TYPE_STANDARD,
        projections=projections,
        present_value_of_cash_flows=pv_fcff,
        present_value_of_terminal_value=pv_terminal,
        enterprise_value=enterprise_value,
        equity_value=equity_value,
        per_share_value=per_share_value,
        potential_upside=potential_upside,
        revenue=revenue,
        derived_revenue_note=derived_note,
        error=(
            None if per_share_value != NOT_AVAILABLE
            else "Missing or invalid Shares Outstanding data. Cannot calculate per-share value."
        ),
    )


def calculate_dcf(quote: Quote, assumptions: DcfAssumptions) -> DcfResult:
    """
    DCF/DDM valuation entrypoint.

    The quote's domain selects the model: Financials → ROE-driven DDM,
    everything else → FCFF. The assumption object must match the model
    (RoeDcfAssumptions for Financials, StandardDcfAssumptions otherwise).

    Args:
        quote: Normalized company snapshot
        assumptions: Model inputs

    Returns:
        DcfResult; `error` is set instead of raising for missing data or
        discount_rate <= terminal_growth
    """
    if quote.domain == Domain.FINANCIALS:
        if not isinstance(assumptions, RoeDcfAssumptions):
            return _error_result(
                MODEL_TYPE_FINANCIALS,
                "Financials are valued with ROE-based assumptions (roe, retention, cost of equity).",
            )
        result = _calculate_ddm(quote, assumptions)
    else:
        if not isinstance(assumptions, StandardDcfAssumptions):
            return _error_result(
                MODEL_TYPE_STANDARD,
                "Standard DCF requires revenue growth, margin, tax, reinvestment and WACC assumptions.",
            )
        result = _calculate_fcff(quote, assumptions)

    if result.error:
        logger.debug("DCF for %s returned soft error: %s", quote.ticker, result.error)
    return result
