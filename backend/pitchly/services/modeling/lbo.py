"""
lbo.py — Leveraged Buyout model.

Purpose:
- Build sources & uses (senior debt, optional PIK mezzanine, sponsor equity)
- Project EBITDA, interest, after-tax cash flow and a full senior cash sweep
- Handle a mid-hold dividend / leveraged recap funded with new senior debt
- Compute exit equity, MOIC and IRR

Scenario behavior:
- mezzanineDebt: debt split into senior + mezzanine; mezzanine interest is
  PIK (accrues to principal, never paid in cash)
- dividendRecap / leveragedRecap: dividend in recap_year funded by senior debt
- every other scenario: 100% senior debt, plain sweep

A deal that cannot be modeled (no purchase price, no EBITDA) returns an
all-zero LboResult rather than an error.
"""

from __future__ import annotations

from typing import List, Optional

from pitchly.core.logging import get_logger
from pitchly.data.reference import MEZZANINE_SCENARIOS, RECAP_SCENARIOS, ScenarioId
from pitchly.services.modeling.types import (
    LboAssumptions,
    LboProjectionRow,
    LboResult,
    MezzanineLboAssumptions,
    Quote,
    RecapLboAssumptions,
)

logger = get_logger(__name__)


def resolve_entry_ebitda(quote: Quote, assumptions: LboAssumptions) -> Optional[float]:
    """
    Entry EBITDA for the model.

    Order: quote EBITDA, market cap / EV-EBITDA, then purchase price / exit
    multiple discounted by compounded growth over the holding period.
    """
    if quote.ebitda is not None and quote.ebitda > 0:
        return quote.ebitda

    if quote.market_cap and quote.ev_ebitda is not None and quote.ev_ebitda > 0:
        return quote.market_cap / quote.ev_ebitda

    if assumptions.exit_multiple > 0:
        implied_exit_ebitda = assumptions.purchase_price / assumptions.exit_multiple
        return implied_exit_ebitda / (1 + assumptions.ebitda_growth) ** assumptions.holding_period

    return None


def _irr_from_moic(moic: float, holding_period: int) -> float:
    if moic > 0:
        return moic ** (1 / holding_period) - 1
    # Total loss convention
    return -1.0


def calculate_lbo(
    quote: Quote,
    assumptions: LboAssumptions,
    scenario_id: ScenarioId = ScenarioId.BASE_CASE,
) -> LboResult:
    """
    Run the LBO for one scenario.

    Args:
        quote: Normalized company snapshot (EBITDA source and tax rate)
        assumptions: LboAssumptions, or the Recap / Mezzanine variant the
            scenario requires
        scenario_id: Selects recap / mezzanine behavior

    Returns:
        LboResult with yearly projections, capitalization and returns
    """
    scenario_id = ScenarioId(scenario_id)

    if not assumptions.purchase_price:
        logger.debug("LBO for %s skipped: no purchase price", quote.ticker)
        return LboResult.empty()

    entry_ebitda = resolve_entry_ebitda(quote, assumptions)
    if entry_ebitda is None or entry_ebitda <= 0:
        logger.debug("LBO for %s skipped: EBITDA could not be established", quote.ticker)
        return LboResult.empty()

    purchase_price = assumptions.purchase_price
    holding_period = int(assumptions.holding_period)
    if holding_period < 1:
        logger.debug("LBO for %s skipped: holding period %s", quote.ticker, assumptions.holding_period)
        return LboResult.empty()

    is_mezzanine = scenario_id in MEZZANINE_SCENARIOS and isinstance(assumptions, MezzanineLboAssumptions)
    is_recap = scenario_id in RECAP_SCENARIOS and isinstance(assumptions, RecapLboAssumptions)

    # Sources & uses
    if is_mezzanine:
        mezzanine_financing = min(assumptions.debt_financing, assumptions.mezzanine_financing)
        senior_financing = assumptions.debt_financing - mezzanine_financing
        initial_senior_debt = purchase_price * senior_financing
        initial_mezzanine_debt = purchase_price * mezzanine_financing
    else:
        initial_senior_debt = purchase_price * assumptions.debt_financing
        initial_mezzanine_debt = 0.0

    initial_equity = purchase_price - (initial_senior_debt + initial_mezzanine_debt)

    projections: List[LboProjectionRow] = []
    ebitda = entry_ebitda
    senior_debt = initial_senior_debt
    mezzanine_debt = initial_mezzanine_debt
    dividends_paid = 0.0

    for year in range(1, holding_period + 1):
        ebitda *= 1 + assumptions.ebitda_growth

        if is_recap and year == assumptions.recap_year:
            equity_value_pre_recap = ebitda * assumptions.exit_multiple - (senior_debt + mezzanine_debt)
            # No dividend out of negative equity
            dividend = max(0.0, equity_value_pre_recap * assumptions.dividend_payout)
            dividends_paid += dividend
            senior_debt += dividend

        cash_interest = senior_debt * assumptions.interest_rate
        pik_interest = mezzanine_debt * assumptions.mezzanine_interest_rate if is_mezzanine else 0.0

        cash_flow = (ebitda - cash_interest) * (1 - quote.tax_rate)
        debt_paydown = min(senior_debt, max(cash_flow, 0.0))

        senior_debt -= debt_paydown
        mezzanine_debt += pik_interest

        projections.append(
            LboProjectionRow(
                year=year,
                ebitda=ebitda,
                cash_flow=cash_flow,
                ending_debt_balance=senior_debt + mezzanine_debt,
            )
        )

    final_row = projections[-1]
    exit_enterprise_value = final_row.ebitda * assumptions.exit_multiple
    exit_equity_value = exit_enterprise_value - final_row.ending_debt_balance
    total_cash_to_sponsor = exit_equity_value + dividends_paid

    if initial_equity <= 0:
        moic, irr = 0.0, 0.0
    elif total_cash_to_sponsor >= 0:
        moic = total_cash_to_sponsor / initial_equity
        irr = _irr_from_moic(moic, holding_period)
    else:
        moic, irr = 0.0, -1.0

    return LboResult(
        projections=projections,
        initial_senior_debt=initial_senior_debt,
        initial_mezzanine_debt=initial_mezzanine_debt,
        initial_equity=initial_equity,
        exit_equity_value=exit_equity_value,
        total_dividends_paid=dividends_paid,
        irr=irr,
        moic=moic,
    )
