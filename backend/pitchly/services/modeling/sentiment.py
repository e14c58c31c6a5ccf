"""
sentiment.py — Sentiment badges and templated commentary.

Purpose:
- Map DCF upside, LBO IRR, peer positioning and the daily price move onto a
  short badge plus one or two sentences of commentary
- Keep every threshold as a module constant

This module does NOT:
- Run any model; it only reads engine outputs.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from pitchly.data.reference import ScenarioId
from pitchly.services.modeling.types import NOT_AVAILABLE, DcfResult, Quote
from pitchly.utils.formatting import percent

# Badge + commentary pair returned by every classifier
Classification = Tuple[str, str]


UNDERVALUED_UPSIDE = 0.15
OVERVALUED_UPSIDE = -0.15
ATTRACTIVE_IRR = 0.20
BULLISH_CHANGE_PERCENT = 3.0
BEARISH_CHANGE_PERCENT = -3.0

POSITION_PREMIUM = "premium"
POSITION_DISCOUNT = "discount"
POSITION_IN_LINE = "in-line"

BADGE_INCOMPLETE = "Incomplete"
BADGE_UNDERVALUED = "Undervalued"
BADGE_OVERVALUED = "Overvalued"
BADGE_FAIR_VALUE = "Fair Value"
BADGE_ATTRACTIVE_IRR = "Attractive IRR"
BADGE_WEAK_IRR = "Weak IRR"
BADGE_PREMIUM_HEAVY = "Premium-heavy"
BADGE_DISCOUNT_HEAVY = "Discount-heavy"
BADGE_MIXED = "Mixed"
BADGE_LIMITED_DATA = "Limited Data"
BADGE_BULLISH = "Bullish"
BADGE_BEARISH = "Bearish"
BADGE_NEUTRAL = "Neutral"


# -----------------------------------------------------------------------------
# DCF
# -----------------------------------------------------------------------------

def classify_dcf(result: DcfResult, quote: Optional[Quote] = None) -> Classification:
    """
    Valuation badge from potential upside.

    An "N/A" upside yields "Incomplete" with the engine's error message. The
    derived-revenue note is prepended for the DDM model and appended for the
    standard model; an assumed statutory tax rate adds a closing sentence.
    """
    upside = result.potential_upside
    if upside == NOT_AVAILABLE or not isinstance(upside, (int, float)):
        return BADGE_INCOMPLETE, result.error or "Valuation could not be completed with the available data."

    if upside > UNDERVALUED_UPSIDE:
        badge = BADGE_UNDERVALUED
        text = "The model indicates the stock is undervalued, driven by strong growth and margin assumptions."
    elif upside < OVERVALUED_UPSIDE:
        badge = BADGE_OVERVALUED
        text = "High valuation multiples are not supported by fundamentals, suggesting the stock is overvalued."
    else:
        badge = BADGE_FAIR_VALUE
        text = "The stock appears to be fairly valued, with market price aligning closely with intrinsic value estimates."

    note = result.derived_revenue_note
    if note:
        if result.model_type == "Financials":
            text = f"{note} {text}"
        else:
            text = f"{text} {note}"

    if quote is not None and quote.tax_rate_is_assumed:
        text += f" A statutory tax rate of {percent(quote.tax_rate)} was assumed."

    return badge, text


# -----------------------------------------------------------------------------
# LBO
# -----------------------------------------------------------------------------

_ATTRACTIVE_TEXT = {
    ScenarioId.DIVIDEND_RECAP: "The recapitalization strategy boosts IRR to {irr}, accelerating returns to the sponsor.",
    ScenarioId.LEVERAGED_RECAP: "The recapitalization strategy boosts IRR to {irr}, accelerating returns to the sponsor.",
    ScenarioId.MEZZANINE_DEBT: (
        "The use of mezzanine financing increases leverage, boosting the IRR to {irr} "
        "but elevating the risk profile."
    ),
    ScenarioId.IPO_EXIT: "A successful IPO exit at a premium multiple could yield an attractive IRR of {irr}.",
    ScenarioId.GROWTH_EQUITY: (
        "High growth assumptions lead to a strong {irr} IRR, typical of successful growth equity deals."
    ),
    ScenarioId.STRATEGIC_SALE: "An exit to a strategic buyer with synergies unlocks a {irr} IRR.",
    ScenarioId.CLUB_DEAL: "The scale of this club deal allows for stable cash flows, supporting a solid {irr} IRR.",
    ScenarioId.SPONSOR_TO_SPONSOR_EXIT: (
        "A secondary buyout thesis is supported by a compelling {irr} IRR, "
        "indicating further value creation potential."
    ),
    ScenarioId.MANAGEMENT_BUYOUT: "Aligning with management in an MBO proves fruitful, delivering a {irr} IRR.",
}
_ATTRACTIVE_DEFAULT = "This LBO delivers a {irr} IRR, driven by strong EBITDA growth and deleveraging."

_WEAK_TEXT = {
    ScenarioId.MEZZANINE_DEBT: "Even with additional leverage from mezzanine debt, the IRR of {irr} is weak.",
    ScenarioId.IPO_EXIT: "The projected IRR of {irr} is weak, suggesting the IPO premium may not justify the risk.",
    ScenarioId.GROWTH_EQUITY: "The projected {irr} IRR is low for a growth equity case, questioning the growth story.",
}
_WEAK_DEFAULT = "The projected IRR of {irr} may not meet typical private equity return hurdles."


def classify_lbo(irr: float, scenario_id: ScenarioId = ScenarioId.BASE_CASE) -> Classification:
    """IRR above ATTRACTIVE_IRR → "Attractive IRR", otherwise "Weak IRR"; text depends on the scenario."""
    scenario_id = ScenarioId(scenario_id)
    irr_text = percent(irr)
    if irr > ATTRACTIVE_IRR:
        template = _ATTRACTIVE_TEXT.get(scenario_id, _ATTRACTIVE_DEFAULT)
        return BADGE_ATTRACTIVE_IRR, template.format(irr=irr_text)
    template = _WEAK_TEXT.get(scenario_id, _WEAK_DEFAULT)
    return BADGE_WEAK_IRR, template.format(irr=irr_text)


# -----------------------------------------------------------------------------
# Peers
# -----------------------------------------------------------------------------

def classify_peer_positions(ticker: str, positions: Optional[Sequence[str]]) -> Classification:
    """
    Aggregate the subject's per-multiple positions.

    None means no peer set could be resolved.
    """
    if positions is None:
        return (
            BADGE_LIMITED_DATA,
            f"Peer data could not be automatically resolved for {ticker}. Comparison is unavailable.",
        )

    premium = sum(1 for p in positions if p == POSITION_PREMIUM)
    discount = sum(1 for p in positions if p == POSITION_DISCOUNT)

    if premium > discount:
        return (
            BADGE_PREMIUM_HEAVY,
            f"{ticker} trades at a significant premium across key multiples, reflecting strong market "
            "sentiment and growth expectations relative to peers.",
        )
    if discount > premium:
        return (
            BADGE_DISCOUNT_HEAVY,
            f"{ticker} appears to trade at a discount to its peer group, suggesting potential "
            "undervaluation or perceived higher risk.",
        )
    return (
        BADGE_MIXED,
        f"Valuation for {ticker} is mixed compared to peers, trading at a premium on some multiples "
        "and a discount on others.",
    )


# -----------------------------------------------------------------------------
# Daily move
# -----------------------------------------------------------------------------

def classify_daily_move(change_percent: Optional[float]) -> Classification:
    """change_percent is in percentage points (2.5 means +2.5%)."""
    if change_percent is None:
        return BADGE_NEUTRAL, "No intraday price change is available."
    if change_percent > BULLISH_CHANGE_PERCENT:
        return BADGE_BULLISH, f"Shares are up {change_percent:.2f}% today, showing strong buying interest."
    if change_percent < BEARISH_CHANGE_PERCENT:
        return BADGE_BEARISH, f"Shares are down {abs(change_percent):.2f}% today amid selling pressure."
    return BADGE_NEUTRAL, f"Shares moved {change_percent:.2f}% today, within a normal trading range."
