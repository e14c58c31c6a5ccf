"""
Unit tests for sentiment.py and utils/formatting.py
"""

import math

import pytest

from conftest import make_quote
from pitchly.data.reference import ScenarioId
from pitchly.services.modeling.sentiment import (
    BADGE_ATTRACTIVE_IRR,
    BADGE_BEARISH,
    BADGE_BULLISH,
    BADGE_FAIR_VALUE,
    BADGE_INCOMPLETE,
    BADGE_LIMITED_DATA,
    BADGE_NEUTRAL,
    BADGE_OVERVALUED,
    BADGE_UNDERVALUED,
    BADGE_WEAK_IRR,
    classify_daily_move,
    classify_dcf,
    classify_lbo,
    classify_peer_positions,
)
from pitchly.services.modeling.types import NOT_AVAILABLE, DcfResult
from pitchly.utils.formatting import currency, large_number, percent, ratio


def _dcf_result(upside, model_type="Standard", note=None, error=None) -> DcfResult:
    return DcfResult(
        model_type=model_type,
        projections=[],
        present_value_of_cash_flows=0.0,
        present_value_of_terminal_value=0.0,
        enterprise_value=0.0,
        equity_value=0.0,
        per_share_value=NOT_AVAILABLE if upside == NOT_AVAILABLE else 100.0,
        potential_upside=upside,
        derived_revenue_note=note,
        error=error,
    )


# Test DCF thresholds
@pytest.mark.parametrize(
    "upside,badge",
    [
        (0.2, BADGE_UNDERVALUED),
        (0.15, BADGE_FAIR_VALUE),
        (0.0, BADGE_FAIR_VALUE),
        (-0.15, BADGE_FAIR_VALUE),
        (-0.2, BADGE_OVERVALUED),
    ],
)
def test_classify_dcf_thresholds(upside, badge):
    assert classify_dcf(_dcf_result(upside))[0] == badge


def test_classify_dcf_incomplete_uses_engine_error():
    badge, text = classify_dcf(_dcf_result(NOT_AVAILABLE, error="Missing or invalid Shares Outstanding data."))

    assert badge == BADGE_INCOMPLETE
    assert text == "Missing or invalid Shares Outstanding data."


def test_classify_dcf_note_placement():
    """DDM note leads the commentary; an imputed-revenue note trails it."""
    _, ddm_text = classify_dcf(_dcf_result(0.0, model_type="Financials", note="DDM note."))
    _, fcff_text = classify_dcf(_dcf_result(0.0, note="Revenue note."))

    assert ddm_text.startswith("DDM note. ")
    assert fcff_text.endswith(" Revenue note.")


def test_classify_dcf_mentions_assumed_tax():
    quote = make_quote(tax_rate=0.265, tax_rate_is_assumed=True)
    _, text = classify_dcf(_dcf_result(0.0), quote)

    assert text.endswith("A statutory tax rate of 26.50% was assumed.")


# Test LBO thresholds
def test_classify_lbo_attractive():
    badge, text = classify_lbo(0.25, ScenarioId.MEZZANINE_DEBT)

    assert badge == BADGE_ATTRACTIVE_IRR
    assert "25.00%" in text
    assert "mezzanine" in text


def test_classify_lbo_threshold_is_strict():
    badge, text = classify_lbo(0.20)

    assert badge == BADGE_WEAK_IRR
    assert text == "The projected IRR of 20.00% may not meet typical private equity return hurdles."


def test_classify_lbo_recap_text_shared():
    _, dividend = classify_lbo(0.3, ScenarioId.DIVIDEND_RECAP)
    _, leveraged = classify_lbo(0.3, "leveragedRecap")
    assert dividend == leveraged


# Test peers and daily move
def test_classify_peer_positions_limited_data():
    assert classify_peer_positions("TSLA", None)[0] == BADGE_LIMITED_DATA


@pytest.mark.parametrize(
    "change,badge",
    [(3.5, BADGE_BULLISH), (3.0, BADGE_NEUTRAL), (-3.5, BADGE_BEARISH), (None, BADGE_NEUTRAL)],
)
def test_classify_daily_move(change, badge):
    assert classify_daily_move(change)[0] == badge


def test_classify_daily_move_text():
    assert classify_daily_move(-4.25)[1] == "Shares are down 4.25% today amid selling pressure."


# Test formatting helpers
def test_currency():
    assert currency(-1234.5) == "-$1,234.50"
    assert currency(0) == "$0.00"


def test_large_number():
    assert large_number(1.5e9) == "$1.50B"
    assert large_number(2.5e12, is_currency=False) == "2.50T"
    assert large_number(999.0) == "$999"


def test_percent_and_ratio():
    assert percent(0.1234) == "12.34%"
    assert ratio(12.5) == "12.50x"


@pytest.mark.parametrize("value", [None, "N/A", True, math.nan, math.inf])
def test_formatting_not_available(value):
    assert currency(value) == "N/A"
    assert large_number(value) == "N/A"
    assert percent(value) == "N/A"
    assert ratio(value) == "N/A"
