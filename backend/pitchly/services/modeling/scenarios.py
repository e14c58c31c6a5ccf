"""
scenarios.py — Model inputs, LBO scenario variants and AI override layer

Purpose:
- Build the default slider-bound inputs for the DCF/DDM model and for each
  LBO scenario of a company's domain
- Turn an input set back into typed assumptions (the LBO variant is chosen
  by scenario id and validated here, never inside the engine)
- Apply optional AI-suggested starting points on top of the defaults

Key Differences:
- Financials: ROE / retention / cost of equity inputs (DDM)
- Everything else: revenue growth / margin / tax / reinvestment / WACC inputs
- dividendRecap, leveragedRecap: add recap_year and dividend_payout
- mezzanineDebt: adds mezzanine_financing and mezzanine_interest_rate

Input sets are dicts keyed by assumption field name (snake_case). AI
overrides may use either snake_case or the camelCase keys the prompt asks
for.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional, Union

from pitchly.core.logging import get_logger
from pitchly.data.reference import (
    DOMAIN_SCENARIOS,
    MEZZANINE_SCENARIOS,
    RECAP_SCENARIOS,
    SCENARIO_NAMES,
    Domain,
    ScenarioId,
)
from pitchly.services.modeling.types import (
    DcfAssumptions,
    InvalidAssumptionError,
    LboAssumptions,
    MezzanineLboAssumptions,
    ModelInput,
    Quote,
    RecapLboAssumptions,
    RoeDcfAssumptions,
    StandardDcfAssumptions,
)

logger = get_logger(__name__)

InputSet = Dict[str, ModelInput]
InputValues = Mapping[str, Union[ModelInput, float, int]]


DEFAULT_TAX_RATE = 0.21
DEFAULT_ROE = 0.12
DEFAULT_INTEREST_RATE = 0.085
DEFAULT_EXIT_MULTIPLE = 15.0
EXIT_MULTIPLE_FLOOR = 8.0
EXIT_MULTIPLE_CAP = 25.0
EXIT_MULTIPLE_PE_FACTOR = 0.8

DCF_BADGE_STANDARD = "DCF Model"
DCF_BADGE_FINANCIALS = "DDM/ROE Model"

# camelCase keys returned by the LLM → assumption field names
OVERRIDE_KEYS: Dict[str, str] = {
    "debtFinancing": "debt_financing",
    "interestRate": "interest_rate",
    "ebitdaGrowth": "ebitda_growth",
    "exitMultiple": "exit_multiple",
    "holdingPeriod": "holding_period",
    "recapYear": "recap_year",
    "dividendPayout": "dividend_payout",
    "mezzanineFinancing": "mezzanine_financing",
    "mezzanineInterestRate": "mezzanine_interest_rate",
}

# Inputs that must hold whole numbers
INTEGER_INPUTS = frozenset({"holding_period", "recap_year"})


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def _value(entry: Union[ModelInput, float, int]) -> float:
    if isinstance(entry, ModelInput):
        return entry.value
    return entry


def input_values(inputs: InputValues) -> Dict[str, float]:
    """Plain {name: value} view of an input set."""
    return {key: _value(entry) for key, entry in inputs.items()}


def _require(values: Mapping[str, Any], *keys: str) -> None:
    missing = [k for k in keys if values.get(k) is None]
    if missing:
        raise InvalidAssumptionError(f"Missing assumption(s): {', '.join(missing)}")


def scenarios_for_domain(domain: Domain) -> List[Dict[str, str]]:
    """[{id, name}] for the LBO scenarios offered to a domain."""
    return [
        {"id": scenario.value, "name": SCENARIO_NAMES[scenario]}
        for scenario in DOMAIN_SCENARIOS[Domain(domain)]
    ]


# =============================================================================
# DCF / DDM
# =============================================================================

def build_dcf_inputs(quote: Quote) -> InputSet:
    """Default DCF (or DDM for Financials) inputs for a quote."""
    if quote.domain == Domain.FINANCIALS:
        return {
            "roe": ModelInput("Return on Equity (ROE)", quote.roe or DEFAULT_ROE, 0.05, 0.25, 0.005),
            "reinvestment_rate": ModelInput("Retention Ratio (1 - Payout)", 0.60, 0.2, 0.8, 0.01),
            "cost_of_equity": ModelInput("Cost of Equity", 0.10, 0.07, 0.15, 0.001),
            "terminal_growth": ModelInput("Terminal Growth", 0.02, 0.01, 0.04, 0.001),
        }

    return {
        "revenue_growth": ModelInput("Revenue Growth", 0.15, 0.0, 0.5, 0.005),
        "operating_margin": ModelInput("Operating Margin", 0.18, 0.0, 0.4, 0.005),
        "tax_rate": ModelInput(
            f"Tax Rate{quote.tax_rate_source or ''}",
            quote.tax_rate or DEFAULT_TAX_RATE,
            0.1,
            0.4,
            0.005,
        ),
        "reinvestment_rate": ModelInput("Reinvestment Rate", 0.30, 0.0, 1.0, 0.01),
        "wacc": ModelInput("WACC", 0.095, 0.05, 0.15, 0.001),
        "terminal_growth": ModelInput("Terminal Growth", 0.025, 0.01, 0.05, 0.001),
    }


def dcf_badge(domain: Domain) -> str:
    return DCF_BADGE_FINANCIALS if domain == Domain.FINANCIALS else DCF_BADGE_STANDARD


def dcf_assumptions_from_inputs(domain: Domain, inputs: InputValues) -> DcfAssumptions:
    """
    Typed DCF assumptions from an input set.

    Raises:
        InvalidAssumptionError: a required input is missing
    """
    values = input_values(inputs)
    if domain == Domain.FINANCIALS:
        _require(values, "roe", "reinvestment_rate", "cost_of_equity", "terminal_growth")
        return RoeDcfAssumptions(
            roe=float(values["roe"]),
            reinvestment_rate=float(values["reinvestment_rate"]),
            cost_of_equity=float(values["cost_of_equity"]),
            terminal_growth=float(values["terminal_growth"]),
        )

    _require(
        values,
        "revenue_growth", "operating_margin", "tax_rate",
        "reinvestment_rate", "wacc", "terminal_growth",
    )
    return StandardDcfAssumptions(
        revenue_growth=float(values["revenue_growth"]),
        operating_margin=float(values["operating_margin"]),
        tax_rate=float(values["tax_rate"]),
        reinvestment_rate=float(values["reinvestment_rate"]),
        wacc=float(values["wacc"]),
        terminal_growth=float(values["terminal_growth"]),
    )


# =============================================================================
# LBO
# =============================================================================

def default_exit_multiple(quote: Quote) -> float:
    """0.8x the P/E clamped to [8, 25]; 15x when the P/E is unknown."""
    if quote.pe_ratio:
        return min(EXIT_MULTIPLE_CAP, max(EXIT_MULTIPLE_FLOOR, quote.pe_ratio * EXIT_MULTIPLE_PE_FACTOR))
    return DEFAULT_EXIT_MULTIPLE


def default_lbo_inputs(quote: Quote, scenario_id: ScenarioId) -> InputSet:
    """Default LBO inputs for one scenario, before any AI override."""
    scenario_id = ScenarioId(scenario_id)
    holding_period = 5

    inputs: InputSet = {
        "purchase_price": ModelInput("Purchase Price", quote.market_cap or 0.0),
        "interest_rate": ModelInput(
            "Interest Rate", quote.interest_rate or DEFAULT_INTEREST_RATE, 0.05, 0.15, 0.005,
        ),
        "debt_financing": ModelInput("Total Debt Financing", 0.60, 0.2, 0.8, 0.01),
        "ebitda_growth": ModelInput("EBITDA Growth", 0.08, 0.0, 0.3, 0.005),
        "exit_multiple": ModelInput("Exit Multiple", default_exit_multiple(quote), 5.0, 40.0, 0.5),
        "holding_period": ModelInput("Holding Period", holding_period, 3, 7, 1),
    }

    if scenario_id in RECAP_SCENARIOS:
        inputs["recap_year"] = ModelInput("Recap Year", 3, 2, holding_period - 1, 1)
        inputs["dividend_payout"] = ModelInput("Dividend Payout %", 0.5, 0.1, 0.9, 0.05)
    elif scenario_id in MEZZANINE_SCENARIOS:
        inputs["mezzanine_financing"] = ModelInput("Mezzanine Financing %", 0.15, 0.05, 0.30, 0.01)
        inputs["mezzanine_interest_rate"] = ModelInput("Mezzanine Interest % (PIK)", 0.14, 0.10, 0.20, 0.005)

    return inputs


def lbo_assumptions_from_inputs(scenario_id: ScenarioId, inputs: InputValues) -> LboAssumptions:
    """
    Build and validate the LBO assumption variant for a scenario.

    Recap scenarios → RecapLboAssumptions, mezzanineDebt →
    MezzanineLboAssumptions, anything else → LboAssumptions. Variant fields
    that are missing take the variant's defaults.

    Raises:
        InvalidAssumptionError: missing base input or failed validation
    """
    scenario_id = ScenarioId(scenario_id)
    values = input_values(inputs)
    _require(
        values,
        "purchase_price", "debt_financing", "interest_rate",
        "ebitda_growth", "exit_multiple", "holding_period",
    )

    holding_period = values["holding_period"]
    if float(holding_period) != int(holding_period):
        raise InvalidAssumptionError(
            f"holding_period must be a whole number of years, got {holding_period}"
        )

    base = dict(
        purchase_price=float(values["purchase_price"]),
        debt_financing=float(values["debt_financing"]),
        interest_rate=float(values["interest_rate"]),
        ebitda_growth=float(values["ebitda_growth"]),
        exit_multiple=float(values["exit_multiple"]),
        holding_period=int(holding_period),
    )

    if scenario_id in RECAP_SCENARIOS:
        assumptions: LboAssumptions = RecapLboAssumptions(
            **base,
            recap_year=int(values.get("recap_year", 3)),
            dividend_payout=float(values.get("dividend_payout", 0.5)),
        )
    elif scenario_id in MEZZANINE_SCENARIOS:
        assumptions = MezzanineLboAssumptions(
            **base,
            mezzanine_financing=float(values.get("mezzanine_financing", 0.15)),
            mezzanine_interest_rate=float(values.get("mezzanine_interest_rate", 0.14)),
        )
    else:
        assumptions = LboAssumptions(**base)

    assumptions.validate()
    return assumptions


def update_input_value(inputs: InputSet, key: str, value: float) -> InputSet:
    """
    Copy of `inputs` with one value replaced.

    Changing holding_period also moves the recap_year ceiling.

    Raises:
        InvalidAssumptionError: unknown key or non-numeric value
    """
    if key not in inputs:
        raise InvalidAssumptionError(f"Unknown model input: {key}")
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InvalidAssumptionError(f"Model input {key} must be a finite number, got {value!r}")

    updated = dict(inputs)
    updated[key] = replace(inputs[key], value=value)
    if key == "holding_period" and "recap_year" in updated:
        updated["recap_year"] = replace(updated["recap_year"], max=value - 1)
    return updated


# -----------------------------------------------------------------------------
# AI override layer
# -----------------------------------------------------------------------------

def _acceptable_override(entry: ModelInput, key: str, value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return False
    if key in INTEGER_INPUTS and float(value) != int(value):
        return False
    if entry.min is not None and value < entry.min:
        return False
    if entry.max is not None and value > entry.max:
        return False
    return True


def apply_assumption_overrides(inputs: InputSet, overrides: Optional[Mapping[str, Any]]) -> InputSet:
    """
    Layer suggested values over default inputs.

    Unknown keys, non-numeric values and values outside an input's slider
    range are ignored (and logged); purchase_price is never overridden.
    """
    if not overrides:
        return dict(inputs)

    updated = dict(inputs)
    # holding_period first so recap_year is range-checked against the new ceiling
    ordered = sorted(overrides.items(), key=lambda item: OVERRIDE_KEYS.get(item[0], item[0]) != "holding_period")
    for raw_key, value in ordered:
        key = OVERRIDE_KEYS.get(raw_key, raw_key)
        if key == "purchase_price" or key not in updated:
            continue
        if not _acceptable_override(updated[key], key, value):
            logger.info("Ignoring out-of-range override %s=%r", raw_key, value)
            continue
        updated = update_input_value(updated, key, int(value) if key in INTEGER_INPUTS else float(value))
    return updated


def build_lbo_inputs(
    quote: Quote,
    scenario_id: ScenarioId,
    overrides: Optional[Mapping[str, Any]] = None,
) -> InputSet:
    """
    Default inputs for a scenario with optional AI overrides applied.

    An override set that makes the scenario inconsistent (e.g. mezzanine
    above total debt) is discarded as a whole.
    """
    defaults = default_lbo_inputs(quote, scenario_id)
    if not overrides:
        return defaults

    candidate = apply_assumption_overrides(defaults, overrides)
    try:
        lbo_assumptions_from_inputs(scenario_id, candidate)
    except InvalidAssumptionError as e:
        logger.warning("Discarding overrides for %s/%s: %s", quote.ticker, ScenarioId(scenario_id).value, e)
        return defaults
    return candidate
