"""
workflow.py — Valuation workflow orchestration

Purpose:
- Run DCF/DDM, every LBO scenario of the company's domain and the peer
  comparison for one Quote, attaching badges and commentary
- Recompute a single model after an input change

Core Workflow:
1. build inputs (defaults, plus optional AI overrides for LBO scenarios)
2. inputs → typed assumptions (validated)
3. engine → outputs
4. classifier → (badge, commentary)

This module does NOT:
- Fetch quotes or call the LLM itself; an `AssumptionSource` callable is
  injected for AI starting points.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from pitchly.core.logging import get_logger
from pitchly.data.reference import DOMAIN_SCENARIOS, SCENARIO_NAMES, ScenarioId
from pitchly.services.modeling.comps import compare_peers
from pitchly.services.modeling.dcf import calculate_dcf
from pitchly.services.modeling.lbo import calculate_lbo
from pitchly.services.modeling.scenarios import (
    InputSet,
    InputValues,
    build_dcf_inputs,
    build_lbo_inputs,
    dcf_assumptions_from_inputs,
    dcf_badge,
    default_lbo_inputs,
    lbo_assumptions_from_inputs,
    update_input_value,
)
from pitchly.services.modeling.sentiment import classify_dcf, classify_lbo
from pitchly.services.modeling.types import (
    DcfAssumptions,
    LboAssumptions,
    ModelInput,
    PeerComparisonResult,
    Quote,
    ScenarioResult,
)

logger = get_logger(__name__)

WORKFLOW_TITLE = "Pitchly Valuation Workflow"

# (quote, scenario_id) → suggested LBO assumptions or None
AssumptionSource = Callable[[Quote, ScenarioId], Optional[Mapping[str, Any]]]


@dataclass
class DcfModelData:
    ticker: str
    badge: str
    model_type: str
    inputs: Dict[str, ModelInput]
    result: ScenarioResult


@dataclass
class LboScenarioData:
    ticker: str
    scenario_id: ScenarioId
    scenario_name: str
    inputs: Dict[str, ModelInput]
    result: ScenarioResult


@dataclass
class ValuationWorkflow:
    ticker: str
    dcf: DcfModelData
    lbo_scenarios: List[LboScenarioData]
    peer_comparison: PeerComparisonResult
    title: str = WORKFLOW_TITLE
    peers: List[Quote] = field(default_factory=list)

    def scenario(self, scenario_id: ScenarioId) -> Optional[LboScenarioData]:
        scenario_id = ScenarioId(scenario_id)
        for data in self.lbo_scenarios:
            if data.scenario_id == scenario_id:
                return data
        return None


# -----------------------------------------------------------------------------
# Single-model runs
# -----------------------------------------------------------------------------

def run_dcf_scenario(quote: Quote, assumptions: DcfAssumptions) -> ScenarioResult:
    outputs = calculate_dcf(quote, assumptions)
    badge, commentary = classify_dcf(outputs, quote)
    return ScenarioResult(sentiment_badge=badge, commentary_text=commentary, outputs=outputs)


def run_lbo_scenario(quote: Quote, assumptions: LboAssumptions, scenario_id: ScenarioId) -> ScenarioResult:
    scenario_id = ScenarioId(scenario_id)
    outputs = calculate_lbo(quote, assumptions, scenario_id)
    badge, commentary = classify_lbo(outputs.irr, scenario_id)
    return ScenarioResult(
        sentiment_badge=badge,
        commentary_text=commentary,
        outputs=outputs,
        scenario_id=scenario_id,
    )


def build_dcf_model(quote: Quote, inputs: Optional[InputValues] = None) -> DcfModelData:
    """
    DCF/DDM model data for a quote.

    Args:
        quote: Company snapshot
        inputs: Current input set; None → defaults for the quote's domain

    Raises:
        InvalidAssumptionError: inputs are missing a required field
    """
    input_set = build_dcf_inputs(quote)
    if inputs is not None:
        input_set = _merge_inputs(input_set, inputs)
    assumptions = dcf_assumptions_from_inputs(quote.domain, input_set)
    result = run_dcf_scenario(quote, assumptions)
    return DcfModelData(
        ticker=quote.ticker,
        badge=dcf_badge(quote.domain),
        model_type=result.outputs.model_type,
        inputs=input_set,
        result=result,
    )


def build_lbo_scenario(
    quote: Quote,
    scenario_id: ScenarioId,
    inputs: Optional[InputValues] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> LboScenarioData:
    """
    LBO model data for one scenario.

    `inputs` (a user-edited set) wins over `overrides` (AI starting points),
    which win over the defaults.

    Raises:
        InvalidAssumptionError: inputs fail the scenario variant's validation
    """
    scenario_id = ScenarioId(scenario_id)
    if inputs is not None:
        input_set = _merge_inputs(default_lbo_inputs(quote, scenario_id), inputs)
    else:
        input_set = build_lbo_inputs(quote, scenario_id, overrides)

    assumptions = lbo_assumptions_from_inputs(scenario_id, input_set)
    return LboScenarioData(
        ticker=quote.ticker,
        scenario_id=scenario_id,
        scenario_name=SCENARIO_NAMES[scenario_id],
        inputs=input_set,
        result=run_lbo_scenario(quote, assumptions, scenario_id),
    )


def _merge_inputs(defaults: InputSet, inputs: InputValues) -> InputSet:
    """Overlay user values on a default input set, keeping labels and ranges."""
    merged = dict(defaults)
    for key, entry in inputs.items():
        if isinstance(entry, ModelInput):
            merged[key] = entry
        else:
            merged = update_input_value(merged, key, entry)
    return merged


# -----------------------------------------------------------------------------
# Full workflow
# -----------------------------------------------------------------------------

def generate_valuation_workflow(
    quote: Quote,
    peers: Sequence[Quote] = (),
    assumption_source: Optional[AssumptionSource] = None,
) -> ValuationWorkflow:
    """
    Everything the dashboard shows for one ticker.

    Args:
        quote: Subject company
        peers: Resolved peer quotes (may be empty)
        assumption_source: Optional provider of AI-suggested LBO inputs;
            failures inside it are its own concern (return None)

    Returns:
        ValuationWorkflow with DCF, one LBO entry per domain scenario, and
        the peer comparison
    """
    logger.info("Generating valuation workflow for %s (%d peers)", quote.ticker, len(peers))

    dcf = build_dcf_model(quote)

    lbo_scenarios: List[LboScenarioData] = []
    for scenario_id in DOMAIN_SCENARIOS[quote.domain]:
        overrides = assumption_source(quote, scenario_id) if assumption_source else None
        lbo_scenarios.append(build_lbo_scenario(quote, scenario_id, overrides=overrides))

    return ValuationWorkflow(
        ticker=quote.ticker,
        dcf=dcf,
        lbo_scenarios=lbo_scenarios,
        peer_comparison=compare_peers(quote, peers),
        peers=list(peers),
    )
