"""
state.py — Dashboard session state and pure reducers

Purpose:
- Hold everything one dashboard session shows (quote, workflow, selected
  LBO scenario, tab, price alert, peer sort) in a single immutable record
- Provide reducer functions: (state, event data) → new state

This module does NOT:
- Persist state anywhere; callers keep the latest DashboardState.
- Fetch data; refreshes receive an already-fetched payload.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional

from pitchly.core.logging import get_logger
from pitchly.data.reference import ScenarioId
from pitchly.services.modeling.comps import ev_ebitda_multiple
from pitchly.services.modeling.quote_builder import refresh_quote_price
from pitchly.services.modeling.scenarios import update_input_value
from pitchly.services.modeling.types import InvalidAssumptionError, Quote
from pitchly.services.workflow import ValuationWorkflow, build_dcf_model, build_lbo_scenario
from pitchly.utils.formatting import currency

logger = get_logger(__name__)


TAB_VALUATION_MODELS = "valuation_models"
TAB_PEER_COMPARISON = "peer_comparison"
ANALYSIS_TABS = ("swot", "memo", "news", "pitch_deck")
TABS = (TAB_VALUATION_MODELS, TAB_PEER_COMPARISON, *ANALYSIS_TABS)

DIRECTION_UP = "up"
DIRECTION_DOWN = "down"

SORT_ASC = "asc"
SORT_DESC = "desc"

MODEL_DCF = "dcf"
MODEL_LBO = "lbo"

# Peer table column → Quote accessor
PEER_SORT_COLUMNS = {
    "ticker": lambda q: q.ticker,
    "marketCap": lambda q: q.market_cap,
    "ebitda": lambda q: q.ebitda,
    "revenueGrowth": lambda q: q.revenue_growth,
    "peRatio": lambda q: q.pe_ratio,
    "evEbitda": ev_ebitda_multiple,
}


@dataclass(frozen=True)
class PriceAlert:
    target: Optional[float] = None
    active: bool = False
    triggered: bool = False
    direction: Optional[str] = None


@dataclass(frozen=True)
class PeerSort:
    column: str = "marketCap"
    direction: str = SORT_DESC


@dataclass(frozen=True)
class DashboardState:
    ticker: str = ""
    quote: Optional[Quote] = None
    workflow: Optional[ValuationWorkflow] = None
    error: Optional[str] = None
    lbo_scenario: ScenarioId = ScenarioId.BASE_CASE
    current_tab: str = TAB_VALUATION_MODELS
    alert: PriceAlert = PriceAlert()
    peer_sort: PeerSort = PeerSort()
    analysis_content: Dict[str, Any] = field(default_factory=dict)


# -----------------------------------------------------------------------------
# Loading / navigation
# -----------------------------------------------------------------------------

def load_dashboard(state: DashboardState, workflow: ValuationWorkflow, quote: Quote) -> DashboardState:
    """
    Install a freshly generated workflow.

    Switching to a different ticker resets scenario, tab, alert and cached
    analysis content.
    """
    if quote.ticker != state.ticker:
        state = DashboardState(peer_sort=state.peer_sort)
    return replace(state, ticker=quote.ticker, quote=quote, workflow=workflow, error=None)


def load_failed(state: DashboardState, ticker: str, error: str) -> DashboardState:
    return replace(DashboardState(), ticker=ticker.upper(), error=error)


def select_scenario(state: DashboardState, scenario_id: ScenarioId) -> DashboardState:
    scenario_id = ScenarioId(scenario_id)
    if state.workflow is None or state.workflow.scenario(scenario_id) is None:
        raise InvalidAssumptionError(f"Scenario {scenario_id.value} is not available for {state.ticker}")
    return replace(state, lbo_scenario=scenario_id)


def select_tab(state: DashboardState, tab: str) -> DashboardState:
    if tab not in TABS:
        raise ValueError(f"Unknown tab: {tab}")
    return replace(state, current_tab=tab)


def store_analysis(state: DashboardState, analysis_type: str, content: Any) -> DashboardState:
    analysis_content = dict(state.analysis_content)
    analysis_content[analysis_type] = content
    return replace(state, analysis_content=analysis_content)


# -----------------------------------------------------------------------------
# Model inputs
# -----------------------------------------------------------------------------

def update_model_input(state: DashboardState, model: str, key: str, value: float) -> DashboardState:
    """
    Change one input and recompute the affected model.

    model is "dcf" or "lbo" (the currently selected LBO scenario).

    Raises:
        InvalidAssumptionError: unknown input, or the new value makes the
            assumption set invalid (state is left unchanged)
    """
    workflow = state.workflow
    if workflow is None or state.quote is None:
        raise InvalidAssumptionError("No dashboard is loaded")

    if model == MODEL_DCF:
        inputs = update_input_value(workflow.dcf.inputs, key, value)
        workflow = replace(workflow, dcf=build_dcf_model(state.quote, inputs))
    elif model == MODEL_LBO:
        current = workflow.scenario(state.lbo_scenario)
        if current is None:
            raise InvalidAssumptionError(f"Scenario {state.lbo_scenario.value} is not loaded")
        inputs = update_input_value(current.inputs, key, value)
        updated = build_lbo_scenario(state.quote, state.lbo_scenario, inputs=inputs)
        workflow = replace(
            workflow,
            lbo_scenarios=[
                updated if s.scenario_id == state.lbo_scenario else s
                for s in workflow.lbo_scenarios
            ],
        )
    else:
        raise InvalidAssumptionError(f"Unknown model: {model}")

    return replace(state, workflow=workflow)


# -----------------------------------------------------------------------------
# Realtime refresh & price alerts
# -----------------------------------------------------------------------------

def refresh_quote(state: DashboardState, payload: Mapping[str, Any]) -> DashboardState:
    """Apply a polled quote (price fields only) and evaluate the price alert."""
    if state.quote is None:
        return state
    return check_price_alert(replace(state, quote=refresh_quote_price(state.quote, payload)))


def set_price_alert(state: DashboardState, target: float) -> DashboardState:
    """
    Arm an alert; direction is "up" when the target is above the current price.

    Raises:
        InvalidAssumptionError: target is not a positive number
    """
    if isinstance(target, bool) or not isinstance(target, (int, float)) or not target > 0:
        raise InvalidAssumptionError("Please enter a valid price.")

    current_price = state.quote.price if state.quote else None
    direction = DIRECTION_UP if current_price is not None and target > current_price else DIRECTION_DOWN
    return replace(state, alert=PriceAlert(target=float(target), active=True, direction=direction))


def clear_price_alert(state: DashboardState) -> DashboardState:
    return replace(state, alert=PriceAlert())


def check_price_alert(state: DashboardState) -> DashboardState:
    """Mark the alert triggered once the price crosses the target; fires only once."""
    alert = state.alert
    if not alert.active or alert.triggered or state.quote is None or state.quote.price is None:
        return state

    price = state.quote.price
    crossed = (
        (alert.direction == DIRECTION_UP and price >= alert.target)
        or (alert.direction == DIRECTION_DOWN and price <= alert.target)
    )
    if not crossed:
        return state

    logger.info("Price alert for %s triggered at %.2f (target %.2f)", state.ticker, price, alert.target)
    return replace(state, alert=replace(alert, triggered=True))


def alert_message(state: DashboardState) -> Optional[str]:
    if not state.alert.triggered or state.quote is None:
        return None
    return (
        f"{state.ticker} crossed your target of {currency(state.alert.target)}. "
        f"Current price: {currency(state.quote.price)}."
    )


# -----------------------------------------------------------------------------
# Peer table
# -----------------------------------------------------------------------------

def sort_peers(state: DashboardState, column: str) -> DashboardState:
    """Same column toggles direction; a new column starts descending."""
    if column not in PEER_SORT_COLUMNS:
        raise ValueError(f"Unknown peer sort column: {column}")
    if state.peer_sort.column == column:
        direction = SORT_ASC if state.peer_sort.direction == SORT_DESC else SORT_DESC
    else:
        direction = SORT_DESC
    return replace(state, peer_sort=PeerSort(column=column, direction=direction))


def sorted_companies(state: DashboardState) -> List[Quote]:
    """Subject plus peers ordered by the current sort; missing values sort last."""
    if state.quote is None:
        return []
    peers = state.workflow.peers if state.workflow else []
    companies = [state.quote, *peers]

    accessor = PEER_SORT_COLUMNS[state.peer_sort.column]
    descending = state.peer_sort.direction == SORT_DESC
    present = [c for c in companies if accessor(c) is not None]
    missing = [c for c in companies if accessor(c) is None]
    return sorted(present, key=accessor, reverse=descending) + missing
