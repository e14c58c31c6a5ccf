"""
Unit tests for core/state.py (dashboard reducers).
"""

import pytest

from conftest import make_quote
from pitchly.core.state import (
    DIRECTION_DOWN,
    DIRECTION_UP,
    MODEL_DCF,
    MODEL_LBO,
    SORT_ASC,
    SORT_DESC,
    DashboardState,
    alert_message,
    check_price_alert,
    clear_price_alert,
    load_dashboard,
    load_failed,
    refresh_quote,
    select_scenario,
    select_tab,
    set_price_alert,
    sort_peers,
    sorted_companies,
    store_analysis,
    update_model_input,
)
from pitchly.data.reference import ScenarioId
from pitchly.services.modeling.types import InvalidAssumptionError
from pitchly.services.workflow import generate_valuation_workflow


@pytest.fixture
def peers():
    return [
        make_quote(ticker="MSFT", market_cap=3000.0, pe_ratio=30.0),
        make_quote(ticker="META", market_cap=None, pe_ratio=25.0),
        make_quote(ticker="GOOGL", market_cap=2000.0, pe_ratio=22.0),
    ]


@pytest.fixture
def loaded_state(tech_quote, peers) -> DashboardState:
    workflow = generate_valuation_workflow(tech_quote, peers)
    return load_dashboard(DashboardState(), workflow, tech_quote)


# Test loading / navigation
def test_load_dashboard(loaded_state):
    assert loaded_state.ticker == "AAPL"
    assert loaded_state.quote.price == 100.0
    assert loaded_state.lbo_scenario == ScenarioId.BASE_CASE
    assert loaded_state.error is None


def test_switching_ticker_resets_session(loaded_state):
    state = set_price_alert(select_tab(loaded_state, "memo"), 120.0)
    state = store_analysis(state, "memo", "text")

    other = make_quote(ticker="TSLA")
    reloaded = load_dashboard(state, generate_valuation_workflow(other), other)

    assert reloaded.ticker == "TSLA"
    assert reloaded.current_tab == "valuation_models"
    assert reloaded.alert.active is False
    assert reloaded.analysis_content == {}


def test_reloading_same_ticker_keeps_selection(loaded_state, tech_quote):
    state = select_scenario(loaded_state, ScenarioId.IPO_EXIT)
    reloaded = load_dashboard(state, state.workflow, tech_quote)
    assert reloaded.lbo_scenario == ScenarioId.IPO_EXIT


def test_load_failed():
    state = load_failed(DashboardState(), "zzz", "Ticker not found")

    assert state.ticker == "ZZZ"
    assert state.error == "Ticker not found"
    assert state.workflow is None


def test_select_scenario_must_exist(loaded_state):
    with pytest.raises(InvalidAssumptionError):
        select_scenario(loaded_state, ScenarioId.CLUB_DEAL)


def test_select_tab_rejects_unknown(loaded_state):
    assert select_tab(loaded_state, "peer_comparison").current_tab == "peer_comparison"
    with pytest.raises(ValueError):
        select_tab(loaded_state, "charts")


def test_store_analysis_does_not_mutate(loaded_state):
    state = store_analysis(loaded_state, "swot", "S/W/O/T")

    assert state.analysis_content == {"swot": "S/W/O/T"}
    assert loaded_state.analysis_content == {}


# Test model inputs
def test_update_dcf_input_recomputes(loaded_state):
    before = loaded_state.workflow.dcf.result.outputs.enterprise_value
    state = update_model_input(loaded_state, MODEL_DCF, "wacc", 0.12)

    assert state.workflow.dcf.inputs["wacc"].value == 0.12
    assert state.workflow.dcf.result.outputs.enterprise_value < before
    assert loaded_state.workflow.dcf.inputs["wacc"].value == 0.095


def test_update_lbo_input_only_touches_selected_scenario(loaded_state):
    state = select_scenario(loaded_state, ScenarioId.MEZZANINE_DEBT)
    state = update_model_input(state, MODEL_LBO, "mezzanine_financing", 0.25)

    assert state.workflow.scenario(ScenarioId.MEZZANINE_DEBT).inputs["mezzanine_financing"].value == 0.25
    assert state.workflow.scenario(ScenarioId.BASE_CASE) is loaded_state.workflow.scenario(ScenarioId.BASE_CASE)


def test_update_model_input_errors(loaded_state):
    with pytest.raises(InvalidAssumptionError):
        update_model_input(loaded_state, "dcf", "unknown", 1.0)
    with pytest.raises(InvalidAssumptionError):
        update_model_input(loaded_state, "comps", "wacc", 0.1)
    with pytest.raises(InvalidAssumptionError):
        update_model_input(DashboardState(), MODEL_DCF, "wacc", 0.1)


# Test price alerts
def test_set_price_alert_direction(loaded_state):
    assert set_price_alert(loaded_state, 120.0).alert.direction == DIRECTION_UP
    assert set_price_alert(loaded_state, 80.0).alert.direction == DIRECTION_DOWN


@pytest.mark.parametrize("target", [0, -5.0, "abc", None])
def test_set_price_alert_rejects_invalid(loaded_state, target):
    with pytest.raises(InvalidAssumptionError, match="Please enter a valid price."):
        set_price_alert(loaded_state, target)


def test_refresh_triggers_alert_once(loaded_state):
    state = set_price_alert(loaded_state, 110.0)

    state = refresh_quote(state, {"ticker": "AAPL", "currentPrice": 105.0})
    assert state.alert.triggered is False
    assert alert_message(state) is None

    state = refresh_quote(state, {"ticker": "AAPL", "currentPrice": 111.0})
    assert state.alert.triggered is True
    assert alert_message(state) == "AAPL crossed your target of $110.00. Current price: $111.00."

    assert check_price_alert(state) is state


def test_downward_alert(loaded_state):
    state = set_price_alert(loaded_state, 90.0)
    state = refresh_quote(state, {"ticker": "AAPL", "currentPrice": 89.5})
    assert state.alert.triggered is True


def test_clear_price_alert(loaded_state):
    state = clear_price_alert(set_price_alert(loaded_state, 120.0))
    assert state.alert.active is False
    assert state.alert.target is None


def test_refresh_without_quote_is_noop():
    state = DashboardState()
    assert refresh_quote(state, {"currentPrice": 1.0}) is state


# Test peer sorting
def test_sort_peers_toggle(loaded_state):
    assert loaded_state.peer_sort.column == "marketCap"
    assert loaded_state.peer_sort.direction == SORT_DESC

    toggled = sort_peers(loaded_state, "marketCap")
    assert toggled.peer_sort.direction == SORT_ASC

    switched = sort_peers(toggled, "peRatio")
    assert switched.peer_sort.column == "peRatio"
    assert switched.peer_sort.direction == SORT_DESC


def test_sort_peers_unknown_column(loaded_state):
    with pytest.raises(ValueError):
        sort_peers(loaded_state, "beta")


def test_sorted_companies_missing_values_last(loaded_state):
    assert [q.ticker for q in sorted_companies(loaded_state)] == ["MSFT", "GOOGL", "AAPL", "META"]

    ascending = sort_peers(loaded_state, "marketCap")
    assert [q.ticker for q in sorted_companies(ascending)] == ["AAPL", "GOOGL", "MSFT", "META"]
