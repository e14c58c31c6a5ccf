"""
dashboard.py — Full Valuation Workflow Endpoint

Endpoints:
- GET /dashboard/{ticker}?use_ai=true&sort=marketCap&order=desc → quote, peers,
  DCF/DDM model, every LBO scenario for the ticker's domain, the peer
  comparison and the sorted peer table

High-Level Flow:
1. Fetch the subject quote (hard failure → 404/502)
2. Fetch peers sequentially (individual failures are skipped)
3. Optionally ask the LLM for LBO starting points
4. Run the valuation workflow
5. Load it into a DashboardState and order the peer table
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from pitchly.api.deps import get_assumption_source, get_quote_source, raise_quote_error
from pitchly.core.logging import get_logger
from pitchly.core.state import (
    PEER_SORT_COLUMNS,
    SORT_ASC,
    SORT_DESC,
    DashboardState,
    PeerSort,
    load_dashboard,
    sorted_companies,
)
from pitchly.data.quote_client import QuoteFetchError, QuoteSource
from pitchly.services.modeling.scenarios import scenarios_for_domain
from pitchly.services.workflow import AssumptionSource, generate_valuation_workflow

logger = get_logger(__name__)

router = APIRouter(
    prefix="/dashboard",
    tags=["dashboard"]
)


@router.get("/{ticker}")
def get_dashboard(
    ticker: str,
    use_ai: bool = Query(True, description="Seed LBO inputs from the LLM when it is configured"),
    sort: str = Query("marketCap", description="Peer table column"),
    order: str = Query(SORT_DESC, pattern=f"^({SORT_ASC}|{SORT_DESC})$"),
    source: QuoteSource = Depends(get_quote_source),
    assumption_source: Optional[AssumptionSource] = Depends(get_assumption_source),
):
    ticker = ticker.strip().upper()
    if sort not in PEER_SORT_COLUMNS:
        raise HTTPException(status_code=422, detail=f"Unknown sort column: {sort}")

    try:
        quote = source.get_quote(ticker)
    except QuoteFetchError as e:
        raise_quote_error(ticker, e)

    peers = source.get_peer_quotes(ticker)
    workflow = generate_valuation_workflow(
        quote,
        peers,
        assumption_source=assumption_source if use_ai else None,
    )

    state = load_dashboard(DashboardState(peer_sort=PeerSort(column=sort, direction=order)), workflow, quote)

    return {
        "quote": quote,
        "scenarios": scenarios_for_domain(quote.domain),
        "workflow": workflow,
        "companies": sorted_companies(state),
    }
