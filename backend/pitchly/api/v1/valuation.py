"""
valuation.py — Model Recompute Endpoints

Purpose:
- Recompute a single model after the user moves a slider
- The client posts the quote it already holds plus the current input values;
  nothing is fetched

Endpoints:
- POST /valuation/dcf → DcfModelData
- POST /valuation/lbo → LboScenarioData

Invalid assumption combinations (e.g. recap year outside the hold period)
return 422.
"""

from fastapi import APIRouter, HTTPException

from pitchly.api.v1.schemas import DcfRequest, LboRequest
from pitchly.core.logging import get_logger
from pitchly.services.modeling.types import InvalidAssumptionError
from pitchly.services.workflow import build_dcf_model, build_lbo_scenario

logger = get_logger(__name__)

router = APIRouter(
    prefix="/valuation",
    tags=["valuation"]
)


@router.post("/dcf")
def recompute_dcf(request: DcfRequest):
    quote = request.quote.to_quote()
    try:
        return build_dcf_model(quote, request.inputs)
    except InvalidAssumptionError as e:
        logger.info(f"Rejected DCF inputs for {quote.ticker}: {e}")
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/lbo")
def recompute_lbo(request: LboRequest):
    quote = request.quote.to_quote()
    try:
        return build_lbo_scenario(quote, request.scenario_id, inputs=request.inputs)
    except InvalidAssumptionError as e:
        logger.info(f"Rejected LBO inputs for {quote.ticker}/{request.scenario_id.value}: {e}")
        raise HTTPException(status_code=422, detail=str(e))
