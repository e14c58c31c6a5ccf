"""
analysis.py — Generated Analysis Endpoints

Endpoints:
- POST /analysis/{analysis_type} → SWOT, investment memo, news digest or
  pitch deck text for a ticker (pitch deck also returns parsed slides)

Generated content is cached in-process per ticker and analysis type; the
"not set up" placeholder returned without an API key is never cached.
"""

from enum import Enum

from fastapi import APIRouter, HTTPException

from pitchly.api.v1.schemas import AnalysisRequest
from pitchly.core.cache import analysis_key, cache_get, cache_set
from pitchly.core.config import settings
from pitchly.core.logging import get_logger
from pitchly.services.ai.llm_client import (
    MISSING_KEY_MESSAGE,
    AnalysisGenerationError,
    generate_analysis,
    parse_pitch_deck,
)
from pitchly.services.ai.prompts import (
    ANALYSIS_MEMO,
    ANALYSIS_NEWS,
    ANALYSIS_PITCH_DECK,
    ANALYSIS_SWOT,
)

logger = get_logger(__name__)

router = APIRouter(
    prefix="/analysis",
    tags=["analysis"]
)


class AnalysisType(str, Enum):
    SWOT = ANALYSIS_SWOT
    MEMO = ANALYSIS_MEMO
    PITCH_DECK = ANALYSIS_PITCH_DECK
    NEWS = ANALYSIS_NEWS


@router.post("/{analysis_type}")
def create_analysis(analysis_type: AnalysisType, request: AnalysisRequest):
    """
    POST /analysis/{analysis_type}

    Raises:
        502: the LLM call failed
    """
    ticker = request.ticker.strip().upper()
    if not ticker:
        raise HTTPException(status_code=400, detail="Ticker is required and cannot be empty")

    key = analysis_key(ticker, analysis_type.value)
    cached = None if request.refresh else cache_get(key, settings.ANALYSIS_CACHE_TTL_SECONDS)
    if cached is not None:
        logger.debug(f"Serving cached {analysis_type.value} for {ticker}")
        return {**cached, "cached": True}

    try:
        content = generate_analysis(ticker, request.company_name or ticker, analysis_type.value)
    except AnalysisGenerationError as e:
        raise HTTPException(status_code=502, detail=f"Analysis generation failed for {ticker}: {e}")

    result = {"ticker": ticker, "analysis_type": analysis_type.value, "content": content}
    if analysis_type == AnalysisType.PITCH_DECK:
        result["slides"] = parse_pitch_deck(content)

    if content != MISSING_KEY_MESSAGE:
        cache_set(key, result)
    return {**result, "cached": False}
