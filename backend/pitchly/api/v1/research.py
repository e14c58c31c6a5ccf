"""
research.py — Structured Valuation Research Endpoints

Endpoints:
- POST /research/valuation  → question-driven valuation analysis (typed JSON)
  plus the web sources it cites
- POST /research/pitch-deck → five-slide JSON deck built from an analysis

Analyses are cached per company and question; pitch decks are not cached.

Raises:
    503: LLM not configured
    502: the LLM call failed or returned unusable JSON
"""

from typing import NoReturn

from fastapi import APIRouter, HTTPException

from pitchly.api.v1.schemas import ValuationPitchDeckRequest, ValuationQuestionRequest
from pitchly.core.cache import cache_get, cache_set, make_key
from pitchly.core.config import settings
from pitchly.core.logging import get_logger
from pitchly.services.ai.llm_client import (
    AnalysisGenerationError,
    LLMNotConfiguredError,
    generate_valuation_analysis,
    generate_valuation_pitch_deck,
)

logger = get_logger(__name__)

router = APIRouter(
    prefix="/research",
    tags=["research"]
)

CACHE_NAMESPACE = "valuation"


def _raise_generation_error(subject: str, e: AnalysisGenerationError) -> NoReturn:
    if isinstance(e, LLMNotConfiguredError):
        raise HTTPException(status_code=503, detail=str(e)) from e
    logger.error(f"Research generation failed for {subject}: {e}")
    raise HTTPException(status_code=502, detail=f"Research generation failed for {subject}: {e}") from e


@router.post("/valuation")
def create_valuation_analysis(request: ValuationQuestionRequest):
    company_name = request.company_name.strip()
    question = request.question.strip()
    if not company_name or not question:
        raise HTTPException(status_code=400, detail="Company name and question cannot be empty")

    key = make_key(CACHE_NAMESPACE, f"{company_name.lower()}|{question}")
    cached = None if request.refresh else cache_get(key, settings.ANALYSIS_CACHE_TTL_SECONDS)
    if cached is not None:
        logger.debug(f"Serving cached valuation analysis for {company_name}")
        return {**cached, "cached": True}

    try:
        report = generate_valuation_analysis(company_name, question)
    except AnalysisGenerationError as e:
        _raise_generation_error(company_name, e)

    result = report.model_dump()
    cache_set(key, result)
    return {**result, "cached": False}


@router.post("/pitch-deck")
def create_valuation_pitch_deck(request: ValuationPitchDeckRequest):
    analysis = request.analysis
    try:
        slides = generate_valuation_pitch_deck(analysis)
    except AnalysisGenerationError as e:
        _raise_generation_error(analysis.ticker_symbol, e)

    return {
        "ticker": analysis.ticker_symbol,
        "slides": [slide.model_dump() for slide in slides],
    }
