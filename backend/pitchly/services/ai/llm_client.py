"""
llm_client.py — Generated analysis and LBO starting points via OpenAI.

This module sends the fixed prompt set to the OpenAI Chat Completions API and
returns plain text (SWOT, memo, news digest, pitch deck), parsed pitch deck
slides, a dict of suggested LBO assumptions, or the structured valuation
research (analysis + sources, and a JSON slide deck built from it).

Without an API key the text endpoints return a fixed "not set up" message and
the LBO helper returns None, so the dashboard still works offline. The
structured research raises LLMNotConfiguredError instead.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

from openai import OpenAI, OpenAIError

from pitchly.core.config import settings
from pitchly.core.logging import get_logger
from pitchly.data.reference import ScenarioId
from pitchly.services.ai.models import PitchDeckSlide, Source, ValuationAnalysis, ValuationReport
from pitchly.services.ai.prompts import (
    ANALYSIS_PROMPTS,
    DEFAULT_VALUATION_QUESTION,
    SYSTEM_PROMPT,
    build_analysis_prompt,
    build_lbo_assumptions_prompt,
    build_valuation_pitch_deck_prompt,
    build_valuation_prompt,
)
from pitchly.services.modeling.types import Quote

logger = get_logger(__name__)


MISSING_KEY_MESSAGE = "OpenAI API key is not set up. Cannot generate analysis."
FALLBACK_SLIDE_TITLE = "Generated Content"

_JSON_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)
_SLIDE_SPLIT_RE = re.compile(r"\n(?=##?#? |Slide \d+:?)")
_SLIDE_TITLE_RE = re.compile(r"##?#? ?|Slide \d+:? ?")


class AnalysisGenerationError(RuntimeError):
    """Raised when the LLM call fails or returns nothing usable."""


class LLMNotConfiguredError(AnalysisGenerationError):
    """No API key, or the LLM is disabled."""


def is_configured() -> bool:
    return bool(settings.LLM_ENABLED and settings.OPENAI_API_KEY and settings.OPENAI_API_KEY.strip())


def _build_client() -> OpenAI:
    return OpenAI(
        api_key=settings.OPENAI_API_KEY,
        timeout=settings.LLM_TIMEOUT_SECONDS,
        max_retries=settings.LLM_MAX_RETRIES,
    )


def _create(client: OpenAI, prompt: str, temperature: float, json_mode: bool = False) -> Any:
    """Return the first choice's message."""
    kwargs: Dict[str, Any] = {}
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}

    response = client.chat.completions.create(
        model=settings.OPENAI_MODEL,
        messages=[
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ],
        temperature=temperature,
        **kwargs,
    )
    return response.choices[0].message


def _complete(client: OpenAI, prompt: str, temperature: float, json_mode: bool = False) -> str:
    content = _create(client, prompt, temperature, json_mode).content
    if not content:
        raise AnalysisGenerationError("Empty response from LLM")
    return content


# ----------------------------------------------------------------------------
# Text analysis
# ----------------------------------------------------------------------------

def generate_analysis(
    ticker: str,
    company_name: str,
    analysis_type: str,
    client: Optional[OpenAI] = None,
) -> str:
    """
    Generate one analysis document.

    Args:
        ticker: Subject ticker
        company_name: Display name used in the prompt
        analysis_type: "swot", "memo", "pitch_deck" or "news"
        client: Optional pre-built OpenAI client

    Returns:
        Markdown text, or MISSING_KEY_MESSAGE when no key is configured

    Raises:
        ValueError: unknown analysis type
        AnalysisGenerationError: the API call failed
    """
    if analysis_type not in ANALYSIS_PROMPTS:
        raise ValueError(f"Unknown analysis type: {analysis_type}")

    if client is None:
        if not is_configured():
            logger.info("LLM not configured; returning placeholder for %s/%s", ticker, analysis_type)
            return MISSING_KEY_MESSAGE
        client = _build_client()

    prompt = build_analysis_prompt(analysis_type, ticker, company_name)
    logger.info("Generating %s analysis for %s", analysis_type, ticker)
    try:
        return _complete(client, prompt, temperature=0.4)
    except OpenAIError as e:
        logger.error("LLM call failed for %s/%s: %s", ticker, analysis_type, e)
        raise AnalysisGenerationError(str(e)) from e


def parse_pitch_deck(text: str) -> List[Dict[str, str]]:
    """
    Split generated markdown into slides.

    A slide starts at a line beginning with "#", "##", "###" or "Slide N:".
    Text before the first marker forms its own slide; empty text becomes a
    single "Generated Content" slide.
    """
    slides: List[Dict[str, str]] = []
    for chunk in _SLIDE_SPLIT_RE.split(text or ""):
        if not chunk.strip():
            continue
        lines = chunk.strip().split("\n")
        title = _SLIDE_TITLE_RE.sub("", lines[0]).strip()
        content = "\n".join(lines[1:]).strip()
        slides.append({"title": title, "content": content})

    if not slides:
        return [{"title": FALLBACK_SLIDE_TITLE, "content": text or ""}]
    return slides


# ----------------------------------------------------------------------------
# LBO starting points
# ----------------------------------------------------------------------------

def _strip_fence(text: str) -> str:
    cleaned = text.strip()
    match = _JSON_FENCE_RE.match(cleaned)
    return match.group(1) if match else cleaned


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Parse a JSON object, tolerating a surrounding ```json fence.

    Raises:
        ValueError: not valid JSON, or not an object
    """
    parsed = json.loads(_strip_fence(text))
    if not isinstance(parsed, dict):
        raise ValueError("Expected a JSON object")
    return parsed


def generate_lbo_assumptions(
    quote: Quote,
    scenario_id: ScenarioId,
    client: Optional[OpenAI] = None,
) -> Optional[Mapping[str, Any]]:
    """
    Suggested LBO inputs for a scenario (camelCase keys), or None.

    Failures are logged and yield None; the caller falls back to defaults.
    """
    if client is None:
        if not is_configured():
            return None
        client = _build_client()

    prompt = build_lbo_assumptions_prompt(quote, scenario_id)
    try:
        content = _complete(client, prompt, temperature=0.2, json_mode=True)
        return extract_json_object(content)
    except (OpenAIError, AnalysisGenerationError, ValueError) as e:
        logger.warning(
            "Failed to generate or parse LBO assumptions for %s/%s: %s",
            quote.ticker, ScenarioId(scenario_id).value, e,
        )
        return None


# ----------------------------------------------------------------------------
# Structured valuation research
# ----------------------------------------------------------------------------

def _require_client(client: Optional[OpenAI]) -> OpenAI:
    if client is not None:
        return client
    if not is_configured():
        raise LLMNotConfiguredError(MISSING_KEY_MESSAGE)
    return _build_client()


def _json_sources(raw: Any) -> List[Source]:
    """Sources the model listed in its JSON; malformed entries are dropped."""
    sources: List[Source] = []
    for item in raw if isinstance(raw, list) else []:
        try:
            sources.append(Source.model_validate(item))
        except ValueError:
            logger.debug("Ignoring malformed source entry: %r", item)
    return sources


def _citation_sources(message: Any) -> List[Source]:
    """url_citation annotations attached by search-enabled models."""
    sources: List[Source] = []
    for annotation in getattr(message, "annotations", None) or []:
        citation = getattr(annotation, "url_citation", None)
        if getattr(annotation, "type", None) == "url_citation" and citation is not None:
            sources.append(Source(uri=citation.url, title=citation.title or ""))
    return sources


def merge_sources(*groups: Sequence[Source]) -> List[Source]:
    """Web (http/https) sources in first-seen order, one per URI."""
    merged: Dict[str, Source] = {}
    for group in groups:
        for source in group:
            uri = source.uri.strip()
            if uri.startswith(("http://", "https://")) and uri not in merged:
                merged[uri] = Source(uri=uri, title=source.title.strip())
    return list(merged.values())


def generate_valuation_analysis(
    company_name: str,
    question: str = DEFAULT_VALUATION_QUESTION,
    client: Optional[OpenAI] = None,
) -> ValuationReport:
    """
    Answer a valuation question about a company as structured JSON.

    Returns:
        ValuationReport with the validated analysis and its web sources

    Raises:
        LLMNotConfiguredError: no API key and no client supplied
        AnalysisGenerationError: API failure, or JSON missing required fields
    """
    client = _require_client(client)
    prompt = build_valuation_prompt(company_name, question)
    logger.info("Generating valuation analysis for %s", company_name)

    try:
        message = _create(client, prompt, temperature=0.3, json_mode=True)
    except OpenAIError as e:
        logger.error("Valuation analysis call failed for %s: %s", company_name, e)
        raise AnalysisGenerationError(str(e)) from e

    if not message.content:
        raise AnalysisGenerationError("Empty response from LLM")

    try:
        payload = extract_json_object(message.content)
        raw_sources = payload.pop("sources", None)
        analysis = ValuationAnalysis.model_validate(payload)
    except ValueError as e:
        logger.warning("Unusable valuation analysis for %s: %s", company_name, e)
        raise AnalysisGenerationError(f"Invalid valuation analysis: {e}") from e

    sources = merge_sources(_citation_sources(message), _json_sources(raw_sources))
    return ValuationReport(analysis=analysis, sources=sources)


def parse_slides_json(text: str) -> List[PitchDeckSlide]:
    """
    Slides from `{"slides": [...]}` or a bare list, ordered by slide number.

    Raises:
        ValueError: not JSON, no slides, or a slide missing required fields
    """
    parsed = json.loads(_strip_fence(text))
    if isinstance(parsed, dict):
        parsed = parsed.get("slides")
    if not isinstance(parsed, list) or not parsed:
        raise ValueError("Expected a non-empty list of slides")
    slides = [PitchDeckSlide.model_validate(item) for item in parsed]
    return sorted(slides, key=lambda slide: slide.slide_number)


def generate_valuation_pitch_deck(
    analysis: ValuationAnalysis,
    client: Optional[OpenAI] = None,
) -> List[PitchDeckSlide]:
    """Build the internal-meeting slide deck from a valuation analysis."""
    client = _require_client(client)
    prompt = build_valuation_pitch_deck_prompt(analysis.model_dump_json(by_alias=True, indent=2))
    logger.info("Generating valuation pitch deck for %s", analysis.ticker_symbol)

    try:
        content = _complete(client, prompt, temperature=0.3, json_mode=True)
        return parse_slides_json(content)
    except OpenAIError as e:
        logger.error("Pitch deck call failed for %s: %s", analysis.ticker_symbol, e)
        raise AnalysisGenerationError(str(e)) from e
    except ValueError as e:
        logger.warning("Unusable pitch deck for %s: %s", analysis.ticker_symbol, e)
        raise AnalysisGenerationError(f"Invalid pitch deck: {e}") from e
