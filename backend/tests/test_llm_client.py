"""
Unit tests for llm_client.py and prompts.py

The OpenAI client is a MagicMock; no API calls are made.
"""

import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from openai import OpenAIError

from pitchly.core.config import settings
from pitchly.data.reference import ScenarioId
from pitchly.services.ai.llm_client import (
    FALLBACK_SLIDE_TITLE,
    MISSING_KEY_MESSAGE,
    AnalysisGenerationError,
    LLMNotConfiguredError,
    extract_json_object,
    generate_analysis,
    generate_lbo_assumptions,
    generate_valuation_analysis,
    generate_valuation_pitch_deck,
    is_configured,
    merge_sources,
    parse_pitch_deck,
    parse_slides_json,
)
from pitchly.services.ai.models import PitchDeckSlide, Source, ValuationAnalysis
from pitchly.services.ai.prompts import (
    VALUATION_DECK_SLIDES,
    build_analysis_prompt,
    build_lbo_assumptions_prompt,
    build_valuation_prompt,
)


def _client_returning(content, annotations=None):
    client = MagicMock()
    client.chat.completions.create.return_value = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content, annotations=annotations))]
    )
    return client


@pytest.fixture
def no_api_key(monkeypatch):
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "")


# Test text analysis
def test_generate_analysis_returns_content():
    client = _client_returning("## Strengths\n- Brand")

    text = generate_analysis("AAPL", "Apple Inc.", "swot", client=client)

    assert text == "## Strengths\n- Brand"
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == settings.OPENAI_MODEL
    assert "SWOT analysis for Apple Inc. (AAPL)" in kwargs["messages"][1]["content"]
    assert "response_format" not in kwargs


def test_generate_analysis_without_key_returns_placeholder(no_api_key):
    assert is_configured() is False
    assert generate_analysis("AAPL", "Apple Inc.", "memo") == MISSING_KEY_MESSAGE


def test_generate_analysis_unknown_type():
    with pytest.raises(ValueError):
        generate_analysis("AAPL", "Apple Inc.", "haiku", client=_client_returning("x"))


def test_generate_analysis_api_error():
    client = MagicMock()
    client.chat.completions.create.side_effect = OpenAIError("quota exceeded")

    with pytest.raises(AnalysisGenerationError, match="quota exceeded"):
        generate_analysis("AAPL", "Apple Inc.", "news", client=client)


def test_generate_analysis_empty_content():
    with pytest.raises(AnalysisGenerationError):
        generate_analysis("AAPL", "Apple Inc.", "news", client=_client_returning(""))


# Test pitch deck parsing
def test_parse_pitch_deck_splits_slides():
    text = "### 1. Company Overview\nFounded 1976\n### 2. Market\nGrowing\nFast\nSlide 3: Risks\nFX"

    slides = parse_pitch_deck(text)

    assert slides == [
        {"title": "1. Company Overview", "content": "Founded 1976"},
        {"title": "2. Market", "content": "Growing\nFast"},
        {"title": "Risks", "content": "FX"},
    ]


def test_parse_pitch_deck_empty_text():
    assert parse_pitch_deck("") == [{"title": FALLBACK_SLIDE_TITLE, "content": ""}]


def test_pitch_deck_prompt_lists_every_slide():
    prompt = build_analysis_prompt("pitch_deck", "AAPL", "Apple Inc.")

    assert "### 1. Apple Inc. (AAPL) Company Overview" in prompt
    assert "### 9." in prompt
    assert "all 9 slides" in prompt


# Test LBO starting points
def test_extract_json_object_tolerates_fence():
    assert extract_json_object('```json\n{"exitMultiple": 18}\n```') == {"exitMultiple": 18}
    assert extract_json_object(' {"holdingPeriod": 5} ') == {"holdingPeriod": 5}


@pytest.mark.parametrize("text", ["[1, 2]", "not json"])
def test_extract_json_object_rejects(text):
    with pytest.raises(ValueError):
        extract_json_object(text)


def test_generate_lbo_assumptions(tech_quote):
    client = _client_returning('{"debtFinancing": 0.55, "exitMultiple": 17}')

    suggested = generate_lbo_assumptions(tech_quote, ScenarioId.MEZZANINE_DEBT, client=client)

    assert suggested == {"debtFinancing": 0.55, "exitMultiple": 17}
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["response_format"] == {"type": "json_object"}
    assert "mezzanineFinancing" in kwargs["messages"][1]["content"]


def test_generate_lbo_assumptions_bad_json_returns_none(tech_quote):
    client = _client_returning("Sure! Here are some assumptions.")
    assert generate_lbo_assumptions(tech_quote, ScenarioId.BASE_CASE, client=client) is None


def test_generate_lbo_assumptions_without_key(tech_quote, no_api_key):
    assert generate_lbo_assumptions(tech_quote, ScenarioId.BASE_CASE) is None


def test_lbo_prompt_describes_company(tech_quote):
    prompt = build_lbo_assumptions_prompt(tech_quote, ScenarioId.DIVIDEND_RECAP)

    assert "Apple Inc. (AAPL), a Technology company" in prompt
    assert "dividend recapitalization" in prompt
    assert '"recapYear"' in prompt


# Test structured valuation research
@pytest.fixture
def analysis_payload():
    return {
        "companyName": "NVIDIA Corporation",
        "tickerSymbol": "NVDA",
        "valuationSummary": "Premium valuation supported by data-center growth.",
        "keyFinancials": {
            "revenueLTM": "$96B",
            "netIncomeLTM": "$53B",
            "cashFlowLTM": "$56B",
            "keyRatios": "P/E near 55x",
        },
        "recentNewsAnalysis": [{"headline": "Blackwell ramp", "impact": "Supports FY26 estimates"}],
        "priceAdjustmentReasoning": "Growth offsets the multiple.",
        "finalRecommendation": "Maintain current price with a neutral outlook",
        "sources": [
            {"uri": "https://investor.nvidia.com/q2", "title": "NVIDIA Q2 results"},
            {"uri": "not-a-url", "title": "junk"},
            "bare string",
        ],
    }


def test_generate_valuation_analysis(analysis_payload):
    citation = SimpleNamespace(
        type="url_citation",
        url_citation=SimpleNamespace(url="https://news.example.com/nvda", title="NVDA news"),
    )
    client = _client_returning(json.dumps(analysis_payload), annotations=[citation])

    report = generate_valuation_analysis("NVIDIA", "Is it overvalued?", client=client)

    assert report.analysis.ticker_symbol == "NVDA"
    assert report.analysis.key_financials.revenue_ltm == "$96B"
    assert report.analysis.recent_news_analysis[0].headline == "Blackwell ramp"
    assert [s.uri for s in report.sources] == ["https://news.example.com/nvda", "https://investor.nvidia.com/q2"]
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["response_format"] == {"type": "json_object"}
    assert 'The user\'s specific question is: "Is it overvalued?"' in kwargs["messages"][1]["content"]


def test_generate_valuation_analysis_missing_fields(analysis_payload):
    del analysis_payload["finalRecommendation"]

    with pytest.raises(AnalysisGenerationError, match="Invalid valuation analysis"):
        generate_valuation_analysis("NVIDIA", client=_client_returning(json.dumps(analysis_payload)))


def test_generate_valuation_analysis_without_key(no_api_key):
    with pytest.raises(LLMNotConfiguredError):
        generate_valuation_analysis("NVIDIA")


def test_merge_sources_dedupes_and_keeps_web_links():
    merged = merge_sources(
        [Source(uri=" https://a.com ", title=" A ")],
        [Source(uri="https://a.com", title="dup"), Source(uri="ftp://b", title="B")],
    )
    assert merged == [Source(uri="https://a.com", title="A")]


def test_valuation_prompt_includes_schema():
    prompt = build_valuation_prompt("Apple", "Fair value?")

    assert '"Apple"' in prompt
    assert '"revenueLTM"' in prompt
    assert "JSON" in prompt


def test_parse_slides_json_sorts_and_accepts_both_shapes():
    wrapped = '{"slides": [{"slideNumber": 2, "title": "B", "bulletPoints": ["x"]}, {"slideNumber": 1, "title": "A"}]}'
    bare = '```json\n[{"slideNumber": 1, "title": "A", "bulletPoints": []}]\n```'

    assert [s.title for s in parse_slides_json(wrapped)] == ["A", "B"]
    assert parse_slides_json(bare) == [PitchDeckSlide(slide_number=1, title="A", bullet_points=[])]


@pytest.mark.parametrize("text", ['{"slides": []}', '{"deck": 1}', '[{"title": "no number"}]', "nope"])
def test_parse_slides_json_rejects(text):
    with pytest.raises(ValueError):
        parse_slides_json(text)


def test_generate_valuation_pitch_deck(analysis_payload):
    analysis = ValuationAnalysis.model_validate(analysis_payload)
    slides_json = {
        "slides": [
            {"slideNumber": i, "title": title, "bulletPoints": ["point"]}
            for i, title in enumerate(VALUATION_DECK_SLIDES, start=1)
        ]
    }
    client = _client_returning(json.dumps(slides_json))

    slides = generate_valuation_pitch_deck(analysis, client=client)

    assert [s.title for s in slides] == list(VALUATION_DECK_SLIDES)
    prompt = client.chat.completions.create.call_args.kwargs["messages"][1]["content"]
    assert "5-slide pitch deck" in prompt
    assert '"tickerSymbol": "NVDA"' in prompt


def test_generate_valuation_pitch_deck_bad_json(analysis_payload):
    analysis = ValuationAnalysis.model_validate(analysis_payload)

    with pytest.raises(AnalysisGenerationError, match="Invalid pitch deck"):
        generate_valuation_pitch_deck(analysis, client=_client_returning("not json"))
