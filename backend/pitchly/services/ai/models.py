"""
models.py — Structured LLM output for the valuation research flow.

The model is asked for camelCase JSON (companyName, keyFinancials.revenueLTM,
slideNumber, ...). These models validate that JSON and expose snake_case
attributes; either spelling is accepted on input.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _LLMModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Source(_LLMModel):
    """A web page the analysis cites."""
    uri: str
    title: str = ""


class RecentNews(_LLMModel):
    headline: str
    impact: str = ""


class KeyFinancials(_LLMModel):
    """Free-text LTM figures as the model reports them, e.g. "$250B"."""
    revenue_ltm: str = Field("", alias="revenueLTM")
    net_income_ltm: str = Field("", alias="netIncomeLTM")
    cash_flow_ltm: str = Field("", alias="cashFlowLTM")
    key_ratios: str = ""


class ValuationAnalysis(_LLMModel):
    company_name: str
    ticker_symbol: str
    valuation_summary: str
    key_financials: KeyFinancials = Field(default_factory=KeyFinancials)
    recent_news_analysis: List[RecentNews] = Field(default_factory=list)
    price_adjustment_reasoning: str = ""
    final_recommendation: str


class ValuationReport(_LLMModel):
    """A valuation analysis plus the sources it was grounded on."""
    analysis: ValuationAnalysis
    sources: List[Source] = Field(default_factory=list)


class PitchDeckSlide(_LLMModel):
    slide_number: int
    title: str
    bullet_points: List[str] = Field(default_factory=list)
