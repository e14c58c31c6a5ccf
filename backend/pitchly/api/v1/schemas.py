"""
schemas.py — Request schemas shared by the v1 routers.

Responses are the engine dataclasses themselves (FastAPI serializes them), so
only inbound payloads need pydantic models. QuoteIn mirrors the Quote fields
so a client can post back exactly what GET /quotes/{ticker} returned.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from pitchly.data.reference import Domain, ScenarioId, get_ticker_domain, lookup_tax_info
from pitchly.services.ai.models import ValuationAnalysis
from pitchly.services.ai.prompts import DEFAULT_VALUATION_QUESTION
from pitchly.services.modeling.types import Quote


class QuoteIn(BaseModel):
    """A normalized company snapshot supplied by the client."""
    ticker: str
    company_name: Optional[str] = None
    exchange: Optional[str] = None
    domain: Optional[Domain] = None
    price: Optional[float] = None
    market_cap: Optional[float] = None
    revenue: Optional[float] = None
    ebitda: Optional[float] = None
    tax_rate: Optional[float] = Field(None, ge=0, lt=1)
    tax_rate_is_assumed: bool = False
    tax_rate_source: str = ""
    previous_close: Optional[float] = None
    open: Optional[float] = None
    change: Optional[float] = None
    change_percent: Optional[float] = None
    pe_ratio: Optional[float] = None
    ps_ratio: Optional[float] = None
    pb_ratio: Optional[float] = None
    roe: Optional[float] = None
    revenue_growth: Optional[float] = None
    shares: Optional[float] = None
    net_debt: Optional[float] = None
    ev_ebitda: Optional[float] = None
    interest_rate: float = 0.085
    logo_url: Optional[str] = None
    scenarios: List[Dict[str, Any]] = Field(default_factory=list)
    last_updated: Optional[datetime] = None

    class Config:
        json_schema_extra = {
            "example": {
                "ticker": "AAPL",
                "company_name": "Apple Inc.",
                "exchange": "NASDAQ",
                "price": 190.0,
                "market_cap": 2.9e12,
                "revenue": 3.85e11,
                "ebitda": 1.3e11,
                "tax_rate": 0.16,
                "pe_ratio": 29.5,
                "shares": 1.53e10,
                "net_debt": 5.0e10,
            }
        }

    @field_validator("ticker")
    @classmethod
    def normalize_ticker(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("ticker cannot be empty")
        return v

    def to_quote(self) -> Quote:
        """
        Build the engine Quote.

        Missing domain → ticker table; missing tax rate → exchange statutory
        rate (flagged as assumed); missing shares → market_cap / price; missing
        ev_ebitda → market_cap / ebitda when EBITDA is positive.
        """
        data = self.model_dump()
        if data["domain"] is None:
            data["domain"] = get_ticker_domain(self.ticker)
        if data["tax_rate"] is None:
            tax_info = lookup_tax_info(self.exchange)
            data["tax_rate"] = tax_info.rate
            data["tax_rate_is_assumed"] = True
            data["tax_rate_source"] = f" (Assumed for {tax_info.country})"
        if data["shares"] is None and self.market_cap is not None and self.price:
            data["shares"] = self.market_cap / self.price
        if data["ev_ebitda"] is None and self.market_cap is not None and self.ebitda is not None and self.ebitda > 0:
            data["ev_ebitda"] = self.market_cap / self.ebitda
        if data["company_name"] is None:
            data["company_name"] = self.ticker
        return Quote(**data)


class DcfRequest(BaseModel):
    quote: QuoteIn
    inputs: Optional[Dict[str, float]] = Field(
        None,
        description="Assumption values keyed by field name; omitted → domain defaults",
    )


class LboRequest(BaseModel):
    quote: QuoteIn
    scenario_id: ScenarioId = ScenarioId.BASE_CASE
    inputs: Optional[Dict[str, float]] = Field(
        None,
        description="Assumption values keyed by field name; omitted → scenario defaults",
    )


class PeerCompareRequest(BaseModel):
    subject: QuoteIn
    peers: List[QuoteIn] = Field(default_factory=list)


class AnalysisRequest(BaseModel):
    ticker: str
    company_name: Optional[str] = None
    refresh: bool = Field(False, description="Bypass the in-memory cache")


class PriceAlertRequest(BaseModel):
    target: float = Field(..., description="Alert price")
    direction: Optional[Literal["up", "down"]] = Field(
        None,
        description="Direction recorded when the alert was armed; omitted → derived from the current price",
    )


class ValuationQuestionRequest(BaseModel):
    company_name: str = Field(..., min_length=1, description="Company name or ticker to research")
    question: str = Field(DEFAULT_VALUATION_QUESTION, min_length=1)
    refresh: bool = Field(False, description="Bypass the in-memory cache")

    class Config:
        json_schema_extra = {
            "example": {
                "company_name": "NVIDIA",
                "question": "Is NVIDIA overvalued after the latest earnings?",
            }
        }


class ValuationPitchDeckRequest(BaseModel):
    analysis: ValuationAnalysis
