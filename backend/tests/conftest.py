"""
Shared fixtures: raw ticker summary payloads and ready-made Quotes.
"""

import time
from typing import Any, Dict

import pytest

from pitchly.core.cache import cache_clear
from pitchly.data.reference import Domain
from pitchly.services.modeling.types import Quote


def make_quote(**overrides: Any) -> Quote:
    """Quote with sensible technology-company defaults; keyword args override fields."""
    fields: Dict[str, Any] = dict(
        ticker="AAPL",
        company_name="Apple Inc.",
        exchange="NASDAQ",
        domain=Domain.TECHNOLOGY,
        price=100.0,
        market_cap=1000.0,
        revenue=None,
        ebitda=50.0,
        tax_rate=0.21,
        shares=10.0,
        net_debt=200.0,
        pe_ratio=20.0,
    )
    fields.update(overrides)
    return Quote(**fields)


@pytest.fixture
def tech_quote() -> Quote:
    return make_quote()


@pytest.fixture
def bank_quote() -> Quote:
    """Financials quote valued with the DDM (book value 1000 via P/B 1.5)."""
    return make_quote(
        ticker="JPM",
        company_name="JPMorgan Chase & Co.",
        exchange="NYSE",
        domain=Domain.FINANCIALS,
        market_cap=1500.0,
        pb_ratio=1.5,
        roe=0.15,
        shares=15.0,
    )


@pytest.fixture
def consumer_quote() -> Quote:
    return make_quote(
        ticker="KO",
        company_name="Coca-Cola Co.",
        exchange="NYSE",
        domain=Domain.CONSUMER_RETAIL,
        ebitda=100.0,
    )


@pytest.fixture
def ticker_summary_payload() -> Dict[str, Any]:
    """Ticker summary JSON as the quote service returns it (mixed encodings)."""
    return {
        "ticker": "aapl",
        "companyName": "Apple Inc.",
        "exchange": "NASDAQ",
        "currentPrice": 190.5,
        "previousClose": "188.00",
        "open": {"raw": 189.1, "fmt": "189.10"},
        "priceChange": 2.5,
        "priceChangePct": 1.33,
        "marketCap": "2.9T",
        "revenue": "385B",
        "ebitda": {"raw": 1.3e11, "fmt": "130B"},
        "peRatio": "29.5",
        "psRatio": 7.5,
        "pbRatio": 45.0,
        "roe": "160%",
        "revenueGrowth": 2.1,
        "taxRate": 16,
        "scenarios": [
            {"id": "baseCase", "name": "Base Case"},
            {"id": "baseCase", "name": "Base Case"},
            {"id": "mezzanineDebt", "name": "Mezzanine Debt"},
        ],
        "lastUpdated": "2024-05-01T15:30:00Z",
    }


@pytest.fixture
def no_sleep(monkeypatch):
    """Skip retry backoff and polite peer delays."""
    monkeypatch.setattr(time, "sleep", lambda seconds: None)


@pytest.fixture(autouse=True)
def clear_cache():
    cache_clear()
    yield
    cache_clear()
