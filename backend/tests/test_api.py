"""
API tests for the v1 routers (FastAPI TestClient, quote source overridden).
"""

from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient

from pitchly.api import deps
from pitchly.api.v1 import analysis, research
from pitchly.data.quote_client import QuoteFetchError, QuoteNotFoundError, QuoteSource
from pitchly.main import app
from pitchly.services.ai.llm_client import MISSING_KEY_MESSAGE, AnalysisGenerationError, LLMNotConfiguredError
from pitchly.services.ai.models import PitchDeckSlide, Source, ValuationAnalysis, ValuationReport


PAYLOADS: Dict[str, Dict[str, Any]] = {
    "AAPL": {"ticker": "AAPL", "companyName": "Apple Inc.", "exchange": "NASDAQ", "currentPrice": 190.0,
             "marketCap": "2.9T", "ebitda": "130B", "revenue": "385B", "peRatio": 29.5, "priceChangePct": 3.4},
    "MSFT": {"ticker": "MSFT", "companyName": "Microsoft Corp.", "currentPrice": 410.0,
             "marketCap": "3.1T", "ebitda": "120B", "revenue": "230B", "peRatio": 35.0},
    "GOOGL": {"ticker": "GOOGL", "companyName": "Alphabet Inc.", "currentPrice": 170.0,
              "marketCap": "2.1T", "ebitda": "110B", "revenue": "310B", "peRatio": 24.0},
}


class FakeQuoteSource(QuoteSource):
    """Serves PAYLOADS; DOWN fails upstream, anything else is unknown."""

    def get_ticker_summary(self, ticker: str) -> Dict[str, Any]:
        ticker = ticker.upper()
        if ticker == "DOWN":
            raise QuoteFetchError("HTTP error! status: 503")
        if ticker not in PAYLOADS:
            raise QuoteNotFoundError("Ticker not found")
        return dict(PAYLOADS[ticker])


@pytest.fixture
def client():
    app.dependency_overrides[deps.get_quote_source] = lambda: FakeQuoteSource()
    app.dependency_overrides[deps.get_assumption_source] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def quote_json() -> Dict[str, Any]:
    return {"ticker": "aapl", "price": 100.0, "market_cap": 1000.0, "ebitda": 50.0, "net_debt": 200.0,
            "tax_rate": 0.21, "pe_ratio": 20.0}


def test_root(client):
    assert client.get("/").json() == {"status": "ok", "message": "Pitchly backend running"}


# Test quotes
def test_search(client):
    body = client.get("/api/v1/quotes/search", params={"q": "goo"}).json()
    assert [r["ticker"] for r in body["results"]] == ["GOOGL", "GOOG"]


def test_get_quote(client):
    response = client.get("/api/v1/quotes/aapl")

    assert response.status_code == 200
    body = response.json()
    assert body["quote"]["ticker"] == "AAPL"
    assert body["quote"]["domain"] == "Technology"
    assert body["quote"]["market_cap"] == pytest.approx(2.9e12)
    assert body["sentiment"]["badge"] == "Bullish"
    assert body["refresh_seconds"] > 0


def test_get_quote_not_found(client):
    response = client.get("/api/v1/quotes/ZZZZ")
    assert response.status_code == 404
    assert "ZZZZ" in response.json()["detail"]


def test_get_quote_upstream_failure(client):
    response = client.get("/api/v1/quotes/DOWN")
    assert response.status_code == 502


# Test dashboard
def test_dashboard(client):
    response = client.get("/api/v1/dashboard/AAPL")

    assert response.status_code == 200
    body = response.json()
    assert [s["id"] for s in body["scenarios"]] == ["baseCase", "mezzanineDebt", "ipoExit", "growthEquity"]
    workflow = body["workflow"]
    assert workflow["dcf"]["badge"] == "DCF Model"
    assert len(workflow["lbo_scenarios"]) == 4
    # MSFT and GOOGL resolve; META and AMZN are unknown to the fake source
    assert workflow["peer_comparison"]["peers"] == ["MSFT", "GOOGL"]


def test_dashboard_uses_assumption_source(client):
    app.dependency_overrides[deps.get_assumption_source] = lambda: (lambda quote, scenario_id: {"exitMultiple": 21})

    workflow = client.get("/api/v1/dashboard/AAPL").json()["workflow"]
    assert workflow["lbo_scenarios"][0]["inputs"]["exit_multiple"]["value"] == 21

    workflow = client.get("/api/v1/dashboard/AAPL", params={"use_ai": "false"}).json()["workflow"]
    assert workflow["lbo_scenarios"][0]["inputs"]["exit_multiple"]["value"] != 21


def test_dashboard_peer_table_sorting(client):
    body = client.get("/api/v1/dashboard/AAPL", params={"use_ai": "false"}).json()
    assert [c["ticker"] for c in body["companies"]] == ["MSFT", "AAPL", "GOOGL"]

    body = client.get("/api/v1/dashboard/AAPL", params={"use_ai": "false", "sort": "peRatio", "order": "asc"}).json()
    assert [c["ticker"] for c in body["companies"]] == ["GOOGL", "AAPL", "MSFT"]


def test_dashboard_rejects_unknown_sort(client):
    assert client.get("/api/v1/dashboard/AAPL", params={"sort": "beta"}).status_code == 422
    assert client.get("/api/v1/dashboard/AAPL", params={"order": "sideways"}).status_code == 422


# Test price alerts
def test_arm_alert_derives_direction(client):
    body = client.post("/api/v1/alerts/aapl", json={"target": 200.0}).json()

    assert body["ticker"] == "AAPL"
    assert body["price"] == 190.0
    assert body["alert"] == {"target": 200.0, "active": True, "triggered": False, "direction": "up"}
    assert body["message"] is None


def test_alert_triggers_when_price_crosses(client):
    body = client.post("/api/v1/alerts/AAPL", json={"target": 180.0, "direction": "up"}).json()

    assert body["alert"]["triggered"] is True
    assert body["message"] == "AAPL crossed your target of $180.00. Current price: $190.00."


def test_alert_rejects_bad_target_and_unknown_ticker(client):
    assert client.post("/api/v1/alerts/AAPL", json={"target": 0}).status_code == 422
    assert client.post("/api/v1/alerts/AAPL", json={"target": 10, "direction": "left"}).status_code == 422
    assert client.post("/api/v1/alerts/ZZZZ", json={"target": 10}).status_code == 404


# Test valuation recomputes
def test_recompute_dcf(client, quote_json):
    response = client.post("/api/v1/valuation/dcf", json={"quote": quote_json, "inputs": {"wacc": 0.1}})

    assert response.status_code == 200
    body = response.json()
    assert body["inputs"]["wacc"]["value"] == 0.1
    outputs = body["result"]["outputs"]
    assert outputs["error"] is None
    assert outputs["per_share_value"] * 10 == pytest.approx(outputs["equity_value"])


def test_recompute_dcf_unknown_input(client, quote_json):
    response = client.post("/api/v1/valuation/dcf", json={"quote": quote_json, "inputs": {"beta": 1.2}})
    assert response.status_code == 422


def test_recompute_lbo(client, quote_json):
    response = client.post(
        "/api/v1/valuation/lbo",
        json={"quote": quote_json, "scenario_id": "mezzanineDebt", "inputs": {"mezzanine_financing": 0.2}},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["scenario_id"] == "mezzanineDebt"
    assert body["result"]["outputs"]["initial_mezzanine_debt"] == pytest.approx(200.0)


def test_recompute_lbo_invalid_recap_year(client, quote_json):
    response = client.post(
        "/api/v1/valuation/lbo",
        json={"quote": quote_json, "scenario_id": "dividendRecap", "inputs": {"recap_year": 6}},
    )
    assert response.status_code == 422
    assert "recap_year" in response.json()["detail"]


def test_invalid_tax_rate_rejected(client, quote_json):
    quote_json["tax_rate"] = 21
    assert client.post("/api/v1/valuation/dcf", json={"quote": quote_json}).status_code == 422


# Test peers and export
def test_compare_peers(client, quote_json):
    peers = [dict(quote_json, ticker=t, pe_ratio=10.0) for t in ("P1", "P2", "P3", "P4")]
    peers.append(dict(quote_json))

    body = client.post("/api/v1/peers/compare", json={"subject": dict(quote_json, pe_ratio=50.0), "peers": peers}).json()

    assert body["peers"] == ["P1", "P2", "P3", "P4"]
    assert body["positions"]["AAPL"]["P/E"] == "premium"


def test_export_peers_csv(client):
    response = client.get("/api/v1/exports/aapl/peers.csv")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="AAPL_peer_comparison.csv"' in response.headers["content-disposition"]
    lines = response.text.strip().split("\n")
    assert lines[0].startswith("Company Name,Ticker")
    assert lines[1].startswith("Apple Inc.,AAPL")
    assert len(lines) == 4


# Test analysis
def test_analysis_cached(client, monkeypatch):
    calls = []

    def fake_generate(ticker, company_name, analysis_type):
        calls.append(analysis_type)
        return "### 1. Overview\nBody\n### 2. Thesis\nMore"

    monkeypatch.setattr(analysis, "generate_analysis", fake_generate)

    first = client.post("/api/v1/analysis/pitch_deck", json={"ticker": "aapl", "company_name": "Apple Inc."}).json()
    second = client.post("/api/v1/analysis/pitch_deck", json={"ticker": "AAPL"}).json()

    assert first["cached"] is False
    assert [s["title"] for s in first["slides"]] == ["1. Overview", "2. Thesis"]
    assert second["cached"] is True
    assert calls == ["pitch_deck"]


def test_analysis_refresh_bypasses_cache(client, monkeypatch):
    monkeypatch.setattr(analysis, "generate_analysis", lambda t, n, a: f"{a} for {t}")

    client.post("/api/v1/analysis/swot", json={"ticker": "AAPL"})
    body = client.post("/api/v1/analysis/swot", json={"ticker": "AAPL", "refresh": True}).json()

    assert body["cached"] is False
    assert body["content"] == "swot for AAPL"
    assert "slides" not in body


def test_analysis_placeholder_not_cached(client, monkeypatch):
    monkeypatch.setattr(analysis, "generate_analysis", lambda t, n, a: MISSING_KEY_MESSAGE)

    client.post("/api/v1/analysis/memo", json={"ticker": "AAPL"})
    assert client.post("/api/v1/analysis/memo", json={"ticker": "AAPL"}).json()["cached"] is False


def test_analysis_failure_and_validation(client, monkeypatch):
    def failing(ticker, company_name, analysis_type):
        raise analysis.AnalysisGenerationError("quota exceeded")

    monkeypatch.setattr(analysis, "generate_analysis", failing)

    assert client.post("/api/v1/analysis/news", json={"ticker": "AAPL"}).status_code == 502
    assert client.post("/api/v1/analysis/news", json={"ticker": "  "}).status_code == 400
    assert client.post("/api/v1/analysis/haiku", json={"ticker": "AAPL"}).status_code == 422


# Test structured valuation research
ANALYSIS = {
    "companyName": "Apple Inc.",
    "tickerSymbol": "AAPL",
    "valuationSummary": "Fairly valued.",
    "finalRecommendation": "Maintain current price with a neutral outlook",
}


def test_valuation_research_cached(client, monkeypatch):
    calls = []

    def fake_generate(company_name, question):
        calls.append((company_name, question))
        return ValuationReport(
            analysis=ValuationAnalysis.model_validate(ANALYSIS),
            sources=[Source(uri="https://apple.com/ir", title="Apple IR")],
        )

    monkeypatch.setattr(research, "generate_valuation_analysis", fake_generate)

    payload = {"company_name": "Apple", "question": "Fair value?"}
    first = client.post("/api/v1/research/valuation", json=payload).json()
    second = client.post("/api/v1/research/valuation", json=payload).json()

    assert first["analysis"]["ticker_symbol"] == "AAPL"
    assert first["analysis"]["key_financials"]["revenue_ltm"] == ""
    assert first["sources"] == [{"uri": "https://apple.com/ir", "title": "Apple IR"}]
    assert first["cached"] is False
    assert second["cached"] is True
    assert calls == [("Apple", "Fair value?")]


def test_valuation_research_errors(client, monkeypatch):
    def not_configured(company_name, question):
        raise LLMNotConfiguredError(MISSING_KEY_MESSAGE)

    monkeypatch.setattr(research, "generate_valuation_analysis", not_configured)
    assert client.post("/api/v1/research/valuation", json={"company_name": "Apple"}).status_code == 503

    def failing(company_name, question):
        raise AnalysisGenerationError("Invalid valuation analysis")

    monkeypatch.setattr(research, "generate_valuation_analysis", failing)
    assert client.post("/api/v1/research/valuation", json={"company_name": "Apple"}).status_code == 502
    assert client.post("/api/v1/research/valuation", json={"company_name": "  "}).status_code == 400
    assert client.post("/api/v1/research/valuation", json={}).status_code == 422


def test_valuation_pitch_deck(client, monkeypatch):
    received = []

    def fake_deck(analysis):
        received.append(analysis)
        return [PitchDeckSlide(slide_number=1, title="Executive Summary", bullet_points=["Fairly valued"])]

    monkeypatch.setattr(research, "generate_valuation_pitch_deck", fake_deck)

    body = client.post("/api/v1/research/pitch-deck", json={"analysis": ANALYSIS}).json()

    assert body["ticker"] == "AAPL"
    assert body["slides"] == [{"slide_number": 1, "title": "Executive Summary", "bullet_points": ["Fairly valued"]}]
    assert received[0].company_name == "Apple Inc."
