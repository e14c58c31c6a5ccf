"""
reference.py — Static reference tables.

Purpose:
- Exchange → statutory corporate tax rate (fallback when the API omits one)
- Ticker → sector domain (drives DDM vs FCFF and the LBO scenario list)
- Ticker → peer tickers
- Domain → LBO scenario catalogue
- Supported ticker list (autocomplete) and logo URLs

This module does NOT:
- Fetch anything; all tables are hard-coded.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional


class Domain(str, Enum):
    TECHNOLOGY = "Technology"
    CONSUMER_RETAIL = "Consumer/Retail"
    FINANCIALS = "Financials"


DEFAULT_DOMAIN = Domain.TECHNOLOGY


class ScenarioId(str, Enum):
    BASE_CASE = "baseCase"
    MEZZANINE_DEBT = "mezzanineDebt"
    IPO_EXIT = "ipoExit"
    GROWTH_EQUITY = "growthEquity"
    DIVIDEND_RECAP = "dividendRecap"
    STRATEGIC_SALE = "strategicSale"
    CLUB_DEAL = "clubDeal"
    LEVERAGED_RECAP = "leveragedRecap"
    SPONSOR_TO_SPONSOR_EXIT = "sponsorToSponsorExit"
    MANAGEMENT_BUYOUT = "managementBuyout"


RECAP_SCENARIOS = frozenset({ScenarioId.DIVIDEND_RECAP, ScenarioId.LEVERAGED_RECAP})
MEZZANINE_SCENARIOS = frozenset({ScenarioId.MEZZANINE_DEBT})


@dataclass(frozen=True)
class TaxInfo:
    country: str
    rate: float


# -----------------------------------------------------------------------------
# Tax
# -----------------------------------------------------------------------------

EXCHANGE_TAX_INFO: Dict[str, TaxInfo] = {
    "NASDAQ": TaxInfo("the US", 0.21),
    "NYSE": TaxInfo("the US", 0.21),
    "BATS": TaxInfo("the US", 0.21),
    "OTCMKTS": TaxInfo("the US", 0.21),
    "TSX": TaxInfo("Canada", 0.265),
    "TSXV": TaxInfo("Canada", 0.265),
    "LSE": TaxInfo("the UK", 0.25),
    "EURONEXT": TaxInfo("France", 0.25),
    "XETRA": TaxInfo("Germany", 0.30),
    "JPX": TaxInfo("Japan", 0.306),
    "ASX": TaxInfo("Australia", 0.30),
}

DEFAULT_TAX_INFO = TaxInfo("an estimated region", 0.23)


def lookup_tax_info(exchange: Optional[str]) -> TaxInfo:
    """Statutory tax info for an exchange; unknown or missing → DEFAULT_TAX_INFO."""
    if not isinstance(exchange, str) or not exchange.strip():
        return DEFAULT_TAX_INFO
    return EXCHANGE_TAX_INFO.get(exchange.strip().upper(), DEFAULT_TAX_INFO)


# -----------------------------------------------------------------------------
# Domains
# -----------------------------------------------------------------------------

_TECH = Domain.TECHNOLOGY
_CONSUMER = Domain.CONSUMER_RETAIL
_FIN = Domain.FINANCIALS

TICKER_TO_DOMAIN: Dict[str, Domain] = {
    # Technology
    "AAPL": _TECH, "MSFT": _TECH, "GOOGL": _TECH, "GOOG": _TECH,
    "NVDA": _TECH, "META": _TECH, "TSLA": _TECH, "AVGO": _TECH,
    "ORCL": _TECH, "CRM": _TECH, "ADBE": _TECH, "NFLX": _TECH,
    "AMD": _TECH, "CSCO": _TECH, "INTC": _TECH, "QCOM": _TECH,
    "UBER": _TECH, "IBM": _TECH,
    # Consumer/Retail
    "AMZN": _CONSUMER, "WMT": _CONSUMER, "LLY": _CONSUMER, "V": _CONSUMER,
    "UNH": _CONSUMER, "XOM": _CONSUMER, "MA": _CONSUMER, "JNJ": _CONSUMER,
    "HD": _CONSUMER, "PG": _CONSUMER, "COST": _CONSUMER, "CVX": _CONSUMER,
    "MRK": _CONSUMER, "ABBV": _CONSUMER, "PEP": _CONSUMER, "KO": _CONSUMER,
    "DIS": _CONSUMER, "MCD": _CONSUMER, "PFE": _CONSUMER, "TMO": _CONSUMER,
    "NKE": _CONSUMER, "CMCSA": _CONSUMER, "VZ": _CONSUMER, "T": _CONSUMER,
    "SBUX": _CONSUMER, "F": _CONSUMER, "GM": _CONSUMER, "RIVN": _CONSUMER,
    "NIO": _CONSUMER, "LCID": _CONSUMER,
    # Financials
    "JPM": _FIN, "BRK-B": _FIN, "BAC": _FIN, "WFC": _FIN,
    "GS": _FIN, "MS": _FIN, "C": _FIN,
}


def get_ticker_domain(ticker: Optional[str]) -> Domain:
    if not ticker:
        return DEFAULT_DOMAIN
    return TICKER_TO_DOMAIN.get(ticker.strip().upper(), DEFAULT_DOMAIN)


# -----------------------------------------------------------------------------
# Peers
# -----------------------------------------------------------------------------

PEER_MAP: Dict[str, List[str]] = {
    "TSLA": ["GM", "F", "RIVN", "NIO", "LCID"],
    "AAPL": ["MSFT", "GOOGL", "AMZN", "META"],
    "MSFT": ["AAPL", "GOOGL", "AMZN", "CRM"],
    "GOOGL": ["MSFT", "AAPL", "META", "AMZN"],
    "AMZN": ["MSFT", "GOOGL", "WMT"],
    "NVDA": ["AMD", "INTC", "QCOM"],
    "F": ["GM", "TSLA", "RIVN"],
    "GM": ["F", "TSLA", "RIVN"],
    "GOOG": ["MSFT", "AAPL", "META", "AMZN"],
    "JPM": ["BAC", "WFC", "C", "GS", "MS"],
    "BAC": ["JPM", "WFC", "C"],
    "WFC": ["JPM", "BAC", "C"],
    "C": ["JPM", "BAC", "WFC"],
    "GS": ["MS", "JPM"],
    "MS": ["GS", "JPM"],
}


def get_peer_tickers(ticker: str) -> List[str]:
    return list(PEER_MAP.get(ticker.strip().upper(), []))


# -----------------------------------------------------------------------------
# LBO scenarios
# -----------------------------------------------------------------------------

SCENARIO_NAMES: Dict[ScenarioId, str] = {
    ScenarioId.BASE_CASE: "Base Case",
    ScenarioId.MEZZANINE_DEBT: "Mezzanine Debt",
    ScenarioId.IPO_EXIT: "IPO Exit",
    ScenarioId.GROWTH_EQUITY: "Growth Equity",
    ScenarioId.DIVIDEND_RECAP: "Dividend Recap",
    ScenarioId.STRATEGIC_SALE: "Strategic Sale",
    ScenarioId.CLUB_DEAL: "Club Deal",
    ScenarioId.LEVERAGED_RECAP: "Leveraged Recap",
    ScenarioId.SPONSOR_TO_SPONSOR_EXIT: "Sponsor-to-Sponsor Exit",
    ScenarioId.MANAGEMENT_BUYOUT: "Management Buyout",
}

DOMAIN_SCENARIOS: Dict[Domain, List[ScenarioId]] = {
    Domain.TECHNOLOGY: [
        ScenarioId.BASE_CASE,
        ScenarioId.MEZZANINE_DEBT,
        ScenarioId.IPO_EXIT,
        ScenarioId.GROWTH_EQUITY,
    ],
    Domain.CONSUMER_RETAIL: [
        ScenarioId.BASE_CASE,
        ScenarioId.DIVIDEND_RECAP,
        ScenarioId.STRATEGIC_SALE,
        ScenarioId.CLUB_DEAL,
    ],
    Domain.FINANCIALS: [
        ScenarioId.BASE_CASE,
        ScenarioId.LEVERAGED_RECAP,
        ScenarioId.SPONSOR_TO_SPONSOR_EXIT,
        ScenarioId.MANAGEMENT_BUYOUT,
    ],
}


# -----------------------------------------------------------------------------
# Tickers & logos
# -----------------------------------------------------------------------------

TICKER_LIST: List[Dict[str, str]] = [
    {"ticker": "AAPL", "name": "Apple Inc."}, {"ticker": "MSFT", "name": "Microsoft Corp."},
    {"ticker": "GOOGL", "name": "Alphabet Inc. A"}, {"ticker": "GOOG", "name": "Alphabet Inc. C"},
    {"ticker": "AMZN", "name": "Amazon.com, Inc."}, {"ticker": "NVDA", "name": "NVIDIA Corp."},
    {"ticker": "META", "name": "Meta Platforms, Inc."}, {"ticker": "TSLA", "name": "Tesla, Inc."},
    {"ticker": "BRK-B", "name": "Berkshire Hathaway"}, {"ticker": "LLY", "name": "Eli Lilly & Co."},
    {"ticker": "V", "name": "Visa Inc."}, {"ticker": "JPM", "name": "JPMorgan Chase & Co."},
    {"ticker": "WMT", "name": "Walmart Inc."}, {"ticker": "UNH", "name": "UnitedHealth Group"},
    {"ticker": "XOM", "name": "Exxon Mobil Corp."}, {"ticker": "MA", "name": "Mastercard Inc."},
    {"ticker": "JNJ", "name": "Johnson & Johnson"}, {"ticker": "HD", "name": "Home Depot, Inc."},
    {"ticker": "PG", "name": "Procter & Gamble Co."}, {"ticker": "AVGO", "name": "Broadcom Inc."},
    {"ticker": "ORCL", "name": "Oracle Corp."}, {"ticker": "COST", "name": "Costco Wholesale"},
    {"ticker": "CVX", "name": "Chevron Corp."}, {"ticker": "MRK", "name": "Merck & Co."},
    {"ticker": "ABBV", "name": "AbbVie Inc."}, {"ticker": "CRM", "name": "Salesforce, Inc."},
    {"ticker": "BAC", "name": "Bank of America"}, {"ticker": "PEP", "name": "PepsiCo, Inc."},
    {"ticker": "KO", "name": "Coca-Cola Co."}, {"ticker": "ADBE", "name": "Adobe Inc."},
    {"ticker": "NFLX", "name": "Netflix, Inc."}, {"ticker": "AMD", "name": "Advanced Micro Devices"},
    {"ticker": "DIS", "name": "Walt Disney Co."}, {"ticker": "MCD", "name": "McDonald's Corp."},
    {"ticker": "CSCO", "name": "Cisco Systems"}, {"ticker": "INTC", "name": "Intel Corp."},
    {"ticker": "PFE", "name": "Pfizer Inc."}, {"ticker": "TMO", "name": "Thermo Fisher Scientific"},
    {"ticker": "NKE", "name": "NIKE, Inc."}, {"ticker": "WFC", "name": "Wells Fargo & Co."},
    {"ticker": "CMCSA", "name": "Comcast Corp."}, {"ticker": "VZ", "name": "Verizon Communications"},
    {"ticker": "T", "name": "AT&T Inc."}, {"ticker": "IBM", "name": "IBM Corp."},
    {"ticker": "QCOM", "name": "QUALCOMM Inc."}, {"ticker": "UBER", "name": "Uber Technologies"},
    {"ticker": "SBUX", "name": "Starbucks Corp."}, {"ticker": "F", "name": "Ford Motor Co."},
    {"ticker": "GM", "name": "General Motors Co."}, {"ticker": "RIVN", "name": "Rivian Automotive"},
    {"ticker": "NIO", "name": "NIO Inc."}, {"ticker": "LCID", "name": "Lucid Group"},
    {"ticker": "GS", "name": "Goldman Sachs Group"}, {"ticker": "MS", "name": "Morgan Stanley"},
    {"ticker": "C", "name": "Citigroup Inc."},
]


def search_tickers(query: str, limit: int = 10) -> List[Dict[str, str]]:
    """
    Case-insensitive prefix match on ticker, substring match on company name.

    Ticker matches come first, in list order.
    """
    needle = (query or "").strip().upper()
    if not needle:
        return []

    by_ticker = [row for row in TICKER_LIST if row["ticker"].startswith(needle)]
    by_name = [
        row for row in TICKER_LIST
        if row not in by_ticker and needle in row["name"].upper()
    ]
    return (by_ticker + by_name)[:limit]


LOGO_URLS: Dict[str, str] = {
    "AAPL": "https://upload.wikimedia.org/wikipedia/commons/f/fa/Apple_logo_black.svg",
    "MSFT": "https://upload.wikimedia.org/wikipedia/commons/4/44/Microsoft_logo.svg",
    "TSLA": "https://upload.wikimedia.org/wikipedia/commons/b/bd/Tesla_Motors.svg",
    "F": "https://upload.wikimedia.org/wikipedia/commons/3/3e/Ford_logo_blue.svg",
    "GM": "https://upload.wikimedia.org/wikipedia/commons/thumb/1/11/General_Motors_logo.svg/1200px-General_Motors_logo.svg.png",
    "GOOG": "https://upload.wikimedia.org/wikipedia/commons/c/c1/Google_%22G%22_logo.svg",
}


def get_logo_url(ticker: str) -> str:
    return LOGO_URLS.get(ticker, f"https://via.placeholder.com/60x60.png?text={ticker}")
