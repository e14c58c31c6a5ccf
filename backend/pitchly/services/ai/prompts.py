"""
prompts.py — Fixed prompt set for generated analysis.

Each builder returns the user prompt for one analysis type; the system prompt
is shared. Prompts are plain strings so tests can assert on their content.
"""

from __future__ import annotations

from typing import Callable, Dict

from pitchly.data.reference import ScenarioId
from pitchly.services.modeling.types import Quote
from pitchly.utils.formatting import large_number

ANALYSIS_SWOT = "swot"
ANALYSIS_MEMO = "memo"
ANALYSIS_PITCH_DECK = "pitch_deck"
ANALYSIS_NEWS = "news"

SYSTEM_PROMPT = (
    "You are a senior investment banking analyst. Answer with well-structured markdown "
    "grounded in the most recent public information you have about the company."
)


def _swot_prompt(ticker: str, company_name: str) -> str:
    return (
        f"As a strategy consultant, conduct a SWOT analysis for {company_name} ({ticker}). "
        "Base your findings on current information from financial reports, news articles, and market "
        "analysis. Provide 2-3 distinct points for each category (Strengths, Weaknesses, "
        "Opportunities, Threats)."
    )


def _memo_prompt(ticker: str, company_name: str) -> str:
    return (
        f"Act as an investment banking associate. Draft a 1-page investment memo for {company_name} "
        f"({ticker}). Your analysis must be grounded in recent financial data, news, and market "
        "sentiment. Include: Company Overview, Investment Thesis, Financial Snapshot, Key Risks & "
        "Mitigants, and Exit Strategy."
    )


def _news_prompt(ticker: str, company_name: str) -> str:
    return (
        f"Act as a senior financial analyst. Summarize the most impactful news for {ticker} "
        f"({company_name}) from the past month. Focus on earnings, strategic initiatives, and analyst "
        "ratings. Format as 3-4 concise bullet points."
    )


_PITCH_DECK_SLIDES = [
    "{name} ({ticker}) Company Overview: key facts (HQ, Founded, Employees) as a markdown table, "
    "business model summary and market positioning.",
    "{name} ({ticker}) Public Market Overview & NTM EBITDA Evolution: commentary plus chart data as "
    '[CHART type="bar-line-combo" title="Revenue & NTM EBITDA Margin Evolution"] with CSV rows '
    "Year,Revenue (USD M),NTM EBITDA Margin (%) and a closing [/CHART].",
    "{name} ({ticker}) Stock Price Performance vs Peer: "
    '[CHART type="line" title="Stock Price Performance (Normalized)"] with CSV rows '
    "Date,{ticker},Peer Index and a closing [/CHART].",
    "Broker Perspectives on {name} ({ticker}): markdown table (Broker, Rating, Price Target) and "
    '[CHART type="donut" title="Broker Rating Distribution"] with rows Rating,Count.',
    "Trading Multiples: markdown table comparing {name} to peers with columns Company, Scale "
    "(Market Cap), Revenue Growth (NTM %), Profitability Margin (NTM EBITDA %), FV/Revenue (NTM), "
    "FV/EBITDA (NTM).",
    'Diagram Showing Growth of {name} ({ticker}): [DIAGRAM type="timeline"] with "Year: milestone" '
    "lines and a closing [/DIAGRAM].",
    '{name} ({ticker}) Built Through M&A: [DIAGRAM type="flow"] with "Deal (Year): rationale" lines.',
    '{name} ({ticker}) Opportunities to Expand: [DIAGRAM type="roadmap"] with "Vector: detail" lines.',
    "{name} ({ticker}) Other Companies Overview: markdown table of other key players and "
    "{name}'s differentiators.",
]


def _pitch_deck_prompt(ticker: str, company_name: str) -> str:
    slides = "\n".join(
        f"### {i}. " + slide.format(name=company_name, ticker=ticker)
        for i, slide in enumerate(_PITCH_DECK_SLIDES, start=1)
    )
    return (
        f"Act as a senior investment banking analyst creating a client-facing pitch deck for "
        f"{company_name} ({ticker}) suitable for senior executives.\n\n"
        "Global instructions:\n"
        "- Use a professional corporate layout; generate actual data for every visual, never placeholders.\n"
        "- Keep each slide concise and boardroom-ready.\n"
        "- Use markdown. Each slide must have a clear title starting with '###'.\n"
        f"- You MUST generate all {len(_PITCH_DECK_SLIDES)} slides in the order below, even if data is sparse.\n\n"
        f"Required slides:\n\n{slides}\n"
    )


ANALYSIS_PROMPTS: Dict[str, Callable[[str, str], str]] = {
    ANALYSIS_SWOT: _swot_prompt,
    ANALYSIS_MEMO: _memo_prompt,
    ANALYSIS_PITCH_DECK: _pitch_deck_prompt,
    ANALYSIS_NEWS: _news_prompt,
}


def build_analysis_prompt(analysis_type: str, ticker: str, company_name: str) -> str:
    """Raises KeyError for an analysis type outside ANALYSIS_PROMPTS."""
    return ANALYSIS_PROMPTS[analysis_type](ticker, company_name)


# -----------------------------------------------------------------------------
# LBO starting points
# -----------------------------------------------------------------------------

SCENARIO_DESCRIPTIONS: Dict[ScenarioId, str] = {
    ScenarioId.BASE_CASE: "standard sponsor-to-sponsor",
    ScenarioId.DIVIDEND_RECAP: "dividend recapitalization",
    ScenarioId.MEZZANINE_DEBT: "leveraged buyout with a mezzanine debt tranche",
    ScenarioId.IPO_EXIT: "LBO with a planned IPO exit, potentially justifying a higher exit multiple",
    ScenarioId.GROWTH_EQUITY: (
        "minority growth equity investment in a high-growth tech company to fund expansion, not a "
        "traditional buyout. Assume lower leverage (debtFinancing)."
    ),
    ScenarioId.STRATEGIC_SALE: (
        "LBO with an exit to a strategic corporate acquirer, which might justify a higher "
        "synergy-driven exit multiple."
    ),
    ScenarioId.CLUB_DEAL: (
        "large LBO where multiple PE firms pool capital. Assumptions should reflect a larger, more "
        "stable target."
    ),
    ScenarioId.LEVERAGED_RECAP: (
        "leveraged recapitalization for a financial institution, focusing on optimizing the capital structure."
    ),
    ScenarioId.SPONSOR_TO_SPONSOR_EXIT: (
        'an exit where one private equity firm sells the company to another, often with a "second '
        'bite of the apple" thesis.'
    ),
    ScenarioId.MANAGEMENT_BUYOUT: (
        "a transaction where the company's existing management team acquires the company, often "
        "with financial sponsor backing."
    ),
}

_RECAP_FIELDS = (
    'Also include "recapYear" (as an integer from 2 to 4) and "dividendPayout" (as a number from 0.1 to 0.9).'
)

SCENARIO_FIELDS: Dict[ScenarioId, str] = {
    ScenarioId.DIVIDEND_RECAP: _RECAP_FIELDS,
    ScenarioId.LEVERAGED_RECAP: _RECAP_FIELDS,
    ScenarioId.MEZZANINE_DEBT: (
        'Also include "mezzanineFinancing" (as a number from 0.05 to 0.3) and '
        '"mezzanineInterestRate" (as a number from 0.1 to 0.2).'
    ),
    ScenarioId.IPO_EXIT: 'For the "exitMultiple", consider a 10-25% premium over a typical trade sale multiple.',
    ScenarioId.STRATEGIC_SALE: (
        'For the "exitMultiple", consider a 15-30% premium over a typical trade sale multiple due to '
        "expected synergies."
    ),
    ScenarioId.GROWTH_EQUITY: 'The "debtFinancing" should be lower, between 0.2 and 0.4. "ebitdaGrowth" should be higher.',
}


def build_lbo_assumptions_prompt(quote: Quote, scenario_id: ScenarioId) -> str:
    scenario_id = ScenarioId(scenario_id)
    return (
        f"For {quote.company_name} ({quote.ticker}), a {quote.domain.value} company with a market cap of "
        f"{large_number(quote.market_cap)} and EBITDA of {large_number(quote.ebitda)}, generate a set of "
        f"reasonable initial assumptions for a {SCENARIO_DESCRIPTIONS[scenario_id]} LBO model.\n\n"
        "Return ONLY a single, valid JSON object with the following numeric values:\n"
        '- "debtFinancing": Total debt as a percentage of purchase price.\n'
        '- "interestRate": Blended interest rate on senior debt.\n'
        '- "ebitdaGrowth": Projected annual EBITDA growth rate.\n'
        '- "exitMultiple": The LTM EBITDA multiple at exit.\n'
        '- "holdingPeriod": The investment hold period in years (integer).\n'
        f"{SCENARIO_FIELDS.get(scenario_id, '')}\n\n"
        "Base your assumptions on the company's scale and industry-specific private equity deal "
        "structures. Example for a base case: "
        '{"debtFinancing": 0.6, "interestRate": 0.09, "ebitdaGrowth": 0.08, "exitMultiple": 15, "holdingPeriod": 5}'
    )


# -----------------------------------------------------------------------------
# Structured valuation research
# -----------------------------------------------------------------------------

DEFAULT_VALUATION_QUESTION = "Is the current share price justified, and should it be adjusted?"

VALUATION_DECK_SLIDES = (
    "Executive Summary",
    "Financial Performance",
    "Recent Developments & News",
    "Valuation Rationale",
    "Recommendation & Next Steps",
)

VALUATION_JSON_SCHEMA = """{
  "companyName": "The official company name",
  "tickerSymbol": "The company's stock ticker symbol",
  "valuationSummary": "A concise, executive summary of your valuation findings and price adjustment recommendation.",
  "keyFinancials": {
    "revenueLTM": "Last Twelve Months Revenue with currency, e.g., '$250B'.",
    "netIncomeLTM": "Last Twelve Months Net Income with currency.",
    "cashFlowLTM": "Last Twelve Months Operating Cash Flow with currency.",
    "keyRatios": "Brief analysis of key ratios like P/E, P/S, or EV/EBITDA."
  },
  "recentNewsAnalysis": [
    {"headline": "Headline of a recent significant news event.", "impact": "Analysis of the news's impact on the company's valuation."}
  ],
  "priceAdjustmentReasoning": "Detailed reasoning for your adjustment recommendation, integrating the financial data and news analysis.",
  "finalRecommendation": "A clear final recommendation: e.g., 'Adjust price upwards by 5-10%', 'Maintain current price with a neutral outlook', etc.",
  "sources": [
    {"uri": "https://... page the analysis relies on", "title": "Page title"}
  ]
}"""


def build_valuation_prompt(company_name: str, question: str) -> str:
    return (
        "Act as a first-year junior investment banking analyst from a top-tier bank. Your task is to "
        f'perform a valuation analysis for "{company_name}".\n'
        "Your analysis must be based on the latest available public financial data (like cash flows and "
        "earnings from the last 12-24 months) and recent significant news.\n"
        f'The user\'s specific question is: "{question}"\n\n'
        "Respond with a single JSON object and nothing else. It MUST strictly adhere to this schema:\n"
        f"{VALUATION_JSON_SCHEMA}"
    )


def build_valuation_pitch_deck_prompt(analysis_json: str) -> str:
    """`analysis_json` is the serialized ValuationAnalysis the deck is built from."""
    slide_list = ", ".join(f"{i}. {title}" for i, title in enumerate(VALUATION_DECK_SLIDES, start=1))
    return (
        "Act as a junior investment banking analyst. Based on the following JSON valuation analysis, "
        f"create a concise {len(VALUATION_DECK_SLIDES)}-slide pitch deck.\n"
        "The pitch deck should be for an internal meeting to discuss a potential trade or advisory role.\n"
        f"The slides should cover: {slide_list}.\n\n"
        'Return a JSON object of the form {"slides": [{"slideNumber": 1, "title": "...", '
        '"bulletPoints": ["...", "..."]}]}.\n\n'
        f"Analysis Data:\n{analysis_json}"
    )
