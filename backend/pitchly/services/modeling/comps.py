"""
comps.py — Comparable Companies (peer) positioning.

Purpose:
- Compute P/E, EV/EBITDA and P/S for the subject and each peer
- Build per-multiple quartiles over the pooled set (subject ∪ peers)
- Classify every company as premium / discount / in-line per multiple
- Summarize the subject's overall positioning

Outputs (JSON-serializable via dataclasses.asdict):
    PeerComparisonResult(base_ticker, peers, multiples, quartiles, positions,
                         sentiment_badge, commentary_text)

Note: Quartiles use floor-indexed positional selection on the sorted sample
(sorted[floor(n*0.25)], sorted[floor(n*0.5)], sorted[floor(n*0.75)]), not an
interpolated percentile. Values differ from numpy/pandas quantiles on small
samples.
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, List, Optional, Sequence

from pitchly.core.logging import get_logger
from pitchly.services.modeling.sentiment import (
    POSITION_DISCOUNT,
    POSITION_IN_LINE,
    POSITION_PREMIUM,
    classify_peer_positions,
)
from pitchly.services.modeling.types import PeerComparisonResult, Quartiles, Quote

logger = get_logger(__name__)


MULTIPLE_PE = "P/E"
MULTIPLE_EV_EBITDA = "EV/EBITDA"
MULTIPLE_PS = "P/S"
MULTIPLES: List[str] = [MULTIPLE_PE, MULTIPLE_EV_EBITDA, MULTIPLE_PS]

MIN_QUARTILE_SAMPLE = 4
PREMIUM_BAND = 1.10
DISCOUNT_BAND = 0.90


def ev_ebitda_multiple(quote: Quote) -> Optional[float]:
    if quote.ebitda is not None and quote.ebitda > 0 and quote.market_cap:
        return quote.market_cap / quote.ebitda
    return None


def ps_multiple(quote: Quote) -> Optional[float]:
    if quote.revenue is not None and quote.revenue > 0 and quote.market_cap:
        return quote.market_cap / quote.revenue
    return None


def company_multiples(quote: Quote) -> Dict[str, Optional[float]]:
    """Multiples for one company, computed on the fly (never stored on the Quote)."""
    return {
        MULTIPLE_PE: quote.pe_ratio,
        MULTIPLE_EV_EBITDA: ev_ebitda_multiple(quote),
        MULTIPLE_PS: ps_multiple(quote),
    }


def _usable(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def calculate_quartiles(values: Iterable[Optional[float]]) -> Quartiles:
    """
    Floor-indexed quartiles over the positive, finite values.

    Fewer than MIN_QUARTILE_SAMPLE usable values → all-None Quartiles.
    """
    ordered = sorted(v for v in values if _usable(v))
    n = len(ordered)
    if n < MIN_QUARTILE_SAMPLE:
        return Quartiles()
    return Quartiles(
        q1=ordered[math.floor(n * 0.25)],
        median=ordered[math.floor(n * 0.5)],
        q3=ordered[math.floor(n * 0.75)],
    )


def classify_position(value: Optional[float], quartiles: Quartiles) -> str:
    """
    Premium above Q3 * 1.10, discount below Q1 * 0.90, otherwise in-line.

    Values excluded from the quartile sample (missing, non-finite or <= 0)
    and unavailable quartiles default to in-line.
    """
    if not _usable(value) or quartiles.q1 is None or quartiles.q3 is None:
        return POSITION_IN_LINE
    if value > quartiles.q3 * PREMIUM_BAND:
        return POSITION_PREMIUM
    if value < quartiles.q1 * DISCOUNT_BAND:
        return POSITION_DISCOUNT
    return POSITION_IN_LINE


def compare_peers(subject: Quote, peers: Sequence[Quote]) -> PeerComparisonResult:
    """
    Peer comparison entrypoint.

    Args:
        subject: The company being valued
        peers: Comparable companies (may be empty)

    Returns:
        PeerComparisonResult; with no peers the badge is "Limited Data" and
        quartiles / positions are empty
    """
    if not peers:
        logger.info("No peers available for %s; comparison skipped", subject.ticker)
        badge, commentary = classify_peer_positions(subject.ticker, None)
        return PeerComparisonResult(
            base_ticker=subject.ticker,
            peers=[],
            multiples=list(MULTIPLES),
            quartiles={},
            positions={},
            sentiment_badge=badge,
            commentary_text=commentary,
        )

    companies = [subject, *peers]
    multiples_by_ticker = {c.ticker: company_multiples(c) for c in companies}

    quartiles = {
        multiple: calculate_quartiles(company_multiples(c)[multiple] for c in companies)
        for multiple in MULTIPLES
    }

    positions: Dict[str, Dict[str, str]] = {}
    for company in companies:
        values = multiples_by_ticker[company.ticker]
        positions[company.ticker] = {
            multiple: classify_position(values[multiple], quartiles[multiple])
            for multiple in MULTIPLES
        }

    badge, commentary = classify_peer_positions(subject.ticker, list(positions[subject.ticker].values()))

    return PeerComparisonResult(
        base_ticker=subject.ticker,
        peers=[p.ticker for p in peers],
        multiples=list(MULTIPLES),
        quartiles=quartiles,
        positions=positions,
        sentiment_badge=badge,
        commentary_text=commentary,
    )
