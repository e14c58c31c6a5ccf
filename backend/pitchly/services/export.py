"""
export.py — Peer comparison CSV export

Purpose:
- Render the subject and its peers as a CSV table for download
- One row per company, subject first, with raw figures (not display-formatted)
  and the P/E and EV/EBITDA positions from the peer comparison

This module should NOT:
- Contain modeling math beyond the EV/EBITDA ratio shown in the table.
"""

from __future__ import annotations

import csv
import io
from typing import List, Optional, Sequence

from pitchly.services.modeling.comps import MULTIPLE_EV_EBITDA, MULTIPLE_PE, ev_ebitda_multiple
from pitchly.services.modeling.types import PeerComparisonResult, Quote
from pitchly.utils.formatting import NOT_AVAILABLE

CSV_HEADERS = [
    "Company Name",
    "Ticker",
    "Market Cap (USD)",
    "EBITDA (USD)",
    "Revenue Growth (%)",
    "P/E Ratio",
    "EV/EBITDA",
    "P/E Position",
    "EV/EBITDA Position",
]

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"


def peer_csv_filename(ticker: str) -> str:
    return f"{ticker.upper()}_peer_comparison.csv"


def _whole(value: Optional[float]) -> str:
    # Zero is reported as N/A, like a missing figure
    return f"{value:.0f}" if value else NOT_AVAILABLE


def _two_decimals(value: Optional[float]) -> str:
    return f"{value:.2f}" if value else NOT_AVAILABLE


def build_peer_rows(
    quote: Quote,
    peers: Sequence[Quote],
    comparison: Optional[PeerComparisonResult] = None,
) -> List[List[str]]:
    positions = comparison.positions if comparison else {}
    rows: List[List[str]] = []
    for company in [quote, *peers]:
        company_positions = positions.get(company.ticker, {})
        rows.append([
            company.company_name,
            company.ticker,
            _whole(company.market_cap),
            _whole(company.ebitda),
            _two_decimals(company.revenue_growth * 100 if company.revenue_growth else None),
            _two_decimals(company.pe_ratio),
            _two_decimals(ev_ebitda_multiple(company)),
            company_positions.get(MULTIPLE_PE, NOT_AVAILABLE),
            company_positions.get(MULTIPLE_EV_EBITDA, NOT_AVAILABLE),
        ])
    return rows


def build_peer_csv(
    quote: Quote,
    peers: Sequence[Quote],
    comparison: Optional[PeerComparisonResult] = None,
) -> str:
    """CSV text (header + one row per company); quoting follows RFC 4180."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    writer.writerows(build_peer_rows(quote, peers, comparison))
    return buffer.getvalue()
