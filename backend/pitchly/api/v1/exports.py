"""
exports.py — Peer Table Export Endpoint (API Layer)

Purpose:
- Return the peer comparison table as a downloadable CSV file.
- All formatting lives in services/export.py; this module only fetches and
  wires the pieces together.

Endpoints:
- GET /exports/{ticker}/peers.csv
"""

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from pitchly.api.deps import get_quote_source, raise_quote_error
from pitchly.core.logging import get_logger
from pitchly.data.quote_client import QuoteFetchError, QuoteSource
from pitchly.services.export import CSV_MEDIA_TYPE, build_peer_csv, peer_csv_filename
from pitchly.services.modeling.comps import compare_peers

logger = get_logger(__name__)

router = APIRouter(
    prefix="/exports",
    tags=["exports"]
)


@router.get("/{ticker}/peers.csv")
def export_peers_csv(ticker: str, source: QuoteSource = Depends(get_quote_source)):
    """
    GET /exports/{ticker}/peers.csv

    Subject row first, then every peer that could be fetched.
    """
    ticker = ticker.strip().upper()
    try:
        quote = source.get_quote(ticker)
    except QuoteFetchError as e:
        raise_quote_error(ticker, e)

    peers = source.get_peer_quotes(ticker)
    content = build_peer_csv(quote, peers, compare_peers(quote, peers))
    logger.info(f"Exported peer table for {ticker} ({len(peers)} peers)")

    return Response(
        content=content,
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{peer_csv_filename(ticker)}"'},
    )
