"""
peers.py — Peer Comparison Endpoint

Endpoints:
- POST /peers/compare → PeerComparisonResult for a subject and its peers

An empty peer list is valid and yields the "Limited Data" badge.
"""

from fastapi import APIRouter

from pitchly.api.v1.schemas import PeerCompareRequest
from pitchly.core.logging import get_logger
from pitchly.services.modeling.comps import compare_peers

logger = get_logger(__name__)

router = APIRouter(
    prefix="/peers",
    tags=["peers"]
)


@router.post("/compare")
def compare(request: PeerCompareRequest):
    subject = request.subject.to_quote()
    peers = [p.to_quote() for p in request.peers if p.ticker != subject.ticker]
    return compare_peers(subject, peers)
