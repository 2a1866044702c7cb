"""Provenance classification for directory search results."""

from typing import Iterable, List, Optional

from patriot_search.etl.normalize import normalize_name
from patriot_search.models import BusinessRecord, Provenance, ReconciledResult

MARKER_COLORS = {
    Provenance.PRIMARY: "#EA4335",
    Provenance.NEARBY_DATABASE: "#28a745",
    Provenance.EXTERNAL_UNLISTED: "#4285F4",
    Provenance.CHAIN: "#FF9800",
}


def classify(record: BusinessRecord, business_name_query: Optional[str] = None) -> Provenance:
    """Later rules override earlier ones: external beats chain beats name relevance."""
    query = normalize_name(business_name_query)
    if query and query in normalize_name(record.name):
        provenance = Provenance.PRIMARY
    else:
        provenance = Provenance.NEARBY_DATABASE

    if record.chain_id:
        provenance = Provenance.CHAIN

    if record.is_external:
        provenance = Provenance.EXTERNAL_UNLISTED

    return provenance


def classify_results(
    records: Iterable[BusinessRecord], business_name_query: Optional[str] = None
) -> List[ReconciledResult]:
    return [ReconciledResult(record=record, provenance=classify(record, business_name_query)) for record in records]


def marker_color(provenance: Provenance) -> str:
    try:
        return MARKER_COLORS[provenance]
    except KeyError:
        raise ValueError(f"no marker color for provenance {provenance!r}") from None
