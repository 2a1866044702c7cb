"""Decide whether a Google place and a directory record are the same business."""

import logging
from typing import Iterable, Optional, Tuple

from patriot_search.etl.normalize import normalize_address, normalize_address_prefix, normalize_name, normalize_phone
from patriot_search.models import BusinessRecord, ExternalPlace, MatchDecision, MatchReason

logger = logging.getLogger(__name__)

NO_MATCH = MatchDecision(matched=False, reason=MatchReason.NONE)


def _place_address(place: ExternalPlace) -> str:
    return normalize_address_prefix(place.formatted_address or place.street_address)


def _addresses_overlap(place_address: str, business_address: str) -> bool:
    # Empty strings are substrings of everything.
    if not place_address or not business_address:
        return False
    return place_address in business_address or business_address in place_address


def match_place(place: ExternalPlace, business: BusinessRecord) -> MatchDecision:
    """Tiered comparison; the first satisfied rule wins.

    1. Provider place ids present on both sides and equal.
    2. Same name and one street address contains the other.
    3. Same name and the same non-empty phone digits.

    A blank name never satisfies rules 2 or 3; a blank street address never
    satisfies rule 2.
    """
    if place.external_id and business.external_place_id and place.external_id == business.external_place_id:
        return MatchDecision(matched=True, reason=MatchReason.PLACE_ID)

    place_name = normalize_name(place.display_name)
    if not place_name or place_name != normalize_name(business.name):
        return NO_MATCH

    if _addresses_overlap(_place_address(place), normalize_address(business.address1)):
        return MatchDecision(matched=True, reason=MatchReason.NAME_AND_ADDRESS)

    place_phone = normalize_phone(place.phone_number)
    if place_phone and place_phone == normalize_phone(business.phone):
        return MatchDecision(matched=True, reason=MatchReason.NAME_AND_PHONE)

    return NO_MATCH


def find_duplicate(
    place: ExternalPlace, candidates: Iterable[BusinessRecord]
) -> Tuple[Optional[BusinessRecord], MatchDecision]:
    """Return the first candidate matching ``place`` in list order."""
    found: Optional[BusinessRecord] = None
    found_decision = NO_MATCH
    for candidate in candidates:
        decision = match_place(place, candidate)
        if not decision.matched:
            continue
        if found is None:
            found, found_decision = candidate, decision
            continue
        logger.debug(
            "Place %s also matches %s (%s); keeping first match %s",
            place.external_id,
            candidate.id,
            decision.reason.value,
            found.id,
        )
    return found, found_decision
