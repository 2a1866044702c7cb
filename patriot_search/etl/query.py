"""Turn search-form input into directory search parameters."""

import logging
import re
from typing import Dict, Optional

from patriot_search.etl.transform import STATE_CODES

logger = logging.getLogger(__name__)

_CITY_STATE = re.compile(r"^(.+?)[,\s]+([A-Z]{2})$", re.IGNORECASE)
_ZIP_CODE = re.compile(r"^\d{5}(-\d{4})?$")
_STREET_SUFFIXES = {
    "ave", "avenue", "blvd", "ct", "court", "dr", "drive", "hwy", "highway", "ln", "lane",
    "pkwy", "pl", "rd", "road", "st", "street", "trl", "trail", "way", "cir", "ter",
}


def _looks_like_street(text: str) -> bool:
    # "123 Oak Ct" or "Collins Rd NE" are street addresses, not "City ST".
    if any(ch.isdigit() for ch in text):
        return True
    tokens = text.lower().replace(".", "").split()
    return bool(tokens) and tokens[-1] in _STREET_SUFFIXES


def parse_location(text: Optional[str]) -> Dict[str, str]:
    """Parse the combined "address, city & state, or zip" field.

    "Cedar Rapids, IA" and "Cedar Rapids IA" become city/state; anything else
    is passed through as a free-form address, and a bare zip code is sent as
    both address and zip.
    """
    value = (text or "").strip()
    if not value:
        return {}

    match = _CITY_STATE.match(value)
    city = match.group(1).strip().rstrip(",").strip() if match else ""
    if match and match.group(2).upper() in STATE_CODES and not _looks_like_street(city):
        state = match.group(2).upper()
        logger.debug("Parsed location as city=%s state=%s", city, state)
        return {"city": city, "state": state}

    params = {"address": value}
    if _ZIP_CODE.match(value):
        params["zip"] = value
    logger.debug("Parsed location as address params=%s", params)
    return params


def build_search_params(
    *,
    business_name: Optional[str] = None,
    address: Optional[str] = None,
    category: Optional[str] = None,
    service_type: Optional[str] = None,
    keywords: Optional[str] = None,
) -> Dict[str, str]:
    params: Dict[str, str] = {}
    if business_name and business_name.strip():
        params["businessName"] = business_name.strip()
    params.update(parse_location(address))
    if keywords and keywords.strip():
        params["q"] = keywords.strip()
    if category and category.strip():
        params["category"] = category.strip().upper()
    if service_type and service_type.strip():
        params["serviceType"] = service_type.strip().upper()
    return params


def duplicate_lookup_params(
    *,
    place_id: Optional[str] = None,
    name: Optional[str] = None,
    city: Optional[str] = None,
    state: Optional[str] = None,
) -> Dict[str, str]:
    """Parameters for the directory lookup behind a duplicate check."""
    if place_id:
        return {"operation": "search", "google_place_id": place_id}
    params = {"operation": "search"}
    if name:
        params["businessName"] = name
    if city:
        params["city"] = city
    if state:
        params["state"] = state
    return params
