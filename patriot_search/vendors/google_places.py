"""Client utilities for the Google Places API."""

import logging
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://maps.googleapis.com/maps/api/place"
_DETAIL_FIELDS = (
    "place_id,name,formatted_address,formatted_phone_number,international_phone_number,"
    "geometry,website,types,address_components"
)


class GooglePlacesError(RuntimeError):
    """Raised when the Places API returns a non-successful response."""


def _get(endpoint: str, params: Dict[str, Any], timeout: float, operation: str) -> Dict[str, Any]:
    response = _SESSION.get(f"{_BASE_URL}/{endpoint}/json", params=params, timeout=timeout)
    response.raise_for_status()
    payload = response.json()
    status = payload.get("status")
    if status not in {"OK", "ZERO_RESULTS"}:
        logger.error("%s failed: status=%s, error_message=%s", operation, status, payload.get("error_message"))
        raise GooglePlacesError(payload.get("error_message") or status)
    return payload


def text_search(
    query: str,
    api_key: str,
    location: Optional[str] = None,
    radius: Optional[int] = None,
    timeout: float = 10,
) -> Dict[str, Any]:
    params: Dict[str, Any] = {"query": query, "key": api_key}
    if location:
        params["location"] = location
    if radius:
        params["radius"] = radius
    return _get("textsearch", params, timeout, "text_search")


def place_details(place_id: str, api_key: str, timeout: float = 10) -> Dict[str, Any]:
    params = {"place_id": place_id, "key": api_key, "fields": _DETAIL_FIELDS}
    payload = _get("details", params, timeout, "place_details")
    return payload.get("result", {})


class GooglePlacesClient:
    """Mapping-service client handed to the reconciler."""

    def __init__(self, api_key: str, timeout: float = 10):
        if not api_key:
            raise ValueError("a Google API key is required")
        self.api_key = api_key
        self.timeout = timeout

    def place_details(self, place_id: str) -> Dict[str, Any]:
        return place_details(place_id, self.api_key, timeout=self.timeout)

    def text_search(self, query: str) -> List[Dict[str, Any]]:
        payload = text_search(query, self.api_key, timeout=self.timeout)
        return payload.get("results", [])
