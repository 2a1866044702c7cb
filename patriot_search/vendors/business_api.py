"""Client for the directory's business search endpoint."""

import logging
from typing import Any, Dict, List

import requests

from patriot_search.etl.transform import to_business_records
from patriot_search.models import BusinessRecord

logger = logging.getLogger(__name__)
_SESSION = requests.Session()


class LookupFailure(RuntimeError):
    """Raised when the directory search call fails or answers with a non-OK status."""


def search(params: Dict[str, str], base_url: str, timeout: float = 10) -> List[Dict[str, Any]]:
    """GET {base_url}/search and return the raw ``results`` rows."""
    if not base_url:
        raise LookupFailure("search API URL is not configured")

    url = f"{base_url.rstrip('/')}/search"
    try:
        response = _SESSION.get(url, params=params, timeout=timeout)
    except requests.RequestException as exc:
        raise LookupFailure(f"search request failed: {exc}") from exc

    if not (200 <= response.status_code < 300):
        logger.error("Search API returned non-2xx status (%s): %s", response.status_code, response.text[:500])
        raise LookupFailure(f"search API returned status {response.status_code}")

    try:
        payload = response.json()
    except ValueError as exc:
        raise LookupFailure("search API returned a non-JSON body") from exc

    results = payload.get("results") if isinstance(payload, dict) else None
    if not isinstance(results, list):
        raise LookupFailure("search API response has no results list")
    return results


class BusinessDirectory:
    """Business search client handed to the reconciler."""

    def __init__(self, base_url: str, timeout: float = 10):
        self.base_url = base_url
        self.timeout = timeout

    def search(self, params: Dict[str, str]) -> List[BusinessRecord]:
        rows = search(params, self.base_url, timeout=self.timeout)
        logger.debug("Directory search params=%s returned %d rows", params, len(rows))
        return to_business_records(rows)
