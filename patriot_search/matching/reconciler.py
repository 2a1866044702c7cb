"""Search and duplicate-check orchestration for the directory search page."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol

import requests

from patriot_search.core.config import Settings
from patriot_search.etl.query import build_search_params, duplicate_lookup_params
from patriot_search.etl.transform import (
    MalformedExternalPlace,
    external_to_business_record,
    to_external_place,
    to_prefill,
    validate_place,
)
from patriot_search.matching.classifier import classify, classify_results
from patriot_search.matching.matcher import find_duplicate
from patriot_search.models import (
    BusinessRecord,
    DuplicateCheckResult,
    DuplicateOutcome,
    ExternalPlace,
    Provenance,
    ReconciledResult,
    SearchOutcome,
)
from patriot_search.vendors.business_api import BusinessDirectory, LookupFailure
from patriot_search.vendors.google_places import GooglePlacesClient, GooglePlacesError

logger = logging.getLogger(__name__)


class Directory(Protocol):
    def search(self, params: Dict[str, str]) -> List[BusinessRecord]:
        ...


class PlacesService(Protocol):
    def place_details(self, place_id: str) -> Dict[str, Any]:
        ...

    def text_search(self, query: str) -> List[Dict[str, Any]]:
        ...


class Reconciler:
    """Runs one search cycle or one duplicate-check cycle per call.

    Holds no per-call state, so a single instance may serve concurrent callers.
    """

    def __init__(
        self,
        directory: Directory,
        places: Optional[PlacesService] = None,
        *,
        include_external_places: bool = False,
    ):
        self.directory = directory
        self.places = places
        self.include_external_places = include_external_places

    # ---------- Search cycle ----------

    def search(
        self,
        *,
        business_name: Optional[str] = None,
        address: Optional[str] = None,
        category: Optional[str] = None,
        service_type: Optional[str] = None,
        keywords: Optional[str] = None,
    ) -> SearchOutcome:
        params = build_search_params(
            business_name=business_name,
            address=address,
            category=category,
            service_type=service_type,
            keywords=keywords,
        )
        if not params:
            logger.info("Search skipped: no search parameters supplied")
            return SearchOutcome(results=[], params=params)

        try:
            records = self.directory.search(params)
        except LookupFailure as exc:
            logger.warning("Directory search failed for params=%s: %s", params, exc)
            records = []

        results = classify_results(records, business_name)
        logger.info("Search params=%s returned %d directory results", params, len(results))

        if self.include_external_places and self.places is not None:
            results.extend(self._external_results(params, records))

        return SearchOutcome(results=results, params=params)

    def _external_results(self, params: Dict[str, str], records: List[BusinessRecord]) -> List[ReconciledResult]:
        query = " ".join(
            value
            for value in (params.get("businessName") or params.get("q"), params.get("address"), params.get("city"), params.get("state"))
            if value
        )
        if not query:
            return []

        try:
            payloads = self.places.text_search(query)
        except (GooglePlacesError, requests.RequestException) as exc:
            logger.warning("Places text search failed for query=%s: %s", query, exc)
            return []

        extra: List[ReconciledResult] = []
        seen_ids = set()
        for payload in payloads:
            place = to_external_place(payload)
            if not place.external_id or not place.display_name or place.external_id in seen_ids:
                continue
            seen_ids.add(place.external_id)
            duplicate, decision = find_duplicate(place, records)
            if duplicate is not None:
                logger.debug("Dropping place %s: listed as %s (%s)", place.external_id, duplicate.id, decision.reason.value)
                continue
            record = external_to_business_record(place)
            extra.append(ReconciledResult(record=record, provenance=classify(record)))

        logger.info("Added %d unlisted places for query=%s", len(extra), query)
        return extra

    # ---------- Duplicate-check cycle ----------

    def check_duplicate(self, place: ExternalPlace) -> DuplicateCheckResult:
        try:
            validate_place(place)
        except MalformedExternalPlace as exc:
            logger.warning("Skipping duplicate check: %s", exc)
            return DuplicateCheckResult(outcome=DuplicateOutcome.SKIPPED, place=place)

        try:
            candidates = self._lookup_candidates(place)
        except LookupFailure as exc:
            logger.warning("Duplicate lookup failed for place %s, allowing add: %s", place.external_id, exc)
            return self._no_duplicate(place)

        duplicate, decision = find_duplicate(place, candidates)
        if duplicate is None:
            logger.info("No duplicate for place %s among %d candidates", place.external_id, len(candidates))
            return self._no_duplicate(place)

        logger.info("Place %s already listed as %s (%s)", place.external_id, duplicate.id, decision.reason.value)
        match = ReconciledResult(
            record=duplicate,
            provenance=classify(duplicate),
            duplicate_of_internal_id=duplicate.id,
        )
        return DuplicateCheckResult(
            outcome=DuplicateOutcome.DUPLICATE, match=match, reason=decision.reason, place=place
        )

    def _lookup_candidates(self, place: ExternalPlace) -> List[BusinessRecord]:
        if place.external_id:
            by_id = self.directory.search(duplicate_lookup_params(place_id=place.external_id))
            if by_id:
                duplicate, _ = find_duplicate(place, by_id)
                if duplicate is not None:
                    return by_id

        # Many listings were entered by hand and carry no place id.
        return self.directory.search(
            duplicate_lookup_params(name=place.display_name, city=place.city, state=place.state_code)
        )

    def _no_duplicate(self, place: ExternalPlace) -> DuplicateCheckResult:
        return DuplicateCheckResult(
            outcome=DuplicateOutcome.NO_DUPLICATE,
            match=ReconciledResult(record=place, provenance=Provenance.EXTERNAL_UNLISTED),
            prefill=to_prefill(place),
            place=place,
        )

    def check_place_id(self, place_id: str) -> DuplicateCheckResult:
        """Fetch a place's details from the mapping service and run the duplicate check."""
        if self.places is None:
            logger.warning("No places client configured; cannot check place %s", place_id)
            return DuplicateCheckResult(outcome=DuplicateOutcome.SKIPPED)

        try:
            details = self.places.place_details(place_id)
        except (GooglePlacesError, requests.RequestException) as exc:
            logger.warning("Place details failed for %s: %s", place_id, exc)
            return DuplicateCheckResult(outcome=DuplicateOutcome.SKIPPED)

        if not details:
            logger.warning("Place details for %s came back empty", place_id)
            return DuplicateCheckResult(outcome=DuplicateOutcome.SKIPPED)

        details = {"place_id": place_id, **details}
        return self.check_duplicate(to_external_place(details))


def build_reconciler(settings: Settings) -> Reconciler:
    """Wire the reconciler to the configured directory and Places clients."""
    directory = BusinessDirectory(settings.search_api_url, timeout=settings.request_timeout)
    places = None
    if settings.google_api_key:
        places = GooglePlacesClient(settings.google_api_key, timeout=settings.request_timeout)
    return Reconciler(directory, places, include_external_places=settings.include_external_places)
