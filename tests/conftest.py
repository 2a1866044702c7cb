import sys
from pathlib import Path

import pytest

# Ensure `patriot_search` is importable when running pytest from a source checkout.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from patriot_search.models import BusinessRecord, ExternalPlace  # noqa: E402


class FakeDirectory:
    """Stands in for the business search API, keyed on the lookup kind."""

    def __init__(self, by_place_id=None, by_name=None, results=None, error=None):
        self.by_place_id = by_place_id or []
        self.by_name = by_name or []
        self.results = results or []
        self.error = error
        self.calls = []

    def search(self, params):
        self.calls.append(dict(params))
        if self.error is not None:
            raise self.error
        if "google_place_id" in params:
            return list(self.by_place_id)
        if params.get("operation") == "search":
            return list(self.by_name)
        return list(self.results)


class FakePlaces:
    def __init__(self, details=None, text_results=None, error=None):
        self.details = details
        self.text_results = text_results or []
        self.error = error
        self.queries = []

    def place_details(self, place_id):
        self.queries.append(("details", place_id))
        if self.error is not None:
            raise self.error
        return self.details

    def text_search(self, query):
        self.queries.append(("text", query))
        if self.error is not None:
            raise self.error
        return self.text_results


@pytest.fixture
def make_business():
    def _make(id="b1", name="Ace Hardware", **kwargs):
        return BusinessRecord(id=id, name=name, **kwargs)

    return _make


@pytest.fixture
def make_place():
    def _make(external_id="ChIJabc", display_name="Ace Hardware", **kwargs):
        kwargs.setdefault("formatted_address", "100 Main St, Springfield, IL 62701, USA")
        kwargs.setdefault("location", (39.78, -89.65))
        return ExternalPlace(external_id=external_id, display_name=display_name, **kwargs)

    return _make
