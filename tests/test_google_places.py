import pytest

from patriot_search.vendors import google_places


class DummyResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload or {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise RuntimeError("http error")

    def json(self):
        return self._payload


class DummySession:
    def __init__(self):
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        return self.response


@pytest.fixture(autouse=True)
def patch_session(monkeypatch):
    session = DummySession()
    monkeypatch.setattr(google_places, "_SESSION", session)
    return session


def test_text_search_success(patch_session):
    patch_session.response = DummyResponse(payload={"status": "OK", "results": []})
    payload = google_places.text_search("ace hardware springfield", "key")
    assert payload["status"] == "OK"
    url, params, timeout = patch_session.calls[0]
    assert "textsearch" in url
    assert params["query"] == "ace hardware springfield"
    assert "location" not in params
    assert timeout == 10


def test_text_search_error_status(patch_session):
    patch_session.response = DummyResponse(payload={"status": "INVALID_REQUEST", "error_message": "bad"})
    with pytest.raises(google_places.GooglePlacesError):
        google_places.text_search("pizza", "key")


def test_place_details_success(patch_session):
    patch_session.response = DummyResponse(payload={"status": "OK", "result": {"name": "Ace Hardware"}})
    result = google_places.place_details("ChIJabc", "key")
    assert result["name"] == "Ace Hardware"
    _, params, _ = patch_session.calls[0]
    assert params["place_id"] == "ChIJabc"
    assert "address_components" in params["fields"]


def test_place_details_error(patch_session):
    patch_session.response = DummyResponse(payload={"status": "OVER_QUERY_LIMIT", "error_message": "limit"})
    with pytest.raises(google_places.GooglePlacesError):
        google_places.place_details("ChIJabc", "key")


def test_client_wraps_api_key_and_timeout(patch_session):
    patch_session.response = DummyResponse(payload={"status": "OK", "results": [{"place_id": "1"}]})
    client = google_places.GooglePlacesClient("secret", timeout=3)

    assert client.text_search("coffee") == [{"place_id": "1"}]
    _, params, timeout = patch_session.calls[0]
    assert params["key"] == "secret"
    assert timeout == 3


def test_client_requires_api_key():
    with pytest.raises(ValueError):
        google_places.GooglePlacesClient("")
