import pytest

from conftest import FakeDirectory, FakePlaces
from patriot_search.core.config import Settings
from patriot_search.jobs import search_server
from patriot_search.matching.reconciler import Reconciler
from patriot_search.models import BusinessRecord


@pytest.fixture
def wiring(monkeypatch):
    state = {
        "settings": Settings(search_api_url="https://api.example.com", google_api_key="key"),
        "directory": FakeDirectory(
            results=[
                BusinessRecord(id="1", name="Olive Garden", incentives=[{"type": "VT"}]),
                BusinessRecord(id="2", name="Red Lobster"),
            ]
        ),
        "places": FakePlaces(),
    }
    monkeypatch.setattr(search_server, "get_settings", lambda: state["settings"])
    monkeypatch.setattr(
        search_server,
        "build_reconciler",
        lambda settings: Reconciler(state["directory"], state["places"]),
    )
    return state


def test_health_endpoint(wiring):
    client = search_server.app.test_client()
    response = client.get("/healthz")
    assert response.status_code == 200
    body = response.get_json()
    assert body["status"] == "ok"
    assert body["search_api_configured"] is True


def test_search_requires_a_parameter(wiring):
    client = search_server.app.test_client()
    assert client.get("/search").status_code == 400
    assert client.get("/search?businessName=%20").status_code == 400


def test_search_validates_incentive_flag(wiring):
    client = search_server.app.test_client()
    assert client.get("/search?businessName=Olive&onlyWithIncentives=maybe").status_code == 400


def test_search_defaults_to_incentive_view(wiring):
    client = search_server.app.test_client()
    response = client.get("/search?businessName=Olive%20Garden&address=Cedar%20Rapids%20IA")

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["total"] == 2
    assert data["shown"] == 1
    assert data["results"][0]["provenance"] == "primary"
    assert data["results"][0]["marker_color"] == "#EA4335"
    assert data["params"] == {"businessName": "Olive Garden", "city": "Cedar Rapids", "state": "IA"}


def test_search_can_show_all_results(wiring):
    client = search_server.app.test_client()
    response = client.get("/search?businessName=Olive%20Garden&onlyWithIncentives=false")

    data = response.get_json()["data"]
    assert [row["provenance"] for row in data["results"]] == ["primary", "nearby_database"]


def test_duplicate_check_requires_place(wiring):
    client = search_server.app.test_client()
    assert client.post("/duplicate-check", json={}).status_code == 400
    assert client.post("/duplicate-check", json={"place": "nope"}).status_code == 400


def test_duplicate_check_with_place_payload(wiring):
    wiring["directory"].by_place_id = [
        BusinessRecord(id="b1", name="Ace Hardware", address1="100 Main St", external_place_id="ChIJabc")
    ]
    client = search_server.app.test_client()
    payload = {
        "place": {
            "place_id": "ChIJabc",
            "name": "Ace Hardware",
            "formatted_address": "100 Main St, Springfield, IL 62701, USA",
            "geometry": {"location": {"lat": 39.78, "lng": -89.65}},
        }
    }

    response = client.post("/duplicate-check", json=payload)

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["outcome"] == "duplicate"
    assert data["reason"] == "place_id"
    assert data["match"]["id"] == "b1"
    assert data["match"]["duplicate_of_internal_id"] == "b1"
    assert data["prefill"] is None


def test_duplicate_check_by_place_id_offers_prefill(wiring):
    wiring["places"].details = {
        "name": "Joe's Diner",
        "formatted_address": "12 Oak Ave, Springfield, IL 62701, USA",
        "formatted_phone_number": "555-123-4567",
        "geometry": {"location": {"lat": 39.78, "lng": -89.65}},
    }
    client = search_server.app.test_client()

    response = client.post("/duplicate-check", json={"place_id": "ChIJjoe"})

    data = response.get_json()["data"]
    assert data["outcome"] == "no_duplicate"
    assert data["match"]["provenance"] == "external_unlisted"
    assert data["prefill"]["bname"] == "Joe's Diner"
    assert data["prefill"]["google_place_id"] == "ChIJjoe"
    assert data["prefill"]["zip"] == "62701"


def test_duplicate_check_skipped_place_still_returns_place(wiring):
    wiring["places"].details = {"name": "Joe's Diner", "formatted_address": "12 Oak Ave, Springfield, IL 62701, USA"}
    client = search_server.app.test_client()

    response = client.post("/duplicate-check", json={"place_id": "ChIJjoe"})

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["outcome"] == "skipped"
    assert data["match"] is None
    assert data["prefill"] is None
    assert data["place"]["bname"] == "Joe's Diner"
    assert data["place"]["google_place_id"] == "ChIJjoe"
    assert data["place"]["lat"] is None


def test_duplicate_check_reports_unexpected_errors(wiring, monkeypatch):
    def boom(settings):
        raise RuntimeError("wiring broke")

    monkeypatch.setattr(search_server, "build_reconciler", boom)
    client = search_server.app.test_client()

    response = client.post("/duplicate-check", json={"place_id": "x"})

    assert response.status_code == 500
    assert response.get_json()["error"] == "duplicate check failed"
