import pytest

from hydrator.core.grid import GridPoint
from hydrator.vendors import google_places


class DummyResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload or {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise google_places.requests.HTTPError("http error")

    def json(self):
        return self._payload


class DummySession:
    def __init__(self):
        self.calls = []
        self.response = DummyResponse(payload={"status": "OK"})

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
    payload = google_places.text_search("halal food in Calgary", "key")
    assert payload["status"] == "OK"
    url, params, timeout = patch_session.calls[0]
    assert "textsearch" in url
    assert params["query"] == "halal food in Calgary"
    assert params["type"] == "restaurant"
    assert timeout == 10


def test_text_search_with_page_token_omits_query(patch_session):
    patch_session.response = DummyResponse(payload={"status": "OK", "results": []})
    google_places.text_search("halal food in Calgary", "key", pagetoken="tok")
    _, params, _ = patch_session.calls[0]
    assert params["pagetoken"] == "tok"
    assert "query" not in params


def test_text_search_zero_results_is_not_an_error(patch_session):
    patch_session.response = DummyResponse(payload={"status": "ZERO_RESULTS", "results": []})
    assert google_places.text_search("zabiha in Calgary", "key")["results"] == []


def test_text_search_error_status(patch_session):
    patch_session.response = DummyResponse(payload={"status": "INVALID_REQUEST", "error_message": "bad"})
    with pytest.raises(google_places.GooglePlacesError):
        google_places.text_search("pizza", "key")


def test_http_error_propagates(patch_session):
    patch_session.response = DummyResponse(status_code=503)
    with pytest.raises(google_places.requests.HTTPError):
        google_places.place_details("pid", "key")


def test_nearby_search_params(patch_session):
    patch_session.response = DummyResponse(payload={"status": "OK", "results": [{"place_id": "A"}]})
    payload = google_places.nearby_search(51.0, -114.0, 4000, "halal", "key")
    url, params, _ = patch_session.calls[0]
    assert "nearbysearch" in url
    assert params["location"] == "51.0,-114.0"
    assert params["radius"] == 4000
    assert params["keyword"] == "halal"
    assert params["type"] == "restaurant"
    assert payload["results"][0]["place_id"] == "A"


def test_place_details_success(patch_session):
    patch_session.response = DummyResponse(payload={"status": "OK", "result": {"name": "Acme"}})
    result = google_places.place_details("pid", "key")
    assert result["name"] == "Acme"
    _, params, _ = patch_session.calls[0]
    assert "reviews" in params["fields"]
    assert "photos" in params["fields"]


def test_place_details_error(patch_session):
    patch_session.response = DummyResponse(payload={"status": "OVER_QUERY_LIMIT", "error_message": "limit"})
    with pytest.raises(google_places.GooglePlacesError):
        google_places.place_details("pid", "key")


def test_build_photo_url():
    assert google_places.build_photo_url(None, "key") is None
    url = google_places.build_photo_url("ref123", "key", max_width=200)
    assert url.startswith("https://maps.googleapis.com/maps/api/place/photo?")
    assert "photoreference=ref123" in url
    assert "maxwidth=200" in url


def test_source_binds_locality_and_returns_token(patch_session):
    patch_session.response = DummyResponse(
        payload={"status": "OK", "results": [{"place_id": "P1"}], "next_page_token": "next"}
    )
    source = google_places.GooglePlacesSource("key", timeout=5)

    results, token = source.search_text("halal restaurant", "Calgary")

    assert results == [{"place_id": "P1"}]
    assert token == "next"
    _, params, timeout = patch_session.calls[0]
    assert params["query"] == "halal restaurant in Calgary"
    assert timeout == 5


def test_source_nearby_uses_grid_point(patch_session):
    patch_session.response = DummyResponse(payload={"status": "OK", "results": []})
    source = google_places.GooglePlacesSource("key")
    assert source.search_nearby(GridPoint(lat=1.5, lng=2.5), 4000, "halal") == []
    _, params, _ = patch_session.calls[0]
    assert params["location"] == "1.5,2.5"


def test_source_requires_api_key():
    with pytest.raises(ValueError):
        google_places.GooglePlacesSource("")
