import sys
from pathlib import Path

import pytest

# Ensure the `hydrator` package is importable when running pytest from the repo root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from hydrator.core.config import Settings  # noqa: E402
from hydrator.core.regions import Bounds, Region  # noqa: E402


class FakeLedger:
    def __init__(self, seen=None):
        self.entries = dict(seen or {})
        self.checks = []

    def has_seen(self, place_id):
        self.checks.append(place_id)
        return place_id in self.entries

    def mark_seen(self, place_id, city, name, is_halal):
        previous = self.entries.get(place_id)
        halal = bool(is_halal) or bool(previous and previous["is_halal"])
        self.entries[place_id] = {"city": city, "name": name, "is_halal": halal}


class FakeStore:
    def __init__(self):
        self.records = {}
        self.summaries = []
        self.request_statuses = []

    def insert_if_absent(self, record):
        if record.place_id in self.records:
            return False
        self.records[record.place_id] = record
        return True

    def upsert_city_run_summary(self, region, restaurant_count):
        self.summaries.append((region.name, restaurant_count))

    def set_city_request_status(self, city, status):
        self.request_statuses.append((city, status))
        return 1


class FakeSource:
    """In-memory directory keyed by query text, grid keyword and place id."""

    def __init__(self, text=None, nearby=None, details=None):
        self.text = text or {}
        self.nearby = nearby or {}
        self.place_details = details or {}
        self.text_calls = []
        self.nearby_calls = []
        self.detail_calls = []

    def search_text(self, query, locality, page_token=None):
        self.text_calls.append((query, locality, page_token))
        pages = self.text.get(query, [[]])
        index = int(page_token) if page_token else 0
        next_token = str(index + 1) if index + 1 < len(pages) else None
        return pages[index], next_token

    def search_nearby(self, point, radius, keyword):
        self.nearby_calls.append((point, radius, keyword))
        return self.nearby.get(keyword, [])

    def details(self, place_id):
        self.detail_calls.append(place_id)
        payload = self.place_details.get(place_id)
        if isinstance(payload, Exception):
            raise payload
        return payload


@pytest.fixture
def testville():
    return Region(
        name="Testville",
        lat=10.5,
        lng=20.5,
        country="Nowhere",
        bounds=Bounds(north=11.0, south=10.0, east=21.0, west=20.0),
    )


@pytest.fixture
def fast_settings():
    return Settings(
        google_api_key="key",
        database_url="postgres://",
        grid_density=1,
        request_delay=0,
        query_delay=0,
        page_token_delay=0,
    )


@pytest.fixture
def fake_ledger():
    return FakeLedger()


@pytest.fixture
def fake_store():
    return FakeStore()
