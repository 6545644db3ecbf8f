"""Client utilities for the Google Places API."""

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from hydrator.core.grid import GridPoint

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://maps.googleapis.com/maps/api/place"
_OK_STATUSES = {"OK", "ZERO_RESULTS"}

DEFAULT_TIMEOUT = 10
DETAIL_FIELDS = (
    "place_id,name,formatted_address,geometry,rating,user_ratings_total,"
    "reviews,photos,types,formatted_phone_number,website,opening_hours"
)


class GooglePlacesError(RuntimeError):
    """Raised when the Places API returns a non-successful response."""


def _get(endpoint: str, params: Dict[str, Any], timeout: float, operation: str) -> Dict[str, Any]:
    response = _SESSION.get(f"{_BASE_URL}/{endpoint}/json", params=params, timeout=timeout)
    response.raise_for_status()
    payload = response.json()
    status = payload.get("status")
    if status not in _OK_STATUSES:
        logger.error("%s failed: status=%s, error_message=%s", operation, status, payload.get("error_message"))
        raise GooglePlacesError(payload.get("error_message") or status)
    return payload


def text_search(
    query: str,
    api_key: str,
    pagetoken: Optional[str] = None,
    type_filter: Optional[str] = "restaurant",
    timeout: float = DEFAULT_TIMEOUT,
) -> Dict[str, Any]:
    params: Dict[str, Any] = {"key": api_key}
    if pagetoken:
        params["pagetoken"] = pagetoken
    else:
        params["query"] = query
        if type_filter:
            params["type"] = type_filter
    return _get("textsearch", params, timeout, "text_search")


def nearby_search(
    lat: float,
    lng: float,
    radius: int,
    keyword: str,
    api_key: str,
    type_filter: Optional[str] = "restaurant",
    timeout: float = DEFAULT_TIMEOUT,
) -> Dict[str, Any]:
    params: Dict[str, Any] = {
        "location": f"{lat},{lng}",
        "radius": radius,
        "keyword": keyword,
        "key": api_key,
    }
    if type_filter:
        params["type"] = type_filter
    return _get("nearbysearch", params, timeout, "nearby_search")


def place_details(
    place_id: str,
    api_key: str,
    fields: str = DETAIL_FIELDS,
    timeout: float = DEFAULT_TIMEOUT,
) -> Dict[str, Any]:
    params = {"place_id": place_id, "key": api_key, "fields": fields}
    payload = _get("details", params, timeout, "place_details")
    return payload.get("result", {})


def build_photo_url(photo_reference: Optional[str], api_key: str, max_width: int = 400) -> Optional[str]:
    """Resolve a stored photo reference into a fetchable URL at request time."""
    if not photo_reference:
        return None
    request = requests.Request(
        "GET",
        f"{_BASE_URL}/photo",
        params={"maxwidth": max_width, "photoreference": photo_reference, "key": api_key},
    )
    return request.prepare().url


class GooglePlacesSource:
    """Discovery source bound to one API key."""

    def __init__(self, api_key: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        if not api_key:
            raise ValueError("api_key is required")
        self.api_key = api_key
        self.timeout = timeout

    def search_text(
        self, query: str, locality: str, page_token: Optional[str] = None
    ) -> Tuple[List[Dict[str, Any]], Optional[str]]:
        payload = text_search(
            query=f"{query} in {locality}",
            api_key=self.api_key,
            pagetoken=page_token,
            timeout=self.timeout,
        )
        return payload.get("results", []), payload.get("next_page_token")

    def search_nearby(self, point: GridPoint, radius: int, keyword: str) -> List[Dict[str, Any]]:
        payload = nearby_search(
            lat=point.lat,
            lng=point.lng,
            radius=radius,
            keyword=keyword,
            api_key=self.api_key,
            timeout=self.timeout,
        )
        return payload.get("results", [])

    def details(self, place_id: str) -> Dict[str, Any]:
        return place_details(place_id=place_id, api_key=self.api_key, timeout=self.timeout)
