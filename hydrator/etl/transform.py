"""Utilities for transforming Google Places responses into pipeline records."""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from hydrator.core.classify import Classification, detect_cuisine
from hydrator.models import PlaceCandidate, RestaurantRecord

logger = logging.getLogger(__name__)


def _strip_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def _safe_float(value: Any) -> Optional[float]:
    try:
        if value is None:
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def _safe_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def extract_location(result: Dict[str, Any]) -> Tuple[Optional[float], Optional[float]]:
    location = (result.get("geometry") or {}).get("location") or {}
    return _safe_float(location.get("lat")), _safe_float(location.get("lng"))


def photo_reference(photos: Optional[Iterable[Dict[str, Any]]]) -> Optional[str]:
    for photo in photos or []:
        if isinstance(photo, dict) and photo.get("photo_reference"):
            return photo["photo_reference"]
    return None


def to_candidate(result: Dict[str, Any]) -> Optional[PlaceCandidate]:
    """Normalise a text or nearby search hit. Returns ``None`` without a place id."""
    place_id = _strip_or_none(result.get("place_id"))
    if not place_id:
        logger.debug("Skipping result without place_id: %s", result)
        return None

    lat, lng = extract_location(result)
    return PlaceCandidate(
        place_id=place_id,
        name=_strip_or_none(result.get("name")) or place_id,
        address=_strip_or_none(result.get("formatted_address") or result.get("vicinity")),
        lat=lat,
        lng=lng,
        rating=_safe_float(result.get("rating")),
        review_count=_safe_int(result.get("user_ratings_total")),
        types=list(result.get("types") or []),
        photo_reference=photo_reference(result.get("photos")),
        raw_snapshot=result,
    )


def _opening_hours(details: Dict[str, Any]) -> Optional[List[str]]:
    weekday_text = (details.get("opening_hours") or {}).get("weekday_text")
    return list(weekday_text) if weekday_text else None


def to_restaurant_record(
    details: Dict[str, Any],
    city: str,
    classification: Classification,
    fallback: Optional[PlaceCandidate] = None,
) -> RestaurantRecord:
    """Build the row persisted for a classified place.

    ``fallback`` fills identity and location fields the detail payload omitted.
    """
    lat, lng = extract_location(details)
    place_id = _strip_or_none(details.get("place_id")) or (fallback.place_id if fallback else None)
    if not place_id:
        raise ValueError("place_id is required to build a restaurant record")
    name = _strip_or_none(details.get("name")) or (fallback.name if fallback else place_id)

    return RestaurantRecord(
        place_id=place_id,
        name=name,
        city=city,
        address=_strip_or_none(details.get("formatted_address")) or (fallback.address if fallback else None),
        lat=lat if lat is not None else (fallback.lat if fallback else None),
        lng=lng if lng is not None else (fallback.lng if fallback else None),
        cuisine=detect_cuisine(name),
        halal_status=classification.status,
        confidence=classification.confidence,
        discovered_via=classification.channel,
        photo_reference=photo_reference(details.get("photos")) or (fallback.photo_reference if fallback else None),
        rating=_safe_float(details.get("rating")),
        review_count=_safe_int(details.get("user_ratings_total")) or 0,
        phone=_strip_or_none(details.get("formatted_phone_number")),
        website=_strip_or_none(details.get("website")),
        hours=_opening_hours(details),
    )
