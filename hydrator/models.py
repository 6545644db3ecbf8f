"""Core data models shared by the hydration pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(slots=True)
class PlaceCandidate:
    """Normalized snapshot of a place returned by a directory search."""

    place_id: str
    name: str
    address: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    types: List[str] = field(default_factory=list)
    photo_reference: Optional[str] = None
    raw_snapshot: Optional[Dict[str, Any]] = field(default=None, repr=False)


@dataclass(slots=True)
class RestaurantRecord:
    """A classified restaurant plus the directory metadata stored beside it."""

    place_id: str
    name: str
    city: str
    address: Optional[str]
    lat: Optional[float]
    lng: Optional[float]
    cuisine: str
    halal_status: str
    confidence: int
    discovered_via: str
    photo_reference: Optional[str] = None
    rating: Optional[float] = None
    review_count: int = 0
    phone: Optional[str] = None
    website: Optional[str] = None
    hours: Optional[List[str]] = None
    source: str = "google"
