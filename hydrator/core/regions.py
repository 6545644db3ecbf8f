"""Static bounding boxes for every city the hydration job supports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List


class UnknownCityError(KeyError):
    """Raised when a city has no entry in the bounds registry."""

    def __init__(self, city: str) -> None:
        super().__init__(city)
        self.city = city

    def __str__(self) -> str:
        return f"City {self.city!r} is not in the bounds registry"


@dataclass(frozen=True)
class Bounds:
    north: float
    south: float
    east: float
    west: float

    def __post_init__(self) -> None:
        if self.north <= self.south or self.east <= self.west:
            raise ValueError(f"Degenerate bounds: {self}")

    def contains(self, lat: float, lng: float) -> bool:
        return self.south < lat < self.north and self.west < lng < self.east


@dataclass(frozen=True)
class Region:
    name: str
    lat: float
    lng: float
    country: str
    bounds: Bounds


def _region(name: str, lat: float, lng: float, country: str, n: float, s: float, e: float, w: float) -> Region:
    return Region(name=name, lat=lat, lng=lng, country=country, bounds=Bounds(north=n, south=s, east=e, west=w))


# Approximate city limits. Adding a city means adding an entry here.
CITY_BOUNDS: Dict[str, Region] = {
    "calgary": _region("Calgary", 51.0447, -114.0719, "Canada", 51.18, 50.84, -113.86, -114.27),
    "toronto": _region("Toronto", 43.6532, -79.3832, "Canada", 43.85, 43.58, -79.12, -79.64),
    "vancouver": _region("Vancouver", 49.2827, -123.1207, "Canada", 49.35, 49.20, -123.02, -123.27),
    "edmonton": _region("Edmonton", 53.5461, -113.4938, "Canada", 53.67, 53.40, -113.27, -113.71),
    "montreal": _region("Montreal", 45.5017, -73.5673, "Canada", 45.70, 45.40, -73.47, -73.98),
    "ottawa": _region("Ottawa", 45.4215, -75.6972, "Canada", 45.54, 45.25, -75.50, -75.92),
    "mississauga": _region("Mississauga", 43.5890, -79.6441, "Canada", 43.65, 43.52, -79.54, -79.79),
    "brampton": _region("Brampton", 43.7315, -79.7624, "Canada", 43.82, 43.65, -79.65, -79.87),
    "new york": _region("New York", 40.7128, -74.0060, "USA", 40.92, 40.50, -73.70, -74.26),
    "houston": _region("Houston", 29.7604, -95.3698, "USA", 30.11, 29.52, -95.01, -95.79),
    "london": _region("London", 51.5074, -0.1278, "UK", 51.69, 51.28, 0.33, -0.51),
    "dubai": _region("Dubai", 25.2048, 55.2708, "UAE", 25.36, 24.79, 55.55, 54.89),
}


def lookup(city: str) -> Region:
    """Return the region for ``city`` (case-insensitive exact match)."""
    key = (city or "").strip().lower()
    try:
        return CITY_BOUNDS[key]
    except KeyError:
        raise UnknownCityError(city) from None


def supported_cities() -> List[str]:
    return sorted(CITY_BOUNDS)
