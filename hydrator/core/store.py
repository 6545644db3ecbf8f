"""Restaurant store: insert-if-absent restaurants and per-city run summaries."""

import logging
from typing import Any, Dict, List, Optional

import psycopg2
from psycopg2 import extras

from hydrator.core import db
from hydrator.core.classify import COMPLIANCE_STATUSES
from hydrator.core.regions import Region
from hydrator.models import RestaurantRecord

logger = logging.getLogger(__name__)

CITY_REQUEST_STATUSES = frozenset({"pending", "approved", "rejected", "hydrating"})

_METADATA_EXISTS = "SELECT 1 FROM google_metadata WHERE place_id = %(place_id)s"

_INSERT_RESTAURANT = """
INSERT INTO restaurants (
    name,
    address,
    city,
    lat,
    lng,
    cuisine,
    halal_status,
    halal_confidence_score,
    source,
    photo_reference,
    discovered_via
) VALUES (
    %(name)s,
    %(address)s,
    %(city)s,
    %(lat)s,
    %(lng)s,
    %(cuisine)s,
    %(halal_status)s,
    %(confidence)s,
    %(source)s,
    %(photo_reference)s,
    %(discovered_via)s
)
RETURNING id;
"""

_INSERT_METADATA = """
INSERT INTO google_metadata (
    restaurant_id,
    place_id,
    rating,
    review_count,
    phone,
    website,
    hours,
    last_verified_at
) VALUES (
    %(restaurant_id)s,
    %(place_id)s,
    %(rating)s,
    %(review_count)s,
    %(phone)s,
    %(website)s,
    %(hours)s,
    NOW()
)
ON CONFLICT (place_id) DO NOTHING
RETURNING id;
"""

_UPSERT_CITY = """
INSERT INTO cities (city, country, lat, lng, hydrated_at, restaurant_count, source)
VALUES (%(city)s, %(country)s, %(lat)s, %(lng)s, NOW(), %(restaurant_count)s, %(source)s)
ON CONFLICT (city) DO UPDATE SET
    hydrated_at = NOW(),
    restaurant_count = (SELECT COUNT(*) FROM restaurants WHERE LOWER(city) = LOWER(%(city)s));
"""

_UPDATE_CITY_REQUEST = """
UPDATE city_requests
SET status = %(status)s,
    approved_at = CASE WHEN %(status)s = 'approved' THEN NOW() ELSE approved_at END
WHERE LOWER(city) = LOWER(%(city)s);
"""

_RESTAURANT_STATS = """
SELECT
    city,
    COUNT(*) AS total,
    SUM(CASE WHEN halal_status = 'verified' THEN 1 ELSE 0 END) AS verified,
    SUM(CASE WHEN halal_status = 'unverified' THEN 1 ELSE 0 END) AS unverified,
    SUM(CASE WHEN halal_status = 'community' THEN 1 ELSE 0 END) AS community,
    SUM(CASE WHEN discovered_via = 'explicit' THEN 1 ELSE 0 END) AS from_search,
    SUM(CASE WHEN discovered_via = 'review' THEN 1 ELSE 0 END) AS from_review
FROM restaurants
{where}
GROUP BY city
ORDER BY total DESC;
"""


def _prepare_params(record: RestaurantRecord) -> Dict[str, Any]:
    return {
        "place_id": record.place_id,
        "name": record.name,
        "address": record.address,
        "city": record.city,
        "lat": record.lat,
        "lng": record.lng,
        "cuisine": record.cuisine,
        "halal_status": record.halal_status,
        "confidence": record.confidence,
        "source": record.source,
        "photo_reference": record.photo_reference,
        "discovered_via": record.discovered_via,
        "rating": record.rating,
        "review_count": record.review_count,
        "phone": record.phone,
        "website": record.website,
        "hours": record.hours,
    }


class _AlreadyStored(Exception):
    """Raised inside an insert transaction to abandon it without writing."""


class RestaurantStore:
    """PostgreSQL-backed restaurant store.

    Uniqueness is keyed on ``google_metadata.place_id``: a restaurant row is
    only written together with its metadata row, inside one transaction.
    """

    def insert_if_absent(self, record: RestaurantRecord) -> bool:
        """Persist ``record`` unless its place id is already stored.

        Returns ``True`` when a new restaurant was created.
        """
        params = _prepare_params(record)
        if not params["place_id"] or not params["name"]:
            raise ValueError("place_id and name are required for insert")
        if params["halal_status"] not in COMPLIANCE_STATUSES:
            raise ValueError(f"Unsupported halal_status {params['halal_status']!r}")

        try:
            with db.transaction() as cur:
                cur.execute(_METADATA_EXISTS, params)
                if cur.fetchone() is not None:
                    raise _AlreadyStored(params["place_id"])

                cur.execute(_INSERT_RESTAURANT, params)
                params["restaurant_id"] = cur.fetchone()[0]

                cur.execute(_INSERT_METADATA, params)
                if cur.fetchone() is None:
                    logger.debug("Lost insert race for %s", params["place_id"])
                    raise _AlreadyStored(params["place_id"])
        except _AlreadyStored:
            return False
        except psycopg2.IntegrityError as exc:
            logger.debug("Treating constraint violation for %s as existing: %s", params["place_id"], exc)
            return False

        logger.debug("Inserted restaurant %s (%s)", params["name"], params["place_id"])
        return True

    def upsert_city_run_summary(self, region: Region, restaurant_count: int, source: str = "hydrate") -> None:
        params = {
            "city": region.name,
            "country": region.country,
            "lat": region.lat,
            "lng": region.lng,
            "restaurant_count": restaurant_count,
            "source": source,
        }
        with db.transaction() as cur:
            cur.execute(_UPSERT_CITY, params)
        logger.debug("Upserted run summary for %s", region.name)

    def set_city_request_status(self, city: str, status: str) -> int:
        """Update a user city request; returns the number of rows touched."""
        if status not in CITY_REQUEST_STATUSES:
            raise ValueError(f"Unsupported city request status {status!r}")
        with db.transaction() as cur:
            cur.execute(_UPDATE_CITY_REQUEST, {"city": city, "status": status})
            updated = cur.rowcount
        return updated

    def restaurant_stats(self, city: Optional[str] = None) -> List[Dict[str, Any]]:
        where = "WHERE LOWER(city) = LOWER(%(city)s)" if city else ""
        with db.transaction(cursor_factory=extras.RealDictCursor) as cur:
            cur.execute(_RESTAURANT_STATS.format(where=where), {"city": city})
            rows = cur.fetchall()
        return [dict(row) for row in rows]
