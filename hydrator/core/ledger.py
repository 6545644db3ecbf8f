"""Discovery ledger: every place id the pipeline has ever examined.

The ledger is a superset of the restaurants table. A place found not to be
compliant is still recorded here, which is what lets a re-run skip the paid
detail fetch for it.
"""

import logging
from typing import Any, Dict, List, Optional

from psycopg2 import extras

from hydrator.core import db

logger = logging.getLogger(__name__)

_EXISTS = "SELECT 1 FROM seen_places WHERE place_id = %(place_id)s"

# Re-checking refreshes checked_at; a place once seen as halal stays halal.
_UPSERT = """
INSERT INTO seen_places (place_id, city, name, is_halal, checked_at)
VALUES (%(place_id)s, %(city)s, %(name)s, %(is_halal)s, NOW())
ON CONFLICT (place_id) DO UPDATE SET
    name = COALESCE(EXCLUDED.name, seen_places.name),
    is_halal = seen_places.is_halal OR EXCLUDED.is_halal,
    checked_at = NOW();
"""

_STATS = """
SELECT
    city,
    COUNT(*) AS total_seen,
    SUM(CASE WHEN is_halal THEN 1 ELSE 0 END) AS halal,
    SUM(CASE WHEN NOT is_halal THEN 1 ELSE 0 END) AS not_halal,
    MAX(checked_at) AS last_checked
FROM seen_places
{where}
GROUP BY city
ORDER BY total_seen DESC;
"""


class DiscoveryLedger:
    """PostgreSQL-backed ledger over the ``seen_places`` table."""

    def has_seen(self, place_id: str) -> bool:
        with db.transaction() as cur:
            cur.execute(_EXISTS, {"place_id": place_id})
            row = cur.fetchone()
        return row is not None

    def mark_seen(self, place_id: str, city: str, name: Optional[str], is_halal: bool) -> None:
        if not place_id:
            raise ValueError("place_id is required to mark a place as seen")
        params = {"place_id": place_id, "city": city, "name": name, "is_halal": bool(is_halal)}
        with db.transaction() as cur:
            cur.execute(_UPSERT, params)
        logger.debug("Marked %s as seen (is_halal=%s)", place_id, is_halal)

    def stats_by_city(self, city: Optional[str] = None) -> List[Dict[str, Any]]:
        where = "WHERE LOWER(city) = LOWER(%(city)s)" if city else ""
        with db.transaction(cursor_factory=extras.RealDictCursor) as cur:
            cur.execute(_STATS.format(where=where), {"city": city})
            rows = cur.fetchall()
        return [dict(row) for row in rows]
