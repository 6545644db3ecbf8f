"""CLI job that reports what is stored and what the next hydration would cost."""

import argparse
import logging
from typing import Any, Dict, List, Optional

from hydrator.core.config import ConfigError, get_settings
from hydrator.core.db import close_pool, init_pool
from hydrator.core.ledger import DiscoveryLedger
from hydrator.core.phases import PHASE_QUERIES, Phase
from hydrator.core.stats import DETAILS_UNIT_PRICE, SEARCH_UNIT_PRICE
from hydrator.core.store import RestaurantStore

logger = logging.getLogger(__name__)

FIRST_RUN_PAGES_PER_QUERY = 3
INCREMENTAL_PAGES_PER_QUERY = 2
FIRST_RUN_DETAIL_RANGE = (500, 800)
NEW_PLACES_PER_CITY = 50
NEW_PLACES_ALL_CITIES = 200


def text_query_count() -> int:
    return sum(len(queries) for phase, queries in PHASE_QUERIES.items() if phase is not Phase.EXPLICIT_GRID)


def estimate_next_run(seen_count: int, single_city: bool) -> Dict[str, Any]:
    """Rough cost of the next run given how many places the ledger already holds."""
    queries = text_query_count()
    if seen_count == 0:
        searches = queries * FIRST_RUN_PAGES_PER_QUERY
        low, high = FIRST_RUN_DETAIL_RANGE
        return {
            "first_run": True,
            "search_calls": searches,
            "search_cost": searches * SEARCH_UNIT_PRICE,
            "detail_calls": (low, high),
            "detail_cost": (low * DETAILS_UNIT_PRICE, high * DETAILS_UNIT_PRICE),
        }

    searches = queries * INCREMENTAL_PAGES_PER_QUERY
    new_places = NEW_PLACES_PER_CITY if single_city else NEW_PLACES_ALL_CITIES
    return {
        "first_run": False,
        "search_calls": searches,
        "search_cost": searches * SEARCH_UNIT_PRICE,
        "detail_calls": (new_places, new_places),
        "detail_cost": (new_places * DETAILS_UNIT_PRICE, new_places * DETAILS_UNIT_PRICE),
    }


def format_restaurant_rows(rows: List[Dict[str, Any]]) -> List[str]:
    if not rows:
        return ["   No restaurants in database yet."]
    lines = [
        "   City            | Total | Verified | Unverified | Community | Explicit | Review",
        "   " + "-" * 80,
    ]
    for row in rows:
        lines.append(
            f"   {str(row['city']):<15} | {row['total']:>5} | {row['verified'] or 0:>8} | "
            f"{row['unverified'] or 0:>10} | {row['community'] or 0:>9} | "
            f"{row['from_search'] or 0:>8} | {row['from_review'] or 0:>6}"
        )
    return lines


def format_ledger_rows(rows: List[Dict[str, Any]]) -> List[str]:
    if not rows:
        return ["   No places tracked yet (first run will check everything)."]
    lines = [
        "   City            | Total Seen | Halal | Not Halal",
        "   " + "-" * 50,
    ]
    for row in rows:
        lines.append(
            f"   {str(row['city']):<15} | {row['total_seen']:>10} | {row['halal'] or 0:>5} | {row['not_halal'] or 0:>9}"
        )
    return lines


def format_estimate(estimate: Dict[str, Any]) -> List[str]:
    low_calls, high_calls = estimate["detail_calls"]
    low_cost, high_cost = estimate["detail_cost"]
    label = "First run (no places seen yet):" if estimate["first_run"] else "Incremental run (places already seen are skipped):"
    details = f"~{low_calls}" if low_calls == high_calls else f"~{low_calls}-{high_calls}"
    detail_cost = f"~${low_cost:.2f}" if low_cost == high_cost else f"~${low_cost:.2f}-${high_cost:.2f}"
    return [
        f"   {label}",
        f"   - Text searches: ~{estimate['search_calls']} calls x ${SEARCH_UNIT_PRICE} = ~${estimate['search_cost']:.2f}",
        f"   - Place details: {details} calls x ${DETAILS_UNIT_PRICE} = {detail_cost}",
        f"   - Total: ~${estimate['search_cost'] + low_cost:.2f}-${estimate['search_cost'] + high_cost:.2f}",
    ]


def build_report(city: Optional[str], store: RestaurantStore, ledger: DiscoveryLedger) -> List[str]:
    restaurant_rows = store.restaurant_stats(city)
    ledger_rows = ledger.stats_by_city(city)
    seen_count = sum(int(row["total_seen"] or 0) for row in ledger_rows)

    lines = ["HYDRATION DATABASE STATUS", "", "Restaurants by city:"]
    lines.extend(format_restaurant_rows(restaurant_rows))
    lines.extend(["", "Seen places (skipped on next run):"])
    lines.extend(format_ledger_rows(ledger_rows))
    lines.extend(["", "Estimated cost for next run:"])
    lines.extend(format_estimate(estimate_next_run(seen_count, single_city=bool(city))))
    return lines


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Show hydration coverage and next-run cost estimate")
    parser.add_argument("city", nargs="?", default=None, help="Optional city filter")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
        if not settings.database_url:
            raise ConfigError("DATABASE_URL must be set in the environment to read hydration stats.")
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        raise SystemExit(2) from exc

    try:
        init_pool()
        for line in build_report(args.city, RestaurantStore(), DiscoveryLedger()):
            print(line)
    finally:
        close_pool()


if __name__ == "__main__":
    main()
