"""CLI job that incrementally hydrates one city's restaurants from Google Places.

Phases run in a fixed order (see ``hydrator.core.phases``). Every place id is
checked against the discovery ledger before its paid detail fetch, so a re-run
only pays for searches plus details of places it has never examined.
"""

import argparse
import dataclasses
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple, runtime_checkable

import requests

from hydrator.core import regions
from hydrator.core.classify import STATUS_VERIFIED, classify
from hydrator.core.config import ConfigError, Settings, get_settings, require_credentials
from hydrator.core.db import close_pool, init_pool
from hydrator.core.grid import GridPoint, generate_grid
from hydrator.core.ledger import DiscoveryLedger
from hydrator.core.phases import DISCOVERY_MODES, PHASE_QUERIES, DiscoveryMode, Phase, phase_sequence
from hydrator.core.regions import Region, UnknownCityError
from hydrator.core.stats import HydrationTotals, QueryTally, RunStats
from hydrator.core.store import RestaurantStore
from hydrator.etl import transform
from hydrator.models import RestaurantRecord
from hydrator.vendors.google_places import GooglePlacesError, GooglePlacesSource

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
GRID_PROGRESS_EVERY = 5

# Network failures, non-OK directory statuses and malformed JSON.
_SOURCE_ERRORS = (GooglePlacesError, requests.RequestException, ValueError)


@runtime_checkable
class DiscoverySource(Protocol):
    def search_text(
        self, query: str, locality: str, page_token: Optional[str] = None
    ) -> Tuple[List[Dict[str, Any]], Optional[str]]: ...

    def search_nearby(self, point: GridPoint, radius: int, keyword: str) -> List[Dict[str, Any]]: ...

    def details(self, place_id: str) -> Dict[str, Any]: ...


@runtime_checkable
class Ledger(Protocol):
    def has_seen(self, place_id: str) -> bool: ...

    def mark_seen(self, place_id: str, city: str, name: Optional[str], is_halal: bool) -> None: ...


@runtime_checkable
class Store(Protocol):
    """Insert-if-absent restaurant writes plus the per-city bookkeeping."""

    def insert_if_absent(self, record: RestaurantRecord) -> bool: ...

    def upsert_city_run_summary(self, region: Region, restaurant_count: int) -> None: ...

    def set_city_request_status(self, city: str, status: str) -> int: ...


@dataclass
class HydrationContext:
    """State owned by one run; phases mutate it, nothing else does."""

    region: Region
    settings: Settings
    source: DiscoverySource
    ledger: Ledger
    store: Store
    stats: RunStats = field(default_factory=RunStats)
    totals: HydrationTotals = field(default_factory=HydrationTotals)
    phase_totals: Dict[Phase, HydrationTotals] = field(default_factory=dict)

    @property
    def city(self) -> str:
        return self.region.name

    def absorb(self, phase: Phase, tally: QueryTally) -> None:
        self.totals.absorb(tally)
        self.phase_totals.setdefault(phase, HydrationTotals()).absorb(tally)


def _pause(seconds: float) -> None:
    if seconds > 0:
        time.sleep(seconds)


def search_text_all(ctx: HydrationContext, query: str) -> List[Dict[str, Any]]:
    """Run a text search and follow continuation tokens until exhausted.

    A failing page ends the query; results gathered so far are kept.
    """
    results: List[Dict[str, Any]] = []
    page_token: Optional[str] = None
    while True:
        if page_token:
            # Continuation tokens are rejected until they warm up.
            _pause(ctx.settings.page_token_delay)
        ctx.stats.inc("text")
        try:
            page, page_token = ctx.source.search_text(query, ctx.city, page_token)
        except _SOURCE_ERRORS as exc:
            logger.warning("Text search failed for query=%r: %s", query, exc)
            break
        results.extend(page or [])
        if not page_token:
            break
    return results


def process_candidate(ctx: HydrationContext, phase: Phase, result: Dict[str, Any], tally: QueryTally) -> None:
    candidate = transform.to_candidate(result)
    if candidate is None:
        return

    fetched = False
    try:
        if ctx.ledger.has_seen(candidate.place_id):
            tally.skipped += 1
            return

        fetched = True
        ctx.stats.inc("details")
        try:
            details = ctx.source.details(candidate.place_id)
        except _SOURCE_ERRORS as exc:
            logger.warning("Failed to fetch details for %s: %s", candidate.place_id, exc)
            tally.failed += 1
            return
        if not details:
            logger.warning("Empty details payload for %s", candidate.place_id)
            tally.failed += 1
            return

        tally.checked += 1
        classification = classify(phase, details)
        if classification is None:
            ctx.ledger.mark_seen(candidate.place_id, ctx.city, details.get("name") or candidate.name, False)
            tally.rejected += 1
            return

        record = transform.to_restaurant_record(details, ctx.city, classification, fallback=candidate)
        try:
            created = ctx.store.insert_if_absent(record)
        finally:
            # A paid detail fetch is never repeated, even when the insert fails.
            ctx.ledger.mark_seen(candidate.place_id, ctx.city, record.name, True)
        if not created:
            tally.skipped += 1
        elif record.halal_status == STATUS_VERIFIED:
            tally.verified += 1
        else:
            tally.unverified += 1
    except Exception as exc:  # noqa: BLE001
        logger.error("Failed to process %s (%s): %s", candidate.name, candidate.place_id, exc)
        tally.failed += 1
    finally:
        if fetched:
            _pause(ctx.settings.request_delay)


def run_text_phase(ctx: HydrationContext, phase: Phase) -> None:
    for query in PHASE_QUERIES[phase]:
        results = search_text_all(ctx, query)
        tally = QueryTally()
        for result in results:
            process_candidate(ctx, phase, result, tally)
        ctx.absorb(phase, tally)
        logger.info(
            "[%s] %r: %d results, +%d saved, %d skipped, %d checked, %d rejected",
            phase.value,
            query,
            len(results),
            tally.saved,
            tally.skipped,
            tally.checked,
            tally.rejected,
        )
        _pause(ctx.settings.query_delay)


def run_grid_phase(ctx: HydrationContext, phase: Phase) -> None:
    points = generate_grid(ctx.region.bounds, ctx.settings.grid_density)
    logger.info("[%s] Searching %d grid points", phase.value, len(points))
    for keyword in PHASE_QUERIES[phase]:
        tally = QueryTally()
        for index, point in enumerate(points, start=1):
            ctx.stats.inc("nearby")
            try:
                results = ctx.source.search_nearby(point, ctx.settings.grid_radius_m, keyword)
            except _SOURCE_ERRORS as exc:
                logger.warning("Nearby search failed at point %d (%.5f, %.5f): %s", index, point.lat, point.lng, exc)
                results = []
            for result in results or []:
                process_candidate(ctx, phase, result, tally)
            if index % GRID_PROGRESS_EVERY == 0:
                logger.info("[%s] Point %d/%d: +%d new", phase.value, index, len(points), tally.saved)
            _pause(ctx.settings.query_delay)
        ctx.absorb(phase, tally)
        logger.info(
            "[%s] Grid complete for %r: +%d new, %d skipped", phase.value, keyword, tally.saved, tally.skipped
        )


PHASE_RUNNERS: Dict[DiscoveryMode, Callable[[HydrationContext, Phase], None]] = {
    DiscoveryMode.TEXT: run_text_phase,
    DiscoveryMode.NEARBY: run_grid_phase,
}


def run_phase(ctx: HydrationContext, phase: Phase) -> None:
    PHASE_RUNNERS[DISCOVERY_MODES[phase]](ctx, phase)


def finalize(ctx: HydrationContext) -> None:
    """Record the city summary and log the run report. Safe to repeat."""
    try:
        ctx.store.upsert_city_run_summary(ctx.region, ctx.totals.saved)
        ctx.store.set_city_request_status(ctx.city, "approved")
    except Exception as exc:  # noqa: BLE001
        logger.error("Failed to record run summary for %s: %s", ctx.city, exc, exc_info=True)

    logger.info("Hydration complete for %s", ctx.city)
    for line in ctx.totals.report_lines():
        logger.info("  %s", line)
    logger.info("API usage:")
    for line in ctx.stats.report_lines():
        logger.info("  %s", line)


def run_hydration(
    region: Region,
    *,
    source: DiscoverySource,
    ledger: Ledger,
    store: Store,
    settings: Optional[Settings] = None,
) -> HydrationContext:
    ctx = HydrationContext(
        region=region,
        settings=settings or get_settings(),
        source=source,
        ledger=ledger,
        store=store,
    )
    bounds = region.bounds
    logger.info(
        "Hydrating %s (N:%s S:%s E:%s W:%s)", region.name, bounds.north, bounds.south, bounds.east, bounds.west
    )

    try:
        ctx.store.set_city_request_status(ctx.city, "hydrating")
    except Exception as exc:  # noqa: BLE001
        logger.warning("Could not mark city request for %s as hydrating: %s", ctx.city, exc)

    for phase in phase_sequence():
        if phase is Phase.FINALIZE:
            finalize(ctx)
        else:
            logger.info("Starting phase %s", phase.value)
            run_phase(ctx, phase)
    return ctx


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Incrementally hydrate a city's halal restaurants")
    parser.add_argument("city", help="City name, e.g. 'Calgary' or 'new york'")
    parser.add_argument(
        "--grid-density",
        dest="grid_density",
        type=int,
        default=None,
        help="Grid cells per side minus one; 4 yields 25 points",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.grid_density is not None and args.grid_density < 0:
        parser.error("--grid-density must not be negative")

    try:
        settings = get_settings()
        require_credentials(settings)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        raise SystemExit(2) from exc
    logging.getLogger().setLevel(getattr(logging, settings.log_level, logging.INFO))

    try:
        region = regions.lookup(args.city)
    except UnknownCityError as exc:
        logger.error("%s", exc)
        logger.error("Available cities: %s", ", ".join(regions.supported_cities()))
        raise SystemExit(1) from exc

    if args.grid_density is not None:
        settings = dataclasses.replace(settings, grid_density=args.grid_density)

    try:
        init_pool()
        run_hydration(
            region,
            source=GooglePlacesSource(settings.google_api_key, timeout=settings.http_timeout),
            ledger=DiscoveryLedger(),
            store=RestaurantStore(),
            settings=settings,
        )
    except Exception as exc:  # pragma: no cover - CLI fallback
        logger.error("Hydration failed for %s: %s", region.name, exc, exc_info=True)
        raise SystemExit(1) from exc
    finally:
        close_pool()


if __name__ == "__main__":
    main()
