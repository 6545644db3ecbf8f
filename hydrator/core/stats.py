"""Per-run counters: paid directory calls and hydration outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

SEARCH_UNIT_PRICE = 0.032
DETAILS_UNIT_PRICE = 0.017


@dataclass
class RunStats:
    """Running tally of paid calls issued during one hydration run."""

    text_search_calls: int = 0
    nearby_search_calls: int = 0
    place_details_calls: int = 0

    def inc(self, kind: str) -> None:
        if kind == "text":
            self.text_search_calls += 1
        elif kind == "nearby":
            self.nearby_search_calls += 1
        elif kind == "details":
            self.place_details_calls += 1
        else:
            raise ValueError(f"Unknown request kind: {kind}")

    @property
    def search_calls(self) -> int:
        return self.text_search_calls + self.nearby_search_calls

    @property
    def search_cost(self) -> float:
        return self.search_calls * SEARCH_UNIT_PRICE

    @property
    def details_cost(self) -> float:
        return self.place_details_calls * DETAILS_UNIT_PRICE

    @property
    def total_cost(self) -> float:
        return self.search_cost + self.details_cost

    def report_lines(self) -> List[str]:
        return [
            f"Text searches:   {self.text_search_calls} calls",
            f"Nearby searches: {self.nearby_search_calls} calls",
            f"Search cost:     {self.search_calls} calls = ${self.search_cost:.2f}",
            f"Place details:   {self.place_details_calls} calls = ${self.details_cost:.2f}",
            f"Total:           ${self.total_cost:.2f}",
        ]


@dataclass
class QueryTally:
    """Outcome counts for a single query or grid sweep."""

    verified: int = 0
    unverified: int = 0
    skipped: int = 0
    checked: int = 0
    rejected: int = 0
    failed: int = 0

    @property
    def saved(self) -> int:
        return self.verified + self.unverified


@dataclass
class HydrationTotals(QueryTally):
    """Aggregate of every tally produced during a run."""

    def absorb(self, tally: QueryTally) -> None:
        self.verified += tally.verified
        self.unverified += tally.unverified
        self.skipped += tally.skipped
        self.checked += tally.checked
        self.rejected += tally.rejected
        self.failed += tally.failed

    def report_lines(self) -> List[str]:
        return [
            f"Verified:    {self.verified}",
            f"Unverified:  {self.unverified}",
            f"Total saved: {self.saved}",
            f"Skipped:     {self.skipped}",
            f"Rejected:    {self.rejected}",
            f"Failed:      {self.failed}",
        ]
