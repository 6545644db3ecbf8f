"""Hydration phases, their fixed order and the query sets that drive them."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional, Tuple


class Phase(str, Enum):
    EXPLICIT_TEXT = "explicit_text"
    EXPLICIT_GRID = "explicit_grid"
    ALWAYS_HALAL = "always_halal"
    LIKELY_HALAL = "likely_halal"
    REVIEW_SCAN = "review_scan"
    FINALIZE = "finalize"


class DiscoveryMode(str, Enum):
    TEXT = "text"
    NEARBY = "nearby"


# Earlier phases win: the ledger stops later phases from revisiting an id.
TRANSITIONS: Dict[Phase, Optional[Phase]] = {
    Phase.EXPLICIT_TEXT: Phase.EXPLICIT_GRID,
    Phase.EXPLICIT_GRID: Phase.ALWAYS_HALAL,
    Phase.ALWAYS_HALAL: Phase.LIKELY_HALAL,
    Phase.LIKELY_HALAL: Phase.REVIEW_SCAN,
    Phase.REVIEW_SCAN: Phase.FINALIZE,
    Phase.FINALIZE: None,
}

INITIAL_PHASE = Phase.EXPLICIT_TEXT

DISCOVERY_MODES: Dict[Phase, DiscoveryMode] = {
    Phase.EXPLICIT_TEXT: DiscoveryMode.TEXT,
    Phase.EXPLICIT_GRID: DiscoveryMode.NEARBY,
    Phase.ALWAYS_HALAL: DiscoveryMode.TEXT,
    Phase.LIKELY_HALAL: DiscoveryMode.TEXT,
    Phase.REVIEW_SCAN: DiscoveryMode.TEXT,
}

GRID_KEYWORD = "halal"

EXPLICIT_HALAL_QUERIES: Tuple[str, ...] = (
    "halal restaurant",
    "halal food",
    "halal meat",
    "halal chicken",
    "zabiha",
)

# Cuisines that are historically close to always compliant.
ALWAYS_HALAL_QUERIES: Tuple[str, ...] = (
    "pakistani restaurant",
    "pakistani food",
    "afghan restaurant",
    "afghan food",
    "somali restaurant",
    "somali food",
    "yemeni restaurant",
    "yemeni food",
    "bangladeshi restaurant",
    "sudanese restaurant",
    "syrian restaurant",
    "palestinian restaurant",
    "egyptian restaurant",
    "moroccan restaurant",
)

LIKELY_HALAL_QUERIES: Tuple[str, ...] = (
    "middle eastern restaurant",
    "middle eastern food",
    "lebanese restaurant",
    "lebanese food",
    "turkish restaurant",
    "turkish food",
    "indian restaurant",
    "mediterranean restaurant",
    "shawarma",
    "kebab",
    "biryani",
    "falafel",
    "persian restaurant",
    "arab restaurant",
)

# Generic categories: only saved when a review mentions a compliance keyword.
REVIEW_SCAN_QUERIES: Tuple[str, ...] = (
    "fried chicken",
    "chicken wings",
    "korean fried chicken",
    "burger restaurant",
    "pizza restaurant",
    "bbq restaurant",
    "steakhouse",
    "caribbean restaurant",
    "jamaican restaurant",
    "african restaurant",
)

PHASE_QUERIES: Dict[Phase, Tuple[str, ...]] = {
    Phase.EXPLICIT_TEXT: EXPLICIT_HALAL_QUERIES,
    Phase.EXPLICIT_GRID: (GRID_KEYWORD,),
    Phase.ALWAYS_HALAL: ALWAYS_HALAL_QUERIES,
    Phase.LIKELY_HALAL: LIKELY_HALAL_QUERIES,
    Phase.REVIEW_SCAN: REVIEW_SCAN_QUERIES,
}


def phase_sequence(start: Phase = INITIAL_PHASE):
    """Yield phases from ``start`` up to and including FINALIZE."""
    phase: Optional[Phase] = start
    while phase is not None:
        yield phase
        phase = TRANSITIONS[phase]
