"""Compliance classification and cuisine tagging.

Both decisions are data-driven: a per-phase policy table for compliance and an
ordered first-match-wins rule table for cuisine labels.

The review scan is a heuristic. A candidate from a generic category whose
fetched review snippets never mention a compliance keyword is treated as not
compliant; nothing else is done to confirm that.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from hydrator.core.phases import Phase

STATUS_VERIFIED = "verified"
STATUS_UNVERIFIED = "unverified"
STATUS_COMMUNITY = "community"
STATUS_UNKNOWN = "unknown"

COMPLIANCE_STATUSES = frozenset({STATUS_VERIFIED, STATUS_UNVERIFIED, STATUS_COMMUNITY, STATUS_UNKNOWN})

REVIEW_KEYWORDS: Tuple[str, ...] = ("halal", "zabiha", "zabihah")


@dataclass(frozen=True)
class PhasePolicy:
    status: str
    channel: str
    confidence: int
    requires_review_keyword: bool = False


@dataclass(frozen=True)
class Classification:
    status: str
    channel: str
    confidence: int
    keyword: Optional[str] = None


PHASE_POLICIES: Dict[Phase, PhasePolicy] = {
    Phase.EXPLICIT_TEXT: PhasePolicy(STATUS_VERIFIED, "explicit", 95),
    Phase.EXPLICIT_GRID: PhasePolicy(STATUS_VERIFIED, "explicit-grid", 90),
    Phase.ALWAYS_HALAL: PhasePolicy(STATUS_VERIFIED, "cuisine", 85),
    Phase.LIKELY_HALAL: PhasePolicy(STATUS_UNVERIFIED, "cuisine-likely", 75),
    Phase.REVIEW_SCAN: PhasePolicy(STATUS_UNVERIFIED, "review", 70, requires_review_keyword=True),
}

# Order matters: the first rule with a matching substring wins.
CUISINE_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("pakistani", "karahi", "nihari"), "Pakistani"),
    (("indian", "biryani", "tandoori"), "Indian"),
    (("bangladeshi", "bengali"), "Bangladeshi"),
    (("afghan", "kabul"), "Afghan"),
    (("somali",), "Somali"),
    (("yemeni", "mandi"), "Yemeni"),
    (("korean",), "Korean"),
    (("chinese",), "Chinese"),
    (("thai",), "Thai"),
    (("turkish", "kebab", "doner"), "Turkish"),
    (("lebanese", "shawarma"), "Lebanese"),
    (("middle eastern", "arab"), "Middle Eastern"),
    (("mediterranean", "falafel"), "Mediterranean"),
    (("moroccan",), "Moroccan"),
    (("egyptian",), "Egyptian"),
    (("persian", "iranian"), "Persian"),
    (("syrian",), "Syrian"),
    (("palestinian",), "Palestinian"),
    (("pizza",), "Pizza"),
    (("burger",), "Burgers"),
    (("chicken", "wing"), "Fried Chicken"),
    (("caribbean", "jamaican"), "Caribbean"),
    (("african",), "African"),
)

DEFAULT_CUISINE = "Restaurant"


def find_review_keyword(texts: Iterable[str], keywords: Iterable[str] = REVIEW_KEYWORDS) -> Optional[str]:
    """Return the first compliance keyword found in ``texts``, if any."""
    keywords = tuple(keywords)
    for text in texts:
        lowered = (text or "").lower()
        for keyword in keywords:
            if keyword in lowered:
                return keyword
    return None


def detect_cuisine(name: Optional[str]) -> str:
    lowered = (name or "").lower()
    for patterns, label in CUISINE_RULES:
        if any(pattern in lowered for pattern in patterns):
            return label
    return DEFAULT_CUISINE


def _review_texts(details: Mapping[str, Any]) -> Iterable[str]:
    for review in details.get("reviews") or []:
        if isinstance(review, dict):
            yield review.get("text") or ""


def classify(phase: Phase, details: Mapping[str, Any]) -> Optional[Classification]:
    """Classify a fetched place for ``phase``.

    Returns ``None`` when the phase requires review evidence and none was
    found; the caller still records the place in the ledger as not compliant.
    """
    try:
        policy = PHASE_POLICIES[phase]
    except KeyError:
        raise ValueError(f"Phase {phase!r} does not classify candidates") from None

    keyword = None
    if policy.requires_review_keyword:
        keyword = find_review_keyword(_review_texts(details))
        if keyword is None:
            return None

    return Classification(
        status=policy.status,
        channel=policy.channel,
        confidence=policy.confidence,
        keyword=keyword,
    )
