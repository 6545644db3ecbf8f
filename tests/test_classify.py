import pytest

from hydrator.core import classify
from hydrator.core.phases import Phase, TRANSITIONS, phase_sequence


def test_phase_order_is_fixed():
    assert list(phase_sequence()) == [
        Phase.EXPLICIT_TEXT,
        Phase.EXPLICIT_GRID,
        Phase.ALWAYS_HALAL,
        Phase.LIKELY_HALAL,
        Phase.REVIEW_SCAN,
        Phase.FINALIZE,
    ]
    assert TRANSITIONS[Phase.FINALIZE] is None


@pytest.mark.parametrize(
    "phase, status, channel, confidence",
    [
        (Phase.EXPLICIT_TEXT, "verified", "explicit", 95),
        (Phase.EXPLICIT_GRID, "verified", "explicit-grid", 90),
        (Phase.ALWAYS_HALAL, "verified", "cuisine", 85),
        (Phase.LIKELY_HALAL, "unverified", "cuisine-likely", 75),
    ],
)
def test_classify_without_review_gate(phase, status, channel, confidence):
    result = classify.classify(phase, {"name": "Anything"})
    assert (result.status, result.channel, result.confidence) == (status, channel, confidence)


def test_confidence_decreases_along_phase_order():
    confidences = [
        classify.PHASE_POLICIES[phase].confidence
        for phase in phase_sequence()
        if phase in classify.PHASE_POLICIES
    ]
    assert confidences == sorted(confidences, reverse=True)
    assert len(set(confidences)) == len(confidences)


def test_review_scan_requires_keyword():
    details = {"reviews": [{"text": "Great burgers"}, {"text": "Friendly staff"}]}
    assert classify.classify(Phase.REVIEW_SCAN, details) is None
    assert classify.classify(Phase.REVIEW_SCAN, {}) is None


def test_review_scan_matches_case_insensitively():
    details = {"reviews": [{"text": "Nice wings"}, {"text": "All meat is ZABIHA and HALAL"}]}
    result = classify.classify(Phase.REVIEW_SCAN, details)
    assert result.status == "unverified"
    assert result.channel == "review"
    assert result.confidence == 70
    assert result.keyword == "halal"


def test_finalize_phase_does_not_classify():
    with pytest.raises(ValueError):
        classify.classify(Phase.FINALIZE, {})


def test_find_review_keyword_first_match():
    assert classify.find_review_keyword(["nothing", "zabihah chicken"]) == "zabiha"
    assert classify.find_review_keyword([None, ""]) is None


@pytest.mark.parametrize(
    "name, cuisine",
    [
        ("Royal Biryani House", "Indian"),
        ("Lahori Karahi", "Pakistani"),
        ("Nihari Corner", "Pakistani"),
        ("Shawarma Palace", "Lebanese"),
        ("Kabul Kitchen", "Afghan"),
        ("Pakistani Pizza Point", "Pakistani"),
        ("Tony's Pizza", "Pizza"),
        ("Crispy Wings", "Fried Chicken"),
        ("Blue Plate Diner", "Restaurant"),
        (None, "Restaurant"),
    ],
)
def test_detect_cuisine_first_rule_wins(name, cuisine):
    assert classify.detect_cuisine(name) == cuisine
