import pytest

from core.rating import Rating, rate, rate_score
from core.thresholds import THRESHOLDS, MetricKind


@pytest.mark.parametrize("kind", list(MetricKind))
def test_rating_boundaries_are_inclusive(kind):
    threshold = THRESHOLDS[kind]
    assert rate(kind, threshold.good) is Rating.GOOD
    assert rate(kind, threshold.poor) is Rating.NEEDS_IMPROVEMENT
    assert rate(kind, threshold.poor * 1.01) is Rating.POOR
    assert rate(kind, 0) is Rating.GOOD


@pytest.mark.parametrize("kind", list(MetricKind))
def test_absent_value_is_not_applicable(kind):
    assert rate(kind, None) is Rating.NA


@pytest.mark.parametrize("value,expected", [
    (2400, Rating.GOOD),
    (2500, Rating.GOOD),
    (2501, Rating.NEEDS_IMPROVEMENT),
    (4000, Rating.NEEDS_IMPROVEMENT),
    (4001, Rating.POOR),
])
def test_lcp_bands(value, expected):
    assert rate("LCP", value) is expected


def test_cls_fractional_bands():
    assert rate("CLS", 0.1) is Rating.GOOD
    assert rate("CLS", 0.15) is Rating.NEEDS_IMPROVEMENT
    assert rate("CLS", 0.26) is Rating.POOR


def test_unknown_metric_is_not_applicable():
    assert rate("SPEED_INDEX", 100) is Rating.NA
    assert rate(None, 100) is Rating.NA


@pytest.mark.parametrize("score,expected", [
    (100, Rating.GOOD),
    (90, Rating.GOOD),
    (89, Rating.NEEDS_IMPROVEMENT),
    (50, Rating.NEEDS_IMPROVEMENT),
    (49, Rating.POOR),
    (0, Rating.POOR),
    (None, Rating.NA),
])
def test_score_bands(score, expected):
    assert rate_score(score) is expected


def test_rating_values_match_display_classes():
    assert [rating.value for rating in Rating] == ["good", "needs-improvement", "poor", "na"]
    assert Rating.NA.label == "N/A"
