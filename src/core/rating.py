#!/usr/bin/env python3
"""
Rating engine for Core Web Vitals values.

Ratings are always derived on demand from the static threshold table,
they are never stored.
"""

from enum import Enum
from typing import Optional, Union

from core.models.metrics import Number, coerce_number
from core.thresholds import SCORE_GOOD, SCORE_NEEDS_IMPROVEMENT, MetricKind, get_threshold


class Rating(str, Enum):
    """Qualitative band for a metric value or score."""
    GOOD = "good"
    NEEDS_IMPROVEMENT = "needs-improvement"
    POOR = "poor"
    NA = "na"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    Rating.GOOD: "Good",
    Rating.NEEDS_IMPROVEMENT: "Needs improvement",
    Rating.POOR: "Poor",
    Rating.NA: "N/A",
}


def rate(kind: Union[str, MetricKind, None], value: Optional[Number]) -> Rating:
    """
    Classify a metric value. Both boundaries are inclusive.

    Args:
        kind: Metric key, e.g. 'LCP' or MetricKind.LCP
        value: Measured value, None when absent

    Returns:
        Rating.NA for absent values or unknown metrics
    """
    value = coerce_number(value)
    threshold = get_threshold(kind)
    if value is None or threshold is None:
        return Rating.NA
    if value <= threshold.good:
        return Rating.GOOD
    if value <= threshold.poor:
        return Rating.NEEDS_IMPROVEMENT
    return Rating.POOR


def rate_score(score: Optional[Number]) -> Rating:
    """Classify an aggregate performance score on the 0-100 scale."""
    score = coerce_number(score)
    if score is None:
        return Rating.NA
    if score >= SCORE_GOOD:
        return Rating.GOOD
    if score >= SCORE_NEEDS_IMPROVEMENT:
        return Rating.NEEDS_IMPROVEMENT
    return Rating.POOR
