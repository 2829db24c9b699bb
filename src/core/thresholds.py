#!/usr/bin/env python3
"""
Core Web Vitals reference thresholds.

Static per-metric boundaries published by Google, plus the separate
0-100 scale used for the aggregate performance score.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Union


class MetricKind(str, Enum):
    """The fixed set of metrics tracked for every analysis."""
    LCP = "LCP"
    FID = "FID"
    CLS = "CLS"
    TTFB = "TTFB"
    FCP = "FCP"
    INP = "INP"

    @classmethod
    def lookup(cls, value: Union[str, "MetricKind", None]) -> Optional["MetricKind"]:
        """Resolve a metric key, returning None for anything unrecognized."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


@dataclass(frozen=True)
class Threshold:
    """Good/poor boundaries for a single metric."""
    good: float
    poor: float
    unit: str  # 'ms' or '' for unitless ratios
    label: str

    @property
    def is_time(self) -> bool:
        return self.unit == "ms"


THRESHOLDS: Mapping[MetricKind, Threshold] = MappingProxyType({
    MetricKind.LCP: Threshold(good=2500, poor=4000, unit="ms", label="Largest Contentful Paint"),
    MetricKind.FID: Threshold(good=100, poor=300, unit="ms", label="First Input Delay"),
    MetricKind.CLS: Threshold(good=0.1, poor=0.25, unit="", label="Cumulative Layout Shift"),
    MetricKind.TTFB: Threshold(good=800, poor=1800, unit="ms", label="Time to First Byte"),
    MetricKind.FCP: Threshold(good=1800, poor=3000, unit="ms", label="First Contentful Paint"),
    MetricKind.INP: Threshold(good=200, poor=500, unit="ms", label="Interaction to Next Paint"),
})

# Display order used by cards and exports
METRIC_ORDER = (
    MetricKind.LCP,
    MetricKind.FID,
    MetricKind.CLS,
    MetricKind.TTFB,
    MetricKind.FCP,
    MetricKind.INP,
)

# Aggregate performance score scale (0-100), independent of the table above
SCORE_GOOD = 90
SCORE_NEEDS_IMPROVEMENT = 50


def get_threshold(kind: Union[str, MetricKind, None]) -> Optional[Threshold]:
    """Get thresholds for a metric key, or None when the key is unknown."""
    metric = MetricKind.lookup(kind)
    if metric is None:
        return None
    return THRESHOLDS[metric]
