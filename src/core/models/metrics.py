#!/usr/bin/env python3
"""
Metric data models.

Contains the normalized set of Core Web Vitals values produced per analysis.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from core.thresholds import METRIC_ORDER, MetricKind

Number = Union[int, float]


def coerce_number(value: Any) -> Optional[Number]:
    """Return value if it is a finite real number, else None (bools are not numbers)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


@dataclass(frozen=True)
class MetricSet:
    """
    One optional value per MetricKind plus the aggregate performance score.

    None means the measurement was unavailable, which is distinct from zero.
    """
    LCP: Optional[Number] = None
    FID: Optional[Number] = None
    CLS: Optional[Number] = None
    TTFB: Optional[Number] = None
    FCP: Optional[Number] = None
    INP: Optional[Number] = None
    score: Optional[int] = None

    def get(self, kind: Union[str, MetricKind]) -> Optional[Number]:
        """Get value for a metric key; unknown keys read as absent."""
        metric = MetricKind.lookup(kind)
        if metric is None:
            return None
        return getattr(self, metric.value)

    def available(self) -> Dict[MetricKind, Number]:
        """Metrics that have a measured value."""
        return {kind: self.get(kind) for kind in METRIC_ORDER if self.get(kind) is not None}

    def to_dict(self) -> Dict[str, Optional[Number]]:
        data: Dict[str, Optional[Number]] = {'score': self.score}
        for kind in METRIC_ORDER:
            data[kind.value] = self.get(kind)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MetricSet':
        score = coerce_number(data.get('score'))
        return cls(
            score=int(score) if score is not None else None,
            **{kind.value: coerce_number(data.get(kind.value)) for kind in METRIC_ORDER}
        )
