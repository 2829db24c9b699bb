#!/usr/bin/env python3
"""
Metric extraction from PageSpeed Insights responses.

Field data (CrUX, real users) is preferred; Lighthouse lab data is the
fallback. Each metric is described by an ExtractionRule so the fallback
chain is a table rather than branching code.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from core.models.metrics import MetricSet, Number, coerce_number
from core.thresholds import MetricKind

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity."""
    return int(math.floor(value + 0.5))


def _dig(data: Any, *keys: str) -> Any:
    """Walk nested mappings, returning None as soon as a level is missing."""
    current = data
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def field_percentile(data: Dict[str, Any], key: str) -> Optional[Number]:
    """CrUX percentile for a loadingExperience metric key."""
    return coerce_number(_dig(data, 'loadingExperience', 'metrics', key, 'percentile'))


def lab_numeric(data: Dict[str, Any], audit_id: str) -> Optional[Number]:
    """Raw Lighthouse numericValue for an audit."""
    return coerce_number(_dig(data, 'lighthouseResult', 'audits', audit_id, 'numericValue'))


def performance_score(data: Dict[str, Any]) -> Optional[int]:
    """Lighthouse performance category score scaled from 0-1 to 0-100."""
    score = coerce_number(_dig(data, 'lighthouseResult', 'categories', 'performance', 'score'))
    if score is None:
        return None
    return round_half_up(score * 100)


def _identity(value: Number) -> Number:
    return value


def _percent_to_ratio(value: Number) -> float:
    # CrUX reports CLS percentiles multiplied by 100
    return value / 100


@dataclass(frozen=True)
class ExtractionRule:
    """Fallback chain for one metric: field keys in order, then a lab audit."""
    kind: MetricKind
    field_keys: Tuple[str, ...] = ()
    field_transform: Callable[[Number], Number] = _identity
    lab_audit: Optional[str] = None
    lab_transform: Callable[[Number], Number] = round_half_up

    def extract(self, data: Dict[str, Any]) -> Tuple[Optional[Number], Optional[str]]:
        """
        Apply the chain to a response.

        Returns:
            Tuple of (value, source) where source is 'field', 'lab' or None
        """
        for key in self.field_keys:
            value = field_percentile(data, key)
            if value is not None:
                return self.field_transform(value), 'field'

        if self.lab_audit:
            value = lab_numeric(data, self.lab_audit)
            if value is not None:
                return self.lab_transform(value), 'lab'

        return None, None


# FID and INP have no reliable lab equivalent, so they have no lab audit.
# Lab CLS is already a unitless ratio and is kept as reported.
EXTRACTION_RULES: Tuple[ExtractionRule, ...] = (
    ExtractionRule(
        MetricKind.LCP,
        field_keys=('LARGEST_CONTENTFUL_PAINT_MS',),
        lab_audit='largest-contentful-paint',
    ),
    ExtractionRule(
        MetricKind.FID,
        field_keys=('FIRST_INPUT_DELAY_MS',),
    ),
    ExtractionRule(
        MetricKind.CLS,
        field_keys=('CUMULATIVE_LAYOUT_SHIFT_SCORE',),
        field_transform=_percent_to_ratio,
        lab_audit='cumulative-layout-shift',
        lab_transform=_identity,
    ),
    ExtractionRule(
        MetricKind.TTFB,
        field_keys=('EXPERIMENTAL_TIME_TO_FIRST_BYTE',),
        lab_audit='server-response-time',
    ),
    ExtractionRule(
        MetricKind.FCP,
        field_keys=('FIRST_CONTENTFUL_PAINT_MS',),
        lab_audit='first-contentful-paint',
    ),
    ExtractionRule(
        MetricKind.INP,
        field_keys=('INTERACTION_TO_NEXT_PAINT', 'EXPERIMENTAL_INTERACTION_TO_NEXT_PAINT'),
    ),
)

RULES_BY_KIND: Dict[MetricKind, ExtractionRule] = {rule.kind: rule for rule in EXTRACTION_RULES}


def extract_metrics(data: Any) -> MetricSet:
    """
    Normalize a raw PageSpeed response into a MetricSet.

    Never raises: missing or malformed nested fields become absent values.

    Args:
        data: Decoded JSON body of a runPagespeed call

    Returns:
        MetricSet with every metric either measured or None
    """
    if not isinstance(data, dict):
        logger.warning(f"Unexpected provider response type {type(data).__name__}, all metrics absent")
        data = {}

    values: Dict[str, Optional[Number]] = {}
    for rule in EXTRACTION_RULES:
        value, source = rule.extract(data)
        values[rule.kind.value] = value
        if source:
            logger.debug(f"{rule.kind.value}={value} from {source} data")
        else:
            logger.debug(f"{rule.kind.value} unavailable")

    return MetricSet(score=performance_score(data), **values)
