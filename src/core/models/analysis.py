#!/usr/bin/env python3
"""
Analysis record data models.

An AnalysisRecord captures one PageSpeed run for a URL and device strategy.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union
from dataclasses import dataclass, field

from dateutil import parser as date_parser

from .metrics import MetricSet


class Strategy(str, Enum):
    """Device class the analysis simulates or aggregates for."""
    MOBILE = "mobile"
    DESKTOP = "desktop"

    @classmethod
    def parse(cls, value: Union[str, "Strategy"]) -> "Strategy":
        """Parse a strategy name case-insensitively."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ', '.join(s.value for s in cls)
            raise ValueError(f"Invalid strategy '{value}'. Use one of: {valid}")


def _parse_datetime_safe(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        parsed = value
    elif not value or not isinstance(value, str):
        return None
    else:
        try:
            parsed = date_parser.isoparse(value)
        except (ValueError, OverflowError):
            try:
                parsed = date_parser.parse(value)
            except (ValueError, OverflowError):
                return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        parsed.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        return None
    return parsed


def format_iso_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    utc = value.astimezone(timezone.utc)
    return utc.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


@dataclass(frozen=True)
class AnalysisRecord:
    """A single, immutable analysis result."""
    url: str
    strategy: Strategy
    metrics: MetricSet
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def score(self) -> Optional[int]:
        return self.metrics.score

    def to_dict(self) -> Dict[str, Any]:
        """Flat representation used for durable history storage."""
        data: Dict[str, Any] = {
            'url': self.url,
            'strategy': self.strategy.value,
        }
        data.update(self.metrics.to_dict())
        data['date'] = format_iso_timestamp(self.timestamp)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnalysisRecord':
        """
        Create AnalysisRecord from its stored dictionary form.

        Raises:
            ValueError: If url, strategy or date are missing or invalid
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected a mapping, got {type(data).__name__}")

        url = data.get('url')
        if not isinstance(url, str) or not url:
            raise ValueError("Stored record has no url")

        timestamp = _parse_datetime_safe(data.get('date'))
        if timestamp is None:
            raise ValueError(f"Stored record for {url} has an invalid date")

        return cls(
            url=url,
            strategy=Strategy.parse(data.get('strategy', '')),
            metrics=MetricSet.from_dict(data),
            timestamp=timestamp,
        )

    def __repr__(self):
        return f"AnalysisRecord(url='{self.url[:50]}', strategy='{self.strategy.value}', score={self.score})"
