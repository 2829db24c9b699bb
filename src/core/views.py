#!/usr/bin/env python3
"""
View models handed to the presentation layer.

Ratings and display strings are computed here from stored raw values.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from core.formatters import format_history_date, format_value
from core.models.analysis import AnalysisRecord
from core.models.metrics import Number
from core.rating import Rating, rate, rate_score
from core.thresholds import METRIC_ORDER, THRESHOLDS


@dataclass
class MetricTile:
    key: str
    label: str
    rating: Rating
    formatted: str
    raw: Optional[Number]


@dataclass
class ResultCard:
    """One entry of the side-by-side comparison."""
    index: int
    url: str
    strategy: str
    score: Optional[int]
    score_rating: Rating
    tiles: List[MetricTile]


@dataclass
class HistoryEntry:
    """One line of the reverse-chronological history list."""
    score: Optional[int]
    rating: Rating
    url: str
    strategy: str
    date: str

    @property
    def score_display(self) -> str:
        return str(self.score) if self.score is not None else '?'


def build_result_card(record: AnalysisRecord, index: int) -> ResultCard:
    tiles = []
    for kind in METRIC_ORDER:
        value = record.metrics.get(kind)
        tiles.append(MetricTile(
            key=kind.value,
            label=THRESHOLDS[kind].label,
            rating=rate(kind, value),
            formatted=format_value(kind, value),
            raw=value,
        ))
    return ResultCard(
        index=index,
        url=record.url,
        strategy=record.strategy.value,
        score=record.score,
        score_rating=rate_score(record.score),
        tiles=tiles,
    )


def build_result_cards(records: Iterable[AnalysisRecord]) -> List[ResultCard]:
    return [build_result_card(record, index) for index, record in enumerate(records)]


def build_history_entry(record: AnalysisRecord, tz=None) -> HistoryEntry:
    return HistoryEntry(
        score=record.score,
        rating=rate_score(record.score),
        url=record.url,
        strategy=record.strategy.value,
        date=format_history_date(record.timestamp, tz),
    )


def build_history_entries(records: Iterable[AnalysisRecord], tz=None) -> List[HistoryEntry]:
    return [build_history_entry(record, tz) for record in records]
