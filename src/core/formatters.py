#!/usr/bin/env python3
"""
Formatting utilities for metric values, comparison cards and history.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional, Union

import pytz

from core.extractor import round_half_up
from core.thresholds import MetricKind, get_threshold

NA_PLACEHOLDER = "N/A"
HISTORY_DATE_FORMAT = "%d/%m/%Y %H:%M"


def plain_number(value: Any) -> str:
    """Render a number without a trailing '.0' for integral floats."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_value(kind: Union[str, MetricKind, None], value: Optional[float]) -> str:
    """
    Render a metric value for display.

    CLS is shown with three decimals and no unit. Time metrics of one
    second or more switch to seconds with two decimals.
    """
    if value is None:
        return NA_PLACEHOLDER

    threshold = get_threshold(kind)
    if threshold is None:
        return plain_number(value)

    if MetricKind.lookup(kind) is MetricKind.CLS:
        return f"{value:.3f}"

    if threshold.is_time and value >= 1000:
        return f"{value / 1000:.2f} s"

    return f"{round_half_up(value)} {threshold.unit}".rstrip()


def format_history_date(timestamp: datetime, tz: Union[str, Any, None] = None) -> str:
    """Format a record timestamp as dd/mm/YYYY HH:MM in the display time zone."""
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    if tz is None:
        zone = pytz.utc
    elif isinstance(tz, str):
        zone = pytz.timezone(tz)
    else:
        zone = tz
    return timestamp.astimezone(zone).strftime(HISTORY_DATE_FORMAT)


_RATING_MARKERS = {
    'good': '🟢',
    'needs-improvement': '🟠',
    'poor': '🔴',
    'na': '⚪',
}


def rating_marker(rating) -> str:
    return _RATING_MARKERS.get(getattr(rating, 'value', rating), '⚪')


def format_result_card(card) -> str:
    """Format a comparison card (see core.views.ResultCard) for the terminal."""
    score = card.score if card.score is not None else '?'
    lines = [
        f"[{card.index}] {card.url} ({card.strategy})",
        f"    {rating_marker(card.score_rating)} Performance score: {score}",
    ]
    for tile in card.tiles:
        lines.append(f"    {rating_marker(tile.rating)} {tile.key:<5} {tile.formatted:>9}  {tile.label}")
    return "\n".join(lines)


def format_result_cards(cards: List) -> str:
    if not cards:
        return "No results in this session."
    return "\n\n".join(format_result_card(card) for card in cards)


def format_history(entries: List) -> str:
    """Format history entries (see core.views.HistoryEntry), most recent first."""
    if not entries:
        return "No analyses recorded yet."

    lines = []
    for position, entry in enumerate(entries):
        lines.append(
            f"{position:>3}. {rating_marker(entry.rating)} {entry.score_display:>3}  "
            f"{entry.date}  {entry.strategy:<7}  {entry.url}"
        )
    return "\n".join(lines)
