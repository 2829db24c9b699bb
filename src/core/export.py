#!/usr/bin/env python3
"""
CSV export of the analysis history.
"""

import csv
import io
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence, Union

from core.formatters import plain_number
from core.models.analysis import AnalysisRecord, format_iso_timestamp
from core.thresholds import METRIC_ORDER

logger = logging.getLogger(__name__)

EXPORT_HEADERS = ('Date', 'URL', 'Strategy', 'Score') + tuple(kind.value for kind in METRIC_ORDER)
EXPORT_MIME_TYPE = 'text/csv;charset=utf-8'
EXPORT_FILENAME_PREFIX = 'web-vitals-export-'


def _cell(value) -> str:
    if value is None:
        return ''
    return plain_number(value)


def record_to_row(record: AnalysisRecord) -> List[str]:
    """Export row for one record, straight from its stored values."""
    row = [
        format_iso_timestamp(record.timestamp),
        record.url,
        record.strategy.value,
        _cell(record.score),
    ]
    row.extend(_cell(record.metrics.get(kind)) for kind in METRIC_ORDER)
    return row


def encode_csv(history: Sequence[AnalysisRecord]) -> Optional[str]:
    """
    Encode history as CSV text with every field quoted.

    Returns:
        CSV text (header first, rows newline-joined) or None for an empty
        history, in which case callers skip the export entirely
    """
    if not history:
        return None

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator='\n')
    writer.writerow(EXPORT_HEADERS)
    for record in history:
        writer.writerow(record_to_row(record))

    # Rows are joined, not terminated
    return buffer.getvalue()[:-1]


def export_filename(now: Optional[datetime] = None) -> str:
    """Timestamp-qualified file name, e.g. web-vitals-export-1700000000000.csv."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    millis = int(now.timestamp() * 1000)
    return f"{EXPORT_FILENAME_PREFIX}{millis}.csv"


def write_export(history: Sequence[AnalysisRecord], directory: Union[str, Path] = '.',
                 now: Optional[datetime] = None) -> Optional[Path]:
    """
    Write the history export file.

    Returns:
        Path of the written file, or None when history is empty
    """
    content = encode_csv(history)
    if content is None:
        logger.info("History is empty, nothing to export")
        return None

    target_dir = Path(directory).expanduser()
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / export_filename(now)
    path.write_text(content, encoding='utf-8')

    logger.info(f"Exported {len(history)} history entries to {path}")
    return path
