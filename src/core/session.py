#!/usr/bin/env python3
"""
In-memory comparison set for the current session.
"""

import logging
from typing import Iterator, List

from core.models.analysis import AnalysisRecord

logger = logging.getLogger(__name__)


class SessionResultList:
    """Ordered, unbounded list of this session's results, oldest first. Never persisted."""

    def __init__(self):
        self._records: List[AnalysisRecord] = []

    def add(self, record: AnalysisRecord) -> None:
        self._records.append(record)

    def remove_at(self, index: int) -> bool:
        """Remove one result by position. Out-of-range indexes are ignored."""
        if not 0 <= index < len(self._records):
            logger.debug(f"Ignoring removal of missing result {index}")
            return False
        del self._records[index]
        return True

    def clear(self) -> None:
        self._records.clear()

    @property
    def records(self) -> List[AnalysisRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[AnalysisRecord]:
        return iter(list(self._records))

    def __getitem__(self, index: int) -> AnalysisRecord:
        return self._records[index]
