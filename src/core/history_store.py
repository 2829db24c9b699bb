#!/usr/bin/env python3
"""
Bounded analysis history with durable storage.

History is kept most-recent-first and capped at MAX_HISTORY entries. The
whole list is re-serialized on every change so the stored value is always
one complete snapshot.
"""

import json
import logging
from typing import List, Optional

from core.models.analysis import AnalysisRecord
from core.storage import KeyValueStorage

logger = logging.getLogger(__name__)

HISTORY_KEY = 'cwv_history'
MAX_HISTORY = 50


class HistoryStore:
    """
    Ordered, capacity-bounded log of past analyses.

    Features:
    - Most recent first, oldest evicted once over capacity
    - Whole-snapshot persistence through an injected KeyValueStorage
    - Missing or corrupt storage reads as an empty history
    """

    def __init__(self, storage: KeyValueStorage, key: str = HISTORY_KEY,
                 max_entries: int = MAX_HISTORY):
        """
        Initialize history store.

        Args:
            storage: Durable key-value storage handle
            key: Storage key holding the serialized history
            max_entries: Capacity; older entries are evicted beyond this
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.storage = storage
        self.key = key
        self.max_entries = max_entries

    def load(self) -> List[AnalysisRecord]:
        """Read the full history. Never raises."""
        raw = self.storage.get(self.key)
        if raw is None:
            return []

        try:
            payload = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning(f"Stored history under '{self.key}' is corrupt, starting empty: {e}")
            return []

        if not isinstance(payload, list):
            logger.warning(f"Stored history under '{self.key}' is not a list, starting empty")
            return []

        records = []
        for position, item in enumerate(payload):
            try:
                records.append(AnalysisRecord.from_dict(item))
            except (ValueError, OverflowError) as e:
                logger.warning(f"Skipping unreadable history entry {position}: {e}")

        return records

    def append(self, record: AnalysisRecord) -> List[AnalysisRecord]:
        """
        Insert record at the front, evict the oldest beyond capacity and
        persist the resulting snapshot.

        Returns:
            The history as persisted
        """
        history = self.load()
        history.insert(0, record)

        if len(history) > self.max_entries:
            evicted = len(history) - self.max_entries
            del history[self.max_entries:]
            logger.info(f"History over capacity ({self.max_entries}), evicted {evicted} oldest")

        self._save(history)
        logger.debug(f"Saved {record.url} ({record.strategy.value}) to history, {len(history)} entries")
        return history

    def clear(self) -> None:
        """Remove the persisted history entirely."""
        self.storage.delete(self.key)
        logger.info("History cleared")

    def get(self, index: int) -> Optional[AnalysisRecord]:
        """Get entry by position (0 is most recent), None when out of range."""
        history = self.load()
        if 0 <= index < len(history):
            return history[index]
        return None

    def __len__(self) -> int:
        return len(self.load())

    def _save(self, history: List[AnalysisRecord]) -> None:
        payload = json.dumps([record.to_dict() for record in history], ensure_ascii=False)
        self.storage.set(self.key, payload)
