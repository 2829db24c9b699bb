#!/usr/bin/env python3
"""
Page analysis service.

Runs PageSpeed analyses, normalizes the responses and records each result
in the session comparison list and the durable history.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from core.exceptions import ProviderError, StorageError
from core.extractor import extract_metrics
from core.history_store import HistoryStore
from core.models.analysis import AnalysisRecord, Strategy
from core.session import SessionResultList

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AnalysisRequest:
    """A URL and strategy submitted for analysis."""
    url: str
    strategy: Strategy = Strategy.MOBILE

    @classmethod
    def create(cls, url: str, strategy: Union[str, Strategy] = Strategy.MOBILE) -> 'AnalysisRequest':
        return cls(url=(url or '').strip(), strategy=Strategy.parse(strategy))


@dataclass
class AnalysisOutcome:
    """Result of one request in a concurrent batch."""
    request: AnalysisRequest
    record: Optional[AnalysisRecord] = None
    error: Optional[ProviderError] = None

    @property
    def succeeded(self) -> bool:
        return self.record is not None


class PageAnalyzer:
    """
    Coordinates provider calls with result bookkeeping.

    Provider failures propagate to the caller and leave both the session
    list and the history untouched. Blank URLs are ignored.
    """

    def __init__(self, client, history_store: HistoryStore, session_results: SessionResultList,
                 async_client_factory: Optional[Callable[[], Any]] = None,
                 clock: Callable[[], datetime] = utc_now):
        """
        Initialize analyzer.

        Args:
            client: Object with run_pagespeed(url, strategy, api_key) -> dict
            history_store: Durable bounded history
            session_results: Current session comparison list
            async_client_factory: Returns an async context manager client for batches
            clock: Source of record timestamps
        """
        self.client = client
        self.history_store = history_store
        self.session_results = session_results
        self.async_client_factory = async_client_factory
        self.clock = clock

    def analyze(self, url: str, strategy: Union[str, Strategy] = Strategy.MOBILE,
                api_key: Optional[str] = None) -> Optional[AnalysisRecord]:
        """
        Analyze one URL.

        Returns:
            The stored record, or None when the URL is blank

        Raises:
            ProviderError: If the PageSpeed request fails
        """
        request = AnalysisRequest.create(url, strategy)
        if not request.url:
            logger.debug("Ignoring analysis request with empty URL")
            return None

        data = self.client.run_pagespeed(request.url, request.strategy, api_key)
        return self._record(request, data)

    async def analyze_many_async(self, requests: Sequence[AnalysisRequest],
                                 api_key: Optional[str] = None) -> List[AnalysisOutcome]:
        """
        Analyze several requests concurrently.

        Each result is recorded as soon as its request completes, so the
        session and history follow completion order. Outcomes are returned
        in submission order; blank URLs are dropped without a request.
        """
        if self.async_client_factory is None:
            raise RuntimeError("No async client configured for concurrent analyses")

        pending = [request for request in requests if request.url.strip()]
        if len(pending) < len(requests):
            logger.debug(f"Ignoring {len(requests) - len(pending)} requests with empty URL")
        if not pending:
            return []

        async with self.async_client_factory() as client:
            async def run_one(request: AnalysisRequest) -> AnalysisOutcome:
                try:
                    data = await client.run_pagespeed(request.url, request.strategy, api_key)
                except ProviderError as e:
                    return AnalysisOutcome(request=request, error=e)
                return AnalysisOutcome(request=request, record=self._record(request, data))

            outcomes = await asyncio.gather(*(run_one(request) for request in pending))

        succeeded = sum(1 for outcome in outcomes if outcome.succeeded)
        logger.info(f"Completed {succeeded}/{len(pending)} analyses")
        return list(outcomes)

    def analyze_many(self, requests: Sequence[AnalysisRequest],
                     api_key: Optional[str] = None) -> List[AnalysisOutcome]:
        """Synchronous entry point for analyze_many_async."""
        return asyncio.run(self.analyze_many_async(requests, api_key))

    def reanalyze(self, history_index: int, api_key: Optional[str] = None) -> Optional[AnalysisRecord]:
        """
        Run the history entry at history_index again (0 is most recent).

        Returns:
            New record, or None when the index does not exist
        """
        previous = self.history_store.get(history_index)
        if previous is None:
            logger.warning(f"No history entry at position {history_index}")
            return None
        return self.analyze(previous.url, previous.strategy, api_key)

    def _record(self, request: AnalysisRequest, data: Dict[str, Any]) -> AnalysisRecord:
        record = AnalysisRecord(
            url=request.url,
            strategy=request.strategy,
            metrics=extract_metrics(data),
            timestamp=self.clock(),
        )
        self.session_results.add(record)
        try:
            self.history_store.append(record)
        except StorageError as e:
            logger.error(f"Could not save {record.url} to history: {e}")
        logger.info(f"Analysis of {record.url} ({record.strategy.value}) scored {record.score}")
        return record
