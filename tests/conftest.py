import asyncio
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from core.analyzer import PageAnalyzer  # noqa: E402
from core.history_store import HistoryStore  # noqa: E402
from core.models.analysis import AnalysisRecord, Strategy  # noqa: E402
from core.models.metrics import MetricSet  # noqa: E402
from core.session import SessionResultList  # noqa: E402
from core.storage import InMemoryStorage  # noqa: E402


def make_response(
    field: Optional[Dict[str, float]] = None,
    lab: Optional[Dict[str, float]] = None,
    score: Optional[float] = None,
) -> Dict[str, Any]:
    """Build a PageSpeed-shaped response from flat field/lab dictionaries."""
    data: Dict[str, Any] = {}
    if field is not None:
        data["loadingExperience"] = {
            "metrics": {key: {"percentile": value, "category": "FAST"} for key, value in field.items()}
        }
    lighthouse: Dict[str, Any] = {}
    if lab is not None:
        lighthouse["audits"] = {audit: {"id": audit, "numericValue": value} for audit, value in lab.items()}
    if score is not None:
        lighthouse["categories"] = {"performance": {"score": score}}
    if lighthouse:
        data["lighthouseResult"] = lighthouse
    return data


def make_record(url: str = "https://example.com", strategy: Strategy = Strategy.MOBILE,
                timestamp: Optional[datetime] = None, **metrics) -> AnalysisRecord:
    return AnalysisRecord(
        url=url,
        strategy=strategy,
        metrics=MetricSet(**metrics),
        timestamp=timestamp or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    )


class FixedClock:
    def __init__(self, start: datetime, step: timedelta = timedelta(minutes=1)) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


class FakePageSpeedClient:
    def __init__(self, responses: Optional[Dict[str, Any]] = None) -> None:
        self.responses = responses or {}
        self.calls: List[Dict[str, Any]] = []

    def run_pagespeed(self, url: str, strategy, api_key: Optional[str] = None) -> Dict[str, Any]:
        self.calls.append({"url": url, "strategy": strategy, "api_key": api_key})
        response = self.responses.get(url, {})
        if isinstance(response, Exception):
            raise response
        return response


class FakeAsyncPageSpeedClient:
    """Async client double; delays control the order requests complete in."""

    def __init__(self, responses: Dict[str, Any], delays: Optional[Dict[str, float]] = None) -> None:
        self.responses = responses
        self.delays = delays or {}
        self.calls: List[str] = []
        self.entered = False
        self.exited = False

    async def __aenter__(self):
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.exited = True

    async def run_pagespeed(self, url: str, strategy, api_key: Optional[str] = None) -> Dict[str, Any]:
        self.calls.append(url)
        await asyncio.sleep(self.delays.get(url, 0))
        response = self.responses.get(url, {})
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def history_store(storage) -> HistoryStore:
    return HistoryStore(storage)


@pytest.fixture
def session_results() -> SessionResultList:
    return SessionResultList()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def fake_client() -> FakePageSpeedClient:
    return FakePageSpeedClient()


@pytest.fixture
def analyzer(fake_client, history_store, session_results, clock) -> PageAnalyzer:
    return PageAnalyzer(fake_client, history_store, session_results, clock=clock)


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def fake_async_client_factory():
    def _factory(responses: Dict[str, Any], delays: Optional[Dict[str, float]] = None) -> FakeAsyncPageSpeedClient:
        return FakeAsyncPageSpeedClient(responses, delays)

    return _factory
