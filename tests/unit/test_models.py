from datetime import datetime, timedelta, timezone

import pytest

from core.models.analysis import AnalysisRecord, Strategy, format_iso_timestamp
from core.models.metrics import MetricSet, coerce_number
from core.thresholds import MetricKind


@pytest.mark.parametrize("value,expected", [
    (1, 1),
    (0, 0),
    (0.25, 0.25),
    (True, None),
    ("12", None),
    (None, None),
    (float("nan"), None),
    (float("inf"), None),
    (float("-inf"), None),
    (10 ** 400, 10 ** 400),
])
def test_coerce_number(value, expected):
    assert coerce_number(value) == expected


def test_absent_is_distinct_from_zero():
    metrics = MetricSet(CLS=0)
    assert metrics.get("CLS") == 0
    assert metrics.get("LCP") is None
    assert metrics.available() == {MetricKind.CLS: 0}


def test_metric_set_lookup_is_lenient():
    metrics = MetricSet(LCP=1200)
    assert metrics.get("lcp") == 1200
    assert metrics.get(MetricKind.LCP) == 1200
    assert metrics.get("SPEED_INDEX") is None


def test_metric_set_from_dict_ignores_junk():
    metrics = MetricSet.from_dict({"score": 95.0, "LCP": "fast", "CLS": 0.02, "extra": 1})
    assert metrics == MetricSet(score=95, CLS=0.02)
    assert isinstance(metrics.score, int)


def test_metric_set_is_immutable():
    with pytest.raises(AttributeError):
        MetricSet().LCP = 5


@pytest.mark.parametrize("raw", ["mobile", "MOBILE", " Mobile ", Strategy.MOBILE])
def test_strategy_parse(raw):
    assert Strategy.parse(raw) is Strategy.MOBILE


def test_strategy_parse_rejects_unknown():
    with pytest.raises(ValueError):
        Strategy.parse("tablet")


def test_iso_timestamp_has_milliseconds_and_z():
    paris = timezone(timedelta(hours=2))
    value = datetime(2024, 5, 1, 14, 0, 0, 123456, tzinfo=paris)
    assert format_iso_timestamp(value) == "2024-05-01T12:00:00.123Z"


def test_record_round_trip(record_factory):
    record = record_factory(strategy=Strategy.DESKTOP, LCP=2600, CLS=0.15, score=72)
    assert AnalysisRecord.from_dict(record.to_dict()) == record


def test_record_from_dict_accepts_offset_dates():
    record = AnalysisRecord.from_dict({
        "url": "https://example.com",
        "strategy": "mobile",
        "score": 50,
        "date": "2024-05-01T14:00:00+02:00",
    })
    assert record.timestamp == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    assert record.score == 50
    assert record.metrics.LCP is None


@pytest.mark.parametrize("data", [
    {"strategy": "mobile", "date": "2024-05-01T12:00:00Z"},
    {"url": "https://example.com", "strategy": "mobile", "date": "yesterday-ish"},
    {"url": "https://example.com", "strategy": "watch", "date": "2024-05-01T12:00:00Z"},
    {"url": "https://example.com", "strategy": "mobile", "date": "0001-01-01T00:00:00+01:00"},
    ["not", "a", "mapping"],
])
def test_record_from_dict_rejects_invalid(data):
    with pytest.raises(ValueError):
        AnalysisRecord.from_dict(data)
