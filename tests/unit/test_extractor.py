import json
import logging

import pytest

from core.extractor import EXTRACTION_RULES, RULES_BY_KIND, extract_metrics, round_half_up
from core.models.metrics import MetricSet
from core.thresholds import MetricKind


def test_field_lcp_preferred(response_factory):
    data = response_factory(
        field={"LARGEST_CONTENTFUL_PAINT_MS": 2600},
        lab={"largest-contentful-paint": 3123.7},
    )
    assert extract_metrics(data).LCP == 2600


def test_field_lcp_without_lab_data(response_factory):
    assert extract_metrics(response_factory(field={"LARGEST_CONTENTFUL_PAINT_MS": 2600})).LCP == 2600


def test_lab_lcp_is_rounded(response_factory):
    assert extract_metrics(response_factory(lab={"largest-contentful-paint": 3123.7})).LCP == 3124


def test_missing_lcp_is_absent(response_factory):
    assert extract_metrics(response_factory()).LCP is None


def test_cls_field_percentile_is_scaled(response_factory):
    metrics = extract_metrics(response_factory(field={"CUMULATIVE_LAYOUT_SHIFT_SCORE": 15}))
    assert metrics.CLS == pytest.approx(0.15)


def test_cls_lab_value_passes_through(response_factory):
    metrics = extract_metrics(response_factory(lab={"cumulative-layout-shift": 0.08}))
    assert metrics.CLS == 0.08


def test_fid_has_no_lab_fallback(response_factory):
    data = response_factory(lab={"max-potential-fid": 250, "first-input-delay": 120})
    assert extract_metrics(data).FID is None
    assert RULES_BY_KIND[MetricKind.FID].lab_audit is None


def test_inp_falls_back_to_experimental_field_key(response_factory):
    data = response_factory(field={"EXPERIMENTAL_INTERACTION_TO_NEXT_PAINT": 180})
    assert extract_metrics(data).INP == 180

    data = response_factory(field={
        "INTERACTION_TO_NEXT_PAINT": 210,
        "EXPERIMENTAL_INTERACTION_TO_NEXT_PAINT": 180,
    })
    assert extract_metrics(data).INP == 210


def test_inp_has_no_lab_fallback(response_factory):
    data = response_factory(lab={"interaction-to-next-paint": 300})
    assert extract_metrics(data).INP is None


def test_ttfb_and_fcp_chains(response_factory):
    lab_only = extract_metrics(response_factory(lab={
        "server-response-time": 412.5,
        "first-contentful-paint": 1499.2,
    }))
    assert lab_only.TTFB == 413
    assert lab_only.FCP == 1499

    field = extract_metrics(response_factory(
        field={"EXPERIMENTAL_TIME_TO_FIRST_BYTE": 900, "FIRST_CONTENTFUL_PAINT_MS": 1700},
        lab={"server-response-time": 10, "first-contentful-paint": 10},
    ))
    assert field.TTFB == 900
    assert field.FCP == 1700


@pytest.mark.parametrize("score,expected", [(0.95, 95), (0.5, 50), (0.999, 100), (0, 0), (0.125, 13)])
def test_score_is_scaled_and_rounded(response_factory, score, expected):
    assert extract_metrics(response_factory(score=score)).score == expected


def test_missing_score_is_absent(response_factory):
    assert extract_metrics(response_factory(field={"FIRST_INPUT_DELAY_MS": 20})).score is None


def test_zero_is_kept_distinct_from_absent(response_factory):
    metrics = extract_metrics(response_factory(field={"FIRST_INPUT_DELAY_MS": 0}))
    assert metrics.FID == 0
    assert metrics.INP is None


@pytest.mark.parametrize("data", [
    None,
    [],
    "not json",
    {"loadingExperience": None, "lighthouseResult": "broken"},
    {"loadingExperience": {"metrics": []}},
    {"loadingExperience": {"metrics": {"LARGEST_CONTENTFUL_PAINT_MS": {"percentile": "fast"}}}},
    {"lighthouseResult": {"audits": {"largest-contentful-paint": {"numericValue": None}}}},
    {"lighthouseResult": {"categories": {"performance": {"score": True}}}},
])
def test_malformed_responses_degrade_to_absent(data):
    assert extract_metrics(data) == MetricSet()


def test_every_metric_key_is_present_in_output(response_factory):
    result = extract_metrics(response_factory()).to_dict()
    assert set(result) == {"score", "LCP", "FID", "CLS", "TTFB", "FCP", "INP"}
    assert all(value is None for value in result.values())


def test_rules_cover_every_metric_once():
    kinds = [rule.kind for rule in EXTRACTION_RULES]
    assert sorted(kinds) == sorted(MetricKind)


def test_rule_reports_its_source(response_factory):
    rule = RULES_BY_KIND[MetricKind.LCP]
    assert rule.extract(response_factory(field={"LARGEST_CONTENTFUL_PAINT_MS": 1})) == (1, "field")
    assert rule.extract(response_factory(lab={"largest-contentful-paint": 1.4})) == (1, "lab")
    assert rule.extract({}) == (None, None)


def test_round_half_up_matches_browser_rounding():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(-0.5) == 0


def test_unexpected_response_type_is_logged(caplog):
    caplog.set_level(logging.WARNING, logger="core.extractor")
    extract_metrics(["unexpected"])
    assert "Unexpected provider response type list" in caplog.text


@pytest.mark.parametrize("raw", [
    '{"lighthouseResult": {"audits": {"largest-contentful-paint": {"numericValue": 1e400}}}}',
    '{"lighthouseResult": {"categories": {"performance": {"score": Infinity}}}}',
    '{"loadingExperience": {"metrics": {"CUMULATIVE_LAYOUT_SHIFT_SCORE": {"percentile": -Infinity}}}}',
])
def test_non_finite_numbers_are_absent(raw):
    assert extract_metrics(json.loads(raw)) == MetricSet()


def test_non_finite_field_value_falls_back_to_lab(response_factory):
    data = response_factory(
        field={"LARGEST_CONTENTFUL_PAINT_MS": float("inf")},
        lab={"largest-contentful-paint": 2100.4},
    )
    assert extract_metrics(data).LCP == 2100
