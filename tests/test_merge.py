import random

import pytest

from hazardscan.errors import API_ERROR, QUOTA_EXCEEDED
from hazardscan.llm.prompt import HAZARD_SCHEMAS
from hazardscan.risk import knowledge
from hazardscan.risk.merge import build_mock_report, merge_results
from hazardscan.risk.models import Enrichment, SampledCell, SampledGrid
from hazardscan.risk.rules import risk_level_for


def make_grid(scores, cols):
    chunks = [
        SampledCell(id=f"{i // cols}-{i % cols}", row=i // cols, col=i % cols, risk_score=s)
        for i, s in enumerate(scores)
    ]
    return SampledGrid(chunks=chunks, total_risk=sum(scores) / len(scores))


LOCAL = [10, 20, 30, 40, 50, 60, 70, 80, 90]

AI_DATA = {
    "region": "Northern California",
    "hazardLevel": 77,
    "grid": [95, 90, 85, 60, 55, 50, 20, 15, 10],
    "justification": "Dry fuels and offshore winds drive extreme fire behaviour.",
    "temporalTrend": [{"time": m, "fuelMoisture": 10 + i, "ignitionRisk": 50 - i}
                      for i, m in enumerate(["Jan", "Feb", "Mar", "Apr", "May", "Jun",
                                             "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"])],
    "magnitudeDist": [{"intensityClass": f"Class {i + 1}", "probability": 40 - 5 * i} for i in range(7)],
    "factors": {"vegetation": 80, "climate": 70, "topography": 40},
}


def assert_invariants(result):
    assert result.high_risk_count == sum(1 for c in result.chunks if c.risk_score > 50)
    for chunk in result.chunks:
        assert chunk.risk_level == risk_level_for(chunk.risk_score)
        assert 0 <= chunk.risk_score <= 100
    assert len(result.report_data.temporal_trend) == 12
    assert len(result.report_data.magnitude_dist) == 7
    assert len(result.report_data.factor_comparison) == 3


def test_local_only_result():
    result = merge_results(make_grid(LOCAL, 3), "wildfire", 3, 3, rng=random.Random(1))

    assert_invariants(result)
    assert [c.risk_score for c in result.chunks] == LOCAL
    assert result.average_risk == 50
    assert result.high_risk_count == 4
    assert result.is_ai_verified is False
    assert result.error_code is None
    assert result.detected_region is None
    assert result.report_data.justification is None
    assert result.report_data.unit1 == HAZARD_SCHEMAS["wildfire"]["units"][0]
    for chunk in result.chunks:
        assert chunk.details.prime in knowledge.VEGETATION_FACTORS
        assert chunk.reason == chunk.details.prime


def test_ai_values_take_precedence():
    result = merge_results(
        make_grid(LOCAL, 3), "wildfire", 3, 3,
        enrichment=Enrichment(data=AI_DATA), location="somewhere", rng=random.Random(1),
    )

    assert_invariants(result)
    assert [c.risk_score for c in result.chunks] == AI_DATA["grid"]
    assert result.average_risk == 77
    assert result.high_risk_count == 5
    assert result.is_ai_verified is True
    assert result.detected_region == "Northern California"

    report = result.report_data
    assert report.justification == AI_DATA["justification"]
    assert report.temporal_trend[0].value1 == 10
    assert report.temporal_trend[0].value2 == 50
    assert report.magnitude_dist[0].label == "Class 1"
    assert [f.name for f in report.factor_comparison] == ["Vegetation", "Climate", "Topography"]
    assert report.unit2 == "Ignition Risk Index"

    for chunk in result.chunks:
        assert chunk.reason == AI_DATA["justification"]
        assert chunk.details.prime == HAZARD_SCHEMAS["wildfire"]["details"][0]


def test_partial_ai_grid_falls_back_per_cell():
    data = {"grid": [99, "n/a", 150, None]}

    result = merge_results(make_grid(LOCAL, 3), "storm", 3, 3, enrichment=Enrichment(data=data))

    assert_invariants(result)
    assert [c.risk_score for c in result.chunks] == [99, 20, 100, 40, 50, 60, 70, 80, 90]
    # no hazardLevel: local mean
    assert result.average_risk == 50
    assert result.is_ai_verified is True
    assert result.chunks[0].reason == HAZARD_SCHEMAS["storm"]["summary"]


def test_ai_grid_only_applies_to_three_by_three():
    scores = [10, 60, 70, 80]
    result = merge_results(make_grid(scores, 2), "storm", 2, 2, enrichment=Enrichment(data=AI_DATA))

    assert_invariants(result)
    assert [c.risk_score for c in result.chunks] == scores
    assert result.average_risk == 77


def test_empty_ai_object_still_counts_as_verified():
    result = merge_results(make_grid(LOCAL, 3), "seismic", 3, 3, enrichment=Enrichment(data={}))

    assert result.is_ai_verified is True
    assert result.report_data.temporal_trend == build_mock_report("seismic", 50).temporal_trend


def test_malformed_ai_report_sections_use_mock():
    data = {
        "hazardLevel": "64",
        "temporalTrend": [{"time": "Jan", "strain": 1, "activity": 2}],
        "magnitudeDist": "lots",
        "factors": {"geological": 80, "structural": "high"},
    }
    result = merge_results(make_grid(LOCAL, 3), "seismic", 3, 3, enrichment=Enrichment(data=data))
    mock = build_mock_report("seismic", 64)

    assert result.average_risk == 64
    assert result.report_data.temporal_trend == mock.temporal_trend
    assert result.report_data.magnitude_dist == mock.magnitude_dist
    assert result.report_data.factor_comparison == mock.factor_comparison


def test_quota_exceeded_degrades_to_low_power_mode():
    result = merge_results(
        make_grid(LOCAL, 3), "storm", 3, 3,
        enrichment=Enrichment(error_code=QUOTA_EXCEEDED), rng=random.Random(2),
    )

    assert_invariants(result)
    assert result.is_ai_verified is False
    assert result.error_code == QUOTA_EXCEEDED
    assert [c.risk_score for c in result.chunks] == LOCAL
    assert all(c.reason.startswith("Low-power mode") for c in result.chunks)
    assert "low-power mode" in result.report_data.justification
    assert "20 seconds" in result.report_data.justification


def test_api_error_is_annotated_generically():
    result = merge_results(make_grid(LOCAL, 3), "storm", 3, 3, enrichment=Enrichment(error_code=API_ERROR))

    assert result.error_code == API_ERROR
    assert result.is_ai_verified is False
    assert "service error" in result.report_data.justification


def test_sicily_without_ai_uses_regional_baseline():
    profile = knowledge.find_profile("Sicily, Italy")

    result = merge_results(
        make_grid([5] * 9, 3), "seismic", 3, 3,
        location="Sicily, Italy", rng=random.Random(7),
    )

    assert_invariants(result)
    assert result.is_ai_verified is False
    assert result.error_code is None
    assert result.detected_region == "Sicily, Italy"
    assert 70 <= result.average_risk <= 99
    for chunk in result.chunks:
        assert 70 <= chunk.risk_score <= 99
        assert chunk.details.prime in profile.geological_factors
        assert chunk.details.secondary in profile.structural_themes
        assert chunk.details.tertiary in knowledge.URBAN_FACTORS


def test_unknown_location_uses_default_baseline():
    result = merge_results(make_grid([5] * 9, 3), "seismic", 3, 3, location="Atlantis", rng=random.Random(7))

    for chunk in result.chunks:
        assert 30 <= chunk.risk_score <= 60
        assert chunk.details.prime in knowledge.GEOLOGICAL_FACTORS


def test_regional_seeding_is_skipped_with_ai_data():
    data = {"hazardLevel": 40}
    result = merge_results(
        make_grid([5] * 4, 2), "seismic", 2, 2,
        enrichment=Enrichment(data=data), location="Sicily",
    )

    assert [c.risk_score for c in result.chunks] == [5] * 4


def test_mock_report_is_deterministic():
    first = build_mock_report("storm", 63)
    second = build_mock_report("storm", 63)

    assert first == second
    assert len(first.temporal_trend) == 12
    assert [p.label for p in first.magnitude_dist] == list(HAZARD_SCHEMAS["storm"]["dist_labels"])
    assert [f.name for f in first.factor_comparison] == ["Atmospheric", "Hydrological", "Infrastructure"]
    assert first.unit1 == "Precipitation (mm)"


@pytest.mark.parametrize("hazard", ["seismic", "wildfire", "storm"])
def test_high_risk_count_recomputed_for_every_hazard(hazard):
    data = {"grid": [100] * 9, "hazardLevel": 10}
    result = merge_results(make_grid(LOCAL, 3), hazard, 3, 3, enrichment=Enrichment(data=data))

    assert result.high_risk_count == 9
    assert result.average_risk == 10
