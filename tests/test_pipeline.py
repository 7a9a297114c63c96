import json
import random
import threading

import pytest

from conftest import GREEN, RED, encode_png, solid_rgb
from hazardscan import pipeline
from hazardscan.errors import QUOTA_EXCEEDED, ImageDecodeError
from hazardscan.pipeline import analyze_image, analyze_image_file
from hazardscan.risk import knowledge
from hazardscan.risk.models import Enrichment


def test_local_only_analysis(red_png, no_api_key):
    result = analyze_image(red_png, "storm", 3, 3)

    assert result.is_ai_verified is False
    assert result.error_code is None
    assert [c.risk_score for c in result.chunks] == [100] * 9
    assert all(c.risk_level == "Critical" for c in result.chunks)
    assert result.high_risk_count == 9
    assert result.average_risk == 100


def test_ai_enrichment_is_merged(red_png):
    calls = []

    def fake_enrich(image_bytes, hazard, **kwargs):
        calls.append((image_bytes, hazard, kwargs))
        return Enrichment(data={"hazardLevel": 33, "grid": [10] * 9, "region": "Gulf Coast"})

    result = analyze_image(red_png, "storm", 3, 3, location="Louisiana", enrich=fake_enrich)

    assert calls[0][0] == red_png
    assert calls[0][1] == "storm"
    assert calls[0][2]["location"] == "Louisiana"
    assert result.is_ai_verified is True
    assert result.average_risk == 33
    assert result.high_risk_count == 0
    assert result.detected_region == "Gulf Coast"


def test_quota_error_is_carried_as_data(red_png):
    def fake_enrich(image_bytes, hazard, **kwargs):
        return Enrichment(error_code=QUOTA_EXCEEDED)

    result = analyze_image(red_png, "wildfire", 2, 2, enrich=fake_enrich)

    assert result.error_code == QUOTA_EXCEEDED
    assert result.is_ai_verified is False
    assert len(result.chunks) == 4
    assert result.high_risk_count == 4


def test_include_llm_false_skips_enrichment(red_png):
    def fail_enrich(*args, **kwargs):
        raise AssertionError("enrichment should not be called")

    result = analyze_image(red_png, "seismic", 3, 3, include_llm=False, enrich=fail_enrich)

    assert result.is_ai_verified is False


def test_undecodable_image_raises(no_api_key):
    with pytest.raises(ImageDecodeError):
        analyze_image(b"definitely not a png", "seismic", 3, 3)


def test_ai_request_runs_while_image_is_sampled(red_png, monkeypatch):
    started = threading.Event()
    release = threading.Event()
    order = []

    def slow_enrich(image_bytes, hazard, **kwargs):
        order.append("enrich")
        started.set()
        release.wait(5)
        return Enrichment(data={"hazardLevel": 12})

    real_decode = pipeline.decode_image

    def recording_decode(image_bytes):
        assert started.wait(5), "AI request was not submitted before decoding"
        order.append("decode")
        release.set()
        return real_decode(image_bytes)

    monkeypatch.setattr(pipeline, "decode_image", recording_decode)

    result = analyze_image(red_png, "storm", 3, 3, enrich=slow_enrich)

    assert order == ["enrich", "decode"]
    assert result.average_risk == 12


def test_decode_failure_does_not_wait_for_ai():
    release = threading.Event()
    finished = threading.Event()

    def blocked_enrich(image_bytes, hazard, **kwargs):
        release.wait(5)
        finished.set()
        return Enrichment()

    try:
        with pytest.raises(ImageDecodeError):
            analyze_image(b"garbage", "seismic", 3, 3, enrich=blocked_enrich)
        assert not finished.is_set()
    finally:
        release.set()


def test_missing_file_raises(tmp_path):
    with pytest.raises(ImageDecodeError):
        analyze_image(str(tmp_path / "missing.png"), "seismic")


def test_unknown_hazard_is_rejected(red_png):
    with pytest.raises(ValueError):
        analyze_image(red_png, "tsunami")


def test_sicily_scenario_without_ai_key(no_api_key):
    image = encode_png(solid_rgb(30, 30, GREEN))
    profile = knowledge.find_profile("sicily")

    result = analyze_image(image, "seismic", 3, 3, location="Sicily, Italy", rng=random.Random(11))

    assert result.is_ai_verified is False
    assert result.error_code is None
    assert 70 <= result.average_risk <= 100
    assert len(result.chunks) == 9
    for chunk in result.chunks:
        assert 70 <= chunk.risk_score <= 99
        for text in (chunk.details.prime, chunk.details.secondary, chunk.details.tertiary):
            assert isinstance(text, str) and text
        assert chunk.details.prime in profile.geological_factors
        assert chunk.details.secondary in profile.structural_themes


def test_analyze_image_file_writes_outputs(tmp_path, no_api_key):
    image_path = tmp_path / "map.png"
    image_path.write_bytes(encode_png(solid_rgb(30, 30, RED)))
    json_path = tmp_path / "out" / "result.json"
    overlay_path = tmp_path / "out" / "overlay.png"

    output, saved = analyze_image_file(
        str(image_path), "wildfire", 3, 3,
        include_llm=False,
        output_json_path=str(json_path),
        output_image_path=str(overlay_path),
    )

    assert saved == str(overlay_path)
    assert overlay_path.exists()
    written = json.loads(json_path.read_text())
    assert written == output
    assert written["high_risk_count"] == 9
    assert written["chunks"][0]["id"] == "0-0"
    assert set(written["chunks"][0]["details"]) == {"prime", "secondary", "tertiary"}
