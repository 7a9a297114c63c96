import math
import random
from typing import List, Optional, Sequence

from hazardscan.errors import QUOTA_EXCEEDED, API_ERROR, UNKNOWN
from hazardscan.llm.prompt import HAZARD_SCHEMAS, MONTHS
from hazardscan.risk.knowledge import (
    SEISMIC_KNOWLEDGE_BASE,
    baseline_for,
    find_profile,
    pick_narrative,
    seed_score,
)
from hazardscan.risk.models import (
    AnalysisResult,
    ChunkDetails,
    DistributionPoint,
    Enrichment,
    FactorValue,
    GridChunk,
    ReportData,
    SampledGrid,
    TrendPoint,
)
from hazardscan.risk.rules import coerce_score, is_high_risk, risk_level_for, round_half_up


AI_GRID_SHAPE = (3, 3)
TREND_POINTS = 12
DIST_POINTS = 7
FACTOR_POINTS = 3

RETRY_HINT = "Try again in about 20 seconds for an AI-calibrated assessment."


def _number(value) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


# -----------------------------
# Report data
# -----------------------------

def build_mock_report(hazard: str, average_risk: float) -> ReportData:
    """
    Deterministic report shaped like the AI one, scaled by the average risk.
    Same inputs always give the same report.
    """
    schema = HAZARD_SCHEMAS[hazard]
    base = max(float(average_risk), 1.0)

    trend = []
    for i, month in enumerate(MONTHS):
        phase = 2.0 * math.pi * i / TREND_POINTS
        trend.append(TrendPoint(
            time=month,
            value1=round(base * (0.85 + 0.15 * math.sin(phase)), 1),
            value2=round(base * (0.70 + 0.30 * math.cos(phase)) / 10.0, 2),
        ))

    # bell curve centred on the label matching the average risk
    center = (DIST_POINTS - 1) * min(base, 100.0) / 100.0
    dist = [
        DistributionPoint(label=label, probability=round(100.0 * math.exp(-((i - center) ** 2) / 2.0), 1))
        for i, label in enumerate(schema["dist_labels"])
    ]

    weights = (1.0, 0.8, 0.6)
    factors = [
        FactorValue(name=name.capitalize(), value=float(min(100, round_half_up(base * w))))
        for name, w in zip(schema["factors"], weights)
    ]

    return ReportData(
        temporal_trend=trend,
        magnitude_dist=dist,
        factor_comparison=factors,
        unit1=schema["units"][0],
        unit2=schema["units"][1],
    )


def _parse_trend(hazard: str, raw) -> Optional[List[TrendPoint]]:
    if not isinstance(raw, list):
        return None
    s1, s2 = HAZARD_SCHEMAS[hazard]["series"]

    points = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        v1 = _number(entry.get(s1, entry.get("value1")))
        v2 = _number(entry.get(s2, entry.get("value2")))
        if v1 is None or v2 is None:
            continue
        time = entry.get("time")
        if time is None or time == "":
            time = MONTHS[len(points) % TREND_POINTS]
        points.append(TrendPoint(time=str(time), value1=v1, value2=v2))

    if len(points) < TREND_POINTS:
        return None
    return points[:TREND_POINTS]


def _parse_distribution(hazard: str, raw) -> Optional[List[DistributionPoint]]:
    if not isinstance(raw, list):
        return None
    schema = HAZARD_SCHEMAS[hazard]

    points = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        probability = _number(entry.get("probability"))
        if probability is None:
            continue
        label = entry.get(schema["dist_key"], entry.get("label", entry.get("magnitude")))
        if label is None or label == "":
            label = schema["dist_labels"][len(points) % DIST_POINTS]
        points.append(DistributionPoint(label=str(label), probability=probability))

    if len(points) < DIST_POINTS:
        return None
    return points[:DIST_POINTS]


def _parse_factors(hazard: str, raw) -> Optional[List[FactorValue]]:
    if not isinstance(raw, dict):
        return None
    names = HAZARD_SCHEMAS[hazard]["factors"]

    known = [(name, _number(raw.get(name))) for name in names]
    if all(value is not None for _, value in known):
        return [FactorValue(name=name.capitalize(), value=value) for name, value in known]

    # model renamed the keys; keep its own names
    numeric = [(str(k), _number(v)) for k, v in raw.items()]
    numeric = [(k, v) for k, v in numeric if v is not None]
    if len(numeric) < FACTOR_POINTS:
        return None
    return [FactorValue(name=k.capitalize(), value=v) for k, v in numeric[:FACTOR_POINTS]]


def build_report(hazard: str, average_risk: int, ai_data: Optional[dict], justification: Optional[str]) -> ReportData:
    mock = build_mock_report(hazard, average_risk)
    if ai_data is None:
        return ReportData(
            temporal_trend=mock.temporal_trend,
            magnitude_dist=mock.magnitude_dist,
            factor_comparison=mock.factor_comparison,
            justification=justification,
            unit1=mock.unit1,
            unit2=mock.unit2,
        )

    return ReportData(
        temporal_trend=_parse_trend(hazard, ai_data.get("temporalTrend")) or mock.temporal_trend,
        magnitude_dist=_parse_distribution(hazard, ai_data.get("magnitudeDist")) or mock.magnitude_dist,
        factor_comparison=_parse_factors(hazard, ai_data.get("factors")) or mock.factor_comparison,
        justification=justification,
        unit1=mock.unit1,
        unit2=mock.unit2,
    )


# -----------------------------
# Narrative
# -----------------------------

def _ai_justification(ai_data: dict) -> Optional[str]:
    text = ai_data.get("justification")
    if isinstance(text, str) and text.strip():
        return text.strip()
    return None


def _degraded_justification(error_code: Optional[str], details: Sequence[ChunkDetails]) -> Optional[str]:
    if error_code == QUOTA_EXCEEDED:
        seen = []
        for d in details:
            if d.prime not in seen:
                seen.append(d.prime)
        local = " ".join(seen[:2])
        return f"AI quota reached; running in low-power mode on local factors. {local} {RETRY_HINT}".strip()
    if error_code in (API_ERROR, UNKNOWN):
        return "AI verification unavailable due to a service error; scores are based on local image analysis."
    return None


def _detected_region(ai_data: Optional[dict], location: Optional[str]) -> Optional[str]:
    if ai_data is not None:
        region = ai_data.get("region")
        if isinstance(region, str) and region.strip():
            return region.strip()
    if location and location.strip():
        return location.strip()
    return None


# -----------------------------
# Merge
# -----------------------------

def local_scores(
    sampled: SampledGrid,
    hazard: str,
    location: Optional[str],
    rng: random.Random,
    knowledge_base=SEISMIC_KNOWLEDGE_BASE,
    has_ai: bool = False,
) -> List[int]:
    """
    Pixel scores, except for seismic runs without AI data but with a named
    location, where the regional baseline (or the default) seeds each cell.
    """
    if hazard == "seismic" and not has_ai and location and location.strip():
        baseline = baseline_for(find_profile(location, knowledge_base))
        return [seed_score(baseline, rng) for _ in sampled.chunks]
    return [c.risk_score for c in sampled.chunks]


def ai_grid_value(ai_data: Optional[dict], index: int, rows: int, cols: int) -> Optional[int]:
    if ai_data is None or (rows, cols) != AI_GRID_SHAPE:
        return None
    grid = ai_data.get("grid")
    if not isinstance(grid, list) or index >= len(grid):
        return None
    return coerce_score(grid[index])


def merge_results(
    sampled: SampledGrid,
    hazard: str,
    rows: int,
    cols: int,
    enrichment: Optional[Enrichment] = None,
    location: Optional[str] = None,
    rng: Optional[random.Random] = None,
    knowledge_base=SEISMIC_KNOWLEDGE_BASE,
    factor_lists=None,
) -> AnalysisResult:
    rng = rng or random.Random()
    enrichment = enrichment or Enrichment()
    ai_data = enrichment.data if isinstance(enrichment.data, dict) else None
    error_code = enrichment.error_code if ai_data is None else None

    scores = local_scores(sampled, hazard, location, rng, knowledge_base, has_ai=ai_data is not None)
    local_mean = round_half_up(sum(scores) / (rows * cols))
    profile = find_profile(location, knowledge_base) if hazard == "seismic" else None

    schema = HAZARD_SCHEMAS[hazard]
    justification = _ai_justification(ai_data) if ai_data is not None else None
    ai_details = ChunkDetails(*schema["details"])

    chunks: List[GridChunk] = []
    local_details: List[ChunkDetails] = []
    for index, (cell, local) in enumerate(zip(sampled.chunks, scores)):
        ai_value = ai_grid_value(ai_data, index, rows, cols)
        score = ai_value if ai_value is not None else local

        if ai_data is not None:
            details = ai_details
            reason = justification or schema["summary"]
        else:
            details = pick_narrative(hazard, profile, rng, factor_lists)
            local_details.append(details)
            reason = details.prime
            if error_code == QUOTA_EXCEEDED:
                reason = f"Low-power mode: {details.prime}"

        chunks.append(GridChunk(
            id=cell.id,
            row=cell.row,
            col=cell.col,
            risk_score=score,
            risk_level=risk_level_for(score),
            reason=reason,
            details=details,
        ))

    average_risk = local_mean
    if ai_data is not None:
        level = coerce_score(ai_data.get("hazardLevel"))
        if level is not None:
            average_risk = level

    if ai_data is None:
        justification = _degraded_justification(error_code, local_details)

    return AnalysisResult(
        chunks=chunks,
        average_risk=average_risk,
        high_risk_count=sum(1 for c in chunks if is_high_risk(c.risk_score)),
        report_data=build_report(hazard, average_risk, ai_data, justification),
        is_ai_verified=ai_data is not None,
        detected_region=_detected_region(ai_data, location),
        error_code=error_code,
    )
