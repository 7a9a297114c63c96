import math
from typing import Optional


LOW = "Low"
MODERATE = "Moderate"
HIGH = "High"
CRITICAL = "Critical"

HIGH_RISK_THRESHOLD = 50


def round_half_up(x: float) -> int:
    return int(math.floor(float(x) + 0.5))


def clamp_score(x: float, lo: int = 0, hi: int = 100) -> int:
    return max(lo, min(hi, round_half_up(x)))


def risk_level_for(score: float) -> str:
    if score > 80:
        return CRITICAL
    if score > HIGH_RISK_THRESHOLD:
        return HIGH
    if score > 20:
        return MODERATE
    return LOW


def is_high_risk(score: float) -> bool:
    return score > HIGH_RISK_THRESHOLD


def coerce_score(value) -> Optional[int]:
    """
    Model output is untrusted: accepts ints, floats and numeric strings,
    rejects bools, NaN and anything else.
    """
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return clamp_score(number)
