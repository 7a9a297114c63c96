import logging
import math
import random
from datetime import datetime
from typing import List, Optional

from hazardscan import config
from hazardscan.events.gdacs import feed_events
from hazardscan.events.synthetic import PERIOD_MULTIPLIERS, synthetic_events
from hazardscan.events.usgs import seismic_events
from hazardscan.risk.models import HazardEvent


logger = logging.getLogger(__name__)

SIGNIFICANT_INTENSITY = 0.7

FEED_MODES = ("synthetic", "gdacs")

PERIODS = tuple(PERIOD_MULTIPLIERS)

# (hazard, feed mode) -> source
SOURCES = {
    ("seismic", "synthetic"): seismic_events,
    ("seismic", "gdacs"): seismic_events,
    ("wildfire", "synthetic"): synthetic_events,
    ("wildfire", "gdacs"): feed_events,
    ("storm", "synthetic"): synthetic_events,
    ("storm", "gdacs"): feed_events,
}


def min_intensity(selector) -> float:
    selector = str(selector or "").strip().lower()
    if selector == "significant":
        return SIGNIFICANT_INTENSITY
    if selector in ("", "all"):
        return 0.0
    try:
        value = float(selector)
    except ValueError:
        value = None
    if value is None or not math.isfinite(value):
        logger.warning("Unrecognised magnitude selector %r; showing all events", selector)
        return 0.0
    return value / 10.0


def fetch_hazard_events(
    hazard: str,
    period: str = "day",
    magnitude: str = "2.5",
    feed_mode: Optional[str] = None,
    session=None,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> List[HazardEvent]:
    """
    Unified event list for one hazard, filtered by minimum intensity and
    capped at MAX_EVENTS. Unknown hazard, period or feed mode raise
    ValueError. Seismic transport failures raise CatalogError; the
    multi-hazard feed returns [] instead.
    """
    if hazard not in config.HAZARD_TYPES:
        raise ValueError(f"Unknown hazard type {hazard!r}; expected one of {config.HAZARD_TYPES}")
    feed_mode = feed_mode or config.FEED_MODE
    if feed_mode not in FEED_MODES:
        raise ValueError(f"Unknown feed mode {feed_mode!r}; expected one of {FEED_MODES}")
    if period not in PERIODS:
        raise ValueError(f"Unknown period {period!r}; expected one of {PERIODS}")

    source = SOURCES[(hazard, feed_mode)]
    events = source(hazard=hazard, period=period, magnitude=magnitude, session=session, rng=rng, now=now)

    threshold = min_intensity(magnitude)
    kept = [e for e in events if 0.0 <= e.intensity <= 1.0 and e.intensity >= threshold]

    logger.info("%s events (%s, %s): %d fetched, %d kept", hazard, period, magnitude, len(events), len(kept))
    return kept[:config.MAX_EVENTS]


def event_risk_index(magnitude: float) -> float:
    """Quick 0-10 risk index for a single event, roughly magnitude squared."""
    risk = (magnitude * magnitude) / 5.0
    if risk > 10:
        risk = 10.0
    return round(risk, 1)


def event_risk_band(magnitude: float) -> str:
    risk = event_risk_index(magnitude)
    if risk < 3:
        return "low"
    if risk < 6:
        return "moderate"
    return "high"


def event_summary(event: HazardEvent) -> dict:
    """Event dict with the quick risk index and band attached."""
    row = event.to_dict()
    row["risk_index"] = event_risk_index(event.magnitude)
    row["risk_band"] = event_risk_band(event.magnitude)
    return row
