import math
import random
from typing import Optional

from hazardscan.risk.models import HazardEvent


BASE_COUNT = 3
COORD_JITTER = 1.5

PERIOD_MULTIPLIERS = {
    "hour": 0.1,
    "day": 1,
    "week": 4,
    "month": 15,
    "year": 30,
    "5years": 60,
    "10years": 90,
}

BASE_WILDFIRES = (
    HazardEvent(
        id="wf-ca-001", lat=34.0522, lng=-118.2437, magnitude=7.2, intensity=0.85,
        label="Pacific Palisades Wildfire",
        details="High-intensity wildfire threatening residential areas. Rapid spread due to dry conditions.",
        type="wildfire",
    ),
    HazardEvent(
        id="wf-or-002", lat=43.8041, lng=-120.5542, magnitude=6.8, intensity=0.75,
        label="Central Oregon Forest Fire",
        details="Large-scale forest fire burning through timber. Fire crews establishing containment lines.",
        type="wildfire",
    ),
    HazardEvent(
        id="wf-nv-003", lat=39.5296, lng=-119.8138, magnitude=5.5, intensity=0.65,
        label="Reno Hills Wildfire",
        details="Grassland fire advancing toward suburban communities. Air quality impact significant.",
        type="wildfire",
    ),
    HazardEvent(
        id="wf-az-004", lat=33.4484, lng=-112.0740, magnitude=6.2, intensity=0.70,
        label="Phoenix Metro Wildfire",
        details="Wildfire near urban interface. Multiple evacuation orders in effect.",
        type="wildfire",
    ),
    HazardEvent(
        id="wf-co-005", lat=39.7392, lng=-104.9903, magnitude=5.8, intensity=0.68,
        label="Colorado Front Range Fire",
        details="Mountain wildfire spreading through pine forest. Helicopter suppression operations active.",
        type="wildfire",
    ),
)

BASE_STORMS = (
    HazardEvent(
        id="storm-gulf-001", lat=29.9511, lng=-90.0715, magnitude=8.5, intensity=0.90,
        label="Gulf Coast Hurricane",
        details="Category 4 hurricane making landfall. Storm surge 15-20 feet expected.",
        type="storm",
    ),
    HazardEvent(
        id="storm-atl-002", lat=32.0835, lng=-81.0998, magnitude=7.2, intensity=0.78,
        label="Savannah Tropical Storm",
        details="Tropical storm bringing heavy rainfall and strong winds to coastal Georgia.",
        type="storm",
    ),
    HazardEvent(
        id="storm-fl-003", lat=25.7617, lng=-80.1918, magnitude=6.8, intensity=0.72,
        label="Miami Flood Event",
        details="Severe thunderstorm system causing urban flooding. Flash flood warnings active.",
        type="storm",
    ),
    HazardEvent(
        id="storm-tx-004", lat=29.7604, lng=-95.3698, magnitude=7.5, intensity=0.80,
        label="Houston Severe Weather",
        details="Complex storm system with tornado potential. Large hail and damaging winds reported.",
        type="storm",
    ),
    HazardEvent(
        id="storm-nc-005", lat=35.2271, lng=-80.8431, magnitude=6.5, intensity=0.68,
        label="Charlotte Storm System",
        details="Powerful cold front triggering severe thunderstorms. Widespread power outages reported.",
        type="storm",
    ),
)

BASE_EVENTS = {
    "wildfire": BASE_WILDFIRES,
    "storm": BASE_STORMS,
}


def event_count(period: str, available: int) -> int:
    multiplier = PERIOD_MULTIPLIERS.get(period, 1)
    count = max(1, int(math.floor(BASE_COUNT * multiplier)))
    return min(count, available * BASE_COUNT)


def synthetic_events(hazard: str, period: str = "day", rng: Optional[random.Random] = None, base_events=None, **_):
    """
    Curated sample events, more of them for longer windows.
    The first pass over the base list keeps the curated coordinates; later
    passes jitter them so repeated events do not stack on one point.
    """
    base = (base_events or BASE_EVENTS).get(hazard, ())
    if not base:
        return []
    rng = rng or random.Random()

    events = []
    for i in range(event_count(period, len(base))):
        template = base[i % len(base)]
        cycle = i // len(base)
        if cycle == 0:
            events.append(template)
            continue
        events.append(HazardEvent(
            id=f"{template.id}-{cycle}",
            lat=round(template.lat + rng.uniform(-COORD_JITTER, COORD_JITTER), 4),
            lng=round(template.lng + rng.uniform(-COORD_JITTER, COORD_JITTER), 4),
            magnitude=template.magnitude,
            intensity=template.intensity,
            label=template.label,
            details=template.details,
            type=template.type,
        ))
    return events
