import logging
import math
from typing import Optional, Tuple

import requests

from hazardscan import config
from hazardscan.errors import FeedFetchError
from hazardscan.risk.models import HazardEvent


logger = logging.getLogger(__name__)

EVENT_TYPES = {
    "wildfire": ("WF",),
    "storm": ("TC", "FL"),
}

# native severity -> magnitude-like scale
SEVERITY_DIVISORS = {
    "TC": 30.0,    # wind speed, km/h
    "FL": 1.0,     # flood magnitude index
    "WF": 1000.0,  # burned area, ha
}

ALERT_INTENSITY = {
    "green": 0.4,
    "orange": 0.7,
    "red": 1.0,
}


def _as_dict(value) -> dict:
    return value if isinstance(value, dict) else {}


def fetch_feed(session=None) -> dict:
    http = session or requests
    try:
        r = http.get(config.GDACS_URL, timeout=config.HTTP_TIMEOUT)
        r.raise_for_status()
        data = r.json()
    except (requests.RequestException, ValueError) as e:
        raise FeedFetchError(f"Failed to fetch hazard telemetry: {e}") from e

    if not isinstance(data, dict):
        raise FeedFetchError("Hazard feed did not return a GeoJSON object")
    return data


def _is_centroid(feature: dict) -> bool:
    props = _as_dict(feature.get("properties"))
    tags = f"{props.get('Class', '')} {props.get('class', '')} {feature.get('id', '')}"
    return "centroid" in tags.lower()


def _ring_centroid(ring) -> Optional[Tuple[float, float]]:
    points = [p for p in ring if isinstance(p, (list, tuple)) and len(p) >= 2]
    if len(points) > 1 and points[0] == points[-1]:
        points = points[:-1]
    if not points:
        return None
    lng = sum(float(p[0]) for p in points) / len(points)
    lat = sum(float(p[1]) for p in points) / len(points)
    return lat, lng


def feature_location(feature: dict) -> Optional[Tuple[float, float]]:
    """(lat, lng) of a point, or of a polygon's outer ring when it is tagged as a centroid."""
    geometry = _as_dict(feature.get("geometry"))
    kind = geometry.get("type")
    coords = geometry.get("coordinates")
    if not isinstance(coords, (list, tuple)) or not coords:
        return None

    try:
        if kind == "Point":
            return float(coords[1]), float(coords[0])
        if not _is_centroid(feature):
            return None
        if kind == "Polygon":
            return _ring_centroid(coords[0])
        if kind == "MultiPolygon":
            return _ring_centroid(coords[0][0])
    except (TypeError, ValueError, IndexError):
        return None
    return None


def _severity(props: dict) -> Optional[float]:
    value = props.get("severity")
    if value is None:
        value = _as_dict(props.get("severitydata")).get("severity")
    if isinstance(value, bool):
        return None
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def normalize_feature(feature, hazard: str) -> Optional[HazardEvent]:
    if not isinstance(feature, dict):
        return None
    props = _as_dict(feature.get("properties"))
    event_type = str(props.get("eventtype", "")).upper()
    if event_type not in EVENT_TYPES.get(hazard, ()):
        return None

    intensity = ALERT_INTENSITY.get(str(props.get("alertlevel", "")).lower())
    severity = _severity(props)
    location = feature_location(feature)
    if intensity is None or severity is None or location is None:
        return None

    lat, lng = location
    label = props.get("name") or props.get("eventname") or f"{event_type} event"
    details = props.get("description") or props.get("htmldescription") or \
        f"{props.get('alertlevel')} alert {event_type} event."

    return HazardEvent(
        id=f"{event_type}-{props.get('eventid', feature.get('id', ''))}",
        lat=lat,
        lng=lng,
        magnitude=round(severity / SEVERITY_DIVISORS[event_type], 2),
        intensity=intensity,
        label=str(label),
        details=str(details),
        type=hazard,
    )


def feed_events(hazard: str, session=None, **_):
    """GDACS events for one hazard; any fetch failure yields an empty list."""
    try:
        data = fetch_feed(session=session)
    except FeedFetchError as e:
        logger.warning("%s", e)
        return []

    features = data.get("features")
    if not isinstance(features, list):
        logger.warning("Hazard feed has no feature list")
        return []

    events = []
    seen = set()
    for feature in features:
        event = normalize_feature(feature, hazard)
        if event is None or event.id in seen:
            continue
        seen.add(event.id)
        events.append(event)
    return events
