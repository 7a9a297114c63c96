import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Optional

import requests

from hazardscan import config
from hazardscan.errors import CatalogError
from hazardscan.risk.models import HazardEvent


logger = logging.getLogger(__name__)

SUMMARY_PERIODS = ("hour", "day", "week", "month")
QUERY_PERIOD_YEARS = {"year": 1, "5years": 5, "10years": 10}
SUMMARY_MAGNITUDES = ("all", "1.0", "2.5", "4.5", "significant")
SIGNIFICANT_MIN_MAGNITUDE = 6.0
MAX_MAGNITUDE = 9.0


def uses_query_endpoint(period: str) -> bool:
    return period in QUERY_PERIOD_YEARS


def summary_url(period: str, magnitude: str) -> str:
    if period not in SUMMARY_PERIODS:
        raise ValueError(f"Unsupported summary period {period!r}")
    if magnitude not in SUMMARY_MAGNITUDES:
        magnitude = "all"
    return f"{config.USGS_SUMMARY_URL}/{magnitude}_{period}.geojson"


def query_params(period: str, magnitude: str, now: Optional[datetime] = None) -> dict:
    now = now or datetime.now(timezone.utc)
    start = now - timedelta(days=365 * QUERY_PERIOD_YEARS[period])

    params = {
        "format": "geojson",
        "starttime": start.strftime("%Y-%m-%d"),
        "endtime": now.strftime("%Y-%m-%d"),
        "orderby": "magnitude",
        "limit": config.MAX_EVENTS,
    }
    if magnitude == "significant":
        params["minmagnitude"] = SIGNIFICANT_MIN_MAGNITUDE
    elif magnitude != "all":
        try:
            minimum = float(magnitude)
        except (TypeError, ValueError):
            minimum = None
        if minimum is not None and math.isfinite(minimum):
            params["minmagnitude"] = minimum
    return params


def fetch_earthquakes(period: str = "day", magnitude: str = "2.5", session=None, now: Optional[datetime] = None) -> dict:
    """
    Rolling summary feed for short windows, the date-ranged FDSN query for
    year-scale ones. Transport and decode failures raise CatalogError.
    """
    http = session or requests
    if uses_query_endpoint(period):
        url, params = config.USGS_QUERY_URL, query_params(period, magnitude, now)
    else:
        url, params = summary_url(period, magnitude), None

    try:
        r = http.get(url, params=params, timeout=config.HTTP_TIMEOUT)
        r.raise_for_status()
        return r.json()
    except (requests.RequestException, ValueError) as e:
        logger.error("Error fetching earthquake data: %s", e)
        raise CatalogError(str(e)) from e


def _as_dict(value) -> dict:
    return value if isinstance(value, dict) else {}


def normalize_earthquake(feature) -> Optional[HazardEvent]:
    """One USGS feature as a HazardEvent, or None when the record is malformed."""
    if not isinstance(feature, dict):
        return None
    props = _as_dict(feature.get("properties"))
    coords = _as_dict(feature.get("geometry")).get("coordinates")

    mag = props.get("mag")
    if isinstance(mag, bool) or not isinstance(mag, (int, float)) or not math.isfinite(mag):
        return None
    if not isinstance(coords, (list, tuple)) or len(coords) < 2:
        return None

    try:
        lng, lat = float(coords[0]), float(coords[1])
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return None

    place = props.get("place") or "Unknown location"
    return HazardEvent(
        id=str(feature.get("id") or f"usgs-{props.get('time', '')}-{lat:.3f}-{lng:.3f}"),
        lat=lat,
        lng=lng,
        magnitude=float(mag),
        intensity=max(0.0, min(float(mag) / MAX_MAGNITUDE, 1.0)),
        label=str(place),
        details=f"Magnitude {mag} seismic activity detected.",
        type="seismic",
    )


def seismic_events(period: str, magnitude: str, session=None, now: Optional[datetime] = None, **_):
    data = fetch_earthquakes(period, magnitude, session=session, now=now)
    features = data.get("features") if isinstance(data, dict) else None
    if not isinstance(features, list):
        logger.warning("Earthquake feed has no feature list")
        return []
    events = [normalize_earthquake(f) for f in features]
    return [e for e in events if e is not None]
