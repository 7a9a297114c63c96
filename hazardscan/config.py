import os


HAZARD_TYPES = ("seismic", "wildfire", "storm")

DEFAULT_ROWS = 3
DEFAULT_COLS = 3

# Gemini (generateContent REST API)
GEMINI_MODEL = os.environ.get("HAZARDSCAN_GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_URL = os.environ.get(
    "HAZARDSCAN_GEMINI_URL",
    "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent",
)
AI_TIMEOUT = float(os.environ.get("HAZARDSCAN_AI_TIMEOUT", 60))

# Event feeds
HTTP_TIMEOUT = float(os.environ.get("HAZARDSCAN_HTTP_TIMEOUT", 15))
USGS_SUMMARY_URL = os.environ.get(
    "HAZARDSCAN_USGS_SUMMARY_URL",
    "https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary",
)
USGS_QUERY_URL = os.environ.get(
    "HAZARDSCAN_USGS_QUERY_URL",
    "https://earthquake.usgs.gov/fdsnws/event/1/query",
)
GDACS_URL = os.environ.get("HAZARDSCAN_GDACS_URL", "https://www.gdacs.org/xml/gdacs.geojson")
FEED_MODE = os.environ.get("HAZARDSCAN_FEED_MODE", "synthetic")
MAX_EVENTS = 50

LOG_LEVEL = os.environ.get("HAZARDSCAN_LOG_LEVEL", "WARNING")


def gemini_api_key():
    """Read at call time so a key exported after import is still picked up."""
    key = os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")
    if key:
        key = key.strip()
    return key or None
