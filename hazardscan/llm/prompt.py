import json
from typing import Optional


MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

HAZARD_SCHEMAS = {
    "seismic": {
        "series": ("strain", "activity"),
        "units": ("Strain Index", "Activity Rate"),
        "dist_key": "magnitude",
        "dist_labels": ("M2", "M3", "M4", "M5", "M6", "M7", "M8"),
        "factors": ("geological", "structural", "urban"),
        "level_name": "seismic hazard level",
        "summary": "Seismic exposure estimated from map coloring, regional fault context and building stock.",
        "details": (
            "Ground shaking potential inferred from the mapped hazard palette.",
            "Structural vulnerability assumed typical for the regional building stock.",
            "Urban exposure weighted by the density implied by the map.",
        ),
    },
    "wildfire": {
        "series": ("fuelMoisture", "ignitionRisk"),
        "units": ("Fuel Moisture (%)", "Ignition Risk Index"),
        "dist_key": "intensityClass",
        "dist_labels": ("Class 1", "Class 2", "Class 3", "Class 4", "Class 5", "Class 6", "Class 7"),
        "factors": ("vegetation", "climate", "topography"),
        "level_name": "wildfire hazard level",
        "summary": "Wildfire exposure estimated from map coloring, fuel conditions and fire weather.",
        "details": (
            "Fuel load and continuity inferred from the mapped vegetation palette.",
            "Fire weather assumed typical for the season and latitude.",
            "Terrain and interface exposure weighted by the mapped slope and settlement pattern.",
        ),
    },
    "storm": {
        "series": ("precip", "wind"),
        "units": ("Precipitation (mm)", "Wind Speed (km/h)"),
        "dist_key": "category",
        "dist_labels": ("TD", "TS", "Cat 1", "Cat 2", "Cat 3", "Cat 4", "Cat 5"),
        "factors": ("atmospheric", "hydrological", "infrastructure"),
        "level_name": "storm hazard level",
        "summary": "Storm exposure estimated from map coloring, coastal and drainage context.",
        "details": (
            "Wind and rainfall intensity inferred from the mapped hazard palette.",
            "Flood and surge exposure assumed from the mapped terrain and water bodies.",
            "Infrastructure resilience weighted by the development density implied by the map.",
        ),
    },
}

SYSTEM_PERSONAS = {
    "seismic": """
You are a senior seismologist and structural risk engineer.
You read hazard maps and satellite imagery and estimate earthquake risk.
Colors follow the usual hazard palette: red/purple = highest, green/blue = lowest.
Return ONLY valid JSON. No markdown. No extra text.
""",
    "wildfire": """
You are a wildfire behaviour analyst and fire-weather forecaster.
You read fire danger maps and satellite imagery and estimate wildfire risk.
Colors follow the usual hazard palette: red/purple = highest, green/blue = lowest.
Return ONLY valid JSON. No markdown. No extra text.
""",
    "storm": """
You are a meteorologist specialising in tropical cyclones, severe storms and flooding.
You read storm and flood hazard maps and satellite imagery and estimate storm risk.
Colors follow the usual hazard palette: red/purple = highest, green/blue = lowest.
Return ONLY valid JSON. No markdown. No extra text.
""",
}


def _response_template(hazard: str) -> dict:
    schema = HAZARD_SCHEMAS[hazard]
    s1, s2 = schema["series"]
    return {
        "region": "<detected region or place name>",
        "hazardLevel": 0,
        "grid": [0, 0, 0, 0, 0, 0, 0, 0, 0],
        "justification": "<at most 3 sentences>",
        "temporalTrend": [{"time": "Jan", s1: 0, s2: 0}],
        "magnitudeDist": [{schema["dist_key"]: schema["dist_labels"][0], "probability": 0}],
        "factors": {name: 0 for name in schema["factors"]},
    }


def build_analysis_prompt(hazard: str, location: Optional[str] = None) -> str:
    schema = HAZARD_SCHEMAS[hazard]
    s1, s2 = schema["series"]
    f1, f2, f3 = schema["factors"]
    where = f"The user says this map shows: {location.strip()}." if location and location.strip() else \
        "The user did not name the location; infer it from the image if you can."

    return f"""
Analyze the attached map image for {hazard} risk.
{where}

Return ONLY one JSON object with exactly these keys:
{json.dumps(_response_template(hazard), indent=2)}

Rules:
- "region": the most likely region or place name shown.
- "hazardLevel": integer 0-100, the overall {schema["level_name"]}.
- "grid": exactly 9 integers 0-100, row-major for a 3x3 split of the image (top-left first).
- "justification": at most 3 sentences explaining the assessment.
- "temporalTrend": exactly 12 points, one per month ({", ".join(MONTHS)}), with numeric "{s1}" and "{s2}".
- "magnitudeDist": exactly 7 points labelled {", ".join(schema["dist_labels"])} under "{schema["dist_key"]}", with "probability" 0-100.
- "factors": numeric weights 0-100 for "{f1}", "{f2}" and "{f3}".
"""
