import json
import logging
from dataclasses import asdict
from typing import List, Optional, Sequence, Tuple

import requests

from hazardscan import config
from hazardscan.risk.models import ReportData


logger = logging.getLogger(__name__)

CHAT_PERSONAS = {
    "seismic": ("Seismic Companion", "seismology and structural engineering"),
    "wildfire": ("Wildfire Companion", "fire behaviour and wildland-urban interface safety"),
    "storm": ("Storm Companion", "meteorology, flooding and storm preparedness"),
}

# (role, content) with role "user" or "assistant"
ChatMessage = Tuple[str, str]


def build_chat_context(report: ReportData, region: Optional[str] = None, hazard: str = "seismic") -> str:
    name, expertise = CHAT_PERSONAS[hazard]
    trend = [asdict(p) for p in report.temporal_trend]
    dist = [asdict(p) for p in report.magnitude_dist]
    factors = [asdict(f) for f in report.factor_comparison]

    return f"""
You are the "{name}", an AI expert in {expertise}.
Your goal is to answer questions about a specific {hazard} risk report provided in the context.

CONTEXT DATA:
Region: {region or "Unknown"}
Justification: {report.justification or "None provided"}
Temporal Trend ({report.unit1 or "value1"} / {report.unit2 or "value2"}): {json.dumps(trend)}
Magnitude Frequency: {json.dumps(dist)}
Factors: {json.dumps(factors)}

RULES:
1. Always refer to the data in the context when answering.
2. If the user asks about trends, refer to the temporal trend data.
3. If the user asks about magnitudes or intensity classes, refer to the frequency data (probabilities are incident indices).
4. Keep answers professional, concise, and focused on safety and science.
5. Use markdown for better readability.
""".strip()


def chat_history_to_contents(history: Sequence[ChatMessage]) -> List[dict]:
    """Gemini chat contents; a leading assistant greeting is dropped since the history must start with the user."""
    contents = []
    for index, (role, content) in enumerate(history):
        if index == 0 and role == "assistant":
            continue
        contents.append({
            "role": "model" if role == "assistant" else "user",
            "parts": [{"text": content}],
        })
    return contents


def get_chat_response(
    message: str,
    history: Sequence[ChatMessage],
    report: ReportData,
    region: Optional[str] = None,
    hazard: str = "seismic",
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    session=None,
) -> str:
    """Chat reply as markdown. Failures come back as a readable message, never raised."""
    api_key = api_key or config.gemini_api_key()
    if not api_key:
        return ("⚠️ **Gemini API key is missing.** Set `GEMINI_API_KEY` in the environment "
                "and restart the service.")

    model = model or config.GEMINI_MODEL
    payload = {
        "systemInstruction": {"parts": [{"text": build_chat_context(report, region, hazard)}]},
        "contents": chat_history_to_contents(history) + [{"role": "user", "parts": [{"text": message}]}],
    }

    http = session or requests
    try:
        r = http.post(
            config.GEMINI_URL.format(model=model),
            headers={"x-goog-api-key": api_key},
            json=payload,
            timeout=config.AI_TIMEOUT,
        )
        r.raise_for_status()
        candidates = r.json().get("candidates") or [{}]
        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
    except Exception as e:
        logger.warning("Chat request failed: %s", e)
        return (f"❌ **{CHAT_PERSONAS[hazard][0]} error:** {e}\n\n"
                f"This could be a quota limit (429) or a model specific issue with {model}.")

    return text or "The model returned an empty answer. Please rephrase your question."
