import base64
import json
import logging
from typing import Optional

import requests

from hazardscan import config
from hazardscan.errors import EnrichmentError, classify_ai_error
from hazardscan.llm.prompt import SYSTEM_PERSONAS, build_analysis_prompt
from hazardscan.risk.models import Enrichment


logger = logging.getLogger(__name__)

_DECODER = json.JSONDecoder()


def extract_json_object(text: Optional[str]) -> Optional[dict]:
    """
    Returns the first top-level JSON object in a model reply, tolerating
    code fences and prose around it. None when there is no object.
    """
    if not text:
        return None

    text = text.strip()
    text = text.replace("```json", "").replace("```", "").strip()

    try:
        parsed = json.loads(text)
        if isinstance(parsed, dict):
            return parsed
    except ValueError:
        pass

    idx = text.find("{")
    while idx != -1:
        try:
            parsed, _ = _DECODER.raw_decode(text, idx)
        except ValueError:
            idx = text.find("{", idx + 1)
            continue
        if isinstance(parsed, dict):
            return parsed
        idx = text.find("{", idx + 1)

    return None


def sniff_mime_type(image_bytes: bytes) -> str:
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    if image_bytes[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    return "image/png"


def _response_text(body: dict) -> str:
    candidates = body.get("candidates") or []
    if not candidates:
        feedback = body.get("promptFeedback") or {}
        raise EnrichmentError(f"No candidates in response (blockReason={feedback.get('blockReason')})")

    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(p.get("text", "") for p in parts if isinstance(p, dict))


def request_enrichment(
    image_bytes: bytes,
    hazard: str,
    location: Optional[str] = None,
    mime_type: Optional[str] = None,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    session=None,
) -> Enrichment:
    """
    One generateContent round-trip, no retry.
    Never raises: a missing key or an unparseable reply is "no data",
    failures come back as an error code.
    """
    api_key = api_key or config.gemini_api_key()
    if not api_key:
        logger.info("No Gemini API key configured; skipping AI enrichment")
        return Enrichment()

    model = model or config.GEMINI_MODEL
    payload = {
        "systemInstruction": {"parts": [{"text": SYSTEM_PERSONAS[hazard].strip()}]},
        "contents": [
            {
                "role": "user",
                "parts": [
                    {
                        "inline_data": {
                            "mime_type": mime_type or sniff_mime_type(image_bytes),
                            "data": base64.b64encode(image_bytes).decode("ascii"),
                        }
                    },
                    {"text": build_analysis_prompt(hazard, location).strip()},
                ],
            }
        ],
        "generationConfig": {"temperature": 0},
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
        response_text = _response_text(r.json())
    except Exception as e:
        error_code = classify_ai_error(e)
        logger.warning("AI enrichment failed (%s): %s", error_code, e)
        return Enrichment(error_code=error_code)

    data = extract_json_object(response_text)
    if data is None:
        logger.warning("AI enrichment reply contained no JSON object")
    return Enrichment(data=data, raw_text=response_text)
