QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
API_ERROR = "API_ERROR"
UNKNOWN = "UNKNOWN"

ERROR_CODES = (QUOTA_EXCEEDED, API_ERROR, UNKNOWN)


class HazardScanError(Exception):
    def __init__(self, stage: str, message: str):
        self.stage = stage
        self.message = message
        super().__init__(f"[{stage}] {message}")


class ImageDecodeError(HazardScanError):
    def __init__(self, message: str):
        super().__init__("IMAGE_DECODE", message)


class CatalogError(HazardScanError):
    def __init__(self, message: str):
        super().__init__("SEISMIC_CATALOG", message)


class FeedFetchError(HazardScanError):
    def __init__(self, message: str):
        super().__init__("HAZARD_FEED", message)


class EnrichmentError(HazardScanError):
    def __init__(self, message: str):
        super().__init__("AI_ENRICHMENT", message)


def classify_ai_error(exc) -> str:
    """
    Quota exhaustion is expected and recoverable, anything else is a fault.
    HTTP errors carry the response body too, since the status line alone
    does not always mention the quota.
    """
    text = str(exc)
    response = getattr(exc, "response", None)
    if response is not None:
        text = f"{text} {getattr(response, 'status_code', '')} {getattr(response, 'text', '')}"

    if "429" in text or "quota" in text.lower():
        return QUOTA_EXCEEDED
    return API_ERROR
