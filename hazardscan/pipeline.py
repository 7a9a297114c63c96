import json
import logging
import os
import random
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Tuple

import cv2

from hazardscan import config
from hazardscan.errors import ImageDecodeError
from hazardscan.llm.enrich import request_enrichment
from hazardscan.risk.knowledge import SEISMIC_KNOWLEDGE_BASE
from hazardscan.risk.merge import merge_results
from hazardscan.risk.models import AnalysisResult, Enrichment
from hazardscan.vision.grid import decode_image, read_image_bytes, render_risk_overlay, sample_grid


logger = logging.getLogger(__name__)


def _ensure_parent_dir(path: str) -> None:
    if not path:
        return
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def _validate(hazard: str, rows: int, cols: int) -> None:
    if hazard not in config.HAZARD_TYPES:
        raise ValueError(f"Unknown hazard type {hazard!r}; expected one of {config.HAZARD_TYPES}")
    if rows < 1 or cols < 1:
        raise ValueError(f"Grid must be at least 1x1, got {rows}x{cols}")


def analyze_image(
    image,
    hazard: str = "seismic",
    rows: int = config.DEFAULT_ROWS,
    cols: int = config.DEFAULT_COLS,
    location: Optional[str] = None,
    include_llm: bool = True,
    api_key: Optional[str] = None,
    mime_type: Optional[str] = None,
    rng: Optional[random.Random] = None,
    knowledge_base=SEISMIC_KNOWLEDGE_BASE,
    factor_lists=None,
    enrich=request_enrichment,
    session=None,
) -> AnalysisResult:
    """
    Scores a hazard map image on a rows x cols grid.

    The AI request goes out first and runs while the pixels are sampled on
    this thread. Only an unreadable image raises; AI failures end up in
    error_code.
    """
    _validate(hazard, rows, cols)
    image_bytes = read_image_bytes(image)

    executor = ThreadPoolExecutor(max_workers=1)
    future = None
    if include_llm:
        future = executor.submit(
            enrich, image_bytes, hazard,
            location=location, mime_type=mime_type, api_key=api_key, session=session,
        )

    try:
        pixels = decode_image(image_bytes)
        sampled = sample_grid(pixels, rows, cols)
    except ImageDecodeError as e:
        logger.error("Image analysis aborted: %s", e)
        if future is not None:
            future.cancel()
        executor.shutdown(wait=False)
        raise

    enrichment = future.result() if future is not None else Enrichment()
    executor.shutdown(wait=False)

    result = merge_results(
        sampled,
        hazard,
        rows,
        cols,
        enrichment=enrichment,
        location=location,
        rng=rng,
        knowledge_base=knowledge_base,
        factor_lists=factor_lists,
    )

    logger.info(
        "Analyzed %s image (%dx%d): average=%d high=%d ai=%s error=%s",
        hazard, rows, cols, result.average_risk, result.high_risk_count,
        result.is_ai_verified, result.error_code,
    )
    return result


def analyze_image_file(
    image_path: str,
    hazard: str = "seismic",
    rows: int = config.DEFAULT_ROWS,
    cols: int = config.DEFAULT_COLS,
    location: Optional[str] = None,
    include_llm: bool = True,
    output_json_path: Optional[str] = None,
    output_image_path: Optional[str] = None,
) -> Tuple[dict, Optional[str]]:
    image_bytes = read_image_bytes(image_path)
    result = analyze_image(image_bytes, hazard, rows, cols, location=location, include_llm=include_llm)
    output = result.to_dict()

    if output_json_path:
        _ensure_parent_dir(output_json_path)
        with open(output_json_path, "w") as f:
            json.dump(output, f, indent=2)

    output_image_saved = None
    if output_image_path:
        _ensure_parent_dir(output_image_path)
        annotated = render_risk_overlay(decode_image(image_bytes), result.chunks, rows, cols)
        cv2.imwrite(output_image_path, annotated)
        output_image_saved = output_image_path

    return output, output_image_saved
