import logging
import os
from typing import Union

import cv2
import numpy as np

from hazardscan.errors import ImageDecodeError
from hazardscan.risk.models import SampledCell, SampledGrid
from hazardscan.risk.rules import risk_level_for, LOW, MODERATE, HIGH, CRITICAL
from hazardscan.vision.color_risk import color_to_risk


logger = logging.getLogger(__name__)

# every 4th pixel of a cell (16 bytes of RGBA) is enough for a colour average
SAMPLE_STRIDE = 4

LEVEL_COLORS = {
    LOW: (52, 211, 153),
    MODERATE: (251, 191, 36),
    HIGH: (251, 113, 133),
    CRITICAL: (220, 38, 38),
}


def read_image_bytes(image: Union[bytes, bytearray, str, os.PathLike]) -> bytes:
    if isinstance(image, (bytes, bytearray)):
        return bytes(image)
    try:
        with open(image, "rb") as f:
            return f.read()
    except OSError as e:
        raise ImageDecodeError(f"Image not found or failed to load: {image} ({e})") from e


def decode_image(image_bytes: bytes) -> np.ndarray:
    """
    Decodes an encoded raster (PNG, JPEG, WebP, ...) into an RGB uint8 array.
    Alpha is dropped; grayscale input is expanded to three channels.
    """
    if not image_bytes:
        raise ImageDecodeError("Empty image buffer")

    buf = np.frombuffer(image_bytes, dtype=np.uint8)
    img = cv2.imdecode(buf, cv2.IMREAD_COLOR)
    if img is None or img.size == 0:
        raise ImageDecodeError("Image could not be decoded")

    return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)


def _cell_average(cell: np.ndarray):
    flat = cell.reshape(-1, cell.shape[-1])[::SAMPLE_STRIDE]
    if flat.shape[0] == 0:
        return None
    r, g, b = flat[:, :3].astype(np.float64).mean(axis=0)
    return float(r), float(g), float(b)


def sample_grid(pixels: np.ndarray, rows: int, cols: int) -> SampledGrid:
    if rows < 1 or cols < 1:
        raise ValueError(f"Grid must be at least 1x1, got {rows}x{cols}")
    if pixels.ndim != 3 or pixels.shape[2] < 3:
        raise ImageDecodeError(f"Expected an RGB pixel array, got shape {pixels.shape}")

    h, w = pixels.shape[:2]
    cell_h = h // rows
    cell_w = w // cols

    chunks = []
    total = 0
    for r in range(rows):
        for c in range(cols):
            y0, x0 = r * cell_h, c * cell_w
            avg = _cell_average(pixels[y0:y0 + cell_h, x0:x0 + cell_w])
            score = color_to_risk(*avg) if avg is not None else 0

            total += score
            chunks.append(SampledCell(id=f"{r}-{c}", row=r, col=c, risk_score=score))

    if cell_h == 0 or cell_w == 0:
        logger.warning("Image %dx%d is smaller than the %dx%d grid; empty cells scored 0", w, h, cols, rows)

    return SampledGrid(chunks=chunks, total_risk=total / (rows * cols))


def render_risk_overlay(pixels: np.ndarray, chunks, rows: int, cols: int, alpha: float = 0.35) -> np.ndarray:
    """Returns a BGR image with each grid cell tinted by risk level and labelled with its score."""
    img_bgr = cv2.cvtColor(pixels, cv2.COLOR_RGB2BGR)
    overlay = img_bgr.copy()

    h, w = img_bgr.shape[:2]
    cell_h = max(1, h // rows)
    cell_w = max(1, w // cols)

    for chunk in chunks:
        x1, y1 = chunk.col * cell_w, chunk.row * cell_h
        x2, y2 = x1 + cell_w - 1, y1 + cell_h - 1
        r, g, b = LEVEL_COLORS.get(risk_level_for(chunk.risk_score), (255, 255, 255))
        cv2.rectangle(overlay, (x1, y1), (x2, y2), (b, g, r), -1)

    blended = cv2.addWeighted(overlay, alpha, img_bgr, 1.0 - alpha, 0)

    for chunk in chunks:
        x1, y1 = chunk.col * cell_w, chunk.row * cell_h
        cv2.rectangle(blended, (x1, y1), (x1 + cell_w - 1, y1 + cell_h - 1), (255, 255, 255), 1)

        label_text = f"{chunk.risk_score}"
        (tw, th), baseline = cv2.getTextSize(label_text, cv2.FONT_HERSHEY_SIMPLEX, 0.45, 1)
        cv2.rectangle(blended, (x1, y1), (x1 + tw + 4, y1 + th + baseline + 4), (0, 0, 0), -1)
        cv2.putText(blended, label_text, (x1 + 2, y1 + th + 2), cv2.FONT_HERSHEY_SIMPLEX, 0.45, (255, 255, 255), 1)

    return blended
