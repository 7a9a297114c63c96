from typing import Tuple

from hazardscan.risk.rules import clamp_score


DARK_LIGHTNESS = 0.3
DARK_BONUS = 15.0


def clamp01(x: float) -> float:
    return max(0.0, min(1.0, float(x)))


def rgb_to_hue_lightness(r: float, g: float, b: float) -> Tuple[float, float]:
    """
    Standard HSL hue and lightness for 0..255 channels.
    Hue is in [0, 1); achromatic input (r == g == b) has hue 0.
    """
    r, g, b = clamp01(r / 255.0), clamp01(g / 255.0), clamp01(b / 255.0)
    mx = max(r, g, b)
    mn = min(r, g, b)
    lightness = (mx + mn) / 2.0

    if mx == mn:
        return 0.0, lightness

    d = mx - mn
    if mx == r:
        hue = (g - b) / d + (6.0 if g < b else 0.0)
    elif mx == g:
        hue = (b - r) / d + 2.0
    else:
        hue = (r - g) / d + 4.0
    hue /= 6.0

    if hue >= 1.0:
        hue -= 1.0
    return hue, lightness


def hue_band_risk(hue: float) -> float:
    """
    Piecewise-linear risk for a hue, following the usual hazard map
    palette: red/purple worst, blue best.
    """
    if hue < 0.05 or hue > 0.95:
        d = min(hue, 1.0 - hue)
        return 100.0 - 15.0 * (d / 0.05)
    if hue < 0.12:
        return 85.0 - 15.0 * (hue - 0.05) / 0.07
    if hue < 0.20:
        return 70.0 - 25.0 * (hue - 0.12) / 0.08
    if hue < 0.45:
        return 45.0 - 30.0 * (hue - 0.20) / 0.25
    if hue < 0.75:
        return 15.0 - 10.0 * (hue - 0.45) / 0.30
    return 90.0 + 10.0 * (hue - 0.75) / 0.20


def color_to_risk(r: float, g: float, b: float) -> int:
    hue, lightness = rgb_to_hue_lightness(r, g, b)
    risk = hue_band_risk(hue)

    # shaded zones on hazard maps mark higher severity
    if lightness < DARK_LIGHTNESS:
        risk = min(100.0, risk + DARK_BONUS)

    return clamp_score(risk)
