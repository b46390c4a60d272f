from __future__ import annotations

import math
from typing import Tuple

from mandelanim.numeric import Complex, clamp, escape

RGB = Tuple[int, int, int]

INSIDE_COLOR: RGB = (0, 0, 0)

PALETTE_HUE_OFFSET = 0.65
PALETTE_HUE_CYCLES = 2.2
PALETTE_SATURATION = 0.95
PALETTE_VALUE_BASE = 0.25
PALETTE_VALUE_GAIN = 0.85

_LN2 = math.log(2.0)


def smooth_value(n: int, z: Complex) -> float:
    """Continuous escape count n + 1 - log2(ln|z|). Only valid for escaped points (|z| > 2)."""
    zn = math.sqrt(z.norm_sqr())
    return n + 1.0 - math.log(math.log(zn)) / _LN2


def mandelbrot_color(c: Complex, max_iter: int) -> RGB:
    """
    Returns an (R, G, B) tuple for the point c.
    Points that never escape within max_iter steps are black. Otherwise the
    smooth escape count is normalised by max_iter, clamped to [0, 1] and
    mapped through the HSV palette.
    """
    n, z = escape(c, max_iter)
    if n >= max_iter:
        return INSIDE_COLOR
    t = clamp(smooth_value(n, z) / max_iter, 0.0, 1.0)
    return palette_color(t)


def palette_color(t: float) -> RGB:
    hue = math.fmod(360.0 * (PALETTE_HUE_OFFSET + PALETTE_HUE_CYCLES * t), 360.0)
    val = clamp(PALETTE_VALUE_BASE + PALETTE_VALUE_GAIN * t, 0.0, 1.0)
    return hsv_to_rgb(hue, PALETTE_SATURATION, val)


def hsv_to_rgb(h: float, s: float, v: float) -> RGB:
    """
    Standard six-sector HSV to RGB conversion.
    h is in degrees and may be any finite value (it is wrapped into [0, 360)),
    s and v are in [0, 1]. Channels are clamped to [0, 255] and truncated.
    """
    h = math.fmod(math.fmod(h, 360.0) + 360.0, 360.0)
    c = v * s
    x = c * (1.0 - abs(math.fmod(h / 60.0, 2.0) - 1.0))
    m = v - c

    if h < 60.0:
        r1, g1, b1 = c, x, 0.0
    elif h < 120.0:
        r1, g1, b1 = x, c, 0.0
    elif h < 180.0:
        r1, g1, b1 = 0.0, c, x
    elif h < 240.0:
        r1, g1, b1 = 0.0, x, c
    elif h < 300.0:
        r1, g1, b1 = x, 0.0, c
    else:
        r1, g1, b1 = c, 0.0, x

    return (
        int(clamp((r1 + m) * 255.0, 0.0, 255.0)),
        int(clamp((g1 + m) * 255.0, 0.0, 255.0)),
        int(clamp((b1 + m) * 255.0, 0.0, 255.0)),
    )
