from __future__ import annotations

import math

import numpy as np
from numba import njit, prange

from mandelanim.numeric import Complex
from mandelanim.renderers.cpu import frame_scale
from mandelanim.util.logging_setup import get_logger


@njit(cache=True)
def _channel(v):
    return int(min(max(v * 255.0, 0.0), 255.0))


@njit(cache=True)
def _hsv_to_rgb(h, s, v):
    # h comes from the palette and is never negative, so % matches fmod.
    h = ((h % 360.0) + 360.0) % 360.0
    c = v * s
    x = c * (1.0 - abs((h / 60.0) % 2.0 - 1.0))
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
    return _channel(r1 + m), _channel(g1 + m), _channel(b1 + m)


@njit(cache=True)
def _pixel_color(cr, ci, max_iter):
    zr = 0.0
    zi = 0.0
    n = 0
    while n < max_iter and zr * zr + zi * zi <= 4.0:
        zr, zi = zr * zr - zi * zi + cr, zr * zi + zi * zr + ci
        n += 1
    if n >= max_iter:
        return 0, 0, 0

    zn = math.sqrt(zr * zr + zi * zi)
    smooth = n + 1.0 - math.log(math.log(zn)) / math.log(2.0)
    t = min(max(smooth / max_iter, 0.0), 1.0)
    hue = (360.0 * (0.65 + 2.2 * t)) % 360.0
    val = min(max(0.25 + 0.85 * t, 0.0), 1.0)
    return _hsv_to_rgb(hue, 0.95, val)


@njit(parallel=True, cache=True)
def _render_kernel(width, height, center_re, center_im, scale, max_iter, out):
    half_w = width / 2.0
    half_h = height / 2.0
    for y in prange(height):
        cy = (y - half_h) * scale + center_im
        for x in range(width):
            cx = (x - half_w) * scale + center_re
            r, g, b = _pixel_color(cx, cy, max_iter)
            out[y, x, 0] = r
            out[y, x, 1] = g
            out[y, x, 2] = b


def render_frame_numba(
    *,
    center: Complex,
    zoom: float,
    width: int,
    height: int,
    max_iter: int,
    frame_id: str = "-",
) -> np.ndarray:
    """Thread-parallel JIT renderer; same arithmetic as the reference CPU path."""
    logger = get_logger()
    logger.debug("[Frame %s] numba render start zoom=%s iter=%s", frame_id, zoom, max_iter)
    out = np.zeros((height, width, 3), dtype=np.uint8)
    _render_kernel(
        int(width),
        int(height),
        float(center[0]),
        float(center[1]),
        float(frame_scale(width, height, zoom)),
        int(max_iter),
        out,
    )
    logger.debug("[Frame %s] numba render done", frame_id)
    return out
