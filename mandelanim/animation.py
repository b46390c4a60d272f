"""Per-frame camera parameters for the zoom animation."""

from __future__ import annotations

import math
from typing import NamedTuple, Sequence

from mandelanim.numeric import Complex, clamp

# Camera anchors in Seahorse Valley; the first one is the classic deep-zoom target.
FIXED_PATH = (
    Complex(-0.743643887037151, 0.13182590420533),
    Complex(-0.743643135, 0.13182733),
    Complex(-0.743642, 0.131829),
    Complex(-0.74364085, 0.1318309),
)

PATH_END_EPSILON = 1e-9


class FrameParameters(NamedTuple):
    index: int
    t: float
    center: Complex
    zoom: float


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def frame_t(index: int, total_frames: int) -> float:
    if total_frames <= 1:
        return 0.0
    return index / (total_frames - 1)


def exp_lerp(a: float, b: float, t: float) -> float:
    """Geometric interpolation a*(b/a)^t; linear when either end is not positive."""
    if a <= 0 or b <= 0:
        return _lerp(a, b, t)
    return a * math.pow(b / a, t)


def path_position(points: Sequence[Complex], t: float) -> Complex:
    """
    Piecewise-linear position along `points` for t in [0, 1].

    Every segment gets an equal share of the parameter range. The scaled
    parameter is capped just below the last anchor so the final segment is
    always the one indexed.
    """
    if not points:
        raise ValueError("path must contain at least one point.")
    if len(points) == 1:
        return points[0]

    segments = len(points) - 1
    scaled = min(clamp(t, 0.0, 1.0) * segments, segments - PATH_END_EPSILON)
    seg_idx = int(math.floor(scaled))
    seg_t = scaled - seg_idx
    a = points[seg_idx]
    b = points[seg_idx + 1]
    return Complex(_lerp(a.re, b.re, seg_t), _lerp(a.im, b.im, seg_t))


def dampened_center(base: Complex, target: Complex, zoom: float, zoom_start: float) -> Complex:
    """Pull the camera toward `base` while the zoom is still wide."""
    if zoom_start > 0:
        ratio = clamp(zoom / zoom_start, 0.0, 1.0)
    else:
        ratio = 1.0
    return Complex(_lerp(base.re, target.re, ratio), _lerp(base.im, target.im, ratio))


def frame_parameters(
    index: int,
    total_frames: int,
    zoom_start: float,
    zoom_end: float,
    path: Sequence[Complex] = FIXED_PATH,
) -> FrameParameters:
    t = frame_t(index, total_frames)
    zoom = exp_lerp(zoom_start, zoom_end, t)
    center = dampened_center(path[0], path_position(path, t), zoom, zoom_start)
    return FrameParameters(index=index, t=t, center=center, zoom=zoom)
