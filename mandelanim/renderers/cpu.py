from __future__ import annotations

import logging
import logging.handlers
from concurrent.futures import ProcessPoolExecutor
from functools import partial
from typing import List, NamedTuple, Optional, Tuple

import numpy as np

from mandelanim.color import mandelbrot_color
from mandelanim.numeric import Complex
from mandelanim.util.logging_setup import POOL_CONTEXT, get_logger, reset_handlers


class FrameGeometry(NamedTuple):
    width: int
    height: int
    center: Complex
    scale: float
    max_iter: int
    frame_id: str


def frame_scale(width: int, height: int, zoom: float) -> float:
    """Complex-plane units per pixel; zoom is the half-extent of the shorter side."""
    half_min = min(width, height) / 2.0
    return zoom / half_min


def pixel_to_complex(x: int, y: int, width: int, height: int, center: Complex, scale: float) -> Complex:
    # y grows downward and is used directly as the imaginary part.
    return Complex(
        (x - width / 2.0) * scale + center.re,
        (y - height / 2.0) * scale + center.im,
    )


def _init_worker(log_queue, log_level: int) -> None:
    """Route worker log records to the parent's queue listener."""
    if log_queue is None:
        return
    logger = get_logger()
    logger.setLevel(log_level)
    logger.propagate = False
    reset_handlers(logger)
    qh = logging.handlers.QueueHandler(log_queue)
    qh.setLevel(log_level)
    logger.addHandler(qh)


def _render_band(geom: FrameGeometry, y0_y1: Tuple[int, int]) -> Tuple[int, np.ndarray]:
    y0, y1 = y0_y1
    width = geom.width
    logger = get_logger()
    band = np.zeros((y1 - y0, width, 3), dtype=np.uint8)

    for yi, y in enumerate(range(y0, y1)):
        for x in range(width):
            c = pixel_to_complex(x, y, width, geom.height, geom.center, geom.scale)
            band[yi, x] = mandelbrot_color(c, geom.max_iter)

    logger.debug("[Frame %s] Rendered rows %s..%s/%s", geom.frame_id, y0, y1, geom.height)
    return y0, band


def _bands(height: int, band_height: int) -> List[Tuple[int, int]]:
    bands: List[Tuple[int, int]] = []
    y = 0
    while y < height:
        y1 = min(height, y + band_height)
        bands.append((y, y1))
        y = y1
    return bands


def render_frame_cpu(
    *,
    center: Complex,
    zoom: float,
    width: int,
    height: int,
    max_iter: int,
    frame_id: str = "-",
    log_queue=None,
    log_level: int = logging.INFO,
    workers: Optional[int] = None,
    band_height: int = 32,
) -> np.ndarray:
    """
    Reference renderer: pure-Python escape time per pixel.

    Rows are split into bands of `band_height` and mapped over a process pool
    (`workers` processes, default one per CPU). With workers=1 everything runs
    in the calling process. Returns a (height, width, 3) uint8 array.
    """
    logger = get_logger()
    if band_height <= 0:
        raise ValueError("band_height must be > 0")

    center = Complex(float(center[0]), float(center[1]))
    geom = FrameGeometry(
        width=width,
        height=height,
        center=center,
        scale=frame_scale(width, height, zoom),
        max_iter=max_iter,
        frame_id=frame_id,
    )
    logger.debug("[Frame %s] CPU render start zoom=%s iter=%s workers=%s", frame_id, zoom, max_iter, workers)

    buf = np.zeros((height, width, 3), dtype=np.uint8)
    bands = _bands(height, band_height)
    render_band = partial(_render_band, geom)

    if workers == 1:
        for y0, band in map(render_band, bands):
            buf[y0:y0 + band.shape[0]] = band
    else:
        with ProcessPoolExecutor(
            max_workers=workers,
            mp_context=POOL_CONTEXT,
            initializer=_init_worker,
            initargs=(log_queue, log_level),
        ) as pool:
            for y0, band in pool.map(render_band, bands):
                buf[y0:y0 + band.shape[0]] = band

    logger.debug("[Frame %s] CPU render done", frame_id)
    return buf
