from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

import numpy as np
from tqdm import tqdm

from mandelanim.animation import frame_parameters
from mandelanim.numeric import Complex
from mandelanim.renderers.cpu import render_frame_cpu
from mandelanim.renderers.gpu import cuda_status, render_frame_gpu, require_cuda
from mandelanim.renderers.numba_cpu import render_frame_numba
from mandelanim.sink import FRAME_PATTERN, prepare_output_dir, save_frame
from mandelanim.util.logging_setup import get_logger

RENDERERS = ("auto", "cpu", "numba", "gpu")

def choose_renderer(renderer: str) -> str:
    if renderer in ("cpu", "numba"):
        return renderer
    if renderer == "gpu":
        require_cuda()
        return renderer
    if renderer != "auto":
        raise ValueError("renderer must be one of: " + ", ".join(RENDERERS))
    if cuda_status().get("available"):
        return "gpu"
    return "numba"

def renderer_info(resolved: str) -> Dict[str, Any]:
    return {"resolved": resolved, "cuda": cuda_status()}

def render_frame(
    *,
    renderer: str,
    center: Complex,
    zoom: float,
    width: int,
    height: int,
    max_iter: int,
    frame_id: str = "-",
    log_queue=None,
    log_level: int = logging.INFO,
    workers: Optional[int] = None,
) -> np.ndarray:
    """Render one frame with an already resolved renderer name."""
    if renderer == "cpu":
        return render_frame_cpu(
            center=center, zoom=zoom, width=width, height=height, max_iter=max_iter,
            frame_id=frame_id, log_queue=log_queue, log_level=log_level, workers=workers,
        )
    if renderer == "numba":
        return render_frame_numba(center=center, zoom=zoom, width=width, height=height, max_iter=max_iter, frame_id=frame_id)
    if renderer == "gpu":
        return render_frame_gpu(center=center, zoom=zoom, width=width, height=height, max_iter=max_iter, frame_id=frame_id)
    raise ValueError(f"Unknown renderer: {renderer}")

def ffmpeg_hint(out_dir: str, fps: int) -> str:
    return (
        f"ffmpeg -framerate {fps} -i {out_dir}/{FRAME_PATTERN} "
        "-c:v libx264 -pix_fmt yuv420p out/mandelbrot.mp4"
    )

def render_sequence(
    *,
    cfg: Dict[str, Any],
    renderer: str = "auto",
    log_queue=None,
    log_level: int = logging.INFO,
    workers: Optional[int] = None,
    progress: bool = True,
) -> Dict[str, Any]:
    """
    Render every frame of the zoom and write them to cfg["out_dir"].

    Frames are produced in index order and each one is handed to the PNG sink
    exactly once. Raises RendererUnavailableError before touching the disk if
    "gpu" is requested without CUDA, OutputSetupError if the directory cannot
    be created and EncodeError if a frame cannot be written; frames already on
    disk stay.
    """
    logger = get_logger()

    width = int(cfg["width"])
    height = int(cfg["height"])
    total_frames = max(int(cfg["frames"]), 1)
    zoom_start = float(cfg["zoom_start"])
    zoom_end = float(cfg["zoom_end"])
    max_iter = int(cfg["max_iter"])
    out_dir = str(cfg["out_dir"])

    resolved = choose_renderer(renderer)
    prepare_output_dir(out_dir)

    logger.info("Render start total_frames=%s size=%sx%s zoom=%s..%s max_iter=%s renderer=%s",
                total_frames, width, height, zoom_start, zoom_end, max_iter, resolved)

    paths: List[str] = []
    for i in tqdm(range(total_frames), desc="frames", unit="frame", disable=not progress):
        params = frame_parameters(i, total_frames, zoom_start, zoom_end)
        frame_id = f"{i:06d}"
        start = time.perf_counter()

        buf = render_frame(
            renderer=resolved, center=params.center, zoom=params.zoom,
            width=width, height=height, max_iter=max_iter, frame_id=frame_id,
            log_queue=log_queue, log_level=log_level, workers=workers,
        )
        path = save_frame(buf, out_dir, i)
        paths.append(path)

        logger.info("[Frame %s] zoom=%.6e center=(%.15f, %.15f) %.2fs",
                    frame_id, params.zoom, params.center.re, params.center.im, time.perf_counter() - start)
        tqdm.write(f"frame {i + 1}/{total_frames} -> {path}")

    logger.info("Render complete out_dir=%s", out_dir)
    return {
        "out_dir": out_dir,
        "frames": total_frames,
        "width": width,
        "height": height,
        "renderer": resolved,
        "paths": paths,
    }
