from __future__ import annotations

from typing import Any, Dict

import numpy as np

from mandelanim.errors import RendererUnavailableError
from mandelanim.numeric import Complex
from mandelanim.renderers.cpu import frame_scale
from mandelanim.util.logging_setup import get_logger

def cuda_status() -> Dict[str, Any]:
    """Report whether a CUDA device is usable; never raises."""
    try:
        from numba import cuda  # type: ignore
        if not cuda.is_available():
            return {"available": False}
        dev = cuda.get_current_device()
    except Exception as e:
        return {"available": False, "error": str(e)}
    return {
        "available": True,
        "name": getattr(dev, "name", None),
        "compute_capability": getattr(dev, "compute_capability", None),
        "max_threads_per_block": getattr(dev, "MAX_THREADS_PER_BLOCK", None),
    }

def require_cuda() -> None:
    info = cuda_status()
    if not info["available"]:
        reason = info.get("error") or "no CUDA device found"
        raise RendererUnavailableError(f"GPU renderer not available: {reason}")

def render_frame_gpu(*, center: Complex, zoom: float, width: int, height: int, max_iter: int, frame_id: str = "-") -> np.ndarray:
    logger = get_logger()
    require_cuda()
    try:
        from mandelanim.renderers.cuda_kernel import render_gpu_frame
    except Exception as e:
        raise RendererUnavailableError(f"GPU renderer not available: {e}") from e
    logger.debug("[Frame %s] GPU render start zoom=%s iter=%s", frame_id, zoom, max_iter)
    buf = render_gpu_frame(
        (float(center[0]), float(center[1])), frame_scale(width, height, zoom), width, height, max_iter
    )
    logger.debug("[Frame %s] GPU render done", frame_id)
    return buf
