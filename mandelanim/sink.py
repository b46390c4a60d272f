from __future__ import annotations

import glob
import os

import numpy as np
from PIL import Image

from mandelanim.errors import CleanupError, EncodeError, OutputSetupError
from mandelanim.util.logging_setup import get_logger

FRAME_PATTERN = "frame_%06d.png"

def prepare_output_dir(path: str) -> str:
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as e:
        raise OutputSetupError(f"create out_dir {path}: {e}") from e
    return path

def frame_path(out_dir: str, frame_index: int) -> str:
    return os.path.join(out_dir, f"frame_{frame_index:06d}.png")

def save_frame(buf: np.ndarray, out_dir: str, frame_index: int) -> str:
    """Write one (height, width, 3) uint8 buffer as an 8-bit RGB PNG."""
    if buf.dtype != np.uint8 or buf.ndim != 3 or buf.shape[2] != 3:
        raise EncodeError(f"frame {frame_index}: expected (h, w, 3) uint8 buffer, got {buf.shape} {buf.dtype}")
    path = frame_path(out_dir, frame_index)
    try:
        Image.fromarray(buf).save(path, format="PNG")
    except (OSError, ValueError) as e:
        raise EncodeError(f"save {path}: {e}") from e
    return path

def clean_frames(out_dir: str) -> int:
    logger = get_logger()
    removed = 0
    for p in sorted(glob.glob(os.path.join(glob.escape(out_dir), "frame_*.png"))):
        try:
            os.remove(p)
        except OSError as e:
            raise CleanupError(f"remove {p}: {e}") from e
        removed += 1
    logger.info("Removed %s frame(s) from %s", removed, out_dir)
    return removed
