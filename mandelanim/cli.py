from __future__ import annotations

import argparse
import logging
import os
import subprocess
from typing import Optional

from mandelanim.config import apply_overrides, load_config, normalise_config
from mandelanim.errors import MandelanimError
from mandelanim.pipeline import RENDERERS, choose_renderer, ffmpeg_hint, render_sequence, renderer_info
from mandelanim.sink import clean_frames
from mandelanim.util.logging_setup import configure_root_logging, create_log_queue, start_queue_listener, get_logger
from mandelanim.util.manifest import build_manifest, utc_iso, write_manifest

def _git_commit() -> Optional[str]:
    try:
        r = subprocess.run(["git", "rev-parse", "HEAD"], capture_output=True, text=True, check=True)
        return r.stdout.strip()
    except (OSError, subprocess.CalledProcessError):
        return None

def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="mandelanim", description="Render Mandelbrot zoom animation frames.")
    p.add_argument("--config", type=str, default=None, help="Path to config JSON. Missing fields use built-in defaults.")
    p.add_argument("--renderer", type=str, default="auto", choices=list(RENDERERS), help="Renderer selection.")
    p.add_argument("--workers", type=int, default=None, help="Worker processes for the cpu renderer (default: one per CPU).")
    p.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log level.")
    p.add_argument("--log-file", type=str, default="render.log", help="Log file path (rotating). Set empty to disable file logging.")
    sub = p.add_subparsers(dest="cmd", required=True)

    r = sub.add_parser("render", help="Render frames to the output directory.")
    r.add_argument("--width", type=int, default=None)
    r.add_argument("--height", type=int, default=None)
    r.add_argument("--frames", type=int, default=None, help="Total number of frames.")
    r.add_argument("--fps", type=int, default=None, help="Only used for the ffmpeg hint.")
    r.add_argument("--max-iter", dest="max_iter", type=int, default=None)
    r.add_argument("--zoom-start", dest="zoom_start", type=float, default=None)
    r.add_argument("--zoom-end", dest="zoom_end", type=float, default=None)
    r.add_argument("--out-dir", dest="out_dir", type=str, default=None)
    r.add_argument("--manifest", type=str, default=None, help="Run manifest path (default: <out_dir>/run.json). Set empty to disable.")
    r.add_argument("--no-progress-bar", dest="progress", action="store_false", help="Disable the progress bar.")

    c = sub.add_parser("clean", help="Delete rendered frame_*.png files.")
    c.add_argument("--out-dir", dest="out_dir", type=str, default=None)

    return p

def _render(args: argparse.Namespace, cfg: dict, log_queue, log_level: int) -> int:
    logger = get_logger()
    started = utc_iso()
    resolved = choose_renderer(args.renderer)

    summary = render_sequence(
        cfg=cfg, renderer=resolved, log_queue=log_queue, log_level=log_level,
        workers=args.workers, progress=args.progress,
    )

    print()
    print("ffmpeg example:")
    print(ffmpeg_hint(cfg["out_dir"], cfg["fps"]))

    manifest_path = args.manifest if args.manifest is not None else os.path.join(summary["out_dir"], "run.json")
    if manifest_path:
        manifest = build_manifest(
            config=cfg, renderer_info=renderer_info(resolved), git_commit=_git_commit(), started_utc=started
        )
        write_manifest(manifest_path, manifest)
        logger.info("Run manifest written: %s", manifest_path)
    return 0

def main(argv: Optional[list] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    log_file = args.log_file if args.log_file and args.log_file.strip() else None
    listener_logger = configure_root_logging(level=log_level, console=True, log_file=log_file)

    queue = create_log_queue()
    listener = start_queue_listener(queue, listener_logger)

    logger = get_logger()

    try:
        overrides = {k: getattr(args, k, None) for k in
                     ("width", "height", "frames", "fps", "max_iter", "zoom_start", "zoom_end", "out_dir")}
        cfg = normalise_config(apply_overrides(load_config(args.config), overrides))

        if args.cmd == "render":
            return _render(args, cfg, queue, log_level)

        if args.cmd == "clean":
            removed = clean_frames(cfg["out_dir"])
            print(f"removed {removed} frame(s) from {cfg['out_dir']}")
            return 0

        raise RuntimeError("Unknown command.")
    except MandelanimError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 1
    finally:
        listener.stop()
