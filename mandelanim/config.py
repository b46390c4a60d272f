import json
import math
from typing import Any, Dict, Optional

from mandelanim.errors import ConfigError

DEFAULT_CONFIG: Dict[str, Any] = {
    "width": 1920,
    "height": 1080,
    "frames": 300,
    "fps": 30,
    "max_iter": 2000,
    "zoom_start": 1.0,
    "zoom_end": 1e-6,
    "out_dir": "out/frames",
}

def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    """Defaults, overlaid with the JSON object at config_path when given."""
    cfg = dict(DEFAULT_CONFIG)
    if not config_path:
        return cfg

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            loaded = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read config {config_path}: {e}") from e
    if not isinstance(loaded, dict):
        raise ConfigError("Config JSON must be an object.")

    unknown = sorted(set(loaded) - set(DEFAULT_CONFIG))
    if unknown:
        raise ConfigError(f"Unknown config field(s): {', '.join(unknown)}")
    cfg.update(loaded)
    return cfg

def apply_overrides(cfg: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(cfg)
    for k, v in overrides.items():
        if v is not None:
            out[k] = v
    return out

def _positive_int(cfg: Dict[str, Any], key: str) -> int:
    try:
        value = int(cfg[key])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be an integer, got {cfg[key]!r}") from e
    if value <= 0:
        raise ConfigError(f"{key} must be positive, got {value}")
    return value

def _finite_float(cfg: Dict[str, Any], key: str) -> float:
    try:
        value = float(cfg[key])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be a number, got {cfg[key]!r}") from e
    if not math.isfinite(value):
        raise ConfigError(f"{key} must be finite, got {value}")
    return value

def normalise_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    for r in DEFAULT_CONFIG:
        if r not in cfg:
            raise ConfigError(f"Missing config field: {r}")

    try:
        frames = int(cfg["frames"])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"frames must be an integer, got {cfg['frames']!r}") from e

    out = dict(cfg)
    out["width"] = _positive_int(cfg, "width")
    out["height"] = _positive_int(cfg, "height")
    out["max_iter"] = _positive_int(cfg, "max_iter")
    out["fps"] = _positive_int(cfg, "fps")
    # A run always emits at least one frame.
    out["frames"] = max(frames, 1)
    out["zoom_start"] = _finite_float(cfg, "zoom_start")
    out["zoom_end"] = _finite_float(cfg, "zoom_end")
    out["out_dir"] = str(cfg["out_dir"])
    return out
