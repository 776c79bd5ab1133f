from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from anglestoconfig.core.geometry import RectBounds


class ConfigValidationError(ValueError):
    pass


@dataclass(frozen=True)
class Config:
    use_right_eye: bool = False
    compute_screen_bounds: bool = True
    supplied_screen_bounds: RectBounds | None = None
    use_field_angles: bool = True
    to_meters: float = 1.0
    depth: float = 2.0
    verify_angles: bool = False
    # Parameters for verify_angles: 2x2 screen->angle transform and tolerance.
    xx: float = 1.0
    xy: float = 0.0
    yx: float = 0.0
    yy: float = 1.0
    max_angle_diff_degrees: float = 0.5
    overlap_percent: float = 100.0
    verbose: bool = False


_KNOWN_KEYS = frozenset(Config.__dataclass_fields__)


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise ConfigValidationError(msg)


def _as_bool(data: dict[str, Any], key: str, default: bool) -> bool:
    v = data.get(key, default)
    _require(isinstance(v, bool), f"{key} must be a boolean")
    return bool(v)


def _as_float(data: dict[str, Any], key: str, default: float) -> float:
    v = data.get(key, default)
    _require(isinstance(v, (int, float)) and not isinstance(v, bool), f"{key} must be a number")
    return float(v)


def parse_bounds(raw: Any) -> RectBounds:
    """
    Accepts [left, right, bottom, top] or {"left", "right", "bottom", "top"}.
    """
    if isinstance(raw, dict):
        missing = [k for k in ("left", "right", "bottom", "top") if k not in raw]
        _require(not missing, f"supplied_screen_bounds missing keys: {missing}")
        vals = [raw["left"], raw["right"], raw["bottom"], raw["top"]]
    else:
        _require(
            isinstance(raw, (list, tuple)) and len(raw) == 4,
            "supplied_screen_bounds must be [left, right, bottom, top]",
        )
        vals = list(raw)
    _require(all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in vals), "bounds must be numbers")
    left, right, bottom, top = (float(v) for v in vals)
    _require(right > left, "supplied_screen_bounds: right must be > left")
    _require(top > bottom, "supplied_screen_bounds: top must be > bottom")
    return RectBounds(left=left, right=right, top=top, bottom=bottom)


def validate_config(config: Config) -> Config:
    """Range checks shared by config files and command-line overrides."""
    _require(
        config.compute_screen_bounds or config.supplied_screen_bounds is not None,
        "supplied_screen_bounds is required when compute_screen_bounds is false",
    )
    _require(config.to_meters > 0.0, "to_meters must be > 0")
    _require(config.depth > 0.0, "depth must be > 0")
    _require(config.max_angle_diff_degrees > 0.0, "max_angle_diff_degrees must be > 0")
    _require(0.0 <= config.overlap_percent <= 100.0, "overlap_percent must be within [0, 100]")
    return config


def parse_config(data: dict[str, Any]) -> Config:
    unknown = sorted(set(data) - _KNOWN_KEYS)
    _require(not unknown, f"unknown config keys: {unknown}")

    raw_bounds = data.get("supplied_screen_bounds")
    config = Config(
        use_right_eye=_as_bool(data, "use_right_eye", False),
        compute_screen_bounds=_as_bool(data, "compute_screen_bounds", True),
        supplied_screen_bounds=parse_bounds(raw_bounds) if raw_bounds is not None else None,
        use_field_angles=_as_bool(data, "use_field_angles", True),
        to_meters=_as_float(data, "to_meters", 1.0),
        depth=_as_float(data, "depth", 2.0),
        verify_angles=_as_bool(data, "verify_angles", False),
        xx=_as_float(data, "xx", 1.0),
        xy=_as_float(data, "xy", 0.0),
        yx=_as_float(data, "yx", 0.0),
        yy=_as_float(data, "yy", 1.0),
        max_angle_diff_degrees=_as_float(data, "max_angle_diff_degrees", 0.5),
        overlap_percent=_as_float(data, "overlap_percent", 100.0),
        verbose=_as_bool(data, "verbose", False),
    )
    return validate_config(config)


def load_config(path: Path) -> Config:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    _require(isinstance(data, dict), f"{path}: top-level JSON value must be an object")
    return parse_config(data)
