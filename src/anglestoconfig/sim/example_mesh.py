from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from anglestoconfig.core.mapping import XYLatLong


@dataclass(frozen=True)
class FlatScreenSpec:
    """
    Flat screen perpendicular to the view axis, `depth` in front of the eye.

    The screen spans [left, right] x [bottom, top] in screen units, with the eye's
    forward axis hitting screen position (0, 0).
    """

    left: float = -0.5
    right: float = 0.5
    bottom: float = -0.4
    top: float = 0.4
    depth: float = 1.0
    cols: int = 11
    rows: int = 9
    k1: float = 0.0  # radial distortion applied to the seen position

    def expected_h_fov_degrees(self) -> float:
        return math.degrees(math.atan2(-self.left, self.depth) + math.atan2(self.right, self.depth))

    def expected_v_fov_degrees(self) -> float:
        return math.degrees(math.atan2(self.top, self.depth) - math.atan2(self.bottom, self.depth))

    def expected_x_cop(self) -> float:
        return -self.left / (self.right - self.left)

    def expected_y_cop(self) -> float:
        return -self.bottom / (self.top - self.bottom)


def make_flat_screen_table(spec: FlatScreenSpec) -> list[XYLatLong]:
    """
    Rectangular grid of screen positions with the (latitude, longitude) the eye sees there.

    Rows run bottom to top, columns left to right.
    """
    if spec.cols < 2 or spec.rows < 2:
        raise ValueError("need at least 2 columns and 2 rows")
    if not (spec.right > spec.left and spec.top > spec.bottom and spec.depth > 0.0):
        raise ValueError("screen must have positive width, height and depth")

    xs = np.linspace(spec.left, spec.right, int(spec.cols), dtype=np.float64)
    ys = np.linspace(spec.bottom, spec.top, int(spec.rows), dtype=np.float64)
    xx, yy = np.meshgrid(xs, ys)
    x = xx.reshape(-1)
    y = yy.reshape(-1)

    r2 = (x * x + y * y) / (spec.depth * spec.depth)
    scale = 1.0 + spec.k1 * r2
    xs_seen = x * scale
    ys_seen = y * scale

    lon = np.arctan2(xs_seen, spec.depth)
    lat = np.arctan2(ys_seen, np.hypot(xs_seen, spec.depth))
    return [
        XYLatLong(x=float(a), y=float(b), latitude=float(la), longitude=float(lo))
        for a, b, la, lo in zip(x, y, lat, lon)
    ]
