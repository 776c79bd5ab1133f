from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Sequence

import numpy as np

from anglestoconfig.config import Config
from anglestoconfig.core.geometry import XYZ, RectBounds, forward_from_rotation, xyz_array
from anglestoconfig.core.mapping import Mapping, XYLatLong, build_mappings, raw_screen_bounds
from anglestoconfig.diagnostics import format_plane, format_screen, format_xyz
from anglestoconfig.errors import DegenerateScreenError, InsufficientDataError, ProjectionError

logger = logging.getLogger(__name__)

_MIN_SAMPLES = 3
_RANK_TOL = 1e-9
_CENTER_TIE_RAD = 1e-9


@dataclass(frozen=True)
class ScreenDescription:
    h_fov_degrees: float
    v_fov_degrees: float
    overlap_percent: float
    # Center of projection in [0, 1] screen units, measured from the left/bottom edge.
    x_cop: float
    y_cop: float

    # Byproducts of the fit that the mesh builder needs.
    A: float  # Ax + By + Cz + D = 0 screen plane
    B: float
    C: float
    D: float
    screen_left: XYZ
    screen_right: XYZ
    max_y: float  # max |y| over all points projected onto the screen plane
    # Highest and lowest y over the projected points; equal to +/- max_y for a centered screen.
    screen_top: float
    screen_bottom: float
    bounds: RectBounds  # raw screen-space bounds used to normalize sample positions

    def plane(self) -> tuple[float, float, float, float]:
        return (self.A, self.B, self.C, self.D)


def find_screen(mappings: Sequence[Mapping], config: Config) -> ScreenDescription:
    """
    Describe the screen seen through `mappings`.

    With `compute_screen_bounds` the plane is fitted to the angle-space directions; otherwise
    it is the plane z = -depth holding the supplied bounds (scaled to meters).
    """
    depth = float(config.depth)

    if config.compute_screen_bounds:
        A, B, C, D, screen_left, screen_right, top, bottom = _fit_plane(mappings, depth)
        bounds = raw_screen_bounds(mappings, config)
    else:
        bounds = raw_screen_bounds(mappings, config)
        b = bounds.scaled(config.to_meters)
        A, B, C, D = 0.0, 0.0, 1.0, depth
        screen_left = XYZ(b.left, 0.0, -depth)
        screen_right = XYZ(b.right, 0.0, -depth)
        top, bottom = b.top, b.bottom

    screen = _describe(
        A=A,
        B=B,
        C=C,
        D=D,
        screen_left=screen_left,
        screen_right=screen_right,
        top=top,
        bottom=bottom,
        bounds=bounds,
        overlap_percent=float(config.overlap_percent),
    )
    logger.debug("screen description:\n%s", format_screen(screen))
    return screen


def _fit_plane(
    mappings: Sequence[Mapping], depth: float
) -> tuple[float, float, float, float, XYZ, XYZ, float, float]:
    if len(mappings) < _MIN_SAMPLES:
        raise InsufficientDataError(f"need >= {_MIN_SAMPLES} samples to fit a screen plane, got {len(mappings)}")

    pts = xyz_array(m.xyz for m in mappings)
    norms = np.linalg.norm(pts, axis=1)
    bad = np.flatnonzero(~np.isfinite(norms) | (norms < 1e-12))
    if bad.size:
        raise InsufficientDataError(f"direction at index {int(bad[0])} is zero or non-finite")

    centered = pts - pts.mean(axis=0, keepdims=True)
    if int(np.linalg.matrix_rank(centered, tol=_RANK_TOL)) < 2:
        raise InsufficientDataError("sample directions are collinear or coincident; cannot fit a plane")

    # Screen faces the eye along the rotation of the sample(s) closest to straight ahead.
    unit = pts / norms[:, None]
    off_axis = np.arccos(np.clip(-unit[:, 2], -1.0, 1.0))
    rot = np.arctan2(-pts[:, 0], -pts[:, 2])
    center = off_axis <= float(off_axis.min()) + _CENTER_TIE_RAD
    theta = float(np.mean(rot[center]))
    forward = forward_from_rotation(theta)
    A, B, C, D = forward.x, 0.0, forward.z, -depth
    logger.debug(
        "forward rotation %.6g rad from %d center sample(s); plane %s",
        theta,
        int(np.sum(center)),
        format_plane(A, B, C, D),
    )

    # Left-most/right-most in rotation, reprojected into the Y = 0 plane.
    i_left = int(np.argmax(rot))
    i_right = int(np.argmin(rot))
    try:
        screen_left = mappings[i_left].xyz.with_y(0.0).project_onto_plane(A, B, C, D)
        screen_right = mappings[i_right].xyz.with_y(0.0).project_onto_plane(A, B, C, D)
    except ProjectionError as e:
        raise DegenerateScreenError(f"screen extremes do not meet the screen plane: {e}") from e
    logger.debug(
        "left-most sample %d -> %s, right-most sample %d -> %s",
        i_left,
        format_xyz(screen_left),
        i_right,
        format_xyz(screen_right),
    )

    denom = pts @ np.array([A, B, C], dtype=np.float64)
    parallel = np.flatnonzero(np.abs(denom) < 1e-12)
    if parallel.size:
        i = int(parallel[0])
        raise ProjectionError(f"sample {i} ray {format_xyz(mappings[i].xyz)} is parallel to the screen plane", index=i)
    on_plane = (-D / denom)[:, None] * pts
    top = float(np.max(on_plane[:, 1]))
    bottom = float(np.min(on_plane[:, 1]))
    return A, B, C, D, screen_left, screen_right, top, bottom


def _describe(
    *,
    A: float,
    B: float,
    C: float,
    D: float,
    screen_left: XYZ,
    screen_right: XYZ,
    top: float,
    bottom: float,
    bounds: RectBounds,
    overlap_percent: float,
) -> ScreenDescription:
    axis = screen_right - screen_left
    width_sq = axis.dot(axis)
    h_fov = math.degrees(screen_left.rotation_about_y() - screen_right.rotation_about_y())
    if width_sq <= 0.0 or h_fov <= 0.0:
        raise DegenerateScreenError(
            f"screen has non-positive width: left={format_xyz(screen_left)} right={format_xyz(screen_right)}"
        )
    height = top - bottom
    if height <= 0.0:
        raise DegenerateScreenError(f"screen has non-positive height: top={top:g} bottom={bottom:g}")

    # Foot of the perpendicular from the eye onto the plane, i.e. where the forward axis hits it.
    # The plane normal has no y component, so the foot sits at y = 0.
    n_sq = A * A + B * B + C * C
    foot = XYZ(A, B, C).scaled(-D / n_sq)
    distance = abs(D) / math.sqrt(n_sq)

    x_cop = (foot - screen_left).dot(axis) / width_sq
    y_cop = (foot.y - bottom) / height
    v_fov = math.degrees(math.atan2(top, distance) - math.atan2(bottom, distance))

    return ScreenDescription(
        h_fov_degrees=h_fov,
        v_fov_degrees=v_fov,
        overlap_percent=overlap_percent,
        x_cop=x_cop,
        y_cop=y_cop,
        A=A,
        B=B,
        C=C,
        D=D,
        screen_left=screen_left,
        screen_right=screen_right,
        max_y=max(abs(top), abs(bottom)),
        screen_top=top,
        screen_bottom=bottom,
        bounds=bounds,
    )


def longitude_range(screen: ScreenDescription) -> tuple[float, float]:
    """(min, max) longitude in radians covered horizontally by the screen."""
    return (-screen.screen_left.rotation_about_y(), -screen.screen_right.rotation_about_y())


def compute_overlap_percent(left_eye: ScreenDescription, right_eye: ScreenDescription) -> float:
    """
    Percentage of the left eye's horizontal angular range also covered by the right eye.
    """
    l_lo, l_hi = longitude_range(left_eye)
    r_lo, r_hi = longitude_range(right_eye)
    span = l_hi - l_lo
    if span <= 0.0:
        raise DegenerateScreenError(f"left-eye screen has non-positive angular width {span:g}")
    overlap = max(0.0, min(l_hi, r_hi) - max(l_lo, r_lo))
    return 100.0 * overlap / span


def find_stereo_screens(
    samples: Sequence[XYLatLong],
    config: Config,
    directions: np.ndarray | None = None,
) -> tuple[ScreenDescription, ScreenDescription]:
    """
    Fit both eyes from one (left-eye) table and fill in their horizontal overlap.
    """
    left_cfg = replace(config, use_right_eye=False)
    right_cfg = replace(config, use_right_eye=True)
    left = find_screen(build_mappings(samples, left_cfg, directions), left_cfg)
    right = find_screen(build_mappings(samples, right_cfg, directions), right_cfg)
    overlap = compute_overlap_percent(left, right)
    logger.info("stereo overlap %.3f%%", overlap)
    return replace(left, overlap_percent=overlap), replace(right, overlap_percent=overlap)
