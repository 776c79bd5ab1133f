from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from anglestoconfig.config import Config, ConfigValidationError
from anglestoconfig.core.geometry import XYZ, RectBounds, directions_from_long_lat
from anglestoconfig.errors import DegenerateScreenError, InsufficientDataError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class XYLatLong:
    """Screen-space location (x, y) and the (latitude, longitude) the eye sees there."""

    x: float = 0.0
    y: float = 0.0
    latitude: float = 0.0
    longitude: float = 0.0

    def mirrored(self) -> XYLatLong:
        return XYLatLong(x=-self.x, y=self.y, latitude=self.latitude, longitude=-self.longitude)


@dataclass(frozen=True)
class Mapping:
    xy_lat_long: XYLatLong
    xyz: XYZ


def build_mappings(
    samples: Sequence[XYLatLong],
    config: Config,
    directions: np.ndarray | None = None,
) -> list[Mapping]:
    """
    Pair every sample with its angle-space direction, preserving input order.

    With `use_field_angles` the direction is decoded from (longitude, latitude); otherwise
    `directions` (N,3) must be given. For the right eye the (left-eye) table is mirrored
    about x = 0.
    """
    n = len(samples)
    if config.use_field_angles:
        dirs = directions_from_long_lat([s.longitude for s in samples], [s.latitude for s in samples])
        xyz = [XYZ.from_array(d) for d in dirs]
    else:
        if directions is None:
            raise InsufficientDataError("direction vectors are required when use_field_angles is false")
        dirs = np.asarray(directions, dtype=np.float64).reshape(-1, 3)
        if dirs.shape[0] != n:
            raise InsufficientDataError(f"got {dirs.shape[0]} direction vectors for {n} samples")
        if not np.all(np.isfinite(dirs)):
            bad = int(np.flatnonzero(~np.all(np.isfinite(dirs), axis=1))[0])
            raise InsufficientDataError(f"non-finite direction vector at index {bad}")
        xyz = [XYZ.from_array(d) for d in dirs]

    if config.use_right_eye:
        samples = [s.mirrored() for s in samples]
        xyz = [p.mirrored_x() for p in xyz]

    mappings = [Mapping(xy_lat_long=s, xyz=p) for s, p in zip(samples, xyz)]
    logger.debug("built %d mappings (right eye: %s)", len(mappings), config.use_right_eye)
    return mappings


def raw_screen_bounds(mappings: Sequence[Mapping], config: Config) -> RectBounds:
    """
    Bounds of the raw screen coordinates: the sample extents, or the supplied (left-eye)
    bounds reflected for the right eye.
    """
    if config.compute_screen_bounds:
        if not mappings:
            raise InsufficientDataError("cannot compute screen bounds from an empty mapping table")
        xs = np.array([m.xy_lat_long.x for m in mappings], dtype=np.float64)
        ys = np.array([m.xy_lat_long.y for m in mappings], dtype=np.float64)
        bounds = RectBounds(
            left=float(xs.min()), right=float(xs.max()), top=float(ys.max()), bottom=float(ys.min())
        )
    else:
        if config.supplied_screen_bounds is None:
            raise ConfigValidationError("supplied_screen_bounds is required when compute_screen_bounds is false")
        bounds = config.supplied_screen_bounds
        if config.use_right_eye:
            bounds = bounds.reflected_horizontally()

    if bounds.width <= 0.0 or bounds.height <= 0.0:
        raise DegenerateScreenError(
            f"screen bounds have non-positive extent: width={bounds.width:g}, height={bounds.height:g}"
        )
    return bounds
