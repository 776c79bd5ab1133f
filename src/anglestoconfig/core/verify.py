from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

from anglestoconfig.config import Config
from anglestoconfig.core.geometry import LongLat
from anglestoconfig.core.mapping import Mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AngleMismatch:
    index: int
    expected: LongLat
    measured: LongLat
    longitude_diff_degrees: float
    latitude_diff_degrees: float


def expected_long_lat(x: float, y: float, config: Config) -> LongLat:
    """
    Angles (radians) predicted for raw screen position (x, y) by the configured linear
    transform: longitude = xx x + xy y, latitude = yx x + yy y.
    """
    return LongLat(
        longitude=config.xx * x + config.xy * y,
        latitude=config.yx * x + config.yy * y,
    )


def verify_angles(mappings: Sequence[Mapping], config: Config) -> list[AngleMismatch]:
    """
    Compare measured angles against the ones predicted from screen positions.

    Returns every sample whose longitude or latitude is off by more than
    `max_angle_diff_degrees`. Diagnostic only: never raises on a mismatch.
    """
    tol = float(config.max_angle_diff_degrees)
    mismatches: list[AngleMismatch] = []
    for i, m in enumerate(mappings):
        expected = expected_long_lat(m.xy_lat_long.x, m.xy_lat_long.y, config)
        measured = m.xyz.long_lat()
        d_long = math.degrees(abs(measured.longitude - expected.longitude))
        d_lat = math.degrees(abs(measured.latitude - expected.latitude))
        if d_long > tol or d_lat > tol:
            logger.warning(
                "sample %d at (%g, %g): angle off by (%.4g, %.4g) deg, max %.4g",
                i,
                m.xy_lat_long.x,
                m.xy_lat_long.y,
                d_long,
                d_lat,
                tol,
            )
            mismatches.append(
                AngleMismatch(
                    index=i,
                    expected=expected,
                    measured=measured,
                    longitude_diff_degrees=d_long,
                    latitude_diff_degrees=d_lat,
                )
            )
    logger.info("angle verification: %d of %d samples out of tolerance", len(mismatches), len(mappings))
    return mismatches
