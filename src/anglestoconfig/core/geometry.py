from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from anglestoconfig.errors import ProjectionError

# Head space: +X right, +Y up, the eye looks down -Z.

Point2d = tuple[float, float]

_PARALLEL_EPS = 1e-12


@dataclass(frozen=True)
class LongLat:
    """Longitude (angle in x) and latitude (angle in y), radians."""

    longitude: float
    latitude: float


@dataclass(frozen=True)
class RectBounds:
    left: float
    right: float
    top: float
    bottom: float

    def reflected_horizontally(self) -> RectBounds:
        return RectBounds(left=-self.right, right=-self.left, top=self.top, bottom=self.bottom)

    @property
    def width(self) -> float:
        return float(self.right - self.left)

    @property
    def height(self) -> float:
        return float(self.top - self.bottom)

    def scaled(self, factor: float) -> RectBounds:
        f = float(factor)
        return RectBounds(left=self.left * f, right=self.right * f, top=self.top * f, bottom=self.bottom * f)


@dataclass(frozen=True)
class XYZ:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def rotation_about_y(self) -> float:
        """
        Rotation about the Y axis: 0 points along -Z, positive rotation heads towards -X.
        """
        return math.atan2(-self.x, -self.z)

    def long_lat(self) -> LongLat:
        """Longitude and latitude of this direction (any non-zero length)."""
        return LongLat(
            longitude=math.atan2(self.x, -self.z),
            latitude=math.atan2(self.y, math.hypot(self.x, self.z)),
        )

    def project_onto_plane(self, A: float, B: float, C: float, D: float) -> XYZ:
        """
        Project from the origin through this point onto the plane Ax + By + Cz + D = 0.

        Solves A sx + B sy + C sz + D = 0 for s, i.e. s = -D / (Ax + By + Cz).
        """
        denom = A * self.x + B * self.y + C * self.z
        if abs(denom) < _PARALLEL_EPS:
            raise ProjectionError(f"ray through {self.as_tuple()} is parallel to plane {(A, B, C, D)}")
        s = -D / denom
        return XYZ(s * self.x, s * self.y, s * self.z)

    def distance_from(self, p: XYZ) -> float:
        return math.sqrt((self.x - p.x) ** 2 + (self.y - p.y) ** 2 + (self.z - p.z) ** 2)

    def dot(self, p: XYZ) -> float:
        return self.x * p.x + self.y * p.y + self.z * p.z

    def __sub__(self, p: XYZ) -> XYZ:
        return XYZ(self.x - p.x, self.y - p.y, self.z - p.z)

    def scaled(self, s: float) -> XYZ:
        return XYZ(s * self.x, s * self.y, s * self.z)

    def with_y(self, y: float) -> XYZ:
        return XYZ(self.x, float(y), self.z)

    def mirrored_x(self) -> XYZ:
        return XYZ(-self.x, self.y, self.z)

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    @classmethod
    def from_array(cls, v: np.ndarray) -> XYZ:
        v = np.asarray(v, dtype=np.float64).reshape(3)
        return cls(float(v[0]), float(v[1]), float(v[2]))


def directions_from_long_lat(longitude: np.ndarray, latitude: np.ndarray) -> np.ndarray:
    """Unit view directions (N,3) for (longitude, latitude) pairs in radians."""
    lon = np.asarray(longitude, dtype=np.float64).reshape(-1)
    lat = np.asarray(latitude, dtype=np.float64).reshape(-1)
    cos_lat = np.cos(lat)
    return np.stack([np.sin(lon) * cos_lat, np.sin(lat), -np.cos(lon) * cos_lat], axis=-1)


def xyz_array(points: Iterable[XYZ]) -> np.ndarray:
    pts = [p.as_tuple() for p in points]
    if not pts:
        return np.zeros((0, 3), dtype=np.float64)
    return np.asarray(pts, dtype=np.float64).reshape(-1, 3)


def forward_from_rotation(theta: float) -> XYZ:
    """Unit direction in the Y = 0 plane whose rotation about Y is `theta`."""
    return XYZ(-math.sin(theta), 0.0, -math.cos(theta))
