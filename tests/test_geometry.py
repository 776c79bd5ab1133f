import math

import numpy as np
import pytest

from anglestoconfig.core.geometry import (
    XYZ,
    RectBounds,
    directions_from_long_lat,
    forward_from_rotation,
)
from anglestoconfig.errors import ProjectionError


def test_projection_lands_on_plane_and_stays_on_ray():
    rng = np.random.default_rng(0)
    checked = 0
    for _ in range(500):
        A, B, C = rng.normal(size=3)
        D = rng.uniform(0.5, 3.0) * rng.choice([-1.0, 1.0])
        p = XYZ(*rng.normal(size=3))
        if abs(A * p.x + B * p.y + C * p.z) < 1e-6:
            continue
        q = p.project_onto_plane(A, B, C, D)
        scale = max(1.0, abs(q.x), abs(q.y), abs(q.z))
        assert abs(A * q.x + B * q.y + C * q.z + D) < 1e-9 * scale
        cross = np.cross(np.array(p.as_tuple()), np.array(q.as_tuple()))
        assert np.linalg.norm(cross) < 1e-9 * scale
        checked += 1
    assert checked > 400


def test_projection_parallel_ray_raises():
    with pytest.raises(ProjectionError):
        XYZ(1.0, 0.0, 0.0).project_onto_plane(0.0, 0.0, 1.0, 2.0)


def test_rotation_about_y_conventions():
    assert XYZ(0.0, 0.0, -1.0).rotation_about_y() == 0.0
    assert abs(XYZ(-1.0, 0.0, 0.0).rotation_about_y() - math.pi / 2) < 1e-15
    assert abs(XYZ(1.0, 0.0, 0.0).rotation_about_y() + math.pi / 2) < 1e-15


def test_forward_from_rotation_inverts_rotation_about_y():
    for theta in (-1.2, -0.3, 0.0, 0.4, 1.1):
        assert abs(forward_from_rotation(theta).rotation_about_y() - theta) < 1e-12


def test_reflected_horizontally():
    b = RectBounds(left=-0.7, right=0.3, top=0.4, bottom=-0.5)
    r = b.reflected_horizontally()
    assert (r.left, r.right) == (-0.3, 0.7)
    assert (r.top, r.bottom) == (b.top, b.bottom)
    assert r.reflected_horizontally() == b


def test_distance_from():
    assert XYZ(1.0, 2.0, 3.0).distance_from(XYZ(1.0, 2.0, 3.0)) == 0.0
    assert abs(XYZ(0.0, 0.0, 0.0).distance_from(XYZ(3.0, 4.0, 12.0)) - 13.0) < 1e-12


def test_long_lat_of_decoded_directions():
    rng = np.random.default_rng(1)
    lon = rng.uniform(-1.2, 1.2, size=200)
    lat = rng.uniform(-1.0, 1.0, size=200)
    dirs = directions_from_long_lat(lon, lat)
    assert np.max(np.abs(np.linalg.norm(dirs, axis=1) - 1.0)) < 1e-12
    for i in range(0, 200, 17):
        p = XYZ.from_array(dirs[i])
        ll = p.long_lat()
        assert abs(ll.longitude - lon[i]) < 1e-12
        assert abs(ll.latitude - lat[i]) < 1e-12
        # Rotation about Y is the negated longitude.
        assert abs(p.rotation_about_y() + lon[i]) < 1e-12
