import numpy as np
import pytest

from anglestoconfig.config import Config
from anglestoconfig.core.geometry import RectBounds
from anglestoconfig.core.mapping import XYLatLong, build_mappings
from anglestoconfig.core.mesh import find_mesh
from anglestoconfig.core.screen import find_screen
from anglestoconfig.errors import ProjectionError
from anglestoconfig.sim.example_mesh import FlatScreenSpec, make_flat_screen_table


def _fit(samples, config):
    mappings = build_mappings(samples, config)
    return mappings, find_screen(mappings, config)


def test_mesh_has_one_entry_per_mapping_in_order():
    spec = FlatScreenSpec(left=-0.3, right=0.5, depth=1.5, cols=9, k1=0.08)
    samples = make_flat_screen_table(spec)
    rng = np.random.default_rng(7)
    samples = [samples[i] for i in rng.permutation(len(samples))]
    mappings, screen = _fit(samples, Config())
    mesh = find_mesh(mappings, screen)

    assert len(mesh) == len(samples)
    for s, e in zip(samples, mesh.entries):
        assert abs(e.to_xy[0] - (2.0 * (s.x - spec.left) / (spec.right - spec.left) - 1.0)) < 1e-12
        assert abs(e.to_xy[1] - (2.0 * (s.y - spec.bottom) / (spec.top - spec.bottom) - 1.0)) < 1e-12


def test_undistorted_screen_gives_identity_mesh():
    for spec in (FlatScreenSpec(), FlatScreenSpec(left=-0.3, right=0.5, depth=1.5, cols=9)):
        mappings, screen = _fit(make_flat_screen_table(spec), Config())
        arr = find_mesh(mappings, screen).as_array()
        assert arr.shape == (spec.cols * spec.rows, 2, 2)
        assert np.max(np.abs(arr[:, 0, :] - arr[:, 1, :])) < 1e-9
        assert np.min(arr) >= -1.0 - 1e-12
        assert np.max(arr) <= 1.0 + 1e-12


def test_distorted_screen_moves_interior_points():
    spec = FlatScreenSpec(k1=0.2)
    mappings, screen = _fit(make_flat_screen_table(spec), Config())
    arr = find_mesh(mappings, screen).as_array()
    diff = np.linalg.norm(arr[:, 0, :] - arr[:, 1, :], axis=1)
    assert np.max(diff) > 1e-3
    # The center of the grid still maps to the center.
    center = (spec.rows // 2) * spec.cols + spec.cols // 2
    assert np.max(np.abs(arr[center])) < 1e-9


def test_sample_at_center_of_projection_maps_to_origin():
    config = Config(
        compute_screen_bounds=False,
        supplied_screen_bounds=RectBounds(left=-0.6, right=0.6, top=0.5, bottom=-0.5),
        depth=1.0,
    )
    mappings = build_mappings([XYLatLong(x=0.0, y=0.0, latitude=0.0, longitude=0.0)], config)
    screen = find_screen(mappings, config)
    assert abs(screen.x_cop - 0.5) < 1e-12 and screen.y_cop == 0.5

    mesh = find_mesh(mappings, screen)
    assert len(mesh) == 1
    assert np.max(np.abs(mesh.as_array())) < 1e-12
    assert np.max(np.abs(mesh.as_unit_square() - 0.5)) < 1e-12


def test_vertically_offset_screen_has_no_spurious_distortion():
    spec = FlatScreenSpec(left=-0.5, right=0.5, bottom=-0.5, top=1.5, depth=1.0, cols=5, rows=5)
    config = Config(
        compute_screen_bounds=False,
        supplied_screen_bounds=RectBounds(left=spec.left, right=spec.right, top=spec.top, bottom=spec.bottom),
        depth=1.0,
    )
    straight_ahead = XYLatLong(x=0.0, y=0.0, latitude=0.0, longitude=0.0)
    mappings = build_mappings([straight_ahead] + make_flat_screen_table(spec), config)
    screen = find_screen(mappings, config)
    assert abs(screen.y_cop - 0.25) < 1e-12

    arr = find_mesh(mappings, screen).as_array()
    assert np.max(np.abs(arr[0] - np.array([[0.0, -0.5], [0.0, -0.5]]))) < 1e-12
    assert np.max(np.abs(arr[:, 0, :] - arr[:, 1, :])) < 1e-9

    # Same table with the screen fitted instead of supplied.
    fitted_cfg = Config(depth=1.0)
    fitted = build_mappings(make_flat_screen_table(spec), fitted_cfg)
    fitted_arr = find_mesh(fitted, find_screen(fitted, fitted_cfg)).as_array()
    assert np.max(np.abs(fitted_arr[:, 0, :] - fitted_arr[:, 1, :])) < 1e-9


def test_samples_outside_bounds_are_not_clamped():
    config = Config(
        compute_screen_bounds=False,
        supplied_screen_bounds=RectBounds(left=-0.25, right=0.25, top=0.2, bottom=-0.2),
        depth=1.0,
    )
    mappings = build_mappings(make_flat_screen_table(FlatScreenSpec(depth=1.0)), config)
    arr = find_mesh(mappings, find_screen(mappings, config)).as_array()
    # Corner sample (0.5, 0.4) sits at twice the supplied half-extent.
    assert np.max(np.abs(arr[-1] - np.array([[2.0, 2.0], [2.0, 2.0]]))) < 1e-9
    assert np.max(np.abs(arr[0] + np.array([[2.0, 2.0], [2.0, 2.0]]))) < 1e-9


def test_right_eye_uses_reflected_bounds():
    bounds = RectBounds(left=-0.6, right=0.4, top=0.4, bottom=-0.4)
    config = Config(compute_screen_bounds=False, supplied_screen_bounds=bounds, depth=1.0, use_right_eye=True)
    samples = [XYLatLong(x=-0.6, y=0.4, latitude=0.0, longitude=-0.3)]
    mappings = build_mappings(samples, config)
    mesh = find_mesh(mappings, find_screen(mappings, config))
    # x = -0.6 is mirrored to 0.6, the right edge of the reflected bounds.
    assert abs(mesh[0].to_xy[0] - 1.0) < 1e-12
    assert abs(mesh[0].to_xy[1] - 1.0) < 1e-12


def test_parallel_ray_fails_whole_mesh_with_index():
    config = Config(
        compute_screen_bounds=False,
        supplied_screen_bounds=RectBounds(left=-0.5, right=0.5, top=0.5, bottom=-0.5),
        use_field_angles=False,
        depth=1.0,
    )
    samples = [XYLatLong(x=0.1 * i, y=0.0) for i in range(4)]
    dirs = np.array([[0.0, 0.0, -1.0], [0.1, 0.0, -1.0], [1.0, 0.0, 0.0], [0.2, 0.1, -1.0]])
    mappings = build_mappings(samples, config, dirs)
    with pytest.raises(ProjectionError) as exc:
        find_mesh(mappings, find_screen(mappings, config))
    assert exc.value.index == 2
