from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from anglestoconfig.core.geometry import Point2d
from anglestoconfig.core.mapping import Mapping
from anglestoconfig.core.screen import ScreenDescription
from anglestoconfig.diagnostics import format_mesh
from anglestoconfig.errors import DegenerateScreenError, ProjectionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MeshEntry:
    from_xy: Point2d  # sample re-projected through the screen plane, normalized to [-1, 1]
    to_xy: Point2d  # raw screen position, normalized to [-1, 1]


@dataclass(frozen=True)
class MeshDescription:
    """Mesh entries in the same order as the mappings they were built from."""

    entries: tuple[MeshEntry, ...]

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, i: int) -> MeshEntry:
        return self.entries[i]

    def as_array(self) -> np.ndarray:
        """(N,2,2) array: [:, 0] is `from`, [:, 1] is `to`."""
        if not self.entries:
            return np.zeros((0, 2, 2), dtype=np.float64)
        return np.asarray([[e.from_xy, e.to_xy] for e in self.entries], dtype=np.float64)

    def as_unit_square(self) -> np.ndarray:
        """Same as `as_array` with coordinates mapped from [-1, 1] to [0, 1]."""
        return 0.5 * (self.as_array() + 1.0)


def find_mesh(mappings: Sequence[Mapping], screen: ScreenDescription) -> MeshDescription:
    """
    One mesh entry per mapping, in order.

    `from` spans [screen_bottom, screen_top] vertically, which is +/- max_y for a screen
    centered on the forward axis.

    Any sample whose ray is parallel to the screen plane aborts the whole build. Values
    outside [-1, 1] are kept as-is.
    """
    A, B, C, D = screen.plane()
    left = screen.screen_left
    axis = screen.screen_right - left
    width_sq = axis.dot(axis)
    bottom = screen.screen_bottom
    height = screen.screen_top - bottom
    if width_sq <= 0.0 or height <= 0.0:
        raise DegenerateScreenError(f"screen has zero extent: width^2={width_sq:g}, height={height:g}")

    bounds = screen.bounds
    if bounds.width <= 0.0 or bounds.height <= 0.0:
        raise DegenerateScreenError(f"screen bounds have zero extent: {bounds}")

    entries: list[MeshEntry] = []
    for i, m in enumerate(mappings):
        try:
            q = m.xyz.project_onto_plane(A, B, C, D)
        except ProjectionError as e:
            raise ProjectionError(f"mesh sample {i}: {e}", index=i) from e

        t = (q - left).dot(axis) / width_sq
        from_xy = (2.0 * t - 1.0, 2.0 * (q.y - bottom) / height - 1.0)

        s = m.xy_lat_long
        to_xy = (
            2.0 * (s.x - bounds.left) / bounds.width - 1.0,
            2.0 * (s.y - bounds.bottom) / bounds.height - 1.0,
        )
        entries.append(MeshEntry(from_xy=from_xy, to_xy=to_xy))

    mesh = MeshDescription(entries=tuple(entries))
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("mesh with %d entries:\n%s", len(mesh), format_mesh(mesh.entries))
    return mesh
