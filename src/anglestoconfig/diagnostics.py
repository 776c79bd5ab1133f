"""
Text formatting for verbose logs. The core types never print anything themselves.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from anglestoconfig.core.geometry import XYZ

if TYPE_CHECKING:
    from anglestoconfig.core.mesh import MeshEntry
    from anglestoconfig.core.screen import ScreenDescription

_PRECISION = 4
_WIDTH = _PRECISION + 3


def format_xyz(p: XYZ, precision: int = _PRECISION) -> str:
    width = precision + 3
    return f"({p.x:{width}.{precision}g}, {p.y:{width}.{precision}g}, {p.z:{width}.{precision}g})"


def format_plane(A: float, B: float, C: float, D: float) -> str:
    return f"{A:.{_PRECISION}g}x + {B:.{_PRECISION}g}y + {C:.{_PRECISION}g}z + {D:.{_PRECISION}g} = 0"


def format_screen(screen: ScreenDescription) -> str:
    lines = [
        f"hFOV {screen.h_fov_degrees:.{_PRECISION}g} deg, vFOV {screen.v_fov_degrees:.{_PRECISION}g} deg, "
        f"overlap {screen.overlap_percent:.{_PRECISION}g}%",
        f"COP ({screen.x_cop:.{_PRECISION}g}, {screen.y_cop:.{_PRECISION}g})",
        f"plane {format_plane(screen.A, screen.B, screen.C, screen.D)}",
        f"left {format_xyz(screen.screen_left)} right {format_xyz(screen.screen_right)} maxY {screen.max_y:.{_PRECISION}g}",
        f"y from {screen.screen_bottom:.{_PRECISION}g} to {screen.screen_top:.{_PRECISION}g}",
    ]
    return "\n".join(lines)


def format_mesh(entries: Sequence[MeshEntry], limit: int = 10) -> str:
    rows = []
    for i, e in enumerate(entries[:limit]):
        (fx, fy), (tx, ty) = e.from_xy, e.to_xy
        rows.append(
            f"[{i:4d}] from ({fx:{_WIDTH}.{_PRECISION}g}, {fy:{_WIDTH}.{_PRECISION}g})"
            f" -> to ({tx:{_WIDTH}.{_PRECISION}g}, {ty:{_WIDTH}.{_PRECISION}g})"
        )
    if len(entries) > limit:
        rows.append(f"... {len(entries) - limit} more")
    return "\n".join(rows)
