from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Sequence

import numpy as np

from anglestoconfig.core.mapping import XYLatLong
from anglestoconfig.core.mesh import MeshDescription
from anglestoconfig.core.screen import ScreenDescription
from anglestoconfig.errors import InsufficientDataError


def _to_float_matrix(x: np.ndarray, ncols: int) -> np.ndarray:
    x = np.asarray(x, dtype=np.float64)
    if x.ndim != 2 or x.shape[1] != ncols:
        raise ValueError(f"expected {ncols} columns, got shape {x.shape}")
    if not np.all(np.isfinite(x)):
        bad = int(np.flatnonzero(~np.all(np.isfinite(x), axis=1))[0])
        raise ValueError(f"non-finite values in row {bad}")
    return x


def load_mapping_table(path: Path, *, degrees: bool = False) -> tuple[list[XYLatLong], np.ndarray | None]:
    """
    Read a mapping table: one sample per row, whitespace or comma separated, `#` comments.

      4 columns: x y latitude longitude
      5 columns: x y dx dy dz   (view direction given directly)

    Returns (samples, directions); `directions` is None for the 4-column form.
    """
    path = Path(path)
    lines = [ln.replace(",", " ") for ln in path.read_text(encoding="utf-8").splitlines()]
    table = np.loadtxt(lines, comments="#", dtype=np.float64, ndmin=2)
    if table.size == 0:
        raise InsufficientDataError(f"{path}: mapping table is empty")

    ncols = int(table.shape[1])
    if ncols == 4:
        table = _to_float_matrix(table, 4)
        lat = table[:, 2]
        lon = table[:, 3]
        if degrees:
            lat = np.radians(lat)
            lon = np.radians(lon)
        samples = [
            XYLatLong(x=float(x), y=float(y), latitude=float(la), longitude=float(lo))
            for x, y, la, lo in zip(table[:, 0], table[:, 1], lat, lon)
        ]
        return samples, None
    if ncols == 5:
        table = _to_float_matrix(table, 5)
        samples = [XYLatLong(x=float(x), y=float(y)) for x, y in zip(table[:, 0], table[:, 1])]
        return samples, table[:, 2:5].copy()
    raise ValueError(f"{path}: expected 4 (x y lat long) or 5 (x y dx dy dz) columns, got {ncols}")


def save_mapping_table(path: Path, samples: Sequence[XYLatLong], *, degrees: bool = False) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conv = math.degrees if degrees else float
    unit = "deg" if degrees else "rad"
    rows = [f"# x y latitude({unit}) longitude({unit})"]
    rows += [f"{s.x:.12g} {s.y:.12g} {conv(s.latitude):.12g} {conv(s.longitude):.12g}" for s in samples]
    path.write_text("\n".join(rows) + "\n", encoding="utf-8")
    return path


def screen_to_dict(screen: ScreenDescription) -> dict[str, Any]:
    return {
        "field_of_view": {
            "monocular_horizontal": float(screen.h_fov_degrees),
            "monocular_vertical": float(screen.v_fov_degrees),
            "overlap_percent": float(screen.overlap_percent),
            "pitch_tilt": 0,
        },
        "eyes": [{"center_proj_x": float(screen.x_cop), "center_proj_y": float(screen.y_cop), "rotate_180": 0}],
    }


def mesh_to_dict(mesh: MeshDescription) -> dict[str, Any]:
    samples = mesh.as_unit_square()
    return {
        "type": "mono_point_samples",
        "mono_point_samples": [samples.tolist()],
    }


def display_config_dict(screen: ScreenDescription, mesh: MeshDescription) -> dict[str, Any]:
    hmd = screen_to_dict(screen)
    hmd["distortion"] = mesh_to_dict(mesh)
    return {"hmd": hmd}


def save_display_config(path: Path, screen: ScreenDescription, mesh: MeshDescription) -> Path:
    """
    Write the screen and mesh as a display-descriptor style JSON document.

    Mesh coordinates are written in [0, 1] units, one [[from_x, from_y], [to_x, to_y]]
    pair per sample. `mono_point_samples` holds one such list per eye; this writes one.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(display_config_dict(screen, mesh), indent=2, sort_keys=True), encoding="utf-8")
    return path
