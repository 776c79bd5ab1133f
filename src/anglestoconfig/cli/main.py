from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path

from anglestoconfig.api.display_io import load_mapping_table, save_display_config, save_mapping_table
from anglestoconfig.config import Config, ConfigValidationError, load_config, parse_bounds, validate_config
from anglestoconfig.core.mapping import build_mappings
from anglestoconfig.core.mesh import find_mesh
from anglestoconfig.core.screen import find_screen, find_stereo_screens
from anglestoconfig.core.verify import verify_angles
from anglestoconfig.logging_config import setup_logging
from anglestoconfig.sim.example_mesh import FlatScreenSpec, make_flat_screen_table

logger = logging.getLogger("anglestoconfig.cli")


def _config_from_args(args: argparse.Namespace) -> Config:
    config = load_config(args.config) if args.config else Config()
    overrides: dict = {}
    if args.right_eye:
        overrides["use_right_eye"] = True
    if args.screen is not None:
        overrides["compute_screen_bounds"] = False
        overrides["supplied_screen_bounds"] = parse_bounds(args.screen)
    if args.direction_vectors:
        overrides["use_field_angles"] = False
    if args.to_meters is not None:
        overrides["to_meters"] = args.to_meters
    if args.depth is not None:
        overrides["depth"] = args.depth
    if args.verify_angles:
        overrides["verify_angles"] = True
    for key in ("xx", "xy", "yx", "yy"):
        if getattr(args, key) is not None:
            overrides[key] = getattr(args, key)
    if args.max_angle_diff is not None:
        overrides["max_angle_diff_degrees"] = args.max_angle_diff
    if args.overlap_percent is not None:
        overrides["overlap_percent"] = args.overlap_percent
    if args.verbose:
        overrides["verbose"] = True
    return validate_config(replace(config, **overrides))


def run_convert(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    setup_logging(logging.DEBUG if config.verbose else logging.INFO, log_file=args.log_file)

    samples, directions = load_mapping_table(args.table, degrees=args.degrees)
    if directions is None and not config.use_field_angles:
        raise ConfigValidationError("--direction-vectors needs a 5-column (x y dx dy dz) table")
    if directions is not None and config.use_field_angles:
        logger.info("table holds direction vectors; not decoding angles")
        config = replace(config, use_field_angles=False)
    logger.info("read %d samples from %s", len(samples), args.table)

    mappings = build_mappings(samples, config, directions)

    if config.verify_angles:
        mismatches = verify_angles(mappings, config)
        if mismatches:
            logger.warning("%d sample(s) failed angle verification", len(mismatches))

    if args.compute_overlap:
        left, right = find_stereo_screens(samples, config, directions)
        screen = right if config.use_right_eye else left
    else:
        screen = find_screen(mappings, config)
    mesh = find_mesh(mappings, screen)

    out = save_display_config(args.out, screen, mesh)
    logger.info(
        "hFOV %.3f deg, vFOV %.3f deg, COP (%.4f, %.4f), %d mesh entries",
        screen.h_fov_degrees,
        screen.v_fov_degrees,
        screen.x_cop,
        screen.y_cop,
        len(mesh),
    )
    print(f"Wrote {out}")
    return 0


def run_make_example(args: argparse.Namespace) -> int:
    spec = FlatScreenSpec(
        left=-args.width * args.cop_x,
        right=args.width * (1.0 - args.cop_x),
        bottom=-args.height * args.cop_y,
        top=args.height * (1.0 - args.cop_y),
        depth=args.depth,
        cols=args.cols,
        rows=args.rows,
        k1=args.k1,
    )
    out = save_mapping_table(args.out, make_flat_screen_table(spec), degrees=args.degrees)
    print(f"Wrote {out}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="angles-to-config")
    sub = parser.add_subparsers(dest="cmd", required=True)

    conv = sub.add_parser(
        "convert",
        help="Fit the screen and build the distortion mesh from a mapping table; write display JSON.",
    )
    conv.add_argument("table", type=Path, help="Rows of 'x y lat long' or 'x y dx dy dz'.")
    conv.add_argument("--out", type=Path, required=True)
    conv.add_argument("--config", type=Path, default=None, help="JSON config file; flags below override it.")
    conv.add_argument("--right-eye", action="store_true", help="Mirror the (left-eye) table for the right eye.")
    conv.add_argument(
        "--screen",
        type=float,
        nargs=4,
        metavar=("LEFT", "RIGHT", "BOTTOM", "TOP"),
        default=None,
        help="Use these left-eye screen bounds instead of computing them.",
    )
    conv.add_argument("--direction-vectors", action="store_true", help="Table gives view directions, not angles.")
    conv.add_argument("--degrees", action="store_true", help="Angles in the table are in degrees.")
    conv.add_argument("--to-meters", type=float, default=None, help="Scale from table units to meters.")
    conv.add_argument("--depth", type=float, default=None, help="Eye-to-screen distance in meters.")
    conv.add_argument("--overlap-percent", type=float, default=None)
    conv.add_argument("--compute-overlap", action="store_true", help="Fit both eyes and compute their overlap.")
    conv.add_argument("--verify-angles", action="store_true")
    conv.add_argument("--xx", type=float, default=None)
    conv.add_argument("--xy", type=float, default=None)
    conv.add_argument("--yx", type=float, default=None)
    conv.add_argument("--yy", type=float, default=None)
    conv.add_argument("--max-angle-diff", type=float, default=None, help="Verification tolerance in degrees.")
    conv.add_argument("--verbose", action="store_true")
    conv.add_argument("--log-file", type=Path, default=None)

    ex = sub.add_parser("make-example", help="Write a synthetic flat-screen mapping table.")
    ex.add_argument("--out", type=Path, required=True)
    ex.add_argument("--cols", type=int, default=11)
    ex.add_argument("--rows", type=int, default=9)
    ex.add_argument("--width", type=float, default=1.0)
    ex.add_argument("--height", type=float, default=0.8)
    ex.add_argument("--cop-x", type=float, default=0.5, help="Center of projection as a fraction of the width.")
    ex.add_argument("--cop-y", type=float, default=0.5, help="Center of projection as a fraction of the height.")
    ex.add_argument("--depth", type=float, default=1.0)
    ex.add_argument("--k1", type=float, default=0.0, help="Radial distortion coefficient.")
    ex.add_argument("--degrees", action="store_true", help="Write angles in degrees.")

    args = parser.parse_args(argv)

    if args.cmd == "convert":
        try:
            return run_convert(args)
        except ValueError as e:
            # AnglesToConfigError, ConfigValidationError and malformed tables
            logger.error("%s", e)
            return 1

    if args.cmd == "make-example":
        return run_make_example(args)

    raise AssertionError(f"Unhandled cmd: {args.cmd}")
