from anglestoconfig.api import load_mapping_table, save_display_config
from anglestoconfig.config import Config, ConfigValidationError, load_config, parse_config, validate_config
from anglestoconfig.core.geometry import XYZ, LongLat, RectBounds
from anglestoconfig.core.mapping import Mapping, XYLatLong, build_mappings
from anglestoconfig.core.mesh import MeshDescription, find_mesh
from anglestoconfig.core.screen import ScreenDescription, find_screen, find_stereo_screens
from anglestoconfig.core.verify import AngleMismatch, verify_angles
from anglestoconfig.errors import AnglesToConfigError, DegenerateScreenError, InsufficientDataError, ProjectionError

__all__ = [
    "AngleMismatch",
    "AnglesToConfigError",
    "Config",
    "ConfigValidationError",
    "DegenerateScreenError",
    "InsufficientDataError",
    "LongLat",
    "Mapping",
    "MeshDescription",
    "ProjectionError",
    "RectBounds",
    "ScreenDescription",
    "XYLatLong",
    "XYZ",
    "build_mappings",
    "find_mesh",
    "find_screen",
    "find_stereo_screens",
    "load_config",
    "load_mapping_table",
    "parse_config",
    "save_display_config",
    "validate_config",
    "verify_angles",
]
