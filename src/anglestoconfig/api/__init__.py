from anglestoconfig.api.display_io import (
    display_config_dict,
    load_mapping_table,
    mesh_to_dict,
    save_display_config,
    save_mapping_table,
    screen_to_dict,
)

__all__ = [
    "display_config_dict",
    "load_mapping_table",
    "mesh_to_dict",
    "save_display_config",
    "save_mapping_table",
    "screen_to_dict",
]
