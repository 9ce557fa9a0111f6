from .xyz_file import (
    cell_to_xyz_string,
    parse_extended_xyz_file,
    parse_extended_xyz_string,
    write_xyz_file,
)

__all__ = [
    "cell_to_xyz_string",
    "parse_extended_xyz_file",
    "parse_extended_xyz_string",
    "write_xyz_file",
]
