"""I/O utilities for reading and writing data files."""

from snowcap.io.readers import (
    CSVReader,
    SpatialData,
    read_csv,
    read_settings,
    read_terrain_settings,
)
from snowcap.io.writers import load_mesh, save_mesh, save_settings

__all__ = [
    "CSVReader",
    "SpatialData",
    "read_csv",
    "read_settings",
    "read_terrain_settings",
    "load_mesh",
    "save_mesh",
    "save_settings",
]
