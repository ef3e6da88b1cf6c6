"""snowcap - procedural snow layers for triangle meshes.

Extracts the part of a mesh facing a direction, thickens it into a closed
shell, subdivides and smooths it. Also builds grid meshes draped over a
height field for terrain patches.

Example:
    >>> from snowcap import SnowCapBuilder
    >>> snow = (
    ...     SnowCapBuilder(rock_mesh)
    ...     .set_extraction(direction=(0, 1, 0), max_angle=40)
    ...     .set_extrusion(distance=0.1)
    ...     .set_subdivision(2)
    ...     .set_smoothing(factor=0.5, passes=3)
    ...     .build()
    ... )
    >>> from snowcap.io import save_mesh
    >>> save_mesh(snow, "rock_snow.npz")
"""

from snowcap.config import CapSettings, TerrainPatchSettings
from snowcap.exceptions import (
    DataLoadError,
    InterpolationError,
    InvalidMeshError,
    ObjectNotFoundError,
    ParameterClampWarning,
    SnowcapError,
)
from snowcap.geometry import ObjectTransform
from snowcap.mesh import (
    SnowCapBuilder,
    TriangleMesh,
    build_height_field_grid,
    extract_cap,
    extrude,
    smooth_laplacian,
    subdivide,
)
from snowcap.scene import SceneGraph, SceneObject, create_snow_for_objects

__version__ = "0.1.0"

__all__ = [
    # Main API
    "SnowCapBuilder",
    "TriangleMesh",
    "ObjectTransform",
    "CapSettings",
    "TerrainPatchSettings",
    # Pipeline stages
    "extract_cap",
    "extrude",
    "subdivide",
    "smooth_laplacian",
    "build_height_field_grid",
    # Scene
    "SceneGraph",
    "SceneObject",
    "create_snow_for_objects",
    # Exceptions
    "SnowcapError",
    "InvalidMeshError",
    "ObjectNotFoundError",
    "InterpolationError",
    "DataLoadError",
    "ParameterClampWarning",
]
