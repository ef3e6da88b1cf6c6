"""Regular grid meshes draped over a height field."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

import numpy as np

from snowcap.config import TerrainPatchSettings
from snowcap.exceptions import InterpolationError
from snowcap.geometry.vectors import as_vector3
from snowcap.mesh.data import TriangleMesh

if TYPE_CHECKING:
    from snowcap.fields.interpolation import HeightSampler

logger = logging.getLogger(__name__)

GRID_TANGENT = (0.0, 1.0, 0.0, -1.0)


def grid_triangles(width: int, depth: int) -> np.ndarray:
    """Triangle indices for a ``width`` x ``depth`` cell grid.

    Vertices are numbered row by row along x. Cell ``(x, z)`` with lower-left
    vertex ``vi`` gives ``(vi, vi+w+1, vi+1)`` and ``(vi+1, vi+w+1, vi+w+2)``.
    """
    row = width + 1
    cx, cz = np.meshgrid(np.arange(width), np.arange(depth))
    vi = (cz * row + cx).reshape(-1)
    cells = np.stack(
        [
            np.column_stack([vi, vi + row, vi + 1]),
            np.column_stack([vi + 1, vi + row, vi + row + 1]),
        ],
        axis=1,
    )
    return cells.reshape(-1, 3)


def build_height_field_grid(
    sampler: HeightSampler,
    start: Sequence[float],
    width: int,
    depth: int,
) -> TriangleMesh:
    """Build a grid mesh following the terrain below it.

    The grid has ``(width + 1) * (depth + 1)`` vertices spaced one unit
    apart. Vertex ``(x, h, z)`` is local to ``start``; ``h`` is the height
    sampled at world ``(start.x + x, start.z + z)``.

    Args:
        sampler: Object with ``sample_height(x, z)`` accepting arrays.
        start: World position of the first grid vertex.
        width: Number of cells along x.
        depth: Number of cells along z.

    Returns:
        Grid mesh with UVs ``(x / width, z / depth)``, recalculated normals
        and tangent ``(0, 1, 0, -1)`` on every vertex.

    Raises:
        ValueError: If width or depth is not a positive integer.
        InterpolationError: If the sampler returns heights of the wrong
            shape or non-finite heights.

    Example:
        >>> from snowcap.fields import FlatHeightField
        >>> grid = build_height_field_grid(FlatHeightField(0.0), (0, 0, 0), 1, 1)
        >>> grid.n_vertices, grid.n_triangles
        (4, 2)
    """
    for name, value in (("width", width), ("depth", depth)):
        if isinstance(value, bool) or int(value) != value or value < 1:
            raise ValueError(f"{name} must be a positive integer, got {value!r}")
    width, depth = int(width), int(depth)
    start = as_vector3(start, "start")

    x, z = np.meshgrid(
        np.arange(width + 1, dtype=float), np.arange(depth + 1, dtype=float)
    )
    x = x.reshape(-1)
    z = z.reshape(-1)

    heights = np.asarray(sampler.sample_height(start[0] + x, start[2] + z), dtype=float)
    if heights.shape != x.shape:
        raise InterpolationError(
            f"sampler returned {heights.shape} heights for {x.shape} grid points"
        )
    if not np.all(np.isfinite(heights)):
        raise InterpolationError("sampler returned NaN or infinite heights")

    mesh = TriangleMesh(
        positions=np.column_stack([x, heights, z]),
        triangles=grid_triangles(width, depth),
        normals=np.tile([0.0, 1.0, 0.0], (len(x), 1)),
        uvs=np.column_stack([x / width, z / depth]),
    )
    mesh.recalculate_normals()
    mesh.set_tangents(np.tile(GRID_TANGENT, (mesh.n_vertices, 1)))

    logger.debug(
        "Built %dx%d height field grid at %s (heights %.3f to %.3f)",
        width,
        depth,
        start.tolist(),
        heights.min(),
        heights.max(),
    )
    return mesh


def build_terrain_patch(
    sampler: HeightSampler, settings: TerrainPatchSettings | None = None
) -> TriangleMesh:
    """Build the terrain patch grid described by ``settings``.

    Args:
        sampler: Height sampler for the terrain.
        settings: Patch placement; defaults to TerrainPatchSettings().

    Returns:
        Grid mesh local to ``settings.start_position``.
    """
    settings = settings or TerrainPatchSettings()
    return build_height_field_grid(
        sampler, settings.start_position, settings.width, settings.depth
    )
