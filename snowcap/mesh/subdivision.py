"""Midpoint subdivision of triangle meshes."""

from __future__ import annotations

import logging
import warnings

import numpy as np

from snowcap.exceptions import ParameterClampWarning
from snowcap.geometry.vectors import normalize_rows
from snowcap.mesh.data import TriangleMesh

logger = logging.getLogger(__name__)

MIN_SUBDIVISION_PASSES = 0
MAX_SUBDIVISION_PASSES = 6


def clamp_passes(passes: int, lower: int, upper: int | None, name: str) -> int:
    """Clamp a pass count, warning the caller when it had to change.

    Args:
        passes: Requested pass count.
        lower: Smallest allowed value.
        upper: Largest allowed value, or None for no upper bound.
        name: Parameter name used in the warning.

    Returns:
        The clamped pass count.

    Raises:
        ValueError: If ``passes`` is not a whole number.
    """
    if isinstance(passes, bool) or int(passes) != passes:
        raise ValueError(f"{name} must be an integer, got {passes!r}")
    passes = int(passes)
    clamped = max(passes, lower)
    if upper is not None:
        clamped = min(clamped, upper)
    if clamped != passes:
        message = f"{name} {passes} is out of range; clamped to {clamped}"
        logger.warning(message)
        warnings.warn(message, ParameterClampWarning, stacklevel=3)
    return clamped


def subdivide(mesh: TriangleMesh, passes: int) -> TriangleMesh:
    """Split every triangle into four, ``passes`` times.

    Each pass appends the three edge midpoints of every triangle as new
    vertices (position, UV and renormalized normal averaged from the edge
    endpoints) and replaces the triangle with three corner triangles and one
    center triangle, keeping the original winding. Midpoints are not shared
    between neighbouring triangles.

    Args:
        mesh: Mesh to subdivide.
        passes: Number of passes, clamped to [0, 6] with a
            :class:`ParameterClampWarning`.

    Returns:
        ``mesh`` itself when no pass runs, otherwise a new mesh with
        ``4**passes`` times as many triangles and recalculated normals.
    """
    passes = clamp_passes(
        passes, MIN_SUBDIVISION_PASSES, MAX_SUBDIVISION_PASSES, "subdivision passes"
    )
    if passes == 0:
        return mesh

    positions = mesh.positions
    normals = mesh.normals
    uvs = mesh.uvs
    triangles = mesh.triangles

    for _ in range(passes):
        positions, normals, uvs, triangles = _subdivide_once(
            positions, normals, uvs, triangles
        )

    result = TriangleMesh(
        positions=positions, triangles=triangles, normals=normals, uvs=uvs
    )
    result.recalculate_normals()

    logger.debug(
        "Subdivided %d triangles into %d over %d passes",
        mesh.n_triangles,
        result.n_triangles,
        passes,
    )
    return result


def _subdivide_once(positions, normals, uvs, triangles):
    m = len(triangles)
    n = len(positions)
    v0, v1, v2 = triangles[:, 0], triangles[:, 1], triangles[:, 2]

    def midpoints(values: np.ndarray) -> np.ndarray:
        # (m, 3, dim) ordered as edge (v0, v1), (v1, v2), (v2, v0)
        return np.stack(
            [
                (values[v0] + values[v1]) / 2.0,
                (values[v1] + values[v2]) / 2.0,
                (values[v2] + values[v0]) / 2.0,
            ],
            axis=1,
        )

    new_positions = midpoints(positions).reshape(-1, 3)
    new_normals = normalize_rows(midpoints(normals).reshape(-1, 3))
    new_uvs = midpoints(uvs).reshape(-1, 2)

    base = n + 3 * np.arange(m)
    m0, m1, m2 = base, base + 1, base + 2

    new_triangles = np.stack(
        [
            np.column_stack([m2, v0, m0]),
            np.column_stack([m0, v1, m1]),
            np.column_stack([m1, v2, m2]),
            np.column_stack([m2, m0, m1]),
        ],
        axis=1,
    ).reshape(-1, 3)

    return (
        np.concatenate([positions, new_positions]),
        np.concatenate([normals, new_normals]),
        np.concatenate([uvs, new_uvs]),
        new_triangles,
    )
