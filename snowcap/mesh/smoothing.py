"""Laplacian smoothing over position-keyed adjacency."""

from __future__ import annotations

import logging

from snowcap.mesh.adjacency import build_adjacency
from snowcap.mesh.data import TriangleMesh
from snowcap.mesh.subdivision import clamp_passes

logger = logging.getLogger(__name__)


def smooth_laplacian(mesh: TriangleMesh, factor: float, passes: int) -> TriangleMesh:
    """Relax vertices toward the centroid of their neighbours.

    Every pass rebuilds the adjacency of the current positions and moves each
    connected vertex by ``(p - centroid) * factor`` toward its centroid.
    Vertices without incident triangles do not move. Neighbours are weighted
    by how many triangles they share with the vertex.

    Args:
        mesh: Mesh to smooth. It is not modified.
        factor: Fraction of the way to the centroid; 0 keeps positions, 1
            lands on the centroid. Values outside [0, 1] are allowed.
        passes: Number of passes. Negative values are clamped to 0 with a
            :class:`ParameterClampWarning`.

    Returns:
        New mesh with the same triangles and UVs. Normals are recalculated
        when at least one pass ran.
    """
    passes = clamp_passes(passes, 0, None, "smoothing passes")
    factor = float(factor)
    if mesh.is_empty:
        return mesh.copy()

    positions = mesh.positions.copy()
    for _ in range(passes):
        snapshot = mesh.with_positions(positions)
        adjacency = build_adjacency(snapshot)
        connected = adjacency.connected_mask()
        centroids = adjacency.vertex_centroids()
        positions[connected] -= (positions[connected] - centroids[connected]) * factor

    result = mesh.with_positions(positions)
    if passes > 0:
        result.recalculate_normals()
        logger.debug(
            "Smoothed %d vertices over %d passes (factor %.3f)",
            result.n_vertices,
            passes,
            factor,
        )
    return result
