"""Extrusion of a cap mesh into a closed shell."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, NamedTuple, Sequence

import numpy as np

from snowcap.exceptions import InvalidMeshError
from snowcap.geometry.vectors import as_vector3
from snowcap.mesh.boundary import DirectedEdge, as_edge_list, boundary_is_closed
from snowcap.mesh.data import TriangleMesh
from snowcap.mesh.identity import PositionIndex, PositionKey

logger = logging.getLogger(__name__)


class ExtrusionConfig:
    """Configuration for extruding a cap along a direction.

    Args:
        direction: Extrusion direction. Any non-zero vector; it is not
            normalized, so its length scales the offset.
        distance: Extrusion distance. Zero disables extrusion.
        enabled: If False, extrusion is skipped regardless of distance.

    Example:
        >>> config = ExtrusionConfig(direction=(0, 1, 0), distance=0.25)
        >>> config.offset
        array([0.  , 0.25, 0.  ])
    """

    def __init__(
        self,
        direction: Sequence[float] = (0.0, 1.0, 0.0),
        distance: float = 0.0,
        enabled: bool = True,
    ):
        self._direction = as_vector3(direction, "direction")
        if not np.any(self._direction):
            raise ValueError("direction must be a non-zero vector")

        self._distance = float(distance)
        if not np.isfinite(self._distance):
            raise ValueError("distance must be finite")
        self._enabled = bool(enabled)

    @classmethod
    def disabled(cls) -> ExtrusionConfig:
        """Create a configuration that passes meshes through unchanged."""
        return cls(enabled=False)

    @property
    def direction(self) -> np.ndarray:
        """Extrusion direction."""
        return self._direction.copy()

    @property
    def distance(self) -> float:
        """Extrusion distance."""
        return self._distance

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def is_active(self) -> bool:
        """Return True if extrusion will produce a shell."""
        return self._enabled and self._distance != 0.0

    @property
    def offset(self) -> np.ndarray:
        """Translation from a bottom vertex to its top counterpart."""
        return self._direction * self._distance

    def __repr__(self) -> str:
        return (
            f"ExtrusionConfig(direction={self._direction.tolist()}, "
            f"distance={self._distance}, enabled={self._enabled})"
        )


class WallCorner(Enum):
    """Corner a side-wall triangle starts from."""

    TOP = "top"
    BOTTOM_LEFT = "bottom_left"


class WallTriangle(NamedTuple):
    positions: np.ndarray  # (3, 3) corner positions in winding order
    sources: tuple[PositionKey, PositionKey, PositionKey]  # cap vertex of each corner


def wall_triangle(
    corner: WallCorner, edge: DirectedEdge, offset: np.ndarray
) -> tuple[WallTriangle, WallCorner]:
    """Build one side-wall triangle for ``edge`` and return the next corner.

    Looking at the wall from outside with the top edge up, TOP yields
    (top end, bottom end, bottom start) and BOTTOM_LEFT yields
    (bottom start, top start, top end). The two together cover the quad
    between the edge and its offset copy.
    """
    start = np.asarray(edge.start)
    end = np.asarray(edge.end)
    if corner is WallCorner.TOP:
        triangle = WallTriangle(
            np.array([end + offset, end, start]),
            (edge.end, edge.end, edge.start),
        )
        return triangle, WallCorner.BOTTOM_LEFT

    triangle = WallTriangle(
        np.array([start, start + offset, end + offset]),
        (edge.start, edge.start, edge.end),
    )
    return triangle, WallCorner.TOP


def extrude(
    cap: TriangleMesh,
    direction: Sequence[float],
    distance: float,
    boundary_edges: Iterable,
    enabled: bool = True,
) -> TriangleMesh:
    """Extrude ``cap`` into a shell.

    The cap is kept as the bottom with its normals inverted, an offset copy is
    added as the top, and two wall triangles are built for every boundary
    edge. Wall triangles get their own vertices, so the seams are flat shaded.
    Normals and tangents are recalculated on the result.

    Args:
        cap: Cap mesh, typically from :func:`extract_cap`.
        direction: Extrusion direction.
        distance: Extrusion distance; zero returns ``cap`` unchanged.
        boundary_edges: Boundary edges of the cap, as DirectedEdge objects,
            (start, end) pairs or a flat sequence of positions.
        enabled: If False, ``cap`` is returned unchanged.

    Returns:
        Shell mesh with ``2 * n + 6 * k`` vertices and ``2 * m + 2 * k``
        triangles for a cap with n vertices, m triangles and k boundary edges.

    Raises:
        InvalidMeshError: If the boundary list is malformed or references a
            position that is not a cap vertex.
    """
    config = ExtrusionConfig(direction, distance, enabled)
    return extrude_with_config(cap, config, boundary_edges)


def extrude_with_config(
    cap: TriangleMesh,
    config: ExtrusionConfig,
    boundary_edges: Iterable,
) -> TriangleMesh:
    """Extrude ``cap`` using an :class:`ExtrusionConfig`. See :func:`extrude`."""
    if not config.is_active or cap.is_empty:
        logger.debug("Extrusion skipped (%r, empty cap=%s)", config, cap.is_empty)
        return cap

    edges = as_edge_list(boundary_edges)

    n = cap.n_vertices
    offset = config.offset

    positions = [cap.positions, cap.positions + offset]
    normals = [-cap.normals, cap.normals]
    uvs = [cap.uvs, cap.uvs]
    triangles = [cap.triangles, cap.triangles + n]

    if edges:
        if not boundary_is_closed(edges):
            logger.warning(
                "Boundary of %d edges does not form closed loops; "
                "side walls may leave gaps",
                len(edges),
            )
        wall_positions, wall_normals, wall_uvs = _build_walls(cap, edges, offset)
        positions.append(wall_positions)
        normals.append(wall_normals)
        uvs.append(wall_uvs)
        triangles.append(2 * n + np.arange(len(wall_positions)).reshape(-1, 3))

    shell = TriangleMesh(
        positions=np.concatenate(positions),
        triangles=np.concatenate(triangles),
        normals=np.concatenate(normals),
        uvs=np.concatenate(uvs),
    )
    shell.recalculate_normals()
    shell.recalculate_tangents()

    logger.debug(
        "Extruded cap (%d vertices, %d edges) into shell with %d vertices, "
        "%d triangles",
        n,
        len(edges),
        shell.n_vertices,
        shell.n_triangles,
    )
    return shell


def _build_walls(
    cap: TriangleMesh, edges: list[DirectedEdge], offset: np.ndarray
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    index = PositionIndex(cap.positions)
    uv_cache: dict[PositionKey, np.ndarray] = {}

    def uv_of(key: PositionKey) -> np.ndarray:
        if key not in uv_cache:
            position_id = index.find(key)
            if position_id is None:
                raise InvalidMeshError(
                    f"boundary edge endpoint {key} is not a vertex of the cap"
                )
            uv_cache[key] = cap.uvs[index.first_index[position_id]]
        return uv_cache[key]

    corners = np.empty((2 * len(edges), 3, 3))
    corner_uvs = np.empty((2 * len(edges), 3, 2))

    corner = WallCorner.TOP
    t = 0
    for edge in edges:
        for _ in range(2):
            triangle, corner = wall_triangle(corner, edge, offset)
            corners[t] = triangle.positions
            corner_uvs[t] = [uv_of(key) for key in triangle.sources]
            t += 1

    # Provisional normal at each corner: cross of the two edges leaving it.
    following = np.roll(corners, -1, axis=1)
    after = np.roll(corners, -2, axis=1)
    corner_normals = np.cross(following - corners, after - corners)

    return (
        corners.reshape(-1, 3),
        corner_normals.reshape(-1, 3),
        corner_uvs.reshape(-1, 2),
    )
