"""Triangle mesh container shared by every pipeline stage."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from snowcap.exceptions import InvalidMeshError
from snowcap.geometry.vectors import normalize_rows, triangle_cross


class TriangleMesh:
    """Indexed triangle mesh with per-vertex normals, UVs and tangents.

    Positions, normals and UVs are index-aligned. Triangles reference
    positions by index; each triple must name three distinct vertices.
    All input arrays are copied, so a mesh never aliases its caller's data,
    and the stored arrays are read-only.

    Args:
        positions: Vertex positions, shape (n, 3).
        triangles: Triangle indices, shape (m, 3) or a flat sequence whose
            length is a multiple of 3.
        normals: Vertex normals, shape (n, 3). If None, they are computed
            from the triangles.
        uvs: Texture coordinates, shape (n, 2). If None, zeros are used.
        tangents: Optional tangents, shape (n, 4), ``w`` holding handedness.

    Raises:
        InvalidMeshError: If array lengths disagree or an index is out of range.

    Example:
        >>> mesh = TriangleMesh(
        ...     positions=[(0, 0, 0), (0, 0, 1), (1, 0, 0)],
        ...     triangles=[0, 1, 2],
        ... )
        >>> mesh.n_triangles
        1
    """

    def __init__(
        self,
        positions: np.ndarray | Sequence,
        triangles: np.ndarray | Sequence,
        normals: np.ndarray | Sequence | None = None,
        uvs: np.ndarray | Sequence | None = None,
        tangents: np.ndarray | Sequence | None = None,
    ):
        self._positions = _as_rows(positions, 3, "positions")
        n = len(self._positions)

        tris = np.array(triangles, dtype=np.int64)
        if tris.ndim == 1:
            if tris.size % 3 != 0:
                raise InvalidMeshError(
                    f"triangle index count ({tris.size}) is not a multiple of 3"
                )
            tris = tris.reshape(-1, 3)
        elif tris.ndim != 2 or tris.shape[1] != 3:
            raise InvalidMeshError(
                f"triangles must have shape (m, 3), got {tris.shape}"
            )
        self._triangles = _read_only(tris)

        self._uvs = (
            _read_only(np.zeros((n, 2))) if uvs is None else _as_rows(uvs, 2, "uvs")
        )
        self._tangents = (
            None if tangents is None else _as_rows(tangents, 4, "tangents")
        )

        if normals is None:
            self._normals = _read_only(np.zeros((n, 3)))
            self.validate()
            self.recalculate_normals()
        else:
            self._normals = _as_rows(normals, 3, "normals")
            self.validate()

    @classmethod
    def empty(cls) -> TriangleMesh:
        """Return a mesh with no vertices and no triangles."""
        return cls(
            positions=np.zeros((0, 3)),
            triangles=np.zeros((0, 3), dtype=np.int64),
            normals=np.zeros((0, 3)),
            uvs=np.zeros((0, 2)),
        )

    def validate(self) -> None:
        """Check the mesh invariants.

        Raises:
            InvalidMeshError: If any invariant is violated.
        """
        n = len(self._positions)
        if len(self._normals) != n:
            raise InvalidMeshError(
                f"normals length ({len(self._normals)}) must match "
                f"number of positions ({n})"
            )
        if len(self._uvs) != n:
            raise InvalidMeshError(
                f"uvs length ({len(self._uvs)}) must match "
                f"number of positions ({n})"
            )
        if self._tangents is not None and len(self._tangents) != n:
            raise InvalidMeshError(
                f"tangents length ({len(self._tangents)}) must match "
                f"number of positions ({n})"
            )
        if not np.all(np.isfinite(self._positions)):
            raise InvalidMeshError("positions contain NaN or infinite values")

        if len(self._triangles) == 0:
            return
        if self._triangles.min() < 0 or self._triangles.max() >= n:
            raise InvalidMeshError(
                f"triangle indices must lie in [0, {n}), got range "
                f"[{self._triangles.min()}, {self._triangles.max()}]"
            )
        t = self._triangles
        repeated = (t[:, 0] == t[:, 1]) | (t[:, 1] == t[:, 2]) | (t[:, 2] == t[:, 0])
        if np.any(repeated):
            first = int(np.flatnonzero(repeated)[0])
            raise InvalidMeshError(
                f"triangle {first} references the same vertex twice: "
                f"{t[first].tolist()}"
            )

    @property
    def positions(self) -> np.ndarray:
        """Vertex positions, shape (n, 3)."""
        return self._positions

    @property
    def normals(self) -> np.ndarray:
        """Vertex normals, shape (n, 3)."""
        return self._normals

    @property
    def uvs(self) -> np.ndarray:
        """Texture coordinates, shape (n, 2)."""
        return self._uvs

    @property
    def tangents(self) -> np.ndarray | None:
        """Tangents, shape (n, 4), or None if never assigned."""
        return self._tangents

    @property
    def triangles(self) -> np.ndarray:
        """Triangle indices, shape (m, 3)."""
        return self._triangles

    @property
    def indices(self) -> list[int]:
        """Flat triangle index list."""
        return self._triangles.reshape(-1).tolist()

    @property
    def n_vertices(self) -> int:
        """Number of vertices."""
        return len(self._positions)

    @property
    def n_triangles(self) -> int:
        """Number of triangles."""
        return len(self._triangles)

    @property
    def is_empty(self) -> bool:
        """Return True if the mesh has no vertices."""
        return len(self._positions) == 0

    @property
    def bounds(self) -> tuple[np.ndarray, np.ndarray]:
        """Axis-aligned bounding box as (min, max). Zeros for an empty mesh."""
        if self.is_empty:
            return np.zeros(3), np.zeros(3)
        return self._positions.min(axis=0), self._positions.max(axis=0)

    def copy(self) -> TriangleMesh:
        """Return a deep copy of this mesh."""
        return TriangleMesh(
            positions=self._positions,
            triangles=self._triangles,
            normals=self._normals,
            uvs=self._uvs,
            tangents=self._tangents,
        )

    def with_positions(self, positions: np.ndarray) -> TriangleMesh:
        """Return a copy with new positions and the same topology and attributes."""
        return TriangleMesh(
            positions=positions,
            triangles=self._triangles,
            normals=self._normals,
            uvs=self._uvs,
            tangents=self._tangents,
        )

    def recalculate_normals(self) -> None:
        """Recompute vertex normals from the triangles.

        Face normals are weighted by triangle area and accumulated per vertex
        index. Vertices not referenced by any triangle keep their normal.
        """
        if len(self._triangles) == 0:
            return
        face_normals = triangle_cross(self._positions, self._triangles)
        accumulated = np.zeros_like(self._positions)
        for corner in range(3):
            np.add.at(accumulated, self._triangles[:, corner], face_normals)

        lengths = np.linalg.norm(accumulated, axis=1)
        touched = lengths > 0.0
        self._normals = self._normals.copy()
        self._normals[touched] = accumulated[touched] / lengths[touched, None]
        self._normals.flags.writeable = False

    def recalculate_tangents(self) -> None:
        """Recompute tangents from positions, normals and UVs.

        Each tangent is orthogonalized against its vertex normal; ``w`` is the
        bitangent handedness (+1 or -1). Vertices whose UVs give no usable
        direction receive an arbitrary tangent perpendicular to the normal.
        """
        n = len(self._positions)
        tan = np.zeros((n, 3))
        bitan = np.zeros((n, 3))

        if len(self._triangles):
            t = self._triangles
            p0, p1, p2 = (self._positions[t[:, i]] for i in range(3))
            w0, w1, w2 = (self._uvs[t[:, i]] for i in range(3))
            e1, e2 = p1 - p0, p2 - p0
            d1, d2 = w1 - w0, w2 - w0

            det = d1[:, 0] * d2[:, 1] - d2[:, 0] * d1[:, 1]
            usable = np.abs(det) > 1e-20
            r = np.zeros_like(det)
            r[usable] = 1.0 / det[usable]

            sdir = (e1 * d2[:, 1:2] - e2 * d1[:, 1:2]) * r[:, None]
            tdir = (e2 * d1[:, 0:1] - e1 * d2[:, 0:1]) * r[:, None]
            for corner in range(3):
                np.add.at(tan, t[:, corner], sdir)
                np.add.at(bitan, t[:, corner], tdir)

        normals = normalize_rows(self._normals)
        tangent = tan - normals * np.sum(normals * tan, axis=1, keepdims=True)

        missing = np.linalg.norm(tangent, axis=1) <= 1e-12
        if np.any(missing):
            tangent[missing] = _any_perpendicular(normals[missing])
        tangent = normalize_rows(tangent)

        handedness = np.where(
            np.sum(np.cross(normals, tangent) * bitan, axis=1) < 0.0, -1.0, 1.0
        )
        self._tangents = _read_only(np.column_stack([tangent, handedness]))

    def set_tangents(self, tangents: np.ndarray) -> None:
        """Assign tangents, shape (n, 4)."""
        tangents = _as_rows(tangents, 4, "tangents")
        if len(tangents) != self.n_vertices:
            raise InvalidMeshError(
                f"tangents length ({len(tangents)}) must match "
                f"number of positions ({self.n_vertices})"
            )
        self._tangents = tangents

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TriangleMesh):
            return NotImplemented
        if (self._tangents is None) != (other._tangents is None):
            return False
        same_tangents = self._tangents is None or np.array_equal(
            self._tangents, other._tangents
        )
        return (
            same_tangents
            and np.array_equal(self._positions, other._positions)
            and np.array_equal(self._triangles, other._triangles)
            and np.array_equal(self._normals, other._normals)
            and np.array_equal(self._uvs, other._uvs)
        )

    __hash__ = None

    def __repr__(self) -> str:
        return (
            f"TriangleMesh(n_vertices={self.n_vertices}, "
            f"n_triangles={self.n_triangles})"
        )


def _as_rows(values, width: int, name: str) -> np.ndarray:
    array = np.array(values, dtype=float)
    if array.size == 0:
        return _read_only(np.zeros((0, width)))
    if array.ndim != 2 or array.shape[1] != width:
        raise InvalidMeshError(
            f"{name} must have shape (n, {width}), got {array.shape}"
        )
    return _read_only(array)


def _read_only(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


def _any_perpendicular(normals: np.ndarray) -> np.ndarray:
    # Cross with whichever axis is least aligned with the normal.
    axes = np.eye(3)[np.argmin(np.abs(normals), axis=1)]
    perpendicular = np.cross(normals, axes)
    # Zero normals fall back to +x.
    zero = np.linalg.norm(perpendicular, axis=1) <= 1e-12
    perpendicular[zero] = (1.0, 0.0, 0.0)
    return perpendicular
