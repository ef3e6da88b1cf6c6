"""Directional surface extraction.

Selects the part of a mesh whose normals point within a given angle of a
direction, and rebuilds it as a standalone cap mesh together with the edges
that run along the cap's open boundary.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, Sequence

import numpy as np

from snowcap.geometry.transform import ObjectTransform
from snowcap.geometry.vectors import angle_between, as_vector3
from snowcap.mesh.boundary import BoundaryClassifier, DirectedEdge
from snowcap.mesh.data import TriangleMesh
from snowcap.mesh.identity import PositionIndex, position_key

logger = logging.getLogger(__name__)


@dataclass
class VertexRecord:
    """Working data for one selected vertex position."""

    local_position: np.ndarray
    local_normal: np.ndarray
    world_position: np.ndarray
    world_normal: np.ndarray
    uv: np.ndarray
    angle: float
    original_index: int
    new_index: int = -1
    is_found: bool = False
    is_edge: bool = False


@dataclass
class CapExtraction:
    """Result of :meth:`SurfaceExtractor.extract`.

    Unpacks as ``(mesh, boundary_edges)``.
    """

    mesh: TriangleMesh
    boundary_edges: list[DirectedEdge]
    records: list[VertexRecord] = field(default_factory=list)
    classifier: BoundaryClassifier = field(default_factory=BoundaryClassifier)

    def __iter__(self) -> Iterator:
        yield self.mesh
        yield self.boundary_edges

    @property
    def is_empty(self) -> bool:
        return self.mesh.is_empty


class SurfaceExtractor:
    """Extracts the cap of a mesh facing a direction.

    A vertex is selected when the angle between its world-space normal and
    ``direction`` is strictly less than ``max_angle``. Normals are evaluated
    in a frame whose pivot is the object pivot moved by ``pivot_offset``,
    which helps with objects whose pivot sits far from the geometry.

    Vertices sharing a position are merged. When several selected copies
    share a position, the copy with the lowest index supplies the normal and
    UV of the merged vertex.

    Args:
        direction: Target direction. Any non-zero vector.
        max_angle: Selection threshold in degrees.
        pivot_offset: Offset applied to the pivot of the normal frame.
        transform: Object transform; identity if None.
        debug_rays: Log the pivot-to-vertex ray of each selected vertex.

    Example:
        >>> extractor = SurfaceExtractor(direction=(0, 1, 0), max_angle=45)
        >>> cap, edges = extractor.extract(mesh)
    """

    def __init__(
        self,
        direction: Sequence[float] = (0.0, 1.0, 0.0),
        max_angle: float = 45.0,
        pivot_offset: Sequence[float] = (0.0, 0.0, 0.0),
        transform: ObjectTransform | None = None,
        debug_rays: bool = False,
    ):
        self._direction = as_vector3(direction, "direction")
        if not np.any(self._direction):
            raise ValueError("direction must be a non-zero vector")
        self._max_angle = float(max_angle)
        self._pivot_offset = as_vector3(pivot_offset, "pivot_offset")
        self._transform = transform or ObjectTransform.identity()
        self._debug_rays = debug_rays

    @property
    def direction(self) -> np.ndarray:
        return self._direction.copy()

    @property
    def max_angle(self) -> float:
        return self._max_angle

    @property
    def pivot_offset(self) -> np.ndarray:
        return self._pivot_offset.copy()

    @property
    def normal_frame(self) -> ObjectTransform:
        """Object transform with its pivot moved by the pivot offset."""
        return self._transform.translated(self._pivot_offset)

    def extract(self, mesh: TriangleMesh) -> CapExtraction:
        """Extract the cap of ``mesh``.

        Args:
            mesh: Source mesh.

        Returns:
            CapExtraction with the reindexed cap mesh, its boundary edges,
            the selected vertex records and the edge classifier. An empty
            selection gives an empty mesh and no edges.
        """
        classifier = BoundaryClassifier()
        if mesh.is_empty:
            return CapExtraction(TriangleMesh.empty(), [], [], classifier)

        frame = self.normal_frame
        world_normals = frame.transform_directions(mesh.normals)
        angles = angle_between(world_normals, self._direction)
        selected = angles < self._max_angle

        index = PositionIndex(mesh.positions)
        n = mesh.n_vertices

        # Lowest selected vertex index at each position; n marks "none".
        representative = np.full(len(index), n, dtype=np.int64)
        selected_vertices = np.flatnonzero(selected)
        np.minimum.at(
            representative, index.inverse[selected_vertices], selected_vertices
        )

        found_ids = np.flatnonzero(representative < n)
        found_ids = found_ids[np.argsort(representative[found_ids], kind="stable")]
        source = representative[found_ids]

        new_index = np.full(len(index), -1, dtype=np.int64)
        new_index[found_ids] = np.arange(len(found_ids))

        corner_ids = index.inverse[mesh.triangles].reshape(-1, 3)
        corner_new = new_index[corner_ids]
        corner_found = corner_new >= 0
        hits = corner_found.sum(axis=1)

        for t in np.flatnonzero(hits >= 2):
            classifier.add_triangle(index.unique[corner_ids[t]], corner_found[t])

        full = corner_new[hits == 3]
        distinct = (
            (full[:, 0] != full[:, 1])
            & (full[:, 1] != full[:, 2])
            & (full[:, 2] != full[:, 0])
        )
        if not np.all(distinct):
            logger.debug(
                "Dropping %d cap triangles collapsed by position merging",
                int(np.count_nonzero(~distinct)),
            )

        cap = TriangleMesh(
            positions=mesh.positions[source],
            triangles=full[distinct],
            normals=mesh.normals[source],
            uvs=mesh.uvs[source],
        )
        boundary_edges = classifier.boundary_edges()
        records = self._build_records(mesh, source, world_normals, angles, boundary_edges)

        logger.debug(
            "Extracted %d of %d vertices, %d of %d triangles, %d boundary edges",
            cap.n_vertices,
            n,
            cap.n_triangles,
            mesh.n_triangles,
            len(boundary_edges),
        )
        return CapExtraction(cap, boundary_edges, records, classifier)

    def _build_records(
        self,
        mesh: TriangleMesh,
        source: np.ndarray,
        world_normals: np.ndarray,
        angles: np.ndarray,
        boundary_edges: list[DirectedEdge],
    ) -> list[VertexRecord]:
        edge_positions = {p for edge in boundary_edges for p in (edge.start, edge.end)}
        world_positions = self._transform.transform_points(mesh.positions[source])
        pivot = self.normal_frame.position

        records = []
        for new, (original, world) in enumerate(zip(source, world_positions)):
            record = VertexRecord(
                local_position=mesh.positions[original].copy(),
                local_normal=mesh.normals[original].copy(),
                world_position=world,
                world_normal=world_normals[original],
                uv=mesh.uvs[original].copy(),
                angle=float(angles[original]),
                original_index=int(original),
                new_index=new,
                is_found=True,
                is_edge=position_key(mesh.positions[original]) in edge_positions,
            )
            records.append(record)
            if self._debug_rays:
                logger.debug(
                    "Ray from pivot %s to vertex %d at %s (angle %.2f)",
                    pivot.tolist(),
                    record.original_index,
                    world.tolist(),
                    record.angle,
                )
        return records


def extract_cap(
    mesh: TriangleMesh,
    direction: Sequence[float],
    max_angle: float,
    pivot_offset: Sequence[float] = (0.0, 0.0, 0.0),
    transform: ObjectTransform | None = None,
) -> tuple[TriangleMesh, list[DirectedEdge]]:
    """Convenience function to extract a cap and its boundary edges.

    Args:
        mesh: Source mesh.
        direction: Target direction.
        max_angle: Selection threshold in degrees.
        pivot_offset: Offset applied to the pivot of the normal frame.
        transform: Object transform; identity if None.

    Returns:
        Tuple of (cap mesh, boundary edges).
    """
    extractor = SurfaceExtractor(direction, max_angle, pivot_offset, transform)
    result = extractor.extract(mesh)
    return result.mesh, result.boundary_edges
