"""Mesh processing stages of the snow cap pipeline."""

from snowcap.mesh.adjacency import AdjacencyMap, build_adjacency
from snowcap.mesh.boundary import BoundaryClassifier, DirectedEdge, canonical_key
from snowcap.mesh.builder import SnowCapBuilder
from snowcap.mesh.data import TriangleMesh
from snowcap.mesh.extraction import CapExtraction, SurfaceExtractor, extract_cap
from snowcap.mesh.extrusion import ExtrusionConfig, WallCorner, extrude
from snowcap.mesh.heightfield import build_height_field_grid, build_terrain_patch
from snowcap.mesh.identity import PositionIndex, position_key
from snowcap.mesh.smoothing import smooth_laplacian
from snowcap.mesh.subdivision import MAX_SUBDIVISION_PASSES, subdivide

__all__ = [
    "AdjacencyMap",
    "BoundaryClassifier",
    "CapExtraction",
    "DirectedEdge",
    "ExtrusionConfig",
    "MAX_SUBDIVISION_PASSES",
    "PositionIndex",
    "SnowCapBuilder",
    "SurfaceExtractor",
    "TriangleMesh",
    "WallCorner",
    "build_adjacency",
    "build_height_field_grid",
    "build_terrain_patch",
    "canonical_key",
    "extract_cap",
    "extrude",
    "position_key",
    "smooth_laplacian",
    "subdivide",
]
