"""Vertex adjacency keyed by position, for Laplacian smoothing."""

from __future__ import annotations

import numpy as np
from scipy import sparse

from snowcap.mesh.data import TriangleMesh
from snowcap.mesh.identity import PositionIndex

# For each triangle corner pair (a, b), b is recorded as a neighbour of a.
_NEIGHBOUR_PAIRS = ((0, 1), (0, 2), (1, 0), (1, 2), (2, 0), (2, 1))


class AdjacencyMap:
    """Multimap from a vertex position to the positions that share a triangle with it.

    Neighbours are counted once per incident triangle, so a neighbour reached
    through two triangles carries twice the weight. Vertices at the same
    position share one neighbour list.

    The map describes one snapshot of the mesh positions and goes stale as
    soon as any vertex moves.

    Args:
        index: Position grouping of the mesh vertices.
        counts: Sparse (k, k) matrix; entry (i, j) is how many times position
            j was recorded as a neighbour of position i.
    """

    def __init__(self, index: PositionIndex, counts: sparse.csr_matrix):
        self._index = index
        self._counts = counts
        self._degree = np.asarray(counts.sum(axis=1)).reshape(-1)

    @property
    def index(self) -> PositionIndex:
        """Position grouping the map is keyed by."""
        return self._index

    @property
    def counts(self) -> sparse.csr_matrix:
        """Neighbour incidence counts between distinct positions."""
        return self._counts

    def __len__(self) -> int:
        """Number of positions that have at least one neighbour."""
        return int(np.count_nonzero(self._degree))

    def __contains__(self, position) -> bool:
        position_id = self._index.find(position)
        return position_id is not None and self._degree[position_id] > 0

    def neighbors(self, position) -> np.ndarray:
        """Neighbour positions of ``position`` with multiplicity, shape (d, 3).

        Returns an empty array for positions without incident triangles.
        """
        position_id = self._index.find(position)
        if position_id is None:
            return np.zeros((0, 3))
        start, stop = self._counts.indptr[position_id : position_id + 2]
        columns = self._counts.indices[start:stop]
        repeats = self._counts.data[start:stop].astype(np.int64)
        return np.repeat(self._index.unique[columns], repeats, axis=0)

    def connected_mask(self) -> np.ndarray:
        """Boolean mask over mesh vertices that have at least one neighbour."""
        return self._degree[self._index.inverse] > 0

    def vertex_centroids(self) -> np.ndarray:
        """Neighbour centroid for every mesh vertex, shape (n, 3).

        Vertices without neighbours get their own position.
        """
        unique = self._index.unique
        safe_degree = np.where(self._degree > 0, self._degree, 1.0)
        centroids = (self._counts @ unique) / safe_degree[:, None]
        isolated = self._degree == 0
        centroids[isolated] = unique[isolated]
        return centroids[self._index.inverse]


def build_adjacency(mesh: TriangleMesh) -> AdjacencyMap:
    """Build the position-keyed adjacency map of ``mesh``.

    Args:
        mesh: Mesh whose current positions and triangles define adjacency.

    Returns:
        AdjacencyMap for this snapshot of the mesh.
    """
    index = PositionIndex(mesh.positions)
    k = len(index)
    ids = index.inverse[mesh.triangles].reshape(-1, 3)

    rows = np.concatenate([ids[:, a] for a, _ in _NEIGHBOUR_PAIRS])
    cols = np.concatenate([ids[:, b] for _, b in _NEIGHBOUR_PAIRS])

    # Duplicate (row, col) entries are summed, giving incidence counts.
    counts = sparse.coo_matrix(
        (np.ones(len(rows)), (rows, cols)), shape=(k, k)
    ).tocsr()
    counts.sum_duplicates()
    return AdjacencyMap(index, counts)
