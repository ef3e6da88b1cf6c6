"""
Tests for position identity and position-keyed adjacency.
"""

import numpy as np
from numpy.testing import assert_allclose, assert_array_equal

from snowcap.mesh.adjacency import build_adjacency
from snowcap.mesh.data import TriangleMesh
from snowcap.mesh.identity import PositionIndex, position_key


class TestPositionIndex:
    """Tests for grouping vertices by exact position."""

    def test_duplicates_share_an_id(self, box):
        index = PositionIndex(box.positions)
        assert len(index) == 8
        assert_array_equal(index.unique[index.inverse], box.positions)

    def test_first_index_is_lowest_vertex(self):
        index = PositionIndex(np.array([(1.0, 0, 0), (0.0, 0, 0), (1.0, 0, 0)]))
        position_id = index.find((1, 0, 0))
        assert index.first_index[position_id] == 0

    def test_find_and_contains(self, unit_square):
        index = PositionIndex(unit_square.positions)
        assert (1, 0, 1) in index
        assert (0.5, 0, 0.5) not in index
        assert index.key(index.find((1, 0, 1))) == (1.0, 0.0, 1.0)

    def test_nearby_positions_stay_distinct(self):
        index = PositionIndex(np.array([(0.0, 0, 0), (1e-12, 0, 0)]))
        assert len(index) == 2

    def test_empty_positions(self):
        index = PositionIndex(np.zeros((0, 3)))
        assert len(index) == 0
        assert index.find((0, 0, 0)) is None

    def test_position_key_is_hashable_tuple(self):
        key = position_key(np.array([1, 2, 3]))
        assert key == (1.0, 2.0, 3.0)
        assert {key: "a"}[(1.0, 2.0, 3.0)] == "a"


class TestAdjacencyMap:
    """Tests for build_adjacency."""

    def test_neighbours_counted_per_incident_triangle(self, unit_square):
        adjacency = build_adjacency(unit_square)
        neighbours = adjacency.neighbors((0, 0, 1))
        assert len(neighbours) == 4
        keys = sorted(position_key(p) for p in neighbours)
        assert keys == [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (1.0, 0.0, 0.0), (1.0, 0.0, 1.0)]

    def test_centroids(self, unit_square):
        centroids = build_adjacency(unit_square).vertex_centroids()
        assert_allclose(centroids[0], (0.5, 0.0, 0.5))
        assert_allclose(centroids[3], (0.75, 0.0, 0.25))

    def test_split_vertices_share_neighbours(self, box):
        adjacency = build_adjacency(box)
        centroids = adjacency.vertex_centroids()
        index = adjacency.index
        for position_id in range(len(index)):
            copies = np.flatnonzero(index.inverse == position_id)
            assert len(copies) == 3
            assert_allclose(centroids[copies], np.repeat(centroids[copies[:1]], 3, axis=0))

    def test_isolated_vertex(self):
        mesh = TriangleMesh(
            positions=[(0, 0, 0), (0, 0, 1), (1, 0, 0), (5, 5, 5)],
            triangles=[0, 1, 2],
        )
        adjacency = build_adjacency(mesh)
        assert len(adjacency) == 3
        assert (5, 5, 5) not in adjacency
        assert (0, 0, 0) in adjacency
        assert_array_equal(adjacency.connected_mask(), [True, True, True, False])
        assert len(adjacency.neighbors((5, 5, 5))) == 0
        assert_array_equal(adjacency.vertex_centroids()[3], (5, 5, 5))

    def test_unknown_position_has_no_neighbours(self, unit_square):
        assert build_adjacency(unit_square).neighbors((7, 7, 7)).shape == (0, 3)
