"""
Tests for directional cap extraction.
"""

import logging

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal
from scipy.spatial.transform import Rotation

from snowcap.geometry.transform import ObjectTransform
from snowcap.mesh.boundary import DirectedEdge
from snowcap.mesh.data import TriangleMesh
from snowcap.mesh.extraction import SurfaceExtractor, extract_cap


class TestExtractCap:
    """Tests for vertex selection and reindexing."""

    def test_box_top_face(self, box):
        cap, edges = extract_cap(box, (0, 1, 0), 45)
        assert cap.n_vertices == 4
        assert cap.n_triangles == 2
        assert_array_equal(cap.positions, box.positions[:4])
        assert_array_equal(cap.triangles, [[0, 1, 2], [0, 2, 3]])
        assert_allclose(cap.normals, np.tile([0.0, 1.0, 0.0], (4, 1)))
        assert edges == []

    def test_zero_angle_selects_nothing(self, box):
        cap, edges = extract_cap(box, (0, 1, 0), 0)
        assert cap.is_empty
        assert cap.n_triangles == 0
        assert edges == []

    def test_wide_angle_merges_positions(self, box):
        # Side faces reach every corner, so the bottom face is complete too.
        cap, edges = extract_cap(box, (0, 1, 0), 91)
        assert cap.n_vertices == 8
        assert cap.n_triangles == 12
        assert edges == []

    def test_direction_length_does_not_matter(self, box):
        short, _ = extract_cap(box, (0, 1, 0), 45)
        long, _ = extract_cap(box, (0, 25, 0), 45)
        assert short == long

    def test_side_direction(self, box):
        cap, _ = extract_cap(box, (1, 0, 0), 10)
        assert cap.n_vertices == 4
        assert_allclose(cap.positions[:, 0], 1.0)

    def test_empty_mesh(self):
        cap, edges = extract_cap(TriangleMesh.empty(), (0, 1, 0), 45)
        assert cap.is_empty
        assert edges == []

    def test_zero_direction(self, box):
        with pytest.raises(ValueError):
            extract_cap(box, (0, 0, 0), 45)

    def test_lowest_index_supplies_normal_and_uv(self):
        mesh = TriangleMesh(
            positions=[(0, 0, 0), (0, 0, 1), (1, 0, 0), (0, 0, 0)],
            triangles=[0, 1, 2],
            normals=[(0, 1, 0), (0, 1, 0), (0, 1, 0), (0.1, 1, 0)],
            uvs=[(0, 0), (0, 1), (1, 0), (0.5, 0.5)],
        )
        cap, _ = extract_cap(mesh, (0, 1, 0), 45)
        assert cap.n_vertices == 3
        assert_array_equal(cap.uvs[0], (0, 0))

    def test_unselected_copy_does_not_block_selected_copy(self):
        mesh = TriangleMesh(
            positions=[(0, 0, 0), (0, 0, 1), (1, 0, 0), (0, 0, 0)],
            triangles=[0, 1, 2],
            normals=[(1, 0, 0), (0, 1, 0), (0, 1, 0), (0, 1, 0)],
            uvs=[(0, 0), (0, 1), (1, 0), (0.5, 0.5)],
        )
        cap, _ = extract_cap(mesh, (0, 1, 0), 45)
        assert cap.n_triangles == 1
        # Output order follows the representative's original index.
        assert_array_equal(cap.positions, [(0, 0, 1), (1, 0, 0), (0, 0, 0)])
        assert_array_equal(cap.uvs[2], (0.5, 0.5))
        assert_array_equal(cap.triangles, [[2, 0, 1]])


class TestBoundaryEdges:
    """Tests for the boundary edges produced during extraction."""

    def test_box_candidates_are_all_interior(self, box):
        result = SurfaceExtractor((0, 1, 0), 45).extract(box)
        assert len(result.classifier.candidates) == 4
        assert result.boundary_edges == []
        for edge in result.classifier.candidates:
            assert result.classifier.is_interior(edge.start, edge.end)

    def test_ridge_keeps_both_directions(self, ridge):
        result = SurfaceExtractor((0, 1, 0), 45).extract(ridge)
        assert result.mesh.n_vertices == 2
        assert result.mesh.n_triangles == 0
        assert result.boundary_edges == [
            DirectedEdge((0.0, 1.0, 0.0), (0.0, 1.0, 1.0)),
            DirectedEdge((0.0, 1.0, 1.0), (0.0, 1.0, 0.0)),
        ]

    def test_edge_flags_on_records(self, ridge):
        result = SurfaceExtractor((0, 1, 0), 45).extract(ridge)
        assert [record.original_index for record in result.records] == [0, 1]
        assert [record.new_index for record in result.records] == [0, 1]
        assert all(record.is_edge and record.is_found for record in result.records)


class TestTransforms:
    """Tests for world-space evaluation of normals."""

    def test_rotation_changes_selection(self, box):
        upside_down = ObjectTransform(rotation=Rotation.from_euler("x", 180, degrees=True))
        cap, _ = extract_cap(box, (0, 1, 0), 45, transform=upside_down)
        # The former bottom face now faces +y; the cap keeps local positions.
        assert cap.n_vertices == 4
        assert_allclose(cap.positions[:, 1], 0.0)

    def test_pivot_offset_does_not_change_selection(self, box):
        plain, _ = extract_cap(box, (0, 1, 0), 45)
        shifted, _ = extract_cap(box, (0, 1, 0), 45, pivot_offset=(100, -50, 3))
        assert plain == shifted

    def test_debug_rays_are_logged(self, box, caplog):
        extractor = SurfaceExtractor((0, 1, 0), 45, pivot_offset=(0, 1, 0), debug_rays=True)
        with caplog.at_level(logging.DEBUG, logger="snowcap"):
            extractor.extract(box)
        rays = [r for r in caplog.records if "Ray from pivot" in r.getMessage()]
        assert len(rays) == 4

    def test_records_hold_world_positions(self, box):
        transform = ObjectTransform(position=(10, 0, 0))
        result = SurfaceExtractor((0, 1, 0), 45, transform=transform).extract(box)
        assert_allclose(result.records[0].world_position, box.positions[0] + (10, 0, 0))
        assert_allclose(result.records[0].local_position, box.positions[0])
