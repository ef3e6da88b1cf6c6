"""
Tests for TriangleMesh and the vector helpers it relies on.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from snowcap.exceptions import InvalidMeshError
from snowcap.geometry.vectors import angle_between, as_vector3, normalize_rows
from snowcap.mesh.data import TriangleMesh


class TestTriangleMeshConstruction:
    """Tests for building and validating meshes."""

    def test_flat_and_nested_triangles_agree(self, unit_square):
        nested = TriangleMesh(
            positions=unit_square.positions,
            triangles=[(0, 3, 1), (1, 3, 2)],
            uvs=unit_square.uvs,
        )
        assert nested == unit_square
        assert unit_square.indices == [0, 3, 1, 1, 3, 2]

    def test_missing_normals_are_computed(self, unit_square):
        assert_allclose(unit_square.normals, np.tile([0.0, 1.0, 0.0], (4, 1)))

    def test_missing_uvs_default_to_zero(self):
        mesh = TriangleMesh(positions=[(0, 0, 0), (0, 0, 1), (1, 0, 0)], triangles=[0, 1, 2])
        assert_array_equal(mesh.uvs, np.zeros((3, 2)))

    def test_index_count_not_multiple_of_three(self):
        with pytest.raises(InvalidMeshError):
            TriangleMesh(positions=[(0, 0, 0), (1, 0, 0), (0, 0, 1)], triangles=[0, 1])

    def test_out_of_range_index(self):
        with pytest.raises(InvalidMeshError):
            TriangleMesh(positions=[(0, 0, 0), (1, 0, 0), (0, 0, 1)], triangles=[0, 1, 3])

    def test_repeated_index_in_triangle(self):
        with pytest.raises(InvalidMeshError):
            TriangleMesh(positions=[(0, 0, 0), (1, 0, 0), (0, 0, 1)], triangles=[0, 1, 1])

    def test_mismatched_normals_length(self):
        with pytest.raises(InvalidMeshError):
            TriangleMesh(
                positions=[(0, 0, 0), (1, 0, 0), (0, 0, 1)],
                triangles=[0, 2, 1],
                normals=[(0, 1, 0)],
            )

    def test_non_finite_positions(self):
        with pytest.raises(InvalidMeshError):
            TriangleMesh(positions=[(0, 0, 0), (np.nan, 0, 0), (0, 0, 1)], triangles=[0, 2, 1])

    def test_invalid_mesh_error_is_value_error(self):
        assert issubclass(InvalidMeshError, ValueError)

    def test_empty_mesh(self):
        mesh = TriangleMesh.empty()
        assert mesh.is_empty
        assert mesh.n_triangles == 0
        lower, upper = mesh.bounds
        assert_array_equal(lower, np.zeros(3))
        assert_array_equal(upper, np.zeros(3))

    def test_inputs_are_copied(self):
        positions = np.array([(0.0, 0.0, 0.0), (0.0, 0.0, 1.0), (1.0, 0.0, 0.0)])
        mesh = TriangleMesh(positions=positions, triangles=[0, 1, 2])
        positions[0] = (9.0, 9.0, 9.0)
        assert_array_equal(mesh.positions[0], (0.0, 0.0, 0.0))

    def test_stored_arrays_are_read_only(self, unit_square):
        unit_square.recalculate_normals()
        unit_square.recalculate_tangents()
        for array in (
            unit_square.positions,
            unit_square.normals,
            unit_square.uvs,
            unit_square.tangents,
            unit_square.triangles,
        ):
            with pytest.raises(ValueError):
                array[0] = 0

    def test_derived_mesh_does_not_share_storage(self, unit_square):
        moved = unit_square.with_positions(unit_square.positions + 1.0)
        assert not np.shares_memory(moved.normals, unit_square.normals)
        assert not np.shares_memory(moved.triangles, unit_square.triangles)


class TestTriangleMeshAttributes:
    """Tests for derived data on meshes."""

    def test_bounds(self, box):
        lower, upper = box.bounds
        assert_array_equal(lower, (0, 0, 0))
        assert_array_equal(upper, (1, 1, 1))

    def test_recalculate_normals_keeps_unreferenced_normals(self):
        mesh = TriangleMesh(
            positions=[(0, 0, 0), (0, 0, 1), (1, 0, 0), (5, 5, 5)],
            triangles=[0, 1, 2],
            normals=[(1, 0, 0)] * 4,
        )
        mesh.recalculate_normals()
        assert_allclose(mesh.normals[:3], np.tile([0.0, 1.0, 0.0], (3, 1)))
        assert_array_equal(mesh.normals[3], (1, 0, 0))

    def test_recalculate_tangents_is_orthonormal(self, box):
        box.recalculate_tangents()
        tangents = box.tangents
        assert tangents.shape == (24, 4)
        assert_allclose(np.linalg.norm(tangents[:, :3], axis=1), 1.0)
        assert_allclose(np.sum(tangents[:, :3] * box.normals, axis=1), 0.0, atol=1e-12)
        assert set(np.unique(tangents[:, 3])) <= {-1.0, 1.0}

    def test_tangents_follow_u_direction(self, unit_square):
        unit_square.recalculate_tangents()
        assert_allclose(unit_square.tangents[:, :3], np.tile([1.0, 0.0, 0.0], (4, 1)))

    def test_set_tangents_checks_length(self, unit_square):
        with pytest.raises(InvalidMeshError):
            unit_square.set_tangents(np.zeros((3, 4)))

    def test_with_positions_keeps_topology(self, unit_square):
        moved = unit_square.with_positions(unit_square.positions + 1.0)
        assert_array_equal(moved.triangles, unit_square.triangles)
        assert_array_equal(moved.uvs, unit_square.uvs)
        assert_array_equal(moved.positions, unit_square.positions + 1.0)

    def test_copy_is_independent(self, unit_square):
        duplicate = unit_square.copy()
        assert duplicate == unit_square
        assert duplicate is not unit_square
        duplicate.set_tangents(np.zeros((4, 4)))
        assert unit_square.tangents is None
        assert duplicate != unit_square


class TestVectorHelpers:
    """Tests for small vector helpers."""

    def test_as_vector3_rejects_wrong_length(self):
        with pytest.raises(ValueError):
            as_vector3((1, 2))

    def test_as_vector3_rejects_nan(self):
        with pytest.raises(ValueError):
            as_vector3((1, np.nan, 0))

    def test_normalize_rows_leaves_zero_rows(self):
        result = normalize_rows(np.array([[3.0, 0.0, 4.0], [0.0, 0.0, 0.0]]))
        assert_allclose(result, [[0.6, 0.0, 0.8], [0.0, 0.0, 0.0]])

    def test_angle_between_ignores_direction_length(self):
        angles = angle_between(np.array([[0, 1, 0], [1, 0, 0], [0, -2, 0]]), np.array([0, 5, 0]))
        assert_allclose(angles, [0.0, 90.0, 180.0])

    def test_angle_between_zero_vector(self):
        assert angle_between(np.zeros((1, 3)), np.array([0, 1, 0]))[0] == 0.0
