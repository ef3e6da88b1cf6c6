"""
Tests for the SnowCapBuilder pipeline.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from snowcap.config import CapSettings
from snowcap.exceptions import InvalidMeshError, ParameterClampWarning, SnowcapError
from snowcap.mesh.builder import SnowCapBuilder
from snowcap.mesh.extraction import extract_cap
from snowcap.mesh.extrusion import extrude
from snowcap.mesh.smoothing import smooth_laplacian
from snowcap.mesh.subdivision import subdivide


class TestSnowCapBuilder:
    """Tests for configuring and running the pipeline."""

    def test_default_build_extracts_top(self, box):
        snow = SnowCapBuilder(box).build()
        assert snow.n_vertices == 4
        assert snow.n_triangles == 2

    def test_chained_pipeline_matches_stages(self, ridge):
        snow = (
            SnowCapBuilder(ridge)
            .set_extraction(direction=(0, 1, 0), max_angle=45)
            .set_extrusion(distance=0.5)
            .set_subdivision(1)
            .set_smoothing(factor=0.3, passes=2)
            .build()
        )
        cap, edges = extract_cap(ridge, (0, 1, 0), 45)
        expected = smooth_laplacian(subdivide(extrude(cap, (0, 1, 0), 0.5, edges), 1), 0.3, 2)
        assert snow == expected

    def test_extrusion_on_box(self, box):
        snow = SnowCapBuilder(box).set_extrusion(distance=0.1).build()
        # No boundary survives on a closed box, so only top and bottom remain.
        assert snow.n_vertices == 8
        assert snow.n_triangles == 4
        assert_allclose(snow.bounds[1], (1.0, 1.1, 1.0))

    def test_disabled_extrusion(self, box):
        snow = SnowCapBuilder(box).set_extrusion(distance=0.1, enabled=False).build()
        assert snow.n_vertices == 4

    def test_empty_selection(self, box):
        snow = (
            SnowCapBuilder(box)
            .set_extraction(max_angle=0)
            .set_extrusion(distance=1.0)
            .set_subdivision(2)
            .set_smoothing(factor=0.5, passes=2)
            .build()
        )
        assert snow.is_empty

    def test_from_settings(self, box):
        settings = CapSettings(
            top_level_name="Box",
            extract_angle=45,
            extrude_distance=0.25,
            subdivision_passes=1,
            smoothness_passes=0,
        )
        builder = SnowCapBuilder.from_settings(box, settings)
        snow = builder.build()
        assert snow.n_triangles == 4 * 4
        info = builder.get_mesh_info()
        assert info["extrude_distance"] == 0.25
        assert info["cap_triangles"] == 2
        assert info["n_triangles"] == 16

    def test_clamped_subdivision_warns(self, unit_square):
        with pytest.warns(ParameterClampWarning):
            SnowCapBuilder(unit_square).set_subdivision(-1).build()

    def test_get_extraction(self, ridge):
        builder = SnowCapBuilder(ridge)
        assert builder.get_extraction() is None
        builder.build()
        extraction = builder.get_extraction()
        assert len(extraction.boundary_edges) == 2

    def test_mesh_info_before_build(self, box):
        info = SnowCapBuilder(box).get_mesh_info()
        assert info["source_triangles"] == 12
        assert "n_triangles" not in info

    def test_require_result(self, box):
        builder = SnowCapBuilder(box)
        assert not builder.is_built
        with pytest.raises(SnowcapError):
            builder.require_result()
        snow = builder.build()
        assert builder.require_result() is snow

    def test_rejects_non_mesh(self):
        with pytest.raises(TypeError):
            SnowCapBuilder([(0, 0, 0)])

    def test_negative_angle(self, box):
        with pytest.raises(ValueError):
            SnowCapBuilder(box).set_extraction(max_angle=-1)

    def test_invalid_mesh_surfaces(self, unit_square):
        # Corrupt the mesh after construction to reach the build-time check.
        unit_square._triangles = np.array([[99, 3, 1], [1, 3, 2]])
        with pytest.raises(InvalidMeshError):
            SnowCapBuilder(unit_square).build()
