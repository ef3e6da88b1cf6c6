"""High-level SnowCapBuilder API for the snow cap pipeline."""

from __future__ import annotations

import logging
from typing import Sequence

from snowcap.config import CapSettings
from snowcap.exceptions import SnowcapError
from snowcap.geometry.transform import ObjectTransform
from snowcap.mesh.data import TriangleMesh
from snowcap.mesh.extraction import CapExtraction, SurfaceExtractor
from snowcap.mesh.extrusion import ExtrusionConfig, extrude_with_config
from snowcap.mesh.smoothing import smooth_laplacian
from snowcap.mesh.subdivision import subdivide

logger = logging.getLogger(__name__)


class SnowCapBuilder:
    """High-level API for building a snow layer on top of a mesh.

    Orchestrates the full pipeline:
    1. Extract the cap facing the extraction direction
    2. Extrude the cap into a shell along the same direction
    3. Subdivide the shell
    4. Relax it with Laplacian smoothing

    Every stage has a neutral default (45 degree cap facing +y, no
    extrusion, no subdivision, no smoothing), so ``build()`` can be called
    right away.

    Args:
        mesh: Source mesh of the object.
        transform: Object transform used to evaluate normals in world space.

    Example:
        >>> from snowcap import SnowCapBuilder
        >>> snow = (
        ...     SnowCapBuilder(rock_mesh)
        ...     .set_extraction(direction=(0, 1, 0), max_angle=40)
        ...     .set_extrusion(distance=0.1)
        ...     .set_subdivision(2)
        ...     .set_smoothing(factor=0.5, passes=3)
        ...     .build()
        ... )
    """

    def __init__(self, mesh: TriangleMesh, transform: ObjectTransform | None = None):
        if not isinstance(mesh, TriangleMesh):
            raise TypeError(f"mesh must be a TriangleMesh, got {type(mesh).__name__}")
        self._mesh = mesh
        self._transform = transform or ObjectTransform.identity()

        # Configuration (set via builder methods)
        self._direction: Sequence[float] = (0.0, 1.0, 0.0)
        self._max_angle = 45.0
        self._pivot_offset: Sequence[float] = (0.0, 0.0, 0.0)
        self._debug_rays = False
        self._extrude_distance = 0.0
        self._extrude_enabled = True
        self._subdivision_passes = 0
        self._smoothing_factor = 0.0
        self._smoothing_passes = 0

        # Generated objects (created during build)
        self._extraction: CapExtraction | None = None
        self._result: TriangleMesh | None = None

    @classmethod
    def from_settings(
        cls,
        mesh: TriangleMesh,
        settings: CapSettings,
        transform: ObjectTransform | None = None,
    ) -> SnowCapBuilder:
        """Create a builder configured from a settings record.

        Args:
            mesh: Source mesh of the object.
            settings: Pipeline parameters for the object.
            transform: Object transform; identity if None.

        Returns:
            Configured builder.
        """
        return (
            cls(mesh, transform)
            .set_extraction(
                direction=settings.extract_direction,
                max_angle=settings.extract_angle,
                pivot_offset=settings.pivot_offset,
                debug_rays=settings.debug_rays,
            )
            .set_extrusion(distance=settings.extrude_distance)
            .set_subdivision(settings.subdivision_passes)
            .set_smoothing(
                factor=settings.smoothness_factor,
                passes=settings.smoothness_passes,
            )
        )

    @property
    def mesh(self) -> TriangleMesh:
        """Return the source mesh."""
        return self._mesh

    @property
    def transform(self) -> ObjectTransform:
        """Return the object transform."""
        return self._transform

    @property
    def is_built(self) -> bool:
        """Return True once build() has run."""
        return self._result is not None

    def set_transform(self, transform: ObjectTransform) -> SnowCapBuilder:
        """Set the object transform.

        Returns:
            Self for method chaining.
        """
        self._transform = transform
        return self

    def set_extraction(
        self,
        direction: Sequence[float] = (0.0, 1.0, 0.0),
        max_angle: float = 45.0,
        pivot_offset: Sequence[float] = (0.0, 0.0, 0.0),
        debug_rays: bool = False,
    ) -> SnowCapBuilder:
        """Set the cap extraction parameters.

        Args:
            direction: Direction the cap faces. Also used for extrusion.
            max_angle: Selection threshold in degrees.
            pivot_offset: Offset of the pivot used to evaluate normals.
            debug_rays: Log the pivot-to-vertex ray of each selected vertex.

        Returns:
            Self for method chaining.
        """
        if max_angle < 0:
            raise ValueError("max_angle must be non-negative")
        self._direction = tuple(direction)
        self._max_angle = float(max_angle)
        self._pivot_offset = tuple(pivot_offset)
        self._debug_rays = debug_rays
        return self

    def set_extrusion(self, distance: float, enabled: bool = True) -> SnowCapBuilder:
        """Set the shell thickness.

        Args:
            distance: Extrusion distance along the extraction direction.
                Zero skips extrusion.
            enabled: If False, extrusion is skipped.

        Returns:
            Self for method chaining.
        """
        self._extrude_distance = float(distance)
        self._extrude_enabled = enabled
        return self

    def set_subdivision(self, passes: int) -> SnowCapBuilder:
        """Set the number of subdivision passes (clamped to [0, 6] on build).

        Returns:
            Self for method chaining.
        """
        self._subdivision_passes = passes
        return self

    def set_smoothing(self, factor: float, passes: int) -> SnowCapBuilder:
        """Set the Laplacian smoothing factor and pass count.

        Returns:
            Self for method chaining.
        """
        self._smoothing_factor = float(factor)
        self._smoothing_passes = passes
        return self

    def build(self) -> TriangleMesh:
        """Run the pipeline.

        Returns:
            The smoothed snow mesh. An empty cap yields an empty mesh.

        Raises:
            InvalidMeshError: If the source mesh is malformed.
            ValueError: If the extraction direction is zero or a pass count
                is not a whole number.
        """
        self._mesh.validate()

        extractor = SurfaceExtractor(
            direction=self._direction,
            max_angle=self._max_angle,
            pivot_offset=self._pivot_offset,
            transform=self._transform,
            debug_rays=self._debug_rays,
        )
        self._extraction = extractor.extract(self._mesh)
        if self._extraction.is_empty:
            logger.info(
                "No vertices within %.1f degrees of %s; snow mesh is empty",
                self._max_angle,
                list(self._direction),
            )

        config = ExtrusionConfig(
            direction=self._direction,
            distance=self._extrude_distance,
            enabled=self._extrude_enabled,
        )
        shell = extrude_with_config(
            self._extraction.mesh, config, self._extraction.boundary_edges
        )
        dense = subdivide(shell, self._subdivision_passes)
        self._result = smooth_laplacian(
            dense, self._smoothing_factor, self._smoothing_passes
        )
        return self._result

    def get_extraction(self) -> CapExtraction | None:
        """Return the cap extraction (available after build)."""
        return self._extraction

    def get_mesh_info(self) -> dict:
        """Return information about the configured pipeline and its result.

        Returns:
            Dictionary with the configuration and, after build, mesh
            statistics.
        """
        info = {
            "source_vertices": self._mesh.n_vertices,
            "source_triangles": self._mesh.n_triangles,
            "direction": list(self._direction),
            "max_angle": self._max_angle,
            "extrude_distance": self._extrude_distance,
            "subdivision_passes": self._subdivision_passes,
            "smoothing_factor": self._smoothing_factor,
            "smoothing_passes": self._smoothing_passes,
        }

        if self._extraction is not None:
            info["cap_vertices"] = self._extraction.mesh.n_vertices
            info["cap_triangles"] = self._extraction.mesh.n_triangles
            info["boundary_edges"] = len(self._extraction.boundary_edges)

        if self._result is not None:
            lower, upper = self._result.bounds
            info["n_vertices"] = self._result.n_vertices
            info["n_triangles"] = self._result.n_triangles
            info["bounds"] = (lower.tolist(), upper.tolist())

        return info

    def require_result(self) -> TriangleMesh:
        """Return the built mesh.

        Raises:
            SnowcapError: If build() has not been called.
        """
        if self._result is None:
            raise SnowcapError("Snow mesh not built. Call build() first.")
        return self._result
