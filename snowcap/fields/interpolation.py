"""Height samplers for the terrain patch builder."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Literal, Protocol, runtime_checkable

import numpy as np
from scipy.interpolate import RegularGridInterpolator
from scipy.spatial import cKDTree

from snowcap.exceptions import InterpolationError

if TYPE_CHECKING:
    from snowcap.io.readers import SpatialData


@runtime_checkable
class HeightSampler(Protocol):
    """Anything that can report terrain height at world (x, z) positions."""

    def sample_height(self, x: np.ndarray, z: np.ndarray) -> np.ndarray:
        """Return heights for matching arrays of x and z coordinates."""
        ...


class FlatHeightField:
    """Constant height everywhere."""

    def __init__(self, height: float = 0.0):
        self.height = float(height)

    def sample_height(self, x: np.ndarray, z: np.ndarray) -> np.ndarray:
        return np.full(np.broadcast(np.asarray(x), np.asarray(z)).shape, self.height)

    def __repr__(self) -> str:
        return f"FlatHeightField(height={self.height})"


class CallableHeightField:
    """Wraps a scalar function ``f(x, z) -> height``."""

    def __init__(self, func: Callable[[float, float], float]):
        self._func = np.vectorize(func, otypes=[float])

    def sample_height(self, x: np.ndarray, z: np.ndarray) -> np.ndarray:
        return self._func(np.asarray(x, dtype=float), np.asarray(z, dtype=float))


class GridHeightField:
    """Bilinear heights over a regular grid, as produced by terrain height maps.

    Args:
        heights: Height values, shape (nz, nx); row i is z = origin_z + i * spacing.
        origin: World (x, z) of ``heights[0, 0]``.
        spacing: Distance between neighbouring samples.
        fill_value: Height outside the grid. If None, values are extrapolated
            from the nearest edge.

    Example:
        >>> field = GridHeightField(np.array([[0.0, 1.0], [2.0, 3.0]]))
        >>> float(field.sample_height(0.5, 0.5))
        1.5
    """

    def __init__(
        self,
        heights: np.ndarray,
        origin: tuple[float, float] = (0.0, 0.0),
        spacing: float = 1.0,
        fill_value: float | None = None,
    ):
        heights = np.asarray(heights, dtype=float)
        if heights.ndim != 2 or min(heights.shape) < 2:
            raise InterpolationError(
                f"heights must be a 2D grid of at least 2x2 samples, got {heights.shape}"
            )
        if spacing <= 0:
            raise InterpolationError("spacing must be positive")

        nz, nx = heights.shape
        self._origin = (float(origin[0]), float(origin[1]))
        self._spacing = float(spacing)
        z_axis = self._origin[1] + self._spacing * np.arange(nz)
        x_axis = self._origin[0] + self._spacing * np.arange(nx)
        self._interp = RegularGridInterpolator(
            (z_axis, x_axis),
            heights,
            method="linear",
            bounds_error=False,
            fill_value=fill_value,
        )
        self._clamp = fill_value is None
        self._z_range = (z_axis[0], z_axis[-1])
        self._x_range = (x_axis[0], x_axis[-1])

    def sample_height(self, x: np.ndarray, z: np.ndarray) -> np.ndarray:
        x, z = np.broadcast_arrays(np.asarray(x, dtype=float), np.asarray(z, dtype=float))
        if self._clamp:
            x = np.clip(x, *self._x_range)
            z = np.clip(z, *self._z_range)
        points = np.column_stack([z.reshape(-1), x.reshape(-1)])
        return self._interp(points).reshape(x.shape)


class ScatteredHeightField:
    """Heights interpolated from scattered (x, z) samples using cKDTree.

    Supports nearest neighbor and inverse distance weighting (IDW).

    Args:
        source_coords: Sample positions as (x, z), shape (n, 2).
        source_values: Heights at the samples, shape (n,).
        method: 'nearest' or 'idw'.
        k: Number of neighbours for IDW.
        power: Distance power for IDW.

    Example:
        >>> field = ScatteredHeightField(coords, heights, method="idw", k=4)
        >>> field.sample_height(x_grid, z_grid)
    """

    def __init__(
        self,
        source_coords: np.ndarray,
        source_values: np.ndarray,
        method: Literal["nearest", "idw"] = "idw",
        k: int = 4,
        power: float = 2.0,
    ):
        self._coords = np.asarray(source_coords, dtype=float)
        self._values = np.asarray(source_values, dtype=float)

        if self._coords.ndim != 2 or self._coords.shape[1] != 2:
            raise InterpolationError("source_coords must have shape (n, 2)")
        if self._values.ndim != 1:
            raise InterpolationError("source_values must be 1D array")
        if len(self._coords) != len(self._values):
            raise InterpolationError(
                f"coords and values must have same length, "
                f"got {len(self._coords)} and {len(self._values)}"
            )
        if len(self._values) == 0:
            raise InterpolationError("at least one height sample is required")
        if method not in ("nearest", "idw"):
            raise InterpolationError(
                f"Unknown interpolation method: {method}. "
                f"Supported methods: 'nearest', 'idw'"
            )

        self._method = method
        self._k = k
        self._power = power
        self._tree = cKDTree(self._coords)

    @classmethod
    def from_spatial_data(cls, data: SpatialData, **kwargs) -> ScatteredHeightField:
        """Create a height field from loaded height samples.

        Args:
            data: SpatialData with (x, z) coordinates and height values.
            **kwargs: Passed to the constructor.
        """
        return cls(data.coords, data.values, **kwargs)

    @property
    def n_points(self) -> int:
        """Number of height samples."""
        return len(self._values)

    def nearest(self, points: np.ndarray) -> np.ndarray:
        """Nearest-sample heights for points of shape (m, 2)."""
        _, indices = self._tree.query(points, k=1)
        return self._values[indices]

    def idw(self, points: np.ndarray, eps: float = 1e-12) -> np.ndarray:
        """Inverse distance weighted heights for points of shape (m, 2)."""
        k = min(self._k, self.n_points)
        distances, indices = self._tree.query(points, k=k)

        # Handle case when k=1
        if k == 1:
            distances = distances.reshape(-1, 1)
            indices = indices.reshape(-1, 1)

        weights = 1.0 / (distances**self._power + eps)
        weights = weights / weights.sum(axis=1, keepdims=True)
        return (weights * self._values[indices]).sum(axis=1)

    def sample_height(self, x: np.ndarray, z: np.ndarray) -> np.ndarray:
        x, z = np.broadcast_arrays(np.asarray(x, dtype=float), np.asarray(z, dtype=float))
        points = np.column_stack([x.reshape(-1), z.reshape(-1)])
        if self._method == "nearest":
            heights = self.nearest(points)
        else:
            heights = self.idw(points)
        return heights.reshape(x.shape)
