"""Rigid object transforms used to evaluate normals in world space."""

from __future__ import annotations

from typing import Sequence

import numpy as np
from scipy.spatial.transform import Rotation

from snowcap.geometry.vectors import as_vector3


class ObjectTransform:
    """Position, rotation and scale of a scene object.

    Points are scaled, rotated, then translated. Directions are only rotated,
    so moving the pivot never changes how a normal is oriented.

    Args:
        position: World position of the object pivot.
        rotation: scipy ``Rotation``, a quaternion ``(x, y, z, w)`` or None for
            identity.
        scale: Per-axis scale factors.

    Example:
        >>> transform = ObjectTransform(
        ...     position=(10, 0, 0),
        ...     rotation=Rotation.from_euler("x", 90, degrees=True),
        ... )
        >>> transform.transform_directions([[0, 1, 0]]).round(6)
        array([[0., 0., 1.]])
    """

    def __init__(
        self,
        position: Sequence[float] = (0.0, 0.0, 0.0),
        rotation: Rotation | Sequence[float] | None = None,
        scale: Sequence[float] = (1.0, 1.0, 1.0),
    ):
        self._position = as_vector3(position, "position")
        if rotation is None:
            self._rotation = Rotation.identity()
        elif isinstance(rotation, Rotation):
            self._rotation = rotation
        else:
            self._rotation = Rotation.from_quat(np.asarray(rotation, dtype=float))
        self._scale = as_vector3(scale, "scale")

    @classmethod
    def identity(cls) -> ObjectTransform:
        """Return the identity transform at the origin."""
        return cls()

    @property
    def position(self) -> np.ndarray:
        """World position of the pivot."""
        return self._position.copy()

    @property
    def rotation(self) -> Rotation:
        """Object rotation."""
        return self._rotation

    @property
    def scale(self) -> np.ndarray:
        """Per-axis scale."""
        return self._scale.copy()

    def translated(self, offset: Sequence[float]) -> ObjectTransform:
        """Return a copy of this transform with the pivot moved by ``offset``."""
        return ObjectTransform(
            position=self._position + as_vector3(offset, "offset"),
            rotation=self._rotation,
            scale=self._scale,
        )

    def transform_points(self, points: np.ndarray) -> np.ndarray:
        """Map local points to world space, shape (n, 3)."""
        points = np.asarray(points, dtype=float).reshape(-1, 3)
        if len(points) == 0:
            return points.copy()
        return self._rotation.apply(points * self._scale) + self._position

    def transform_directions(self, directions: np.ndarray) -> np.ndarray:
        """Rotate local directions into world space, shape (n, 3)."""
        directions = np.asarray(directions, dtype=float).reshape(-1, 3)
        if len(directions) == 0:
            return directions.copy()
        return self._rotation.apply(directions)

    def __repr__(self) -> str:
        quat = np.round(self._rotation.as_quat(), 6).tolist()
        return (
            f"ObjectTransform(position={self._position.tolist()}, "
            f"rotation={quat}, scale={self._scale.tolist()})"
        )
