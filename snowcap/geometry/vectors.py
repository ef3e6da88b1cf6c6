"""Small vector helpers shared by the mesh stages."""

from __future__ import annotations

from typing import Sequence

import numpy as np

# Below this magnitude product a vector pair is treated as degenerate.
_ANGLE_EPSILON = 1e-15


def as_vector3(value: Sequence[float] | np.ndarray, name: str = "vector") -> np.ndarray:
    """Return ``value`` as a finite float array of shape (3,).

    Raises:
        ValueError: If ``value`` does not have exactly three finite components.
    """
    vector = np.asarray(value, dtype=float).reshape(-1)
    if vector.shape != (3,):
        raise ValueError(f"{name} must have 3 components, got {vector.shape[0]}")
    if not np.all(np.isfinite(vector)):
        raise ValueError(f"{name} contains NaN or infinite values")
    return vector


def normalize_rows(vectors: np.ndarray) -> np.ndarray:
    """Normalize each row to unit length. Zero rows are left as zeros."""
    vectors = np.asarray(vectors, dtype=float)
    lengths = np.linalg.norm(vectors, axis=-1, keepdims=True)
    safe = np.where(lengths > 0.0, lengths, 1.0)
    return vectors / safe


def angle_between(vectors: np.ndarray, direction: np.ndarray) -> np.ndarray:
    """Unsigned angle in degrees between each row of ``vectors`` and ``direction``.

    Pairs where either vector has zero length report an angle of 0.

    Args:
        vectors: Array of shape (n, 3).
        direction: Array of shape (3,). Need not be normalized.

    Returns:
        Angles in degrees, shape (n,).
    """
    vectors = np.asarray(vectors, dtype=float).reshape(-1, 3)
    direction = np.asarray(direction, dtype=float)

    denominator = np.linalg.norm(vectors, axis=1) * np.linalg.norm(direction)
    degenerate = denominator < _ANGLE_EPSILON
    safe = np.where(degenerate, 1.0, denominator)

    cosine = np.clip(vectors @ direction / safe, -1.0, 1.0)
    angles = np.degrees(np.arccos(cosine))
    angles[degenerate] = 0.0
    return angles


def triangle_cross(positions: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """Unnormalized face normals, ``(p1 - p0) x (p2 - p0)``, shape (m, 3)."""
    corners = positions[triangles]
    return np.cross(corners[:, 1] - corners[:, 0], corners[:, 2] - corners[:, 0])
