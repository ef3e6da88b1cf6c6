"""Geometry utilities."""

from snowcap.geometry.transform import ObjectTransform
from snowcap.geometry.vectors import (
    angle_between,
    as_vector3,
    normalize_rows,
    triangle_cross,
)

__all__ = [
    "ObjectTransform",
    "angle_between",
    "as_vector3",
    "normalize_rows",
    "triangle_cross",
]
