"""Vertex identity by exact position.

Engine meshes routinely split a vertex into several copies that share a
position but differ in normal or UV. Stages that reason about surface
connectivity treat all copies at one position as a single vertex.
"""

from __future__ import annotations

import numpy as np

PositionKey = tuple[float, float, float]


def position_key(position) -> PositionKey:
    """Hashable exact-equality key for one position.

    Negative zero is stored as positive zero so that equal keys also agree
    on the sign of every component.
    """
    x, y, z = (float(c) + 0.0 for c in position)
    return (x, y, z)


class PositionIndex:
    """Groups vertex indices by exact position equality.

    Args:
        positions: Vertex positions, shape (n, 3).

    Attributes:
        unique: Distinct positions, shape (k, 3), in lexicographic order.
        inverse: Position id of every input vertex, shape (n,).
        first_index: Lowest vertex index at each distinct position, shape (k,).
    """

    def __init__(self, positions: np.ndarray):
        positions = np.asarray(positions, dtype=float).reshape(-1, 3)
        if len(positions) == 0:
            self.unique = np.zeros((0, 3))
            self.inverse = np.zeros(0, dtype=np.int64)
            self.first_index = np.zeros(0, dtype=np.int64)
        else:
            unique, first_index, inverse = np.unique(
                positions, axis=0, return_index=True, return_inverse=True
            )
            self.unique = unique
            self.first_index = first_index.astype(np.int64)
            self.inverse = np.asarray(inverse, dtype=np.int64).reshape(-1)
        self._lookup: dict[PositionKey, int] | None = None

    def __len__(self) -> int:
        return len(self.unique)

    def key(self, position_id: int) -> PositionKey:
        """Exact key of a distinct position."""
        return position_key(self.unique[position_id])

    def find(self, position) -> int | None:
        """Return the id of ``position``, or None if no vertex sits there."""
        if self._lookup is None:
            self._lookup = {
                position_key(p): i for i, p in enumerate(self.unique)
            }
        return self._lookup.get(position_key(position))

    def __contains__(self, position) -> bool:
        return self.find(position) is not None
