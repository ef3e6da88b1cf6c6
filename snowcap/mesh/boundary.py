"""Boundary-edge classification for extracted caps.

A triangle with exactly two selected corners contributes the edge between
those corners as a *candidate* boundary edge. A triangle with all three
corners selected contributes its edges as *interior* edges. Candidates that
are also interior edges are discarded; the remaining candidates form the
boundary handed to the extruder.

Edges are compared through a canonical key so that the same geometric edge,
met in either winding direction, hashes identically.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from snowcap.exceptions import InvalidMeshError
from snowcap.mesh.identity import PositionKey, position_key

EdgeKey = tuple[PositionKey, PositionKey]

ORIGIN: PositionKey = (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class DirectedEdge:
    """One side of a triangle, oriented in that triangle's winding order."""

    start: PositionKey
    end: PositionKey

    @classmethod
    def from_points(cls, start, end) -> DirectedEdge:
        return cls(position_key(start), position_key(end))

    def reversed(self) -> DirectedEdge:
        return DirectedEdge(self.end, self.start)

    def canonical_key(self, origin: PositionKey = ORIGIN) -> EdgeKey:
        return canonical_key(self.start, self.end, origin)


def canonical_key(first, second, origin=ORIGIN) -> EdgeKey:
    """Order an edge's endpoints so that both directions share one key.

    Endpoints are ordered by their heading ``atan2(x, z)`` around ``origin``.
    Equal headings fall back to squared distance from ``origin``, then to
    lexicographic coordinate order.

    Args:
        first: Start position of the edge.
        second: End position of the edge.
        origin: Reference point for the heading.

    Returns:
        Tuple ``(a, b)`` of position keys, the same for (first, second) and
        (second, first).
    """
    a = position_key(first)
    b = position_key(second)
    if a == b:
        return (a, b)

    ox, oy, oz = position_key(origin)
    a_offset = (a[0] - ox, a[1] - oy, a[2] - oz)
    b_offset = (b[0] - ox, b[1] - oy, b[2] - oz)

    a_heading = math.atan2(a_offset[0], a_offset[2])
    b_heading = math.atan2(b_offset[0], b_offset[2])
    if a_heading != b_heading:
        return (a, b) if a_heading < b_heading else (b, a)

    a_dist = sum(c * c for c in a_offset)
    b_dist = sum(c * c for c in b_offset)
    if a_dist != b_dist:
        return (a, b) if a_dist < b_dist else (b, a)

    return (a, b) if a < b else (b, a)


class BoundaryClassifier:
    """Accumulates candidate and interior edges and reports true boundaries.

    Args:
        origin: Reference point for canonical edge keys.

    Example:
        >>> classifier = BoundaryClassifier()
        >>> classifier.add_candidate((0, 0, 0), (1, 0, 0))
        >>> classifier.add_interior((1, 0, 0), (0, 0, 0))
        >>> classifier.boundary_edges()
        []
    """

    def __init__(self, origin=ORIGIN):
        self._origin = position_key(origin)
        self._candidates: list[DirectedEdge] = []
        self._candidate_counts: Counter[EdgeKey] = Counter()
        self._interior: set[EdgeKey] = set()

    def key(self, start, end) -> EdgeKey:
        return canonical_key(start, end, self._origin)

    def add_candidate(self, start, end) -> None:
        """Record an edge from a triangle with exactly two selected corners."""
        edge = DirectedEdge.from_points(start, end)
        if edge.start == edge.end:
            return
        self._candidates.append(edge)
        self._candidate_counts[self.key(edge.start, edge.end)] += 1

    def add_interior(self, start, end) -> None:
        """Record an edge from a triangle with all corners selected."""
        self._interior.add(self.key(start, end))

    def add_triangle(self, corners: Sequence, selected: Sequence[bool]) -> None:
        """Classify the edges of one triangle.

        Args:
            corners: Three corner positions in winding order.
            selected: Selection flag of each corner.
        """
        hits = sum(bool(s) for s in selected)
        if hits < 2:
            return
        for i in range(3):
            j = (i + 1) % 3
            if hits == 3:
                self.add_interior(corners[i], corners[j])
            elif selected[i] and selected[j]:
                self.add_candidate(corners[i], corners[j])

    @property
    def candidates(self) -> list[DirectedEdge]:
        """Candidate edges in the order they were recorded."""
        return list(self._candidates)

    @property
    def interior_keys(self) -> frozenset[EdgeKey]:
        """Canonical keys of all interior edges."""
        return frozenset(self._interior)

    def candidate_count(self, start, end) -> int:
        """How many times an edge was recorded as a candidate, either direction."""
        return self._candidate_counts.get(self.key(start, end), 0)

    def is_interior(self, start, end) -> bool:
        return self.key(start, end) in self._interior

    def is_boundary(self, start, end) -> bool:
        """True if the edge is a candidate never produced as an interior edge."""
        key = self.key(start, end)
        return key in self._candidate_counts and key not in self._interior

    def boundary_edges(self) -> list[DirectedEdge]:
        """Candidates that survive interior pruning, in recorded order."""
        return [
            edge
            for edge in self._candidates
            if self.key(edge.start, edge.end) not in self._interior
        ]


def as_edge_list(edges: Iterable) -> list[DirectedEdge]:
    """Normalize boundary edges to a list of :class:`DirectedEdge`.

    Accepts DirectedEdge objects, (start, end) pairs, or a flat sequence of
    positions read two at a time.

    Raises:
        InvalidMeshError: If a flat sequence has an odd number of positions.
    """
    items = list(edges)
    if not items:
        return []
    if all(isinstance(item, DirectedEdge) for item in items):
        return items

    array = np.asarray(items, dtype=float)
    if array.ndim == 3 and array.shape[1:] == (2, 3):
        return [DirectedEdge.from_points(a, b) for a, b in array]
    if array.ndim == 2 and array.shape[1] == 3:
        if len(array) % 2 != 0:
            raise InvalidMeshError(
                f"flat boundary list must hold an even number of positions, "
                f"got {len(array)}"
            )
        return [
            DirectedEdge.from_points(array[i], array[i + 1])
            for i in range(0, len(array), 2)
        ]
    raise InvalidMeshError(f"cannot interpret boundary edges of shape {array.shape}")


def boundary_is_closed(edges: Iterable[DirectedEdge]) -> bool:
    """True if every endpoint is entered as often as it is left.

    This holds for any union of closed loops. An empty list counts as closed.
    """
    balance: Counter[PositionKey] = Counter()
    for edge in edges:
        balance[edge.start] += 1
        balance[edge.end] -= 1
    return all(value == 0 for value in balance.values())
