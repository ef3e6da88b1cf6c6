"""
Pytest configuration and shared fixtures for snowcap tests.
"""

import numpy as np
import pytest

from snowcap.mesh.boundary import DirectedEdge
from snowcap.mesh.data import TriangleMesh

# (normal, u, v) with u x v == normal, so the corner order below winds
# counter-clockwise seen from outside the box.
BOX_FACES = [
    ((0, 1, 0), (0, 0, 1), (1, 0, 0)),
    ((0, -1, 0), (1, 0, 0), (0, 0, 1)),
    ((1, 0, 0), (0, 1, 0), (0, 0, 1)),
    ((-1, 0, 0), (0, 0, 1), (0, 1, 0)),
    ((0, 0, 1), (1, 0, 0), (0, 1, 0)),
    ((0, 0, -1), (0, 1, 0), (1, 0, 0)),
]


def make_box():
    """Unit box from (0, 0, 0) to (1, 1, 1) with four own vertices per face.

    The +y face comes first, so its vertices are 0-3.
    """
    center = np.array([0.5, 0.5, 0.5])
    positions, normals, uvs, triangles = [], [], [], []
    for face, (normal, u, v) in enumerate(BOX_FACES):
        normal, u, v = (np.array(a, dtype=float) for a in (normal, u, v))
        for su, sv in ((-1, -1), (1, -1), (1, 1), (-1, 1)):
            positions.append(center + 0.5 * normal + 0.5 * (su * u + sv * v))
            normals.append(normal)
            uvs.append(((su + 1) / 2, (sv + 1) / 2))
        base = 4 * face
        triangles.append((base, base + 1, base + 2))
        triangles.append((base, base + 2, base + 3))
    return TriangleMesh(
        positions=positions, triangles=triangles, normals=normals, uvs=uvs
    )


@pytest.fixture
def unit_square():
    """Flat unit square in the y=0 plane facing +y."""
    return TriangleMesh(
        positions=[(0, 0, 0), (1, 0, 0), (1, 0, 1), (0, 0, 1)],
        triangles=[0, 3, 1, 1, 3, 2],
        uvs=[(0, 0), (1, 0), (1, 1), (0, 1)],
    )


@pytest.fixture
def square_edges():
    """The four sides of the unit square, counter-clockwise seen from +y."""
    corners = [(0, 0, 0), (1, 0, 0), (1, 0, 1), (0, 0, 1)]
    return [
        DirectedEdge.from_points(corners[i], corners[(i + 1) % 4])
        for i in range(4)
    ]


@pytest.fixture
def box():
    """Unit box with split vertices and flat face normals."""
    return make_box()


@pytest.fixture
def ridge():
    """Two roof triangles sharing a ridge edge whose ends face +y.

    The eave vertices face sideways, so only the ridge is selected.
    """
    return TriangleMesh(
        positions=[(0, 1, 0), (0, 1, 1), (1, 0, 0), (-1, 0, 1)],
        triangles=[(0, 1, 2), (1, 0, 3)],
        normals=[(0, 1, 0), (0, 1, 0), (1, 0, 0), (-1, 0, 0)],
    )


@pytest.fixture
def grid_mesh():
    """3x3 cell grid in the y=0 plane with interior vertex 5 raised to y=1."""
    from snowcap.mesh.heightfield import grid_triangles

    x, z = np.meshgrid(np.arange(4.0), np.arange(4.0))
    positions = np.column_stack([x.ravel(), np.zeros(16), z.ravel()])
    positions[5, 1] = 1.0
    return TriangleMesh(positions=positions, triangles=grid_triangles(3, 3))
