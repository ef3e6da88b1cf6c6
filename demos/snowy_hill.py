"""
Snowy Hill Demo

This script demonstrates using snowcap to lay a snow shell over the gentle
parts of a procedurally generated hill, and to build a terrain patch mesh
that follows a sampled height map.

Usage:
    python snowy_hill.py

The script will:
1. Build a hill mesh from an analytic height function
2. Extract the part of the hill facing up within 25 degrees
3. Extrude it into a 0.2 unit shell, subdivide and smooth it
4. Build a terrain patch over a gridded height map
5. Save both meshes to .npz for later use
"""

import logging
from pathlib import Path

import numpy as np

from snowcap import SnowCapBuilder, TerrainPatchSettings, build_height_field_grid
from snowcap.fields import CallableHeightField, GridHeightField
from snowcap.io import save_mesh
from snowcap.logging_config import setup_logging
from snowcap.mesh import build_terrain_patch

OUTPUT_DIR = Path(__file__).parent / "output"


def hill_height(x, z):
    return 6.0 * np.exp(-((x - 20.0) ** 2 + (z - 20.0) ** 2) / 120.0)


def main():
    setup_logging(logging.INFO)

    # Hill parameters
    size = 40
    max_angle = 25.0

    print("Building hill mesh...")
    hill = build_height_field_grid(CallableHeightField(hill_height), (0, 0, 0), size, size)
    print(f"  Vertices: {hill.n_vertices}")
    print(f"  Triangles: {hill.n_triangles}")

    builder = (
        SnowCapBuilder(hill)
        .set_extraction(direction=(0, 1, 0), max_angle=max_angle)
        .set_extrusion(distance=0.2)
        .set_subdivision(1)
        .set_smoothing(factor=0.5, passes=3)
    )
    snow = builder.build()

    info = builder.get_mesh_info()
    print(f"\nSnow mesh generated successfully:")
    print(f"  Cap vertices: {info['cap_vertices']}")
    print(f"  Boundary edges: {info['boundary_edges']}")
    print(f"  Shell vertices: {info['n_vertices']}")
    print(f"  Shell triangles: {info['n_triangles']}")

    # Terrain patch over a coarse random height map
    rng = np.random.default_rng(7)
    heights = rng.uniform(-7.0, -6.0, size=(17, 17))
    terrain = GridHeightField(heights, origin=(550.0, 600.0), spacing=10.0)
    patch = build_terrain_patch(
        terrain, TerrainPatchSettings(start_position=(550.0, -6.7, 600.0), width=150, depth=150)
    )
    lower, upper = patch.bounds
    print(f"\nTerrain patch: {patch.n_vertices} vertices")
    print(f"  Height range: [{lower[1]:.2f}, {upper[1]:.2f}]")

    save_mesh(snow, OUTPUT_DIR / "hill_snow.npz")
    save_mesh(patch, OUTPUT_DIR / "terrain_snow.npz")
    print(f"\nMeshes saved to: {OUTPUT_DIR}")

    return snow, patch


if __name__ == "__main__":
    main()
