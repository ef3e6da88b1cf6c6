"""Mesh and settings export utilities."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

import numpy as np

from snowcap.config import CapSettings
from snowcap.exceptions import DataLoadError
from snowcap.io.readers import SETTINGS_ROOT_KEY
from snowcap.mesh.data import TriangleMesh

_MESH_ARRAYS = ("positions", "triangles", "normals", "uvs", "tangents")


def save_mesh(mesh: TriangleMesh, path: str | Path) -> None:
    """Save mesh arrays to a compressed ``.npz`` file.

    The mesh can be loaded later using load_mesh().

    Args:
        mesh: Mesh to save.
        path: Output path (typically .npz extension).

    Example:
        >>> from snowcap.io import save_mesh, load_mesh
        >>> save_mesh(shell, "output/rock_snow.npz")
        >>> # Later:
        >>> shell = load_mesh("output/rock_snow.npz")
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    arrays = {
        "positions": mesh.positions,
        "triangles": mesh.triangles,
        "normals": mesh.normals,
        "uvs": mesh.uvs,
    }
    if mesh.tangents is not None:
        arrays["tangents"] = mesh.tangents

    with open(path, "wb") as f:
        np.savez_compressed(f, **arrays)


def load_mesh(path: str | Path) -> TriangleMesh:
    """Load a mesh saved with save_mesh().

    Raises:
        DataLoadError: If the file is missing or lacks mesh arrays.
    """
    path = Path(path)
    if not path.exists():
        raise DataLoadError(f"File not found: {path}")

    with np.load(path) as data:
        missing = [name for name in _MESH_ARRAYS[:2] if name not in data.files]
        if missing:
            raise DataLoadError(f"{path} is missing mesh arrays: {missing}")
        arrays = {name: data[name] for name in _MESH_ARRAYS if name in data.files}

    return TriangleMesh(**arrays)


def save_settings(settings: Iterable[CapSettings], path: str | Path) -> None:
    """Write snow cap settings as JSON readable by read_settings()."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    document = {SETTINGS_ROOT_KEY: [item.to_dict() for item in settings]}
    with open(path, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2)
