"""Minimal scene hierarchy for looking up meshes by name.

Objects are addressed by slash-separated paths from a top-level object, as
in ``"House/Roof"``. A bare name matches the first object with that name
anywhere in the hierarchy, searching level by level.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from snowcap.config import CapSettings
from snowcap.exceptions import ObjectNotFoundError
from snowcap.geometry.transform import ObjectTransform
from snowcap.mesh.builder import SnowCapBuilder
from snowcap.mesh.data import TriangleMesh

logger = logging.getLogger(__name__)

SNOW_SUFFIX = "_snow"


@dataclass
class SceneObject:
    """Named node carrying an optional mesh and a transform."""

    name: str
    mesh: TriangleMesh | None = None
    transform: ObjectTransform = field(default_factory=ObjectTransform.identity)
    children: list[SceneObject] = field(default_factory=list)

    def add_child(self, child: SceneObject) -> SceneObject:
        """Append ``child`` and return it."""
        self.children.append(child)
        return child

    def child(self, name: str) -> SceneObject | None:
        """Return the first direct child called ``name``."""
        for candidate in self.children:
            if candidate.name == name:
                return candidate
        return None

    @property
    def has_children(self) -> bool:
        return bool(self.children)


class SceneGraph:
    """Collection of top-level scene objects.

    Args:
        roots: Top-level objects.

    Example:
        >>> house = SceneObject("House", children=[SceneObject("Roof", roof_mesh)])
        >>> scene = SceneGraph([house])
        >>> scene.find("House/Roof").mesh is roof_mesh
        True
    """

    def __init__(self, roots: Iterable[SceneObject] = ()):
        self._roots = list(roots)

    @property
    def roots(self) -> list[SceneObject]:
        return list(self._roots)

    def add(self, obj: SceneObject) -> SceneObject:
        """Add a top-level object and return it."""
        self._roots.append(obj)
        return obj

    def __iter__(self) -> Iterator[SceneObject]:
        """Iterate over every object, level by level."""
        queue = deque(self._roots)
        while queue:
            obj = queue.popleft()
            yield obj
            queue.extend(obj.children)

    def find(self, path: str) -> SceneObject:
        """Find an object by name or by ``"top/child/..."`` path.

        Raises:
            ObjectNotFoundError: If no object matches.
        """
        parts = [part for part in path.split("/") if part]
        if not parts:
            raise ObjectNotFoundError(f"Invalid object path: {path!r}")

        if len(parts) == 1:
            for obj in self:
                if obj.name == parts[0]:
                    return obj
            raise ObjectNotFoundError(f"Object {path!r} does not exist")

        current = next((r for r in self._roots if r.name == parts[0]), None)
        for name in parts[1:]:
            if current is None:
                break
            current = current.child(name)
        if current is None:
            raise ObjectNotFoundError(f"Object {path!r} does not exist")
        return current


def resolve_part(scene: SceneGraph, top_level_name: str, part_name: str) -> SceneObject:
    """Locate the object whose mesh receives snow.

    When the top-level object has children the part is looked up as
    ``"top/part"``, otherwise by its bare name.

    Raises:
        ObjectNotFoundError: If the top-level object or the part is missing.
    """
    top = scene.find(top_level_name)
    if top.has_children:
        return scene.find(f"{top_level_name}/{part_name}")
    return scene.find(part_name)


def create_snow_for_objects(
    scene: SceneGraph,
    settings: Iterable[CapSettings],
    skip_missing: bool = False,
) -> dict[str, TriangleMesh]:
    """Run the snow cap pipeline for every active settings item.

    Args:
        scene: Scene holding the objects.
        settings: One item per object. Inactive items are skipped.
        skip_missing: Log and skip items whose object or mesh cannot be
            found instead of raising.

    Returns:
        Snow meshes keyed by ``"<top level name>_snow"``, in settings order.
        Meshes are in the local space of the part they were built from.

    Raises:
        ObjectNotFoundError: If an object or its mesh is missing and
            ``skip_missing`` is False.
    """
    results: dict[str, TriangleMesh] = {}
    for item in settings:
        if not item.active:
            logger.debug("Skipping inactive item %r", item.top_level_name)
            continue

        try:
            part = resolve_part(scene, item.top_level_name, item.part_name)
            if part.mesh is None:
                raise ObjectNotFoundError(f"Object {part.name!r} has no mesh")
        except ObjectNotFoundError as e:
            if not skip_missing:
                raise
            logger.error("Skipping %r: %s", item.top_level_name, e)
            continue

        snow = SnowCapBuilder.from_settings(part.mesh, item, part.transform).build()
        name = f"{item.top_level_name}{SNOW_SUFFIX}"
        results[name] = snow
        logger.info(
            "Created %s with %d vertices and %d triangles",
            name,
            snow.n_vertices,
            snow.n_triangles,
        )
    return results
