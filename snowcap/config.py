"""Parameter records for the snow cap pipeline and the terrain patch."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Mapping

# Keys used by the original JSON settings files, mapped to field names.
# Vector components are listed separately and folded into tuples.
_LEGACY_KEYS = {
    "gameObjectTopLevelName": "top_level_name",
    "gameObjectPartName": "part_name",
    "extractAngle": "extract_angle",
    "extrudeDistance": "extrude_distance",
    "subDivisionPasses": "subdivision_passes",
    "smoothnessPasses": "smoothness_passes",
    "smoothnessFactor": "smoothness_factor",
    "debugVertexRaysOn": "debug_rays",
    "active": "active",
}
_LEGACY_VECTORS = {
    "extract_direction": ("extractDirectionX", "extractDirectionY", "extractDirectionZ"),
    "pivot_offset": ("adjustXPivot", "adjustYPivot", "adjustZPivot"),
}


@dataclass
class CapSettings:
    """Options for building the snow cap of one scene object.

    Attributes:
        top_level_name: Name of the top-level object in the scene hierarchy.
        part_name: Name of the child part carrying the mesh. For objects
            without children this equals ``top_level_name``.
        extract_angle: Maximum angle in degrees between a vertex normal and
            ``extract_direction`` for the vertex to be part of the cap.
        extract_direction: Direction the cap faces, also the extrusion
            direction.
        extrude_distance: Thickness of the shell; 0 skips extrusion.
        subdivision_passes: Subdivision passes, clamped to [0, 6].
        smoothness_passes: Laplacian smoothing passes.
        smoothness_factor: Laplacian smoothing factor, usually in [0, 1].
        pivot_offset: Offset of the pivot used to evaluate normals.
        debug_rays: Log pivot-to-vertex rays during extraction.
        active: Inactive items are skipped.
    """

    top_level_name: str = ""
    part_name: str = ""
    extract_angle: float = 45.0
    extract_direction: tuple[float, float, float] = (0.0, 1.0, 0.0)
    extrude_distance: float = 0.0
    subdivision_passes: int = 0
    smoothness_passes: int = 0
    smoothness_factor: float = 0.5
    pivot_offset: tuple[float, float, float] = (0.0, 0.0, 0.0)
    debug_rays: bool = False
    active: bool = True

    def __post_init__(self):
        self.extract_direction = _as_triple(self.extract_direction, "extract_direction")
        self.pivot_offset = _as_triple(self.pivot_offset, "pivot_offset")
        self.extract_angle = float(self.extract_angle)
        self.extrude_distance = float(self.extrude_distance)
        self.subdivision_passes = int(self.subdivision_passes)
        self.smoothness_passes = int(self.smoothness_passes)
        self.smoothness_factor = float(self.smoothness_factor)
        self.debug_rays = _as_flag(self.debug_rays, "debug_rays")
        self.active = _as_flag(self.active, "active")
        if not self.part_name:
            self.part_name = self.top_level_name

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CapSettings:
        """Create settings from a mapping.

        Accepts the field names of this class as well as the camelCase keys
        of the legacy settings format (``gameObjectTopLevelName``,
        ``extractDirectionX`` ...). Unknown keys are ignored.
        """
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {k: v for k, v in data.items() if k in known}

        for legacy, name in _LEGACY_KEYS.items():
            if legacy in data and name not in values:
                values[name] = data[legacy]

        for name, components in _LEGACY_VECTORS.items():
            if name in values or not any(c in data for c in components):
                continue
            default = getattr(cls, name)
            values[name] = tuple(
                data.get(c, default[i]) for i, c in enumerate(components)
            )

        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """Return the settings as a JSON-serializable dictionary."""
        data = asdict(self)
        data["extract_direction"] = list(self.extract_direction)
        data["pivot_offset"] = list(self.pivot_offset)
        return data


@dataclass
class TerrainPatchSettings:
    """Placement of the terrain patch mesh.

    Attributes:
        start_position: World position of the patch's first grid vertex.
        width: Number of grid cells along x.
        depth: Number of grid cells along z.
    """

    start_position: tuple[float, float, float] = (550.0, -6.7, 600.0)
    width: int = 150
    depth: int = 150
    active: bool = True

    def __post_init__(self):
        self.start_position = _as_triple(self.start_position, "start_position")
        self.width = int(self.width)
        self.depth = int(self.depth)
        self.active = _as_flag(self.active, "active")
        if self.width < 1 or self.depth < 1:
            raise ValueError(
                f"width and depth must be at least 1, got {self.width} x {self.depth}"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TerrainPatchSettings:
        """Create settings from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        if "startPosition" in data and "start_position" not in values:
            start = data["startPosition"]
            if isinstance(start, Mapping):
                start = (start.get("x", 0.0), start.get("y", 0.0), start.get("z", 0.0))
            values["start_position"] = start
        return cls(**values)


def _as_triple(value, name: str) -> tuple[float, float, float]:
    components = tuple(float(c) for c in value)
    if len(components) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(components)}")
    return components


_TRUE_STRINGS = {"true", "yes", "on", "1"}
_FALSE_STRINGS = {"false", "no", "off", "0"}


def _as_flag(value, name: str) -> bool:
    # Settings files written by hand sometimes quote booleans.
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    elif value in (True, False):
        return bool(value)
    raise ValueError(f"{name} must be a boolean, got {value!r}")
