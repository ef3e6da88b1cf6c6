"""Height fields sampled by the terrain patch builder."""

from snowcap.fields.interpolation import (
    CallableHeightField,
    FlatHeightField,
    GridHeightField,
    HeightSampler,
    ScatteredHeightField,
)

__all__ = [
    "CallableHeightField",
    "FlatHeightField",
    "GridHeightField",
    "HeightSampler",
    "ScatteredHeightField",
]
