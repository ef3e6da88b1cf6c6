"""Readers for terrain height samples and pipeline settings."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import numpy as np

from snowcap.config import CapSettings, TerrainPatchSettings
from snowcap.exceptions import DataLoadError

logger = logging.getLogger(__name__)

SETTINGS_ROOT_KEY = "meshObjectItems"


class SpatialData:
    """Height samples on the horizontal plane.

    Args:
        coords: Sample positions as (x, z), shape (n, 2).
        values: Height at each sample, shape (n,).
        name: Optional name for the data set.
    """

    def __init__(
        self,
        coords: np.ndarray,
        values: np.ndarray,
        name: str | None = None,
    ):
        self.coords = np.asarray(coords, dtype=float)
        self.values = np.asarray(values, dtype=float)
        self.name = name

        if self.coords.ndim != 2 or self.coords.shape[1] != 2:
            raise ValueError("coords must be a 2D array of shape (n, 2)")
        if self.values.ndim != 1:
            raise ValueError("values must be 1D array")
        if len(self.coords) != len(self.values):
            raise ValueError(
                f"coords and values must have same length, "
                f"got {len(self.coords)} and {len(self.values)}"
            )

    @property
    def n_points(self) -> int:
        """Number of height samples."""
        return len(self.values)

    @property
    def height_range(self) -> tuple[float, float]:
        """Lowest and highest sampled height."""
        if self.n_points == 0:
            return (0.0, 0.0)
        return (float(self.values.min()), float(self.values.max()))

    def __repr__(self) -> str:
        return f"SpatialData(n_points={self.n_points}, name={self.name!r})"


class CSVReader:
    """Reader for CSV files of terrain height samples.

    Expected format: a header row followed by one sample per row, with
    columns for the x and z ground coordinates and the height.

    Args:
        x_col: Name of x-coordinate column. Default: 'x'.
        z_col: Name of z-coordinate column. Default: 'z'.
        value_col: Name of height column. Default: 'height'.
        delimiter: CSV delimiter. Default: ','.
    """

    def __init__(
        self,
        x_col: str = "x",
        z_col: str = "z",
        value_col: str = "height",
        delimiter: str = ",",
    ):
        self.x_col = x_col
        self.z_col = z_col
        self.value_col = value_col
        self.delimiter = delimiter

    def read(self, path: str | Path, name: str | None = None) -> SpatialData:
        """Read height samples from a CSV file.

        Args:
            path: Path to CSV file.
            name: Optional name for the data set; defaults to the file stem.

        Returns:
            SpatialData with (x, z) coordinates and heights.

        Raises:
            DataLoadError: If the file is missing, lacks a column or holds
                non-numeric values.
        """
        path = Path(path)
        if not path.exists():
            raise DataLoadError(f"File not found: {path}")

        with open(path, "r", encoding="utf-8-sig") as f:
            header = [col.strip() for col in f.readline().strip().split(self.delimiter)]

        columns = []
        for col in (self.x_col, self.z_col, self.value_col):
            if col not in header:
                raise DataLoadError(
                    f"Missing column {col!r} in {path}. Expected columns: "
                    f"{self.x_col}, {self.z_col}, {self.value_col}. Found: {header}"
                )
            columns.append(header.index(col))

        try:
            data = np.loadtxt(
                path,
                delimiter=self.delimiter,
                skiprows=1,
                usecols=columns,
                ndmin=2,
                encoding="utf-8-sig",
            )
        except ValueError as e:
            raise DataLoadError(f"Failed to read CSV file {path}: {e}") from e

        logger.debug("Read %d height samples from %s", len(data), path)
        return SpatialData(data[:, :2], data[:, 2], name=name or path.stem)


def read_csv(
    path: str | Path,
    name: str | None = None,
    x_col: str = "x",
    z_col: str = "z",
    value_col: str = "height",
) -> SpatialData:
    """Convenience function to read CSV height samples.

    Args:
        path: Path to CSV file.
        name: Optional name for the data set.
        x_col: Name of x-coordinate column. Default: 'x'.
        z_col: Name of z-coordinate column. Default: 'z'.
        value_col: Name of height column. Default: 'height'.

    Returns:
        SpatialData with (x, z) coordinates and heights.
    """
    reader = CSVReader(x_col=x_col, z_col=z_col, value_col=value_col)
    return reader.read(path, name=name)


def _load_json(path: str | Path) -> Any:
    path = Path(path)
    if not path.exists():
        raise DataLoadError(f"File not found: {path}")
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise DataLoadError(f"Invalid JSON in {path}: {e}") from e


def read_settings(path: str | Path, include_inactive: bool = False) -> list[CapSettings]:
    """Read snow cap settings for a list of scene objects.

    The file holds either a JSON list of items or an object with the list
    under ``"meshObjectItems"``. Items may use snake_case field names or the
    legacy camelCase keys.

    Args:
        path: Path to the JSON settings file.
        include_inactive: Keep items whose ``active`` flag is false.

    Returns:
        Settings in file order.

    Raises:
        DataLoadError: If the file is missing or malformed.
    """
    document = _load_json(path)
    if isinstance(document, dict):
        if SETTINGS_ROOT_KEY not in document:
            raise DataLoadError(f"{path} has no {SETTINGS_ROOT_KEY!r} list")
        document = document[SETTINGS_ROOT_KEY]
    if not isinstance(document, list):
        raise DataLoadError(f"{path} must contain a list of settings items")

    settings = []
    for position, item in enumerate(document):
        if not isinstance(item, dict):
            raise DataLoadError(f"Settings item {position} in {path} is not an object")
        try:
            entry = CapSettings.from_dict(item)
        except (TypeError, ValueError) as e:
            raise DataLoadError(f"Invalid settings item {position} in {path}: {e}") from e
        if entry.active or include_inactive:
            settings.append(entry)

    logger.info("Loaded %d snow cap settings from %s", len(settings), path)
    return settings


def read_terrain_settings(path: str | Path) -> TerrainPatchSettings:
    """Read terrain patch placement from a JSON object.

    Raises:
        DataLoadError: If the file is missing or malformed.
    """
    document = _load_json(path)
    if not isinstance(document, dict):
        raise DataLoadError(f"{path} must contain a JSON object")
    try:
        return TerrainPatchSettings.from_dict(document)
    except (TypeError, ValueError) as e:
        raise DataLoadError(f"Invalid terrain settings in {path}: {e}") from e
