"""Custom exceptions and warnings for the snowcap package."""


class SnowcapError(Exception):
    """Base exception for snowcap package."""

    pass


class InvalidMeshError(SnowcapError, ValueError):
    """Malformed mesh: mismatched array lengths or bad triangle indices."""

    pass


class ObjectNotFoundError(SnowcapError, LookupError):
    """Named scene object could not be located."""

    pass


class InterpolationError(SnowcapError):
    """Height sampling failed."""

    pass


class DataLoadError(SnowcapError):
    """Failed to load data from file."""

    pass


class ParameterClampWarning(UserWarning):
    """A parameter was outside its supported range and has been clamped."""

    pass
