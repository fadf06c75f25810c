"""Custom exceptions for map generation."""


class MapperError(Exception):
    """Base exception for map generation errors."""

    pass


class InvalidDimensionsError(MapperError, ValueError):
    """Raised when a grid is requested with non-positive dimensions."""

    pass


class StageOrderError(MapperError):
    """Raised when a pipeline stage runs on a grid in the wrong stage."""

    pass


class ConfigNotFoundError(MapperError, FileNotFoundError):
    """Raised when a named config file cannot be located."""

    pass
