# tilequant/errors.py
from __future__ import annotations

"""
Conversion errors.

Every failure is terminal for the current run. All classes derive from
ConversionError so callers can catch the family and still inspect the fields
of a specific failure.
"""

from pathlib import Path
from typing import Union

PathLike = Union[str, Path]


class ConversionError(Exception):
    """Base class for everything the converter raises on purpose."""


class ConfigError(ConversionError, ValueError):
    """A configuration value is out of range."""

    def __init__(self, field: str, value: object, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"invalid {field}={value!r}: {reason}")


class InvalidDimensionsError(ConversionError):
    """Image size is not a multiple of the tile size."""

    def __init__(self, width: int, height: int, tile_width: int, tile_height: int) -> None:
        self.width = width
        self.height = height
        self.tile_width = tile_width
        self.tile_height = tile_height
        super().__init__(
            f"Image dimensions {width}x{height} are not multiples of tile size "
            f"{tile_width}x{tile_height}"
        )


class DimensionMismatchError(ConversionError):
    """Image size differs from tilemap size times tile size."""

    def __init__(
        self, width: int, height: int, expected_width: int, expected_height: int
    ) -> None:
        self.width = width
        self.height = height
        self.expected_width = expected_width
        self.expected_height = expected_height
        super().__init__(
            f"Image dimensions {width}x{height} don't match expected "
            f"{expected_width}x{expected_height} based on tilemap size"
        )


class ImageReadError(ConversionError):
    """The input could not be opened or decoded."""

    def __init__(self, path: PathLike, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to read image {self.path}: {reason}")


class OutputWriteError(ConversionError):
    """An output file could not be written."""

    def __init__(self, path: PathLike, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"IO error writing {self.path}: {reason}")


class PaletteGenerationError(ConversionError):
    """Clustering produced an assignment outside the configured bounds."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Error generating palettes: {message}")


__all__ = [
    "ConversionError",
    "ConfigError",
    "InvalidDimensionsError",
    "DimensionMismatchError",
    "ImageReadError",
    "OutputWriteError",
    "PaletteGenerationError",
]
