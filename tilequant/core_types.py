# tilequant/core_types.py
from __future__ import annotations

"""
Core type aliases, value objects, and lightweight helpers.
"""

import math
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from .constants import (
    BITS_PER_COLOR,
    INDEX_MASK,
    PALETTE_INDEX_SHIFT,
    PIXELS_PER_CHUNK,
    TILE_INDEX_MASK,
)

# Basic aliases

RGBTuple = Tuple[int, int, int]
HexStr = str

U8Image = NDArray[np.uint8]  # (H, W, 3)
Lab = NDArray[np.float64]  # (..., 3) OKLab
Features = NDArray[np.float64]  # (M, D) planar feature rows
PackedTile = NDArray[np.uint16]  # (chunks_per_tile,)

# batched distance: (points [M, D], centroid [D]) -> [M]
DistanceFn = Callable[[np.ndarray, np.ndarray], np.ndarray]

# Value objects


@dataclass(frozen=True)
class Color:
    """OKLab colour triple."""

    l: float  # noqa: E741
    a: float
    b: float

    @classmethod
    def from_rgb(cls, r: int, g: int, b: int) -> "Color":
        from .colour_convert import rgb_to_oklab

        lab = rgb_to_oklab(np.array([r, g, b], dtype=np.uint8))
        return cls(float(lab[0]), float(lab[1]), float(lab[2]))

    @classmethod
    def from_array(cls, row: Sequence[float] | np.ndarray) -> "Color":
        return cls(float(row[0]), float(row[1]), float(row[2]))

    @property
    def hue(self) -> float:
        """Hue angle in radians."""
        return math.atan2(self.b, self.a)

    @property
    def chroma(self) -> float:
        return math.sqrt(self.a * self.a + self.b * self.b)

    def to_rgb(self) -> RGBTuple:
        from .colour_convert import oklab_to_rgb

        rgb = oklab_to_rgb(self.as_array())
        return (int(rgb[0]), int(rgb[1]), int(rgb[2]))

    def as_array(self) -> Lab:
        return np.array([self.l, self.a, self.b], dtype=np.float64)

    def as_list(self) -> List[float]:
        return [self.l, self.a, self.b]


BLACK = Color(0.0, 0.0, 0.0)


@dataclass(frozen=True)
class ColorFrequency:
    """A colour and how many source pixels it stands for."""

    color: Color
    frequency: int = 0


@dataclass(frozen=True)
class Palette:
    """Ordered palette entries. Index i is the value stored in the tile data."""

    colors: Tuple[ColorFrequency, ...] = ()

    def __len__(self) -> int:
        return len(self.colors)

    @cached_property
    def lab(self) -> Lab:
        """Palette colours as a float64 (n, 3) array, built once per palette."""
        if not self.colors:
            return np.zeros((0, 3), dtype=np.float64)
        return np.array([cf.color.as_list() for cf in self.colors], dtype=np.float64)

    @property
    def total_frequency(self) -> int:
        return sum(cf.frequency for cf in self.colors)

    def average_luminance(self) -> float:
        if not self.colors:
            return 0.0
        return sum(cf.color.l for cf in self.colors) / len(self.colors)

    def find_best_color(self, color: Color | np.ndarray) -> int:
        """Index of the nearest colour; lowest index on ties. 0 if empty."""
        from .colour_convert import delta_e_vec

        if not self.colors:
            return 0
        target = color.as_array() if isinstance(color, Color) else color
        return int(np.argmin(delta_e_vec(target, self.lab)))

    def sorted_by_luminance(self) -> "Palette":
        return Palette(tuple(sorted(self.colors, key=lambda cf: cf.color.l)))

    def with_color(self, slot: int, color: Color) -> "Palette":
        """Copy with the colour in `slot` replaced. Frequency is kept."""
        items = list(self.colors)
        items[slot] = ColorFrequency(color, items[slot].frequency)
        return Palette(tuple(items))


@dataclass(frozen=True, eq=False)
class Tile:
    """Source pixels of one tilemap cell plus its packed palette indices."""

    pixels: Lab  # (tile_size, 3)
    quantized: PackedTile = field(
        default_factory=lambda: np.zeros((0,), dtype=np.uint16)
    )


@dataclass(frozen=True, eq=False)
class UniqueTile:
    """Representative packed tile and the tile index it was taken from."""

    quantized: PackedTile
    source_tile: int


@dataclass(frozen=True)
class TileAssignment:
    unique_tile_index: int
    palette_index: int


@dataclass(frozen=True)
class TilemapEntry:
    """(palette, tile) pair packed into one 16-bit tilemap word."""

    palette_index: int
    tile_index: int

    @property
    def raw_value(self) -> int:
        return (
            (self.palette_index << PALETTE_INDEX_SHIFT) | self.tile_index
        ) & 0xFFFF

    @classmethod
    def from_raw(cls, raw: int) -> "TilemapEntry":
        return cls(int(raw) >> PALETTE_INDEX_SHIFT, int(raw) & TILE_INDEX_MASK)

    def to_dict(self) -> Dict[str, int]:
        return {
            "palette_index": self.palette_index,
            "tile_index": self.tile_index,
            "raw_value": self.raw_value,
        }


@dataclass(frozen=True, eq=False)
class TilemapData:
    """Structured result, the shape of the optional JSON dump."""

    config: Any  # tilequant.config.Config
    tiles: List[Tile]
    palettes: List[Palette]
    tilemap: List[TilemapEntry]


# Small helpers


def pack_indices(indices: Sequence[int] | np.ndarray, chunks: Optional[int] = None) -> PackedTile:
    """
    Pack colour indices into 16-bit words, PIXELS_PER_CHUNK per word.
    Pixel i sits at bit offset (i % PIXELS_PER_CHUNK) * BITS_PER_COLOR of word
    i // PIXELS_PER_CHUNK.
    """
    idx = np.asarray(indices, dtype=np.uint16).ravel()
    if chunks is None:
        chunks = (idx.size + PIXELS_PER_CHUNK - 1) // PIXELS_PER_CHUNK
    words = [0] * chunks
    for i, value in enumerate(idx.tolist()):
        words[i // PIXELS_PER_CHUNK] |= (value & INDEX_MASK) << (
            (i % PIXELS_PER_CHUNK) * BITS_PER_COLOR
        )
    return np.array(words, dtype=np.uint16)


def unpack_indices(words: np.ndarray, count: int) -> NDArray[np.int64]:
    """Inverse of pack_indices: the first `count` indices as int64."""
    w = np.asarray(words, dtype=np.int64)
    pos = np.arange(count, dtype=np.int64)
    shifts = (pos % PIXELS_PER_CHUNK) * BITS_PER_COLOR
    return (w[pos // PIXELS_PER_CHUNK] >> shifts) & INDEX_MASK


def rgb_to_hex(rgb: RGBTuple) -> HexStr:
    """RGB tuple to lowercase 'rrggbb' (no '#', the hex file form)."""
    return f"{rgb[0]:02x}{rgb[1]:02x}{rgb[2]:02x}"


def assert_u8_image_rgb(image: np.ndarray) -> U8Image:
    """Validate a uint8 (H,W,3) image and return it typed as U8Image."""
    if image.dtype != np.uint8 or image.ndim != 3 or image.shape[-1] != 3:
        raise TypeError("expected uint8 (H,W,3) image")
    return image  # type: ignore[return-value]


__all__ = [
    # aliases / types
    "RGBTuple",
    "HexStr",
    "U8Image",
    "Lab",
    "Features",
    "PackedTile",
    "DistanceFn",
    # value objects
    "Color",
    "BLACK",
    "ColorFrequency",
    "Palette",
    "Tile",
    "UniqueTile",
    "TileAssignment",
    "TilemapEntry",
    "TilemapData",
    # helpers
    "pack_indices",
    "unpack_indices",
    "rgb_to_hex",
    "assert_u8_image_rgb",
]
