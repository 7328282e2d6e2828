# tilequant/tiles/extract.py
from __future__ import annotations

"""
Image <-> tile partitioning.

Exports:
  check_dimensions(width, height, config)
  extract_tiles(rgb, config) -> list[Tile]
  tiles_to_canvas(tile_arrays, config) -> array [H, W, ...]

Tile t covers cell (t % tilemap_width, t // tilemap_width). Pixel i of a tile
is (i % tile_width, i // tile_width) inside that cell.
"""

from typing import List, Sequence

import numpy as np

from ..colour_convert import rgb_to_oklab
from ..config import Config
from ..core_types import Tile, U8Image, assert_u8_image_rgb
from ..errors import DimensionMismatchError, InvalidDimensionsError


def check_dimensions(width: int, height: int, config: Config) -> None:
    """
    Raise InvalidDimensionsError if the image is not a whole number of tiles,
    DimensionMismatchError if it is but does not match the tilemap size.
    """
    if width % config.tile_width != 0 or height % config.tile_height != 0:
        raise InvalidDimensionsError(
            width, height, config.tile_width, config.tile_height
        )
    if width != config.total_width or height != config.total_height:
        raise DimensionMismatchError(
            width, height, config.total_width, config.total_height
        )


def canvas_to_tile_arrays(canvas: np.ndarray, config: Config) -> np.ndarray:
    """[H, W, C] canvas to [T, tile_size, C] in tile / pixel order."""
    tw, th = config.tile_width, config.tile_height
    cols, rows = config.tilemap_width, config.tilemap_height
    channels = canvas.shape[-1]
    blocks = canvas.reshape(rows, th, cols, tw, channels).transpose(0, 2, 1, 3, 4)
    return blocks.reshape(rows * cols, th * tw, channels)


def tiles_to_canvas(tile_arrays: np.ndarray | Sequence[np.ndarray], config: Config) -> np.ndarray:
    """Inverse of canvas_to_tile_arrays."""
    arr = np.asarray(tile_arrays)
    tw, th = config.tile_width, config.tile_height
    cols, rows = config.tilemap_width, config.tilemap_height
    channels = arr.shape[-1]
    blocks = arr.reshape(rows, cols, th, tw, channels).transpose(0, 2, 1, 3, 4)
    return blocks.reshape(rows * th, cols * tw, channels)


def extract_tiles(rgb: U8Image, config: Config) -> List[Tile]:
    """Split an RGB image into OKLab tiles. The image must match the config."""
    img = assert_u8_image_rgb(np.asarray(rgb))
    height, width = int(img.shape[0]), int(img.shape[1])
    check_dimensions(width, height, config)

    lab = rgb_to_oklab(img)
    per_tile = canvas_to_tile_arrays(lab, config)
    return [Tile(pixels=np.ascontiguousarray(per_tile[t])) for t in range(per_tile.shape[0])]


__all__ = [
    "check_dimensions",
    "canvas_to_tile_arrays",
    "tiles_to_canvas",
    "extract_tiles",
]
