# tilequant/dither.py
from __future__ import annotations

"""
Tile quantization with Sierra error diffusion.

- One pass over the whole canvas in raster order (row-major, crossing tile
  borders), so diffused error carries from one tile into its neighbours.
- Working colour = source colour + accumulated error at that pixel.
- Chosen index = nearest colour in the tile's assigned palette (lowest index
  on ties), packed 4 bits per pixel into the tile's 16-bit words.
- Residual (working - chosen) / 32 * dither_factor is spread forward with the
  Sierra weights in constants.SIERRA_KERNEL. Targets outside the canvas are
  dropped. Already-visited pixels are never touched again.

With dithering off the accumulator is not used and quantization is a plain
nearest-colour lookup.
"""

import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from .config import Config
from .constants import DITHER_ERROR_DIVISOR, SIERRA_KERNEL
from .core_types import Lab, PackedTile, Palette, Tile, pack_indices
from .tiles.extract import canvas_to_tile_arrays, tiles_to_canvas
from .utils import debug_log, format_seconds_compact, key_value_pairs_to_string


@dataclass(frozen=True, eq=False)
class QuantizeResult:
    quantized: List[PackedTile]  # per tile, config.chunks_per_tile words
    indices: np.ndarray  # [T, tile_size] chosen palette indices
    error: Optional[Lab]  # [H, W, 3] final accumulator; None when dithering is off


def diffuse_error(
    error: Lab, residual: np.ndarray, x: int, y: int, factor: float = 1.0
) -> None:
    """Spread one pixel's residual onto its forward neighbours in place."""
    height, width = error.shape[0], error.shape[1]
    for dx, dy, weight in SIERRA_KERNEL:
        nx, ny = x + dx, y + dy
        if 0 <= nx < width and ny < height:
            error[ny, nx] += residual * (weight * factor)


def quantize_tiles(
    tiles: Sequence[Tile],
    palettes: Sequence[Palette],
    assignments: Sequence[int],
    config: Config,
    *,
    debug: bool = False,
) -> QuantizeResult:
    """
    Quantize every tile against palettes[assignments[t]].

    Returns packed words per tile, the raw indices and the final error buffer.
    """
    t0 = time.perf_counter()
    src_tiles = np.stack([t.pixels for t in tiles]).astype(np.float64, copy=False)
    canvas = tiles_to_canvas(src_tiles, config)
    height, width = canvas.shape[0], canvas.shape[1]

    tile_index_of = tiles_to_canvas(
        np.repeat(np.arange(len(tiles))[:, None, None], config.tile_size, axis=1),
        config,
    )[..., 0]

    error: Optional[Lab] = None
    if config.dithering:
        error = np.zeros((height, width, 3), dtype=np.float64)

    chosen = np.zeros((height, width), dtype=np.int64)
    for y in range(height):
        for x in range(width):
            palette = palettes[assignments[int(tile_index_of[y, x])]]
            colour = canvas[y, x]
            if error is not None:
                colour = colour + error[y, x]

            if len(palette) == 0:
                continue
            idx = palette.find_best_color(colour)
            chosen[y, x] = idx

            if error is not None:
                residual = (colour - palette.lab[idx]) / DITHER_ERROR_DIVISOR
                diffuse_error(error, residual, x, y, config.dither_factor)

    indices = canvas_to_tile_arrays(chosen[..., None], config)[..., 0]
    quantized = [pack_indices(row, config.chunks_per_tile) for row in indices]

    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Quantized", f"{width}x{height}"),
                    ("Dithering", bool(config.dithering)),
                    ("Factor", float(config.dither_factor)),
                    ("Time", format_seconds_compact(time.perf_counter() - t0)),
                ]
            )
        )
    return QuantizeResult(quantized=quantized, indices=indices, error=error)


__all__ = ["QuantizeResult", "diffuse_error", "quantize_tiles"]
