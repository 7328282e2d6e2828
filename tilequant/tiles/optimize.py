# tilequant/tiles/optimize.py
from __future__ import annotations

"""
Final (unique tile, palette) choice per tilemap cell, and what follows from it.

Exports:
  candidate_table(unique_tiles, palettes, tile_size) -> (decoded, valid)
  find_best_assignments(tiles, unique_tiles, palettes) -> list[TileAssignment]
  build_tilemap(assignments) -> list[TilemapEntry]
  render_reconstruction(unique_tiles, palettes, assignments, config) -> U8Image

Exhaustive: every cell scores every unique tile under every palette against
its original pixels. A tile index with no colour in the candidate palette
costs MISSING_COLOR_PENALTY. Ties keep the first pair in (unique, palette)
order.
"""

from typing import List, Sequence, Tuple

import numpy as np

from ..colour_convert import delta_e_vec, oklab_to_rgb
from ..config import Config
from ..constants import MISSING_COLOR_PENALTY, PALETTE_SLOTS
from ..core_types import (
    Palette,
    Tile,
    TileAssignment,
    TilemapEntry,
    U8Image,
    UniqueTile,
    unpack_indices,
)
from .extract import tiles_to_canvas


def _palette_table(palettes: Sequence[Palette]) -> Tuple[np.ndarray, np.ndarray]:
    """[P, PALETTE_SLOTS, 3] colours and [P, PALETTE_SLOTS] 'slot exists' mask."""
    table = np.zeros((len(palettes), PALETTE_SLOTS, 3), dtype=np.float64)
    valid = np.zeros((len(palettes), PALETTE_SLOTS), dtype=bool)
    for p, palette in enumerate(palettes):
        lab = palette.lab[:PALETTE_SLOTS]
        table[p, : lab.shape[0]] = lab
        valid[p, : lab.shape[0]] = True
    return table, valid


def candidate_table(
    unique_tiles: Sequence[UniqueTile], palettes: Sequence[Palette], tile_size: int
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Every unique tile decoded through every palette.

    Returns:
      decoded: float64 [U, P, tile_size, 3]
      valid: bool [U, P, tile_size], False where the index has no colour
    """
    indices = np.stack([unpack_indices(u.quantized, tile_size) for u in unique_tiles])
    table, valid = _palette_table(palettes)
    decoded = table[:, indices].transpose(1, 0, 2, 3)  # [P, U, n, 3] -> [U, P, n, 3]
    mask = valid[:, indices].transpose(1, 0, 2)
    return decoded, mask


def find_best_assignments(
    tiles: Sequence[Tile],
    unique_tiles: Sequence[UniqueTile],
    palettes: Sequence[Palette],
) -> List[TileAssignment]:
    """Best (unique tile, palette) for each tile position."""
    if not tiles:
        return []
    tile_size = tiles[0].pixels.shape[0]
    decoded, valid = candidate_table(unique_tiles, palettes, tile_size)
    num_palettes = decoded.shape[1]

    out: List[TileAssignment] = []
    for tile in tiles:
        d = delta_e_vec(tile.pixels[None, None, :, :], decoded)  # [U, P, n]
        cost = np.where(valid, d, MISSING_COLOR_PENALTY).sum(axis=2)
        best = int(np.argmin(cost))  # row-major: unique-major, palette-minor
        out.append(TileAssignment(best // num_palettes, best % num_palettes))
    return out


def build_tilemap(assignments: Sequence[TileAssignment]) -> List[TilemapEntry]:
    return [TilemapEntry(a.palette_index, a.unique_tile_index) for a in assignments]


def render_reconstruction(
    unique_tiles: Sequence[UniqueTile],
    palettes: Sequence[Palette],
    assignments: Sequence[TileAssignment],
    config: Config,
) -> U8Image:
    """RGB image drawn from the tilemap. Pixels whose index has no colour stay black."""
    table, valid = _palette_table(palettes)
    rgb_table = oklab_to_rgb(table)
    rgb_table[~valid] = 0

    tile_size = config.tile_size
    per_tile = np.zeros((len(assignments), tile_size, 3), dtype=np.uint8)
    for t, a in enumerate(assignments):
        idx = unpack_indices(unique_tiles[a.unique_tile_index].quantized, tile_size)
        per_tile[t] = rgb_table[a.palette_index, idx]
    return tiles_to_canvas(per_tile, config)


__all__ = [
    "candidate_table",
    "find_best_assignments",
    "build_tilemap",
    "render_reconstruction",
]
