"""
Tile API.

Provides:
  extract_tiles(rgb, config) -> list[Tile]
  dedupe_tiles(quantized, assignments, palettes, config, rng=None) -> list[UniqueTile]
  find_best_assignments(tiles, unique_tiles, palettes) -> list[TileAssignment]
  build_tilemap(assignments) -> list[TilemapEntry]
  render_reconstruction(unique_tiles, palettes, assignments, config) -> U8Image
"""

from .dedupe import dedupe_tiles
from .extract import extract_tiles
from .optimize import build_tilemap, find_best_assignments, render_reconstruction

__all__ = [
    "extract_tiles",
    "dedupe_tiles",
    "find_best_assignments",
    "build_tilemap",
    "render_reconstruction",
]
