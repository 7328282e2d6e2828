"""
Palette API.

Provides:
  generate_palettes(tiles, config, rng=None, *, debug=False) -> list[Palette]
    Cluster tiles by colour content and build one palette per cluster.
    Palettes come back sorted by mean lightness with palette 0 slot 0 black.

  assign_palettes(tiles, palettes) -> list[int]
    Pre-dither palette per tile: lowest summed nearest-colour distance,
    ties to the lowest palette index.
"""

from .assign import assign_palettes
from .generate import generate_palettes

__all__ = ["generate_palettes", "assign_palettes"]
