# tilequant/palette/assign.py
from __future__ import annotations

"""
Pre-dither palette choice.

Each tile takes the palette minimising the sum, over its pixels, of the
distance to the nearest colour in that palette. Ties go to the lowest palette
index; an empty palette never wins.
"""

from typing import List, Sequence

import numpy as np

from ..colour_convert import delta_e_vec
from ..core_types import Palette, Tile


def palette_errors(tiles: Sequence[Tile], palettes: Sequence[Palette]) -> np.ndarray:
    """[P, T] summed nearest-colour distance of every tile under every palette."""
    pixels = np.stack([t.pixels for t in tiles]).astype(np.float64, copy=False)
    out = np.full((len(palettes), len(tiles)), np.inf, dtype=np.float64)
    for p, palette in enumerate(palettes):
        if len(palette) == 0:
            continue
        # [T, n, C] -> nearest colour per pixel -> per tile sum
        d = delta_e_vec(pixels[:, :, None, :], palette.lab[None, None, :, :])
        out[p] = d.min(axis=2).sum(axis=1)
    return out


def assign_palettes(tiles: Sequence[Tile], palettes: Sequence[Palette]) -> List[int]:
    """Best palette index per tile."""
    if not tiles:
        return []
    if not palettes:
        raise ValueError("at least one palette is required")
    errors = palette_errors(tiles, palettes)
    return [int(i) for i in np.argmin(errors, axis=0)]


__all__ = ["palette_errors", "assign_palettes"]
