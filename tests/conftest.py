from __future__ import annotations

import numpy as np
import pytest

from tilequant.config import Config
from tilequant.core_types import Color, ColorFrequency, Palette


def make_palette(*rgbs, frequency: int = 1) -> Palette:
    """Palette from RGB tuples, in the given order."""
    return Palette(tuple(ColorFrequency(Color.from_rgb(*rgb), frequency) for rgb in rgbs))


def solid_image(width: int, height: int, rgb) -> np.ndarray:
    out = np.zeros((height, width, 3), dtype=np.uint8)
    out[...] = np.array(rgb, dtype=np.uint8)
    return out


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def small_config() -> Config:
    """4x4 tiles on a 2x2 tilemap (8x8 image)."""
    return Config(
        tile_width=4,
        tile_height=4,
        tilemap_width=2,
        tilemap_height=2,
        num_palettes=2,
        colors_per_palette=4,
        max_unique_tiles=4,
    )
