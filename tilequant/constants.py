# tilequant/constants.py
"""
Fixed tunables shared across the converter.

- Packed index layout (BITS_PER_COLOR, PIXELS_PER_CHUNK, PALETTE_SLOTS)
- Tilemap word layout (PALETTE_INDEX_SHIFT, TILE_INDEX_MASK)
- Clustering caps (KMEANS_MAX_ITERATIONS, COLOR_REDUCTION_MAX_ITERATIONS)
- Dithering (DITHER_ERROR_DIVISOR, SIERRA_KERNEL)
- Metrics (DELTA_E_DISPLAY_FACTOR, MAX_PIXEL_VALUE)
"""
from __future__ import annotations

from typing import Tuple

# =========================
# Packed tile index layout
# =========================

# Width of one colour index in the packed tile data.
BITS_PER_COLOR: int = 4

# Indices per 16-bit word.
PIXELS_PER_CHUNK: int = 16 // BITS_PER_COLOR

# Number of addressable colour slots per palette.
PALETTE_SLOTS: int = 1 << BITS_PER_COLOR

INDEX_MASK: int = PALETTE_SLOTS - 1

# =========================
# Tilemap word layout
# =========================

# raw = (palette_index << PALETTE_INDEX_SHIFT) | tile_index
PALETTE_INDEX_SHIFT: int = 10
TILE_INDEX_MASK: int = (1 << PALETTE_INDEX_SHIFT) - 1
MAX_PALETTES: int = 1 << (16 - PALETTE_INDEX_SHIFT)
MAX_UNIQUE_TILES: int = 1 << PALETTE_INDEX_SHIFT

# =========================
# Clustering
# =========================

# Lloyd iteration cap when grouping tiles (palettes and unique tiles).
KMEANS_MAX_ITERATIONS: int = 10_000

# Lloyd iteration cap when reducing a palette's candidate colours.
COLOR_REDUCTION_MAX_ITERATIONS: int = 100_000

# =========================
# Dithering
# =========================

# Residual is divided by this before the integer kernel weights are applied.
DITHER_ERROR_DIVISOR: float = 32.0

# Sierra kernel as (dx, dy, weight). Weights sum to 32.
SIERRA_KERNEL: Tuple[Tuple[int, int, int], ...] = (
    (1, 0, 5),
    (2, 0, 3),
    (-2, 1, 2),
    (-1, 1, 4),
    (0, 1, 5),
    (1, 1, 4),
    (2, 1, 2),
    (-1, 2, 2),
    (0, 2, 3),
    (1, 2, 2),
)

# =========================
# Metrics
# =========================

# dE values are reported multiplied by this.
DELTA_E_DISPLAY_FACTOR: float = 100.0

# Peak value for PSNR (8-bit channels).
MAX_PIXEL_VALUE: float = 255.0

# Penalty per pixel when a tile index has no colour in the candidate palette.
MISSING_COLOR_PENALTY: float = 1.0
