# tilequant/palette/generate.py
from __future__ import annotations

"""
Palette generation.

1. One feature row per tile: pixels sorted by hue, then every cyclic rotation
   of that sequence, laid out as L / a / b planes. Rows compare tiles by the
   multiset of their colours rather than by pixel position.
2. k-means groups the tiles into num_palettes clusters.
3. Per cluster, member pixels are merged greedily: a pixel joins the first
   candidate closer than color_similarity_threshold, else it becomes a new
   candidate. Order-dependent by construction.
4. Clusters with more candidates than colors_per_palette are reduced with a
   second k-means over (L, a, b); each new colour is the frequency-weighted
   mean of its members. A cluster that ends up with no weight keeps colour
   (0, 0, 0) and frequency 0.
5. Colours sorted by L inside each palette, palettes sorted by mean L, and
   palette 0 slot 0 forced to black.
"""

import time
from typing import List, Optional, Sequence

import numpy as np

from ..clustering import cluster
from ..colour_convert import delta_e_vec, hue_of, planar_distance_batch
from ..config import Config
from ..constants import COLOR_REDUCTION_MAX_ITERATIONS, KMEANS_MAX_ITERATIONS
from ..core_types import BLACK, Color, ColorFrequency, Features, Lab, Palette, Tile
from ..errors import PaletteGenerationError
from ..utils import (
    debug_log,
    format_seconds_compact,
    key_value_pairs_to_string,
    warn,
)


# Step 1: rotation features


def rotation_features(tiles: Sequence[Tile]) -> Features:
    """
    [T, 3 * n * n] planar rows, n = pixels per tile.

    Row layout per plane: rotation 0 (n values), rotation 1, ... where
    rotation r lists hue_sorted[(i + r) % n] for i in 0..n-1.
    """
    if not tiles:
        return np.zeros((0, 0), dtype=np.float64)
    pixels = np.stack([t.pixels for t in tiles]).astype(np.float64, copy=False)
    num_tiles, n, _ = pixels.shape

    order = np.argsort(hue_of(pixels), axis=1, kind="stable")
    hue_sorted = np.take_along_axis(pixels, order[..., None], axis=1)

    offsets = np.arange(n)
    rot_idx = (offsets[None, :] + offsets[:, None]) % n  # [rotation, i]
    rotated = hue_sorted[:, rot_idx, :]  # [T, n, n, 3]
    return rotated.transpose(0, 3, 1, 2).reshape(num_tiles, 3 * n * n)


# Step 3: greedy colour extraction


class CandidateColours:
    """Growing list of (colour, frequency) with first-match threshold merging."""

    def __init__(self, capacity: int = 16) -> None:
        self._lab = np.zeros((max(1, capacity), 3), dtype=np.float64)
        self._freq: List[int] = []

    def __len__(self) -> int:
        return len(self._freq)

    def add(self, lab_row: np.ndarray, threshold: float) -> int:
        """Merge or append one colour; returns the candidate index used."""
        count = len(self._freq)
        if count:
            d = delta_e_vec(lab_row, self._lab[:count])
            hits = np.flatnonzero(d < threshold)
            if hits.size:
                idx = int(hits[0])
                self._freq[idx] += 1
                return idx
        if count == self._lab.shape[0]:
            grown = np.zeros((count * 2, 3), dtype=np.float64)
            grown[:count] = self._lab
            self._lab = grown
        self._lab[count] = lab_row
        self._freq.append(1)
        return count

    def items(self) -> List[ColorFrequency]:
        return [
            ColorFrequency(Color.from_array(self._lab[i]), f)
            for i, f in enumerate(self._freq)
        ]


def extract_palette_colors(
    tiles: Sequence[Tile],
    assignments: np.ndarray,
    num_palettes: int,
    threshold: float,
) -> List[List[ColorFrequency]]:
    """Greedy threshold merge of every member pixel, clusters visited in tile order."""
    if len(assignments) < len(tiles):
        raise PaletteGenerationError(
            f"Tile index {len(assignments)} out of bounds for "
            f"{len(assignments)} assignments"
        )
    buckets = [CandidateColours() for _ in range(num_palettes)]
    for tile_index, tile in enumerate(tiles):
        assignment = int(assignments[tile_index])
        if not 0 <= assignment < num_palettes:
            raise PaletteGenerationError(
                f"Palette assignment {assignment} exceeds num_palettes {num_palettes}"
            )
        bucket = buckets[assignment]
        for row in tile.pixels:
            bucket.add(row, threshold)
    return [b.items() for b in buckets]


# Step 4: colour reduction


def reduce_colors(
    colors: Sequence[ColorFrequency],
    k: int,
    rng: Optional[np.random.Generator] = None,
) -> List[ColorFrequency]:
    """
    Reduce to exactly k colours with k-means over (L, a, b).
    Total frequency is preserved; empty clusters come back as black with 0.
    """
    feats: Lab = np.array([cf.color.as_list() for cf in colors], dtype=np.float64)
    weights = np.array([cf.frequency for cf in colors], dtype=np.float64)

    result = cluster(
        feats,
        k,
        COLOR_REDUCTION_MAX_ITERATIONS,
        planar_distance_batch,
        rng=rng,
    )

    sums = np.zeros((k, 3), dtype=np.float64)
    totals = np.zeros((k,), dtype=np.int64)
    np.add.at(sums, result.assignments, feats * weights[:, None])
    np.add.at(totals, result.assignments, weights.astype(np.int64))

    out: List[ColorFrequency] = []
    for j in range(k):
        if totals[j] > 0:
            out.append(ColorFrequency(Color.from_array(sums[j] / totals[j]), int(totals[j])))
        else:
            out.append(ColorFrequency(Color(0.0, 0.0, 0.0), 0))
    return out


def build_palette(
    colors: List[ColorFrequency],
    colors_per_palette: int,
    rng: Optional[np.random.Generator] = None,
) -> Palette:
    """Frequency-ordered candidates -> reduced if needed -> sorted by L."""
    ordered = sorted(colors, key=lambda cf: -cf.frequency)
    if len(ordered) > colors_per_palette:
        ordered = reduce_colors(ordered, colors_per_palette, rng)
    return Palette(tuple(ordered)).sorted_by_luminance()


# Step 5: ordering + black anchor


def order_palettes(palettes: Sequence[Palette]) -> List[Palette]:
    """Sort by mean L (empty palettes last) and force palette 0 slot 0 to black."""
    ordered = sorted(palettes, key=lambda p: (len(p) == 0, p.average_luminance()))
    if ordered and len(ordered[0]) > 0:
        ordered[0] = ordered[0].with_color(0, BLACK)
    return ordered


# Entry point


def generate_palettes(
    tiles: Sequence[Tile],
    config: Config,
    rng: Optional[np.random.Generator] = None,
    *,
    debug: bool = False,
) -> List[Palette]:
    """
    Build config.num_palettes palettes for the given tiles.

    If there are fewer tiles than palettes, only len(tiles) clusters are formed
    and the remaining palettes are empty.
    """
    if rng is None:
        rng = np.random.default_rng(config.seed)
    if not tiles:
        return [Palette() for _ in range(config.num_palettes)]

    t0 = time.perf_counter()
    features = rotation_features(tiles)
    k = min(config.num_palettes, len(tiles))
    if k < config.num_palettes:
        warn(
            f"{len(tiles)} tiles for {config.num_palettes} palettes; "
            f"{config.num_palettes - k} stay empty"
        )
    result = cluster(features, k, KMEANS_MAX_ITERATIONS, planar_distance_batch, rng=rng)
    t1 = time.perf_counter()

    candidates = extract_palette_colors(
        tiles,
        result.assignments,
        config.num_palettes,
        config.color_similarity_threshold,
    )
    counts = [len(c) for c in candidates if c]
    palettes = [build_palette(c, config.colors_per_palette, rng) for c in candidates]
    ordered = order_palettes(palettes)
    t2 = time.perf_counter()

    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Tile clusters", k),
                    ("Iterations", result.iterations),
                    ("Min colours", min(counts) if counts else 0),
                    ("Max colours", max(counts) if counts else 0),
                    ("Cluster time", format_seconds_compact(t1 - t0)),
                    ("Reduce time", format_seconds_compact(t2 - t1)),
                ]
            )
        )
    return ordered


__all__ = [
    "rotation_features",
    "CandidateColours",
    "extract_palette_colors",
    "reduce_colors",
    "build_palette",
    "order_palettes",
    "generate_palettes",
]
