# tilequant/tiles/dedupe.py
from __future__ import annotations

"""
Reduce quantized tiles to at most max_unique_tiles representatives.

Up to the budget every tile is its own representative. Beyond it, tiles are
decoded through their assigned palette, clustered on plain per-pixel OKLab
(planar rows), and each cluster is represented by its lowest-indexed member.
"""

import time
from typing import List, Optional, Sequence

import numpy as np

from ..clustering import cluster
from ..colour_convert import planar_distance_batch
from ..config import Config
from ..constants import KMEANS_MAX_ITERATIONS
from ..core_types import Features, Lab, PackedTile, Palette, UniqueTile, unpack_indices
from ..utils import debug_log, format_seconds_compact, key_value_pairs_to_string


def decode_tile(words: PackedTile, palette: Palette, tile_size: int) -> Lab:
    """Packed indices -> [tile_size, 3] OKLab. Indices with no colour decode to (0, 0, 0)."""
    idx = unpack_indices(words, tile_size)
    lab = palette.lab
    out = np.zeros((tile_size, 3), dtype=np.float64)
    valid = idx < lab.shape[0]
    out[valid] = lab[idx[valid]]
    return out


def decoded_features(
    quantized: Sequence[PackedTile],
    assignments: Sequence[int],
    palettes: Sequence[Palette],
    tile_size: int,
) -> Features:
    """[T, 3 * tile_size] planar rows of the decoded tiles."""
    rows = [
        decode_tile(words, palettes[assignments[t]], tile_size).T.reshape(-1)
        for t, words in enumerate(quantized)
    ]
    return np.stack(rows) if rows else np.zeros((0, 3 * tile_size))


def dedupe_tiles(
    quantized: Sequence[PackedTile],
    assignments: Sequence[int],
    palettes: Sequence[Palette],
    config: Config,
    rng: Optional[np.random.Generator] = None,
    *,
    debug: bool = False,
) -> List[UniqueTile]:
    """Representative tiles in order of first occurrence."""
    num_tiles = len(quantized)
    if num_tiles <= config.max_unique_tiles:
        return [UniqueTile(quantized=q.copy(), source_tile=i) for i, q in enumerate(quantized)]

    if rng is None:
        rng = np.random.default_rng(config.seed)
    t0 = time.perf_counter()
    features = decoded_features(quantized, assignments, palettes, config.tile_size)
    result = cluster(
        features,
        config.max_unique_tiles,
        KMEANS_MAX_ITERATIONS,
        planar_distance_batch,
        rng=rng,
    )

    seen = set()
    unique: List[UniqueTile] = []
    for tile_idx, cluster_id in enumerate(result.assignments.tolist()):
        if cluster_id not in seen:
            seen.add(cluster_id)
            unique.append(
                UniqueTile(quantized=quantized[tile_idx].copy(), source_tile=tile_idx)
            )

    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Tiles", num_tiles),
                    ("Unique", len(unique)),
                    ("Iterations", result.iterations),
                    ("Time", format_seconds_compact(time.perf_counter() - t0)),
                ]
            )
        )
    return unique


__all__ = ["decode_tile", "decoded_features", "dedupe_tiles"]
