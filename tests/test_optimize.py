from __future__ import annotations

import numpy as np

from conftest import make_palette
from tilequant.colour_convert import rgb_to_oklab
from tilequant.core_types import (
    Tile,
    TileAssignment,
    UniqueTile,
    pack_indices,
)
from tilequant.tiles.dedupe import decode_tile, dedupe_tiles
from tilequant.tiles.optimize import (
    build_tilemap,
    candidate_table,
    find_best_assignments,
    render_reconstruction,
)

BW = make_palette((0, 0, 0), (255, 255, 255))
WB = make_palette((255, 255, 255), (0, 0, 0))


def _solid_words(index: int, tile_size: int = 16) -> np.ndarray:
    return pack_indices([index] * tile_size)


def _solid_tile(rgb, tile_size: int = 16) -> Tile:
    return Tile(pixels=rgb_to_oklab(np.array([rgb] * tile_size, dtype=np.uint8)))


# dedupe


def test_dedupe_is_identity_within_budget(small_config):
    quantized = [_solid_words(i) for i in range(4)]
    unique = dedupe_tiles(quantized, [0, 0, 0, 0], [BW], small_config)
    assert [u.source_tile for u in unique] == [0, 1, 2, 3]
    for u, q in zip(unique, quantized):
        assert u.quantized is not q
        np.testing.assert_array_equal(u.quantized, q)


def test_dedupe_keeps_first_member_of_each_cluster(small_config, rng):
    config = small_config.replace(max_unique_tiles=2)
    quantized = [_solid_words(i % 2) for i in range(4)]
    unique = dedupe_tiles(quantized, [0, 0, 0, 0], [BW], config, rng)
    assert [u.source_tile for u in unique] == [0, 1]


def test_decode_tile_missing_index_is_zero():
    words = pack_indices([0, 1, 0, 1])
    lab = decode_tile(words, make_palette((255, 255, 255)), 4)
    np.testing.assert_allclose(lab[0], rgb_to_oklab(np.array([255, 255, 255])))
    assert not lab[1].any()
    assert not lab[3].any()


# optimize


def test_ties_keep_first_pair_in_order():
    unique = [UniqueTile(_solid_words(0), 0), UniqueTile(_solid_words(1), 1)]
    tiles = [_solid_tile((0, 0, 0)), _solid_tile((255, 255, 255))]
    black, white = find_best_assignments(tiles, unique, [BW, WB])
    assert (black.unique_tile_index, black.palette_index) == (0, 0)
    # (0, 1) and (1, 0) both reproduce white exactly
    assert (white.unique_tile_index, white.palette_index) == (0, 1)


def test_missing_colour_costs_the_penalty():
    grey = make_palette((128, 128, 128))
    unique = [UniqueTile(_solid_words(1), 0), UniqueTile(_solid_words(0), 1)]
    decoded, valid = candidate_table(unique, [grey], 16)
    assert decoded.shape == (2, 1, 16, 3)
    assert not valid[0].any()
    assert valid[1].all()

    (best,) = find_best_assignments([_solid_tile((255, 255, 255))], unique, [grey])
    assert best.unique_tile_index == 1


def test_build_tilemap_packs_words():
    entries = build_tilemap([TileAssignment(3, 2), TileAssignment(0, 0)])
    assert [(e.palette_index, e.tile_index) for e in entries] == [(2, 3), (0, 0)]
    assert [e.raw_value for e in entries] == [0x0803, 0x0000]


def test_render_reconstruction(small_config):
    unique = [UniqueTile(_solid_words(1), 0), UniqueTile(pack_indices([0, 1] * 8), 1)]
    assignments = [
        TileAssignment(0, 0),
        TileAssignment(0, 1),
        TileAssignment(1, 0),
        TileAssignment(1, 1),
    ]
    white_only = make_palette((255, 255, 255))
    img = render_reconstruction(unique, [BW, white_only], assignments, small_config)

    assert img.shape == (8, 8, 3)
    assert img.dtype == np.uint8
    assert (img[:4, :4] == 255).all()  # tile 0: BW index 1
    assert (img[:4, 4:] == 0).all()  # tile 1: index 1 missing from white_only
    np.testing.assert_array_equal(img[4, 0:4, 0], [0, 255, 0, 255])
    np.testing.assert_array_equal(img[4, 4:8, 0], [255, 0, 255, 0])

