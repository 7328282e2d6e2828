from __future__ import annotations

import pytest

from tilequant.config import Config
from tilequant.errors import ConfigError, ConversionError


def test_defaults_and_derived_sizes():
    config = Config()
    assert (config.tile_width, config.tile_height) == (8, 8)
    assert config.total_tiles == 1024
    assert config.tile_size == 64
    assert (config.total_width, config.total_height) == (256, 256)
    assert config.chunks_per_tile == 16
    assert config.chunks_per_row == 2
    assert config.dithering is True
    assert config.dither_factor == 0.75
    assert config.color_similarity_threshold == 0.005
    assert config.max_unique_tiles == 256


def test_odd_tile_sizes_round_chunks_up():
    config = Config(tile_width=3, tile_height=3)
    assert config.chunks_per_tile == 3
    assert config.chunks_per_row == 1


@pytest.mark.parametrize(
    "field, value",
    [
        ("tile_width", 0),
        ("tilemap_height", -1),
        ("num_palettes", 0),
        ("num_palettes", 65),
        ("colors_per_palette", 17),
        ("max_unique_tiles", 1025),
        ("dither_factor", -0.1),
        ("color_similarity_threshold", -1.0),
    ],
)
def test_out_of_range_values_are_rejected(field, value):
    with pytest.raises(ConfigError) as info:
        Config(**{field: value})
    assert info.value.field == field
    assert isinstance(info.value, ConversionError)


def test_replace_validates_and_keeps_original():
    config = Config()
    smaller = config.replace(tilemap_width=4, tilemap_height=2)
    assert smaller.total_tiles == 8
    assert config.total_tiles == 1024
    with pytest.raises(ConfigError):
        config.replace(colors_per_palette=0)


def test_to_dict_is_plain():
    data = Config(output_json="x.json").to_dict()
    assert data["output_json"] == "x.json"
    assert data["num_palettes"] == 32
