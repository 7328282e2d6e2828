from __future__ import annotations

import math

import numpy as np
import pytest
from PIL import Image

from conftest import solid_image
from tilequant.config import Config
from tilequant.core_types import BLACK
from tilequant.errors import DimensionMismatchError, ImageReadError
from tilequant.pipeline import convert_file, convert_image


def test_single_black_tile():
    config = Config(tilemap_width=1, tilemap_height=1)
    result = convert_image(solid_image(8, 8, (0, 0, 0)), config)

    assert len(result.palettes) == config.num_palettes
    assert result.palettes[0].colors[0].color == BLACK
    assert len(result.unique_tiles) == 1
    assert [e.raw_value for e in result.tilemap] == [0]
    assert math.isinf(result.quality.psnr.average)
    assert not result.reconstruction.any()


def test_random_image_properties():
    config = Config(
        tilemap_width=4,
        tilemap_height=4,
        num_palettes=4,
        colors_per_palette=4,
        max_unique_tiles=8,
    )
    img = np.random.default_rng(7).integers(0, 256, size=(32, 32, 3), dtype=np.uint8)
    result = convert_image(img, config)

    assert len(result.palettes) == 4
    assert all(len(p) <= 4 for p in result.palettes)
    assert result.palettes[0].colors[0].color == BLACK
    assert 1 <= len(result.unique_tiles) <= 8
    assert len(result.tilemap) == 16
    for entry in result.tilemap:
        assert entry.palette_index < 4
        assert entry.tile_index < len(result.unique_tiles)
    assert result.reconstruction.shape == img.shape
    assert result.reconstruction.dtype == np.uint8
    assert np.isfinite(result.quality.psnr.average)
    assert len(result.data.tiles) == 16
    assert all(t.quantized.shape == (config.chunks_per_tile,) for t in result.data.tiles)


def test_same_seed_same_output():
    config = Config(
        tile_width=4,
        tile_height=4,
        tilemap_width=4,
        tilemap_height=4,
        num_palettes=3,
        colors_per_palette=4,
        max_unique_tiles=6,
        seed=11,
    )
    img = np.random.default_rng(3).integers(0, 256, size=(16, 16, 3), dtype=np.uint8)
    first = convert_image(img, config)
    second = convert_image(img, config)
    assert [e.raw_value for e in first.tilemap] == [e.raw_value for e in second.tilemap]
    np.testing.assert_array_equal(first.reconstruction, second.reconstruction)


def test_wrong_size_is_rejected():
    with pytest.raises(DimensionMismatchError):
        convert_image(solid_image(16, 8, (0, 0, 0)), Config(tilemap_width=1, tilemap_height=1))


def _file_config(tmp_path, **overrides) -> Config:
    config = Config(
        input_file=str(tmp_path / "in.png"),
        output_png=str(tmp_path / "out.png"),
        output_palette_hex=str(tmp_path / "palette.hex"),
        output_tiles_hex=str(tmp_path / "tiles.hex"),
        output_tilemap_hex=str(tmp_path / "tile_map.hex"),
        output_json=str(tmp_path / "out.json"),
        tilemap_width=2,
        tilemap_height=2,
        num_palettes=2,
        colors_per_palette=4,
        max_unique_tiles=4,
    )
    return config.replace(**overrides)


def test_convert_file_writes_every_output(tmp_path, capsys):
    config = _file_config(tmp_path)
    img = np.zeros((16, 16, 3), dtype=np.uint8)
    img[:8, 8:] = (200, 40, 40)
    img[8:, :] = (40, 40, 200)
    Image.fromarray(img).save(config.input_file)

    result = convert_file(config)

    palette_text = (tmp_path / "palette.hex").read_text().splitlines()
    assert len(palette_text) == 2
    assert all(len(line.split()) == 4 for line in palette_text)
    assert len((tmp_path / "tile_map.hex").read_text().splitlines()) == 2
    tiles_text = (tmp_path / "tiles.hex").read_text().splitlines()
    assert len(tiles_text) == 8
    assert all(len(line.split()) == 2 * 4 for line in tiles_text)
    assert (tmp_path / "out.json").exists()

    with Image.open(tmp_path / "out.png") as png:
        assert png.size == (16, 16)
        np.testing.assert_array_equal(np.array(png.convert("RGB")), result.reconstruction)

    out = capsys.readouterr().out
    assert "Average PSNR" in out
    assert "Total time" in out


def test_missing_input_is_a_read_error(tmp_path):
    with pytest.raises(ImageReadError):
        convert_file(_file_config(tmp_path))


def test_non_png_output_name_is_logged_as_written(tmp_path, capsys):
    config = _file_config(tmp_path, output_png=str(tmp_path / "out.bmp"))
    Image.fromarray(solid_image(16, 16, (10, 20, 30))).save(config.input_file)

    convert_file(config)

    assert (tmp_path / "out.png").exists()
    assert not (tmp_path / "out.bmp").exists()
    out = capsys.readouterr().out
    assert f"Wrote {tmp_path / 'out.png'} " in out
