from __future__ import annotations

import argparse

import numpy as np
import pytest
from PIL import Image

from tilequant.cli import build_parser, config_from_args, main, parse_size


def test_parse_size():
    assert parse_size("8x8") == (8, 8)
    assert parse_size("32X16") == (32, 16)
    for bad in ("8", "axb", "0x4", "4x4x4"):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_size(bad)


def test_defaults_round_trip_to_config():
    config = config_from_args(build_parser().parse_args([]))
    assert config.tile_width == 8 and config.tilemap_height == 32
    assert config.num_palettes == 32
    assert config.dithering is True


def test_colours_are_capped():
    args = build_parser().parse_args(["--colors", "40", "--no-dither"])
    config = config_from_args(args)
    assert config.colors_per_palette == 16
    assert config.dithering is False


def test_bad_config_exits_with_2(capsys):
    assert main(["--palettes", "0"]) == 2
    assert "num_palettes" in capsys.readouterr().err


def test_missing_input_exits_with_1(tmp_path, capsys):
    assert main(["-i", str(tmp_path / "nope.png"), "--tilemap-size", "1x1"]) == 1
    assert "[error]" in capsys.readouterr().err


def test_full_run(tmp_path):
    src = tmp_path / "in.png"
    Image.fromarray(np.full((8, 16, 3), 90, dtype=np.uint8)).save(src)
    argv = [
        "-i", str(src),
        "-o", str(tmp_path / "out.png"),
        "--palette-hex", str(tmp_path / "p.hex"),
        "--tiles-hex", str(tmp_path / "t.hex"),
        "--tilemap-hex", str(tmp_path / "m.hex"),
        "--tilemap-size", "2x1",
        "--palettes", "2",
        "--max-unique-tiles", "2",
    ]
    assert main(argv) == 0
    # identical tiles collapse onto the first (unique tile, palette) pair
    assert (tmp_path / "m.hex").read_text() == "0000 0000 \n"


def test_colour_cap_is_reported(tmp_path, capsys):
    main(["-i", str(tmp_path / "nope.png"), "--colors", "40"])
    assert "[warn] --colors 40 capped to 16" in capsys.readouterr().out
