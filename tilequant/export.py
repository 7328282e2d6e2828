# tilequant/export.py
from __future__ import annotations

"""
Hardware-facing text files and the JSON dump.

Layouts (every value is followed by one space):
  palette hex : one line per palette, colors_per_palette 'rrggbb' groups,
                '000000' for missing colours.
  tilemap hex : 4-digit words, newline after every tilemap_width entries.
  tiles hex   : tile_height lines; per line, chunks_per_row words of that tile
                row for every unique tile, then '0000' padding for the slots
                up to max_unique_tiles.

Writers return the path written. Files already written are left in place if
a later writer fails.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterator, List, Sequence, Union

from .config import Config
from .core_types import (
    Palette,
    TilemapData,
    TilemapEntry,
    UniqueTile,
    rgb_to_hex,
)
from .errors import OutputWriteError

PathLike = Union[str, Path]


# Text rendering


def palette_lines(palettes: Sequence[Palette], colors_per_palette: int) -> Iterator[str]:
    for palette in palettes:
        groups = [rgb_to_hex(cf.color.to_rgb()) for cf in palette.colors]
        groups += ["000000"] * (colors_per_palette - len(groups))
        yield "".join(f"{g} " for g in groups)


def tilemap_lines(tilemap: Sequence[TilemapEntry], tilemap_width: int) -> Iterator[str]:
    for start in range(0, len(tilemap), tilemap_width):
        row = tilemap[start : start + tilemap_width]
        yield "".join(f"{entry.raw_value:04x} " for entry in row)


def tiles_lines(unique_tiles: Sequence[UniqueTile], config: Config) -> Iterator[str]:
    per_row = config.chunks_per_row
    padding = max(0, config.max_unique_tiles - len(unique_tiles))
    for row in range(config.tile_height):
        parts: List[str] = []
        for tile in unique_tiles:
            words = tile.quantized.tolist()
            for chunk_idx in range(row * per_row, (row + 1) * per_row):
                value = words[chunk_idx] if chunk_idx < len(words) else 0
                parts.append(f"{value:04x} ")
        parts.append("0000 " * per_row * padding)
        yield "".join(parts)


def _write_lines(path: PathLike, lines: Iterator[str]) -> Path:
    out_path = Path(path)
    try:
        with out_path.open("w", encoding="ascii", newline="\n") as fh:
            for line in lines:
                fh.write(line)
                fh.write("\n")
    except OSError as exc:
        raise OutputWriteError(out_path, str(exc)) from exc
    return out_path


# Writers


def write_palette_file(path: PathLike, palettes: Sequence[Palette], config: Config) -> Path:
    return _write_lines(path, palette_lines(palettes, config.colors_per_palette))


def write_tilemap_file(path: PathLike, tilemap: Sequence[TilemapEntry], config: Config) -> Path:
    return _write_lines(path, tilemap_lines(tilemap, config.tilemap_width))


def write_tiles_file(path: PathLike, unique_tiles: Sequence[UniqueTile], config: Config) -> Path:
    return _write_lines(path, tiles_lines(unique_tiles, config))


# JSON


def tilemap_data_to_dict(data: TilemapData) -> Dict[str, Any]:
    return {
        "config": data.config.to_dict(),
        "tiles": [
            {
                "pixels": tile.pixels.tolist(),
                "quantized": [int(w) for w in tile.quantized.tolist()],
            }
            for tile in data.tiles
        ],
        "palettes": [
            {
                "colors": [
                    {"color": cf.color.as_list(), "frequency": int(cf.frequency)}
                    for cf in palette.colors
                ]
            }
            for palette in data.palettes
        ],
        "tilemap": [entry.to_dict() for entry in data.tilemap],
    }


def write_json_file(path: PathLike, data: TilemapData) -> Path:
    out_path = Path(path)
    try:
        with out_path.open("w", encoding="utf-8") as fh:
            json.dump(tilemap_data_to_dict(data), fh, indent=2)
    except OSError as exc:
        raise OutputWriteError(out_path, str(exc)) from exc
    return out_path


__all__ = [
    "palette_lines",
    "tilemap_lines",
    "tiles_lines",
    "write_palette_file",
    "write_tilemap_file",
    "write_tiles_file",
    "tilemap_data_to_dict",
    "write_json_file",
]
