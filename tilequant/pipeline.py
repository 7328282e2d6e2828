# tilequant/pipeline.py
from __future__ import annotations

"""
The conversion pipeline.

  image -> tiles -> palettes -> palette per tile -> dithered quantization
        -> unique tiles -> (unique tile, palette) per cell -> outputs + metrics

convert_image() runs the stages in memory and returns a ConversionResult.
convert_file() adds reading the input, writing every output file and logging
the quality report. Each stage consumes the previous stage's values and
returns new ones; a raised ConversionError stops the run.
"""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import numpy as np

from .analysis import QualityReport, format_quality_report, quality_report
from .config import Config
from .core_types import (
    Palette,
    Tile,
    TileAssignment,
    TilemapData,
    TilemapEntry,
    U8Image,
    UniqueTile,
)
from .dither import quantize_tiles
from .export import (
    write_json_file,
    write_palette_file,
    write_tilemap_file,
    write_tiles_file,
)
from .image_io import load_image_rgb, save_png_rgb
from .palette.assign import assign_palettes
from .palette.generate import generate_palettes
from .tiles.dedupe import dedupe_tiles
from .tiles.extract import extract_tiles
from .tiles.optimize import build_tilemap, find_best_assignments, render_reconstruction
from .utils import (
    StageTimer,
    debug_log,
    format_total_duration_compact,
    key_value_pairs_to_string,
    log,
    print_banner,
)


@dataclass(frozen=True, eq=False)
class ConversionResult:
    data: TilemapData
    tile_palettes: List[int]  # pre-dither palette per tile
    unique_tiles: List[UniqueTile]
    assignments: List[TileAssignment]
    reconstruction: U8Image
    quality: QualityReport

    @property
    def palettes(self) -> List[Palette]:
        return self.data.palettes

    @property
    def tilemap(self) -> List[TilemapEntry]:
        return self.data.tilemap


def convert_image(
    rgb: U8Image,
    config: Config,
    *,
    rng: Optional[np.random.Generator] = None,
    debug: bool = False,
) -> ConversionResult:
    """Run every stage on an in-memory uint8 (H, W, 3) image."""
    if rng is None:
        rng = np.random.default_rng(config.seed)
    timer = StageTimer()

    tiles = extract_tiles(rgb, config)
    timer.mark("Tiles")

    palettes = generate_palettes(tiles, config, rng, debug=debug)
    timer.mark("Palettes")

    tile_palettes = assign_palettes(tiles, palettes)
    quant = quantize_tiles(tiles, palettes, tile_palettes, config, debug=debug)
    timer.mark("Quantize")

    unique_tiles = dedupe_tiles(
        quant.quantized, tile_palettes, palettes, config, rng, debug=debug
    )
    timer.mark("Dedupe")

    assignments = find_best_assignments(tiles, unique_tiles, palettes)
    tilemap = build_tilemap(assignments)
    timer.mark("Assign")

    reconstruction = render_reconstruction(unique_tiles, palettes, assignments, config)
    quality = quality_report(rgb, reconstruction)

    data = TilemapData(
        config=config,
        tiles=[
            Tile(pixels=t.pixels, quantized=q) for t, q in zip(tiles, quant.quantized)
        ],
        palettes=palettes,
        tilemap=tilemap,
    )

    if debug:
        debug_log(
            key_value_pairs_to_string(
                timer.pairs() + [("Unique tiles", len(unique_tiles))]
            )
        )

    return ConversionResult(
        data=data,
        tile_palettes=tile_palettes,
        unique_tiles=unique_tiles,
        assignments=assignments,
        reconstruction=reconstruction,
        quality=quality,
    )


def write_outputs(result: ConversionResult, config: Config) -> Path:
    """
    Palette, tilemap and tiles hex files, the PNG, then the optional JSON.
    Returns the PNG path actually written (the suffix is forced to .png).
    """
    write_palette_file(config.output_palette_hex, result.palettes, config)
    write_tilemap_file(config.output_tilemap_hex, result.tilemap, config)
    write_tiles_file(config.output_tiles_hex, result.unique_tiles, config)
    png_path = save_png_rgb(config.output_png, result.reconstruction)
    if config.output_json:
        write_json_file(config.output_json, result.data)
    return png_path


def convert_file(config: Config, *, debug: bool = False) -> ConversionResult:
    """Read config.input_file, convert, write all outputs, log the metrics."""
    t_start = time.perf_counter()
    print_banner(config.input_file)

    rgb = load_image_rgb(config.input_file)
    if debug:
        debug_log(f"Loaded {rgb.shape[1]}x{rgb.shape[0]}")

    result = convert_image(rgb, config, debug=debug)
    png_path = write_outputs(result, config)

    log(
        f"Wrote {png_path} | tiles={len(result.unique_tiles)} "
        f"| palettes={len(result.palettes)}"
    )
    for line in format_quality_report(result.quality):
        log(line)
    log(f"Total time {format_total_duration_compact(time.perf_counter() - t_start)}")
    return result


__all__ = ["ConversionResult", "convert_image", "write_outputs", "convert_file"]
