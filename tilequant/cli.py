# tilequant/cli.py
"""
tilequant command line.

Usage:
  tilequant -i INPUT [-o OUTPUT.png] [--tile-size 8x8] [--tilemap-size 32x32]
            [--palettes N] [--colors N] [--no-dither] [--dither-factor F]
            [--threshold T] [--max-unique-tiles N] [--json FILE] [--debug]

Writes the palette, tilemap and tiles hex files, the reconstructed PNG and,
when asked, a JSON dump. Prints quality metrics at the end.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional, Sequence, Tuple

from .config import Config
from .constants import PALETTE_SLOTS
from .errors import ConversionError
from .pipeline import convert_file
from .utils import (
    enable_line_buffered_stdout,
    error,
    print_config_line,
    warn,
)

_DEFAULTS = Config()


def parse_size(text: str) -> Tuple[int, int]:
    """'WIDTHxHEIGHT' -> (width, height)."""
    parts = text.lower().split("x")
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {text!r}")
    try:
        width, height = int(parts[0]), int(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {text!r}") from None
    if width < 1 or height < 1:
        raise argparse.ArgumentTypeError(f"size must be positive, got {text!r}")
    return width, height


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tilequant",
        description="Convert an image to palettes, unique 4-bit tiles and a tilemap.",
    )
    parser.add_argument("-i", "--input", default=_DEFAULTS.input_file, help="Input image file")
    parser.add_argument("-o", "--output", default=_DEFAULTS.output_png, help="Output PNG file")
    parser.add_argument("--palette-hex", default=_DEFAULTS.output_palette_hex, help="Palette hex file")
    parser.add_argument("--tiles-hex", default=_DEFAULTS.output_tiles_hex, help="Tiles hex file")
    parser.add_argument("--tilemap-hex", default=_DEFAULTS.output_tilemap_hex, help="Tilemap hex file")
    parser.add_argument("--json", default=None, help="Optional JSON dump")
    parser.add_argument(
        "--tile-size",
        type=parse_size,
        default=(_DEFAULTS.tile_width, _DEFAULTS.tile_height),
        help="Tile size in pixels, WIDTHxHEIGHT (default: 8x8)",
    )
    parser.add_argument(
        "--tilemap-size",
        type=parse_size,
        default=(_DEFAULTS.tilemap_width, _DEFAULTS.tilemap_height),
        help="Tilemap size in tiles, WIDTHxHEIGHT (default: 32x32)",
    )
    parser.add_argument("--palettes", type=int, default=_DEFAULTS.num_palettes, help="Number of palettes")
    parser.add_argument(
        "--colors",
        type=int,
        default=_DEFAULTS.colors_per_palette,
        help=f"Max colours per palette, 1-{PALETTE_SLOTS}",
    )
    parser.add_argument("--no-dither", action="store_true", help="Disable dithering")
    parser.add_argument(
        "--dither-factor", type=float, default=_DEFAULTS.dither_factor, help="Dither error scale"
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=_DEFAULTS.color_similarity_threshold,
        help="Colour similarity threshold for palette extraction",
    )
    parser.add_argument(
        "--max-unique-tiles",
        type=int,
        default=_DEFAULTS.max_unique_tiles,
        help="Unique tile budget (1-1024)",
    )
    parser.add_argument("--seed", type=int, default=_DEFAULTS.seed, help="Clustering seed")
    parser.add_argument("--debug", action="store_true", help="Verbose stage details")
    return parser


def config_from_args(args: argparse.Namespace) -> Config:
    tile_w, tile_h = args.tile_size
    map_w, map_h = args.tilemap_size
    return Config(
        input_file=args.input,
        output_png=args.output,
        output_palette_hex=args.palette_hex,
        output_tiles_hex=args.tiles_hex,
        output_tilemap_hex=args.tilemap_hex,
        output_json=args.json,
        tile_width=tile_w,
        tile_height=tile_h,
        tilemap_width=map_w,
        tilemap_height=map_h,
        num_palettes=args.palettes,
        colors_per_palette=min(args.colors, PALETTE_SLOTS),
        dithering=not args.no_dither,
        dither_factor=args.dither_factor,
        color_similarity_threshold=args.threshold,
        max_unique_tiles=args.max_unique_tiles,
        seed=args.seed,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    enable_line_buffered_stdout()
    args = build_parser().parse_args(argv)
    if args.colors > PALETTE_SLOTS:
        warn(f"--colors {args.colors} capped to {PALETTE_SLOTS}")

    try:
        config = config_from_args(args)
    except ConversionError as exc:
        error(str(exc))
        return 2

    pairs: List[Tuple[str, object]] = [
        ("Input", config.input_file),
        ("Output", config.output_png),
        ("Tile", f"{config.tile_width}x{config.tile_height}"),
        ("Tilemap", f"{config.tilemap_width}x{config.tilemap_height}"),
        ("Palettes", config.num_palettes),
        ("Colours", config.colors_per_palette),
        ("Dithering", config.dithering),
    ]
    print_config_line("run", pairs, debug=False)

    try:
        convert_file(config, debug=args.debug)
    except ConversionError as exc:
        error(str(exc))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
