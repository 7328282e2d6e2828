# tilequant/config.py
from __future__ import annotations

"""
Run configuration.

Config is immutable; use Config.replace(...) to derive a validated copy.
Defaults target an 8x8-tile, 32x32-cell tilemap with 32 palettes of 16 colours.
"""

import dataclasses
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .constants import MAX_PALETTES, MAX_UNIQUE_TILES, PALETTE_SLOTS, PIXELS_PER_CHUNK
from .errors import ConfigError


@dataclass(frozen=True)
class Config:
    input_file: str = "input.png"
    output_png: str = "out.png"
    output_palette_hex: str = "palette.hex"
    output_tiles_hex: str = "tiles.hex"
    output_tilemap_hex: str = "tile_map.hex"
    output_json: Optional[str] = None
    tile_width: int = 8
    tile_height: int = 8
    tilemap_width: int = 32
    tilemap_height: int = 32
    num_palettes: int = 32
    colors_per_palette: int = 16
    dithering: bool = True
    dither_factor: float = 0.75
    color_similarity_threshold: float = 0.005
    max_unique_tiles: int = 256
    seed: int = 0

    def __post_init__(self) -> None:
        self.validate()

    # Derived sizes

    @property
    def total_tiles(self) -> int:
        return self.tilemap_width * self.tilemap_height

    @property
    def tile_size(self) -> int:
        return self.tile_width * self.tile_height

    @property
    def total_width(self) -> int:
        return self.tilemap_width * self.tile_width

    @property
    def total_height(self) -> int:
        return self.tilemap_height * self.tile_height

    @property
    def chunks_per_tile(self) -> int:
        return -(-self.tile_size // PIXELS_PER_CHUNK)

    @property
    def chunks_per_row(self) -> int:
        return -(-self.tile_width // PIXELS_PER_CHUNK)

    # Validation / copies

    def validate(self) -> None:
        """Raise ConfigError for the first out-of-range value."""
        for name in ("tile_width", "tile_height", "tilemap_width", "tilemap_height"):
            value = getattr(self, name)
            if int(value) < 1:
                raise ConfigError(name, value, "must be >= 1")
        if not 1 <= self.num_palettes <= MAX_PALETTES:
            raise ConfigError(
                "num_palettes", self.num_palettes, f"must be in 1..{MAX_PALETTES}"
            )
        if not 1 <= self.colors_per_palette <= PALETTE_SLOTS:
            raise ConfigError(
                "colors_per_palette",
                self.colors_per_palette,
                f"must be in 1..{PALETTE_SLOTS}",
            )
        if not 1 <= self.max_unique_tiles <= MAX_UNIQUE_TILES:
            raise ConfigError(
                "max_unique_tiles",
                self.max_unique_tiles,
                f"must be in 1..{MAX_UNIQUE_TILES}",
            )
        if self.dither_factor < 0.0:
            raise ConfigError("dither_factor", self.dither_factor, "must be >= 0")
        if self.color_similarity_threshold < 0.0:
            raise ConfigError(
                "color_similarity_threshold",
                self.color_similarity_threshold,
                "must be >= 0",
            )

    def replace(self, **changes: Any) -> "Config":
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


__all__ = ["Config"]
