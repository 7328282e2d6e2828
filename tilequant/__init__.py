# tilequant/__init__.py
"""
tilequant package.

Purpose:
  Convert an image into a fixed number of small palettes, a bounded set of
  4-bit indexed tiles and a tilemap of (tile, palette) words. See cli.py for
  the command line.

Public API:
  convert_image : run the pipeline on an in-memory RGB array.
  convert_file  : read, convert, write every output file, log metrics.
  Config        : immutable run configuration.
  colour_convert: sRGB <-> OKLab and the perceptual distance.
  clustering    : k-means++ / Lloyd over planar colour features.
  palette       : palette generation and per-tile palette choice.
  tiles         : tile extraction, deduplication and final assignment.
  dither        : Sierra error-diffusion quantization.
  analysis      : dE / PSNR quality metrics.
  export        : hex and JSON writers.

Quick start:
  from tilequant import Config, convert_image
  result = convert_image(rgb, Config(tilemap_width=4, tilemap_height=4))
"""

__version__ = "0.1.0"

# Re-export namespaces for convenience.
from . import colour_convert
from . import core_types
from . import clustering
from . import palette
from . import tiles
from . import dither
from . import analysis
from . import export
from . import utils

from .config import Config  # noqa: E402
from .errors import ConversionError  # noqa: E402
from .pipeline import ConversionResult, convert_file, convert_image  # noqa: E402

__all__ = [
    "__version__",
    "colour_convert",
    "core_types",
    "clustering",
    "palette",
    "tiles",
    "dither",
    "analysis",
    "export",
    "utils",
    "Config",
    "ConversionError",
    "ConversionResult",
    "convert_file",
    "convert_image",
]
