# tilequant/image_io.py
from __future__ import annotations

from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .core_types import U8Image, assert_u8_image_rgb
from .errors import ImageReadError, OutputWriteError

"""
Image I/O helpers (8-bit sRGB, alpha dropped).
"""

PathLike = Union[str, Path]


def load_image_rgb(path: PathLike) -> U8Image:
    """Open any Pillow-readable image as uint8 (H, W, 3)."""
    try:
        with Image.open(path) as im0:
            im = ImageOps.exif_transpose(im0).convert("RGB")
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageReadError(path, str(exc)) from exc
    return np.array(im, dtype=np.uint8)


def save_png_rgb(path: PathLike, rgb: np.ndarray) -> Path:
    """Save a uint8 (H, W, 3) array as PNG; a non-.png suffix is replaced."""
    out_path = Path(path)
    if out_path.suffix.lower() != ".png":
        out_path = out_path.with_suffix(".png")
    img = assert_u8_image_rgb(np.ascontiguousarray(rgb))
    try:
        Image.fromarray(img).save(out_path)
    except OSError as exc:
        raise OutputWriteError(out_path, str(exc)) from exc
    return out_path


__all__ = ["load_image_rgb", "save_png_rgb"]
