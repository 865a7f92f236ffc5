"""Importing media files (textures) into an engine."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Union

import numpy as np
from PIL import Image

from .datablock import Ref

_NATIVE_MODES = {"L", "LA", "RGB", "RGBA"}


class AssetError(Exception):
    """Raised when an asset cannot be imported."""


def _pixels(img: Image.Image) -> np.ndarray:
    mode = img.mode
    if mode not in _NATIVE_MODES:
        if mode == "1" or mode.startswith("I") or mode == "F":
            img = img.convert("L")
        elif mode == "P":
            img = img.convert("RGBA" if "transparency" in img.info else "RGB")
        elif mode == "PA":
            img = img.convert("RGBA")
        else:
            img = img.convert("RGB")
    arr = np.asarray(img, dtype=np.uint8)
    if arr.ndim == 2:
        arr = arr[:, :, None]
    return arr


def import_texture(engine: Any, path: Union[str, os.PathLike]) -> Ref[Any]:
    """Load an image file as a texture, reusing one already loaded from it.

    Rows are stored bottom first. Raises AssetError if the file cannot be read.
    """
    path = Path(path)
    existing = engine.get_texture_by_path(path)
    if existing:
        return existing

    try:
        with Image.open(path) as img:
            img.load()
            pixels = _pixels(img)
    except (OSError, ValueError) as exc:
        raise AssetError(f"failed to load texture {path}: {exc}") from exc

    height, width, num_channels = pixels.shape
    if width <= 0 or height <= 0 or not 1 <= num_channels <= 4:
        raise AssetError(f"unsupported image dimensions in {path}")
    pixels = np.ascontiguousarray(np.flipud(pixels))

    texture = engine.create_texture(path)
    texture.get().upload(pixels, width, height, num_channels)
    return texture