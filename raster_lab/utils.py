from __future__ import annotations

import math
from typing import TYPE_CHECKING

import cv2
import numpy as np

if TYPE_CHECKING:
    from .buffer import PixelBuffer


LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def round_half_up(value):
    """Round .5 upward, for scalars and numpy arrays alike.

    Python's built-in round() and np.round() use banker's rounding, which
    shifts threshold and filter outputs by one level on exact halves.
    """
    if isinstance(value, np.ndarray):
        return np.floor(value + 0.5)
    return math.floor(value + 0.5)


def luminance(rgb: np.ndarray) -> np.ndarray:
    """Unrounded perceptual luminance of an (..., 3) array as float64."""
    rgb = rgb.astype(np.float64)
    r, g, b = LUMA_WEIGHTS
    return r * rgb[..., 0] + g * rgb[..., 1] + b * rgb[..., 2]


def clamp_u8(values: np.ndarray) -> np.ndarray:
    """Round half up and clamp to 0-255 as uint8; NaN becomes 0."""
    out = np.clip(round_half_up(values), 0, 255)
    return np.nan_to_num(out, nan=0.0).astype(np.uint8)


def read_image_any_path(path: str) -> PixelBuffer | None:
    """Read image from path supporting non-ASCII characters.

    Returns an RGBA PixelBuffer or None if failed.
    """
    from .buffer import PixelBuffer

    try:
        data = np.fromfile(path, dtype=np.uint8)
        img = cv2.imdecode(data, cv2.IMREAD_UNCHANGED)
    except (OSError, cv2.error):
        return None
    if img is None:
        return None

    if img.ndim == 2:
        rgba = cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    elif img.shape[2] == 4:
        rgba = cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    else:
        rgba = cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)
    if rgba.dtype != np.uint8:
        rgba = cv2.normalize(rgba, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)
    return PixelBuffer.from_array(rgba)


def save_image_any_path(path: str, buffer: PixelBuffer) -> bool:
    """Write a PixelBuffer to path supporting non-ASCII characters."""
    try:
        ext = path.split(".")[-1].lower()
        bgra = cv2.cvtColor(buffer.data, cv2.COLOR_RGBA2BGRA)
        if ext in ("jpg", "jpeg", "ppm", "pgm", "bmp"):
            bgra = cv2.cvtColor(bgra, cv2.COLOR_BGRA2BGR)
        result, encoded = cv2.imencode(f".{ext}", bgra)
        if not result:
            return False
        encoded.tofile(path)
        return True
    except (OSError, cv2.error):
        return False
