"""
Per-pixel arithmetic and grayscale conversions.

Each operation works on R, G and B independently, clamps to 0-255 with
round-half-up and leaves alpha alone.
"""

from __future__ import annotations

import numpy as np

from .buffer import PixelBuffer
from .utils import clamp_u8, luminance

GRAYSCALE_METHODS = ("average", "luminance", "lightness")


def _apply(buffer: PixelBuffer, fn) -> PixelBuffer:
    out = buffer.copy()
    out.data[..., :3] = clamp_u8(fn(buffer.rgb.astype(np.float64)))
    return out


def _triple(values) -> np.ndarray:
    if np.isscalar(values):
        return np.full(3, float(values))
    return np.asarray(values, dtype=np.float64)[:3]


def add(buffer: PixelBuffer, values) -> PixelBuffer:
    v = _triple(values)
    return _apply(buffer, lambda rgb: rgb + v)


def subtract(buffer: PixelBuffer, values) -> PixelBuffer:
    v = _triple(values)
    return _apply(buffer, lambda rgb: rgb - v)


def multiply(buffer: PixelBuffer, values) -> PixelBuffer:
    v = _triple(values)
    return _apply(buffer, lambda rgb: rgb * v)


def divide(buffer: PixelBuffer, values) -> PixelBuffer:
    """Zero divisors are treated as 1."""
    v = _triple(values)
    v = np.where(v == 0, 1.0, v)
    return _apply(buffer, lambda rgb: rgb / v)


def brightness(buffer: PixelBuffer, amount: float) -> PixelBuffer:
    return _apply(buffer, lambda rgb: rgb + float(amount))


def grayscale(buffer: PixelBuffer, method: str = "luminance") -> PixelBuffer:
    if method == "average":
        gray = lambda rgb: rgb.sum(axis=-1) / 3
    elif method == "luminance":
        gray = luminance
    elif method == "lightness":
        gray = lambda rgb: (rgb.max(axis=-1) + rgb.min(axis=-1)) / 2
    else:
        raise ValueError(f"unknown grayscale method: {method}")
    return _apply(buffer, lambda rgb: np.repeat(gray(rgb)[..., None], 3, axis=-1))
