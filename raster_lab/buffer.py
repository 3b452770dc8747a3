"""RGBA raster storage shared by every algorithm in the package.

Pixels live in a ``(height, width, 4)`` uint8 array, row-major with the origin
at the top-left. Coordinates outside the canvas are clipped silently: shapes
routinely extend past the visible area, so neither reads nor writes raise.
"""

from __future__ import annotations

from typing import NamedTuple

import numpy as np

from .utils import clamp_u8, luminance


class Pixel(NamedTuple):
    r: int
    g: int
    b: int
    a: int


class PixelBuffer:
    def __init__(self, width: int, height: int):
        if int(width) <= 0 or int(height) <= 0:
            raise ValueError(f"buffer dimensions must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.data = np.zeros((self.height, self.width, 4), dtype=np.uint8)

    # ---------- construction ----------
    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """Wrap a copy of an (H, W, 4) RGBA array."""
        arr = np.asarray(array)
        if arr.ndim != 3 or arr.shape[2] != 4:
            raise ValueError(f"expected an (H, W, 4) RGBA array, got shape {arr.shape}")
        buf = cls(arr.shape[1], arr.shape[0])
        buf.data[...] = np.clip(arr, 0, 255).astype(np.uint8)
        return buf

    @classmethod
    def from_bytes(cls, width: int, height: int, data) -> "PixelBuffer":
        """Build from an interleaved RGBA byte sequence of length width*height*4."""
        buf = cls(width, height)
        flat = np.frombuffer(bytes(data), dtype=np.uint8)
        if flat.size != buf.width * buf.height * 4:
            raise ValueError(
                f"expected {buf.width * buf.height * 4} bytes for {width}x{height}, got {flat.size}"
            )
        buf.data[...] = flat.reshape(buf.height, buf.width, 4)
        return buf

    @classmethod
    def from_rgb(cls, rgb: np.ndarray, alpha: np.ndarray | None = None) -> "PixelBuffer":
        """Assemble a buffer from an (H, W, 3) color plane and an (H, W) alpha plane.

        A missing alpha plane means fully opaque.
        """
        rgb = np.asarray(rgb, dtype=np.uint8)
        if alpha is None:
            alpha = np.full(rgb.shape[:2], 255, dtype=np.uint8)
        rgba = np.dstack([rgb, np.asarray(alpha, dtype=np.uint8)])
        return cls.from_array(rgba)

    def to_bytes(self) -> bytes:
        return self.data.tobytes()

    def copy(self) -> "PixelBuffer":
        return PixelBuffer.from_array(self.data)

    # ---------- pixel access ----------
    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def clear(self) -> None:
        """Zero-fill: fully transparent black."""
        self.data.fill(0)

    def set_pixel(self, x: int, y: int, r: int, g: int, b: int, a: int = 255) -> None:
        if not self.in_bounds(x, y):
            return
        self.data[y, x] = [min(255, max(0, int(v))) for v in (r, g, b, a)]

    def get_pixel(self, x: int, y: int) -> Pixel | None:
        if not self.in_bounds(x, y):
            return None
        r, g, b, a = (int(v) for v in self.data[y, x])
        return Pixel(r, g, b, a)

    def draw_border(self, r: int = 128, g: int = 128, b: int = 128, a: int = 255) -> None:
        color = [min(255, max(0, int(v))) for v in (r, g, b, a)]
        self.data[0, :] = color
        self.data[-1, :] = color
        self.data[:, 0] = color
        self.data[:, -1] = color

    # ---------- derived planes ----------
    @property
    def rgb(self) -> np.ndarray:
        return self.data[..., :3]

    @property
    def alpha(self) -> np.ndarray:
        return self.data[..., 3]

    def grayscale(self) -> np.ndarray:
        """Rounded luminance per pixel as an (H, W) int64 array in 0-255."""
        return clamp_u8(luminance(self.rgb)).astype(np.int64)

    def __eq__(self, other) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.width == other.width and self.height == other.height and bool(
            np.array_equal(self.data, other.data)
        )

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height})"
