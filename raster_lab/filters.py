"""
Neighborhood filters over RGBA buffers: a generic kernel correlation plus the
smoothing, Gaussian, Sobel, sharpening and median filters built on it.

Out-of-range neighbors replicate the nearest edge pixel. Only R, G and B are
filtered; alpha is copied through. Every function returns a new buffer.
"""

from __future__ import annotations

import logging
import math
from enum import Enum

import cv2
import numpy as np
from skimage.util import view_as_windows

from .buffer import PixelBuffer
from .utils import clamp_u8

logger = logging.getLogger(__name__)

SOBEL_X = np.array([[-1, 0, 1], [-2, 0, 2], [-1, 0, 1]], dtype=np.float64)
SOBEL_Y = np.array([[-1, -2, -1], [0, 0, 0], [1, 2, 1]], dtype=np.float64)
SHARPEN = np.array([[0, -1, 0], [-1, 5, -1], [0, -1, 0]], dtype=np.float64)

# (kernel, divisor) pairs for the custom filter
PRESET_KERNELS = {
    "sharpen": ([[0, -1, 0], [-1, 5, -1], [0, -1, 0]], 1),
    "edge": ([[-1, -1, -1], [-1, 8, -1], [-1, -1, -1]], 1),
    "emboss": ([[-2, -1, 0], [-1, 1, 1], [0, 1, 2]], 1),
    "blur": ([[1, 1, 1], [1, 1, 1], [1, 1, 1]], 9),
}


class SobelDirection(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    BOTH = "both"


def _correlate(plane: np.ndarray, kernel: np.ndarray) -> np.ndarray:
    """Weighted neighborhood sum of a 2-D plane with edge replication.

    The kernel center is (rows // 2, cols // 2); cv2.filter2D correlates
    rather than convolves, so kernels are applied as written.
    """
    return cv2.filter2D(plane.astype(np.float64), cv2.CV_64F, np.asarray(kernel, dtype=np.float64),
                        borderType=cv2.BORDER_REPLICATE)


def convolve(buffer: PixelBuffer, kernel, divisor: float = 1, offset: float = 0) -> PixelBuffer:
    """Apply an arbitrary kernel: clamp(round(sum / divisor + offset)) per channel."""
    k = np.asarray(kernel, dtype=np.float64)
    if k.ndim != 2 or k.size == 0:
        logger.debug("empty or non-2D kernel %r, returning copy", kernel)
        return buffer.copy()
    if divisor == 0:
        logger.debug("zero divisor replaced by 1")
        divisor = 1

    out = buffer.copy()
    for c in range(3):
        acc = _correlate(buffer.data[..., c], k)
        out.data[..., c] = clamp_u8(acc / divisor + offset)
    return out


def smoothing(buffer: PixelBuffer, size: int = 3) -> PixelBuffer:
    """Box average over a size x size window."""
    size = max(1, int(size))
    return convolve(buffer, np.ones((size, size)), divisor=size * size, offset=0)


def gaussian_kernel(radius: float, sigma: float) -> np.ndarray:
    """Normalized Gaussian kernel of odd side ceil(radius * 6) | 1."""
    size = int(math.ceil(radius * 6)) | 1
    half = size // 2
    sigma = max(float(sigma), 1e-6)
    offs = np.arange(-half, half + 1, dtype=np.float64)
    yy, xx = np.meshgrid(offs, offs, indexing="ij")
    kernel = np.exp(-(xx * xx + yy * yy) / (2 * sigma * sigma))
    return kernel / kernel.sum()


def gaussian_blur(buffer: PixelBuffer, radius: float = 1.0, sigma: float = 1.0) -> PixelBuffer:
    kernel = gaussian_kernel(radius, sigma)
    logger.debug("gaussian kernel %dx%d (sigma=%s)", kernel.shape[0], kernel.shape[1], sigma)
    return convolve(buffer, kernel)


def sobel(buffer: PixelBuffer, threshold: float = 128,
          direction: str | SobelDirection = SobelDirection.BOTH) -> PixelBuffer:
    """Binary edge map from the Sobel gradient of the grayscale image.

    Interior pixels become 255 where the gradient magnitude reaches the
    threshold and 0 elsewhere; the one-pixel frame keeps its input colors.
    """
    direction = SobelDirection(direction)
    out = buffer.copy()
    if buffer.width < 3 or buffer.height < 3:
        return out

    gray = buffer.grayscale()
    gx = _correlate(gray, SOBEL_X)
    gy = _correlate(gray, SOBEL_Y)
    if direction is SobelDirection.HORIZONTAL:
        magnitude = np.abs(gx)
    elif direction is SobelDirection.VERTICAL:
        magnitude = np.abs(gy)
    else:
        magnitude = np.sqrt(gx * gx + gy * gy)

    edges = np.where(magnitude >= threshold, 255, 0).astype(np.uint8)
    out.data[1:-1, 1:-1, :3] = edges[1:-1, 1:-1, None]
    return out


def highpass_sharpen(buffer: PixelBuffer, strength: float = 1.0) -> PixelBuffer:
    """Blend toward the sharpened image: original + (sharpened - original) * strength.

    Like sobel(), only interior pixels are rewritten.
    """
    out = buffer.copy()
    if buffer.width < 3 or buffer.height < 3:
        return out
    for c in range(3):
        original = buffer.data[..., c].astype(np.float64)
        sharpened = _correlate(original, SHARPEN)
        blended = clamp_u8(original + (sharpened - original) * strength)
        out.data[1:-1, 1:-1, c] = blended[1:-1, 1:-1]
    return out


def median(buffer: PixelBuffer, size: int = 3) -> PixelBuffer:
    """Per-channel median over a (2 * (size // 2) + 1)-sided window."""
    half = max(0, int(size)) // 2
    out = buffer.copy()
    if half == 0:
        return out
    side = 2 * half + 1
    for c in range(3):
        padded = np.pad(buffer.data[..., c], half, mode="edge")
        windows = view_as_windows(padded, (side, side))
        flat = windows.reshape(buffer.height, buffer.width, side * side)
        out.data[..., c] = np.sort(flat, axis=-1)[..., (side * side) // 2]
    return out


def custom(buffer: PixelBuffer, kernel, divisor: float = 1, offset: float = 0) -> PixelBuffer:
    return convolve(buffer, kernel, divisor, offset)


def preset(buffer: PixelBuffer, name: str, offset: float = 0) -> PixelBuffer:
    """Run one of PRESET_KERNELS through the custom path."""
    if name not in PRESET_KERNELS:
        raise ValueError(f"unknown preset kernel: {name}")
    kernel, divisor = PRESET_KERNELS[name]
    return convolve(buffer, kernel, divisor, offset)
