"""
Binary morphology on thresholded RGBA buffers.

A pixel counts as foreground when its red channel is above 127. Neighbors
outside the canvas always read as background (0), for dilation and erosion
alike, so erosion eats into shapes touching the border.
"""

from __future__ import annotations

import logging

import cv2
import numpy as np

from .buffer import PixelBuffer
from .utils import luminance

logger = logging.getLogger(__name__)

SHAPES = ("square", "cross", "circle")

DEFAULT_HIT_FOREGROUND = [
    [0, 1, 0],
    [1, 1, 1],
    [0, 1, 0],
]
DEFAULT_HIT_BACKGROUND = [
    [1, 0, 1],
    [0, 0, 0],
    [1, 0, 1],
]


def to_binary(buffer: PixelBuffer, threshold: float = 128) -> PixelBuffer:
    """Force RGB to 0/255 by unrounded luminance >= threshold; alpha kept."""
    mask = luminance(buffer.rgb) >= threshold
    return _from_mask(buffer, mask)


def structuring_element(size: int, shape: str = "square") -> np.ndarray:
    """Generate a size x size 0/1 element: square, cross or circle."""
    size = int(size)
    center = size // 2
    element = np.zeros((size, size), dtype=np.uint8)
    if shape == "square":
        element[:, :] = 1
    elif shape == "cross":
        element[center, :] = 1
        element[:, center] = 1
    elif shape == "circle":
        idx = np.arange(size)
        ii, jj = np.meshgrid(idx, idx, indexing="ij")
        element[np.sqrt((ii - center) ** 2 + (jj - center) ** 2) <= center] = 1
    else:
        raise ValueError(f"unknown structuring element shape: {shape}")
    return element


def _foreground(buffer: PixelBuffer) -> np.ndarray:
    return buffer.data[..., 0] > 127


def _from_mask(buffer: PixelBuffer, mask: np.ndarray) -> PixelBuffer:
    out = buffer.copy()
    out.data[..., :3] = np.where(mask, 255, 0).astype(np.uint8)[..., None]
    return out


def _kernel(element) -> np.ndarray:
    """uint8 kernel with only the cells equal to 1 switched on."""
    se = np.asarray(element)
    if se.ndim != 2 or se.size == 0:
        return np.zeros((1, 1), dtype=np.uint8)
    return (se == 1).astype(np.uint8)


def _dilate_mask(mask: np.ndarray, element) -> np.ndarray:
    kernel = _kernel(element)
    if not kernel.any():
        return np.zeros_like(mask)
    rows, cols = kernel.shape
    center = rows // 2
    # cv2.dilate does not reflect the element; flip it and mirror the anchor
    flipped = np.ascontiguousarray(kernel[::-1, ::-1])
    out = cv2.dilate(mask.astype(np.uint8), flipped, anchor=(cols - 1 - center, rows - 1 - center),
                     borderType=cv2.BORDER_CONSTANT, borderValue=0)
    return out > 0


def _erode_mask(mask: np.ndarray, element) -> np.ndarray:
    kernel = _kernel(element)
    if not kernel.any():
        return np.ones_like(mask)
    center = kernel.shape[0] // 2
    out = cv2.erode(mask.astype(np.uint8), kernel, anchor=(center, center),
                    borderType=cv2.BORDER_CONSTANT, borderValue=0)
    return out > 0


def dilate(buffer: PixelBuffer, element, iterations: int = 1) -> PixelBuffer:
    """255 wherever any reflected element cell lands on foreground."""
    mask = _foreground(buffer)
    for _ in range(max(1, int(iterations))):
        mask = _dilate_mask(mask, element)
    return _from_mask(buffer, mask)


def erode(buffer: PixelBuffer, element, iterations: int = 1) -> PixelBuffer:
    """255 only where every element cell lands on foreground."""
    mask = _foreground(buffer)
    for _ in range(max(1, int(iterations))):
        mask = _erode_mask(mask, element)
    return _from_mask(buffer, mask)


def opening(buffer: PixelBuffer, element) -> PixelBuffer:
    return dilate(erode(buffer, element), element)


def closing(buffer: PixelBuffer, element) -> PixelBuffer:
    return erode(dilate(buffer, element), element)


def hit_or_miss(buffer: PixelBuffer, foreground=None, background=None) -> PixelBuffer:
    """Pattern match: every active foreground cell set and every active background cell clear.

    Both kernels share one window centered at size // 2. A margin of that
    half size around the canvas is never matched.
    """
    fg = np.asarray(DEFAULT_HIT_FOREGROUND if foreground is None else foreground)
    bg = np.asarray(DEFAULT_HIT_BACKGROUND if background is None else background)
    mask = _foreground(buffer)
    h, w = mask.shape
    center = fg.shape[0] // 2

    match = _erode_mask(mask, fg) & _erode_mask(~mask, bg)

    inside = np.zeros_like(mask)
    inside[center:max(center, h - center), center:max(center, w - center)] = True
    logger.debug("hit-or-miss matched %d pixels", int((match & inside).sum()))
    return _from_mask(buffer, match & inside)
