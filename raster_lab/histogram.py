"""Per-channel histograms, contrast stretching and gray-level equalization."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from .buffer import PixelBuffer
from .utils import clamp_u8, round_half_up

logger = logging.getLogger(__name__)

CHANNELS = ("red", "green", "blue", "gray")


@dataclass
class Histogram:
    """Four 256-bin counts; each channel sums to width * height."""

    red: np.ndarray
    green: np.ndarray
    blue: np.ndarray
    gray: np.ndarray

    def channel(self, name: str) -> np.ndarray:
        if name not in CHANNELS:
            raise ValueError(f"unknown channel: {name}")
        return getattr(self, name)

    def as_dict(self) -> dict[str, list[int]]:
        return {name: self.channel(name).tolist() for name in CHANNELS}


@dataclass
class ChannelStats:
    minimum: int
    maximum: int
    mean: float
    peak: int
    peak_count: int


def compute_histogram(buffer: PixelBuffer) -> Histogram:
    def bins(values):
        return np.bincount(values.ravel(), minlength=256).astype(np.int64)

    return Histogram(
        red=bins(buffer.data[..., 0]),
        green=bins(buffer.data[..., 1]),
        blue=bins(buffer.data[..., 2]),
        gray=bins(buffer.grayscale()),
    )


def channel_statistics(hist: Histogram) -> dict[str, ChannelStats]:
    stats = {}
    levels = np.arange(256)
    for name in CHANNELS:
        counts = hist.channel(name)
        present = np.nonzero(counts)[0]
        total = counts.sum()
        stats[name] = ChannelStats(
            minimum=int(present[0]) if present.size else 0,
            maximum=int(present[-1]) if present.size else 0,
            mean=float((counts * levels).sum() / total) if total else 0.0,
            peak=int(np.argmax(counts)),
            peak_count=int(counts.max()),
        )
    return stats


def stretch(buffer: PixelBuffer) -> PixelBuffer:
    """Rescale each RGB channel from its observed [min, max] to [0, 255].

    A channel whose min equals its max is left as it is.
    """
    out = buffer.copy()
    for c in range(3):
        plane = buffer.data[..., c].astype(np.float64)
        lo, hi = plane.min(), plane.max()
        if hi > lo:
            out.data[..., c] = clamp_u8((plane - lo) / (hi - lo) * 255)
        else:
            logger.debug("channel %d is flat at %d, left unchanged", c, int(lo))
    return out


def equalize(buffer: PixelBuffer) -> PixelBuffer:
    """Equalize the gray histogram and rescale RGB by new_gray / old_gray.

    Scaling colors by the gray ratio can shift hue on strongly scaled pixels.
    """
    gray = buffer.grayscale()
    hist = np.bincount(gray.ravel(), minlength=256)
    cdf = np.cumsum(hist)
    total = gray.size
    cdf_min = cdf[np.nonzero(cdf)[0][0]]
    if total == cdf_min:
        logger.debug("single gray level, equalization skipped")
        return buffer.copy()

    lut = round_half_up((cdf - cdf_min) / (total - cdf_min) * 255)
    new_gray = lut[gray]
    factor = np.where(gray > 0, new_gray / np.maximum(gray, 1), 1.0)

    out = buffer.copy()
    rgb = buffer.rgb.astype(np.float64) * factor[..., None]
    out.data[..., :3] = clamp_u8(rgb)
    return out
