"""
Global threshold selection and binarization.

Every method maps a gray-level distribution to a single cut point t: pixels
with gray < t are background, gray >= t foreground. The distribution can be a
Histogram from compute_histogram, a PixelBuffer, or a flat sequence of
rounded grayscale samples (0-255 ints). Degenerate inputs (no samples, flat
histograms) fall back to DEFAULT_THRESHOLD.
"""

from __future__ import annotations

import logging
import math
from enum import Enum

import numpy as np

from .buffer import PixelBuffer
from .config import ProcessingParams, default_params
from .histogram import Histogram
from .utils import round_half_up

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 128
VARIANCE_FLOOR = 1e-6
FUZZY_DECAY = 10.0


def gray_histogram(source) -> np.ndarray:
    """256-bin gray counts of a Histogram, a PixelBuffer or raw samples."""
    if isinstance(source, Histogram):
        return np.asarray(source.gray, dtype=np.int64)
    if isinstance(source, PixelBuffer):
        samples = source.grayscale().ravel()
    else:
        samples = np.asarray(source, dtype=np.int64).ravel()
    return np.bincount(np.clip(samples, 0, 255), minlength=256).astype(np.int64)


def manual_threshold(samples=None, threshold: int = DEFAULT_THRESHOLD) -> int:
    return int(threshold)


def percent_black_threshold(samples, percentage: float = 50) -> int:
    """Gray value below which roughly `percentage` percent of pixels fall.

    Equivalent to sorted(samples)[floor(p / 100 * N)], read off the
    cumulative counts.
    """
    hist = gray_histogram(samples)
    total = int(hist.sum())
    if total == 0:
        return DEFAULT_THRESHOLD
    index = int(math.floor(percentage / 100 * total))
    index = min(max(index, 0), total - 1)
    return int(np.searchsorted(np.cumsum(hist), index, side="right"))


def mean_iterative_threshold(samples, max_iterations: int = 100) -> int:
    """Isodata: move t to the midpoint of the two class means until it settles."""
    hist = gray_histogram(samples)
    levels = np.arange(256)
    threshold = DEFAULT_THRESHOLD
    prev = 0
    iteration = 0

    while abs(threshold - prev) > 1 and iteration < max_iterations:
        prev = threshold
        below = levels < threshold
        count1 = hist[below].sum()
        count2 = hist[~below].sum()
        mean1 = (hist[below] * levels[below]).sum() / count1 if count1 > 0 else 0
        mean2 = (hist[~below] * levels[~below]).sum() / count2 if count2 > 0 else 255
        threshold = round_half_up((mean1 + mean2) / 2)
        iteration += 1

    logger.debug("mean-iterative settled at %d after %d iterations", threshold, iteration)
    return int(threshold)


def entropy_threshold(samples) -> int:
    """Kapur: maximize the summed base-2 entropies of both classes."""
    hist = gray_histogram(samples)
    total = hist.sum()
    if total == 0:
        return DEFAULT_THRESHOLD
    prob = hist / total

    best_t = DEFAULT_THRESHOLD
    best = -1.0
    for t in range(1, 255):
        p1 = prob[:t].sum()
        p2 = prob[t:].sum()
        if p1 == 0 or p2 == 0:
            continue
        lower = prob[:t][prob[:t] > 0] / p1
        upper = prob[t:][prob[t:] > 0] / p2
        h = -(lower * np.log2(lower)).sum() - (upper * np.log2(upper)).sum()
        if h > best:
            best = h
            best_t = t
    return best_t


def minimum_error_threshold(samples) -> int:
    """Kittler-Illingworth: minimize the Gaussian-mixture classification error J(t)."""
    hist = gray_histogram(samples).astype(np.float64)
    total = hist.sum()
    if total == 0:
        return DEFAULT_THRESHOLD
    levels = np.arange(256, dtype=np.float64)

    best_t = DEFAULT_THRESHOLD
    best = math.inf
    for t in range(1, 255):
        w1 = hist[:t].sum()
        w2 = hist[t:].sum()
        if w1 == 0 or w2 == 0:
            continue
        mean1 = (levels[:t] * hist[:t]).sum() / w1
        mean2 = (levels[t:] * hist[t:]).sum() / w2
        var1 = max((hist[:t] * (levels[:t] - mean1) ** 2).sum() / w1, VARIANCE_FLOOR)
        var2 = max((hist[t:] * (levels[t:] - mean2) ** 2).sum() / w2, VARIANCE_FLOOR)
        p1 = w1 / total
        p2 = w2 / total
        error = (1
                 + 2 * (p1 * math.log(math.sqrt(var1)) + p2 * math.log(math.sqrt(var2)))
                 - 2 * (p1 * math.log(p1) + p2 * math.log(p2)))
        if error < best:
            best = error
            best_t = t
    return best_t


def fuzzy_minimum_error_threshold(samples) -> int:
    """Minimize the fuzzy entropy of exponentially decaying class memberships."""
    hist = gray_histogram(samples)
    total = hist.sum()
    if total == 0:
        return DEFAULT_THRESHOLD
    present = hist > 0
    levels = np.arange(256, dtype=np.float64)[present]
    prob = hist[present] / total

    best_t = DEFAULT_THRESHOLD
    best = math.inf
    for t in range(1, 255):
        mu1 = np.where(levels <= t, 1.0, np.exp(-(levels - t) / FUZZY_DECAY))
        mu2 = np.where(levels >= t, 1.0, np.exp(-(t - levels) / FUZZY_DECAY))
        fuzzy = -(prob * mu1 * np.log(mu1)).sum() - (prob * mu2 * np.log(mu2)).sum()
        if fuzzy < best:
            best = fuzzy
            best_t = t
    return best_t


class ThresholdMethod(str, Enum):
    MANUAL = "manual"
    PERCENT_BLACK = "percent_black"
    MEAN_ITERATIVE = "mean_iterative"
    ENTROPY = "entropy"
    MINIMUM_ERROR = "minimum_error"
    FUZZY_MINIMUM_ERROR = "fuzzy_minimum_error"

    def compute(self, samples, params: ProcessingParams = default_params) -> int:
        """Run this method on a Histogram, a PixelBuffer or grayscale samples."""
        if self is ThresholdMethod.MANUAL:
            t = manual_threshold(samples, params.manual_threshold)
        elif self is ThresholdMethod.PERCENT_BLACK:
            t = percent_black_threshold(samples, params.percent_black)
        elif self is ThresholdMethod.MEAN_ITERATIVE:
            t = mean_iterative_threshold(samples, params.mean_iterative_max_iterations)
        elif self is ThresholdMethod.ENTROPY:
            t = entropy_threshold(samples)
        elif self is ThresholdMethod.MINIMUM_ERROR:
            t = minimum_error_threshold(samples)
        else:
            t = fuzzy_minimum_error_threshold(samples)
        logger.debug("%s threshold -> %d", self.value, t)
        return t


def binarize(buffer: PixelBuffer, threshold: int) -> PixelBuffer:
    """gray >= threshold becomes white, everything else black; alpha untouched."""
    out = buffer.copy()
    white = buffer.grayscale() >= threshold
    out.data[..., :3] = np.where(white, 255, 0).astype(np.uint8)[..., None]
    return out
