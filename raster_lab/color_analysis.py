"""
Color area detection: which pixels fall in a color range, and what share of
the canvas they cover.

Green areas can be found by RGB ratios, by an HSV window, or by the HSV
window followed by a 3x3 closing. A custom mode matches a target color
within a tolerance, in RGB distance or per HSV component.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import cv2
import numpy as np

from .buffer import PixelBuffer
from .config import ProcessingParams, default_params
from .morphology import closing, structuring_element

logger = logging.getLogger(__name__)


@dataclass
class AreaAnalysis:
    matched: int
    total: int
    percentage: float
    mask: np.ndarray  # (H, W) bool
    method: str


def rgb_to_hsv(rgb) -> np.ndarray:
    """(..., 3) RGB 0-255 to hue in degrees, saturation and value in percent."""
    arr = np.asarray(rgb, dtype=np.float32)
    shape = arr.shape
    flat = arr.reshape(-1, 1, 3) / 255.0
    hsv = cv2.cvtColor(flat, cv2.COLOR_RGB2HSV).astype(np.float64).reshape(shape)
    hsv[..., 1:] *= 100
    return hsv


def _result(mask: np.ndarray, method: str) -> AreaAnalysis:
    matched = int(mask.sum())
    total = int(mask.size)
    logger.debug("%s: %d of %d pixels", method, matched, total)
    return AreaAnalysis(matched, total, matched / total * 100, mask, method)


def _hue_in_range(hue: np.ndarray, lo: float, hi: float) -> np.ndarray:
    inside = (hue >= lo) & (hue <= hi)
    if lo > hi:
        inside |= (hue >= lo) | (hue <= hi)
    return inside


def detect_green_rgb(buffer: PixelBuffer, params: ProcessingParams = default_params) -> AreaAnalysis:
    """Green by value range, R/G and B/G ratios, and green dominance."""
    rgb = buffer.rgb.astype(np.float64)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    safe_g = np.where(g > 0, g, 1.0)
    r_ratio = np.where(g > 0, r / safe_g, 0.0)
    b_ratio = np.where(g > 0, b / safe_g, 0.0)

    by_value = (g >= params.green_min) & (g <= params.green_max)
    by_ratio = (r_ratio < params.red_ratio) & (b_ratio < params.blue_ratio) & (g > 30)
    dominant = (g > r) & (g > b) & (g > 50)
    return _result(by_value & by_ratio & dominant, "RGB Analysis")


def _hsv_mask(buffer: PixelBuffer, params: ProcessingParams) -> np.ndarray:
    hsv = rgb_to_hsv(buffer.rgb)
    h, s, v = hsv[..., 0], hsv[..., 1], hsv[..., 2]
    return (_hue_in_range(h, params.hue_min, params.hue_max)
            & (s >= params.saturation_min) & (s <= params.saturation_max)
            & (v >= params.value_min) & (v <= params.value_max))


def detect_green_hsv(buffer: PixelBuffer, params: ProcessingParams = default_params) -> AreaAnalysis:
    return _result(_hsv_mask(buffer, params), "HSV Analysis")


def detect_green_advanced(buffer: PixelBuffer, params: ProcessingParams = default_params) -> AreaAnalysis:
    """HSV window, then a 3x3 square closing to fill pinholes."""
    mask = _hsv_mask(buffer, params)
    rgb = np.repeat(np.where(mask, 255, 0).astype(np.uint8)[..., None], 3, axis=-1)
    closed = closing(PixelBuffer.from_rgb(rgb), structuring_element(3, "square"))
    return _result(closed.data[..., 0] > 127, "Advanced Analysis (HSV + Morphology)")


def detect_color(buffer: PixelBuffer, params: ProcessingParams = default_params) -> AreaAnalysis:
    """Pixels near params.target_color within params.color_tolerance.

    In RGB mode the tolerance is a Euclidean distance. In HSV mode it scales
    to degrees of hue (x0.36) and percent of saturation and value (x0.01).
    """
    tolerance = float(params.color_tolerance)
    target = np.asarray(params.target_color[:3], dtype=np.float64)
    rgb = buffer.rgb.astype(np.float64)
    if params.match_in_hsv:
        hsv = rgb_to_hsv(rgb)
        target_hsv = rgb_to_hsv(target)
        dh = np.abs(hsv[..., 0] - target_hsv[0])
        hue_diff = np.minimum(dh, 360 - dh)
        mask = ((hue_diff <= tolerance * 0.36)
                & (np.abs(hsv[..., 1] - target_hsv[1]) <= tolerance * 0.01)
                & (np.abs(hsv[..., 2] - target_hsv[2]) <= tolerance * 0.01))
        method = "Custom Color Analysis (HSV)"
    else:
        distance = np.sqrt(((rgb - target) ** 2).sum(axis=-1))
        mask = distance <= tolerance
        method = "Custom Color Analysis (RGB)"
    return _result(mask, method)


class AnalysisMethod(str, Enum):
    RGB = "rgb"
    HSV = "hsv"
    ADVANCED = "advanced"
    CUSTOM = "custom"

    def analyze(self, buffer: PixelBuffer, params: ProcessingParams = default_params) -> AreaAnalysis:
        if self is AnalysisMethod.RGB:
            return detect_green_rgb(buffer, params)
        if self is AnalysisMethod.HSV:
            return detect_green_hsv(buffer, params)
        if self is AnalysisMethod.ADVANCED:
            return detect_green_advanced(buffer, params)
        return detect_color(buffer, params)


def overlay(buffer: PixelBuffer, mask: np.ndarray) -> PixelBuffer:
    """Highlight matches in green and dim everything else to 30 %; fully opaque."""
    rgb = buffer.rgb.astype(np.int64)
    out = buffer.copy()
    hit = np.stack([np.minimum(255, rgb[..., 0] + 50),
                    np.full(mask.shape, 255),
                    np.minimum(255, rgb[..., 2] + 50)], axis=-1)
    dim = np.floor(rgb * 0.3).astype(np.int64)
    out.data[..., :3] = np.where(mask[..., None], hit, dim).astype(np.uint8)
    out.data[..., 3] = 255
    return out
