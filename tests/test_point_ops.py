import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np
import pytest

from raster_lab.buffer import PixelBuffer
from raster_lab import point_ops


def sample() -> PixelBuffer:
    img = PixelBuffer(2, 1)
    img.set_pixel(0, 0, 100, 150, 250, 60)
    img.set_pixel(1, 0, 0, 10, 20, 60)
    return img


def test_add_clamps_and_keeps_alpha():
    out = point_ops.add(sample(), 10)
    assert tuple(out.get_pixel(0, 0)) == (110, 160, 255, 60)
    out = point_ops.add(sample(), [0, -20, 5])
    assert tuple(out.get_pixel(1, 0)) == (0, 0, 25, 60)


def test_subtract_and_brightness_agree():
    assert point_ops.subtract(sample(), 15) == point_ops.brightness(sample(), -15)


def test_multiply_rounds_half_up():
    out = point_ops.multiply(sample(), 0.5)
    assert tuple(out.get_pixel(1, 0)) == (0, 5, 10, 60)
    out = point_ops.multiply(sample(), [1.5, 1, 1])
    assert out.get_pixel(0, 0).r == 150


def test_divide_by_zero_channel_is_identity():
    out = point_ops.divide(sample(), [0, 2, 0])
    assert tuple(out.get_pixel(0, 0)) == (100, 75, 250, 60)


def test_grayscale_methods():
    img = sample()
    lum = point_ops.grayscale(img, "luminance")
    assert lum.data[..., 0].tolist() == img.grayscale().tolist()
    assert np.array_equal(lum.data[..., 0], lum.data[..., 2])
    assert point_ops.grayscale(img, "average").get_pixel(0, 0).g == 167
    assert point_ops.grayscale(img, "lightness").get_pixel(0, 0).b == 175
    with pytest.raises(ValueError):
        point_ops.grayscale(img, "sepia")
