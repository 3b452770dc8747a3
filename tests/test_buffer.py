import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np
import pytest

from raster_lab.buffer import Pixel, PixelBuffer


@pytest.mark.parametrize("width,height", [(0, 5), (5, 0), (-1, 3), (3, -2)])
def test_non_positive_dimensions_rejected(width, height):
    with pytest.raises(ValueError):
        PixelBuffer(width, height)


def test_new_buffer_is_transparent_black():
    buf = PixelBuffer(4, 3)
    assert buf.data.shape == (3, 4, 4)
    assert len(buf.to_bytes()) == 4 * 3 * 4
    assert not buf.data.any()


def test_set_and_get_pixel():
    buf = PixelBuffer(4, 4)
    buf.set_pixel(1, 2, 10, 20, 30)
    assert buf.get_pixel(1, 2) == Pixel(10, 20, 30, 255)
    buf.set_pixel(1, 2, 1, 2, 3, 4)
    assert buf.get_pixel(1, 2) == Pixel(1, 2, 3, 4)
    # row-major layout: (x=1, y=2) lives at byte offset (2 * 4 + 1) * 4
    raw = buf.to_bytes()
    assert raw[(2 * 4 + 1) * 4:(2 * 4 + 1) * 4 + 4] == bytes([1, 2, 3, 4])


@pytest.mark.parametrize("x,y", [(-1, 0), (0, -1), (4, 0), (0, 4), (100, 100)])
def test_out_of_bounds_access_is_silent(x, y):
    buf = PixelBuffer(4, 4)
    buf.set_pixel(x, y, 255, 255, 255)
    assert not buf.data.any()
    assert buf.get_pixel(x, y) is None


def test_set_pixel_clamps_channel_values():
    buf = PixelBuffer(2, 2)
    buf.set_pixel(0, 0, 300, -5, 128, 999)
    assert buf.get_pixel(0, 0) == Pixel(255, 0, 128, 255)


def test_clear_zero_fills():
    buf = PixelBuffer(3, 3)
    buf.data[...] = 77
    buf.clear()
    assert not buf.data.any()


def test_from_bytes_round_trip_and_length_check():
    raw = bytes(range(2 * 3 * 4))
    buf = PixelBuffer.from_bytes(2, 3, raw)
    assert buf.to_bytes() == raw
    assert buf.get_pixel(1, 0) == Pixel(4, 5, 6, 7)
    with pytest.raises(ValueError):
        PixelBuffer.from_bytes(2, 3, raw[:-1])


def test_from_array_rejects_wrong_shape():
    with pytest.raises(ValueError):
        PixelBuffer.from_array(np.zeros((3, 3, 3), dtype=np.uint8))


def test_copy_is_independent():
    buf = PixelBuffer(2, 2)
    dup = buf.copy()
    dup.set_pixel(0, 0, 9, 9, 9)
    assert buf.get_pixel(0, 0) == Pixel(0, 0, 0, 0)
    assert dup != buf


def test_grayscale_uses_rounded_luminance():
    buf = PixelBuffer(3, 1)
    buf.set_pixel(0, 0, 255, 0, 0)   # 76.245
    buf.set_pixel(1, 0, 0, 0, 255)   # 29.07
    buf.set_pixel(2, 0, 255, 255, 255)
    assert buf.grayscale().tolist() == [[76, 29, 255]]


def test_draw_border():
    buf = PixelBuffer(4, 3)
    buf.draw_border()
    assert buf.get_pixel(0, 0) == Pixel(128, 128, 128, 255)
    assert buf.get_pixel(3, 2) == Pixel(128, 128, 128, 255)
    assert buf.get_pixel(1, 1) == Pixel(0, 0, 0, 0)
    assert int((buf.alpha > 0).sum()) == 10
