import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np

from raster_lab.buffer import PixelBuffer
from raster_lab import rasterizer

RED = (255, 0, 0, 255)


def painted(buf: PixelBuffer) -> set:
    ys, xs = np.nonzero(buf.alpha)
    return set(zip(xs.tolist(), ys.tolist()))


def test_horizontal_line_hits_every_column():
    buf = PixelBuffer(8, 8)
    rasterizer.draw_line(buf, 0, 0, 5, 0, RED)
    assert painted(buf) == {(x, 0) for x in range(6)}
    assert tuple(buf.get_pixel(3, 0)) == RED


def test_line_direction_does_not_matter_for_diagonal():
    a = PixelBuffer(6, 6)
    b = PixelBuffer(6, 6)
    rasterizer.draw_line(a, 0, 0, 5, 5, RED)
    rasterizer.draw_line(b, 5, 5, 0, 0, RED)
    assert painted(a) == painted(b) == {(i, i) for i in range(6)}


def test_line_is_clipped_to_canvas():
    buf = PixelBuffer(10, 10)
    rasterizer.draw_line(buf, -5, -5, 20, 20, RED)
    assert painted(buf) == {(i, i) for i in range(10)}


def test_zero_length_thick_line_is_a_disk():
    buf = PixelBuffer(11, 11)
    rasterizer.draw_line(buf, 5, 5, 5, 5, RED, line_width=5)
    expected = {(5 + i, 5 + j) for i in range(-2, 3) for j in range(-2, 3) if i * i + j * j <= 4}
    assert painted(buf) == expected
    assert len(expected) == 13


def test_thick_horizontal_line_footprint():
    buf = PixelBuffer(12, 12)
    rasterizer.draw_line(buf, 2, 5, 8, 5, RED, line_width=3)
    band = {(x, y) for x in range(2, 9) for y in range(4, 7)}
    # gap-filling disks poke one pixel past both endpoints
    assert painted(buf) == band | {(1, 5), (9, 5)}


def test_rectangle_outline():
    buf = PixelBuffer(10, 10)
    rasterizer.draw_rectangle(buf, 1, 1, 4, 3, RED)
    pts = painted(buf)
    assert len(pts) == 14
    assert (1, 1) in pts and (5, 4) in pts
    assert (3, 2) not in pts


def test_circle_radius_zero_draws_nothing():
    buf = PixelBuffer(5, 5)
    rasterizer.draw_circle_outline(buf, 2, 2, 0, RED)
    assert painted(buf) == set()


def test_sub_pixel_circle_is_single_rounded_pixel():
    buf = PixelBuffer(5, 5)
    rasterizer.draw_circle_outline(buf, 2.4, 2.5, 0.5, RED)
    assert painted(buf) == {(2, 3)}


def test_unit_circle_is_four_neighbours():
    buf = PixelBuffer(5, 5)
    rasterizer.draw_circle_outline(buf, 2, 2, 1, RED)
    assert painted(buf) == {(2, 1), (1, 2), (3, 2), (2, 3)}


def test_thin_circle_is_eightfold_symmetric():
    buf = PixelBuffer(21, 21)
    rasterizer.draw_circle_outline(buf, 10, 10, 7, RED)
    pts = {(x - 10, y - 10) for x, y in painted(buf)}
    assert (7, 0) in pts and (0, -7) in pts
    assert pts == {(-x, y) for x, y in pts}
    assert pts == {(y, x) for x, y in pts}
    assert (0, 0) not in pts


def test_thick_circle_is_an_annulus():
    buf = PixelBuffer(21, 21)
    rasterizer.draw_circle_outline(buf, 10, 10, 5, RED, line_width=3)
    pts = painted(buf)
    assert (15, 10) in pts and (10, 5) in pts
    assert (10, 10) not in pts
    for x, y in pts:
        d = np.hypot(x - 10, y - 10)
        assert 3.5 <= d <= 6.5


def test_thick_circle_smaller_than_stroke_is_filled():
    buf = PixelBuffer(9, 9)
    rasterizer.draw_circle_outline(buf, 4, 4, 1, RED, line_width=4)
    assert len(painted(buf)) == 13
    assert (4, 4) in painted(buf)


def test_polyline_closes_back_to_start():
    buf = PixelBuffer(10, 10)
    rasterizer.draw_polyline(buf, [(1, 1), (6, 1), (6, 6)], RED, closed=True)
    pts = painted(buf)
    assert {(1, 1), (6, 1), (6, 6), (3, 3)} <= pts

    buf = PixelBuffer(10, 10)
    rasterizer.draw_polyline(buf, [(1, 1), (6, 1), (6, 6)], RED, closed=False)
    assert (3, 3) not in painted(buf)


def test_bresenham_points_walk():
    assert list(rasterizer.bresenham_points(0, 0, 3, 1)) == [(0, 0), (1, 0), (2, 1), (3, 1)]
    assert list(rasterizer.bresenham_points(2, 2, 2, 2)) == [(2, 2)]
