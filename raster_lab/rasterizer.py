"""Vector primitives to pixels: Bresenham lines and circles with stroke width.

Thick strokes are approximations (parallel offset lines plus stamped disks for
lines, an annulus scan for circles). Their exact pixel footprint is part of
the drawing behavior and is reproduced as-is.
"""

from __future__ import annotations

import math
from typing import Iterable, Iterator, Sequence

import numpy as np

from .buffer import PixelBuffer
from .utils import round_half_up

Color = Sequence[int]
BLACK = (0, 0, 0, 255)


def _rgba(color: Color) -> tuple[int, int, int, int]:
    if len(color) == 3:
        r, g, b = color
        return int(r), int(g), int(b), 255
    r, g, b, a = color
    return int(r), int(g), int(b), int(a)


def _stamp(buffer: PixelBuffer, xs: np.ndarray, ys: np.ndarray, color: Color) -> None:
    """Write many pixels at once, dropping the ones that fall off the canvas."""
    keep = (xs >= 0) & (xs < buffer.width) & (ys >= 0) & (ys < buffer.height)
    if np.any(keep):
        buffer.data[ys[keep], xs[keep]] = [min(255, max(0, v)) for v in _rgba(color)]


# ---------- lines ----------
def bresenham_points(x0: int, y0: int, x1: int, y1: int) -> Iterator[tuple[int, int]]:
    """Integer Bresenham walk from (x0, y0) to (x1, y1), both endpoints inclusive."""
    x0, y0, x1, y1 = int(x0), int(y0), int(x1), int(y1)
    dx = abs(x1 - x0)
    dy = abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx - dy

    while True:
        yield x0, y0
        if x0 == x1 and y0 == y1:
            return
        err2 = err * 2
        if err2 > -dy:
            err -= dy
            x0 += sx
        if err2 < dx:
            err += dx
            y0 += sy


def draw_thin_line(buffer: PixelBuffer, x0: int, y0: int, x1: int, y1: int,
                   color: Color = BLACK) -> None:
    r, g, b, a = _rgba(color)
    for x, y in bresenham_points(x0, y0, x1, y1):
        buffer.set_pixel(x, y, r, g, b, a)


def draw_disk(buffer: PixelBuffer, cx: int, cy: int, radius: float,
              color: Color = BLACK) -> None:
    """Filled disk: every (i, j) offset with i*i + j*j <= radius*radius."""
    cx, cy = int(round_half_up(cx)), int(round_half_up(cy))
    reach = int(math.floor(radius)) if radius >= 0 else -1
    if reach < 0:
        return
    offs = np.arange(-reach, reach + 1)
    jj, ii = np.meshgrid(offs, offs, indexing="ij")
    inside = ii * ii + jj * jj <= radius * radius
    _stamp(buffer, cx + ii[inside], cy + jj[inside], color)


def fill_thick_line_gaps(buffer: PixelBuffer, x0: int, y0: int, x1: int, y1: int,
                         color: Color, line_width: int) -> None:
    """Stamp a disk of radius floor(width/2) at every step along the segment."""
    half_width = line_width // 2
    dx = x1 - x0
    dy = y1 - y0
    steps = max(abs(dx), abs(dy))
    for t in range(steps + 1):
        progress = t / steps if steps > 0 else 0
        center_x = round_half_up(x0 + dx * progress)
        center_y = round_half_up(y0 + dy * progress)
        draw_disk(buffer, center_x, center_y, half_width, color)


def draw_thick_line(buffer: PixelBuffer, x0: int, y0: int, x1: int, y1: int,
                    color: Color, line_width: int) -> None:
    half_width = line_width // 2
    dx = x1 - x0
    dy = y1 - y0
    length = math.sqrt(dx * dx + dy * dy)

    if length == 0:
        draw_disk(buffer, x0, y0, half_width, color)
        return

    perp_x = -dy / length
    perp_y = dx / length

    draw_thin_line(buffer, x0, y0, x1, y1, color)
    for i in range(1, half_width + 1):
        for side in (i, -i):
            ox = perp_x * side
            oy = perp_y * side
            draw_thin_line(
                buffer,
                round_half_up(x0 + ox),
                round_half_up(y0 + oy),
                round_half_up(x1 + ox),
                round_half_up(y1 + oy),
                color,
            )

    if line_width > 2:
        fill_thick_line_gaps(buffer, x0, y0, x1, y1, color, line_width)


def draw_line(buffer: PixelBuffer, x0: int, y0: int, x1: int, y1: int,
              color: Color = BLACK, line_width: int = 1) -> None:
    x0, y0, x1, y1 = int(x0), int(y0), int(x1), int(y1)
    if int(line_width) == 1:
        draw_thin_line(buffer, x0, y0, x1, y1, color)
    else:
        draw_thick_line(buffer, x0, y0, x1, y1, color, int(line_width))


# ---------- circles ----------
def _circle_points(buffer: PixelBuffer, cx: int, cy: int, x: int, y: int,
                   rgba: tuple[int, int, int, int]) -> None:
    for px, py in ((x, y), (-x, y), (x, -y), (-x, -y),
                   (y, x), (-y, x), (y, -x), (-y, -x)):
        buffer.set_pixel(cx + px, cy + py, *rgba)


def draw_thin_circle(buffer: PixelBuffer, center_x: float, center_y: float, radius: float,
                     color: Color = BLACK) -> None:
    """Midpoint circle with 8-way symmetry."""
    rgba = _rgba(color)
    cx = round_half_up(center_x)
    cy = round_half_up(center_y)
    rad = round_half_up(radius)

    if rad <= 0:
        buffer.set_pixel(cx, cy, *rgba)
        return
    if rad == 1:
        buffer.set_pixel(cx, cy - 1, *rgba)
        buffer.set_pixel(cx - 1, cy, *rgba)
        buffer.set_pixel(cx + 1, cy, *rgba)
        buffer.set_pixel(cx, cy + 1, *rgba)
        return

    x = 0
    y = rad
    d = 3 - 2 * rad
    _circle_points(buffer, cx, cy, x, y, rgba)
    while y >= x:
        x += 1
        if d > 0:
            y -= 1
            d = d + 4 * (x - y) + 10
        else:
            d = d + 4 * x + 6
        _circle_points(buffer, cx, cy, x, y, rgba)


def draw_thick_circle(buffer: PixelBuffer, center_x: float, center_y: float, radius: float,
                      color: Color, line_width: int) -> None:
    half_width = line_width // 2

    if radius <= half_width:
        draw_disk(buffer, center_x, center_y, max(half_width, 1), color)
        return

    # annulus scan around the rounded center
    cx = round_half_up(center_x)
    cy = round_half_up(center_y)
    inner = max(0.0, radius - half_width - 0.5)
    outer = radius + half_width + 0.5
    reach = math.ceil(outer) + 1

    offs = np.arange(-reach, reach + 1)
    xx, yy = np.meshgrid(offs, offs, indexing="ij")
    distance = np.sqrt(xx * xx + yy * yy)
    ring = (distance >= inner) & (distance <= outer)
    _stamp(buffer, cx + xx[ring], cy + yy[ring], color)


def draw_circle_outline(buffer: PixelBuffer, center_x: float, center_y: float, radius: float,
                        color: Color = BLACK, line_width: int = 1) -> None:
    if radius < 1:
        if radius > 0:
            buffer.set_pixel(round_half_up(center_x), round_half_up(center_y), *_rgba(color))
        return

    if int(line_width) == 1:
        draw_thin_circle(buffer, center_x, center_y, radius, color)
    else:
        draw_thick_circle(buffer, center_x, center_y, radius, color, int(line_width))


# ---------- compound outlines ----------
def draw_rectangle(buffer: PixelBuffer, x: int, y: int, width: int, height: int,
                   color: Color = BLACK, line_width: int = 1) -> None:
    """Outline only; the four edges are independent line calls."""
    draw_line(buffer, x, y, x + width, y, color, line_width)
    draw_line(buffer, x, y, x, y + height, color, line_width)
    draw_line(buffer, x + width, y, x + width, y + height, color, line_width)
    draw_line(buffer, x, y + height, x + width, y + height, color, line_width)


def draw_polyline(buffer: PixelBuffer, points: Iterable[tuple[float, float]],
                  color: Color = BLACK, line_width: int = 1, closed: bool = True) -> None:
    pts = [(round_half_up(px), round_half_up(py)) for px, py in points]
    if len(pts) < 2:
        return
    count = len(pts) if closed else len(pts) - 1
    for i in range(count):
        (ax, ay), (bx, by) = pts[i], pts[(i + 1) % len(pts)]
        draw_line(buffer, ax, ay, bx, by, color, line_width)
