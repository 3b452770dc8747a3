"""Closed set of drawable shapes, each able to rasterize itself into a buffer.

Also holds the color helpers shapes use: palette lookup, hex and CMYK
conversions.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Union

from .buffer import PixelBuffer
from .rasterizer import (
    Color,
    bresenham_points,
    draw_circle_outline,
    draw_line,
    draw_polyline,
    draw_rectangle,
)
from .utils import round_half_up

NAMED_COLORS = {
    "black": (0, 0, 0, 255),
    "white": (255, 255, 255, 255),
    "red": (255, 0, 0, 255),
    "green": (0, 128, 0, 255),
    "blue": (0, 0, 255, 255),
    "yellow": (255, 255, 0, 255),
    "cyan": (0, 255, 255, 255),
    "magenta": (255, 0, 255, 255),
    "orange": (255, 165, 0, 255),
    "purple": (128, 0, 128, 255),
    "gray": (128, 128, 128, 255),
    "brown": (165, 42, 42, 255),
}

BEZIER_STEPS = 200

_HEX_RE = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


def hex_to_rgb(text: str) -> tuple[int, int, int]:
    """'#rrggbb' (leading # optional) to an RGB triple; malformed input gives black."""
    m = _HEX_RE.match(text.strip())
    if m is None:
        return 0, 0, 0
    return tuple(int(part, 16) for part in m.groups())


def rgb_to_hex(r: float, g: float, b: float) -> str:
    return "#" + "".join(f"{min(255, max(0, round_half_up(v))):02x}" for v in (r, g, b))


def rgb_to_cmyk(r: float, g: float, b: float) -> tuple[int, int, int, int]:
    """RGB 0-255 to CMYK percentages, each rounded to an integer."""
    rn, gn, bn = r / 255, g / 255, b / 255
    k = 1 - max(rn, gn, bn)
    if k == 1:
        c = m = y = 0.0
    else:
        c = (1 - rn - k) / (1 - k)
        m = (1 - gn - k) / (1 - k)
        y = (1 - bn - k) / (1 - k)
    return tuple(round_half_up(v * 100) for v in (c, m, y, k))


def cmyk_to_rgb(c: float, m: float, y: float, k: float) -> tuple[int, int, int]:
    """CMYK percentages to RGB 0-255."""
    kn = 1 - k / 100
    rgb = (255 * (1 - v / 100) * kn for v in (c, m, y))
    return tuple(round_half_up(max(0.0, min(255.0, v))) for v in rgb)


def parse_color(color: str | Color) -> tuple[int, int, int, int]:
    """Resolve '#rrggbb', a palette name or an RGB(A) tuple; unknown names give black."""
    if not isinstance(color, str):
        values = [int(v) for v in color]
        return tuple(values + [255]) if len(values) == 3 else tuple(values[:4])
    if color.startswith("#"):
        return hex_to_rgb(color) + (255,)
    return NAMED_COLORS.get(color.lower(), NAMED_COLORS["black"])


@dataclass
class Line:
    x0: float
    y0: float
    x1: float
    y1: float
    color: str | Color = "black"
    line_width: int = 1

    def rasterize(self, buffer: PixelBuffer) -> None:
        draw_line(buffer, round_half_up(self.x0), round_half_up(self.y0),
                  round_half_up(self.x1), round_half_up(self.y1),
                  parse_color(self.color), self.line_width)


@dataclass
class Rectangle:
    x: float
    y: float
    width: float
    height: float
    color: str | Color = "black"
    line_width: int = 1

    def rasterize(self, buffer: PixelBuffer) -> None:
        draw_rectangle(buffer, round_half_up(self.x), round_half_up(self.y),
                       round_half_up(self.width), round_half_up(self.height),
                       parse_color(self.color), self.line_width)


@dataclass
class Circle:
    center_x: float
    center_y: float
    radius: float
    color: str | Color = "black"
    line_width: int = 1

    def rasterize(self, buffer: PixelBuffer) -> None:
        draw_circle_outline(buffer, round_half_up(self.center_x), round_half_up(self.center_y),
                            round_half_up(max(0, self.radius)),
                            parse_color(self.color), self.line_width)


@dataclass
class Polygon:
    points: list[tuple[float, float]] = field(default_factory=list)
    color: str | Color = "black"
    line_width: int = 1

    def rasterize(self, buffer: PixelBuffer) -> None:
        draw_polyline(buffer, self.points, parse_color(self.color), self.line_width, closed=True)


@dataclass
class BezierCurve:
    control_points: list[tuple[float, float]] = field(default_factory=list)
    color: str | Color = "black"
    line_width: int = 1

    def point_at(self, t: float) -> tuple[float, float]:
        """De Casteljau evaluation."""
        pts = list(self.control_points)
        while len(pts) > 1:
            pts = [((1 - t) * ax + t * bx, (1 - t) * ay + t * by)
                   for (ax, ay), (bx, by) in zip(pts, pts[1:])]
        return pts[0]

    def rasterize(self, buffer: PixelBuffer) -> None:
        if len(self.control_points) < 2:
            return
        rgba = parse_color(self.color)
        half = max(0, int(self.line_width)) // 2
        prev = self.point_at(0.0)
        for i in range(1, BEZIER_STEPS + 1):
            cur = self.point_at(i / BEZIER_STEPS)
            self._brush_segment(buffer, prev, cur, half, rgba)
            prev = cur

    @staticmethod
    def _brush_segment(buffer, start, end, half, rgba):
        # square brush of side 2*half+1 at every step of the walk
        x0, y0 = round_half_up(start[0]), round_half_up(start[1])
        x1, y1 = round_half_up(end[0]), round_half_up(end[1])
        for x, y in bresenham_points(x0, y0, x1, y1):
            if buffer.in_bounds(x, y):
                patch = buffer.data[max(0, y - half):y + half + 1, max(0, x - half):x + half + 1]
                patch[..., :3] = rgba[:3]
                patch[..., 3] = 255


Shape = Union[Line, Rectangle, Circle, Polygon, BezierCurve]


def rasterize_all(buffer: PixelBuffer, shapes: Iterable[Shape]) -> PixelBuffer:
    """Draw shapes in order onto a copy of the buffer."""
    out = buffer.copy()
    for shape in shapes:
        shape.rasterize(out)
    return out
