import math

import pytest

from sketchforge.config import DetectionParams
from sketchforge.ink.strokes import Point, Stroke


def make_stroke(stroke_id, coords, start_ms=0, step_ms=5):
    points = tuple(Point(x=float(x), y=float(y), timestamp=start_ms + i * step_ms) for i, (x, y) in enumerate(coords))
    return Stroke(id=stroke_id, points=points)


def segment(a, b, n=20):
    """n evenly spaced points from a to b, both ends included."""
    (x1, y1), (x2, y2) = a, b
    return [(x1 + (x2 - x1) * i / (n - 1), y1 + (y2 - y1) * i / (n - 1)) for i in range(n)]


def polyline(vertices, n=20):
    coords = []
    for a, b in zip(vertices, vertices[1:]):
        pts = segment(a, b, n)
        coords.extend(pts if not coords else pts[1:])
    return coords


def circle_coords(cx, cy, r, n=64):
    return [(cx + r * math.cos(2 * math.pi * i / n), cy + r * math.sin(2 * math.pi * i / n)) for i in range(n)]


def rectangle_stroke(stroke_id, x, y, w, h, start_ms=0):
    corners = [(x, y), (x + w, y), (x + w, y + h), (x, y + h), (x, y)]
    return make_stroke(stroke_id, polyline(corners), start_ms=start_ms)


def arrow_coords(tail, head_x):
    """Horizontal arrow from tail to (head_x, tail_y) with a barbed head drawn in the same stroke."""
    tx, ty = tail
    shaft = segment((tx, ty), (head_x, ty), 40)
    barb_up = segment((head_x, ty), (head_x - 14, ty - 8), 8)[1:]
    back = segment((head_x - 14, ty - 8), (head_x, ty), 8)[1:]
    barb_down = segment((head_x, ty), (head_x - 14, ty + 8), 8)[1:]
    return shaft + barb_up + back + barb_down


@pytest.fixture
def params():
    return DetectionParams()
