import math

import numpy as np

from conftest import circle_coords, polyline, segment

from sketchforge.geometry.descriptors import compute_descriptors, consolidate
from sketchforge.ink.strokes import Point, Stroke, StrokeGroup


def test_degenerate_paths_give_zero_descriptors(params):
    for coords in ([], [(3.0, 4.0)], [(3.0, 4.0), (3.0, 4.0)]):
        d = compute_descriptors(np.array(coords, dtype=float).reshape(-1, 2), params)
        assert d.is_degenerate
        assert d.perimeter == 0.0
        assert d.area == 0.0
        assert d.circularity == 0.0
        assert d.straightness == 0.0
        assert d.closedness == 0.0
        assert d.corners == ()


def test_straight_path_is_open_and_straight(params):
    d = compute_descriptors(np.array(segment((0, 0), (300, 0), 30)), params)
    assert math.isclose(d.perimeter, 300.0)
    assert math.isclose(d.straightness, 1.0)
    assert not d.is_closed
    assert d.area == 0.0
    assert d.corners == ()
    assert (d.bounds.min_x, d.bounds.max_x) == (0.0, 300.0)


def test_sampled_circle_is_nearly_perfectly_circular(params):
    d = compute_descriptors(np.array(circle_coords(200, 200, 100)), params)
    assert d.is_closed
    assert abs(d.circularity - 1.0) < 0.05
    assert d.corner_count == 0
    assert math.isclose(d.bounds.width, 200.0, rel_tol=1e-6)


def test_square_has_four_corners_near_its_vertices(params):
    vertices = [(0, 0), (200, 0), (200, 100), (0, 100), (0, 0)]
    d = compute_descriptors(np.array(polyline(vertices)), params)
    assert d.is_closed
    assert math.isclose(d.area, 20000.0, rel_tol=1e-6)
    assert math.isclose(d.rectangularity, 1.0, rel_tol=1e-6)
    assert d.corner_count == 4
    for corner in d.corners:
        nearest = min(math.hypot(corner.x - vx, corner.y - vy) for vx, vy in vertices[:4])
        assert nearest < 5.0
    positions = [c.position for c in d.corners]
    assert positions == sorted(positions)


def test_right_angle_bend_is_one_interior_corner(params):
    d = compute_descriptors(np.array(polyline([(0, 0), (100, 0), (100, 100)])), params)
    assert not d.is_closed
    assert d.corner_count == 1
    assert 0.4 < d.corners[0].position < 0.6
    assert d.corners[0].angle > 60.0


def test_consolidation_follows_group_order():
    first = Stroke(id="a", points=(Point(0, 0, 0), Point(10, 0, 5)))
    second = Stroke(id="b", points=(Point(10, 0, 100), Point(10, 10, 105)))
    points = consolidate(StrokeGroup(stroke_ids=("a", "b"), start_time=0), {"a": first, "b": second})
    assert points.tolist() == [[0, 0], [10, 0], [10, 0], [10, 10]]
