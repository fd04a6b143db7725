import math

import numpy as np
import pytest

from solarlayout.geo.measure import distance_feet, edge_lengths, midpoint, polygon_area, signed_area


def test_square_area_in_square_feet(square_100):
    assert polygon_area(square_100) == pytest.approx(10_000.0, rel=1e-6)


def test_area_ignores_winding(square_100):
    assert polygon_area(list(reversed(square_100))) == pytest.approx(polygon_area(square_100), rel=1e-12)


def test_area_invariant_under_rotation_and_translation(make_boundary):
    shape = [(0, 0), (120, 0), (140, 60), (40, 90), (-10, 40)]
    base = polygon_area(make_boundary(shape))

    a = math.radians(37.0)
    rotated = [(x * math.cos(a) - y * math.sin(a), x * math.sin(a) + y * math.cos(a)) for x, y in shape]
    assert polygon_area(make_boundary(rotated)) == pytest.approx(base, rel=1e-6)

    moved = make_boundary(shape, anchor=(-33.8688, 151.2093))
    assert polygon_area(moved) == pytest.approx(base, rel=1e-6)


def test_degenerate_area_is_zero(square_100):
    assert polygon_area(square_100[:2]) == 0.0
    assert polygon_area([]) == 0.0


def test_signed_area_sign_follows_winding():
    ccw = np.array([[0, 0], [4, 0], [4, 3], [0, 3]], dtype=float)
    assert signed_area(ccw) == pytest.approx(12.0)
    assert signed_area(ccw[::-1]) == pytest.approx(-12.0)
    assert signed_area(ccw[:2]) == 0.0


def test_distance_in_feet(make_boundary):
    p1, p2 = make_boundary([(0, 0), (60, 80)])
    assert distance_feet(p1, p2) == pytest.approx(100.0, rel=1e-6)
    assert distance_feet(p1, p1) == 0.0


def test_midpoint_is_coordinate_mean():
    assert midpoint((10.0, 20.0), (10.002, 20.004)) == pytest.approx((10.001, 20.002))


def test_edge_lengths_include_closing_edge(square_100):
    lengths = edge_lengths(square_100)
    assert len(lengths) == 4
    assert lengths == [pytest.approx(100.0, rel=1e-6)] * 4
    assert edge_lengths(square_100[:1]) == []
