import numpy as np
import pytest

from solarlayout.post import containment
from solarlayout.post.containment import contains, is_convex, points_in_polygon

SQUARE = [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0)]
L_SHAPE = [(0, 0), (100, 0), (100, 50), (50, 50), (50, 100), (0, 100)]


def test_inside_and_outside():
    assert contains((5.0, 5.0), SQUARE)
    assert not contains((15.0, 5.0), SQUARE)
    assert not contains((-0.1, 5.0), SQUARE)


@pytest.mark.parametrize("point", [(10.0, 5.0), (5.0, 0.0), (0.0, 0.0), (10.0, 10.0), (5.0, 1e-12)])
def test_boundary_points_are_outside(point):
    assert not contains(point, SQUARE)


def test_just_inside_boundary_is_inside():
    assert contains((5.0, 1e-6), SQUARE)


def test_concave_polygon():
    assert contains((25.0, 75.0), L_SHAPE)
    assert contains((75.0, 25.0), L_SHAPE)
    assert not contains((75.0, 75.0), L_SHAPE)
    # reflex vertex
    assert not contains((50.0, 50.0), L_SHAPE)


def test_winding_does_not_matter():
    pts = np.array([[25, 75], [75, 75], [50, 50], [10, 10], [99, 1]], dtype=float)
    ccw = points_in_polygon(pts, np.asarray(L_SHAPE, dtype=float))
    cw = points_in_polygon(pts, np.asarray(L_SHAPE[::-1], dtype=float))
    assert ccw.tolist() == cw.tolist() == [True, False, False, True, True]


def test_vectorised_matches_scalar():
    rng = np.random.default_rng(7)
    pts = rng.uniform(-10, 110, size=(200, 2))
    mask = points_in_polygon(pts, np.asarray(L_SHAPE, dtype=float))
    assert mask.tolist() == [contains(tuple(p), L_SHAPE) for p in pts]


def test_degenerate_polygon_contains_nothing():
    assert not contains((0.5, 0.5), [(0, 0), (1, 1)])
    assert points_in_polygon(np.zeros((0, 2)), SQUARE).shape == (0,)


def test_is_convex():
    assert is_convex(np.asarray(SQUARE))
    assert is_convex(np.asarray(SQUARE[::-1]))
    assert not is_convex(np.asarray(L_SHAPE, dtype=float))
    # collinear vertex on an edge
    assert is_convex(np.asarray([(0, 0), (5, 0), (10, 0), (10, 10), (0, 10)], dtype=float))


def test_chunked_evaluation_matches(monkeypatch):
    rng = np.random.default_rng(11)
    pts = rng.uniform(-10, 110, size=(500, 2))
    ring = np.asarray(L_SHAPE, dtype=float)
    whole = points_in_polygon(pts, ring)
    # 7 // 6 edges -> one point per chunk
    monkeypatch.setattr(containment, "_CHUNK_ELEMENTS", 7)
    assert points_in_polygon(pts, ring).tolist() == whole.tolist()
