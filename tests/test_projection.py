import numpy as np
import pytest

from solarlayout.geo.projection import Projection


@pytest.mark.parametrize(
    "anchor",
    [(39.7392, -104.9903), (-33.8688, 151.2093), (64.1466, -21.9426), (0.0, 0.0)],
)
def test_round_trip_within_tolerance(anchor):
    proj = Projection(*anchor)
    lat0, lng0 = anchor
    for dlat, dlng in [(0.0, 0.0), (0.0012, -0.0007), (-0.003, 0.004), (0.0001, 0.0001)]:
        p = (lat0 + dlat, lng0 + dlng)
        back = proj.to_geo(*proj.to_planar(p))
        assert back == pytest.approx(p, abs=1e-6)


def test_anchor_maps_to_origin():
    proj = Projection(39.7392, -104.9903)
    x, y = proj.to_planar(proj.anchor)
    assert x == pytest.approx(0.0, abs=1e-9)
    assert y == pytest.approx(0.0, abs=1e-9)


def test_planar_axes_are_east_north_metres():
    proj = Projection(39.7392, -104.9903)
    x, y = proj.to_planar((39.7392 + 0.001, -104.9903))
    assert x == pytest.approx(0.0, abs=1e-6)
    assert y == pytest.approx(111.0, rel=1e-2)

    x, y = proj.to_planar((39.7392, -104.9903 + 0.001))
    assert x > 0
    # Longitude degrees shrink with cos(latitude).
    assert x == pytest.approx(111.0 * np.cos(np.radians(39.7392)), rel=1e-2)


def test_vectorised_matches_scalar():
    pts = [(39.74, -104.99), (39.7405, -104.9895), (39.7398, -104.9912)]
    proj = Projection.for_points(pts)
    xy = proj.to_planar_many(pts)
    assert xy.shape == (3, 2)
    for p, row in zip(pts, xy):
        assert proj.to_planar(p) == pytest.approx(tuple(row), abs=1e-9)
    assert proj.to_geo_many(xy) == [pytest.approx(p, abs=1e-9) for p in pts]


def test_for_points_uses_vertex_mean():
    proj = Projection.for_points([(10.0, 20.0), (10.002, 20.004)])
    assert proj.anchor == pytest.approx((10.001, 20.002))


def test_empty_inputs():
    proj = Projection(0.0, 0.0)
    assert proj.to_planar_many([]).shape == (0, 2)
    assert proj.to_geo_many(np.zeros((0, 2))) == []
