"""Shared fixtures: geographic boundaries built from planar offsets in feet."""

import pytest

from solarlayout.geo.projection import METERS_PER_FOOT, Projection
from solarlayout.models import Alignment, Module, Orientation, RackingType, Segment

ANCHOR = (39.7392, -104.9903)


def boundary_from_feet(points_ft, anchor=ANCHOR):
    proj = Projection(*anchor)
    return [proj.to_geo(x * METERS_PER_FOOT, y * METERS_PER_FOOT) for x, y in points_ft]


def rectangle_ft(width, height, anchor=ANCHOR):
    w, h = width / 2.0, height / 2.0
    return boundary_from_feet([(-w, -h), (w, -h), (w, h), (-w, h)], anchor)


@pytest.fixture
def make_boundary():
    return boundary_from_feet


@pytest.fixture
def make_rectangle():
    return rectangle_ft


@pytest.fixture
def square_100():
    """100 ft x 100 ft square, counter-clockwise."""
    return rectangle_ft(100.0, 100.0)


@pytest.fixture
def module():
    return Module(width=3.25, length=6.5, wattage=400.0, id="m400")


@pytest.fixture
def flat_segment(square_100):
    """Flat racking on the 100 ft square; 26 x 11 modules fit."""
    return Segment(
        boundary=square_100,
        racking_type=RackingType.FLAT,
        orientation=Orientation.PORTRAIT,
        row_spacing=2.0,
        module_spacing=0.5,
        setback=0.0,
        azimuth=180.0,
        frame_size_up=1,
        frame_size_wide=1,
        frame_spacing=0.0,
        alignment=Alignment.CENTER,
        id="seg-1",
    )
