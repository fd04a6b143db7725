"""Area, distance and midpoint helpers for geographic polygons.

Areas and lengths are computed in a local planar frame (see projection.py) and reported in
feet / square feet. Fine for site-scale polygons; not geodesy.
"""

from __future__ import annotations

import math
from typing import List, Sequence

import numpy as np

from .projection import FEET_PER_METER, GeoPoint, Projection


def signed_area(xy: np.ndarray) -> float:
    """Shoelace area of a planar ring; positive when counter-clockwise.

    The ring is implicitly closed; a repeated closing vertex is harmless.
    """

    pts = np.asarray(xy, dtype=float).reshape(-1, 2)
    if len(pts) < 3:
        return 0.0
    # Centre first so large offsets don't eat precision.
    pts = pts - pts.mean(axis=0)
    x, y = pts[:, 0], pts[:, 1]
    return 0.5 * float(np.sum(x * np.roll(y, -1) - np.roll(x, -1) * y))


def polygon_area(boundary: Sequence[GeoPoint]) -> float:
    """Unsigned area of a (lat, lng) polygon in square feet.

    Fewer than 3 points gives 0. Self-intersecting rings give the shoelace value, which is
    defined but not geometrically meaningful.
    """

    if boundary is None or len(boundary) < 3:
        return 0.0
    proj = Projection.for_points(boundary)
    area_m2 = abs(signed_area(proj.to_planar_many(boundary)))
    return area_m2 * FEET_PER_METER * FEET_PER_METER


def distance_feet(p1: GeoPoint, p2: GeoPoint) -> float:
    """Planar distance between two (lat, lng) points, in feet."""

    proj = Projection.for_points([p1, p2])
    x1, y1 = proj.to_planar(p1)
    x2, y2 = proj.to_planar(p2)
    return math.hypot(x2 - x1, y2 - y1) * FEET_PER_METER


def midpoint(p1: GeoPoint, p2: GeoPoint) -> GeoPoint:
    """Chord midpoint: the arithmetic mean of the two (lat, lng) pairs."""

    return (float(p1[0]) + float(p2[0])) / 2.0, (float(p1[1]) + float(p2[1])) / 2.0


def edge_lengths(boundary: Sequence[GeoPoint]) -> List[float]:
    """Length in feet of every edge, closing edge included."""

    n = len(boundary)
    if n < 2:
        return []
    return [distance_feet(boundary[i], boundary[(i + 1) % n]) for i in range(n)]
