"""Point-in-polygon tests on planar coordinates.

Crossing-number (even-odd) rule. Points on the boundary, within BOUNDARY_TOLERANCE of any edge,
count as outside: a module corner touching the buildable region's edge is rejected, and a label
anchor sitting on an edge is not considered "inside".
"""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

BOUNDARY_TOLERANCE = 1e-9

_CHUNK_ELEMENTS = 1 << 20


def points_in_polygon(
    points: np.ndarray,
    polygon: np.ndarray,
    tol: float = BOUNDARY_TOLERANCE,
) -> np.ndarray:
    """Vectorised containment test.

    Args:
        points: (n, 2) planar points
        polygon: (m, 2) ring, implicitly closed
        tol: distance under which a point counts as on an edge

    Returns:
        bool array of shape (n,), True where strictly inside
    """

    pts = np.asarray(points, dtype=float).reshape(-1, 2)
    ring = np.asarray(polygon, dtype=float).reshape(-1, 2)
    if len(pts) == 0 or len(ring) < 3:
        return np.zeros(len(pts), dtype=bool)

    # Bound the (points x edges) temporaries.
    step = max(1, _CHUNK_ELEMENTS // len(ring))
    out = np.empty(len(pts), dtype=bool)
    for start in range(0, len(pts), step):
        out[start : start + step] = _inside_chunk(pts[start : start + step], ring, tol)
    return out


def _inside_chunk(pts: np.ndarray, ring: np.ndarray, tol: float) -> np.ndarray:
    px = pts[:, 0:1]
    py = pts[:, 1:2]
    x1 = ring[:, 0][None, :]
    y1 = ring[:, 1][None, :]
    x2 = np.roll(ring[:, 0], -1)[None, :]
    y2 = np.roll(ring[:, 1], -1)[None, :]
    ex = x2 - x1
    ey = y2 - y1

    # |cross| is distance-to-line times edge length.
    cross = ex * (py - y1) - ey * (px - x1)
    near_line = np.abs(cross) <= tol * np.hypot(ex, ey)
    in_box = (
        (px >= np.minimum(x1, x2) - tol)
        & (px <= np.maximum(x1, x2) + tol)
        & (py >= np.minimum(y1, y2) - tol)
        & (py <= np.maximum(y1, y2) + tol)
    )
    on_boundary = np.any(near_line & in_box, axis=1)

    straddles = (y1 > py) != (y2 > py)
    with np.errstate(divide="ignore", invalid="ignore"):
        x_cross = x1 + (py - y1) * ex / ey
    crossings = np.count_nonzero(straddles & (px < x_cross), axis=1)

    return (crossings % 2 == 1) & ~on_boundary


def contains(point: Tuple[float, float], polygon: Sequence[Tuple[float, float]]) -> bool:
    """True if `point` lies strictly inside `polygon` (boundary counts as outside)."""

    return bool(points_in_polygon(np.asarray([point], dtype=float), np.asarray(polygon, dtype=float))[0])


def is_convex(polygon: np.ndarray, tol: float = 1e-12) -> bool:
    """True if every turn of the ring goes the same way (collinear vertices allowed)."""

    ring = np.asarray(polygon, dtype=float).reshape(-1, 2)
    if len(ring) < 3:
        return False
    e = np.roll(ring, -1, axis=0) - ring
    turns = e[:, 0] * np.roll(e[:, 1], -1) - e[:, 1] * np.roll(e[:, 0], -1)
    turns = turns[np.abs(turns) > tol]
    return bool(np.all(turns > 0) or np.all(turns < 0))
