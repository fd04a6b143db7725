"""Inward offset (setback) of a boundary polygon.

Each edge is moved `distance` along its inward normal and consecutive offset lines are
intersected (miter join). Rules:

- distance <= 0 (or NaN) returns the boundary unchanged; an infinite distance consumes it.
- Reflex vertices whose miter point lies further than `miter_limit * distance` from the
  vertex are squared off: the two offset lines are each continued `distance` past the edge
  foot and joined. Convex miters are never clamped; the miter point is the exact setback corner.
- Offset edges that reverse direction are dropped and their neighbours re-intersected, which
  handles shapes that lose short edges as they shrink.
- If the miter ring is still self-intersecting or comes closer than `distance` to the boundary,
  shapely's mitre buffer is used instead and its largest component kept.
- Fewer than 3 vertices, (near) zero area or flipped winding means the setback consumed the
  shape: the result is empty.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

import numpy as np
from shapely.geometry import Polygon

from solarlayout.config import DEFAULT_CONFIG, LayoutConfig
from solarlayout.geo.measure import signed_area
from solarlayout.geo.projection import METERS_PER_FOOT, GeoPoint, Projection

logger = logging.getLogger(__name__)

MIN_REGION_AREA_M2 = 1e-6

_LENGTH_EPS = 1e-9
_PARALLEL_EPS = 1e-12
_SETBACK_TOL = 1e-7


def _empty() -> np.ndarray:
    return np.zeros((0, 2), dtype=float)


def _clean_ring(xy: np.ndarray) -> np.ndarray:
    """Drop repeated vertices, including a closing duplicate of the first."""

    pts = np.asarray(xy, dtype=float).reshape(-1, 2)
    out: List[np.ndarray] = []
    for p in pts:
        if out and np.hypot(*(p - out[-1])) <= _LENGTH_EPS:
            continue
        out.append(p)
    while len(out) > 1 and np.hypot(*(out[-1] - out[0])) <= _LENGTH_EPS:
        out.pop()
    return np.asarray(out, dtype=float).reshape(-1, 2)


def _cross(a: np.ndarray, b: np.ndarray) -> float:
    return float(a[0] * b[1] - a[1] * b[0])


def _intersect(p1: np.ndarray, d1: np.ndarray, p2: np.ndarray, d2: np.ndarray) -> Optional[np.ndarray]:
    denom = _cross(d1, d2)
    if abs(denom) < _PARALLEL_EPS:
        return None
    t = _cross(p2 - p1, d2) / denom
    return p1 + t * d1


def _join(
    ring: np.ndarray,
    dirs: np.ndarray,
    normals: np.ndarray,
    prev: int,
    cur: int,
    distance: float,
    winding: float,
    miter_limit: float,
) -> Optional[List[np.ndarray]]:
    """Offset vertex (or square join) where edge `prev` meets edge `cur`.

    Returns None when the two offset lines face each other, i.e. the shape collapsed.
    """

    n = len(ring)
    adjacent = (prev + 1) % n == cur
    d_prev, d_cur = dirs[prev], dirs[cur]
    line_prev = ring[prev] + normals[prev] * distance
    line_cur = ring[cur] + normals[cur] * distance

    point = _intersect(line_prev, d_prev, line_cur, d_cur)
    if point is None:
        if float(np.dot(d_prev, d_cur)) > 0:
            return [line_cur]
        if not adjacent:
            return None
        # 180-degree turn at an original vertex.
        v = ring[cur]
        return [v + (normals[prev] + d_prev) * distance, v + (normals[cur] - d_cur) * distance]

    if adjacent:
        v = ring[cur]
        reflex = winding * _cross(d_prev, d_cur) < 0
        if reflex and float(np.hypot(*(point - v))) > miter_limit * distance:
            return [v + (normals[prev] + d_prev) * distance, v + (normals[cur] - d_cur) * distance]
    return [point]


def _min_distance_to_ring(points: np.ndarray, ring: np.ndarray) -> np.ndarray:
    a = ring[None, :, :]
    b = np.roll(ring, -1, axis=0)[None, :, :]
    p = points[:, None, :]
    ab = b - a
    denom = np.sum(ab * ab, axis=2)
    with np.errstate(divide="ignore", invalid="ignore"):
        t = np.where(denom > 0, np.sum((p - a) * ab, axis=2) / denom, 0.0)
    t = np.clip(t, 0.0, 1.0)
    foot = a + t[..., None] * ab
    return np.min(np.hypot(*(p - foot).transpose(2, 0, 1)), axis=1)


def _miter_offset(ring: np.ndarray, distance: float, winding: float, miter_limit: float) -> np.ndarray:
    n = len(ring)
    edges = np.roll(ring, -1, axis=0) - ring
    lengths = np.hypot(edges[:, 0], edges[:, 1])
    dirs = edges / lengths[:, None]
    # Interior is to the left of a counter-clockwise ring.
    normals = winding * np.column_stack([-dirs[:, 1], dirs[:, 0]])

    active = list(range(n))
    while len(active) >= 3:
        joins = []
        for k, cur in enumerate(active):
            join = _join(ring, dirs, normals, active[k - 1], cur, distance, winding, miter_limit)
            if join is None:
                return _empty()
            joins.append(join)

        # Offset edge k runs from the end of join k to the start of join k+1.
        m = len(active)
        reversed_edges = set()
        for k, e in enumerate(active):
            span = joins[(k + 1) % m][0] - joins[k][-1]
            if float(np.dot(span, dirs[e])) <= _LENGTH_EPS:
                reversed_edges.add(e)
        if not reversed_edges:
            return np.vstack([p for join in joins for p in join])
        active = [e for e in active if e not in reversed_edges]

    return _empty()


def _buffer_offset(ring: np.ndarray, distance: float, winding: float, miter_limit: float) -> np.ndarray:
    shrunk = Polygon(ring).buffer(-distance, join_style="mitre", mitre_limit=miter_limit)
    if shrunk.is_empty:
        return _empty()
    if shrunk.geom_type == "MultiPolygon":
        shrunk = max(shrunk.geoms, key=lambda g: g.area)
    if shrunk.geom_type != "Polygon":
        return _empty()
    out = np.asarray(shrunk.exterior.coords, dtype=float)[:-1]
    # Match the input winding; shapely picks its own.
    if signed_area(out) * winding < 0:
        out = out[::-1].copy()
    return out


def inset_planar(
    xy: np.ndarray,
    distance: float,
    miter_limit: float = DEFAULT_CONFIG.miter_limit,
) -> np.ndarray:
    """Inset a planar ring by `distance` (same units as the coordinates).

    Returns:
        (k, 2) array with the same winding as the input, or shape (0, 2) when the setback
        consumes the polygon.
    """

    if math.isnan(distance) or distance <= 0:
        return np.asarray(xy, dtype=float).reshape(-1, 2).copy()
    if math.isinf(distance):
        return _empty()

    ring = _clean_ring(xy)
    if len(ring) < 3:
        return _empty()
    area = signed_area(ring)
    if abs(area) < MIN_REGION_AREA_M2:
        return _empty()
    winding = 1.0 if area > 0 else -1.0

    result = _miter_offset(ring, distance, winding, miter_limit)
    if len(result) >= 3:
        result = _clean_ring(result)
    if len(result) >= 3:
        valid = Polygon(result).is_valid
        clear = bool(np.all(_min_distance_to_ring(result, ring) >= distance - _SETBACK_TOL))
        if not (valid and clear):
            logger.debug("Miter offset needs repair (valid=%s, clear=%s); using buffer", valid, clear)
            result = _buffer_offset(ring, distance, winding, miter_limit)

    if len(result) < 3:
        return _empty()
    new_area = signed_area(result)
    if abs(new_area) < MIN_REGION_AREA_M2 or new_area * winding < 0:
        return _empty()
    return result


def clean_setback(value: Optional[float], segment_id: str = "") -> float:
    """Setback in feet that the offset engine accepts.

    None, NaN and negative values become 0 (logged); +inf is kept and consumes any boundary.
    """

    try:
        distance = float(value or 0.0)
    except (TypeError, ValueError):
        distance = math.nan
    if math.isnan(distance) or distance < 0:
        logger.warning("Segment %s: setback=%r clamped to 0", segment_id or "?", value)
        return 0.0
    return distance


def inset(
    boundary: Sequence[GeoPoint],
    distance: float,
    config: Optional[LayoutConfig] = None,
) -> List[GeoPoint]:
    """Inset a (lat, lng) boundary by `distance` feet.

    Returns the buildable region as (lat, lng) points, the boundary itself for distance 0, or
    an empty list when the setback consumes the polygon.
    """

    cfg = config or DEFAULT_CONFIG
    distance = clean_setback(distance)
    if distance == 0:
        return list(boundary)
    if len(boundary) < 3 or math.isinf(distance):
        return []

    proj = Projection.for_points(boundary)
    region = inset_planar(proj.to_planar_many(boundary), distance * METERS_PER_FOOT, cfg.miter_limit)
    if len(region) == 0:
        logger.info("Setback of %.2f ft consumes the boundary", distance)
        return []
    return proj.to_geo_many(region)


def setback_ring(
    boundary: Sequence[GeoPoint],
    setback: float,
    config: Optional[LayoutConfig] = None,
) -> Optional[Polygon]:
    """Band between the boundary and its buildable region, in (lng, lat) order.

    None when there's no setback, the boundary is degenerate, or nothing is buildable.
    """

    setback = clean_setback(setback)
    if setback <= 0 or len(boundary) < 3:
        return None
    region = inset(boundary, setback, config)
    if not region:
        return None
    shell = [(lng, lat) for lat, lng in boundary]
    hole = [(lng, lat) for lat, lng in region]
    return Polygon(shell, [hole])
