"""Module layout packer.

Packs frames of modules into a segment's buildable region on a regular grid:

1) inset the boundary by the setback (post/offset.py)
2) rotate the region into the canonical frame (azimuth 180: rows run east-west)
3) tile its bounding box with frame cells of column_pitch x row_pitch, placed per alignment
4) rotate every module footprint back and keep frames whose module corners are all inside
   the region (boundary counts as outside; partial frames are dropped whole)
5) project the surviving footprints to (lat, lng)

The packer never raises for degenerate geometry; it returns an empty LayoutResult instead.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

import numpy as np
from shapely.geometry import Polygon
from shapely.prepared import prep

from solarlayout.config import DEFAULT_CONFIG, LayoutConfig
from solarlayout.geo.measure import signed_area
from solarlayout.geo.projection import FEET_PER_METER, METERS_PER_FOOT, Projection
from solarlayout.layout.pitch import GridSpec, grid_spec
from solarlayout.models import Alignment, LayoutResult, Module, Segment, normalize_azimuth
from solarlayout.post.containment import is_convex, points_in_polygon
from solarlayout.post.offset import MIN_REGION_AREA_M2, clean_setback, inset_planar

logger = logging.getLogger(__name__)

_GRID_EPS = 1e-9

# Share of the spare bounding-box length placed before the grid.
_LEAD_X = {Alignment.LEFT: 0.0, Alignment.RIGHT: 1.0}
_LEAD_Y = {Alignment.BOTTOM: 0.0, Alignment.TOP: 1.0}


def _rotate(xy: np.ndarray, angle_rad: float, origin: Tuple[float, float]) -> np.ndarray:
    c, s = math.cos(angle_rad), math.sin(angle_rad)
    o = np.asarray(origin, dtype=float)
    rel = np.asarray(xy, dtype=float) - o
    out = np.empty_like(rel)
    out[..., 0] = rel[..., 0] * c - rel[..., 1] * s
    out[..., 1] = rel[..., 0] * s + rel[..., 1] * c
    return out + o


def cell_count(extent: float, pitch: float, min_pitch: float) -> int:
    """Whole grid cells along an axis, capped so a tiny pitch can't explode the grid."""

    if not (extent > 0 and min_pitch > 0):
        return 0
    pitch = pitch if (math.isfinite(pitch) and pitch > min_pitch) else min_pitch
    cap = int(math.floor(extent / min_pitch))
    return max(0, min(int(math.floor(extent / pitch + _GRID_EPS)), cap))


def grid_origin(
    alignment: Alignment,
    bounds: Tuple[float, float, float, float],
    n_cols: int,
    col_pitch: float,
    n_rows: int,
    row_pitch: float,
) -> Tuple[float, float]:
    """Lower-left corner of the cell grid inside `bounds` (minx, miny, maxx, maxy).

    center splits the spare length evenly on both axes; left/right only move the grid along
    the rows, top/bottom only across them.
    """

    minx, miny, maxx, maxy = bounds
    spare_x = max(0.0, (maxx - minx) - n_cols * col_pitch)
    spare_y = max(0.0, (maxy - miny) - n_rows * row_pitch)
    return (
        minx + spare_x * _LEAD_X.get(alignment, 0.5),
        miny + spare_y * _LEAD_Y.get(alignment, 0.5),
    )


def _module_corners(
    spec: GridSpec,
    origin: Tuple[float, float],
    n_rows: int,
    n_cols: int,
    min_pitch: float,
) -> np.ndarray:
    """Canonical-frame module corners, shape (n_frames, modules_per_frame, 4, 2).

    Frames are ordered row by row (south to north), west to east within a row; modules within
    a frame the same way.
    """

    col_p = max(spec.column_pitch, min_pitch)
    row_p = max(spec.row_pitch, min_pitch)
    x0, y0 = origin

    frame_x = x0 + np.arange(n_cols) * col_p + (col_p - spec.frame_width) / 2.0
    frame_y = y0 + np.arange(n_rows) * row_p + (row_p - spec.frame_plan_depth) / 2.0
    fy, fx = np.meshgrid(frame_y, frame_x, indexing="ij")
    frames = np.stack([fx.ravel(), fy.ravel()], axis=1)  # (F, 2)

    up = np.arange(spec.frame_size_up) * spec.module_step_plan
    wide = np.arange(spec.frame_size_wide) * spec.module_step_across
    my, mx = np.meshgrid(up, wide, indexing="ij")
    offsets = np.stack([mx.ravel(), my.ravel()], axis=1)  # (M, 2)

    a, p = spec.module_across, spec.module_plan_depth
    rect = np.array([[0.0, 0.0], [a, 0.0], [a, p], [0.0, p]])  # counter-clockwise

    return frames[:, None, None, :] + offsets[None, :, None, :] + rect[None, None, :, :]


def _covered(region: np.ndarray, candidates: np.ndarray) -> np.ndarray:
    """Frames whose every module lies within a (non-convex) region."""

    shape = Polygon(region)
    if not shape.is_valid:
        # Self-intersecting input; corner tests are all we can offer.
        return np.ones(len(candidates), dtype=bool)
    prepared = prep(shape)
    return np.array(
        [all(prepared.contains(Polygon(m)) for m in frame) for frame in candidates],
        dtype=bool,
    )


def pack_segment(
    segment: Segment,
    module: Optional[Module],
    config: Optional[LayoutConfig] = None,
) -> LayoutResult:
    """Lay out modules on a segment.

    Args:
        segment: boundary and racking configuration
        module: catalog entry; None or a zero-sized module gives an empty layout
        config: engine tunables (DEFAULT_CONFIG when None)

    Returns:
        LayoutResult; count 0 for degenerate boundaries, consumed setbacks or modules that
        don't fit.
    """

    cfg = config or DEFAULT_CONFIG
    azimuth = normalize_azimuth(segment.azimuth)

    if module is None or not module.is_valid:
        logger.debug("Segment %s: no usable module, empty layout", segment.id or "?")
        return LayoutResult.empty(azimuth)
    if segment.is_degenerate:
        logger.debug("Segment %s: fewer than 3 distinct points, empty layout", segment.id or "?")
        return LayoutResult.empty(azimuth)

    spec_ft = grid_spec(segment, module, cfg)
    spec = spec_ft.scaled(METERS_PER_FOOT)
    pitches = {"row_pitch": spec_ft.row_pitch, "column_pitch": spec_ft.column_pitch}

    setback = clean_setback(segment.setback, segment.id)

    # Anchored at the boundary's vertex mean rather than the buildable region's centroid; the
    # centroid is only the rotation origin. Over a sub-kilometre site the two frames agree to
    # well under a millimetre.
    proj = Projection.for_points(segment.boundary)
    boundary_xy = proj.to_planar_many(segment.boundary)
    region = inset_planar(boundary_xy, setback * METERS_PER_FOOT, cfg.miter_limit)
    if len(region) < 3 or abs(signed_area(region)) < MIN_REGION_AREA_M2:
        logger.info("Segment %s: no buildable area after %.2f ft setback", segment.id or "?", setback)
        return LayoutResult.empty(azimuth, **pitches)
    buildable = tuple(proj.to_geo_many(region))

    centroid = Polygon(region).centroid
    origin = (centroid.x, centroid.y) if not centroid.is_empty else tuple(region.mean(axis=0))
    theta = math.radians(azimuth - 180.0)
    canonical = _rotate(region, theta, origin)
    minx, miny = canonical.min(axis=0)
    maxx, maxy = canonical.max(axis=0)

    min_pitch = cfg.min_pitch_ft * METERS_PER_FOOT
    n_cols = cell_count(maxx - minx, spec.column_pitch, min_pitch)
    n_rows = cell_count(maxy - miny, spec.row_pitch, min_pitch)
    if n_cols == 0 or n_rows == 0:
        logger.debug("Segment %s: buildable area narrower than one frame", segment.id or "?")
        return LayoutResult.empty(azimuth, buildable_region=buildable, **pitches)
    candidates = n_cols * n_rows * spec.modules_per_frame
    if candidates > cfg.max_grid_cells:
        logger.warning(
            "Segment %s: %d candidate modules (grid %dx%d) exceed max_grid_cells=%d, empty layout",
            segment.id or "?",
            candidates,
            n_rows,
            n_cols,
            cfg.max_grid_cells,
        )
        return LayoutResult.empty(azimuth, buildable_region=buildable, **pitches)

    grid_xy = grid_origin(
        segment.alignment,
        (minx, miny, maxx, maxy),
        n_cols,
        max(spec.column_pitch, min_pitch),
        n_rows,
        max(spec.row_pitch, min_pitch),
    )
    corners = _module_corners(spec, grid_xy, n_rows, n_cols, min_pitch)
    world = _rotate(corners, -theta, origin)

    n_frames, per_frame = world.shape[:2]
    inside = points_in_polygon(world.reshape(-1, 2), region).reshape(n_frames, per_frame * 4)
    keep = inside.all(axis=1)
    if keep.any() and not is_convex(region):
        idx = np.flatnonzero(keep)
        keep[idx] = _covered(region, world[idx])

    kept = world[keep]
    geo = proj.to_geo_many(kept.reshape(-1, 2))
    footprints = tuple(tuple(geo[i : i + 4]) for i in range(0, len(geo), 4))
    count = len(footprints)
    frames = int(np.count_nonzero(keep))

    logger.debug(
        "Segment %s: %d modules in %d/%d frames (grid %dx%d, pitch %.2f x %.2f ft)",
        segment.id or "?",
        count,
        frames,
        n_frames,
        n_rows,
        n_cols,
        spec.row_pitch * FEET_PER_METER,
        spec.column_pitch * FEET_PER_METER,
    )
    return LayoutResult(
        footprints=footprints,
        count=count,
        nameplate=count * float(module.wattage) / 1000.0,
        resolved_azimuth=azimuth,
        frames=frames,
        buildable_region=buildable,
        **pitches,
    )
