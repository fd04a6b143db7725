"""Frame dimensions and row/column pitch for a racking configuration.

Terms (canonical frame, azimuth 180: rows run east-west, modules face south):
  across  - module dimension along the row
  depth   - module dimension up the tilted surface
  plan    - horizontal projection of a depth (depth * cos(tilt))

Row pitch is the self-shading spacing policy:

  FixedTilt: frame_depth * cos(t) + frame_depth * sin(t) / tan(e) + row_spacing
  Flat:      frame_depth + row_spacing

where e is the design sun elevation. The middle term is the length of the shadow cast by the
raised back edge of a frame, so the next row starts where that shadow ends.

All functions are unit-agnostic; the packer feeds them metres, metrics feed them feet.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from solarlayout.config import DEFAULT_CONFIG, LayoutConfig
from solarlayout.models import Module, Orientation, RackingType, Segment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GridSpec:
    module_across: float
    module_depth: float
    module_plan_depth: float
    frame_width: float
    frame_depth: float
    frame_plan_depth: float
    row_pitch: float
    column_pitch: float
    module_step_across: float
    module_step_plan: float
    frame_size_up: int
    frame_size_wide: int
    tilt_deg: float

    @property
    def modules_per_frame(self) -> int:
        return self.frame_size_up * self.frame_size_wide

    @property
    def module_plan_area(self) -> float:
        return self.module_across * self.module_plan_depth

    @property
    def ground_coverage_ratio(self) -> float:
        if self.row_pitch <= 0:
            return 0.0
        return self.frame_plan_depth / self.row_pitch

    def scaled(self, factor: float) -> "GridSpec":
        """Same grid in other length units (e.g. feet -> metres)."""
        return replace(
            self,
            module_across=self.module_across * factor,
            module_depth=self.module_depth * factor,
            module_plan_depth=self.module_plan_depth * factor,
            frame_width=self.frame_width * factor,
            frame_depth=self.frame_depth * factor,
            frame_plan_depth=self.frame_plan_depth * factor,
            row_pitch=self.row_pitch * factor,
            column_pitch=self.column_pitch * factor,
            module_step_across=self.module_step_across * factor,
            module_step_plan=self.module_step_plan * factor,
        )


def module_dimensions(module: Module, orientation: Orientation) -> Tuple[float, float]:
    """(across, depth) for a module; landscape swaps width and length."""

    if Orientation.parse(orientation) is Orientation.LANDSCAPE:
        return float(module.length), float(module.width)
    return float(module.width), float(module.length)


def effective_tilt(racking_type: RackingType, tilt_deg: float) -> float:
    """Tilt that applies to the racking; Flat racking ignores the segment's tilt."""

    if RackingType.parse(racking_type) is RackingType.FLAT:
        return 0.0
    tilt = float(tilt_deg or 0.0)
    if not math.isfinite(tilt):
        return 0.0
    return min(max(tilt, 0.0), 90.0)


def shading_clearance(depth: float, tilt_deg: float, min_sun_elevation_deg: float) -> float:
    """Horizontal shadow length behind a surface of slope length `depth`."""

    if tilt_deg <= 0:
        return 0.0
    t = math.radians(tilt_deg)
    e = math.radians(min_sun_elevation_deg)
    return depth * math.sin(t) / math.tan(e)


def row_pitch(
    frame_depth: float,
    tilt_deg: float,
    row_spacing: float,
    min_sun_elevation_deg: float = DEFAULT_CONFIG.min_sun_elevation_deg,
) -> float:
    plan = frame_depth * math.cos(math.radians(tilt_deg))
    return plan + shading_clearance(frame_depth, tilt_deg, min_sun_elevation_deg) + row_spacing


def column_pitch(frame_width: float, module_spacing: float, frame_spacing: float) -> float:
    """Centre-to-centre distance of neighbouring frames in a row.

    Neighbouring frames keep the usual module gap plus the extra frame gap.
    """
    return frame_width + module_spacing + frame_spacing


def _non_negative(value: float, name: str, segment_id: str) -> float:
    v = float(value or 0.0)
    if not math.isfinite(v) or v < 0:
        logger.warning("Segment %s: %s=%r clamped to 0", segment_id or "?", name, value)
        return 0.0
    return v


def _frame_count(value: int, name: str, segment_id: str) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError):
        n = 0
    if n < 1:
        logger.warning("Segment %s: %s=%r clamped to 1", segment_id or "?", name, value)
        return 1
    return n


def grid_spec(segment: Segment, module: Module, config: Optional[LayoutConfig] = None) -> GridSpec:
    """Frame and pitch geometry for a segment/module pair, in feet.

    Negative spacings and tilts are clamped to zero; frame sizes below one become one.
    """

    cfg = config or DEFAULT_CONFIG
    sid = segment.id
    across, depth = module_dimensions(module, segment.orientation)
    module_spacing = _non_negative(segment.module_spacing, "module_spacing", sid)
    row_spacing = _non_negative(segment.row_spacing, "row_spacing", sid)
    frame_spacing = _non_negative(segment.frame_spacing, "frame_spacing", sid)
    if segment.racking_type is RackingType.FIXED_TILT and (segment.module_tilt or 0) < 0:
        logger.warning("Segment %s: module_tilt=%r clamped to 0", sid or "?", segment.module_tilt)
    tilt = effective_tilt(segment.racking_type, segment.module_tilt)
    up = _frame_count(segment.frame_size_up, "frame_size_up", sid)
    wide = _frame_count(segment.frame_size_wide, "frame_size_wide", sid)

    cos_t = math.cos(math.radians(tilt))
    frame_width = wide * across + (wide - 1) * module_spacing
    frame_depth = up * depth + (up - 1) * module_spacing

    return GridSpec(
        module_across=across,
        module_depth=depth,
        module_plan_depth=depth * cos_t,
        frame_width=frame_width,
        frame_depth=frame_depth,
        frame_plan_depth=frame_depth * cos_t,
        row_pitch=row_pitch(frame_depth, tilt, row_spacing, cfg.min_sun_elevation_deg),
        column_pitch=column_pitch(frame_width, module_spacing, frame_spacing),
        module_step_across=across + module_spacing,
        module_step_plan=(depth + module_spacing) * cos_t,
        frame_size_up=up,
        frame_size_wide=wide,
        tilt_deg=tilt,
    )
