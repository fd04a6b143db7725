"""Summary metrics for a packed layout.

Simple, robust numbers for tables and reports:
  - ground coverage ratio: frame plan depth / row pitch (shading proxy)
  - kW per acre of drawn segment area
  - utilisation: module plan area / buildable area
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from solarlayout.config import LayoutConfig
from solarlayout.geo.measure import polygon_area
from solarlayout.layout.pitch import grid_spec
from solarlayout.models import LayoutResult, Module, Segment

SQFT_PER_ACRE = 43_560.0


@dataclass(frozen=True)
class LayoutMetrics:
    module_count: int
    nameplate_kw: float
    segment_area_sqft: float
    buildable_area_sqft: float
    module_area_sqft: float
    ground_coverage_ratio: float
    kw_per_acre: float
    utilisation: float


def layout_metrics(
    segment: Segment,
    module: Optional[Module],
    result: LayoutResult,
    config: Optional[LayoutConfig] = None,
) -> Dict[str, Any]:
    """Metrics for one layout as a plain dict (JSON/table friendly)."""

    segment_area = polygon_area(segment.boundary)
    buildable_area = polygon_area(result.buildable_region)

    gcr = 0.0
    module_area = 0.0
    if module is not None and module.is_valid:
        spec = grid_spec(segment, module, config)
        gcr = spec.ground_coverage_ratio
        module_area = result.count * spec.module_plan_area

    acres = segment_area / SQFT_PER_ACRE
    metrics = LayoutMetrics(
        module_count=int(result.count),
        nameplate_kw=float(result.nameplate),
        segment_area_sqft=float(segment_area),
        buildable_area_sqft=float(buildable_area),
        module_area_sqft=float(module_area),
        ground_coverage_ratio=float(gcr),
        kw_per_acre=float(result.nameplate / acres) if acres > 0 else 0.0,
        utilisation=float(module_area / buildable_area) if buildable_area > 0 else 0.0,
    )
    return asdict(metrics)
