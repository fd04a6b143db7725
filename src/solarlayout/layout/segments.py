"""Segment recomputation: the caller-side policy around the packer.

Whenever a segment, its module or the module catalog changes the editor recomputes:
  - area, always
  - the packed layout when the segment has a module
  - zeroed layout fields when it doesn't (area-only recomputation)

Each recompute is independent and pure, so different segments can be packed in parallel;
`pack_segments` bounds that work with a process pool.
"""

from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from itertools import repeat
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from solarlayout.config import DEFAULT_CONFIG, LayoutConfig
from solarlayout.geo.measure import polygon_area
from solarlayout.layout.packer import pack_segment
from solarlayout.models import LayoutResult, Module, Segment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SegmentUpdate:
    segment_id: str
    area: float
    layout: LayoutResult
    packed: bool

    def to_dict(self) -> Dict[str, Any]:
        """Editor fields to merge into the stored segment."""
        if not self.packed:
            return {"area": self.area, "moduleLayout": [], "moduleCount": 0, "nameplate": 0.0}
        out = {"area": self.area}
        out.update(self.layout.to_dict())
        return out


def find_module(modules: Sequence[Module], module_id: Optional[str]) -> Optional[Module]:
    if not module_id:
        return None
    for m in modules:
        if m.id == module_id:
            return m
    return None


def recompute_segment(
    segment: Segment,
    module: Optional[Module] = None,
    config: Optional[LayoutConfig] = None,
) -> SegmentUpdate:
    area = polygon_area(segment.boundary)
    if module is None:
        return SegmentUpdate(segment.id, area, LayoutResult.empty(segment.azimuth), packed=False)
    layout = pack_segment(segment, module, config)
    return SegmentUpdate(segment.id, area, layout, packed=True)


def _recompute_pair(pair: Tuple[Segment, Optional[Module]], config: LayoutConfig) -> SegmentUpdate:
    segment, module = pair
    return recompute_segment(segment, module, config)


def pack_segments(
    items: Sequence[Tuple[Segment, Optional[Module]]],
    max_workers: Optional[int] = None,
    config: Optional[LayoutConfig] = None,
) -> List[SegmentUpdate]:
    """Recompute many segments, in input order.

    Args:
        items: (segment, module-or-None) pairs
        max_workers: process count; defaults to config.max_workers, <= 1 runs inline
        config: engine tunables
    """

    cfg = config or DEFAULT_CONFIG
    workers = cfg.max_workers if max_workers is None else int(max_workers)
    pairs = list(items)
    if workers <= 1 or len(pairs) <= 1:
        return [_recompute_pair(p, cfg) for p in pairs]

    logger.info("Packing %d segments with %d workers", len(pairs), workers)
    with ProcessPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(_recompute_pair, pairs, repeat(cfg)))


def recompute_records(
    segments: Sequence[Mapping[str, Any]],
    modules: Sequence[Module],
    config: Optional[LayoutConfig] = None,
) -> Dict[str, Dict[str, Any]]:
    """Recompute editor records; returns {segment id: fields to merge}."""

    items = []
    for record in segments:
        segment = Segment.from_dict(record)
        items.append((segment, find_module(modules, segment.module_id)))
    updates = pack_segments(items, config=config)
    return {u.segment_id: u.to_dict() for u in updates}
