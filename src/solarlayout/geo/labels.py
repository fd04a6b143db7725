"""Edge length labels for drawn boundaries.

Each edge gets its length as text, placed beside the edge midpoint on the side away from the
polygon interior, rotated to run along the edge without ever reading upside down.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from solarlayout.config import DEFAULT_CONFIG, LayoutConfig
from solarlayout.geo.measure import distance_feet, midpoint
from solarlayout.geo.projection import METERS_PER_FOOT, GeoPoint, Projection
from solarlayout.post.containment import contains


@dataclass(frozen=True)
class EdgeLabel:
    start: GeoPoint
    end: GeoPoint
    length: float  # ft
    text: str
    position: GeoPoint
    rotation_deg: float  # counter-clockwise from east, in [-90, 90]


def text_rotation(dx: float, dy: float) -> float:
    angle = math.degrees(math.atan2(dy, dx))
    if angle > 90.0:
        angle -= 180.0
    elif angle < -90.0:
        angle += 180.0
    return angle


def edge_labels(
    boundary: Sequence[GeoPoint],
    offset: Optional[float] = None,
    config: Optional[LayoutConfig] = None,
) -> List[EdgeLabel]:
    """Labels for every edge of `boundary`, closing edge included.

    Args:
        boundary: (lat, lng) points
        offset: label distance from the edge midpoint in feet (config.label_offset_ft if None)
    """

    n = len(boundary)
    if n < 2:
        return []
    cfg = config or DEFAULT_CONFIG
    offset_m = (cfg.label_offset_ft if offset is None else float(offset)) * METERS_PER_FOOT

    proj = Projection.for_points(boundary)
    xy = proj.to_planar_many(boundary)

    labels: List[EdgeLabel] = []
    for i in range(n):
        j = (i + 1) % n
        p1, p2 = boundary[i], boundary[j]
        length = distance_feet(p1, p2)
        mid = np.asarray(proj.to_planar(midpoint(p1, p2)))

        dx, dy = xy[j] - xy[i]
        norm = math.hypot(dx, dy)
        normal = np.array([-dy, dx]) / norm if norm > 0 else np.zeros(2)
        spot = mid + normal * offset_m
        if n > 2 and contains(tuple(spot), xy):
            spot = mid - normal * offset_m

        labels.append(
            EdgeLabel(
                start=p1,
                end=p2,
                length=length,
                text=f"{length:.1f} ft",
                position=proj.to_geo(*spot),
                rotation_deg=text_rotation(dx, dy),
            )
        )
    return labels
