"""Projection between WGS84 (lat, lng) and a local planar frame in metres.

A Projection is a value object bound to one anchor. Every planar coordinate produced in a layout
pass must come from the same Projection; coordinates from differently anchored projections are
not comparable.

    proj = Projection.for_points(boundary)
    xy = proj.to_planar_many(boundary)      # (n, 2) metres east/north of the anchor
    back = proj.to_geo_many(xy)             # [(lat, lng), ...]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np
from pyproj import Transformer

from .crs import local_crs_from_latlon

GeoPoint = Tuple[float, float]  # (lat, lng)
PlanarPoint = Tuple[float, float]  # (x east, y north) in metres

METERS_PER_FOOT = 0.3048
FEET_PER_METER = 1.0 / METERS_PER_FOOT


@dataclass
class Projection:
    anchor_lat: float
    anchor_lng: float

    _to_local: Transformer = field(init=False, repr=False, compare=False)
    _to_wgs: Transformer = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.anchor_lat = float(self.anchor_lat)
        self.anchor_lng = float(self.anchor_lng)
        local = local_crs_from_latlon(self.anchor_lat, self.anchor_lng)
        self._to_local = Transformer.from_crs("EPSG:4326", local, always_xy=True)
        self._to_wgs = Transformer.from_crs(local, "EPSG:4326", always_xy=True)

    @classmethod
    def for_points(cls, points: Sequence[GeoPoint]) -> "Projection":
        """Anchor at the vertex mean of `points` (origin when there are none)."""
        if not points:
            return cls(0.0, 0.0)
        arr = np.asarray(points, dtype=float).reshape(-1, 2)
        lat, lng = arr.mean(axis=0)
        return cls(float(lat), float(lng))

    @property
    def anchor(self) -> GeoPoint:
        return self.anchor_lat, self.anchor_lng

    def to_planar(self, point: GeoPoint) -> PlanarPoint:
        lat, lng = point
        x, y = self._to_local.transform(float(lng), float(lat))
        return float(x), float(y)

    def to_geo(self, x: float, y: float) -> GeoPoint:
        lng, lat = self._to_wgs.transform(float(x), float(y))
        return float(lat), float(lng)

    def to_planar_many(self, points: Sequence[GeoPoint]) -> np.ndarray:
        arr = np.asarray(points, dtype=float).reshape(-1, 2)
        if len(arr) == 0:
            return np.zeros((0, 2), dtype=float)
        xs, ys = self._to_local.transform(arr[:, 1], arr[:, 0])
        return np.column_stack([np.asarray(xs, dtype=float), np.asarray(ys, dtype=float)])

    def to_geo_many(self, xy: np.ndarray) -> List[GeoPoint]:
        arr = np.asarray(xy, dtype=float).reshape(-1, 2)
        if len(arr) == 0:
            return []
        lngs, lats = self._to_wgs.transform(arr[:, 0], arr[:, 1])
        return [(float(lat), float(lng)) for lat, lng in zip(np.atleast_1d(lats), np.atleast_1d(lngs))]
