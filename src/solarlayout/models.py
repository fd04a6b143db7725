"""Segment, module and layout-result types.

A Segment is a user-drawn boundary (WGS84 lat/lng pairs, implicitly closed) plus its racking
configuration. All distances are in feet and all angles in degrees. The editor stores segments
with camelCase keys (`points`, `rackingType`, `moduleTilt`, ...); `Segment.from_dict` accepts
those as well as the snake_case attribute names.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

GeoPoint = Tuple[float, float]  # (lat, lng)


def _token(value: str) -> str:
    return "".join(ch for ch in str(value).lower() if ch.isalnum())


class _ParsableEnum(str, Enum):
    @classmethod
    def parse(cls, value: Any):
        if isinstance(value, cls):
            return value
        key = _token(value)
        for member in cls:
            if key in (_token(member.value), _token(member.name)):
                return member
        choices = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown {cls.__name__} {value!r} (expected one of: {choices})")


class RackingType(_ParsableEnum):
    FIXED_TILT = "Fixed Tilt"
    FLAT = "Flat"


class Orientation(_ParsableEnum):
    PORTRAIT = "Portrait"
    LANDSCAPE = "Landscape"


class Alignment(_ParsableEnum):
    CENTER = "center"
    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"


def normalize_azimuth(azimuth: float) -> float:
    """Reduce an azimuth into [0, 360)."""

    try:
        az = float(azimuth)
    except (TypeError, ValueError):
        return 180.0
    if not math.isfinite(az):
        return 180.0
    az = az % 360.0
    # -1e-17 % 360 rounds to 360.0
    return 0.0 if az >= 360.0 else az


def _as_geo_point(p: Any) -> GeoPoint:
    if isinstance(p, Mapping):
        lat = p.get("lat")
        lng = p.get("lng", p.get("lon"))
    else:
        try:
            lat, lng = p
        except (TypeError, ValueError) as e:
            raise ValueError(f"boundary point must be a (lat, lng) pair, got {p!r}") from e
    try:
        return float(lat), float(lng)
    except (TypeError, ValueError) as e:
        raise ValueError(f"boundary point must be numeric, got {p!r}") from e


# Editor field name -> attribute name.
_SEGMENT_KEYS = {
    "points": "boundary",
    "rackingType": "racking_type",
    "moduleTilt": "module_tilt",
    "rowSpacing": "row_spacing",
    "moduleSpacing": "module_spacing",
    "frameSizeUp": "frame_size_up",
    "frameSizeWide": "frame_size_wide",
    "frameSpacing": "frame_spacing",
    "surfaceHeight": "surface_height",
    "rackingHeight": "racking_height",
    "spanRise": "span_rise",
    "moduleId": "module_id",
}


@dataclass
class Segment:
    boundary: Sequence[GeoPoint]
    racking_type: RackingType = RackingType.FIXED_TILT
    module_tilt: float = 10.0
    orientation: Orientation = Orientation.PORTRAIT
    row_spacing: float = 2.0
    module_spacing: float = 0.041
    setback: float = 0.0
    azimuth: float = 180.0
    frame_size_up: int = 1
    frame_size_wide: int = 1
    frame_spacing: float = 0.0
    alignment: Alignment = Alignment.CENTER
    # Elevation attributes are only used by 3D viewers.
    surface_height: float = 0.0
    racking_height: float = 0.0
    span_rise: float = 0.0
    id: str = ""
    description: str = ""
    module_id: Optional[str] = None

    def __post_init__(self) -> None:
        self.boundary = tuple(_as_geo_point(p) for p in (self.boundary or ()))
        self.racking_type = RackingType.parse(self.racking_type)
        self.orientation = Orientation.parse(self.orientation)
        self.alignment = Alignment.parse(self.alignment)

    @property
    def total_height(self) -> float:
        """Surface plus racking height (ft), as shown on height labels."""
        return float(self.surface_height or 0.0) + float(self.racking_height or 0.0)

    @property
    def is_degenerate(self) -> bool:
        return len(set(self.boundary)) < 3

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Segment":
        """Build a Segment from an editor record or a snake_case mapping.

        Unknown keys (area, moduleLayout, nameplate, ...) are ignored; they are outputs.
        """

        names = set(cls.__dataclass_fields__)
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            name = _SEGMENT_KEYS.get(key, key)
            if name in names and value is not None:
                kwargs[name] = value
        if "boundary" not in kwargs:
            raise ValueError("segment record has no boundary points")
        return cls(**kwargs)


@dataclass(frozen=True)
class Module:
    """Catalog entry. width/length in feet, wattage in W."""

    width: float
    length: float
    wattage: float
    id: str = ""
    name: str = ""

    @property
    def is_valid(self) -> bool:
        """Positive finite dimensions and wattage."""
        values = (self.width, self.length, self.wattage)
        return all(math.isfinite(v) and v > 0 for v in values)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Module":
        try:
            return cls(
                width=float(data["width"]),
                length=float(data["length"]),
                wattage=float(data.get("wattage", data.get("power", 0.0))),
                id=str(data.get("id", "")),
                name=str(data.get("name", "")),
            )
        except KeyError as e:
            raise ValueError(f"module record is missing {e.args[0]!r}") from e


@dataclass(frozen=True)
class LayoutResult:
    """Packed layout for one (Segment, Module) pair.

    footprints are module polygons in (lat, lng), four corners each, not closed.
    row_pitch / column_pitch are in feet; buildable_region is the setback polygon.
    """

    footprints: Tuple[Tuple[GeoPoint, ...], ...] = ()
    count: int = 0
    nameplate: float = 0.0
    resolved_azimuth: float = 180.0
    frames: int = 0
    row_pitch: float = 0.0
    column_pitch: float = 0.0
    buildable_region: Tuple[GeoPoint, ...] = field(default=(), compare=False)

    @classmethod
    def empty(cls, azimuth: float = 180.0, **extra: Any) -> "LayoutResult":
        return cls(resolved_azimuth=normalize_azimuth(azimuth), **extra)

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    def to_dict(self) -> Dict[str, Any]:
        """Fields persisted with the segment, using the editor's names."""
        layout: List[List[List[float]]] = [[[lat, lng] for lat, lng in fp] for fp in self.footprints]
        return {
            "moduleLayout": layout,
            "moduleCount": int(self.count),
            "nameplate": float(self.nameplate),
            "azimuth": float(self.resolved_azimuth),
        }
