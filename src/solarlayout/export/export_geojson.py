"""GeoJSON export of a packed segment.

Writes a FeatureCollection in EPSG:4326 with (lon, lat) coordinates: the segment boundary, the
buildable region (when a setback left one) and one feature per module footprint.
"""

import json
from typing import Any, Dict, List, Optional, Sequence, Tuple

from shapely.geometry import Polygon, mapping

from solarlayout.geo.projection import GeoPoint
from solarlayout.models import LayoutResult, Segment


def _polygon(points: Sequence[GeoPoint]) -> Optional[Polygon]:
    if points is None or len(points) < 3:
        return None
    return Polygon([(lng, lat) for lat, lng in points])


def layout_geometries(segment: Segment, result: LayoutResult) -> Tuple[List[Polygon], List[Dict[str, Any]]]:
    """Shapely geometries (lon/lat) and matching feature properties."""

    geoms: List[Polygon] = []
    props: List[Dict[str, Any]] = []

    boundary = _polygon(segment.boundary)
    if boundary is not None:
        geoms.append(boundary)
        props.append(
            {
                "type": "segment",
                "id": segment.id,
                "description": segment.description,
                "moduleCount": int(result.count),
                "nameplate": float(result.nameplate),
                "azimuth": float(result.resolved_azimuth),
            }
        )

    region = _polygon(result.buildable_region)
    if region is not None and segment.setback:
        geoms.append(region)
        props.append({"type": "buildable", "id": segment.id, "setback": float(segment.setback)})

    for i, fp in enumerate(result.footprints):
        geoms.append(_polygon(fp))
        props.append({"type": "module", "segment": segment.id, "index": i})

    return geoms, props


def layout_to_feature_collection(segment: Segment, result: LayoutResult) -> Dict[str, Any]:
    geoms, props = layout_geometries(segment, result)
    fc: Dict[str, Any] = {"type": "FeatureCollection", "features": []}
    for geom, p in zip(geoms, props):
        fc["features"].append({"type": "Feature", "properties": dict(p), "geometry": mapping(geom)})
    return fc


def export_geojson(segment: Segment, result: LayoutResult, out_path: str) -> None:
    """Write the layout of one segment as a GeoJSON FeatureCollection."""

    if result is None:
        raise ValueError("result cannot be None")
    fc = layout_to_feature_collection(segment, result)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(fc, f)
