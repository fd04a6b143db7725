"""Pack a GeoJSON site outline with solar modules and print the layout summary.

Example:
    python main.py site.geojson --module-width 3.25 --module-length 6.5 --wattage 400 \
        --racking flat --setback 3 --plot --out layout.geojson
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from shapely.geometry import shape

# Make imports work without installing the package.
PROJECT_ROOT = Path(__file__).resolve().parent
if str(PROJECT_ROOT / "src") not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT / "src"))

from solarlayout.config import DEFAULT_CONFIG, load_config  # noqa: E402
from solarlayout.export.export_geojson import export_geojson  # noqa: E402
from solarlayout.geo.labels import edge_labels  # noqa: E402
from solarlayout.layout.segments import recompute_segment  # noqa: E402
from solarlayout.log import setup_logging  # noqa: E402
from solarlayout.models import Module, Segment  # noqa: E402
from solarlayout.score.metrics import layout_metrics  # noqa: E402


def load_boundary(geojson_path: str):
    """First polygon of a GeoJSON file as (lat, lng) points."""

    with open(geojson_path, "r", encoding="utf-8") as f:
        gj = json.load(f)
    if gj.get("type") == "FeatureCollection":
        gj = gj["features"][0]
    geom = shape(gj.get("geometry", gj))
    if geom.geom_type == "MultiPolygon":
        geom = max(geom.geoms, key=lambda g: g.area)
    if geom.geom_type != "Polygon":
        raise ValueError(f"expected a Polygon, got {geom.geom_type}")
    return [(lat, lon) for lon, lat in list(geom.exterior.coords)[:-1]]


def summary(segment: Segment, update, metrics) -> None:
    print(f"Area:      {update.area:,.1f} sq ft")
    print(f"Modules:   {update.layout.count}")
    print(f"Frames:    {update.layout.frames}")
    print(f"DC size:   {update.layout.nameplate:.2f} kW")
    print(f"Azimuth:   {update.layout.resolved_azimuth:.1f}°")
    print(f"Pitch:     {update.layout.row_pitch:.2f} ft rows, {update.layout.column_pitch:.2f} ft columns")
    print(f"GCR:       {metrics['ground_coverage_ratio']:.2f}")
    print(f"kW/acre:   {metrics['kw_per_acre']:.1f}")
    print("Edges:     " + ", ".join(lbl.text for lbl in edge_labels(segment.boundary)))


def visualize(segment: Segment, update) -> None:
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        print("matplotlib not available; skipping visualization. Install with: python -m pip install matplotlib")
        return

    fig, ax = plt.subplots()
    lats, lngs = zip(*(list(segment.boundary) + [segment.boundary[0]]))
    ax.plot(lngs, lats, color="black")
    if update.layout.buildable_region and segment.setback:
        lats, lngs = zip(*(list(update.layout.buildable_region) + [update.layout.buildable_region[0]]))
        ax.plot(lngs, lats, linestyle="--", color="orange")
    for fp in update.layout.footprints:
        lats, lngs = zip(*fp)
        ax.fill(lngs, lats, alpha=0.8, color="#3b82f6")
    for lbl in edge_labels(segment.boundary):
        ax.text(lbl.position[1], lbl.position[0], lbl.text, rotation=lbl.rotation_deg, ha="center", va="center", fontsize=7)

    ax.set_aspect("equal", "datalim")
    ax.set_title(f"{update.layout.count} modules, {update.layout.nameplate:.1f} kW")
    plt.show()


def main() -> None:
    parser = argparse.ArgumentParser(description="Pack a site outline with solar modules")
    parser.add_argument("geojson", type=str)
    parser.add_argument("--module-width", type=float, default=3.25)
    parser.add_argument("--module-length", type=float, default=6.5)
    parser.add_argument("--wattage", type=float, default=400.0)
    parser.add_argument("--no-module", action="store_true", help="Area-only recomputation")
    parser.add_argument("--racking", type=str, default="Fixed Tilt")
    parser.add_argument("--tilt", type=float, default=10.0)
    parser.add_argument("--orientation", type=str, default="Portrait")
    parser.add_argument("--row-spacing", type=float, default=2.0)
    parser.add_argument("--module-spacing", type=float, default=0.041)
    parser.add_argument("--setback", type=float, default=0.0)
    parser.add_argument("--azimuth", type=float, default=180.0)
    parser.add_argument("--frame-up", type=int, default=1)
    parser.add_argument("--frame-wide", type=int, default=1)
    parser.add_argument("--frame-spacing", type=float, default=0.0)
    parser.add_argument("--alignment", type=str, default="center")
    parser.add_argument("--config", type=str, default=None, help="JSON file of engine overrides")
    parser.add_argument("--out", type=str, default=None, help="Write the layout as GeoJSON")
    parser.add_argument("--plot", action="store_true")
    parser.add_argument("--log-level", type=str, default="WARNING")
    args = parser.parse_args()

    setup_logging(args.log_level, format_style="simple")
    config = load_config(args.config) if args.config else DEFAULT_CONFIG

    segment = Segment(
        boundary=load_boundary(args.geojson),
        racking_type=args.racking,
        module_tilt=args.tilt,
        orientation=args.orientation,
        row_spacing=args.row_spacing,
        module_spacing=args.module_spacing,
        setback=args.setback,
        azimuth=args.azimuth,
        frame_size_up=args.frame_up,
        frame_size_wide=args.frame_wide,
        frame_spacing=args.frame_spacing,
        alignment=args.alignment,
        id=Path(args.geojson).stem,
    )
    module = None if args.no_module else Module(args.module_width, args.module_length, args.wattage)

    update = recompute_segment(segment, module, config)
    metrics = layout_metrics(segment, module, update.layout, config)
    summary(segment, update, metrics)

    if args.out:
        export_geojson(segment, update.layout, args.out)
        print(f"Wrote {args.out}")
    if args.plot:
        visualize(segment, update)


if __name__ == "__main__":
    main()
