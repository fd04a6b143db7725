"""Engine tunables.

Defaults cover typical rooftop and small ground-mount sites. Overrides can be loaded from a
JSON file, e.g. ``{"min_sun_elevation_deg": 15, "max_workers": 4}``.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Union


@dataclass(frozen=True)
class LayoutConfig:
    # Sun elevation the FixedTilt row pitch must clear without self-shading.
    min_sun_elevation_deg: float = 20.0
    # Reflex-vertex miter joins longer than miter_limit * setback are squared off.
    miter_limit: float = 2.0
    # Lower bound on row/column pitch; bounds grid iteration.
    min_pitch_ft: float = 0.1
    # Distance of edge length labels from the edge midpoint.
    label_offset_ft: float = 3.0
    # Upper bound on candidate modules (grid cells x modules per frame) in one layout pass.
    max_grid_cells: int = 250_000
    # Batch packing workers; <= 1 packs inline.
    max_workers: int = 1

    def __post_init__(self) -> None:
        if not (0.0 < self.min_sun_elevation_deg <= 90.0):
            raise ValueError("min_sun_elevation_deg must be in (0, 90]")
        if not (math.isfinite(self.miter_limit) and self.miter_limit >= 1.0):
            raise ValueError("miter_limit must be >= 1")
        if not (math.isfinite(self.min_pitch_ft) and self.min_pitch_ft > 0.0):
            raise ValueError("min_pitch_ft must be positive")
        if self.label_offset_ft < 0.0:
            raise ValueError("label_offset_ft must be non-negative")
        if self.max_grid_cells < 1:
            raise ValueError("max_grid_cells must be positive")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LayoutConfig":
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
        kwargs = {}
        for key, value in data.items():
            kwargs[key] = int(value) if key in ("max_workers", "max_grid_cells") else float(value)
        return cls(**kwargs)


DEFAULT_CONFIG = LayoutConfig()


def load_config(path: Union[str, Path]) -> LayoutConfig:
    """Load a LayoutConfig from a JSON file of overrides.

    Raises:
        FileNotFoundError: if the file doesn't exist
        ValueError: on unknown keys or out-of-range values
    """

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a JSON object: {config_path}")
    return LayoutConfig.from_dict(data)
