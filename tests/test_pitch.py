import math

import pytest

from solarlayout.config import LayoutConfig
from solarlayout.layout.pitch import (
    column_pitch,
    effective_tilt,
    grid_spec,
    module_dimensions,
    row_pitch,
    shading_clearance,
)
from solarlayout.models import Module, Orientation, RackingType, Segment


def test_module_dimensions(module):
    assert module_dimensions(module, Orientation.PORTRAIT) == (3.25, 6.5)
    assert module_dimensions(module, Orientation.LANDSCAPE) == (6.5, 3.25)
    assert module_dimensions(module, "landscape") == (6.5, 3.25)


@pytest.mark.parametrize(
    "racking, tilt, expected",
    [
        (RackingType.FLAT, 25.0, 0.0),
        (RackingType.FIXED_TILT, 25.0, 25.0),
        (RackingType.FIXED_TILT, -5.0, 0.0),
        (RackingType.FIXED_TILT, 120.0, 90.0),
        (RackingType.FIXED_TILT, float("nan"), 0.0),
        ("Fixed Tilt", None, 0.0),
    ],
)
def test_effective_tilt(racking, tilt, expected):
    assert effective_tilt(racking, tilt) == expected


def test_flat_row_pitch_is_depth_plus_spacing():
    assert row_pitch(6.5, 0.0, 2.0) == pytest.approx(8.5)
    assert shading_clearance(6.5, 0.0, 20.0) == 0.0


def test_fixed_tilt_row_pitch():
    t, e = math.radians(30.0), math.radians(20.0)
    expected = 6.5 * math.cos(t) + 6.5 * math.sin(t) / math.tan(e) + 2.0
    assert row_pitch(6.5, 30.0, 2.0, 20.0) == pytest.approx(expected)
    assert row_pitch(6.5, 30.0, 2.0, 20.0) == pytest.approx(16.5585, abs=1e-3)


def test_lower_sun_needs_wider_rows():
    assert row_pitch(6.5, 10.0, 2.0, 10.0) > row_pitch(6.5, 10.0, 2.0, 30.0)


def test_column_pitch():
    assert column_pitch(3.25, 0.5, 0.0) == pytest.approx(3.75)
    assert column_pitch(10.75, 0.5, 1.0) == pytest.approx(12.25)


def test_grid_spec_frames(square_100, module):
    seg = Segment(
        boundary=square_100,
        racking_type=RackingType.FLAT,
        module_spacing=0.5,
        row_spacing=3.0,
        frame_size_up=2,
        frame_size_wide=3,
        frame_spacing=1.0,
    )
    spec = grid_spec(seg, module)
    assert spec.modules_per_frame == 6
    assert spec.frame_width == pytest.approx(3 * 3.25 + 2 * 0.5)
    assert spec.frame_depth == pytest.approx(2 * 6.5 + 0.5)
    assert spec.column_pitch == pytest.approx(10.75 + 0.5 + 1.0)
    assert spec.row_pitch == pytest.approx(13.5 + 3.0)
    assert spec.module_step_across == pytest.approx(3.75)
    assert spec.module_step_plan == pytest.approx(7.0)
    assert spec.ground_coverage_ratio == pytest.approx(13.5 / 16.5)


def test_grid_spec_uses_configured_sun_elevation(square_100, module):
    seg = Segment(boundary=square_100, racking_type=RackingType.FIXED_TILT, module_tilt=20.0)
    low = grid_spec(seg, module, LayoutConfig(min_sun_elevation_deg=10.0))
    high = grid_spec(seg, module, LayoutConfig(min_sun_elevation_deg=40.0))
    assert low.row_pitch > high.row_pitch
    assert low.module_plan_depth == pytest.approx(6.5 * math.cos(math.radians(20.0)))


def test_grid_spec_clamps_bad_values(square_100, module, caplog):
    seg = Segment(
        boundary=square_100,
        racking_type=RackingType.FIXED_TILT,
        module_tilt=-10.0,
        row_spacing=-4.0,
        module_spacing=-1.0,
        frame_size_up=0,
        frame_size_wide=-2,
    )
    with caplog.at_level("WARNING", logger="solarlayout.layout.pitch"):
        spec = grid_spec(seg, module)
    assert spec.tilt_deg == 0.0
    assert spec.row_pitch == pytest.approx(6.5)
    assert spec.column_pitch == pytest.approx(3.25)
    assert spec.modules_per_frame == 1
    assert "clamped" in caplog.text


def test_scaled_converts_lengths_only(square_100, module):
    seg = Segment(boundary=square_100, frame_size_up=2)
    spec = grid_spec(seg, module)
    metres = spec.scaled(0.3048)
    assert metres.row_pitch == pytest.approx(spec.row_pitch * 0.3048)
    assert metres.frame_size_up == 2
    assert metres.tilt_deg == spec.tilt_deg
    assert metres.ground_coverage_ratio == pytest.approx(spec.ground_coverage_ratio)
