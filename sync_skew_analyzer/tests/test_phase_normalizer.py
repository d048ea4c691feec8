"""Tests for the two-step phase-difference wrap rule."""

from __future__ import annotations

import numpy as np
import pytest

from sync_skew_analyzer.analysis.phase import (
    normalize_phase_difference,
    normalize_phase_difference_array,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (300.0, -60.0),
        (-100.0, 260.0),  # single pass: 260 is not wrapped again by step 1
        (-90.0, -90.0),  # step 2 is strict
        (270.0, 270.0),  # step 1 is strict
        (270.5, -89.5),
        (30.0, 30.0),
        (0.0, 0.0),
        (-359.0, 1.0),
        (359.0, -1.0),
        (-180.0, 180.0),
        (180.0, 180.0),
    ],
)
def test_boundary_and_reference_values(raw: float, expected: float) -> None:
    assert normalize_phase_difference(raw) == pytest.approx(expected, abs=1e-12)


def test_idempotent_over_open_interval() -> None:
    for x in np.linspace(-359.999, 359.999, 7201):
        once = normalize_phase_difference(float(x))
        assert normalize_phase_difference(once) == once


def test_output_range_for_atan2_differences() -> None:
    grid = np.linspace(-179.999, 180.0, 181)
    for pa in grid:
        for pb in grid[::7]:
            out = normalize_phase_difference(float(pa - pb))
            assert -90.0 <= out <= 270.0
            # Same angle modulo 360
            d = out - float(pa - pb)
            assert min(abs(d), abs(d - 360.0), abs(d + 360.0)) < 1e-9


def test_array_variant_matches_scalar_rule() -> None:
    x = np.array([300.0, -100.0, -90.0, 270.0, 270.5, 30.0, -359.0, 359.0])
    out = normalize_phase_difference_array(x)
    expected = np.array([normalize_phase_difference(v) for v in x])
    assert np.array_equal(out, expected)
    # Input untouched
    assert x[0] == 300.0
