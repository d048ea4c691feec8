"""Tests for bin selection and phase-skew estimation."""

from __future__ import annotations

import math

import numpy as np
import pytest

from sync_skew_analyzer.analysis.fourier import rfft_block
from sync_skew_analyzer.analysis.skew import (
    PhaseSkewEstimator,
    select_bin_max_magnitude,
    select_bin_threshold,
    skew_at_bin,
)
from sync_skew_analyzer.analysis.spectrum import magnitude_spectrum
from sync_skew_analyzer.models.results import ChannelSpectralSummary

N = 1000
R = 10000.0


def _summaries(a: np.ndarray, b: np.ndarray, n: int = N, rate: float = R):
    sa = magnitude_spectrum(rfft_block(a), n_samples=n, sample_rate_hz=rate)
    sb = magnitude_spectrum(rfft_block(b), n_samples=n, sample_rate_hz=rate)
    return sa, sb


def _tone_pair(freq_hz: float, skew_deg: float, amplitude: float = 1.0):
    t = np.arange(N) / R
    w = 2.0 * np.pi * freq_hz
    a = amplitude * np.sin(w * t)
    b = amplitude * np.sin(w * t - np.radians(skew_deg))
    return a, b


def _fake_summary(magnitude, phase_deg=None, bin_width: float = 10.0) -> ChannelSpectralSummary:
    m = np.asarray(magnitude, dtype=float)
    p = np.zeros_like(m) if phase_deg is None else np.asarray(phase_deg, dtype=float)
    return ChannelSpectralSummary(
        frequency_hz=np.arange(m.size) * bin_width,
        magnitude=m,
        amplitude=m * 2.0 / (2 * (m.size - 1)),
        phase_deg=p,
    )


# -----------------------------------------------------------------------
# Threshold policy
# -----------------------------------------------------------------------


def test_threshold_selects_first_bin_on_both_channels() -> None:
    a = np.array([0.0, 6.0, 2.0, 9.0, 9.0])
    b = np.array([0.0, 1.0, 7.0, 5.0, 9.0])
    assert select_bin_threshold(a, b, threshold=5.0) == 3


def test_threshold_is_inclusive() -> None:
    a = np.array([0.0, 5.0])
    b = np.array([0.0, 5.0])
    assert select_bin_threshold(a, b, threshold=5.0) == 1


def test_threshold_no_qualifying_bin() -> None:
    a = np.array([0.0, 4.9, 1.0])
    b = np.array([0.0, 10.0, 1.0])
    assert select_bin_threshold(a, b, threshold=5.0) is None


def test_threshold_dc_excluded_unless_requested() -> None:
    a = np.array([50.0, 1.0, 8.0])
    b = np.array([50.0, 1.0, 8.0])
    assert select_bin_threshold(a, b, threshold=5.0) == 2
    assert select_bin_threshold(a, b, threshold=5.0, include_dc=True) == 0


def test_threshold_all_zero_input_is_no_detection() -> None:
    sa, sb = _summaries(np.zeros(N), np.zeros(N))
    est = PhaseSkewEstimator("threshold", magnitude_threshold=5.0)
    assert est.estimate(sa, sb) is None


# -----------------------------------------------------------------------
# Max-magnitude policy
# -----------------------------------------------------------------------


def test_max_magnitude_joint_rule() -> None:
    a = np.array([0.0, 3.0, 5.0, 4.0, 10.0])
    b = np.array([0.0, 3.0, 1.0, 9.0, 12.0])
    assert select_bin_max_magnitude(a, b) == 4


def test_max_magnitude_requires_other_channel_not_below_best() -> None:
    # Bin 2 is larger on A but B drops below the recorded best (3.0).
    a = np.array([0.0, 3.0, 5.0])
    b = np.array([0.0, 3.0, 1.0])
    assert select_bin_max_magnitude(a, b) == 1


def test_max_magnitude_strictly_greater_keeps_earlier_tie() -> None:
    a = np.array([0.0, 7.0, 7.0])
    b = np.array([0.0, 7.0, 7.0])
    assert select_bin_max_magnitude(a, b) == 1


def test_max_magnitude_dc_handling() -> None:
    a = np.array([10.0, 1.0, 0.0])
    b = np.array([10.0, 1.0, 0.0])
    assert select_bin_max_magnitude(a, b) == 1
    assert select_bin_max_magnitude(a, b, include_dc=True) == 0


def test_max_magnitude_all_zero_is_no_detection() -> None:
    sa, sb = _summaries(np.zeros(N), np.zeros(N))
    est = PhaseSkewEstimator("max_magnitude")
    assert est.estimate(sa, sb) is None


def test_dc_pick_is_reported_as_no_detection() -> None:
    sa, sb = _summaries(np.full(N, 2.0), np.full(N, 2.0))
    est = PhaseSkewEstimator("max_magnitude", include_dc=True)
    assert est.select_bin(sa, sb) == 0
    assert est.estimate(sa, sb) is None


# -----------------------------------------------------------------------
# Skew computation
# -----------------------------------------------------------------------


def test_skew_at_bin_uses_normalized_difference() -> None:
    sa = _fake_summary([0.0, 10.0], phase_deg=[0.0, 150.0])
    sb = _fake_summary([0.0, 10.0], phase_deg=[0.0, -170.0])
    res = skew_at_bin(sa, sb, 1)
    assert res is not None
    # raw 320 -> 320 - 360 = -40
    assert res.phase_skew_deg == pytest.approx(-40.0)
    assert res.detected_frequency_hz == pytest.approx(10.0)
    assert res.phase_skew_s == pytest.approx(-40.0 / 360.0 / 10.0)
    assert res.bin_index == 1


def test_skew_at_zero_frequency_bin_is_none() -> None:
    sa = _fake_summary([10.0, 1.0], phase_deg=[0.0, 0.0])
    sb = _fake_summary([10.0, 1.0], phase_deg=[0.0, 0.0])
    assert skew_at_bin(sa, sb, 0) is None


def test_zero_skew_is_a_real_measurement() -> None:
    a, b = _tone_pair(500.0, 0.0)
    sa, sb = _summaries(a, b)
    res = PhaseSkewEstimator("threshold").estimate(sa, sb)
    assert res is not None
    assert res.phase_skew_deg == pytest.approx(0.0, abs=1e-6)
    assert res.phase_skew_s == pytest.approx(0.0, abs=1e-12)


@pytest.mark.parametrize("policy", ["threshold", "max_magnitude"])
@pytest.mark.parametrize("theta", [-170.0, -120.0, -60.0, -1.0, 0.0, 12.5, 45.0, 90.0, 135.0, 179.0, 180.0])
def test_round_trip_recovers_skew(policy: str, theta: float) -> None:
    a, b = _tone_pair(500.0, theta, amplitude=1.5)
    sa, sb = _summaries(a, b)
    res = PhaseSkewEstimator(policy).estimate(sa, sb)
    assert res is not None
    assert abs(res.detected_frequency_hz - 500.0) <= R / N

    d = res.phase_skew_deg - theta
    assert min(abs(d), abs(d - 360.0), abs(d + 360.0)) < 1e-3
    if -90.0 < theta <= 180.0:
        assert res.phase_skew_deg == pytest.approx(theta, abs=1e-3)
    assert math.isfinite(res.phase_skew_s)
    assert res.phase_skew_s == pytest.approx(res.phase_skew_deg / 360.0 / res.detected_frequency_hz)


def test_end_to_end_reference_scenario() -> None:
    a, b = _tone_pair(500.0, 30.0)
    sa, sb = _summaries(a, b)
    for policy in ("threshold", "max_magnitude"):
        res = PhaseSkewEstimator(policy, magnitude_threshold=5.0).estimate(sa, sb)
        assert res is not None
        assert res.detected_frequency_hz == pytest.approx(500.0, abs=10.0)
        assert res.phase_skew_deg == pytest.approx(30.0, abs=1.0)
        assert res.phase_skew_s == pytest.approx(30.0 / 360.0 / 500.0, rel=0.05)


def test_unknown_policy_rejected() -> None:
    with pytest.raises(ValueError):
        PhaseSkewEstimator("loudest")


def test_spectra_of_different_length_rejected() -> None:
    est = PhaseSkewEstimator("max_magnitude")
    with pytest.raises(ValueError):
        est.select_bin(_fake_summary([0.0, 1.0, 2.0]), _fake_summary([0.0, 1.0]))


def test_zero_magnitude_bins_never_qualify() -> None:
    a = np.zeros(5)
    b = np.zeros(5)
    assert select_bin_threshold(a, b, threshold=0.0) is None
    assert select_bin_threshold(np.array([0.0, 0.0, 1e-12]), np.array([0.0, 0.0, 1e-12]), threshold=0.0) == 2


@pytest.mark.parametrize("threshold", [0.0, -1.0])
def test_non_positive_threshold_rejected(threshold: float) -> None:
    with pytest.raises(ValueError):
        PhaseSkewEstimator("threshold", magnitude_threshold=threshold)
