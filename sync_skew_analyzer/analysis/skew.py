"""Detected-tone selection and phase-skew estimation.

Two bin-selection policies are kept as separate, named strategies because they
answer different questions:

``threshold``
    First bin (increasing frequency) whose magnitude reaches the threshold on
    *both* channels.  Silently skips the block when nothing qualifies.

``max_magnitude``
    Joint maximum over both channels.  Always picks something, which may be a
    noise bin when no tone is present.

Once a bin is chosen the skew is the normalized difference of the two channel
phases at that bin, converted to seconds with the bin frequency.  A zero bin
frequency, or any non-finite result, yields "no detection" (``None``) instead
of a measurement.
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

from sync_skew_analyzer.analysis.phase import normalize_phase_difference
from sync_skew_analyzer.models.profile import BIN_POLICIES
from sync_skew_analyzer.models.results import ChannelSpectralSummary, SkewResult


def select_bin_threshold(
    magnitude_a: np.ndarray,
    magnitude_b: np.ndarray,
    *,
    threshold: float,
    include_dc: bool = False,
) -> Optional[int]:
    """Index of the first bin with ``magnitude >= threshold`` on both channels, or None.

    A bin with zero magnitude on either channel never qualifies, whatever the
    threshold, so a silent block cannot pass as a zero-skew measurement.
    """
    a = np.asarray(magnitude_a, dtype=np.float64)
    b = np.asarray(magnitude_b, dtype=np.float64)
    if a.shape != b.shape or a.ndim != 1:
        raise ValueError(f"magnitude arrays must be 1D with equal shape, got {a.shape} and {b.shape}")

    ok = (a >= threshold) & (b >= threshold) & (a > 0.0) & (b > 0.0)
    if not include_dc and ok.size:
        ok[0] = False
    hits = np.flatnonzero(ok)
    if hits.size == 0:
        return None
    return int(hits[0])


def select_bin_max_magnitude(
    magnitude_a: np.ndarray,
    magnitude_b: np.ndarray,
    *,
    include_dc: bool = False,
) -> int:
    """Index of the joint maximum-magnitude bin.

    Bins are scanned in increasing order starting from a best of (index 0,
    magnitude 0).  A bin replaces the best only if its channel-A magnitude is
    strictly greater than the recorded best magnitude *and* its channel-B
    magnitude is not less than that recorded best.  When no bin qualifies the
    result is 0, which the caller reports as no detection.
    """
    a = np.asarray(magnitude_a, dtype=np.float64)
    b = np.asarray(magnitude_b, dtype=np.float64)
    if a.shape != b.shape or a.ndim != 1:
        raise ValueError(f"magnitude arrays must be 1D with equal shape, got {a.shape} and {b.shape}")

    best_idx = 0
    best_mag = 0.0
    start = 0 if include_dc else 1
    for i in range(start, a.size):
        if a[i] > best_mag and b[i] >= best_mag:
            best_mag = float(a[i])
            best_idx = i
    return best_idx


def skew_at_bin(
    summary_a: ChannelSpectralSummary,
    summary_b: ChannelSpectralSummary,
    bin_index: int,
) -> Optional[SkewResult]:
    """Phase skew of channel A relative to channel B at one bin.

    Returns None when the bin frequency is 0 or the result is not finite.
    """
    i = int(bin_index)
    freq = float(summary_a.frequency_hz[i])
    if freq == 0.0 or not math.isfinite(freq):
        return None

    raw_diff = float(summary_a.phase_deg[i]) - float(summary_b.phase_deg[i])
    skew_deg = normalize_phase_difference(raw_diff)
    skew_s = (skew_deg / 360.0) * (1.0 / freq)
    if not (math.isfinite(skew_deg) and math.isfinite(skew_s)):
        return None

    return SkewResult(
        detected_frequency_hz=freq,
        phase_skew_deg=skew_deg,
        phase_skew_s=skew_s,
        bin_index=i,
    )


class PhaseSkewEstimator:
    """Select the detected-signal bin and measure the skew there.

    Parameters
    ----------
    policy:
        ``"threshold"`` or ``"max_magnitude"``.
    magnitude_threshold:
        Minimum magnitude on both channels (threshold policy only).
    include_dc:
        Allow bin 0 as a candidate. Even then a DC pick is reported as no detection.
    """

    def __init__(
        self,
        policy: str = "threshold",
        *,
        magnitude_threshold: float = 5.0,
        include_dc: bool = False,
    ) -> None:
        if policy not in BIN_POLICIES:
            raise ValueError(f"Unknown bin policy: {policy!r} (expected one of {BIN_POLICIES})")
        self.policy = policy
        if not (float(magnitude_threshold) > 0.0):
            raise ValueError(f"magnitude_threshold must be > 0, got {magnitude_threshold}")
        self.magnitude_threshold = float(magnitude_threshold)
        self.include_dc = bool(include_dc)

    def select_bin(self, summary_a: ChannelSpectralSummary, summary_b: ChannelSpectralSummary) -> Optional[int]:
        if summary_a.n_bins != summary_b.n_bins:
            raise ValueError(
                f"Channel spectra differ in length: A has {summary_a.n_bins} bins, B has {summary_b.n_bins}"
            )
        if self.policy == "threshold":
            return select_bin_threshold(
                summary_a.magnitude,
                summary_b.magnitude,
                threshold=self.magnitude_threshold,
                include_dc=self.include_dc,
            )
        return select_bin_max_magnitude(
            summary_a.magnitude,
            summary_b.magnitude,
            include_dc=self.include_dc,
        )

    def estimate(
        self,
        summary_a: ChannelSpectralSummary,
        summary_b: ChannelSpectralSummary,
    ) -> Optional[SkewResult]:
        """Return the skew at the selected bin, or None for no detection."""
        idx = self.select_bin(summary_a, summary_b)
        if idx is None:
            return None
        return skew_at_bin(summary_a, summary_b, idx)
