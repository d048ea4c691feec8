from __future__ import annotations

import numpy as np

from sync_skew_analyzer.models.results import ChannelSpectralSummary


def bin_frequencies(n_samples: int, sample_rate_hz: float) -> np.ndarray:
    """Frequencies ``i * R / N`` of the ``N/2 + 1`` one-sided bins."""
    n = int(n_samples)
    return np.arange(n // 2 + 1, dtype=np.float64) * (float(sample_rate_hz) / float(n))


def magnitude_spectrum(
    spectrum: np.ndarray,
    *,
    n_samples: int,
    sample_rate_hz: float,
) -> ChannelSpectralSummary:
    """Derive frequency, magnitude, amplitude and phase per bin.

    Parameters
    ----------
    spectrum:
        Complex one-sided transform of length ``N/2 + 1``.
    n_samples:
        Block length N used for the transform (needed for the ``2/N`` amplitude
        scaling and the bin spacing).
    sample_rate_hz:
        Sample rate R.

    Returns
    -------
    ChannelSpectralSummary
        ``magnitude = sqrt(re^2 + im^2)``, ``amplitude = magnitude * 2 / N``,
        ``phase_deg = atan2(im, re) * 180 / pi``.
    """
    X = np.asarray(spectrum)
    n = int(n_samples)
    if X.ndim != 1:
        raise ValueError(f"spectrum must be 1D, got shape {X.shape}")
    if X.size != n // 2 + 1:
        raise ValueError(f"spectrum length {X.size} does not match N/2+1 = {n // 2 + 1}")

    re = np.real(X).astype(np.float64, copy=False)
    im = np.imag(X).astype(np.float64, copy=False)

    magnitude = np.sqrt(re * re + im * im)
    amplitude = magnitude * 2.0 / float(n)
    phase_deg = np.degrees(np.arctan2(im, re))

    return ChannelSpectralSummary(
        frequency_hz=bin_frequencies(n, sample_rate_hz),
        magnitude=magnitude,
        amplitude=amplitude,
        phase_deg=phase_deg,
    )
