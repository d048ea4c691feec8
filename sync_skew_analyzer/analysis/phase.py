from __future__ import annotations

import numpy as np


def normalize_phase_difference(phase: float) -> float:
    """Wrap a phase difference (degrees) with the fixed two-step rule.

    Applied once, in order:

    1. ``phase > 270``  -> ``phase - 360``
    2. ``phase < -90``  -> ``phase + 360``

    For differences of two ``atan2`` angles the result lies in ``[-90, 270]``;
    values already in that range are returned unchanged.
    """
    phase = float(phase)
    if phase > 270.0:
        phase = phase - 360.0
    if phase < -90.0:
        phase = phase + 360.0
    return phase


def normalize_phase_difference_array(phase: np.ndarray) -> np.ndarray:
    """Element-wise :func:`normalize_phase_difference`."""
    out = np.array(phase, dtype=np.float64, copy=True)
    out[out > 270.0] -= 360.0
    out[out < -90.0] += 360.0
    return out
