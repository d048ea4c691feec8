from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass(frozen=True)
class ChannelSpectralSummary:
    """Per-bin spectral quantities derived from one channel's transform.

    Attributes
    ----------
    frequency_hz:
        Bin frequencies ``i * R / N`` for ``i = 0..N/2``.
    magnitude:
        ``|X[i]|`` (unnormalized transform magnitude).
    amplitude:
        Single-sided amplitude ``magnitude * 2 / N`` in volts.
    phase_deg:
        ``atan2(imag, real)`` in degrees, in ``(-180, 180]``.
    """

    frequency_hz: np.ndarray
    magnitude: np.ndarray
    amplitude: np.ndarray
    phase_deg: np.ndarray

    @property
    def n_bins(self) -> int:
        return int(self.frequency_hz.size)


@dataclass(frozen=True)
class SkewResult:
    """Phase skew between the two channels at the detected common frequency.

    Only constructed for a valid detection: ``detected_frequency_hz`` is never 0
    and both skew values are finite.
    """

    detected_frequency_hz: float
    phase_skew_deg: float
    phase_skew_s: float
    bin_index: int


@dataclass
class AcquisitionCounters:
    """Running sample totals kept across blocks for display only.

    Written exclusively by the pipeline that owns it; values only increase.
    """

    channel_a_total: int = 0
    channel_b_total: int = 0
    blocks_processed: int = 0

    def add_block(self, n_a: int, n_b: int) -> None:
        if n_a > 0:
            self.channel_a_total += int(n_a)
        if n_b > 0:
            self.channel_b_total += int(n_b)
        self.blocks_processed += 1

    def snapshot(self) -> "AcquisitionCounters":
        return AcquisitionCounters(self.channel_a_total, self.channel_b_total, self.blocks_processed)


@dataclass(frozen=True)
class BlockOutcome:
    """Everything one pipeline invocation produced.

    ``skew is None`` means "no detection" for this block.
    """

    block_index: int
    summary_a: ChannelSpectralSummary
    summary_b: ChannelSpectralSummary
    skew: Optional[SkewResult]
    counters: AcquisitionCounters

    @property
    def detected(self) -> bool:
        return self.skew is not None
