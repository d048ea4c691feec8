from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass(frozen=True)
class SampleBlock:
    """
    One fixed-length block of samples for a single channel.

    Notes
    - samples are always a 1D float64 array; the array is made read-only on
      construction, so the transform stage cannot alter what the logger sees.
    - sample_rate_hz is the per-channel rate agreed at configuration time.
    """
    samples: np.ndarray
    sample_rate_hz: float

    def __post_init__(self) -> None:
        x = np.array(self.samples, dtype=np.float64, copy=True)
        if x.ndim != 1:
            raise ValueError(f"SampleBlock samples must be 1D, got shape {x.shape}")
        if not (np.isfinite(self.sample_rate_hz) and self.sample_rate_hz > 0):
            raise ValueError(f"sample_rate_hz must be finite and > 0, got {self.sample_rate_hz}")
        x.setflags(write=False)
        object.__setattr__(self, "samples", x)
        object.__setattr__(self, "sample_rate_hz", float(self.sample_rate_hz))

    @property
    def n_samples(self) -> int:
        return int(self.samples.size)

    @property
    def time_s(self) -> np.ndarray:
        """Sample times relative to the start of the block: ``i / R``."""
        return np.arange(self.n_samples, dtype=np.float64) * (1.0 / self.sample_rate_hz)


@dataclass(frozen=True)
class BlockDelivery:
    """
    What the acquisition layer hands over for one block.

    Either two per-channel buffers (reference-clock and sample-clock schemes)
    or one interleaved A,B,A,B,... buffer (channel-expansion scheme).
    """
    channel_a: Optional[np.ndarray] = None
    channel_b: Optional[np.ndarray] = None
    interleaved: Optional[np.ndarray] = None

    @classmethod
    def pair(cls, channel_a: np.ndarray, channel_b: np.ndarray) -> "BlockDelivery":
        return cls(channel_a=np.asarray(channel_a), channel_b=np.asarray(channel_b))

    @classmethod
    def from_interleaved(cls, buffer: np.ndarray) -> "BlockDelivery":
        return cls(interleaved=np.asarray(buffer))

    @property
    def is_interleaved(self) -> bool:
        return self.interleaved is not None


def check_block_pair(block_a: SampleBlock, block_b: SampleBlock) -> int:
    """Return the shared block length, or raise if the two blocks disagree on N or R."""
    if block_a.n_samples != block_b.n_samples:
        raise ValueError(
            f"Channel blocks differ in length: A has {block_a.n_samples}, B has {block_b.n_samples}"
        )
    if block_a.sample_rate_hz != block_b.sample_rate_hz:
        raise ValueError(
            f"Channel blocks differ in sample rate: A={block_a.sample_rate_hz} Hz, B={block_b.sample_rate_hz} Hz"
        )
    return block_a.n_samples
