from __future__ import annotations

from typing import Tuple

import numpy as np


class StructuralBlockError(ValueError):
    """A delivered buffer does not have the shape the run was configured for."""


def deinterleave(buffer: np.ndarray, n_samples: int) -> Tuple[np.ndarray, np.ndarray]:
    """Split an A,B,A,B,... buffer of exactly ``2 * n_samples`` values into two channels.

    Channel A receives the even-indexed samples and channel B the odd-indexed
    ones, each in acquisition order.  Any other buffer length is rejected; the
    buffer is never truncated or padded.
    """
    x = np.asarray(buffer, dtype=np.float64)
    n = int(n_samples)
    if x.ndim != 1:
        raise StructuralBlockError(f"Interleaved buffer must be 1D, got shape {x.shape}")
    if n <= 0 or x.size != 2 * n:
        raise StructuralBlockError(
            f"Interleaved buffer has {x.size} samples, expected exactly 2*{n} = {2 * n}"
        )
    pairs = x.reshape((n, 2))
    return pairs[:, 0].copy(), pairs[:, 1].copy()


class DualChannelDemultiplexer:
    """Channel-expansion demultiplexer for a fixed per-channel block length."""

    def __init__(self, n_samples: int) -> None:
        n = int(n_samples)
        if n <= 0:
            raise ValueError(f"n_samples must be > 0, got {n_samples}")
        self.n_samples = n

    def split(self, buffer: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        return deinterleave(buffer, self.n_samples)
