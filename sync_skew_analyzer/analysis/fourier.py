"""Real-input DFT of fixed-size sample blocks.

Provides a one-sided discrete Fourier transform with no windowing and no
normalisation: the caller supplies raw samples and receives the ``N/2 + 1``
non-negative frequency bins.

Classes
-------
SpectralTransform
    Transform of a fixed block size N with an input buffer allocated once and
    reused for every block.

Functions
---------
rfft_block
    Stateless convenience wrapper for one-off transforms.
"""

from __future__ import annotations

import numpy as np

from sync_skew_analyzer.models.blocks import SampleBlock


def _check_block_size(n_samples: int) -> int:
    n = int(n_samples)
    if n < 2 or n % 2 != 0:
        raise ValueError(f"Block size N must be even and >= 2, got {n_samples}")
    return n


class SpectralTransform:
    """One-sided DFT for blocks of exactly ``n_samples`` real values.

    The transform keeps one float64 input buffer sized for N. Every call
    overwrites the whole buffer before transforming, so the result depends only
    on the block passed in. The returned spectrum is a fresh array owned by the
    caller.
    """

    def __init__(self, n_samples: int) -> None:
        self.n_samples = _check_block_size(n_samples)
        self.n_bins = self.n_samples // 2 + 1
        self._input = np.zeros(self.n_samples, dtype=np.float64)

    def transform(self, block: SampleBlock | np.ndarray) -> np.ndarray:
        r"""Compute the one-sided DFT of one block.

        Parameters
        ----------
        block:
            A :class:`SampleBlock` or a 1D real array of length N.

        Returns
        -------
        np.ndarray
            Complex array of length ``N/2 + 1``; bin ``i`` corresponds to
            frequency ``i * R / N``.

        Notes
        -----
        No window is applied. ``X[0]`` is real in exact arithmetic; floating-point
        residue in its imaginary part is left as computed.
        """
        x = block.samples if isinstance(block, SampleBlock) else np.asarray(block)
        if x.ndim != 1 or x.size != self.n_samples:
            raise ValueError(
                f"Expected a 1D block of {self.n_samples} samples, got shape {x.shape}"
            )
        np.copyto(self._input, x, casting="same_kind")
        spectrum = np.fft.rfft(self._input)
        if spectrum.size != self.n_bins:
            raise RuntimeError(f"Transform returned {spectrum.size} bins, expected {self.n_bins}")
        return spectrum

    __call__ = transform


def rfft_block(samples: np.ndarray) -> np.ndarray:
    """One-off one-sided DFT of a real 1D block of even length."""
    x = np.asarray(samples, dtype=np.float64)
    if x.ndim != 1:
        raise ValueError(f"samples must be 1D, got shape {x.shape}")
    _check_block_size(x.size)
    return np.fft.rfft(x)
