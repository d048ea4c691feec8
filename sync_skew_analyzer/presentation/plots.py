"""Static spectrum figures for a processed block.

The figure shows both channels' single-sided amplitude spectra on a shared
frequency axis, with the detected bin marked and the measured skew in the
title.  Rendering uses the non-interactive Agg backend so it works on headless
acquisition hosts.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import numpy as np

from sync_skew_analyzer.models.results import BlockOutcome


def _get_pyplot():
    """Import pyplot lazily with a headless backend."""
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt  # late import by design
    return plt


def plot_block_spectrum(
    outcome: BlockOutcome,
    *,
    path: Optional[str | Path] = None,
    max_frequency_hz: Optional[float] = None,
    log_scale: bool = False,
):
    """Plot the amplitude spectra of one block.

    Parameters
    ----------
    outcome:
        Result of one pipeline invocation.
    path:
        If given, the figure is saved there (format from the suffix) and closed.
    max_frequency_hz:
        Optional upper limit of the frequency axis.
    log_scale:
        Use a logarithmic amplitude axis.

    Returns
    -------
    matplotlib.figure.Figure
    """
    plt = _get_pyplot()

    sa = outcome.summary_a
    sb = outcome.summary_b
    fig = plt.figure(figsize=(10.0, 4.8))
    ax = fig.add_subplot(1, 1, 1)

    ax.plot(sa.frequency_hz, sa.amplitude, label="DSA")
    ax.plot(sb.frequency_hz, sb.amplitude, label="MIO", linestyle="--")
    ax.set_xlabel("Frequency (Hz)")
    ax.set_ylabel("Amplitude (V)")
    ax.grid(True)

    if log_scale:
        amps = np.r_[sa.amplitude, sb.amplitude]
        positive = amps[amps > 0]
        ax.set_yscale("log")
        if positive.size:
            ax.set_ylim(bottom=float(positive.min()))

    if max_frequency_hz is not None:
        ax.set_xlim(0.0, float(max_frequency_hz))

    s = outcome.skew
    if s is None:
        ax.set_title(f"Block {outcome.block_index}: no detection")
    else:
        ax.axvline(s.detected_frequency_hz, color="red", linestyle="dotted", linewidth=0.8)
        ax.set_title(
            f"Block {outcome.block_index}: f = {s.detected_frequency_hz:.2f} Hz, "
            f"skew = {s.phase_skew_deg:.2f} deg ({s.phase_skew_s:.2e} s)"
        )
    ax.legend(loc="best")

    if path is not None:
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(out)
        plt.close(fig)
    return fig
