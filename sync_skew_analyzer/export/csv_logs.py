"""Delimited-text log streams for voltage and spectrum data.

Two append-only CSV streams are written per run:

- voltage stream: ``Time (s),DSA Data (V),MIO Data (V)``, one row per sample
- spectral stream: ``Frequency (Hz),DSA Magnitude,DSA Amplitude (V),MIO Magnitude,MIO Amplitude (V)``,
  one row per frequency bin

Each block starts with its own header line, so every block in the file is
self-describing and a replay reader can split the stream back into blocks.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Protocol

import numpy as np
import pandas as pd

from sync_skew_analyzer.models.results import ChannelSpectralSummary

logger = logging.getLogger(__name__)

VOLTAGE_COLUMNS = ("Time (s)", "DSA Data (V)", "MIO Data (V)")
SPECTRUM_COLUMNS = (
    "Frequency (Hz)",
    "DSA Magnitude",
    "DSA Amplitude (V)",
    "MIO Magnitude",
    "MIO Amplitude (V)",
)
FREQUENCY_PRECISION = 2


class BlockSink(Protocol):
    """Anything that accepts one block's worth of formatted rows."""

    def write_block(
        self,
        *,
        time_s: np.ndarray,
        samples_a: np.ndarray,
        samples_b: np.ndarray,
        summary_a: ChannelSpectralSummary,
        summary_b: ChannelSpectralSummary,
    ) -> None:
        ...


def _fmt(values: np.ndarray, precision: int) -> list[str]:
    p = int(precision)
    return [f"{float(v):.{p}f}" for v in np.asarray(values, dtype=np.float64)]


def time_decimals(time_s: np.ndarray, precision: int) -> int:
    """Decimals for the time column: at least ``precision``, more if the sample step needs it.

    With ``d >= log10(R)`` decimals consecutive sample times ``i / R`` never
    round to the same text, even above 1 MS/s.
    """
    t = np.asarray(time_s, dtype=np.float64)
    if t.size < 2:
        return int(precision)
    step = float(t[1] - t[0])
    if not (math.isfinite(step) and step > 0):
        return int(precision)
    return max(int(precision), int(math.ceil(-math.log10(step) - 1e-9)))


def _file_size(path: Path) -> int:
    return path.stat().st_size if path.is_file() else 0


def _truncate(path: Path, size: int) -> None:
    if path.is_file():
        with path.open("r+b") as f:
            f.truncate(size)


def voltage_table(
    time_s: np.ndarray,
    samples_a: np.ndarray,
    samples_b: np.ndarray,
    *,
    precision: int,
) -> pd.DataFrame:
    """Voltage rows with the samples formatted to ``precision`` decimals.

    The time column uses :func:`time_decimals`, so it keeps ``precision``
    unless the sample step is finer than that.
    """
    if not (len(time_s) == len(samples_a) == len(samples_b)):
        raise ValueError(
            f"voltage columns differ in length: t={len(time_s)}, a={len(samples_a)}, b={len(samples_b)}"
        )
    return pd.DataFrame(
        {
            VOLTAGE_COLUMNS[0]: _fmt(time_s, time_decimals(time_s, precision)),
            VOLTAGE_COLUMNS[1]: _fmt(samples_a, precision),
            VOLTAGE_COLUMNS[2]: _fmt(samples_b, precision),
        }
    )


def spectrum_table(
    summary_a: ChannelSpectralSummary,
    summary_b: ChannelSpectralSummary,
    *,
    precision: int,
) -> pd.DataFrame:
    """Spectrum rows; frequency always with two decimals, the rest with ``precision``."""
    if summary_a.n_bins != summary_b.n_bins:
        raise ValueError(f"spectra differ in length: {summary_a.n_bins} vs {summary_b.n_bins}")
    return pd.DataFrame(
        {
            SPECTRUM_COLUMNS[0]: _fmt(summary_a.frequency_hz, FREQUENCY_PRECISION),
            SPECTRUM_COLUMNS[1]: _fmt(summary_a.magnitude, precision),
            SPECTRUM_COLUMNS[2]: _fmt(summary_a.amplitude, precision),
            SPECTRUM_COLUMNS[3]: _fmt(summary_b.magnitude, precision),
            SPECTRUM_COLUMNS[4]: _fmt(summary_b.amplitude, precision),
        }
    )


class CsvLogSink:
    """Append both CSV streams for every processed block.

    ``reset()`` creates (or truncates) both files; afterwards they are only
    appended to, in block-arrival order.  Both tables are rendered to text
    before either file is touched, so a formatting failure writes nothing, and
    a failed append truncates both files back to their pre-block length.
    """

    def __init__(
        self,
        voltage_path: str | Path,
        spectrum_path: str | Path,
        *,
        voltage_precision: int = 6,
        spectrum_precision: int = 4,
    ) -> None:
        self.voltage_path = Path(voltage_path)
        self.spectrum_path = Path(spectrum_path)
        self.voltage_precision = int(voltage_precision)
        self.spectrum_precision = int(spectrum_precision)
        self.blocks_written = 0

    def reset(self) -> None:
        for p in (self.voltage_path, self.spectrum_path):
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text("", encoding="utf-8")
        self.blocks_written = 0
        logger.info("Log streams reset: %s, %s", self.voltage_path, self.spectrum_path)

    def write_block(
        self,
        *,
        time_s: np.ndarray,
        samples_a: np.ndarray,
        samples_b: np.ndarray,
        summary_a: ChannelSpectralSummary,
        summary_b: ChannelSpectralSummary,
    ) -> None:
        df_v = voltage_table(time_s, samples_a, samples_b, precision=self.voltage_precision)
        df_s = spectrum_table(summary_a, summary_b, precision=self.spectrum_precision)
        text_v = df_v.to_csv(None, header=True, index=False, lineterminator="\n")
        text_s = df_s.to_csv(None, header=True, index=False, lineterminator="\n")

        size_s = _file_size(self.spectrum_path)
        size_v = _file_size(self.voltage_path)
        try:
            with self.spectrum_path.open("a", encoding="utf-8", newline="") as f:
                f.write(text_s)
            with self.voltage_path.open("a", encoding="utf-8", newline="") as f:
                f.write(text_v)
        except OSError:
            # Both streams go back to their pre-block length.
            _truncate(self.spectrum_path, size_s)
            _truncate(self.voltage_path, size_v)
            logger.error("Block not logged; %s and %s rolled back", self.spectrum_path, self.voltage_path)
            raise
        self.blocks_written += 1


class NullSink:
    """Sink that discards everything (used when file logging is disabled)."""

    def write_block(self, **_: object) -> None:
        return None
