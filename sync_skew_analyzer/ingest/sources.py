from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

import numpy as np
import pandas as pd

from sync_skew_analyzer.export.csv_logs import VOLTAGE_COLUMNS
from sync_skew_analyzer.models.blocks import BlockDelivery
from sync_skew_analyzer.models.profile import AcquisitionProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToneConfig:
    """
    Synthetic two-channel tone.

    frequency_hz:
      Tone frequency, identical on both channels.
    amplitude_v:
      Peak amplitude in volts.
    skew_deg:
      Channel B lags channel A by this many degrees:
      a = A sin(2 pi f t), b = A sin(2 pi f t - skew).
    dc_offset_v:
      Constant offset added to both channels.
    noise_std_v:
      Standard deviation of independent Gaussian noise per channel.
    seed:
      Seed for the noise generator (reproducible runs).
    continuous_phase:
      True: time keeps running across blocks (like a real acquisition).
      False: every block restarts at t = 0.
    """
    frequency_hz: float = 500.0
    amplitude_v: float = 1.0
    skew_deg: float = 30.0
    dc_offset_v: float = 0.0
    noise_std_v: float = 0.0
    seed: Optional[int] = 0
    continuous_phase: bool = False


class SyntheticToneSource:
    """
    Generates blocks for a fixed profile, in the delivery shape its sync scheme expects.

    Channel-expansion profiles receive one interleaved buffer per block; the
    other schemes receive two separate buffers.
    """

    def __init__(self, profile: AcquisitionProfile, tone: Optional[ToneConfig] = None):
        self.profile = profile
        self.tone = tone or ToneConfig()
        self._rng = np.random.default_rng(self.tone.seed)
        self._block_index = 0

    def make_pair(self, block_index: int = 0) -> tuple[np.ndarray, np.ndarray]:
        p = self.profile
        tone = self.tone
        n = int(p.samples_per_channel)
        t = np.arange(n, dtype=np.float64) / float(p.sample_rate_hz)
        if tone.continuous_phase:
            t = t + block_index * p.block_period_s

        w = 2.0 * np.pi * float(tone.frequency_hz)
        a = tone.amplitude_v * np.sin(w * t) + tone.dc_offset_v
        b = tone.amplitude_v * np.sin(w * t - np.radians(tone.skew_deg)) + tone.dc_offset_v
        if tone.noise_std_v > 0:
            a = a + self._rng.normal(0.0, tone.noise_std_v, size=n)
            b = b + self._rng.normal(0.0, tone.noise_std_v, size=n)
        return a, b

    def next_delivery(self) -> BlockDelivery:
        a, b = self.make_pair(self._block_index)
        self._block_index += 1
        if self.profile.interleaved:
            buf = np.empty(2 * a.size, dtype=np.float64)
            buf[0::2] = a
            buf[1::2] = b
            return BlockDelivery.from_interleaved(buf)
        return BlockDelivery.pair(a, b)

    def __iter__(self) -> Iterator[BlockDelivery]:
        while True:
            yield self.next_delivery()


class VoltageLogReplaySource:
    """
    Reader for voltage logs written by :class:`~sync_skew_analyzer.export.csv_logs.CsvLogSink`.

    The file is a sequence of blocks, each introduced by the header line
    ``Time (s),DSA Data (V),MIO Data (V)``.  Every block must hold exactly
    ``samples_per_channel`` rows; a block with any other length is skipped with a
    warning (the recording run was interrupted mid-block).

    Deliveries are shaped for the profile's sync scheme, so a log recorded in one
    scheme can be replayed through a pipeline configured for another.
    """

    def __init__(self, path: str | Path, profile: AcquisitionProfile):
        self.path = Path(path).expanduser()
        self.profile = profile
        self.warnings: List[str] = []

    def _load_blocks(self) -> List[np.ndarray]:
        if not self.path.exists():
            raise FileNotFoundError(str(self.path))
        if self.path.stat().st_size == 0:
            return []

        header = ",".join(VOLTAGE_COLUMNS)
        raw = pd.read_csv(self.path, header=None, names=list(VOLTAGE_COLUMNS), dtype=str, skip_blank_lines=True)
        if raw.empty:
            return []

        is_header = (raw[VOLTAGE_COLUMNS[0]].str.strip() == VOLTAGE_COLUMNS[0]).to_numpy()
        if not is_header[0]:
            raise ValueError(f"{self.path}: expected block header {header!r} on the first line")
        block_id = np.cumsum(is_header)

        data = raw.loc[~is_header].apply(pd.to_numeric, errors="coerce")
        ids = block_id[~is_header]

        n = int(self.profile.samples_per_channel)
        blocks: List[np.ndarray] = []
        for k, grp in data.groupby(ids, sort=True):
            mat = grp[[VOLTAGE_COLUMNS[1], VOLTAGE_COLUMNS[2]]].to_numpy(dtype=np.float64)
            if mat.shape[0] != n:
                msg = f"block {int(k)}: {mat.shape[0]} rows, expected {n}; skipped"
                self.warnings.append(msg)
                logger.warning("%s: %s", self.path.name, msg)
                continue
            blocks.append(mat)
        return blocks

    def __iter__(self) -> Iterator[BlockDelivery]:
        for mat in self._load_blocks():
            if self.profile.interleaved:
                yield BlockDelivery.from_interleaved(mat.reshape(-1))
            else:
                yield BlockDelivery.pair(mat[:, 0].copy(), mat[:, 1].copy())
