from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import numpy as np
import pandas as pd

from sync_skew_analyzer.models.results import BlockOutcome


@dataclass(frozen=True)
class SkewSummary:
    """Run-level statistics over all detected blocks.

    Statistics are NaN when no block produced a detection.
    """

    n_blocks: int
    n_detected: int
    mean_frequency_hz: float
    mean_skew_deg: float
    std_skew_deg: float
    min_skew_deg: float
    max_skew_deg: float
    mean_skew_s: float

    @property
    def detection_ratio(self) -> float:
        return float(self.n_detected) / float(self.n_blocks) if self.n_blocks else float("nan")


def outcomes_table(outcomes: Iterable[BlockOutcome]) -> pd.DataFrame:
    """One row per block: counters plus the skew (NaN for no detection)."""
    rows = []
    for o in outcomes:
        s = o.skew
        rows.append(
            {
                "block": o.block_index,
                "channel_a_total": o.counters.channel_a_total,
                "channel_b_total": o.counters.channel_b_total,
                "detected": s is not None,
                "frequency_hz": s.detected_frequency_hz if s is not None else np.nan,
                "skew_deg": s.phase_skew_deg if s is not None else np.nan,
                "skew_s": s.phase_skew_s if s is not None else np.nan,
            }
        )
    columns = ["block", "channel_a_total", "channel_b_total", "detected", "frequency_hz", "skew_deg", "skew_s"]
    return pd.DataFrame(rows, columns=columns)


def summarize_skew(outcomes: Iterable[BlockOutcome]) -> SkewSummary:
    """Mean/std/min/max of the skew over the blocks that produced a detection."""
    df = outcomes_table(outcomes)
    det = df[df["detected"].astype(bool)]
    n_det = int(len(det))

    def _stat(series: pd.Series, fn: str) -> float:
        if n_det == 0:
            return float("nan")
        if fn == "std":
            return float(np.std(series.to_numpy(dtype=float)))
        return float(getattr(series, fn)())

    return SkewSummary(
        n_blocks=int(len(df)),
        n_detected=n_det,
        mean_frequency_hz=_stat(det["frequency_hz"], "mean"),
        mean_skew_deg=_stat(det["skew_deg"], "mean"),
        std_skew_deg=_stat(det["skew_deg"], "std"),
        min_skew_deg=_stat(det["skew_deg"], "min"),
        max_skew_deg=_stat(det["skew_deg"], "max"),
        mean_skew_s=_stat(det["skew_s"], "mean"),
    )
