from __future__ import annotations

import sys
from typing import Optional, TextIO

from sync_skew_analyzer.models.results import AcquisitionCounters, SkewResult

STATUS_HEADER = (
    "DSA Samples Acquired\tMIO Samples Acquired\tDetected Signal Frequency (Hz)"
    "\t\tPhase Shift (deg)\tPhase Shift (sec)"
)


def format_status(counters: AcquisitionCounters, skew: Optional[SkewResult]) -> str:
    """One status line (without terminator). No detection shows zero frequency and skew."""
    if skew is None:
        freq, deg, sec = 0.0, 0.0, 0.0
    else:
        freq, deg, sec = skew.detected_frequency_hz, skew.phase_skew_deg, skew.phase_skew_s
    return (
        f"{counters.channel_a_total:d}\t\t\t{counters.channel_b_total:d}\t\t\t"
        f"{freq:5.2f}\t\t\t\t\t{deg:2.2f}\t\t\t{sec:1.2e}"
    )


class StatusReporter:
    """Rewrites a single console line per block (carriage-return terminated)."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self._started = False

    def start(self, *, sample_rate_hz: float, samples_per_channel: int) -> None:
        s = self.stream
        s.write("\n" + "*" * 57 + "\n")
        s.write("Acquiring samples continuously. Press Ctrl+C to interrupt.\n")
        s.write("*" * 57 + "\n\n")
        s.write(f"Sample rate (Hz): {sample_rate_hz:6.2f}\n")
        s.write(f"Samples per channel: {samples_per_channel}\n\n")
        s.write(STATUS_HEADER + "\n")
        s.flush()
        self._started = True

    def update(self, counters: AcquisitionCounters, skew: Optional[SkewResult]) -> None:
        self.stream.write(format_status(counters, skew) + "\r")
        self.stream.flush()

    def finish(self) -> None:
        if self._started:
            self.stream.write("\n")
            self.stream.flush()
            self._started = False
