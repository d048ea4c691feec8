"""Acquisition profile -- bundles all run-relevant configuration.

An AcquisitionProfile groups every parameter that affects one monitoring run
into one frozen dataclass.  It can be:

- Constructed with defaults matching the reference hardware setup
- Overridden field-by-field via ``dataclasses.replace()``
- Serialized to/from a dict, or loaded from a JSON file
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict

SYNC_SCHEMES = ("reference_clock", "sample_clock", "channel_expansion")
BIN_POLICIES = ("threshold", "max_magnitude")


@dataclass(frozen=True)
class AcquisitionProfile:
    """Frozen configuration for one monitoring run.

    Sampling
    --------
    sample_rate_hz : float
        Per-channel sample rate R.
    samples_per_channel : int
        Block length N; must be even and >= 2.
    sync_scheme : str
        One of ``reference_clock``, ``sample_clock`` (two separate blocks per
        callback) or ``channel_expansion`` (one interleaved block of 2N).

    Estimation
    ----------
    bin_policy : str
        ``threshold`` (first bin above ``magnitude_threshold`` on both channels)
        or ``max_magnitude`` (joint maximum over both channels).
    magnitude_threshold : float
        Minimum transform magnitude for the threshold policy.
    include_dc : bool
        If False, bin 0 is never a candidate.

    Logging
    -------
    voltage_precision, spectrum_precision : int
        Decimal places in the voltage and spectrum CSV streams.
    voltage_log_path, spectrum_log_path : str
        File names of the two CSV streams.

    Hardware provenance
    -------------------
    Channel names, input range, reference clock terminal and read timeout.
    They are recorded with the run but do not enter the estimator.
    """

    sample_rate_hz: float = 10000.0
    samples_per_channel: int = 1000
    sync_scheme: str = "reference_clock"

    bin_policy: str = "threshold"
    magnitude_threshold: float = 5.0
    include_dc: bool = False

    voltage_precision: int = 6
    spectrum_precision: int = 4
    voltage_log_path: str = "VoltageData.csv"
    spectrum_log_path: str = "DFTData.csv"

    channel_a_name: str = "Dev1/ai0"
    channel_b_name: str = "Dev2/ai0"
    min_voltage: float = -5.0
    max_voltage: float = 5.0
    reference_clock_source: str = "PXI_Clk10"
    read_timeout_s: float = 10.0

    def __post_init__(self) -> None:
        if not (self.sample_rate_hz > 0):
            raise ValueError(f"sample_rate_hz must be > 0, got {self.sample_rate_hz}")
        n = int(self.samples_per_channel)
        if n < 2 or n % 2 != 0:
            raise ValueError(f"samples_per_channel must be even and >= 2, got {self.samples_per_channel}")
        if self.sync_scheme not in SYNC_SCHEMES:
            raise ValueError(f"Unknown sync scheme: {self.sync_scheme!r} (expected one of {SYNC_SCHEMES})")
        if self.bin_policy not in BIN_POLICIES:
            raise ValueError(f"Unknown bin policy: {self.bin_policy!r} (expected one of {BIN_POLICIES})")
        if not (self.magnitude_threshold > 0):
            raise ValueError(f"magnitude_threshold must be > 0, got {self.magnitude_threshold}")
        if self.voltage_precision < 0 or self.spectrum_precision < 0:
            raise ValueError("log precisions must be >= 0")
        if self.min_voltage >= self.max_voltage:
            raise ValueError(f"min_voltage must be < max_voltage, got {self.min_voltage} >= {self.max_voltage}")

    # ------------------------------------------------------------------
    # Derived quantities
    # ------------------------------------------------------------------

    @property
    def interleaved(self) -> bool:
        return self.sync_scheme == "channel_expansion"

    @property
    def bin_width_hz(self) -> float:
        """Frequency resolution ``R / N``."""
        return float(self.sample_rate_hz) / float(self.samples_per_channel)

    @property
    def block_period_s(self) -> float:
        """Time between two block deliveries, ``N / R``."""
        return float(self.samples_per_channel) / float(self.sample_rate_hz)

    @property
    def n_bins(self) -> int:
        return int(self.samples_per_channel) // 2 + 1

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly dict."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> AcquisitionProfile:
        """Reconstruct from a dict (e.g. loaded from JSON).

        Unknown keys are rejected so that typos in a profile file do not
        silently fall back to defaults.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(d) - known)
        if unknown:
            raise ValueError(f"Unknown profile keys: {unknown}")
        return cls(**dict(d))

    @classmethod
    def from_json(cls, path: str | Path) -> AcquisitionProfile:
        p = Path(path).expanduser()
        with p.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Profile file {p} must contain a JSON object")
        return cls.from_dict(data)
