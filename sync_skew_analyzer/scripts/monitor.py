from __future__ import annotations

"""Live phase-skew monitor.

This module provides the command-line workflow:

1) Build an AcquisitionProfile (defaults, optional JSON profile, CLI overrides).
2) Open a block source (synthetic tone pair or replay of a voltage log).
3) Drive the AcquisitionPipeline block by block, writing the voltage and
   spectrum CSV streams and a live status line.
4) Print a run summary of the detected skew and optionally save a spectrum
   plot of the last processed block.

Hardware acquisition itself lives outside this package; any iterable of
BlockDelivery objects can be driven through the same pipeline.
"""

import dataclasses
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from sync_skew_analyzer.analysis.pipeline import AcquisitionPipeline
from sync_skew_analyzer.analysis.summary import summarize_skew
from sync_skew_analyzer.export.csv_logs import CsvLogSink, NullSink
from sync_skew_analyzer.export.status import StatusReporter
from sync_skew_analyzer.ingest.driver import BlockDriver
from sync_skew_analyzer.ingest.sources import SyntheticToneSource, ToneConfig, VoltageLogReplaySource
from sync_skew_analyzer.logging_config import configure_logging
from sync_skew_analyzer.models.profile import BIN_POLICIES, SYNC_SCHEMES, AcquisitionProfile

logger = logging.getLogger("sync_skew_analyzer.monitor")


def build_profile(
    *,
    profile_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> AcquisitionProfile:
    """Defaults, then the JSON profile (if any), then non-None CLI overrides."""
    base = AcquisitionProfile.from_json(profile_path) if profile_path else AcquisitionProfile()
    clean = {k: v for k, v in (overrides or {}).items() if v is not None}
    return dataclasses.replace(base, **clean) if clean else base


def main(argv: Optional[Sequence[str]] = None) -> int:
    import argparse
    import textwrap

    p = argparse.ArgumentParser(
        prog="python -m sync_skew_analyzer.scripts.monitor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=textwrap.dedent(
            """\
            Monitor the phase skew between two synchronized acquisition channels.

            Each block is transformed, the common tone is detected, and the skew
            (degrees and seconds) is shown on a live status line. Voltage and
            spectrum data are appended to VoltageData.csv and DFTData.csv.
            """
        ),
    )

    p.add_argument("--profile", default=None, help="JSON file with AcquisitionProfile fields")
    p.add_argument("--scheme", choices=SYNC_SCHEMES, default=None, help="Synchronization scheme")
    p.add_argument("--policy", choices=BIN_POLICIES, default=None, help="Detected-bin selection policy")
    p.add_argument("--threshold", type=float, default=None, help="Magnitude threshold (threshold policy)")
    p.add_argument("--rate", type=float, default=None, help="Sample rate per channel in Hz")
    p.add_argument("--samples", type=int, default=None, help="Samples per channel per block (even)")

    p.add_argument("--source", choices=("synthetic", "replay"), default="synthetic", help="Block source")
    p.add_argument("--replay-file", default=None, help="Voltage log to replay (--source replay)")
    p.add_argument("--tone-hz", type=float, default=500.0, help="Synthetic tone frequency in Hz")
    p.add_argument("--amplitude", type=float, default=1.0, help="Synthetic tone amplitude in V")
    p.add_argument("--skew-deg", type=float, default=30.0, help="Synthetic skew of channel B in degrees")
    p.add_argument("--noise", type=float, default=0.0, help="Synthetic noise standard deviation in V")
    p.add_argument("--seed", type=int, default=0, help="Synthetic noise seed")
    p.add_argument("--blocks", type=int, default=None, help="Stop after this many blocks (default: synthetic 100, replay all)")

    p.add_argument("--out-dir", default=".", help="Directory for the CSV log streams")
    p.add_argument("--no-log-files", action="store_true", help="Do not write the CSV log streams")
    p.add_argument("--plot", default=None, help="Save a spectrum plot of the last block to this path")
    p.add_argument("--quiet", action="store_true", help="Do not show the live status line")
    p.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ...)")
    p.add_argument("--log-file", default=None, help="Optional rotating log file")

    ns = p.parse_args(list(argv) if argv is not None else None)

    try:
        configure_logging(ns.log_level, log_file=ns.log_file)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    try:
        profile = build_profile(
            profile_path=ns.profile,
            overrides={
                "sync_scheme": ns.scheme,
                "bin_policy": ns.policy,
                "magnitude_threshold": ns.threshold,
                "sample_rate_hz": ns.rate,
                "samples_per_channel": ns.samples,
            },
        )
    except (OSError, ValueError) as e:
        logger.error("Invalid profile: %s", e)
        return 2

    if ns.no_log_files:
        sink = NullSink()
    else:
        out_dir = Path(ns.out_dir).expanduser()
        sink = CsvLogSink(
            out_dir / profile.voltage_log_path,
            out_dir / profile.spectrum_log_path,
            voltage_precision=profile.voltage_precision,
            spectrum_precision=profile.spectrum_precision,
        )
        sink.reset()

    if ns.source == "replay":
        if not ns.replay_file:
            logger.error("--source replay requires --replay-file")
            return 2
        source = VoltageLogReplaySource(ns.replay_file, profile)
        max_blocks = ns.blocks
    else:
        tone = ToneConfig(
            frequency_hz=ns.tone_hz,
            amplitude_v=ns.amplitude,
            skew_deg=ns.skew_deg,
            noise_std_v=ns.noise,
            seed=ns.seed,
            continuous_phase=True,
        )
        source = SyntheticToneSource(profile, tone)
        max_blocks = ns.blocks if ns.blocks is not None else 100

    status = None if ns.quiet else StatusReporter(sys.stdout)
    pipeline = AcquisitionPipeline(profile, sink=sink, status=status)

    logger.info(
        "Starting run: scheme=%s policy=%s R=%.2f Hz N=%d (bin width %.3f Hz)",
        profile.sync_scheme,
        profile.bin_policy,
        profile.sample_rate_hz,
        profile.samples_per_channel,
        profile.bin_width_hz,
    )

    if status is not None:
        status.start(sample_rate_hz=profile.sample_rate_hz, samples_per_channel=profile.samples_per_channel)
    try:
        report = BlockDriver(pipeline).run(source, max_blocks=max_blocks)
    except (OSError, ValueError) as e:
        logger.error("Run aborted: %s", e)
        return 1
    finally:
        if status is not None:
            status.finish()

    summary = summarize_skew(report.outcomes)
    print(f"Blocks processed: {summary.n_blocks} (rejected: {len(report.rejected)}, stop: {report.stop_reason})")
    print(f"Blocks with detection: {summary.n_detected}")
    if summary.n_detected:
        print(f"  frequency (mean): {summary.mean_frequency_hz:.2f} Hz")
        print(
            f"  skew: mean={summary.mean_skew_deg:.3f} deg, std={summary.std_skew_deg:.3f} deg, "
            f"range=[{summary.min_skew_deg:.3f}, {summary.max_skew_deg:.3f}] deg"
        )
        print(f"  skew (mean): {summary.mean_skew_s:.3e} s")

    if ns.plot and report.outcomes:
        from sync_skew_analyzer.presentation.plots import plot_block_spectrum

        plot_block_spectrum(report.outcomes[-1], path=ns.plot)
        print(f"Spectrum plot written: {ns.plot}")

    return 1 if report.stop_reason == "acquisition_error" else 0


if __name__ == "__main__":
    raise SystemExit(main())
