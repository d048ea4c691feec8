"""Per-block estimation cycle.

One call of :meth:`AcquisitionPipeline.process` runs the full chain for one
delivered block:

1. demultiplex (channel-expansion only)
2. one-sided DFT of both channels
3. magnitude / amplitude / phase spectra
4. bin selection and phase skew (or no detection)
5. voltage and spectrum rows to the log sink
6. running sample counters and the status line

Everything up to step 4 is computed before the sink is touched; a block that
fails validation or computation leaves the log files and counters unchanged.

The pipeline is driven serially by a single caller. It refuses to be
re-entered and refuses further blocks once stopped.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from sync_skew_analyzer.analysis.fourier import SpectralTransform
from sync_skew_analyzer.analysis.skew import PhaseSkewEstimator
from sync_skew_analyzer.analysis.spectrum import magnitude_spectrum
from sync_skew_analyzer.export.csv_logs import BlockSink, NullSink
from sync_skew_analyzer.export.status import StatusReporter
from sync_skew_analyzer.ingest.demux import DualChannelDemultiplexer, StructuralBlockError
from sync_skew_analyzer.models.blocks import BlockDelivery, SampleBlock, check_block_pair
from sync_skew_analyzer.models.profile import AcquisitionProfile
from sync_skew_analyzer.models.results import AcquisitionCounters, BlockOutcome

logger = logging.getLogger(__name__)


class PipelineStoppedError(RuntimeError):
    """A block arrived after the pipeline was stopped."""


class AcquisitionPipeline:
    """Orchestrates one estimation cycle per delivered block.

    Parameters
    ----------
    profile:
        Run configuration (block size, rate, sync scheme, bin policy, ...).
    sink:
        Destination of the voltage/spectrum rows. Defaults to :class:`NullSink`.
    status:
        Optional console status line, updated after every completed block.
    """

    def __init__(
        self,
        profile: AcquisitionProfile,
        *,
        sink: Optional[BlockSink] = None,
        status: Optional[StatusReporter] = None,
    ) -> None:
        self.profile = profile
        self.n_samples = int(profile.samples_per_channel)
        self.sample_rate_hz = float(profile.sample_rate_hz)

        self.transform = SpectralTransform(self.n_samples)
        self.demux = DualChannelDemultiplexer(self.n_samples) if profile.interleaved else None
        self.estimator = PhaseSkewEstimator(
            profile.bin_policy,
            magnitude_threshold=profile.magnitude_threshold,
            include_dc=profile.include_dc,
        )
        self.sink: BlockSink = sink if sink is not None else NullSink()
        self.status = status
        self.counters = AcquisitionCounters()

        self._time_s = np.arange(self.n_samples, dtype=np.float64) * (1.0 / self.sample_rate_hz)
        self._time_s.setflags(write=False)
        self._busy = False
        self._stopped = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def stopped(self) -> bool:
        return self._stopped

    def stop(self) -> None:
        if not self._stopped:
            logger.info("Pipeline stopped after %d blocks", self.counters.blocks_processed)
        self._stopped = True

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def process(self, delivery: BlockDelivery) -> BlockOutcome:
        """Dispatch one delivery according to the configured sync scheme."""
        if self.profile.interleaved:
            if not delivery.is_interleaved:
                raise StructuralBlockError("channel_expansion run expects an interleaved buffer")
            return self.process_interleaved(delivery.interleaved)
        if delivery.is_interleaved or delivery.channel_a is None or delivery.channel_b is None:
            raise StructuralBlockError(f"{self.profile.sync_scheme} run expects two per-channel buffers")
        return self.process_pair(delivery.channel_a, delivery.channel_b)

    def process_interleaved(self, buffer: np.ndarray) -> BlockOutcome:
        demux = self.demux or DualChannelDemultiplexer(self.n_samples)
        self._check_ready()
        samples_a, samples_b = demux.split(buffer)
        return self.process_pair(samples_a, samples_b)

    def process_pair(self, samples_a: np.ndarray, samples_b: np.ndarray) -> BlockOutcome:
        self._check_ready()
        self._busy = True
        try:
            return self._run_block(samples_a, samples_b)
        finally:
            self._busy = False

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_ready(self) -> None:
        if self._stopped:
            raise PipelineStoppedError("pipeline has been stopped; no further blocks are accepted")
        if self._busy:
            raise RuntimeError("AcquisitionPipeline is not re-entrant")

    def _make_block(self, samples: np.ndarray, name: str) -> SampleBlock:
        x = np.asarray(samples)
        if x.ndim != 1 or x.size != self.n_samples:
            raise StructuralBlockError(
                f"channel {name} block has shape {x.shape}, expected ({self.n_samples},)"
            )
        block = SampleBlock(x, self.sample_rate_hz)
        if not np.all(np.isfinite(block.samples)):
            raise StructuralBlockError(f"channel {name} block contains non-finite samples")
        return block

    def _run_block(self, samples_a: np.ndarray, samples_b: np.ndarray) -> BlockOutcome:
        block_a = self._make_block(samples_a, "A")
        block_b = self._make_block(samples_b, "B")
        n = check_block_pair(block_a, block_b)

        summary_a = magnitude_spectrum(
            self.transform(block_a), n_samples=n, sample_rate_hz=self.sample_rate_hz
        )
        summary_b = magnitude_spectrum(
            self.transform(block_b), n_samples=n, sample_rate_hz=self.sample_rate_hz
        )
        skew = self.estimator.estimate(summary_a, summary_b)

        self.sink.write_block(
            time_s=self._time_s,
            samples_a=block_a.samples,
            samples_b=block_b.samples,
            summary_a=summary_a,
            summary_b=summary_b,
        )

        block_index = self.counters.blocks_processed
        self.counters.add_block(block_a.n_samples, block_b.n_samples)

        if skew is None:
            logger.debug("block %d: no detection", block_index)
        else:
            logger.debug(
                "block %d: f=%.2f Hz skew=%.3f deg (%.3e s)",
                block_index,
                skew.detected_frequency_hz,
                skew.phase_skew_deg,
                skew.phase_skew_s,
            )

        if self.status is not None:
            self.status.update(self.counters, skew)

        return BlockOutcome(
            block_index=block_index,
            summary_a=summary_a,
            summary_b=summary_b,
            skew=skew,
            counters=self.counters.snapshot(),
        )
