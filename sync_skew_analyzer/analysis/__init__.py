"""Analysis package.

Design principle:
  - Ingest produces per-channel sample buffers of a fixed length N.
  - Analysis consumes them block by block and produces spectra and a skew.

Project-wide constraints:
  - Block size is fixed per run; the transform buffer is sized once.
  - "No detection" is returned as ``None``, never as a zero-valued skew.
"""

from .fourier import SpectralTransform, rfft_block
from .phase import normalize_phase_difference, normalize_phase_difference_array
from .pipeline import AcquisitionPipeline, PipelineStoppedError
from .skew import PhaseSkewEstimator, select_bin_max_magnitude, select_bin_threshold, skew_at_bin
from .spectrum import bin_frequencies, magnitude_spectrum
from .summary import SkewSummary, outcomes_table, summarize_skew

__all__ = [
    "AcquisitionPipeline",
    "PhaseSkewEstimator",
    "PipelineStoppedError",
    "SkewSummary",
    "SpectralTransform",
    "bin_frequencies",
    "magnitude_spectrum",
    "normalize_phase_difference",
    "normalize_phase_difference_array",
    "outcomes_table",
    "rfft_block",
    "select_bin_max_magnitude",
    "select_bin_threshold",
    "skew_at_bin",
    "summarize_skew",
]
