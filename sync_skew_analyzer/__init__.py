"""Sync Skew Analyzer -- phase-skew monitoring for hardware-synchronized acquisition channels.

Two acquisition paths (a DSA device and a multifunction IO device) are synchronized
through a shared reference clock, a shared sample clock, or a shared start trigger
with channel expansion.  This package verifies, block by block, that the two paths
stay phase-aligned.

This package provides tools for:
- Splitting interleaved channel-expansion buffers into per-channel blocks
- Computing the one-sided DFT of each channel block
- Deriving magnitude, amplitude and phase spectra
- Detecting the common tone and measuring the phase skew (degrees and seconds)
- Logging voltage and spectrum data to delimited text files
- Reporting a live status line and run-level skew statistics

Key principles:
- Fixed block size per run: the transform buffer is allocated once and reused
- "No detection" is an explicit outcome, never a zero-valued measurement
- Each block is processed atomically: nothing is logged for an aborted block

Main subpackages:
- analysis: Transform, spectra, bin selection, skew estimation, pipeline
- ingest: Block sources, demultiplexing, and the serial block driver
- export: CSV log streams and console status line
- models: Data models (SampleBlock, SkewResult, AcquisitionProfile)
- presentation: Spectrum plots
"""

__all__ = []
