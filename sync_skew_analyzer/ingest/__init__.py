"""Ingest package - block sources, demultiplexing and the block driver.

This package handles:
- Synthetic two-tone block generation (offline runs and tests)
- Replay of voltage logs written by a previous run
- Splitting channel-expansion (interleaved) buffers into two channels
- Driving a pipeline serially, one invocation per delivered block

Key classes:
- SyntheticToneSource: Generates phase-shifted tone pairs
- VoltageLogReplaySource: Reads back a VoltageData.csv stream
- DualChannelDemultiplexer: Interleaved buffer -> two SampleBlocks
- BlockDriver: Serial scheduler adapter with stop/failure handling

Design principle:
- Sources only produce BlockDelivery objects; all analysis happens downstream
- A malformed buffer is rejected, never truncated
"""
