from .blocks import BlockDelivery, SampleBlock, check_block_pair
from .profile import AcquisitionProfile
from .results import AcquisitionCounters, BlockOutcome, ChannelSpectralSummary, SkewResult

__all__ = [
    "AcquisitionCounters",
    "AcquisitionProfile",
    "BlockDelivery",
    "BlockOutcome",
    "ChannelSpectralSummary",
    "SampleBlock",
    "SkewResult",
    "check_block_pair",
]
