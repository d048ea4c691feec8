from .plots import plot_block_spectrum

__all__ = ["plot_block_spectrum"]
