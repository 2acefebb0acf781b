"""torchremez: Parks-McClellan optimal FIR filter design in PyTorch."""

from . import filter_design

__all__ = [
    "filter_design",
]

__version__ = "0.1.0"
