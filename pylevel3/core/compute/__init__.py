"""
Shared compute infrastructure for PyLevel3.

This module provides hardware detection, timing utilities and tolerance
tiers shared by all backends.

IMPORTANT: This is NOT where backends live. Those go in level3/backends/.

Submodules:
    device: Hardware detection and device selection
    timing: Execution timing utilities
    tolerances: Tolerance tiers for cross-backend comparison
"""

from pylevel3.core.compute.device import (
    DeviceInfo,
    detect_gpu,
    host_device,
    select_device,
)
from pylevel3.core.compute.timing import Timer

__all__ = [
    # Device detection
    "DeviceInfo",
    "detect_gpu",
    "host_device",
    "select_device",
    # Timing
    "Timer",
]
