"""
Capability string constants for PyLevel3 backends.

This module is the SINGLE SOURCE OF TRUTH for capability strings.
Import from here, never use raw strings.

Usage:
    from pylevel3.core.capabilities import CAPABILITY_COMPLEX

    if backend.supports(CAPABILITY_COMPLEX):
        ...
"""

# Backend executes real (float64) kernels
CAPABILITY_REAL = 'real'

# Backend executes complex (complex128) kernels
CAPABILITY_COMPLEX = 'complex'

# Backend computes in double precision
CAPABILITY_FP64 = 'fp64'

# Backend computes on a GPU device
CAPABILITY_GPU_NATIVE = 'gpu_native'

# All capabilities as a frozenset for validation
ALL_CAPABILITIES = frozenset({
    CAPABILITY_REAL,
    CAPABILITY_COMPLEX,
    CAPABILITY_FP64,
    CAPABILITY_GPU_NATIVE,
})

__all__ = [
    'CAPABILITY_REAL',
    'CAPABILITY_COMPLEX',
    'CAPABILITY_FP64',
    'CAPABILITY_GPU_NATIVE',
    'ALL_CAPABILITIES',
]
