"""
Tolerance tiers for numerical comparison.

Defines precision expectations for comparing results across compute paths:
- CPU BLAS FP64 (reference)
- PyTorch FP64 (host or CUDA) against the CPU reference
- Round trips (trmm followed by trsm), which lose a few digits to the
  conditioning of the triangular factor

Used by the test suite and by anyone cross-checking backends.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ToleranceTier:
    """Tolerance specification for numerical comparison."""
    rtol: float
    atol: float
    name: str
    description: str


# CPU reference: BLAS double precision
CPU_FP64 = ToleranceTier(
    rtol=1e-12,
    atol=1e-12,
    name='cpu_fp64',
    description='CPU BLAS double precision',
)

# PyTorch FP64: different summation order than reference BLAS
TORCH_FP64 = ToleranceTier(
    rtol=1e-10,
    atol=1e-12,
    name='torch_fp64',
    description='PyTorch double precision, matches CPU reference',
)

# trmm -> trsm round trip on a well-conditioned triangular factor
ROUND_TRIP_FP64 = ToleranceTier(
    rtol=1e-9,
    atol=1e-10,
    name='round_trip_fp64',
    description='Multiply then solve with the same triangular factor',
)


def select_tolerance(
    backend_name: str,
    round_trip: bool = False,
) -> ToleranceTier:
    """Select appropriate tolerance tier for a given backend."""
    if round_trip:
        return ROUND_TRIP_FP64
    if 'torch' in backend_name:
        return TORCH_FP64
    return CPU_FP64
