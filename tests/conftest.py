"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np

from pylevel3.core.capabilities import CAPABILITY_COMPLEX, CAPABILITY_REAL


class RecordingBackend:
    """
    KernelBackend that records calls instead of computing.

    Lets tests assert exactly what the dispatcher handed over, and that
    nothing was handed over when validation failed.
    """

    def __init__(self, capabilities=(CAPABILITY_REAL, CAPABILITY_COMPLEX)):
        self.calls = []
        self._capabilities = frozenset(capabilities)

    @property
    def name(self) -> str:
        return 'recording'

    def supports(self, capability: str) -> bool:
        return capability in self._capabilities

    def _record(self, call):
        self.calls.append(call)

    gemm = symm = hemm = _record
    syrk = herk = syr2k = her2k = _record
    trmm = trsm = scale = _record


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def recorder():
    """Backend that records KernelCalls without computing anything."""
    return RecordingBackend()


@pytest.fixture
def real_only_recorder():
    """Recording backend without complex-domain support."""
    return RecordingBackend(capabilities=(CAPABILITY_REAL,))


@pytest.fixture
def complex_matrix(rng):
    """Factory for random complex128 matrices."""
    def make(rows, cols):
        return rng.standard_normal((rows, cols)) + 1j * rng.standard_normal((rows, cols))
    return make


@pytest.fixture
def well_conditioned_triangle(rng):
    """Factory for triangular factors with a dominant diagonal."""
    def make(n, dtype=np.float64, lower=True):
        t = rng.standard_normal((n, n)).astype(dtype)
        if np.issubdtype(dtype, np.complexfloating):
            t = t + 1j * rng.standard_normal((n, n))
        t = np.tril(t) if lower else np.triu(t)
        t[np.diag_indices(n)] = n + np.abs(t.diagonal())
        return t
    return make
