"""
CPU reference backend for Level-3 operations.

Calls the BLAS routines SciPy ships in scipy.linalg.blas (dgemm, zhemm,
zherk, dtrsm, ...). This is the reference implementation: every other
backend is checked against it.

SciPy's wrappers return a fresh Fortran-ordered result rather than writing
through arbitrary strides, so each entry point computes the result and then
copies it into the caller's buffer. When beta is zero the prior output is
never handed to BLAS at all, so NaN or uninitialised memory in C cannot leak
into the result.
"""

from typing import Any, Callable

from scipy.linalg import blas as sp_blas

from pylevel3.core.capabilities import (
    CAPABILITY_COMPLEX,
    CAPABILITY_FP64,
    CAPABILITY_REAL,
)
from pylevel3.level3._dispatch import KernelCall
from pylevel3.level3.backends._common import (
    SIDE_CODES,
    TRANS_CODES,
    check_triangular_diagonal,
    scale_output,
    write_back,
)


class CPUBlasBackend:
    """
    CPU backend using SciPy's BLAS bindings.

    Implements the KernelBackend protocol. Stateless; safe to share across
    threads as long as concurrent calls write disjoint buffers.
    """

    _CAPABILITIES = frozenset({CAPABILITY_REAL, CAPABILITY_COMPLEX, CAPABILITY_FP64})

    @property
    def name(self) -> str:
        return 'cpu_blas'

    def supports(self, capability: str) -> bool:
        return capability in self._CAPABILITIES

    # === Entry points ===

    def gemm(self, call: KernelCall) -> None:
        result = self._routine(call)(
            call.alpha, call.a, call.b,
            trans_a=TRANS_CODES[call.trans_a],
            trans_b=TRANS_CODES[call.trans_b],
            **self._beta_kwargs(call),
        )
        write_back(call, result)

    def symm(self, call: KernelCall) -> None:
        result = self._routine(call)(
            call.alpha, call.a, call.b,
            side=SIDE_CODES[call.side],
            lower=int(call.uplo == 'L'),
            **self._beta_kwargs(call),
        )
        write_back(call, result)

    hemm = symm

    def syrk(self, call: KernelCall) -> None:
        result = self._routine(call)(
            call.alpha, call.a,
            trans=TRANS_CODES[call.trans_a],
            lower=int(call.uplo == 'L'),
            **self._beta_kwargs(call),
        )
        write_back(call, result)

    herk = syrk

    def syr2k(self, call: KernelCall) -> None:
        result = self._routine(call)(
            call.alpha, call.a, call.b,
            trans=TRANS_CODES[call.trans_a],
            lower=int(call.uplo == 'L'),
            **self._beta_kwargs(call),
        )
        write_back(call, result)

    her2k = syr2k

    def trmm(self, call: KernelCall) -> None:
        result = self._routine(call)(
            call.alpha, call.a, call.b,
            **self._triangular_kwargs(call),
        )
        write_back(call, result)

    def trsm(self, call: KernelCall) -> None:
        check_triangular_diagonal(call)
        result = self._routine(call)(
            call.alpha, call.a, call.b,
            **self._triangular_kwargs(call),
        )
        write_back(call, result)

    def scale(self, call: KernelCall) -> None:
        scale_output(call)

    # === Helpers ===

    @staticmethod
    def _routine(call: KernelCall) -> Callable[..., Any]:
        return getattr(sp_blas, call.routine)

    @staticmethod
    def _beta_kwargs(call: KernelCall) -> dict[str, Any]:
        if call.beta == 0:
            return {}
        return {'beta': call.beta, 'c': call.c}

    @staticmethod
    def _triangular_kwargs(call: KernelCall) -> dict[str, int]:
        return {
            'side': SIDE_CODES[call.side],
            'lower': int(call.uplo == 'L'),
            'trans_a': TRANS_CODES[call.trans_a],
            'diag': int(call.diag == 'U'),
        }
