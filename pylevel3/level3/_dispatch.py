"""
Resolution of validated calls into canonical column-major kernel calls.

Backends only ever see column-major operands. A row-major r x c buffer is,
byte for byte, a column-major c x r matrix: its transpose. Reading every
operand that way turns a row-major call into an equivalent column-major
call on the transposed problem:

    gemm    C' = op(B)' op(A)'     swap a<->b, trans_a<->trans_b, m<->n
    symm    C' = B' A'             flip side and uplo, swap m<->n
    hemm    same as symm (A' = conj(A) is still Hermitian)
    syrk    C' = C                 flip uplo, N<->T
    herk    C' = conj(C)           flip uplo, N<->C
    syr2k   C' = C                 flip uplo, N<->T
    her2k   C' = conj(C)           flip uplo, N<->C, conjugate alpha
    trmm    C' = B' op(A)'         flip side and uplo, swap m<->n
    trsm    same as trmm

The operand arrays in a KernelCall are NumPy views of the caller's buffers
(buffer.T for row-major), so a backend writing into call.c or call.b writes
straight into the caller's memory.

When alpha is zero the inputs take no part in the result, so the call
resolves to the backend's `scale` entry point, which never references them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping
import numpy as np
from numpy.typing import NDArray

from pylevel3.core.protocols import KernelBackend
from pylevel3.level3.descriptors import OperationDescriptor, OperationKind
from pylevel3.level3.design import MatrixView, ScalarValue
from pylevel3.level3.flags import Diag, Domain, Side, Transpose


@dataclass(frozen=True, eq=False)
class KernelCall:
    """
    Immutable, fully resolved column-major kernel invocation.

    Attributes:
        entry: Backend entry point to call ('gemm', ..., 'trsm', 'scale')
        routine: BLAS routine name of the operation ('dgemm', 'zherk', ...)
        kind: Operation kind
        domain: Numeric domain
        trans_a: Transpose character for a ('N', 'T', 'C'), or None
        trans_b: Transpose character for b, or None
        side: 'L' or 'R', or None
        uplo: 'U' or 'L', or None
        diag: 'U' or 'N', or None
        m, n, k: Column-major problem dimensions (k is 0 where unused)
        alpha: Alpha as a Python float or complex
        beta: Beta as a Python float or complex, or None
        a, b, c: Column-major operand views (None where unused)
        lda, ldb, ldc: Leading dimensions (0 where unused)
        output: Name of the operand written in place ('b' or 'c')
    """
    entry: str
    routine: str
    kind: OperationKind
    domain: Domain
    trans_a: str | None
    trans_b: str | None
    side: str | None
    uplo: str | None
    diag: str | None
    m: int
    n: int
    k: int
    alpha: float | complex
    beta: float | complex | None
    a: NDArray[Any] | None
    b: NDArray[Any] | None
    c: NDArray[Any] | None
    lda: int
    ldb: int
    ldc: int
    output: str

    @property
    def out(self) -> NDArray[Any]:
        """The column-major view written by this call."""
        return self.c if self.output == 'c' else self.b

    @property
    def dtype(self) -> np.dtype:
        return self.domain.dtype


class OperationDispatcher:
    """
    Maps a validated call to a canonical column-major KernelCall.

    Stateless and pure: resolve() only reshuffles flags, dimensions and
    views. It never touches array contents.
    """

    def resolve(
        self,
        descriptor: OperationDescriptor,
        operands: Mapping[str, MatrixView],
        alpha: ScalarValue,
        beta: ScalarValue | None = None,
        *,
        side: Side | None = None,
    ) -> KernelCall:
        """
        Resolve a call that has already passed ShapeValidator.

        Args:
            descriptor: The (operation, domain) being called
            operands: MatrixViews keyed by operand name
            alpha: Alpha scalar
            beta: Beta scalar (None for trmm/trsm)
            side: Side flag for symm/hemm/trmm/trsm

        Returns:
            KernelCall with column-major operands and flags
        """
        kind = descriptor.kind
        if kind is OperationKind.GEMM:
            fields = self._resolve_gemm(operands)
        elif kind in (OperationKind.SYMM, OperationKind.HEMM):
            fields = self._resolve_symm(operands, side)
        elif kind.is_rank_update:
            fields = self._resolve_rank_update(descriptor, operands)
        else:
            fields = self._resolve_triangular(operands, side)

        hermitian_update = kind in (OperationKind.HERK, OperationKind.HER2K)

        if kind is OperationKind.HER2K and operands['a'].order.is_row_major:
            alpha = alpha.conjugate()
        alpha_value = alpha.real if kind is OperationKind.HERK else alpha.value

        beta_value = None
        if beta is not None:
            beta_value = beta.real if hermitian_update else beta.value

        entry = kind.value
        if alpha.is_zero:
            entry = 'scale'
            fields.update(a=None, lda=0)
            if descriptor.output.name != 'b':
                fields.update(b=None, ldb=0)

        return KernelCall(
            entry=entry,
            routine=descriptor.routine,
            kind=kind,
            domain=descriptor.domain,
            alpha=alpha_value,
            beta=beta_value,
            output=descriptor.output.name,
            **fields,
        )

    # === Per-family resolution ===

    @staticmethod
    def _resolve_gemm(operands: Mapping[str, MatrixView]) -> dict[str, Any]:
        a, b, c = operands['a'], operands['b'], operands['c']
        if a.order.is_row_major:
            # C' = op(B)' op(A)'
            a, b = b, a
        m, k = _op_shape(a.canonical(), a.transpose)
        n = _op_shape(b.canonical(), b.transpose)[1]
        return dict(
            trans_a=a.transpose.blas_char,
            trans_b=b.transpose.blas_char,
            side=None,
            uplo=None,
            diag=None,
            m=m, n=n, k=k,
            a=a.canonical(), b=b.canonical(), c=c.canonical(),
            lda=a.leading_dimension, ldb=b.leading_dimension, ldc=c.leading_dimension,
        )

    @staticmethod
    def _resolve_symm(
        operands: Mapping[str, MatrixView], side: Side | None
    ) -> dict[str, Any]:
        a, b, c = operands['a'], operands['b'], operands['c']
        uplo = a.half
        if a.order.is_row_major:
            side, uplo = side.flipped(), uplo.flipped()
        m, n = c.canonical().shape
        return dict(
            trans_a=None,
            trans_b=None,
            side=side.blas_char,
            uplo=uplo.blas_char,
            diag=None,
            m=m, n=n, k=0,
            a=a.canonical(), b=b.canonical(), c=c.canonical(),
            lda=a.leading_dimension, ldb=b.leading_dimension, ldc=c.leading_dimension,
        )

    @staticmethod
    def _resolve_rank_update(
        descriptor: OperationDescriptor, operands: Mapping[str, MatrixView]
    ) -> dict[str, Any]:
        a, c = operands['a'], operands['c']
        b = operands.get('b')
        trans, uplo = a.transpose, c.half
        if a.order.is_row_major:
            uplo = uplo.flipped()
            # N <-> T for symmetric updates, N <-> C for Hermitian ones
            flipped = (
                Transpose.CONJ_TRANS
                if descriptor.kind in (OperationKind.HERK, OperationKind.HER2K)
                else Transpose.TRANS
            )
            trans = flipped if trans is Transpose.NO_TRANS else Transpose.NO_TRANS
        a_cm = a.canonical()
        n, k = _op_shape(a_cm, trans)
        return dict(
            trans_a=trans.blas_char,
            trans_b=None,
            side=None,
            uplo=uplo.blas_char,
            diag=None,
            m=n, n=n, k=k,
            a=a_cm,
            b=b.canonical() if b is not None else None,
            c=c.canonical(),
            lda=a.leading_dimension,
            ldb=b.leading_dimension if b is not None else 0,
            ldc=c.leading_dimension,
        )

    @staticmethod
    def _resolve_triangular(
        operands: Mapping[str, MatrixView],
        side: Side | None,
    ) -> dict[str, Any]:
        a, b = operands['a'], operands['b']
        c = operands.get('c')
        uplo = a.half
        if a.order.is_row_major:
            side, uplo = side.flipped(), uplo.flipped()
        m, n = b.canonical().shape
        diag = Diag.UNIT if a.diag_unit else Diag.NON_UNIT
        return dict(
            trans_a=a.transpose.blas_char,
            trans_b=None,
            side=side.blas_char,
            uplo=uplo.blas_char,
            diag=diag.blas_char,
            m=m, n=n, k=0,
            a=a.canonical(),
            b=b.canonical(),
            c=c.canonical() if c is not None else None,
            lda=a.leading_dimension,
            ldb=b.leading_dimension,
            ldc=c.leading_dimension if c is not None else 0,
        )


def _op_shape(array: NDArray[Any], trans: Transpose) -> tuple[int, int]:
    rows, cols = array.shape
    return (cols, rows) if trans.is_transposed else (rows, cols)


def dispatch(backend: KernelBackend, call: KernelCall) -> None:
    """
    Invoke the backend entry point named by the call.

    Numerical errors raised by the backend propagate unchanged.
    """
    getattr(backend, call.entry)(call)
