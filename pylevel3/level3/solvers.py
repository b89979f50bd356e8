"""
Public Level-3 operations and backend selection.

Every operation follows the same pipeline:

    1. parse flags          closed enumerations, UnsupportedFlagError otherwise
    2. wrap operands        MatrixView per array, ScalarValue per scalar
    3. select backend       descriptor from the output dtype, capability check
    4. validate             ShapeValidator, nothing has been written yet
    5. resolve              OperationDispatcher -> column-major KernelCall
    6. execute              backend entry point writes the output in place

Steps 1-5 never touch array contents, so any ValidationError leaves every
buffer exactly as it was. Errors raised in step 6 come from the backend and
propagate unchanged.
"""

from typing import Any, Literal, Union
import warnings

import numpy as np

from pylevel3.core.capabilities import CAPABILITY_COMPLEX, CAPABILITY_REAL
from pylevel3.core.compute.device import select_device
from pylevel3.core.compute.timing import Timer
from pylevel3.core.exceptions import DomainMismatchError, UnsupportedFlagError
from pylevel3.core.protocols import KernelBackend
from pylevel3.core.result import Result
from pylevel3.level3._dispatch import KernelCall, OperationDispatcher, dispatch
from pylevel3.level3._validator import ShapeValidator
from pylevel3.level3.backends.cpu import CPUBlasBackend
from pylevel3.level3.descriptors import (
    OperationDescriptor,
    OperationKind,
    descriptor_for,
)
from pylevel3.level3.design import MatrixView, ScalarValue, Structure
from pylevel3.level3.flags import Diag, Domain, Order, Side, Transpose, Uplo


BackendChoice = Union[Literal['auto', 'cpu', 'gpu'], KernelBackend]

_VALIDATOR = ShapeValidator()
_DISPATCHER = OperationDispatcher()


# === General matrix multiply ===

def gemm(
    order: Any,
    trans_a: Any,
    trans_b: Any,
    alpha: Any,
    a: np.ndarray,
    b: np.ndarray,
    beta: Any,
    c: np.ndarray,
    *,
    backend: BackendChoice = 'auto',
) -> Result[KernelCall]:
    """
    General matrix multiply: C := alpha*op(A)*op(B) + beta*C.

    op(A) is m x k, op(B) is k x n and C is m x n.

    Args:
        order: Storage order of all operands ('C'/'R' row-major,
            'F' column-major, or an Order member)
        trans_a: op() applied to A ('N', 'T', 'C')
        trans_b: op() applied to B ('N', 'T', 'C')
        alpha: Scalar multiplying op(A)*op(B)
        a: Matrix A
        b: Matrix B
        beta: Scalar multiplying C. When zero, C is never read.
        c: Output matrix, overwritten in place
        backend: 'auto', 'cpu', 'gpu' or a KernelBackend instance

    Returns:
        Result whose params is the resolved KernelCall

    Raises:
        ShapeError: If op(A), op(B) and C disagree on m, n or k
        DomainMismatchError: If dtypes or scalars disagree on the domain
        UnsupportedFlagError: If a flag value is illegal

    Example:
        >>> a = np.array([[1., 2.], [3., 4.]])
        >>> b = np.array([[5., 6.], [7., 8.]])
        >>> c = np.zeros((2, 2))
        >>> _ = gemm('R', 'N', 'N', 1.0, a, b, 0.0, c)
        >>> c
        array([[19., 22.],
               [43., 50.]])
    """
    order = Order.parse(order)
    operands = {
        'a': MatrixView.wrap(a, 'a', order=order,
                             transpose=Transpose.parse(trans_a, 'trans_a')),
        'b': MatrixView.wrap(b, 'b', order=order,
                             transpose=Transpose.parse(trans_b, 'trans_b')),
        'c': MatrixView.wrap(c, 'c', order=order),
    }
    return _run(OperationKind.GEMM, operands, alpha, beta, backend=backend)


# === Symmetric / Hermitian multiply ===

def symm(
    order: Any,
    side: Any,
    uplo: Any,
    alpha: Any,
    a: np.ndarray,
    b: np.ndarray,
    beta: Any,
    c: np.ndarray,
    *,
    backend: BackendChoice = 'auto',
) -> Result[KernelCall]:
    """
    Symmetric matrix multiply.

    C := alpha*A*B + beta*C (side='L') or C := alpha*B*A + beta*C (side='R'),
    where A is symmetric and only its `uplo` triangle is read. B and C are
    m x n; A is m x m for side='L' and n x n for side='R'.
    """
    return _structured_multiply(
        OperationKind.SYMM, Structure.SYMMETRIC,
        order, side, uplo, alpha, a, b, beta, c, backend,
    )


def hemm(
    order: Any,
    side: Any,
    uplo: Any,
    alpha: Any,
    a: np.ndarray,
    b: np.ndarray,
    beta: Any,
    c: np.ndarray,
    *,
    backend: BackendChoice = 'auto',
) -> Result[KernelCall]:
    """
    Hermitian matrix multiply (complex domain only).

    As symm, with A Hermitian. The imaginary parts of A's diagonal are
    assumed zero and never read.
    """
    return _structured_multiply(
        OperationKind.HEMM, Structure.HERMITIAN,
        order, side, uplo, alpha, a, b, beta, c, backend,
    )


# === Rank-k updates ===

def syrk(
    order: Any,
    uplo: Any,
    trans: Any,
    alpha: Any,
    a: np.ndarray,
    beta: Any,
    c: np.ndarray,
    *,
    backend: BackendChoice = 'auto',
) -> Result[KernelCall]:
    """
    Symmetric rank-k update.

    C := alpha*A*A' + beta*C (trans='N', A is n x k) or
    C := alpha*A'*A + beta*C (trans='T', A is k x n).
    Only the `uplo` triangle of C is read or written.
    """
    return _rank_update(
        OperationKind.SYRK, Structure.SYMMETRIC,
        order, uplo, trans, alpha, a, None, beta, c, backend,
    )


def herk(
    order: Any,
    uplo: Any,
    trans: Any,
    alpha: Any,
    a: np.ndarray,
    beta: Any,
    c: np.ndarray,
    *,
    backend: BackendChoice = 'auto',
) -> Result[KernelCall]:
    """
    Hermitian rank-k update (complex domain only).

    C := alpha*A*A^H + beta*C (trans='N') or C := alpha*A^H*A + beta*C
    (trans='C'). alpha and beta must be real-valued. The imaginary parts of
    C's diagonal are set to zero.
    """
    return _rank_update(
        OperationKind.HERK, Structure.HERMITIAN,
        order, uplo, trans, alpha, a, None, beta, c, backend,
    )


def syr2k(
    order: Any,
    uplo: Any,
    trans: Any,
    alpha: Any,
    a: np.ndarray,
    b: np.ndarray,
    beta: Any,
    c: np.ndarray,
    *,
    backend: BackendChoice = 'auto',
) -> Result[KernelCall]:
    """
    Symmetric rank-2k update.

    C := alpha*A*B' + alpha*B*A' + beta*C (trans='N') or
    C := alpha*A'*B + alpha*B'*A + beta*C (trans='T').
    A and B have identical shapes.
    """
    return _rank_update(
        OperationKind.SYR2K, Structure.SYMMETRIC,
        order, uplo, trans, alpha, a, b, beta, c, backend,
    )


def her2k(
    order: Any,
    uplo: Any,
    trans: Any,
    alpha: Any,
    a: np.ndarray,
    b: np.ndarray,
    beta: Any,
    c: np.ndarray,
    *,
    backend: BackendChoice = 'auto',
) -> Result[KernelCall]:
    """
    Hermitian rank-2k update (complex domain only).

    C := alpha*A*B^H + conj(alpha)*B*A^H + beta*C (trans='N') or
    C := alpha*A^H*B + conj(alpha)*B^H*A + beta*C (trans='C').
    beta must be real-valued.
    """
    return _rank_update(
        OperationKind.HER2K, Structure.HERMITIAN,
        order, uplo, trans, alpha, a, b, beta, c, backend,
    )


# === Triangular multiply / solve ===

def trmm(
    order: Any,
    side: Any,
    uplo: Any,
    trans_a: Any,
    diag: Any,
    alpha: Any,
    a: np.ndarray,
    b: np.ndarray,
    c: np.ndarray,
    *,
    backend: BackendChoice = 'auto',
) -> Result[KernelCall]:
    """
    Triangular matrix multiply into a separate output.

    C := alpha*op(A)*B (side='L') or C := alpha*B*op(A) (side='R').
    B is left untouched; C must have B's shape and must not overlap it.
    """
    order = Order.parse(order)
    operands = {
        'a': _triangular_view(a, order, uplo, trans_a, diag),
        'b': MatrixView.wrap(b, 'b', order=order),
        'c': MatrixView.wrap(c, 'c', order=order),
    }
    return _run(OperationKind.TRMM, operands, alpha, None,
                side=Side.parse(side), backend=backend)


def trsm(
    order: Any,
    side: Any,
    uplo: Any,
    trans_a: Any,
    diag: Any,
    alpha: Any,
    a: np.ndarray,
    b: np.ndarray,
    *,
    backend: BackendChoice = 'auto',
) -> Result[KernelCall]:
    """
    Triangular solve, overwriting B with the solution X.

    Solves op(A)*X = alpha*B (side='L') or X*op(A) = alpha*B (side='R').
    A is not checked for singularity here; the backend reports an exactly
    singular A with SingularMatrixError.

    Example:
        >>> a = np.array([[2., 0.], [1., 3.]])
        >>> b = np.array([[4.], [5.]])
        >>> _ = trsm('R', 'L', 'L', 'N', 'N', 1.0, a, b)
        >>> b
        array([[2.],
               [1.]])
    """
    order = Order.parse(order)
    operands = {
        'a': _triangular_view(a, order, uplo, trans_a, diag),
        'b': MatrixView.wrap(b, 'b', order=order),
    }
    return _run(OperationKind.TRSM, operands, alpha, None,
                side=Side.parse(side), backend=backend)


# === Shared plumbing ===

def _structured_multiply(
    kind: OperationKind,
    structure: Structure,
    order: Any,
    side: Any,
    uplo: Any,
    alpha: Any,
    a: np.ndarray,
    b: np.ndarray,
    beta: Any,
    c: np.ndarray,
    backend: BackendChoice,
) -> Result[KernelCall]:
    order = Order.parse(order)
    operands = {
        'a': MatrixView.wrap(a, 'a', order=order, structure=structure,
                             half=Uplo.parse(uplo)),
        'b': MatrixView.wrap(b, 'b', order=order),
        'c': MatrixView.wrap(c, 'c', order=order),
    }
    return _run(kind, operands, alpha, beta, side=Side.parse(side), backend=backend)


def _rank_update(
    kind: OperationKind,
    structure: Structure,
    order: Any,
    uplo: Any,
    trans: Any,
    alpha: Any,
    a: np.ndarray,
    b: np.ndarray | None,
    beta: Any,
    c: np.ndarray,
    backend: BackendChoice,
) -> Result[KernelCall]:
    order = Order.parse(order)
    trans = Transpose.parse(trans, 'trans')
    operands = {
        'a': MatrixView.wrap(a, 'a', order=order, transpose=trans),
        'c': MatrixView.wrap(c, 'c', order=order, structure=structure,
                             half=Uplo.parse(uplo)),
    }
    if b is not None:
        operands['b'] = MatrixView.wrap(b, 'b', order=order, transpose=trans)
    return _run(kind, operands, alpha, beta, backend=backend)


def _triangular_view(
    a: np.ndarray, order: Order, uplo: Any, trans_a: Any, diag: Any
) -> MatrixView:
    return MatrixView.wrap(
        a, 'a', order=order,
        transpose=Transpose.parse(trans_a, 'trans_a'),
        structure=Structure.TRIANGULAR,
        half=Uplo.parse(uplo),
        diag_unit=Diag.parse(diag) is Diag.UNIT,
    )


def _run(
    kind: OperationKind,
    operands: dict[str, MatrixView],
    alpha: Any,
    beta: Any,
    *,
    side: Side | None = None,
    backend: BackendChoice,
) -> Result[KernelCall]:
    """Validate, resolve and execute one call."""
    descriptor = descriptor_for(kind, _call_domain(kind, operands))
    backend_impl = _get_backend(backend, descriptor)

    timer = Timer(sync=getattr(backend_impl, 'synchronize', None))
    timer.start()

    with timer.section('validate'):
        alpha_s = ScalarValue.coerce(alpha, 'alpha')
        beta_s = ScalarValue.coerce(beta, 'beta') if descriptor.has_beta else None
        _VALIDATOR.validate(descriptor, operands, alpha_s, beta_s, side=side)

    with timer.section('resolve'):
        call = _DISPATCHER.resolve(descriptor, operands, alpha_s, beta_s, side=side)

    warnings_list = _collect_warnings(descriptor, operands, alpha_s, beta_s)

    with timer.section('execute'):
        dispatch(backend_impl, call)

    timer.stop()

    info: dict[str, Any] = {
        'operation': kind.value,
        'domain': descriptor.domain.value,
        'routine': descriptor.routine,
        'entry': call.entry,
        'order': operands['a'].order.name,
    }

    return Result(
        params=call,
        info=info,
        timing=timer.result(),
        backend_name=backend_impl.name,
        warnings=tuple(warnings_list),
    )


def _call_domain(kind: OperationKind, operands: dict[str, MatrixView]) -> Domain:
    """The call's domain, taken from the operand it writes."""
    out = operands['b'] if kind is OperationKind.TRSM else operands['c']
    try:
        return Domain.from_dtype(out.buffer.dtype, out.name)
    except DomainMismatchError as e:
        raise DomainMismatchError(
            f"{kind.value}: {e}",
            operation=kind.value,
            expected=e.expected,
            actual=e.actual,
        ) from None


def _collect_warnings(
    descriptor: OperationDescriptor,
    operands: dict[str, MatrixView],
    alpha: ScalarValue,
    beta: ScalarValue | None,
) -> list[str]:
    """Non-fatal conditions worth telling the caller about."""
    found = []
    if descriptor.kind in (OperationKind.HERK, OperationKind.HER2K):
        quick_return = alpha.is_zero and beta.is_one
        if not beta.is_zero and not quick_return:
            c = operands['c'].buffer
            if np.any(np.diagonal(c).imag != 0):
                found.append(
                    f"{descriptor.routine}: imaginary parts of c's diagonal are "
                    f"discarded; a Hermitian matrix has a real diagonal"
                )
    for message in found:
        warnings.warn(message, RuntimeWarning, stacklevel=5)
    return found


def _get_backend(choice: BackendChoice, descriptor: OperationDescriptor) -> KernelBackend:
    """
    Select and instantiate the appropriate backend.

    'auto' uses the CPU reference backend: results land in host memory, so a
    GPU only pays off when explicitly requested.

    Raises:
        ValueError: If an unknown backend name is given
        RuntimeError: If 'gpu' is requested but unavailable
        UnsupportedFlagError: If the backend cannot compute in the domain
    """
    if isinstance(choice, str):
        if choice in ('auto', 'cpu'):
            backend = CPUBlasBackend()
        elif choice == 'gpu':
            from pylevel3.level3.backends.gpu import TorchBackend
            backend = TorchBackend(device=select_device('gpu').torch_device)
        else:
            raise ValueError(f"Unknown backend: {choice!r}")
    elif isinstance(choice, KernelBackend):
        backend = choice
    else:
        raise ValueError(
            f"backend must be 'auto', 'cpu', 'gpu' or a KernelBackend, "
            f"got {type(choice).__name__}"
        )

    capability = (
        CAPABILITY_REAL if descriptor.domain is Domain.REAL else CAPABILITY_COMPLEX
    )
    if not backend.supports(capability):
        raise UnsupportedFlagError(
            f"{descriptor.routine}: backend {backend.name!r} does not support "
            f"the {descriptor.domain.value} domain",
            flag='domain',
            value=descriptor.domain.value,
        )
    return backend
