"""
Helpers shared by the CPU and PyTorch backends.

Both backends compute a full result matrix and then copy it into the
caller's buffer through the KernelCall's column-major output view. For
rank-k and rank-2k updates only the triangle named by call.uplo is copied:
the other triangle of C is never referenced, read or written.
"""

from typing import Any
import numpy as np
from numpy.typing import NDArray

from pylevel3.core.exceptions import SingularMatrixError
from pylevel3.level3._dispatch import KernelCall
from pylevel3.level3.descriptors import OperationKind


# Integer codes used by scipy.linalg.blas keyword arguments
TRANS_CODES = {'N': 0, 'T': 1, 'C': 2}
SIDE_CODES = {'L': 0, 'R': 1}


def triangle(n: int, uplo: str) -> tuple[NDArray[np.intp], NDArray[np.intp]]:
    """Index arrays for the upper ('U') or lower ('L') triangle of an n x n matrix."""
    return np.triu_indices(n) if uplo == 'U' else np.tril_indices(n)


def write_back(call: KernelCall, result: NDArray[Any]) -> None:
    """Copy a computed column-major result into the call's output view."""
    out = call.out
    if call.kind.is_rank_update:
        idx = triangle(call.n, call.uplo)
        out[idx] = result[idx]
    else:
        out[...] = result


def scale_output(call: KernelCall) -> None:
    """
    Apply the alpha == 0 path: output := beta * output.

    The inputs are never referenced. beta == 0 assigns zeros instead of
    multiplying, so NaN or uninitialised memory in the output is discarded.
    trmm and trsm have no beta; their output becomes zero.
    """
    out = call.out
    if call.kind.is_triangular:
        out[...] = 0
        return

    beta = call.beta
    if beta == 1:
        return

    hermitian = call.kind in (OperationKind.HERK, OperationKind.HER2K)
    if call.kind.is_rank_update:
        idx = triangle(call.n, call.uplo)
        out[idx] = 0 if beta == 0 else beta * out[idx]
    else:
        if beta == 0:
            out[...] = 0
        else:
            out *= beta

    if hermitian:
        diag = np.diag_indices(call.n)
        out[diag] = out[diag].real


def check_triangular_diagonal(call: KernelCall) -> None:
    """
    Raise SingularMatrixError if a non-unit triangular a has a zero pivot.

    Follows the LAPACK ?trtrs convention: only exact zeros are singular;
    near-singularity is left to the caller.
    """
    if call.diag == 'U':
        return
    diagonal = np.diagonal(call.a)
    zeros = np.flatnonzero(diagonal == 0)
    if zeros.size:
        index = int(zeros[0])
        raise SingularMatrixError(
            f"{call.routine}: triangular matrix a is singular, "
            f"a[{index}, {index}] is exactly zero",
            matrix_name='a',
            index=index,
        )
