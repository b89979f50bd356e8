"""
BLAS Level-3 matrix-matrix operations.

Public API:
    gemm, symm, hemm, syrk, herk, syr2k, her2k, trmm, trsm

Each operation validates its operands and flags, resolves the call to a
column-major kernel invocation and runs it on a backend, writing the result
into the caller's output array. Operands are float64 (real domain) or
complex128 (complex domain); hemm, herk and her2k exist only in the complex
domain.

Example:
    >>> import numpy as np
    >>> from pylevel3.level3 import gemm
    >>> a = np.array([[1., 2.], [3., 4.]])
    >>> b = np.array([[5., 6.], [7., 8.]])
    >>> c = np.zeros((2, 2))
    >>> result = gemm('R', 'N', 'N', 1.0, a, b, 0.0, c)
    >>> result.info['routine']
    'dgemm'
"""

from pylevel3.level3.flags import Diag, Domain, Order, Side, Transpose, Uplo
from pylevel3.level3.design import MatrixView, ScalarValue, Structure
from pylevel3.level3.descriptors import (
    DESCRIPTORS,
    OperationDescriptor,
    OperationKind,
    descriptor_for,
)
from pylevel3.level3._validator import ShapeValidator
from pylevel3.level3._dispatch import KernelCall, OperationDispatcher, dispatch
from pylevel3.level3.solvers import (
    gemm,
    hemm,
    her2k,
    herk,
    symm,
    syr2k,
    syrk,
    trmm,
    trsm,
)

__all__ = [
    # Operations
    "gemm",
    "symm",
    "hemm",
    "syrk",
    "herk",
    "syr2k",
    "her2k",
    "trmm",
    "trsm",
    # Flags
    "Order",
    "Transpose",
    "Side",
    "Uplo",
    "Diag",
    "Domain",
    # Data model
    "MatrixView",
    "ScalarValue",
    "Structure",
    "OperationKind",
    "OperationDescriptor",
    "DESCRIPTORS",
    "descriptor_for",
    # Contract machinery
    "ShapeValidator",
    "OperationDispatcher",
    "KernelCall",
    "dispatch",
]
