"""
PyLevel3: a validated BLAS Level-3 operation layer for Python.

Dense matrix-matrix primitives (gemm, symm, hemm, syrk, herk, syr2k, her2k,
trmm, trsm) over float64 and complex128 NumPy arrays, with CBLAS-compatible
flags and in-place output semantics. Computation is delegated to a
pluggable backend: SciPy's BLAS on the CPU, or PyTorch on CUDA.

Submodules:
    level3: The operations, flags, validator and dispatcher
    core: Exceptions, backend protocol, result envelope, timing
"""

__version__ = "0.1.0"

from pylevel3 import level3
from pylevel3.level3 import (
    Diag,
    Order,
    Side,
    Transpose,
    Uplo,
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
    "__version__",
    "level3",
    "gemm",
    "symm",
    "hemm",
    "syrk",
    "herk",
    "syr2k",
    "her2k",
    "trmm",
    "trsm",
    "Order",
    "Transpose",
    "Side",
    "Uplo",
    "Diag",
]
