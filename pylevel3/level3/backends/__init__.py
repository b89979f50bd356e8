"""
Level-3 backends.

Available backends:
    CPUBlasBackend: CPU reference implementation using SciPy's BLAS
    TorchBackend: PyTorch implementation (CUDA or host), imported lazily
"""

from pylevel3.level3.backends.cpu import CPUBlasBackend

__all__ = [
    "CPUBlasBackend",
]
