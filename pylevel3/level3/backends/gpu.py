"""
PyTorch backend for Level-3 operations.

Performance path for large problems, validated against the CPU reference.
Supports CUDA (Linux/Windows), plus the host CPU through PyTorch's own
kernels. MPS is rejected: Level-3 operands are float64/complex128 and MPS
has no double precision.

Operands are moved to the device, the operation is evaluated with dense
PyTorch primitives, and the result is copied back into the caller's buffer.
"""

from typing import Any
import numpy as np

from pylevel3.core.capabilities import (
    CAPABILITY_COMPLEX,
    CAPABILITY_FP64,
    CAPABILITY_GPU_NATIVE,
    CAPABILITY_REAL,
)
from pylevel3.level3._dispatch import KernelCall
from pylevel3.level3.backends._common import (
    check_triangular_diagonal,
    scale_output,
    write_back,
)


class TorchBackend:
    """
    Backend evaluating Level-3 operations with PyTorch.

    Symmetric, Hermitian and triangular operands are expanded from their
    authoritative triangle on the device; the caller's buffers are only read
    from that triangle and only written through the output view.
    """

    def __init__(self, device: str = 'cuda'):
        """
        Initialize the PyTorch backend.

        Args:
            device: 'cuda', 'cuda:N' or 'cpu'
        """
        import torch

        if device.startswith('cuda'):
            if not torch.cuda.is_available():
                raise RuntimeError(
                    "CUDA not available. Install PyTorch with CUDA support, "
                    "or use backend='cpu'."
                )
            self.device = torch.device(device)
            self.device_name = torch.cuda.get_device_properties(self.device).name
        elif device == 'cpu':
            self.device = torch.device('cpu')
            self.device_name = 'host'
        elif device == 'mps':
            raise RuntimeError(
                "MPS does not support float64. Level-3 operations run in double "
                "precision; use device='cpu' or backend='cpu'."
            )
        else:
            raise ValueError(
                f"Unknown device: {device!r}. Use 'cuda' or 'cpu'."
            )

    @property
    def name(self) -> str:
        return f'torch_{self.device.type}'

    def supports(self, capability: str) -> bool:
        if capability == CAPABILITY_GPU_NATIVE:
            return self.device.type == 'cuda'
        return capability in (CAPABILITY_REAL, CAPABILITY_COMPLEX, CAPABILITY_FP64)

    def synchronize(self) -> None:
        """Block until queued kernels finish (used by the phase timer)."""
        import torch

        if self.device.type == 'cuda':
            torch.cuda.synchronize(self.device)

    # === Entry points ===

    def gemm(self, call: KernelCall) -> None:
        a = _op(self._tensor(call.a), call.trans_a)
        b = _op(self._tensor(call.b), call.trans_b)
        self._finish(call, call.alpha * (a @ b))

    def symm(self, call: KernelCall) -> None:
        a = _symmetric(self._tensor(call.a), call.uplo, hermitian=False)
        self._side_multiply(call, a)

    def hemm(self, call: KernelCall) -> None:
        a = _symmetric(self._tensor(call.a), call.uplo, hermitian=True)
        self._side_multiply(call, a)

    def syrk(self, call: KernelCall) -> None:
        a = _op(self._tensor(call.a), call.trans_a)
        self._finish(call, call.alpha * (a @ a.T))

    def herk(self, call: KernelCall) -> None:
        a = _op(self._tensor(call.a), call.trans_a)
        self._finish(call, call.alpha * (a @ a.conj().T))

    def syr2k(self, call: KernelCall) -> None:
        a = _op(self._tensor(call.a), call.trans_a)
        b = _op(self._tensor(call.b), call.trans_a)
        self._finish(call, call.alpha * (a @ b.T) + call.alpha * (b @ a.T))

    def her2k(self, call: KernelCall) -> None:
        a = _op(self._tensor(call.a), call.trans_a)
        b = _op(self._tensor(call.b), call.trans_a)
        alpha = complex(call.alpha)
        self._finish(
            call,
            alpha * (a @ b.conj().T) + alpha.conjugate() * (b @ a.conj().T),
        )

    def trmm(self, call: KernelCall) -> None:
        t = _op(_triangular(self._tensor(call.a), call.uplo, call.diag), call.trans_a)
        b = self._tensor(call.b)
        product = t @ b if call.side == 'L' else b @ t
        # trmm has no beta and never reads C
        write_back(call, (call.alpha * product).resolve_conj().cpu().numpy())

    def trsm(self, call: KernelCall) -> None:
        import torch

        check_triangular_diagonal(call)
        t = _op(_triangular(self._tensor(call.a), call.uplo, call.diag), call.trans_a)
        # op() of an upper triangle is lower when transposed
        upper = (call.uplo == 'U') != (call.trans_a != 'N')
        b = call.alpha * self._tensor(call.b)
        x = torch.linalg.solve_triangular(
            t, b, upper=upper, left=call.side == 'L',
            unitriangular=call.diag == 'U',
        )
        write_back(call, x.resolve_conj().cpu().numpy())

    def scale(self, call: KernelCall) -> None:
        scale_output(call)

    # === Helpers ===

    def _tensor(self, array: np.ndarray) -> Any:
        import torch
        return torch.tensor(np.ascontiguousarray(array), device=self.device)

    def _side_multiply(self, call: KernelCall, a: Any) -> None:
        b = self._tensor(call.b)
        product = a @ b if call.side == 'L' else b @ a
        self._finish(call, call.alpha * product)

    def _finish(self, call: KernelCall, update: Any) -> None:
        """Add beta * C (skipped when beta is zero) and write back."""
        if call.beta != 0:
            update = update + call.beta * self._tensor(call.c)
        result = update.resolve_conj().cpu().numpy()
        if call.kind.value in ('herk', 'her2k'):
            result = result.copy()
            np.fill_diagonal(result, result.diagonal().real)
        write_back(call, result)


def _op(t: Any, trans: str) -> Any:
    if trans == 'T':
        return t.T
    if trans == 'C':
        return t.conj().T
    return t


def _triangular(t: Any, uplo: str, diag: str) -> Any:
    import torch
    tri = torch.triu(t) if uplo == 'U' else torch.tril(t)
    if diag == 'U':
        tri = tri.clone()
        tri.fill_diagonal_(1)
    return tri


def _symmetric(t: Any, uplo: str, hermitian: bool) -> Any:
    """Expand the authoritative triangle into the full matrix."""
    import torch
    if uplo == 'U':
        strict = torch.triu(t, diagonal=1)
    else:
        strict = torch.tril(t, diagonal=-1)
    mirror = strict.conj().T if hermitian else strict.T
    diag = torch.diagonal(t)
    if hermitian:
        diag = diag.real.to(t.dtype)
    return strict + mirror + torch.diag(diag)
