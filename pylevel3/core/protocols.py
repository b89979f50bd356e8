"""
Core protocols for PyLevel3.

These define structural interfaces that compute backends must satisfy.
We use Protocol (structural typing) rather than ABC (nominal typing) so that
any numeric engine (reference BLAS, vendor BLAS, a GPU library) can plug in
without inheriting from anything in this package.

Design Principles:
    - Minimal contracts: one entry point per operation kind
    - Capability-driven: use supports() for optional features
    - Backends never validate: every KernelCall they receive is well-formed
"""

from typing import Protocol, TYPE_CHECKING, runtime_checkable

if TYPE_CHECKING:
    from pylevel3.level3._dispatch import KernelCall


@runtime_checkable
class KernelBackend(Protocol):
    """
    Protocol for Level-3 compute backends.

    A backend receives fully resolved, column-major KernelCalls and writes
    the result into the call's output view. The domain (real/complex) is
    carried by call.domain and call.routine ('dgemm' vs 'zgemm'); each entry
    point serves both domains where the operation exists in both.

    Backends are stateless across calls. They report numerical failures by
    raising NumericalError (or a subclass); they never raise ValidationError.
    """

    @property
    def name(self) -> str:
        """
        Backend identifier.

        Convention: '{device}_{library}'
        Examples: 'cpu_blas', 'gpu_torch_cuda'
        """
        ...

    def supports(self, capability: str) -> bool:
        """
        Check if this backend supports a given capability.

        Unknown capabilities MUST return False, never raise.
        """
        ...

    def gemm(self, call: 'KernelCall') -> None: ...

    def symm(self, call: 'KernelCall') -> None: ...

    def hemm(self, call: 'KernelCall') -> None: ...

    def syrk(self, call: 'KernelCall') -> None: ...

    def herk(self, call: 'KernelCall') -> None: ...

    def syr2k(self, call: 'KernelCall') -> None: ...

    def her2k(self, call: 'KernelCall') -> None: ...

    def trmm(self, call: 'KernelCall') -> None: ...

    def trsm(self, call: 'KernelCall') -> None: ...

    def scale(self, call: 'KernelCall') -> None:
        """
        Scale (or zero-fill) the output without referencing any input.

        Used for every operation when alpha == 0.
        """
        ...
