"""
Generic result container for all PyLevel3 operations.

Level-3 operations write their numerical result into a caller-owned buffer,
so the Result envelope does not carry the output matrix. It carries what the
contract layer decided: the resolved kernel call, which backend ran it, how
long each phase took, and any non-fatal warnings.

Design decisions:
    - Generic over parameter payload P for type safety
    - info dict for flexible metadata (operation, domain, routine)
    - timing is optional (don't burden unit tests)
    - Immutable (frozen=True)
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for a dispatched operation.

    Type Parameters:
        P: The payload type (KernelCall for Level-3 operations)

    Attributes:
        params: The resolved payload
        info: Structured metadata (operation, domain, routine, entry)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that executed the call
        warnings: Non-fatal issues encountered during the call

    Examples:
        >>> Result(
        ...     params=call,
        ...     info={'operation': 'gemm', 'domain': 'real', 'routine': 'dgemm'},
        ...     timing={'total_seconds': 0.001},
        ...     backend_name='cpu_blas'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)
