"""
Static descriptors for every legal (operation, domain) combination.

A descriptor fixes what an operation takes: its operands and which of them
are written, the flag categories it accepts, the structure of its `a`
operand, and which transpose values are legal in its domain. The registry
holds 15 entries: gemm, symm, syrk, syr2k, trmm and trsm in both domains,
and hemm, herk and her2k in the complex domain only.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pylevel3.core.exceptions import UnsupportedFlagError
from pylevel3.level3.design import Structure
from pylevel3.level3.flags import Domain, Transpose


class OperationKind(Enum):
    GEMM = 'gemm'
    SYMM = 'symm'
    HEMM = 'hemm'
    SYRK = 'syrk'
    HERK = 'herk'
    SYR2K = 'syr2k'
    HER2K = 'her2k'
    TRMM = 'trmm'
    TRSM = 'trsm'

    @property
    def complex_only(self) -> bool:
        return self in _COMPLEX_ONLY

    @property
    def is_rank_update(self) -> bool:
        """True for the rank-k / rank-2k updates, which write one triangle of C."""
        return self in _RANK_UPDATES

    @property
    def is_triangular(self) -> bool:
        return self in (OperationKind.TRMM, OperationKind.TRSM)


_COMPLEX_ONLY = frozenset({OperationKind.HEMM, OperationKind.HERK, OperationKind.HER2K})
_RANK_UPDATES = frozenset({
    OperationKind.SYRK, OperationKind.HERK, OperationKind.SYR2K, OperationKind.HER2K,
})


@dataclass(frozen=True)
class OperandRole:
    """One matrix operand of an operation: its name and access mode."""
    name: str
    access: str  # 'r' or 'rw'

    @property
    def is_written(self) -> bool:
        return self.access == 'rw'


@dataclass(frozen=True)
class OperationDescriptor:
    """
    Static description of one (operation, domain) combination.

    Attributes:
        kind: Operation kind
        domain: Numeric domain
        operands: Operand roles in call order
        flags: Flag categories the operation takes besides order
        structure: Structure assumed for operand `a`
        legal_transposes: Transpose values accepted for the transposable operand
        has_beta: Whether the operation takes a beta scalar
    """
    kind: OperationKind
    domain: Domain
    operands: tuple[OperandRole, ...]
    flags: tuple[str, ...]
    structure: Structure
    legal_transposes: frozenset[Transpose]
    has_beta: bool

    @property
    def routine(self) -> str:
        """BLAS routine name, e.g. 'dgemm' or 'zher2k'."""
        return f"{self.domain.prefix}{self.kind.value}"

    @property
    def output(self) -> OperandRole:
        return next(role for role in self.operands if role.is_written)

    @property
    def inputs(self) -> tuple[OperandRole, ...]:
        return tuple(role for role in self.operands if not role.is_written)

    def __str__(self) -> str:
        return self.routine


_A = OperandRole('a', 'r')
_B = OperandRole('b', 'r')
_B_RW = OperandRole('b', 'rw')
_C = OperandRole('c', 'rw')

_N = Transpose.NO_TRANS
_T = Transpose.TRANS
_H = Transpose.CONJ_TRANS


def _build_registry() -> dict[tuple[OperationKind, Domain], OperationDescriptor]:
    real_trans = frozenset({_N, _T})
    all_trans = frozenset({_N, _T, _H})
    herm_trans = frozenset({_N, _H})

    # kind -> (operands, flags, structure, {domain: legal transposes}, has_beta)
    table = {
        OperationKind.GEMM: (
            (_A, _B, _C), ('trans_a', 'trans_b'), Structure.GENERAL,
            {Domain.REAL: real_trans, Domain.COMPLEX: all_trans}, True,
        ),
        OperationKind.SYMM: (
            (_A, _B, _C), ('side', 'uplo'), Structure.SYMMETRIC,
            {Domain.REAL: frozenset({_N}), Domain.COMPLEX: frozenset({_N})}, True,
        ),
        OperationKind.HEMM: (
            (_A, _B, _C), ('side', 'uplo'), Structure.HERMITIAN,
            {Domain.COMPLEX: frozenset({_N})}, True,
        ),
        OperationKind.SYRK: (
            (_A, _C), ('uplo', 'trans'), Structure.GENERAL,
            {Domain.REAL: real_trans, Domain.COMPLEX: real_trans}, True,
        ),
        OperationKind.HERK: (
            (_A, _C), ('uplo', 'trans'), Structure.GENERAL,
            {Domain.COMPLEX: herm_trans}, True,
        ),
        OperationKind.SYR2K: (
            (_A, _B, _C), ('uplo', 'trans'), Structure.GENERAL,
            {Domain.REAL: real_trans, Domain.COMPLEX: real_trans}, True,
        ),
        OperationKind.HER2K: (
            (_A, _B, _C), ('uplo', 'trans'), Structure.GENERAL,
            {Domain.COMPLEX: herm_trans}, True,
        ),
        OperationKind.TRMM: (
            (_A, _B, _C), ('side', 'uplo', 'trans_a', 'diag'), Structure.TRIANGULAR,
            {Domain.REAL: real_trans, Domain.COMPLEX: all_trans}, False,
        ),
        OperationKind.TRSM: (
            (_A, _B_RW), ('side', 'uplo', 'trans_a', 'diag'), Structure.TRIANGULAR,
            {Domain.REAL: real_trans, Domain.COMPLEX: all_trans}, False,
        ),
    }

    registry = {}
    for kind, (operands, flags, structure, transposes, has_beta) in table.items():
        for domain, legal in transposes.items():
            registry[(kind, domain)] = OperationDescriptor(
                kind=kind,
                domain=domain,
                operands=operands,
                flags=flags,
                structure=structure,
                legal_transposes=legal,
                has_beta=has_beta,
            )
    return registry


DESCRIPTORS: dict[tuple[OperationKind, Domain], OperationDescriptor] = _build_registry()


def descriptor_for(kind: OperationKind, domain: Domain) -> OperationDescriptor:
    """
    Look up the descriptor for an operation in a domain.

    Raises:
        UnsupportedFlagError: If the operation does not exist in the domain
            (hemm, herk and her2k in the real domain)
    """
    try:
        return DESCRIPTORS[(kind, domain)]
    except KeyError:
        legal = tuple(d.value for (k, d) in DESCRIPTORS if k is kind)
        raise UnsupportedFlagError(
            f"{kind.value}: not defined in the {domain.value} domain "
            f"(legal domains: {', '.join(legal)})",
            flag='domain',
            value=domain.value,
            legal=legal,
        ) from None
