"""
Shape, flag and domain validation for Level-3 operations.

Runs before any backend is touched. Every rejection raises a specific
ValidationError subclass naming the operation and the offending values, so
no output buffer is ever mutated by a call that fails here.

Checks run in this order:
    1. domain    operand dtypes and alpha/beta agree with the operation
    2. flags     transpose/uplo/diag/side legal for the operation
    3. layout    strides agree with the declared storage order
    4. shapes    positive, square where structured, mutually compatible
    5. output    writable
    6. aliasing  the written operand overlaps no read-only operand

Validation does not depend on alpha or beta values: an alpha of zero does
not excuse a malformed operand.
"""

from __future__ import annotations

from typing import Mapping

from pylevel3.core.exceptions import (
    DomainMismatchError,
    ShapeError,
    UnsupportedFlagError,
)
from pylevel3.core.validation import (
    check_layout,
    check_no_overlap,
    check_positive_dims,
    check_square,
    check_writable,
)
from pylevel3.level3.descriptors import OperationDescriptor, OperationKind
from pylevel3.level3.design import MatrixView, ScalarValue, Structure
from pylevel3.level3.flags import Domain, Side


class ShapeValidator:
    """
    Validates one call against its OperationDescriptor.

    Stateless; a single instance can be shared across threads.
    """

    def validate(
        self,
        descriptor: OperationDescriptor,
        operands: Mapping[str, MatrixView],
        alpha: ScalarValue,
        beta: ScalarValue | None = None,
        *,
        side: Side | None = None,
    ) -> None:
        """
        Validate a call.

        Args:
            descriptor: The (operation, domain) being called
            operands: MatrixViews keyed by operand name ('a', 'b', 'c')
            alpha: Alpha scalar
            beta: Beta scalar (None for trmm/trsm)
            side: Side flag for symm/hemm/trmm/trsm

        Raises:
            DomainMismatchError: dtype or scalar domain disagrees
            UnsupportedFlagError: flag illegal for this operation/domain
            ShapeError: layout or dimension incompatibility
            ValidationError: output is read-only
            AliasingError: output overlaps an input
        """
        self._check_operands_present(descriptor, operands)
        self._check_domain(descriptor, operands, alpha, beta)
        self._check_flags(descriptor, operands, side)
        self._check_layout(descriptor, operands)
        self._check_shapes(descriptor, operands, side)
        self._check_output(descriptor, operands)

    # === Individual checks ===

    def _check_operands_present(
        self,
        descriptor: OperationDescriptor,
        operands: Mapping[str, MatrixView],
    ) -> None:
        expected = {role.name for role in descriptor.operands}
        if set(operands) != expected:
            raise ValueError(
                f"{descriptor.routine}: expected operands {sorted(expected)}, "
                f"got {sorted(operands)}"
            )

    def _check_domain(
        self,
        descriptor: OperationDescriptor,
        operands: Mapping[str, MatrixView],
        alpha: ScalarValue,
        beta: ScalarValue | None,
    ) -> None:
        op = descriptor.routine
        expected = descriptor.domain

        for role in descriptor.operands:
            view = operands[role.name]
            try:
                actual = Domain.from_dtype(view.buffer.dtype, view.name)
            except DomainMismatchError as e:
                raise DomainMismatchError(
                    f"{op}: {e}",
                    operation=op,
                    expected=expected.value,
                    actual=str(view.buffer.dtype),
                ) from None
            if actual is not expected:
                raise DomainMismatchError(
                    f"{op}: operand {view.name} has dtype {view.buffer.dtype}, "
                    f"expected {expected.dtype} for the {expected.value} domain",
                    operation=op,
                    expected=expected.value,
                    actual=str(view.buffer.dtype),
                )

        scalars = [('alpha', alpha)]
        if descriptor.has_beta:
            if beta is None:
                raise ValueError(f"{op}: beta is required")
            scalars.append(('beta', beta))
        for name, scalar in scalars:
            if scalar.domain is not expected:
                raise DomainMismatchError(
                    f"{op}: {name}={scalar} is a {scalar.domain.value} scalar, "
                    f"expected a {expected.value} scalar",
                    operation=op,
                    expected=expected.value,
                    actual=scalar.domain.value,
                )

        # herk scales by real alpha and beta; her2k by real beta
        real_valued = ()
        if descriptor.kind is OperationKind.HERK:
            real_valued = (('alpha', alpha), ('beta', beta))
        elif descriptor.kind is OperationKind.HER2K:
            real_valued = (('beta', beta),)
        for name, scalar in real_valued:
            if not scalar.is_real_valued:
                raise DomainMismatchError(
                    f"{op}: {name}={scalar} must have zero imaginary part "
                    f"to keep C Hermitian",
                    operation=op,
                    expected='real-valued complex',
                    actual=str(scalar),
                )

    def _check_flags(
        self,
        descriptor: OperationDescriptor,
        operands: Mapping[str, MatrixView],
        side: Side | None,
    ) -> None:
        op = descriptor.routine

        if 'side' in descriptor.flags and side is None:
            raise UnsupportedFlagError(
                f"{op}: side flag is required",
                flag='side', value=None, legal=Side.legal_values(),
            )

        for view in operands.values():
            if view.transpose not in descriptor.legal_transposes:
                legal = tuple(sorted(t.name for t in descriptor.legal_transposes))
                raise UnsupportedFlagError(
                    f"{op}: transpose {view.transpose.name} is not legal for "
                    f"operand {view.name} (legal: {', '.join(legal)})",
                    flag='transpose', value=view.transpose, legal=legal,
                )
            if view.structure.is_structured and view.half is None:
                raise UnsupportedFlagError(
                    f"{op}: {view.structure.value} operand {view.name} needs "
                    f"an uplo flag",
                    flag='uplo', value=None, legal=('UPPER', 'LOWER'),
                )
            if view.diag_unit and view.structure is not Structure.TRIANGULAR:
                raise UnsupportedFlagError(
                    f"{op}: unit diagonal is only meaningful for a triangular "
                    f"operand, {view.name} is {view.structure.value}",
                    flag='diag', value='UNIT', legal=('NON_UNIT',),
                )

        a = operands['a']
        if a.structure is not descriptor.structure:
            raise UnsupportedFlagError(
                f"{op}: operand a must be {descriptor.structure.value}, "
                f"got {a.structure.value}",
                flag='structure', value=a.structure.value,
                legal=(descriptor.structure.value,),
            )

    def _check_layout(
        self,
        descriptor: OperationDescriptor,
        operands: Mapping[str, MatrixView],
    ) -> None:
        op = descriptor.routine
        for view in operands.values():
            check_positive_dims(view.buffer, view.name, op)
            check_layout(view.buffer, view.name, op, view.order.is_row_major)
            if view.structure.is_structured:
                check_square(view.buffer, view.name, op)

    def _check_shapes(
        self,
        descriptor: OperationDescriptor,
        operands: Mapping[str, MatrixView],
        side: Side | None,
    ) -> None:
        kind = descriptor.kind
        op = descriptor.routine

        if kind is OperationKind.GEMM:
            self._check_gemm(op, operands['a'], operands['b'], operands['c'])
        elif kind in (OperationKind.SYMM, OperationKind.HEMM):
            self._check_side_multiply(op, side, operands['a'], operands['b'])
            self._check_same_shape(op, operands['b'], operands['c'])
        elif kind in (OperationKind.SYRK, OperationKind.HERK):
            self._check_rank_update(op, operands['a'], operands['c'])
        elif kind in (OperationKind.SYR2K, OperationKind.HER2K):
            self._check_same_shape(op, operands['a'], operands['b'])
            self._check_rank_update(op, operands['a'], operands['c'])
        elif kind is OperationKind.TRMM:
            self._check_side_multiply(op, side, operands['a'], operands['b'])
            self._check_same_shape(op, operands['b'], operands['c'])
        elif kind is OperationKind.TRSM:
            self._check_side_multiply(op, side, operands['a'], operands['b'])

    def _check_output(
        self,
        descriptor: OperationDescriptor,
        operands: Mapping[str, MatrixView],
    ) -> None:
        op = descriptor.routine
        out = operands[descriptor.output.name]
        check_writable(out.buffer, out.name)
        for role in descriptor.inputs:
            view = operands[role.name]
            check_no_overlap(out.buffer, out.name, view.buffer, view.name, op)

    # === Shape rules ===

    @staticmethod
    def _check_gemm(op: str, a: MatrixView, b: MatrixView, c: MatrixView) -> None:
        m, ka = a.op_shape
        kb, n = b.op_shape
        if ka != kb:
            raise ShapeError(
                f"{op}: inner dimensions differ, op(a) is {m}x{ka} and "
                f"op(b) is {kb}x{n}",
                operation=op,
                dims={'k_a': ka, 'k_b': kb},
            )
        if (c.rows, c.cols) != (m, n):
            raise ShapeError(
                f"{op}: c is {c.rows}x{c.cols}, expected {m}x{n} "
                f"from op(a) {m}x{ka} and op(b) {kb}x{n}",
                operation=op,
                dims={'m': m, 'n': n, 'c.rows': c.rows, 'c.cols': c.cols},
            )

    @staticmethod
    def _check_side_multiply(
        op: str, side: Side | None, a: MatrixView, b: MatrixView
    ) -> None:
        order = a.rows
        if side is Side.LEFT and order != b.rows:
            raise ShapeError(
                f"{op}: side=LEFT needs a of order m={b.rows}, got {order}x{order}",
                operation=op,
                dims={'a.order': order, 'm': b.rows},
            )
        if side is Side.RIGHT and order != b.cols:
            raise ShapeError(
                f"{op}: side=RIGHT needs a of order n={b.cols}, got {order}x{order}",
                operation=op,
                dims={'a.order': order, 'n': b.cols},
            )

    @staticmethod
    def _check_same_shape(op: str, first: MatrixView, second: MatrixView) -> None:
        if (first.rows, first.cols) != (second.rows, second.cols):
            raise ShapeError(
                f"{op}: {first.name} is {first.rows}x{first.cols} but "
                f"{second.name} is {second.rows}x{second.cols}",
                operation=op,
                dims={
                    f'{first.name}.rows': first.rows,
                    f'{first.name}.cols': first.cols,
                    f'{second.name}.rows': second.rows,
                    f'{second.name}.cols': second.cols,
                },
            )

    @staticmethod
    def _check_rank_update(op: str, a: MatrixView, c: MatrixView) -> None:
        n, k = a.op_shape
        if n != c.rows:
            raise ShapeError(
                f"{op}: c is {c.rows}x{c.cols} but op(a) is {n}x{k}; "
                f"n must agree",
                operation=op,
                dims={'n': c.rows, 'op(a).rows': n, 'k': k},
            )
