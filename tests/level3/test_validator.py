"""
Tests for ShapeValidator.

Validates:
    - Domain checks on operand dtypes and alpha/beta
    - herk/her2k real-valued scalar requirements
    - Flag legality per (operation, domain)
    - Layout, positive-dimension and square checks
    - Per-family shape compatibility
    - Output writability and aliasing
    - Check order: domain errors win over shape errors
"""

import numpy as np
import pytest

from pylevel3.core.exceptions import (
    AliasingError,
    DomainMismatchError,
    ShapeError,
    UnsupportedFlagError,
    ValidationError,
)
from pylevel3.level3._validator import ShapeValidator
from pylevel3.level3.descriptors import OperationKind, descriptor_for
from pylevel3.level3.design import MatrixView, ScalarValue, Structure
from pylevel3.level3.flags import Domain, Order, Side, Transpose, Uplo


ROW = Order.ROW_MAJOR
ONE = ScalarValue.of_real(1.0)
ZERO = ScalarValue.of_real(0.0)
Z_ONE = ScalarValue.of_complex(1.0)


def view(array, name, **kwargs):
    kwargs.setdefault('order', ROW)
    return MatrixView.wrap(array, name, **kwargs)


def gemm_operands(a, b, c, trans_a=Transpose.NO_TRANS, trans_b=Transpose.NO_TRANS):
    return {
        'a': view(a, 'a', transpose=trans_a),
        'b': view(b, 'b', transpose=trans_b),
        'c': view(c, 'c'),
    }


@pytest.fixture
def validator():
    return ShapeValidator()


@pytest.fixture
def dgemm():
    return descriptor_for(OperationKind.GEMM, Domain.REAL)


# ═══════════════════════════════════════════════════════════════════════
# Domain
# ═══════════════════════════════════════════════════════════════════════


class TestDomain:

    def test_valid_gemm_passes(self, validator, dgemm):
        ops = gemm_operands(np.zeros((2, 3)), np.zeros((3, 4)), np.zeros((2, 4)))
        validator.validate(dgemm, ops, ONE, ZERO)

    def test_complex_operand_in_real_call(self, validator, dgemm):
        ops = gemm_operands(np.zeros((2, 2), dtype=complex), np.zeros((2, 2)),
                            np.zeros((2, 2)))
        with pytest.raises(DomainMismatchError) as exc_info:
            validator.validate(dgemm, ops, ONE, ZERO)
        assert exc_info.value.operation == 'dgemm'
        assert exc_info.value.expected == 'real'

    def test_float32_operand_rejected(self, validator, dgemm):
        ops = gemm_operands(np.zeros((2, 2), dtype=np.float32), np.zeros((2, 2)),
                            np.zeros((2, 2)))
        with pytest.raises(DomainMismatchError, match="float32"):
            validator.validate(dgemm, ops, ONE, ZERO)

    def test_complex_alpha_in_real_call(self, validator, dgemm):
        ops = gemm_operands(np.zeros((2, 2)), np.zeros((2, 2)), np.zeros((2, 2)))
        with pytest.raises(DomainMismatchError, match="alpha"):
            validator.validate(dgemm, ops, Z_ONE, ZERO)

    def test_real_beta_in_complex_call(self, validator):
        desc = descriptor_for(OperationKind.GEMM, Domain.COMPLEX)
        z = np.zeros((2, 2), dtype=complex)
        ops = gemm_operands(z, z.copy(), z.copy())
        with pytest.raises(DomainMismatchError, match="beta") as exc_info:
            validator.validate(desc, ops, Z_ONE, ZERO)
        assert exc_info.value.actual == 'real'

    def test_domain_checked_before_shapes(self, validator, dgemm):
        ops = gemm_operands(np.zeros((2, 3), dtype=complex), np.zeros((4, 4)),
                            np.zeros((2, 4)))
        with pytest.raises(DomainMismatchError):
            validator.validate(dgemm, ops, ONE, ZERO)

    def test_missing_beta(self, validator, dgemm):
        ops = gemm_operands(np.zeros((2, 2)), np.zeros((2, 2)), np.zeros((2, 2)))
        with pytest.raises(ValueError, match="beta"):
            validator.validate(dgemm, ops, ONE, None)


class TestHermitianScalars:

    def _herk_operands(self):
        return {
            'a': view(np.zeros((3, 2), dtype=complex), 'a'),
            'c': view(np.zeros((3, 3), dtype=complex), 'c',
                      structure=Structure.HERMITIAN, half=Uplo.UPPER),
        }

    def test_herk_real_valued_scalars_pass(self, validator):
        desc = descriptor_for(OperationKind.HERK, Domain.COMPLEX)
        validator.validate(desc, self._herk_operands(), Z_ONE,
                           ScalarValue.of_complex(0.5))

    def test_herk_complex_alpha_rejected(self, validator):
        desc = descriptor_for(OperationKind.HERK, Domain.COMPLEX)
        with pytest.raises(DomainMismatchError, match="alpha"):
            validator.validate(desc, self._herk_operands(),
                               ScalarValue.of_complex(1.0, 1.0), Z_ONE)

    def test_herk_complex_beta_rejected(self, validator):
        desc = descriptor_for(OperationKind.HERK, Domain.COMPLEX)
        with pytest.raises(DomainMismatchError, match="beta"):
            validator.validate(desc, self._herk_operands(), Z_ONE,
                               ScalarValue.of_complex(0.0, 2.0))

    def test_her2k_complex_alpha_allowed(self, validator):
        desc = descriptor_for(OperationKind.HER2K, Domain.COMPLEX)
        ops = self._herk_operands()
        ops['b'] = view(np.zeros((3, 2), dtype=complex), 'b')
        validator.validate(desc, ops, ScalarValue.of_complex(1.0, -2.0), Z_ONE)

    def test_her2k_complex_beta_rejected(self, validator):
        desc = descriptor_for(OperationKind.HER2K, Domain.COMPLEX)
        ops = self._herk_operands()
        ops['b'] = view(np.zeros((3, 2), dtype=complex), 'b')
        with pytest.raises(DomainMismatchError, match="beta"):
            validator.validate(desc, ops, Z_ONE, ScalarValue.of_complex(1.0, 1.0))


# ═══════════════════════════════════════════════════════════════════════
# Flags
# ═══════════════════════════════════════════════════════════════════════


class TestFlags:

    def test_conj_trans_illegal_in_real_domain(self, validator, dgemm):
        ops = gemm_operands(np.zeros((2, 2)), np.zeros((2, 2)), np.zeros((2, 2)),
                            trans_a=Transpose.CONJ_TRANS)
        with pytest.raises(UnsupportedFlagError) as exc_info:
            validator.validate(dgemm, ops, ONE, ZERO)
        assert exc_info.value.flag == 'transpose'
        assert exc_info.value.legal == ('NO_TRANS', 'TRANS')

    def test_trans_illegal_for_herk(self, validator):
        desc = descriptor_for(OperationKind.HERK, Domain.COMPLEX)
        ops = {
            'a': view(np.zeros((2, 3), dtype=complex), 'a', transpose=Transpose.TRANS),
            'c': view(np.zeros((3, 3), dtype=complex), 'c',
                      structure=Structure.HERMITIAN, half=Uplo.LOWER),
        }
        with pytest.raises(UnsupportedFlagError):
            validator.validate(desc, ops, Z_ONE, Z_ONE)

    def test_side_required(self, validator):
        desc = descriptor_for(OperationKind.SYMM, Domain.REAL)
        ops = {
            'a': view(np.eye(2), 'a', structure=Structure.SYMMETRIC, half=Uplo.UPPER),
            'b': view(np.zeros((2, 3)), 'b'),
            'c': view(np.zeros((2, 3)), 'c'),
        }
        with pytest.raises(UnsupportedFlagError, match="side"):
            validator.validate(desc, ops, ONE, ZERO, side=None)

    def test_wrong_structure_for_a(self, validator):
        desc = descriptor_for(OperationKind.HEMM, Domain.COMPLEX)
        z = np.zeros((2, 2), dtype=complex)
        ops = {
            'a': view(z, 'a', structure=Structure.SYMMETRIC, half=Uplo.UPPER),
            'b': view(z.copy(), 'b'),
            'c': view(z.copy(), 'c'),
        }
        with pytest.raises(UnsupportedFlagError, match="hermitian"):
            validator.validate(desc, ops, Z_ONE, Z_ONE, side=Side.LEFT)


# ═══════════════════════════════════════════════════════════════════════
# Layout and shapes
# ═══════════════════════════════════════════════════════════════════════


class TestLayout:

    def test_fortran_array_declared_row_major(self, validator, dgemm):
        ops = gemm_operands(np.zeros((2, 2), order='F'), np.zeros((2, 2)),
                            np.zeros((2, 2)))
        with pytest.raises(ShapeError, match="row-major"):
            validator.validate(dgemm, ops, ONE, ZERO)

    def test_submatrix_views_accepted(self, validator, dgemm):
        big = np.zeros((6, 6))
        ops = gemm_operands(big[0:2, 0:3], big[2:5, 0:4], np.zeros((2, 4)))
        validator.validate(dgemm, ops, ONE, ZERO)

    def test_zero_dimension_rejected(self, validator, dgemm):
        ops = gemm_operands(np.zeros((0, 3)), np.zeros((3, 4)), np.zeros((0, 4)))
        with pytest.raises(ShapeError, match="non-positive"):
            validator.validate(dgemm, ops, ONE, ZERO)

    def test_structured_operand_must_be_square(self, validator):
        desc = descriptor_for(OperationKind.TRSM, Domain.REAL)
        ops = {
            'a': view(np.zeros((2, 3)), 'a', structure=Structure.TRIANGULAR,
                      half=Uplo.LOWER),
            'b': view(np.zeros((2, 2)), 'b'),
        }
        with pytest.raises(ShapeError, match="square"):
            validator.validate(desc, ops, ONE, side=Side.LEFT)


class TestShapes:

    def test_gemm_inner_dimension(self, validator, dgemm):
        ops = gemm_operands(np.zeros((2, 3)), np.zeros((4, 2)), np.zeros((2, 2)))
        with pytest.raises(ShapeError) as exc_info:
            validator.validate(dgemm, ops, ONE, ZERO)
        assert exc_info.value.dims == {'k_a': 3, 'k_b': 4}

    def test_gemm_transposed_inner_dimension(self, validator, dgemm):
        ops = gemm_operands(np.zeros((3, 2)), np.zeros((3, 4)), np.zeros((2, 4)),
                            trans_a=Transpose.TRANS)
        validator.validate(dgemm, ops, ONE, ZERO)

    def test_gemm_output_shape(self, validator, dgemm):
        ops = gemm_operands(np.zeros((2, 3)), np.zeros((3, 4)), np.zeros((4, 2)))
        with pytest.raises(ShapeError, match="expected 2x4"):
            validator.validate(dgemm, ops, ONE, ZERO)

    def test_symm_side_determines_order_of_a(self, validator):
        desc = descriptor_for(OperationKind.SYMM, Domain.REAL)
        ops = {
            'a': view(np.eye(3), 'a', structure=Structure.SYMMETRIC, half=Uplo.UPPER),
            'b': view(np.zeros((2, 3)), 'b'),
            'c': view(np.zeros((2, 3)), 'c'),
        }
        validator.validate(desc, ops, ONE, ZERO, side=Side.RIGHT)
        with pytest.raises(ShapeError, match="side=LEFT"):
            validator.validate(desc, ops, ONE, ZERO, side=Side.LEFT)

    def test_syr2k_a_and_b_must_match(self, validator):
        desc = descriptor_for(OperationKind.SYR2K, Domain.REAL)
        ops = {
            'a': view(np.zeros((3, 2)), 'a'),
            'b': view(np.zeros((3, 4)), 'b'),
            'c': view(np.zeros((3, 3)), 'c', structure=Structure.SYMMETRIC,
                      half=Uplo.UPPER),
        }
        with pytest.raises(ShapeError):
            validator.validate(desc, ops, ONE, ZERO)

    def test_syrk_n_must_agree(self, validator):
        desc = descriptor_for(OperationKind.SYRK, Domain.REAL)
        ops = {
            'a': view(np.zeros((3, 2)), 'a', transpose=Transpose.TRANS),
            'c': view(np.zeros((3, 3)), 'c', structure=Structure.SYMMETRIC,
                      half=Uplo.UPPER),
        }
        with pytest.raises(ShapeError, match="n must agree"):
            validator.validate(desc, ops, ONE, ZERO)

    def test_trmm_c_must_match_b(self, validator):
        desc = descriptor_for(OperationKind.TRMM, Domain.REAL)
        ops = {
            'a': view(np.eye(2), 'a', structure=Structure.TRIANGULAR, half=Uplo.UPPER),
            'b': view(np.zeros((2, 3)), 'b'),
            'c': view(np.zeros((3, 2)), 'c'),
        }
        with pytest.raises(ShapeError):
            validator.validate(desc, ops, ONE, side=Side.LEFT)

    def test_validation_ignores_alpha_zero(self, validator, dgemm):
        ops = gemm_operands(np.zeros((2, 3)), np.zeros((4, 2)), np.zeros((2, 2)))
        with pytest.raises(ShapeError):
            validator.validate(dgemm, ops, ZERO, ONE)


# ═══════════════════════════════════════════════════════════════════════
# Output
# ═══════════════════════════════════════════════════════════════════════


class TestOutput:

    def test_read_only_output(self, validator, dgemm):
        c = np.zeros((2, 2))
        c.flags.writeable = False
        ops = gemm_operands(np.zeros((2, 2)), np.zeros((2, 2)), c)
        with pytest.raises(ValidationError, match="read-only"):
            validator.validate(dgemm, ops, ONE, ZERO)

    def test_output_aliasing_input(self, validator, dgemm):
        c = np.zeros((2, 2))
        ops = gemm_operands(c, np.zeros((2, 2)), c)
        with pytest.raises(AliasingError) as exc_info:
            validator.validate(dgemm, ops, ONE, ZERO)
        assert exc_info.value.operands == ('c', 'a')

    def test_inputs_may_alias_each_other(self, validator, dgemm):
        a = np.zeros((2, 2))
        ops = gemm_operands(a, a, np.zeros((2, 2)))
        validator.validate(dgemm, ops, ONE, ZERO)

    def test_trmm_output_must_not_alias_b(self, validator):
        desc = descriptor_for(OperationKind.TRMM, Domain.REAL)
        b = np.zeros((2, 3))
        ops = {
            'a': view(np.eye(2), 'a', structure=Structure.TRIANGULAR, half=Uplo.UPPER),
            'b': view(b, 'b'),
            'c': view(b, 'c'),
        }
        with pytest.raises(AliasingError):
            validator.validate(desc, ops, ONE, side=Side.LEFT)

    def test_missing_operand(self, validator, dgemm):
        with pytest.raises(ValueError, match="expected operands"):
            validator.validate(dgemm, {'a': view(np.zeros((2, 2)), 'a')}, ONE, ZERO)
