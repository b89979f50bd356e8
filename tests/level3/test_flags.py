"""
Tests for the Level-3 flag vocabulary.

Validates:
    - CBLAS integer values of every flag
    - Parsing from members, integers and alias characters
    - Illegal values raise UnsupportedFlagError with diagnostics
    - Domain <-> dtype mapping
"""

import numpy as np
import pytest

from pylevel3.core.exceptions import DomainMismatchError, UnsupportedFlagError
from pylevel3.level3.flags import Diag, Domain, Order, Side, Transpose, Uplo, _Flag


# ═══════════════════════════════════════════════════════════════════════
# CBLAS values
# ═══════════════════════════════════════════════════════════════════════


class TestCblasValues:

    @pytest.mark.parametrize("member, value", [
        (Order.ROW_MAJOR, 101), (Order.COL_MAJOR, 102),
        (Transpose.NO_TRANS, 111), (Transpose.TRANS, 112), (Transpose.CONJ_TRANS, 113),
        (Uplo.UPPER, 121), (Uplo.LOWER, 122),
        (Diag.NON_UNIT, 131), (Diag.UNIT, 132),
        (Side.LEFT, 141), (Side.RIGHT, 142),
    ])
    def test_integer_value(self, member, value):
        assert int(member) == value

    def test_blas_chars(self):
        assert [t.blas_char for t in Transpose] == ['N', 'T', 'C']
        assert Uplo.UPPER.blas_char == 'U'
        assert Diag.UNIT.blas_char == 'U'
        assert Diag.NON_UNIT.blas_char == 'N'
        assert Side.RIGHT.blas_char == 'R'

    def test_flipped(self):
        assert Uplo.UPPER.flipped() is Uplo.LOWER
        assert Uplo.LOWER.flipped() is Uplo.UPPER
        assert Side.LEFT.flipped() is Side.RIGHT


# ═══════════════════════════════════════════════════════════════════════
# Parsing
# ═══════════════════════════════════════════════════════════════════════


class TestParse:

    def test_member_passes_through(self):
        assert Transpose.parse(Transpose.TRANS) is Transpose.TRANS

    def test_integer(self):
        assert Side.parse(142) is Side.RIGHT
        assert Uplo.parse(np.int32(121)) is Uplo.UPPER

    @pytest.mark.parametrize("alias", ['R', 'r', 'C', 'row_major'])
    def test_row_major_aliases(self, alias):
        assert Order.parse(alias) is Order.ROW_MAJOR

    @pytest.mark.parametrize("alias", ['F', 'col', 'COL_MAJOR'])
    def test_col_major_aliases(self, alias):
        assert Order.parse(alias) is Order.COL_MAJOR

    def test_transpose_chars(self):
        assert Transpose.parse('n') is Transpose.NO_TRANS
        assert Transpose.parse('T') is Transpose.TRANS
        assert Transpose.parse('C') is Transpose.CONJ_TRANS

    def test_diag_chars(self):
        assert Diag.parse('U') is Diag.UNIT
        assert Diag.parse('N') is Diag.NON_UNIT

    def test_unknown_char_rejected(self):
        with pytest.raises(UnsupportedFlagError) as exc_info:
            Uplo.parse('X')
        err = exc_info.value
        assert err.flag == 'uplo'
        assert err.value == 'X'
        assert err.legal == ('UPPER', 'LOWER')

    def test_out_of_range_integer_rejected(self):
        with pytest.raises(UnsupportedFlagError, match="trans_a"):
            Transpose.parse(114, 'trans_a')

    def test_value_of_another_category_rejected(self):
        with pytest.raises(UnsupportedFlagError):
            Side.parse(Uplo.UPPER)

    def test_bool_rejected(self):
        with pytest.raises(UnsupportedFlagError):
            Diag.parse(True)

    def test_none_rejected(self):
        with pytest.raises(UnsupportedFlagError):
            Order.parse(None)

    def test_flag_without_aliases_parses_integers_only(self):
        class Precision(_Flag):
            SINGLE = 1
            DOUBLE = 2

        assert Precision.parse(2) is Precision.DOUBLE
        with pytest.raises(UnsupportedFlagError) as exc_info:
            Precision.parse("d")
        assert exc_info.value.legal == ("SINGLE", "DOUBLE")


# ═══════════════════════════════════════════════════════════════════════
# Domain
# ═══════════════════════════════════════════════════════════════════════


class TestDomain:

    def test_dtypes(self):
        assert Domain.REAL.dtype == np.float64
        assert Domain.COMPLEX.dtype == np.complex128

    def test_prefixes(self):
        assert Domain.REAL.prefix == 'd'
        assert Domain.COMPLEX.prefix == 'z'

    def test_from_dtype(self):
        assert Domain.from_dtype(np.float64) is Domain.REAL
        assert Domain.from_dtype(np.dtype(np.complex128)) is Domain.COMPLEX

    @pytest.mark.parametrize("dtype", [np.float32, np.complex64, np.int64])
    def test_other_dtypes_rejected(self, dtype):
        with pytest.raises(DomainMismatchError) as exc_info:
            Domain.from_dtype(dtype, 'a')
        assert exc_info.value.actual == str(np.dtype(dtype))
