"""
Operand descriptors for Level-3 operations.

MatrixView wraps one caller-owned 2D array together with the flags that
say how the operation should interpret it. It never copies: canonical()
returns a column-major NumPy *view* of the same memory, which is what the
backends read from and write into.

ScalarValue is the tagged real/complex scalar used for alpha and beta.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from numbers import Complex, Real
from typing import Any
import numpy as np
from numpy.typing import NDArray

from pylevel3.core.exceptions import ValidationError
from pylevel3.core.validation import check_matrix
from pylevel3.level3.flags import Domain, Order, Transpose, Uplo


class Structure(Enum):
    """Mathematical structure an operation assumes for an operand."""
    GENERAL = 'general'
    SYMMETRIC = 'symmetric'
    HERMITIAN = 'hermitian'
    TRIANGULAR = 'triangular'

    @property
    def is_structured(self) -> bool:
        return self is not Structure.GENERAL


@dataclass(frozen=True, eq=False)
class MatrixView:
    """
    Non-owning descriptor of one matrix operand.

    Construction:
        MatrixView.wrap(array, 'a', order=Order.ROW_MAJOR)

    Attributes:
        buffer: The caller's 2D array (never copied)
        name: Operand name used in error messages ('a', 'b', 'c')
        order: Declared storage order
        transpose: How the operation interprets the operand
        structure: General, symmetric, Hermitian or triangular
        half: Authoritative triangle for structured operands
        diag_unit: True if the diagonal is implicitly one (triangular only)
    """
    buffer: NDArray[Any]
    name: str
    order: Order
    transpose: Transpose = Transpose.NO_TRANS
    structure: Structure = Structure.GENERAL
    half: Uplo | None = None
    diag_unit: bool = False

    @classmethod
    def wrap(
        cls,
        array: Any,
        name: str,
        *,
        order: Order,
        transpose: Transpose = Transpose.NO_TRANS,
        structure: Structure = Structure.GENERAL,
        half: Uplo | None = None,
        diag_unit: bool = False,
    ) -> MatrixView:
        """
        Wrap a caller-owned array.

        Only checks that the buffer is a numeric 2D ndarray; everything
        operation-specific is the validator's job.

        Raises:
            ValidationError: If array is not a numeric ndarray
            DimensionError: If array is not 2D
        """
        check_matrix(array, name)
        return cls(
            buffer=array,
            name=name,
            order=order,
            transpose=transpose,
            structure=structure,
            half=half,
            diag_unit=diag_unit,
        )

    # === Shape ===

    @property
    def rows(self) -> int:
        """Logical (pre-transpose) row count."""
        return self.buffer.shape[0]

    @property
    def cols(self) -> int:
        """Logical (pre-transpose) column count."""
        return self.buffer.shape[1]

    @property
    def op_shape(self) -> tuple[int, int]:
        """Shape of op(X) after applying the transpose flag."""
        if self.transpose.is_transposed:
            return self.cols, self.rows
        return self.rows, self.cols

    @property
    def domain(self) -> Domain:
        return Domain.from_dtype(self.buffer.dtype, self.name)

    # === Memory ===

    @property
    def leading_dimension(self) -> int:
        """
        Elements between consecutive rows (row-major) or columns
        (column-major), following the BLAS convention of at least 1 and at
        least the contiguous extent.
        """
        itemsize = self.buffer.itemsize
        if self.order.is_row_major:
            stride, extent = self.buffer.strides[0] // itemsize, self.cols
            outer = self.rows
        else:
            stride, extent = self.buffer.strides[1] // itemsize, self.rows
            outer = self.cols
        if outer <= 1:
            return max(1, extent)
        return max(1, stride)

    def canonical(self) -> NDArray[Any]:
        """
        Column-major view of the buffer.

        A row-major r x c buffer read as column-major is its c x r transpose,
        so this is buffer.T for row-major operands and buffer otherwise.
        """
        if self.order.is_row_major:
            return self.buffer.T
        return self.buffer


@dataclass(frozen=True)
class ScalarValue:
    """
    Tagged real/complex scalar for alpha and beta.

    Construction:
        ScalarValue.of_real(2.0)
        ScalarValue.of_complex(1.0, -0.5)
        ScalarValue.coerce(value, 'alpha')
    """
    domain: Domain
    real: float
    imag: float = 0.0

    @classmethod
    def of_real(cls, value: float) -> ScalarValue:
        return cls(domain=Domain.REAL, real=float(value))

    @classmethod
    def of_complex(cls, real: float, imag: float = 0.0) -> ScalarValue:
        return cls(domain=Domain.COMPLEX, real=float(real), imag=float(imag))

    @classmethod
    def coerce(cls, value: Any, name: str) -> ScalarValue:
        """
        Tag a Python or NumPy number with its domain.

        Real numbers (int, float, np.floating, np.integer) become REAL,
        complex numbers become COMPLEX. No promotion happens here: whether
        the domain fits the operation is the validator's decision.

        Raises:
            ValidationError: If value is not a number, or is a bool
        """
        if isinstance(value, ScalarValue):
            return value
        if isinstance(value, (bool, np.bool_)):
            raise ValidationError(f"{name}: expected a number, got bool")
        if isinstance(value, Real):
            return cls.of_real(float(value))
        if isinstance(value, Complex):
            value = complex(value)
            return cls.of_complex(value.real, value.imag)
        raise ValidationError(
            f"{name}: expected a real or complex number, got {type(value).__name__}"
        )

    @property
    def value(self) -> float | complex:
        if self.domain is Domain.REAL:
            return self.real
        return complex(self.real, self.imag)

    @property
    def is_zero(self) -> bool:
        return self.real == 0.0 and self.imag == 0.0

    @property
    def is_one(self) -> bool:
        return self.real == 1.0 and self.imag == 0.0

    @property
    def is_real_valued(self) -> bool:
        return self.imag == 0.0

    def conjugate(self) -> ScalarValue:
        if self.domain is Domain.REAL:
            return self
        return ScalarValue(domain=self.domain, real=self.real, imag=-self.imag)

    def __str__(self) -> str:
        return str(self.value)
