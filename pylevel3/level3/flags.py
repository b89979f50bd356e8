"""
Flag vocabulary for Level-3 operations.

Every flag category is a closed enumeration whose integer values are the
CBLAS constants, so a flag can be handed to any CBLAS-compatible library
unchanged. Each enumeration parses three spellings:

    - the enum member itself
    - its CBLAS integer value (e.g. 111 for no-transpose)
    - the conventional single character (e.g. 'N'), case-insensitive

Anything else raises UnsupportedFlagError. There is no fallback and no
guessing: a typo in a flag is always an error.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Any
import numpy as np

from pylevel3.core.exceptions import DomainMismatchError, UnsupportedFlagError


class _Flag(IntEnum):
    """
    Shared parsing for CBLAS flag enumerations.

    Subclasses list their string spellings in _aliases(). A flag without
    aliases parses from members and CBLAS integers only.
    """

    @classmethod
    def _aliases(cls) -> dict[str, _Flag]:
        return {}

    @classmethod
    def parse(cls, value: Any, name: str | None = None) -> _Flag:
        """
        Convert a user-supplied flag to an enum member.

        Args:
            value: Enum member, CBLAS integer, or alias string
            name: Parameter name for error messages (defaults to the flag
                category)

        Raises:
            UnsupportedFlagError: If value is outside the enumeration
        """
        label = name or cls.category()
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            member = cls._aliases().get(value.lower())
            if member is not None:
                return member
        elif isinstance(value, (int, np.integer)) and not isinstance(value, bool):
            try:
                return cls(int(value))
            except ValueError:
                pass
        raise UnsupportedFlagError(
            f"{label}: {value!r} is not a legal {cls.category()} flag. "
            f"Legal values: {cls.legal_values()}",
            flag=cls.category(),
            value=value,
            legal=cls.legal_values(),
        )

    @classmethod
    def category(cls) -> str:
        return cls.__name__.lower()

    @classmethod
    def legal_values(cls) -> tuple[str, ...]:
        return tuple(m.name for m in cls)


class Order(_Flag):
    """Physical storage layout of every operand in a call."""
    ROW_MAJOR = 101
    COL_MAJOR = 102

    @classmethod
    def _aliases(cls) -> dict[str, _Flag]:
        return {
            'c': cls.ROW_MAJOR, 'r': cls.ROW_MAJOR, 'row': cls.ROW_MAJOR,
            'row_major': cls.ROW_MAJOR,
            'f': cls.COL_MAJOR, 'col': cls.COL_MAJOR,
            'col_major': cls.COL_MAJOR,
        }

    @property
    def is_row_major(self) -> bool:
        return self is Order.ROW_MAJOR


class Transpose(_Flag):
    """How an operand is interpreted: as-is, transposed, conjugate-transposed."""
    NO_TRANS = 111
    TRANS = 112
    CONJ_TRANS = 113

    @classmethod
    def _aliases(cls) -> dict[str, _Flag]:
        return {'n': cls.NO_TRANS, 't': cls.TRANS, 'c': cls.CONJ_TRANS}

    @property
    def blas_char(self) -> str:
        return 'NTC'[self - Transpose.NO_TRANS]

    @property
    def is_transposed(self) -> bool:
        return self is not Transpose.NO_TRANS


class Uplo(_Flag):
    """Which triangle of a structured operand holds authoritative data."""
    UPPER = 121
    LOWER = 122

    @classmethod
    def _aliases(cls) -> dict[str, _Flag]:
        return {'u': cls.UPPER, 'l': cls.LOWER}

    @property
    def blas_char(self) -> str:
        return 'U' if self is Uplo.UPPER else 'L'

    def flipped(self) -> Uplo:
        return Uplo.LOWER if self is Uplo.UPPER else Uplo.UPPER


class Diag(_Flag):
    """Whether the diagonal of a triangular operand is implicitly one."""
    NON_UNIT = 131
    UNIT = 132

    @classmethod
    def _aliases(cls) -> dict[str, _Flag]:
        return {'n': cls.NON_UNIT, 'u': cls.UNIT}

    @property
    def blas_char(self) -> str:
        return 'U' if self is Diag.UNIT else 'N'


class Side(_Flag):
    """Which side the structured operand multiplies from."""
    LEFT = 141
    RIGHT = 142

    @classmethod
    def _aliases(cls) -> dict[str, _Flag]:
        return {'l': cls.LEFT, 'r': cls.RIGHT}

    @property
    def blas_char(self) -> str:
        return 'L' if self is Side.LEFT else 'R'

    def flipped(self) -> Side:
        return Side.RIGHT if self is Side.LEFT else Side.LEFT


class Domain(Enum):
    """Numeric domain of an operation: float64 or complex128."""
    REAL = 'real'
    COMPLEX = 'complex'

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(np.float64 if self is Domain.REAL else np.complex128)

    @property
    def prefix(self) -> str:
        """BLAS routine prefix ('d' or 'z')."""
        return 'd' if self is Domain.REAL else 'z'

    @classmethod
    def from_dtype(cls, dtype: np.dtype, name: str = 'operand') -> Domain:
        """
        Map an array dtype to its domain.

        Raises:
            DomainMismatchError: For any dtype other than float64/complex128
        """
        dtype = np.dtype(dtype)
        if dtype == np.float64:
            return cls.REAL
        if dtype == np.complex128:
            return cls.COMPLEX
        raise DomainMismatchError(
            f"{name}: dtype {dtype} is not supported; "
            f"operands must be float64 (real) or complex128 (complex)",
            expected='float64 or complex128',
            actual=str(dtype),
        )
