"""
Exception hierarchy for PyLevel3.

All exceptions inherit from PyLevel3Error to allow catching any
library-specific error.

Two families:
    - ValidationError and its subclasses are raised by the contract layer
      BEFORE any backend call. No output buffer is ever touched when one of
      these is raised.
    - NumericalError and its subclasses are raised by backends AFTER
      dispatch. The contract layer propagates them unmodified; the output
      operand may already be partially overwritten.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyLevel3Error(Exception):
    """Base exception for all PyLevel3 errors."""
    pass


class ValidationError(PyLevel3Error):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when an operand is not a 2D array.
    """
    pass


class ShapeError(DimensionError):
    """
    Operand shapes or layouts are incompatible with the operation.

    Attributes:
        operation: Name of the operation that rejected the call (e.g. 'dgemm')
        dims: Mapping of the mismatched dimension names to their values
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        dims: dict[str, int] | None = None,
    ):
        super().__init__(message)
        self.operation = operation
        self.dims = dict(dims) if dims else {}


class DomainMismatchError(ValidationError):
    """
    Scalar or operand domain disagrees with the operation's domain.

    Attributes:
        operation: Name of the operation
        expected: Expected domain ('real' or 'complex')
        actual: What was supplied (domain name or dtype string)
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        expected: str | None = None,
        actual: str | None = None,
    ):
        super().__init__(message)
        self.operation = operation
        self.expected = expected
        self.actual = actual


class UnsupportedFlagError(ValidationError):
    """
    A flag value is outside the legal set for the operation.

    Also raised when a complex-only operation is requested in the real domain.

    Attributes:
        flag: Flag category ('order', 'transpose', 'side', 'uplo', 'diag',
              'domain')
        value: The rejected value
        legal: The legal values for this flag in this context
    """

    def __init__(
        self,
        message: str,
        flag: str | None = None,
        value: object = None,
        legal: tuple[str, ...] | None = None,
    ):
        super().__init__(message)
        self.flag = flag
        self.value = value
        self.legal = legal


class AliasingError(ValidationError):
    """
    The output operand shares memory with a read-only input.

    Attributes:
        operation: Name of the operation
        operands: Names of the overlapping operands
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        operands: tuple[str, ...] = (),
    ):
        super().__init__(message)
        self.operation = operation
        self.operands = operands


class NumericalError(PyLevel3Error):
    """
    Numerical computation failed.

    Base class for errors reported by a backend during computation.
    """
    pass


class SingularMatrixError(NumericalError):
    """
    Triangular matrix is exactly singular.

    Raised by a backend when a triangular solve meets a zero diagonal
    element.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        index: Zero-based index of the first zero diagonal element
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        index: int | None = None,
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.index = index
