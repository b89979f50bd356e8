"""
Core infrastructure for PyLevel3.

This module provides shared abstractions and utilities used by the level3
operation layer and its backends.

Key components:
    protocols: KernelBackend protocol
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Array-level validators
    compute: Hardware detection, timing, tolerance tiers
"""

from pylevel3.core.protocols import KernelBackend
from pylevel3.core.result import Result
from pylevel3.core.exceptions import (
    PyLevel3Error,
    ValidationError,
    DimensionError,
    ShapeError,
    DomainMismatchError,
    UnsupportedFlagError,
    AliasingError,
    NumericalError,
    SingularMatrixError,
)

__all__ = [
    # Protocols
    "KernelBackend",
    # Result
    "Result",
    # Exceptions
    "PyLevel3Error",
    "ValidationError",
    "DimensionError",
    "ShapeError",
    "DomainMismatchError",
    "UnsupportedFlagError",
    "AliasingError",
    "NumericalError",
    "SingularMatrixError",
]
