"""
Input validation utilities for PyLevel3.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent.

Unlike a typical numerical library these validators NEVER convert their
input: operands are caller-owned buffers that may be written in place, so a
silent np.asarray copy would detach the result from the caller's memory.

Design principles:
    - No type coercion at all
    - No default handling of edge cases
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

import numpy as np
from numpy.typing import NDArray
from typing import Any

from pylevel3.core.exceptions import (
    AliasingError,
    DimensionError,
    ShapeError,
    ValidationError,
)


def check_matrix(array: Any, name: str) -> NDArray[Any]:
    """
    Verify input is a 2D numpy array with a numeric dtype.

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        The same array object, unchanged

    Raises:
        ValidationError: If input is not an ndarray or is non-numeric
        DimensionError: If input is not 2D
    """
    if not isinstance(array, np.ndarray):
        raise ValidationError(
            f"{name}: expected numpy.ndarray, got {type(array).__name__}. "
            f"Operands are written in place and cannot be converted."
        )
    if array.ndim != 2:
        raise DimensionError(
            f"{name}: expected 2D array, got {array.ndim}D with shape {array.shape}"
        )
    if not np.issubdtype(array.dtype, np.number):
        raise ValidationError(
            f"{name}: non-numeric dtype {array.dtype}, expected numeric data"
        )
    return array


def check_writable(array: NDArray[Any], name: str) -> None:
    """
    Verify an output array can be written in place.

    Raises:
        ValidationError: If the array is read-only
    """
    if not array.flags.writeable:
        raise ValidationError(
            f"{name}: output array is read-only and cannot be overwritten"
        )


def check_positive_dims(array: NDArray[Any], name: str, operation: str) -> None:
    """
    Verify both dimensions of a matrix are strictly positive.

    Raises:
        ShapeError: If either dimension is zero
    """
    rows, cols = array.shape
    if rows <= 0 or cols <= 0:
        raise ShapeError(
            f"{operation}: {name} has non-positive dimensions {rows}x{cols}",
            operation=operation,
            dims={f"{name}.rows": rows, f"{name}.cols": cols},
        )


def check_square(array: NDArray[Any], name: str, operation: str) -> None:
    """
    Verify a structured operand is square.

    Raises:
        ShapeError: If rows != cols
    """
    rows, cols = array.shape
    if rows != cols:
        raise ShapeError(
            f"{operation}: {name} must be square, got {rows}x{cols}",
            operation=operation,
            dims={f"{name}.rows": rows, f"{name}.cols": cols},
        )


def check_layout(
    array: NDArray[Any],
    name: str,
    operation: str,
    row_major: bool,
) -> None:
    """
    Verify an array's memory layout matches the declared storage order.

    Row-major storage requires unit stride along columns and a row stride of
    at least the column count; column-major is the mirror image. A dimension
    of extent one imposes no stride constraint along it.

    Args:
        array: 2D array to check
        name: Parameter name for error messages
        operation: Operation name for error messages
        row_major: True for row-major, False for column-major

    Raises:
        ShapeError: If strides are negative, non-element-aligned, or
            incompatible with the declared order
    """
    itemsize = array.itemsize
    rows, cols = array.shape
    s0, s1 = array.strides
    if s0 < 0 or s1 < 0 or s0 % itemsize or s1 % itemsize:
        raise ShapeError(
            f"{operation}: {name} has unsupported strides {array.strides} "
            f"for itemsize {itemsize}",
            operation=operation,
            dims={f"{name}.rows": rows, f"{name}.cols": cols,
                  "row_stride": s0, "col_stride": s1},
        )

    if row_major:
        inner, outer, extent = s1 // itemsize, s0 // itemsize, cols
        inner_len, outer_len = cols, rows
    else:
        inner, outer, extent = s0 // itemsize, s1 // itemsize, rows
        inner_len, outer_len = rows, cols

    layout = "row-major" if row_major else "column-major"
    if inner_len > 1 and inner != 1:
        raise ShapeError(
            f"{operation}: {name} is not stored {layout} "
            f"(strides {array.strides}, itemsize {itemsize})",
            operation=operation,
            dims={f"{name}.rows": rows, f"{name}.cols": cols,
                  "inner_stride": inner},
        )
    if outer_len > 1 and outer < extent:
        raise ShapeError(
            f"{operation}: {name} leading dimension {outer} is smaller than "
            f"its {layout} extent {extent}",
            operation=operation,
            dims={f"ld{name}": outer, "extent": extent},
        )


def check_no_overlap(
    output: NDArray[Any],
    output_name: str,
    other: NDArray[Any],
    other_name: str,
    operation: str,
) -> None:
    """
    Verify an output buffer does not share memory with an input buffer.

    Raises:
        AliasingError: If the two arrays overlap in memory
    """
    if np.shares_memory(output, other):
        raise AliasingError(
            f"{operation}: output {output_name} shares memory with input "
            f"{other_name}",
            operation=operation,
            operands=(output_name, other_name),
        )
