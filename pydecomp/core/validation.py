"""
Input validation utilities for pydecomp.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent.

Design principles:
    - No silent type coercion (except np.asarray on array-likes)
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray
from typing import Any

from pydecomp.core.exceptions import ValidationError, DimensionError


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Validate and convert input to a float64 numpy array.

    Accepts any array-like and converts to numpy array. Rejects inputs
    that result in object dtype (indicating mixed types or non-numeric data).
    The result is always a fresh copy, so callers may use it as private
    scratch space.

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        numpy.ndarray of dtype float64

    Raises:
        ValidationError: If input cannot be converted to numeric array
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object:
        raise ValidationError(
            f"{name}: converted to object dtype, indicating mixed types or non-numeric data"
        )

    if not np.issubdtype(result.dtype, np.number):
        raise ValidationError(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )

    if np.issubdtype(result.dtype, np.complexfloating):
        raise ValidationError(
            f"{name}: complex dtype {result.dtype}, only real matrices are supported"
        )

    return np.array(result, dtype=np.float64)


def check_finite(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify array contains no NaN or Inf values.

    Raises:
        ValidationError: If array contains non-finite values
    """
    if not np.all(np.isfinite(array)):
        n_nan = int(np.sum(np.isnan(array)))
        n_inf = int(np.sum(np.isinf(array)))
        raise ValidationError(
            f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
        )


def check_2d(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify array is a non-empty 2-dimensional matrix.

    Raises:
        DimensionError: If array is not 2D or has a zero-length dimension
    """
    if array.ndim != 2:
        raise DimensionError(
            f"{name}: expected 2D array, got {array.ndim}D with shape {array.shape}"
        )
    if array.shape[0] == 0 or array.shape[1] == 0:
        raise DimensionError(f"{name}: empty matrix with shape {array.shape}")


def check_square(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify matrix is square.

    Raises:
        DimensionError: If the number of rows differs from the number of columns
    """
    n_rows, n_cols = array.shape
    if n_rows != n_cols:
        raise DimensionError(
            f"{name}: expected a square matrix, got shape {array.shape}"
        )


def check_tall(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify matrix has at least as many rows as columns.

    Raises:
        DimensionError: If the matrix is fat (rows < columns)
    """
    n_rows, n_cols = array.shape
    if n_rows < n_cols:
        raise DimensionError(
            f"{name}: requires rows >= columns, got {n_rows} rows and {n_cols} columns"
        )


def check_symmetric(
    array: NDArray[np.floating[Any]],
    epsilon: float,
    name: str,
) -> None:
    """
    Verify matrix is symmetric within epsilon.

    Args:
        array: Square matrix to check
        epsilon: Largest tolerated |A[i,j] - A[j,i]|
        name: Parameter name for error messages

    Raises:
        ValidationError: If some pair of mirrored entries differs by more than epsilon
    """
    check_square(array, name)
    asymmetry = np.abs(array - array.T)
    worst = float(asymmetry.max())
    if worst > epsilon:
        i, j = np.unravel_index(int(np.argmax(asymmetry)), asymmetry.shape)
        raise ValidationError(
            f"{name}: not symmetric within epsilon={epsilon:g}; "
            f"|A[{i},{j}] - A[{j},{i}]| = {worst:g}"
        )


def check_epsilon(epsilon: float, name: str = "epsilon") -> float:
    """
    Verify a precision threshold is a finite, non-negative number.

    Returns:
        epsilon as a Python float

    Raises:
        ValidationError: If epsilon is negative or not finite
    """
    value = float(epsilon)
    if not np.isfinite(value) or value < 0:
        raise ValidationError(f"{name}: must be finite and >= 0, got {epsilon!r}")
    return value


def check_matrix(array: ArrayLike, name: str) -> NDArray[np.floating[Any]]:
    """
    Convert and validate a matrix argument in one call.

    Equivalent to check_array + check_2d + check_finite.
    """
    result = check_array(array, name)
    check_2d(result, name)
    check_finite(result, name)
    return result
