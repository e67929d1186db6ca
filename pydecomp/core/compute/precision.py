"""
Numerical precision constants and utilities.

Provides machine epsilon, the automatic "numerically zero" threshold
and the epsilon-aware comparisons every factorization uses for its
structural decisions (rank, singularity, deflation).
"""

import math

import numpy as np
from numpy.typing import ArrayLike, NDArray
from typing import Any

from pydecomp.core.validation import check_epsilon


# Machine epsilon for float64
EPSILON_64: float = float(np.finfo(np.float64).eps)  # ~2.22e-16

# Smallest positive normal float64, used when auto_epsilon would be 0
MIN_NORMAL_64: float = float(np.finfo(np.float64).tiny)  # ~2.23e-308

# Safety factor applied on top of the size-scaled machine epsilon
AUTO_EPSILON_FACTOR: float = 10.0


def machine_epsilon(dtype: np.dtype | type = np.float64) -> float:
    """
    Get machine epsilon for a given dtype.

    Args:
        dtype: NumPy dtype or type

    Returns:
        Machine epsilon for the dtype
    """
    return float(np.finfo(dtype).eps)


def _auto_epsilon_single(values: NDArray[np.floating[Any]]) -> float:
    if values.size == 0:
        return MIN_NORMAL_64
    largest = float(np.max(np.abs(values)))
    auto = largest * math.sqrt(values.size) * EPSILON_64 * AUTO_EPSILON_FACTOR
    if auto == 0:
        auto = MIN_NORMAL_64
    return auto


def auto_epsilon(*inputs: ArrayLike) -> float:
    """
    Guess a reasonable "numerically zero" threshold from the data.

    Roughly:
        auto ε = max(|inputs|) * sqrt(number of inputs) * machine ε * 10

    With several arrays, the largest per-array threshold wins. An all-zero
    input yields the smallest normal float rather than 0.

    Args:
        *inputs: Arrays (any shape) the threshold should be derived from

    Returns:
        A positive precision parameter
    """
    if not inputs:
        raise ValueError("auto_epsilon requires at least one input")
    return max(
        _auto_epsilon_single(np.asarray(x, dtype=np.float64).ravel())
        for x in inputs
    )


def is_zero(value: float, epsilon: float) -> bool:
    """True if |value| <= epsilon."""
    return abs(value) <= epsilon


def compare(a: float, b: float, epsilon: float) -> int:
    """
    Three-way comparison with a tolerance.

    Returns:
        0 if a and b are within epsilon of each other, otherwise -1 or 1
        as for an ordinary comparison.
    """
    diff = a - b
    if diff == 0 or abs(diff) <= epsilon:
        return 0
    return 1 if a > b else -1


def has_zero(values: ArrayLike, epsilon: float) -> bool:
    """True if any entry of values is within epsilon of 0."""
    return bool(np.any(np.abs(np.asarray(values, dtype=np.float64)) <= epsilon))


def resolve_epsilon(
    epsilon: float | None,
    *inputs: ArrayLike,
) -> float:
    """
    Return epsilon if given, otherwise auto_epsilon(*inputs).

    Raises:
        ValidationError: If epsilon is negative or not finite
    """
    if epsilon is None:
        return auto_epsilon(*inputs)
    return check_epsilon(epsilon)
