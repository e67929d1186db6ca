"""
Cholesky decomposition A = L·Lᵗ of a symmetric positive definite matrix.

Cholesky-Banachiewicz ordering: L is filled row by row. Definiteness is
checked on every diagonal residual before its square root is taken.
"""

from __future__ import annotations

from typing import Any

import math

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.linalg import solve_triangular

from pydecomp.core.compute.precision import compare
from pydecomp.core.exceptions import DimensionError, NotPositiveDefiniteError
from pydecomp.core.validation import (
    check_array,
    check_epsilon,
    check_matrix,
    check_symmetric,
)


class Cholesky:
    """
    A = L·Lᵗ with L lower triangular with a positive diagonal.

    Args:
        A: Symmetric positive definite n x n matrix
        epsilon: Tolerance for the symmetry check and for deciding that a
            diagonal residual is not positive. Defaults to 0.0 (exact).

    Raises:
        DimensionError: If A is not square
        ValidationError: If A is not symmetric within epsilon
        NotPositiveDefiniteError: If a diagonal residual is <= 0 within epsilon
    """

    def __init__(self, A: ArrayLike, epsilon: float = 0.0):
        A = check_matrix(A, "A")
        self.epsilon = check_epsilon(epsilon)
        check_symmetric(A, self.epsilon, "A")

        n = A.shape[0]
        L = np.zeros((n, n))
        for i in range(n):
            for j in range(i):
                L[i, j] = (A[i, j] - L[i, :j] @ L[j, :j]) / L[j, j]

            residual = float(A[i, i] - L[i, :i] @ L[i, :i])
            if compare(residual, 0.0, self.epsilon) <= 0:
                raise NotPositiveDefiniteError(
                    f"A: not positive definite, diagonal residual at row {i} "
                    f"is {residual:g} (epsilon={self.epsilon:g})",
                    matrix_name="A",
                    row=i,
                    residual=residual,
                )
            L[i, i] = math.sqrt(residual)

        self._L = L

    @property
    def name(self) -> str:
        return "cholesky"

    def L(self) -> NDArray[np.floating[Any]]:
        return self._L.copy()

    def Lt(self) -> NDArray[np.floating[Any]]:
        return self._L.T.copy()

    def solve(self, b: ArrayLike) -> NDArray[np.floating[Any]]:
        """Solve A·x = b with one forward and one back substitution."""
        b = check_array(b, "b")
        n = self._L.shape[0]
        if b.ndim not in (1, 2) or b.shape[0] != n:
            raise DimensionError(f"b: expected {n} rows, got shape {b.shape}")
        y = solve_triangular(self._L, b, lower=True)
        return solve_triangular(self._L.T, y, lower=False)
