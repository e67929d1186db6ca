"""
LDL decomposition A = L·D·Lᵗ of a symmetric matrix.

Unlike Cholesky, A may be indefinite or singular: no square roots are
taken, and a zero pivot D[j] gives zero multipliers in column j of L.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pydecomp.core.validation import check_epsilon, check_matrix, check_symmetric


class LDL:
    """
    A = L·D·Lᵗ with L unit lower triangular and D diagonal.

    Args:
        A: Symmetric n x n matrix
        epsilon: Tolerance for the symmetry check; defaults to 0.0 (exact)

    A zero pivot d[j] sets the multipliers below it to 0. The factors stay
    finite, but L·D·Lᵗ no longer equals A when column j has non-zero
    entries below the diagonal (e.g. [[0, 1], [1, 0]]).
    """

    def __init__(self, A: ArrayLike, epsilon: float = 0.0):
        A = check_matrix(A, "A")
        self.epsilon = check_epsilon(epsilon)
        check_symmetric(A, self.epsilon, "A")

        n = A.shape[0]
        L = np.eye(n)
        d = np.zeros(n)
        for i in range(n):
            for j in range(i):
                if d[j] == 0:
                    L[i, j] = 0.0
                else:
                    L[i, j] = (A[i, j] - np.sum(L[i, :j] * L[j, :j] * d[:j])) / d[j]
            d[i] = A[i, i] - np.sum(L[i, :i] ** 2 * d[:i])

        self._L = L
        self._d = d

    @property
    def name(self) -> str:
        return "ldl"

    def L(self) -> NDArray[np.floating[Any]]:
        return self._L.copy()

    def D(self) -> NDArray[np.floating[Any]]:
        return np.diag(self._d)

    def diagonal(self) -> NDArray[np.floating[Any]]:
        return self._d.copy()
