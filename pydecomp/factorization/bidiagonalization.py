"""
Householder bidiagonalization of a tall matrix.

Alternating left and right reflections reduce A (m x n, m >= n) to

    Uᵗ·A·V = [B; 0]

with B n x n upper bidiagonal. This is the first phase of the
Golub-Kahan SVD.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pydecomp.core.validation import check_matrix, check_tall
from pydecomp.factorization.elementary import Householder


class Bidiagonalization:
    """
    Uᵗ·A·V = B for tall A.

    Attributes:
        diagonal: B's main diagonal (length n)
        superdiagonal: B's first superdiagonal (length n - 1)
    """

    def __init__(self, A: ArrayLike):
        M = check_matrix(A, "A")
        check_tall(M, "A")
        m, n = M.shape
        self._n_rows, self._n_cols = m, n

        # reflectors padded to full size so they can be multiplied together
        self._left: list[Householder] = []
        self._right: list[Householder] = []

        for i in range(n):
            u = Householder.from_vector(M[i:, i]).reflector()
            M[i:, i:] = u.reflect(M[i:, i:])
            self._left.append(Householder(np.concatenate([np.zeros(i), u.generator])))

            if i <= n - 3:
                v = Householder.from_vector(M[i, i + 1:]).reflector()
                M[i:, i + 1:] = v.reflect_rows(M[i:, i + 1:])
                self._right.append(Householder(np.concatenate([np.zeros(i + 1), v.generator])))

        self.diagonal = np.diag(M[:n, :n]).copy()
        self.superdiagonal = np.diag(M[:n, :n], k=1).copy()

    @property
    def shape(self) -> tuple[int, int]:
        return self._n_rows, self._n_cols

    def U(self) -> NDArray[np.floating[Any]]:
        """Left orthogonal factor, m x m."""
        return Householder.product(self._left, self._n_rows, self._n_rows)

    def V(self) -> NDArray[np.floating[Any]]:
        """Right orthogonal factor, n x n."""
        if not self._right:
            return np.eye(self._n_cols)
        return Householder.product(self._right, self._n_cols, self._n_cols)

    def B(self) -> NDArray[np.floating[Any]]:
        """Upper bidiagonal n x n matrix; entries off the two diagonals are exactly 0."""
        return np.diag(self.diagonal) + np.diag(self.superdiagonal, k=1)
