"""
QR decomposition by the stabilized (modified) Gram-Schmidt process.

Each column is orthogonalized twice against the accepted basis, which is
enough to restore orthogonality lost to cancellation. A column whose
residual has norm <= epsilon is linearly dependent and is pivoted to the
end, so that

    A·P = Q·R,   R = [[R11, R12],
                      [  0,   0]]

with R11 (rank x rank) upper triangular with a non-zero diagonal.
Works for both tall and fat matrices.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pydecomp.core.compute.precision import auto_epsilon, resolve_epsilon
from pydecomp.core.validation import check_matrix
from pydecomp.factorization.permutation import PermutationMatrix

REORTHOGONALIZATION_PASSES = 2


class GramSchmidtQR:
    """
    A·P = Q·R by Gram-Schmidt with column pivoting of dependent columns.

    Args:
        A: m x n matrix
        epsilon: Residual norms <= epsilon mark a column as dependent
            (default: auto_epsilon(A))
        pad_zero_columns: If True, Q has n columns and dependent columns are
            zero; if False, Q has only the rank orthonormal columns and
            Q @ R()[:rank] = A·P
    """

    def __init__(
        self,
        A: ArrayLike,
        epsilon: float | None = None,
        pad_zero_columns: bool = True,
    ):
        A = check_matrix(A, "A")
        self._n_rows, self._n_cols = A.shape
        self.epsilon = resolve_epsilon(epsilon, A)
        self.pad_zero_columns = pad_zero_columns

        n = self._n_cols
        R = np.zeros((n, n))
        Q = np.zeros((self._n_rows, n))
        basis: list[int] = []
        dependent: list[int] = []

        for i in range(n):
            w = A[:, i].copy()
            for _ in range(REORTHOGONALIZATION_PASSES):
                for k in basis:
                    coefficient = Q[:, k] @ w
                    w -= coefficient * Q[:, k]
                    R[k, i] += coefficient

            norm = float(np.linalg.norm(w))
            if norm <= self.epsilon:
                dependent.append(i)
            else:
                Q[:, i] = w / norm
                R[i, i] = norm
                basis.append(i)

        order = basis + dependent
        self._rank = len(basis)
        self._R = R[np.ix_(order, order)]
        self._Q = Q[:, order] if pad_zero_columns else Q[:, basis]
        # column j of A·P is column order[j] of A
        self._P = PermutationMatrix(np.argsort(order))

    @property
    def name(self) -> str:
        return "gram_schmidt"

    def Q(self) -> NDArray[np.floating[Any]]:
        return self._Q.copy()

    def R(self) -> NDArray[np.floating[Any]]:
        return self._R.copy()

    def P(self) -> NDArray[np.floating[Any]]:
        return self._P.to_array()

    def permutation(self) -> PermutationMatrix:
        return PermutationMatrix(self._P.data)

    def rank(self) -> int:
        return self._rank

    def square_Q(self) -> NDArray[np.floating[Any]]:
        """
        Q completed to an m x m orthogonal matrix.

        When A does not span R^m, the basis is extended by orthogonalizing
        e1..em against it and keeping the first m vectors.
        """
        m = self._n_rows
        if self._rank == m:
            return self._Q[:, :m].copy()

        spanning = np.hstack([self._Q[:, :self._rank], np.eye(m)])
        completion = GramSchmidtQR(
            spanning,
            epsilon=max(self.epsilon, auto_epsilon(spanning)),
            pad_zero_columns=False,
        )
        return completion.Q()[:, :m]

    def tall_R(self) -> NDArray[np.floating[Any]]:
        m, n = self._n_rows, self._n_cols
        if m < n:
            return self._R[:m].copy()
        tall = np.zeros((m, n))
        tall[:n] = self._R
        return tall
