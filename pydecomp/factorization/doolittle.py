"""
LU decomposition by the Doolittle algorithm with partial pivoting.

Produces P·A = L·U with L unit lower triangular, U upper triangular and
P a row permutation. Rows of U and columns of L are filled alternately,
so at step k the row chosen as pivot is the one whose would-be U[k,k]
has the largest magnitude.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.linalg import solve_triangular

from pydecomp.core.compute.precision import compare, resolve_epsilon
from pydecomp.core.exceptions import DimensionError, SingularMatrixError
from pydecomp.core.validation import check_array, check_matrix, check_square
from pydecomp.factorization.permutation import PermutationMatrix


class Doolittle:
    """
    P·A = L·U for a square matrix.

    Args:
        A: n x n matrix
        epsilon: Values within epsilon of 0 are treated as 0
            (default: auto_epsilon(A))
        pivoting: Use partial pivoting (row swaps)

    Raises:
        DimensionError: If A is not square
        SingularMatrixError: If a pivot is numerically zero while the entry
            below it is not. With pivoting this cannot happen, since the
            chosen pivot dominates its column.

    When both the pivot and the entry below it are numerically zero the
    multiplier is taken as 1 (0/0 := 1), so singular matrices such as
    [[0, 1], [0, 1]] still factor.
    """

    def __init__(
        self,
        A: ArrayLike,
        epsilon: float | None = None,
        pivoting: bool = True,
    ):
        data = check_matrix(A, "A")
        check_square(data, "A")
        self.epsilon = resolve_epsilon(epsilon, data)
        self.pivoting = pivoting

        n = data.shape[0]
        self._dim = n
        self._L = np.eye(n)
        self._U = np.zeros((n, n))
        self._P = PermutationMatrix.identity(n)
        self._factor(data)

    def _residuals(self, data: NDArray[np.floating[Any]], k: int) -> NDArray[np.floating[Any]]:
        # candidate values of U[k,k] for rows k..n-1
        return data[k:, k] - self._L[k:, :k] @ self._U[:k, k]

    def _pivot(self, data: NDArray[np.floating[Any]], k: int) -> None:
        # argmax returns the first maximum
        p = k + int(np.argmax(np.abs(self._residuals(data, k))))
        if p == k:
            return
        data[[k, p], k:] = data[[p, k], k:]
        self._L[[k, p], :k] = self._L[[p, k], :k]
        self._P.swap_rows(k, p)

    def _factor(self, data: NDArray[np.floating[Any]]) -> None:
        L, U, eps = self._L, self._U, self.epsilon

        for k in range(self._dim):
            if self.pivoting:
                self._pivot(data, k)

            U[k, k:] = data[k, k:] - L[k, :k] @ U[:k, k:]

            pivot = U[k, k]
            pivot_is_zero = compare(pivot, 0.0, eps) == 0
            for i in range(k + 1, self._dim):
                value = data[i, k] - L[i, :k] @ U[:k, k]
                if pivot_is_zero and compare(value, 0.0, eps) != 0:
                    raise SingularMatrixError(
                        f"A: zero pivot U[{k},{k}] = {pivot:g} under non-zero entry "
                        f"{value:g} in row {i}; if pivoting is used, try a bigger epsilon",
                        matrix_name="A",
                        pivot_index=k,
                        pivot=float(pivot),
                        epsilon=eps,
                    )
                L[i, k] = 1.0 if pivot_is_zero else value / pivot

    @property
    def name(self) -> str:
        return "doolittle"

    def L(self) -> NDArray[np.floating[Any]]:
        return self._L.copy()

    def U(self) -> NDArray[np.floating[Any]]:
        return self._U.copy()

    def P(self) -> NDArray[np.floating[Any]]:
        return self._P.to_array()

    def permutation(self) -> PermutationMatrix:
        return PermutationMatrix(self._P.data)

    def det(self) -> float:
        """det(A) = sign(P)·prod(diag(U))."""
        return float(self._P.sign * np.prod(np.diag(self._U)))

    def solve(self, b: ArrayLike) -> NDArray[np.floating[Any]]:
        """
        Solve A·x = b by forward and back substitution.

        Args:
            b: Right-hand side, a vector of length n or an n x k matrix

        Raises:
            SingularMatrixError: If U has a numerically zero diagonal entry
        """
        b = check_array(b, "b")
        if b.ndim not in (1, 2) or b.shape[0] != self._dim:
            raise DimensionError(
                f"b: expected {self._dim} rows, got shape {b.shape}"
            )

        diag = np.abs(np.diag(self._U))
        if np.any(diag <= self.epsilon):
            k = int(np.argmin(diag))
            raise SingularMatrixError(
                f"A: singular, U[{k},{k}] = {self._U[k, k]:g} is within "
                f"epsilon={self.epsilon:g} of zero",
                matrix_name="A",
                pivot_index=k,
                pivot=float(self._U[k, k]),
                epsilon=self.epsilon,
            )

        y = solve_triangular(self._L, self._P.multiply(b), lower=True, unit_diagonal=True)
        return solve_triangular(self._U, y, lower=False)
