"""
QR decomposition by Householder reflections.

Factoring and materializing Q are separate phases: householder_factor()
returns the compact reflectors and R, and Q is only formed when asked for.
Callers that need R alone never pay for the O(m²n) product.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pydecomp.core.compute.precision import is_zero, resolve_epsilon
from pydecomp.core.validation import check_matrix, check_tall
from pydecomp.factorization.elementary import Householder


class HouseholderReflectors:
    """Ordered reflectors H1..Hk whose product is the Q of a Householder QR."""

    def __init__(self, reflectors: list[Householder], n_rows: int):
        self._reflectors = list(reflectors)
        self.n_rows = n_rows

    def __len__(self) -> int:
        return len(self._reflectors)

    def __getitem__(self, index: int) -> Householder:
        return self._reflectors[index]

    def materialize(self, n_rows: int, n_cols: int) -> NDArray[np.floating[Any]]:
        """H1·…·Hk·I(n_rows, n_cols)."""
        return Householder.product(self._reflectors, n_rows, n_cols)


def householder_factor(
    A: NDArray[np.floating[Any]],
    epsilon: float,
) -> tuple[HouseholderReflectors, NDArray[np.floating[Any]]]:
    """
    Reduce a tall matrix to upper triangular form with Householder reflections.

    A column whose remaining part has norm <= epsilon is linearly dependent
    on the previous ones: it gets the identity reflector and a zero on R's
    diagonal.

    Args:
        A: Validated m x n matrix with m >= n (not modified)
        epsilon: Precision threshold

    Returns:
        (reflectors, R) with R of shape n x n
    """
    n_rows, n_cols = A.shape
    cols = A.copy()
    R = np.zeros((n_cols, n_cols))
    reflectors: list[Householder] = []

    for i in range(n_cols):
        R[:i, i] = cols[:i, i]

        if i == n_rows - 1:
            # square A: nothing left below the last diagonal entry
            R[i, i] = cols[i, i]
            break

        ctx = Householder.from_vector(cols[i:, i])
        if is_zero(ctx.lam, epsilon):
            reflectors.append(Householder(np.zeros(n_rows)))
            R[i, i] = 0.0
            continue

        h = Householder(np.concatenate([np.zeros(i), ctx.generator]))
        cols[:, i + 1:] = h.reflect(cols[:, i + 1:])
        reflectors.append(h)
        R[i, i] = ctx.lam

    return HouseholderReflectors(reflectors, n_rows), R


class HouseholderQR:
    """
    A = Q·R by Householder reflections, for A with rows >= columns.

    No pivoting is done, so P() is the identity. Q() is m x n and cached;
    square_Q() extends it to m x m.
    """

    def __init__(self, A: ArrayLike, epsilon: float | None = None):
        A = check_matrix(A, "A")
        check_tall(A, "A")
        self._n_rows, self._n_cols = A.shape
        self.epsilon = resolve_epsilon(epsilon, A)
        self._reflectors, self._R = householder_factor(A, self.epsilon)
        self._Q: NDArray[np.floating[Any]] | None = None

    @property
    def name(self) -> str:
        return "householder"

    @property
    def reflectors(self) -> HouseholderReflectors:
        return self._reflectors

    def Q(self) -> NDArray[np.floating[Any]]:
        if self._Q is None:
            self._Q = self._reflectors.materialize(self._n_rows, self._n_cols)
        return self._Q.copy()

    def R(self) -> NDArray[np.floating[Any]]:
        return self._R.copy()

    def P(self) -> NDArray[np.floating[Any]]:
        return np.eye(self._n_cols)

    def rank(self) -> int:
        """
        Number of diagonal entries of R larger than epsilon in magnitude.

        There is no column pivoting, so this is not rank-revealing in
        general: a dependent column followed by an independent one leaves
        the latter's weight above the diagonal. For [[1,1,0],[0,0,1],[0,0,0]]
        it returns 1. Use GramSchmidtQR when the rank itself matters.
        """
        return int(np.sum(np.abs(np.diag(self._R)) > self.epsilon))

    def square_Q(self) -> NDArray[np.floating[Any]]:
        return self._reflectors.materialize(self._n_rows, self._n_rows)

    def tall_R(self) -> NDArray[np.floating[Any]]:
        tall = np.zeros((self._n_rows, self._n_cols))
        tall[:self._n_cols] = self._R
        return tall
