"""
Singular value decomposition by the Golub-Kahan algorithm.

A tall matrix is first bidiagonalized, then B is driven to diagonal form
by implicit-shift QR sweeps (Golub & Van Loan, Algorithm 8.6.2). Each
sweep partitions

    B = [[B11,   0,   0],
         [  0, B22,   0],
         [  0,   0, B33]]

with B33 diagonal and B22 unreduced (no zero superdiagonal entry), and
works on B22 only. When B22 has a zero on its diagonal it is deflated
with Givens rotations instead of stepped.
"""

from __future__ import annotations

import warnings
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pydecomp.core.compute.context import ExecutionContext
from pydecomp.core.compute.precision import has_zero, is_zero, resolve_epsilon
from pydecomp.core.compute.timing import Timer
from pydecomp.core.exceptions import ConvergenceError, InternalInvariantError
from pydecomp.core.validation import check_matrix, check_tall
from pydecomp.factorization.bidiagonalization import Bidiagonalization
from pydecomp.factorization.elementary import Givens

# The sweep cap defaults to max(DEFAULT_MAX_ITERATIONS, ITERATIONS_PER_COLUMN * n)
# for an m x n input; a sweep only works on one unreduced block.
DEFAULT_MAX_ITERATIONS = 100
ITERATIONS_PER_COLUMN = 30


def default_max_iterations(n_cols: int) -> int:
    return max(DEFAULT_MAX_ITERATIONS, ITERATIONS_PER_COLUMN * n_cols)


class GolubKahanStep:
    """
    One implicit-shift QR sweep on an unreduced upper bidiagonal matrix.

    Computes orthogonal U, V such that Uᵗ·B·V is again bidiagonal with a
    smaller last superdiagonal entry. The shift is the eigenvalue of the
    trailing 2 x 2 block of BᵗB closest to its last entry.
    """

    def __init__(self, B: NDArray[np.floating[Any]]):
        dim = B.shape[0]
        if dim < 2:
            raise ValueError(f"B: a Golub-Kahan step needs dim >= 2, got {dim}")
        self.dim = dim

        T = B.T @ B
        t_nn = T[-1, -1]
        eig1, eig2 = np.linalg.eigvalsh(T[-2:, -2:])
        mu = eig1 if abs(eig1 - t_nn) < abs(eig2 - t_nn) else eig2

        D = B.copy()
        y = T[0, 0] - mu
        z = T[0, 1]

        self._Us: list[Givens] = []
        self._Vs: list[Givens] = []
        for k in range(dim - 1):
            v = Givens.for_columns(dim, k, k + 1, y, z)
            D = v.right_multiply(D)
            self._Vs.append(v)

            y, z = D[k, k], D[k + 1, k]
            u = Givens.for_columns(dim, k, k + 1, y, z)
            D = u.t().multiply(D)
            self._Us.append(u)

            if k < dim - 2:
                y, z = D[k, k + 1], D[k, k + 2]

        self._UtBV = D

    def U(self) -> NDArray[np.floating[Any]]:
        return Givens.product(self._Us, self.dim)

    def V(self) -> NDArray[np.floating[Any]]:
        return Givens.product(self._Vs, self.dim)

    def UtBV(self) -> NDArray[np.floating[Any]]:
        return self._UtBV.copy()


def _compact(B: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
    """Keep only the diagonal and superdiagonal of a square matrix."""
    return np.diag(np.diag(B)) + np.diag(np.diag(B, k=1), k=1)


def _unreduced_block(B: NDArray[np.floating[Any]], epsilon: float) -> tuple[int, int] | None:
    """
    Locate the unreduced block B22 as (upper-left, lower-right) indices.

    Returns None when every superdiagonal entry is within epsilon of 0,
    i.e. B is numerically diagonal.
    """
    lr = B.shape[0] - 1
    while lr > 0 and is_zero(B[lr - 1, lr], epsilon):
        lr -= 1
    if lr == 0:
        return None

    ul = lr - 1
    while ul >= 1 and not is_zero(B[ul - 1, ul], epsilon):
        ul -= 1
    return ul, lr


def normalize_svd(
    d: NDArray[np.floating[Any]],
    Ut: NDArray[np.floating[Any]] | None = None,
    V: NDArray[np.floating[Any]] | None = None,
) -> tuple[
    NDArray[np.floating[Any]],
    NDArray[np.floating[Any]] | None,
    NDArray[np.floating[Any]] | None,
]:
    """
    Make singular values non-negative and sort them in descending order.

    A negative value flips the sign of the matching row of Ut; rows of Ut
    and columns of V are permuted along with d. The sort is stable, so
    applying this twice changes nothing.

    Returns:
        (d, Ut, V) as new arrays (Ut and V stay None when not given)
    """
    negative = d < 0
    d = np.abs(d)
    order = np.argsort(-d, kind="stable")
    if Ut is not None:
        Ut = Ut.copy()
        Ut[negative] *= -1
        Ut = Ut[order]
    if V is not None:
        V = V[:, order]
    return d[order], Ut, V


class GolubKahanSVD:
    """
    A = U·D·Vᵗ for tall A.

    Args:
        A: m x n matrix with m >= n
        compute_uv: Accumulate U and V; if False only D is computed
        normalize: Make singular values non-negative and sort them in
            descending order, permuting U and V to match
        epsilon: Superdiagonal entries within epsilon of 0 are deflated
            (default: auto_epsilon(A))
        max_iterations: Cap on the number of sweeps
            (default: default_max_iterations(n))
        context: Execution context for the matrix products
        strict: Raise ConvergenceError instead of warning when the cap
            is reached

    Unless strict, reaching the cap emits a RuntimeWarning, sets converged
    to False and keeps the partially diagonalized result.
    """

    def __init__(
        self,
        A: ArrayLike,
        compute_uv: bool = True,
        normalize: bool = True,
        epsilon: float | None = None,
        max_iterations: int | None = None,
        context: ExecutionContext | None = None,
        strict: bool = False,
    ):
        A = check_matrix(A, "A")
        check_tall(A, "A")
        if max_iterations is None:
            max_iterations = default_max_iterations(A.shape[1])
        if max_iterations < 0:
            raise ValueError(f"max_iterations must be >= 0, got {max_iterations}")

        self.epsilon = resolve_epsilon(epsilon, A)
        self.compute_uv = compute_uv
        self.max_iterations = max_iterations
        self._context = context if context is not None else ExecutionContext.serial()
        self._n_rows, self._n_cols = A.shape

        timer = Timer()
        timer.start()
        with timer.section("bidiagonalization"):
            bidiag = Bidiagonalization(A)
            B = bidiag.B()

        with timer.section("iteration"):
            B, Ubt, Vb = self._iterate(B)

        if strict and not self.converged:
            raise ConvergenceError(
                f"Golub-Kahan SVD did not converge in {max_iterations} iterations "
                f"(epsilon={self.epsilon:g})",
                iterations=self.iterations,
                final_change=float(np.max(np.abs(np.diag(B, k=1)))),
                reason="max_iterations",
                threshold=self.epsilon,
            )

        self._d = np.diag(B).copy()
        self._Ut: NDArray[np.floating[Any]] | None = None
        self._V: NDArray[np.floating[Any]] | None = None
        if compute_uv:
            with timer.section("accumulation"):
                n = self._n_cols
                self._Ut = self._context.matmul(Ubt, bidiag.U()[:, :n].T)
                self._V = self._context.matmul(bidiag.V(), Vb)

        if normalize:
            with timer.section("normalize"):
                self._normalize()

        timer.stop()
        self.timing = timer.result()

        if not self.converged:
            warnings.warn(
                f"Golub-Kahan SVD did not converge in {max_iterations} iterations "
                f"(epsilon={self.epsilon:g}); singular values may be inaccurate",
                RuntimeWarning,
                stacklevel=2,
            )

    def _iterate(
        self,
        B: NDArray[np.floating[Any]],
    ) -> tuple[NDArray[np.floating[Any]], NDArray[np.floating[Any]], NDArray[np.floating[Any]]]:
        n = B.shape[0]
        ctx = self._context
        Ubt = np.eye(n)
        Vb = np.eye(n)

        self.iterations = 0
        block = _unreduced_block(B, self.epsilon)
        while block is not None and self.iterations < self.max_iterations:
            ul, lr = block
            B22 = B[ul:lr + 1, ul:lr + 1]
            Mut = np.eye(n)
            Mv = np.eye(n)

            if is_zero(B22[-1, -1], self.epsilon):
                Mv[ul:lr + 1, ul:lr + 1] = self._zero_last_column(B22)
            elif has_zero(np.diag(B22), self.epsilon):
                Mut[ul:lr + 1, ul:lr + 1] = self._zero_row(B22)
            else:
                step = GolubKahanStep(_compact(B22))
                Mut[ul:lr + 1, ul:lr + 1] = step.U().T
                Mv[ul:lr + 1, ul:lr + 1] = step.V()

            B = ctx.chain(Mut, B, Mv)
            if self.compute_uv:
                Ubt = ctx.matmul(Mut, Ubt)
                Vb = ctx.matmul(Vb, Mv)

            self.iterations += 1
            block = _unreduced_block(B, self.epsilon)

        self.converged = block is None
        return B, Ubt, Vb

    def _zero_last_column(self, B22: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
        """Column rotations that zero the last column of B22 (its last diagonal entry is 0)."""
        dim = B22.shape[0]
        BB = B22.copy()
        Gs = np.eye(dim)
        for i in range(dim - 2, -1, -1):
            g = Givens.for_columns(dim, i, dim - 1, BB[i, i], BB[i, dim - 1])
            BB = g.right_multiply(BB)
            Gs = g.right_multiply(Gs)
        return Gs

    def _zero_row(self, B22: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
        """Row rotations that zero the row of B22 holding a zero diagonal entry."""
        dim = B22.shape[0]
        row = None
        for i in range(dim - 1):
            if is_zero(B22[i, i], self.epsilon) and not is_zero(B22[i, i + 1], self.epsilon):
                row = i
                break
        if row is None:
            raise InternalInvariantError(
                "no zero diagonal entry with a non-zero superdiagonal entry in B22",
                stage="deflation",
            )

        BB = B22.copy()
        Gs = np.eye(dim)
        for j in range(row + 1, dim):
            g = Givens.for_rows(dim, j, row, BB[j, j], BB[row, j])
            BB = g.multiply(BB)
            Gs = g.multiply(Gs)
        return Gs

    def _normalize(self) -> None:
        self._d, self._Ut, self._V = normalize_svd(self._d, self._Ut, self._V)

    def _require_uv(self, factor: str) -> None:
        if not self.compute_uv:
            raise RuntimeError(f"only singular values were computed; {factor} not available")

    @property
    def name(self) -> str:
        return "golub_kahan"

    def U(self) -> NDArray[np.floating[Any]]:
        self._require_uv("U")
        return self._Ut.T.copy()

    def Ut(self) -> NDArray[np.floating[Any]]:
        self._require_uv("U")
        return self._Ut.copy()

    def V(self) -> NDArray[np.floating[Any]]:
        self._require_uv("V")
        return self._V.copy()

    def D(self) -> NDArray[np.floating[Any]]:
        return np.diag(self._d)

    def singular_values(self) -> NDArray[np.floating[Any]]:
        return np.abs(self._d)

    def rank(self) -> int:
        return int(np.sum(np.abs(self._d) > self.epsilon))
