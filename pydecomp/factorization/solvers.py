"""
Facades and functional entry points for the factorizations.

QR, LU and SVD pick a concrete strategy and expose the common accessors;
qr(), lu(), cholesky(), ldl() and svd() are the public functional API.
"""

from __future__ import annotations

from typing import Any, Literal

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pydecomp.core.compute.context import ExecutionContext
from pydecomp.core.compute.timing import Timer
from pydecomp.core.protocols import QRDecomposition
from pydecomp.core.validation import check_matrix
from pydecomp.factorization.cholesky import Cholesky
from pydecomp.factorization.doolittle import Doolittle
from pydecomp.factorization.golub_kahan import GolubKahanSVD
from pydecomp.factorization.gram_schmidt import GramSchmidtQR
from pydecomp.factorization.householder_qr import HouseholderQR
from pydecomp.factorization.ldl import LDL


QRMethod = Literal['householder', 'gram_schmidt']


class QR:
    """
    A·P = Q·R with a selectable strategy.

    Args:
        A: m x n matrix (Householder requires m >= n)
        epsilon: Precision threshold (default: auto_epsilon(A))
        method: 'householder' or 'gram_schmidt'
        pad_zero_columns: Gram-Schmidt only; see GramSchmidtQR

    Attributes:
        timing: Seconds spent factoring ('total_seconds', 'factorization')
    """

    def __init__(
        self,
        A: ArrayLike,
        epsilon: float | None = None,
        method: QRMethod = 'householder',
        pad_zero_columns: bool = True,
    ):
        timer = Timer()
        timer.start()
        with timer.section('factorization'):
            self._impl = _get_qr_backend(method, A, epsilon, pad_zero_columns)
        timer.stop()
        self.timing = timer.result()
        self.method = method

    @property
    def name(self) -> str:
        return self._impl.name

    @property
    def epsilon(self) -> float:
        return self._impl.epsilon

    def Q(self) -> NDArray[np.floating[Any]]:
        return self._impl.Q()

    def R(self) -> NDArray[np.floating[Any]]:
        return self._impl.R()

    def P(self) -> NDArray[np.floating[Any]]:
        return self._impl.P()

    def rank(self) -> int:
        return self._impl.rank()

    def square_Q(self) -> NDArray[np.floating[Any]]:
        return self._impl.square_Q()

    def tall_R(self) -> NDArray[np.floating[Any]]:
        return self._impl.tall_R()


def _get_qr_backend(
    method: str,
    A: ArrayLike,
    epsilon: float | None,
    pad_zero_columns: bool,
) -> QRDecomposition:
    """
    Instantiate the QR strategy for method.

    Raises:
        ValueError: If method is unknown
    """
    if method == 'householder':
        return HouseholderQR(A, epsilon=epsilon)
    elif method == 'gram_schmidt':
        return GramSchmidtQR(A, epsilon=epsilon, pad_zero_columns=pad_zero_columns)
    else:
        raise ValueError(f"Unknown QR method: {method!r}")


class LU(Doolittle):
    """P·A = L·U by Doolittle elimination; see Doolittle for the arguments."""


class SVD:
    """
    A = U·D·Vᵗ for a matrix of any shape.

    A fat matrix is decomposed through its transpose, with U and V swapped,
    so U is m x k, D is k x k and V is n x k for k = min(m, n).

    Args:
        A: m x n matrix
        normalize: Non-negative singular values in descending order
        epsilon: Precision threshold (default: auto_epsilon(A))
        compute_uv: If False, U/Ut/V raise RuntimeError
        max_iterations: Cap on Golub-Kahan sweeps (default scales with
            min(m, n); see default_max_iterations)
        context: Execution context for the matrix products
        strict: Raise ConvergenceError if the cap is reached
    """

    def __init__(
        self,
        A: ArrayLike,
        normalize: bool = True,
        epsilon: float | None = None,
        compute_uv: bool = True,
        max_iterations: int | None = None,
        context: ExecutionContext | None = None,
        strict: bool = False,
    ):
        A = check_matrix(A, "A")
        self.transposed = A.shape[0] < A.shape[1]
        self._impl = GolubKahanSVD(
            A.T if self.transposed else A,
            compute_uv=compute_uv,
            normalize=normalize,
            epsilon=epsilon,
            max_iterations=max_iterations,
            context=context,
            strict=strict,
        )

    @property
    def name(self) -> str:
        return self._impl.name

    @property
    def epsilon(self) -> float:
        return self._impl.epsilon

    @property
    def converged(self) -> bool:
        return self._impl.converged

    @property
    def iterations(self) -> int:
        return self._impl.iterations

    @property
    def timing(self) -> dict[str, float]:
        return self._impl.timing

    def U(self) -> NDArray[np.floating[Any]]:
        return self._impl.V() if self.transposed else self._impl.U()

    def Ut(self) -> NDArray[np.floating[Any]]:
        return self.U().T.copy()

    def V(self) -> NDArray[np.floating[Any]]:
        return self._impl.U() if self.transposed else self._impl.V()

    def D(self) -> NDArray[np.floating[Any]]:
        return self._impl.D()

    def singular_values(self) -> NDArray[np.floating[Any]]:
        return self._impl.singular_values()

    def rank(self) -> int:
        return self._impl.rank()


def qr(
    A: ArrayLike,
    *,
    method: QRMethod = 'householder',
    epsilon: float | None = None,
    pad_zero_columns: bool = True,
) -> QR:
    """
    QR decomposition with column pivoting of dependent columns.

    This is the boundary: input is validated here and trusted downstream.

    Example:
        >>> from pydecomp import qr
        >>> result = qr([[1, 0], [0, 1], [1, 1]])
        >>> result.rank()
        2
    """
    A_arr = check_matrix(A, 'A')
    return QR(A_arr, epsilon=epsilon, method=method, pad_zero_columns=pad_zero_columns)


def lu(
    A: ArrayLike,
    *,
    epsilon: float | None = None,
    pivoting: bool = True,
) -> LU:
    """
    LU decomposition P·A = L·U of a square matrix.

    Example:
        >>> from pydecomp import lu
        >>> result = lu([[4, 3], [6, 3]])
        >>> result.P()
        array([[0., 1.],
               [1., 0.]])
    """
    A_arr = check_matrix(A, 'A')
    return LU(A_arr, epsilon=epsilon, pivoting=pivoting)


def cholesky(A: ArrayLike, *, epsilon: float = 0.0) -> Cholesky:
    """Cholesky decomposition A = L·Lᵗ of a symmetric positive definite matrix."""
    A_arr = check_matrix(A, 'A')
    return Cholesky(A_arr, epsilon=epsilon)


def ldl(A: ArrayLike, *, epsilon: float = 0.0) -> LDL:
    """LDL decomposition A = L·D·Lᵗ of a symmetric matrix."""
    A_arr = check_matrix(A, 'A')
    return LDL(A_arr, epsilon=epsilon)


def svd(
    A: ArrayLike,
    *,
    normalize: bool = True,
    epsilon: float | None = None,
    compute_uv: bool = True,
    max_iterations: int | None = None,
    context: ExecutionContext | None = None,
    strict: bool = False,
) -> SVD:
    """
    Singular value decomposition A = U·D·Vᵗ.

    Example:
        >>> import numpy as np
        >>> from pydecomp import svd
        >>> result = svd(np.outer([1, 2, 3], [1, 1]))
        >>> result.rank()
        1
    """
    A_arr = check_matrix(A, 'A')
    return SVD(
        A_arr,
        normalize=normalize,
        epsilon=epsilon,
        compute_uv=compute_uv,
        max_iterations=max_iterations,
        context=context,
        strict=strict,
    )
