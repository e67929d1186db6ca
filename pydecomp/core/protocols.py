"""
Core protocols for pydecomp.

Each decomposition kind has one structural interface; the interchangeable
strategies behind it (Householder vs. Gram-Schmidt QR, ...) satisfy it
without sharing a base class. We use Protocol (structural typing) rather
than ABC (nominal typing) so a strategy is selected at construction, not
inherited.

Design Principles:
    - Minimal contracts: prescribe only what every strategy can deliver
    - Accessors return fresh copies; no strategy exposes mutable state
"""

from typing import Protocol, Any, runtime_checkable

import numpy as np
from numpy.typing import NDArray

Matrix = NDArray[np.floating[Any]]


@runtime_checkable
class QRDecomposition(Protocol):
    """
    A·P = Q·R with Q orthonormal columns and R upper triangular.

    P is a column permutation; strategies without pivoting return the
    identity.
    """

    @property
    def name(self) -> str:
        """Strategy identifier, e.g. 'householder' or 'gram_schmidt'."""
        ...

    def Q(self) -> Matrix:
        """Orthogonal factor, m x min(m, n) or m x n depending on strategy."""
        ...

    def R(self) -> Matrix:
        """Upper triangular factor, n x n."""
        ...

    def P(self) -> Matrix:
        """Column permutation, n x n."""
        ...

    def rank(self) -> int:
        """Numerical rank: number of diagonal entries of R above epsilon."""
        ...

    def square_Q(self) -> Matrix:
        """Q extended to a full m x m orthogonal matrix."""
        ...

    def tall_R(self) -> Matrix:
        """R padded (or cut) to m x n so that square_Q() @ tall_R() = A·P."""
        ...


@runtime_checkable
class LUDecomposition(Protocol):
    """P·A = L·U with L unit lower triangular and U upper triangular."""

    @property
    def name(self) -> str:
        ...

    def L(self) -> Matrix:
        ...

    def U(self) -> Matrix:
        ...

    def P(self) -> Matrix:
        """Row permutation, n x n."""
        ...


@runtime_checkable
class SVDDecomposition(Protocol):
    """A = U·D·Vᵗ with D diagonal and U, V orthonormal columns."""

    @property
    def name(self) -> str:
        ...

    def U(self) -> Matrix:
        ...

    def Ut(self) -> Matrix:
        ...

    def V(self) -> Matrix:
        ...

    def D(self) -> Matrix:
        ...

    def singular_values(self) -> NDArray[np.floating[Any]]:
        """Absolute values of D's diagonal."""
        ...
