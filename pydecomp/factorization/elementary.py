"""
Elementary orthogonal transforms: Householder reflections and Givens rotations.

Both are kept in compact form (a unit vector, or an index pair plus c and s)
and applied directly to the rows or columns they touch. Dense matrices are
only built on request through H(), to_array() or product().
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

import math

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pydecomp.core.exceptions import DimensionError, ValidationError


@dataclass(frozen=True)
class HouseholderContext:
    """
    Result of Householder.from_vector.

    Attributes:
        generator: x - lam * e1, the (unnormalized) reflector generator
        lam: The value H·x takes in its first entry (all others are 0)
    """
    generator: NDArray[np.floating[Any]]
    lam: float

    def reflector(self) -> Householder:
        return Householder(self.generator)


class Householder:
    """
    Householder reflection H = I - 2·v·vᵗ for a unit vector v.

    A zero generator yields v = 0, i.e. the identity; that is how a linearly
    dependent column is recorded.
    """

    def __init__(self, generator: ArrayLike):
        v = np.array(generator, dtype=np.float64)
        if v.ndim != 1:
            raise DimensionError(
                f"generator: expected 1D vector, got shape {v.shape}"
            )
        norm = float(np.linalg.norm(v))
        self._v = v / norm if norm != 0 else np.zeros_like(v)

    @classmethod
    def from_vector(cls, x: ArrayLike) -> HouseholderContext:
        """
        Build the generator of the reflection that maps x onto a multiple of e1.

        lam is -‖x‖ when x[0] > 0 and ‖x‖ otherwise, the sign that avoids
        cancellation in x[0] - lam.
        """
        x = np.asarray(x, dtype=np.float64)
        if x.ndim != 1 or x.size == 0:
            raise DimensionError(f"x: expected non-empty 1D vector, got shape {x.shape}")

        norm = float(np.linalg.norm(x))
        lam = -norm if x[0] > 0 else norm
        if lam == 0:
            return HouseholderContext(np.zeros_like(x), 0.0)

        generator = x.copy()
        generator[0] -= lam
        return HouseholderContext(generator, lam)

    @property
    def size(self) -> int:
        return self._v.size

    @property
    def generator(self) -> NDArray[np.floating[Any]]:
        """Unit generator (zero for the identity reflector)."""
        return self._v.copy()

    def reflect(self, x: ArrayLike) -> NDArray[np.floating[Any]]:
        """
        H·x for a vector, or H applied to every column of a matrix.
        """
        x = np.asarray(x, dtype=np.float64)
        if x.shape[0] != self.size:
            raise DimensionError(
                f"reflect: reflector of size {self.size} cannot act on shape {x.shape}"
            )
        v = self._v
        if x.ndim == 1:
            return x - 2.0 * (v @ x) * v
        return x - 2.0 * np.outer(v, v @ x)

    def reflect_rows(self, a: ArrayLike) -> NDArray[np.floating[Any]]:
        """A·H, i.e. H applied to every row of A."""
        a = np.asarray(a, dtype=np.float64)
        if a.shape[-1] != self.size:
            raise DimensionError(
                f"reflect_rows: reflector of size {self.size} cannot act on shape {a.shape}"
            )
        v = self._v
        if a.ndim == 1:
            return a - 2.0 * (a @ v) * v
        return a - 2.0 * np.outer(a @ v, v)

    def H(self) -> NDArray[np.floating[Any]]:
        """Dense n x n reflection matrix."""
        return np.eye(self.size) - 2.0 * np.outer(self._v, self._v)

    @staticmethod
    def product(
        reflectors: Sequence[Optional[Householder]],
        n_rows: int,
        n_cols: int,
    ) -> NDArray[np.floating[Any]]:
        """
        H1·H2·…·Hk·I(n_rows, n_cols), applying reflectors right to left.

        None entries are skipped. Every reflector must have size n_rows.
        """
        result = np.eye(n_rows, n_cols)
        for h in reversed(reflectors):
            if h is None:
                continue
            result = h.reflect(result)
        return result

    def __repr__(self) -> str:
        return f"Householder(size={self.size})"


class Givens:
    """
    Givens rotation in the (i, j) plane of R^dim.

    G equals the identity except G[i,i] = G[j,j] = c, G[i,j] = s and
    G[j,i] = -s.
    """

    def __init__(self, dim: int, i: int, j: int, c: float, s: float):
        if dim < 2:
            raise ValidationError(f"dim: must be >= 2, got {dim}")
        for name, idx in (("i", i), ("j", j)):
            if not 0 <= idx < dim:
                raise ValidationError(f"{name}: index {idx} out of range for dim={dim}")
        if i == j:
            raise ValidationError(f"i and j must differ, got i=j={i}")

        self.dim = dim
        self.i = i
        self.j = j
        self.c = float(c)
        self.s = float(s)

    @staticmethod
    def _coefficients(a: float, b: float) -> tuple[float, float]:
        # scaled by |a| + |b| so the norm cannot overflow
        t = abs(a) + abs(b)
        if t == 0:
            return 1.0, 0.0
        v = t * math.sqrt((a / t) ** 2 + (b / t) ** 2)
        return a / v, b / v

    @classmethod
    def for_rows(cls, dim: int, i1: int, i2: int, a: float, b: float) -> Givens:
        """Rotation G with G·x = (…, r at i1, …, 0 at i2, …) when x[i1] = a, x[i2] = b."""
        c, s = cls._coefficients(a, b)
        return cls(dim, i1, i2, c, s)

    @classmethod
    def for_columns(cls, dim: int, j1: int, j2: int, a: float, b: float) -> Givens:
        """Rotation G with x·G zero at j2 when x[j1] = a, x[j2] = b."""
        c, s = cls._coefficients(a, b)
        return cls(dim, j1, j2, c, -s)

    def multiply(self, a: ArrayLike) -> NDArray[np.floating[Any]]:
        """G·A; only rows i and j change."""
        a = np.array(a, dtype=np.float64)
        if a.shape[0] != self.dim:
            raise DimensionError(
                f"multiply: rotation of dim {self.dim} cannot act on shape {a.shape}"
            )
        row_i = a[self.i].copy()
        row_j = a[self.j].copy()
        a[self.i] = self.c * row_i + self.s * row_j
        a[self.j] = -self.s * row_i + self.c * row_j
        return a

    def right_multiply(self, a: ArrayLike) -> NDArray[np.floating[Any]]:
        """A·G; only columns i and j change."""
        a = np.array(a, dtype=np.float64)
        if a.shape[-1] != self.dim:
            raise DimensionError(
                f"right_multiply: rotation of dim {self.dim} cannot act on shape {a.shape}"
            )
        col_i = a[..., self.i].copy()
        col_j = a[..., self.j].copy()
        a[..., self.i] = self.c * col_i - self.s * col_j
        a[..., self.j] = self.s * col_i + self.c * col_j
        return a

    def t(self) -> Givens:
        """Transpose (= inverse)."""
        return Givens(self.dim, self.i, self.j, self.c, -self.s)

    def to_array(self) -> NDArray[np.floating[Any]]:
        g = np.eye(self.dim)
        g[self.i, self.i] = self.c
        g[self.j, self.j] = self.c
        g[self.i, self.j] = self.s
        g[self.j, self.i] = -self.s
        return g

    @staticmethod
    def product(
        rotations: Iterable[Optional[Givens]],
        dim: int | None = None,
    ) -> NDArray[np.floating[Any]]:
        """
        G1·G2·…·Gk as a dense matrix; None entries are skipped.

        dim is only needed when every entry is None (or there are none).
        """
        present = [g for g in rotations if g is not None]
        if dim is None:
            if not present:
                raise ValueError("product of no rotations needs an explicit dim")
            dim = present[0].dim

        result = np.eye(dim)
        for g in reversed(present):
            result = g.multiply(result)
        return result

    def __repr__(self) -> str:
        return f"Givens(dim={self.dim}, i={self.i}, j={self.j}, c={self.c:g}, s={self.s:g})"
