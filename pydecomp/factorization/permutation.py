"""
Compact permutation matrices.

A permutation matrix of size n is stored as n column indices: entry r is
the column holding the single 1 of row r. Multiplying by it is a fancy
index, never a dense product.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pydecomp.core.exceptions import DimensionError, ValidationError


class PermutationMatrix:
    """
    n x n permutation matrix P with P[r, data[r]] = 1.

    swap_rows, swap_columns, move_row_to_end and move_column_to_end update
    P in place; decompositions use them to record pivoting as it happens.
    """

    def __init__(self, data: ArrayLike):
        indices = np.asarray(data)
        if indices.ndim != 1 or indices.size == 0:
            raise ValidationError(
                f"data: expected non-empty 1D index array, got shape {indices.shape}"
            )
        if not np.issubdtype(indices.dtype, np.integer):
            raise ValidationError(f"data: expected integer indices, got dtype {indices.dtype}")
        if not np.array_equal(np.sort(indices), np.arange(indices.size)):
            raise ValidationError(
                f"data: {indices.tolist()} is not a permutation of 0..{indices.size - 1}"
            )
        self._data = indices.astype(np.intp)

    @classmethod
    def identity(cls, n: int) -> PermutationMatrix:
        return cls(np.arange(n))

    @classmethod
    def from_array(cls, matrix: ArrayLike) -> PermutationMatrix:
        """Build from a dense 0/1 matrix; anything else is rejected."""
        m = np.asarray(matrix, dtype=np.float64)
        if m.ndim != 2 or m.shape[0] != m.shape[1]:
            raise DimensionError(f"matrix: expected square 2D array, got shape {m.shape}")
        if not np.all((m == 0) | (m == 1)):
            raise ValidationError("matrix: entries must be exactly 0 or 1")
        if not (np.all(m.sum(axis=0) == 1) and np.all(m.sum(axis=1) == 1)):
            raise ValidationError("matrix: needs exactly one 1 in every row and column")
        return cls(np.argmax(m, axis=1))

    @property
    def size(self) -> int:
        return self._data.size

    @property
    def data(self) -> NDArray[np.intp]:
        return self._data.copy()

    @property
    def sign(self) -> int:
        """Determinant of P: +1 for an even permutation, -1 for an odd one."""
        seen = np.zeros(self.size, dtype=bool)
        transpositions = 0
        for start in range(self.size):
            length = 0
            k = start
            while not seen[k]:
                seen[k] = True
                k = self._data[k]
                length += 1
            if length:
                transpositions += length - 1
        return -1 if transpositions % 2 else 1

    def _check_index(self, idx: int, name: str) -> None:
        if not 0 <= idx < self.size:
            raise ValidationError(f"{name}: index {idx} out of range for size {self.size}")

    def swap_rows(self, i: int, j: int) -> None:
        self._check_index(i, "i")
        self._check_index(j, "j")
        self._data[[i, j]] = self._data[[j, i]]

    def swap_columns(self, i: int, j: int) -> None:
        self._check_index(i, "i")
        self._check_index(j, "j")
        at_i = self._data == i
        at_j = self._data == j
        self._data[at_i] = j
        self._data[at_j] = i

    def move_row_to_end(self, i: int) -> None:
        """Row i becomes the last row; the rows below it move up by one."""
        self._check_index(i, "i")
        row = self._data[i]
        self._data = np.concatenate([self._data[:i], self._data[i + 1:], [row]])

    def move_column_to_end(self, j: int) -> None:
        """Column j becomes the last column; the columns after it move left by one."""
        self._check_index(j, "j")
        moved = self._data == j
        self._data[self._data > j] -= 1
        self._data[moved] = self.size - 1

    def multiply(self, a: ArrayLike) -> NDArray[np.floating[Any]]:
        """P·A: row r of the result is row data[r] of A."""
        a = np.asarray(a, dtype=np.float64)
        if a.shape[0] != self.size:
            raise DimensionError(
                f"multiply: permutation of size {self.size} cannot act on shape {a.shape}"
            )
        return a[self._data].copy()

    def right_multiply(self, a: ArrayLike) -> NDArray[np.floating[Any]]:
        """A·P: column c of the result is column r of A where data[r] = c."""
        a = np.asarray(a, dtype=np.float64)
        if a.shape[-1] != self.size:
            raise DimensionError(
                f"right_multiply: permutation of size {self.size} cannot act on shape {a.shape}"
            )
        return a[..., np.argsort(self._data)].copy()

    def t(self) -> PermutationMatrix:
        """Transpose (= inverse)."""
        return PermutationMatrix(np.argsort(self._data))

    def to_array(self) -> NDArray[np.floating[Any]]:
        p = np.zeros((self.size, self.size))
        p[np.arange(self.size), self._data] = 1.0
        return p

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PermutationMatrix):
            return NotImplemented
        return np.array_equal(self._data, other._data)

    def __repr__(self) -> str:
        return f"PermutationMatrix({self._data.tolist()})"
