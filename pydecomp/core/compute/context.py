"""
Execution context for dense matrix products.

Large matrix products may be split by rows across worker threads (NumPy
releases the GIL inside BLAS). The pool is an explicit object passed to
the decompositions that multiply matrices, never a hidden global: the
factorization control flow itself stays strictly sequential, and the
row-chunked product is reassembled in row order, so results do not
depend on scheduling.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pydecomp.core.exceptions import DimensionError

# Products with fewer output elements than this run inline (~100x100)
DEFAULT_PARALLEL_THRESHOLD = 100 * 100


@dataclass
class ExecutionContext:
    """
    Handle to the worker pool used for large matrix products.

    Attributes:
        max_workers: Worker threads; 1 means always multiply inline
        threshold: Minimum number of output elements before splitting rows

    A context that owns threads must be closed; use it as a context
    manager:

        with ExecutionContext(max_workers=4) as ctx:
            svd = SVD(A, context=ctx)
    """
    max_workers: int = 1
    threshold: int = DEFAULT_PARALLEL_THRESHOLD
    _executor: ThreadPoolExecutor | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.threshold < 1:
            raise ValueError(f"threshold must be >= 1, got {self.threshold}")

    @classmethod
    def serial(cls) -> ExecutionContext:
        """A context that never spawns threads."""
        return cls(max_workers=1)

    @classmethod
    def threaded(cls, max_workers: int | None = None, **kwargs: Any) -> ExecutionContext:
        """A context sized to the machine (capped at 4 workers by default)."""
        if max_workers is None:
            max_workers = min(os.cpu_count() or 1, 4)
        return cls(max_workers=max_workers, **kwargs)

    @property
    def is_parallel(self) -> bool:
        return self.max_workers > 1

    def _pool(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self.max_workers)
        return self._executor

    def matmul(
        self,
        a: NDArray[np.floating[Any]],
        b: NDArray[np.floating[Any]],
    ) -> NDArray[np.floating[Any]]:
        """
        Compute a @ b, splitting rows of a across workers when large.

        Raises:
            DimensionError: If the inner dimensions disagree
        """
        if a.ndim != 2 or b.ndim != 2 or a.shape[1] != b.shape[0]:
            raise DimensionError(
                f"incompatible shapes for multiplication: {a.shape} and {b.shape}"
            )

        m = a.shape[0]
        if not self.is_parallel or m * b.shape[1] < self.threshold or m < 2:
            return a @ b

        n_chunks = min(self.max_workers, m)
        bounds = np.linspace(0, m, n_chunks + 1, dtype=int)
        futures = [
            self._pool().submit(np.matmul, a[lo:hi], b)
            for lo, hi in zip(bounds[:-1], bounds[1:])
        ]
        return np.vstack([f.result() for f in futures])

    def chain(self, *matrices: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
        """Multiply matrices left to right."""
        if not matrices:
            raise ValueError("chain requires at least one matrix")
        result = matrices[0]
        for m in matrices[1:]:
            result = self.matmul(result, m)
        return result

    def close(self) -> None:
        """Shut down the worker pool, if one was started."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> ExecutionContext:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
