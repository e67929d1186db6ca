"""
Core infrastructure for pydecomp.

This module provides the shared abstractions and utilities used by every
factorization in pydecomp.factorization.

Key components:
    protocols: QRDecomposition, LUDecomposition, SVDDecomposition protocols
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Precision, execution context and timing utilities
"""

from pydecomp.core.protocols import (
    QRDecomposition,
    LUDecomposition,
    SVDDecomposition,
)
from pydecomp.core.exceptions import (
    PyDecompError,
    ValidationError,
    DimensionError,
    NumericalError,
    SingularMatrixError,
    NotPositiveDefiniteError,
    InternalInvariantError,
    ConvergenceError,
)

__all__ = [
    # Protocols
    "QRDecomposition",
    "LUDecomposition",
    "SVDDecomposition",
    # Exceptions
    "PyDecompError",
    "ValidationError",
    "DimensionError",
    "NumericalError",
    "SingularMatrixError",
    "NotPositiveDefiniteError",
    "InternalInvariantError",
    "ConvergenceError",
]
