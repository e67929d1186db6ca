"""
pydecomp: dense real-matrix factorizations for Python.

QR (Householder, Gram-Schmidt), LU (Doolittle), Cholesky, LDL and SVD
(Golub-Kahan), with pivoting, rank detection and epsilon-based decisions
about what counts as numerically zero.

Submodules:
    core: Exceptions, validation, protocols and numeric infrastructure
    factorization: The decompositions and their public API
"""

__version__ = "0.1.0"

from pydecomp import core
from pydecomp import factorization
from pydecomp.core.compute import ExecutionContext, auto_epsilon
from pydecomp.factorization import (
    QR,
    LU,
    SVD,
    Cholesky,
    LDL,
    qr,
    lu,
    cholesky,
    ldl,
    svd,
)

__all__ = [
    "__version__",
    "core",
    "factorization",
    "ExecutionContext",
    "auto_epsilon",
    "QR",
    "LU",
    "SVD",
    "Cholesky",
    "LDL",
    "qr",
    "lu",
    "cholesky",
    "ldl",
    "svd",
]
