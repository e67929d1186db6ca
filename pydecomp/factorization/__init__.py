"""
Dense matrix factorizations.

Strategies:
    householder_qr: QR by Householder reflections
    gram_schmidt: QR by stabilized Gram-Schmidt with column pivoting
    doolittle: LU with partial pivoting
    cholesky, ldl: symmetric factorizations
    bidiagonalization, golub_kahan: SVD

Public API:
    qr, lu, cholesky, ldl, svd and the QR, LU, SVD facades
"""

from pydecomp.factorization.elementary import Givens, Householder, HouseholderContext
from pydecomp.factorization.permutation import PermutationMatrix
from pydecomp.factorization.householder_qr import (
    HouseholderQR,
    HouseholderReflectors,
    householder_factor,
)
from pydecomp.factorization.gram_schmidt import GramSchmidtQR
from pydecomp.factorization.doolittle import Doolittle
from pydecomp.factorization.cholesky import Cholesky
from pydecomp.factorization.ldl import LDL
from pydecomp.factorization.bidiagonalization import Bidiagonalization
from pydecomp.factorization.golub_kahan import (
    GolubKahanStep,
    GolubKahanSVD,
    default_max_iterations,
    normalize_svd,
)
from pydecomp.factorization.solvers import (
    QR,
    LU,
    SVD,
    qr,
    lu,
    cholesky,
    ldl,
    svd,
)

__all__ = [
    # Elementary transforms
    "Givens",
    "Householder",
    "HouseholderContext",
    "PermutationMatrix",
    # Strategies
    "HouseholderQR",
    "HouseholderReflectors",
    "householder_factor",
    "GramSchmidtQR",
    "Doolittle",
    "Cholesky",
    "LDL",
    "Bidiagonalization",
    "GolubKahanStep",
    "GolubKahanSVD",
    "default_max_iterations",
    "normalize_svd",
    # Facades
    "QR",
    "LU",
    "SVD",
    # Functional API
    "qr",
    "lu",
    "cholesky",
    "ldl",
    "svd",
]
