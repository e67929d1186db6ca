"""
Exception hierarchy for pydecomp.

All exceptions inherit from PyDecompError to allow catching any
library-specific error. Factorization-specific failures inherit from
the appropriate base class here.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyDecompError(Exception):
    """Base exception for all pydecomp errors."""
    pass


class ValidationError(PyDecompError):
    """
    Input validation failed.

    Raised when a matrix handed to a decomposition fails a precondition
    (non-numeric data, non-finite entries, asymmetry, ...).
    """
    pass


class DimensionError(ValidationError):
    """
    Matrix dimensions are incorrect for the requested decomposition.

    Raised e.g. when Householder QR receives a fat matrix or LU receives
    a non-square matrix.
    """
    pass


class NumericalError(PyDecompError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during a
    factorization.
    """
    pass


class SingularMatrixError(NumericalError):
    """
    Matrix is singular or nearly singular.

    Raised by LU when a pivot is numerically zero while the entry it
    must divide is not. Retrying with a larger epsilon may succeed.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        pivot_index: Elimination step at which the zero pivot was met
        pivot: The numerically zero pivot value
        epsilon: The precision threshold in effect
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        pivot_index: int | None = None,
        pivot: float | None = None,
        epsilon: float | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.pivot_index = pivot_index
        self.pivot = pivot
        self.epsilon = epsilon


class NotPositiveDefiniteError(NumericalError):
    """
    Matrix is not positive definite.

    Raised by Cholesky when a diagonal residual is non-positive, before
    its square root is taken.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        row: Row at which the non-positive residual appeared
        residual: The offending residual value
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        row: int | None = None,
        residual: float | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.row = row
        self.residual = residual


class InternalInvariantError(NumericalError):
    """
    An internal invariant of an algorithm was violated.

    This should never happen for any input: it signals malformed internal
    state (e.g. SVD deflation could not find the zero pivot row it was
    told exists), not bad user data.

    Attributes:
        stage: Algorithm stage that detected the violation
    """

    def __init__(self, message: str, stage: str | None = None):
        super().__init__(message)
        self.stage = stage


class ConvergenceError(PyDecompError):
    """
    Iterative algorithm failed to converge.

    Raised by the SVD with strict=True when its iteration cap is reached;
    by default it only warns.

    Attributes:
        iterations: Number of iterations completed
        final_change: Final residual quantity (e.g. largest off-diagonal entry)
        reason: Why convergence failed (e.g., 'max_iterations')
        threshold: The convergence threshold that was not met
    """

    def __init__(
        self,
        message: str,
        iterations: int,
        final_change: float | None = None,
        reason: str | None = None,
        threshold: float | None = None
    ):
        super().__init__(message)
        self.iterations = iterations
        self.final_change = final_change
        self.reason = reason
        self.threshold = threshold
