"""
Exception taxonomy for the interest-theory solvers.

NEVER fails silently - out-of-domain inputs raise instead of returning a
numeric result. Domain and validation errors also derive from ValueError so
callers catching ValueError keep working.
"""


class InterestTheoryError(Exception):
    """Base class for all interest-theory errors."""

    pass


class DomainError(InterestTheoryError, ValueError):
    """Raised when an input is mathematically undefined for the formula."""

    pass


class InvalidPeriodsError(DomainError):
    """Raised when a period count is not positive."""

    pass


class UnsupportedConversionError(InterestTheoryError, ValueError):
    """Raised when a rate kind (or kind pair) cannot be converted."""

    pass


class ValidationError(InterestTheoryError, ValueError):
    """Raised on structural mismatches such as malformed call schedules."""

    pass


class ConvergenceFailure(InterestTheoryError, ArithmeticError):
    """
    Raised when an iterative solver cannot produce a reliable answer.

    Attributes
    ----------
    iterations : int
        Iterations performed before giving up
    best_estimate : float or None
        Last midpoint, if a bracket was ever established
    """

    def __init__(
        self,
        message: str,
        iterations: int = 0,
        best_estimate: float | None = None,
    ) -> None:
        super().__init__(message)
        self.iterations = iterations
        self.best_estimate = best_estimate


def require_positive_periods(periods: float, name: str = "periods") -> None:
    """Raise InvalidPeriodsError unless periods > 0."""
    if periods <= 0:
        raise InvalidPeriodsError(f"CRITICAL: {name} must be > 0, got {periods}")
