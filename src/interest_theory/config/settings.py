"""
Frozen configuration settings for the interest-theory solvers.

All configuration is immutable (frozen dataclasses) so that every solver
call is reproducible. The iteration budget is the only resource control in
the library.
"""

import os
from dataclasses import dataclass

from interest_theory.config.tolerances import BISECTION_TOLERANCE, NEWTON_TOLERANCE

#: Environment variable overriding the annuity bisection budget
MAX_ITERATIONS_ENV = "INTEREST_THEORY_MAX_ITERATIONS"


def _resolve_max_iterations(default: int = 100) -> int:
    """
    Resolve the annuity bisection budget with environment variable override.

    Priority:
    1. INTEREST_THEORY_MAX_ITERATIONS environment variable (if set)
    2. Default: 100

    Raises
    ------
    ValueError
        If the environment value is not a positive integer
    """
    env_value = os.environ.get(MAX_ITERATIONS_ENV)
    if not env_value:
        return default
    try:
        value = int(env_value)
    except ValueError as e:
        raise ValueError(
            f"CRITICAL: {MAX_ITERATIONS_ENV} must be an integer, got {env_value!r}"
        ) from e
    if value <= 0:
        raise ValueError(f"CRITICAL: {MAX_ITERATIONS_ENV} must be > 0, got {value}")
    return value


# =============================================================================
# Solver Configuration
# =============================================================================

@dataclass(frozen=True)
class SolverConfig:
    """
    Immutable root-finding configuration.

    Attributes
    ----------
    tolerance : float
        Bisection stopping width on the rate (percent units)
    max_iterations : int
        Annuity bisection budget. Override with INTEREST_THEORY_MAX_ITERATIONS.
    perpetuity_max_iterations : int
        Perpetuity bisection budget
    rate_lower : float
        Lower end of the rate bracket (percent)
    rate_upper : float
        Initial upper end of the rate bracket (percent); doubled until the
        target is bracketed
    rate_upper_limit : float
        Upper end beyond which bracketing gives up (percent)
    period_lower : int
        Smallest period count searched by the integer solver
    period_upper : int
        Initial upper period count; doubled until the target is bracketed
    period_upper_limit : int
        Period count beyond which bracketing gives up
    newton_tolerance : float
        Newton stopping tolerance for yield-from-price (decimal)
    newton_max_iterations : int
        Newton iteration budget
    """

    tolerance: float = BISECTION_TOLERANCE
    max_iterations: int = None  # type: ignore[assignment]  # Set in __post_init__
    perpetuity_max_iterations: int = 1000

    rate_lower: float = 0.0
    rate_upper: float = 20.0
    rate_upper_limit: float = 1e6

    period_lower: int = 1
    period_upper: int = 100
    period_upper_limit: int = 100_000

    newton_tolerance: float = NEWTON_TOLERANCE
    newton_max_iterations: int = 100

    def __post_init__(self) -> None:
        """Initialize max_iterations using resolver function."""
        # Frozen dataclass workaround: use object.__setattr__
        if self.max_iterations is None:
            object.__setattr__(self, "max_iterations", _resolve_max_iterations())


# =============================================================================
# Rate Configuration
# =============================================================================

@dataclass(frozen=True)
class RateConfig:
    """
    Immutable rate-conversion configuration.

    Attributes
    ----------
    standard_frequencies : tuple[int, ...]
        Compounding frequencies listed in equivalent-rate tables
    frequency_names : tuple[str, ...]
        Display names, parallel to standard_frequencies
    """

    standard_frequencies: tuple[int, ...] = (1, 2, 4, 12, 52, 365)
    frequency_names: tuple[str, ...] = (
        "Annual",
        "Semi-annual",
        "Quarterly",
        "Monthly",
        "Weekly",
        "Daily",
    )


# =============================================================================
# Schedule Configuration
# =============================================================================

@dataclass(frozen=True)
class ScheduleConfig:
    """
    Immutable schedule-generation configuration.

    Attributes
    ----------
    balance_floor : float
        Remaining balances are clamped at this floor
    """

    balance_floor: float = 0.0


# =============================================================================
# Master Configuration
# =============================================================================

@dataclass(frozen=True)
class Settings:
    """
    Master frozen configuration combining all sub-configs.

    Usage
    -----
    >>> from interest_theory.config.settings import SETTINGS
    >>> SETTINGS.solver.max_iterations
    100
    """

    solver: SolverConfig = SolverConfig()
    rates: RateConfig = RateConfig()
    schedule: ScheduleConfig = ScheduleConfig()


# Singleton instance - import this
SETTINGS = Settings()
