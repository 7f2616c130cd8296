"""
Centralized tolerance framework for the interest-theory solvers.

All tolerances are derived from precision requirements, not ad hoc tuning.

Tolerance Tiers:
    Tier 1 (Analytical): Closed-form identities, machine precision achievable
    Tier 2 (Round-Trip): Forward/inverse pairs (conversions, solvers)
    Tier 3 (Iterative): Bisection and Newton solvers
    Tier 4 (Schedules): Accumulated rounding across period-by-period tables

References:
    [T1] Higham (2002) "Accuracy and Stability of Numerical Algorithms"
    [T1] Kellison (2009) "The Theory of Interest", 3rd ed.
"""

from typing import Final

# =============================================================================
# Tier 1: Analytical Tolerances (Deterministic)
# =============================================================================
# For closed-form identities such as PV_due = PV_immediate × (1+i).
# Limited only by double precision on sums of ~1e3 terms.

#: Closed-form identity checks (relative)
ANALYTICAL_TOLERANCE: Final[float] = 1e-10

#: Degenerate-case agreement (g=0 vs level, i=g singularity)
DEGENERACY_TOLERANCE: Final[float] = 1e-8


# =============================================================================
# Tier 2: Round-Trip Tolerances
# =============================================================================

#: convert(convert(r, A, B), B, A) ≈ r, in percent units
RATE_ROUND_TRIP_TOLERANCE: Final[float] = 1e-6

#: Solve-for-X then recompute, in currency units
SOLVER_ROUND_TRIP_TOLERANCE: Final[float] = 1e-6

#: Textbook examples quoted to 2 decimal places; allow 0.01 absolute
TEXTBOOK_TOLERANCE: Final[float] = 0.01


# =============================================================================
# Tier 3: Iterative Solver Tolerances
# =============================================================================

#: Bisection stopping width on the rate, in percent units
BISECTION_TOLERANCE: Final[float] = 1e-10

#: Newton stopping tolerance on the yield, as a decimal
NEWTON_TOLERANCE: Final[float] = 1e-12

#: A rate recovered by bisection must match the true rate to this many
#: percentage points
RATE_RECOVERY_TOLERANCE: Final[float] = 1e-6


# =============================================================================
# Tier 4: Schedule Tolerances
# =============================================================================

#: Sum of principal portions vs original principal (currency units)
SCHEDULE_CLOSURE_TOLERANCE: Final[float] = 1e-6

#: Final remaining balance vs zero (currency units)
FINAL_BALANCE_TOLERANCE: Final[float] = 1e-6


# =============================================================================
# Tolerance Registry (For Dynamic Access)
# =============================================================================

TOLERANCE_REGISTRY: dict[str, float] = {
    # Tier 1: Analytical
    "analytical": ANALYTICAL_TOLERANCE,
    "degeneracy": DEGENERACY_TOLERANCE,
    # Tier 2: Round-trip
    "rate_round_trip": RATE_ROUND_TRIP_TOLERANCE,
    "solver_round_trip": SOLVER_ROUND_TRIP_TOLERANCE,
    "textbook": TEXTBOOK_TOLERANCE,
    # Tier 3: Iterative
    "bisection": BISECTION_TOLERANCE,
    "newton": NEWTON_TOLERANCE,
    "rate_recovery": RATE_RECOVERY_TOLERANCE,
    # Tier 4: Schedules
    "schedule_closure": SCHEDULE_CLOSURE_TOLERANCE,
    "final_balance": FINAL_BALANCE_TOLERANCE,
}


def get_tolerance(name: str) -> float:
    """
    Get tolerance by name from registry.

    Parameters
    ----------
    name : str
        Tolerance name (see TOLERANCE_REGISTRY keys)

    Returns
    -------
    float
        Tolerance value

    Raises
    ------
    KeyError
        If tolerance name not found
    """
    if name not in TOLERANCE_REGISTRY:
        available = ", ".join(sorted(TOLERANCE_REGISTRY.keys()))
        raise KeyError(f"Unknown tolerance '{name}'. Available: {available}")
    return TOLERANCE_REGISTRY[name]
