"""
interest-theory: Financial-mathematics solvers for annuities, bonds and rates.

Quick Start
-----------
>>> from interest_theory import Rate, SolveForPayment, solve
>>> result = solve(SolveForPayment(value=772.17, rate=Rate(5), periods=10))
>>> round(result.value, 2)
100.0

Rates are in percent units (5 means 5%) everywhere except the duration
engine, which takes decimal rates.

Version: 0.1.0
"""

__version__ = "0.1.0"

# =============================================================================
# Calculator - Primary API
# =============================================================================
from interest_theory.calculator import (
    AnnuitySolution,
    SolveForFutureValue,
    SolveForPayment,
    SolveForPeriods,
    SolveForPresentValue,
    SolveForRate,
    ValueBasis,
    solve,
)
from interest_theory.annuities import (
    AnnuityShape,
    Geometric,
    Increasing,
    Level,
    PaymentTiming,
)

# =============================================================================
# Rates
# =============================================================================
from interest_theory.rates import Rate, RateKind, convert, equivalent_rates

# =============================================================================
# Schedules
# =============================================================================
from interest_theory.schedules import (
    AmortizationEntry,
    Schedule,
    generate_schedule,
    level_schedule,
)

# =============================================================================
# Bonds
# =============================================================================
from interest_theory.bonds import (
    BondPriceType,
    BondSpec,
    CallSchedule,
    bond_price,
    callable_bond_price,
)

# =============================================================================
# Perpetuities
# =============================================================================
from interest_theory.perpetuities import (
    PerpetuityTiming,
    pv_growing_perpetuity,
    pv_level_perpetuity,
)

# =============================================================================
# Duration
# =============================================================================
from interest_theory.duration import CashFlow, DurationResult, analyze

# =============================================================================
# Configuration and Errors
# =============================================================================
from interest_theory.config.settings import SETTINGS
from interest_theory.errors import (
    ConvergenceFailure,
    DomainError,
    InterestTheoryError,
    InvalidPeriodsError,
    UnsupportedConversionError,
    ValidationError,
)

__all__ = [
    "__version__",
    # Calculator
    "solve",
    "SolveForPresentValue",
    "SolveForFutureValue",
    "SolveForPayment",
    "SolveForRate",
    "SolveForPeriods",
    "AnnuitySolution",
    "ValueBasis",
    "AnnuityShape",
    "PaymentTiming",
    "Level",
    "Increasing",
    "Geometric",
    # Rates
    "Rate",
    "RateKind",
    "convert",
    "equivalent_rates",
    # Schedules
    "AmortizationEntry",
    "Schedule",
    "level_schedule",
    "generate_schedule",
    # Bonds
    "BondSpec",
    "CallSchedule",
    "BondPriceType",
    "bond_price",
    "callable_bond_price",
    # Perpetuities
    "PerpetuityTiming",
    "pv_level_perpetuity",
    "pv_growing_perpetuity",
    # Duration
    "CashFlow",
    "DurationResult",
    "analyze",
    # Configuration
    "SETTINGS",
    # Errors
    "InterestTheoryError",
    "DomainError",
    "InvalidPeriodsError",
    "UnsupportedConversionError",
    "ValidationError",
    "ConvergenceFailure",
]
