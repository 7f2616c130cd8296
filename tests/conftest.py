"""
Centralized pytest fixtures for the interest-theory test suite.

This module provides shared fixtures used across all test categories:
- anti_patterns/
- unit/
- properties/
- validation/
- integration/

Fixture Categories:
1. Tolerance Tiers - Tiered precision per test type
2. Textbook Examples - Known-answer inputs (Kellison)
3. Bond Fixtures - Premium, discount and callable bonds
4. Cash-Flow Fixtures - Coupon bond and zero-coupon flows
"""

from dataclasses import dataclass

import pytest

from interest_theory.bonds import BondSpec, CallSchedule
from interest_theory.duration import CashFlow


# =============================================================================
# TOLERANCE TIERS
# =============================================================================

@dataclass(frozen=True)
class ToleranceTiers:
    """
    Tiered tolerance framework for different test types.

    Derived from precision requirements, not ad hoc.
    See: interest_theory/config/tolerances.py
    """

    # Anti-pattern tests: Very tight (closed-form identities)
    anti_pattern: float = 1e-10

    # Validation tests: round trips and solver recovery
    validation: float = 1e-6

    # Textbook values quoted to the cent
    textbook: float = 0.01

    # Integration tests: Workflow correctness
    integration: float = 1e-4


TOLERANCES = ToleranceTiers()


@pytest.fixture(scope="session")
def tolerances() -> ToleranceTiers:
    """Provide tiered tolerance settings for all tests."""
    return TOLERANCES


# =============================================================================
# TEXTBOOK EXAMPLES
# =============================================================================

@dataclass(frozen=True)
class LevelAnnuityExample:
    """PMT=100, i=5%, n=10 annuity-immediate."""

    payment: float = 100.0
    rate: float = 5.0
    periods: int = 10
    present_value: float = 772.17
    future_value: float = 1257.79


@pytest.fixture
def level_example() -> LevelAnnuityExample:
    """[T1] Standard level annuity known answers."""
    return LevelAnnuityExample()


@pytest.fixture
def loan_terms() -> dict:
    """A 10-year annual-payment loan of 10,000 at 6%."""
    return {"loan_amount": 10_000.0, "rate": 6.0, "periods": 10}


# =============================================================================
# BOND FIXTURES
# =============================================================================

@pytest.fixture
def premium_bond() -> BondSpec:
    """6% coupon, 5% yield, 10 periods: trades above par."""
    return BondSpec(face_value=1000.0, coupon_rate=6.0, yield_rate=5.0, periods=10)


@pytest.fixture
def discount_bond() -> BondSpec:
    """4% coupon, 5% yield, 10 periods: trades below par."""
    return BondSpec(face_value=1000.0, coupon_rate=4.0, yield_rate=5.0, periods=10)


@pytest.fixture
def call_schedule() -> CallSchedule:
    """Calls at periods 5, 7, 10 with declining call premiums."""
    return CallSchedule(call_dates=(5, 7, 10), call_prices=(1050.0, 1025.0, 1000.0))


# =============================================================================
# CASH-FLOW FIXTURES
# =============================================================================

@pytest.fixture
def coupon_bond_flows() -> list[CashFlow]:
    """5-year 6% annual coupon bond with 1000 face."""
    flows = [CashFlow(time=t, amount=60.0) for t in range(1, 5)]
    flows.append(CashFlow(time=5, amount=1060.0))
    return flows


@pytest.fixture
def zero_coupon_flows() -> list[CashFlow]:
    """Single payment of 1000 at t=7."""
    return [CashFlow(time=7, amount=1000.0)]
