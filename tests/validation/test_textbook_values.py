"""
Known-answer validation against textbook examples.

[T1] Values quoted to the cent (or to 4 decimals for rates) from standard
interest-theory texts. Tolerances follow the quoted precision.

References:
    [T1] Kellison (2009) "The Theory of Interest", 3rd ed.
    [T1] Broverman (2017) "Mathematics of Investment and Credit", 7th ed.
"""

import math

import pytest

from interest_theory.annuities import level
from interest_theory.bonds import bond_price
from interest_theory.calculator import SolveForPayment, solve
from interest_theory.config.tolerances import TEXTBOOK_TOLERANCE
from interest_theory.duration import PortfolioComponent, portfolio_duration
from interest_theory.perpetuities import pv_growing_perpetuity, pv_level_perpetuity
from interest_theory.rates import Rate, RateKind, convert, to_effective
from interest_theory.schedules import level_schedule

# (description, computed, expected)
ANNUITY_CASES = [
    ("a_10 at 5%, PMT 100", lambda: level.pv_immediate(100, 5, 10), 772.17),
    ("s_10 at 5%, PMT 100", lambda: level.fv_immediate(100, 5, 10), 1257.79),
    ("ä_10 at 5%, PMT 100", lambda: level.pv_due(100, 5, 10), 810.78),
    ("s̈_10 at 5%, PMT 100", lambda: level.fv_due(100, 5, 10), 1320.68),
    ("6|a_12 at 0.5%, PMT 100", lambda: level.pv_deferred(100, 0.5, 12, 6), 1127.64),
    ("a_30 at 8%, PMT 1000", lambda: level.pv_immediate(1000, 8, 30), 11257.78),
]


class TestAnnuityTextbook:
    """Level annuity known answers."""

    @pytest.mark.validation
    @pytest.mark.parametrize("description,compute,expected", ANNUITY_CASES)
    def test_known_value(self, description: str, compute, expected: float) -> None:
        """[T1] Matches the quoted value to the cent."""
        result = compute()
        assert abs(result - expected) < TEXTBOOK_TOLERANCE, (
            f"{description}: expected {expected}, got {result:.4f}"
        )

    @pytest.mark.validation
    def test_loan_payment(self) -> None:
        """[T1] 10,000 over 10 years at 6%: payment 1358.68."""
        schedule = level_schedule(10_000, 6, 10)
        assert abs(schedule[0].payment - 1358.68) < TEXTBOOK_TOLERANCE
        assert abs(schedule.total_interest - 3586.80) < 0.05

    @pytest.mark.validation
    def test_mortgage_monthly_payment(self) -> None:
        """[T1] 200,000 over 30 years at 6% nominal monthly: payment 1199.10."""
        result = solve(
            SolveForPayment(
                value=200_000,
                rate=Rate(6, RateKind.NOMINAL, 12),
                periods=360,
                payments_per_year=12,
            )
        )
        assert abs(result.value - 1199.10) < TEXTBOOK_TOLERANCE


class TestRateTextbook:
    """Equivalent-rate known answers."""

    @pytest.mark.validation
    @pytest.mark.parametrize(
        "rate,kind,frequency,expected",
        [
            (12.0, RateKind.NOMINAL, 12, 12.6825),
            (6.0, RateKind.NOMINAL, 4, 6.1364),
            (5.0, RateKind.FORCE, 1, 5.1271),
            (5.0, RateKind.DISCOUNT, 1, 5.2632),
            (8.0, RateKind.DISCOUNT, 4, 8.4166),
        ],
    )
    def test_effective_equivalent(
        self, rate: float, kind: RateKind, frequency: int, expected: float
    ) -> None:
        """[T1] Effective annual equivalents to 4 decimals."""
        assert abs(to_effective(rate, kind, frequency) - expected) < 1e-4

    @pytest.mark.validation
    def test_force_of_five_percent(self) -> None:
        """[T1] δ = ln(1.05) = 4.8790%."""
        assert abs(convert(5, "effective", "force").value - 4.8790) < 1e-4

    @pytest.mark.validation
    def test_daily_nominal_near_continuous(self) -> None:
        """Daily compounding is close to continuous: e^0.05 - 1."""
        effective = to_effective(5, RateKind.NOMINAL, 365)
        assert abs(effective - math.expm1(0.05) * 100) < 1e-3


class TestBondTextbook:
    """Bond price known answers."""

    @pytest.mark.validation
    @pytest.mark.parametrize(
        "face,coupon,redemption,yield_rate,periods,expected",
        [
            (1000, 6, 1000, 5, 10, 1077.22),
            (1000, 4, 1000, 5, 10, 922.78),
            (1000, 4, 1000, 3, 20, 1148.77),
            (100, 5, 105, 4, 10, 111.49),
        ],
    )
    def test_price(
        self,
        face: float,
        coupon: float,
        redemption: float,
        yield_rate: float,
        periods: int,
        expected: float,
    ) -> None:
        """[T1] P = Fr·a_n + C·v^n."""
        result = bond_price(face, coupon, redemption, yield_rate, periods)
        assert abs(result - expected) < TEXTBOOK_TOLERANCE


class TestPerpetuityAndDurationTextbook:
    """Perpetuity and portfolio duration known answers."""

    @pytest.mark.validation
    def test_perpetuities(self) -> None:
        """[T1] 100/0.05 = 2000 and 100/(0.05-0.02) = 3333.33."""
        assert abs(pv_level_perpetuity(100, 5) - 2000.00) < TEXTBOOK_TOLERANCE
        assert abs(pv_growing_perpetuity(100, 2, 5) - 3333.33) < TEXTBOOK_TOLERANCE

    @pytest.mark.validation
    def test_portfolio_duration(self) -> None:
        """[T1] Weights 1/3 and 2/3 on durations 5 and 3: 3.67."""
        components = [PortfolioComponent(5, 1000), PortfolioComponent(3, 2000)]
        assert abs(portfolio_duration(components) - 3.67) < 0.005
