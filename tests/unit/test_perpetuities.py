"""
Unit tests for perpetuities - perpetuities/valuation.py.

[T1] PV = PMT·adj / i (level), PMT·adj / (i - g) (growing), deferred by (1+i)^d
"""

import logging
import math

import pytest

from interest_theory.errors import ConvergenceFailure, DomainError, ValidationError
from interest_theory.perpetuities import (
    PerpetuityTiming,
    deferral_periods_perpetuity,
    fv_perpetuity,
    growth_rate_perpetuity,
    interest_rate_perpetuity,
    payment_growing_perpetuity,
    payment_level_perpetuity,
    pv_growing_perpetuity,
    pv_level_perpetuity,
    timing_adjustment,
)
from interest_theory.rates import RateKind


class TestTiming:
    """Tests for timing parsing and adjustment."""

    def test_adjustments(self) -> None:
        """Immediate 1, due 1+i, continuous e^(i/2)."""
        assert timing_adjustment("immediate", 5) == 1.0
        assert timing_adjustment(PerpetuityTiming.DUE, 5) == pytest.approx(1.05)
        assert timing_adjustment("continuous", 5) == pytest.approx(math.exp(0.025))

    def test_unknown_timing_raises(self) -> None:
        """Unknown timings raise ValidationError."""
        with pytest.raises(ValidationError, match="perpetuity timing"):
            PerpetuityTiming.parse("monthly")


class TestLevelPerpetuity:
    """Tests for level perpetuity PVs."""

    @pytest.mark.validation
    @pytest.mark.parametrize(
        "timing,deferral,expected",
        [
            (PerpetuityTiming.IMMEDIATE, 0, 2000.00),
            (PerpetuityTiming.DUE, 0, 2100.00),
            (PerpetuityTiming.CONTINUOUS, 0, 2050.63),
            (PerpetuityTiming.IMMEDIATE, 2, 1814.06),
        ],
    )
    def test_known_values(
        self, timing: PerpetuityTiming, deferral: float, expected: float
    ) -> None:
        """[T1] PMT=100 at 5% effective."""
        pv = pv_level_perpetuity(100, 5, timing=timing, deferral_periods=deferral)
        assert abs(pv - expected) < 0.01

    @pytest.mark.validation
    def test_nominal_quarterly(self) -> None:
        """[T1] 4% nominal quarterly is 4.0604% effective: PV = 2462.81."""
        pv = pv_level_perpetuity(100, 4, RateKind.NOMINAL, 4)
        assert abs(pv - 2462.81) < 0.01

    def test_force_of_interest(self) -> None:
        """Force δ gives i = e^δ - 1."""
        pv = pv_level_perpetuity(100, 5, "force")
        assert pv == pytest.approx(100 / math.expm1(0.05))

    @pytest.mark.parametrize("rate", [0, -2])
    def test_non_positive_rate_raises(self, rate: float) -> None:
        """Perpetuities need a positive rate."""
        with pytest.raises(DomainError, match="must be positive"):
            pv_level_perpetuity(100, rate)

    def test_negative_deferral_raises(self) -> None:
        """Deferral cannot be negative."""
        with pytest.raises(DomainError):
            pv_level_perpetuity(100, 5, deferral_periods=-1)


class TestGrowingPerpetuity:
    """Tests for growing perpetuity PVs."""

    @pytest.mark.validation
    @pytest.mark.parametrize(
        "timing,deferral,expected",
        [
            (PerpetuityTiming.IMMEDIATE, 0, 3333.33),
            (PerpetuityTiming.DUE, 0, 3500.00),
            (PerpetuityTiming.IMMEDIATE, 2, 3023.43),
        ],
    )
    def test_known_values(
        self, timing: PerpetuityTiming, deferral: float, expected: float
    ) -> None:
        """[T1] PMT=100, g=2%, i=5%."""
        pv = pv_growing_perpetuity(100, 2, 5, timing=timing, deferral_periods=deferral)
        assert abs(pv - expected) < 0.01

    @pytest.mark.parametrize("growth", [5, 6])
    def test_growth_not_below_rate_raises(self, growth: float) -> None:
        """i must exceed g."""
        with pytest.raises(DomainError, match="greater than growth rate"):
            pv_growing_perpetuity(100, growth, 5)

    def test_zero_growth_is_level(self) -> None:
        """g = 0 reduces to the level perpetuity."""
        assert pv_growing_perpetuity(100, 0, 5) == pytest.approx(pv_level_perpetuity(100, 5))

    def test_negative_growth(self) -> None:
        """Declining payments are allowed."""
        assert pv_growing_perpetuity(100, -3, 5) == pytest.approx(100 / 0.08)


class TestClosedFormInversions:
    """Tests for payment, growth and deferral inversions."""

    def test_level_payment(self) -> None:
        """[T1] PMT = PV·i."""
        assert payment_level_perpetuity(2000, 5) == pytest.approx(100)

    def test_level_payment_due_deferred(self) -> None:
        """Payment inversion honors timing and deferral."""
        pv = pv_level_perpetuity(100, 5, timing="due", deferral_periods=3)
        assert payment_level_perpetuity(pv, 5, timing="due", deferral_periods=3) == pytest.approx(100)

    def test_growing_payment(self) -> None:
        """[T1] PMT = PV·(i - g)."""
        pv = pv_growing_perpetuity(100, 2, 5, timing="continuous")
        assert payment_growing_perpetuity(pv, 2, 5, timing="continuous") == pytest.approx(100)

    def test_growth_rate(self) -> None:
        """[T1] g = i - PMT/PV."""
        pv = pv_growing_perpetuity(100, 2, 5)
        assert growth_rate_perpetuity(pv, 100, 5) == pytest.approx(2)

    def test_growth_rate_due_deferred(self) -> None:
        """Growth inversion honors timing and deferral."""
        pv = pv_growing_perpetuity(100, 1.5, 6, timing="due", deferral_periods=2)
        result = growth_rate_perpetuity(pv, 100, 6, timing="due", deferral_periods=2)
        assert result == pytest.approx(1.5)

    def test_growth_rate_zero_pv_raises(self) -> None:
        """PV must be positive."""
        with pytest.raises(DomainError):
            growth_rate_perpetuity(0, 100, 5)

    def test_deferral_periods(self) -> None:
        """[T1] d = ln(PV₀/PV) / ln(1+i)."""
        pv = pv_level_perpetuity(100, 5, deferral_periods=2)
        assert deferral_periods_perpetuity(pv, 100, 5) == pytest.approx(2)

    def test_deferral_periods_growing(self) -> None:
        """Deferral inversion for growing perpetuities."""
        pv = pv_growing_perpetuity(100, 2, 5, deferral_periods=4.5)
        assert deferral_periods_perpetuity(pv, 100, 5, growth_rate=2) == pytest.approx(4.5)


class TestInterestRate:
    """Tests for the bisection rate search."""

    def test_level(self) -> None:
        """PV=2000, PMT=100 gives 5%."""
        assert interest_rate_perpetuity(2000, 100) == pytest.approx(5, abs=1e-6)

    def test_growing(self) -> None:
        """The search starts above g."""
        pv = pv_growing_perpetuity(100, 2, 5)
        assert interest_rate_perpetuity(pv, 100, growth_rate=2) == pytest.approx(5, abs=1e-6)

    def test_due_deferred(self) -> None:
        """Timing and deferral are honored."""
        pv = pv_level_perpetuity(100, 7, timing="due", deferral_periods=3)
        result = interest_rate_perpetuity(pv, 100, timing="due", deferral_periods=3)
        assert result == pytest.approx(7, abs=1e-6)

    def test_result_in_requested_kind(self) -> None:
        """The rate is returned in the requested representation."""
        pv = pv_level_perpetuity(100, 4, RateKind.NOMINAL, 4)
        result = interest_rate_perpetuity(
            pv, 100, rate_kind=RateKind.NOMINAL, compounding_frequency=4
        )
        assert result == pytest.approx(4, abs=1e-6)

    def test_zero_present_value_raises(self) -> None:
        """A zero PV cannot be bracketed."""
        with pytest.raises(ConvergenceFailure):
            interest_rate_perpetuity(0, 100)

    def test_continuous_round_trip(self) -> None:
        """Continuous timing inverts within its decreasing range."""
        pv = pv_level_perpetuity(100, 5, timing="continuous")
        result = interest_rate_perpetuity(pv, 100, timing="continuous")
        assert result == pytest.approx(5, abs=1e-6)

    def test_continuous_below_minimum_raises(self) -> None:
        """
        [T1] e^(i/2)/i bottoms out at i = 200% (about 135.9 per 100 paid).

        Lower values are never reached and the search stops at the minimum.
        """
        with pytest.raises(ConvergenceFailure):
            interest_rate_perpetuity(100, 100, timing="continuous")

    def test_deferred_zero_value_raises(self) -> None:
        """A long deferral overflows (1+i)^d before any rate reaches zero value."""
        with pytest.raises(ConvergenceFailure):
            interest_rate_perpetuity(0, 100, deferral_periods=100)

    def test_failure_logs_warning(self, caplog) -> None:
        """A failed search logs a warning before re-raising."""
        with caplog.at_level(logging.WARNING, logger="interest_theory.perpetuities.valuation"):
            with pytest.raises(ConvergenceFailure):
                interest_rate_perpetuity(100, 100, timing="continuous")

        assert "Perpetuity rate search failed" in caplog.text


class TestFutureValue:
    """Tests for the undefined future value."""

    def test_always_raises(self) -> None:
        """A perpetuity never ends."""
        with pytest.raises(DomainError, match="infinite"):
            fv_perpetuity(100, 5)
