"""
Anti-pattern test: Solvers never fail silently.

[T1] Out-of-domain inputs and failed searches must raise. A NaN, an
infinity or a best-guess number returned in their place is a defect.
"""

import math

import pytest

from interest_theory.annuities import geometric, increasing, level
from interest_theory.bonds import bond_yield
from interest_theory.errors import (
    ConvergenceFailure,
    DomainError,
    InterestTheoryError,
    InvalidPeriodsError,
)
from interest_theory.perpetuities import (
    fv_perpetuity,
    interest_rate_perpetuity,
    pv_growing_perpetuity,
    pv_level_perpetuity,
)


class TestSearchFailuresRaise:
    """Failed searches raise ConvergenceFailure instead of returning a guess."""

    @pytest.mark.anti_pattern
    def test_level_rate_unattainable(self) -> None:
        """
        [T1] PV above Σ payments requires a negative rate.

        The rate search is over i ≥ 0, so no answer exists.
        """
        with pytest.raises(ConvergenceFailure):
            level.rate_from_pv(1500, 100, 10)

    @pytest.mark.anti_pattern
    def test_increasing_rate_unattainable(self) -> None:
        """Same for increasing annuities."""
        with pytest.raises(ConvergenceFailure):
            increasing.rate_from_pv(10_000, 100, 10, 10)

    @pytest.mark.anti_pattern
    def test_geometric_periods_unattainable(self) -> None:
        """
        [T1] With g < i the PV is bounded by P/(i-g).

        Targets above the bound have no period count.
        """
        with pytest.raises(ConvergenceFailure):
            geometric.periods_from_pv(100 / 0.02 + 1, 100, 3, 5)

    @pytest.mark.anti_pattern
    def test_bond_yield_unattainable(self) -> None:
        """A price above total payments has no non-negative yield."""
        with pytest.raises(ConvergenceFailure):
            bond_yield(5000, 1000, 5, 1000, 10)

    @pytest.mark.anti_pattern
    def test_perpetuity_zero_value(self) -> None:
        """A zero PV cannot be produced by any finite rate."""
        with pytest.raises(ConvergenceFailure):
            interest_rate_perpetuity(0, 100)

    @pytest.mark.anti_pattern
    @pytest.mark.parametrize(
        "present_value,kwargs",
        [
            (100, {"timing": "continuous"}),
            (0, {"deferral_periods": 100}),
            (0, {"timing": "continuous", "deferral_periods": 100}),
        ],
    )
    def test_perpetuity_unattainable_never_overflows(
        self, present_value: float, kwargs: dict
    ) -> None:
        """Unreachable values end in ConvergenceFailure, not a raw OverflowError."""
        with pytest.raises(ConvergenceFailure):
            interest_rate_perpetuity(present_value, 100, **kwargs)

    @pytest.mark.anti_pattern
    def test_failure_carries_context(self) -> None:
        """ConvergenceFailure records the iteration count."""
        with pytest.raises(ConvergenceFailure) as excinfo:
            level.rate_from_pv(1500, 100, 10)
        assert excinfo.value.iterations >= 0


class TestDomainErrorsRaise:
    """Undefined formulas raise instead of returning inf or NaN."""

    @pytest.mark.anti_pattern
    @pytest.mark.parametrize(
        "call",
        [
            lambda: level.pv_immediate(100, 5, 0),
            lambda: level.fv_due(100, 5, -1),
            lambda: increasing.pv_due(100, 10, 5, 0),
            lambda: geometric.pv_immediate(100, 3, 5, -2),
        ],
    )
    def test_non_positive_periods(self, call) -> None:
        """Periods ≤ 0 are rejected everywhere."""
        with pytest.raises(InvalidPeriodsError):
            call()

    @pytest.mark.anti_pattern
    def test_perpetuity_at_zero_rate(self) -> None:
        """[T1] PMT/i is infinite at i = 0."""
        with pytest.raises(DomainError):
            pv_level_perpetuity(100, 0)

    @pytest.mark.anti_pattern
    def test_growing_perpetuity_at_singularity(self) -> None:
        """[T1] PMT/(i-g) is infinite at i = g."""
        with pytest.raises(DomainError):
            pv_growing_perpetuity(100, 5, 5)

    @pytest.mark.anti_pattern
    def test_perpetuity_future_value(self) -> None:
        """The FV of a perpetuity is never a number."""
        with pytest.raises(DomainError, match="infinite"):
            fv_perpetuity(100, 5)

    @pytest.mark.anti_pattern
    def test_all_errors_share_base(self) -> None:
        """Callers can catch every library error at one base class."""
        for error in (ConvergenceFailure, DomainError, InvalidPeriodsError):
            assert issubclass(error, InterestTheoryError)


class TestNoNaN:
    """Valid inputs always produce finite numbers."""

    @pytest.mark.anti_pattern
    @pytest.mark.parametrize(
        "value",
        [
            level.pv_immediate(100, 0, 10),
            level.fv_due(100, 0, 10),
            increasing.pv_immediate(100, 10, 0, 10),
            geometric.pv_immediate(100, 5, 5, 10),
            geometric.pv_immediate(100, 0, 0, 10),
            geometric.pv_due(100, -3, 0, 10),
        ],
    )
    def test_zero_rate_and_singular_cases_finite(self, value: float) -> None:
        """[T1] i = 0 and i = g are handled in closed form."""
        assert math.isfinite(value)
