"""
Anti-pattern test: Singular and degenerate inputs.

[T1] The closed forms divide by i, i - g or 1 - v. Each singular point
has a limit that must be returned exactly, not approached numerically.
"""

import pytest

from interest_theory.annuities import geometric, increasing, level
from interest_theory.bonds import BondPriceType, BondSpec
from interest_theory.rates import RateKind, convert


class TestAnnuitySingularities:
    """Limits at i = 0 and i = g."""

    @pytest.mark.anti_pattern
    def test_level_zero_rate(self) -> None:
        """[T1] a_n → n and s_n → n as i → 0."""
        assert level.pv_immediate(100, 0, 12) == 1200
        assert level.fv_immediate(100, 0, 12) == 1200

    @pytest.mark.anti_pattern
    def test_level_near_zero_rate_continuous(self) -> None:
        """Values just above i = 0 approach the limit."""
        assert level.pv_immediate(100, 1e-6, 12) == pytest.approx(1200, rel=1e-5)

    @pytest.mark.anti_pattern
    def test_geometric_rate_equals_growth(self) -> None:
        """[T1] i = g: every payment discounts to P/(1+i); PV = nP/(1+i)."""
        assert geometric.pv_immediate(250, 4, 4, 20) == 250 * 20 / 1.04

    @pytest.mark.anti_pattern
    @pytest.mark.parametrize("offset", [1e-7, 1e-10, 1e-13, -1e-13])
    def test_geometric_continuous_through_singularity(self, offset: float) -> None:
        """Growth a hair off the rate agrees with the limit (no cancellation)."""
        at = geometric.pv_immediate(250, 4, 4, 20)
        near = geometric.pv_immediate(250, 4 + offset, 4, 20)
        assert near == pytest.approx(at, rel=1e-6)

    @pytest.mark.anti_pattern
    def test_geometric_near_singularity_ten_periods(self) -> None:
        """[T1] g = i + 1e-13%: PV stays at P·n/(1+i) = 952.38."""
        result = geometric.pv_immediate(100, 5.0000000000001, 5, 10)
        assert result == pytest.approx(1000 / 1.05, rel=1e-9)

    @pytest.mark.anti_pattern
    def test_increasing_zero_rate(self) -> None:
        """[T1] At i = 0: nP + h·n(n-1)/2."""
        assert increasing.pv_immediate(100, 5, 0, 20) == pytest.approx(2000 + 5 * 190)


class TestDegenerateInputs:
    """Degenerate but valid inputs."""

    @pytest.mark.anti_pattern
    def test_bond_at_par_is_par(self) -> None:
        """Coupon = yield must classify as par, not premium by rounding."""
        for periods in (1, 7, 30, 100):
            assert BondSpec(1000, 4.25, 4.25, periods).price_type() is BondPriceType.PAR

    @pytest.mark.anti_pattern
    def test_zero_rate_conversion(self) -> None:
        """0% is 0% in every representation."""
        for kind in RateKind:
            assert convert(0, RateKind.EFFECTIVE, kind, 12).value == pytest.approx(0, abs=1e-15)

    @pytest.mark.anti_pattern
    def test_single_period(self) -> None:
        """n = 1: PV = P·v."""
        assert level.pv_immediate(100, 5, 1) == pytest.approx(100 / 1.05)
        assert geometric.pv_immediate(100, 3, 5, 1) == pytest.approx(100 / 1.05)
        assert increasing.pv_immediate(100, 10, 5, 1) == pytest.approx(100 / 1.05)
