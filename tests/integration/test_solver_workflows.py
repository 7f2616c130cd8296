"""
Integration tests for end-to-end solver workflows.

Tests workflows that cross engines:
- Loan: rate conversion → payment solve → schedule → DataFrame → rate recovery
- Bond: terms → price → yield → cash flows → duration → price approximation
- Perpetuity: value → rate search → value in another representation
"""

import pandas as pd
import pytest

from interest_theory import (
    AnnuityShape,
    Geometric,
    Rate,
    RateKind,
    SolveForPayment,
    SolveForPresentValue,
    SolveForRate,
    solve,
)
from interest_theory.bonds import BondSpec, bond_yield
from interest_theory.config.tolerances import FINAL_BALANCE_TOLERANCE
from interest_theory.duration import (
    analyze,
    approximate_price_convexity,
    portfolio_duration,
    PortfolioComponent,
    price,
    yield_from_price,
)
from interest_theory.perpetuities import interest_rate_perpetuity, pv_level_perpetuity
from interest_theory.rates import equivalent_rates, equivalent_rates_table, periodic_rate


class TestLoanWorkflow:
    """Monthly loan from a quoted nominal rate."""

    @pytest.mark.integration
    def test_quote_to_schedule_to_rate(self, tolerances) -> None:
        """
        Quote 7.2% nominal monthly, amortize 15,000 over 5 years, then
        recover the per-period rate from the payment.
        """
        quoted = Rate(7.2, RateKind.NOMINAL, 12)
        result = solve(
            SolveForPayment(value=15_000, rate=quoted, periods=60, payments_per_year=12),
            with_schedule=True,
        )

        assert result.effective_rate == pytest.approx(0.6, abs=1e-10)
        schedule = result.schedule
        assert len(schedule) == 60
        assert abs(schedule.final_balance) < FINAL_BALANCE_TOLERANCE

        df = schedule.to_dataframe()
        assert isinstance(df, pd.DataFrame)
        assert df["principal_portion"].sum() == pytest.approx(15_000, abs=tolerances.integration)
        assert (df["remaining_balance"].diff().dropna() <= 0).all()

        recovered = solve(SolveForRate(value=15_000, payment=result.value, periods=60))
        assert recovered.value == pytest.approx(0.6, abs=tolerances.validation)

    @pytest.mark.integration
    def test_growing_payments_schedule(self) -> None:
        """A geometric stream valued, then amortized from its own PV."""
        shape = AnnuityShape(Geometric(2))
        result = solve(
            SolveForPresentValue(payment=1000, rate=Rate(6), periods=20, shape=shape),
            with_schedule=True,
        )

        schedule = result.schedule
        assert schedule[0].interest_portion == pytest.approx(result.value * 0.06)
        assert schedule[-1].payment == pytest.approx(1000 * 1.02**19)
        assert abs(schedule.final_balance) < FINAL_BALANCE_TOLERANCE


class TestBondWorkflow:
    """Bond pricing feeding the duration engine."""

    @pytest.mark.integration
    def test_price_yield_duration(self, premium_bond: BondSpec, tolerances) -> None:
        """Both yield solvers agree; convexity approximates a 1% shift."""
        bond_price = premium_bond.price()

        bisected = bond_yield(bond_price, 1000, 6, 1000, 10)
        flows = premium_bond.cash_flows()
        newton = yield_from_price(flows, bond_price)
        assert bisected / 100 == pytest.approx(newton, abs=tolerances.validation)

        measures = analyze(flows, newton)
        shifted = price(flows, newton + 0.01)
        approx = approximate_price_convexity(
            bond_price,
            newton,
            newton + 0.01,
            measures.modified_duration,
            measures.modified_convexity,
        )
        assert abs(approx - shifted) / shifted < 1e-3

    @pytest.mark.integration
    def test_portfolio_of_bonds(self, premium_bond: BondSpec, discount_bond: BondSpec) -> None:
        """Portfolio duration lies between its holdings' durations."""
        components = []
        for bond in (premium_bond, discount_bond):
            measures = analyze(bond.cash_flows(), 0.05)
            components.append(PortfolioComponent(measures.macaulay_duration, bond.price()))

        result = portfolio_duration(components)
        durations = sorted(c.duration for c in components)
        assert durations[0] < result < durations[1]


class TestRateWorkflow:
    """Rates flowing between engines."""

    @pytest.mark.integration
    def test_perpetuity_rate_in_nominal_terms(self) -> None:
        """Solve a perpetuity rate and report it as nominal quarterly."""
        pv = pv_level_perpetuity(100, 8, RateKind.NOMINAL, 4)
        nominal = interest_rate_perpetuity(
            pv, 100, rate_kind=RateKind.NOMINAL, compounding_frequency=4
        )
        assert nominal == pytest.approx(8, abs=1e-6)

    @pytest.mark.integration
    def test_equivalent_rates_consistent(self) -> None:
        """The summary record and the table agree."""
        summary = equivalent_rates(6, RateKind.EFFECTIVE)
        table = equivalent_rates_table(6, RateKind.EFFECTIVE)

        by_frequency = dict(summary.nominal_rates)
        for row in table.itertuples():
            assert row.nominal_rate == pytest.approx(by_frequency[row.frequency])
        assert periodic_rate(summary.effective_rate, 12) * 12 == pytest.approx(
            by_frequency[12]
        )
