#!/usr/bin/env python3
"""
Loan Amortization Demo.

This example quotes a loan at a nominal annual rate, solves the monthly
payment, builds the amortization schedule and recovers the rate from the
payment. It answers the borrower's question:

    "What do I pay each month, and how much of it is interest?"

Key Concepts:
- Nominal rate i^(m): quoted annual rate, i^(m)/m credited each period
- Level payment: PMT = L / a_n at the periodic rate
- Amortization: each payment splits into interest on the outstanding
  balance and principal repaid

Usage:
    python examples/01_loan_amortization.py          # Interactive with plots
    python examples/01_loan_amortization.py --ci     # CI mode (no plots)
"""

import argparse
import sys
from dataclasses import dataclass

# Add src to path if running as script
sys.path.insert(0, "src")

from interest_theory import (
    Rate,
    RateKind,
    Schedule,
    SolveForPayment,
    SolveForRate,
    equivalent_rates,
    solve,
)


@dataclass
class LoanResult:
    """Results from the loan calculation."""

    loan_amount: float
    nominal_rate: float
    years: int
    monthly_payment: float
    effective_annual_rate: float
    recovered_monthly_rate: float
    schedule: Schedule


def analyze_loan(
    loan_amount: float = 250_000,
    nominal_rate: float = 6.0,
    years: int = 30,
) -> LoanResult:
    """
    Solve the monthly payment and schedule for a fixed-rate loan.

    Parameters
    ----------
    loan_amount : float
        Amount borrowed
    nominal_rate : float
        Annual rate compounded monthly, in percent
    years : int
        Loan term in years

    Returns
    -------
    LoanResult
        Payment, schedule and equivalent rates
    """
    quoted = Rate(nominal_rate, RateKind.NOMINAL, 12)
    periods = years * 12

    solution = solve(
        SolveForPayment(
            value=loan_amount,
            rate=quoted,
            periods=periods,
            payments_per_year=12,
        ),
        with_schedule=True,
    )

    # Round trip: the payment alone pins down the periodic rate
    recovered = solve(
        SolveForRate(value=loan_amount, payment=solution.value, periods=periods)
    )

    return LoanResult(
        loan_amount=loan_amount,
        nominal_rate=nominal_rate,
        years=years,
        monthly_payment=solution.value,
        effective_annual_rate=equivalent_rates(
            nominal_rate, RateKind.NOMINAL, 12
        ).effective_rate,
        recovered_monthly_rate=recovered.value,
        schedule=solution.schedule,
    )


def print_results(result: LoanResult) -> None:
    """Print loan summary."""
    schedule = result.schedule
    print("\n" + "=" * 60)
    print("LOAN SUMMARY")
    print("=" * 60)
    print(f"\nTerms:")
    print(f"  Loan Amount:        {result.loan_amount:,.2f}")
    print(f"  Nominal Rate:       {result.nominal_rate:.3f}% compounded monthly")
    print(f"  Effective Annual:   {result.effective_annual_rate:.4f}%")
    print(f"  Term:               {result.years} years ({len(schedule)} payments)")
    print(f"\nPayment:")
    print(f"  Monthly Payment:    {result.monthly_payment:,.2f}")
    print(f"  Total Paid:         {schedule.total_payments:,.2f}")
    print(f"  Total Interest:     {schedule.total_interest:,.2f}")
    print(f"\nRate recovered from payment: {result.recovered_monthly_rate:.6f}% per month")


def print_schedule_excerpt(schedule: Schedule, rows: int = 6) -> None:
    """Print the first and last rows of the schedule."""
    df = schedule.to_dataframe()
    columns = ["period", "payment", "interest_portion", "principal_portion", "remaining_balance"]

    print("\n" + "=" * 60)
    print("AMORTIZATION SCHEDULE (first and last rows)")
    print("=" * 60)
    print(df[columns].head(rows).to_string(index=False, float_format="{:,.2f}".format))
    print("  ...")
    print(df[columns].tail(rows).to_string(index=False, float_format="{:,.2f}".format))

    crossover = df.loc[df["principal_portion"] > df["interest_portion"], "period"]
    if not crossover.empty:
        print(f"\n★ Principal first exceeds interest in payment {int(crossover.iloc[0])}")


def plot_schedule(schedule: Schedule) -> None:
    """Plot interest/principal split and balance (requires matplotlib)."""
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        print("\nNote: matplotlib not installed, skipping plot")
        return

    df = schedule.to_dataframe()

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 5))

    ax1.stackplot(
        df["period"],
        df["interest_portion"],
        df["principal_portion"],
        labels=["Interest", "Principal"],
        alpha=0.7,
    )
    ax1.set_xlabel("Payment", fontsize=12)
    ax1.set_ylabel("Amount", fontsize=12)
    ax1.set_title("Payment Composition", fontsize=14)
    ax1.legend(loc="center right")
    ax1.grid(True, alpha=0.3)

    ax2.plot(df["period"], df["remaining_balance"], "b-", linewidth=2)
    ax2.set_xlabel("Payment", fontsize=12)
    ax2.set_ylabel("Outstanding Balance", fontsize=12)
    ax2.set_title("Outstanding Balance", fontsize=14)
    ax2.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig("examples/loan_amortization.png", dpi=150)
    print("\nPlot saved to: examples/loan_amortization.png")
    plt.show()


def main() -> None:
    """Run loan amortization demo."""
    parser = argparse.ArgumentParser(description="Loan Amortization Demo")
    parser.add_argument("--ci", action="store_true", help="CI mode (no interactive plots)")
    parser.add_argument(
        "--amount", type=float, default=250_000, help="Loan amount (default: 250000)"
    )
    parser.add_argument(
        "--rate", type=float, default=6.0, help="Nominal annual rate in percent (default: 6.0)"
    )
    parser.add_argument("--years", type=int, default=30, help="Term in years (default: 30)")
    args = parser.parse_args()

    print("\n" + "=" * 60)
    print("LOAN AMORTIZATION DEMO")
    print("=" * 60)

    result = analyze_loan(args.amount, args.rate, args.years)
    print_results(result)
    print_schedule_excerpt(result.schedule)

    if not args.ci:
        plot_schedule(result.schedule)

    print("\n" + "=" * 60)
    print("DEMO COMPLETE")
    print("=" * 60)


if __name__ == "__main__":
    main()
