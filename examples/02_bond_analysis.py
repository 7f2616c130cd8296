#!/usr/bin/env python3
"""
Bond Pricing and Interest-Rate Risk Demo.

This example prices a coupon bond, writes down its premium over the
term, prices a callable version and measures rate sensitivity with
duration and convexity. It answers the investor's question:

    "What is this bond worth, and how much does that move if yields rise?"

Key Concepts:
- Price: P = Fr·a_n + C·v^n at the yield per period
- Premium/discount: price above or below redemption when Fr ≠ Ci
- Callable bond: priced to the call date worst for the investor
- Duration/convexity: first and second order price sensitivity

Usage:
    python examples/02_bond_analysis.py          # Interactive with plots
    python examples/02_bond_analysis.py --ci     # CI mode (no plots)
"""

import argparse
import sys
from dataclasses import dataclass

import numpy as np

# Add src to path if running as script
sys.path.insert(0, "src")

from interest_theory import BondSpec, CallSchedule, DurationResult, analyze
from interest_theory.bonds import bond_yield
from interest_theory.duration import (
    approximate_price_convexity,
    approximate_price_modified,
    price,
)


@dataclass
class BondResult:
    """Results from the bond analysis."""

    bond: BondSpec
    price: float
    callable_price: float
    recovered_yield: float
    measures: DurationResult


def analyze_bond(
    face_value: float = 1000,
    coupon_rate: float = 6.0,
    yield_rate: float = 5.0,
    periods: int = 10,
) -> BondResult:
    """
    Price a bond, its callable version and its duration measures.

    Parameters
    ----------
    face_value : float
        Face value, also the redemption value
    coupon_rate : float
        Coupon rate per period, in percent
    yield_rate : float
        Yield per period, in percent
    periods : int
        Coupon periods to maturity

    Returns
    -------
    BondResult
        Prices, recovered yield and duration measures
    """
    bond = BondSpec(face_value, coupon_rate, yield_rate, periods)
    bond_price = bond.price()

    # Callable from period 5 at a declining premium
    call_dates = tuple(range(5, periods + 1))
    call_prices = tuple(
        face_value * (1 + 0.01 * (periods - date) / 2) for date in call_dates
    )
    callable_bond = BondSpec(
        face_value,
        coupon_rate,
        yield_rate,
        periods,
        call_schedule=CallSchedule(call_dates, call_prices),
    )

    return BondResult(
        bond=bond,
        price=bond_price,
        callable_price=callable_bond.price(),
        recovered_yield=bond_yield(bond_price, face_value, coupon_rate, face_value, periods),
        measures=analyze(bond.cash_flows(), yield_rate / 100),
    )


def print_results(result: BondResult) -> None:
    """Print bond valuation results."""
    bond = result.bond
    print("\n" + "=" * 60)
    print("BOND VALUATION")
    print("=" * 60)
    print(f"\nTerms:")
    print(f"  Face Value:       {bond.face_value:,.2f}")
    print(f"  Coupon:           {bond.coupon_rate:.2f}% ({bond.coupon_payment:,.2f} per period)")
    print(f"  Yield:            {bond.yield_rate:.2f}% per period")
    print(f"  Periods:          {bond.periods}")
    print(f"\nPrice:")
    print(f"  Price:            {result.price:,.2f} ({bond.price_type().value})")
    print(f"  Callable Price:   {result.callable_price:,.2f}")
    print(f"  Yield from Price: {result.recovered_yield:.6f}%")
    print(f"\nRisk Measures:")
    print(f"  Macaulay Duration:  {result.measures.macaulay_duration:.4f}")
    print(f"  Modified Duration:  {result.measures.modified_duration:.4f}")
    print(f"  Modified Convexity: {result.measures.modified_convexity:.4f}")


def print_book_values(bond: BondSpec) -> None:
    """Print the book-value schedule."""
    df = bond.amortization_schedule().to_dataframe()
    print("\n" + "=" * 60)
    print("BOOK VALUE SCHEDULE")
    print("=" * 60)
    print(df.to_string(index=False, float_format="{:,.2f}".format))


def shock_table(result: BondResult, shifts_bp: tuple[int, ...] = (-200, -100, 100, 200)) -> None:
    """Compare exact repricing with duration and convexity approximations."""
    flows = result.bond.cash_flows()
    i0 = result.bond.yield_rate / 100
    measures = result.measures

    print("\n" + "=" * 60)
    print("YIELD SHOCKS")
    print("=" * 60)
    print("\n  Shift (bp)    Exact     Duration   Dur+Convexity")
    print("  " + "-" * 50)

    for shift in shifts_bp:
        i1 = i0 + shift / 10_000
        exact = price(flows, i1)
        first = approximate_price_modified(result.price, i0, i1, measures.modified_duration)
        second = approximate_price_convexity(
            result.price, i0, i1, measures.modified_duration, measures.modified_convexity
        )
        print(f"    {shift:+5d}     {exact:9.2f}  {first:9.2f}    {second:9.2f}")

    print("\n★ Insight: convexity recovers most of the duration approximation's error")


def plot_price_yield(result: BondResult) -> None:
    """Plot the price-yield curve with its tangent (requires matplotlib)."""
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        print("\nNote: matplotlib not installed, skipping plot")
        return

    flows = result.bond.cash_flows()
    i0 = result.bond.yield_rate / 100
    rates = np.linspace(max(i0 - 0.04, 0.0), i0 + 0.04, 81)
    prices = [price(flows, i) for i in rates]
    tangent = [
        approximate_price_modified(result.price, i0, i, result.measures.modified_duration)
        for i in rates
    ]

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.plot(rates * 100, prices, "b-", linewidth=2, label="Price")
    ax.plot(rates * 100, tangent, "r--", linewidth=1.5, label="Duration tangent")
    ax.set_xlabel("Yield per period (%)", fontsize=12)
    ax.set_ylabel("Price", fontsize=12)
    ax.set_title("Price-Yield Curve", fontsize=14)
    ax.legend()
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig("examples/bond_price_yield.png", dpi=150)
    print("\nPlot saved to: examples/bond_price_yield.png")
    plt.show()


def main() -> None:
    """Run bond analysis demo."""
    parser = argparse.ArgumentParser(description="Bond Pricing and Duration Demo")
    parser.add_argument("--ci", action="store_true", help="CI mode (no interactive plots)")
    parser.add_argument("--coupon", type=float, default=6.0, help="Coupon rate %% (default: 6.0)")
    parser.add_argument("--yield-rate", type=float, default=5.0, help="Yield %% (default: 5.0)")
    parser.add_argument("--periods", type=int, default=10, help="Coupon periods (default: 10)")
    args = parser.parse_args()

    print("\n" + "=" * 60)
    print("BOND ANALYSIS DEMO")
    print("=" * 60)

    result = analyze_bond(
        coupon_rate=args.coupon,
        yield_rate=args.yield_rate,
        periods=args.periods,
    )
    print_results(result)
    print_book_values(result.bond)
    shock_table(result)

    if not args.ci:
        plot_price_yield(result)

    print("\n" + "=" * 60)
    print("DEMO COMPLETE")
    print("=" * 60)


if __name__ == "__main__":
    main()
