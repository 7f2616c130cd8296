"""
Arithmetically increasing annuities: payments P, P+h, P+2h, ...

Theory
------
[T1] PV_immediate = P·a_n + h·(a_n - n·v^n) / i
[T1] PV_due       = PV_immediate × (1+i)
[T1] i = 0:         PV = n·P + n(n-1)·h/2

The rate and period inverses have no closed form and are solved by
bisection (periods over integer counts).
"""

from interest_theory.annuities.level import (
    annuity_factor,
    deferral_factor,
    timing_factor,
)
from interest_theory.annuities.shape import PaymentTiming
from interest_theory.config.settings import SETTINGS
from interest_theory.errors import DomainError, require_positive_periods
from interest_theory.solvers.bisection import bisect_integer, bisect_root


def _require_whole_periods(periods: float) -> None:
    require_positive_periods(periods)
    if float(periods) != int(periods):
        raise DomainError(
            f"CRITICAL: periods must be a whole number of payments, got {periods}"
        )


def increasing_factor(rate: float, periods: int) -> float:
    """
    Present value of the increments 0, 1, 2, ..., n-1 paid at periods 1..n.

    [T1] (a_n - n·v^n) / i, or n(n-1)/2 when i = 0.
    """
    i = rate / 100
    n = periods
    if i == 0:
        return n * (n - 1) / 2
    return (annuity_factor(rate, n) - n * (1 + i) ** (-n)) / i


def pv_immediate(first_payment: float, step: float, rate: float, periods: int) -> float:
    """
    Present value of an increasing annuity-immediate.

    Parameters
    ----------
    first_payment : float
        Payment at the end of period 1
    step : float
        Increase per period
    rate : float
        Effective rate per period (percent)
    periods : int
        Number of payments

    Returns
    -------
    float
        Present value
    """
    _require_whole_periods(periods)
    i = rate / 100
    n = int(periods)
    if i == 0:
        return n * first_payment + n * (n - 1) * step / 2
    return first_payment * annuity_factor(rate, n) + step * increasing_factor(rate, n)


def pv_due(first_payment: float, step: float, rate: float, periods: int) -> float:
    """Present value of an increasing annuity-due: immediate PV × (1+i)."""
    return pv_immediate(first_payment, step, rate, periods) * (1 + rate / 100)


def present_value(
    first_payment: float,
    step: float,
    rate: float,
    periods: int,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
    deferral_periods: float = 0,
) -> float:
    """Present value of an increasing annuity of any timing and deferral."""
    pv = pv_immediate(first_payment, step, rate, periods) * timing_factor(rate, timing)
    return pv * deferral_factor(rate, deferral_periods)


def pv_deferred(
    first_payment: float,
    step: float,
    rate: float,
    periods: int,
    deferral_periods: float,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
) -> float:
    """Present value of a deferred increasing annuity."""
    return present_value(first_payment, step, rate, periods, timing, deferral_periods)


def future_value(
    first_payment: float,
    step: float,
    rate: float,
    periods: int,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
) -> float:
    """Accumulated value at the end of the payment term: undeferred PV × (1+i)^n."""
    pv = present_value(first_payment, step, rate, periods, timing)
    return pv * (1 + rate / 100) ** periods


def payment_from_pv(
    present_value: float,
    step: float,
    rate: float,
    periods: int,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
    deferral_periods: float = 0,
) -> float:
    """
    First payment of an increasing annuity worth ``present_value``.

    [T1] P = (PV' - h·(Ia-part)) / a_n, where PV' removes timing and deferral.
    """
    _require_whole_periods(periods)
    n = int(periods)
    undeferred = present_value / deferral_factor(rate, deferral_periods)
    base = undeferred / timing_factor(rate, timing)
    return (base - step * increasing_factor(rate, n)) / annuity_factor(rate, n)


def rate_from_pv(
    present_value: float,
    first_payment: float,
    step: float,
    periods: int,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
    deferral_periods: float = 0,
) -> float:
    """
    Effective per-period rate at which the increasing annuity is worth ``present_value``.

    Raises
    ------
    ConvergenceFailure
        If no non-negative rate reproduces the target
    """
    _require_whole_periods(periods)
    config = SETTINGS.solver
    result = bisect_root(
        lambda r: (
            pv_immediate(first_payment, step, r, periods)
            * timing_factor(r, timing)
            * deferral_factor(r, deferral_periods)
        ),
        present_value,
        lower=config.rate_lower,
        upper=config.rate_upper,
        upper_limit=config.rate_upper_limit,
        tolerance=config.tolerance,
        max_iterations=config.max_iterations,
        label="interest rate",
    )
    return result.root


def periods_from_pv(
    present_value: float,
    first_payment: float,
    step: float,
    rate: float,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
    deferral_periods: float = 0,
) -> int:
    """
    Whole number of payments whose PV is closest to ``present_value``.

    Searches integer counts by bisection, starting from [1, 100].

    Raises
    ------
    ConvergenceFailure
        If the target exceeds every attainable PV
    """
    config = SETTINGS.solver
    return bisect_integer(
        lambda n: (
            pv_immediate(first_payment, step, rate, n)
            * timing_factor(rate, timing)
            * deferral_factor(rate, deferral_periods)
        ),
        present_value,
        lower=config.period_lower,
        upper=config.period_upper,
        upper_limit=config.period_upper_limit,
        max_iterations=config.max_iterations,
        tolerance=config.tolerance,
    )
