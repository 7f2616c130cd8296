"""
Geometrically increasing annuities: payments P, P(1+g), P(1+g)^2, ...

Theory
------
[T1] PV_immediate = P·(1 - ((1+g)/(1+i))^n) / (i - g)
[T1] i = g:         PV = P·n / (1+i)
[T1] i = 0:         PV = Σ_{t=0}^{n-1} P(1+g)^t
[T1] PV_due       = PV_immediate × (1+i)
"""

import math

import numpy as np

from interest_theory.annuities.level import deferral_factor, timing_factor
from interest_theory.annuities.shape import PaymentTiming
from interest_theory.config.settings import SETTINGS
from interest_theory.errors import DomainError, require_positive_periods
from interest_theory.solvers.bisection import bisect_integer, bisect_root

#: Lowest growth rate searched when solving for growth (percent)
GROWTH_RATE_FLOOR = -99.0


def _require_whole_periods(periods: float) -> None:
    require_positive_periods(periods)
    if float(periods) != int(periods):
        raise DomainError(
            f"CRITICAL: periods must be a whole number of payments, got {periods}"
        )


def pv_immediate(
    first_payment: float,
    growth_rate: float,
    rate: float,
    periods: int,
) -> float:
    """
    Present value of a geometric annuity-immediate.

    Parameters
    ----------
    first_payment : float
        Payment at the end of period 1
    growth_rate : float
        Payment growth per period (percent)
    rate : float
        Effective rate per period (percent)
    periods : int
        Number of payments

    Returns
    -------
    float
        Present value; exactly P·n/(1+i) when growth equals the rate
    """
    _require_whole_periods(periods)
    i = rate / 100
    g = growth_rate / 100
    n = int(periods)

    if i == g:
        return first_payment * n / (1 + i)

    if i == 0:
        return float(np.sum(first_payment * (1 + g) ** np.arange(n)))

    # 1 - ((1+g)/(1+i))^n, accurate as g -> i
    x = (g - i) / (1 + i)
    if x > -1:
        factor = -math.expm1(n * math.log1p(x))
    else:
        factor = 1 - (1 + x) ** n
    return first_payment * factor / (i - g)


def pv_due(first_payment: float, growth_rate: float, rate: float, periods: int) -> float:
    """Present value of a geometric annuity-due: immediate PV × (1+i)."""
    return pv_immediate(first_payment, growth_rate, rate, periods) * (1 + rate / 100)


def present_value(
    first_payment: float,
    growth_rate: float,
    rate: float,
    periods: int,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
    deferral_periods: float = 0,
) -> float:
    """Present value of a geometric annuity of any timing and deferral."""
    pv = pv_immediate(first_payment, growth_rate, rate, periods) * timing_factor(rate, timing)
    return pv * deferral_factor(rate, deferral_periods)


def pv_deferred(
    first_payment: float,
    growth_rate: float,
    rate: float,
    periods: int,
    deferral_periods: float,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
) -> float:
    """Present value of a deferred geometric annuity."""
    return present_value(first_payment, growth_rate, rate, periods, timing, deferral_periods)


def future_value(
    first_payment: float,
    growth_rate: float,
    rate: float,
    periods: int,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
) -> float:
    """Accumulated value at the end of the payment term: undeferred PV × (1+i)^n."""
    pv = present_value(first_payment, growth_rate, rate, periods, timing)
    return pv * (1 + rate / 100) ** periods


def payment_from_pv(
    present_value: float,
    growth_rate: float,
    rate: float,
    periods: int,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
    deferral_periods: float = 0,
) -> float:
    """
    First payment of a geometric annuity worth ``present_value``.

    [T1] P = PV' / factor, where factor is the PV of a unit first payment.
    """
    unit = (
        pv_immediate(1.0, growth_rate, rate, periods)
        * timing_factor(rate, timing)
        * deferral_factor(rate, deferral_periods)
    )
    if unit == 0:
        raise DomainError("CRITICAL: geometric annuity factor is zero")
    return present_value / unit


def rate_from_pv(
    present_value: float,
    first_payment: float,
    growth_rate: float,
    periods: int,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
    deferral_periods: float = 0,
) -> float:
    """
    Effective per-period rate at which the geometric annuity is worth ``present_value``.

    Raises
    ------
    ConvergenceFailure
        If no non-negative rate reproduces the target
    """
    _require_whole_periods(periods)
    config = SETTINGS.solver
    result = bisect_root(
        lambda r: (
            pv_immediate(first_payment, growth_rate, r, periods)
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


def growth_rate_from_pv(
    present_value: float,
    first_payment: float,
    rate: float,
    periods: int,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
    deferral_periods: float = 0,
) -> float:
    """
    Growth rate (percent) at which the geometric annuity is worth ``present_value``.

    PV increases with growth, so the bracket starts at -99% and widens upward.
    """
    _require_whole_periods(periods)
    config = SETTINGS.solver
    result = bisect_root(
        lambda g: (
            pv_immediate(first_payment, g, rate, periods)
            * timing_factor(rate, timing)
            * deferral_factor(rate, deferral_periods)
        ),
        present_value,
        lower=GROWTH_RATE_FLOOR,
        upper=config.rate_upper,
        upper_limit=config.rate_upper_limit,
        tolerance=config.tolerance,
        max_iterations=config.max_iterations,
        label="growth rate",
    )
    return result.root


def periods_from_pv(
    present_value: float,
    first_payment: float,
    growth_rate: float,
    rate: float,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
    deferral_periods: float = 0,
) -> int:
    """
    Whole number of payments whose PV is closest to ``present_value``.

    Raises
    ------
    ConvergenceFailure
        If the target exceeds every attainable PV (g < i saturates)
    """
    config = SETTINGS.solver
    return bisect_integer(
        lambda n: (
            pv_immediate(first_payment, growth_rate, rate, n)
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
