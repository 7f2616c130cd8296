"""
Level annuities: present/future value, payment, periods and rate.

Theory
------
[T1] a_n = (1 - v^n) / i,         v = 1/(1+i)
[T1] s_n = ((1+i)^n - 1) / i
[T1] ä_n = a_n × (1+i),           s̈_n = s_n × (1+i)
[T1] Deferred by d periods:       PV = PV_undeferred × v^d
[T1] i = 0:                       a_n = s_n = n

Rates are effective per-period rates in percent units (5 means 5%).
"""

import math

from interest_theory.annuities.shape import PaymentTiming
from interest_theory.config.settings import SETTINGS
from interest_theory.errors import DomainError, require_positive_periods
from interest_theory.solvers.bisection import bisect_root


def annuity_factor(rate: float, periods: float) -> float:
    """
    Present value of 1 per period for ``periods`` periods, a_n.

    [T1] a_n = (1 - (1+i)^-n) / i, or n when i = 0.
    """
    i = rate / 100
    if i == 0:
        return float(periods)
    return (1 - (1 + i) ** (-periods)) / i


def accumulation_factor(rate: float, periods: float) -> float:
    """
    Accumulated value of 1 per period for ``periods`` periods, s_n.

    [T1] s_n = ((1+i)^n - 1) / i, or n when i = 0.
    """
    i = rate / 100
    if i == 0:
        return float(periods)
    return ((1 + i) ** periods - 1) / i


def timing_factor(rate: float, timing: PaymentTiming | str) -> float:
    """(1+i) for payments due at period start, 1 otherwise."""
    if PaymentTiming.parse(timing) is PaymentTiming.DUE:
        return 1 + rate / 100
    return 1.0


def deferral_factor(rate: float, deferral_periods: float) -> float:
    """Discount factor v^d for a deferral of d periods."""
    if deferral_periods < 0:
        raise DomainError(
            f"CRITICAL: deferral_periods must be >= 0, got {deferral_periods}"
        )
    return (1 + rate / 100) ** (-deferral_periods)


# =============================================================================
# Present and future values
# =============================================================================

def pv_immediate(payment: float, rate: float, periods: float) -> float:
    """
    Present value of a level annuity-immediate.

    Examples
    --------
    >>> round(pv_immediate(100, 5, 10), 2)
    772.17
    """
    require_positive_periods(periods)
    return payment * annuity_factor(rate, periods)


def pv_due(payment: float, rate: float, periods: float) -> float:
    """Present value of a level annuity-due: immediate PV × (1+i)."""
    return pv_immediate(payment, rate, periods) * (1 + rate / 100)


def pv_deferred(
    payment: float,
    rate: float,
    periods: float,
    deferral_periods: float,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
) -> float:
    """
    Present value of a deferred level annuity.

    The undeferred PV (immediate or due) is discounted by v^d.
    """
    return present_value(payment, rate, periods, timing, deferral_periods)


def present_value(
    payment: float,
    rate: float,
    periods: float,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
    deferral_periods: float = 0,
) -> float:
    """
    Present value of a level annuity of any timing.

    Parameters
    ----------
    payment : float
        Level payment per period
    rate : float
        Effective rate per period (percent)
    periods : float
        Number of payments
    timing : PaymentTiming or str, default IMMEDIATE
        Payment timing within each period
    deferral_periods : float, default 0
        Periods of deferral before the payment periods begin

    Returns
    -------
    float
        Present value at time 0
    """
    pv = pv_immediate(payment, rate, periods) * timing_factor(rate, timing)
    return pv * deferral_factor(rate, deferral_periods)


def fv_immediate(payment: float, rate: float, periods: float) -> float:
    """
    Future value of a level annuity-immediate at the last payment.

    Examples
    --------
    >>> round(fv_immediate(100, 5, 10), 2)
    1257.79
    """
    require_positive_periods(periods)
    return payment * accumulation_factor(rate, periods)


def fv_due(payment: float, rate: float, periods: float) -> float:
    """Future value of a level annuity-due one period after the last payment."""
    return fv_immediate(payment, rate, periods) * (1 + rate / 100)


def fv_deferred(
    payment: float,
    rate: float,
    periods: float,
    deferral_periods: float,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
) -> float:
    """
    Future value of a deferred level annuity at the end of its payment term.

    Deferral shifts the whole stream, so the value at the end of the
    payment term equals the undeferred future value.
    """
    if deferral_periods < 0:
        raise DomainError(
            f"CRITICAL: deferral_periods must be >= 0, got {deferral_periods}"
        )
    return future_value(payment, rate, periods, timing)


def future_value(
    payment: float,
    rate: float,
    periods: float,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
) -> float:
    """Future value of a level annuity of any timing at the end of the term."""
    return fv_immediate(payment, rate, periods) * timing_factor(rate, timing)


# =============================================================================
# Payment
# =============================================================================

def payment_from_pv(
    present_value: float,
    rate: float,
    periods: float,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
    deferral_periods: float = 0,
) -> float:
    """
    Level payment that amortizes ``present_value``.

    [T1] PMT = PV × (1+i)^d / (a_n × timing factor)
    """
    require_positive_periods(periods)
    factor = annuity_factor(rate, periods) * timing_factor(rate, timing)
    return present_value / deferral_factor(rate, deferral_periods) / factor


def payment_from_fv(
    future_value: float,
    rate: float,
    periods: float,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
) -> float:
    """
    Level payment that accumulates to ``future_value``.

    [T1] PMT = FV / (s_n × timing factor)
    """
    require_positive_periods(periods)
    return future_value / (accumulation_factor(rate, periods) * timing_factor(rate, timing))


# =============================================================================
# Periods
# =============================================================================

def periods_from_pv(
    present_value: float,
    payment: float,
    rate: float,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
    deferral_periods: float = 0,
) -> float:
    """
    Number of level payments that retire ``present_value``.

    [T1] n = -ln(1 - PV·i / (PMT × timing factor)) / ln(1+i)

    Raises
    ------
    DomainError
        If payment is zero or never covers the interest on the PV
    """
    if payment == 0:
        raise DomainError("CRITICAL: payment must be non-zero to solve for periods")

    i = rate / 100
    pv = present_value / deferral_factor(rate, deferral_periods)
    if i == 0:
        return pv / payment

    argument = 1 - pv * i / (payment * timing_factor(rate, timing))
    if argument <= 0:
        raise DomainError(
            f"CRITICAL: payment {payment} does not cover interest on "
            f"{present_value} at {rate}%; the balance is never retired"
        )
    return -math.log(argument) / math.log1p(i)


def periods_from_fv(
    future_value: float,
    payment: float,
    rate: float,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
) -> float:
    """
    Number of level payments that accumulate to ``future_value``.

    [T1] n = ln(1 + FV·i / (PMT × timing factor)) / ln(1+i)
    """
    if payment == 0:
        raise DomainError("CRITICAL: payment must be non-zero to solve for periods")

    i = rate / 100
    if i == 0:
        return future_value / payment

    argument = 1 + future_value * i / (payment * timing_factor(rate, timing))
    if argument <= 0:
        raise DomainError(
            f"CRITICAL: future value {future_value} is not reachable with "
            f"payment {payment} at {rate}%"
        )
    return math.log(argument) / math.log1p(i)


# =============================================================================
# Rate (no closed form: bisection)
# =============================================================================

def rate_from_pv(
    present_value: float,
    payment: float,
    periods: float,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
    deferral_periods: float = 0,
) -> float:
    """
    Effective per-period rate at which the level annuity is worth ``present_value``.

    Solved by bisection; the bracket starts at [0%, 20%) and widens as
    needed.

    Raises
    ------
    ConvergenceFailure
        If no non-negative rate reproduces the target
    """
    require_positive_periods(periods)
    config = SETTINGS.solver
    result = bisect_root(
        lambda r: (
            pv_immediate(payment, r, periods)
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


def rate_from_fv(
    future_value: float,
    payment: float,
    periods: float,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
) -> float:
    """Effective per-period rate at which the level annuity accumulates to ``future_value``."""
    require_positive_periods(periods)
    config = SETTINGS.solver
    result = bisect_root(
        lambda r: fv_immediate(payment, r, periods) * timing_factor(r, timing),
        future_value,
        lower=config.rate_lower,
        upper=config.rate_upper,
        upper_limit=config.rate_upper_limit,
        tolerance=config.tolerance,
        max_iterations=config.max_iterations,
        label="interest rate",
    )
    return result.root


# =============================================================================
# Single sums
# =============================================================================

def fv_from_pv(present_value: float, rate: float, periods: float) -> float:
    """Accumulate a single sum: PV × (1+i)^n."""
    return present_value * (1 + rate / 100) ** periods


def pv_from_fv(future_value: float, rate: float, periods: float) -> float:
    """Discount a single sum: FV × v^n."""
    return future_value * (1 + rate / 100) ** (-periods)


def accumulated_value(
    present_value: float,
    payment: float,
    rate: float,
    periods: float,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
) -> float:
    """
    Accumulated value of an opening balance plus a level payment stream.

    [T1] AV = PV × (1+i)^n + PMT × s_n (× (1+i) for due)
    """
    return fv_from_pv(present_value, rate, periods) + future_value(
        payment, rate, periods, timing
    )
