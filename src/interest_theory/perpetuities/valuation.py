"""
Level and growing perpetuities.

Theory
------
[T1] Level:    PV = PMT·adj / i
[T1] Growing:  PV = PMT·adj / (i - g),   i > g
[T1] Deferred: PV / (1+i)^d
[T1] adj = 1 (immediate), 1+i (due), e^(i/2) (continuous)

The continuous adjustment e^(i/2) is a first-order approximation that
treats payments as arriving, on average, mid-period.

Every function takes the rate in any representation (``rate_kind`` and
``compounding_frequency``) and converts it to an effective rate first.
"""

import logging
import math
from enum import Enum
from typing import Optional

from interest_theory.config.settings import SETTINGS
from interest_theory.errors import ConvergenceFailure, DomainError, ValidationError
from interest_theory.rates.conversion import RateKind, from_effective, to_effective
from interest_theory.solvers.bisection import bisect_root

logger = logging.getLogger(__name__)

#: Offset (percent) above the singular rate where the rate search starts
RATE_SEARCH_OFFSET = 1e-9

#: Width (percent) above max(0, g) where continuous-timing PV stops decreasing.
#: e^(i/2)/(i - g) has its minimum at i = g + 200%.
CONTINUOUS_MONOTONE_WIDTH = 200.0


class PerpetuityTiming(Enum):
    """When perpetuity payments fall within each period."""

    IMMEDIATE = "immediate"
    DUE = "due"
    CONTINUOUS = "continuous"

    @classmethod
    def parse(cls, value: "PerpetuityTiming | str") -> "PerpetuityTiming":
        """Coerce a string or PerpetuityTiming into a PerpetuityTiming."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise ValidationError(
                f"CRITICAL: Unknown perpetuity timing {value!r}; "
                f"expected 'immediate', 'due' or 'continuous'"
            ) from e


def timing_adjustment(timing: PerpetuityTiming | str, effective_rate: float) -> float:
    """
    Payment timing multiplier.

    Parameters
    ----------
    timing : PerpetuityTiming or str
        Payment timing
    effective_rate : float
        Effective rate per period (percent)
    """
    timing = PerpetuityTiming.parse(timing)
    if timing is PerpetuityTiming.DUE:
        return 1 + effective_rate / 100
    if timing is PerpetuityTiming.CONTINUOUS:
        return math.exp(effective_rate / 200)
    return 1.0


def _effective_decimal(rate: float, rate_kind: RateKind | str, frequency: float) -> float:
    """Effective rate as a decimal; DomainError unless positive."""
    i = to_effective(rate, rate_kind, frequency) / 100
    if i <= 0:
        raise DomainError(
            f"CRITICAL: Interest rate must be positive for perpetuity calculations, "
            f"got {rate}%"
        )
    return i


def _check_growth(i: float, growth_rate: float) -> float:
    g = growth_rate / 100
    if i <= g:
        raise DomainError(
            f"CRITICAL: Interest rate must be greater than growth rate for growing "
            f"perpetuity calculations ({i * 100}% <= {growth_rate}%)"
        )
    return g


def _check_deferral(deferral_periods: float) -> None:
    if deferral_periods < 0:
        raise DomainError(
            f"CRITICAL: deferral_periods must be >= 0, got {deferral_periods}"
        )


# =============================================================================
# Present value
# =============================================================================

def pv_level_perpetuity(
    payment: float,
    rate: float,
    rate_kind: RateKind | str = RateKind.EFFECTIVE,
    compounding_frequency: float = 1,
    timing: PerpetuityTiming | str = PerpetuityTiming.IMMEDIATE,
    deferral_periods: float = 0,
) -> float:
    """
    Present value of a level perpetuity.

    Parameters
    ----------
    payment : float
        Payment per period
    rate : float
        Interest rate (percent) in the representation ``rate_kind``
    rate_kind : RateKind or str, default EFFECTIVE
        Representation of ``rate``
    compounding_frequency : float, default 1
        Compounding frequency for nominal and discount rates
    timing : PerpetuityTiming or str, default IMMEDIATE
        Payment timing
    deferral_periods : float, default 0
        Periods before payments begin

    Returns
    -------
    float
        Present value

    Raises
    ------
    DomainError
        If the effective rate is not positive

    Examples
    --------
    >>> pv_level_perpetuity(100, 5)
    2000.0
    """
    _check_deferral(deferral_periods)
    i = _effective_decimal(rate, rate_kind, compounding_frequency)
    pv = payment * timing_adjustment(timing, i * 100) / i
    return pv / (1 + i) ** deferral_periods


def pv_growing_perpetuity(
    payment: float,
    growth_rate: float,
    rate: float,
    rate_kind: RateKind | str = RateKind.EFFECTIVE,
    compounding_frequency: float = 1,
    timing: PerpetuityTiming | str = PerpetuityTiming.IMMEDIATE,
    deferral_periods: float = 0,
) -> float:
    """
    Present value of a geometrically growing perpetuity.

    Raises
    ------
    DomainError
        If the effective rate is not positive or does not exceed growth
    """
    _check_deferral(deferral_periods)
    i = _effective_decimal(rate, rate_kind, compounding_frequency)
    g = _check_growth(i, growth_rate)
    pv = payment * timing_adjustment(timing, i * 100) / (i - g)
    return pv / (1 + i) ** deferral_periods


# =============================================================================
# Closed-form inversions
# =============================================================================

def payment_level_perpetuity(
    present_value: float,
    rate: float,
    rate_kind: RateKind | str = RateKind.EFFECTIVE,
    compounding_frequency: float = 1,
    timing: PerpetuityTiming | str = PerpetuityTiming.IMMEDIATE,
    deferral_periods: float = 0,
) -> float:
    """[T1] PMT = PV·i·(1+i)^d / adj."""
    _check_deferral(deferral_periods)
    i = _effective_decimal(rate, rate_kind, compounding_frequency)
    payment = present_value * i / timing_adjustment(timing, i * 100)
    return payment * (1 + i) ** deferral_periods


def payment_growing_perpetuity(
    present_value: float,
    growth_rate: float,
    rate: float,
    rate_kind: RateKind | str = RateKind.EFFECTIVE,
    compounding_frequency: float = 1,
    timing: PerpetuityTiming | str = PerpetuityTiming.IMMEDIATE,
    deferral_periods: float = 0,
) -> float:
    """[T1] PMT = PV·(i-g)·(1+i)^d / adj."""
    _check_deferral(deferral_periods)
    i = _effective_decimal(rate, rate_kind, compounding_frequency)
    g = _check_growth(i, growth_rate)
    payment = present_value * (i - g) / timing_adjustment(timing, i * 100)
    return payment * (1 + i) ** deferral_periods


def growth_rate_perpetuity(
    present_value: float,
    payment: float,
    rate: float,
    rate_kind: RateKind | str = RateKind.EFFECTIVE,
    compounding_frequency: float = 1,
    timing: PerpetuityTiming | str = PerpetuityTiming.IMMEDIATE,
    deferral_periods: float = 0,
) -> float:
    """
    Growth rate (percent) of a growing perpetuity worth ``present_value``.

    [T1] g = i - PMT·adj / (PV·(1+i)^d)
    """
    _check_deferral(deferral_periods)
    if present_value <= 0:
        raise DomainError(f"CRITICAL: present_value must be > 0, got {present_value}")
    i = _effective_decimal(rate, rate_kind, compounding_frequency)
    adjusted = payment * timing_adjustment(timing, i * 100) / (1 + i) ** deferral_periods
    return (i - adjusted / present_value) * 100


def deferral_periods_perpetuity(
    present_value: float,
    payment: float,
    rate: float,
    rate_kind: RateKind | str = RateKind.EFFECTIVE,
    compounding_frequency: float = 1,
    timing: PerpetuityTiming | str = PerpetuityTiming.IMMEDIATE,
    growth_rate: Optional[float] = None,
) -> float:
    """
    Deferral at which the perpetuity is worth ``present_value``.

    [T1] d = ln(PV₀ / PV) / ln(1+i), PV₀ the undeferred value

    A negative result means the value exceeds the undeferred value.
    """
    if present_value <= 0:
        raise DomainError(f"CRITICAL: present_value must be > 0, got {present_value}")
    i = _effective_decimal(rate, rate_kind, compounding_frequency)
    adjustment = timing_adjustment(timing, i * 100)
    if growth_rate is None:
        undeferred = payment * adjustment / i
    else:
        g = _check_growth(i, growth_rate)
        undeferred = payment * adjustment / (i - g)
    if undeferred <= 0:
        raise DomainError(f"CRITICAL: payment must be > 0, got {payment}")
    return math.log(undeferred / present_value) / math.log1p(i)


# =============================================================================
# Interest rate (bisection)
# =============================================================================

def interest_rate_perpetuity(
    present_value: float,
    payment: float,
    growth_rate: Optional[float] = None,
    timing: PerpetuityTiming | str = PerpetuityTiming.IMMEDIATE,
    deferral_periods: float = 0,
    rate_kind: RateKind | str = RateKind.EFFECTIVE,
    compounding_frequency: float = 1,
) -> float:
    """
    Interest rate at which a perpetuity is worth ``present_value``.

    The search runs over effective rates just above max(0, g), widening
    the upper bound until the target is bracketed. With continuous timing
    the value is only decreasing up to g + 200%, so the search stops there.
    The answer is returned in ``rate_kind`` (effective by default).

    Raises
    ------
    ConvergenceFailure
        If the value cannot be bracketed (e.g. a zero present value, or a
        value the deferred stream only reaches at overflowing rates) or the
        bisection does not converge within its budget

    Examples
    --------
    >>> round(interest_rate_perpetuity(2000, 100), 6)
    5.0
    """
    _check_deferral(deferral_periods)
    floor = max(0.0, growth_rate or 0.0)

    def value_at(effective_rate: float) -> float:
        if growth_rate is None:
            return pv_level_perpetuity(
                payment, effective_rate, timing=timing, deferral_periods=deferral_periods
            )
        return pv_growing_perpetuity(
            payment,
            growth_rate,
            effective_rate,
            timing=timing,
            deferral_periods=deferral_periods,
        )

    config = SETTINGS.solver
    upper_limit = config.rate_upper_limit
    if PerpetuityTiming.parse(timing) is PerpetuityTiming.CONTINUOUS:
        upper_limit = floor + CONTINUOUS_MONOTONE_WIDTH

    try:
        result = bisect_root(
            value_at,
            present_value,
            lower=floor + RATE_SEARCH_OFFSET,
            upper=min(max(config.rate_upper, 2 * floor), upper_limit),
            upper_limit=upper_limit,
            tolerance=config.tolerance,
            max_iterations=config.perpetuity_max_iterations,
            label="perpetuity interest rate",
        )
    except ConvergenceFailure:
        logger.warning(
            f"Perpetuity rate search failed for PV={present_value}, payment={payment}"
        )
        raise

    return from_effective(result.root, rate_kind, compounding_frequency)


def fv_perpetuity(*args, **kwargs) -> float:
    """
    Future value of a perpetuity: undefined.

    Raises
    ------
    DomainError
        Always; a perpetuity never ends, so its accumulated value is infinite
    """
    raise DomainError("CRITICAL: The future value of a perpetuity is infinite.")
