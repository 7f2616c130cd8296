"""
Annuity calculator: shape dispatch and typed solve requests.

Each calculator mode is its own request dataclass carrying exactly the
inputs that mode needs, so an incomplete request cannot be constructed:

>>> from interest_theory.rates import Rate
>>> request = SolveForPresentValue(payment=100, rate=Rate(5), periods=10)
>>> round(solve(request).value, 2)
772.17

Rates on requests are ``Rate`` objects of any kind; they are converted to
the effective rate per payment period before solving. The dispatchers
(``present_value``, ``future_value``, ...) take that per-period effective
rate directly, in percent.
"""

import logging
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Optional, Union

from interest_theory.annuities import geometric, increasing, level
from interest_theory.annuities.shape import AnnuityShape, Geometric, Increasing
from interest_theory.config.settings import SETTINGS
from interest_theory.errors import ValidationError
from interest_theory.rates.conversion import Rate, periodic_rate
from interest_theory.schedules.amortization import Schedule, generate_schedule
from interest_theory.solvers.bisection import bisect_integer, bisect_root

logger = logging.getLogger(__name__)

#: Periods within this distance of an integer produce a schedule
WHOLE_PERIOD_TOLERANCE = 1e-6


class ValueBasis(Enum):
    """Whether a known value is a present or a future value."""

    PRESENT = "present"
    FUTURE = "future"

    @classmethod
    def parse(cls, value: "ValueBasis | str") -> "ValueBasis":
        """Coerce a string or ValueBasis into a ValueBasis."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise ValidationError(
                f"CRITICAL: Unknown value basis {value!r}; expected 'present' or 'future'"
            ) from e


# =============================================================================
# Shape dispatch
# =============================================================================

def present_value(shape: AnnuityShape, payment: float, rate: float, periods: float) -> float:
    """
    Present value of an annuity of the given shape.

    Parameters
    ----------
    shape : AnnuityShape
        Variation, timing and deferral
    payment : float
        Level payment, or first payment of a varying stream
    rate : float
        Effective rate per period (percent)
    periods : float
        Number of payments

    Returns
    -------
    float
        Value at time 0
    """
    variation = shape.variation
    if isinstance(variation, Increasing):
        return increasing.present_value(
            payment, variation.step, rate, periods, shape.timing, shape.deferral_periods
        )
    if isinstance(variation, Geometric):
        return geometric.present_value(
            payment, variation.growth_rate, rate, periods, shape.timing, shape.deferral_periods
        )
    return level.present_value(payment, rate, periods, shape.timing, shape.deferral_periods)


def future_value(shape: AnnuityShape, payment: float, rate: float, periods: float) -> float:
    """
    Accumulated value at the end of the payment term.

    Deferral does not change the value at the end of the payment term.
    """
    variation = shape.variation
    if isinstance(variation, Increasing):
        return increasing.future_value(payment, variation.step, rate, periods, shape.timing)
    if isinstance(variation, Geometric):
        return geometric.future_value(
            payment, variation.growth_rate, rate, periods, shape.timing
        )
    return level.future_value(payment, rate, periods, shape.timing)


def payment(
    shape: AnnuityShape,
    value: float,
    rate: float,
    periods: float,
    basis: ValueBasis | str = ValueBasis.PRESENT,
) -> float:
    """Level (or first) payment whose present or future value is ``value``."""
    basis = ValueBasis.parse(basis)
    variation = shape.variation

    if isinstance(variation, Increasing):
        if basis is ValueBasis.FUTURE:
            return increasing.payment_from_pv(
                level.pv_from_fv(value, rate, periods), variation.step, rate, periods, shape.timing
            )
        return increasing.payment_from_pv(
            value, variation.step, rate, periods, shape.timing, shape.deferral_periods
        )

    if isinstance(variation, Geometric):
        if basis is ValueBasis.FUTURE:
            return geometric.payment_from_pv(
                level.pv_from_fv(value, rate, periods),
                variation.growth_rate,
                rate,
                periods,
                shape.timing,
            )
        return geometric.payment_from_pv(
            value, variation.growth_rate, rate, periods, shape.timing, shape.deferral_periods
        )

    if basis is ValueBasis.FUTURE:
        return level.payment_from_fv(value, rate, periods, shape.timing)
    return level.payment_from_pv(value, rate, periods, shape.timing, shape.deferral_periods)


def rate(
    shape: AnnuityShape,
    value: float,
    payment: float,
    periods: float,
    basis: ValueBasis | str = ValueBasis.PRESENT,
) -> float:
    """
    Effective per-period rate (percent) reproducing ``value``.

    Raises
    ------
    ConvergenceFailure
        If no non-negative rate reproduces the value
    """
    basis = ValueBasis.parse(basis)
    variation = shape.variation

    if basis is ValueBasis.PRESENT:
        if isinstance(variation, Increasing):
            return increasing.rate_from_pv(
                value, payment, variation.step, periods, shape.timing, shape.deferral_periods
            )
        if isinstance(variation, Geometric):
            return geometric.rate_from_pv(
                value,
                payment,
                variation.growth_rate,
                periods,
                shape.timing,
                shape.deferral_periods,
            )
        return level.rate_from_pv(value, payment, periods, shape.timing, shape.deferral_periods)

    if not isinstance(variation, (Increasing, Geometric)):
        return level.rate_from_fv(value, payment, periods, shape.timing)

    config = SETTINGS.solver
    result = bisect_root(
        lambda r: future_value(shape, payment, r, periods),
        value,
        lower=config.rate_lower,
        upper=config.rate_upper,
        upper_limit=config.rate_upper_limit,
        tolerance=config.tolerance,
        max_iterations=config.max_iterations,
        label="interest rate",
    )
    return result.root


def periods(
    shape: AnnuityShape,
    value: float,
    payment: float,
    rate: float,
    basis: ValueBasis | str = ValueBasis.PRESENT,
) -> float:
    """
    Number of payments reproducing ``value``.

    Level annuities invert in closed form and may return a fractional
    count; varying annuities return the closest whole count.
    """
    basis = ValueBasis.parse(basis)
    variation = shape.variation

    if not isinstance(variation, (Increasing, Geometric)):
        if basis is ValueBasis.FUTURE:
            return level.periods_from_fv(value, payment, rate, shape.timing)
        return level.periods_from_pv(value, payment, rate, shape.timing, shape.deferral_periods)

    if basis is ValueBasis.PRESENT:
        if isinstance(variation, Increasing):
            return increasing.periods_from_pv(
                value, payment, variation.step, rate, shape.timing, shape.deferral_periods
            )
        return geometric.periods_from_pv(
            value, payment, variation.growth_rate, rate, shape.timing, shape.deferral_periods
        )

    config = SETTINGS.solver
    return bisect_integer(
        lambda n: future_value(shape, payment, rate, n),
        value,
        lower=config.period_lower,
        upper=config.period_upper,
        upper_limit=config.period_upper_limit,
        max_iterations=config.max_iterations,
        tolerance=config.tolerance,
    )


# =============================================================================
# Solve requests
# =============================================================================

def _coerce_rate(value: "Rate | float") -> Rate:
    if isinstance(value, Rate):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return Rate(float(value))
    raise ValidationError(f"CRITICAL: rate must be a Rate or a number, got {value!r}")


class _Request:
    """Shared validation for solve requests."""

    def __post_init__(self) -> None:
        """Validate request."""
        missing = [f.name for f in fields(self) if getattr(self, f.name) is None]
        if missing:
            raise ValidationError(
                f"CRITICAL: {type(self).__name__} is missing required fields: {missing}"
            )
        if not isinstance(self.shape, AnnuityShape):
            raise ValidationError(
                f"CRITICAL: shape must be an AnnuityShape, got {self.shape!r}"
            )
        if self.payments_per_year <= 0:
            raise ValidationError(
                f"CRITICAL: payments_per_year must be > 0, got {self.payments_per_year}"
            )
        if hasattr(self, "rate"):
            object.__setattr__(self, "rate", _coerce_rate(self.rate))
        if hasattr(self, "basis"):
            object.__setattr__(self, "basis", ValueBasis.parse(self.basis))

    @property
    def periodic_rate(self) -> float:
        """Effective rate per payment period (percent)."""
        return periodic_rate(self.rate.effective, self.payments_per_year)


@dataclass(frozen=True)
class SolveForPresentValue(_Request):
    """Find the present value of a known payment stream."""

    payment: float
    rate: Rate
    periods: float
    shape: AnnuityShape = field(default_factory=AnnuityShape)
    payments_per_year: float = 1


@dataclass(frozen=True)
class SolveForFutureValue(_Request):
    """Find the accumulated value of a known payment stream."""

    payment: float
    rate: Rate
    periods: float
    shape: AnnuityShape = field(default_factory=AnnuityShape)
    payments_per_year: float = 1


@dataclass(frozen=True)
class SolveForPayment(_Request):
    """Find the level (or first) payment that produces a known value."""

    value: float
    rate: Rate
    periods: float
    basis: ValueBasis = ValueBasis.PRESENT
    shape: AnnuityShape = field(default_factory=AnnuityShape)
    payments_per_year: float = 1


@dataclass(frozen=True)
class SolveForRate(_Request):
    """Find the effective per-period rate at which payments produce a known value."""

    value: float
    payment: float
    periods: float
    basis: ValueBasis = ValueBasis.PRESENT
    shape: AnnuityShape = field(default_factory=AnnuityShape)
    payments_per_year: float = 1


@dataclass(frozen=True)
class SolveForPeriods(_Request):
    """Find the number of payments that produce a known value."""

    value: float
    payment: float
    rate: Rate
    basis: ValueBasis = ValueBasis.PRESENT
    shape: AnnuityShape = field(default_factory=AnnuityShape)
    payments_per_year: float = 1


SolveRequest = Union[
    SolveForPresentValue,
    SolveForFutureValue,
    SolveForPayment,
    SolveForRate,
    SolveForPeriods,
]


@dataclass(frozen=True)
class AnnuitySolution:
    """
    Result of a calculator solve.

    Attributes
    ----------
    value : float
        The solved quantity (PV, FV, payment, per-period rate in percent,
        or period count)
    solve_for : str
        Name of the solved quantity
    effective_rate : float
        Effective rate per payment period used (percent)
    schedule : Schedule, optional
        Amortization schedule, when requested and the period count is whole
    """

    value: float
    solve_for: str
    effective_rate: float
    schedule: Optional[Schedule] = None


def solve(request: SolveRequest, with_schedule: bool = False) -> AnnuitySolution:
    """
    Solve one calculator request.

    Parameters
    ----------
    request : SolveRequest
        One of the SolveFor* dataclasses
    with_schedule : bool, default False
        Attach an amortization schedule when the period count is whole

    Returns
    -------
    AnnuitySolution

    Raises
    ------
    ValidationError
        If ``request`` is not a solve request
    ConvergenceFailure
        If a rate or period search cannot reproduce the value
    """
    shape = getattr(request, "shape", None)

    if isinstance(request, SolveForPresentValue):
        j = request.periodic_rate
        pmt, n = request.payment, request.periods
        solved = present_value(shape, pmt, j, n)
        name = "present_value"
    elif isinstance(request, SolveForFutureValue):
        j = request.periodic_rate
        pmt, n = request.payment, request.periods
        solved = future_value(shape, pmt, j, n)
        name = "future_value"
    elif isinstance(request, SolveForPayment):
        j = request.periodic_rate
        n = request.periods
        pmt = payment(shape, request.value, j, n, request.basis)
        solved = pmt
        name = "payment"
    elif isinstance(request, SolveForRate):
        pmt, n = request.payment, request.periods
        j = rate(shape, request.value, pmt, n, request.basis)
        solved = j
        name = "rate"
    elif isinstance(request, SolveForPeriods):
        j = request.periodic_rate
        pmt = request.payment
        n = periods(shape, request.value, pmt, j, request.basis)
        solved = n
        name = "periods"
    else:
        raise ValidationError(f"CRITICAL: Unknown solve request {request!r}")

    logger.debug(f"Solved {name} = {solved} at {j}% per period")

    schedule = None
    if with_schedule:
        whole = round(n)
        if whole > 0 and abs(n - whole) <= WHOLE_PERIOD_TOLERANCE:
            schedule = generate_schedule(
                shape, pmt, j, whole, present_value(shape, pmt, j, whole)
            )
        else:
            logger.warning(f"No schedule for fractional period count {n}")

    return AnnuitySolution(value=solved, solve_for=name, effective_rate=j, schedule=schedule)
