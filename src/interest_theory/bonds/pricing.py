"""
Bond pricing: regular and callable bonds, classification, book values.

Theory
------
[T1] P = Fr·a_n + C·v^n     (F face, r coupon rate, C redemption, i yield)
[T1] Premium when Fr > Ci (P > C); discount when Fr < Ci (P < C)
[T1] Book value at t = price with n - t periods remaining

The coupon stream is a level annuity-immediate, priced by the annuity
engine. Rates are per coupon period, in percent.
"""

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import pandas as pd

from interest_theory.annuities import level
from interest_theory.config.settings import SETTINGS
from interest_theory.config.tolerances import ANALYTICAL_TOLERANCE
from interest_theory.duration.analytics import CashFlow
from interest_theory.errors import (
    DomainError,
    ValidationError,
    require_positive_periods,
)
from interest_theory.solvers.bisection import bisect_root

logger = logging.getLogger(__name__)


class BondPriceType(Enum):
    """Bond price relative to its redemption value."""

    PREMIUM = "premium"
    DISCOUNT = "discount"
    PAR = "par"


@dataclass(frozen=True)
class CallSchedule:
    """
    Call dates and the price paid if the bond is called on each.

    Attributes
    ----------
    call_dates : tuple[float, ...]
        Call dates in coupon periods, strictly ascending
    call_prices : tuple[float, ...]
        Redemption paid on each call date, parallel to call_dates
    """

    call_dates: tuple[float, ...]
    call_prices: tuple[float, ...]

    def __post_init__(self) -> None:
        """Validate call schedule."""
        object.__setattr__(self, "call_dates", tuple(self.call_dates))
        object.__setattr__(self, "call_prices", tuple(self.call_prices))
        _validate_call_schedule(self.call_dates, self.call_prices)


def _validate_call_schedule(
    call_dates: Sequence[float], call_prices: Sequence[float]
) -> None:
    if len(call_dates) != len(call_prices):
        raise ValidationError(
            f"CRITICAL: Call dates array must match call prices array length "
            f"({len(call_dates)} dates, {len(call_prices)} prices)"
        )
    if not call_dates:
        raise ValidationError("CRITICAL: call schedule is empty")
    for previous, current in zip(call_dates, call_dates[1:]):
        if current <= previous:
            raise ValidationError(
                f"CRITICAL: Call dates must be in chronological order, "
                f"got {current} after {previous}"
            )


def _validate_bond_inputs(
    face_value: float,
    coupon_rate: float,
    redemption_value: float,
    yield_rate: float,
    periods: float,
) -> None:
    require_positive_periods(periods)
    if face_value < 0:
        raise DomainError(f"CRITICAL: face_value must be >= 0, got {face_value}")
    if yield_rate < 0:
        raise DomainError(f"CRITICAL: yield_rate must be >= 0, got {yield_rate}")
    if coupon_rate < 0:
        raise DomainError(f"CRITICAL: coupon_rate must be >= 0, got {coupon_rate}")
    if redemption_value < 0:
        raise DomainError(
            f"CRITICAL: redemption_value must be >= 0, got {redemption_value}"
        )


# =============================================================================
# Pricing
# =============================================================================

def bond_price(
    face_value: float,
    coupon_rate: float,
    redemption_value: float,
    yield_rate: float,
    periods: float,
) -> float:
    """
    Price of a bond.

    [T1] P = Fr·a_n + C·v^n

    Parameters
    ----------
    face_value : float
        Face (par) value F
    coupon_rate : float
        Coupon rate per period r (percent)
    redemption_value : float
        Amount repaid at maturity C
    yield_rate : float
        Yield per period i (percent)
    periods : float
        Coupon periods to maturity

    Returns
    -------
    float
        Price at issue

    Raises
    ------
    InvalidPeriodsError
        If periods <= 0
    DomainError
        If face, coupon rate, redemption or yield is negative

    Examples
    --------
    >>> round(bond_price(1000, 6, 1000, 5, 10), 2)
    1077.22
    """
    _validate_bond_inputs(face_value, coupon_rate, redemption_value, yield_rate, periods)
    coupon = face_value * coupon_rate / 100
    pv_coupons = level.pv_immediate(coupon, yield_rate, periods)
    pv_redemption = level.pv_from_fv(redemption_value, yield_rate, periods)
    return pv_coupons + pv_redemption


def get_bond_price_type(
    price: float,
    redemption_value: float,
    coupon_payment: float,
    yield_rate: float,
) -> BondPriceType:
    """
    Classify a bond as premium, discount or par.

    Premium if P > C or Fr > Ci; discount if P < C or Fr < Ci; par otherwise.
    Differences within floating-point noise count as equal.
    """
    theoretical_coupon = redemption_value * yield_rate / 100
    price_gap = _significant(price - redemption_value, redemption_value)
    coupon_gap = _significant(coupon_payment - theoretical_coupon, theoretical_coupon)

    if price_gap > 0 or coupon_gap > 0:
        return BondPriceType.PREMIUM
    if price_gap < 0 or coupon_gap < 0:
        return BondPriceType.DISCOUNT
    return BondPriceType.PAR


def _significant(difference: float, scale: float) -> float:
    if abs(difference) <= ANALYTICAL_TOLERANCE * max(1.0, abs(scale)):
        return 0.0
    return difference


def book_value(
    face_value: float,
    coupon_rate: float,
    redemption_value: float,
    yield_rate: float,
    total_periods: float,
    current_period: float,
) -> float:
    """
    Book value just after the coupon at ``current_period``.

    [T1] B_t = Fr·a_{n-t} + C·v^(n-t)

    Raises
    ------
    ValidationError
        If current_period >= total_periods
    """
    if current_period >= total_periods:
        raise ValidationError(
            f"CRITICAL: Current period must be less than total periods "
            f"({current_period} >= {total_periods})"
        )
    return bond_price(
        face_value,
        coupon_rate,
        redemption_value,
        yield_rate,
        total_periods - current_period,
    )


def callable_bond_price(
    face_value: float,
    coupon_rate: float,
    yield_rate: float,
    call_dates: Sequence[float],
    call_prices: Sequence[float],
) -> float:
    """
    Price of a callable bond from the investor's worst case.

    Prices the bond to each call date with that date's call price as the
    redemption value, then takes the minimum for a premium bond (Fr > Fi)
    and the maximum otherwise.

    Raises
    ------
    ValidationError
        If the arrays differ in length, are empty, or dates are not
        strictly ascending
    """
    _validate_call_schedule(call_dates, call_prices)

    prices = [
        bond_price(face_value, coupon_rate, call_price, yield_rate, date)
        for date, call_price in zip(call_dates, call_prices)
    ]

    coupon = face_value * coupon_rate / 100
    theoretical_coupon = face_value * yield_rate / 100
    if coupon > theoretical_coupon:
        return min(prices)
    return max(prices)


def bond_yield(
    price: float,
    face_value: float,
    coupon_rate: float,
    redemption_value: float,
    periods: float,
) -> float:
    """
    Yield per period (percent) at which the bond is worth ``price``.

    Price decreases strictly in the yield, so the yield is found by
    bisection from [0%, 20%) with a widening upper bound.

    Raises
    ------
    ConvergenceFailure
        If no non-negative yield reproduces the price (price above the
        undiscounted sum of payments)
    """
    _validate_bond_inputs(face_value, coupon_rate, redemption_value, 0.0, periods)
    if price <= 0:
        raise DomainError(f"CRITICAL: price must be > 0, got {price}")

    config = SETTINGS.solver
    result = bisect_root(
        lambda y: bond_price(face_value, coupon_rate, redemption_value, y, periods),
        price,
        lower=config.rate_lower,
        upper=config.rate_upper,
        upper_limit=config.rate_upper_limit,
        tolerance=config.tolerance,
        max_iterations=config.max_iterations,
        label="bond yield",
    )
    return result.root


# =============================================================================
# Book-value amortization
# =============================================================================

@dataclass(frozen=True)
class BondAmortizationEntry:
    """
    One coupon period of a bond amortization schedule.

    Attributes
    ----------
    period : int
        1-indexed coupon period
    coupon_payment : float
        Coupon Fr
    interest_earned : float
        Book value at the start of the period × yield
    amortization_amount : float
        Reduction in book value this period (negative for accumulation
        of discount)
    book_value : float
        Book value at the end of the period
    """

    period: int
    coupon_payment: float
    interest_earned: float
    amortization_amount: float
    book_value: float


@dataclass(frozen=True)
class BondSchedule(Sequence):
    """Ordered, immutable sequence of BondAmortizationEntry records."""

    entries: tuple[BondAmortizationEntry, ...]
    price: float
    redemption_value: float

    def __getitem__(self, index):
        return self.entries[index]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[BondAmortizationEntry]:
        return iter(self.entries)

    @property
    def final_book_value(self) -> float:
        return self.entries[-1].book_value if self.entries else self.price

    @property
    def total_amortization(self) -> float:
        return float(sum(e.amortization_amount for e in self.entries))

    def to_dataframe(self) -> pd.DataFrame:
        """Schedule as a DataFrame, one row per coupon period."""
        return pd.DataFrame(
            [
                {
                    "period": e.period,
                    "coupon_payment": e.coupon_payment,
                    "interest_earned": e.interest_earned,
                    "amortization_amount": e.amortization_amount,
                    "book_value": e.book_value,
                }
                for e in self.entries
            ]
        )


def bond_amortization_schedule(
    face_value: float,
    coupon_rate: float,
    redemption_value: float,
    yield_rate: float,
    periods: int,
) -> BondSchedule:
    """
    Book-value schedule from issue price to redemption.

    The premium (or discount) P - C is written off evenly; the final
    period absorbs the remainder so the book value lands on C exactly.

    Returns
    -------
    BondSchedule
        One entry per coupon period, 1-indexed
    """
    initial = bond_price(face_value, coupon_rate, redemption_value, yield_rate, periods)
    n = int(periods)
    if n != periods:
        raise DomainError(
            f"CRITICAL: periods must be a whole number of coupons, got {periods}"
        )

    i = yield_rate / 100
    coupon = face_value * coupon_rate / 100
    per_period = (initial - redemption_value) / n

    entries = []
    current = initial
    for t in range(1, n + 1):
        interest = current * i
        amortization = current - redemption_value if t == n else per_period
        current = redemption_value if t == n else current - amortization
        entries.append(
            BondAmortizationEntry(
                period=t,
                coupon_payment=coupon,
                interest_earned=interest,
                amortization_amount=amortization,
                book_value=current,
            )
        )

    logger.debug(
        f"Bond schedule: price {initial:.6f} to redemption {redemption_value} "
        f"over {n} periods"
    )
    return BondSchedule(
        entries=tuple(entries), price=initial, redemption_value=redemption_value
    )


# =============================================================================
# Bond specification
# =============================================================================

@dataclass(frozen=True)
class BondSpec:
    """
    Bond terms.

    Attributes
    ----------
    face_value : float
        Face (par) value
    coupon_rate : float
        Coupon rate per period (percent)
    yield_rate : float
        Yield per period (percent)
    periods : float
        Coupon periods to maturity
    redemption_value : float, optional
        Amount repaid at maturity; defaults to face value
    call_schedule : CallSchedule, optional
        Call dates and prices, for callable bonds

    Examples
    --------
    >>> BondSpec(1000, 6, 5, 10).price_type()
    <BondPriceType.PREMIUM: 'premium'>
    """

    face_value: float
    coupon_rate: float
    yield_rate: float
    periods: float
    redemption_value: Optional[float] = None
    call_schedule: Optional[CallSchedule] = None

    def __post_init__(self) -> None:
        """Validate bond terms."""
        if self.redemption_value is None:
            object.__setattr__(self, "redemption_value", self.face_value)
        _validate_bond_inputs(
            self.face_value,
            self.coupon_rate,
            self.redemption_value,
            self.yield_rate,
            self.periods,
        )

    @property
    def coupon_payment(self) -> float:
        """Coupon per period, Fr."""
        return self.face_value * self.coupon_rate / 100

    def price(self) -> float:
        """Price to maturity, or to the worst call date when callable."""
        if self.call_schedule is not None:
            return callable_bond_price(
                self.face_value,
                self.coupon_rate,
                self.yield_rate,
                self.call_schedule.call_dates,
                self.call_schedule.call_prices,
            )
        return bond_price(
            self.face_value,
            self.coupon_rate,
            self.redemption_value,
            self.yield_rate,
            self.periods,
        )

    def price_type(self) -> BondPriceType:
        """Premium, discount or par classification of the price to maturity."""
        price = bond_price(
            self.face_value,
            self.coupon_rate,
            self.redemption_value,
            self.yield_rate,
            self.periods,
        )
        return get_bond_price_type(
            price, self.redemption_value, self.coupon_payment, self.yield_rate
        )

    def amortization_schedule(self) -> BondSchedule:
        """Book-value schedule to maturity."""
        return bond_amortization_schedule(
            self.face_value,
            self.coupon_rate,
            self.redemption_value,
            self.yield_rate,
            self.periods,
        )

    def cash_flows(self) -> list[CashFlow]:
        """
        Coupons at t = 1..n with the redemption added at n.

        Zero coupons are omitted, so a zero-coupon bond is a single flow.
        """
        n = int(self.periods)
        if n != self.periods:
            raise DomainError(
                f"CRITICAL: periods must be a whole number of coupons, got {self.periods}"
            )
        coupon = self.coupon_payment
        if coupon == 0 and self.redemption_value == 0:
            raise DomainError(
                "CRITICAL: bond has no cash flows; coupon payment and "
                "redemption_value are both 0"
            )
        flows = [CashFlow(time=t, amount=coupon) for t in range(1, n) if coupon > 0]
        flows.append(CashFlow(time=n, amount=coupon + self.redemption_value))
        return flows
