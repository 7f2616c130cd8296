"""
Amortization schedules for level, increasing and geometric annuities.

Periods are always 1-indexed. The schedule records its payment timing:

- IMMEDIATE: entry k is the payment at the end of period k; interest is
  the balance after entry k-1 times the periodic rate.
- DUE: entry k is the payment at the start of period k; interest accrued
  since the previous payment is 0 for k = 1.

A deferral prefix of zero-payment entries capitalises interest onto the
balance before amortization begins.

Each entry also carries the value of the payments still to come,
discounted to that entry (``present_value``) and accumulated to the final
payment (``future_value``). Both are 0 on the final entry. When the
balance is seeded at the exact PV and no due-timing deferral shifts the
payment dates, ``present_value`` tracks the remaining balance.
"""

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from interest_theory.annuities import geometric, increasing, level
from interest_theory.annuities.shape import (
    AnnuityShape,
    Geometric,
    Increasing,
    PaymentTiming,
)
from interest_theory.config.settings import SETTINGS
from interest_theory.config.tolerances import SCHEDULE_CLOSURE_TOLERANCE
from interest_theory.errors import DomainError, require_positive_periods

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AmortizationEntry:
    """
    One period of an amortization schedule.

    Attributes
    ----------
    period : int
        1-indexed period number
    payment : float
        Payment made in this period (0 during deferral)
    interest_portion : float
        Interest accrued since the previous payment
    principal_portion : float
        Payment minus interest (0 during deferral)
    remaining_balance : float
        Balance after the payment, floored at 0
    future_value : float, optional
        Remaining payments accumulated to the final payment
    present_value : float, optional
        Remaining payments discounted to this period
    """

    period: int
    payment: float
    interest_portion: float
    principal_portion: float
    remaining_balance: float
    future_value: Optional[float] = None
    present_value: Optional[float] = None


@dataclass(frozen=True)
class Schedule(Sequence):
    """
    Ordered, immutable sequence of AmortizationEntry records.

    Attributes
    ----------
    entries : tuple[AmortizationEntry, ...]
        Entries in period order
    timing : PaymentTiming
        Whether payments fall at period end or start
    periodic_rate : float
        Effective rate per schedule period (percent)
    """

    entries: tuple[AmortizationEntry, ...]
    timing: PaymentTiming
    periodic_rate: float

    def __getitem__(self, index):
        return self.entries[index]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[AmortizationEntry]:
        return iter(self.entries)

    @property
    def total_payments(self) -> float:
        return float(sum(e.payment for e in self.entries))

    @property
    def total_interest(self) -> float:
        return float(sum(e.interest_portion for e in self.entries))

    @property
    def total_principal(self) -> float:
        return float(sum(e.principal_portion for e in self.entries))

    @property
    def final_balance(self) -> float:
        return self.entries[-1].remaining_balance if self.entries else 0.0

    def to_dataframe(self) -> pd.DataFrame:
        """
        Schedule as a DataFrame, one row per period.

        Returns
        -------
        pd.DataFrame
            Columns: period, payment, interest_portion, principal_portion,
            remaining_balance, future_value, present_value
        """
        return pd.DataFrame(
            [
                {
                    "period": e.period,
                    "payment": e.payment,
                    "interest_portion": e.interest_portion,
                    "principal_portion": e.principal_portion,
                    "remaining_balance": e.remaining_balance,
                    "future_value": e.future_value,
                    "present_value": e.present_value,
                }
                for e in self.entries
            ]
        )


def _whole_count(value: float, name: str) -> int:
    count = round(value)
    if abs(value - count) > 1e-9:
        raise DomainError(f"CRITICAL: {name} must be a whole number of periods, got {value}")
    return int(count)


def _remaining_values(
    payments: np.ndarray, periodic_rate: float
) -> tuple[np.ndarray, np.ndarray]:
    """
    Value of the payments after each entry.

    [T1] PV_k = Σ_{j>k} P_j v^(j-k),   FV_k = Σ_{j>k} P_j (1+i)^(N-j)
    """
    i = periodic_rate / 100
    n = len(payments)
    k = np.arange(1, n + 1)
    discounted = payments * (1 + i) ** (-k.astype(float))
    # Σ_{j>k} P_j v^j
    after = np.cumsum(discounted[::-1])[::-1] - discounted
    present = after * (1 + i) ** k
    future = after * (1 + i) ** n
    return present, future


def _amortize(
    payments: Sequence[float],
    periodic_rate: float,
    opening_balance: float,
    timing: PaymentTiming | str,
    deferral_periods: int = 0,
) -> Schedule:
    """Split a payment stream into interest and principal against a running balance."""
    timing = PaymentTiming.parse(timing)
    i = periodic_rate / 100
    floor = SETTINGS.schedule.balance_floor

    stream = np.concatenate([np.zeros(deferral_periods), np.asarray(payments, dtype=float)])
    present, future = _remaining_values(stream, periodic_rate)

    entries = []
    balance = opening_balance
    for index in range(deferral_periods):
        interest = balance * i
        balance += interest
        entries.append(
            AmortizationEntry(
                period=index + 1,
                payment=0.0,
                interest_portion=interest,
                principal_portion=0.0,
                remaining_balance=max(floor, balance),
                future_value=float(future[index]),
                present_value=float(present[index]),
            )
        )

    for offset, payment in enumerate(payments):
        index = deferral_periods + offset
        if timing is PaymentTiming.DUE and offset == 0:
            interest = 0.0
        else:
            interest = balance * i
        principal = payment - interest
        balance -= principal
        entries.append(
            AmortizationEntry(
                period=index + 1,
                payment=float(payment),
                interest_portion=interest,
                principal_portion=principal,
                remaining_balance=max(floor, balance),
                future_value=float(future[index]),
                present_value=float(present[index]),
            )
        )

    if abs(balance) > SCHEDULE_CLOSURE_TOLERANCE * max(1.0, abs(opening_balance)):
        logger.debug(
            f"Schedule closes with residual balance {balance:.6g} "
            f"(opening balance {opening_balance})"
        )

    return Schedule(entries=tuple(entries), timing=timing, periodic_rate=periodic_rate)


# =============================================================================
# Generators
# =============================================================================

def level_schedule(
    loan_amount: float,
    rate: float,
    periods: float,
    payment_frequency: int = 1,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
    deferral_periods: float = 0,
) -> Schedule:
    """
    Amortization schedule for a level-payment loan.

    Parameters
    ----------
    loan_amount : float
        Amount borrowed at time 0
    rate : float
        Annual rate (percent); the periodic rate is rate / payment_frequency
    periods : float
        Term in years; payment_frequency × periods payments are made
    payment_frequency : int, default 1
        Payments per year
    timing : PaymentTiming or str, default IMMEDIATE
        Payments at period end or start
    deferral_periods : float, default 0
        Years of deferral; interest capitalises for
        payment_frequency × deferral_periods schedule periods

    Returns
    -------
    Schedule
        1-indexed entries, deferral prefix first

    Examples
    --------
    >>> s = level_schedule(1000, 5, 10)
    >>> round(s[0].payment, 2), round(s.final_balance, 6)
    (129.5, 0.0)
    """
    require_positive_periods(periods)
    if payment_frequency <= 0:
        raise DomainError(
            f"CRITICAL: payment_frequency must be > 0, got {payment_frequency}"
        )
    if deferral_periods < 0:
        raise DomainError(
            f"CRITICAL: deferral_periods must be >= 0, got {deferral_periods}"
        )

    periodic_rate = rate / payment_frequency
    n = _whole_count(periods * payment_frequency, "payment count")
    deferred_n = _whole_count(deferral_periods * payment_frequency, "deferral")

    payment = level.payment_from_pv(loan_amount, periodic_rate, n, timing, deferred_n)
    logger.debug(
        f"Level schedule: {n} payments of {payment:.6f} at {periodic_rate}% per period"
    )
    return _amortize([payment] * n, periodic_rate, loan_amount, timing, deferred_n)


def increasing_schedule(
    first_payment: float,
    step: float,
    rate: float,
    periods: int,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
    present_value: Optional[float] = None,
    deferral_periods: int = 0,
) -> Schedule:
    """
    Schedule for an arithmetically increasing annuity.

    Payment k is P + (k-1)·h. The running balance is seeded at
    ``present_value``, or at the annuity's own PV when omitted.
    """
    require_positive_periods(periods)
    n = _whole_count(periods, "periods")
    deferred_n = _whole_count(deferral_periods, "deferral")
    if present_value is None:
        present_value = increasing.present_value(
            first_payment, step, rate, n, timing, deferred_n
        )
    payments = first_payment + step * np.arange(n)
    return _amortize(payments, rate, present_value, timing, deferred_n)


def geometric_schedule(
    first_payment: float,
    growth_rate: float,
    rate: float,
    periods: int,
    timing: PaymentTiming | str = PaymentTiming.IMMEDIATE,
    present_value: Optional[float] = None,
    deferral_periods: int = 0,
) -> Schedule:
    """
    Schedule for a geometrically increasing annuity.

    Payment k is P·(1+g)^(k-1). The running balance is seeded at
    ``present_value``, or at the annuity's own PV when omitted.
    """
    require_positive_periods(periods)
    n = _whole_count(periods, "periods")
    deferred_n = _whole_count(deferral_periods, "deferral")
    if present_value is None:
        present_value = geometric.present_value(
            first_payment, growth_rate, rate, n, timing, deferred_n
        )
    payments = first_payment * (1 + growth_rate / 100) ** np.arange(n)
    return _amortize(payments, rate, present_value, timing, deferred_n)


def generate_schedule(
    shape: AnnuityShape,
    payment: float,
    rate: float,
    periods: int,
    present_value: Optional[float] = None,
) -> Schedule:
    """
    Schedule for any annuity shape, one entry per period.

    ``payment`` is the level payment or the first payment of a varying
    stream; ``rate`` is the effective per-period rate (percent).
    """
    variation = shape.variation
    if isinstance(variation, Increasing):
        return increasing_schedule(
            payment,
            variation.step,
            rate,
            periods,
            shape.timing,
            present_value,
            shape.deferral_periods,
        )
    if isinstance(variation, Geometric):
        return geometric_schedule(
            payment,
            variation.growth_rate,
            rate,
            periods,
            shape.timing,
            present_value,
            shape.deferral_periods,
        )

    require_positive_periods(periods)
    n = _whole_count(periods, "periods")
    deferred_n = _whole_count(shape.deferral_periods, "deferral")
    if present_value is None:
        present_value = level.present_value(payment, rate, n, shape.timing, deferred_n)
    return _amortize([payment] * n, rate, present_value, shape.timing, deferred_n)
