"""
Interest rate conversion.

Converts among effective, nominal (m-thly compounding), force of interest,
simple and discount rate representations. Every conversion funnels through
the effective annual rate as the canonical pivot.

Theory
------
[T1] Nominal:   1 + i = (1 + i^(m)/m)^m
[T1] Force:     1 + i = e^δ
[T1] Discount:  1 + i = (1 - d^(m)/m)^(-m), so i = d/(1-d) when m = 1
[T1] Simple:    one-year horizon, 1 + i = 1 + r

All rates at this module's boundary are in percent units (5 means 5%).
"""

import math
from dataclasses import dataclass
from enum import Enum

import pandas as pd

from interest_theory.config.settings import SETTINGS
from interest_theory.errors import DomainError, UnsupportedConversionError


class RateKind(Enum):
    """Interest rate representation."""

    EFFECTIVE = "effective"
    NOMINAL = "nominal"
    FORCE = "force"
    SIMPLE = "simple"
    DISCOUNT = "discount"

    @classmethod
    def parse(cls, value: "RateKind | str") -> "RateKind":
        """
        Coerce a string or RateKind into a RateKind.

        "continuous" is accepted as an alias of FORCE.

        Raises
        ------
        UnsupportedConversionError
            If the value names no known rate kind
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            if key == "continuous":
                return cls.FORCE
            try:
                return cls(key)
            except ValueError:
                pass
        raise UnsupportedConversionError(
            f"CRITICAL: Unsupported interest rate type: {value!r}"
        )


def _check_frequency(frequency: float) -> None:
    if frequency <= 0:
        raise DomainError(
            f"CRITICAL: compounding frequency must be > 0, got {frequency}"
        )


@dataclass(frozen=True)
class Rate:
    """
    Interest rate tagged with its representation.

    Attributes
    ----------
    value : float
        Magnitude in percent units (5 means 5%)
    kind : RateKind
        Representation of the magnitude
    frequency : float
        Compounding (or payment) periods per year; used by NOMINAL and
        DISCOUNT, ignored by the other kinds

    Examples
    --------
    >>> Rate(12.0, RateKind.NOMINAL, 12).effective
    12.68250301319...
    """

    value: float
    kind: RateKind = RateKind.EFFECTIVE
    frequency: float = 1.0

    def __post_init__(self) -> None:
        """Validate rate."""
        object.__setattr__(self, "kind", RateKind.parse(self.kind))
        _check_frequency(self.frequency)
        if self.kind is RateKind.DISCOUNT and self.value / self.frequency >= 100:
            raise DomainError(
                f"CRITICAL: Discount rate must be less than 100%, got "
                f"{self.value}% at frequency {self.frequency}"
            )

    @property
    def effective(self) -> float:
        """Equivalent effective annual rate, in percent."""
        return to_effective(self.value, self.kind, self.frequency)

    @property
    def decimal(self) -> float:
        """Magnitude as a decimal (0.05 for 5%)."""
        return self.value / 100

    def to(self, kind: RateKind | str, frequency: float | None = None) -> "Rate":
        """Convert to another representation (frequency defaults to this one's)."""
        return convert(
            self.value,
            self.kind,
            kind,
            frequency=self.frequency,
            to_frequency=frequency,
        )


def to_effective(
    rate: float,
    kind: RateKind | str,
    frequency: float = 1.0,
) -> float:
    """
    Convert a rate of any kind to the effective annual rate.

    Parameters
    ----------
    rate : float
        Rate in percent units
    kind : RateKind or str
        Representation of ``rate``
    frequency : float, default 1
        Compounding periods per year (NOMINAL, DISCOUNT)

    Returns
    -------
    float
        Effective annual rate in percent

    Raises
    ------
    DomainError
        If frequency <= 0 or a discount rate is >= 100% per period
    UnsupportedConversionError
        If kind is unknown
    """
    kind = RateKind.parse(kind)
    _check_frequency(frequency)
    r = rate / 100
    m = frequency

    if kind is RateKind.EFFECTIVE or kind is RateKind.SIMPLE:
        i = r
    elif kind is RateKind.NOMINAL:
        i = (1 + r / m) ** m - 1
    elif kind is RateKind.FORCE:
        i = math.expm1(r)
    else:
        d = r / m
        if d >= 1:
            raise DomainError(
                f"CRITICAL: Discount rate must be less than 100%, got {rate}% "
                f"at frequency {frequency}"
            )
        i = r / (1 - r) if m == 1 else (1 - d) ** (-m) - 1

    return i * 100


def from_effective(
    effective_rate: float,
    kind: RateKind | str,
    frequency: float = 1.0,
) -> float:
    """
    Convert an effective annual rate to another representation.

    Parameters
    ----------
    effective_rate : float
        Effective annual rate in percent
    kind : RateKind or str
        Target representation
    frequency : float, default 1
        Compounding periods per year of the target (NOMINAL, DISCOUNT)

    Returns
    -------
    float
        Rate in percent

    Raises
    ------
    DomainError
        If frequency <= 0 or effective_rate <= -100%
    """
    kind = RateKind.parse(kind)
    _check_frequency(frequency)
    i = effective_rate / 100
    m = frequency

    if i <= -1:
        raise DomainError(
            f"CRITICAL: effective rate must be > -100%, got {effective_rate}%"
        )

    if kind is RateKind.EFFECTIVE or kind is RateKind.SIMPLE:
        r = i
    elif kind is RateKind.NOMINAL:
        r = m * ((1 + i) ** (1 / m) - 1)
    elif kind is RateKind.FORCE:
        r = math.log1p(i)
    else:
        r = i / (1 + i) if m == 1 else m * (1 - (1 + i) ** (-1 / m))

    return r * 100


def convert(
    rate: float,
    from_kind: RateKind | str,
    to_kind: RateKind | str,
    frequency: float = 1.0,
    to_frequency: float | None = None,
) -> Rate:
    """
    Convert a rate between representations via the effective annual rate.

    Parameters
    ----------
    rate : float
        Source rate in percent units
    from_kind : RateKind or str
        Source representation
    to_kind : RateKind or str
        Target representation
    frequency : float, default 1
        Source compounding frequency
    to_frequency : float, optional
        Target compounding frequency; defaults to ``frequency``

    Returns
    -------
    Rate
        Converted rate

    Examples
    --------
    >>> convert(5.0, "effective", "force").value
    4.879016416943...
    >>> convert(12.0, "nominal", "nominal", frequency=12, to_frequency=4).value
    12.1204...
    """
    target_frequency = frequency if to_frequency is None else to_frequency
    effective = to_effective(rate, from_kind, frequency)
    value = from_effective(effective, to_kind, target_frequency)
    return Rate(value=value, kind=RateKind.parse(to_kind), frequency=target_frequency)


def periodic_rate(effective_annual: float, payments_per_year: float) -> float:
    """
    Effective rate per payment period equivalent to an effective annual rate.

    [T1] j = (1 + i)^(1/p) - 1, in percent.
    """
    _check_frequency(payments_per_year)
    return ((1 + effective_annual / 100) ** (1 / payments_per_year) - 1) * 100


def accumulate(
    amount: float,
    rate: float,
    kind: RateKind | str,
    years: float,
    frequency: float = 1.0,
) -> float:
    """
    Accumulate a single sum: amount × (1 + i)^years.

    The rate is first converted to its effective annual equivalent.
    """
    i = to_effective(rate, kind, frequency) / 100
    return amount * (1 + i) ** years


def discount(
    amount: float,
    rate: float,
    kind: RateKind | str,
    years: float,
    frequency: float = 1.0,
) -> float:
    """Discount a single sum: amount / (1 + i)^years."""
    i = to_effective(rate, kind, frequency) / 100
    return amount / (1 + i) ** years


@dataclass(frozen=True)
class EquivalentRates:
    """
    All representations equivalent to a single source rate.

    Attributes
    ----------
    effective_rate : float
        Effective annual rate (percent)
    nominal_rates : tuple[tuple[int, float], ...]
        (frequency, nominal rate) pairs at the standard frequencies
    force_of_interest : float
        Continuously compounded equivalent (percent)
    simple_rate : float
        One-year simple equivalent (percent)
    discount_rate : float
        Effective annual discount rate (percent)
    """

    effective_rate: float
    nominal_rates: tuple[tuple[int, float], ...]
    force_of_interest: float
    simple_rate: float
    discount_rate: float


def equivalent_rates(
    rate: float,
    kind: RateKind | str,
    frequency: float = 1.0,
) -> EquivalentRates:
    """
    Generate all equivalent rates for a given interest rate.

    Nominal rates are listed for every frequency in
    ``SETTINGS.rates.standard_frequencies``.
    """
    effective = to_effective(rate, kind, frequency)
    nominal_rates = tuple(
        (m, from_effective(effective, RateKind.NOMINAL, m))
        for m in SETTINGS.rates.standard_frequencies
    )
    return EquivalentRates(
        effective_rate=effective,
        nominal_rates=nominal_rates,
        force_of_interest=from_effective(effective, RateKind.FORCE),
        simple_rate=from_effective(effective, RateKind.SIMPLE),
        discount_rate=from_effective(effective, RateKind.DISCOUNT),
    )


def equivalent_rates_table(
    rate: float,
    kind: RateKind | str,
    frequency: float = 1.0,
) -> pd.DataFrame:
    """
    Equivalent nominal rates and nominal discount rates by frequency.

    Returns
    -------
    pd.DataFrame
        Columns: frequency, name, nominal_rate, nominal_discount_rate
    """
    effective = to_effective(rate, kind, frequency)
    config = SETTINGS.rates
    rows = [
        {
            "frequency": m,
            "name": name,
            "nominal_rate": from_effective(effective, RateKind.NOMINAL, m),
            "nominal_discount_rate": from_effective(effective, RateKind.DISCOUNT, m),
        }
        for m, name in zip(config.standard_frequencies, config.frequency_names)
    ]
    return pd.DataFrame(rows)
