"""
Annuity shape: payment-stream variation × payment timing × deferral.

The shape selects which closed-form formula applies.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from interest_theory.errors import DomainError, ValidationError


class PaymentTiming(Enum):
    """When payments fall within each period."""

    IMMEDIATE = "immediate"  # End of period
    DUE = "due"  # Start of period

    @classmethod
    def parse(cls, value: "PaymentTiming | str") -> "PaymentTiming":
        """Coerce a string or PaymentTiming into a PaymentTiming."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise ValidationError(
                f"CRITICAL: Unknown payment timing {value!r}; "
                f"expected 'immediate' or 'due'"
            ) from e


@dataclass(frozen=True)
class Level:
    """Constant payments."""


@dataclass(frozen=True)
class Increasing:
    """
    Arithmetically increasing payments: P, P+h, P+2h, ...

    Attributes
    ----------
    step : float
        Increase per period (currency units)
    """

    step: float


@dataclass(frozen=True)
class Geometric:
    """
    Geometrically increasing payments: P, P(1+g), P(1+g)^2, ...

    Attributes
    ----------
    growth_rate : float
        Growth per period in percent units
    """

    growth_rate: float

    def __post_init__(self) -> None:
        """Validate growth rate."""
        if self.growth_rate <= -100:
            raise DomainError(
                f"CRITICAL: growth_rate must be > -100%, got {self.growth_rate}"
            )


Variation = Union[Level, Increasing, Geometric]


@dataclass(frozen=True)
class AnnuityShape:
    """
    Complete description of a payment stream's shape.

    Attributes
    ----------
    variation : Level | Increasing | Geometric
        Payment-amount pattern
    timing : PaymentTiming
        Payments at period end (IMMEDIATE) or start (DUE)
    deferral_periods : float
        Periods before the first payment period begins (0 = not deferred)

    Examples
    --------
    >>> AnnuityShape.deferred(Level(), 5).is_deferred
    True
    """

    variation: Variation = field(default_factory=Level)
    timing: PaymentTiming = PaymentTiming.IMMEDIATE
    deferral_periods: float = 0

    def __post_init__(self) -> None:
        """Validate shape."""
        object.__setattr__(self, "timing", PaymentTiming.parse(self.timing))
        if not isinstance(self.variation, (Level, Increasing, Geometric)):
            raise ValidationError(
                f"CRITICAL: Unknown annuity variation {self.variation!r}"
            )
        if self.deferral_periods < 0:
            raise DomainError(
                f"CRITICAL: deferral_periods must be >= 0, got {self.deferral_periods}"
            )

    @classmethod
    def deferred(
        cls,
        variation: Variation,
        deferral_periods: float,
        timing: PaymentTiming = PaymentTiming.IMMEDIATE,
    ) -> "AnnuityShape":
        """Shape whose payment periods start after ``deferral_periods``."""
        return cls(variation=variation, timing=timing, deferral_periods=deferral_periods)

    @property
    def is_deferred(self) -> bool:
        """True when the first payment period is deferred."""
        return self.deferral_periods > 0
