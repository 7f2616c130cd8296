"""
Perpetuity engine: level and growing perpetuities.

[T1] PV = PMT·adj / (i - g), with adj set by payment timing and an
optional deferral discount (1+i)^-d.
"""

from .valuation import (
    PerpetuityTiming,
    deferral_periods_perpetuity,
    fv_perpetuity,
    growth_rate_perpetuity,
    interest_rate_perpetuity,
    payment_growing_perpetuity,
    payment_level_perpetuity,
    pv_growing_perpetuity,
    pv_level_perpetuity,
    timing_adjustment,
)

__all__ = [
    "PerpetuityTiming",
    "timing_adjustment",
    # Present value
    "pv_level_perpetuity",
    "pv_growing_perpetuity",
    # Inversions
    "payment_level_perpetuity",
    "payment_growing_perpetuity",
    "growth_rate_perpetuity",
    "deferral_periods_perpetuity",
    "interest_rate_perpetuity",
    # Undefined
    "fv_perpetuity",
]
