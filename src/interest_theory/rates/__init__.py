"""
Rate conversion among effective, nominal, force, simple and discount rates.

[T1] All conversions pivot through the effective annual rate.
"""

from .conversion import (
    EquivalentRates,
    Rate,
    RateKind,
    accumulate,
    convert,
    discount,
    equivalent_rates,
    equivalent_rates_table,
    from_effective,
    periodic_rate,
    to_effective,
)

__all__ = [
    # Types
    "Rate",
    "RateKind",
    "EquivalentRates",
    # Conversion
    "convert",
    "to_effective",
    "from_effective",
    "periodic_rate",
    # Single sums
    "accumulate",
    "discount",
    # Tables
    "equivalent_rates",
    "equivalent_rates_table",
]
