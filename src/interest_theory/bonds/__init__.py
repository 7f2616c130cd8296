"""
Bond engine: pricing, callable bonds, classification and book values.

[T1] P = Fr·a_n + C·v^n, the coupon stream priced as a level annuity.
"""

from .pricing import (
    BondAmortizationEntry,
    BondPriceType,
    BondSchedule,
    BondSpec,
    CallSchedule,
    bond_amortization_schedule,
    bond_price,
    bond_yield,
    book_value,
    callable_bond_price,
    get_bond_price_type,
)

__all__ = [
    # Dataclasses
    "BondSpec",
    "CallSchedule",
    "BondPriceType",
    "BondAmortizationEntry",
    "BondSchedule",
    # Pricing
    "bond_price",
    "callable_bond_price",
    "get_bond_price_type",
    "book_value",
    "bond_yield",
    # Schedules
    "bond_amortization_schedule",
]
