"""
Amortization schedule generator.

[T1] Interest = balance × periodic rate, principal = payment - interest,
balance reduced by principal; 1-indexed periods with explicit timing.
"""

from .amortization import (
    AmortizationEntry,
    Schedule,
    generate_schedule,
    geometric_schedule,
    increasing_schedule,
    level_schedule,
)

__all__ = [
    # Dataclasses
    "AmortizationEntry",
    "Schedule",
    # Generators
    "level_schedule",
    "increasing_schedule",
    "geometric_schedule",
    "generate_schedule",
]
