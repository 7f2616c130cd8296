"""
Annuity engine: level, arithmetic and geometric payment streams.

[T1] Closed-form PV/FV for each variation; inverse problems solved in
closed form where possible and by bisection otherwise.

The per-variation modules are imported as namespaces:

>>> from interest_theory.annuities import level
>>> round(level.pv_immediate(100, 5, 10), 2)
772.17
"""

from . import geometric, increasing, level
from .shape import (
    AnnuityShape,
    Geometric,
    Increasing,
    Level,
    PaymentTiming,
    Variation,
)

__all__ = [
    # Shapes
    "AnnuityShape",
    "PaymentTiming",
    "Level",
    "Increasing",
    "Geometric",
    "Variation",
    # Variation modules
    "level",
    "increasing",
    "geometric",
]
