"""
Duration and convexity engine.

[T1] Macaulay/modified duration and convexity, price approximations,
passage of time and portfolio duration for a set of cash flows.
"""

from .analytics import (
    CashFlow,
    DurationResult,
    PortfolioComponent,
    analyze,
    approximate_price_convexity,
    approximate_price_macaulay,
    approximate_price_modified,
    duration_after_elapsed_time,
    macaulay_convexity,
    macaulay_duration,
    modified_convexity,
    modified_duration,
    portfolio_duration,
    price,
    yield_from_price,
)

__all__ = [
    # Dataclasses
    "CashFlow",
    "DurationResult",
    "PortfolioComponent",
    # Price and yield
    "price",
    "yield_from_price",
    # Duration metrics
    "macaulay_duration",
    "modified_duration",
    "macaulay_convexity",
    "modified_convexity",
    "analyze",
    # Approximations
    "approximate_price_modified",
    "approximate_price_macaulay",
    "approximate_price_convexity",
    "duration_after_elapsed_time",
    "portfolio_duration",
]
