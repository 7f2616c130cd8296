"""
Configuration for interest-theory: frozen settings and tolerance tiers.
"""

from .settings import SETTINGS, RateConfig, ScheduleConfig, Settings, SolverConfig
from .tolerances import TOLERANCE_REGISTRY, get_tolerance

__all__ = [
    "SETTINGS",
    "Settings",
    "SolverConfig",
    "RateConfig",
    "ScheduleConfig",
    "TOLERANCE_REGISTRY",
    "get_tolerance",
]
