"""
Root finding shared by the annuity, perpetuity and bond solvers.
"""

from .bisection import BisectionResult, bisect_integer, bisect_root, expand_bracket

__all__ = [
    "BisectionResult",
    "bisect_root",
    "bisect_integer",
    "expand_bracket",
]
