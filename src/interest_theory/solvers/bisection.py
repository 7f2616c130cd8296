"""
Bracketed root finding for the inverse problems (rate, periods, growth).

[T1] Bisection over a monotone function converges in
O(log2(width/tolerance)) iterations.

Design:
- **Dynamic bracket**: the upper end starts at a configured value and is
  doubled until the target is bracketed (or a hard limit is reached).
- **Continuous roots**: scipy.optimize.bisect inside the bracket.
- **Integer roots**: bisection over integers, stopping on consecutive
  integers and returning whichever is closer to the target.
- **Failure**: always ConvergenceFailure, never a silent best guess.
"""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass

from scipy import optimize

from interest_theory.errors import ConvergenceFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BisectionResult:
    """
    Result of a bracketed bisection.

    Attributes
    ----------
    root : float
        Located root
    iterations : int
        Bisection iterations performed (excluding bracketing)
    bracket : tuple[float, float]
        Final bracket handed to the bisection
    """

    root: float
    iterations: int
    bracket: tuple[float, float]


def expand_bracket(
    func: Callable[[float], float],
    lower: float,
    upper: float,
    upper_limit: float,
    label: str = "value",
) -> tuple[float, float]:
    """
    Double ``upper`` until func changes sign over [lower, upper].

    Parameters
    ----------
    func : Callable[[float], float]
        Residual function (computed minus target)
    lower, upper : float
        Initial bracket
    upper_limit : float
        Largest upper end tried
    label : str
        Name of the unknown, for error messages

    Returns
    -------
    tuple[float, float]
        Bracket with func(lower) and func(upper) of opposite sign (or one
        of them exactly zero)

    Raises
    ------
    ConvergenceFailure
        If no sign change is found before upper_limit
    """
    f_lower = _evaluate(func, lower, label)
    if f_lower == 0:
        return lower, lower

    f_upper = _evaluate(func, upper, label)
    while _same_sign(f_lower, f_upper):
        if upper >= upper_limit:
            raise ConvergenceFailure(
                f"CRITICAL: Could not bracket {label} in [{lower}, {upper_limit}]; "
                f"target is not attainable"
            )
        upper = min(upper * 2 if upper > 0 else 1.0, upper_limit)
        logger.debug(f"Expanding {label} bracket to [{lower}, {upper}]")
        f_upper = _evaluate(func, upper, label)

    return lower, upper


def _evaluate(func: Callable[[float], float], x: float, label: str) -> float:
    """func(x), or NaN where it overflows so the bracket keeps widening."""
    try:
        return func(x)
    except OverflowError:
        logger.debug(f"{label} residual overflows at {x}")
        return math.nan


def _same_sign(a: float, b: float) -> bool:
    if math.isnan(a) or math.isnan(b):
        return True
    return (a > 0 and b > 0) or (a < 0 and b < 0)


def bisect_root(
    func: Callable[[float], float],
    target: float,
    lower: float,
    upper: float,
    upper_limit: float,
    tolerance: float,
    max_iterations: int,
    label: str = "value",
) -> BisectionResult:
    """
    Solve func(x) = target for monotone func by bracketed bisection.

    Parameters
    ----------
    func : Callable[[float], float]
        Monotone function of the unknown
    target : float
        Desired value of func
    lower, upper : float
        Initial bracket; upper is doubled until the target is bracketed
    upper_limit : float
        Largest upper end tried
    tolerance : float
        Stopping width on the unknown
    max_iterations : int
        Bisection budget
    label : str
        Name of the unknown, for errors and logs

    Returns
    -------
    BisectionResult

    Raises
    ------
    ConvergenceFailure
        If the target cannot be bracketed or the budget is exhausted
    """

    def residual(x: float) -> float:
        return func(x) - target

    a, b = expand_bracket(residual, lower, upper, upper_limit, label)
    if a == b:
        return BisectionResult(root=a, iterations=0, bracket=(a, b))
    if residual(b) == 0:
        return BisectionResult(root=b, iterations=0, bracket=(a, b))

    root, info = optimize.bisect(
        residual,
        a,
        b,
        xtol=tolerance,
        maxiter=max_iterations,
        full_output=True,
        disp=False,
    )
    if not info.converged:
        raise ConvergenceFailure(
            f"CRITICAL: {label} bisection did not converge within "
            f"{max_iterations} iterations (bracket [{a}, {b}])",
            iterations=info.iterations,
            best_estimate=root,
        )

    logger.debug(f"Solved {label} = {root} in {info.iterations} iterations")
    return BisectionResult(root=root, iterations=info.iterations, bracket=(a, b))


def bisect_integer(
    func: Callable[[int], float],
    target: float,
    lower: int,
    upper: int,
    upper_limit: int,
    max_iterations: int,
    tolerance: float = 1e-10,
    label: str = "periods",
) -> int:
    """
    Find the integer n whose func(n) is closest to target.

    func must be increasing in n over [lower, upper_limit].

    Returns
    -------
    int
        Integer period count

    Raises
    ------
    ConvergenceFailure
        If func(upper_limit) is still below the target
    """
    low, high = lower, upper
    if func(low) >= target:
        return low

    while func(high) < target:
        if high >= upper_limit:
            raise ConvergenceFailure(
                f"CRITICAL: Could not bracket {label} in [{lower}, {upper_limit}]; "
                f"target {target} is not attainable"
            )
        low = high
        high = min(high * 2, upper_limit)
        logger.debug(f"Expanding {label} bracket to [{low}, {high}]")

    for _ in range(max_iterations):
        if high - low <= 1:
            break
        mid = (low + high) // 2
        value = func(mid)
        if abs(value - target) < tolerance:
            return mid
        if value < target:
            low = mid
        else:
            high = mid
    else:
        raise ConvergenceFailure(
            f"CRITICAL: {label} search did not converge within "
            f"{max_iterations} iterations",
            iterations=max_iterations,
            best_estimate=(low + high) / 2,
        )

    low_error = abs(func(low) - target)
    high_error = abs(func(high) - target)
    return low if low_error < high_error else high
