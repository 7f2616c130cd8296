"""
Duration and convexity of a set of cash flows.

[T1] MacD = Σ t·v^t·CF_t / Σ v^t·CF_t
[T1] ModD = MacD × v
[T1] MacC = Σ t²·v^t·CF_t / Σ v^t·CF_t
[T1] ModC = Σ t(t+1)·v^(t+2)·CF_t / Σ v^t·CF_t

Unlike the annuity functions, the rate ``i`` here is a decimal per period
(0.05 means 5%).
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from scipy import optimize

from interest_theory.config.settings import SETTINGS
from interest_theory.errors import ConvergenceFailure, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CashFlow:
    """Single cash flow."""

    time: float  # Periods from now
    amount: float

    def __post_init__(self) -> None:
        """Validate cash flow."""
        if self.time < 0:
            raise ValidationError(f"CRITICAL: cash flow time must be >= 0, got {self.time}")
        if self.amount <= 0:
            raise ValidationError(
                f"CRITICAL: cash flow amount must be > 0, got {self.amount}"
            )


@dataclass(frozen=True)
class DurationResult:
    """
    Duration and convexity measures at one rate.

    Attributes
    ----------
    macaulay_duration : float
        PV-weighted average time to receipt
    modified_duration : float
        -P'(i)/P(i)
    macaulay_convexity : float
        PV-weighted average squared time
    modified_convexity : float
        P''(i)/P(i)
    """

    macaulay_duration: float
    modified_duration: float
    macaulay_convexity: float
    modified_convexity: float


@dataclass(frozen=True)
class PortfolioComponent:
    """Holding in a portfolio: its duration and market value."""

    duration: float
    value: float


def _arrays(cash_flows: Sequence[CashFlow]) -> tuple[np.ndarray, np.ndarray]:
    if not cash_flows:
        raise ValidationError("CRITICAL: cash_flows list is empty")
    times = np.array([cf.time for cf in cash_flows], dtype=float)
    amounts = np.array([cf.amount for cf in cash_flows], dtype=float)
    return times, amounts


def price(cash_flows: Sequence[CashFlow], i: float) -> float:
    """
    Present value of the cash flows.

    [T1] P(i) = Σ v^t·CF_t
    """
    times, amounts = _arrays(cash_flows)
    return float(np.sum(amounts * (1 + i) ** (-times)))


def macaulay_duration(cash_flows: Sequence[CashFlow], i: float) -> float:
    """
    Macaulay duration.

    Parameters
    ----------
    cash_flows : Sequence[CashFlow]
        Cash flows with time (periods) and amount
    i : float
        Rate per period (decimal)

    Returns
    -------
    float
        Duration in periods

    Examples
    --------
    >>> macaulay_duration([CashFlow(time=7, amount=1000)], 0.05)
    7.0
    """
    times, amounts = _arrays(cash_flows)
    pv = amounts * (1 + i) ** (-times)
    return float(np.sum(times * pv) / np.sum(pv))


def modified_duration(cash_flows: Sequence[CashFlow], i: float) -> float:
    """[T1] ModD = MacD / (1+i)."""
    return macaulay_duration(cash_flows, i) / (1 + i)


def macaulay_convexity(cash_flows: Sequence[CashFlow], i: float) -> float:
    """[T1] MacC = Σ t²·v^t·CF_t / Σ v^t·CF_t."""
    times, amounts = _arrays(cash_flows)
    pv = amounts * (1 + i) ** (-times)
    return float(np.sum(times**2 * pv) / np.sum(pv))


def modified_convexity(cash_flows: Sequence[CashFlow], i: float) -> float:
    """[T1] ModC = Σ t(t+1)·v^(t+2)·CF_t / Σ v^t·CF_t."""
    times, amounts = _arrays(cash_flows)
    v = 1 / (1 + i)
    numerator = np.sum(times * (times + 1) * v ** (times + 2) * amounts)
    return float(numerator / np.sum(v**times * amounts))


def analyze(cash_flows: Sequence[CashFlow], i: float) -> DurationResult:
    """All four duration/convexity measures at rate ``i``."""
    return DurationResult(
        macaulay_duration=macaulay_duration(cash_flows, i),
        modified_duration=modified_duration(cash_flows, i),
        macaulay_convexity=macaulay_convexity(cash_flows, i),
        modified_convexity=modified_convexity(cash_flows, i),
    )


def yield_from_price(
    cash_flows: Sequence[CashFlow],
    target_price: float,
    initial_guess: float = 0.05,
) -> float:
    """
    Rate per period (decimal) at which the cash flows are worth ``target_price``.

    [T1] Newton iteration on P(i) - target with P'(i) = -Σ t·v^(t+1)·CF_t.

    Raises
    ------
    ValidationError
        If target_price is not positive
    ConvergenceFailure
        If Newton's method does not converge
    """
    if target_price <= 0:
        raise ValidationError(f"CRITICAL: price must be > 0, got {target_price}")
    times, amounts = _arrays(cash_flows)

    def residual(i: float) -> float:
        return float(np.sum(amounts * (1 + i) ** (-times))) - target_price

    def derivative(i: float) -> float:
        return float(-np.sum(times * amounts * (1 + i) ** (-times - 1)))

    config = SETTINGS.solver
    root, info = optimize.newton(
        residual,
        initial_guess,
        fprime=derivative,
        tol=config.newton_tolerance,
        maxiter=config.newton_max_iterations,
        full_output=True,
        disp=False,
    )
    if not info.converged or not np.isfinite(root) or root <= -1:
        raise ConvergenceFailure(
            f"CRITICAL: yield solve did not converge for price {target_price} "
            f"({info.flag})",
            iterations=info.iterations,
            best_estimate=float(root),
        )

    logger.debug(f"Yield {root:.10f} found in {info.iterations} Newton iterations")
    return float(root)


# =============================================================================
# Approximations
# =============================================================================

def approximate_price_modified(
    original_price: float,
    original_rate: float,
    new_rate: float,
    modified_duration: float,
) -> float:
    """
    First-order approximation using modified duration.

    [T1] P(i_n) ≈ P(i_o)·[1 - (i_n - i_o)·ModD]
    """
    return original_price * (1 - (new_rate - original_rate) * modified_duration)


def approximate_price_macaulay(
    original_price: float,
    original_rate: float,
    new_rate: float,
    macaulay_duration: float,
) -> float:
    """
    First-order approximation using Macaulay duration.

    [T1] P(i_n) ≈ P(i_o)·((1+i_o)/(1+i_n))^MacD
    """
    return original_price * ((1 + original_rate) / (1 + new_rate)) ** macaulay_duration


def approximate_price_convexity(
    original_price: float,
    original_rate: float,
    new_rate: float,
    modified_duration: float,
    modified_convexity: float,
) -> float:
    """
    Second-order approximation using modified duration and convexity.

    [T1] P(i_n) ≈ P(i_o)·[1 - Δ·ModD + ½Δ²·ModC],  Δ = i_n - i_o
    """
    delta = new_rate - original_rate
    return original_price * (
        1 - delta * modified_duration + 0.5 * delta**2 * modified_convexity
    )


def duration_after_elapsed_time(duration: float, elapsed: float) -> float:
    """[T1] Macaulay duration after ``elapsed`` periods with no cash flows: MacD - t."""
    return duration - elapsed


def portfolio_duration(components: Sequence[PortfolioComponent]) -> float:
    """
    Value-weighted portfolio duration.

    [T1] D_P = Σ (P_k / P)·D_k

    Examples
    --------
    >>> round(portfolio_duration([PortfolioComponent(5, 1000), PortfolioComponent(3, 2000)]), 3)
    3.667
    """
    if not components:
        raise ValidationError("CRITICAL: portfolio has no components")
    values = np.array([c.value for c in components], dtype=float)
    durations = np.array([c.duration for c in components], dtype=float)
    total = values.sum()
    if total == 0:
        raise ValidationError("CRITICAL: portfolio total value is zero")
    return float(np.sum(values / total * durations))
