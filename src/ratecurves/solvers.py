"""
One-dimensional root finding for curve nodes.

Brackets are grown geometrically outward from a first guess and clipped
to a hard domain; the bracketed root is then polished with
scipy.optimize.brentq.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Tuple

import numpy as np
from scipy.optimize import brentq

from .errors import UnboundedRootError

logger = logging.getLogger(__name__)

Func = Callable[[float], float]


@dataclass
class RootResult:
    root: float
    iterations: int
    function_calls: int
    bracket: Tuple[float, float]


def _checked(func: Func) -> Func:
    def wrapped(x: float) -> float:
        value = func(x)
        if not np.isfinite(value):
            raise UnboundedRootError(f"Objective is not finite at x={x!r}: {value!r}")
        return value
    return wrapped


def find_bracket(
    func: Func,
    guess: float,
    step: float,
    lower: float,
    upper: float,
    growth: float = 1.6,
    max_expansions: int = 60,
) -> Tuple[float, float]:
    """
    Find [a, b] with a sign change of func inside [lower, upper].

    Args:
        func: Objective
        guess: Starting point, clipped into the domain
        step: Initial half-width of the bracket
        lower: Hard lower bound of the domain
        upper: Hard upper bound of the domain
        growth: Expansion factor per iteration
        max_expansions: Maximum number of expansions

    Returns:
        (a, b) with func(a) * func(b) <= 0

    Raises:
        UnboundedRootError: No sign change found within the domain
    """
    if not lower < upper:
        raise UnboundedRootError(f"Empty search domain [{lower}, {upper}]")
    f = _checked(func)

    x0 = min(max(guess, lower), upper)
    step = abs(step) or 1e-4 * max(1.0, abs(x0))
    a, b = max(lower, x0 - step), min(upper, x0 + step)
    f_a, f_b = f(a), f(b)

    for expansion in range(max_expansions):
        if f_a * f_b <= 0:
            logger.debug("Bracket [%s, %s] found after %s expansions", a, b, expansion)
            return a, b
        if a <= lower and b >= upper:
            break
        step *= growth
        # grow toward the side with the smaller residual first
        if abs(f_a) < abs(f_b) and a > lower:
            a = max(lower, x0 - step)
            f_a = f(a)
        elif b < upper:
            b = min(upper, x0 + step)
            f_b = f(b)
        else:
            a = max(lower, x0 - step)
            f_a = f(a)

    if f_a * f_b <= 0:
        return a, b
    raise UnboundedRootError(
        f"No root in [{lower}, {upper}]: residuals {f_a:.6g} at {a:.10g} and {f_b:.6g} at {b:.10g}"
    )


def solve(
    func: Func,
    guess: float,
    lower: float,
    upper: float,
    accuracy: float = 1e-12,
    step: float = 0.0,
    growth: float = 1.6,
    max_expansions: int = 60,
    max_iter: int = 200,
) -> RootResult:
    """
    Bracket and solve func(x) = 0 inside [lower, upper].

    Raises:
        UnboundedRootError: No root can be bracketed, or the objective is not finite
    """
    f = _checked(func)
    a, b = find_bracket(f, guess, step, lower, upper, growth, max_expansions)
    f_a = f(a)
    if f_a == 0.0:
        return RootResult(a, 0, 1, (a, b))
    f_b = f(b)
    if f_b == 0.0:
        return RootResult(b, 0, 1, (a, b))

    root, info = brentq(f, a, b, xtol=accuracy, maxiter=max_iter, full_output=True, disp=False)
    if not info.converged:
        raise UnboundedRootError(f"Root search in [{a}, {b}] did not converge: {info.flag}")
    logger.debug("Root %s found in %s iterations", root, info.iterations)
    return RootResult(float(root), info.iterations, info.function_calls, (a, b))


__all__ = ["RootResult", "find_bracket", "solve"]
