# src/core/finance/root_finder.py
"""Newton-Raphson root finding with a hard iteration cap."""

from __future__ import annotations

import logging
import math
from typing import Protocol

from src.core.errors import NoConvergenceError

logger = logging.getLogger(__name__)

# Forward-difference step shared by every objective (rate and markup solves)
FD_STEP = 1e-4

# Stop once |f(x)| drops below this
NEWTON_TOL = 1e-10

# Hard cap; the only cancellation mechanism for a pure computation
NEWTON_MAX_ITER = 100


class Objective(Protocol):
    def evaluate(self, x: float) -> float: ...

    def derivative(self, x: float) -> float: ...


class FiniteDifferenceObjective:
    """
    Base for objectives whose derivative is approximated numerically.

    Subclasses implement `evaluate`; `derivative` is the forward difference
    (f(x + h) - f(x)) / h with h = FD_STEP.
    """

    step: float = FD_STEP

    def evaluate(self, x: float) -> float:
        raise NotImplementedError

    def derivative(self, x: float) -> float:
        h = self.step
        return (self.evaluate(x + h) - self.evaluate(x)) / h


def newton(
    objective: Objective,
    x0: float,
    *,
    tol: float = NEWTON_TOL,
    max_iter: int = NEWTON_MAX_ITER,
) -> float:
    """
    Find x with |objective.evaluate(x)| < tol by Newton iteration from x0.

    x_{k+1} = x_k - f(x_k) / f'(x_k)

    Raises:
        NoConvergenceError: iteration cap reached, derivative zero or not
            finite, iterate not finite, or an arithmetic error while
            evaluating.
    """
    x = float(x0)
    for iteration in range(max_iter + 1):
        try:
            fx = objective.evaluate(x)
            if not math.isfinite(fx):
                raise NoConvergenceError(f"objective is not finite at x={x}")
            if abs(fx) < tol:
                logger.debug("Newton converged after %s iterations: x=%s f=%s", iteration, x, fx)
                return x
            if iteration == max_iter:
                break
            dfx = objective.derivative(x)
        except (ZeroDivisionError, OverflowError) as e:
            raise NoConvergenceError(f"arithmetic failure at x={x}: {e}") from e

        if dfx == 0.0 or not math.isfinite(dfx):
            raise NoConvergenceError(f"derivative is zero or undefined at x={x} (iteration {iteration})")

        x = x - fx / dfx
        if not math.isfinite(x):
            raise NoConvergenceError(f"iterate diverged at iteration {iteration}")

    raise NoConvergenceError(f"no convergence within {max_iter} iterations (last x={x})")
