"""
One dimensional root finding.

RootSolver exposes a small stepping interface:
- next(): advance to the next guess at the root
- done(): True when no further iterations are needed
- solve(): step until done and return the final iterate

NewtonSolver stops at full machine precision rather than at a fixed
tolerance. Iteration continues while |f| keeps decreasing. Once a step
fails to reduce |f| the best iterate seen so far is accepted if neither
of its floating point neighbours gives a smaller |f|. Near a root f is
usually flat across several ulps, so Newton can bounce around inside
that region without ever improving on its best point.
"""

from abc import ABC, abstractmethod
import logging
from typing import Callable, Optional

import numpy as np

from ..exceptions import ConvergenceError

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 100


class RootSolver(ABC):
    """
    Abstract base class for 1-d root solvers.

    Subclasses keep the current iterate in x.
    """
    
    def next(self) -> float:
        """Next guess at the root."""
        return self._next()
    
    def done(self) -> bool:
        """True when no more iterations are needed."""
        return self._done()
    
    def solve(self) -> float:
        """Iterate until done and return the accepted iterate."""
        self.next()
        while not self.done():
            self.next()
        return self.x
    
    @abstractmethod
    def _next(self) -> float:
        pass
    
    @abstractmethod
    def _done(self) -> bool:
        pass


class NewtonSolver(RootSolver):
    """
    Newton-Raphson iteration x <- x - f(x)/f'(x).
    
    Attributes:
        x: Current iterate
        iterations: Number of steps taken so far
        max_iterations: Step budget, exceeding it raises ConvergenceError
        tolerance: |f| at or below which an iterate is accepted outright,
            0 to iterate to full precision
    """

    # ulps to walk downhill from the best iterate before giving up on it
    polish_steps = 4
    
    def __init__(
        self,
        x0: float,
        f: Callable[[float], float],
        df: Callable[[float], float],
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        tolerance: float = 0.0
    ):
        self.x = float(x0)
        self.f = f
        self.df = df
        self.max_iterations = max_iterations
        self.tolerance = tolerance
        self.iterations = 0
        self._x_prev = float("nan")
        self._y_prev = float("nan")
        self._x_best = self.x
        self._y_best = float("inf")
    
    def _record(self, x: float, y: float) -> None:
        if abs(y) < self._y_best:
            self._x_best = x
            self._y_best = abs(y)
    
    def _next(self) -> float:
        self.iterations += 1
        y = self.f(self.x)
        self._record(self.x, y)
        self._x_prev = self.x
        self._y_prev = y
        if y == 0:
            return self.x
        
        dy = self.df(self.x)
        if dy == 0 or not np.isfinite(dy):
            raise ConvergenceError(
                f"Newton: derivative {dy} at x = {self.x} after {self.iterations} iterations"
            )
        
        x = self.x - y / dy
        if not np.isfinite(x):
            raise ConvergenceError(
                f"Newton: non-finite iterate from x = {self.x}, f(x) = {y}"
            )
        self.x = float(x)
        return self.x
    
    def _done(self) -> bool:
        if self.iterations > self.max_iterations:
            raise ConvergenceError(
                f"Newton: exceeded maximum number of iterations ({self.max_iterations})"
            )
        
        y = abs(self.f(self.x))
        self._record(self.x, y)
        # exact root or a fixed point of the iteration
        if y == 0 or self.x == self._x_prev:
            return True
        if y <= self.tolerance:
            logger.debug("Newton reached |f| = %g at %r", y, self.x)
            return True
        # |f| still decreasing
        if y < abs(self._y_prev):
            return False
        
        x = self._polish(self._x_best, self._y_best)
        if x is None:
            return False
        
        self.x = x
        logger.debug("Newton converged to %r in %d iterations", self.x, self.iterations)
        return True
    
    def _polish(self, x: float, y: float) -> Optional[float]:
        """
        Walk downhill in |f| one ulp at a time.

        Returns the first point neither of whose neighbours gives a
        smaller |f|, or None if |f| is still falling after polish_steps.
        """
        for _ in range(self.polish_steps + 1):
            up = float(np.nextafter(x, np.inf))
            down = float(np.nextafter(x, -np.inf))
            y_up = abs(self.f(up))
            y_down = abs(self.f(down))
            if y_up >= y and y_down >= y:
                return x
            x, y = (up, y_up) if y_up < y_down else (down, y_down)
        return None


def newton(
    f: Callable[[float], float],
    df: Callable[[float], float],
    x0: float,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    tolerance: float = 0.0
) -> float:
    """
    Solve f(x) = 0 by Newton's method starting from x0.
    
    Args:
        f: Function whose root is sought
        df: Derivative of f
        x0: Initial guess
        max_iterations: Iteration cap
        tolerance: Accept any iterate with |f| at or below this
        
    Returns:
        Root to full machine precision
        
    Raises:
        ConvergenceError: If the iteration cap is exceeded
    """
    return NewtonSolver(x0, f, df, max_iterations, tolerance).solve()


__all__ = [
    "DEFAULT_MAX_ITERATIONS",
    "RootSolver",
    "NewtonSolver",
    "newton",
]
