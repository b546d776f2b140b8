"""
Solvers package - one dimensional root finding.

Provides:
- RootSolver: Stepping interface (next/done/solve)
- NewtonSolver: Newton's method with a machine precision stopping rule
"""

from .root1d import DEFAULT_MAX_ITERATIONS, RootSolver, NewtonSolver, newton

__all__ = [
    "DEFAULT_MAX_ITERATIONS",
    "RootSolver",
    "NewtonSolver",
    "newton",
]
