"""
Exceptions raised by fwdcurve.

Domain violations (negative times, non-increasing knots) are not
exceptions: curve queries return NaN instead. The classes below are for
caller misuse and numerical failure, which must stop execution.
"""


class PreconditionError(ValueError):
    """A caller violated the contract of an operation."""


class ConvergenceError(RuntimeError):
    """An iterative solver failed to converge."""


__all__ = [
    "PreconditionError",
    "ConvergenceError",
]
