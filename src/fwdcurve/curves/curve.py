"""
Piecewise flat forward curve.

The Curve class represents the instantaneous forward rate

    f(u) = f[i]   if t[i-1] < u <= t[i]   (t[-1] = 0)
         = _f     if u > t[n-1]

and is undefined for u < 0. Note f(0) = f[0]. A curve with no knots is
the flat curve _f.

Provides:
- value: Forward rate f(u)
- integral: int_0^u f(s) ds
- discount: Discount factor D(u) = exp(-int_0^u f(s) ds)
- spot: Continuously compounded spot rate
- present_value, duration, partial_duration of a cash flow schedule

Undefined results are NaN. Queries never raise on bad knots or negative
times; any arithmetic with the result stays NaN.
"""

from typing import List, Tuple

import numpy as np
import pandas as pd

NAN = float("nan")


class Curve:
    """
    Piecewise flat forward curve with flat extrapolation.

    Knots are stored as float numpy arrays. Float arrays passed in are
    borrowed rather than copied, so a curve can be a view on storage
    owned by the caller. Curves are never edited in place: extend() and
    the bump methods return new curves.

    Attributes:
        times: Knot times t[0] < ... < t[n-1]
        forwards: Forward rate f[i] on (t[i-1], t[i]]
        extrapolation: Forward rate beyond t[n-1] (NaN if unknown)
    """

    def __init__(
        self,
        times=(),
        forwards=(),
        extrapolation: float = NAN
    ):
        self._t = np.asarray(times, dtype=float)
        self._f = np.asarray(forwards, dtype=float)
        if self._t.ndim != 1 or self._t.shape != self._f.shape:
            raise ValueError("Times and forwards must have same length")
        self._f_ = float(extrapolation)

    @property
    def times(self) -> np.ndarray:
        return self._t

    @property
    def forwards(self) -> np.ndarray:
        return self._f

    @property
    def extrapolation(self) -> float:
        return self._f_

    @property
    def size(self) -> int:
        """Number of knots."""
        return len(self._t)

    def __len__(self) -> int:
        return len(self._t)

    @property
    def last_time(self) -> float:
        """Time of the last knot, 0 for a curve with no knots."""
        return float(self._t[-1]) if len(self._t) else 0.0

    def is_valid(self) -> bool:
        """True if knot times are non-negative and strictly increasing."""
        if len(self._t) == 0:
            return True
        return bool(self._t[0] >= 0 and np.all(np.diff(self._t) > 0))

    def _defined(self, u: float) -> bool:
        # NaN u fails the comparison too
        return bool(u >= 0) and self.is_valid()

    def value(self, u: float) -> float:
        """
        Forward rate f(u).

        Returns f[i] for t[i-1] < u <= t[i], the extrapolation rate past
        the last knot and NaN for u < 0 or invalid knots.
        """
        if not self._defined(u):
            return NAN

        n = len(self._t)
        if n == 0:
            return self._f_

        # first knot with t[i] >= u
        i = int(np.searchsorted(self._t, u, side="left"))
        return self._f_ if i == n else float(self._f[i])

    def __call__(self, u: float) -> float:
        """Convenience method to call value."""
        return self.value(u)

    def integral(self, u: float) -> float:
        """
        Integral of the forward curve from 0 to u.

        Sums f[i]*(t[i] - t[i-1]) over knots with t[i] <= u, then adds
        the rate of the segment containing u times the remaining stub.
        """
        if not self._defined(u):
            return NAN

        n = len(self._t)
        # knots with t[i] <= u
        i = int(np.searchsorted(self._t, u, side="right"))

        I = 0.0
        t_ = 0.0
        if i > 0:
            dt = np.diff(self._t[:i], prepend=0.0)
            I = float(np.dot(self._f[:i], dt))
            t_ = float(self._t[i - 1])

        if u > t_:
            rate = self._f_ if i == n else float(self._f[i])
            I += rate * (u - t_)

        return I

    def discount(self, u: float) -> float:
        """Discount factor D(u) = exp(-int_0^u f(s) ds)."""
        return float(np.exp(-self.integral(u)))

    def spot(self, u: float) -> float:
        """
        Continuously compounded spot rate int_0^u f(s) ds / u.

        The spot rate is flat on (0, t[0]] and equal to f[0], which also
        defines it at u = 0.
        """
        if not self._defined(u):
            return NAN

        if len(self._t) == 0:
            return self._f_
        if u <= self._t[0]:
            return float(self._f[0])

        return self.integral(u) / u

    def forward_rate(self, t1: float, t2: float) -> float:
        """
        Average continuously compounded forward rate over [t1, t2].

        Args:
            t1: Start time
            t2: End time

        Returns:
            (int_0^t2 f - int_0^t1 f) / (t2 - t1)
        """
        if t2 <= t1:
            raise ValueError("t2 must be greater than t1")

        return (self.integral(t2) - self.integral(t1)) / (t2 - t1)

    def _discounts(self, u: np.ndarray) -> np.ndarray:
        return np.array([self.discount(ui) for ui in u], dtype=float)

    def present_value(self, instrument) -> float:
        """
        Present value sum_j c[j] D(u[j]) of an instrument's cash flows.

        Args:
            instrument: Anything exposing time() and cash()
        """
        u = np.asarray(instrument.time(), dtype=float)
        c = np.asarray(instrument.cash(), dtype=float)

        return float(np.sum(c * self._discounts(u)))

    def duration(self, instrument) -> float:
        """
        Derivative of present value with respect to a parallel shift of
        the whole curve, extrapolation included.

        -sum_j u[j] c[j] D(u[j])
        """
        u = np.asarray(instrument.time(), dtype=float)
        c = np.asarray(instrument.cash(), dtype=float)

        return float(-np.sum(u * c * self._discounts(u)))

    def partial_duration(self, instrument) -> float:
        """
        Derivative of present value with respect to the extrapolation rate.

        Only cash flows after the last knot depend on it:
        -sum_{u[j] > t[n-1]} (u[j] - t[n-1]) c[j] D(u[j])
        """
        u = np.asarray(instrument.time(), dtype=float)
        c = np.asarray(instrument.cash(), dtype=float)

        t_ = self.last_time
        past = u > t_
        u, c = u[past], c[past]

        return float(-np.sum((u - t_) * c * self._discounts(u)))

    def extend(self, time: float, forward: float) -> "Curve":
        """
        Create a new curve with one knot appended.

        Knot storage is copied; the extrapolation rate is carried over.
        """
        return Curve(
            np.append(self._t, float(time)),
            np.append(self._f, float(forward)),
            self._f_
        )

    def with_extrapolation(self, extrapolation: float) -> "Curve":
        """Create a view sharing this curve's knots with another extrapolation rate."""
        return Curve(self._t, self._f, extrapolation)

    def bump_parallel(self, bp: float) -> "Curve":
        """
        Create a new curve with parallel bump.

        Every forward, including the extrapolation rate, is shifted.

        Args:
            bp: Bump size in basis points

        Returns:
            New bumped curve
        """
        bump = bp / 10000.0
        return Curve(self._t.copy(), self._f + bump, self._f_ + bump)

    def bump_knot(self, knot_index: int, bp: float) -> "Curve":
        """
        Create a new curve with a single forward bumped.

        Args:
            knot_index: Index of knot to bump (0-based)
            bp: Bump size in basis points

        Returns:
            New bumped curve
        """
        if knot_index < 0 or knot_index >= len(self._t):
            raise IndexError(f"Invalid knot index: {knot_index}")

        f = self._f.copy()
        f[knot_index] += bp / 10000.0
        return Curve(self._t.copy(), f, self._f_)

    def get_knots(self) -> List[Tuple[float, float]]:
        """
        Get all curve knots.

        Returns:
            List of (time, forward) tuples
        """
        return [(float(t), float(f)) for t, f in zip(self._t, self._f)]

    def to_frame(self) -> pd.DataFrame:
        """Knots with their discount factors and spot rates as a DataFrame."""
        return pd.DataFrame({
            "time": self._t,
            "forward": self._f,
            "discount": [self.discount(t) for t in self._t],
            "spot": [self.spot(t) for t in self._t],
        })

    def copy(self) -> "Curve":
        """Create a copy of the curve that owns its knots."""
        return Curve(self._t.copy(), self._f.copy(), self._f_)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Curve):
            return NotImplemented
        same_extrapolation = (
            self._f_ == other._f_ or (np.isnan(self._f_) and np.isnan(other._f_))
        )
        return (
            np.array_equal(self._t, other._t)
            and np.array_equal(self._f, other._f)
            and same_extrapolation
        )

    __hash__ = None

    def __repr__(self) -> str:
        return (f"Curve(knots={len(self._t)}, last_time={self.last_time}, "
                f"extrapolation={self._f_})")


def create_flat_curve(rate: float) -> Curve:
    """
    Create a flat forward curve.

    A curve with no knots is flat at its extrapolation rate.

    Args:
        rate: Flat continuously compounded rate

    Returns:
        Flat curve
    """
    return Curve(extrapolation=rate)


__all__ = [
    "Curve",
    "create_flat_curve",
]
