"""
Curve bootstrapping engine.

Extends a piecewise flat forward curve one knot at a time so that each
instrument reprices to its market price:
1. Sort instruments by last cash flow time
2. Solve for the forward rate beyond the current curve end
3. Append the knot and move on to the next instrument

The forward is found in closed form when only the last cash flow lies
past the curve end, or when two cash flows straddle it at zero price.
Otherwise Newton's method is used with partial_duration as derivative.
"""

from dataclasses import dataclass
import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy.optimize import brentq

from ..conventions import Frequency
from ..exceptions import ConvergenceError, PreconditionError
from ..solvers.root1d import DEFAULT_MAX_ITERATIONS, NewtonSolver
from .curve import Curve
from .instruments import (
    CashDeposit,
    ForwardRateAgreement,
    Instrument,
    InterestRateSwap,
    ZeroCouponBond,
)

logger = logging.getLogger(__name__)


def bootstrap(
    price: float,
    instrument,
    curve: Curve,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    bracket: Optional[Tuple[float, float]] = None
) -> Tuple[float, float]:
    """
    Find the knot that extends curve so instrument prices to price.

    The new forward applies from the current curve end up to the last
    cash flow time of the instrument. The curve itself is not modified;
    use curve.extend(*knot) to accumulate.

    Args:
        price: Market price of the instrument
        instrument: Anything exposing size(), time() and cash()
        curve: Curve fitted so far
        max_iterations: Newton iteration cap
        bracket: Optional (lo, hi) forward bracket for a Brent search
            if Newton does not converge

    Returns:
        Tuple of (last cash flow time, forward rate)

    Raises:
        PreconditionError: No cash flows, or the instrument does not
            extend past the end of the curve (past 0 for an empty curve)
        ConvergenceError: The iterative solve did not converge
    """
    m = instrument.size()
    if m == 0:
        raise PreconditionError("Instrument has no cash flows")

    u = np.asarray(instrument.time(), dtype=float)
    c = np.asarray(instrument.cash(), dtype=float)

    n = curve.size
    # end of curve
    t_ = curve.last_time
    # last cash flow and its time
    u_ = float(u[-1])
    c_ = float(c[-1])

    if not u_ > t_:
        raise PreconditionError(
            f"Last cash flow time {u_} must be past the curve end {t_}"
        )

    # discount to end of curve
    D_ = curve.discount(t_)

    # Only the last cash flow is past the end of the curve:
    # p = pv + c D exp(-f (u - t)) where pv is the value of the others.
    if m == 1 or u[-2] <= t_:
        pv = sum(c[j] * curve.discount(u[j]) for j in range(m - 1))
        with np.errstate(divide="ignore", invalid="ignore"):
            f = -np.log((price - pv) / (c_ * D_)) / (u_ - t_)
        logger.debug("Bootstrap %s to %g in closed form: %r", instrument, u_, f)
        return (u_, float(f))

    # Two cash flows past the end at zero price:
    # 0 = c0 D exp(-f (u0 - t)) + c1 D exp(-f (u1 - t))
    if price == 0 and m == 2:
        with np.errstate(divide="ignore", invalid="ignore"):
            f = np.log(-c[0] / c[1]) / (u[0] - u[1])
        logger.debug("Bootstrap %s to %g at zero price: %r", instrument, u_, f)
        return (u_, float(f))

    past = c[u > t_]
    if np.any(past > 0) and np.any(past < 0):
        logger.warning(
            "Cash flows past %g have mixed signs; Newton may not find the right root", t_
        )

    def pv(f: float) -> float:
        return curve.with_extrapolation(f).present_value(instrument) - price

    def dpv(f: float) -> float:
        return curve.with_extrapolation(f).partial_duration(instrument)

    # present value rounding noise
    floor = 4 * np.finfo(float).eps * max(abs(price), float(np.sum(np.abs(c))))
    f0 = float(curve.forwards[-1]) if n > 0 else 0.0
    solver = NewtonSolver(f0, pv, dpv, max_iterations, floor)

    try:
        f = solver.solve()
    except ConvergenceError:
        if bracket is None:
            raise
        logger.warning(
            "Newton failed for %s, falling back to Brent on %s", instrument, bracket
        )
        try:
            f = brentq(pv, bracket[0], bracket[1])
        except (ValueError, RuntimeError) as e:
            raise ConvergenceError(f"Brent failed on {bracket}: {e}") from e
    else:
        logger.debug(
            "Bootstrap %s to %g by Newton in %d iterations: %r",
            instrument, u_, solver.iterations, f
        )

    return (u_, float(f))


@dataclass
class BootstrapResult:
    """Result of curve bootstrap."""
    curve: Curve
    repricing_errors: Dict[float, float]
    success: bool
    message: str

    def to_dataframe(self) -> pd.DataFrame:
        """Curve knots with the repricing error of the instrument ending there."""
        df = self.curve.to_frame()
        df["repricing_error"] = [
            self.repricing_errors.get(float(t), np.nan) for t in self.curve.times
        ]
        return df


class CurveBootstrapper:
    """
    Bootstrap a piecewise flat forward curve from priced instruments.

    The bootstrapper:
    1. Sorts instruments by last cash flow time
    2. Sequentially solves for each forward
    3. Verifies that instruments reprice within tolerance

    Attributes:
        curve: Curve to extend (empty by default)
        max_iterations: Newton iteration cap for each instrument
        tolerance: Maximum allowed repricing error
    """

    def __init__(
        self,
        curve: Optional[Curve] = None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        tolerance: float = 1e-10
    ):
        self.curve = curve if curve is not None else Curve()
        self.max_iterations = max_iterations
        self.tolerance = tolerance

    def bootstrap(
        self,
        instruments: Sequence[Tuple[float, Instrument]],
        verify: bool = True
    ) -> BootstrapResult:
        """
        Bootstrap curve from instruments.

        Args:
            instruments: List of (price, instrument) pairs
            verify: Whether to verify repricing after bootstrap

        Returns:
            BootstrapResult with curve and diagnostics
        """
        if not instruments:
            return BootstrapResult(
                curve=self.curve,
                repricing_errors={},
                success=False,
                message="No instruments provided"
            )

        sorted_instruments = sorted(instruments, key=lambda x: x[1].termination())

        curve = self.curve
        for price, inst in sorted_instruments:
            try:
                t, f = bootstrap(price, inst, curve, self.max_iterations)
            except (PreconditionError, ConvergenceError) as e:
                return BootstrapResult(
                    curve=curve,
                    repricing_errors={},
                    success=False,
                    message=f"Bootstrap failed at {inst.termination():g}: {e}"
                )
            curve = curve.extend(t, f)

        repricing_errors = {}
        if verify:
            repricing_errors = self._verify_repricing(curve, sorted_instruments)

            max_error = max(abs(e) for e in repricing_errors.values())
            if not max_error <= self.tolerance:
                return BootstrapResult(
                    curve=curve,
                    repricing_errors=repricing_errors,
                    success=False,
                    message=f"Repricing error {max_error:.2e} exceeds tolerance {self.tolerance:.2e}"
                )

        return BootstrapResult(
            curve=curve,
            repricing_errors=repricing_errors,
            success=True,
            message="Bootstrap successful"
        )

    def _verify_repricing(
        self,
        curve: Curve,
        instruments: Sequence[Tuple[float, Instrument]]
    ) -> Dict[float, float]:
        """
        Verify that instruments reprice to their prices.

        Returns dict of {termination: error} where error = present value - price.
        """
        return {
            inst.termination(): curve.present_value(inst) - price
            for price, inst in instruments
        }


def instrument_from_quote(q: Dict) -> Tuple[float, Instrument]:
    """
    Build a priced instrument from a quote dictionary.

    Deposits price to 1, FRAs and swaps to 0, and zeros to their quote.
    """
    inst_type = q.get("instrument_type", "").upper()
    maturity = float(q["maturity"])
    quote = float(q.get("quote", 0))

    if inst_type == "DEPOSIT":
        return (1.0, CashDeposit(maturity, quote))
    elif inst_type == "FRA":
        return (0.0, ForwardRateAgreement(float(q["start"]), maturity, quote))
    elif inst_type in ("SWAP", "IRS"):
        frequency = Frequency.from_string(q.get("frequency", "ANNUAL"))
        return (0.0, InterestRateSwap(maturity, quote, frequency))
    elif inst_type in ("ZERO", "ZCB"):
        return (quote, ZeroCouponBond(maturity))
    raise ValueError(f"Unsupported instrument_type: {inst_type}")


def bootstrap_from_quotes(
    quotes: List[Dict],
    extrapolation: float = float("nan")
) -> Curve:
    """
    Convenience function to bootstrap curve from quote dictionaries.

    Args:
        quotes: List of dicts with keys: instrument_type, maturity, quote, ...
        extrapolation: Extrapolation rate of the returned curve

    Returns:
        Bootstrapped curve

    Example quote format:
        {"instrument_type": "DEPOSIT", "maturity": 0.25, "quote": 0.053}
        {"instrument_type": "FRA", "start": 0.25, "maturity": 0.5, "quote": 0.052}
        {"instrument_type": "SWAP", "maturity": 2, "quote": 0.05, "frequency": "SEMI"}
        {"instrument_type": "ZERO", "maturity": 5, "quote": 0.78}
    """
    instruments = [instrument_from_quote(q) for q in quotes]

    result = CurveBootstrapper().bootstrap(instruments)

    if not result.success:
        raise RuntimeError(f"Bootstrap failed: {result.message}")

    return result.curve.with_extrapolation(extrapolation)


__all__ = [
    "bootstrap",
    "BootstrapResult",
    "CurveBootstrapper",
    "instrument_from_quote",
    "bootstrap_from_quotes",
]
