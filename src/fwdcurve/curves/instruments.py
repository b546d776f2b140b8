"""
Fixed income instruments as cash flow schedules.

An instrument is an ordered list of (time, cash flow) pairs. That is all
the curve needs to price it, so any object exposing size(), time() and
cash() can be priced or bootstrapped.

Defines:
- Instrument: Schedule from explicit times and cash flows
- ZeroCouponBond: Single payment at maturity
- CashDeposit: Pays 1 + r*u at maturity u
- ForwardRateAgreement: -1 at start, 1 + f*(v - u) at end
- InterestRateSwap: -1 at 0, coupons r/q, plus 1 at maturity

Conventions:
- Times are year fractions from the valuation date
- Cash flow times are strictly increasing
"""

from typing import Callable, Iterator, Tuple, Union

import numpy as np

from ..conventions import Frequency


class Instrument:
    """
    Read-only cash flow schedule.

    Two instruments are equal when they have the same size and the same
    times and cash flows, whatever their type.
    """

    def __init__(self, times=(), cash=()):
        t = np.array(times, dtype=float)
        c = np.array(cash, dtype=float)
        if t.ndim != 1 or t.shape != c.shape:
            raise ValueError("Times and cash flows must have same length")
        t.setflags(write=False)
        c.setflags(write=False)
        self._time = t
        self._cash = c

    def size(self) -> int:
        """Number of cash flows."""
        return len(self._time)

    def time(self) -> np.ndarray:
        """Cash flow times."""
        return self._time

    def cash(self) -> np.ndarray:
        """Cash flow amounts."""
        return self._cash

    def termination(self) -> float:
        """Time of the last cash flow, NaN if there are none."""
        if self.size() == 0:
            return float("nan")
        return float(self._time[-1])

    def __len__(self) -> int:
        return self.size()

    def __iter__(self) -> Iterator[Tuple[float, float]]:
        return iter(zip(self._time.tolist(), self._cash.tolist()))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Instrument):
            return NotImplemented
        return (
            self.size() == other.size()
            and np.array_equal(self.time(), other.time())
            and np.array_equal(self.cash(), other.cash())
        )

    __hash__ = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(size={self.size()}, termination={self.termination()})"


class ZeroCouponBond(Instrument):
    """
    Zero coupon bond.

    Pays amount at maturity.
    """

    def __init__(self, maturity: float, amount: float = 1.0):
        self.maturity = maturity
        self.amount = amount
        super().__init__([maturity], [amount])


class CashDeposit(Instrument):
    """
    Money market deposit.

    Simple interest: the depositor receives 1 + r*u at maturity u for
    a unit deposit, so the instrument prices to 1.
    """

    def __init__(self, maturity: float, rate: float = 0.0):
        self.maturity = maturity
        self.rate = rate
        super().__init__([maturity], [1.0 + rate * maturity])


class ForwardRateAgreement(Instrument):
    """
    Forward Rate Agreement.

    Pays -1 at the start u and 1 + f*(v - u) at the end v. An FRA
    struck at the market forward rate prices to 0.
    """

    def __init__(self, start: float, end: float, rate: float):
        if end <= start:
            raise ValueError("End must be greater than start")
        self.start = start
        self.end = end
        self.rate = rate
        super().__init__([start, end], [-1.0, 1.0 + rate * (end - start)])


class InterestRateSwap(Instrument):
    """
    Interest rate swap starting today, as a par bond.

    With q payments per year and n = q*u periods:
    - C_0 = -1 at time 0
    - C_j = r/q at t_j = j/q, 0 < j < n
    - C_n = 1 + r/q at maturity

    A swap at its par coupon prices to 0.
    """

    def __init__(
        self,
        maturity: float,
        coupon: float,
        frequency: Union[Frequency, str] = Frequency.ANNUAL
    ):
        if isinstance(frequency, str):
            frequency = Frequency.from_string(frequency)

        periods = int(round(frequency.value * maturity))
        if not np.isclose(frequency.value * maturity, periods, rtol=0.0, atol=1e-9):
            raise ValueError(
                f"Swap maturity {maturity} is not a whole number of {frequency.name} periods"
            )
        if periods < 1:
            raise ValueError(f"Swap maturity {maturity} shorter than one {frequency.name} period")

        self.maturity = maturity
        self.coupon = coupon
        self.frequency = frequency

        dt = frequency.period
        t = np.arange(periods + 1) * dt
        c = np.full(periods + 1, coupon * dt)
        c[0] = -1.0
        c[-1] += 1.0
        super().__init__(t, c)


def par_coupon(swap: Instrument, discount: Callable[[float], float]) -> float:
    """
    Coupon that makes a swap price to 0.

    F = (D(t_0) - D(t_n)) / sum_{j=1}^n (t_j - t_{j-1}) D(t_j)

    Args:
        swap: Swap whose payment times define the schedule
        discount: Discount function, e.g. Curve.discount

    Returns:
        Par coupon rate
    """
    u = swap.time()
    if len(u) < 2:
        raise ValueError("Swap needs at least two payment times")

    annuity = sum((u[j] - u[j - 1]) * discount(u[j]) for j in range(1, len(u)))

    return (discount(u[0]) - discount(u[-1])) / annuity


__all__ = [
    "Instrument",
    "ZeroCouponBond",
    "CashDeposit",
    "ForwardRateAgreement",
    "InterestRateSwap",
    "par_coupon",
]
