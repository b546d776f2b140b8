"""
Curves package - piecewise flat forward curve construction.

Provides:
- Curve: Forward curve with value, integral, discount and spot queries
- bootstrap: Extend a curve by one knot to reprice an instrument
- CurveBootstrapper: Fit a whole curve from priced instruments
- Instruments: cash flow schedules used to build curves
"""

from .curve import Curve, create_flat_curve
from .bootstrap import (
    bootstrap,
    BootstrapResult,
    CurveBootstrapper,
    instrument_from_quote,
    bootstrap_from_quotes,
)
from .instruments import (
    Instrument,
    ZeroCouponBond,
    CashDeposit,
    ForwardRateAgreement,
    InterestRateSwap,
    par_coupon,
)

__all__ = [
    "Curve",
    "create_flat_curve",
    "bootstrap",
    "BootstrapResult",
    "CurveBootstrapper",
    "instrument_from_quote",
    "bootstrap_from_quotes",
    "Instrument",
    "ZeroCouponBond",
    "CashDeposit",
    "ForwardRateAgreement",
    "InterestRateSwap",
    "par_coupon",
]
