"""
fwdcurve: Piecewise Flat Forward Curves and Bootstrapping

A small numerical library for:
- Evaluating piecewise flat forward curves (value, integral, discount, spot)
- Pricing cash flow schedules (present value, duration, partial duration)
- Bootstrapping curves from deposits, FRAs, swaps and zero coupon bonds

Times are year fractions and rates are continuously compounded.
Undefined results are NaN; misuse raises PreconditionError and solver
failure raises ConvergenceError.
"""

__version__ = "0.1.0"

# Core modules
from .conventions import Frequency
from .exceptions import PreconditionError, ConvergenceError

# Solvers
from .solvers import RootSolver, NewtonSolver, newton

# Curves
from .curves import (
    Curve,
    create_flat_curve,
    bootstrap,
    BootstrapResult,
    CurveBootstrapper,
    bootstrap_from_quotes,
    Instrument,
    ZeroCouponBond,
    CashDeposit,
    ForwardRateAgreement,
    InterestRateSwap,
    par_coupon,
)

# Risk
from .risk import BumpEngine

__all__ = [
    # Version
    "__version__",
    # Conventions
    "Frequency",
    # Exceptions
    "PreconditionError",
    "ConvergenceError",
    # Solvers
    "RootSolver",
    "NewtonSolver",
    "newton",
    # Curves
    "Curve",
    "create_flat_curve",
    "bootstrap",
    "BootstrapResult",
    "CurveBootstrapper",
    "bootstrap_from_quotes",
    # Instruments
    "Instrument",
    "ZeroCouponBond",
    "CashDeposit",
    "ForwardRateAgreement",
    "InterestRateSwap",
    "par_coupon",
    # Risk
    "BumpEngine",
]
