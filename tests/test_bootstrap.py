"""
Unit tests for curve bootstrapping.
"""

import logging

import numpy as np
import pytest

from fwdcurve.conventions import Frequency
from fwdcurve.curves import (
    CashDeposit,
    Curve,
    CurveBootstrapper,
    ForwardRateAgreement,
    Instrument,
    InterestRateSwap,
    ZeroCouponBond,
    bootstrap,
    bootstrap_from_quotes,
    instrument_from_quote,
    par_coupon,
)
from fwdcurve.exceptions import ConvergenceError, PreconditionError
from fwdcurve.solvers import NewtonSolver

EPS = np.finfo(float).eps


@pytest.fixture
def true_curve():
    """Curve the market instruments are priced from."""
    return Curve([0.25, 0.5, 1.0, 2.0, 3.0], [0.02, 0.022, 0.025, 0.03, 0.035])


@pytest.fixture
def market(true_curve):
    """Par deposits, FRA and swaps priced off the true curve."""
    D = true_curve.discount
    swap2 = InterestRateSwap(2.0, par_coupon(InterestRateSwap(2.0, 0.0), D))
    template3 = InterestRateSwap(3.0, 0.0, Frequency.SEMI_ANNUAL)
    swap3 = InterestRateSwap(3.0, par_coupon(template3, D), Frequency.SEMI_ANNUAL)
    return [
        (0.0, swap3),
        (1.0, CashDeposit(0.25, (1.0 / D(0.25) - 1.0) / 0.25)),
        (0.0, ForwardRateAgreement(0.5, 1.0, (D(0.5) / D(1.0) - 1.0) / 0.5)),
        (1.0, CashDeposit(0.5, (1.0 / D(0.5) - 1.0) / 0.5)),
        (0.0, swap2),
    ]


class TestBootstrapCases:
    """Tests for single knot bootstrap."""

    def test_zero_coupon_round_trip(self):
        """Test bootstrapping zeros off a flat curve recovers the rate."""
        r = 0.01
        curve = Curve()
        for u in range(1, 10):
            t, f = bootstrap(np.exp(-r * u), ZeroCouponBond(float(u)), curve)
            assert t == u
            curve = curve.extend(t, f)

        assert len(curve) == 9
        curve = curve.with_extrapolation(curve.forwards[-1])
        for u in np.arange(0.0, 10.0, 0.01):
            assert abs(curve.value(u) - r) < 20 * EPS

    def test_single_cash_flow_closed_form(self):
        """Test the closed form agrees with Newton's method."""
        curve = Curve([1.0], [0.02])
        zcb = ZeroCouponBond(2.0)
        price = np.exp(-0.05)

        t, f = bootstrap(price, zcb, curve)
        assert t == 2.0
        assert f == pytest.approx(0.03, abs=1e-15)

        solver = NewtonSolver(
            0.02,
            lambda x: curve.with_extrapolation(x).present_value(zcb) - price,
            lambda x: curve.with_extrapolation(x).partial_duration(zcb),
        )
        assert solver.solve() == pytest.approx(f, abs=2e-15)

    def test_trailing_cash_flow_only(self):
        """Test earlier cash flows inside the curve are priced off it."""
        curve = Curve([1.0], [0.02])
        inst = Instrument([0.5, 1.0, 2.0], [0.03, 0.03, 1.03])
        true = curve.extend(2.0, 0.04)

        t, f = bootstrap(true.present_value(inst), inst, curve)
        assert t == 2.0
        assert f == pytest.approx(0.04, abs=1e-14)

    def test_empty_curve(self):
        """Test the first knot comes from a deposit."""
        t, f = bootstrap(1.0, CashDeposit(0.5, 0.04), Curve())
        assert t == 0.5
        assert f == pytest.approx(np.log(1.02) / 0.5)

    def test_two_cash_flows_zero_price(self):
        """Test an FRA starting past the curve end."""
        curve = Curve([0.5], [0.02])
        rate = (np.exp(0.03 * 0.25) - 1.0) / 0.25
        t, f = bootstrap(0.0, ForwardRateAgreement(0.75, 1.0, rate), curve)
        assert t == 1.0
        assert f == pytest.approx(0.03, rel=1e-12)

    def test_newton_case(self):
        """Test a swap with several cash flows past the curve end."""
        curve = Curve([0.5, 1.0, 2.0], [0.02, 0.025, 0.03])
        true = curve.extend(3.0, 0.035)
        template = InterestRateSwap(3.0, 0.0, Frequency.SEMI_ANNUAL)
        swap = InterestRateSwap(3.0, par_coupon(template, true.discount), Frequency.SEMI_ANNUAL)

        t, f = bootstrap(0.0, swap, curve)
        assert t == 3.0
        assert f == pytest.approx(0.035, abs=1e-12)
        assert abs(curve.extend(t, f).present_value(swap)) < 1e-14

    def test_newton_nonzero_price(self):
        """Test the iterative case away from par."""
        curve = Curve([1.0], [0.02])
        inst = Instrument([1.5, 2.0, 3.0], [0.05, 0.05, 1.05])
        price = curve.extend(3.0, 0.045).present_value(inst)

        t, f = bootstrap(price, inst, curve)
        assert f == pytest.approx(0.045, abs=1e-12)

    def test_random_par_swaps(self):
        """Test quarterly par swaps recover the forward over many curves."""
        rng = np.random.default_rng(42)
        template = InterestRateSwap(3.0, 0.0, Frequency.QUARTERLY)
        for _ in range(1000):
            fw = rng.uniform(0.0, 0.08, 4)
            curve = Curve([0.5, 1.0, 2.0], fw[:3])
            coupon = par_coupon(template, curve.extend(3.0, fw[3]).discount)
            swap = InterestRateSwap(3.0, coupon, Frequency.QUARTERLY)

            t, f = bootstrap(0.0, swap, curve)
            assert t == 3.0
            assert abs(f - fw[3]) < 1e-12

    def test_closed_form_matches_newton(self):
        """Test both methods agree on single cash flows over many curves."""
        rng = np.random.default_rng(7)
        for _ in range(200):
            fw = rng.uniform(0.0, 0.08, 3)
            u = rng.uniform(2.5, 10.0)
            curve = Curve([1.0, 2.0], fw[:2])
            zcb = ZeroCouponBond(u)
            price = curve.extend(u, fw[2]).discount(u)

            _, f = bootstrap(price, zcb, curve)
            solver = NewtonSolver(
                fw[1],
                lambda x: curve.with_extrapolation(x).present_value(zcb) - price,
                lambda x: curve.with_extrapolation(x).partial_duration(zcb),
            )
            assert solver.solve() == pytest.approx(f, abs=1e-14)

    def test_no_cash_flows(self):
        with pytest.raises(PreconditionError):
            bootstrap(1.0, Instrument(), Curve())

    def test_empty_curve_needs_positive_time(self):
        with pytest.raises(PreconditionError):
            bootstrap(1.0, ZeroCouponBond(0.0), Curve())

    def test_curve_not_extended(self):
        """Test the instrument must end past the curve."""
        curve = Curve([1.0, 2.0], [0.02, 0.03])
        with pytest.raises(PreconditionError):
            bootstrap(np.exp(-0.05), ZeroCouponBond(2.0), curve)
        with pytest.raises(PreconditionError):
            bootstrap(np.exp(-0.02), ZeroCouponBond(1.0), curve)

    def test_does_not_mutate_curve(self):
        curve = Curve([1.0], [0.02])
        before = curve.copy()
        bootstrap(np.exp(-0.05), ZeroCouponBond(2.0), curve)
        assert curve == before

    def test_non_convergence(self):
        """Test solver failure is raised, not returned."""
        curve = Curve([1.0], [0.02])
        inst = Instrument([1.5, 2.0, 3.0], [0.05, 0.05, 1.05])
        with pytest.raises(ConvergenceError):
            bootstrap(0.9, inst, curve, max_iterations=0)

    def test_bracket_fallback(self):
        """Test Brent on a bracket when Newton gives up."""
        curve = Curve([1.0], [0.02])
        inst = Instrument([1.5, 2.0, 3.0], [0.05, 0.05, 1.05])
        price = curve.extend(3.0, 0.045).present_value(inst)

        t, f = bootstrap(price, inst, curve, max_iterations=0, bracket=(0.0, 0.1))
        assert t == 3.0
        assert f == pytest.approx(0.045, abs=1e-10)

    def test_mixed_sign_warning(self, caplog):
        """Test mixed sign cash flows past the curve end are flagged."""
        curve = Curve([1.0], [0.02])
        inst = Instrument([0.5, 1.5, 2.0], [0.1, 1.0, -0.5])
        price = curve.extend(2.0, 0.03).present_value(inst)

        with caplog.at_level(logging.WARNING, logger="fwdcurve.curves.bootstrap"):
            t, f = bootstrap(price, inst, curve)

        assert "mixed signs" in caplog.text
        assert f == pytest.approx(0.03, abs=1e-10)


class TestCurveBootstrapper:
    """Tests for sequential curve construction."""

    def test_recovers_curve(self, true_curve, market):
        """Test market instruments give back the curve they came from."""
        result = CurveBootstrapper().bootstrap(market)

        assert result.success, result.message
        np.testing.assert_allclose(result.curve.times, true_curve.times)
        np.testing.assert_allclose(result.curve.forwards, true_curve.forwards, atol=1e-12)
        assert max(abs(e) for e in result.repricing_errors.values()) < 1e-10

    def test_starting_curve(self, market):
        """Test extending a curve that already has knots."""
        start = Curve([0.25], [0.02])
        result = CurveBootstrapper(curve=start).bootstrap(market[2:] + market[:1])

        assert result.success, result.message
        assert len(result.curve) == 5

    def test_no_instruments(self):
        result = CurveBootstrapper().bootstrap([])
        assert not result.success
        assert result.message == "No instruments provided"

    def test_overlapping_instruments(self):
        """Test two instruments ending together fail cleanly."""
        instruments = [
            (np.exp(-0.02), ZeroCouponBond(1.0)),
            (1.0, CashDeposit(1.0, 0.02)),
        ]
        result = CurveBootstrapper().bootstrap(instruments)
        assert not result.success
        assert "Bootstrap failed" in result.message

    def test_to_dataframe(self, market):
        result = CurveBootstrapper().bootstrap(market)
        df = result.to_dataframe()
        assert len(df) == 5
        assert "repricing_error" in df.columns
        assert df["repricing_error"].abs().max() < 1e-10


class TestBootstrapFromQuotes:
    """Tests for quote dictionary interface."""

    def test_bootstrap_from_quotes(self, true_curve):
        D = true_curve.discount
        template = InterestRateSwap(2.0, 0.0)
        quotes = [
            {"instrument_type": "DEPOSIT", "maturity": 0.25, "quote": (1.0 / D(0.25) - 1.0) / 0.25},
            {"instrument_type": "DEPOSIT", "maturity": 0.5, "quote": (1.0 / D(0.5) - 1.0) / 0.5},
            {"instrument_type": "FRA", "start": 0.5, "maturity": 1.0,
             "quote": (D(0.5) / D(1.0) - 1.0) / 0.5},
            {"instrument_type": "SWAP", "maturity": 2.0, "quote": par_coupon(template, D)},
            {"instrument_type": "ZERO", "maturity": 3.0, "quote": D(3.0)},
        ]

        curve = bootstrap_from_quotes(quotes, extrapolation=0.04)

        np.testing.assert_allclose(curve.forwards, true_curve.forwards, atol=1e-12)
        assert curve.value(10.0) == 0.04

    def test_instrument_from_quote(self):
        price, inst = instrument_from_quote(
            {"instrument_type": "swap", "maturity": 1.0, "quote": 0.04, "frequency": "SEMI"}
        )
        assert price == 0.0
        assert inst == InterestRateSwap(1.0, 0.04, Frequency.SEMI_ANNUAL)

    def test_unknown_instrument(self):
        with pytest.raises(ValueError):
            instrument_from_quote({"instrument_type": "CAP", "maturity": 1.0})

    def test_failure_raises(self):
        quotes = [
            {"instrument_type": "ZERO", "maturity": 1.0, "quote": 0.98},
            {"instrument_type": "DEPOSIT", "maturity": 1.0, "quote": 0.02},
        ]
        with pytest.raises(RuntimeError):
            bootstrap_from_quotes(quotes)
