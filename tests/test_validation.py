"""Tests for the Greek comparator and put-call parity check."""

import datetime as dt

import pytest

from divpricer import (
    CALL, PUT, GREEKS,
    Payoff, Exercise, DividendSchedule, MarketState, DividendOption,
)
from divpricer.grid import GridConfig, iter_grid_points
from divpricer.validation import (
    DEFAULT_TOLERANCE, Ok, ToleranceViolation,
    compare_greeks, default_tolerances, put_call_parity_gap, relative_error,
)

VAL = dt.date(2024, 1, 15)
MATURITY = VAL + dt.timedelta(days=365)


def _option():
    market = MarketState(100.0, 0.10, 0.05, 0.20, VAL)
    divs = DividendSchedule((dt.date(2024, 4, 15), dt.date(2024, 10, 15)), (5.0, 5.0))
    return DividendOption(Payoff(PUT, 99.5), Exercise(MATURITY), divs, market)


class TestRelativeError:
    def test_scaled_by_reference(self):
        assert relative_error(1.5, 1.0, 100.0) == pytest.approx(0.005)

    def test_symmetric(self):
        assert relative_error(1.0, 1.5, 100.0) == relative_error(1.5, 1.0, 100.0)

    def test_absolute_fallback_on_zero_scale(self):
        assert relative_error(1.5, 1.0, 0.0) == 0.5

    def test_zero_difference(self):
        assert relative_error(2.0, 2.0, 100.0) == 0.0


class TestCompareGreeks:
    def test_default_tolerances(self):
        tol = default_tolerances()
        assert set(tol) == set(GREEKS)
        assert all(t == DEFAULT_TOLERANCE == 1e-5 for t in tol.values())

    def test_all_within_tolerance(self):
        greeks = {g: 0.5 for g in GREEKS}
        outcomes = compare_greeks(_option(), greeks, dict(greeks), default_tolerances())
        assert [o.greek for o in outcomes] == list(GREEKS)
        assert all(isinstance(o, Ok) and o.ok for o in outcomes)

    def test_violation_is_recorded_not_raised(self):
        opt = _option()
        calculated = {g: 0.5 for g in GREEKS}
        expected = dict(calculated, vega=0.6)
        outcomes = compare_greeks(opt, calculated, expected, default_tolerances())
        bad = [o for o in outcomes if not o.ok]
        assert len(bad) == 1
        v = bad[0]
        assert isinstance(v, ToleranceViolation)
        assert v.greek == "vega"
        assert v.option_type == PUT
        assert v.payoff_kind == "plain vanilla"
        assert v.exercise_type == "European"
        assert v.strike == 99.5
        assert v.spot == 100.0
        assert v.dividend_yield == 0.10
        assert v.risk_free_rate == 0.05
        assert v.volatility == 0.20
        assert v.valuation_date == VAL
        assert v.maturity == MATURITY
        assert v.expected == 0.6
        assert v.calculated == 0.5
        assert v.error == pytest.approx(0.001)
        assert v.tolerance == 1e-5


class TestPutCallParity:
    def test_single_point(self):
        opt = _option()
        gap = put_call_parity_gap(opt.market, opt.dividends, 99.5, opt.exercise)
        assert abs(gap) < 1e-10

    def test_every_grid_point(self):
        config = GridConfig()
        market = MarketState(valuation_date=VAL)
        seen = set()
        for gp in iter_grid_points(config, VAL):
            key = (gp.setup.strike, gp.setup.length, gp.market)
            if key in seen:
                continue
            seen.add(key)
            gp.market.apply(market)
            gap = put_call_parity_gap(market, gp.setup.dividends, gp.setup.strike,
                                      gp.setup.exercise)
            assert abs(gap) < 1e-10, key
        assert len(seen) == config.n_points // len(config.option_types)
