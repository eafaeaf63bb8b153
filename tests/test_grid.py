"""Tests for the Greek-validation sweep."""

import datetime as dt

import pytest

from divpricer import (
    CALL, PUT, GREEKS,
    MarketState, DividendOption, DividendSchedule,
    AnalyticDividendEuropeanEngine, GridConfigurationError,
)
from divpricer.grid import (
    GridConfig, MarketPoint,
    build_dividend_schedule, iter_grid_points, iter_market_points,
    iter_option_setups, run_sweep, validate_point,
)
from divpricer.risk import FiniteDifferenceValidator

VAL = dt.date(2024, 1, 15)

SMALL = GridConfig(
    option_types=(CALL, PUT),
    strikes=(100.0,),
    lengths=(1,),
    dividend_yields=(0.10,),
    risk_free_rates=(0.05,),
    volatilities=(0.20, 0.70),
)


class TestDividendSchedule:
    def test_one_year(self):
        s = build_dividend_schedule(VAL, VAL + dt.timedelta(days=365))
        assert s.dates == (dt.date(2024, 4, 15), dt.date(2024, 10, 15))
        assert s.amounts == (5.0, 5.0)

    def test_two_years(self):
        s = build_dividend_schedule(VAL, VAL + dt.timedelta(days=730))
        assert s.dates == (dt.date(2024, 4, 15), dt.date(2024, 10, 15),
                           dt.date(2025, 4, 15), dt.date(2025, 10, 15))

    def test_excludes_maturity(self):
        maturity = dt.date(2024, 10, 15)
        s = build_dividend_schedule(VAL, maturity)
        assert s.dates == (dt.date(2024, 4, 15),)

    def test_month_end_steps_carry_forward(self):
        s = build_dividend_schedule(dt.date(2024, 11, 30), dt.date(2025, 11, 30),
                                    first_months=3, every_months=6)
        assert s.dates == (dt.date(2025, 2, 28), dt.date(2025, 8, 28))

    def test_dividend_before_valuation_fails_fast(self):
        with pytest.raises(GridConfigurationError):
            build_dividend_schedule(VAL, VAL + dt.timedelta(days=365), first_months=-1)

    def test_non_positive_frequency(self):
        with pytest.raises(GridConfigurationError):
            build_dividend_schedule(VAL, VAL + dt.timedelta(days=365), every_months=0)


class TestGridConfig:
    def test_default_size(self):
        config = GridConfig()
        assert config.n_setups == 20
        assert config.n_points == 540

    def test_empty_axis(self):
        with pytest.raises(GridConfigurationError):
            GridConfig(volatilities=())

    def test_bad_length(self):
        with pytest.raises(GridConfigurationError):
            GridConfig(lengths=(0,))


class TestGridIteration:
    def test_full_product(self):
        config = GridConfig()
        points = list(iter_grid_points(config, VAL))
        assert len(points) == config.n_points

    def test_restartable(self):
        first = list(iter_grid_points(SMALL, VAL))
        second = list(iter_grid_points(SMALL, VAL))
        assert first == second

    def test_setup_maturity_in_base_units(self):
        setups = list(iter_option_setups(GridConfig(), VAL))
        lengths = {s.length: s.exercise.maturity for s in setups}
        assert lengths == {1: dt.date(2025, 1, 14), 2: dt.date(2026, 1, 14)}

    def test_market_points(self):
        pts = list(iter_market_points(SMALL))
        assert pts == [MarketPoint(100.0, 0.10, 0.05, 0.20),
                       MarketPoint(100.0, 0.10, 0.05, 0.70)]


class TestValidatePoint:
    def _setup(self, kind=CALL, strike=100.0):
        config = GridConfig(option_types=(kind,), strikes=(strike,), lengths=(2,))
        return next(iter_option_setups(config, VAL))

    def test_single_synthetic_point(self):
        setup = self._setup()
        market = MarketState(100.0, 0.10, 0.05, 0.20, VAL)
        option = DividendOption(setup.payoff, setup.exercise, setup.dividends, market)
        engine = AnalyticDividendEuropeanEngine()
        before = market.snapshot()
        res = validate_point(option, engine, FiniteDifferenceValidator(engine),
                             SMALL.tolerances())
        assert not res.skipped
        assert [o.greek for o in res.outcomes] == list(GREEKS)
        assert all(o.ok for o in res.outcomes)
        assert market.snapshot() == before

    def test_degenerate_point_is_skipped(self):
        setup = self._setup(CALL, 150.0)
        market = MarketState(100.0, 0.30, 0.01, 0.05, VAL)
        option = DividendOption(setup.payoff, setup.exercise, setup.dividends, market)
        engine = AnalyticDividendEuropeanEngine()
        res = validate_point(option, engine, FiniteDifferenceValidator(engine),
                             SMALL.tolerances())
        assert res.skipped
        assert res.outcomes == ()

    def test_zero_spot_put_is_skipped(self):
        setup = self._setup(PUT, 100.0)
        market = MarketState(0.0, 0.0, 0.05, 0.20, VAL)
        option = DividendOption(setup.payoff, setup.exercise, DividendSchedule.empty(), market)
        engine = AnalyticDividendEuropeanEngine()
        res = validate_point(option, engine, FiniteDifferenceValidator(engine),
                             SMALL.tolerances())
        assert res.skipped
        assert res.value > 0.0


class TestRunSweep:
    def test_full_grid_passes(self):
        report = run_sweep(GridConfig(), VAL)
        assert report.n_points == 540
        assert report.n_skipped > 0
        assert report.failures == []
        assert report.all_passed
        assert report.n_passed == len(GREEKS) * (report.n_points - report.n_skipped)
        assert report.by_greek() == {g: 0 for g in GREEKS}

    def test_violations_do_not_abort(self):
        report = run_sweep(GridConfig(tolerance=1e-15), VAL)
        assert report.n_points == 540
        assert not report.all_passed
        assert len(report.failures) > 0
        assert sum(report.by_greek().values()) == len(report.failures)

    def test_parallel_matches_sequential(self):
        seq = run_sweep(SMALL, VAL)
        par = run_sweep(SMALL, VAL, workers=2)
        assert [p.value for p in par.points] == [p.value for p in seq.points]
        assert [p.outcomes for p in par.points] == [p.outcomes for p in seq.points]

    def test_valuation_date_recorded(self):
        report = run_sweep(SMALL, VAL)
        assert report.valuation_date == VAL
        assert all(p.maturity == dt.date(2025, 1, 14) for p in report.points)
