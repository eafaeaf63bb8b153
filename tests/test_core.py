"""Tests for the data model."""

import datetime as dt

import pytest

from divpricer import (
    CALL, PUT,
    Payoff, Exercise, DividendSchedule, MarketState, DividendOption,
    InvalidInputError, GridConfigurationError,
)

VAL = dt.date(2024, 1, 15)
MATURITY = dt.date(2025, 1, 14)


class TestPayoff:
    def test_intrinsic(self):
        assert Payoff(CALL, 100.0).value(110.0) == 10.0
        assert Payoff(PUT, 100.0).value(110.0) == 0.0
        assert Payoff(PUT, 100.0).value(90.0) == 10.0

    def test_bad_kind(self):
        with pytest.raises(InvalidInputError):
            Payoff("straddle", 100.0)

    def test_immutable(self):
        p = Payoff(CALL, 100.0)
        with pytest.raises(AttributeError):
            p.strike = 90.0


class TestExercise:
    def test_european(self):
        ex = Exercise(MATURITY)
        assert ex.exercise_type == "European"
        assert ex.last_date == MATURITY


class TestDividendSchedule:
    def test_iteration(self):
        s = DividendSchedule([dt.date(2024, 4, 15), dt.date(2024, 10, 15)], [5, 5])
        assert len(s) == 2
        assert list(s) == [(dt.date(2024, 4, 15), 5.0), (dt.date(2024, 10, 15), 5.0)]

    def test_empty(self):
        assert len(DividendSchedule.empty()) == 0

    def test_length_mismatch(self):
        with pytest.raises(InvalidInputError):
            DividendSchedule((dt.date(2024, 4, 15),), (5.0, 5.0))

    def test_unordered_dates(self):
        with pytest.raises(InvalidInputError):
            DividendSchedule((dt.date(2024, 10, 15), dt.date(2024, 4, 15)), (5.0, 5.0))

    def test_non_positive_amount(self):
        with pytest.raises(InvalidInputError):
            DividendSchedule((dt.date(2024, 4, 15),), (0.0,))

    def test_validate_window(self):
        s = DividendSchedule((dt.date(2024, 4, 15),), (5.0,))
        s.validate(VAL, MATURITY)
        with pytest.raises(GridConfigurationError):
            s.validate(dt.date(2024, 4, 15), MATURITY)
        with pytest.raises(GridConfigurationError):
            s.validate(VAL, dt.date(2024, 4, 15))


class TestMarketState:
    def test_mutable_snapshot(self):
        m = MarketState(100.0, 0.0, 0.05, 0.2, VAL)
        snap = m.snapshot()
        m.spot = 101.0
        assert m.snapshot() != snap
        m.spot = 100.0
        assert m.snapshot() == snap


class TestDividendOption:
    def test_dividend_after_maturity_rejected(self):
        divs = DividendSchedule((MATURITY,), (5.0,))
        with pytest.raises(InvalidInputError):
            DividendOption(Payoff(CALL, 100.0), Exercise(MATURITY), divs,
                           MarketState(valuation_date=VAL))

    def test_shares_market(self):
        m = MarketState(100.0, 0.0, 0.05, 0.2, VAL)
        opt = DividendOption(Payoff(CALL, 100.0), Exercise(MATURITY),
                             DividendSchedule.empty(), m)
        v0 = opt.npv()
        m.spot = 110.0
        assert opt.npv() > v0
