"""Comparison of analytic Greeks against finite-difference estimates.

Outcomes are plain values: :class:`Ok` when a Greek is within tolerance,
:class:`ToleranceViolation` carrying the full market context otherwise.
Nothing here raises on a violation or formats text; see ``report.py`` for
the human-readable side.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Union

import numpy as np

from .core import GREEKS, CALL, PUT, GreekSet, DividendOption, DividendSchedule, Exercise, MarketState, Payoff

__all__ = [
    "DEFAULT_TOLERANCE",
    "default_tolerances",
    "relative_error",
    "Ok",
    "ToleranceViolation",
    "Outcome",
    "compare_greeks",
    "put_call_parity_gap",
]

DEFAULT_TOLERANCE = 1e-5

_NEGLIGIBLE_SCALE = 1e-15


def default_tolerances(tol: float = DEFAULT_TOLERANCE) -> GreekSet:
    return {name: tol for name in GREEKS}


def relative_error(expected: float, calculated: float, scale: float) -> float:
    """``|expected - calculated| / scale``, or the absolute difference when
    ``scale`` is negligible.

    ``scale`` is the underlying spot for every Greek.
    """
    diff = abs(expected - calculated)
    if abs(scale) > _NEGLIGIBLE_SCALE:
        return diff / scale
    return diff


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Ok:
    greek: str
    expected: float
    calculated: float
    error: float

    ok = True


@dataclass(frozen=True)
class ToleranceViolation:
    """One Greek outside tolerance, with everything needed to reproduce it."""
    option_type: str
    payoff_kind: str
    exercise_type: str
    strike: float
    spot: float
    dividend_yield: float
    risk_free_rate: float
    valuation_date: dt.date
    maturity: dt.date
    volatility: float
    greek: str
    expected: float
    calculated: float
    error: float
    tolerance: float

    ok = False


Outcome = Union[Ok, ToleranceViolation]


def compare_greeks(
    option: DividendOption,
    calculated: GreekSet,
    expected: GreekSet,
    tolerances: GreekSet,
) -> list[Outcome]:
    """Check every Greek in ``GREEKS`` order; violations are recorded, not raised.

    Parameters
    ----------
    option : DividendOption
        Option whose market is at the base point.
    calculated : GreekSet
        Analytic Greeks.
    expected : GreekSet
        Finite-difference estimates.
    tolerances : GreekSet
        Per-Greek maximum relative error.
    """
    m = option.market
    outcomes: list[Outcome] = []
    for greek in GREEKS:
        exp_, calc, tol = expected[greek], calculated[greek], tolerances[greek]
        err = relative_error(exp_, calc, m.spot)
        if err > tol:
            outcomes.append(ToleranceViolation(
                option_type=option.payoff.kind,
                payoff_kind=option.payoff.name,
                exercise_type=option.exercise.exercise_type,
                strike=option.payoff.strike,
                spot=m.spot,
                dividend_yield=m.dividend_yield,
                risk_free_rate=m.risk_free_rate,
                valuation_date=m.valuation_date,
                maturity=option.exercise.maturity,
                volatility=m.volatility,
                greek=greek,
                expected=exp_,
                calculated=calc,
                error=err,
                tolerance=tol,
            ))
        else:
            outcomes.append(Ok(greek, exp_, calc, err))
    return outcomes


# ---------------------------------------------------------------------------
# Put-call parity
# ---------------------------------------------------------------------------

def put_call_parity_gap(
    market: MarketState,
    dividends: DividendSchedule,
    strike: float,
    exercise: Exercise,
    engine=None,
) -> float:
    """``C - P - (S_esc e^{-qT} - K e^{-rT})``; zero up to rounding.

    ``S_esc`` is spot less the present value of the dividends.
    """
    if engine is None:
        from .engine import AnalyticDividendEuropeanEngine
        engine = AnalyticDividendEuropeanEngine()
    call = engine.calculate(market, dividends, Payoff(CALL, strike), exercise)
    put = engine.calculate(market, dividends, Payoff(PUT, strike), exercise)
    T = engine.day_counter(market.valuation_date, exercise.maturity)
    forward_leg = (call.escrowed_spot * np.exp(-market.dividend_yield * T)
                   - strike * np.exp(-market.risk_free_rate * T))
    return float(call.value - put.value - forward_leg)
