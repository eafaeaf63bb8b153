"""Analytic engine for European options with discrete cash dividends.

Escrowed-dividend model: the present value of every dividend paid before
expiry is removed from spot, and Black-Scholes is applied to the remaining
("escrowed") spot.  The dividend PV depends on the rate and on the
valuation date but not on spot, so delta and gamma come straight from the
formula while rho and theta pick up an extra chain-rule term.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace

from scipy.optimize import brentq

from .black_scholes import escrowed_black_scholes
from .core import GreekSet, DividendOption, DividendSchedule, Exercise, MarketState, Payoff
from .dates import year_fraction
from .exceptions import InvalidInputError

__all__ = [
    "PricingResult",
    "AnalyticDividendEuropeanEngine",
    "price_and_greeks",
    "implied_volatility",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricingResult:
    value: float
    greeks: GreekSet
    escrowed_spot: float = float("nan")


class AnalyticDividendEuropeanEngine:
    """Closed-form value and Greeks on the dividend-escrowed spot.

    Parameters
    ----------
    day_counter : callable
        ``day_counter(start, end) -> float`` year fraction; Actual/365
        Fixed by default.
    """

    def __init__(self, day_counter=year_fraction):
        self.day_counter = day_counter

    def dividend_present_value(
        self,
        market: MarketState,
        dividends: DividendSchedule,
        maturity,
    ) -> tuple[float, float]:
        """Return ``(sum D_i e^{-r t_i}, sum D_i t_i e^{-r t_i})``.

        Dividends dated on or before the valuation date are already paid
        and contribute nothing.  A dividend on or after maturity is an
        input error.
        """
        r = market.risk_free_rate
        pv = 0.0
        pv_rate_sens = 0.0
        for pay_date, amount in dividends:
            if pay_date >= maturity:
                raise InvalidInputError(
                    f"dividend date {pay_date} is not before maturity {maturity}"
                )
            if pay_date <= market.valuation_date:
                continue
            t = self.day_counter(market.valuation_date, pay_date)
            disc_amount = amount * math.exp(-r * t)
            pv += disc_amount
            pv_rate_sens += t * disc_amount
        return pv, pv_rate_sens

    def calculate(
        self,
        market: MarketState,
        dividends: DividendSchedule,
        payoff: Payoff,
        exercise: Exercise,
    ) -> PricingResult:
        S = market.spot
        q = market.dividend_yield
        r = market.risk_free_rate
        sigma = market.volatility
        K = payoff.strike
        T = self.day_counter(market.valuation_date, exercise.maturity)

        if sigma <= 0:
            raise InvalidInputError(f"volatility must be positive, got {sigma}")
        if T <= 0:
            raise InvalidInputError(
                f"maturity {exercise.maturity} is not after valuation date "
                f"{market.valuation_date}"
            )
        if K <= 0:
            raise InvalidInputError(f"strike must be positive, got {K}")
        if S < 0:
            raise InvalidInputError(f"spot must be non-negative, got {S}")

        pv, pv_rate_sens = self.dividend_present_value(market, dividends, exercise.maturity)
        S_esc = S - pv
        if S_esc < 0:
            raise InvalidInputError(
                f"dividend PV {pv:.6f} exceeds spot {S}; escrowed spot must be non-negative"
            )
        logger.debug("spot=%s dividend PV=%.10f escrowed spot=%.10f T=%.6f",
                     S, pv, S_esc, T)

        value, greeks = escrowed_black_scholes(
            S_esc, K, T, r, q, sigma, payoff.kind, pv, pv_rate_sens
        )
        return PricingResult(value=value, greeks=greeks, escrowed_spot=S_esc)


def price_and_greeks(
    market: MarketState,
    schedule: DividendSchedule,
    payoff: Payoff,
    exercise: Exercise,
) -> tuple[float, GreekSet]:
    """Functional front end: ``(value, greeks)`` with the default engine."""
    res = AnalyticDividendEuropeanEngine().calculate(market, schedule, payoff, exercise)
    return res.value, res.greeks


def implied_volatility(
    option: DividendOption,
    target_price: float,
    *,
    engine: AnalyticDividendEuropeanEngine | None = None,
    low: float = 1e-6,
    high: float = 5.0,
    tol: float = 1e-10,
    maxiter: int = 200,
) -> float:
    """Flat volatility at which the dividend-adjusted value equals ``target_price``.

    Brent root find on sigma.  Each trial prices against a transient copy
    of the option's market, so ``option.market`` is never touched.
    """
    engine = engine or AnalyticDividendEuropeanEngine()

    def f(sig):
        trial = replace(option.market, volatility=sig)
        res = engine.calculate(trial, option.dividends, option.payoff, option.exercise)
        return res.value - target_price

    f_lo, f_hi = f(low), f(high)
    if f_lo * f_hi > 0:
        raise InvalidInputError(
            f"target price {target_price} is outside the range "
            f"[{f_lo + target_price:.10f}, {f_hi + target_price:.10f}] "
            f"spanned by vols [{low}, {high}]"
        )
    return float(brentq(f, low, high, xtol=tol, maxiter=maxiter))
