"""Bump-and-reprice Greeks for cross-checking the analytic engine.

Every bump overwrites one field of the shared :class:`MarketState`,
reprices, and puts the *original* object back before the next bump
starts: the stored value, never ``bumped - step``, so the market after a
bump is bit-for-bit the market before it.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, fields

from .core import GreekSet, DividendOption, MarketState
from .dates import add_period, year_fraction

__all__ = [
    "BumpPolicy",
    "bumped",
    "is_degenerate",
    "FiniteDifferenceValidator",
]

logger = logging.getLogger(__name__)

_MARKET_FIELDS = frozenset(f.name for f in fields(MarketState))


@dataclass(frozen=True)
class BumpPolicy:
    """Step sizes for the central differences.

    Parameters
    ----------
    relative_step : float
        Spot, rate and vol are bumped by ``value * relative_step``.
    theta_days : int
        Calendar days the valuation date is moved each way for theta.
    """
    relative_step: float = 1e-4
    theta_days: int = 1


@contextmanager
def bumped(market: MarketState, name: str, value):
    """Temporarily set ``market.<name>`` to ``value``.

    The saved original is restored on exit, including when the body raises.
    """
    if name not in _MARKET_FIELDS:
        raise AttributeError(f"MarketState has no field {name!r}")
    saved = getattr(market, name)
    setattr(market, name, value)
    try:
        yield market
    finally:
        setattr(market, name, saved)


def is_degenerate(value: float, spot: float, threshold: float = 1e-5) -> bool:
    """Values this small give meaningless relative errors; skip such points.

    A zero spot has no relative spot bump, so it is always degenerate.
    """
    return spot <= 0 or not value > spot * threshold


# ---------------------------------------------------------------------------
# Numerical Greeks
# ---------------------------------------------------------------------------

class FiniteDifferenceValidator:
    """Central finite-difference estimates of delta, gamma, theta, rho, vega.

    Parameters
    ----------
    engine : AnalyticDividendEuropeanEngine
        Engine the option is repriced with.
    policy : BumpPolicy
        Bump sizes.
    day_counter : callable
        Year fraction used to scale the theta step.
    """

    def __init__(self, engine, policy: BumpPolicy | None = None, day_counter=year_fraction):
        self.engine = engine
        self.policy = policy or BumpPolicy()
        self.day_counter = day_counter

    def _results(self, option: DividendOption):
        return option.results(self.engine)

    def _npv(self, option: DividendOption) -> float:
        return option.results(self.engine).value

    def estimate(self, option: DividendOption) -> GreekSet:
        """Bump each market input around its current level and reprice.

        Returns
        -------
        GreekSet
            Keys: ``delta``, ``gamma``, ``theta``, ``rho``, ``vega``.
        """
        market = option.market
        h = self.policy.relative_step
        u = market.spot
        r = market.risk_free_rate
        v = market.volatility
        today = market.valuation_date

        # --- Delta & Gamma (spot bump); gamma differences the analytic delta ---
        du = u * h
        with bumped(market, "spot", u + du):
            res_p = self._results(option)
        with bumped(market, "spot", u - du):
            res_m = self._results(option)
        delta = (res_p.value - res_m.value) / (2.0 * du)
        gamma = (res_p.greeks["delta"] - res_m.greeks["delta"]) / (2.0 * du)

        # --- Rho (rate bump); absolute step when the rate is exactly zero ---
        dr = r * h if r != 0 else h
        with bumped(market, "risk_free_rate", r + dr):
            P_up = self._npv(option)
        with bumped(market, "risk_free_rate", r - dr):
            P_dn = self._npv(option)
        rho = (P_up - P_dn) / (2.0 * dr)

        # --- Vega (vol bump) ---
        dv = v * h
        with bumped(market, "volatility", v + dv):
            P_up = self._npv(option)
        with bumped(market, "volatility", v - dv):
            P_dn = self._npv(option)
        vega = (P_up - P_dn) / (2.0 * dv)

        # --- Theta (valuation date moved whole days, not a fractional bump) ---
        before = add_period(today, -self.policy.theta_days, "days")
        after = add_period(today, self.policy.theta_days, "days")
        dT = self.day_counter(before, after)
        with bumped(market, "valuation_date", before):
            P_dn = self._npv(option)
        with bumped(market, "valuation_date", after):
            P_up = self._npv(option)
        theta = (P_up - P_dn) / dT

        logger.debug("FD greeks at spot=%s r=%s vol=%s: delta=%.8f gamma=%.8f "
                     "theta=%.8f rho=%.8f vega=%.8f",
                     u, r, v, delta, gamma, theta, rho, vega)

        return {
            "delta": float(delta),
            "gamma": float(gamma),
            "theta": float(theta),
            "rho": float(rho),
            "vega": float(vega),
        }
