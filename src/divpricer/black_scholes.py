# black_scholes.py
# Black-Scholes-Merton value and Greeks on the escrowed spot.
#
# Scalar inputs only; the dividend engine checks them before calling in.
# The dividend present value PV and its rate sensitivity sum(D t e^{-rt})
# enter rho and theta through S* = S - PV.

from __future__ import annotations

import math

from scipy.stats import norm

from .core import CALL, GreekSet

__all__ = ["escrowed_black_scholes"]

_N = norm.cdf
_n = norm.pdf


def _zero_spot_limit(K, T, r, q, kind) -> tuple[float, GreekSet]:
    """Limits as S* -> 0+: the call is worthless, the put is a discounted strike."""
    if kind == CALL:
        return 0.0, {"delta": 0.0, "gamma": 0.0, "theta": 0.0, "rho": 0.0, "vega": 0.0}
    disc_K = K * math.exp(-r * T)
    return disc_K, {
        "delta": -math.exp(-q * T),
        "gamma": 0.0,
        "theta": r * disc_K,
        "rho": -T * disc_K,
        "vega": 0.0,
    }


def escrowed_black_scholes(
    S_esc: float,
    K: float,
    T: float,
    r: float,
    q: float,
    sigma: float,
    kind: str,
    pv: float = 0.0,
    pv_rate_sens: float = 0.0,
) -> tuple[float, GreekSet]:
    """Value and Greeks of a European option on the escrowed spot.

    Parameters
    ----------
    S_esc : float
        Spot less the dividend present value; ``0`` gives the limit values.
    K, T, r, q, sigma : float
        Strike, year fraction to expiry, rate, continuous yield, volatility.
    kind : str
        ``"call"`` or ``"put"``.
    pv : float
        ``sum D_i e^{-r t_i}`` over the dividends before expiry.
    pv_rate_sens : float
        ``sum D_i t_i e^{-r t_i}``, i.e. ``-d(pv)/dr``.

    Returns
    -------
    (float, GreekSet)
        Delta, gamma and vega are with respect to the quoted spot, which
        moves ``S_esc`` one for one.  Theta is calendar theta per year
        (``-dV/dT``); rho and vega are per unit, not per 1%.
    """
    if S_esc == 0.0:
        value, greeks = _zero_spot_limit(K, T, r, q, kind)
    else:
        sqrt_T = math.sqrt(T)
        sig_sqrt_T = sigma * sqrt_T
        d1 = (math.log(S_esc / K) + (r - q + 0.5 * sigma * sigma) * T) / sig_sqrt_T
        d2 = d1 - sig_sqrt_T
        disc_r = math.exp(-r * T)
        disc_q = math.exp(-q * T)
        n_d1 = float(_n(d1))
        decay = -S_esc * disc_q * n_d1 * sigma / (2.0 * sqrt_T)

        if kind == CALL:
            N_d1, N_d2 = float(_N(d1)), float(_N(d2))
            value = disc_q * S_esc * N_d1 - disc_r * K * N_d2
            delta = disc_q * N_d1
            theta = decay - r * K * disc_r * N_d2 + q * S_esc * disc_q * N_d1
            rho = K * T * disc_r * N_d2
        else:
            N_md1, N_md2 = float(_N(-d1)), float(_N(-d2))
            value = disc_r * K * N_md2 - disc_q * S_esc * N_md1
            delta = -disc_q * N_md1
            theta = decay + r * K * disc_r * N_md2 - q * S_esc * disc_q * N_md1
            rho = -K * T * disc_r * N_md2

        greeks = {
            "delta": delta,
            "gamma": disc_q * n_d1 / (S_esc * sig_sqrt_T),
            "theta": theta,
            "rho": rho,
            "vega": S_esc * disc_q * n_d1 * sqrt_T,
        }

    # d(S*)/dr = +sum D t e^{-rt};  d(S*)/d(today) = -r * PV
    greeks["rho"] += greeks["delta"] * pv_rate_sens
    greeks["theta"] -= greeks["delta"] * r * pv
    return value, greeks
