#!/usr/bin/env python3
"""Black‑Scholes digital option probability.

P(S_T > K) for a cash‑or‑nothing call under GBM is Φ(d2):

    d2 = (ln(S0/K) + (r − σ²/2)·T) / (σ·√T)

Φ is evaluated with the Abramowitz–Stegun 26.2.17 polynomial rather than
`math.erf` (absolute error < 1e‑7).

Expired contracts (T ≤ 0) and zero volatility collapse to the payoff
indicator 1{S0 > K}, so the formula never divides by zero.
"""

import math

__all__ = [
    "RISK_FREE_RATE",
    "norm_cdf",
    "bs_digital",
]

RISK_FREE_RATE = 0.04

# A&S 26.2.17 coefficients
_P = 0.2316419
_A = (0.31938153, -0.356563782, 1.781477937, -1.821255978, 1.330274429)
_INV_SQRT_2PI = 1.0 / math.sqrt(2.0 * math.pi)


def norm_cdf(x: float) -> float:
    """Standard normal CDF Φ(x)."""
    if x < 0:
        return 1.0 - norm_cdf(-x)
    t = 1.0 / (1.0 + _P * x)
    a1, a2, a3, a4, a5 = _A
    poly = t * (a1 + t * (a2 + t * (a3 + t * (a4 + t * a5))))
    return 1.0 - _INV_SQRT_2PI * math.exp(-0.5 * x * x) * poly


def bs_digital(S0: float, K: float, T: float, sigma: float,
               r: float = RISK_FREE_RATE) -> float:
    """Black‑Scholes digital (cash‑or‑nothing) call probability.

    Parameters
    ----------
    S0    : spot price (USD)
    K     : strike (USD)
    T     : time to expiry **in years**
    sigma : annualised implied volatility as a decimal (0.6 → 60 %)
    r     : risk‑free rate

    Returns
    -------
    float
        P(S_T > K) in [0, 1].
    """
    if S0 <= 0 or K <= 0:
        raise ValueError("spot and strike must be positive")

    # Immediate payoff if expired, or no diffusion to speak of
    if T <= 0 or sigma <= 0:
        return 1.0 if S0 > K else 0.0

    d2 = (math.log(S0 / K) + (r - 0.5 * sigma * sigma) * T) / (sigma * math.sqrt(T))
    return norm_cdf(d2)


# ---- quick CLI test --------------------------------------------------------
if __name__ == "__main__":
    import argparse

    ap = argparse.ArgumentParser(description="Digital BS probability P(S_T > K)")
    ap.add_argument("S0", type=float, help="Spot price")
    ap.add_argument("K",  type=float, help="Strike price")
    ap.add_argument("T",  type=float, help="Time to expiry in YEARS")
    ap.add_argument("sigma", type=float, help="Annualised implied vol (decimal)")
    ap.add_argument("--rate", type=float, default=RISK_FREE_RATE, help="Risk-free rate")
    ns = ap.parse_args()

    print(f"P(S_T > K) : {bs_digital(ns.S0, ns.K, ns.T, ns.sigma, ns.rate):.5f}")
