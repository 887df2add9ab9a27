#!/usr/bin/env python3
"""
Monte-Carlo digital pricer (GBM):
• terminal mode → fraction of paths finishing above strike
• touch mode    → fraction of paths reaching strike at any daily step
                  (the barrier is checked after each step, never at the spot)
• event-vol multiplier scales the implied σ before simulating

Convergence: the estimate is a binomial proportion, so its standard error is
√(p(1-p)/N). At the default N = 50 000 and p ≈ 0.5 that is ≈0.22 pp
(≈0.45 pp at two standard errors).
"""

import math
import numpy as np

from black_scholes import RISK_FREE_RATE

# ---------- global tuning -------------------------------------------------
DEFAULT_PATHS = 50_000
STEPS_PER_YEAR = 365           # daily barrier monitoring
# -------------------------------------------------------------------------

def _nonzero_uniform(rng: np.random.Generator, n: int) -> np.ndarray:
    """U(0,1) draws with exact zeros redrawn (log(0) guard)."""
    u = rng.random(n)
    zeros = u == 0.0
    while zeros.any():
        u[zeros] = rng.random(int(zeros.sum()))
        zeros = u == 0.0
    return u


def box_muller(rng: np.random.Generator, n: int) -> np.ndarray:
    """n standard normals from pairs of independent uniforms."""
    u = _nonzero_uniform(rng, n)
    v = _nonzero_uniform(rng, n)
    return np.sqrt(-2.0 * np.log(u)) * np.cos(2.0 * np.pi * v)


def touch_steps(T: float) -> int:
    return max(1, math.ceil(T * STEPS_PER_YEAR))


def standard_error(p: float, paths: int) -> float:
    return math.sqrt(p * (1.0 - p) / paths)

# -------------------------------------------------------------------------
def mc_digital(S0: float,
               K: float,
               T: float,
               sigma: float,
               r: float = RISK_FREE_RATE,
               paths: int = DEFAULT_PATHS,
               vol_multiplier: float = 1.0,
               touch: bool = False,
               rng: np.random.Generator | None = None) -> float:
    """
    Parameters
    ----------
    S0, K          : spot and strike
    T              : years to expiry
    sigma          : implied vol (decimal)
    vol_multiplier : effective σ = sigma * vol_multiplier
    touch          : True → P(max S_t ≥ K), False → P(S_T > K)
    rng            : numpy Generator, fresh one if None
    """
    if T <= 0:
        return 1.0 if S0 > K else 0.0
    if paths <= 0:
        raise ValueError("paths must be positive")
    if vol_multiplier <= 0:
        raise ValueError("vol_multiplier must be positive")
    rng = rng if rng is not None else np.random.default_rng()
    sig = sigma * vol_multiplier

    steps = touch_steps(T) if touch else 1
    dt = T / steps
    drift = (r - 0.5 * sig * sig) * dt
    shock = sig * math.sqrt(dt)

    if not touch:
        s_T = S0 * np.exp(drift + shock * box_muller(rng, paths))
        return float((s_T > K).mean())

    # only paths that have not hit the barrier keep stepping
    prices = np.full(paths, S0, dtype=np.float64)
    hits = 0
    for _ in range(steps):
        prices *= np.exp(drift + shock * box_muller(rng, prices.size))
        hit = prices >= K
        hits += int(hit.sum())
        prices = prices[~hit]
        if prices.size == 0:
            break
    return hits / paths


# ---- quick CLI test --------------------------------------------------------
if __name__ == "__main__":
    import argparse

    ap = argparse.ArgumentParser(description="Monte-Carlo digital / touch probability")
    ap.add_argument("S0", type=float)
    ap.add_argument("K", type=float)
    ap.add_argument("T", type=float, help="years")
    ap.add_argument("sigma", type=float, help="decimal vol")
    ap.add_argument("--paths", type=int, default=DEFAULT_PATHS)
    ap.add_argument("--vol-mult", type=float, default=1.0)
    ap.add_argument("--touch", action="store_true")
    ap.add_argument("--seed", type=int)
    ns = ap.parse_args()

    p = mc_digital(ns.S0, ns.K, ns.T, ns.sigma, paths=ns.paths,
                   vol_multiplier=ns.vol_mult, touch=ns.touch,
                   rng=np.random.default_rng(ns.seed))
    print(f"P = {p:.5f}  ± {standard_error(p, ns.paths):.5f}")
