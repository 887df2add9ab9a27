#!/usr/bin/env python3
"""
probability_engine.py
---------------------
Ties the pieces together for one Polymarket market:

    question / title / manual ─► strike
    strike + Deribit chain    ─► nearest-strike quote ─► σ
    spot, strike, T, σ, model ─► probability (BS or Monte-Carlo)
    probability + bid/ask     ─► edge / liquidity flags

`analyze_market` does it synchronously. `AnalysisSession` recomputes in the
background whenever the inputs change and only ever publishes the result of
the newest request: every launch takes a sequence number and a finished
computation whose number is no longer the latest is dropped.
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Sequence, Union

import numpy as np

from black_scholes import RISK_FREE_RATE, bs_digital
from deribit_contracts import OptionQuote
from edge import EdgeSignal, evaluate_edge
from mc_pricer import DEFAULT_PATHS, mc_digital
from polymarket import PolyMarket
from settings import Settings
from strike_parser import is_touch_market, resolve_strike
from vol_picker import nearest_strike

_log = logging.getLogger(__name__)

SECS_PER_YEAR = 365 * 24 * 3600


class Model(Enum):
    CLOSED_FORM = "bs"
    SIMULATION = "mc"


class BarrierMode(Enum):
    TERMINAL = "terminal"    # settles on S_T > K
    TOUCH = "touch"          # settles on max S_t ≥ K


@dataclass(frozen=True)
class EstimationRequest:
    spot: float
    strike: float
    years: float
    sigma: float
    model: Model = Model.CLOSED_FORM
    vol_multiplier: float = 1.0
    barrier: BarrierMode = BarrierMode.TERMINAL
    rate: float = RISK_FREE_RATE
    paths: int = DEFAULT_PATHS
    seed: Optional[int] = None

    def __post_init__(self):
        for name in ("spot", "strike", "years", "sigma", "vol_multiplier", "rate"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"{name} must be finite")
        if self.spot <= 0:
            raise ValueError("spot must be positive")
        if self.strike <= 0:
            raise ValueError("strike must be positive")
        if self.years < 0:
            raise ValueError("years must be non-negative")
        if self.sigma < 0:
            raise ValueError("sigma must be non-negative")
        if self.vol_multiplier <= 0:
            raise ValueError("vol_multiplier must be positive")
        if self.paths <= 0:
            raise ValueError("paths must be positive")


def estimate(req: EstimationRequest) -> float:
    """P(event) for one request. Pure apart from the MC random draws."""
    if req.model is Model.CLOSED_FORM:
        return bs_digital(req.spot, req.strike, req.years, req.sigma, req.rate)
    return mc_digital(
        req.spot, req.strike, req.years, req.sigma,
        r=req.rate,
        paths=req.paths,
        vol_multiplier=req.vol_multiplier,
        touch=req.barrier is BarrierMode.TOUCH,
        rng=np.random.default_rng(req.seed),
    )


def years_to_expiry(end: datetime, now: Optional[datetime] = None) -> float:
    now = now or datetime.now(timezone.utc)
    return max(0.0, (end - now).total_seconds() / SECS_PER_YEAR)


# ---------------------------------------------------------------------------


@dataclass
class Analysis:
    """Everything needed to explain one market's numbers."""
    strike: Optional[float]
    option: Optional[OptionQuote]
    request: Optional[EstimationRequest]
    probability: Optional[float]
    edge: EdgeSignal
    reason: Optional[str] = None     # why no estimate is available

    @property
    def available(self) -> bool:
        return self.probability is not None


def prepare(market: PolyMarket,
            chain: Sequence[OptionQuote],
            spot: float,
            *,
            event_title: str = "",
            manual_strike: Union[str, float, None] = None,
            model: Model = Model.CLOSED_FORM,
            vol_multiplier: float = 1.0,
            barrier: Optional[BarrierMode] = None,
            end_date: Optional[datetime] = None,
            now: Optional[datetime] = None,
            settings: Optional[Settings] = None,
            seed: Optional[int] = None) -> Analysis:
    """Build the estimation request for ``market`` without running it.

    ``end_date`` is used when the market carries none (event end date).
    """
    cfg = settings or Settings()
    no_edge = evaluate_edge(None, market.bid, market.ask,
                            cfg.edge_threshold, cfg.spread_threshold)

    strike = resolve_strike(market.question, event_title, manual_strike)
    if strike is None:
        return Analysis(None, None, None, None, no_edge, reason="no strike")

    option = nearest_strike(chain, strike)
    if option is None:
        return Analysis(strike, None, None, None, no_edge, reason="no matching option")

    if not math.isfinite(spot) or spot <= 0:
        return Analysis(strike, option, None, None, no_edge, reason="no spot price")

    end = market.end_date or end_date
    if end is None:
        return Analysis(strike, option, None, None, no_edge, reason="no end date")

    if barrier is None:
        touch = model is Model.SIMULATION and is_touch_market(market.question, cfg.touch_keywords)
        barrier = BarrierMode.TOUCH if touch else BarrierMode.TERMINAL

    req = EstimationRequest(
        spot=spot,
        strike=strike,
        years=years_to_expiry(end, now),
        sigma=option.sigma,
        model=model,
        vol_multiplier=vol_multiplier,
        barrier=barrier,
        rate=cfg.risk_free_rate,
        paths=cfg.mc_paths,
        seed=seed,
    )
    return Analysis(strike, option, req, None, no_edge)


def analyze_market(market: PolyMarket,
                   chain: Sequence[OptionQuote],
                   spot: float,
                   **kw) -> Analysis:
    """prepare() + estimate() + edge, in one go."""
    a = prepare(market, chain, spot, **kw)
    if a.request is None:
        return a
    cfg = kw.get("settings") or Settings()
    a.probability = estimate(a.request)
    a.edge = evaluate_edge(a.probability, market.bid, market.ask,
                           cfg.edge_threshold, cfg.spread_threshold)
    _log.debug("%s: strike=%s sigma=%.4f p=%.4f edge=%.2f",
               market.id, a.strike, a.request.sigma, a.probability, a.edge.edge_pct)
    return a


# ---------------------------------------------------------------------------


class SessionState(Enum):
    IDLE = "idle"            # missing strike, option, spot or end date
    READY = "ready"          # request known, nothing launched
    COMPUTING = "computing"
    RESULTED = "resulted"


class AnalysisSession:
    """
    Recompute-on-change wrapper around `estimate`.

    >>> s = AnalysisSession()
    >>> s.update(req_a); s.update(req_b)    # req_a's result can never win
    >>> s.wait(5.0)
    """

    def __init__(self,
                 estimator: Callable[[EstimationRequest], float] = estimate,
                 *,
                 debounce: float = 0.0):
        self._estimator = estimator
        self.debounce = debounce
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._seq = 0
        self._pending: Optional[threading.Timer] = None
        self._request: Optional[EstimationRequest] = None
        self._result: Optional[float] = None
        self.state = SessionState.IDLE
        self._done.set()

    # ---- public API ------------------------------------------------------

    @property
    def request(self) -> Optional[EstimationRequest]:
        return self._request

    @property
    def result(self) -> Optional[float]:
        with self._lock:
            return self._result

    def update(self, request: Optional[EstimationRequest],
               run: bool = True) -> Optional[threading.Thread]:
        """Feed the latest inputs; launches a computation if they changed."""
        with self._lock:
            if request is None:
                self._seq += 1          # anything in flight is now stale
                self._cancel_pending()
                self._request = None
                self._result = None
                self.state = SessionState.IDLE
                self._done.set()
                return None
            if request == self._request and self.state in (SessionState.COMPUTING,
                                                           SessionState.RESULTED):
                return None
            self._request = request
            self.state = SessionState.READY
        return self.refresh() if run else None

    def refresh(self) -> Optional[threading.Thread]:
        """(Re)launch a computation for the current request."""
        with self._lock:
            if self._request is None:
                return None
            self._seq += 1
            seq, req = self._seq, self._request
            self._cancel_pending()
            self.state = SessionState.COMPUTING
            self._done.clear()
            worker = threading.Timer(self.debounce, self._run, args=(seq, req))
            worker.daemon = True
            self._pending = worker
        worker.start()
        return worker

    def wait(self, timeout: Optional[float] = None) -> Optional[float]:
        """Block until the newest launch is published; return the result."""
        if not self._done.wait(timeout):
            raise TimeoutError("estimation still running")
        return self.result

    # ---- internals -------------------------------------------------------

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _run(self, seq: int, req: EstimationRequest) -> None:
        try:
            prob: Optional[float] = self._estimator(req)
        except Exception:                # noqa: BLE001
            _log.exception("estimation failed for %s", req)
            prob = None
        self._publish(seq, prob)

    def _publish(self, seq: int, prob: Optional[float]) -> bool:
        with self._lock:
            if seq != self._seq:
                _log.debug("discarding stale result #%d (latest #%d)", seq, self._seq)
                return False
            self._result = prob
            self.state = SessionState.RESULTED
            self._pending = None
            self._done.set()
            return True
