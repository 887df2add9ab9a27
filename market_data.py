#!/usr/bin/env python3
"""
Lightweight REST client for the public Deribit and Polymarket endpoints.
Usage:
    from market_data import MarketData
    md = MarketData()
    spot  = md.spot("btc_usdc")
    chain = md.options("BTC")
    for event, matched, spot in md.opportunities("bitcoin price"):
        ...

Responses are cached per URL for a short TTL (chains are heavy, search
results go stale fast). HTTP errors propagate to the caller.
"""
import logging
import threading
import time
from typing import Any, Dict, List, Optional, Tuple

import requests

from deribit_contracts import OptionQuote
from polymarket import PolyEvent
from vol_picker import chain_for_expiry

_log = logging.getLogger(__name__)

DERIBIT_API = "https://www.deribit.com/api/v2/public"
GAMMA_API = "https://gamma-api.polymarket.com"

# cache lifetimes in seconds
TTL_OPTIONS = 60.0
TTL_SPOT = 30.0
TTL_SEARCH = 15.0


class MarketData:
    def __init__(self, session: Optional[requests.Session] = None,
                 timeout: float = 10.0):
        self._http = session or requests.Session()
        self.timeout = timeout
        self._cache: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    # ---------- internal helpers ----------
    def _get_json(self, url: str, params: Dict[str, Any], ttl: float):
        key = url + "?" + "&".join(f"{k}={v}" for k, v in sorted(params.items()))
        now = time.monotonic()
        with self._lock:
            hit = self._cache.get(key)
            if hit is not None and now - hit[0] < ttl:
                return hit[1]

        resp = self._http.get(url, params=params, timeout=self.timeout)
        resp.raise_for_status()
        data = resp.json()
        _log.debug("GET %s %s → %d", url, params, resp.status_code)

        with self._lock:
            self._cache[key] = (time.monotonic(), data)
        return data

    # ---------- public endpoints ----------
    def options(self, currency: str = "BTC") -> List[OptionQuote]:
        """Whole option book summary for ``currency``."""
        data = self._get_json(f"{DERIBIT_API}/get_book_summary_by_currency",
                              {"currency": currency, "kind": "option"}, TTL_OPTIONS)
        return [OptionQuote.from_json(row) for row in data.get("result") or []]

    def spot(self, index: str = "btc_usdc") -> float:
        """Deribit index price, 0.0 when the response carries none."""
        data = self._get_json(f"{DERIBIT_API}/get_index_price",
                              {"index_name": index}, TTL_SPOT)
        return float((data.get("result") or {}).get("price") or 0.0)

    def search_events(self, query: str) -> List[PolyEvent]:
        data = self._get_json(f"{GAMMA_API}/public-search",
                              {"q": query, "cache": "true", "optimized": "false"},
                              TTL_SEARCH)
        return [PolyEvent.from_json(e) for e in data.get("events") or []]

    def opportunities(self, query: str, currency: str = "BTC",
                      index: str = "btc_usdc") -> List[Tuple[PolyEvent, List[OptionQuote], float]]:
        """Polymarket events paired with the Deribit chain for their end date."""
        events = self.search_events(query)
        if not events:
            _log.info("no Polymarket events for %r", query)
            return []

        # only hit Deribit once we know there is something to price
        spot = self.spot(index)
        chain = self.options(currency)

        out = []
        for ev in events:
            matched = chain_for_expiry(chain, ev.end_date) if ev.end_date else []
            _log.info("%s: %d options for expiry", ev.title, len(matched))
            out.append((ev, matched, spot))
        return out
