#!/usr/bin/env python3
"""
vol_picker.py
Pick the implied volatility to feed the pricers from a Deribit chain.

Skew is approximated by nearest-strike lookup: the quote whose strike is
closest to the prediction-market threshold supplies σ. No interpolation
between neighbouring strikes.

Usage
-----
    from vol_picker import chain_for_expiry, nearest_strike

    chain = chain_for_expiry(all_quotes, market.end_date)
    quote = nearest_strike(chain, 95_000)
    sigma = quote.sigma if quote else None
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from deribit_contracts import OptionQuote, expiry_code

_log = logging.getLogger(__name__)

NEAR_SPOT_PCT = 0.05


@dataclass
class StrikeRow:
    """Call and put at one strike, as shown in the chain table."""
    strike: float
    call: Optional[OptionQuote] = None
    put: Optional[OptionQuote] = None

    def near_spot(self, spot: float) -> bool:
        return abs(self.strike - spot) < spot * NEAR_SPOT_PCT


# -------------------------------------------------------------------------
def _parsed(quotes: Iterable[OptionQuote]):
    """Yield (quote, OptionId), skipping malformed instrument names."""
    for q in quotes:
        oid = q.option_id
        if oid is None:
            _log.debug("skipping malformed instrument %r", q.instrument_name)
            continue
        yield q, oid


def chain_for_expiry(quotes: Iterable[OptionQuote], when: date) -> List[OptionQuote]:
    """Quotes expiring on ``when`` (exact expiry-code match), order kept."""
    code = expiry_code(when)
    return [q for q, oid in _parsed(quotes) if oid.expiry == code]


def nearest_strike(quotes: Iterable[OptionQuote],
                   strike: Optional[float]) -> Optional[OptionQuote]:
    """Quote with the strike closest to ``strike``; first one wins on ties."""
    if not strike or strike <= 0:
        return None
    best, best_dist = None, float("inf")
    for q, oid in _parsed(quotes):
        dist = abs(oid.strike - strike)
        if dist < best_dist:
            best, best_dist = q, dist
    return best


def strike_rows(quotes: Iterable[OptionQuote], spot: float,
                limit: Optional[int] = None) -> List[StrikeRow]:
    """Group the chain by strike, closest to spot first."""
    rows: dict[float, StrikeRow] = {}
    for q, oid in _parsed(quotes):
        row = rows.setdefault(oid.strike, StrikeRow(oid.strike))
        if oid.call:
            row.call = q
        else:
            row.put = q
    ordered = sorted(rows.values(), key=lambda r: abs(r.strike - spot))
    return ordered[:limit] if limit is not None else ordered
