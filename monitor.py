#!/usr/bin/env python3
"""
monitor.py – searches Polymarket, matches each event to the Deribit option
chain for its end date, and prints the option-implied probability and edge
for every market in the event.

Use:
    python monitor.py                               # "bitcoin price", BS model
    python monitor.py --query "bitcoin above" --model mc --vol-mult 1.5
    python monitor.py --strike 95000                # manual strike override
"""

import argparse
import logging
import sys
import textwrap
from datetime import datetime, timezone

import requests

from deribit_contracts import expiry_code
from market_data import MarketData
from probability_engine import Analysis, Model, analyze_market
from settings import load_settings
from vol_picker import strike_rows


def _parse_args(argv=None):
    p = argparse.ArgumentParser(description="Polymarket vs Deribit implied probability")
    p.add_argument("--query", default="bitcoin price", help="Polymarket search text")
    p.add_argument("--currency", default="BTC", help="Deribit option currency")
    p.add_argument("--index", default="btc_usdc", help="Deribit index for spot")
    p.add_argument("--model", choices=[m.value for m in Model], default=Model.CLOSED_FORM.value,
                   help="bs = Black-Scholes digital, mc = Monte-Carlo (handles touch markets)")
    p.add_argument("--vol-mult", type=float, default=1.0, help="event vol multiplier (mc only)")
    p.add_argument("--strike", help="manual strike when none can be parsed")
    p.add_argument("--rows", type=int, default=10, help="strikes of the chain to show")
    p.add_argument("--env", help="load ~/.env.<env> before reading settings")
    p.add_argument("--log-level", default="WARNING")
    return p.parse_args(argv)


# ─── helpers just for pretty output ───────────────────────────────────────
def _fmt(v, spec=".2f", none="-"):
    return none if v is None else format(v, spec)


def _print_chain(matched, spot: float, rows: int) -> None:
    print(f"{'Call bid/ask':>16} | {'Strike':>10} | {'Put bid/ask':<16} | IV")
    for row in strike_rows(matched, spot, rows):
        c, p = row.call, row.put
        cba = f"{_fmt(c and c.bid, '.4f')}/{_fmt(c and c.ask, '.4f')}" if c else "-"
        pba = f"{_fmt(p and p.bid, '.4f')}/{_fmt(p and p.ask, '.4f')}" if p else "-"
        iv = (c or p).mark_iv
        mark = "*" if row.near_spot(spot) else " "
        print(f"{cba:>16} | {row.strike:>9,.0f}{mark} | {pba:<16} | {_fmt(iv, '.1f')}%")


def _print_outcomes(market) -> None:
    odds = "  ".join(f"{o.name} {o.price * 100:.1f}%" for o in market.outcomes)
    print(f"    outcomes: {odds or '-'}   volume ${market.volume:,.0f}")


def _print_analysis(market, a: Analysis, label: str = "") -> None:
    e = a.edge
    print(f"  {label}{market.question}")
    _print_outcomes(market)
    if not a.available:
        print(f"    analysis unavailable: {a.reason}   "
              f"spread {e.spread_pct:.2f}%{'  LOW LIQUIDITY' if e.low_liquidity else ''}")
        return
    req = a.request
    flags = []
    if e.good_opportunity:
        flags.append("EDGE")
    if e.low_liquidity:
        flags.append("LOW LIQUIDITY")
    print(
        f"    target ${a.strike:,.0f} via {a.option.instrument_name}  "
        f"IV {req.sigma * 100:.1f}%  {req.model.value}/{req.barrier.value}  "
        f"T {req.years * 365:.1f}d"
    )
    print(
        f"    yes {e.yes_price * 100:.1f}%  model {a.probability * 100:.1f}%  "
        f"edge {e.edge_pct:+.1f}%  spread {e.spread_pct:.2f}%  {' '.join(flags)}"
    )


# ─── main ─────────────────────────────────────────────────────────────────
def main(argv=None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    cfg = load_settings(args.env)
    md = MarketData(timeout=cfg.http_timeout)

    try:
        found = md.opportunities(args.query, args.currency, args.index)
    except requests.RequestException as exc:
        print(f"Failed to fetch market data: {exc}", file=sys.stderr)
        return 1

    if not found:
        print(f"No Polymarket events for {args.query!r}.")
        return 0

    now = datetime.now(timezone.utc)
    model = Model(args.model)
    for event, matched, spot in found:
        code = expiry_code(event.end_date) if event.end_date else "?"
        print(f"\n{event.title}   expiry {code}   spot ${spot:,.2f}   "
              f"{len(matched)} options")
        if event.description:
            print(textwrap.shorten(event.description, width=78, placeholder=" ..."))
        print(f"event volume ${event.volume:,.0f}")
        print("-" * 78)
        if matched:
            _print_chain(matched, spot, args.rows)
        else:
            print(f"No options found for expiry {code}.")
        print("-" * 78)
        for market in event.markets:
            a = analyze_market(market, matched, spot,
                               event_title=event.title,
                               manual_strike=args.strike,
                               model=model,
                               vol_multiplier=args.vol_mult,
                               end_date=event.end_date,
                               now=now,
                               settings=cfg)
            label = "[main] " if market is event.main_market else "[related] "
            _print_analysis(market, a, label)
    return 0


if __name__ == "__main__":
    sys.exit(main())
