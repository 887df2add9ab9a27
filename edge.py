"""
Edge of the option-implied probability over the Polymarket quote.

    edge   = model_prob·100 − yes_ask·100        (percentage points)
    spread = (ask − bid) / ask · 100             (percent of ask)

Buying "Yes" means paying the ask, so the ask is the market price we compare
against. Both flags use fixed 5-point thresholds.
"""

from dataclasses import dataclass
from typing import Optional

EDGE_THRESHOLD = 5.0      # pp of edge for a "good opportunity"
SPREAD_THRESHOLD = 5.0    # % spread above which liquidity is "low"


@dataclass(frozen=True)
class EdgeSignal:
    model_prob: Optional[float]
    yes_price: float
    edge_pct: Optional[float]     # None when no model probability
    spread_pct: float
    good_opportunity: bool
    low_liquidity: bool


def spread_pct(bid: Optional[float], ask: Optional[float]) -> float:
    """Bid/ask spread as a percentage of the ask (0 when there is no ask)."""
    if not ask:
        return 0.0
    return (ask - (bid or 0.0)) / ask * 100


def evaluate_edge(model_prob: Optional[float],
                  bid: Optional[float],
                  ask: Optional[float],
                  edge_threshold: float = EDGE_THRESHOLD,
                  spread_threshold: float = SPREAD_THRESHOLD) -> EdgeSignal:
    yes_price = ask or 0.0
    spread = spread_pct(bid, ask)
    edge = None if model_prob is None else model_prob * 100 - yes_price * 100
    return EdgeSignal(
        model_prob=model_prob,
        yes_price=yes_price,
        edge_pct=edge,
        spread_pct=spread,
        good_opportunity=edge is not None and edge > edge_threshold,
        low_liquidity=spread > spread_threshold,
    )
