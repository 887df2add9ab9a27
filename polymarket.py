"""
Polymarket gamma-API records.

The search endpoint returns outcome names and prices as JSON-encoded
strings ('["Yes", "No"]', '["0.42", "0.58"]') on most markets but as bare
strings on some; `parse_outcomes` accepts both.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional, Union

_log = logging.getLogger(__name__)


def parse_iso(ts: Optional[str]) -> Optional[datetime]:
    """ISO-8601 → aware UTC datetime ('Z' suffix accepted), None if unparseable."""
    if not ts:
        return None
    try:
        dt = datetime.fromisoformat(ts.replace("Z", "+00:00"))
    except ValueError:
        _log.warning("unparseable timestamp %r", ts)
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class Outcome:
    name: str
    price: float


def _as_list(raw: Union[str, list, None]) -> list:
    if raw is None:
        return []
    if isinstance(raw, list):
        return raw
    if raw.startswith("["):
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            _log.warning("could not parse outcome list %r: %s", raw, exc)
    return [raw]


def parse_outcomes(outcomes: Union[str, list, None],
                   prices: Union[str, list, None]) -> List[Outcome]:
    names = _as_list(outcomes)
    values = _as_list(prices)
    return [
        Outcome(str(name), _float(values[i]) if i < len(values) else 0.0)
        for i, name in enumerate(names)
    ]


@dataclass
class PolyMarket:
    id: str
    question: str
    bid: Optional[float]
    ask: Optional[float]
    end_date: Optional[datetime]
    outcomes: List[Outcome] = field(default_factory=list)
    volume: float = 0.0

    @classmethod
    def from_json(cls, m: dict[str, Any]) -> "PolyMarket":
        return cls(
            id=str(m.get("id", "")),
            question=m.get("question") or "",
            bid=m.get("bestBid"),
            ask=m.get("bestAsk"),
            end_date=parse_iso(m.get("endDate")),
            outcomes=parse_outcomes(m.get("outcomes") or "[]",
                                    m.get("outcomePrices") or "[]"),
            volume=_float(m.get("volume")),
        )


@dataclass
class PolyEvent:
    id: str
    ticker: str
    title: str
    description: str
    end_date: Optional[datetime]
    markets: List[PolyMarket] = field(default_factory=list)
    volume: float = 0.0

    @classmethod
    def from_json(cls, e: dict[str, Any]) -> "PolyEvent":
        return cls(
            id=str(e.get("id", "")),
            ticker=e.get("ticker") or "",
            title=e.get("title") or "",
            description=e.get("description") or "",
            end_date=parse_iso(e.get("endDate")),
            markets=[PolyMarket.from_json(m) for m in e.get("markets") or []],
            volume=_float(e.get("volume")),
        )

    @property
    def main_market(self) -> Optional[PolyMarket]:
        """First market is the headline binary outcome."""
        return self.markets[0] if self.markets else None
