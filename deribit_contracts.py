from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Optional

MONTHS = ("JAN", "FEB", "MAR", "APR", "MAY", "JUN",
          "JUL", "AUG", "SEP", "OCT", "NOV", "DEC")


def expiry_code(when: date) -> str:
    """Deribit expiry code, e.g. 2024-12-16 → '16DEC24', 2024-05-05 → '5MAY24'.

    Day is NOT zero-padded. Aware datetimes are taken in UTC.
    """
    if isinstance(when, datetime) and when.tzinfo is not None:
        when = when.astimezone(timezone.utc)
    return f"{when.day}{MONTHS[when.month - 1]}{when.year % 100:02d}"


@dataclass(frozen=True)
class OptionId:
    underlying: str    # BTC, ETH
    expiry: str        # 27MAR26
    strike: float
    call: bool         # False = put

    @classmethod
    def parse(cls, name: str) -> "OptionId":
        # e.g. BTC-27MAR26-300000-C
        parts = name.split("-")
        if len(parts) != 4:
            raise ValueError(f"malformed instrument name: {name!r}")
        underlying, expiry, strike_txt, kind = parts
        if kind not in ("C", "P"):
            raise ValueError(f"unknown option kind in {name!r}")
        try:
            strike = float(strike_txt)
        except ValueError:
            raise ValueError(f"non-numeric strike in {name!r}") from None
        if not underlying or not expiry or strike <= 0:
            raise ValueError(f"malformed instrument name: {name!r}")
        return cls(underlying, expiry, strike, kind == "C")


@dataclass(frozen=True)
class OptionQuote:
    """One row of a Deribit option chain."""
    instrument_name: str
    mark_iv: Optional[float] = None     # percentage points, 60.0 → 60 %
    bid: Optional[float] = None
    ask: Optional[float] = None
    mark_price: Optional[float] = None
    underlying_price: Optional[float] = None
    open_interest: Optional[float] = None

    @classmethod
    def from_json(cls, row: dict[str, Any]) -> "OptionQuote":
        return cls(
            instrument_name=row.get("instrument_name", ""),
            mark_iv=row.get("mark_iv"),
            bid=row.get("bid_price"),
            ask=row.get("ask_price"),
            mark_price=row.get("mark_price"),
            underlying_price=row.get("underlying_price"),
            open_interest=row.get("open_interest"),
        )

    @property
    def option_id(self) -> Optional[OptionId]:
        try:
            return OptionId.parse(self.instrument_name)
        except ValueError:
            return None

    @property
    def sigma(self) -> float:
        """Implied vol as a decimal; 0.0 when the chain has none."""
        return (self.mark_iv or 0.0) / 100
