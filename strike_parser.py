"""
strike_parser.py
----------------
Pull a target price out of free-text market questions ("Bitcoin above
$95,000 on Dec 16?", "Will BTC hit 100k by March?") and decide whether the
market settles on a touch of that level or on the closing price.

Both are best-effort heuristics. Pattern order is fixed:
    1. "$" followed by a number          → number
    2. a number followed by "k"          → number × 1000
Thousands separators are stripped first.
"""

from __future__ import annotations

import math
import re
from typing import Iterable, Optional, Union

TOUCH_KEYWORDS = ("touch", "hit")

_DOLLAR = re.compile(r"\$(\d+(?:\.\d+)?)")
_THOUSANDS = re.compile(r"(\d+(?:\.\d+)?)k\b")


def extract_strike(text: Optional[str]) -> Optional[float]:
    """Return the strike mentioned in ``text`` or None."""
    if not text:
        return None
    clean = text.replace(",", "").lower()

    m = _DOLLAR.search(clean)
    if m:
        value = float(m.group(1))
    else:
        m = _THOUSANDS.search(clean)
        if not m:
            return None
        value = float(m.group(1)) * 1000

    return value if math.isfinite(value) and value > 0 else None


def _manual(value: Union[str, float, None]) -> Optional[float]:
    if value is None:
        return None
    try:
        v = float(value)
    except (TypeError, ValueError):
        return None
    return v if math.isfinite(v) and v > 0 else None


def resolve_strike(question: Optional[str],
                   title: Optional[str] = None,
                   manual: Union[str, float, None] = None) -> Optional[float]:
    """Market question first, then event title, then the manual override."""
    for text in (question, title):
        strike = extract_strike(text)
        if strike is not None:
            return strike
    return _manual(manual)


def is_touch_market(text: Optional[str],
                    keywords: Iterable[str] = TOUCH_KEYWORDS) -> bool:
    """True when the question reads like a barrier ("hit", "touch") market.

    A keyword must start at a word boundary, which is narrower than a plain
    substring test: "hits" and "touches" match, "white" does not match "hit".
    """
    if not text:
        return False
    words = [re.escape(k.lower()) for k in keywords if k]
    if not words:
        return False
    return re.search(r"\b(?:" + "|".join(words) + ")", text.lower()) is not None
