"""
Runtime settings.

Usage:
    from settings import load_settings
    cfg = load_settings("live")          # reads ~/.env.live then ./.env
    cfg.risk_free_rate, cfg.mc_paths

Every value has a default, so no .env file is required. Variables:

    POLYBIT_RISK_FREE_RATE   0.04
    POLYBIT_MC_PATHS         50000
    POLYBIT_EDGE_THRESHOLD   5.0     (pp)
    POLYBIT_SPREAD_THRESHOLD 5.0     (%)
    POLYBIT_TOUCH_KEYWORDS   touch,hit
    POLYBIT_DEBOUNCE         0.1     (seconds)
    POLYBIT_HTTP_TIMEOUT     10      (seconds)
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

from black_scholes import RISK_FREE_RATE
from edge import EDGE_THRESHOLD, SPREAD_THRESHOLD
from mc_pricer import DEFAULT_PATHS
from strike_parser import TOUCH_KEYWORDS

PREFIX = "POLYBIT_"


@dataclass(frozen=True)
class Settings:
    risk_free_rate: float = RISK_FREE_RATE
    mc_paths: int = DEFAULT_PATHS
    edge_threshold: float = EDGE_THRESHOLD
    spread_threshold: float = SPREAD_THRESHOLD
    touch_keywords: Tuple[str, ...] = TOUCH_KEYWORDS
    debounce: float = 0.1
    http_timeout: float = 10.0


def _get(name: str, cast, default):
    raw = os.environ.get(PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"{PREFIX}{name}={raw!r} is not a valid {cast.__name__}") from None


def _keywords(raw: str) -> Tuple[str, ...]:
    return tuple(k.strip().lower() for k in raw.split(",") if k.strip())


def load_settings(env: Optional[str] = None) -> Settings:
    if env:
        load_dotenv(Path.home() / f".env.{env}", override=True)
    load_dotenv()                      # ./.env, never overrides

    cfg = Settings(
        risk_free_rate=_get("RISK_FREE_RATE", float, RISK_FREE_RATE),
        mc_paths=_get("MC_PATHS", int, DEFAULT_PATHS),
        edge_threshold=_get("EDGE_THRESHOLD", float, EDGE_THRESHOLD),
        spread_threshold=_get("SPREAD_THRESHOLD", float, SPREAD_THRESHOLD),
        touch_keywords=_get("TOUCH_KEYWORDS", _keywords, TOUCH_KEYWORDS),
        debounce=_get("DEBOUNCE", float, 0.1),
        http_timeout=_get("HTTP_TIMEOUT", float, 10.0),
    )
    if cfg.mc_paths <= 0:
        raise ValueError(f"{PREFIX}MC_PATHS must be positive")
    return cfg
