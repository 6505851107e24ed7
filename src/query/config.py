"""Runtime settings for the query layer.

Defaults match the reporting contract of the desktop host; each can be
overridden through the environment:

    POSTFLOP_WEIGHT_FLOOR       weights below this are reported as 0
    POSTFLOP_EQR_MIN_EQUITY     equities below this make EQR undefined
    POSTFLOP_LOG_LEVEL          logging level name for setup_logging()
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_WEIGHT_FLOOR: float = 0.0005
DEFAULT_EQR_MIN_EQUITY: float = 5e-7
DEFAULT_LOG_LEVEL: str = "WARNING"


@dataclass(frozen=True)
class QueryConfig:
    weight_floor: float = DEFAULT_WEIGHT_FLOOR
    eqr_min_equity: float = DEFAULT_EQR_MIN_EQUITY
    log_level: str = DEFAULT_LOG_LEVEL


def _as_float(raw: str | None, default: float, name: str) -> float:
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value < 0.0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    return value


def load_config() -> QueryConfig:
    """Build a QueryConfig from the environment, falling back to defaults."""
    return QueryConfig(
        weight_floor=_as_float(
            os.getenv("POSTFLOP_WEIGHT_FLOOR"), DEFAULT_WEIGHT_FLOOR, "POSTFLOP_WEIGHT_FLOOR"
        ),
        eqr_min_equity=_as_float(
            os.getenv("POSTFLOP_EQR_MIN_EQUITY"), DEFAULT_EQR_MIN_EQUITY, "POSTFLOP_EQR_MIN_EQUITY"
        ),
        log_level=(os.getenv("POSTFLOP_LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().upper(),
    )
