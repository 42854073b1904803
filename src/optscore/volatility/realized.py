"""
Realized Volatility

Trailing realized volatility from daily closes, used to build the implied vs
realized ratio consumed by the regime classifier.
"""

import math
from typing import Optional, Sequence, Union

import polars as pl
from loguru import logger

TRADING_DAYS = 252
MIN_CLOSES = 5

Closes = Union[Sequence[Optional[float]], pl.Series, pl.DataFrame]


def _close_series(closes: Closes) -> pl.Series:
    if isinstance(closes, pl.DataFrame):
        if "close" not in closes.columns:
            raise ValueError(f"DataFrame needs a 'close' column, got {closes.columns}")
        if "timestamp" in closes.columns:
            closes = closes.sort("timestamp")
        series = closes["close"]
    elif isinstance(closes, pl.Series):
        series = closes
    else:
        series = pl.Series("close", list(closes), dtype=pl.Float64, strict=False)

    series = series.cast(pl.Float64, strict=False).drop_nulls().drop_nans()
    return series.filter(series > 0)


def realized_volatility(closes: Closes, window: int = 30) -> Optional[float]:
    """
    Annualized realized volatility from chronologically ordered closes.

    Uses the population standard deviation of the last ``window`` daily log
    returns, annualized by sqrt(252). The 30-session default lines up with
    the 30-day implied vol it is compared against.

    Args:
        closes: Daily closes oldest first (sequence, Series, or DataFrame
            with a ``close`` column and optional ``timestamp``)
        window: Number of trailing returns

    Returns:
        Realized vol as a decimal (0.18 = 18%), or None with fewer than 5
        valid closes
    """
    if window < 2:
        raise ValueError(f"window must be >= 2, got {window}")

    series = _close_series(closes)
    if series.len() < MIN_CLOSES:
        logger.debug(f"Too few valid closes for realized vol: {series.len()}")
        return None

    returns = (series / series.shift(1)).log().drop_nulls().tail(window)
    std = returns.std(ddof=0)
    if std is None:
        return None

    return float(std) * math.sqrt(TRADING_DAYS)


def iv_realized_ratio(implied_vol: Optional[float], realized_vol: Optional[float]) -> Optional[float]:
    """Implied over realized volatility; None when either side is missing."""
    if implied_vol is None or realized_vol is None or realized_vol <= 0 or implied_vol <= 0:
        return None
    return implied_vol / realized_vol
