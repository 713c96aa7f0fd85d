"""Derive a market cap series from OHLCV candles."""
from typing import Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from mcapfeed.config import FALLBACK_SUPPLY_MULTIPLIER
from mcapfeed.models import MarketCapPoint
from mcapfeed.utils import to_float


def implied_supply(reference_price: Optional[float], valuation: Optional[float]) -> float:
    """Supply implied by ``valuation / price``, or 0.0 when either is missing."""
    price = to_float(reference_price)
    if price <= 0:
        return 0.0
    supply = to_float(valuation) / price
    return supply if supply > 0 else 0.0


def derive_market_caps(
    candles: Iterable[Tuple[object, object]],
    reference_price: Optional[float],
    valuation: Optional[float],
    fallback_multiplier: float = FALLBACK_SUPPLY_MULTIPLIER,
) -> List[MarketCapPoint]:
    """
    Convert (timestamp_ms, close) candle pairs into market cap points.

    Supply is implied as Q = valuation / reference price and every point
    is computed as MC = round(close * Q). With no usable supply the close
    is multiplied by ``fallback_multiplier`` instead, so candles are kept
    rather than dropped.

    Points with a non-numeric timestamp or value, or a value <= 0, are
    discarded. The result is sorted ascending by timestamp.

    Args:
        candles: Iterable of (timestamp in ms, close price) pairs
        reference_price: Current token price the valuation refers to
        valuation: Market cap or FDV at ``reference_price``
        fallback_multiplier: Supply stand-in when none can be implied

    Returns:
        List of MarketCapPoint in chronological order
    """
    df = pd.DataFrame(list(candles), columns=["ts", "close"])
    if df.empty:
        return []

    df["ts"] = pd.to_numeric(df["ts"], errors="coerce")
    df["close"] = pd.to_numeric(df["close"], errors="coerce")

    supply = implied_supply(reference_price, valuation)
    multiplier = supply if supply > 0 else fallback_multiplier

    # Half-up rounding
    df["market_cap"] = np.floor(df["close"] * multiplier + 0.5)

    valid = (
        np.isfinite(df["ts"])
        & np.isfinite(df["market_cap"])
        & (df["market_cap"] > 0)
    )
    df = df[valid].sort_values("ts", kind="stable")

    return [
        MarketCapPoint(timestamp=int(ts), value=float(mc))
        for ts, mc in zip(df["ts"], df["market_cap"])
    ]
