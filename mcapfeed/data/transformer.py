"""Data transformation: range filtering, display formatting and export."""
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import pandas as pd

from mcapfeed.constants import DAY_MS, MAX_RANGE, DayRange
from mcapfeed.models import MarketCapPoint, MarketCapSeries
from mcapfeed.utils import now_ms, setup_logger

logger = setup_logger(__name__)


def filter_points_by_range(
    points: Sequence[MarketCapPoint], days: Optional[DayRange], now: Optional[int] = None
) -> List[MarketCapPoint]:
    """Keep points newer than ``days`` ago. ``None`` or "max" keeps everything."""
    if not points:
        return []
    if days is None or days == MAX_RANGE:
        return list(points)

    cutoff = (now if now is not None else now_ms()) - int(days) * DAY_MS
    return [p for p in points if p.timestamp >= cutoff]


def format_market_cap(value: Optional[float]) -> str:
    """Format market cap for display ($1.23B, $4.56M, $7.89K, $12.34)."""
    if value is None:
        return "N/A"
    if value >= 1_000_000_000:
        return f"${value / 1_000_000_000:.2f}B"
    if value >= 1_000_000:
        return f"${value / 1_000_000:.2f}M"
    if value >= 1_000:
        return f"${value / 1_000:.2f}K"
    return f"${value:.2f}"


def format_axis_label(value: Optional[float]) -> str:
    """Compact variant of format_market_cap for chart axes."""
    if value is None:
        return ""
    if value >= 1_000_000_000:
        return f"{value / 1_000_000_000:.1f}B"
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.0f}K"
    return f"{value:.0f}"


def series_to_frame(series: MarketCapSeries) -> pd.DataFrame:
    """
    Convert a series into a DataFrame indexed by UTC timestamp.

    Returns:
        DataFrame with a single ``market_cap_usd`` column
    """
    df = pd.DataFrame(
        [(p.timestamp, p.value) for p in series.points],
        columns=["ts", "market_cap_usd"],
    )
    df["date"] = pd.to_datetime(df["ts"], unit="ms", utc=True)
    return df.set_index("date")[["market_cap_usd"]]


def results_to_frame(results: Iterable[MarketCapSeries]) -> pd.DataFrame:
    """
    Align several series into one DataFrame, one column per symbol.

    Series without points are skipped. Duplicate timestamps within a
    series keep the last value.
    """
    columns = {}
    for series in results:
        if not series.has_data:
            continue
        s = series_to_frame(series)["market_cap_usd"]
        columns[series.symbol] = s[~s.index.duplicated(keep="last")]

    if not columns:
        return pd.DataFrame()
    return pd.DataFrame(columns).sort_index()


def export_series_csv(results: Iterable[MarketCapSeries], directory: Path) -> List[Path]:
    """Write one CSV per non-empty series into ``directory``."""
    directory.mkdir(parents=True, exist_ok=True)
    written = []

    for series in results:
        if not series.has_data:
            continue
        path = directory / f"{series.symbol}_{series.source.value}_market_cap.csv"
        try:
            series_to_frame(series).to_csv(path)
        except OSError as e:
            logger.warning(f"Could not export CSV for {series.symbol}: {e}")
            continue
        written.append(path)

    logger.info(f"Exported market cap data for {len(written)} token(s) to: {directory}")
    return written
