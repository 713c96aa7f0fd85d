"""Interval planning, market cap derivation and transformation modules."""
from mcapfeed.data.deriver import derive_market_caps, implied_supply
from mcapfeed.data.intervals import IntervalPlan, plan_interval, resolve_days
from mcapfeed.data.transformer import (
    export_series_csv,
    filter_points_by_range,
    format_axis_label,
    format_market_cap,
    results_to_frame,
    series_to_frame,
)

__all__ = [
    "derive_market_caps",
    "implied_supply",
    "IntervalPlan",
    "plan_interval",
    "resolve_days",
    "export_series_csv",
    "filter_points_by_range",
    "format_axis_label",
    "format_market_cap",
    "results_to_frame",
    "series_to_frame",
]
