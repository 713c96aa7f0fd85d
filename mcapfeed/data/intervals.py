"""Day-range resolution and candle sampling plans."""
from dataclasses import dataclass

from mcapfeed.constants import MAX_RANGE, DayRange

SAMPLES_PER_DAY_5M = 288  # 24 hours at 5-min intervals


@dataclass(frozen=True)
class IntervalPlan:
    interval: str  # "5m" | "1h" | "4h" | "24h"
    limit: int


def resolve_days(days: DayRange, max_days: int) -> int:
    """
    Turn a requested range into a number of days.

    "max" maps to ``max_days``, the provider's longest history.
    """
    if isinstance(days, str):
        if days.strip().lower() == MAX_RANGE:
            return max_days
        days = days.strip()
        if not days.isdigit():
            raise ValueError(f"Unknown day range: {days!r}")
        days = int(days)
    if isinstance(days, bool) or not isinstance(days, int) or days <= 0:
        raise ValueError(f"Day range must be a positive integer or 'max', got {days!r}")
    return days


def plan_interval(days: int, max_samples: int) -> IntervalPlan:
    """
    Pick the candle interval and sample count for ``days`` of history.

    Shorter ranges get finer candles. Every limit is capped at the
    provider's ``max_samples``.
    """
    if days <= 1:
        return IntervalPlan("5m", min(SAMPLES_PER_DAY_5M, max_samples))
    if days <= 7:
        return IntervalPlan("1h", min(days * 24, max_samples))
    if days <= 30:
        return IntervalPlan("4h", min(days * 6, max_samples))
    return IntervalPlan("24h", min(days, max_samples))
