"""Utility functions shared across the feed."""
import logging
import math
import time
from datetime import datetime
from typing import Any, List, Optional

from mcapfeed.config import LOG_DIR, LOG_FORMAT, LOG_LEVEL, LOG_TO_FILE


def setup_logger(name: str = __name__) -> logging.Logger:
    """
    Return the logger for ``name``, attaching handlers on first use.

    Records go to stderr and, unless ``MCAPFEED_LOG_TO_FILE=false``, to a
    daily ``mcapfeed_YYYYMMDD.log`` under ``LOG_DIR``.
    """
    logger = logging.getLogger(name)
    logger.setLevel(LOG_LEVEL)
    if logger.handlers:
        return logger

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if LOG_TO_FILE:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        log_file = LOG_DIR / f"mcapfeed_{datetime.now():%Y%m%d}.log"
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setLevel(LOG_LEVEL)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def to_float(value: Any, default: float = 0.0) -> float:
    """
    Coerce a provider field to a finite float.

    Providers send numbers as strings, numbers or null; anything that
    does not parse to a finite value yields ``default``.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(result):
        return default
    return result


def first_positive(*values: Any) -> Optional[float]:
    """Return the first value that coerces to a number > 0, else None."""
    for value in values:
        number = to_float(value)
        if number > 0:
            return number
    return None


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))
