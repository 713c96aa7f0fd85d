"""Common behaviour of every market cap provider adapter."""
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Hashable, Iterable, Optional, Tuple

from pydantic import ValidationError

from mcapfeed.cache import TTLCache
from mcapfeed.config import CACHE_TTL_SECONDS, FALLBACK_SUPPLY_MULTIPLIER
from mcapfeed.constants import DayRange
from mcapfeed.data.deriver import derive_market_caps, implied_supply
from mcapfeed.data.intervals import IntervalPlan, plan_interval, resolve_days
from mcapfeed.exceptions import (
    EmptyPayloadError,
    MalformedPayloadError,
    ProviderError,
    TransportError,
    UpstreamStatusError,
)
from mcapfeed.models import (
    FailureKind,
    Found,
    MarketCapPoint,
    MarketCapSeries,
    NoData,
    ProviderResult,
    Source,
    Token,
    TokenInfo,
)
from mcapfeed.utils import now_ms, round_half_up, setup_logger

logger = setup_logger(__name__)


class MarketCapProvider(ABC):
    """
    Base class for provider adapters.

    Subclasses implement ``_fetch_series`` and may raise any
    ``ProviderError``; ``fetch`` turns every failure into a ``NoData``
    result so one provider outage never aborts the caller.

    Args:
        client: Object exposing ``async get_json(url, params)``
        cache_ttl: Lifetime of cached upstream answers, in seconds
        clock: Callable returning the current time in ms
        fallback_multiplier: Supply stand-in for the market cap deriver
    """

    source: Source = Source.NONE
    network_map: Dict[str, str] = {}

    def __init__(
        self,
        client: Any,
        cache_ttl: float = CACHE_TTL_SECONDS,
        clock: Optional[Callable[[], float]] = None,
        fallback_multiplier: float = FALLBACK_SUPPLY_MULTIPLIER,
    ):
        self.client = client
        self.clock = clock or now_ms
        self.cache: TTLCache[Any] = TTLCache(cache_ttl, clock=self.clock)
        self.fallback_multiplier = fallback_multiplier

    @property
    def name(self) -> str:
        return self.source.value

    def network_for(self, platform: str) -> str:
        return self.network_map.get(platform, platform)

    def now(self) -> int:
        return int(self.clock())

    async def fetch(self, token: Token, days: DayRange) -> ProviderResult:
        """Fetch ``token`` over ``days``, folding every failure into ``NoData``."""
        if not token.contract:
            return self._no_data(token, FailureKind.EMPTY_PAYLOAD, "no contract address")

        try:
            series = await self._fetch_series(token, days)
        except UpstreamStatusError as e:
            return self._no_data(token, FailureKind.UPSTREAM_STATUS, str(e), status=e.status)
        except TransportError as e:
            return self._no_data(token, FailureKind.TRANSPORT, str(e))
        except EmptyPayloadError as e:
            return self._no_data(token, FailureKind.EMPTY_PAYLOAD, str(e))
        except (MalformedPayloadError, ValidationError, ValueError) as e:
            return self._no_data(token, FailureKind.MALFORMED, str(e))
        except Exception as e:
            logger.warning(f"{self.name}: unexpected error for {token.symbol}: {e}", exc_info=True)
            return NoData(self.source, FailureKind.MALFORMED, f"{type(e).__name__}: {e}")

        if series is None or not series.points:
            return self._no_data(token, FailureKind.EMPTY_PAYLOAD, "no usable data points")
        return Found(series)

    async def fetch_market_cap(self, token: Token, days: DayRange) -> Optional[MarketCapSeries]:
        """Same as ``fetch`` but returns the series or None."""
        result = await self.fetch(token, days)
        return result.series if isinstance(result, Found) else None

    def clear_cache(self) -> None:
        self.cache.clear()

    @abstractmethod
    async def _fetch_series(self, token: Token, days: DayRange) -> Optional[MarketCapSeries]:
        """Provider specific protocol. May raise ProviderError."""

    async def _request(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.client.get_json(url, params)

    async def _cached(self, key: Hashable, loader: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value for ``key`` or run ``loader`` and cache its result."""
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"{self.name}: cache hit {key}")
            return cached

        value = await loader()
        self.cache.set(key, value)
        return value

    def _no_data(self, token: Token, kind: FailureKind, reason: str, status: Optional[int] = None) -> NoData:
        logger.warning(f"{self.name}: no data for {token.symbol} ({kind.value}): {reason}")
        return NoData(self.source, kind, reason, status=status)


class HistoricalProvider(MarketCapProvider):
    """
    Adapter for a provider that serves OHLCV candles per pool.

    Subclasses resolve the pool and the candles; this class owns the
    sampling plan and the conversion of candles into a series, so every
    historical provider produces comparable numbers.
    """

    max_days: int = 365
    max_samples: int = 366

    def plan(self, days: DayRange) -> Tuple[int, IntervalPlan]:
        resolved = resolve_days(days, self.max_days)
        return resolved, plan_interval(resolved, self.max_samples)

    @abstractmethod
    async def get_token_info(self, platform: str, contract: str) -> Optional[TokenInfo]:
        """Look up token metadata, or None when the provider has none."""

    def _build_series(
        self,
        token: Token,
        candles: Iterable[Tuple[object, object]],
        price: Optional[float],
        valuation: Optional[float],
        candle_error: Optional[ProviderError] = None,
        **extras: Any,
    ) -> MarketCapSeries:
        """
        Derive the series from ``candles``.

        When no candle survives derivation, fall back to a single point
        for "now" built from the live price and valuation. Without those
        the candle error (or an EmptyPayloadError) is raised.
        """
        points = derive_market_caps(candles, price, valuation, self.fallback_multiplier)
        now = self.now()
        current_price = price or 0.0

        if not points:
            if price and valuation:
                logger.info(f"{self.name}: no candles for {token.symbol}, using current snapshot")
                return MarketCapSeries(
                    token=token,
                    points=(MarketCapPoint(timestamp=now, value=float(round_half_up(valuation))),),
                    source=self.source,
                    current_market_cap=valuation,
                    current_price=current_price,
                    last_updated=now,
                    **extras,
                )
            if candle_error is not None:
                raise candle_error
            raise EmptyPayloadError(f"no usable candles for {token.symbol}", self.name)

        supply = implied_supply(price, valuation)
        return MarketCapSeries(
            token=token,
            points=tuple(points),
            source=self.source,
            current_market_cap=valuation or current_price * supply,
            current_price=current_price,
            last_updated=now,
            **extras,
        )
