"""
GeckoTerminal adapter.

Free API, 30 calls/min, roughly six months of OHLCV history per pool.
Docs: https://www.geckoterminal.com/dex-api
"""
import asyncio
import time
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from mcapfeed.config import GECKOTERMINAL_API_BASE, GECKOTERMINAL_MIN_INTERVAL
from mcapfeed.constants import (
    GECKOTERMINAL_MAX_DAYS,
    GECKOTERMINAL_MAX_SAMPLES,
    GECKOTERMINAL_NETWORKS,
    DayRange,
)
from mcapfeed.data.intervals import IntervalPlan
from mcapfeed.exceptions import EmptyPayloadError, MalformedPayloadError, ProviderError
from mcapfeed.models import MarketCapSeries, Source, Token, TokenInfo
from mcapfeed.providers.base import HistoricalProvider
from mcapfeed.providers.schemas import GTOhlcvResponse, GTPool, GTPoolsResponse, GTToken, GTTokenResponse
from mcapfeed.utils import first_positive, setup_logger, to_float

logger = setup_logger(__name__)

M = TypeVar("M", bound=BaseModel)

# Interval token -> (timeframe, aggregate)
TIMEFRAMES: Dict[str, Tuple[str, int]] = {
    "5m": ("minute", 5),
    "1h": ("hour", 1),
    "4h": ("hour", 4),
    "24h": ("day", 1),
}


def best_pool(pools: List[GTPool]) -> Optional[GTPool]:
    """Pool with the highest liquidity (reserve in USD). Ties keep the first."""
    best = None
    for pool in pools:
        if best is None or (pool.attributes.reserve_in_usd or 0) > (best.attributes.reserve_in_usd or 0):
            best = pool
    return best


def pool_address(pool: GTPool) -> Optional[str]:
    if pool.attributes.address:
        return pool.attributes.address
    # ids look like "<network>_<address>"
    if pool.id and "_" in pool.id:
        return pool.id.split("_", 1)[1]
    return None


def pool_token_price(pool: GTPool, network: str, contract: str) -> Optional[float]:
    """USD price of ``contract`` inside ``pool``, whichever side of the pair it is on."""
    token_id = f"{network}_{contract}".lower()
    attrs = pool.attributes
    if pool.relationships.quote_token.ref_id == token_id:
        return attrs.quote_token_price_usd
    return attrs.base_token_price_usd


class GeckoTerminalProvider(HistoricalProvider):
    """Historical market caps from GeckoTerminal pool OHLCV."""

    source = Source.GECKOTERMINAL
    network_map = GECKOTERMINAL_NETWORKS
    max_days = GECKOTERMINAL_MAX_DAYS
    max_samples = GECKOTERMINAL_MAX_SAMPLES

    def __init__(
        self,
        client: Any,
        base_url: str = GECKOTERMINAL_API_BASE,
        min_interval: float = GECKOTERMINAL_MIN_INTERVAL,
        **kwargs: Any,
    ):
        super().__init__(client, **kwargs)
        self.base_url = base_url.rstrip("/")
        self.min_interval = min_interval
        self._last_request: Optional[float] = None

    async def _request(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        # Space calls out to stay under the per-minute ceiling
        if self.min_interval > 0 and self._last_request is not None:
            wait = self.min_interval - (time.monotonic() - self._last_request)
            if wait > 0:
                await asyncio.sleep(wait)
        try:
            return await super()._request(url, params)
        finally:
            self._last_request = time.monotonic()

    def _parse(self, model: Type[M], payload: Any, what: str) -> M:
        """Validate ``payload`` as ``model``; schema mismatches become MalformedPayloadError."""
        try:
            return model.model_validate(payload or {})
        except ValidationError as e:
            raise MalformedPayloadError(f"unexpected {what} shape: {e}", self.name) from e

    async def _get_token(self, network: str, contract: str) -> GTToken:
        async def load() -> GTToken:
            payload = await self._request(f"{self.base_url}/networks/{network}/tokens/{contract}")
            parsed = self._parse(GTTokenResponse, payload, f"token {contract}")
            if parsed.data is None:
                raise EmptyPayloadError(f"no token info for {contract}", self.name)
            return parsed.data

        return await self._cached((self.name, "token", network, contract.lower()), load)

    async def _get_pools(self, network: str, contract: str) -> List[GTPool]:
        async def load() -> List[GTPool]:
            payload = await self._request(f"{self.base_url}/networks/{network}/tokens/{contract}/pools")
            pools = self._parse(GTPoolsResponse, payload, f"pools for {contract}").data
            if not pools:
                raise EmptyPayloadError(f"no pools for {contract}", self.name)
            return pools

        return await self._cached((self.name, "pools", network, contract.lower()), load)

    async def _get_ohlcv(
        self, network: str, pool: str, days: int, plan: IntervalPlan
    ) -> List[Tuple[float, Any]]:
        timeframe, aggregate = TIMEFRAMES[plan.interval]

        async def load() -> List[Tuple[float, Any]]:
            payload = await self._request(
                f"{self.base_url}/networks/{network}/pools/{pool}/ohlcv/{timeframe}",
                {"aggregate": aggregate, "limit": plan.limit, "currency": "usd"},
            )
            parsed = self._parse(GTOhlcvResponse, payload, f"OHLCV for pool {pool}")
            rows = parsed.data.attributes.ohlcv_list if parsed.data else []
            # [timestamp_seconds, open, high, low, close, volume]
            candles = [
                (to_float(row[0], default=float("nan")) * 1000, row[4])
                for row in rows
                if isinstance(row, (list, tuple)) and len(row) >= 5
            ]
            if not candles:
                raise EmptyPayloadError(f"no OHLCV for pool {pool}", self.name)
            return candles

        return await self._cached(
            (self.name, "ohlcv", network, pool.lower(), days, plan.interval, plan.limit), load
        )

    async def get_token_info(self, platform: str, contract: str) -> Optional[TokenInfo]:
        network = self.network_for(platform)
        try:
            token = await self._get_token(network, contract)
        except ProviderError as e:
            logger.warning(f"{self.name}: token info unavailable for {contract}: {e}")
            return None

        attrs = token.attributes
        return TokenInfo(
            id=token.id,
            name=attrs.name,
            symbol=attrs.symbol,
            price=attrs.price_usd or 0.0,
            market_cap=first_positive(attrs.market_cap_usd, attrs.fdv_usd) or 0.0,
        )

    async def _fetch_series(self, token: Token, days: DayRange) -> Optional[MarketCapSeries]:
        network = self.network_for(token.platform)
        resolved, plan = self.plan(days)

        info = await self.get_token_info(token.platform, token.contract)
        pools = await self._get_pools(network, token.contract)
        pool = best_pool(pools)
        address = pool_address(pool) if pool else None
        if not address:
            raise EmptyPayloadError(f"no valid pool for {token.symbol}", self.name)

        attrs = pool.attributes
        price = first_positive(
            pool_token_price(pool, network, token.contract), info.price if info else None
        )
        valuation = first_positive(
            info.market_cap if info else None, attrs.market_cap_usd, attrs.fdv_usd
        )

        candle_error = None
        try:
            candles = await self._get_ohlcv(network, address, resolved, plan)
        except ProviderError as e:
            logger.warning(f"{self.name}: no OHLCV for {token.symbol}: {e}")
            candles, candle_error = [], e

        logger.debug(
            f"{self.name}: {token.symbol} pool={address} interval={plan.interval} "
            f"limit={plan.limit} candles={len(candles)}"
        )
        return self._build_series(
            token,
            candles,
            price,
            valuation,
            candle_error,
            pool_address=address,
            liquidity=attrs.reserve_in_usd,
            volume_24h=attrs.volume_usd.h24,
        )
