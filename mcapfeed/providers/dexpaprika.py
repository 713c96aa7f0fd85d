"""
DexPaprika adapter.

Completely free, no API key and no rate limits. Historical OHLCV up to
one year per pool. Docs: https://docs.dexpaprika.com
"""
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional, Tuple

from pydantic import ValidationError

from mcapfeed.config import DEXPAPRIKA_API_BASE
from mcapfeed.constants import DEXPAPRIKA_MAX_DAYS, DEXPAPRIKA_MAX_SAMPLES, DEXPAPRIKA_NETWORKS, DayRange
from mcapfeed.data.intervals import IntervalPlan
from mcapfeed.exceptions import EmptyPayloadError, MalformedPayloadError, ProviderError
from mcapfeed.models import MarketCapSeries, Source, Token, TokenInfo
from mcapfeed.providers.base import HistoricalProvider
from mcapfeed.providers.schemas import DPCandle, DPPool, DPPoolsResponse, DPToken
from mcapfeed.utils import first_positive, setup_logger

logger = setup_logger(__name__)


def best_pool(pools: List[DPPool]) -> Optional[DPPool]:
    """Pool with the highest volume, the most reliable price data. Ties keep the first."""
    best = None
    for pool in pools:
        if best is None or (pool.volume_usd or 0) > (best.volume_usd or 0):
            best = pool
    return best


def token_price(token: Optional[DPToken]) -> Optional[float]:
    if token is None:
        return None
    return first_positive(token.price_usd, token.summary.price_usd)


def token_valuation(token: Optional[DPToken]) -> Optional[float]:
    if token is None:
        return None
    return first_positive(token.fdv_usd, token.fdv, token.market_cap, token.summary.fdv)


class DexPaprikaProvider(HistoricalProvider):
    """Historical market caps from DexPaprika pool OHLCV."""

    source = Source.DEXPAPRIKA
    network_map = DEXPAPRIKA_NETWORKS
    max_days = DEXPAPRIKA_MAX_DAYS
    max_samples = DEXPAPRIKA_MAX_SAMPLES

    def __init__(self, client: Any, base_url: str = DEXPAPRIKA_API_BASE, **kwargs: Any):
        super().__init__(client, **kwargs)
        self.base_url = base_url.rstrip("/")

    def start_date(self, days: int) -> str:
        """First day of the window as YYYY-MM-DD (UTC)."""
        now = datetime.fromtimestamp(self.now() / 1000, tz=timezone.utc)
        return (now - timedelta(days=days)).strftime("%Y-%m-%d")

    async def _get_token(self, network: str, contract: str) -> DPToken:
        async def load() -> DPToken:
            payload = await self._request(f"{self.base_url}/networks/{network}/tokens/{contract}")
            if not payload:
                raise EmptyPayloadError(f"no token info for {contract}", self.name)
            return DPToken.model_validate(payload)

        return await self._cached((self.name, "token", network, contract.lower()), load)

    async def _get_pools(self, network: str, contract: str) -> List[DPPool]:
        async def load() -> List[DPPool]:
            payload = await self._request(f"{self.base_url}/networks/{network}/tokens/{contract}/pools")
            pools = DPPoolsResponse.parse(payload).pools
            if not pools:
                raise EmptyPayloadError(f"no pools for {contract}", self.name)
            return pools

        return await self._cached((self.name, "pools", network, contract.lower()), load)

    async def _get_ohlcv(
        self, network: str, pool: str, days: int, plan: IntervalPlan
    ) -> List[Tuple[Optional[int], Any]]:
        async def load() -> List[Tuple[Optional[int], Any]]:
            start = self.start_date(days)
            payload = await self._request(
                f"{self.base_url}/networks/{network}/pools/{pool}/ohlcv",
                {"start": start, "limit": plan.limit, "interval": plan.interval},
            )
            if not isinstance(payload, list):
                raise MalformedPayloadError(f"unexpected OHLCV shape for pool {pool}", self.name)

            candles = []
            for raw in payload:
                try:
                    candle = DPCandle.model_validate(raw)
                except ValidationError as e:
                    logger.debug(f"{self.name}: skipping candle for pool {pool}: {e}")
                    continue
                candles.append((candle.timestamp_ms, candle.close))
            if not candles:
                raise EmptyPayloadError(f"no OHLCV for pool {pool}", self.name)
            return candles

        return await self._cached(
            (self.name, "ohlcv", network, pool.lower(), days, plan.interval, plan.limit), load
        )

    async def _token_or_none(self, network: str, contract: str) -> Optional[DPToken]:
        try:
            return await self._get_token(network, contract)
        except (ProviderError, ValidationError) as e:
            logger.warning(f"{self.name}: token info unavailable for {contract}: {e}")
            return None

    async def get_token_info(self, platform: str, contract: str) -> Optional[TokenInfo]:
        token = await self._token_or_none(self.network_for(platform), contract)
        if token is None:
            return None
        return TokenInfo(
            id=token.id,
            name=token.name,
            symbol=token.symbol,
            price=token_price(token) or 0.0,
            market_cap=first_positive(token.market_cap, token_valuation(token)) or 0.0,
        )

    async def _fetch_series(self, token: Token, days: DayRange) -> Optional[MarketCapSeries]:
        network = self.network_for(token.platform)
        resolved, plan = self.plan(days)

        info = await self._token_or_none(network, token.contract)
        pools = await self._get_pools(network, token.contract)
        pool = best_pool(pools)
        if pool is None or not pool.id:
            raise EmptyPayloadError(f"no valid pool for {token.symbol}", self.name)

        contract = token.contract.lower()
        pool_token = next((t for t in pool.tokens if (t.id or "").lower() == contract), None)
        price = first_positive(pool.price_usd, token_price(info))
        valuation = first_positive(pool_token.fdv if pool_token else None, token_valuation(info))

        candle_error = None
        try:
            candles = await self._get_ohlcv(network, pool.id, resolved, plan)
        except ProviderError as e:
            logger.warning(f"{self.name}: no OHLCV for {token.symbol}: {e}")
            candles, candle_error = [], e

        return self._build_series(
            token,
            candles,
            price,
            valuation,
            candle_error,
            pool_address=pool.id,
            liquidity=pool.volume_usd,
        )
