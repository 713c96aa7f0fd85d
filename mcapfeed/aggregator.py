"""Aggregates the provider adapters into one market cap feed."""
from typing import Any, Callable, List, Optional, Sequence

from mcapfeed.cache import TTLCache
from mcapfeed.config import CACHE_TTL_SECONDS
from mcapfeed.constants import DayRange
from mcapfeed.http_client import JsonClient
from mcapfeed.models import Found, MarketCapSeries, Progress, Token, TokenInfo
from mcapfeed.providers import HistoricalProvider, MarketCapProvider, create_providers
from mcapfeed.utils import now_ms, setup_logger

logger = setup_logger(__name__)

ProgressCallback = Callable[[Progress], None]


class MarketCapAggregator:
    """
    Fetches market cap series through an ordered chain of providers.

    Providers are tried in priority order and the first one that yields
    at least one point wins outright. Results are never merged across
    providers. Merged results are cached per token and range.

    Args:
        providers: Adapters in priority order
        cache_ttl: Lifetime of cached results, in seconds
        clock: Callable returning the current time in ms
    """

    def __init__(
        self,
        providers: Sequence[MarketCapProvider],
        cache_ttl: float = CACHE_TTL_SECONDS,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.providers = list(providers)
        self.clock = clock or now_ms
        self.cache: TTLCache[MarketCapSeries] = TTLCache(cache_ttl, clock=self.clock)

    @classmethod
    def with_client(cls, client: Any, **kwargs: Any) -> "MarketCapAggregator":
        """Build an aggregator over every known provider sharing ``client``."""
        cache_ttl = kwargs.pop("cache_ttl", CACHE_TTL_SECONDS)
        clock = kwargs.get("clock")
        return cls(create_providers(client, cache_ttl=cache_ttl, **kwargs), cache_ttl=cache_ttl, clock=clock)

    @staticmethod
    def cache_key(token: Token, days: DayRange) -> tuple:
        return ("token", token.id, token.platform, (token.contract or "").lower(), str(days))

    async def fetch_market_cap(self, token: Token, days: DayRange = 30) -> MarketCapSeries:
        """
        Market cap series for ``token`` over ``days``.

        Never raises: when no provider has data the token comes back as an
        ``error=True`` placeholder with source "none".
        """
        key = self.cache_key(token, days)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"{token.symbol}: using cached result ({cached.source.value})")
            return cached

        for provider in self.providers:
            logger.info(f"Fetching {token.symbol} from {provider.name}...")
            try:
                result = await provider.fetch(token, days)
            except Exception as e:
                # Adapters already fold failures; this guards third-party providers
                logger.warning(f"{provider.name} failed for {token.symbol}: {e}", exc_info=True)
                continue

            if isinstance(result, Found) and result.series.points:
                series = result.series
                logger.info(f"✓ {token.symbol}: {len(series.points)} data points from {provider.name}")
                self.cache.set(key, series)
                return series

        logger.warning(f"✗ {token.symbol}: No data from any source")
        return MarketCapSeries.placeholder(token, last_updated=int(self.clock()))

    async def fetch_all(
        self,
        tokens: Sequence[Token],
        days: DayRange = 30,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[MarketCapSeries]:
        """
        Fetch every token, one after the other.

        Sequential so providers with a rate ceiling are not hammered and so
        ``on_progress`` is reported before each token in order. The output
        lines up one-to-one with ``tokens``.
        """
        results = []
        total = len(tokens)

        for idx, token in enumerate(tokens, start=1):
            if on_progress is not None:
                on_progress(Progress(current=idx, total=total, token_symbol=token.symbol))
            results.append(await self.fetch_market_cap(token, days))

        failed = [r.symbol for r in results if r.error]
        if failed:
            logger.warning(f"FAILED ({len(failed)} tokens): {', '.join(failed)}")
        logger.info(f"Loaded {total - len(failed)}/{total} token(s)")
        return results

    async def get_token_by_contract(self, platform: str, contract: str) -> Optional[TokenInfo]:
        """Token metadata from the first historical provider that knows the contract."""
        for provider in self.providers:
            if not isinstance(provider, HistoricalProvider):
                continue
            info = await provider.get_token_info(platform, contract)
            if info is not None:
                return info
        return None

    def clear_cache(self) -> None:
        """Drop the merged results and every provider cache. Safe to call repeatedly."""
        self.cache.clear()
        for provider in self.providers:
            provider.clear_cache()


async def fetch_all_tokens(
    tokens: Sequence[Token],
    days: DayRange = 30,
    on_progress: Optional[ProgressCallback] = None,
) -> List[MarketCapSeries]:
    """One-shot helper: open a client, fetch ``tokens`` and close the client."""
    async with JsonClient() as client:
        aggregator = MarketCapAggregator.with_client(client)
        return await aggregator.fetch_all(tokens, days, on_progress)
