"""
DexScreener adapter.

Free, broad DEX coverage, but only current values: the free API has
no history, so this adapter returns a single point for "now".
Docs: https://docs.dexscreener.com/api/reference
"""
from typing import Any, List, Optional

from mcapfeed.config import DEXSCREENER_API_BASE
from mcapfeed.constants import DEXSCREENER_CHAINS, DayRange
from mcapfeed.exceptions import EmptyPayloadError
from mcapfeed.models import MarketCapPoint, MarketCapSeries, Source, Token
from mcapfeed.providers.base import MarketCapProvider
from mcapfeed.providers.schemas import DSPair, DSTokenResponse
from mcapfeed.utils import round_half_up, setup_logger

logger = setup_logger(__name__)


def best_pair(pairs: List[DSPair], chain: str) -> Optional[DSPair]:
    """
    Most liquid pair on ``chain``.

    If no pair is on that chain, the first pair overall is used.
    """
    if not pairs:
        return None
    chain_pairs = [p for p in pairs if p.chain_id == chain]
    if not chain_pairs:
        return pairs[0]
    return sorted(chain_pairs, key=lambda p: p.liquidity.usd or 0, reverse=True)[0]


class DexScreenerProvider(MarketCapProvider):
    """Current market cap snapshot from DexScreener."""

    source = Source.DEXSCREENER
    network_map = DEXSCREENER_CHAINS

    def __init__(self, client: Any, base_url: str = DEXSCREENER_API_BASE, **kwargs: Any):
        super().__init__(client, **kwargs)
        self.base_url = base_url.rstrip("/")

    async def get_pairs(self, contract: str) -> List[DSPair]:
        async def load() -> List[DSPair]:
            payload = await self._request(f"{self.base_url}/dex/tokens/{contract}")
            pairs = DSTokenResponse.model_validate(payload or {}).pairs
            if not pairs:
                raise EmptyPayloadError(f"no pairs for {contract}", self.name)
            return pairs

        return await self._cached((self.name, "pairs", contract.lower()), load)

    async def _fetch_series(self, token: Token, days: DayRange) -> Optional[MarketCapSeries]:
        # ``days`` is ignored: there is no history to select from
        pairs = await self.get_pairs(token.contract)
        pair = best_pair(pairs, self.network_for(token.platform))
        if pair is None:
            raise EmptyPayloadError(f"no pair for {token.symbol}", self.name)
        logger.debug(f"{self.name}: {token.symbol} using pair {pair.pair_address} on {pair.chain_id}")

        market_cap = pair.market_cap or pair.fdv or 0.0
        price = pair.price_usd or 0.0
        if market_cap == 0 and price == 0:
            raise EmptyPayloadError(f"no market cap or price for {token.symbol}", self.name)

        now = self.now()
        points = ()
        if round_half_up(market_cap) > 0:
            points = (MarketCapPoint(timestamp=now, value=float(round_half_up(market_cap))),)

        return MarketCapSeries(
            token=token,
            points=points,
            source=self.source,
            current_market_cap=market_cap,
            current_price=price,
            last_updated=now,
            price_change_24h=pair.price_change.h24,
            liquidity=pair.liquidity.usd,
            volume_24h=pair.volume.h24,
            pair_address=pair.pair_address,
            dex_id=pair.dex_id,
        )
