"""Provider adapters, in fallback priority order."""
from typing import Any, List, Tuple, Type

from mcapfeed.providers.base import HistoricalProvider, MarketCapProvider
from mcapfeed.providers.dexpaprika import DexPaprikaProvider
from mcapfeed.providers.dexscreener import DexScreenerProvider
from mcapfeed.providers.geckoterminal import GeckoTerminalProvider

# Longest-range historical source first, unthrottled historical second, snapshot last
PROVIDER_ORDER: Tuple[Type[MarketCapProvider], ...] = (
    GeckoTerminalProvider,
    DexPaprikaProvider,
    DexScreenerProvider,
)


def create_providers(client: Any, **kwargs: Any) -> List[MarketCapProvider]:
    """Instantiate every adapter in priority order, sharing one HTTP client."""
    return [provider_class(client, **kwargs) for provider_class in PROVIDER_ORDER]


__all__ = [
    "PROVIDER_ORDER",
    "create_providers",
    "DexPaprikaProvider",
    "DexScreenerProvider",
    "GeckoTerminalProvider",
    "HistoricalProvider",
    "MarketCapProvider",
]
