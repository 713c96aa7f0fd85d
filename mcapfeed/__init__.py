"""Unified market cap feed over GeckoTerminal, DexPaprika and DexScreener."""
from mcapfeed.aggregator import MarketCapAggregator, fetch_all_tokens
from mcapfeed.cache import TTLCache
from mcapfeed.http_client import JsonClient
from mcapfeed.models import (
    MarketCapPoint,
    MarketCapSeries,
    Progress,
    Source,
    Token,
    TokenInfo,
    build_custom_token,
    default_tokens,
)

__all__ = [
    "MarketCapAggregator",
    "fetch_all_tokens",
    "TTLCache",
    "JsonClient",
    "MarketCapPoint",
    "MarketCapSeries",
    "Progress",
    "Source",
    "Token",
    "TokenInfo",
    "build_custom_token",
    "default_tokens",
]
