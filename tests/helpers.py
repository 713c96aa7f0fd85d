"""Fakes and payload builders shared by the test modules."""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from mcapfeed.exceptions import UpstreamStatusError

GT_BASE = "https://gt.test"
DP_BASE = "https://dp.test"
DS_BASE = "https://ds.test"

# 2024-03-15T12:00:00Z
START_MS = int(datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc).timestamp() * 1000)
HOUR_MS = 60 * 60 * 1000


class FakeClient:
    """Stands in for JsonClient: canned payloads by URL, every call recorded."""

    def __init__(self, routes: Optional[Dict[str, Any]] = None):
        self.routes: Dict[str, Any] = dict(routes or {})
        self.calls: List[Tuple[str, Optional[Dict[str, Any]]]] = []

    async def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        self.calls.append((url, params))
        if url not in self.routes:
            raise UpstreamStatusError(f"{url}: HTTP 404", status=404)
        response = self.routes[url]
        if isinstance(response, Exception):
            raise response
        return response

    def count(self, url: str) -> int:
        return sum(1 for called, _ in self.calls if called == url)

    def params_for(self, url: str) -> Optional[Dict[str, Any]]:
        for called, params in self.calls:
            if called == url:
                return params
        return None


class Clock:
    """Manually advanced millisecond clock."""

    def __init__(self, now_ms: int = START_MS):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, seconds: float) -> None:
        self.now_ms += int(seconds * 1000)


# --- GeckoTerminal payloads ---


def gt_token_payload(price="0.5", market_cap="500000", fdv="800000", name="Alpha Beta", symbol="ABC"):
    return {
        "data": {
            "id": "eth_0xabc",
            "type": "token",
            "attributes": {
                "address": "0xabc",
                "name": name,
                "symbol": symbol,
                "price_usd": price,
                "fdv_usd": fdv,
                "market_cap_usd": market_cap,
            },
        }
    }


def gt_pool(address, reserve, base_price="0.5", quote_price="3000", base_id="eth_0xabc", quote_id="eth_0xweth"):
    return {
        "id": f"eth_{address}",
        "type": "pool",
        "attributes": {
            "address": address,
            "reserve_in_usd": reserve,
            "base_token_price_usd": base_price,
            "quote_token_price_usd": quote_price,
            "fdv_usd": "800000",
            "market_cap_usd": None,
            "volume_usd": {"h24": "12345.6"},
        },
        "relationships": {
            "base_token": {"data": {"id": base_id, "type": "token"}},
            "quote_token": {"data": {"id": quote_id, "type": "token"}},
        },
    }


def gt_ohlcv_payload(rows):
    return {"data": {"id": "x", "type": "ohlcv_request_response", "attributes": {"ohlcv_list": rows}}}


# --- DexPaprika payloads ---


def dp_token_payload(price=0.5, fdv=800000, market_cap=None):
    return {
        "id": "0xabc",
        "name": "Alpha Beta",
        "symbol": "ABC",
        "chain": "ethereum",
        "summary": {"price_usd": price, "fdv": fdv, "liquidity_usd": 100000},
        "market_cap": market_cap,
    }


def dp_pool(pool_id, volume, price=0.5, fdv=1_000_000, token_id="0xabc"):
    return {
        "id": pool_id,
        "dex_id": "uniswap_v3",
        "volume_usd": volume,
        "price_usd": price,
        "tokens": [
            {"id": token_id, "symbol": "ABC", "fdv": fdv},
            {"id": "0xweth", "symbol": "WETH", "fdv": 0},
        ],
    }


def dp_candle(ts_ms, close):
    iso = datetime.fromtimestamp(ts_ms / 1000, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    return {"time_open": iso, "time_close": iso, "open": close, "high": close, "low": close, "close": close, "volume": 10}


# --- DexScreener payloads ---


def ds_pair(chain, liquidity, market_cap=None, fdv=None, price="0.5", address="0xpair"):
    return {
        "chainId": chain,
        "dexId": "uniswap",
        "pairAddress": address,
        "priceUsd": price,
        "marketCap": market_cap,
        "fdv": fdv,
        "liquidity": {"usd": liquidity},
        "volume": {"h24": 5000},
        "priceChange": {"h24": -3.2},
    }
