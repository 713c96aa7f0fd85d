"""Canonical records exchanged between the adapters, the aggregator and callers."""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from mcapfeed.constants import DEFAULT_TOKENS
from mcapfeed.utils import now_ms


class Source(str, Enum):
    """Provider that satisfied a request."""

    GECKOTERMINAL = "geckoterminal"
    DEXPAPRIKA = "dexpaprika"
    DEXSCREENER = "dexscreener"
    NONE = "none"


class FailureKind(str, Enum):
    TRANSPORT = "transport"
    UPSTREAM_STATUS = "upstream_status"
    EMPTY_PAYLOAD = "empty_payload"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class Token:
    """Identity of a token as handed over by the view layer."""

    id: str
    symbol: str
    name: str
    color: str
    platform: str
    contract: Optional[str] = None
    enabled: bool = True
    is_custom: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Token":
        return cls(
            id=str(data["id"]),
            symbol=str(data["symbol"]),
            name=str(data.get("name") or data["symbol"]),
            color=str(data.get("color") or "#C9CBCF"),
            platform=str(data.get("platform") or "ethereum"),
            contract=data.get("contract") or None,
            enabled=bool(data.get("enabled", True)),
            is_custom=bool(data.get("isCustom", data.get("is_custom", False))),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "symbol": self.symbol,
            "name": self.name,
            "color": self.color,
            "platform": self.platform,
            "contract": self.contract,
            "enabled": self.enabled,
            "isCustom": self.is_custom,
        }

    def with_enabled(self, enabled: bool) -> "Token":
        return replace(self, enabled=enabled)


def default_tokens() -> Tuple[Token, ...]:
    """Build the built-in token list."""
    return tuple(
        Token(id=tid, symbol=sym, name=name, color=color, platform=platform, contract=contract)
        for tid, sym, name, color, platform, contract in DEFAULT_TOKENS
    )


@dataclass(frozen=True)
class MarketCapPoint:
    timestamp: int  # ms since epoch
    value: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.timestamp, "y": self.value}


@dataclass(frozen=True)
class MarketCapSeries:
    """
    A token merged with its market cap history.

    ``points`` is ascending by timestamp. Points sharing a timestamp are
    kept as delivered. Records are never mutated after being returned.
    """

    token: Token
    points: Tuple[MarketCapPoint, ...] = ()
    source: Source = Source.NONE
    current_market_cap: float = 0.0
    current_price: float = 0.0
    last_updated: int = field(default_factory=now_ms)
    error: bool = False
    # Provider extras
    pool_address: Optional[str] = None
    liquidity: Optional[float] = None
    price_change_24h: Optional[float] = None
    volume_24h: Optional[float] = None
    pair_address: Optional[str] = None
    dex_id: Optional[str] = None

    @classmethod
    def placeholder(cls, token: Token, last_updated: Optional[int] = None) -> "MarketCapSeries":
        """Record returned when no provider had data for ``token``."""
        if last_updated is None:
            last_updated = now_ms()
        return cls(token=token, source=Source.NONE, last_updated=last_updated, error=True)

    @property
    def symbol(self) -> str:
        return self.token.symbol

    @property
    def has_data(self) -> bool:
        return len(self.points) > 0

    def to_dict(self) -> Dict[str, Any]:
        """Flatten into the token-plus-series shape the view layer consumes."""
        out = self.token.to_dict()
        out.update({
            "data": [p.to_dict() for p in self.points],
            "currentMarketCap": self.current_market_cap,
            "currentPrice": self.current_price,
            "source": self.source.value,
            "lastUpdated": self.last_updated,
        })
        if self.error:
            out["error"] = True
        extras = {
            "poolAddress": self.pool_address,
            "liquidity": self.liquidity,
            "priceChange24h": self.price_change_24h,
            "volume24h": self.volume_24h,
            "pairAddress": self.pair_address,
            "dexId": self.dex_id,
        }
        out.update({k: v for k, v in extras.items() if v is not None})
        return out


@dataclass(frozen=True)
class TokenInfo:
    """Metadata returned by a contract lookup."""

    name: Optional[str]
    symbol: Optional[str]
    price: float = 0.0
    market_cap: float = 0.0
    id: Optional[str] = None


@dataclass(frozen=True)
class Progress:
    current: int
    total: int
    token_symbol: str


@dataclass(frozen=True)
class Found:
    series: MarketCapSeries


@dataclass(frozen=True)
class NoData:
    """A provider had nothing usable. ``reason`` is for logs only."""

    provider: Source
    kind: FailureKind
    reason: str = ""
    status: Optional[int] = None

    @property
    def transient(self) -> bool:
        if self.kind is FailureKind.TRANSPORT:
            return True
        return self.kind is FailureKind.UPSTREAM_STATUS and self.status is not None and (
            self.status == 429 or self.status >= 500
        )


ProviderResult = Union[Found, NoData]


def build_custom_token(
    platform: str,
    contract: str,
    info: Optional[TokenInfo] = None,
    name: Optional[str] = None,
    symbol: Optional[str] = None,
) -> Token:
    """
    Create a user-added token from a contract lookup or manual input.

    With lookup ``info`` the provider's name and symbol win over the
    manual ones. Without it both ``name`` and ``symbol`` are required.

    Raises:
        ValueError: empty contract, or no info and no manual name/symbol
    """
    from mcapfeed.colors import color_for

    contract = (contract or "").strip()
    if not contract:
        raise ValueError("Please enter a contract address")

    fallback_id = f"{platform}-{contract[:8]}"
    if info is not None:
        token_symbol = (info.symbol or symbol or "UNKNOWN").upper()
        token_name = info.name or name or "Unknown Token"
        token_id = info.id or fallback_id
    elif name and symbol:
        token_symbol = symbol.upper()
        token_name = name
        token_id = fallback_id
    else:
        raise ValueError("Token not found. Please enter name and symbol manually.")

    return Token(
        id=token_id,
        symbol=token_symbol,
        name=token_name,
        color=color_for(token_symbol),
        platform=platform,
        contract=contract,
        enabled=True,
        is_custom=True,
    )
