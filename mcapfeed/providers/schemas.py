"""
Raw response shapes of the upstream providers.

These models exist only inside their adapter. Numeric fields are
parsed leniently: a value that is missing, non-numeric or non-finite
becomes ``None`` instead of failing the whole payload. Explicit JSON
nulls fall back to the field default.
"""
from datetime import datetime, timezone
from typing import Annotated, Any, List, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from mcapfeed.utils import to_float


def _loose_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    number = to_float(value, default=float("nan"))
    return None if number != number else number


LooseFloat = Annotated[Optional[float], BeforeValidator(_loose_float)]


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


# --- GeckoTerminal ---


class GTTokenAttributes(_Lenient):
    address: Optional[str] = None
    name: Optional[str] = None
    symbol: Optional[str] = None
    price_usd: LooseFloat = None
    fdv_usd: LooseFloat = None
    market_cap_usd: LooseFloat = None


class GTToken(_Lenient):
    id: Optional[str] = None
    attributes: GTTokenAttributes = Field(default_factory=GTTokenAttributes)


class GTTokenResponse(_Lenient):
    data: Optional[GTToken] = None


class GTVolume(_Lenient):
    h24: LooseFloat = None


class GTPoolAttributes(_Lenient):
    address: Optional[str] = None
    name: Optional[str] = None
    reserve_in_usd: LooseFloat = None
    base_token_price_usd: LooseFloat = None
    quote_token_price_usd: LooseFloat = None
    fdv_usd: LooseFloat = None
    market_cap_usd: LooseFloat = None
    volume_usd: GTVolume = Field(default_factory=GTVolume)


class GTRef(_Lenient):
    id: Optional[str] = None


class GTRelation(_Lenient):
    data: Optional[GTRef] = None

    @property
    def ref_id(self) -> str:
        return (self.data.id if self.data and self.data.id else "").lower()


class GTPoolRelationships(_Lenient):
    base_token: GTRelation = Field(default_factory=GTRelation)
    quote_token: GTRelation = Field(default_factory=GTRelation)


class GTPool(_Lenient):
    id: Optional[str] = None
    attributes: GTPoolAttributes = Field(default_factory=GTPoolAttributes)
    relationships: GTPoolRelationships = Field(default_factory=GTPoolRelationships)


class GTPoolsResponse(_Lenient):
    data: List[GTPool] = Field(default_factory=list)


class GTOhlcvAttributes(_Lenient):
    ohlcv_list: List[Any] = Field(default_factory=list)  # rows checked one by one by the adapter


class GTOhlcvData(_Lenient):
    attributes: GTOhlcvAttributes = Field(default_factory=GTOhlcvAttributes)


class GTOhlcvResponse(_Lenient):
    data: Optional[GTOhlcvData] = None


# --- DexPaprika ---


class DPSummary(_Lenient):
    price_usd: LooseFloat = None
    fdv: LooseFloat = None
    liquidity_usd: LooseFloat = None


class DPToken(_Lenient):
    id: Optional[str] = None
    name: Optional[str] = None
    symbol: Optional[str] = None
    price_usd: LooseFloat = None
    fdv_usd: LooseFloat = None
    fdv: LooseFloat = None
    market_cap: LooseFloat = None
    summary: DPSummary = Field(default_factory=DPSummary)


class DPPoolToken(_Lenient):
    id: Optional[str] = None
    symbol: Optional[str] = None
    fdv: LooseFloat = None


class DPPool(_Lenient):
    id: Optional[str] = None
    dex_id: Optional[str] = None
    volume_usd: LooseFloat = None
    price_usd: LooseFloat = None
    tokens: List[DPPoolToken] = Field(default_factory=list)


class DPPoolsResponse(_Lenient):
    pools: List[DPPool] = Field(default_factory=list)

    @classmethod
    def parse(cls, payload: Union[dict, list, None]) -> "DPPoolsResponse":
        """DexPaprika answers either ``{"pools": [...]}`` or a bare list."""
        if isinstance(payload, list):
            return cls.model_validate({"pools": payload})
        return cls.model_validate(payload or {})


class DPCandle(_Lenient):
    time_open: Optional[datetime] = None
    time_close: Optional[datetime] = None
    open: LooseFloat = None
    high: LooseFloat = None
    low: LooseFloat = None
    close: LooseFloat = None
    volume: LooseFloat = None

    @property
    def timestamp_ms(self) -> Optional[int]:
        moment = self.time_close or self.time_open
        if moment is None:
            return None
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return int(moment.timestamp() * 1000)


# --- DexScreener ---


class DSLiquidity(_Lenient):
    usd: LooseFloat = None


class DSWindow(_Lenient):
    h24: LooseFloat = None


class DSPair(_Lenient):
    chain_id: Optional[str] = Field(default=None, alias="chainId")
    dex_id: Optional[str] = Field(default=None, alias="dexId")
    pair_address: Optional[str] = Field(default=None, alias="pairAddress")
    price_usd: LooseFloat = Field(default=None, alias="priceUsd")
    market_cap: LooseFloat = Field(default=None, alias="marketCap")
    fdv: LooseFloat = None
    liquidity: DSLiquidity = Field(default_factory=DSLiquidity)
    volume: DSWindow = Field(default_factory=DSWindow)
    price_change: DSWindow = Field(default_factory=DSWindow, alias="priceChange")


class DSTokenResponse(_Lenient):
    pairs: List[DSPair] = Field(default_factory=list)
