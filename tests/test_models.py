import pytest

from mcapfeed.colors import PALETTE, color_for
from mcapfeed.models import (
    FailureKind,
    MarketCapPoint,
    MarketCapSeries,
    NoData,
    Source,
    Token,
    TokenInfo,
    build_custom_token,
    default_tokens,
)


def test_token_from_dict_accepts_view_layer_keys():
    token = Token.from_dict({"id": "x", "symbol": "X", "platform": "base", "contract": "0x1", "isCustom": True})

    assert token.name == "X"
    assert token.is_custom is True
    assert token.enabled is True
    assert Token.from_dict(token.to_dict()) == token


def test_default_tokens_have_contracts():
    tokens = default_tokens()
    assert [t.symbol for t in tokens] == ["PEPE", "BRETT", "DEGEN", "BONK", "WIF"]
    assert all(t.contract for t in tokens)


def test_series_to_dict_merges_token_and_extras():
    token = default_tokens()[0]
    series = MarketCapSeries(
        token=token,
        points=(MarketCapPoint(1000, 5.0),),
        source=Source.DEXSCREENER,
        current_market_cap=5.0,
        current_price=0.1,
        last_updated=1000,
        liquidity=42.0,
    )

    out = series.to_dict()

    assert out["id"] == token.id
    assert out["data"] == [{"x": 1000, "y": 5.0}]
    assert out["source"] == "dexscreener"
    assert out["liquidity"] == 42.0
    assert "error" not in out
    assert "pairAddress" not in out


def test_placeholder_keeps_identity():
    token = default_tokens()[1]
    out = MarketCapSeries.placeholder(token).to_dict()

    assert out["error"] is True
    assert out["source"] == "none"
    assert out["data"] == []
    assert out["contract"] == token.contract


@pytest.mark.parametrize(
    "kind, status, transient",
    [
        (FailureKind.TRANSPORT, None, True),
        (FailureKind.UPSTREAM_STATUS, 429, True),
        (FailureKind.UPSTREAM_STATUS, 502, True),
        (FailureKind.UPSTREAM_STATUS, 404, False),
        (FailureKind.EMPTY_PAYLOAD, None, False),
        (FailureKind.MALFORMED, None, False),
    ],
)
def test_no_data_transient(kind, status, transient):
    assert NoData(Source.GECKOTERMINAL, kind, status=status).transient is transient


def test_build_custom_token_from_lookup():
    info = TokenInfo(name="Alpha", symbol="abc", id="eth_0xabc")
    token = build_custom_token("ethereum", " 0xabcdef0123 ", info=info)

    assert token.id == "eth_0xabc"
    assert token.symbol == "ABC"
    assert token.contract == "0xabcdef0123"
    assert token.is_custom is True
    assert token.color == color_for("ABC")


def test_build_custom_token_manual():
    token = build_custom_token("base", "0xabcdef0123", name="Manual", symbol="man")

    assert token.id == "base-0xabcdef"
    assert token.symbol == "MAN"
    assert token.name == "Manual"


@pytest.mark.parametrize(
    "contract, kwargs",
    [("", {"name": "A", "symbol": "A"}), ("0x1", {}), ("0x1", {"name": "A"})],
)
def test_build_custom_token_rejects_incomplete_input(contract, kwargs):
    with pytest.raises(ValueError):
        build_custom_token("base", contract, **kwargs)


def test_color_for_is_stable_and_case_insensitive():
    assert color_for("pepe") == color_for("PEPE")
    assert color_for("PEPE") in PALETTE
